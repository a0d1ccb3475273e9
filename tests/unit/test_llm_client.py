"""Unit tests for the streaming completion client.

SSE decoding is exercised with in-memory line iterators; the HTTP client
is exercised through ``httpx.MockTransport`` so no network is touched.
"""

import json
from collections.abc import AsyncIterator

import httpx
import pytest
from entities.shared.llm_client import (
    CompletionClient,
    CompletionError,
    accumulate_content,
    iter_sse_payloads,
)
from models import ConversationMessage

_URL = "https://llm.test/chat/completions"


# ── Helpers ──────────────────────────────────────────────────────────────


async def _lines(*lines: str) -> AsyncIterator[str]:
    for line in lines:
        yield line


def _frame(content: str | None) -> str:
    return "data: " + json.dumps({"choices": [{"index": 0, "delta": {"content": content}}]})


def _sse_body(*contents: str) -> bytes:
    frames = [_frame(c) for c in contents] + ["data: [DONE]"]
    return ("\n\n".join(frames) + "\n\n").encode("utf-8")


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


_CONVERSATION = [
    ConversationMessage(role="system", content="Answer with SQL."),
    ConversationMessage(role="user", content="show all entries from cities"),
]


# ── iter_sse_payloads / accumulate_content ───────────────────────────────


class TestSseDecoding:
    """Test frame parsing and content accumulation."""

    async def test_concatenates_deltas(self) -> None:
        lines = _lines(_frame("SEL"), "", _frame("ECT 1"), "", "data: [DONE]")
        assert await accumulate_content(iter_sse_payloads(lines)) == "SELECT 1"

    async def test_stops_at_done(self) -> None:
        lines = _lines(_frame("a"), "data: [DONE]", _frame("b"))
        assert await accumulate_content(iter_sse_payloads(lines)) == "a"

    async def test_skips_malformed_frame(self) -> None:
        lines = _lines(_frame("SELECT "), "data: {not json", _frame("1"), "data: [DONE]")
        assert await accumulate_content(iter_sse_payloads(lines)) == "SELECT 1"

    async def test_skips_non_object_frame(self) -> None:
        lines = _lines("data: [1, 2]", _frame("ok"))
        payloads = [p async for p in iter_sse_payloads(lines)]
        assert len(payloads) == 1

    async def test_ignores_comments_and_other_fields(self) -> None:
        lines = _lines(": keep-alive", "event: message", "id: 7", _frame("x"))
        assert await accumulate_content(iter_sse_payloads(lines)) == "x"

    async def test_null_and_missing_content(self) -> None:
        lines = _lines(_frame(None), 'data: {"choices": []}', 'data: {"other": 1}', _frame("y"))
        assert await accumulate_content(iter_sse_payloads(lines)) == "y"

    async def test_result_is_stripped(self) -> None:
        lines = _lines(_frame("\n  SELECT 1;  "), _frame("\n"))
        assert await accumulate_content(iter_sse_payloads(lines)) == "SELECT 1;"

    async def test_exhausted_without_done(self) -> None:
        assert await accumulate_content(iter_sse_payloads(_lines(_frame("z")))) == "z"


# ── CompletionClient ─────────────────────────────────────────────────────


class TestCompletionClient:
    """Test the HTTP request and error mapping."""

    async def test_request_shape(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, content=_sse_body("SELECT * ", "FROM cities;"))

        async with _client(handler) as http:
            text = await CompletionClient(http, _URL, "test-model").complete(_CONVERSATION, "tok")

        assert text == "SELECT * FROM cities;"
        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == _URL
        assert request.headers["Authorization"] == "Bearer tok"
        body = json.loads(request.content)
        assert body["model"] == "test-model"
        assert body["stream"] is True
        assert body["messages"][0] == {"role": "system", "content": "Answer with SQL."}
        assert body["messages"][1]["role"] == "user"

    async def test_error_status_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, content=b"unauthorized")

        async with _client(handler) as http:
            with pytest.raises(CompletionError, match="401"):
                await CompletionClient(http, _URL, "m").complete(_CONVERSATION, "tok")

    async def test_transport_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as http:
            with pytest.raises(CompletionError):
                await CompletionClient(http, _URL, "m").complete(_CONVERSATION, "tok")

    async def test_empty_stream(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"data: [DONE]\n\n")

        async with _client(handler) as http:
            assert await CompletionClient(http, _URL, "m").complete(_CONVERSATION, "tok") == ""
