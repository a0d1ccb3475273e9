"""
Streaming chat-completion client.

The completion service answers with server-sent events, one JSON delta
per ``data:`` frame, terminated by ``data: [DONE]``. Frames are decoded
lazily; a corrupt frame is logged and skipped without aborting the stream.
"""

import json
import logging
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

import httpx
from models import ConversationMessage

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


class CompletionError(RuntimeError):
    """The completion service could not be reached or rejected the request."""


async def iter_sse_payloads(lines: AsyncIterable[str]) -> AsyncIterator[dict[str, Any]]:
    """
    Decode SSE lines into JSON payloads.

    Blank lines, comments and non-``data`` fields are ignored. Iteration
    stops at the ``[DONE]`` sentinel or when ``lines`` is exhausted.

    Args:
        lines: Text lines of the event stream, without line terminators.

    Yields:
        Each well-formed JSON object, in arrival order.
    """
    async for line in lines:
        if not line or not line.startswith("data:"):
            continue
        data = line[5:].strip()
        if data == DONE_SENTINEL:
            return
        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            logger.warning("Skipping malformed completion frame: %s", data[:200])
            continue
        if not isinstance(payload, dict):
            logger.warning("Skipping non-object completion frame: %s", data[:200])
            continue
        yield payload


def _delta_content(payload: dict[str, Any]) -> str:
    choices = payload.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return ""
    delta = choices[0].get("delta") or {}
    content = delta.get("content") if isinstance(delta, dict) else None
    return content if isinstance(content, str) else ""


async def accumulate_content(payloads: AsyncIterable[dict[str, Any]]) -> str:
    """
    Concatenate the ``choices[0].delta.content`` fields of a stream.

    Args:
        payloads: Decoded completion frames.

    Returns:
        The joined content, stripped of surrounding whitespace.
    """
    parts = [content async for content in _contents(payloads)]
    return "".join(parts).strip()


async def _contents(payloads: AsyncIterable[dict[str, Any]]) -> AsyncIterator[str]:
    async for payload in payloads:
        content = _delta_content(payload)
        if content:
            yield content


class CompletionClient:
    """
    ``CompletionService`` backed by an OpenAI-compatible streaming endpoint.

    Args:
        http_client: Shared ``httpx.AsyncClient`` (owned by the app lifespan).
        url: Chat-completions endpoint.
        model: Model name sent with every request.
    """

    def __init__(self, http_client: httpx.AsyncClient, url: str, model: str) -> None:
        self._http = http_client
        self._url = url
        self._model = model

    async def complete(self, conversation: list[ConversationMessage], token: str) -> str:
        """
        Stream one completion and return the accumulated text.

        Args:
            conversation: Messages to send, system instruction first.
            token: The requesting user's platform token.

        Returns:
            The full response text, stripped.

        Raises:
            CompletionError: On transport failure or a non-2xx status.
        """
        body = {
            "model": self._model,
            "messages": [m.model_dump(include={"role", "content"}) for m in conversation],
            "stream": True,
        }
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        logger.info("Requesting completion (%d messages, model=%s)", len(conversation), self._model)
        try:
            async with self._http.stream("POST", self._url, headers=headers, json=body) as resp:
                resp.raise_for_status()
                text = await accumulate_content(iter_sse_payloads(resp.aiter_lines()))
        except httpx.HTTPStatusError as e:
            raise CompletionError(
                f"Completion request failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise CompletionError(f"Completion request failed: {e}") from e

        logger.info("Completion received (%d chars)", len(text))
        return text
