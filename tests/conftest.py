"""Shared test fixtures for the DuckDB chat relay."""

import sys
from pathlib import Path

import duckdb
import pytest

# Ensure src/backend/ is on the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src" / "backend"))

from config.settings import Settings
from entities.relay.clients import RelayClients
from entities.relay.states import PipelineState
from entities.shared.sql_client import DuckDBClient
from models import AgentRequestPayload, ConversationMessage, QueryResult

TEST_SYSTEM_PROMPT = "Respond with a single DuckDB SQL statement."

# ---------------------------------------------------------------------------
# Protocol fakes
# ---------------------------------------------------------------------------


class FakeSqlExecutor:
    """In-memory fake satisfying the ``SqlExecutor`` protocol.

    Returns the canned result registered for a query, or ``default`` for
    anything else, and records every call.
    """

    def __init__(
        self,
        results: dict[str, QueryResult] | None = None,
        default: QueryResult | None = None,
    ) -> None:
        self.results: dict[str, QueryResult] = results or {}
        self.default = default or QueryResult.failure(
            'Parser Error: syntax error at or near "FRM"'
        )
        self.calls: list[str] = []

    async def execute_query(self, query: str) -> QueryResult:
        """Return the canned result for ``query``."""
        self.calls.append(query)
        return self.results.get(query, self.default)


class FakeCompletion:
    """In-memory fake satisfying the ``CompletionService`` protocol.

    Returns canned text (or raises ``error``) and records every
    conversation it was sent.
    """

    def __init__(self, text: str = "", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[tuple[list[ConversationMessage], str]] = []

    async def complete(self, conversation: list[ConversationMessage], token: str) -> str:
        """Record the call and return the canned text."""
        self.calls.append((conversation, token))
        if self.error:
            raise self.error
        return self.text


class FakeIdentity:
    """In-memory fake satisfying the ``IdentityService`` protocol."""

    def __init__(self, login: str = "octocat", error: Exception | None = None) -> None:
        self.login = login
        self.error = error
        self.calls: list[str] = []

    async def get_login(self, token: str) -> str:
        """Record the call and return the canned login."""
        self.calls.append(token)
        if self.error:
            raise self.error
        return self.login


class FakeVerifier:
    """In-memory fake satisfying the ``RequestVerifier`` protocol."""

    def __init__(self, valid: bool = True) -> None:
        self.valid = valid
        self.calls: list[tuple[bytes, str, str]] = []

    async def verify(self, body: bytes, signature: str, key_id: str, token: str | None = None) -> bool:
        """Record the call and return the canned verdict."""
        self.calls.append((body, signature, key_id))
        return self.valid


class SpyReporter:
    """Spy satisfying the ``ProgressReporter`` protocol.

    Captures every state transition for assertions.
    """

    def __init__(self) -> None:
        self.states: list[PipelineState] = []

    def transition(self, state: PipelineState) -> None:
        """Record a transition."""
        self.states.append(state)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_payload(*contents: str) -> AgentRequestPayload:
    """Build a payload alternating user/assistant messages, ending with a user message."""
    messages = []
    for i, content in enumerate(reversed(contents)):
        role = "user" if i % 2 == 0 else "assistant"
        messages.insert(0, ConversationMessage(role=role, content=content))
    return AgentRequestPayload(messages=messages)


def make_clients(
    *,
    sql_executor=None,
    completion: FakeCompletion | None = None,
    identity: FakeIdentity | None = None,
    reporter: SpyReporter | None = None,
    result_format: str = "table",
) -> RelayClients:
    """Build a ``RelayClients`` with fakes for all I/O."""
    return RelayClients(
        sql_executor=sql_executor or FakeSqlExecutor(),
        completion=completion or FakeCompletion(),
        identity=identity or FakeIdentity(),
        system_prompt=TEST_SYSTEM_PROMPT,
        result_format=result_format,
        reporter=reporter or SpyReporter(),
    )


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    """Return a ``Settings`` instance populated with safe test defaults."""
    return Settings(
        llm_api_url="https://llm.test/chat/completions",
        llm_model="test-model",
        github_api_url="https://github.test",
        public_keys_url="https://github.test/meta/public_keys/copilot_api",
        database_path=":memory:",
    )


@pytest.fixture
def duckdb_client():
    """Return an isolated in-memory ``DuckDBClient`` seeded with a cities table."""
    conn = duckdb.connect(":memory:")
    conn.execute("CREATE TABLE cities (name VARCHAR, population INTEGER)")
    conn.execute("INSERT INTO cities VALUES ('Amsterdam', 921402), ('Berlin', 3850809)")
    client = DuckDBClient(conn)
    yield client
    client.close()


@pytest.fixture
def fake_sql_executor() -> FakeSqlExecutor:
    """Return a ``FakeSqlExecutor`` whose every query fails."""
    return FakeSqlExecutor()


@pytest.fixture
def spy_reporter() -> SpyReporter:
    """Return a fresh ``SpyReporter`` instance."""
    return SpyReporter()
