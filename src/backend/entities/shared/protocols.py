"""Protocol interfaces for I/O boundaries.

These protocols enable dependency injection for testability.
Production implementations wrap DuckDB, httpx and the GitHub APIs; test
fakes return canned data with zero network or filesystem access.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from entities.relay.states import PipelineState
    from models import ConversationMessage, QueryResult

logger = logging.getLogger(__name__)


@runtime_checkable
class SqlExecutor(Protocol):
    """Executes SQL against the long-lived database handle.

    Never raises for engine errors; failures come back as a
    ``QueryResult`` with ``success=False``.
    """

    async def execute_query(self, query: str) -> QueryResult:
        """Execute a SQL statement.

        Args:
            query: SQL statement to run.

        Returns:
            Rows and columns on success, the error message otherwise.
        """
        ...


@runtime_checkable
class CompletionService(Protocol):
    """Sends a conversation to the LLM and returns the accumulated answer."""

    async def complete(self, conversation: list[ConversationMessage], token: str) -> str:
        """Run one chat completion.

        Args:
            conversation: Messages to send, system instruction first.
            token: The requesting user's platform token.

        Returns:
            The full response text, stripped.
        """
        ...


@runtime_checkable
class IdentityService(Protocol):
    """Resolves a platform token to the user's login name."""

    async def get_login(self, token: str) -> str:
        """Return the login for ``token``."""
        ...


@runtime_checkable
class RequestVerifier(Protocol):
    """Checks an inbound request signature."""

    async def verify(
        self,
        body: bytes,
        signature: str,
        key_id: str,
        token: str | None = None,
    ) -> bool:
        """Verify ``body`` against ``signature`` signed by key ``key_id``.

        Returns:
            True if the request came from the platform.
        """
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """Observes pipeline state transitions."""

    def transition(self, state: PipelineState) -> None:
        """Signal that the pipeline entered ``state``.

        Args:
            state: The state just entered.
        """
        ...


# ---------------------------------------------------------------------------
# Concrete implementations
# ---------------------------------------------------------------------------


class NoOpReporter:
    """ProgressReporter that silently discards all transitions."""

    def transition(self, state: PipelineState) -> None:
        """No-op."""


class LoggingReporter:
    """ProgressReporter that writes each transition to the debug log.

    Args:
        request_id: Correlation ID included in every log line.
    """

    def __init__(self, request_id: str) -> None:
        self._request_id = request_id

    def transition(self, state: PipelineState) -> None:
        """Log the new state."""
        logger.debug("Pipeline [%s] -> %s", self._request_id, state.value)
