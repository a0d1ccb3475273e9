"""Relay pipeline: single async-generator entry point for one agent request.

``process_message()`` classifies the latest user message, executes it as
SQL or delegates it to the LLM, renders the outcome and yields the event
stream. The execute/rewrite/give-up fallback chain is an explicit state
machine over ``PipelineState`` with a fixed execution budget.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from entities.relay.clients import RelayClients
from entities.relay.states import PipelineState
from entities.shared.classifier import extract_sql_candidate, looks_like_sql
from entities.shared.error_recovery import describe_execution_error
from entities.shared.renderer import render
from models import AgentError, AgentRequestPayload, ConversationMessage, QueryResult, StreamEvent

logger = logging.getLogger(__name__)

# Direct execution plus one LLM rewrite
MAX_EXECUTION_ATTEMPTS = 2

_EMPTY_ANSWER = "Sorry, I could not produce an answer for that request."


@dataclass
class _Turn:
    """Mutable working state for one request."""

    candidate: str
    is_sql: bool = False
    attempts: int = 0
    result: QueryResult | None = None
    direct_error: str | None = None
    generated_error: str | None = None
    llm_text: str | None = None
    chunks: list[str] = field(default_factory=list)


def _greeting(login: str) -> str:
    return f"Hi {login}! " if login else "Hi! "


def build_conversation(
    messages: list[ConversationMessage],
    system_prompt: str,
    failed_error: str | None = None,
) -> list[ConversationMessage]:
    """Return a copy of ``messages`` with one system instruction prepended.

    Args:
        messages: The caller's conversation history (left untouched).
        system_prompt: SQL-biasing instruction.
        failed_error: Engine error from a failed direct execution, if any.

    Returns:
        A new list owned by the pipeline.
    """
    instruction = system_prompt
    if failed_error:
        instruction = (
            f"{system_prompt}\n\nThe user's last message was run as SQL and failed with:\n"
            f"{failed_error}\nReturn a corrected statement."
        )
    return [
        ConversationMessage(role="system", content=instruction),
        *(m.model_copy() for m in messages),
    ]


def compose_table_response(login: str, query: str, result: QueryResult, fmt: str) -> list[str]:
    """Wrap rendered results with a greeting and the executed SQL."""
    chunks = [
        f"{_greeting(login)}Here are your query results:\n",
        "```sql\n",
        query,
        " \n",
        "```\n\n",
    ]
    if fmt == "json":
        return [*chunks, "```json\n", *render(result, "json"), "```\n"]
    return [*chunks, *render(result, "table")]


def compose_text_response(login: str, text: str | None, generated_error: str | None) -> list[str]:
    """Greeting followed by the LLM's text, plus a note if its SQL failed."""
    chunks = [_greeting(login), text or _EMPTY_ANSWER]
    if generated_error:
        chunks.append("\n\n" + describe_execution_error(generated_error))
    return chunks


def processing_error_event(error: Exception) -> StreamEvent:
    """Build a sanitized ``errors`` event with a correlation ID.

    Logs the full exception server-side and returns a generic message
    to the client so internal details are never leaked.
    """
    correlation_id = uuid.uuid4().hex[:12]
    logger.error("Pipeline error [%s]: %s", correlation_id, error, exc_info=True)
    return StreamEvent.failed([
        AgentError(
            type="agent",
            message=f"An internal error occurred (ref {correlation_id}). Please try again.",
            code="PROCESSING_ERROR",
            identifier="processing_error",
        )
    ])


async def _resolve(turn: _Turn, payload: AgentRequestPayload, token: str, login: str, clients: RelayClients) -> list[str]:
    """Drive the state machine from RECEIVED to RENDERED."""
    reporter = clients.reporter
    state = PipelineState.RECEIVED

    while state is not PipelineState.RENDERED:
        if state is PipelineState.RECEIVED or state is PipelineState.DELEGATED:
            turn.is_sql = looks_like_sql(turn.candidate)
            state = PipelineState.CLASSIFIED

        elif state is PipelineState.CLASSIFIED:
            if turn.is_sql and turn.attempts < MAX_EXECUTION_ATTEMPTS:
                turn.attempts += 1
                turn.result = await clients.sql_executor.execute_query(turn.candidate)
                state = PipelineState.EXECUTED
            elif turn.llm_text is None:
                conversation = build_conversation(
                    payload.messages, clients.system_prompt, turn.direct_error
                )
                turn.llm_text = await clients.completion.complete(conversation, token)
                turn.candidate = extract_sql_candidate(turn.llm_text)
                state = PipelineState.DELEGATED
            else:
                turn.chunks = compose_text_response(login, turn.llm_text, turn.generated_error)
                state = PipelineState.RENDERED

        elif state is PipelineState.EXECUTED:
            result = turn.result
            if result is not None and result.success:
                turn.chunks = compose_table_response(
                    login, turn.candidate, result, clients.result_format
                )
                state = PipelineState.RENDERED
            else:
                error = result.error if result is not None else None
                if turn.llm_text is None:
                    turn.direct_error = error
                    logger.info("Direct execution failed, delegating to LLM: %s", error)
                else:
                    turn.generated_error = error
                    logger.info("Generated query failed: %s", error)
                turn.is_sql = False
                state = PipelineState.CLASSIFIED

        reporter.transition(state)

    return turn.chunks


async def process_message(
    payload: AgentRequestPayload,
    token: str,
    clients: RelayClients,
) -> AsyncIterator[StreamEvent]:
    """Answer one verified agent request as a stream of events.

    The stream always starts with ``ack`` and ends with exactly one of
    ``done`` or ``errors``. No exception escapes this generator.

    Args:
        payload: Verified request body.
        token: The user's platform token.
        clients: Injected collaborators.

    Yields:
        ``StreamEvent`` objects in emission order.
    """
    reporter = clients.reporter
    reporter.transition(PipelineState.RECEIVED)
    yield StreamEvent.ack()

    try:
        login = await clients.identity.get_login(token)
        message = payload.user_message()
        logger.info("Received message from %s: %s", login, message[:200])

        turn = _Turn(candidate=message)
        chunks = await _resolve(turn, payload, token, login, clients)

        reporter.transition(PipelineState.EMITTING)
        for chunk in chunks:
            yield StreamEvent.text(chunk)
    except Exception as e:  # noqa: BLE001
        reporter.transition(PipelineState.FAILED)
        yield processing_error_event(e)
        return

    reporter.transition(PipelineState.DONE)
    yield StreamEvent.done()
