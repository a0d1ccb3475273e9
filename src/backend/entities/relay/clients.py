"""Relay client container and factories for dependency injection.

``RelayClients`` bundles every I/O dependency the relay pipeline needs.
Production code constructs it via ``create_relay_clients()`` from the
long-lived resources created in the app lifespan; tests construct it
from in-memory fakes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import httpx
from config.settings import Settings
from entities.shared.llm_client import CompletionClient
from entities.shared.protocols import (
    CompletionService,
    IdentityService,
    NoOpReporter,
    ProgressReporter,
    RequestVerifier,
    SqlExecutor,
)
from entities.shared.renderer import ResultFormat
from entities.shared.verification import (
    GitHubIdentityClient,
    SignatureVerifier,
    UnverifiedRequestVerifier,
)

logger = logging.getLogger(__name__)


def load_prompt() -> str:
    """Load the SQL-biasing system prompt from prompt.md in this folder."""
    return (Path(__file__).parent / "prompt.md").read_text(encoding="utf-8")


@dataclass(frozen=True)
class RelayClients:
    """Immutable bundle of all I/O dependencies for the relay pipeline.

    All collaborator fields use Protocol types. Production code passes the
    DuckDB and httpx-backed clients; tests pass fakes.

    Args:
        sql_executor: Runs SQL against the shared database handle.
        completion: Streams chat completions from the LLM service.
        identity: Resolves a user token to a login name.
        system_prompt: Instruction prepended to every LLM conversation.
        result_format: ``"table"`` or ``"json"`` rendering of results.
        reporter: Observer for pipeline state transitions.
    """

    sql_executor: SqlExecutor
    completion: CompletionService
    identity: IdentityService
    system_prompt: str
    result_format: ResultFormat = "table"
    reporter: ProgressReporter = field(default_factory=NoOpReporter)


def create_relay_clients(
    settings: Settings,
    http_client: httpx.AsyncClient,
    sql_executor: SqlExecutor,
    reporter: ProgressReporter | None = None,
) -> RelayClients:
    """Build a ``RelayClients`` from application ``Settings``.

    Args:
        settings: Centralised application configuration.
        http_client: Shared outbound HTTP client.
        sql_executor: The long-lived database client.
        reporter: Optional state observer. Defaults to ``NoOpReporter``.

    Returns:
        Fully-initialised ``RelayClients`` ready for ``process_message()``.
    """
    return RelayClients(
        sql_executor=sql_executor,
        completion=CompletionClient(http_client, settings.llm_api_url, settings.llm_model),
        identity=GitHubIdentityClient(http_client, settings.github_api_url),
        system_prompt=load_prompt(),
        result_format=settings.result_format,
        reporter=reporter or NoOpReporter(),
    )


def create_request_verifier(settings: Settings, http_client: httpx.AsyncClient) -> RequestVerifier:
    """Return the verifier selected by ``settings.verify_signatures``."""
    if settings.verify_signatures:
        return SignatureVerifier(http_client, settings.public_keys_url)

    logger.warning("=" * 60)
    logger.warning("WARNING: Request signature verification is DISABLED")
    logger.warning("DO NOT use this setting in production.")
    logger.warning("=" * 60)
    return UnverifiedRequestVerifier()
