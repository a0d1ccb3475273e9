"""
Agent API routes with SSE streaming support.

The chat platform POSTs the signed conversation to ``/``. The request is
rejected at the HTTP level when the user token is missing or the
signature does not verify; otherwise the relay pipeline's events are
streamed back.
"""

import logging
import uuid
from collections.abc import AsyncGenerator
from dataclasses import replace

from api.agent_events import create_errors_event, format_event
from api.dependencies import get_relay_clients, get_request_verifier
from entities.relay.clients import RelayClients
from entities.relay.pipeline import process_message
from entities.shared.protocols import LoggingReporter, NoOpReporter, RequestVerifier
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from models import AgentError, AgentRequestPayload
from pydantic import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["agent"])

TOKEN_HEADER = "X-GitHub-Token"
SIGNATURE_HEADER = "Github-Public-Key-Signature"
KEY_ID_HEADER = "Github-Public-Key-Identifier"

WELCOME_TEXT = "Welcome to the Copilot DuckDB Extension! Query Me! 👋"

_MISSING_TOKEN_ERROR = AgentError(
    type="agent",
    message="No GitHub token provided in the request headers.",
    code="MISSING_GITHUB_TOKEN",
    identifier="missing_github_token",
)


async def generate_agent_response(
    payload: AgentRequestPayload,
    token: str,
    clients: RelayClients,
) -> AsyncGenerator[str, None]:
    """Serialize the pipeline's events into the SSE wire format."""
    async for event in process_message(payload, token, clients):
        yield format_event(event)


@router.get("/", response_class=PlainTextResponse)
async def welcome() -> str:
    """Greeting for browsers and uptime checks."""
    return WELCOME_TEXT


@router.post("/")
async def agent(
    request: Request,
    clients: RelayClients = Depends(get_relay_clients),
    verifier: RequestVerifier = Depends(get_request_verifier),
) -> Response:
    """Verify an agent request and stream the response events."""
    token = request.headers.get(TOKEN_HEADER, "")
    if not token:
        logger.warning("Rejected agent request without a user token")
        return Response(
            content=create_errors_event([_MISSING_TOKEN_ERROR]),
            status_code=401,
            media_type="text/event-stream",
        )

    body = await request.body()
    is_valid = await verifier.verify(
        body,
        request.headers.get(SIGNATURE_HEADER, ""),
        request.headers.get(KEY_ID_HEADER, ""),
        token,
    )
    if not is_valid:
        logger.error("Request verification failed")
        return PlainTextResponse("Request could not be verified", status_code=401)

    try:
        payload = AgentRequestPayload.model_validate_json(body)
    except ValidationError as e:
        logger.warning("Rejected malformed agent request: %s", e)
        return PlainTextResponse("Request body is not a valid agent payload", status_code=400)

    if isinstance(clients.reporter, NoOpReporter):
        request_id = payload.copilot_thread_id or uuid.uuid4().hex[:12]
        clients = replace(clients, reporter=LoggingReporter(request_id))

    return StreamingResponse(
        generate_agent_response(payload, token, clients),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Content-Type-Options": "nosniff",
        },
    )
