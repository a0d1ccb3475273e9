"""
FastAPI dependencies for shared resources.

Long-lived resources are created in the application lifespan and stored
on ``app.state``; these accessors hand them to route handlers.
"""

from entities.relay.clients import RelayClients
from entities.shared.protocols import RequestVerifier
from fastapi import HTTPException, Request


def get_relay_clients(request: Request) -> RelayClients:
    """
    Get the relay client bundle from app state.

    Raises HTTPException 503 if not initialized.
    """
    clients = getattr(request.app.state, "relay_clients", None)
    if clients is None:
        raise HTTPException(status_code=503, detail="Relay not initialized")
    return clients


def get_request_verifier(request: Request) -> RequestVerifier:
    """
    Get the request signature verifier from app state.

    Raises HTTPException 503 if not initialized.
    """
    verifier = getattr(request.app.state, "verifier", None)
    if verifier is None:
        raise HTTPException(status_code=503, detail="Verifier not initialized")
    return verifier
