"""
Shared models for entities.

These models are used by the relay pipeline, its collaborators and the API.
All models are re-exported here.
"""

from .conversation import AgentRequestPayload, ConversationMessage, Role
from .events import AgentError, EventKind, StreamEvent
from .execution import QueryResult, Scalar

__all__ = [
    # Conversation (inbound request)
    "AgentRequestPayload",
    "ConversationMessage",
    "Role",
    # Execution (query results)
    "QueryResult",
    "Scalar",
    # Events (outbound stream)
    "AgentError",
    "EventKind",
    "StreamEvent",
]
