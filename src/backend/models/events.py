"""
Response event models.

The relay pipeline yields these typed events; ``api.agent_events`` turns
them into the platform's server-sent-event wire format.
"""

from typing import Literal

from pydantic import BaseModel, Field

EventKind = Literal["ack", "text", "done", "errors"]


class AgentError(BaseModel):
    """A single error entry reported to the chat platform."""

    type: str = Field(default="agent", description="Error origin")
    message: str = Field(description="User-facing error text")
    code: str = Field(description="Machine-readable error code")
    identifier: str = Field(description="Stable identifier for the error kind")


class StreamEvent(BaseModel):
    """One typed signal in the outbound event stream."""

    kind: EventKind
    content: str = ""
    errors: list[AgentError] = Field(default_factory=list)

    @classmethod
    def ack(cls) -> "StreamEvent":
        return cls(kind="ack")

    @classmethod
    def text(cls, content: str) -> "StreamEvent":
        return cls(kind="text", content=content)

    @classmethod
    def done(cls) -> "StreamEvent":
        return cls(kind="done")

    @classmethod
    def failed(cls, errors: list[AgentError]) -> "StreamEvent":
        return cls(kind="errors", errors=errors)
