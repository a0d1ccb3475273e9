"""
Inbound agent request models.

The chat platform posts the whole conversation on every turn. Only the
fields the relay uses are declared; anything else the platform sends
(references, confirmations, thread metadata) is preserved as extra data.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]


class ConversationMessage(BaseModel):
    """One message in the conversation history."""

    model_config = ConfigDict(extra="ignore")

    role: Role = Field(description="Author of the message")
    content: str = Field(default="", description="Message text")


class AgentRequestPayload(BaseModel):
    """Verified body of an agent request."""

    model_config = ConfigDict(extra="allow")

    messages: list[ConversationMessage] = Field(
        default_factory=list,
        description="Conversation history, oldest first"
    )
    copilot_thread_id: str | None = Field(default=None, description="Platform thread ID")
    agent: str | None = Field(default=None, description="Agent slug the message was sent to")

    def user_message(self) -> str:
        """Return the text of the most recent user message, or an empty string."""
        for message in reversed(self.messages):
            if message.role == "user":
                return message.content
        return ""
