"""
Chat-platform event serialization.

Agent responses are server-sent events shaped like OpenAI chat-completion
chunks; errors use a dedicated ``copilot_errors`` event type.
"""

import json

from models import AgentError, StreamEvent


def _chunk(delta: dict, finish_reason: str | None = None) -> str:
    choice: dict = {"index": 0, "delta": delta}
    if finish_reason:
        choice["finish_reason"] = finish_reason
    return f"data: {json.dumps({'choices': [choice]})}\n\n"


def create_ack_event() -> str:
    """Empty assistant delta acknowledging the request."""
    return _chunk({"content": "", "role": "assistant"})


def create_text_event(content: str) -> str:
    """One fragment of response text."""
    return _chunk({"content": content, "role": "assistant"})


def create_done_event() -> str:
    """Final chunk with ``finish_reason=stop`` followed by the ``[DONE]`` sentinel."""
    return _chunk({"content": None}, finish_reason="stop") + "data: [DONE]\n\n"


def create_errors_event(errors: list[AgentError]) -> str:
    """``copilot_errors`` event carrying one or more error objects."""
    payload = [e.model_dump() for e in errors]
    return f"event: copilot_errors\ndata: {json.dumps(payload)}\n\n"


def format_event(event: StreamEvent) -> str:
    """Serialize a pipeline ``StreamEvent`` to its wire form."""
    if event.kind == "ack":
        return create_ack_event()
    if event.kind == "text":
        return create_text_event(event.content)
    if event.kind == "done":
        return create_done_event()
    return create_errors_event(event.errors)
