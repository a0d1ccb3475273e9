"""Per-request pipeline states."""

from enum import Enum


class PipelineState(str, Enum):
    """Lifecycle of one inbound request.

    ``RECEIVED -> CLASSIFIED -> EXECUTED | DELEGATED -> RENDERED -> EMITTING -> DONE | FAILED``.
    ``EXECUTED`` and ``DELEGATED`` loop back to ``CLASSIFIED`` while the
    fallback chain still has attempts left.
    """

    RECEIVED = "received"
    CLASSIFIED = "classified"
    EXECUTED = "executed"
    DELEGATED = "delegated"
    RENDERED = "rendered"
    EMITTING = "emitting"
    DONE = "done"
    FAILED = "failed"
