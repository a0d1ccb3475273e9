"""
Entities package.

Each subdirectory groups one part of the relay:
- relay/: request pipeline, its state machine and client bundle
- shared/: database, LLM and platform clients plus pure helpers

Shared models are available at the package level.
"""

from models import QueryResult, StreamEvent

__all__ = ["QueryResult", "StreamEvent"]
