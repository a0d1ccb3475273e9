"""
Relay - answers agent requests from the embedded database or the LLM.

The pipeline:
1. Classifies the latest user message as SQL or natural language
2. Executes SQL against DuckDB, or asks the LLM for a statement
3. Falls back to the LLM's plain text when no query succeeds
"""

from .clients import RelayClients, create_relay_clients, create_request_verifier, load_prompt
from .pipeline import MAX_EXECUTION_ATTEMPTS, process_message
from .states import PipelineState

__all__ = [
    "MAX_EXECUTION_ATTEMPTS",
    "PipelineState",
    "RelayClients",
    "create_relay_clients",
    "create_request_verifier",
    "load_prompt",
    "process_message",
]
