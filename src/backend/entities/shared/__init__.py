"""Shared clients and helpers for the relay."""

from .classifier import extract_sql_candidate, looks_like_sql
from .llm_client import CompletionClient, CompletionError
from .renderer import render, render_json, render_table
from .sql_client import DuckDBClient
from .verification import GitHubIdentityClient, SignatureVerifier, UnverifiedRequestVerifier

__all__ = [
    "CompletionClient",
    "CompletionError",
    "DuckDBClient",
    "GitHubIdentityClient",
    "SignatureVerifier",
    "UnverifiedRequestVerifier",
    "extract_sql_candidate",
    "looks_like_sql",
    "render",
    "render_json",
    "render_table",
]
