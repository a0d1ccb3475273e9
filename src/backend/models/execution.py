"""
Query execution and results models.

These models represent what the database executor hands back to the
relay pipeline and the renderer.
"""

from datetime import date, datetime, time
from typing import Union

from pydantic import BaseModel, Field

Scalar = Union[bool, int, float, str, datetime, date, time, None]
"""A single cell value. Engine-specific types are coerced into this set."""


class QueryResult(BaseModel):
    """
    Outcome of running one SQL statement.

    On success ``rows`` holds every row as a column-name -> value mapping whose
    key order matches ``columns``. On failure ``rows`` is always empty and
    ``error`` carries the engine's message.
    """

    success: bool = Field(description="Whether the statement executed without error")

    columns: list[str] = Field(
        default_factory=list,
        description="Column names in result order"
    )

    rows: list[dict[str, Scalar]] = Field(
        default_factory=list,
        description="Result rows keyed by column name"
    )

    row_count: int = Field(
        default=0,
        ge=0,
        description="Number of rows returned"
    )

    error: str | None = Field(
        default=None,
        description="Error message if the statement failed"
    )

    @classmethod
    def failure(cls, error: str) -> "QueryResult":
        """Build a failed result with no rows."""
        return cls(success=False, error=error)
