"""
Shared DuckDB client for executing queries.

This module owns the single long-lived database handle. The handle is
created once at application startup and injected into the relay pipeline;
tests create their own in-memory instance per test case.
"""

import asyncio
import logging
import math
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

import duckdb
from models import QueryResult, Scalar

logger = logging.getLogger(__name__)


def to_scalar(value: Any) -> Scalar:  # noqa: ANN401
    """Convert a DuckDB value into a renderer-safe scalar.

    Args:
        value: Raw value from a fetched row.

    Returns:
        The value as bool/int/float/str/temporal, or None.
    """
    if value is None:
        return None
    if isinstance(value, (bool, int, str, datetime, date, time)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, Decimal):
        return float(value)
    return str(value)


class DuckDBClient:
    """
    Async facade over a DuckDB connection.

    DuckDB's Python API is synchronous; every statement runs on a worker
    thread through its own cursor so concurrent requests never share one.

    Usage:
        client = DuckDBClient.connect(":memory:")
        result = await client.execute_query("SELECT 42 AS answer")
        client.close()
    """

    def __init__(self, connection: duckdb.DuckDBPyConnection, database: str = ":memory:"):
        """
        Wrap an open connection.

        Args:
            connection: The connection this client owns.
            database: Path the connection was opened with, for logging.
        """
        self.database = database
        self._connection: duckdb.DuckDBPyConnection | None = connection

    @classmethod
    def connect(cls, database: str = ":memory:") -> "DuckDBClient":
        """Open ``database`` (a file path or ``:memory:``)."""
        logger.info("Opening DuckDB database: %s", database)
        return cls(duckdb.connect(database), database)

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.info("Closed DuckDB database: %s", self.database)

    def _run(self, query: str) -> QueryResult:
        if self._connection is None:
            return QueryResult.failure("Database connection is closed.")

        cursor = self._connection.cursor()
        try:
            cursor.execute(query)
            if cursor.description is None:
                # Statement produced no result set (CREATE, INSERT, ATTACH...)
                return QueryResult(success=True)

            columns = [column[0] for column in cursor.description]
            raw_rows = cursor.fetchall()
        finally:
            cursor.close()

        rows = [
            {col: to_scalar(row[i]) for i, col in enumerate(columns)}
            for row in raw_rows
        ]
        return QueryResult(success=True, columns=columns, rows=rows, row_count=len(rows))

    async def execute_query(self, query: str) -> QueryResult:
        """
        Execute a SQL statement and return results.

        Args:
            query: The SQL statement to execute

        Returns:
            A ``QueryResult``. On error ``success`` is False, ``error`` holds
            the engine message and no partial rows are returned.
        """
        logger.info("Executing SQL query: %s", query[:200])
        try:
            result = await asyncio.to_thread(self._run, query)
        except duckdb.Error as e:
            logger.warning("SQL execution error: %s", e)
            return QueryResult.failure(str(e))

        logger.info("Query executed successfully. Returned %d rows.", result.row_count)
        return result
