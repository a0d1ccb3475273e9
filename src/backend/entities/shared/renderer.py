"""Result rendering for chat output.

Converts a ``QueryResult`` into an ordered list of text chunks that are
streamed to the user one event at a time. Rendering is deterministic and
never truncates; callers that need paging slice rows beforehand.
"""

import json
from datetime import date, datetime, time
from typing import Literal

from models import QueryResult, Scalar

NO_RESULTS = "No results found.\n"

_PIPE_ENTITY = "&#124;"

ResultFormat = Literal["table", "json"]


def format_cell(value: Scalar) -> str:
    """Format one value for a Markdown table cell.

    ``|`` becomes ``&#124;`` and newlines are flattened, so the cell never
    adds or removes a column, even when the value holds backslashes.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, (datetime, date, time)):
        text = value.isoformat()
    else:
        text = str(value)
    return text.replace("\r\n", " ").replace("\n", " ").replace("|", _PIPE_ENTITY)


def _row(cells: list[str]) -> str:
    return "| " + " | ".join(cells) + " |\n"


def render_table(result: QueryResult) -> list[str]:
    """Render rows as Markdown table chunks.

    Args:
        result: A successful query result.

    Returns:
        ``[NO_RESULTS]`` for an empty result, otherwise a header chunk,
        a separator chunk and one chunk per row.
    """
    if not result.rows:
        return [NO_RESULTS]

    headers = result.columns or list(result.rows[0].keys())
    chunks = [
        _row([format_cell(h) for h in headers]),
        _row(["---"] * len(headers)),
    ]
    for row in result.rows:
        chunks.append(_row([format_cell(row.get(h)) for h in headers]))
    return chunks


def render_json(result: QueryResult) -> list[str]:
    """Render rows as a single JSON array chunk."""
    return [json.dumps(result.rows, default=str) + "\n"]


def render(result: QueryResult, fmt: ResultFormat = "table") -> list[str]:
    """Render ``result`` in the requested format.

    Args:
        result: A successful query result.
        fmt: ``"table"`` for Markdown, ``"json"`` for structured output.

    Returns:
        Ordered text chunks.
    """
    if fmt == "json":
        return render_json(result)
    return render_table(result)
