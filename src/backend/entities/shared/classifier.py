"""Heuristic detection of SQL statements in free text.

Pure functions with no I/O. Matching is whole-word and case-insensitive,
so "selective" does not match SELECT. Natural-language sentences that use
a keyword as an ordinary word ("select the best restaurant") still classify
as SQL; that false positive is accepted and recovered by the LLM fallback.
"""

import re

# Statement verbs only. Clause words (FROM, WHERE, JOIN, LIMIT, SHOW...)
# are common in plain requests like "show all entries from cities" and
# are left for the LLM to turn into SQL.
SQL_KEYWORDS: tuple[str, ...] = (
    "SELECT",
    "INSERT",
    "UPDATE",
    "DELETE",
    "CREATE",
    "DROP",
    "ALTER",
    "ATTACH",
    "DETACH",
    "PRAGMA",
    "DESCRIBE",
    "SUMMARIZE",
    "EXPLAIN",
    "INSTALL",
)

_KEYWORD_RE = re.compile(r"\b(?:" + "|".join(SQL_KEYWORDS) + r")\b", re.IGNORECASE)

# First fenced block. The language tag is dropped whether it ends the line
# ("```sql\n...") or shares it with the statement ("```sql SELECT 1```").
_FENCE_RE = re.compile(
    r"```(?:(?i:sql|duckdb)\b[ \t]*|[A-Za-z0-9_+-]*[ \t]*\n)?(.*?)```",
    re.DOTALL,
)


def looks_like_sql(text: str) -> bool:
    """Return True if ``text`` contains any SQL keyword as a whole word.

    Args:
        text: Message to classify.

    Returns:
        Whether the message looks like a SQL statement.
    """
    if not text:
        return False
    return _KEYWORD_RE.search(text) is not None


def extract_sql_candidate(text: str) -> str:
    """Pull the statement out of a fenced code block if one is present.

    LLMs frequently wrap SQL in ```sql fences even when told not to.

    Args:
        text: Raw LLM output.

    Returns:
        The body of the first fenced block, or the whole text, stripped.
    """
    match = _FENCE_RE.search(text or "")
    if match:
        return match.group(1).strip()
    return (text or "").strip()
