"""Error recovery helpers for query execution failures.

Pure functions that classify DuckDB error messages and build the short
user-facing note shown when an LLM-rewritten query also fails.
"""

# ── Error classification patterns ────────────────────────────────────────

_SYNTAX_PATTERNS = {"parser error", "syntax error"}
_CATALOG_PATTERNS = {"catalog error", "binder error", "does not exist", "not found"}
_CONVERSION_PATTERNS = {"conversion error", "invalid input error", "out of range"}


def classify_execution_error(error: str | None) -> str:
    """Classify an execution error message into a category.

    Args:
        error: Error message returned by the database engine.

    Returns:
        One of 'syntax', 'catalog', 'conversion', or 'generic'.
    """
    message = (error or "").lower()
    for pattern in _SYNTAX_PATTERNS:
        if pattern in message:
            return "syntax"
    for pattern in _CATALOG_PATTERNS:
        if pattern in message:
            return "catalog"
    for pattern in _CONVERSION_PATTERNS:
        if pattern in message:
            return "conversion"
    return "generic"


def describe_execution_error(error: str | None) -> str:
    """Build a user-friendly note for a failed generated query.

    Args:
        error: Error message returned by the database engine.

    Returns:
        A one-line explanation ending with a newline.
    """
    category = classify_execution_error(error)

    if category == "syntax":
        return "The generated query could not be parsed. Try rephrasing your request.\n"
    if category == "catalog":
        return (
            "The generated query references a table or column that does not exist. "
            "Create or attach the data first, or name the table explicitly.\n"
        )
    if category == "conversion":
        return "The generated query failed converting a value to the expected type.\n"
    return f"The generated query failed: {error}\n"
