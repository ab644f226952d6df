"""
SQL Fragments

Small helpers shared by the relation queries:
- identifier quoting for table/column names taken from descriptor config
- positional parameter collection ($1, $2, ...) so values are never interpolated
- parsing of asyncpg command status tags
"""

import re
from typing import Any, List, Optional

_STATUS_COUNT_RE = re.compile(r"(\d+)\s*$")


def quote_identifier(name: str) -> str:
    """Quote a PostgreSQL identifier, doubling embedded quotes"""
    if not name:
        raise ValueError("SQL identifier must not be empty")
    return '"' + name.replace('"', '""') + '"'


def qualified(*parts: str) -> str:
    """
    Build a dotted, fully quoted identifier.

    qualified("organization_user_relations", "user_id")
    → '"organization_user_relations"."user_id"'
    """
    return ".".join(quote_identifier(part) for part in parts)


class Params:
    """
    Collects bound values and hands out asyncpg placeholders.

    Usage:
        params = Params()
        sql = f"user_id = {params.add(user_id)}"
        await conn.execute(sql, *params.values)
    """

    def __init__(self):
        self.values: List[Any] = []

    def add(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"


def affected_rows(status: Optional[str]) -> int:
    """
    Extract the row count from an asyncpg command status tag.

    - "INSERT 0 3" → 3
    - "DELETE 2" → 2
    - None (nothing was executed) → 0
    """
    if not status:
        return 0
    match = _STATUS_COUNT_RE.search(status)
    return int(match.group(1)) if match else 0
