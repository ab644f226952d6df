"""
Naming Convention Translation

Callers address relation columns in camelCase (``organizationRoleId``),
storage uses snake_case (``organization_role_id``). Translation runs in one
direction only: caller → storage.

Word splitting follows the rules of the JavaScript ``snakecase-keys``
package so existing callers keep getting the same column names:
- a lower-case letter or digit followed by an upper-case letter starts a word
  ("groupId" → "group_id", "oauth2Id" → "oauth2_id")
- inside a run of capitals, the last capital starts a new word when a
  lower-case letter follows ("HTTPServer" → "http_server")
- any other non-alphanumeric run is a separator
"""

import re
from typing import Any, Dict, Mapping

from .errors import RelationCriteriaError

_LOWER_UPPER_RE = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_RE = re.compile(r"([A-Z])([A-Z][a-z])")
_SEPARATOR_RE = re.compile(r"[^A-Za-z0-9]+")


def camel_to_snake(name: str) -> str:
    """
    Convert a camelCase (or PascalCase) key into its snake_case column name.

    - "groupId" → "group_id"
    - "organizationRoleId" → "organization_role_id"
    - "userID" → "user_id"
    - "user_id" → "user_id" (already snake_case, unchanged)
    """
    split = _LOWER_UPPER_RE.sub(r"\1_\2", name)
    split = _ACRONYM_RE.sub(r"\1_\2", split)
    words = [word for word in _SEPARATOR_RE.split(split) if word]
    return "_".join(words).lower()


def snake_to_camel(name: str) -> str:
    """
    Convert a snake_case name into camelCase.

    - "organization_role" → "organizationRole"
    - "user_id" → "userId"
    """
    words = [word for word in name.split("_") if word]
    if not words:
        return ""
    return words[0].lower() + "".join(word[:1].upper() + word[1:].lower() for word in words[1:])


def snakecase_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a new dict with every key converted to snake_case.

    Values are left untouched and insertion order is preserved. Two keys that
    land on the same column (e.g. "userId" and "user_id") are rejected rather
    than letting one silently overwrite the other.
    """
    converted: Dict[str, Any] = {}
    for key, value in data.items():
        column = camel_to_snake(key)
        if column in converted:
            raise RelationCriteriaError(
                f"Keys collide on column '{column}': '{key}' duplicates an earlier key"
            )
        converted[column] = value
    return converted
