"""Boundary parsing for query parameters and path ids."""

import re
from dataclasses import dataclass

from errors import ValidationError

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 50

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")
_CHARACTER_ID = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class SearchParams:
    page: int
    limit: int
    query: str | None = None


def _leading_int(raw: str | None) -> int | None:
    """Parse a leading integer the lenient way: "2abc" -> 2, "abc" -> None."""
    if raw is None:
        return None
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else None


def parse_search_params(
    page: str | None, limit: str | None, query: str | None
) -> SearchParams:
    """Clamp page >= 1 and 1 <= limit <= 50. Missing, non-numeric or zero values take the defaults."""
    page_num = _leading_int(page) or DEFAULT_PAGE
    limit_num = _leading_int(limit) or DEFAULT_LIMIT
    term = query.strip() if query is not None else ""
    return SearchParams(
        page=max(1, page_num),
        limit=min(max(1, limit_num), MAX_LIMIT),
        query=term or None,
    )


def validate_character_id(character_id: str) -> str:
    if not _CHARACTER_ID.fullmatch(character_id):
        raise ValidationError("Invalid character ID format", code="INVALID_ID")
    return character_id
