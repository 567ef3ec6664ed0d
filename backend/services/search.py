"""Name search and local pagination over the full character listing.

Search works by fetching the whole /people listing (cached) and filtering it
in memory. That is fine while the corpus stays around a hundred records; a
much larger upstream would need server-side search instead.
"""

import math


def matches_name(name: str | None, query: str) -> bool:
    """Case-insensitive match of ``query`` against a character name.

    Accepts an exact match, a substring, a prefix, or any space-delimited
    word of the name starting with the query.
    """
    name = (name or "").lower()
    term = query.lower().strip()
    return (
        name == term
        or term in name
        or name.startswith(term)
        or any(word.startswith(term) for word in name.split(" "))
    )


def filter_by_name(summaries: list[dict], query: str) -> list[dict]:
    return [s for s in summaries if matches_name(s.get("name"), query)]


def paginate(items: list, page: int, limit: int) -> tuple[list, dict]:
    """Slice ``items`` for ``page`` and compute metadata from the full list."""
    start = (page - 1) * limit
    end = start + limit
    total = len(items)
    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit),
        "hasNext": end < total,
        "hasPrev": page > 1,
    }
    return items[start:end], pagination
