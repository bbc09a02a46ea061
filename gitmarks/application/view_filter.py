from __future__ import annotations
from typing import Sequence

from gitmarks.domain.entities import Row

SHOW_ALL = "All"


def apply_filter(rows: Sequence[Row], language: str | None) -> tuple[Row, ...]:
    """
    Keep rows whose language equals `language` exactly.

    SHOW_ALL, None and "" return every row in original order. Rows with no
    language never match a specific value.
    """
    if not language or language == SHOW_ALL:
        return tuple(rows)
    return tuple(r for r in rows if r.language == language)


def languages_in(rows: Sequence[Row]) -> list[str]:
    return sorted({r.language for r in rows if r.language is not None})
