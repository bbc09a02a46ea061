from __future__ import annotations

from gitmarks.application.normalizer import display_description
from gitmarks.application.view_filter import SHOW_ALL, apply_filter, languages_in
from gitmarks.domain.entities import Row, StarsView


def render_row(row: Row) -> str:
    parts = [row.full_name]
    description = display_description(row)
    if description:
        parts.append(f"— {description}")
    line = " ".join(parts)
    meta = f"{row.stars} ★"
    if row.language:
        meta = f"{row.language} · {meta}"
    return f"{line}\n    {meta}"


def render_view(view: StarsView, language: str | None = SHOW_ALL) -> str:
    """
    Text rendering of a view: header with count and cache state, then one
    entry per row. An error replaces the list entirely.
    """
    if view.error_kind is not None:
        return view.error_message or view.error_kind.value
    if view.superseded:
        return "Loading..."

    rows   = apply_filter(view.rows, language)
    header = f"{len(rows)} repositories"
    if language and language != SHOW_ALL:
        header += f" in {language}"
    if view.cached:
        header += " (cached)"

    if not rows:
        return f"{header}\nNo data"
    return "\n".join([header, *(render_row(r) for r in rows)])


def render_languages(view: StarsView) -> str:
    return "\n".join(languages_in(view.rows))
