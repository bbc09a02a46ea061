from __future__ import annotations
from typing import Any

from gitmarks.domain.entities import Row


def normalize_record(raw: dict[str, Any]) -> Row:
    """
    Translate one GitHub starred-repo object into our Row.

    GitHub sends:                 We store as:
      owner.login            →    owner
      name                   →    repo
      stargazers_count       →    stars

    owner.login and name are guaranteed by GitHub on a 200 response, so a
    missing one is a KeyError for the caller, not something to recover from.
    """
    return Row(
        owner       = raw["owner"]["login"],
        repo        = raw["name"],
        description = raw.get("description"),
        language    = raw.get("language"),
        stars       = max(int(raw.get("stargazers_count") or 0), 0),
    )


def display_description(row: Row) -> str:
    return row.description or ""
