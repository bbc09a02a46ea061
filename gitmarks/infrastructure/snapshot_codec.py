from __future__ import annotations
import json
import logging
from dataclasses import asdict

from gitmarks.domain.entities import Row, Snapshot
from gitmarks.domain.errors import CacheWriteFailure

log = logging.getLogger(__name__)


def encode_snapshot(snapshot: Snapshot) -> str:
    """Serialize to JSON text: {"rows": [{owner, repo, description, language, stars}, ...]}."""
    try:
        return json.dumps({"rows": [asdict(r) for r in snapshot.rows]})
    except (TypeError, ValueError) as exc:
        raise CacheWriteFailure(f"Could not serialize snapshot: {exc}") from exc


def decode_snapshot(payload: str | bytes | None) -> Snapshot | None:
    """
    Parse stored JSON text back into a Snapshot.

    Fail-soft: anything that is not a well-formed snapshot (corrupt text,
    an older format, wrong field types) comes back as None, i.e. a miss.
    """
    if payload is None:
        return None
    try:
        data = json.loads(payload)
        if not isinstance(data, dict) or not isinstance(data.get("rows"), list):
            raise ValueError("missing rows array")
        rows = tuple(_decode_row(item) for item in data["rows"])
    except (ValueError, TypeError, KeyError) as exc:
        log.warning("Ignoring malformed cached snapshot: %s", exc)
        return None
    return Snapshot(rows=rows)


def _decode_row(item: dict) -> Row:
    if not isinstance(item, dict):
        raise TypeError(f"row is {type(item).__name__}, not an object")
    owner, repo, stars = item["owner"], item["repo"], item["stars"]
    if not isinstance(owner, str) or not isinstance(repo, str):
        raise TypeError("owner and repo must be strings")
    if not isinstance(stars, int) or isinstance(stars, bool) or stars < 0:
        raise ValueError(f"bad star count {stars!r}")
    description = item.get("description")
    language    = item.get("language")
    if description is not None and not isinstance(description, str):
        raise TypeError("description must be a string or null")
    if language is not None and not isinstance(language, str):
        raise TypeError("language must be a string or null")
    return Row(owner=owner, repo=repo, description=description, language=language, stars=stars)
