from __future__ import annotations
import logging
from urllib.parse import urlsplit

from gitmarks.domain.errors import MissingIdentity

log = logging.getLogger(__name__)

CACHE_NAMESPACE = "_gitmarks_"


def resolve_identity(raw: str | None) -> str:
    """Trim the raw identifier. Raises MissingIdentity if nothing is left."""
    identity = (raw or "").strip()
    if not identity:
        raise MissingIdentity(f"Username required in URL {identity}")
    return identity


def identity_from_location(location: str | None) -> str:
    """
    Take the identity from the first path segment of a URL or path.

      "https://gitmarks.example/octocat/" → "octocat"
      "/octocat"                          → "octocat"
      "octocat"                           → "octocat"
      "gitmarks.example/octocat"          → "octocat"

    Without a scheme urlsplit leaves the host in the path. GitHub logins
    never contain a dot, so a dotted first segment followed by more path
    is taken to be a host and skipped.
    """
    path = urlsplit(location or "").path
    segments = path.split("/")
    if path.startswith("/"):
        segments = segments[1:]
    elif len(segments) > 1 and "." in segments[0]:
        segments = segments[1:]
    first = segments[0] if segments else ""
    return resolve_identity(first)


def cache_key_for(identity: str) -> str:
    """Namespaced and therefore collision-free: one key per identity."""
    key = f"{CACHE_NAMESPACE}.{identity}"
    log.debug("User key: %s", key)
    return key
