from __future__ import annotations

import logging

from gitmarks.domain.entities import FetchSession, SessionState, StarsView
from gitmarks.domain.errors import CacheWriteFailure, MissingIdentity
from gitmarks.domain.interfaces import ISnapshotStore
from .identity import cache_key_for, identity_from_location, resolve_identity
from .pagination import PaginationEngine

log = logging.getLogger(__name__)


class StarsApplicationService:
    """
    The top-level use case: show a user's starred repositories.

    A session is served EITHER from the cache (no network at all) OR from
    the network (ending in one cache write), never a mix of the two.

    Receives all dependencies via constructor injection.
    Knows about the sequence of operations but not the implementation details.
    """

    def __init__(self, engine: PaginationEngine, store: ISnapshotStore) -> None:
        self._engine = engine
        self._store  = store

    async def open(self, raw_identity: str | None) -> StarsView:
        """Cache hit → cached rows. Cache miss → a fresh network session."""
        try:
            identity = resolve_identity(raw_identity)
        except MissingIdentity as exc:
            return self._missing(exc)
        return await self._open(identity)

    async def open_location(self, location: str | None) -> StarsView:
        """Same as open(), taking the identity from a URL or path."""
        try:
            identity = identity_from_location(location)
        except MissingIdentity as exc:
            return self._missing(exc)
        return await self._open(identity)

    async def reload_location(self, location: str | None) -> StarsView:
        """Same as reload(), taking the identity from a URL or path."""
        try:
            identity = identity_from_location(location)
        except MissingIdentity as exc:
            return self._missing(exc)
        return await self._reload(identity)

    async def reload(self, raw_identity: str | None) -> StarsView:
        """
        Drop the cached snapshot and fetch everything again.

        Any session still running for the same identity is superseded and
        its results are discarded.
        """
        try:
            identity = resolve_identity(raw_identity)
        except MissingIdentity as exc:
            return self._missing(exc)
        return await self._reload(identity)

    async def _reload(self, identity: str) -> StarsView:
        key = cache_key_for(identity)
        try:
            self._store.clear(key)
        except CacheWriteFailure as exc:
            # The completed session overwrites the stale entry anyway
            log.warning("Could not clear cache for %s, reloading regardless: %s", identity, exc)
        else:
            log.info("Cleared cache for %s — reloading", identity)
        return await self._fetch(identity, key)

    async def _open(self, identity: str) -> StarsView:
        key      = cache_key_for(identity)
        snapshot = self._store.read(key)
        if snapshot is not None:
            log.info("Loaded %d rows for %s from cache", len(snapshot.rows), identity)
            return StarsView(identity=identity, rows=snapshot.rows, cached=True)

        log.info("No cached data for %s — fetching from GitHub", identity)
        return await self._fetch(identity, key)

    async def _fetch(self, identity: str, key: str) -> StarsView:
        session = self._engine.start(identity, key)
        session = await self._engine.run(session)
        return self._to_view(session)

    @staticmethod
    def _to_view(session: FetchSession) -> StarsView:
        if session.state == SessionState.ABANDONED:
            return StarsView(identity=session.identity, superseded=True, requests=session.requests)

        if session.state == SessionState.FAILED:
            log.error("Failed | %d rows collected before failure | error: %s",
                      len(session.accumulated), session.error_message)
            # Partial rows are kept on the view; the presenter shows the error
            return StarsView(
                identity      = session.identity,
                rows          = session.accumulated,
                error_kind    = session.last_error,
                error_message = session.error_message,
                requests      = session.requests,
            )

        return StarsView(
            identity      = session.identity,
            rows          = session.accumulated,
            cache_written = session.cache_written,
            cache_error   = session.cache_error,
            requests      = session.requests,
        )

    @staticmethod
    def _missing(exc: MissingIdentity) -> StarsView:
        log.error("%s", exc.message)
        return StarsView(identity=None, error_kind=exc.kind, error_message=exc.message)
