from __future__ import annotations
import itertools
import logging
from dataclasses import replace

from gitmarks.domain.entities import FetchSession, SessionState, Snapshot
from gitmarks.domain.errors import CacheWriteFailure, IdentityNotFound, TransportError
from gitmarks.domain.interfaces import IPageFetcher, ISnapshotStore
from .normalizer import normalize_record

log = logging.getLogger(__name__)


class PaginationEngine:
    """
    Drives the fetch → accumulate → decide loop for one identity at a time.

    All dependencies are injected — this class creates NOTHING itself:
      - IPageFetcher   → how to talk to GitHub (injected)
      - ISnapshotStore → where the finished collection goes (injected)

    Pages are requested strictly one after another: whether to ask for
    page n+1 depends on how many records page n returned. GitHub gives no
    total count, so a page shorter than page_size is the only end signal.
    A page of exactly page_size always costs one more request.

    Every session gets a unique generation number and start() makes it the
    current one for its identity. A session whose generation is no longer
    current is ABANDONED at the next await boundary: its results are
    dropped and it never writes the cache. The entry is dropped again when
    the current session ends, so only running identities are tracked.
    """

    def __init__(self, fetcher: IPageFetcher, store: ISnapshotStore) -> None:
        self._fetcher         = fetcher
        self._store           = store
        self._next_generation = itertools.count(1)
        self._current: dict[str, int] = {}

    @property
    def page_size(self) -> int:
        return self._fetcher.page_size

    def start(self, identity: str, cache_key: str) -> FetchSession:
        """Create a fresh IDLE session, superseding any earlier one for identity."""
        generation = next(self._next_generation)
        self._current[identity] = generation
        return FetchSession(identity=identity, cache_key=cache_key, generation=generation)

    def is_current(self, session: FetchSession) -> bool:
        return self._current.get(session.identity) == session.generation

    def is_active(self, identity: str) -> bool:
        return identity in self._current

    async def run(self, session: FetchSession) -> FetchSession:
        """
        Run `session` to a terminal state and return the final session value.

        Never raises for fetch errors: IdentityNotFound / TransportError end
        the session in FAILED. A CacheWriteFailure still ends in COMPLETED
        with the rows intact; it is recorded in cache_error.
        """
        while not session.terminal:
            session = await self.step(session)
        if self.is_current(session):
            del self._current[session.identity]
        return session

    async def step(self, session: FetchSession) -> FetchSession:
        """Apply exactly one state transition. Terminal sessions come back as-is."""
        if session.terminal:
            return session

        if not self.is_current(session):
            log.info("Session %d for %s superseded — abandoning", session.generation, session.identity)
            return replace(session, state=SessionState.ABANDONED)

        if session.state in (SessionState.IDLE, SessionState.FETCHING):
            return await self._fetch(replace(session, state=SessionState.FETCHING))

        if session.state == SessionState.ACCUMULATING:
            # Only reached after a full page: ask for the next one
            return replace(session, state=SessionState.FETCHING, cursor=session.cursor + 1)

        raise ValueError(f"No transition out of state {session.state!r}")

    async def _fetch(self, session: FetchSession) -> FetchSession:
        log.info("Fetching %s data, page: %d", session.identity, session.cursor)
        try:
            raw = await self._fetcher.fetch_page(session.identity, session.cursor)
        except (IdentityNotFound, TransportError) as exc:
            if not self.is_current(session):
                return replace(session, state=SessionState.ABANDONED, requests=session.requests + 1)
            log.warning("Session for %s failed on page %d: %s", session.identity, session.cursor, exc)
            return replace(
                session,
                state         = SessionState.FAILED,
                last_error    = exc.kind,
                error_message = exc.message,
                requests      = session.requests + 1,
            )

        if not self.is_current(session):
            log.info("Dropping page %d for %s — session superseded", session.cursor, session.identity)
            return replace(session, state=SessionState.ABANDONED, requests=session.requests + 1)

        rows = tuple(normalize_record(r) for r in raw)
        session = replace(
            session,
            state       = SessionState.ACCUMULATING,
            accumulated = session.accumulated + rows,
            requests    = session.requests + 1,
        )
        log.debug("Page %d: %d records | running total: %d", session.cursor, len(rows), len(session.accumulated))

        if len(raw) < self.page_size:
            return self._complete(session)
        return session

    def _complete(self, session: FetchSession) -> FetchSession:
        session = replace(session, state=SessionState.COMPLETED)
        log.info("Pagination complete for %s | %d rows | %d requests",
                 session.identity, len(session.accumulated), session.requests)
        try:
            self._store.write(session.cache_key, Snapshot(rows=session.accumulated))
        except CacheWriteFailure as exc:
            log.warning("Could not cache %d rows under %s: %s",
                        len(session.accumulated), session.cache_key, exc)
            return replace(session, cache_error=exc.message)
        log.info("Cached %d rows under %s", len(session.accumulated), session.cache_key)
        return replace(session, cache_written=True)
