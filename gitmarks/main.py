"""
main.py — Dependency Wiring (Composition Root)
------------------------------------------------
This file has ONE job: wire all the pieces together and run the app.

It does NOT contain any business logic. It just:
  1. Reads configuration from environment variables and the command line
  2. Creates concrete implementations of each interface
  3. Injects them into the classes that need them
  4. Calls the top-level use case (StarsApplicationService.open / reload)
  5. Prints the view and exits

Dependency graph (what depends on what):
                         main.py  (wires everything)
                            │
              ┌─────────────┼──────────────────┐
              ▼             ▼                  ▼
    StarsApplicationService │        ISnapshotStore
              │             │   (JsonFile | Postgres | InMemory)
              ▼             ▼
      PaginationEngine  GitHubStarsClient
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from dataclasses import dataclass

import httpx
import psycopg2

from gitmarks.application.pagination import PaginationEngine
from gitmarks.application.stars_service import StarsApplicationService
from gitmarks.application.view_filter import SHOW_ALL
from gitmarks.domain.entities import StarsView
from gitmarks.domain.interfaces import ISnapshotStore
from gitmarks.infrastructure.file_storage import JsonFileSnapshotStore
from gitmarks.infrastructure.github_client import GITHUB_API_URL, REQUEST_TIMEOUT, GitHubStarsClient
from gitmarks.infrastructure.memory_storage import InMemorySnapshotStore
from gitmarks.infrastructure.postgres_storage import PostgresSnapshotStore
from gitmarks.presentation import render_languages, render_view

log = logging.getLogger("gitmarks")

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_CACHE_DIR = "~/.cache/gitmarks"


@dataclass(frozen=True)
class Settings:
    api_url:      str
    token:        str | None
    cache_dir:    str
    database_url: str | None
    timeout:      float


def _read_env(environ=os.environ) -> Settings:
    """Everything is optional; a bad GITMARKS_TIMEOUT fails fast."""
    raw_timeout = environ.get("GITMARKS_TIMEOUT")
    try:
        timeout = float(raw_timeout) if raw_timeout else REQUEST_TIMEOUT
    except ValueError:
        log.error("GITMARKS_TIMEOUT must be a number of seconds, got %r", raw_timeout)
        sys.exit(2)

    return Settings(
        api_url      = environ.get("GITHUB_API_URL") or GITHUB_API_URL,
        token        = environ.get("GITHUB_TOKEN") or None,
        cache_dir    = environ.get("GITMARKS_CACHE_DIR") or DEFAULT_CACHE_DIR,
        database_url = environ.get("DATABASE_URL") or None,
        timeout      = timeout,
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitmarks",
        description="Browse a GitHub user's starred repositories, cached locally",
    )
    parser.add_argument("user", help="GitHub username, or a URL/path whose first segment is the username")
    parser.add_argument("--language", default=SHOW_ALL, help=f"Only show repos in this language (default: {SHOW_ALL})")
    parser.add_argument("--languages", action="store_true", help="List the languages present instead of the repos")
    parser.add_argument("--reload", action="store_true", help="Drop the cached copy and fetch again")
    parser.add_argument("--cache-dir", default=None, help=f"Cache directory (default: $GITMARKS_CACHE_DIR or {DEFAULT_CACHE_DIR})")
    parser.add_argument("--no-cache", action="store_true", help="Keep the cache in memory for this run only")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


# ---------------------------------------------------------------------------
# Dependency wiring
# ---------------------------------------------------------------------------

async def build_and_run(args: argparse.Namespace, settings: Settings, store: ISnapshotStore, transport: httpx.AsyncBaseTransport | None = None) -> StarsView:
    """
    Wires the fetcher and engine around `store` and executes the use case.

    `transport` lets tests plug an httpx.MockTransport in; None means the
    real network.
    """
    client = httpx.AsyncClient(transport=transport)
    try:
        fetcher = GitHubStarsClient(
            client   = client,            # injected — the client doesn't create this
            base_url = settings.api_url,
            token    = settings.token,
            timeout  = settings.timeout,
        )
        engine  = PaginationEngine(fetcher=fetcher, store=store)
        service = StarsApplicationService(engine=engine, store=store)

        if args.reload:
            return await service.reload_location(args.user)
        return await service.open_location(args.user)
    finally:
        await client.aclose()


def _open_store(args: argparse.Namespace, settings: Settings):
    """Returns (store, connection-or-None). The caller closes the connection."""
    if args.no_cache:
        return InMemorySnapshotStore(), None
    if settings.database_url:
        conn  = psycopg2.connect(settings.database_url)
        store = PostgresSnapshotStore(conn=conn)
        store.ensure_schema()
        return store, conn
    return JsonFileSnapshotStore(args.cache_dir or settings.cache_dir), None


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    settings = _read_env()

    store, conn = _open_store(args, settings)
    try:
        view = asyncio.run(build_and_run(args, settings, store))
    finally:
        if conn is not None:
            conn.close()

    if args.languages and view.ok:
        print(render_languages(view))
    else:
        print(render_view(view, args.language))

    if view.cache_error:
        log.warning("Rows shown but not cached: %s", view.cache_error)

    if not view.ok:
        log.error("❌ %s", view.error_message)
        return 1
    log.info("✅ %d repos | cached=%s | requests=%d", len(view.rows), view.cached, view.requests)
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
