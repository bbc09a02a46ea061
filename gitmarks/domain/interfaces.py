"""
Domain Layer — Interfaces (Abstract Contracts)
-----------------------------------------------
These are ABSTRACT definitions of what the infrastructure must provide.
The domain layer defines the shape; the infrastructure layer implements it.

The application layer (pagination engine, stars service) depends only on
these, so a FakePageFetcher or an InMemorySnapshotStore can be swapped in
for tests without changing a single line of application code.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any

from .entities import Snapshot


class IPageFetcher(ABC):
    """
    Contract that any starred-repositories API client must fulfil.
    The pagination engine depends on THIS, not on the concrete GitHub client.
    """

    page_size: int

    @abstractmethod
    async def fetch_page(self, identity: str, page: int) -> list[dict[str, Any]]:
        """
        Fetch one page of raw starred-repository records.

        Returns the records in upstream order. An empty list is a valid
        result meaning "no more data".

        Raises:
            IdentityNotFound — upstream says the identity does not exist
            TransportError   — any other failure; never retried here
        """
        ...


class ISnapshotStore(ABC):
    """
    Contract that any durable cache backend must fulfil.
    Swap the file store for PostgreSQL without touching application code.
    """

    @abstractmethod
    def read(self, key: str) -> Snapshot | None:
        """Return the stored snapshot, or None if absent OR malformed."""
        ...

    @abstractmethod
    def write(self, key: str, snapshot: Snapshot) -> None:
        """Overwrite the entry. Raises CacheWriteFailure on failure."""
        ...

    @abstractmethod
    def clear(self, key: str) -> None:
        """Remove the entry. A missing entry is not an error; raises CacheWriteFailure on failure."""
        ...
