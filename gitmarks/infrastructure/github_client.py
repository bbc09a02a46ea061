from __future__ import annotations

import logging
from typing import Any

import httpx

from gitmarks.domain.errors import IdentityNotFound, TransportError
from gitmarks.domain.interfaces import IPageFetcher

log = logging.getLogger(__name__)

GITHUB_API_URL  = "https://api.github.com"
# maximum per_page GitHub allows (https://docs.github.com/rest/using-the-rest-api/using-pagination-in-the-rest-api)
PER_PAGE        = 100
REQUEST_TIMEOUT = 30.0


class GitHubStarsClient(IPageFetcher):
    """
    Concrete implementation of IPageFetcher for GitHub's REST starred endpoint.

    The constructor receives an httpx.AsyncClient (injected) rather than
    creating one internally. This lets callers control the client lifecycle
    and makes testing trivial — just pass in a client with a MockTransport.

    One call = one HTTP request. Nothing is retried here.
    """

    page_size = PER_PAGE

    def __init__(self, client: httpx.AsyncClient, base_url: str = GITHUB_API_URL, token: str | None = None, timeout: float = REQUEST_TIMEOUT) -> None:
        self._client   = client
        self._base_url = base_url.rstrip("/")
        self._timeout  = timeout
        self._headers  = {"Accept": "application/vnd.github+json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def page_url(self, identity: str) -> str:
        return f"{self._base_url}/users/{identity}/starred"

    async def fetch_page(self, identity: str, page: int) -> list[dict[str, Any]]:
        """
        Fetch one page of starred repositories.

        404          → IdentityNotFound
        other non-200 → TransportError
        network error → TransportError
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")

        try:
            response = await self._client.get(
                self.page_url(identity),
                headers=self._headers,
                params={"per_page": self.page_size, "page": page},
                timeout=self._timeout,
            )
        except httpx.RequestError as exc:
            log.warning("Network error fetching page %d for %s: %s", page, identity, exc)
            raise TransportError() from exc

        if response.status_code == 404:
            raise IdentityNotFound(identity)
        if response.status_code != 200:
            log.warning("GitHub answered %d for %s page %d", response.status_code, identity, page)
            raise TransportError(status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            log.warning("Unparsable body for %s page %d: %s", identity, page, exc)
            raise TransportError(status_code=response.status_code) from exc

        if not isinstance(data, list):
            log.warning("Expected a JSON array for %s page %d, got %s", identity, page, type(data).__name__)
            raise TransportError(status_code=response.status_code)

        log.debug("Page %d for %s: %d records", page, identity, len(data))
        return data
