"""GitHub REST API client."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

logger = logging.getLogger(__name__)

from ..cache import FileCache
from .rate_limit import RateLimitMonitor

BASE_URL = "https://api.github.com"


class GitHubClient:
    """Async GitHub REST API client with pagination and rate limit support."""

    def __init__(
        self,
        token: str | None = None,
        concurrency: int = 5,
        no_cache: bool = False,
        base_url: str | None = None,
        verify_ssl: bool = True,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            logger.info("No token given, using unauthenticated requests")
        self._client = httpx.AsyncClient(
            base_url=base_url or BASE_URL,
            headers=headers,
            timeout=30.0,
            verify=verify_ssl,
        )
        self._rate_limit = RateLimitMonitor()
        self._semaphore = asyncio.Semaphore(concurrency)
        self._cache: FileCache | None = None if no_cache else FileCache()

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _get(
        self, url: str, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        async with self._semaphore:
            await self._rate_limit.wait_if_needed()
            logger.debug("GET %s %s", url, params or "")
            response = await self._client.get(url, params=params)
            self._rate_limit.update(response)
            response.raise_for_status()
            return response

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._get(url, params)
        return response.json()

    async def _cached(
        self,
        load: Callable[[str, dict[str, Any]], Awaitable[Any]],
        url: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Serve ``load(url, params)`` from the file cache when a fresh copy exists."""
        params = dict(params or {})
        if self._cache is not None:
            cached = self._cache.get(url, params)
            if cached is not None:
                return cached
        data = await load(url, params)
        if self._cache is not None:
            self._cache.set(url, params, data)
        return data

    async def _paginate(
        self, url: str, params: dict[str, Any] | None = None
    ) -> list[Any]:
        results: list[Any] = []
        params = dict(params or {})
        params.setdefault("per_page", 100)
        next_url: str | None = url
        pages = 0

        while next_url is not None:
            response = await self._get(next_url, params)
            pages += 1
            data = response.json()
            if isinstance(data, list):
                results.extend(data)
            else:
                results.append(data)

            next_url = response.links.get("next", {}).get("url")
            # the next-page URL already carries the query string
            params = {}

        logger.debug("%s: %d item(s) over %d page(s)", url, len(results), pages)
        return results

    async def get_org(self, org: str) -> dict[str, Any]:
        """Get organization metadata. Raises httpx.HTTPStatusError on 404."""
        return await self._cached(self._get_json, f"/orgs/{org}")

    async def list_repos(self, org: str) -> list[dict[str, Any]]:
        """List every public repository of an organization, all pages."""
        return await self._cached(
            self._paginate,
            f"/orgs/{org}/repos",
            params={"type": "public"},
        )
