"""GitHub REST API client.

API docs: https://docs.github.com/en/rest
Rate limit: 60 requests/hour unauthenticated, 5,000/hour per token.

Every request goes through :meth:`GitHubClient.fetch`, which consults the
response cache, rotates tokens when one is quota-exhausted, and cancels
requests that exceed the timeout.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from ..errors import FetchError, FetchErrorKind
from ..models import Commit, Event, Profile, Readme, RepoFile, Repository, WorkflowList
from .cache import MISSING, ResponseCache
from .credentials import CredentialRotator

logger = logging.getLogger(__name__)

API_BASE = "https://api.github.com"

RATE_LIMIT_STATUSES = (403, 429)


def _retry_after(response: httpx.Response) -> Optional[datetime]:
    """Work out when the quota resets from the rate-limit headers, if present."""
    reset = response.headers.get("x-ratelimit-reset")
    if reset:
        try:
            return datetime.fromtimestamp(int(reset), tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            pass
    delay = response.headers.get("retry-after")
    if delay:
        try:
            return datetime.now(timezone.utc) + timedelta(seconds=int(delay))
        except ValueError:
            pass
    return None


class GitHubClient:
    """Resilient request primitive shared by one audit run."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        cache: ResponseCache,
        rotator: CredentialRotator,
        api_base: str = API_BASE,
        timeout_seconds: float = 15.0,
    ):
        self._http = http
        self._cache = cache
        self._rotator = rotator
        self._api_base = api_base.rstrip("/")
        self._timeout_seconds = timeout_seconds

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @property
    def rotator(self) -> CredentialRotator:
        return self._rotator

    def resolve(self, endpoint: str) -> str:
        """Turn an endpoint into the absolute URL used as the cache key."""
        if endpoint.startswith(("http://", "https://")):
            return str(httpx.URL(endpoint))
        return str(httpx.URL(f"{self._api_base}/{endpoint.lstrip('/')}"))

    def _is_api_url(self, url: str) -> bool:
        target = httpx.URL(url)
        base = httpx.URL(self._api_base)
        if (target.scheme, target.host, target.port) != (base.scheme, base.host, base.port):
            return False
        prefix = base.path.rstrip("/")
        return target.path == prefix or target.path.startswith(prefix + "/")

    async def fetch(self, endpoint: str) -> Any:
        """Fetch and decode ``endpoint``.

        Returns ``None`` when the resource does not exist. Raises
        :class:`FetchError` for every failure that token rotation cannot fix.
        """
        url = self.resolve(endpoint)
        cached = self._cache.get(url)
        if cached is not MISSING:
            logger.debug("Cache hit: %s", url)
            return cached

        authenticated = self._is_api_url(url)
        while True:
            used = self._rotator.cursor
            headers = self._rotator.headers() if authenticated else {"Accept": "application/json"}
            response = await self._send(url, headers)
            status = response.status_code

            if status == 401:
                raise FetchError(FetchErrorKind.INVALID_CREDENTIAL, url=url, status=status)
            if status in RATE_LIMIT_STATUSES:
                # A concurrent request may already have moved past the token we used.
                if authenticated and (self._rotator.cursor > used or self._rotator.rotate()):
                    continue
                raise FetchError(
                    FetchErrorKind.RATE_LIMITED,
                    url=url,
                    status=status,
                    retry_after=_retry_after(response),
                )
            if status == 404:
                self._cache.set(url, None)
                return None
            if not response.is_success:
                raise FetchError(FetchErrorKind.UNEXPECTED, url=url, status=status)

            try:
                data = response.json()
            except ValueError as exc:
                raise FetchError(FetchErrorKind.UNEXPECTED, url=url, status=status, cause=exc) from exc
            self._cache.set(url, data)
            return data

    async def _send(self, url: str, headers: dict[str, str]) -> httpx.Response:
        try:
            return await asyncio.wait_for(
                self._http.get(url, headers=headers),
                timeout=self._timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("Request timed out after %.1fs: %s", self._timeout_seconds, url)
            raise FetchError(FetchErrorKind.TIMEOUT, url=url, cause=exc) from exc
        except httpx.HTTPError as exc:
            logger.warning("Request failed: %s (%s)", url, exc)
            raise FetchError(FetchErrorKind.NETWORK, url=url, cause=exc) from exc

    def page_url(self, endpoint: str, page: int, per_page: int) -> str:
        url = httpx.URL(self.resolve(endpoint))
        return str(url.copy_merge_params({"per_page": per_page, "page": page}))

    async def paginate(
        self,
        endpoint: str,
        per_page: int = 100,
        limit: Optional[int] = None,
    ) -> list:
        """Collect items of a list resource page by page.

        Stops at the first short page, or as soon as ``limit`` items are in hand.
        """
        items: list = []
        page = 1
        while limit is None or len(items) < limit:
            batch = await self.fetch(self.page_url(endpoint, page, per_page))
            if not isinstance(batch, list) or not batch:
                break
            items.extend(batch)
            if len(batch) < per_page:
                break
            page += 1
        if limit is not None:
            del items[limit:]
        return items

    async def fetch_pages(self, endpoint: str, pages: int = 3, per_page: int = 100) -> list:
        """Fetch the first ``pages`` pages concurrently and flatten them.

        A page that fails counts as empty instead of failing the whole batch.
        """
        urls = [self.page_url(endpoint, page, per_page) for page in range(1, pages + 1)]
        results = await asyncio.gather(*(self.fetch(u) for u in urls), return_exceptions=True)

        items: list = []
        for url, result in zip(urls, results):
            if isinstance(result, FetchError):
                logger.warning("Page fetch failed, treating as empty: %s (%s)", url, result)
                continue
            if isinstance(result, BaseException):
                raise result
            if isinstance(result, list):
                items.extend(result)
        return items


# ─── Typed resource helpers ──────────────────────────────────────────────────


def _parse_list(model, payload: Any) -> list:
    """Validate each element of a list payload, skipping malformed ones."""
    if not isinstance(payload, list):
        return []
    parsed = []
    for item in payload:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as exc:
            logger.debug("Skipping malformed %s record: %s", model.__name__, exc)
    return parsed


async def fetch_profile(client: GitHubClient, username: str) -> Optional[Profile]:
    data = await client.fetch(f"/users/{username}")
    if data is None:
        return None
    return Profile.model_validate(data)


async def fetch_repositories(client: GitHubClient, username: str, limit: int = 50) -> list[Repository]:
    """Fetch the account's own repositories, most recently updated first."""
    data = await client.fetch(f"/users/{username}/repos?per_page={limit}&sort=updated&type=owner")
    return _parse_list(Repository, data)


async def fetch_contents(client: GitHubClient, owner: str, repo: str) -> list[RepoFile]:
    data = await client.fetch(f"/repos/{owner}/{repo}/contents")
    return _parse_list(RepoFile, data)


async def fetch_readme(client: GitHubClient, owner: str, repo: str) -> Optional[Readme]:
    data = await client.fetch(f"/repos/{owner}/{repo}/readme")
    if not isinstance(data, dict):
        return None
    try:
        return Readme.model_validate(data)
    except ValidationError as exc:
        logger.warning("Malformed README payload for %s/%s: %s", owner, repo, exc)
        return None


async def fetch_commits(client: GitHubClient, owner: str, repo: str, limit: int = 10) -> list[Commit]:
    data = await client.fetch(f"/repos/{owner}/{repo}/commits?per_page={limit}")
    return _parse_list(Commit, data)


async def fetch_workflows(client: GitHubClient, owner: str, repo: str) -> Optional[WorkflowList]:
    data = await client.fetch(f"/repos/{owner}/{repo}/actions/workflows")
    if not isinstance(data, dict):
        return None
    try:
        return WorkflowList.model_validate(data)
    except ValidationError as exc:
        logger.warning("Malformed workflows payload for %s/%s: %s", owner, repo, exc)
        return None


async def fetch_events(client: GitHubClient, username: str, pages: int = 3) -> list[Event]:
    """Fetch recent public events, newest first, across ``pages`` pages in parallel."""
    data = await client.fetch_pages(f"/users/{username}/events", pages=pages, per_page=100)
    return _parse_list(Event, data)
