"""Per-run session context.

An :class:`AuditSession` owns the mutable state of one audit run — the
response cache, the token cursor and the HTTP connection pool — so nothing
leaks from one run into the next.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

import httpx

from .clients.cache import ResponseCache
from .clients.credentials import CredentialRotator
from .clients.github import GitHubClient

if TYPE_CHECKING:
    from ..config import AuditConfig

logger = logging.getLogger(__name__)


class AuditSession:
    """Cache, rotator and client shared by every request of one run."""

    def __init__(self, config: AuditConfig, client: GitHubClient):
        self.config = config
        self.client = client

    @property
    def cache(self) -> ResponseCache:
        return self.client.cache

    @property
    def rotator(self) -> CredentialRotator:
        return self.client.rotator

    def reset(self) -> None:
        """Forget cached responses and go back to the first token."""
        self.cache.clear()
        self.rotator.reset()

    @classmethod
    @asynccontextmanager
    async def open(
        cls,
        config: AuditConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> AsyncIterator[AuditSession]:
        """Create a fresh session; the HTTP client is closed on exit."""
        cache = ResponseCache(
            max_entries=config.cache_max_entries,
            ttl_seconds=config.cache_ttl_seconds,
        )
        rotator = CredentialRotator(config.tokens)
        timeout = httpx.Timeout(config.request_timeout_seconds, connect=min(10.0, config.request_timeout_seconds))
        async with httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=True) as http:
            client = GitHubClient(
                http,
                cache,
                rotator,
                api_base=config.api_base,
                timeout_seconds=config.request_timeout_seconds,
            )
            session = cls(config, client)
            session.reset()
            logger.debug("Audit session opened with %d token(s)", len(rotator))
            yield session
