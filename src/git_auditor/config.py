"""Run configuration, read from environment variables.

Every value has a default, so an audit works with no configuration at all
(unauthenticated, with the reduced deep-scan limit).
"""

from __future__ import annotations

import os
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from .core.clients.github import API_BASE
from .core.models import Category
from .core.scoring import DEFAULT_CATEGORY_WEIGHTS

DEFAULT_DATA_DIR = os.path.expanduser("~/.git-auditor")

ANONYMOUS_DEEP_SCAN_LIMIT = 3


def split_tokens(raw: Optional[str]) -> list[str]:
    """Split a comma-separated token list, dropping blanks."""
    if not raw:
        return []
    return [t.strip() for t in raw.split(",") if t.strip()]


class AuditConfig(BaseModel):
    """Everything one audit run needs to know up front."""

    tokens: list[str] = Field(default_factory=list)
    api_base: str = API_BASE
    cache_max_entries: int = Field(500, ge=1)
    cache_ttl_seconds: float = Field(300.0, gt=0)
    request_timeout_seconds: float = Field(15.0, gt=0)
    max_repos: int = Field(50, ge=1, le=100)
    deep_scan_limit: int = Field(10, ge=0)
    event_pages: int = Field(3, ge=1)
    category_weights: dict[Category, int] = Field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_WEIGHTS)
    )

    @property
    def effective_deep_scan_limit(self) -> int:
        """Without tokens the hourly quota only covers a few repositories."""
        if self.tokens:
            return self.deep_scan_limit
        return min(self.deep_scan_limit, ANONYMOUS_DEEP_SCAN_LIMIT)

    def with_tokens(self, tokens: Iterable[str]) -> AuditConfig:
        """Return a copy with ``tokens`` tried before the configured ones."""
        extra = [t for raw in tokens for t in split_tokens(raw)]
        merged = list(dict.fromkeys(extra + self.tokens))
        return self.model_copy(update={"tokens": merged})

    @classmethod
    def from_env(cls) -> AuditConfig:
        tokens = split_tokens(os.environ.get("GITHUB_TOKENS", ""))
        tokens += split_tokens(os.environ.get("GITHUB_TOKEN", ""))
        return cls(
            tokens=list(dict.fromkeys(tokens)),
            api_base=os.environ.get("GITHUB_API_BASE", API_BASE),
            cache_max_entries=int(os.environ.get("AUDIT_CACHE_MAX_ENTRIES", "500")),
            cache_ttl_seconds=float(os.environ.get("AUDIT_CACHE_TTL_SECONDS", "300")),
            request_timeout_seconds=float(os.environ.get("AUDIT_REQUEST_TIMEOUT_SECONDS", "15")),
            max_repos=int(os.environ.get("AUDIT_MAX_REPOS", "50")),
            deep_scan_limit=int(os.environ.get("AUDIT_DEEP_SCAN_LIMIT", "10")),
            event_pages=int(os.environ.get("AUDIT_EVENT_PAGES", "3")),
        )
