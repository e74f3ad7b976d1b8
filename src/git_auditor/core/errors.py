"""Exceptions raised by the fetch layer and the orchestrator."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional


class FetchErrorKind(str, Enum):
    """Why a request failed."""

    INVALID_CREDENTIAL = "invalid_credential"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    UNEXPECTED = "unexpected"
    NETWORK = "network"


_MESSAGES = {
    FetchErrorKind.INVALID_CREDENTIAL: "Invalid or expired token. Please supply a valid credential.",
    FetchErrorKind.RATE_LIMITED: "API rate limit exceeded for every available token.",
    FetchErrorKind.TIMEOUT: "The GitHub API took too long to respond.",
    FetchErrorKind.UNEXPECTED: "Unexpected API response.",
    FetchErrorKind.NETWORK: "Network error while contacting the GitHub API.",
}


class FetchError(Exception):
    """A request the fetch layer could not recover from."""

    def __init__(
        self,
        kind: FetchErrorKind,
        url: str = "",
        status: Optional[int] = None,
        retry_after: Optional[datetime] = None,
        cause: Optional[BaseException] = None,
    ):
        self.kind = kind
        self.url = url
        self.status = status
        self.retry_after = retry_after
        self.cause = cause
        super().__init__(self._describe())

    def _describe(self) -> str:
        message = _MESSAGES[self.kind]
        if self.kind is FetchErrorKind.UNEXPECTED and self.status is not None:
            message = f"Unexpected API response (HTTP {self.status})."
        elif self.kind is FetchErrorKind.RATE_LIMITED and self.retry_after is not None:
            message += f" Retry after {self.retry_after.isoformat()}."
        elif self.kind is FetchErrorKind.NETWORK and self.cause is not None:
            message += f" {self.cause}"
        return message


class AccountNotFoundError(LookupError):
    """The requested account does not exist."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"User '{username}' not found.")


class InvalidUsernameError(ValueError):
    """The username is not a syntactically valid GitHub login."""
