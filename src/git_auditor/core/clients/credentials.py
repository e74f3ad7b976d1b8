"""Ordered token sequence with a cursor that advances on quota exhaustion."""

from __future__ import annotations

import logging
from typing import Iterable

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "application/vnd.github.v3+json"


class CredentialRotator:
    """Hands out auth headers for the current token and rotates on demand.

    The cursor only moves forward during a run; :meth:`reset` rewinds it at the
    start of the next one.
    """

    def __init__(self, tokens: Iterable[str] = ()):
        self._tokens = [t.strip() for t in tokens if t and t.strip()]
        self._cursor = 0

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> str | None:
        if self._cursor < len(self._tokens):
            return self._tokens[self._cursor]
        return None

    def headers(self) -> dict[str, str]:
        headers = {"Accept": ACCEPT_HEADER}
        token = self.current
        if token:
            headers["Authorization"] = f"token {token}"
        return headers

    def has_next(self) -> bool:
        return self._cursor < len(self._tokens) - 1

    def rotate(self) -> bool:
        """Advance to the next token. Returns False when none is left."""
        if not self.has_next():
            return False
        self._cursor += 1
        logger.warning("Rotating to token #%d of %d", self._cursor + 1, len(self._tokens))
        return True

    def reset(self) -> None:
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._tokens)
