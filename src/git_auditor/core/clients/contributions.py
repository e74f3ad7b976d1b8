"""Contribution-count client.

Uses the public github-contributions API, which scrapes the contribution
calendar shown on GitHub profiles. No authentication required.
API docs: https://github.com/grubersjoe/github-contributions-api
"""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import FetchError
from .github import GitHubClient

logger = logging.getLogger(__name__)

API_BASE = "https://github-contributions-api.jogruber.de/v4"


async def fetch_contribution_count(client: GitHubClient, username: str) -> Optional[int]:
    """Return the number of contributions over the last year.

    Returns ``None`` when the service is unavailable or the payload is not
    understood; callers score that as "does not meet the bar".
    """
    try:
        data = await client.fetch(f"{API_BASE}/{username}?y=last")
    except FetchError as exc:
        logger.warning("Contribution count unavailable for %s: %s", username, exc)
        return None

    if not isinstance(data, dict):
        return None
    total = data.get("total", {})
    if not isinstance(total, dict):
        return None
    value = total.get("lastYear")
    if value is None and total:
        # Older payloads key totals by calendar year only.
        value = total.get(max(total))
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None
