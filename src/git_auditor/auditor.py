"""Audit orchestration.

Sequences the API calls for one account, feeds the fetched entities through
the rubric rules and hands the findings to the scoring engine.

Profile, repository listing and repository contents are required: if any of
them fails the run is aborted. Readme, commits, workflows, event pages and the
contribution count are optional: a failure only degrades the matching checks.
"""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import datetime
from typing import Awaitable, Optional, TypeVar

import httpx

from .config import AuditConfig
from .core.checks import (
    audit_activity,
    audit_community,
    audit_profile,
    audit_repository,
    audit_security,
)
from .core.clients import github
from .core.clients.contributions import fetch_contribution_count
from .core.errors import AccountNotFoundError, FetchError, InvalidUsernameError
from .core.models import AuditFindings, AuditReport, Repository
from .core.scoring import evaluate
from .core.session import AuditSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$")


def validate_username(raw: str) -> str:
    """Return the stripped username, or raise if GitHub would not accept it."""
    username = (raw or "").strip().lstrip("@")
    if not username:
        raise InvalidUsernameError("Enter a valid username.")
    if not USERNAME_PATTERN.match(username):
        raise InvalidUsernameError(f"'{username}' is not a valid GitHub username.")
    return username


async def _optional(awaitable: Awaitable[T], default: T, what: str) -> T:
    """Await a non-critical fetch, falling back to ``default`` on failure."""
    try:
        return await awaitable
    except FetchError as exc:
        logger.warning("%s unavailable: %s", what, exc)
        return default


def select_candidates(source_repos: list[Repository], limit: int) -> list[Repository]:
    """Most-starred repositories first, at most ``limit`` of them."""
    ranked = sorted(source_repos, key=lambda r: r.stargazers_count, reverse=True)
    return ranked[:limit]


async def _scan_repository(session: AuditSession, owner: str, repo: Repository) -> AuditFindings:
    client = session.client
    name = repo.name
    files, readme, commits, workflows = await asyncio.gather(
        github.fetch_contents(client, owner, name),
        _optional(github.fetch_readme(client, owner, name), None, f"README of {name}"),
        _optional(github.fetch_commits(client, owner, name), [], f"Commits of {name}"),
        _optional(github.fetch_workflows(client, owner, name), None, f"Workflows of {name}"),
    )

    findings = AuditFindings()
    findings.extend(audit_repository(repo, files, readme, workflows))
    findings.extend(audit_community(repo, files))
    findings.extend(audit_security(repo, files, commits))
    return findings


async def run_audit(
    username: str,
    session: AuditSession,
    now: Optional[datetime] = None,
) -> AuditReport:
    """Fetch everything needed for ``username`` and score it."""
    username = validate_username(username)
    config = session.config
    client = session.client
    session.reset()

    logger.info("Auditing profile of %s...", username)
    profile = await github.fetch_profile(client, username)
    if profile is None:
        raise AccountNotFoundError(username)

    logger.info("Scanning repositories...")
    repos = await github.fetch_repositories(client, username, limit=config.max_repos)
    source_repos = [r for r in repos if not r.fork]
    profile_readme_repo = next((r for r in repos if r.name.lower() == username.lower()), None)

    findings = AuditFindings()
    findings.extend(audit_profile(profile, profile_readme_repo))

    candidates = select_candidates(source_repos, config.effective_deep_scan_limit)
    logger.info("Deep scan of %d repositories...", len(candidates))
    per_repo = await asyncio.gather(*(_scan_repository(session, username, repo) for repo in candidates))
    for repo_findings in per_repo:
        findings.extend(repo_findings)

    logger.info("Analyzing activity...")
    events, contributions = await asyncio.gather(
        github.fetch_events(client, username, pages=config.event_pages),
        fetch_contribution_count(client, username),
    )
    findings.extend(audit_activity(events, profile, contributions, now=now))

    result = evaluate(findings.checks, findings.red_flags, config.category_weights)
    logger.info("Audit of %s complete: %d/100 (%s)", username, result.global_score, result.grade.value)

    return AuditReport(
        username=profile.login,
        profile=profile,
        result=result,
        source_repos=source_repos,
        scanned_repos=candidates,
        event_count=len(events),
        contributions_last_year=contributions,
    )


async def audit_account(
    username: str,
    config: AuditConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    now: Optional[datetime] = None,
) -> AuditReport:
    """Open a fresh session and run one audit in it."""
    async with AuditSession.open(config, transport=transport) as session:
        return await run_audit(username, session, now=now)
