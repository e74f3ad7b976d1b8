"""Rubric rules — pure predicates over already-fetched entities.

Each ``audit_*`` function reads its inputs and returns an :class:`AuditFindings`
fragment. None of them perform I/O. When the data a rule depends on could not
be fetched, the rule still emits a failed check with its normal weight, so the
set of checks only depends on which repositories were scanned.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional, Sequence

from .models import (
    AuditFindings,
    Category,
    Commit,
    Event,
    Impact,
    Profile,
    Readme,
    RepoFile,
    Repository,
    WorkflowList,
)

BIO_MIN_LENGTH = 20
RICH_README_MIN_LENGTH = 800
TOP_VOICE_FOLLOWERS = 500
RISING_STAR_FOLLOWERS = 100
SIGNED_COMMIT_RATIO = 0.5
RECENT_ACTIVITY_DAYS = 14
EVENT_VOLUME_MIN = 50
DISTINCT_REPOS_MIN = 2
YEARLY_CONTRIBUTIONS_MIN = 100
STARS_WITHOUT_README = 5

BADGE_PATTERN = re.compile(r"!\[.*\]\(.*badge.*\)")
TEST_FILE_PATTERN = re.compile(r"TEST|SPEC", re.IGNORECASE)
SUSPICIOUS_NAME_PATTERN = re.compile(r"secret|key|token|pwd|credential")


def _file_names(files: Sequence[RepoFile]) -> set[str]:
    return {f.name.upper() for f in files}


def _prefix(repo: Repository) -> str:
    return f"[{repo.name}]"


def audit_profile(profile: Profile, profile_readme_repo: Optional[Repository]) -> AuditFindings:
    """Score the account's public presentation."""
    c = Category.PROFILE
    findings = AuditFindings()
    add = findings.add_check

    add(c, "Professional avatar", profile.avatar_url is not None, 20,
        "Use a clear, professional and friendly photo.")
    add(c, "Real name", profile.name is not None and profile.name != profile.login, 20,
        "A real name builds more trust than a nickname.")
    add(c, "Strategic bio", profile.bio is not None and len(profile.bio) > BIO_MIN_LENGTH, 30,
        "Describe your stack, current focus and professional value.")
    add(c, "Location", bool(profile.location), 10,
        "Recruiters filter by location and time zone.")
    add(c, "Public email", bool(profile.email), 25,
        "Make it easy for recruiters and partners to reach you.")
    add(c, "Portfolio link", bool(profile.blog), 15,
        "Link your LinkedIn, portfolio or personal blog.")

    add(c, "Hireable status", profile.hireable is True, 10,
        "State explicitly that you are open to opportunities.", Impact.MEDIUM, True)
    add(c, "Company / organization", bool(profile.company), 5,
        "Shows a current professional or academic affiliation.", Impact.LOW, True)
    add(c, "Profile README", profile_readme_repo is not None, 40,
        "Create a repository named after your username to customize your profile.", Impact.HIGH, True)
    add(c, "Twitter / social", bool(profile.twitter_username), 5,
        "Link social accounts as social proof.", Impact.LOW, True)
    add(c, "Influence (Top Voice)", profile.followers > TOP_VOICE_FOLLOWERS, 50,
        "You are a reference in the community!", Impact.HIGH, True)
    add(c, "Influence (Rising Star)",
        RISING_STAR_FOLLOWERS < profile.followers <= TOP_VOICE_FOLLOWERS, 20,
        "You have a growing audience.", Impact.MEDIUM, True)

    if not profile.bio and not profile.company and not profile.blog:
        findings.add_red_flag("Ghost profile: missing basic information keeps opportunities away.")
    return findings


def audit_repository(
    repo: Repository,
    files: Sequence[RepoFile],
    readme: Optional[Readme],
    workflows: Optional[WorkflowList],
) -> AuditFindings:
    """Score the engineering hygiene of one repository."""
    c = Category.REPOSITORY
    findings = AuditFindings()
    add = findings.add_check
    names = _file_names(files)
    prefix = _prefix(repo)

    add(c, f"{prefix} Description", bool(repo.description), 10,
        "Add a short, objective description.")
    add(c, f"{prefix} Homepage", bool(repo.homepage), 5,
        "Link to a demo or documentation.", Impact.MEDIUM, True)
    add(c, f"{prefix} Topics", len(repo.topics) > 0, 10,
        "Use topics to categorize the project.", Impact.LOW, True)

    has_readme = "README.MD" in names
    content = readme.decoded() if has_readme and readme is not None else ""
    add(c, f"{prefix} README", has_readme, 20,
        "Mandatory for any serious project.")
    add(c, f"{prefix} Rich README", len(content) > RICH_README_MIN_LENGTH, 10,
        "README is too short.")
    add(c, f"{prefix} Badges", BADGE_PATTERN.search(content) is not None, 5,
        "Use badges for credibility.", Impact.LOW, True)
    if not has_readme and repo.stargazers_count > STARS_WITHOUT_README:
        findings.add_red_flag(f'Repo "{repo.name}" has stars but no README.')

    add(c, f"{prefix} .gitignore", ".GITIGNORE" in names, 10,
        "Avoid committing system files.")
    has_workflows = workflows is not None and workflows.total_count > 0
    add(c, f"{prefix} CI/CD", has_workflows, 25,
        "Automate tests and deployment.", Impact.HIGH, True)
    has_tests = any(TEST_FILE_PATTERN.search(name) for name in names)
    add(c, f"{prefix} Tests", has_tests or has_workflows, 15,
        "Untested code is technical debt.", Impact.HIGH, True)
    return findings


def audit_community(repo: Repository, files: Sequence[RepoFile]) -> AuditFindings:
    """Score governance files and community features of one repository."""
    c = Category.COMMUNITY
    findings = AuditFindings()
    add = findings.add_check
    names = _file_names(files)
    prefix = _prefix(repo)

    add(c, f"{prefix} License", repo.license is not None, 20,
        "Without a license nobody can legally use the code.")
    add(c, f"{prefix} CONTRIBUTING", "CONTRIBUTING.MD" in names, 15,
        "Guide for contributors.", Impact.MEDIUM, True)
    add(c, f"{prefix} Code of Conduct", "CODE_OF_CONDUCT.MD" in names, 10,
        "Community standards.", Impact.LOW, True)
    add(c, f"{prefix} Issue templates", "ISSUE_TEMPLATE" in names or ".GITHUB" in names, 10,
        "Standardize bug reports.", Impact.LOW, True)
    add(c, f"{prefix} PR template", "PULL_REQUEST_TEMPLATE.MD" in names or ".GITHUB" in names, 10,
        "Keep pull requests consistent.", Impact.LOW, True)
    add(c, f"{prefix} Discussions", repo.has_discussions is True, 5,
        "A forum for the community.", Impact.LOW, True)
    return findings


def audit_security(
    repo: Repository,
    files: Sequence[RepoFile],
    commits: Optional[Sequence[Commit]],
) -> AuditFindings:
    """Score security practices of one repository."""
    c = Category.SECURITY
    findings = AuditFindings()
    add = findings.add_check
    names = _file_names(files)
    prefix = _prefix(repo)

    add(c, f"{prefix} SECURITY.md", "SECURITY.MD" in names, 20,
        "Publish a security policy.", Impact.HIGH, True)

    signed_ratio = 0.0
    if commits:
        signed_ratio = sum(1 for commit in commits if commit.is_verified) / len(commits)
    add(c, f"{prefix} Signed commits", signed_ratio > SIGNED_COMMIT_RATIO, 20,
        "Sign your commits so they show as Verified.", Impact.MEDIUM, True)

    add(c, f"{prefix} Main branch", repo.default_branch == "main", 5,
        "Use 'main' as the default branch.", Impact.LOW, True)
    if SUSPICIOUS_NAME_PATTERN.search(repo.name):
        findings.add_red_flag(f'Repo "{repo.name}" has a suspicious name.')
    return findings


def audit_activity(
    events: Sequence[Event],
    profile: Profile,
    contributions_last_year: Optional[int],
    now: Optional[datetime] = None,
) -> AuditFindings:
    """Score how recently and how broadly the account has been active.

    ``events`` are expected newest first, as the events API returns them.
    """
    c = Category.ACTIVITY
    findings = AuditFindings()
    add = findings.add_check
    now = now or datetime.now(timezone.utc)

    days_since_last = None
    if events:
        last = events[0].created_at
        if last.tzinfo is None:
            last = last.replace(tzinfo=timezone.utc)
        days_since_last = (now - last).total_seconds() / 86400

    add(c, "Recent activity", days_since_last is not None and days_since_last < RECENT_ACTIVITY_DAYS, 30,
        "Stay consistent. An idle account looks abandoned.")
    add(c, "Contribution volume", len(events) > EVENT_VOLUME_MIN, 20,
        "Show a steady volume of active work.")
    repos_touched = {e.repo.name for e in events}
    add(c, "Project diversity", len(repos_touched) > DISTINCT_REPOS_MIN, 15,
        "Do not work on a single repository only.")
    add(c, "Yearly contributions",
        contributions_last_year is not None and contributions_last_year >= YEARLY_CONTRIBUTIONS_MIN, 20,
        f"Aim for at least {YEARLY_CONTRIBUTIONS_MIN} contributions a year.")

    external = [e for e in events if not e.repo.name.startswith(profile.login)]
    add(c, "External collaboration", len(external) > 0, 25,
        "Contribute to projects you do not own (real open source).", Impact.HIGH, True)
    return findings
