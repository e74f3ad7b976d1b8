"""Pydantic data models — the shared business objects.

Entity models mirror the GitHub REST payloads the auditor consumes. Unknown
fields are ignored and absent optional fields are ``None``, so rule checks can
test for missing data explicitly instead of relying on falsy values.
"""

from __future__ import annotations

import base64
import binascii
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Rubric category."""

    PROFILE = "profile"
    REPOSITORY = "repository"
    COMMUNITY = "community"
    SECURITY = "security"
    ACTIVITY = "activity"


class Impact(str, Enum):
    """How much fixing a failed check matters."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Grade(str, Enum):
    """Letter grade derived from the global score."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


# ─── Entities ────────────────────────────────────────────────────────────────


class _Entity(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Profile(_Entity):
    """A GitHub user record (``/users/{username}``)."""

    login: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    company: Optional[str] = None
    blog: Optional[str] = None
    location: Optional[str] = None
    email: Optional[str] = None
    hireable: Optional[bool] = None
    twitter_username: Optional[str] = None
    followers: int = 0
    following: int = 0
    public_repos: int = 0
    html_url: Optional[str] = None
    created_at: Optional[datetime] = None


class License(_Entity):
    key: Optional[str] = None
    name: Optional[str] = None
    spdx_id: Optional[str] = None


class Repository(_Entity):
    """A repository record from the owner's repository listing."""

    name: str
    full_name: Optional[str] = None
    description: Optional[str] = None
    homepage: Optional[str] = None
    html_url: Optional[str] = None
    language: Optional[str] = None
    topics: list[str] = Field(default_factory=list)
    fork: bool = False
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    license: Optional[License] = None
    has_discussions: Optional[bool] = None
    default_branch: Optional[str] = None


class RepoFile(_Entity):
    """One entry of a repository root listing (``/repos/{o}/{r}/contents``)."""

    name: str
    path: Optional[str] = None
    type: Optional[str] = None


class Readme(_Entity):
    """README record; ``content`` is base64 as served by the API."""

    name: Optional[str] = None
    content: str = ""
    encoding: str = "base64"

    def decoded(self) -> str:
        """Return the README text, or an empty string when undecodable."""
        if self.encoding != "base64":
            return self.content
        try:
            raw = base64.b64decode(self.content, validate=False)
        except (binascii.Error, ValueError):
            return ""
        return raw.decode("utf-8", errors="replace")


class Verification(_Entity):
    verified: bool = False
    reason: Optional[str] = None


class CommitDetail(_Entity):
    message: Optional[str] = None
    verification: Optional[Verification] = None


class Commit(_Entity):
    """A commit record from ``/repos/{o}/{r}/commits``."""

    sha: Optional[str] = None
    commit: CommitDetail = Field(default_factory=CommitDetail)

    @property
    def is_verified(self) -> bool:
        verification = self.commit.verification
        return verification is not None and verification.verified


class WorkflowList(_Entity):
    """Workflow listing (``/repos/{o}/{r}/actions/workflows``)."""

    total_count: int = 0


class EventRepo(_Entity):
    name: str


class Event(_Entity):
    """A public event from ``/users/{username}/events``."""

    type: Optional[str] = None
    repo: EventRepo
    created_at: datetime


# ─── Audit records ───────────────────────────────────────────────────────────


class CheckRecord(BaseModel):
    """The outcome of one rubric rule."""

    model_config = ConfigDict(frozen=True)

    category: Category
    label: str
    passed: bool
    weight: float = Field(gt=0)
    tip: str
    impact: Impact = Impact.MEDIUM
    is_bonus: bool = False


class CategoryScore(BaseModel):
    """Achieved and attainable weight for one category."""

    total: float = 0.0
    max: float = 0.0
    percentage: int = Field(0, ge=0, le=100)


class AuditFindings(BaseModel):
    """Checks and red flags accumulated while evaluating fetched entities."""

    checks: list[CheckRecord] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)

    def add_check(
        self,
        category: Category,
        label: str,
        passed: bool,
        weight: float,
        tip: str,
        impact: Impact = Impact.MEDIUM,
        is_bonus: bool = False,
    ) -> None:
        self.checks.append(CheckRecord(
            category=category,
            label=label,
            passed=bool(passed),
            weight=weight,
            tip=tip,
            impact=impact,
            is_bonus=is_bonus,
        ))

    def add_red_flag(self, message: str) -> None:
        self.red_flags.append(message)

    def extend(self, other: AuditFindings) -> None:
        self.checks.extend(other.checks)
        self.red_flags.extend(other.red_flags)


class AuditResult(BaseModel):
    """Final scores of one audit run."""

    model_config = ConfigDict(frozen=True)

    categories: dict[Category, int]
    category_scores: dict[Category, CategoryScore] = Field(default_factory=dict)
    global_score: int = Field(ge=0, le=100)
    grade: Grade
    checks: list[CheckRecord] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)
    computed_at: datetime = Field(default_factory=datetime.utcnow)


class AuditReport(BaseModel):
    """Everything presentation needs about one audit run."""

    username: str
    profile: Profile
    result: AuditResult
    source_repos: list[Repository] = Field(default_factory=list)
    scanned_repos: list[Repository] = Field(default_factory=list)
    event_count: int = 0
    contributions_last_year: Optional[int] = None
