"""Derived views over an audit result for presentation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from pydantic import BaseModel

from .core.models import AuditResult, Category, CheckRecord, Profile, Repository

CATEGORY_LABELS = {
    Category.PROFILE: "Profile & Brand",
    Category.REPOSITORY: "Engineering",
    Category.COMMUNITY: "Governance",
    Category.SECURITY: "Security",
    Category.ACTIVITY: "Activity",
}


class AccountStats(BaseModel):
    years: int
    repo_count: int
    repos_per_year: float
    volume_label: str
    volume_hint: str
    seniority_label: str
    seniority_hint: str


def top_actions(result: AuditResult, limit: int = 6) -> list[CheckRecord]:
    """Failed core checks, heaviest first."""
    failures = [c for c in result.checks if not c.passed and not c.is_bonus]
    failures.sort(key=lambda c: c.weight, reverse=True)
    return failures[:limit]


def influence_badge(profile: Profile) -> Optional[str]:
    if profile.followers > 500:
        return "FAMOUS"
    if profile.followers > 100:
        return "RISING"
    return None


def account_stats(
    profile: Profile,
    source_repos: Sequence[Repository],
    now: Optional[datetime] = None,
) -> AccountStats:
    now = now or datetime.now(timezone.utc)
    created_year = profile.created_at.year if profile.created_at else now.year
    raw_years = now.year - created_year
    years = max(1, raw_years)
    repo_count = len(source_repos)
    ratio = repo_count / years

    volume_hint = f"Average of {ratio:.1f} repositories/year."
    if ratio < 2:
        volume_label = "LOW"
        volume_hint += " Consider publishing more projects."
    elif ratio > 8:
        volume_label = "HIGH"
        volume_hint += " Great production volume!"
    else:
        volume_label = "HEALTHY"
        volume_hint += " Volume in line with the average."

    seniority_hint = f"Account created in {created_year}."
    if raw_years < 1:
        seniority_label = "NEW"
        seniority_hint += " Recent account (little history)."
    elif raw_years <= 3:
        seniority_label = "ACTIVE"
        seniority_hint += " History under construction."
    elif raw_years <= 7:
        seniority_label = "SOLID"
        seniority_hint += " Profile with good longevity."
    else:
        seniority_label = "PIONEER"
        seniority_hint += " High authority and track record."

    return AccountStats(
        years=years,
        repo_count=repo_count,
        repos_per_year=round(ratio, 1),
        volume_label=volume_label,
        volume_hint=volume_hint,
        seniority_label=seniority_label,
        seniority_hint=seniority_hint,
    )


def recruiter_feedback(result: AuditResult) -> str:
    """How a technical recruiter would likely read this profile."""
    score = result.global_score
    if score >= 90:
        feedback = (
            "This profile inspires a lot of technical confidence. A clear bio, a professional photo "
            "and well documented repositories make a recruiter's job easy. Definitely worth a "
            "technical interview."
        )
    elif score >= 70:
        feedback = (
            "The profile is solid with good signals. More detail on the main projects (fuller READMEs) "
            "would help gauge the complexity of the work. A strong candidate who can polish the presentation."
        )
    elif score >= 50:
        feedback = (
            "There is potential, but the profile looks a bit incomplete. Missing information and "
            "documentation raise doubts about seniority. Invest in showcasing the projects."
        )
    else:
        feedback = (
            "The profile needs urgent attention. Basic contact information and project context are "
            "missing. Without recent activity or clear documentation it looks abandoned."
        )

    profile_score = result.categories.get(Category.PROFILE, 0)
    repo_score = result.categories.get(Category.REPOSITORY, 0)
    if profile_score < 50:
        feedback += " Tip: improve your bio and photo to make a better first impression."
    elif repo_score < 50:
        feedback += " Tip: your repositories need better READMEs to sell your work."
    return feedback
