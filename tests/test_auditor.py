"""End-to-end tests of the audit orchestration against a fake GitHub."""

from datetime import datetime, timedelta, timezone

import pytest

from git_auditor.auditor import audit_account, run_audit, select_candidates, validate_username
from git_auditor.config import AuditConfig
from git_auditor.core.errors import (
    AccountNotFoundError,
    FetchError,
    FetchErrorKind,
    InvalidUsernameError,
)
from git_auditor.core.models import Category, Repository
from git_auditor.core.session import AuditSession

API = "https://api.github.com"
CONTRIBUTIONS = "https://github-contributions-api.jogruber.de/v4/octocat?y=last"
NOW = datetime(2026, 10, 19, tzinfo=timezone.utc)


@pytest.fixture
def octocat(fake_github, encode_readme):
    gh = fake_github
    gh.add(f"{API}/users/octocat", {
        "login": "octocat",
        "name": "The Octocat",
        "avatar_url": "https://avatars.example/583231",
        "bio": "Mascot, occasional contributor, full-time cat",
        "blog": "https://github.blog",
        "location": "San Francisco",
        "followers": 150,
        "created_at": "2011-01-25T18:44:36Z",
    })
    gh.add(f"{API}/users/octocat/repos?per_page=50&sort=updated&type=owner", [
        {"name": "octocat", "stargazers_count": 0},
        {"name": "hello-world", "stargazers_count": 10, "description": "My first repo",
         "license": {"key": "mit"}, "default_branch": "main"},
        {"name": "forked", "fork": True, "stargazers_count": 99},
    ])
    gh.add(f"{API}/repos/octocat/hello-world/contents", [
        {"name": "README.md", "type": "file"},
        {"name": ".gitignore", "type": "file"},
    ])
    gh.add(f"{API}/repos/octocat/hello-world/readme", {"content": encode_readme("# Hello\n" + "text " * 200)})
    gh.add(f"{API}/repos/octocat/hello-world/commits?per_page=10", [
        {"sha": "1", "commit": {"verification": {"verified": True}}},
    ])
    gh.add(f"{API}/repos/octocat/hello-world/actions/workflows", {"message": "boom"}, status=500)
    gh.add(f"{API}/repos/octocat/octocat/contents", [{"name": "README.md"}])
    gh.add(f"{API}/users/octocat/events?per_page=100&page=1", [
        {"type": "PushEvent", "repo": {"name": "octocat/hello-world"},
         "created_at": (NOW - timedelta(days=2)).isoformat()},
        {"type": "PullRequestEvent", "repo": {"name": "cli/cli"},
         "created_at": (NOW - timedelta(days=3)).isoformat()},
    ])
    gh.add(f"{API}/users/octocat/events?per_page=100&page=2", [])
    gh.add(CONTRIBUTIONS, {"total": {"lastYear": 320}})
    return gh


@pytest.mark.asyncio
async def test_full_audit(octocat):
    report = await audit_account("octocat", AuditConfig(), transport=octocat.transport(), now=NOW)

    assert report.username == "octocat"
    assert [r.name for r in report.scanned_repos] == ["hello-world", "octocat"]
    assert [r.name for r in report.source_repos] == ["octocat", "hello-world"]
    assert report.event_count == 2
    assert report.contributions_last_year == 320

    result = report.result
    assert set(result.categories) == set(Category)
    assert 0 <= result.global_score <= 100
    assert all(0 <= pct <= 100 for pct in result.categories.values())

    checks = {c.label: c for c in result.checks}
    assert checks["Profile README"].passed
    assert checks["Influence (Rising Star)"].passed
    assert checks["[hello-world] Rich README"].passed
    assert checks["[hello-world] Signed commits"].passed
    # Workflows failed to load: scored as absent, run not aborted.
    assert not checks["[hello-world] CI/CD"].passed
    assert checks["Recent activity"].passed
    assert checks["External collaboration"].passed
    assert checks["Yearly contributions"].passed
    assert "[forked] Description" not in checks


@pytest.mark.asyncio
async def test_contribution_service_down_degrades_check(octocat):
    octocat.add(CONTRIBUTIONS, {"message": "down"}, status=503)

    report = await audit_account("octocat", AuditConfig(), transport=octocat.transport(), now=NOW)

    checks = {c.label: c for c in report.result.checks}
    assert report.contributions_last_year is None
    assert not checks["Yearly contributions"].passed
    assert checks["Yearly contributions"].weight == 20


@pytest.mark.asyncio
async def test_unknown_account(fake_github):
    with pytest.raises(AccountNotFoundError):
        await audit_account("nobody", AuditConfig(), transport=fake_github.transport())


@pytest.mark.asyncio
async def test_contents_failure_aborts_run(octocat):
    octocat.add(f"{API}/repos/octocat/hello-world/contents", {"message": "boom"}, status=500)

    with pytest.raises(FetchError) as excinfo:
        await audit_account("octocat", AuditConfig(), transport=octocat.transport(), now=NOW)

    assert excinfo.value.kind is FetchErrorKind.UNEXPECTED


@pytest.mark.asyncio
async def test_rate_limit_on_profile_aborts_run(fake_github):
    fake_github.add(f"{API}/users/octocat", {"message": "rate limited"}, status=403)

    with pytest.raises(FetchError) as excinfo:
        await audit_account("octocat", AuditConfig(tokens=["a", "b"]), transport=fake_github.transport())

    assert excinfo.value.kind is FetchErrorKind.RATE_LIMITED
    assert fake_github.calls(f"{API}/users/octocat") == 2


@pytest.mark.asyncio
async def test_invalid_username_makes_no_request(fake_github):
    with pytest.raises(InvalidUsernameError):
        await audit_account("not a user", AuditConfig(), transport=fake_github.transport())
    assert fake_github.requests == []


@pytest.mark.asyncio
async def test_each_run_starts_with_empty_cache_and_first_token(octocat):
    config = AuditConfig(tokens=["a", "b"])
    async with AuditSession.open(config, transport=octocat.transport()) as session:
        await run_audit("octocat", session, now=NOW)
        session.rotator.rotate()

        await run_audit("octocat", session, now=NOW)

        assert session.rotator.cursor == 0
    assert octocat.calls(f"{API}/users/octocat") == 2


def test_validate_username():
    assert validate_username("  @octocat ") == "octocat"
    assert validate_username("a-b-c") == "a-b-c"
    for bad in ["", "   ", "-lead", "trail-", "dou--ble", "x" * 40, "with space"]:
        with pytest.raises(InvalidUsernameError):
            validate_username(bad)


def test_select_candidates_prefers_stars():
    repos = [Repository(name=n, stargazers_count=s) for n, s in [("a", 1), ("b", 9), ("c", 5)]]
    assert [r.name for r in select_candidates(repos, 2)] == ["b", "c"]
