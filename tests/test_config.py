"""Tests for AuditConfig."""

from git_auditor.config import AuditConfig, split_tokens
from git_auditor.core.models import Category


def test_defaults():
    config = AuditConfig()
    assert config.tokens == []
    assert config.effective_deep_scan_limit == 3
    assert config.category_weights[Category.REPOSITORY] == 300


def test_from_env(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKENS", "a, b,,c")
    monkeypatch.setenv("GITHUB_TOKEN", "b")
    monkeypatch.setenv("AUDIT_CACHE_MAX_ENTRIES", "42")
    monkeypatch.setenv("AUDIT_REQUEST_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("AUDIT_DEEP_SCAN_LIMIT", "7")

    config = AuditConfig.from_env()

    assert config.tokens == ["a", "b", "c"]
    assert config.cache_max_entries == 42
    assert config.request_timeout_seconds == 2.5
    assert config.effective_deep_scan_limit == 7


def test_cli_tokens_come_first():
    config = AuditConfig(tokens=["env"]).with_tokens(["cli1,cli2", "env"])
    assert config.tokens == ["cli1", "cli2", "env"]


def test_split_tokens():
    assert split_tokens(None) == []
    assert split_tokens(" x ,, y ") == ["x", "y"]
