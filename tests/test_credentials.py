"""Tests for CredentialRotator."""

from git_auditor.core.clients.credentials import ACCEPT_HEADER, CredentialRotator


def test_no_tokens_sends_no_authorization():
    rotator = CredentialRotator([])
    assert rotator.headers() == {"Accept": ACCEPT_HEADER}
    assert rotator.rotate() is False
    assert rotator.cursor == 0


def test_headers_use_token_at_cursor():
    rotator = CredentialRotator(["aaa", "bbb"])
    assert rotator.headers()["Authorization"] == "token aaa"
    rotator.rotate()
    assert rotator.headers()["Authorization"] == "token bbb"


def test_n_tokens_rotate_n_minus_one_times():
    rotator = CredentialRotator(["t1", "t2", "t3"])

    assert rotator.rotate() is True
    assert rotator.rotate() is True
    assert rotator.cursor == 2

    assert rotator.rotate() is False
    assert rotator.cursor == 2


def test_reset_rewinds_cursor():
    rotator = CredentialRotator(["t1", "t2"])
    rotator.rotate()
    rotator.reset()
    assert rotator.cursor == 0
    assert rotator.current == "t1"


def test_blank_tokens_are_dropped():
    rotator = CredentialRotator(["", "  ", " real "])
    assert len(rotator) == 1
    assert rotator.headers()["Authorization"] == "token real"
