"""Tests for state tokens and login URL construction."""

from __future__ import annotations

import string
from urllib.parse import parse_qs, urlparse

from loopauth.auth.state import generate_state, state_matches
from loopauth.auth.url import build_login_url


URLSAFE = set(string.ascii_letters + string.digits + "-_")


class TestGenerateState:
    def test_tokens_are_unique(self) -> None:
        tokens = {generate_state() for _ in range(500)}
        assert len(tokens) == 500

    def test_token_is_url_safe(self) -> None:
        token = generate_state()
        assert set(token) <= URLSAFE

    def test_token_carries_enough_entropy(self) -> None:
        # 32 random bytes -> 43 base64url characters
        assert len(generate_state()) >= 43


class TestStateMatches:
    def test_exact_match(self) -> None:
        assert state_matches("abc123", "abc123") is True

    def test_mismatch(self) -> None:
        assert state_matches("abc123", "wrong") is False

    def test_prefix_is_not_a_match(self) -> None:
        assert state_matches("abc123", "abc") is False

    def test_empty_received(self) -> None:
        assert state_matches("abc123", "") is False

    def test_case_sensitive(self) -> None:
        assert state_matches("abc123", "ABC123") is False


class TestBuildLoginURL:
    def test_scenario_url(self) -> None:
        url = build_login_url("https://dash.example.com", 51234, "abc123")
        assert url == "https://dash.example.com/login?port=51234&state=abc123"

    def test_trailing_slash_is_stripped(self) -> None:
        url = build_login_url("https://dash.example.com/", 51234, "abc123")
        assert url == "https://dash.example.com/login?port=51234&state=abc123"

    def test_host_path_prefix_is_kept(self) -> None:
        url = build_login_url("https://example.com/dashboard", 8000, "s")
        assert urlparse(url).path == "/dashboard/login"

    def test_state_is_encoded(self) -> None:
        url = build_login_url("http://localhost:3000", 1234, "a b&c=d")
        params = parse_qs(urlparse(url).query)
        assert params == {"port": ["1234"], "state": ["a b&c=d"]}

    def test_generated_state_roundtrips(self) -> None:
        state = generate_state()
        url = build_login_url("https://dash.example.com", 40000, state)
        assert parse_qs(urlparse(url).query)["state"] == [state]
