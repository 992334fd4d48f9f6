"""Tests for troubleshooting tips."""

from __future__ import annotations

from midaz_gateway.gateway import FALLBACK_TIPS, troubleshooting_tips


def test_network_keywords() -> None:
    for message in ("Network error after 3 retries: boom", "fetch failed", "ConnectError: refused"):
        assert troubleshooting_tips(message)[:2] == [
            "Check network connectivity and API endpoints",
            "Verify backend services are running",
        ]


def test_auth_keywords_case_insensitive() -> None:
    assert "Check authentication credentials" in troubleshooting_tips("AUTHENTICATION FAILED")
    assert "Verify API key or client credentials are set" in troubleshooting_tips("Client error: 401")


def test_not_found_and_bad_request() -> None:
    assert troubleshooting_tips("Client error: 404") == [
        "Verify resource IDs exist",
        "Check if organization/ledger/account hierarchy is correct",
    ]
    assert troubleshooting_tips("Client error: 400")[0] == "Validate request payload structure"


def test_groups_accumulate() -> None:
    tips = troubleshooting_tips("auth service unreachable: network down")
    assert len(tips) == 4


def test_accepts_exceptions() -> None:
    assert troubleshooting_tips(ConnectionError("connect timeout"))[0] == "Check network connectivity and API endpoints"


def test_fallback_never_empty() -> None:
    assert troubleshooting_tips("something odd") == list(FALLBACK_TIPS)
    assert troubleshooting_tips(None) == list(FALLBACK_TIPS)
