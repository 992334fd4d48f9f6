"""Troubleshooting tips derived from an error message."""

from __future__ import annotations

# (keywords, tips); every group whose keyword appears contributes its tips
_TIP_GROUPS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("network", "fetch", "connect"), (
        "Check network connectivity and API endpoints",
        "Verify backend services are running",
    )),
    (("auth", "401"), (
        "Check authentication credentials",
        "Verify API key or client credentials are set",
    )),
    (("404",), (
        "Verify resource IDs exist",
        "Check if organization/ledger/account hierarchy is correct",
    )),
    (("400",), (
        "Validate request payload structure",
        "Check required fields and data types",
    )),
)

FALLBACK_TIPS: tuple[str, ...] = (
    "Check the API documentation for this resource",
    "Verify the onboarding and transaction services are up",
    "Try test mode first to validate parameters",
)


def troubleshooting_tips(error: str | BaseException | None) -> list[str]:
    """Return remediation hints for an error, never empty.

    Example:
        >>> troubleshooting_tips("Client error: 404")[0]
        'Verify resource IDs exist'
    """
    message = str(error or "").lower()
    tips = [tip for keywords, group in _TIP_GROUPS if any(k in message for k in keywords) for tip in group]
    return tips or list(FALLBACK_TIPS)
