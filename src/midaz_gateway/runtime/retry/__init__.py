"""Retry: backoff strategies and the retry policy for backend calls."""

from .backoff import Backoff, ConstantBackoff, ExponentialBackoff
from .policy import DEFAULT_RETRY, NO_RETRY, RetryPolicy, classify_status

__all__ = [
    "Backoff", "ExponentialBackoff", "ConstantBackoff",
    "RetryPolicy", "classify_status", "DEFAULT_RETRY", "NO_RETRY",
]
