"""Unified error handling for the gateway.

- ErrorCode: Standard error codes for gateway failures
- GatewayError/GatewayException: Structured errors and exceptions
- CacheCorruptionError: Raised when a cached token cannot be decrypted
- Result/Ok/Err: Explicit success/failure returns
- ErrorTrace/ErrorContext: Error context stacking and provenance tracking
"""

from .errors import (
    RETRYABLE_CODES,
    CacheCorruptionError,
    ErrorCode,
    GatewayError,
    GatewayException,
    classify_exception,
)
from .result import Err, Ok, Result
from .types import ErrorContext, ErrorTrace, JsonDict, JsonValue, trace

__all__ = [
    "ErrorCode", "GatewayError", "GatewayException", "CacheCorruptionError",
    "RETRYABLE_CODES", "classify_exception",
    "Result", "Ok", "Err",
    "ErrorContext", "ErrorTrace", "JsonDict", "JsonValue", "trace",
]
