"""Unified resource gateway: validation, routing, dispatch and troubleshooting.

Example:
    >>> from midaz_gateway.gateway import OperationRequest, ResourceGateway
    >>> async with ResourceGateway() as gw:
    ...     resp = await gw.handle(OperationRequest(operation="get", resource="ledgers",
    ...                                             params={"organizationId": "org_1", "id": "led_1"}))
    ...     resp.expected_response["method"]
    'GET'
"""

from .advisor import FALLBACK_TIPS, troubleshooting_tips
from .dispatcher import AUTH_FAILED, DRY_RUN_NOTE, ResourceGateway, expected_structure
from .models import (
    ID_PATTERN,
    GatewayResponse,
    Mode,
    Operation,
    OperationParams,
    OperationRequest,
    Pagination,
    Resource,
    ValidationDetails,
)
from .routing import TRANSACTION_RESOURCES, Backend, EndpointRouter, Route
from .validation import ValidationReport, validate_operation

__all__ = [
    # Models
    "Operation", "Resource", "Mode", "Pagination", "OperationParams", "OperationRequest",
    "GatewayResponse", "ValidationDetails", "ID_PATTERN",
    # Validation
    "ValidationReport", "validate_operation",
    # Routing
    "Backend", "EndpointRouter", "Route", "TRANSACTION_RESOURCES",
    # Dispatch
    "ResourceGateway", "expected_structure", "DRY_RUN_NOTE", "AUTH_FAILED",
    # Advisor
    "troubleshooting_tips", "FALLBACK_TIPS",
]
