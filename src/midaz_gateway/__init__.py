"""midaz-gateway: unified CRUD gateway to the Midaz ledger API for AI tool calling.

Turns `{operation, resource, mode, params}` requests into validated,
authenticated and retried calls against the onboarding and transaction
services, with a dry-run test mode that previews the exact call.

Quick Start:
    >>> from midaz_gateway import OperationRequest, ResourceGateway
    >>> async with ResourceGateway() as gateway:
    ...     resp = await gateway.handle(OperationRequest.model_validate({
    ...         "operation": "list", "resource": "accounts", "mode": "test",
    ...         "params": {"organizationId": "org_1", "ledgerId": "led_1"},
    ...     }))
    >>> resp.to_payload()["expectedResponse"]["endpoint"]
    'http://localhost:3000/v1/organizations/org_1/ledgers/led_1/accounts'
"""

__version__ = "0.1.0"

from .foundation.config import GatewaySettings, clear_settings_cache, get_settings
from .foundation.errors import ErrorCode, GatewayError, GatewayException
from .gateway import (
    GatewayResponse,
    Mode,
    Operation,
    OperationParams,
    OperationRequest,
    Resource,
    ResourceGateway,
    troubleshooting_tips,
    validate_operation,
)
from .runtime.observability import configure_logging, get_logger
from .tools import MidazApiTool, ToolRegistry

__all__ = [
    "__version__",
    # Config
    "GatewaySettings", "get_settings", "clear_settings_cache",
    # Errors
    "ErrorCode", "GatewayError", "GatewayException",
    # Gateway
    "Operation", "Resource", "Mode", "OperationParams", "OperationRequest", "GatewayResponse",
    "ResourceGateway", "validate_operation", "troubleshooting_tips",
    # Tools
    "MidazApiTool", "ToolRegistry",
    # Logging
    "configure_logging", "get_logger",
]
