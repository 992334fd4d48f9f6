"""Request and response models for the resource gateway.

Inputs accept camelCase keys as sent by tool callers (`organizationId`) as well
as snake_case field names. The response envelope always serializes camelCase
and omits fields that are None.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from midaz_gateway.foundation.errors import ErrorCode, JsonDict

ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,50}$")


class Operation(StrEnum):
    """CRUD operation requested by the caller."""

    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def http_method(self) -> str:
        match self:
            case Operation.LIST | Operation.GET:
                return "GET"
            case Operation.CREATE:
                return "POST"
            case Operation.UPDATE:
                return "PUT"
            case Operation.DELETE:
                return "DELETE"

    @property
    def targets_single(self) -> bool:
        """Whether the operation addresses one entity by id."""
        return self in (Operation.GET, Operation.UPDATE, Operation.DELETE)

    @property
    def carries_payload(self) -> bool:
        return self in (Operation.CREATE, Operation.UPDATE)


class Resource(StrEnum):
    """Ledger entity kinds reachable through the gateway."""

    ORGANIZATIONS = "organizations"
    LEDGERS = "ledgers"
    ACCOUNTS = "accounts"
    TRANSACTIONS = "transactions"
    BALANCES = "balances"
    PORTFOLIOS = "portfolios"
    ASSETS = "assets"

    @property
    def singular(self) -> str:
        return self.value[:-1]


class Mode(StrEnum):
    """test = dry-run preview, execute = real backend call."""

    TEST = "test"
    EXECUTE = "execute"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Pagination(_CamelModel):
    """Page size and opaque continuation cursor for list operations."""

    limit: Annotated[int, Field(ge=1, le=100)] = 10
    cursor: str | None = None


class OperationParams(_CamelModel):
    """Hierarchy ids, target id and payload of one operation.

    Shape only: id formats and hierarchy rules are checked by the validator so
    that every violation is reported at once.
    """

    organization_id: str | None = None
    ledger_id: str | None = None
    account_id: str | None = None
    id: str | None = None
    data: JsonDict | None = None
    filters: JsonDict | None = None
    pagination: Pagination | None = None

    def hierarchy(self) -> dict[str, str]:
        """Present hierarchy ids keyed by their wire names, outermost first."""
        pairs = (("organizationId", self.organization_id), ("ledgerId", self.ledger_id),
                 ("accountId", self.account_id))
        return {k: v for k, v in pairs if v}


class OperationRequest(_CamelModel):
    """Unified request: what to do, to which resource, in which mode.

    Example:
        >>> OperationRequest.model_validate({
        ...     "operation": "list", "resource": "ledgers",
        ...     "params": {"organizationId": "org_1"},
        ... }).mode
        <Mode.TEST: 'test'>
    """

    operation: Operation = Field(description="CRUD operation: list, get, create, update or delete")
    resource: Resource = Field(description="Resource type to operate on")
    mode: Mode = Field(default=Mode.TEST, description="test = dry-run with validation, execute = real API call")
    params: OperationParams = Field(default_factory=OperationParams, description="Operation parameters")


class ValidationDetails(_CamelModel):
    checked_requirements: list[str] = Field(default_factory=list)
    passed_validation: bool = True


class GatewayResponse(_CamelModel):
    """Envelope returned for every invocation, successful or not."""

    success: bool
    operation: Operation | str
    resource: Resource | str
    mode: Mode | str | None = None
    data: Any = None
    error: str | None = None
    error_code: ErrorCode | None = None
    details: Any = None
    validation: ValidationDetails | None = None
    expected_response: JsonDict | None = None
    note: str | None = None
    troubleshooting: list[str] | None = None
    response_time: int | None = Field(default=None, description="Milliseconds spent in execute mode")
    status_code: int | None = None
    attempts: int | None = None
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_payload(self) -> JsonDict:
        """JSON-compatible dict with camelCase keys and None fields dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
