"""Endpoint routing: which backend serves a resource and the URL of an operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any
from urllib.parse import quote, urlencode

from .models import Operation, OperationParams, Resource


class Backend(StrEnum):
    ONBOARDING = "onboarding"
    TRANSACTION = "transaction"


# Served by the transaction service; everything else is onboarding
TRANSACTION_RESOURCES: frozenset[str] = frozenset({"transactions", "balances", "operations"})

API_VERSION = "v1"


@dataclass(frozen=True, slots=True)
class Route:
    """Resolved HTTP call for one operation."""

    method: str
    url: str
    backend: Backend


def _query_value(value: Any) -> str:
    return str(value).lower() if isinstance(value, bool) else str(value)


@dataclass(frozen=True, slots=True)
class EndpointRouter:
    """Builds backend URLs from the resource hierarchy.

    Example:
        >>> router = EndpointRouter("http://onb", "http://txn")
        >>> router.build_endpoint(Operation.GET, Resource.ACCOUNTS,
        ...                       OperationParams(organization_id="o1", ledger_id="l1", id="a1"))
        'http://onb/v1/organizations/o1/ledgers/l1/accounts/a1'
    """

    onboarding_url: str
    transaction_url: str

    def backend_for(self, resource: Resource | str) -> Backend:
        return Backend.TRANSACTION if str(resource) in TRANSACTION_RESOURCES else Backend.ONBOARDING

    def base_url_for(self, resource: Resource | str) -> str:
        match self.backend_for(resource):
            case Backend.TRANSACTION:
                return self.transaction_url.rstrip("/")
            case Backend.ONBOARDING:
                return self.onboarding_url.rstrip("/")

    @staticmethod
    def method_for(operation: Operation | str) -> str:
        return Operation(operation).http_method

    def build_endpoint(self, operation: Operation | str, resource: Resource | str, params: OperationParams) -> str:
        operation = Operation(operation)
        segments = [API_VERSION]
        if params.organization_id:
            segments += ["organizations", params.organization_id]
        if params.ledger_id:
            segments += ["ledgers", params.ledger_id]
        if params.account_id:
            segments += ["accounts", params.account_id]
        segments.append(str(resource))
        if params.id and operation.targets_single:
            segments.append(params.id)

        url = f"{self.base_url_for(resource)}/{'/'.join(segments)}"
        if operation is Operation.LIST and (query := self._list_query(params)):
            url = f"{url}?{query}"
        return url

    @staticmethod
    def _list_query(params: OperationParams) -> str:
        pairs: list[tuple[str, str]] = [
            (str(k), _query_value(v)) for k, v in (params.filters or {}).items() if v is not None
        ]
        if params.pagination is not None:
            pairs.append(("limit", str(params.pagination.limit)))
            if params.pagination.cursor:
                pairs.append(("cursor", params.pagination.cursor))
        return urlencode(pairs, quote_via=quote)

    def route(self, operation: Operation | str, resource: Resource | str, params: OperationParams) -> Route:
        return Route(
            method=self.method_for(operation),
            url=self.build_endpoint(operation, resource, params),
            backend=self.backend_for(resource),
        )
