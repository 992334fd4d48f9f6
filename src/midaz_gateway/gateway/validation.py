"""Hierarchy validation for gateway operations.

Pure domain checks run before any network activity: id formats, the
organization → ledger → account nesting each resource needs, and the presence
of `id` / `data` for the operations that use them. Every rule is evaluated so
the caller sees all problems in one response.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import ID_PATTERN, Operation, OperationParams, Resource, ValidationDetails

# Resources that live under an organization / a ledger
NEEDS_ORGANIZATION: frozenset[Resource] = frozenset({
    Resource.LEDGERS, Resource.ACCOUNTS, Resource.TRANSACTIONS, Resource.BALANCES,
})
NEEDS_LEDGER: frozenset[Resource] = frozenset({
    Resource.ACCOUNTS, Resource.TRANSACTIONS, Resource.BALANCES,
})

ORG_REQUIRED = "organizationId is required for this resource"
ORG_REQUIRED_FOR_LEDGER = "organizationId is required when ledgerId is provided"
LEDGER_REQUIRED = "ledgerId is required for this resource"
LEDGER_REQUIRED_FOR_ACCOUNT = "ledgerId is required when accountId is provided"
ACCOUNT_REQUIRED = "accountId is required for balance operations"
ID_REQUIRED = "id is required for get/update/delete operations"
DATA_REQUIRED = "data payload is required for create/update operations"


@dataclass(slots=True)
class ValidationReport:
    """Outcome of validate_operation; `error` joins all messages with '; '."""

    errors: list[str] = field(default_factory=list)
    checked_requirements: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def error(self) -> str | None:
        return "; ".join(self.errors) if self.errors else None

    @property
    def details(self) -> ValidationDetails:
        return ValidationDetails(checked_requirements=list(self.checked_requirements), passed_validation=self.valid)


def _check_ids(params: OperationParams, report: ValidationReport) -> None:
    for wire, value in (("organizationId", params.organization_id), ("ledgerId", params.ledger_id),
                        ("accountId", params.account_id), ("id", params.id)):
        if value:
            report.checked_requirements.append(f"{wire} format")
            if not ID_PATTERN.fullmatch(value):
                report.errors.append(f"Invalid {wire} format")


def _check_hierarchy(resource: Resource, params: OperationParams, report: ValidationReport) -> None:
    org, ledger, account = params.organization_id, params.ledger_id, params.account_id

    if resource in NEEDS_ORGANIZATION:
        report.checked_requirements.append("organizationId")
        if not org:
            report.errors.append(ORG_REQUIRED)
    if ledger and not org and ORG_REQUIRED not in report.errors:
        report.errors.append(ORG_REQUIRED_FOR_LEDGER)

    if resource in NEEDS_LEDGER:
        report.checked_requirements.append("ledgerId")
        if not ledger:
            report.errors.append(LEDGER_REQUIRED)
    if account and not ledger and LEDGER_REQUIRED not in report.errors:
        report.errors.append(LEDGER_REQUIRED_FOR_ACCOUNT)

    if resource is Resource.BALANCES:
        report.checked_requirements.append("accountId")
        if not account:
            report.errors.append(ACCOUNT_REQUIRED)


def _check_operation(operation: Operation, params: OperationParams, report: ValidationReport) -> None:
    if operation.targets_single:
        report.checked_requirements.append("id")
        if not params.id:
            report.errors.append(ID_REQUIRED)
    if operation.carries_payload:
        report.checked_requirements.append("data")
        if params.data is None:
            report.errors.append(DATA_REQUIRED)


def validate_operation(
    operation: Operation | str, resource: Resource | str, params: OperationParams | None = None,
) -> ValidationReport:
    """Check ids and hierarchy for one operation. Never raises on bad input, never does I/O.

    Example:
        >>> r = validate_operation("get", "accounts", OperationParams(organization_id="o", ledger_id="l"))
        >>> r.error
        'id is required for get/update/delete operations'
    """
    operation, resource = Operation(operation), Resource(resource)
    params = params or OperationParams()
    report = ValidationReport()
    _check_ids(params, report)
    _check_hierarchy(resource, params, report)
    _check_operation(operation, params, report)
    return report
