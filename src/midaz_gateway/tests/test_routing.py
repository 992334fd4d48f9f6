"""Tests for endpoint routing."""

from __future__ import annotations

import pytest

from midaz_gateway.gateway import Backend, EndpointRouter, Operation, OperationParams, Resource

router = EndpointRouter("http://onb", "http://txn/")


def params(**kw: object) -> OperationParams:
    return OperationParams.model_validate(kw)


@pytest.mark.parametrize(("resource", "backend"), [
    ("organizations", Backend.ONBOARDING),
    ("ledgers", Backend.ONBOARDING),
    ("accounts", Backend.ONBOARDING),
    ("portfolios", Backend.ONBOARDING),
    ("assets", Backend.ONBOARDING),
    ("transactions", Backend.TRANSACTION),
    ("balances", Backend.TRANSACTION),
    ("operations", Backend.TRANSACTION),
])
def test_backend_selection(resource: str, backend: Backend) -> None:
    assert router.backend_for(resource) is backend


def test_trailing_slash_on_base_url_dropped() -> None:
    assert router.base_url_for(Resource.BALANCES) == "http://txn"


@pytest.mark.parametrize(("operation", "method"), [
    ("list", "GET"), ("get", "GET"), ("create", "POST"), ("update", "PUT"), ("delete", "DELETE"),
])
def test_method_mapping(operation: str, method: str) -> None:
    assert router.method_for(operation) == method


def test_hierarchical_path_with_id() -> None:
    url = router.build_endpoint(Operation.GET, Resource.ACCOUNTS, params(organizationId="o1", ledgerId="l1", id="a1"))
    assert url == "http://onb/v1/organizations/o1/ledgers/l1/accounts/a1"


def test_balance_path_goes_to_transaction_service() -> None:
    url = router.build_endpoint("list", "balances", params(organizationId="o1", ledgerId="l1", accountId="a1"))
    assert url == "http://txn/v1/organizations/o1/ledgers/l1/accounts/a1/balances"


def test_id_ignored_for_list_and_create() -> None:
    p = params(organizationId="o1", id="x1", data={"name": "n"})
    assert router.build_endpoint("create", "ledgers", p) == "http://onb/v1/organizations/o1/ledgers"
    assert router.build_endpoint("list", "ledgers", p) == "http://onb/v1/organizations/o1/ledgers"


def test_list_query_filters_then_pagination() -> None:
    p = params(organizationId="o1", filters={"status": "ACTIVE", "name": "a b&c"},
               pagination={"limit": 25, "cursor": "abc=="})
    url = router.build_endpoint("list", "ledgers", p)
    assert url == "http://onb/v1/organizations/o1/ledgers?status=ACTIVE&name=a%20b%26c&limit=25&cursor=abc%3D%3D"


def test_boolean_filters_render_lowercase() -> None:
    url = router.build_endpoint("list", "organizations", params(filters={"active": True, "archived": False}))
    assert url.endswith("?active=true&archived=false")


def test_pagination_defaults_limit() -> None:
    url = router.build_endpoint("list", "organizations", params(pagination={}))
    assert url == "http://onb/v1/organizations?limit=10"


def test_query_only_for_list() -> None:
    url = router.build_endpoint("get", "organizations", params(id="o1", filters={"a": 1}))
    assert url == "http://onb/v1/organizations/o1"


def test_route_is_deterministic() -> None:
    p = params(organizationId="o1", filters={"b": 2, "a": 1})
    first = router.route("list", "ledgers", p)
    assert first == router.route("list", "ledgers", p)
    assert (first.method, first.backend) == ("GET", Backend.ONBOARDING)
