"""Tests for structured logging."""

from __future__ import annotations

import io

import orjson

from midaz_gateway.runtime.observability import (
    CapturingRenderer,
    JsonRenderer,
    configure_logging,
    get_logger,
    log_context,
)


def test_bind_is_immutable() -> None:
    renderer = configure_logging(renderer=CapturingRenderer())
    base = get_logger("gateway")
    bound = base.bind(resource="accounts")
    base.info("plain")
    bound.info("bound")
    assert isinstance(renderer, CapturingRenderer)
    assert "resource" not in renderer.entries[0].context
    assert renderer.entries[1].context == {"logger": "gateway", "resource": "accounts"}


def test_level_filtering() -> None:
    renderer = configure_logging(level="WARNING", renderer=CapturingRenderer())
    log = get_logger("x")
    log.info("hidden")
    log.warning("shown")
    assert isinstance(renderer, CapturingRenderer)
    assert renderer.events() == ["shown"]


def test_log_context_scoped() -> None:
    renderer = configure_logging(renderer=CapturingRenderer())
    log = get_logger("x")
    with log_context(operation="list"):
        log.info("inside")
    log.info("outside")
    assert isinstance(renderer, CapturingRenderer)
    assert renderer.entries[0].context["operation"] == "list"
    assert "operation" not in renderer.entries[1].context


def test_json_lines_output() -> None:
    out = io.StringIO()
    configure_logging(format="json", output=out)
    get_logger("token_manager").warning("evicting unreadable cached token", reason="tag")
    record = orjson.loads(out.getvalue())
    assert record["event"] == "evicting unreadable cached token"
    assert record["level"] == "warning"
    assert record["reason"] == "tag"
    assert record["logger"] == "token_manager"


def test_console_output_plain_when_not_tty() -> None:
    out = io.StringIO()
    configure_logging(format="console", output=out)
    get_logger("cli").info("gateway configured", retries=3)
    line = out.getvalue()
    assert "[info] gateway configured" in line
    assert "retries=3" in line
    assert "\033[" not in line


def test_json_renderer_direct() -> None:
    out = io.StringIO()
    configure_logging(renderer=JsonRenderer(output=out))
    get_logger().error("boom")
    assert orjson.loads(out.getvalue())["event"] == "boom"


def test_credentials_are_masked() -> None:
    renderer = configure_logging(renderer=CapturingRenderer())
    get_logger("token_manager").info("exchange", client_secret="s3cret", Authorization="Bearer abc", status=200)
    assert isinstance(renderer, CapturingRenderer)
    context = renderer.entries[0].context
    assert context["client_secret"] == "***"
    assert context["Authorization"] == "***"
    assert context["status"] == 200
