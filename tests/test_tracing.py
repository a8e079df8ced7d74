"""Tests for trace id propagation from Logfire spans into log records."""

import sys
from contextlib import contextmanager
from types import SimpleNamespace

from observability import tracing
from observability.logging import clear_context, trace_id_var


class FakeSpan:
    def __init__(self, trace_id):
        self.trace_id = trace_id
        self.attributes = {}

    def get_span_context(self):
        return SimpleNamespace(trace_id=self.trace_id, is_valid=True)

    def set_attribute(self, key, value):
        self.attributes[key] = value


def _fake_logfire(span):
    @contextmanager
    def fake_span(name, **attributes):
        yield span

    return SimpleNamespace(span=fake_span)


def test_span_trace_id_reaches_log_context(monkeypatch):
    span = FakeSpan(0x1F)
    monkeypatch.setitem(sys.modules, "logfire", _fake_logfire(span))
    monkeypatch.setattr(tracing._context, "enabled", True)
    monkeypatch.setattr(tracing._context, "_logfire_configured", True)

    try:
        with tracing.trace_operation("aggregate") as attrs:
            attrs["items"] = 3
            seen = trace_id_var.get()
    finally:
        clear_context()

    assert seen == "0000000000000000000000000000001f"
    assert span.attributes == {"items": 3}


def test_disabled_tracing_leaves_trace_id_unset():
    with tracing.trace_operation("summarize") as attrs:
        assert attrs == {}
        assert trace_id_var.get() == "-"
