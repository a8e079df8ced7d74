"""Optional tracing using Logfire/OpenTelemetry.

When enabled, pipeline stages (aggregation, summarization) run inside
Logfire spans and the OpenAI client is instrumented so completion calls
show up with their token usage. When disabled, ``trace_operation`` is a
no-op context manager that only logs the stage duration at DEBUG.

Requirements:
    pip install logfire

Enable via configuration:
    ENABLE_LOGFIRE=true
    LOGFIRE_TOKEN=your-token  # Optional for cloud dashboard
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator

from observability.logging import set_trace_context

logger = logging.getLogger(__name__)


@dataclass
class TracingContext:
    """Process-wide tracing state."""
    enabled: bool = False
    service_name: str = "trendpilot"
    token: str = ""
    _logfire_configured: bool = field(default=False, init=False)


_context = TracingContext()


def setup_tracing(
    enabled: bool = False,
    service_name: str = "trendpilot",
    token: str = "",
) -> TracingContext:
    """Configure Logfire and instrument the OpenAI client.

    Missing or misconfigured Logfire leaves tracing disabled; the pipeline
    itself is unaffected.
    """
    _context.enabled = enabled
    _context.service_name = service_name
    _context.token = token

    if not enabled:
        logger.debug("Tracing disabled")
        return _context

    try:
        import logfire

        logfire.configure(service_name=service_name, token=token or None)
        logfire.instrument_openai()
        _context._logfire_configured = True
        logger.info("Logfire tracing enabled | service=%s", service_name)
    except ImportError:
        logger.warning("Logfire not installed. Tracing disabled.")
        _context.enabled = False
    except Exception as e:
        logger.error("Failed to configure Logfire: %s", e)
        _context.enabled = False

    return _context


def _span_trace_id(span: Any) -> str | None:
    """Hex trace id of a Logfire span, or None if it has no valid context."""
    get_context = getattr(span, "get_span_context", None)
    if get_context is None:
        return None
    span_context = get_context()
    if span_context is None or not getattr(span_context, "is_valid", False):
        return None
    return format(span_context.trace_id, "032x")


@contextmanager
def trace_operation(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[dict[str, Any], None, None]:
    """Context manager for tracing one pipeline stage.

    Args:
        name: Span name
        attributes: Attributes attached when the span opens

    Yields:
        Dict the caller fills with result attributes (set on the span at exit)
    """
    start = time.monotonic()
    try:
        if _context.enabled and _context._logfire_configured:
            import logfire

            with logfire.span(name, **(attributes or {})) as span:
                trace_id = _span_trace_id(span)
                if trace_id:
                    set_trace_context(trace_id)
                result_attrs: dict[str, Any] = {}
                yield result_attrs
                for key, value in result_attrs.items():
                    span.set_attribute(key, value)
        else:
            yield {}
    finally:
        logger.debug("Operation '%s' completed in %.2fs", name, time.monotonic() - start)
