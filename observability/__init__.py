"""Observability: logging setup and optional Logfire tracing.

setup_logging / set_run_context:
    Console + rotating file logging, text or JSON, with run-id correlation.

setup_tracing / trace_operation:
    Optional Logfire spans around pipeline stages.

Enable tracing via configuration:
    ENABLE_LOGFIRE=true
    LOGFIRE_TOKEN=your-token  # Optional
"""

from observability.logging import clear_context, set_run_context, setup_logging
from observability.tracing import TracingContext, setup_tracing, trace_operation

__all__ = [
    "setup_logging",
    "set_run_context",
    "clear_context",
    "setup_tracing",
    "trace_operation",
    "TracingContext",
]
