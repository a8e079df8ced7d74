"""Logging setup with structured output and run-id propagation.

Every pipeline run gets a short run id; a logging filter stamps it (and the
Logfire trace id, when tracing is on) onto each record so that the log lines
of one aggregation, summarization and fallback can be correlated.

Usage:
    >>> from observability.logging import setup_logging, set_run_context
    >>> setup_logging(config)
    >>> set_run_context(run_id="1a2b3c4d")
    >>> logger.info("Sources aggregated | items=%d", 42)  # carries run_id
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Any

run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")
trace_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("trace_id", default="-")

LOG_FILENAME = "trendpilot.log"

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "run_id", "trace_id", "message",
})

# Third-party loggers that are noisy at DEBUG
_QUIET_LIBRARIES = ("aiohttp", "asyncio", "httpx", "httpcore", "openai", "urllib3")


def set_run_context(run_id: str) -> None:
    """Set the current run id for log correlation."""
    run_id_var.set(run_id)


def set_trace_context(trace_id: str) -> None:
    """Set the current Logfire trace id for log correlation."""
    trace_id_var.set(trace_id)


def clear_context() -> None:
    """Reset run and trace ids."""
    run_id_var.set("-")
    trace_id_var.set("-")


class ContextFilter(logging.Filter):
    """Inject run_id and trace_id into every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = run_id_var.get()
        record.trace_id = trace_id_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """Single-line JSON records for log aggregation.

    Output format:
        {"timestamp": "...", "level": "INFO", "logger": "...", "message": "...", "run_id": "..."}

    WARNING and above also carry the source location; extras passed via
    ``extra=`` are copied through (stringified if not JSON-serializable).
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": getattr(record, "run_id", "-"),
        }

        trace_id = getattr(record, "trace_id", "-")
        if trace_id != "-":
            log_data["trace_id"] = trace_id

        if record.levelno >= logging.WARNING:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Format: TIMESTAMP [LEVEL] [run_id] logger: message"""

    def __init__(self, include_date: bool = False):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] [%(run_id)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S" if include_date else "%H:%M:%S",
        )


def _file_handler(config: Any) -> logging.Handler:
    """Rotating handler: by size when LOG_MAX_BYTES > 0, else daily at midnight."""
    log_file = config.log_dir / LOG_FILENAME
    if config.log_max_bytes > 0:
        return RotatingFileHandler(
            log_file,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
            encoding="utf-8",
        )
    return TimedRotatingFileHandler(
        log_file,
        when="midnight",
        interval=1,
        backupCount=config.log_backup_count,
        encoding="utf-8",
    )


def setup_logging(config: Any, verbose: bool = False) -> bool:
    """Configure console and rotating file logging.

    If the log directory is not writable, logging degrades to console only.

    Args:
        config: Configuration with log_level, log_format, log_dir,
                log_max_bytes and log_backup_count
        verbose: Force DEBUG on the console

    Returns:
        True if file logging is enabled, False if console-only
    """
    console_level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.INFO)
    context_filter = ContextFilter()

    if config.log_format == "json":
        console_fmt: logging.Formatter = JsonFormatter()
        file_fmt: logging.Formatter = JsonFormatter()
    else:
        console_fmt = TextFormatter(include_date=False)
        file_fmt = TextFormatter(include_date=True)

    # stderr keeps stdout free for `main.py run --stdout` JSON
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(console_fmt)
    console.addFilter(context_filter)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.addHandler(console)

    file_logging_enabled = False
    try:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = _file_handler(config)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_fmt)
        file_handler.addFilter(context_filter)
        root.addHandler(file_handler)
        file_logging_enabled = True
    except OSError as e:
        print(
            f"Warning: Cannot write to log directory '{config.log_dir}': {e}. "
            "Falling back to console-only logging.",
            file=sys.stderr,
        )

    for lib in _QUIET_LIBRARIES:
        logging.getLogger(lib).setLevel(logging.WARNING)

    return file_logging_enabled
