"""
Structured logging for Invoicely.

Module loggers (invoicely.*) hang off the "invoicely" package logger
configured here. Request, render and error events carry their fields in
record.extra_fields, which the JSON formatter merges into each line.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from invoicely.core import settings

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PLAIN_DATEFMT = "%Y-%m-%d %H:%M:%S"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_data.update(extra_fields)
        return json.dumps(log_data, default=str)


def configure_logging(level: Optional[str] = None, json_logs: Optional[bool] = None) -> logging.Logger:
    """(Re)build the stdout handler on the package logger. Safe to call repeatedly."""
    level_value = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    use_json = settings.USE_JSON_LOGS if json_logs is None else json_logs

    package_logger = logging.getLogger("invoicely")
    package_logger.setLevel(level_value)
    package_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level_value)
    handler.setFormatter(JSONFormatter() if use_json else logging.Formatter(PLAIN_FORMAT, datefmt=PLAIN_DATEFMT))
    package_logger.addHandler(handler)

    package_logger.propagate = False
    return package_logger


logger = configure_logging()


def _emit(level: int, message: str, extra_fields: Dict[str, Any]) -> None:
    record = logging.LogRecord(
        name=logger.name,
        level=level,
        pathname="",
        lineno=0,
        msg=message,
        args=(),
        exc_info=None,
    )
    record.extra_fields = extra_fields
    logger.handle(record)


def log_request(
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    user_id: Optional[str] = None,
    **kwargs
):
    """Log one HTTP request with its duration."""
    extra_fields = {
        "type": "http_request",
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": round(duration_ms, 2),
    }
    if user_id:
        extra_fields["user_id"] = user_id
    extra_fields.update(kwargs)

    _emit(logging.INFO, f"{method} {path} {status_code} ({duration_ms:.1f}ms)", extra_fields)


def log_pdf_render(
    invoice_number: str,
    requested_template_id: Optional[str],
    template_id: Optional[str],
    reused: bool = False,
    duration_ms: Optional[float] = None,
):
    """Log a PDF render, noting when the requested template was swapped for the default."""
    extra_fields: Dict[str, Any] = {
        "type": "pdf_render",
        "invoice_number": invoice_number,
        "requested_template_id": requested_template_id,
        "template_id": template_id,
        "fallback": bool(requested_template_id) and requested_template_id != template_id,
        "reused": reused,
    }
    if duration_ms is not None:
        extra_fields["duration_ms"] = round(duration_ms, 2)

    _emit(logging.INFO, f"Rendered {invoice_number} with {template_id}", extra_fields)


def log_error(
    error_type: str,
    message: str,
    context: Optional[Dict[str, Any]] = None,
    exception: Optional[Exception] = None
):
    """Log an error with context; exceptions keep their traceback."""
    extra_fields = {
        "type": "error",
        "error_type": error_type,
    }
    if context:
        extra_fields.update(context)

    if exception:
        logger.error(message, exc_info=exception, extra={"extra_fields": extra_fields})
    else:
        _emit(logging.ERROR, message, extra_fields)
