from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from google.cloud import logging as cloud_logging

from .config import Settings

SERVICE_NAME = "billing-engine"
TRACE_FIELD = "logging.googleapis.com/trace"
SPAN_FIELD = "logging.googleapis.com/spanId"


@dataclass(frozen=True)
class TraceContext:
    """Trace of the request being served.

    ``trace`` is the Cloud Logging resource name
    (``projects/<project>/traces/<trace id>``) when a project is configured,
    otherwise the bare trace id.
    """

    trace: str
    span_id: str | None = None


trace_var: ContextVar[TraceContext | None] = ContextVar("billing_trace", default=None)


def parse_trace_header(header: str | None, project_id: str | None) -> TraceContext | None:
    """Read an ``X-Cloud-Trace-Context`` value (``TRACE_ID/SPAN_ID;o=1``)."""
    if not header:
        return None
    trace_id, _, rest = header.strip().partition("/")
    trace_id = trace_id.strip()
    if not trace_id:
        return None
    span_id = rest.split(";", 1)[0].strip() or None
    trace = f"projects/{project_id}/traces/{trace_id}" if project_id else trace_id
    return TraceContext(trace=trace, span_id=span_id)


def bind_request_trace(header: str | None, project_id: str | None) -> TraceContext:
    """Bind the request's trace, minting a fresh trace id when none was sent."""
    context = parse_trace_header(header, project_id) or parse_trace_header(uuid.uuid4().hex, project_id)
    trace_var.set(context)
    return context


def clear_trace() -> None:
    trace_var.set(None)


def get_trace_id() -> str | None:
    context = trace_var.get()
    return context.trace if context else None


def billing_fields(**fields: Any) -> dict[str, Any]:
    """``extra=`` payload whose keys land as top-level JSON fields."""
    return {"billing": fields}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, shaped for Cloud Logging ingestion."""

    def __init__(self, environment: str = "dev") -> None:
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "severity": record.levelname,
            "message": record.getMessage(),
            "service": SERVICE_NAME,
            "environment": self.environment,
            "logger": record.name,
            "line": record.lineno,
        }

        context = trace_var.get()
        if context is not None:
            log_obj[TRACE_FIELD] = context.trace
            if context.span_id:
                log_obj[SPAN_FIELD] = context.span_id

        fields = getattr(record, "billing", None)
        if isinstance(fields, dict):
            log_obj.update(fields)

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str, ensure_ascii=False)


def setup_logging(settings: Settings, *, use_cloud_logging: bool = True) -> None:
    """Configure logging for the billing service.

    Non-dev environments with a project id hand records to the Cloud Logging
    client; everything else writes JSON lines to stdout.
    """
    log_level = logging.DEBUG if settings.environment == "dev" else logging.INFO

    if use_cloud_logging and settings.project_id and settings.environment != "dev":
        client = cloud_logging.Client(project=settings.project_id)
        client.setup_logging(log_level=log_level)
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter(environment=settings.environment))
        logging.basicConfig(level=log_level, handlers=[handler])

    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


__all__ = [
    "TraceContext",
    "StructuredFormatter",
    "setup_logging",
    "parse_trace_header",
    "bind_request_trace",
    "clear_trace",
    "get_trace_id",
    "billing_fields",
]
