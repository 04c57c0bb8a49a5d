"""Observability module for ResumeFlow.

Provides structured logging, metrics and health checks.
"""

from .logging_config import configure_logging, get_logger
from .metrics import (
    documents_submitted_total,
    uploads_rejected_total,
    documents_finished_total,
    documents_discarded_total,
    transfer_duration_seconds,
    analysis_duration_seconds,
    analysis_score_histogram,
    analysis_queue_depth,
    analysis_workers_busy,
)
from .request_id import (
    request_id_var,
    document_id_var,
    get_request_id,
    set_request_id,
    generate_request_id,
    get_document_id,
    set_document_id,
)
from .health import HealthStatus, ComponentHealth
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "documents_submitted_total",
    "uploads_rejected_total",
    "documents_finished_total",
    "documents_discarded_total",
    "transfer_duration_seconds",
    "analysis_duration_seconds",
    "analysis_score_histogram",
    "analysis_queue_depth",
    "analysis_workers_busy",
    # Correlation ids
    "request_id_var",
    "document_id_var",
    "get_request_id",
    "set_request_id",
    "generate_request_id",
    "get_document_id",
    "set_document_id",
    # Health
    "HealthStatus",
    "ComponentHealth",
    # Middleware
    "RequestIDMiddleware",
]
