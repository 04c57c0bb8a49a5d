"""Prometheus metrics for ResumeFlow.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram, Gauge

# Upload gateway metrics
documents_submitted_total = Counter(
    "resumeflow_documents_submitted_total",
    "Total number of accepted resume submissions",
    ["mime_type"]
)

uploads_rejected_total = Counter(
    "resumeflow_uploads_rejected_total",
    "Total number of uploads rejected by validation",
    ["code"]  # code: UNSUPPORTED_TYPE|TOO_LARGE|EMPTY_FILE|INVALID_FILENAME
)

# Lifecycle outcome metrics
documents_finished_total = Counter(
    "resumeflow_documents_finished_total",
    "Total number of documents reaching a terminal state",
    ["status", "reason"]  # reason: empty for COMPLETED, FailureReason otherwise
)

documents_discarded_total = Counter(
    "resumeflow_documents_discarded_total",
    "Total number of documents removed by cancel-before-queue or delete",
    ["operation"]  # operation: cancel|delete
)

# Transfer metrics
transfer_duration_seconds = Histogram(
    "resumeflow_transfer_duration_seconds",
    "Time spent moving resume bytes into storage in seconds",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Analysis metrics
analysis_duration_seconds = Histogram(
    "resumeflow_analysis_duration_seconds",
    "Time spent in the analysis engine in seconds",
    ["engine"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)

analysis_score_histogram = Histogram(
    "resumeflow_analysis_score",
    "Analysis score distribution",
    buckets=[10, 20, 30, 40, 50, 60, 75, 90, 100]
)

# Queue metrics
analysis_queue_depth = Gauge(
    "resumeflow_analysis_queue_depth",
    "Number of documents waiting for an analysis worker"
)

analysis_workers_busy = Gauge(
    "resumeflow_analysis_workers_busy",
    "Number of analysis workers currently running the engine"
)
