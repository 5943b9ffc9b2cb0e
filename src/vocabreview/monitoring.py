"""Monitoring configuration for the review engine."""
from prometheus_client import Counter, Histogram, start_http_server

# Progress metrics
attempts_recorded = Counter(
    "vocabreview_attempts_recorded_total",
    "Total number of practice attempts recorded",
    ["result"],
)

phase_advances = Counter(
    "vocabreview_phase_advances_total",
    "Total number of automatic or explicit phase changes",
    ["phase"],
)

# Schedule metrics
schedules_built = Counter(
    "vocabreview_schedules_built_total",
    "Total number of review schedules computed",
)

batch_actions = Counter(
    "vocabreview_batch_actions_total",
    "Total number of progress records changed by batch actions",
    ["action"],
)

# Error metrics
audit_write_failures = Counter(
    "vocabreview_audit_write_failures_total",
    "Total number of audit events that could not be written",
)

save_conflicts = Counter(
    "vocabreview_save_conflicts_total",
    "Total number of concurrent-modification conflicts on save",
)

# Performance metrics
operation_duration = Histogram(
    "vocabreview_operation_duration_seconds",
    "Duration of engine operations in seconds",
    ["operation"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
