from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest


HTTP_REQUESTS_TOTAL = Counter(
    "scorehub_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "scorehub_http_request_duration_seconds",
    "HTTP request duration (seconds)",
    ["method", "path"],
)

SCORE_EVENTS_TOTAL = Counter(
    "scorehub_score_events_total",
    "Score record events",
    ["event"],
)

CODE_DRAWS_TOTAL = Counter(
    "scorehub_code_draws_total",
    "Join PIN / access code candidate draws",
    ["namespace", "result"],
)

CSV_ROWS_TOTAL = Counter(
    "scorehub_csv_rows_total",
    "CSV rows imported or exported",
    ["direction", "report"],
)


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
