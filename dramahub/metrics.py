"""Business metrics for Drama Hub."""

from opentelemetry import metrics

# Get meter for creating instruments
meter = metrics.get_meter(__name__)

# HTTP Request Metrics
http_request_duration = meter.create_histogram(
    name="http_request_duration_seconds",
    description="Duration of HTTP requests in seconds",
    unit="s",
)

http_requests_total = meter.create_counter(
    name="http_requests_total",
    description="Total number of HTTP requests",
)

# Authentication Metrics
sessions_issued_total = meter.create_counter(
    name="admin_sessions_issued_total",
    description="Total number of admin sessions created",
)

sessions_revoked_total = meter.create_counter(
    name="admin_sessions_revoked_total",
    description="Total number of admin sessions revoked",
)

login_failures_total = meter.create_counter(
    name="admin_login_failures_total",
    description="Total number of rejected login attempts",
)

stale_credentials_cleared_total = meter.create_counter(
    name="stale_credentials_cleared_total",
    description="Invalid or expired cookies answered with a clearing cookie",
)

# Content Metrics
revisions_recorded_total = meter.create_counter(
    name="article_revisions_recorded_total",
    description="Total number of pre-edit snapshots written",
)

article_mutations_total = meter.create_counter(
    name="article_mutations_total",
    description="Article creates, updates and deletes",
)


def record_http_request(method: str, endpoint: str, status_code: int, duration: float):
    """Record HTTP request metrics."""
    labels = {"method": method, "endpoint": endpoint, "status_code": str(status_code)}

    http_request_duration.record(duration, labels)
    http_requests_total.add(1, labels)


def record_article_mutation(operation: str) -> None:
    """Record an article create/update/delete."""
    article_mutations_total.add(1, {"operation": operation})
