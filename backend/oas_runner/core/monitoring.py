"""
Monitoring and metrics setup.
"""
import logging
from prometheus_client import Counter, Histogram, generate_latest

from oas_runner.core.config import settings

logger = logging.getLogger(__name__)

# Metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration',
    ['method', 'endpoint']
)

endpoint_tests_total = Counter(
    'endpoint_tests_total',
    'Total endpoint probes issued against target APIs',
    ['method', 'outcome']
)

endpoint_retries_total = Counter(
    'endpoint_retries_total',
    'Total endpoint retries',
    ['outcome']
)


def get_metrics():
    """Get Prometheus metrics."""
    return generate_latest()


def record_http_request(method: str, endpoint: str, status: int, duration: float):
    """Record HTTP request metrics."""
    if not settings.ENABLE_METRICS:
        return
    http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
    http_request_duration.labels(method=method, endpoint=endpoint).observe(duration)


def record_endpoint_test(method: str, success: bool):
    """Record the outcome of a single endpoint probe."""
    if not settings.ENABLE_METRICS:
        return
    outcome = 'success' if success else 'failed'
    endpoint_tests_total.labels(method=method, outcome=outcome).inc()


def record_endpoint_retry(success: bool):
    """Record the outcome of a retry."""
    if not settings.ENABLE_METRICS:
        return
    endpoint_retries_total.labels(outcome='success' if success else 'failed').inc()
