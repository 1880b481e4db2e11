"""
Prometheus metrics for the billing gateway.

Exposes request metrics at /metrics and a counter for every remote call
made through a payment gateway driver.
"""

from prometheus_fastapi_instrumentator import Instrumentator
from prometheus_client import Counter

gateway_requests = Counter(
    "billing_gateway_requests_total",
    "Total number of payment gateway calls",
    ["operation", "outcome"],  # outcome: success / failure
)


def record_gateway_call(operation: str, success: bool):
    gateway_requests.labels(
        operation=operation, outcome="success" if success else "failure"
    ).inc()


def init_metrics(app):
    """
    Initialize Prometheus metrics instrumentation for the FastAPI app.

    Args:
        app: FastAPI application instance

    Returns:
        Instrumentator instance
    """
    inst = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
    )
    inst.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
    return inst
