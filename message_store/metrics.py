"""
Prometheus metrics for store operations.

This module provides:
- Store operation counter (operation, table, outcome)
- Store operation latency histogram (operation, table)

Metrics are stored in-memory using prometheus-client.
"""

from prometheus_client import Counter, Histogram, generate_latest


# operation: put, scan, delete
# outcome: success, error
store_operations_total = Counter(
    "store_operations_total",
    "Total store operations issued by the messages table",
    labelnames=["operation", "table", "outcome"]
)

# Using default buckets: .005, .01, .025, .05, .075, .1, .25, .5, .75, 1.0, 2.5, 5.0, 7.5, 10.0
store_operation_latency_seconds = Histogram(
    "store_operation_latency_seconds",
    "Store operation latency in seconds",
    labelnames=["operation", "table"]
)


def record_store_operation(operation: str, table: str, outcome: str, latency_seconds: float) -> None:
    """
    Record one store call in metrics.

    Args:
        operation: Store operation (put, scan, delete)
        table: Table name the call targeted
        outcome: "success" or "error"
        latency_seconds: Time spent in the store client
    """
    store_operations_total.labels(
        operation=operation,
        table=table,
        outcome=outcome
    ).inc()

    store_operation_latency_seconds.labels(
        operation=operation,
        table=table
    ).observe(latency_seconds)


def get_metrics() -> bytes:
    """
    Generate Prometheus exposition format metrics.

    Returns:
        Metrics in Prometheus text format as bytes
    """
    return generate_latest()
