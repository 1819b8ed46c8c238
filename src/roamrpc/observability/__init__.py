"""Observability for roamrpc: structured logging and in-process metrics.

Example:
    >>> from roamrpc.observability import get_logger, get_metrics
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info("roamrpc.client.request", message_type="ProfileReq", transaction_id=42)
    >>>
    >>> get_metrics().increment_counter("roamrpc_async_timeouts_total")
"""

from roamrpc.observability.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)
from roamrpc.observability.metrics import (
    MetricsCollector,
    get_metrics,
    reset_metrics,
)

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "get_metrics",
    "reset_metrics",
    "MetricsCollector",
]
