"""Observability layer - logging and metrics."""

from statusfeed.observability.logging import setup_logging
from statusfeed.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "MetricsCollector", "get_metrics"]
