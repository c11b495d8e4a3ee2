"""
Prometheus metrics for timeline fetching.

Defines and exposes metrics for:
- Source requests and their outcomes
- Request latency
- Fetch job outcomes
- Merge activity (statuses merged, duplicates removed)
- Size of the last delivered feed

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from statusfeed.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)


class MetricsCollector:
    """
    Prometheus metrics collector for statusfeed.

    Usage:
        metrics = get_metrics()
        metrics.start_server()

        metrics.record_source_request("ok", latency=0.3)
        metrics.record_job("done", feed_size=40)
    """

    def __init__(self):
        """Initialize Prometheus metrics."""

        self.source_requests = Counter(
            "statusfeed_source_requests_total",
            "Total feed source requests",
            ["outcome"],  # ok, transport_failure, service_error, malformed_timestamp
        )

        self.request_latency = Histogram(
            "statusfeed_source_request_latency_seconds",
            "Time to fetch and decode one feed source",
            buckets=LATENCY_BUCKETS,
        )

        self.fetch_jobs = Counter(
            "statusfeed_fetch_jobs_total",
            "Total fetch jobs by final state",
            ["state"],  # done, failed, cancelled
        )

        self.statuses_merged = Counter(
            "statusfeed_statuses_merged_total",
            "Total statuses folded into accumulated feeds",
        )

        self.duplicates_removed = Counter(
            "statusfeed_duplicates_removed_total",
            "Total statuses dropped because a later source returned the same id",
        )

        self.feed_size = Gauge(
            "statusfeed_last_feed_size",
            "Number of statuses in the most recently delivered feed",
        )

        logger.info("Prometheus metrics initialized")

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info(f"Prometheus metrics server started on port {port}")

    # Convenience methods

    def record_source_request(self, outcome: str, latency: float | None = None) -> None:
        """
        Record one source request.

        Args:
            outcome: ok, transport_failure, service_error or malformed_timestamp
            latency: Optional request latency in seconds
        """
        self.source_requests.labels(outcome=outcome).inc()

        if latency is not None:
            self.request_latency.observe(latency)

    def record_merge(self, merged: int, duplicates: int) -> None:
        """Record one merge round."""
        self.statuses_merged.inc(merged)
        if duplicates:
            self.duplicates_removed.inc(duplicates)

    def record_job(self, state: str, feed_size: int | None = None) -> None:
        """
        Record a finished fetch job.

        Args:
            state: Final job state
            feed_size: Size of the delivered feed, for successful jobs
        """
        self.fetch_jobs.labels(state=state).inc()

        if feed_size is not None:
            self.feed_size.set(feed_size)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get the global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
