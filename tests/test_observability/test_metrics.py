"""Tests for Prometheus metrics collection."""

from prometheus_client import REGISTRY

from statusfeed.observability.metrics import get_metrics


def sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestMetricsCollector:
    """The collector is process-wide; tests compare before/after values."""

    def test_singleton(self):
        assert get_metrics() is get_metrics()

    def test_record_source_request(self):
        metrics = get_metrics()
        before = sample("statusfeed_source_requests_total", {"outcome": "ok"})
        latency_before = sample("statusfeed_source_request_latency_seconds_count")

        metrics.record_source_request("ok", latency=0.2)

        assert sample("statusfeed_source_requests_total", {"outcome": "ok"}) == before + 1
        assert sample("statusfeed_source_request_latency_seconds_count") == latency_before + 1

    def test_record_merge(self):
        metrics = get_metrics()
        merged_before = sample("statusfeed_statuses_merged_total")
        dupes_before = sample("statusfeed_duplicates_removed_total")

        metrics.record_merge(merged=20, duplicates=3)
        metrics.record_merge(merged=5, duplicates=0)

        assert sample("statusfeed_statuses_merged_total") == merged_before + 25
        assert sample("statusfeed_duplicates_removed_total") == dupes_before + 3

    def test_record_job(self):
        metrics = get_metrics()
        before = sample("statusfeed_fetch_jobs_total", {"state": "done"})

        metrics.record_job("done", feed_size=42)

        assert sample("statusfeed_fetch_jobs_total", {"state": "done"}) == before + 1
        assert sample("statusfeed_last_feed_size") == 42
