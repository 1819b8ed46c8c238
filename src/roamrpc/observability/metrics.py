"""In-process metrics for the roamrpc client.

Counters and histograms keyed by label sets, exportable in Prometheus text
format so an embedding service can expose them on its own endpoint.

Example:
    >>> from roamrpc.observability.metrics import get_metrics
    >>> metrics = get_metrics()
    >>> metrics.increment_counter(
    ...     "roamrpc_requests_total",
    ...     {"message_type": "PRStartReq", "mode": "async", "outcome": "success"},
    ... )
    >>> "roamrpc_requests_total" in metrics.export_prometheus()
    True
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import ClassVar

LabelKey = tuple[tuple[str, str], ...]

DEFAULT_LATENCY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


def _label_key(labels: dict[str, str] | None) -> LabelKey:
    return tuple(sorted((labels or {}).items()))


@dataclass
class Counter:
    name: str
    help_text: str
    values: dict[LabelKey, float] = field(default_factory=dict)

    def increment(self, labels: dict[str, str] | None = None, value: float = 1.0) -> None:
        key = _label_key(labels)
        self.values[key] = self.values.get(key, 0.0) + value


@dataclass
class HistogramSeries:
    bucket_counts: list[float]
    total: float = 0.0
    count: float = 0.0


@dataclass
class Histogram:
    """Cumulative histogram; bucket i counts observations <= buckets[i]."""

    name: str
    help_text: str
    buckets: tuple[float, ...] = DEFAULT_LATENCY_BUCKETS
    series: dict[LabelKey, HistogramSeries] = field(default_factory=dict)

    def observe(self, value: float, labels: dict[str, str] | None = None) -> None:
        key = _label_key(labels)
        data = self.series.get(key)
        if data is None:
            data = self.series[key] = HistogramSeries(bucket_counts=[0.0] * len(self.buckets))
        for i, bound in enumerate(self.buckets):
            if value <= bound:
                data.bucket_counts[i] += 1.0
        data.total += value
        data.count += 1.0


class MetricsCollector:
    """Thread-safe registry of the client's counters and histograms."""

    DEFAULT_COUNTERS: ClassVar[dict[str, str]] = {
        "roamrpc_requests_total": "Requests dispatched, by message type, mode and outcome",
        "roamrpc_async_timeouts_total": "Async requests that received no answer in time",
        "roamrpc_transport_errors_total": "HTTP sends that could not complete",
        "roamrpc_answers_published_total": "Async answers published on a correlation key",
        "roamrpc_publish_errors_total": "Async answers the broker did not accept",
    }

    DEFAULT_HISTOGRAMS: ClassVar[dict[str, str]] = {
        "roamrpc_request_duration_seconds": "Time from dispatch to decoded answer or failure",
    }

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters = {
            name: Counter(name=name, help_text=text) for name, text in self.DEFAULT_COUNTERS.items()
        }
        self._histograms = {
            name: Histogram(name=name, help_text=text)
            for name, text in self.DEFAULT_HISTOGRAMS.items()
        }

    def increment_counter(
        self, name: str, labels: dict[str, str] | None = None, value: float = 1.0
    ) -> None:
        with self._lock:
            if name in self._counters:
                self._counters[name].increment(labels, value)

    def observe_histogram(
        self, name: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        with self._lock:
            if name in self._histograms:
                self._histograms[name].observe(value, labels)

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> float:
        with self._lock:
            counter = self._counters.get(name)
            return counter.values.get(_label_key(labels), 0.0) if counter else 0.0

    def get_histogram_count(self, name: str, labels: dict[str, str] | None = None) -> float:
        with self._lock:
            histogram = self._histograms.get(name)
            if histogram is None:
                return 0.0
            data = histogram.series.get(_label_key(labels))
            return data.count if data else 0.0

    @staticmethod
    def _format_labels(labels: LabelKey, extra: tuple[str, str] | None = None) -> str:
        pairs = list(labels) + ([extra] if extra else [])
        if not pairs:
            return ""
        return "{" + ",".join(f'{k}="{_escape(v)}"' for k, v in pairs) + "}"

    def export_prometheus(self) -> str:
        """Export all metrics in Prometheus text exposition format."""
        lines: list[str] = []
        with self._lock:
            for counter in self._counters.values():
                lines.append(f"# HELP {counter.name} {counter.help_text}")
                lines.append(f"# TYPE {counter.name} counter")
                if not counter.values:
                    lines.append(f"{counter.name} 0")
                for labels, value in counter.values.items():
                    lines.append(f"{counter.name}{self._format_labels(labels)} {value}")

            for histogram in self._histograms.values():
                lines.append(f"# HELP {histogram.name} {histogram.help_text}")
                lines.append(f"# TYPE {histogram.name} histogram")
                for labels, data in histogram.series.items():
                    for bound, count in zip(histogram.buckets, data.bucket_counts):
                        label_str = self._format_labels(labels, ("le", str(bound)))
                        lines.append(f"{histogram.name}_bucket{label_str} {count}")
                    label_str = self._format_labels(labels, ("le", "+Inf"))
                    lines.append(f"{histogram.name}_bucket{label_str} {data.count}")
                    lines.append(f"{histogram.name}_sum{self._format_labels(labels)} {data.total}")
                    lines.append(
                        f"{histogram.name}_count{self._format_labels(labels)} {data.count}"
                    )
        return "\n".join(lines) + "\n"

    def reset(self) -> None:
        """Reset all metrics to zero. Useful for testing."""
        with self._lock:
            for counter in self._counters.values():
                counter.values.clear()
            for histogram in self._histograms.values():
                histogram.series.clear()


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


_metrics_collector: MetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics() -> MetricsCollector:
    """Get the process-wide metrics collector."""
    global _metrics_collector
    with _collector_lock:
        if _metrics_collector is None:
            _metrics_collector = MetricsCollector()
        return _metrics_collector


def reset_metrics() -> None:
    """Reset the process-wide metrics collector. Useful for testing."""
    with _collector_lock:
        if _metrics_collector is not None:
            _metrics_collector.reset()
