"""
Metrics Collection - Monitoring Layer

Provides Prometheus-compatible metrics for the storage service:
- Counters (monotonically increasing)
- Gauges (can go up or down)
- Histograms (distribution of values)

Metrics are exposed via the /metrics endpoint for Prometheus scraping.

@.architecture
Incoming: app.py, api/v1/endpoints/storage.py --- {str metric_name, float value, Dict[str, str] labels, metric recording calls}
Processing: inc(), set(), observe(), collect_all(), export_prometheus() --- {5 jobs: collection, export, metric_aggregation, metric_creation, recording}
Outgoing: /metrics endpoint, api/v1/endpoints/storage.py --- {Counter/Gauge/Histogram instances, Dict[str, Any] collected metrics, str Prometheus format}
"""

import time
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple, Any
from collections import defaultdict


LabelKey = Tuple[str, ...]


class _LabeledMetric:
    """Shared label handling for all metric kinds."""

    metric_type = "untyped"

    def __init__(self, name: str, help_text: str, labels: Optional[List[str]] = None):
        self.name = name
        self.help_text = help_text
        self.label_names = labels or []
        self._lock = threading.Lock()

    def _validate_labels(self, labels: Dict[str, str]) -> LabelKey:
        """Validate and order labels."""
        if set(labels.keys()) != set(self.label_names):
            raise ValueError(f"Expected labels {self.label_names}, got {list(labels.keys())}")
        return tuple(str(labels[name]) for name in self.label_names)

    def _label_dict(self, key: LabelKey) -> Dict[str, str]:
        return dict(zip(self.label_names, key))


class Counter(_LabeledMetric):
    """
    Counter metric - monotonically increasing value.

    Use for: operation counts, error counts, bytes transferred.
    """

    metric_type = "counter"

    def __init__(self, name: str, help_text: str, labels: Optional[List[str]] = None):
        super().__init__(name, help_text, labels)
        self._values: Dict[LabelKey, float] = defaultdict(float)

    def inc(self, value: float = 1.0, **labels: str) -> None:
        """
        Increment counter.

        Args:
            value: Amount to increment (must be >= 0)
            **labels: Label values
        """
        if value < 0:
            raise ValueError("Counter can only be incremented by non-negative values")

        key = self._validate_labels(labels)
        with self._lock:
            self._values[key] += value

    def get(self, **labels: str) -> float:
        key = self._validate_labels(labels)
        with self._lock:
            return self._values.get(key, 0.0)

    def collect(self) -> List[Tuple[Dict[str, str], float]]:
        """List of (label_dict, value) tuples for export."""
        with self._lock:
            return [(self._label_dict(key), value) for key, value in self._values.items()]


class Gauge(_LabeledMetric):
    """
    Gauge metric - can go up or down.

    Use for: in-flight operations, current object count.
    """

    metric_type = "gauge"

    def __init__(self, name: str, help_text: str, labels: Optional[List[str]] = None):
        super().__init__(name, help_text, labels)
        self._values: Dict[LabelKey, float] = defaultdict(float)

    def set(self, value: float, **labels: str) -> None:
        key = self._validate_labels(labels)
        with self._lock:
            self._values[key] = value

    def inc(self, value: float = 1.0, **labels: str) -> None:
        key = self._validate_labels(labels)
        with self._lock:
            self._values[key] += value

    def dec(self, value: float = 1.0, **labels: str) -> None:
        self.inc(-value, **labels)

    def get(self, **labels: str) -> float:
        key = self._validate_labels(labels)
        with self._lock:
            return self._values.get(key, 0.0)

    def collect(self) -> List[Tuple[Dict[str, str], float]]:
        with self._lock:
            return [(self._label_dict(key), value) for key, value in self._values.items()]


class Histogram(_LabeledMetric):
    """
    Histogram metric - distribution of values into buckets.

    Use for: operation duration, payload size.
    """

    metric_type = "histogram"

    # Default buckets for operation time (seconds)
    DEFAULT_BUCKETS = [0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]

    def __init__(
        self,
        name: str,
        help_text: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[List[float]] = None
    ):
        """
        Initialize histogram.

        Args:
            name: Metric name
            help_text: Description
            labels: Label names for metric dimensions
            buckets: Bucket boundaries (sorted)
        """
        super().__init__(name, help_text, labels)
        self.buckets = sorted(buckets or self.DEFAULT_BUCKETS)

        # cumulative bucket counts, last slot is +Inf
        self._bucket_counts: Dict[LabelKey, List[int]] = defaultdict(
            lambda: [0] * (len(self.buckets) + 1)
        )
        self._sum: Dict[LabelKey, float] = defaultdict(float)
        self._count: Dict[LabelKey, int] = defaultdict(int)

    def observe(self, value: float, **labels: str) -> None:
        key = self._validate_labels(labels)

        with self._lock:
            self._sum[key] += value
            self._count[key] += 1

            bucket_counts = self._bucket_counts[key]
            for i, bucket in enumerate(self.buckets):
                if value <= bucket:
                    bucket_counts[i] += 1
            bucket_counts[-1] += 1

    @contextmanager
    def time(self, **labels: str) -> Iterator[None]:
        """Observe the wall time spent inside the block."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.observe(time.perf_counter() - start, **labels)

    def _stats(self, key: LabelKey) -> Dict[str, Any]:
        # caller holds the lock
        count = self._count.get(key, 0)
        sum_value = self._sum.get(key, 0.0)
        bucket_counts = self._bucket_counts.get(key, [0] * (len(self.buckets) + 1))
        return {
            'count': count,
            'sum': sum_value,
            'average': sum_value / count if count > 0 else 0.0,
            'buckets': dict(zip([*self.buckets, float('inf')], bucket_counts)),
        }

    def get_stats(self, **labels: str) -> Dict[str, Any]:
        """
        Get histogram statistics.

        Returns:
            Dict with count, sum, average, buckets
        """
        key = self._validate_labels(labels)
        with self._lock:
            return self._stats(key)

    def collect(self) -> List[Tuple[Dict[str, str], Dict[str, Any]]]:
        with self._lock:
            return [(self._label_dict(key), self._stats(key)) for key in list(self._count.keys())]


class MetricsRegistry:
    """
    Central registry for all metrics.

    Manages metric creation and collection for export.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._metrics: Dict[str, _LabeledMetric] = {}

    def _get_or_create(self, cls, name: str, *args: Any) -> Any:
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                metric = cls(name, *args)
                self._metrics[name] = metric
            elif not isinstance(metric, cls):
                raise ValueError(f"Metric {name} already registered as {metric.metric_type}")
            return metric

    def counter(self, name: str, help_text: str, labels: Optional[List[str]] = None) -> Counter:
        """Get or create counter metric."""
        return self._get_or_create(Counter, name, help_text, labels)

    def gauge(self, name: str, help_text: str, labels: Optional[List[str]] = None) -> Gauge:
        """Get or create gauge metric."""
        return self._get_or_create(Gauge, name, help_text, labels)

    def histogram(
        self,
        name: str,
        help_text: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[List[float]] = None
    ) -> Histogram:
        """Get or create histogram metric."""
        return self._get_or_create(Histogram, name, help_text, labels, buckets)

    def collect_all(self) -> Dict[str, Any]:
        """
        Collect all metrics for export.

        Returns:
            Dict mapping metric names to their values
        """
        with self._lock:
            metrics = dict(self._metrics)

        result = {}
        for name, metric in metrics.items():
            entry = {
                'type': metric.metric_type,
                'help': metric.help_text,
                'values': metric.collect(),
            }
            if isinstance(metric, Histogram):
                entry['buckets'] = metric.buckets
            result[name] = entry
        return result

    def export_prometheus(self) -> str:
        """
        Export metrics in Prometheus text format.

        Returns:
            Prometheus-formatted metrics string
        """
        lines = []

        for name, data in self.collect_all().items():
            lines.append(f"# HELP {name} {data['help']}")
            lines.append(f"# TYPE {name} {data['type']}")

            if data['type'] != 'histogram':
                for label_dict, value in data['values']:
                    lines.append(f"{name}{self._format_labels(label_dict)} {value}")
                continue

            for label_dict, stats in data['values']:
                label_str = self._format_labels(label_dict)
                for bucket, count in stats['buckets'].items():
                    le = "+Inf" if bucket == float('inf') else str(bucket)
                    bucket_str = self._format_labels(dict(label_dict, le=le))
                    lines.append(f"{name}_bucket{bucket_str} {count}")
                lines.append(f"{name}_sum{label_str} {stats['sum']}")
                lines.append(f"{name}_count{label_str} {stats['count']}")

        return '\n'.join(lines) + '\n'

    def _format_labels(self, labels: Dict[str, str]) -> str:
        """Format labels for Prometheus output."""
        if not labels:
            return ""
        label_pairs = [f'{k}="{v}"' for k, v in labels.items()]
        return "{" + ",".join(label_pairs) + "}"


# Global registry instance
_global_registry: Optional[MetricsRegistry] = None


def get_registry() -> MetricsRegistry:
    """Get global metrics registry."""
    global _global_registry
    if _global_registry is None:
        _global_registry = MetricsRegistry()
    return _global_registry


# Convenience functions for common metrics
def counter(name: str, help_text: str, labels: Optional[List[str]] = None) -> Counter:
    """Get or create counter from global registry."""
    return get_registry().counter(name, help_text, labels)


def gauge(name: str, help_text: str, labels: Optional[List[str]] = None) -> Gauge:
    """Get or create gauge from global registry."""
    return get_registry().gauge(name, help_text, labels)


def histogram(
    name: str,
    help_text: str,
    labels: Optional[List[str]] = None,
    buckets: Optional[List[float]] = None
) -> Histogram:
    """Get or create histogram from global registry."""
    return get_registry().histogram(name, help_text, labels, buckets)


# Storage service metrics
def setup_storage_metrics() -> Dict[str, Any]:
    """
    Create the file store metrics.

    Returns:
        Dict of metric objects
    """
    registry = get_registry()

    return {
        'operations_total': registry.counter(
            'filestore_operations_total',
            'Total file store operations',
            labels=['operation', 'status']
        ),
        'operation_duration_seconds': registry.histogram(
            'filestore_operation_duration_seconds',
            'File store operation duration in seconds',
            labels=['operation']
        ),
        'bytes_total': registry.counter(
            'filestore_bytes_total',
            'Total payload bytes moved',
            labels=['direction']
        ),
        'inflight_operations': registry.gauge(
            'filestore_inflight_operations',
            'Number of file store operations in progress',
            labels=['operation']
        ),
    }
