# announcer/infra/metrics.py
"""
In-process counters and timing histograms for the broadcast pipeline.

Keys follow ``name{label=value,...}`` with labels sorted, so
``broadcast_sends_total{channel=EMAIL,status=sent}``.
"""
from __future__ import annotations
import time
from collections import defaultdict
from threading import Lock
from announcer.infra.logging_config import get_logger

logger = get_logger(__name__)


def _summarize(values: list[float]) -> dict:
    if not values:
        return {"count": 0, "min": 0, "max": 0, "avg": 0, "p95": 0}

    ordered = sorted(values)
    count = len(ordered)
    return {
        "count": count,
        "min": ordered[0],
        "max": ordered[-1],
        "avg": sum(ordered) / count,
        "p95": ordered[min(int(count * 0.95), count - 1)],
    }


class MetricsCollector:
    """Thread-safe counters and histograms kept in memory"""

    def __init__(self):
        self._counters: dict[str, int] = defaultdict(int)
        self._histograms: dict[str, list[float]] = defaultdict(list)
        self._lock = Lock()

    def inc_counter(self, name: str, amount: int = 1, labels: dict | None = None) -> None:
        key = self._make_key(name, labels)
        with self._lock:
            self._counters[key] += amount

    def observe_histogram(self, name: str, value: float, labels: dict | None = None) -> None:
        key = self._make_key(name, labels)
        with self._lock:
            self._histograms[key].append(value)

    def get_metrics(self) -> dict:
        """Snapshot of all counters and histogram summaries"""
        with self._lock:
            counters = dict(self._counters)
            histograms = {k: _summarize(v) for k, v in self._histograms.items()}
        return {"counters": counters, "histograms": histograms}

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()
        logger.info("Metrics reset")

    @staticmethod
    def _make_key(name: str, labels: dict | None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"


_metrics = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector"""
    return _metrics


def inc_counter(name: str, amount: int = 1, **labels) -> None:
    _metrics.inc_counter(name, amount, labels or None)


def observe_histogram(name: str, value: float, **labels) -> None:
    _metrics.observe_histogram(name, value, labels or None)


class Timer:
    """Context manager recording elapsed seconds into a histogram"""

    def __init__(self, metric_name: str, **labels):
        self.metric_name = metric_name
        self.labels = labels
        self.start_time: float | None = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            observe_histogram(self.metric_name, time.perf_counter() - self.start_time, **self.labels)


class BroadcastMetrics:
    """Broadcast pipeline metrics tracking"""

    @staticmethod
    def send_succeeded(channel: str) -> None:
        inc_counter("broadcast_sends_total", channel=channel, status="sent")

    @staticmethod
    def send_failed(channel: str, reason: str) -> None:
        inc_counter("broadcast_sends_total", channel=channel, status="failed")
        inc_counter("broadcast_send_failures_total", channel=channel, reason=reason)

    @staticmethod
    def batch_processed(size: int) -> None:
        inc_counter("broadcast_batches_total")
        inc_counter("broadcast_recipients_total", size)

    @staticmethod
    def run_finished(mode: str) -> None:
        inc_counter("broadcast_runs_total", mode=mode)

    @staticmethod
    def track_batch_time() -> Timer:
        return Timer("broadcast_batch_seconds")
