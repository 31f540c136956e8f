"""
Metrics Collection for the recurrence engine.

Provides counters and timers for rule lifecycle operations.
"""

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Any, Iterator


class MetricsCollector:
    """Collects and manages metrics for recurrence lifecycle operations."""

    def __init__(self):
        """Initialize metrics collector."""
        self.metrics = defaultdict(int)
        self.timers = defaultdict(float)
        self.lock = threading.Lock()

        # Initialize counters
        self.metrics["rules_created_total"] = 0
        self.metrics["instances_created_total"] = 0
        self.metrics["instances_deleted_total"] = 0
        self.metrics["empty_generations_total"] = 0
        self.metrics["store_failures_total"] = 0

    def increment_counter(self, metric_name: str, value: int = 1):
        """Increment a counter metric."""
        with self.lock:
            self.metrics[metric_name] += value

    def record_timer(self, metric_name: str, duration: float):
        """Record a timing metric."""
        with self.lock:
            self.timers[metric_name] += duration

    def get_metrics(self) -> Dict[str, Any]:
        """Get current metrics values."""
        with self.lock:
            return {
                "counters": dict(self.metrics),
                "timers": dict(self.timers),
                "timestamp": datetime.now(timezone.utc).isoformat()
            }

    def reset(self):
        """Zero every counter and timer."""
        with self.lock:
            for name in list(self.metrics):
                self.metrics[name] = 0
            self.timers.clear()

    def rule_created(self):
        """Record that a recurrence rule was persisted."""
        self.increment_counter("rules_created_total")

    def instances_created(self, count: int):
        """Record materialized event instances."""
        self.increment_counter("instances_created_total", count)

    def instances_deleted(self, count: int):
        """Record removed event instances."""
        self.increment_counter("instances_deleted_total", count)

    def empty_generation(self):
        """Record a generation that produced no occurrences."""
        self.increment_counter("empty_generations_total")

    def store_failure(self):
        """Record a failed store call."""
        self.increment_counter("store_failures_total")

    @contextmanager
    def time_operation(self, metric_name: str) -> Iterator[None]:
        """Context manager to time an operation, failed or not."""
        start_time = time.perf_counter()
        try:
            yield
        finally:
            self.record_timer(metric_name, time.perf_counter() - start_time)


# Global metrics instance
metrics_collector = MetricsCollector()
