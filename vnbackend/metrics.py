"""In-process request metrics: a labelled histogram and counter."""

from __future__ import annotations

import bisect
import math
import threading
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass


class _LabelledMetric:
    def __init__(self, name: str, help: str, label_names: Iterable[str]) -> None:
        self.name = name
        self.help = help
        self.label_names = tuple(label_names)
        self._lock = threading.Lock()

    def _key(self, labels: Sequence[str]) -> tuple[str, ...]:
        if isinstance(labels, str):
            raise TypeError("labels must be a sequence of label values, not a string")
        key = tuple(str(value) for value in labels)
        if len(key) != len(self.label_names):
            raise ValueError(
                f"{self.name}: expected {len(self.label_names)} label values, got {len(key)}"
            )
        return key


class Histogram(_LabelledMetric):
    """A histogram with fixed upper bounds, kept per label combination."""

    def __init__(
        self,
        name: str,
        help: str,
        buckets: Iterable[float],
        label_names: Iterable[str],
    ) -> None:
        super().__init__(name, help, label_names)
        self.buckets = tuple(sorted(set(float(b) for b in buckets)))
        if not self.buckets:
            raise ValueError("a histogram needs at least one bucket")
        self._counts: dict[tuple[str, ...], list[int]] = {}

    def observe(self, labels: Sequence[str], value: float) -> None:
        """Record one observation."""
        key = self._key(labels)
        index = bisect.bisect_left(self.buckets, value)
        with self._lock:
            counts = self._counts.setdefault(key, [0] * (len(self.buckets) + 1))
            counts[index] += 1

    def count(self, labels: Sequence[str]) -> int:
        """Number of observations for these labels."""
        key = self._key(labels)
        with self._lock:
            return sum(self._counts.get(key, ()))

    def bucket_counts(self, labels: Sequence[str]) -> dict[float, int]:
        """Cumulative counts per upper bound, ending with +Inf."""
        key = self._key(labels)
        with self._lock:
            counts = list(self._counts.get(key, [0] * (len(self.buckets) + 1)))
        result: dict[float, int] = {}
        running = 0
        for bound, n in zip((*self.buckets, math.inf), counts):
            running += n
            result[bound] = running
        return result


class Counter(_LabelledMetric):
    """A monotonically increasing counter, kept per label combination."""

    def __init__(self, name: str, help: str, label_names: Iterable[str]) -> None:
        super().__init__(name, help, label_names)
        self._values: dict[tuple[str, ...], int] = {}

    def inc(self, labels: Sequence[str]) -> None:
        """Add one."""
        key = self._key(labels)
        with self._lock:
            self._values[key] = self._values.get(key, 0) + 1

    def value(self, labels: Sequence[str]) -> int:
        """Current value for these labels."""
        key = self._key(labels)
        with self._lock:
            return self._values.get(key, 0)


REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request processing time",
    (0.1, 0.25, 0.5, 1, 2.5),
    ("handler", "method"),
)

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ("handler", "method", "status"),
)


@dataclass
class StatusRecorder:
    """Remembers the status code written to a response."""

    downstream: Callable[[int], None] | None = None
    status_code: int = 0

    def write_header(self, code: int) -> None:
        self.status_code = code
        if self.downstream is not None:
            self.downstream(code)


def record_request(handler: str, method: str, status: int, duration: float) -> None:
    """Record the duration and outcome of one handled request."""
    REQUEST_DURATION.observe((handler, method), duration)
    REQUEST_COUNT.inc((handler, method, str(status)))