"""In-process counters, gauges and store-call timings for the catalogue."""

from __future__ import annotations

import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import DefaultDict, Dict, Iterator, List

from .logging import get_logger

logger = get_logger(__name__)


class MetricsClient:  # pragma: no cover - interface only
    """What the gateway reports: call counts, collection size, store latency."""

    def increment(self, metric: str, value: int = 1) -> None:
        raise NotImplementedError

    def gauge(self, metric: str, value: int) -> None:
        raise NotImplementedError

    def timing(self, metric: str, milliseconds: float) -> None:
        raise NotImplementedError

    @contextmanager
    def timed(self, metric: str) -> Iterator[None]:
        started = time.perf_counter()
        try:
            yield
        finally:
            self.timing(metric, (time.perf_counter() - started) * 1000)


@dataclass
class InMemoryMetricsClient(MetricsClient):
    """Keeps everything in memory and mirrors it to the debug log."""

    counters: DefaultDict[str, int] = field(default_factory=lambda: defaultdict(int))
    gauges: Dict[str, int] = field(default_factory=dict)
    timings: DefaultDict[str, List[float]] = field(default_factory=lambda: defaultdict(list))

    def increment(self, metric: str, value: int = 1) -> None:
        self.counters[metric] += value
        logger.debug("metrics_increment", extra={"metric": metric, "value": value})

    def gauge(self, metric: str, value: int) -> None:
        self.gauges[metric] = value
        logger.debug("metrics_gauge", extra={"metric": metric, "value": value})

    def timing(self, metric: str, milliseconds: float) -> None:
        self.timings[metric].append(milliseconds)
        logger.debug(
            "metrics_timing",
            extra={"metric": metric, "elapsed_ms": round(milliseconds, 3)},
        )

    def snapshot(self) -> Dict[str, int]:
        """Counters and gauges merged; timings report their sample count."""

        merged: Dict[str, int] = dict(self.counters)
        merged.update(self.gauges)
        for metric, samples in self.timings.items():
            merged[f"{metric}_count"] = len(samples)
        return merged


_metrics_singleton: InMemoryMetricsClient | None = None


def get_metrics_client() -> MetricsClient:
    """Return the process-wide metrics client."""

    global _metrics_singleton
    if _metrics_singleton is None:
        _metrics_singleton = InMemoryMetricsClient()
    return _metrics_singleton
