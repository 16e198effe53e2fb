"""Performance regression detection over rolling metric samples.

Each metric keeps its newest ``max_samples`` observations.  The baseline is
a trimmed mean: sort, drop ``floor(n * 0.1)`` samples from each end, and
average the rest, so a few cold-start or GC outliers do not move it.  A new
value regresses when it exceeds the baseline by more than the metric's
threshold percentage.

The HTTP client feeds request latencies in through :meth:`observe`; any
other caller can stream its own metrics the same way.
"""

from __future__ import annotations

import math
from collections import deque
from typing import Callable, Sequence

import structlog

from linkscout.models.monitoring import RegressionEvent

logger = structlog.get_logger(logger_name=__name__)

MIN_SAMPLES = 5
TRIM_FRACTION = 0.1


class PerformanceRegressionDetector:
    """Rolling-baseline regression detector.

    Parameters
    ----------
    threshold_percent:
        Default regression threshold (``20.0`` = 20% slower than baseline).
    max_samples:
        Samples kept per metric; older ones are dropped.
    tracker:
        Optional callback receiving every :class:`RegressionEvent`, e.g. to
        forward it to an analytics backend.
    """

    def __init__(
        self,
        threshold_percent: float = 20.0,
        max_samples: int = 100,
        tracker: Callable[[RegressionEvent], None] | None = None,
    ) -> None:
        if max_samples < 1:
            raise ValueError(f"max_samples must be >= 1, got {max_samples}")
        self._default_threshold = threshold_percent
        self._max_samples = max_samples
        self._tracker = tracker
        self._samples: dict[str, deque[float]] = {}
        self._thresholds: dict[str, float] = {}

    def set_threshold(self, metric: str, threshold_percent: float) -> None:
        self._thresholds[metric] = threshold_percent

    def get_threshold(self, metric: str) -> float:
        return self._thresholds.get(metric, self._default_threshold)

    def add_sample(self, metric: str, value: float) -> None:
        samples = self._samples.get(metric)
        if samples is None:
            samples = deque(maxlen=self._max_samples)
            self._samples[metric] = samples
        samples.append(float(value))

    def get_samples(self, metric: str) -> list[float]:
        return list(self._samples.get(metric, ()))

    @staticmethod
    def calculate_baseline(samples: Sequence[float]) -> float:
        """Trimmed mean of *samples*; ``0.0`` when fewer than 5 survive trimming."""
        ordered = sorted(samples)
        trim = math.floor(len(ordered) * TRIM_FRACTION)
        kept = ordered[trim:len(ordered) - trim] if trim else ordered
        if len(kept) < MIN_SAMPLES:
            return 0.0
        return sum(kept) / len(kept)

    def detect_regression(self, metric: str, value: float) -> bool:
        """Return ``True`` (and emit an event) if *value* regresses *metric*.

        The current value is compared against the existing history; it is
        not added to it.
        """
        history = self._samples.get(metric)
        if history is None or len(history) < MIN_SAMPLES:
            return False

        baseline = self.calculate_baseline(history)
        if baseline == 0:
            return False

        regression = (value - baseline) / baseline * 100.0
        threshold = self.get_threshold(metric)
        if regression <= threshold:
            return False

        event = RegressionEvent(
            metric=metric,
            current=float(value),
            baseline=baseline,
            regression=regression,
            threshold=threshold,
        )
        logger.warning(
            "performance_regression_detected",
            metric=metric,
            current=event.current,
            baseline=round(baseline, 3),
            regression_percent=round(regression, 2),
            threshold_percent=threshold,
        )
        if self._tracker is not None:
            self._tracker(event)
        return True

    def observe(self, metric: str, value: float) -> bool:
        """Check *value* against the history, then record it."""
        regressed = self.detect_regression(metric, value)
        self.add_sample(metric, value)
        return regressed

    def reset(self, metric: str | None = None) -> None:
        """Drop samples for *metric*, or for every metric when ``None``."""
        if metric is None:
            self._samples.clear()
        else:
            self._samples.pop(metric, None)
