"""Running statistics: a mean and a median over a window of samples."""

from __future__ import annotations

import statistics
import threading


class Mean:
    """Tracks an average. ``record`` is safe to call from several threads."""

    def __init__(self) -> None:
        self._total = 0.0
        self._samples = 0.0
        self._lock = threading.Lock()

    def record(self, sample: float) -> None:
        with self._lock:
            self._total += sample
            self._samples += 1

    def get(self) -> float:
        with self._lock:
            if self._samples == 0:
                return 0.0
            return self._total / self._samples

    def _snapshot(self) -> tuple[float, float]:
        with self._lock:
            return self._total, self._samples

    def merge(self, that: Mean) -> None:
        """Add all of the samples of ``that`` to this mean."""
        total, samples = that._snapshot()
        with self._lock:
            self._total += total
            self._samples += samples


class Median:
    """Tracks the median of the last ``n`` samples."""

    def __init__(self, n: int) -> None:
        if n < 1:
            raise ValueError(f"median window must hold at least one sample, got {n}")
        self._samples = [0.0] * n
        self._write = 0
        self._count = 0
        self._lock = threading.Lock()

    def record(self, sample: float) -> None:
        with self._lock:
            self._samples[self._write] = sample
            self._write = (self._write + 1) % len(self._samples)
            self._count += 1

    def get(self) -> float:
        with self._lock:
            window = self._samples[: min(self._count, len(self._samples))]
        if not window:
            return 0.0
        return float(statistics.median(window))