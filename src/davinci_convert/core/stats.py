"""Run-wide outcome counters shared by all workers."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field

from .base import ProcessingResult, ProcessingStatus
from .media import Action


@dataclass(frozen=True)
class StatsSnapshot:
    """Final counts of a run, read after every worker has finished."""

    total: int
    succeeded: int
    skipped: int
    failed: int
    rewrapped: int
    elapsed: float

    @property
    def completed(self) -> int:
        return self.succeeded + self.skipped + self.failed + self.rewrapped


@dataclass
class ConversionStats:
    """
    Lock-guarded counters, one increment per finished file.

    Rewrapped files have their own bucket and are not part of ``succeeded``,
    so ``succeeded + skipped + failed + rewrapped == total`` once the pool
    has drained.
    """

    total: int
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    rewrapped: int = 0
    start_time: float = field(default_factory=time.monotonic)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, result: ProcessingResult) -> None:
        """Count one finished file."""
        with self._lock:
            if result.status is ProcessingStatus.FAILED:
                self.failed += 1
            elif result.status is ProcessingStatus.SKIPPED:
                self.skipped += 1
            elif result.action is Action.REWRAP:
                self.rewrapped += 1
            else:
                self.succeeded += 1

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.start_time

    def snapshot(self) -> StatsSnapshot:
        """Freeze the counters; only meaningful once all workers have joined."""
        return StatsSnapshot(
            total=self.total,
            succeeded=self.succeeded,
            skipped=self.skipped,
            failed=self.failed,
            rewrapped=self.rewrapped,
            elapsed=self.elapsed,
        )
