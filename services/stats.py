"""
Stats aggregation for Review Gate.

Process-wide counters and timing maps shared by every webhook worker.
All mutations and snapshot reads go through one lock. Timing maps are
bounded: once max_entries keys are held, the least recently updated key
is evicted.
"""

import threading
import time
from collections import OrderedDict

from loguru import logger

from models.stats import StatsSnapshot


class StatsAggregator:
    """
    Concurrent-safe PR and check timing statistics.

    Owned by the application lifespan and injected into the services that
    record into it. Nothing is persisted; close() releases the maps.
    """

    def __init__(self, max_entries: int = 10000, clock=time.monotonic):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._started_at = clock()
        self._pr_times: OrderedDict[str, float] = OrderedDict()
        self._check_times: OrderedDict[str, float] = OrderedDict()
        self._total_prs = 0
        self._total_checks = 0
        self._closed = False

    def _put(self, table: OrderedDict, key: str, seconds: float) -> None:
        table[key] = seconds
        table.move_to_end(key)
        while len(table) > self.max_entries:
            evicted, _ = table.popitem(last=False)
            logger.debug(f"Stats entry evicted: {evicted}")

    def record_pr_processing(self, key: str, seconds: float) -> None:
        """Record the elapsed time for one PR and count it as processed."""
        with self._lock:
            self._put(self._pr_times, key, seconds)
            self._total_prs += 1

    def record_check_run(self, name: str, seconds: float) -> None:
        """Record a check executed by the orchestrator and count it."""
        with self._lock:
            self._put(self._check_times, name, seconds)
            self._total_checks += 1

    def record_check_time(self, name: str, seconds: float) -> None:
        """Record the last observed time for an external check run, without counting it."""
        with self._lock:
            self._put(self._check_times, name, seconds)

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            if self._pr_times:
                average = sum(self._pr_times.values()) / len(self._pr_times)
            else:
                average = 0.0

            return StatsSnapshot(
                total_prs_processed=self._total_prs,
                total_checks_run=self._total_checks,
                avg_pr_processing_time=average,
                check_run_times=dict(self._check_times),
                uptime=max(self._clock() - self._started_at, 0.0),
            )

    def reset(self) -> None:
        with self._lock:
            self._pr_times.clear()
            self._check_times.clear()
            self._total_prs = 0
            self._total_checks = 0
            self._started_at = self._clock()

    def close(self) -> None:
        snapshot = self.snapshot()
        logger.info(
            f"Stats closing: {snapshot.total_prs_processed} PRs, "
            f"{snapshot.total_checks_run} checks processed"
        )
        self.reset()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed
