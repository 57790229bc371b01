"""
Performance Monitor
====================
Run metrics for the harvesting worker pool.

Tracks:
- Pages harvested / failed
- Active workers and the peak number active at once
- Per-page wall time (average and p95)
- Extracted content volume

All methods take an ``asyncio.Lock`` so workers can report concurrently.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

_REPORT_INTERVAL_SEC = 10.0


@dataclass
class PageTiming:
    """Outcome and wall time of a single page harvest."""
    url: str = ""
    total_ms: float = 0.0
    content_chars: int = 0
    status: str = "ok"   # ok | failed


@dataclass
class HarvestMetrics:
    """Snapshot of the pool's metrics at a point in time."""
    pages_total: int = 0
    pages_harvested: int = 0
    pages_failed: int = 0

    active_workers: int = 0
    peak_active_workers: int = 0
    max_workers: int = 0

    total_chars: int = 0

    avg_page_ms: float = 0.0
    p95_page_ms: float = 0.0

    elapsed_sec: float = 0.0

    @property
    def pages_done(self) -> int:
        return self.pages_harvested + self.pages_failed

    def to_dict(self) -> dict:
        return {
            'pages_total': self.pages_total,
            'pages_harvested': self.pages_harvested,
            'pages_failed': self.pages_failed,
            'peak_active_workers': self.peak_active_workers,
            'workers': self.max_workers,
            'total_chars': self.total_chars,
            'avg_page_ms': self.avg_page_ms,
            'p95_page_ms': self.p95_page_ms,
            'elapsed_sec': self.elapsed_sec,
        }


class PerformanceMonitor:
    """
    Async-safe metrics collector for one harvesting run.

    Usage::

        monitor = PerformanceMonitor(max_workers=8, pages_total=120)
        await monitor.start()

        # In each worker:
        await monitor.worker_started()
        ...
        await monitor.record_page(timing)
        await monitor.worker_finished()

        metrics = await monitor.snapshot()
        await monitor.stop()
    """

    def __init__(self, max_workers: int = 1, pages_total: int = 0,
                 report_interval: float = _REPORT_INTERVAL_SEC):
        self._lock = asyncio.Lock()
        self._start_time: float = 0.0
        self._stop_time: float = 0.0
        self._max_workers = max_workers
        self._pages_total = pages_total
        self._report_interval = report_interval

        self._pages_harvested = 0
        self._pages_failed = 0
        self._total_chars = 0

        self._active_workers = 0
        self._peak_active = 0

        # keep the last 1000 timings for percentile calc
        self._page_timings: deque[PageTiming] = deque(maxlen=1000)

        self._reporter_task: Optional[asyncio.Task] = None
        self._running = False

    async def start(self) -> None:
        """Start the clock and the periodic reporter."""
        self._start_time = time.monotonic()
        self._stop_time = 0.0
        self._running = True
        if self._report_interval > 0:
            self._reporter_task = asyncio.create_task(self._reporter_loop())

    async def stop(self) -> None:
        self._running = False
        self._stop_time = time.monotonic()
        if self._reporter_task:
            self._reporter_task.cancel()
            try:
                await self._reporter_task
            except asyncio.CancelledError:
                pass
            self._reporter_task = None

    async def record_page(self, timing: PageTiming) -> None:
        """Record the outcome of one page."""
        async with self._lock:
            if timing.status == "ok":
                self._pages_harvested += 1
                self._total_chars += timing.content_chars
            else:
                self._pages_failed += 1
            self._page_timings.append(timing)

    async def worker_started(self) -> None:
        async with self._lock:
            self._active_workers += 1
            if self._active_workers > self._peak_active:
                self._peak_active = self._active_workers

    async def worker_finished(self) -> None:
        async with self._lock:
            self._active_workers = max(0, self._active_workers - 1)

    async def snapshot(self) -> HarvestMetrics:
        """Take a consistent snapshot of all metrics."""
        now = self._stop_time or time.monotonic()
        async with self._lock:
            elapsed = now - self._start_time if self._start_time else 0.0

            timings = [t.total_ms for t in self._page_timings if t.total_ms > 0]
            avg_page = sum(timings) / len(timings) if timings else 0.0

            p95 = 0.0
            if timings:
                sorted_t = sorted(timings)
                idx = int(len(sorted_t) * 0.95)
                p95 = sorted_t[min(idx, len(sorted_t) - 1)]

            return HarvestMetrics(
                pages_total=self._pages_total,
                pages_harvested=self._pages_harvested,
                pages_failed=self._pages_failed,
                active_workers=self._active_workers,
                peak_active_workers=self._peak_active,
                max_workers=self._max_workers,
                total_chars=self._total_chars,
                avg_page_ms=round(avg_page, 1),
                p95_page_ms=round(p95, 1),
                elapsed_sec=round(elapsed, 2),
            )

    async def _reporter_loop(self) -> None:
        """Periodically log progress."""
        while self._running:
            await asyncio.sleep(self._report_interval)
            if not self._running:
                break
            m = await self.snapshot()
            logger.info(
                f"[MONITOR] "
                f"done={m.pages_done}/{m.pages_total} "
                f"fail={m.pages_failed} "
                f"workers={m.active_workers}/{m.max_workers} "
                f"avg={m.avg_page_ms:.0f}ms "
                f"p95={m.p95_page_ms:.0f}ms "
                f"elapsed={m.elapsed_sec:.0f}s"
            )

    def format_summary(self, metrics: HarvestMetrics) -> str:
        """Format a human-readable summary string."""
        lines = [
            "=" * 65,
            "  HARVEST SUMMARY",
            "=" * 65,
            f"  Pages to harvest:    {metrics.pages_total}",
            f"  Pages harvested:     {metrics.pages_harvested}",
            f"  Pages failed:        {metrics.pages_failed}",
            "-" * 65,
            f"  Avg page time:       {metrics.avg_page_ms:.0f} ms",
            f"  P95 page time:       {metrics.p95_page_ms:.0f} ms",
            "-" * 65,
            f"  Workers:             {metrics.max_workers} (peak active {metrics.peak_active_workers})",
            f"  Extracted markup:    {metrics.total_chars:,} chars",
            f"  Elapsed time:        {metrics.elapsed_sec:.1f} s",
            "=" * 65,
        ]
        return "\n".join(lines)
