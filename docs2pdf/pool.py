"""
Harvest Worker Pool
===================
Bounded-concurrency execution of the harvester over the ordered leaf list.

Architecture:
- Work list: an ``asyncio.Queue`` pre-filled with the indices ``0..N-1``;
  each worker pulls one index at a time, so every index is claimed by
  exactly one worker
- Output: a list pre-sized to N; a worker writes only to the slot of the
  index it claimed, so ``fragments[i]`` always belongs to ``pages[i]``
  whatever order the pages finish in
- ``min(W, N)`` worker tasks, joined with ``asyncio.gather``; the pool
  returns only after every worker has drained the queue and exited

A page that fails becomes an empty fragment plus a ``HarvestFailure``;
it never stops the other workers.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, List, Optional, Sequence

from .models import HarvestFailure, HarvestResult, NavigationNode, PageFragment
from .monitor import PageTiming, PerformanceMonitor

logger = logging.getLogger(__name__)

HarvestFn = Callable[[NavigationNode, int], Awaitable[PageFragment]]


class HarvestPool:
    """
    Runs ``harvest(page, worker_id)`` over a page list with at most
    ``max_workers`` calls in flight.

    Usage::

        pool = HarvestPool(harvester.harvest, max_workers=8)
        result = await pool.run(leaf_pages)
        result.fragments  # same order as leaf_pages
    """

    def __init__(
        self,
        harvest: HarvestFn,
        max_workers: int,
        *,
        monitor: Optional[PerformanceMonitor] = None,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._harvest = harvest
        self.max_workers = max_workers
        self._monitor = monitor

    async def run(self, pages: Sequence[NavigationNode]) -> HarvestResult:
        total = len(pages)
        worker_count = min(self.max_workers, total)
        monitor = self._monitor or PerformanceMonitor(max_workers=worker_count, pages_total=total)

        logger.info(f"[POOL] Harvesting {total} pages with {worker_count} concurrent workers")

        work: asyncio.Queue = asyncio.Queue()
        for index in range(total):
            work.put_nowait(index)

        slots: List[Optional[PageFragment]] = [None] * total
        failures: List[HarvestFailure] = []

        await monitor.start()
        try:
            await asyncio.gather(*(
                self._worker(worker_id, pages, work, slots, failures, monitor)
                for worker_id in range(worker_count)
            ))
        finally:
            await monitor.stop()

        metrics = await monitor.snapshot()
        logger.info("\n" + monitor.format_summary(metrics))

        failures.sort(key=lambda f: f.index)
        return HarvestResult(
            fragments=list(slots),
            failures=failures,
            stats=metrics.to_dict(),
        )

    async def _worker(
        self,
        worker_id: int,
        pages: Sequence[NavigationNode],
        work: asyncio.Queue,
        slots: List[Optional[PageFragment]],
        failures: List[HarvestFailure],
        monitor: PerformanceMonitor,
    ) -> None:
        while True:
            try:
                index = work.get_nowait()
            except asyncio.QueueEmpty:
                logger.debug(f"[WORKER-{worker_id}] No pages left, exiting")
                return

            page = pages[index]
            t_start = time.monotonic()
            await monitor.worker_started()
            try:
                fragment = await self._harvest(page, worker_id)
            except Exception as e:
                # the harvester reports its own failures; this guards custom harvest functions
                logger.error(f"[WORKER-{worker_id}] Harvest of \"{page.title}\" raised: {e}", exc_info=True)
                fragment = PageFragment.failed(page, f"{type(e).__name__}: {e}")
            finally:
                await monitor.worker_finished()

            slots[index] = fragment
            await monitor.record_page(PageTiming(
                url=page.url,
                total_ms=(time.monotonic() - t_start) * 1000,
                content_chars=len(fragment.content),
                status="ok" if fragment.ok else "failed",
            ))
            if not fragment.ok:
                failures.append(HarvestFailure(
                    index=index,
                    title=page.title,
                    url=page.url,
                    worker_id=worker_id,
                    error=fragment.error or "",
                ))
