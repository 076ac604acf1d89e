"""
Polling dispatch loop feeding the scrape pipeline.

A single asyncio task wakes every ``interval_ms``, pops at most one entry
from the ScrapeQueue and awaits the pipeline for it before sleeping again,
so at most one pipeline run is ever in flight.

Lifecycle:
    start_processing()  starts the task (no-op with a warning if running)
    stop_processing()   stops new ticks; an in-flight job is left to finish
    shutdown()          stop_processing() and wait for the in-flight job
    reset()             clear the queue and cancel the task (tests)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from path_scraper.core.config import settings
from path_scraper.core.scrape_queue import QueuedPath, ScrapeQueue
from path_scraper.services.scrape_pipeline import ScrapePipeline

logger = logging.getLogger(__name__)


class DispatchLoop:
    def __init__(
        self,
        queue: ScrapeQueue,
        pipeline: ScrapePipeline,
        interval_ms: Optional[int] = None,
    ) -> None:
        self.queue = queue
        self.pipeline = pipeline
        self.interval_ms = (
            interval_ms if interval_ms is not None else settings.QUEUE_PROCESSING_INTERVAL_MS
        )
        self._task: Optional[asyncio.Task] = None
        # Superseded tasks still finishing a pipeline run.
        self._draining: list[asyncio.Task] = []
        self._running = False
        self._in_flight = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def start_processing(self, interval_ms: Optional[int] = None) -> None:
        """Start ticking every ``interval_ms``. Must be called from a running event loop."""
        if self._running:
            logger.warning("Queue processing is already active.")
            return
        if interval_ms is not None:
            self.interval_ms = interval_ms
        if self._task is not None and not self._task.done():
            self._draining.append(self._task)
        self._running = True
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Starting queue processing with interval: %dms", self.interval_ms)

    def stop_processing(self) -> None:
        """Stop scheduling ticks. Safe to call when not running."""
        if not self._running and self._task is None:
            return
        self._running = False
        if self._task is not None and not self._in_flight:
            self._task.cancel()
        logger.info("Queue processing stopped.")

    async def shutdown(self) -> None:
        """Stop ticking and wait for any in-flight pipeline run to finish."""
        self.stop_processing()
        tasks = self._draining + ([self._task] if self._task is not None else [])
        self._task = None
        self._draining = []
        if not tasks:
            return
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("Dispatch loop drained.")

    def reset(self) -> None:
        self.queue.reset()
        self._running = False
        self._in_flight = False
        for task in self._draining:
            task.cancel()
        self._draining = []
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _is_current(self) -> bool:
        return self._running and self._task is asyncio.current_task()

    async def _run(self) -> None:
        # A restart replaces _task, so a superseded loop exits after its current tick.
        while self._is_current():
            await asyncio.sleep(self.interval_ms / 1000)
            if not self._is_current():
                break
            try:
                await self.process_next_item()
            except Exception:
                logger.exception("Unexpected error while dispatching queue item")

    async def process_next_item(self) -> Optional[QueuedPath]:
        """
        Run one tick: dequeue the oldest entry and await its pipeline run.

        Returns:
            The processed entry, or None if nothing was dispatched
        """
        if self._in_flight:
            logger.debug("Previous item still processing, skipping tick.")
            return None

        item = self.queue.pop_next()
        if item is None:
            logger.debug("Queue is empty. Waiting for new requests.")
            return None

        logger.info(
            "Processing item from queue: ID %s, URL: %s", item.id, item.full_url
        )
        self._in_flight = True
        try:
            await self.pipeline.process(item)
        finally:
            self._in_flight = False
        return item
