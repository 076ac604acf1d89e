"""
Per-job scrape pipeline.

Runs one queued path through an ordered list of steps sharing a
PipelineContext:

    mark scraping -> fetch page -> summarize -> previous summary
        -> merge -> send summary -> mark scraped

Any step failure (including a step timing out) skips the remaining steps
and the job is marked failed. Writing the failed status is best effort: a
second failure there is logged and dropped, so process() never raises and
the dispatch loop keeps running. There are no retries; a failed job runs
again only when it is resubmitted.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy.orm import Session, sessionmaker

from path_scraper.core.config import settings
from path_scraper.core.constants import ScrapeStatus
from path_scraper.core.database import SessionLocal
from path_scraper.core.errors import StoreError
from path_scraper.core.page_fetcher import PageFetcher
from path_scraper.core.scrape_queue import QueuedPath
from path_scraper.dtos.page_content_dto import PageContent
from path_scraper.repositories.scraped_path_repo import ScrapedPathRepository
from path_scraper.services.summary_client import SummaryServiceClient
from path_scraper.services.upstream_notifier import UpstreamNotifier

logger = logging.getLogger(__name__)


@dataclass
class PipelineContext:
    """Mutable state handed from step to step for one job."""

    job: QueuedPath
    repo: ScrapedPathRepository
    content: Optional[PageContent] = None
    fresh_summary: Any = None
    previous_summary: Any = None
    merged_summary: Any = None
    completed_steps: list[str] = field(default_factory=list)
    error: Optional[Exception] = None


Step = Callable[[PipelineContext], Awaitable[None]]


class ScrapePipeline:
    """
    Executes the scrape steps for one job against injected collaborators.

    Collaborators are plain synchronous objects (fetcher, AI client,
    main-service notifier); each call runs in a worker thread and is
    bounded by ``call_timeout`` seconds.
    """

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        summary_client: Optional[SummaryServiceClient] = None,
        notifier: Optional[UpstreamNotifier] = None,
        session_factory: Optional[sessionmaker] = None,
        call_timeout: Optional[float] = None,
    ) -> None:
        self.fetcher = fetcher or PageFetcher()
        self.summary_client = summary_client or SummaryServiceClient()
        self.notifier = notifier or UpstreamNotifier()
        self.session_factory = session_factory or SessionLocal
        self.call_timeout = (
            call_timeout if call_timeout is not None else settings.scraper_timeout_seconds
        )
        self.steps: list[tuple[str, Step]] = [
            ("mark_scraping", self._mark_scraping),
            ("fetch_page", self._fetch_page),
            ("summarize", self._summarize),
            ("get_previous_summary", self._get_previous_summary),
            ("merge_summaries", self._merge_summaries),
            ("send_summary", self._send_summary),
            ("mark_scraped", self._mark_scraped),
        ]

    async def process(self, job: QueuedPath) -> ScrapeStatus:
        """
        Run every step for *job* and return its terminal status.

        Returns:
            ScrapeStatus.scraped on success, ScrapeStatus.failed otherwise
        """
        logger.info("Starting processing for path ID %s, URL: %s", job.id, job.full_url)
        session: Session = self.session_factory()
        try:
            ctx = PipelineContext(job=job, repo=ScrapedPathRepository(session))
            return await self.run_steps(ctx)
        finally:
            session.close()

    async def run_steps(self, ctx: PipelineContext) -> ScrapeStatus:
        for name, step in self.steps:
            try:
                await step(ctx)
            except Exception as e:
                ctx.error = e
                logger.error(
                    "Error processing path ID %s, URL: %s at step '%s': %s",
                    ctx.job.id,
                    ctx.job.full_url,
                    name,
                    str(e) or type(e).__name__,
                )
                await self._mark_failed(ctx)
                return ScrapeStatus.failed
            ctx.completed_steps.append(name)

        logger.info("Processing completed for path ID %s", ctx.job.id)
        return ScrapeStatus.scraped

    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        return await asyncio.wait_for(
            asyncio.to_thread(fn, *args), timeout=self.call_timeout
        )

    async def _set_status(self, ctx: PipelineContext, status: ScrapeStatus) -> None:
        # Not bounded by call_timeout; an abandoned write would still own the session.
        affected = await asyncio.to_thread(ctx.repo.update_status, ctx.job.id, status)
        if affected == 0:
            raise StoreError(f"Path {ctx.job.id} no longer exists")
        logger.info("Status updated to '%s' for path ID %s", status, ctx.job.id)

    async def _mark_scraping(self, ctx: PipelineContext) -> None:
        await self._set_status(ctx, ScrapeStatus.scraping)

    async def _fetch_page(self, ctx: PipelineContext) -> None:
        ctx.content = await self._call(self.fetcher.fetch, ctx.job.full_url)

    async def _summarize(self, ctx: PipelineContext) -> None:
        ctx.fresh_summary = await self._call(
            self.summary_client.summarize, ctx.content, ctx.job.path_name
        )

    async def _get_previous_summary(self, ctx: PipelineContext) -> None:
        # None means the website has no summary yet; that is not a failure.
        ctx.previous_summary = await self._call(
            self.notifier.get_previous_summary, ctx.job.website_id
        )

    async def _merge_summaries(self, ctx: PipelineContext) -> None:
        ctx.merged_summary = await self._call(
            self.summary_client.merge,
            ctx.fresh_summary,
            ctx.previous_summary,
            ctx.content,
            ctx.job.website_id,
        )

    async def _send_summary(self, ctx: PipelineContext) -> None:
        await self._call(self.notifier.put_summary, ctx.job.website_id, ctx.merged_summary)

    async def _mark_scraped(self, ctx: PipelineContext) -> None:
        await self._set_status(ctx, ScrapeStatus.scraped)

    async def _mark_failed(self, ctx: PipelineContext) -> None:
        try:
            await self._set_status(ctx, ScrapeStatus.failed)
        except Exception as db_error:
            logger.error(
                "Failed to update status to 'failed' for path ID %s: %s",
                ctx.job.id,
                db_error,
            )
