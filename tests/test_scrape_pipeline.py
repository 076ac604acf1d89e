"""
Unit tests for the per-job scrape pipeline.

Collaborators are mocks; job records live in a file-backed SQLite DB so the
pipeline can open its own sessions.
"""
import threading
import time
from unittest.mock import Mock, call

import pytest

from path_scraper.core.constants import ScrapeStatus
from path_scraper.core.errors import FetchError, ServiceError, StoreError
from path_scraper.core.scrape_queue import QueuedPath
from path_scraper.repositories.scraped_path_repo import ScrapedPathRepository
from path_scraper.services.scrape_pipeline import PipelineContext, ScrapePipeline


def _stored_status(session_factory, path_id):
    with session_factory() as session:
        return ScrapedPathRepository(session).get_by_id(path_id).status


@pytest.fixture
def job(session_factory):
    """A queued job record for website W at http://x/a."""
    with session_factory() as session:
        path = ScrapedPathRepository(session).create_path("W", "/a", "http://x")
        return QueuedPath.from_entity(path)


@pytest.fixture
def pipeline(fetcher, summary_client, notifier, session_factory):
    return ScrapePipeline(
        fetcher=fetcher,
        summary_client=summary_client,
        notifier=notifier,
        session_factory=session_factory,
        call_timeout=5,
    )


class TestScrapePipeline:

    @pytest.mark.asyncio
    async def test_happy_path_marks_scraped(
        self, pipeline, job, session_factory, fetcher, summary_client, notifier, page_content
    ):
        status = await pipeline.process(job)

        assert status == ScrapeStatus.scraped
        assert _stored_status(session_factory, job.id) == "scraped"
        fetcher.fetch.assert_called_once_with("http://x/a")
        summary_client.summarize.assert_called_once_with(page_content, "/a")
        notifier.get_previous_summary.assert_called_once_with("W")
        summary_client.merge.assert_called_once_with("S1", "S0", page_content, "W")
        notifier.put_summary.assert_called_once_with("W", "S2")

    @pytest.mark.asyncio
    async def test_fetch_failure_marks_failed_and_stops(
        self, pipeline, job, session_factory, fetcher, summary_client, notifier
    ):
        fetcher.fetch.side_effect = FetchError("Scraping failed for http://x/a: boom")

        status = await pipeline.process(job)

        assert status == ScrapeStatus.failed
        assert _stored_status(session_factory, job.id) == "failed"
        summary_client.summarize.assert_not_called()
        summary_client.merge.assert_not_called()
        notifier.get_previous_summary.assert_not_called()
        notifier.put_summary.assert_not_called()

    @pytest.mark.asyncio
    async def test_merge_failure_never_sends_summary(
        self, pipeline, job, session_factory, summary_client, notifier
    ):
        summary_client.merge.side_effect = ServiceError("AI Service", "merge down")

        status = await pipeline.process(job)

        assert status == ScrapeStatus.failed
        assert _stored_status(session_factory, job.id) == "failed"
        notifier.get_previous_summary.assert_called_once_with("W")
        notifier.put_summary.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_previous_summary_is_not_an_error(
        self, pipeline, job, session_factory, summary_client, notifier, page_content
    ):
        notifier.get_previous_summary.return_value = None

        status = await pipeline.process(job)

        assert status == ScrapeStatus.scraped
        summary_client.merge.assert_called_once_with("S1", None, page_content, "W")
        assert _stored_status(session_factory, job.id) == "scraped"

    @pytest.mark.asyncio
    async def test_notify_failure_marks_failed(
        self, pipeline, job, session_factory, notifier
    ):
        notifier.put_summary.side_effect = ServiceError("Main Service")

        status = await pipeline.process(job)

        assert status == ScrapeStatus.failed
        assert _stored_status(session_factory, job.id) == "failed"

    @pytest.mark.asyncio
    async def test_step_timeout_is_a_failure(
        self, fetcher, summary_client, notifier, session_factory, job
    ):
        fetcher.fetch.side_effect = lambda url: time.sleep(0.5)
        pipeline = ScrapePipeline(
            fetcher=fetcher,
            summary_client=summary_client,
            notifier=notifier,
            session_factory=session_factory,
            call_timeout=0.05,
        )

        status = await pipeline.process(job)

        assert status == ScrapeStatus.failed
        assert _stored_status(session_factory, job.id) == "failed"
        summary_client.summarize.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_record_ends_failed_without_raising(
        self, pipeline, fetcher
    ):
        ghost = QueuedPath(id="missing", website_id="W", path_name="/a", base_url="http://x")

        status = await pipeline.process(ghost)

        assert status == ScrapeStatus.failed
        fetcher.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_status_write_error_is_swallowed(self, pipeline, job, fetcher):
        """A second failure while writing 'failed' is logged, not raised."""
        fetcher.fetch.side_effect = FetchError("unreachable")
        repo = Mock(spec=ScrapedPathRepository)
        repo.update_status.side_effect = [1, StoreError("db down")]
        ctx = PipelineContext(job=job, repo=repo)

        status = await pipeline.run_steps(ctx)

        assert status == ScrapeStatus.failed
        assert isinstance(ctx.error, FetchError)
        assert repo.update_status.call_args_list == [
            call(job.id, ScrapeStatus.scraping),
            call(job.id, ScrapeStatus.failed),
        ]

    @pytest.mark.asyncio
    async def test_status_writes_run_off_the_event_loop(self, pipeline, job):
        loop_thread = threading.get_ident()
        write_threads = []

        def update_status(path_id, status):
            write_threads.append(threading.get_ident())
            return 1

        repo = Mock(spec=ScrapedPathRepository)
        repo.update_status.side_effect = update_status
        ctx = PipelineContext(job=job, repo=repo)

        status = await pipeline.run_steps(ctx)

        assert status == ScrapeStatus.scraped
        assert len(write_threads) == 2
        assert loop_thread not in write_threads

    @pytest.mark.asyncio
    async def test_completed_steps_record_progress(self, pipeline, job, summary_client):
        summary_client.summarize.side_effect = ServiceError("AI Service")
        with pipeline.session_factory() as session:
            ctx = PipelineContext(job=job, repo=ScrapedPathRepository(session))
            await pipeline.run_steps(ctx)

        assert ctx.completed_steps == ["mark_scraping", "fetch_page"]
        assert ctx.fresh_summary is None

    @pytest.mark.asyncio
    async def test_base_url_trailing_slash_not_doubled(self, pipeline, session_factory, fetcher):
        with session_factory() as session:
            path = ScrapedPathRepository(session).create_path("W", "/b", "http://x/")
            job = QueuedPath.from_entity(path)

        await pipeline.process(job)

        fetcher.fetch.assert_called_once_with("http://x/b")
