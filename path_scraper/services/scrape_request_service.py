"""
Service for taking in scrape requests and reporting path statuses.

Intake converts a submission (website, base URL, requested paths) into job
records and queue entries, deduplicating against what the store already
holds.

Architecture:
    ScrapeRequestService -> ScrapedPathRepository -> scraped_paths table
    ScrapeRequestService -> ScrapeQueue           -> DispatchLoop -> ScrapePipeline

Per-path outcomes:
    needsScraping false      -> skipped (no store or queue access)
    no record                -> created as queued, enqueued
    queued / scraping        -> reported as-is, not enqueued again
    scraped / failed         -> reset to queued, existing record enqueued
    store error              -> failed for that path only; the batch continues
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from path_scraper.core import constants
from path_scraper.core.constants import ScrapeStatus
from path_scraper.core.errors import NotFoundError, StoreError
from path_scraper.core.scrape_queue import QueuedPath, ScrapeQueue
from path_scraper.repositories.scraped_path_repo import ScrapedPathRepository

logger = logging.getLogger(__name__)


class ScrapeRequestService:
    """
    Intake and status queries for scrape jobs.

    Handles:
    - Deduplicating requested paths against existing job records
    - Creating and re-activating job records
    - Enqueueing runnable jobs (at most one queue entry per job)
    - Listing job statuses for a website
    """

    def __init__(self, session: Session, queue: ScrapeQueue) -> None:
        self.session = session
        self.queue = queue
        self.path_repo = ScrapedPathRepository(session)

    async def submit_paths(
        self,
        website_id: str,
        base_url: str,
        paths: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """
        Queue the requested paths of a website for scraping.

        Paths are processed sequentially; a failure on one path never
        stops the others.

        Args:
            website_id: External website identifier
            base_url: Absolute http(s) origin of the website
            paths: List of dicts with 'path' and 'needs_scraping' keys
                   Example: [{"path": "/blog", "needs_scraping": True}, ...]

        Returns:
            One dict per requested path with 'path_name', 'status' and 'message'
        """
        results: list[dict[str, Any]] = []
        for entry in paths:
            path_name = entry["path"]
            if not entry["needs_scraping"]:
                results.append(
                    _result(path_name, constants.SKIPPED, constants.MSG_SKIPPED)
                )
                continue

            try:
                results.append(self._queue_path(website_id, base_url, path_name))
            except StoreError as e:
                logger.error(
                    "Error adding path %s for website %s to queue: %s",
                    path_name,
                    website_id,
                    e,
                )
                results.append(
                    _result(path_name, ScrapeStatus.failed, f"failed to queue: {e}")
                )

        logger.info(
            "Processed %d paths for website %s, queue size now %d",
            len(paths),
            website_id,
            self.queue.size(),
        )
        return results

    def _queue_path(self, website_id: str, base_url: str, path_name: str) -> dict[str, Any]:
        existing = self.path_repo.find_by_identity(website_id, path_name, base_url)

        if existing is None:
            created = self.path_repo.create_path(
                website_id=website_id,
                path_name=path_name,
                base_url=base_url,
                status=ScrapeStatus.queued,
            )
            self.queue.append(QueuedPath.from_entity(created))
            logger.info("New path %s for website %s queued", path_name, website_id)
            return _result(path_name, ScrapeStatus.queued, constants.MSG_NEW_PATH_QUEUED)

        if existing.status in constants.ACTIVE_STATUSES:
            logger.warning(
                "Path %s for website %s already in queue or scraping", path_name, website_id
            )
            return _result(path_name, existing.status, constants.MSG_ALREADY_ACTIVE)

        # scraped or failed: re-activate the existing record (same id)
        message = (
            constants.MSG_REQUEUED_FAILED
            if existing.status == ScrapeStatus.failed
            else constants.MSG_REQUEUED_EXISTING
        )
        snapshot = QueuedPath.from_entity(existing)
        self.path_repo.update_status(existing.id, ScrapeStatus.queued)
        self.queue.append(snapshot)
        logger.info("%s: %s for website %s", message, path_name, website_id)
        return _result(path_name, ScrapeStatus.queued, message)

    def get_website_path_statuses(self, website_id: str) -> list[dict[str, Any]]:
        """
        Get every job record of a website with its current status.

        Args:
            website_id: External website identifier

        Returns:
            List of job status dicts, oldest first

        Raises:
            NotFoundError: If the website has no job records
        """
        paths = self.path_repo.find_by_website_id(website_id)
        if not paths:
            raise NotFoundError(f"No paths found for websiteId: {website_id}")

        return [
            {
                "id": path.id,
                "path_name": path.path_name,
                "base_url": path.base_url,
                "status": path.status,
                "created_at": path.created_at,
                "updated_at": path.updated_at,
            }
            for path in paths
        ]


def _result(path_name: str, status: str, message: str) -> dict[str, Any]:
    return {"path_name": path_name, "status": str(status), "message": message}
