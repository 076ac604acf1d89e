"""
Repository for scraped path (job record) operations.

All SQL for the scraped_paths table lives here. Services and the pipeline
call these methods rather than executing queries directly, and every
database failure surfaces as a StoreError.

The (website_id, path_name, base_url) unique constraint is the authority
on job identity: a duplicate create fails here instead of being accepted.
"""
from __future__ import annotations

import logging
from typing import Optional, List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import select

from path_scraper.core.constants import ScrapeStatus, can_transition
from path_scraper.core.errors import StoreError
from path_scraper.entities.scraped_path import ScrapedPath
from path_scraper.repositories.base_repo import BaseRepository

logger = logging.getLogger(__name__)


class ScrapedPathRepository(BaseRepository[ScrapedPath]):
    """
    Repository for scraped path operations.

    Extends BaseRepository with identity lookups and status
    updates used by intake and the scrape pipeline.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=ScrapedPath)

    def find_by_identity(
        self,
        website_id: str,
        path_name: str,
        base_url: str
    ) -> Optional[ScrapedPath]:
        """
        Find the job record for a (website, path, base URL) triple.

        Returns:
            ScrapedPath entity or None if no record exists
        """
        stmt = select(ScrapedPath).where(
            ScrapedPath.website_id == website_id,
            ScrapedPath.path_name == path_name,
            ScrapedPath.base_url == base_url,
        )
        try:
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"Lookup failed for {path_name}: {exc}", original_error=exc) from exc

    def create_path(
        self,
        website_id: str,
        path_name: str,
        base_url: str,
        status: str = ScrapeStatus.queued
    ) -> ScrapedPath:
        """
        Create a new job record.

        Raises:
            StoreError: If the identity already exists or the write fails
        """
        path = ScrapedPath(
            website_id=website_id,
            path_name=path_name,
            base_url=base_url,
            status=str(status),
        )
        return self.create(path, commit=True)

    def update_status(self, path_id: str, status: str) -> int:
        """
        Update the status of a job record.

        Args:
            path_id: ID of the record to update
            status: New status (queued, scraping, scraped, failed)

        Returns:
            Number of affected records (0 if the record does not exist)

        Raises:
            StoreError: If the transition is not allowed or the write fails
        """
        try:
            path = self.get_by_id(path_id)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"Lookup failed for {path_id}: {exc}", original_error=exc) from exc
        if path is None:
            return 0

        if path.status != status and not can_transition(path.status, status):
            raise StoreError(
                f"Invalid status transition for {path_id}: {path.status} -> {status}"
            )

        path.status = str(status)
        self.commit()
        logger.debug("Path %s status set to '%s'", path_id, status)
        return 1

    def find_by_website_id(self, website_id: str) -> List[ScrapedPath]:
        """
        Get all job records for a website, oldest first.

        Returns:
            List of ScrapedPath entities (empty if none exist)
        """
        stmt = (
            select(ScrapedPath)
            .where(ScrapedPath.website_id == website_id)
            .order_by(ScrapedPath.created_at, ScrapedPath.path_name)
        )
        try:
            return list(self.session.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"Lookup failed for website {website_id}: {exc}", original_error=exc) from exc
