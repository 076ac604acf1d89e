"""
Entity for tracking website paths requested for scraping.
Each row is one (website, path, base URL) job and its lifecycle status.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from path_scraper.core.constants import ScrapeStatus
from path_scraper.entities.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class ScrapedPath(Base):
    """
    A single website path and its scrape status.

    The (website_id, path_name, base_url) triple identifies the job; the
    database enforces its uniqueness so concurrent intake calls cannot
    create the same job twice.
    """

    __tablename__ = "scraped_paths"
    __table_args__ = (
        UniqueConstraint(
            "website_id",
            "path_name",
            "base_url",
            name="uq_scraped_paths_website_path_base_url",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    website_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    path_name: Mapped[str] = mapped_column(String(2048), nullable=False)
    base_url: Mapped[str] = mapped_column(String(2048), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ScrapeStatus.queued.value, index=True
    )  # queued, scraping, scraped, failed

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )
