"""In-memory FIFO of paths waiting to be scraped.

Only intake (append) and the dispatch loop (pop_next) touch the queue, and
both run on the event loop thread, so no lock is needed. The queue is not
persisted; anything still waiting is lost on restart.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional

from path_scraper.entities.scraped_path import ScrapedPath

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedPath:
    """Session-independent snapshot of a job record waiting in the queue."""

    id: str
    website_id: str
    path_name: str
    base_url: str

    @classmethod
    def from_entity(cls, path: ScrapedPath) -> "QueuedPath":
        return cls(
            id=path.id,
            website_id=path.website_id,
            path_name=path.path_name,
            base_url=path.base_url,
        )

    @property
    def full_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.path_name}"


class ScrapeQueue:
    def __init__(self) -> None:
        self._items: deque[QueuedPath] = deque()

    def append(self, item: QueuedPath) -> None:
        self._items.append(item)

    def pop_next(self) -> Optional[QueuedPath]:
        """Remove and return the oldest entry, or None when empty."""
        if not self._items:
            return None
        return self._items.popleft()

    def size(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def snapshot(self) -> list[QueuedPath]:
        return list(self._items)

    def reset(self) -> None:
        dropped = len(self._items)
        self._items.clear()
        if dropped:
            logger.debug("Scrape queue reset, dropped %d entries", dropped)
