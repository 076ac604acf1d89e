"""Status values and intake messages shared by the queue, pipeline and API."""

from enum import StrEnum


class ScrapeStatus(StrEnum):
    queued = "queued"
    scraping = "scraping"
    scraped = "scraped"
    failed = "failed"


# Outcome reported for a path the caller did not ask us to scrape.
SKIPPED = "skipped"

# Intake never enqueues a path that is already in one of these states.
ACTIVE_STATUSES = frozenset({ScrapeStatus.queued, ScrapeStatus.scraping})

ALLOWED_TRANSITIONS: dict[ScrapeStatus, frozenset[ScrapeStatus]] = {
    ScrapeStatus.queued: frozenset({ScrapeStatus.scraping, ScrapeStatus.failed}),
    ScrapeStatus.scraping: frozenset({ScrapeStatus.scraped, ScrapeStatus.failed}),
    ScrapeStatus.scraped: frozenset({ScrapeStatus.queued}),
    ScrapeStatus.failed: frozenset({ScrapeStatus.queued}),
}

MSG_SKIPPED = "scraping not requested for this path"
MSG_NEW_PATH_QUEUED = "new path queued"
MSG_ALREADY_ACTIVE = "already in queue or being scraped"
MSG_REQUEUED_EXISTING = "re-queued existing path"
MSG_REQUEUED_FAILED = "re-queued failed path"


def can_transition(current: str, new: str) -> bool:
    """Return True if moving a path from *current* to *new* status is allowed."""
    try:
        return ScrapeStatus(new) in ALLOWED_TRANSITIONS[ScrapeStatus(current)]
    except (KeyError, ValueError):
        return False
