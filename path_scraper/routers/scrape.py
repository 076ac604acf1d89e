from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.orm import Session

from path_scraper.core.database import get_db
from path_scraper.core.scrape_queue import ScrapeQueue
from path_scraper.dtos.scrape_request_dto import (
    WEBSITE_ID_PATTERN,
    PathQueueResult,
    ScrapedPathRead,
    ScrapeQueueResponse,
    ScrapeRequestCreate,
    WebsitePathsResponse,
)
from path_scraper.services.scrape_request_service import ScrapeRequestService

router = APIRouter(prefix="/api", tags=["scrape"])


def get_scrape_queue(request: Request) -> ScrapeQueue:
    """The process-wide queue created by the app lifespan."""
    return request.app.state.scrape_queue


@router.post("/scrape-queue", status_code=202, response_model=ScrapeQueueResponse)
async def queue_scrape_request(
    body: ScrapeRequestCreate,
    db: Session = Depends(get_db),
    queue: ScrapeQueue = Depends(get_scrape_queue),
):
    svc = ScrapeRequestService(db, queue)
    results = await svc.submit_paths(
        body.website_id,
        body.base_website_url,
        [{"path": p.path, "needs_scraping": p.needs_scraping} for p in body.paths],
    )
    return ScrapeQueueResponse(
        message="Scrape request received and paths are being processed or queued.",
        queued_paths=[PathQueueResult(**r) for r in results],
        queue_size=queue.size(),
    )


@router.get("/website-paths/{website_id}", response_model=WebsitePathsResponse)
async def get_website_path_statuses(
    website_id: str = Path(..., pattern=WEBSITE_ID_PATTERN),
    db: Session = Depends(get_db),
    queue: ScrapeQueue = Depends(get_scrape_queue),
):
    svc = ScrapeRequestService(db, queue)
    paths = svc.get_website_path_statuses(website_id)
    return WebsitePathsResponse(
        website_id=website_id,
        paths=[ScrapedPathRead(**p) for p in paths],
    )


@router.get("/health")
async def health():
    return {"status": "ok", "message": "Scraper microservice is running."}
