import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from path_scraper.core.config import settings
from path_scraper.core.database import engine
from path_scraper.core.errors import ScraperError
from path_scraper.core.scrape_queue import ScrapeQueue
from path_scraper.routers import scrape
from path_scraper.services.dispatch_loop import DispatchLoop
from path_scraper.services.scrape_pipeline import ScrapePipeline

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Own the scrape queue and dispatch loop for the life of the app."""
    configure_logging()
    queue = ScrapeQueue()
    dispatch_loop = DispatchLoop(queue, ScrapePipeline())
    application.state.scrape_queue = queue
    application.state.dispatch_loop = dispatch_loop

    if settings.DISPATCH_AUTOSTART:
        dispatch_loop.start_processing(settings.QUEUE_PROCESSING_INTERVAL_MS)
    try:
        yield
    finally:
        # Stop taking new work, let the current job finish, then release the DB.
        await dispatch_loop.shutdown()
        engine.dispose()
        logger.info("Queue processing stopped and database connections closed.")


app = FastAPI(title="path-scraper", version="0.1.0", lifespan=lifespan)
app.include_router(scrape.router)

# ---------------------------------------------------------------------------
# Middleware: request-id injection
# ---------------------------------------------------------------------------


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Global exception handlers
# ---------------------------------------------------------------------------


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


@app.exception_handler(RequestValidationError)
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=422,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "detail": jsonable_errors(exc.errors()),
            "request_id": _request_id(request),
        },
    )


@app.exception_handler(ScraperError)
async def scraper_error_handler(request: Request, exc: ScraperError):
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code.lower(),
            "message": exc.message,
            "detail": None,
            "request_id": _request_id(request),
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "http_error",
            "message": str(exc.detail),
            "detail": None,
            "request_id": _request_id(request),
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception", extra={"request_id": _request_id(request)})
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "detail": str(exc) if settings.DEBUG else None,
            "request_id": _request_id(request),
        },
    )


def jsonable_errors(errors: list[dict]) -> list[dict]:
    """Keep the JSON-safe parts of pydantic error entries."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in errors
    ]


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "path-scraper", "version": "0.1.0"}
