"""
DTOs for the scrape queue and path status endpoints.

JSON on the wire is camelCase (websiteId, baseWebsiteUrl, needsScraping);
the models accept and emit those aliases.
"""

from datetime import datetime
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

WEBSITE_ID_PATTERN = r"^[0-9a-fA-F]{24}$"
PATH_PATTERN = r"^/[a-zA-Z0-9\-_./]*$"


class PathRequest(BaseModel):
    """One requested path and whether it should be scraped."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    path: str = Field(
        ...,
        pattern=PATH_PATTERN,
        description="Path starting with / using URL-safe characters",
    )
    needs_scraping: bool = Field(..., alias="needsScraping")


class ScrapeRequestCreate(BaseModel):
    """Body of POST /api/scrape-queue."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    website_id: str = Field(
        ...,
        alias="websiteId",
        pattern=WEBSITE_ID_PATTERN,
        description="24-character hexadecimal website identifier",
    )
    paths: list[PathRequest] = Field(..., min_length=1)
    base_website_url: str = Field(..., alias="baseWebsiteUrl")

    @field_validator("base_website_url")
    @classmethod
    def _validate_base_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("baseWebsiteUrl must be a valid http(s) URL")
        return value


class PathQueueResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    path_name: str = Field(..., alias="pathName")
    status: str
    message: str


class ScrapeQueueResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    queued_paths: list[PathQueueResult] = Field(..., alias="queuedPaths")
    queue_size: int = Field(..., alias="queueSize")


class ScrapedPathRead(BaseModel):
    """DTO for reading a job record's status."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    path_name: str = Field(..., alias="pathName")
    base_url: str = Field(..., alias="baseUrl")
    status: str
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class WebsitePathsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    website_id: str = Field(..., alias="websiteId")
    paths: list[ScrapedPathRead]
