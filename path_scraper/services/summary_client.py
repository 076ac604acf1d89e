"""
Client for the AI summary service.

Two calls: summarize freshly scraped page content, and merge a fresh
summary with the website's previous one.
"""
import logging
from typing import Any, Optional

import requests

from path_scraper.core.config import settings
from path_scraper.core.errors import ServiceError
from path_scraper.dtos.page_content_dto import PageContent

logger = logging.getLogger(__name__)

SERVICE_NAME = "AI Service"


class SummaryServiceClient:
    """
    Black-box client for the AI summary service.

    Endpoints:
        POST {base_url}/summary -> {"summary": ...}
        POST {base_url}/merge   -> {"mergedSummary": ...}
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or settings.AI_SERVICE_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.scraper_timeout_seconds

    def _post(self, endpoint: str, payload: dict[str, Any], action: str) -> dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        logger.info("Calling AI service: %s", url)
        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
            if response.status_code != 200:
                raise ServiceError(
                    SERVICE_NAME,
                    f"Failed to {action}: AI service returned non-200 status: {response.status_code}",
                )
            return response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise ServiceError(
                SERVICE_NAME, f"Failed to {action}: {e}", original_error=e
            ) from e

    def summarize(self, content: PageContent, path: str) -> Any:
        """
        Get a fresh summary for one page's extracted content.

        Args:
            content: Structured page content from the page fetcher
            path: Path the content was scraped from (e.g. "/blog")

        Returns:
            The summary value returned by the AI service

        Raises:
            ServiceError: If the call fails or returns a non-200 status
        """
        data = {**content.model_dump(), "path": path}
        body = self._post("/summary", {"data": data}, "get summary")
        logger.info("Received summary from AI service for path %s", path)
        return body.get("summary")

    def merge(
        self,
        fresh_summary: Any,
        previous_summary: Optional[Any],
        content: PageContent,
        website_id: str,
    ) -> Any:
        """
        Merge a fresh summary with the previous one for the website.

        Args:
            fresh_summary: Summary just produced by summarize()
            previous_summary: Summary currently stored upstream, or None
            content: Raw page content, given to the AI as merge context
            website_id: External website identifier

        Returns:
            The merged summary value returned by the AI service

        Raises:
            ServiceError: If the call fails or returns a non-200 status
        """
        payload = {
            "freshSummary": fresh_summary,
            "previousSummary": previous_summary,
            "scrapedData": {**content.model_dump(), "path": ""},
            "websiteId": website_id,
        }
        body = self._post("/merge", payload, "merge summaries")
        logger.info("Received merged summary from AI service for website %s", website_id)
        return body.get("mergedSummary")
