"""
Client for the main service (system of record for website summaries).
"""
import logging
from typing import Any, Optional

import requests

from path_scraper.core.config import settings
from path_scraper.core.errors import ServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "Main Service"


class UpstreamNotifier:
    """
    Reads and writes a website's stored summary on the main service.

    Both calls use GET/PUT {base_url}/websites/{website_id}/summary.
    A 404 on read means no summary exists yet and is not an error.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or settings.MAIN_SERVICE_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.scraper_timeout_seconds

    def _summary_url(self, website_id: str) -> str:
        return f"{self.base_url}/websites/{website_id}/summary"

    def get_previous_summary(self, website_id: str) -> Optional[Any]:
        """Return the stored summary for *website_id*, or None if there is none."""
        url = self._summary_url(website_id)
        logger.info("Fetching previous summary for website %s", website_id)
        try:
            response = requests.get(url, timeout=self.timeout)
            if response.status_code == 404:
                logger.warning("No previous summary found for website %s", website_id)
                return None
            if response.status_code != 200:
                raise ServiceError(
                    SERVICE_NAME,
                    f"Failed to get previous summary: main service returned non-200 status: {response.status_code}",
                )
            return response.json().get("previousSummary")
        except (requests.exceptions.RequestException, ValueError) as e:
            raise ServiceError(
                SERVICE_NAME, f"Failed to get previous summary: {e}", original_error=e
            ) from e

    def put_summary(self, website_id: str, summary: Any) -> Any:
        """Persist *summary* as the website's new summary. Returns the response body."""
        url = self._summary_url(website_id)
        logger.info("Sending new summary for website %s", website_id)
        try:
            response = requests.put(url, json={"newSummary": summary}, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ServiceError(
                SERVICE_NAME, f"Failed to send new summary: {e}", original_error=e
            ) from e

        if response.status_code not in (200, 204):
            raise ServiceError(
                SERVICE_NAME,
                f"Failed to send new summary: main service returned non-200/204 status: {response.status_code}",
            )
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
