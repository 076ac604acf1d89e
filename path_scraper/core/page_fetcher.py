"""Page fetch + extraction helpers.

Fetches a page over HTTP and reduces it to the structured content the AI
service summarizes: visible text, forms (with their inputs) and buttons.
"""

import logging
import re
from typing import Optional

import requests
from bs4 import BeautifulSoup, Tag

from path_scraper.core.config import settings
from path_scraper.core.errors import FetchError
from path_scraper.dtos.page_content_dto import (
    ButtonDetails,
    FormDetails,
    FormInput,
    PageContent,
)

logger = logging.getLogger(__name__)

NON_CONTENT_TAGS = ["script", "style", "noscript", "iframe", "template"]
BUTTON_SELECTOR = 'button, input[type="submit"], input[type="button"], a[role="button"]'

_WHITESPACE = re.compile(r"\s+")


def _attr(el: Tag, name: str) -> str:
    """Return attribute *name* of *el* as a string ('' when missing)."""
    value = el.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def extract_text(soup: BeautifulSoup) -> str:
    """Visible body text with scripts/styles removed and whitespace collapsed."""
    body = soup.body or soup
    for el in body.find_all(NON_CONTENT_TAGS):
        el.decompose()
    text = body.get_text(separator=" ")
    return _WHITESPACE.sub(" ", text).strip()


def _input_value(el: Tag) -> str:
    if el.name == "textarea":
        return el.get_text()
    if el.name == "select":
        option = el.find("option", selected=True) or el.find("option")
        if option is None:
            return ""
        return _attr(option, "value") or option.get_text(strip=True)
    return _attr(el, "value")


def extract_forms(soup: BeautifulSoup) -> list[FormDetails]:
    forms: list[FormDetails] = []
    for form in soup.find_all("form"):
        inputs = [
            FormInput(
                type=_attr(el, "type") or el.name.lower(),
                name=_attr(el, "name"),
                value=_input_value(el),
                placeholder=_attr(el, "placeholder"),
            )
            for el in form.find_all(["input", "select", "textarea"])
        ]
        forms.append(
            FormDetails(
                action=_attr(form, "action"),
                method=(_attr(form, "method") or "GET").upper(),
                inputs=inputs,
            )
        )
    return forms


def extract_buttons(soup: BeautifulSoup) -> list[ButtonDetails]:
    buttons: list[ButtonDetails] = []
    for el in soup.select(BUTTON_SELECTOR):
        buttons.append(
            ButtonDetails(
                text=el.get_text(strip=True) or _attr(el, "value"),
                type=_attr(el, "type") or el.name.lower(),
                href=_attr(el, "href"),
            )
        )
    return buttons


def parse_page(html: str) -> PageContent:
    """Extract text, forms and buttons from an HTML document."""
    soup = BeautifulSoup(html, "lxml")
    # Forms and buttons first: text extraction strips non-content tags in place.
    forms = extract_forms(soup)
    buttons = extract_buttons(soup)
    return PageContent(text=extract_text(soup), forms=forms, buttons=buttons)


class PageFetcher:
    """Fetches a URL and returns its structured PageContent."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        self.timeout = timeout if timeout is not None else settings.scraper_timeout_seconds
        self.user_agent = user_agent or settings.SCRAPER_USER_AGENT

    def fetch_html(self, url: str) -> str:
        """GET *url*, raising FetchError on transport failure or non-200 status."""
        headers = {"User-Agent": self.user_agent}
        try:
            res = requests.get(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise FetchError(f"Scraping failed for {url}: {exc}", original_error=exc) from exc
        if res.status_code != 200:
            raise FetchError(
                f"Scraping failed for {url}: failed to fetch page, status: {res.status_code}"
            )
        return res.text

    def fetch(self, url: str) -> PageContent:
        logger.info("Attempting to scrape URL: %s", url)
        html = self.fetch_html(url)
        content = parse_page(html)
        logger.info(
            "Scraped %s: %d chars of text, %d forms, %d buttons",
            url,
            len(content.text),
            len(content.forms),
            len(content.buttons),
        )
        return content
