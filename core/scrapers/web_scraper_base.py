import requests
from bs4 import BeautifulSoup
from typing import Optional
import time
import random
import logging
from core.scrapers.base import BaseScraper
from core.scrapers.errors import FetchError

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:89.0) Gecko/20100101 Firefox/89.0",
]

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Connection": "keep-alive",
}


class WebScraperBase(BaseScraper):
    """Base class for scrapers that fetch HTML pages over HTTP.

    Every request is an independent requests.get call with a freshly chosen
    User-Agent. Failed requests are retried with exponential backoff.
    """

    def __init__(self, name: str, url: str, max_retries: int = 3, timeout: float = 10):
        """Initialize the web scraper.

        Args:
            name: Unique identifier for this shop
            url: URL of the first listing page
            max_retries: Attempts per request before giving up
            timeout: Per-request socket timeout in seconds
        """
        super().__init__(name, url)
        self.max_retries = max_retries
        self.timeout = timeout
        self.logger = logging.getLogger(f"scraper.{name}")

    def build_headers(self) -> dict:
        """Return request headers with a randomly chosen User-Agent."""
        headers = dict(DEFAULT_HEADERS)
        headers["User-Agent"] = random.choice(USER_AGENTS)
        return headers

    def fetch(self, url: str, max_retries: Optional[int] = None) -> str:
        """Fetch a URL and return the response body.

        Args:
            url: URL to fetch
            max_retries: Number of attempts, defaults to the scraper's setting

        Returns:
            The response body as text

        Raises:
            FetchError: If every attempt failed
        """
        retries = self.max_retries if max_retries is None else max_retries
        if retries < 1:
            raise ValueError("max_retries must be at least 1")

        for attempt in range(1, retries + 1):
            self.logger.info("Making request to %s (attempt %d/%d)", url, attempt, retries)
            try:
                response = requests.get(url, headers=self.build_headers(), timeout=self.timeout)
                response.raise_for_status()  # Raise exception for 4XX/5XX responses
                self.logger.debug("Response status %s, %d characters", response.status_code, len(response.text))
                return response.text
            except requests.RequestException as e:
                response = getattr(e, "response", None)
                status = response.status_code if response is not None else None
                self.logger.warning("Request failed (attempt %d/%d) for %s: %s (status %s)",
                                    attempt, retries, url, e, status)

                if attempt == retries:
                    raise FetchError(url, status, str(e)) from e

                delay = 2 ** attempt
                self.logger.info("Retrying after %ds delay...", delay)
                time.sleep(delay)

    def get_page(self, url: Optional[str] = None) -> BeautifulSoup:
        """Fetch a page and parse it with BeautifulSoup.

        Args:
            url: URL to fetch, defaults to the scraper's base URL

        Returns:
            BeautifulSoup object for HTML parsing

        Raises:
            FetchError: If the request fails
        """
        target_url = url or self.url
        return BeautifulSoup(self.fetch(target_url), "lxml")
