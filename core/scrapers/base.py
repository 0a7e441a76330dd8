# This file defines the abstract base class for all scrapers in the system
# It establishes the common interface the CLI and API rely on

import abc
from typing import List

from core.scrapers.models import ProductRecord, RunSummary


class BaseScraper(abc.ABC):
    """Base class for shop scrapers.

    A scraper walks one shop and produces ProductRecord values. Callers only
    depend on scrape() and summary(), so a new shop layout can be supported
    by adding a subclass without touching the output or persistence code.
    """

    def __init__(self, name: str, url: str):
        """Initialize the scraper with a name and URL.

        Args:
            name: Identifier for this shop (e.g., "woocommerce"). Used to
                  name the scraper's logger.
            url: URL of the first listing page to scrape
        """
        self.name = name
        self.url = url

    @abc.abstractmethod
    def scrape(self) -> List[ProductRecord]:
        """Scrape the shop and return every product that was extracted.

        Items that fail extraction are left out of the result and counted
        as failures in the run summary.
        """
        raise NotImplementedError("Concrete scraper classes must implement scrape() method")

    @abc.abstractmethod
    def summary(self) -> RunSummary:
        """Return the totals of the most recent scrape() call."""
        raise NotImplementedError("Concrete scraper classes must implement summary() method")
