from core.scrapers.web_scraper_base import WebScraperBase
from core.scrapers.errors import ExtractionError, FetchError
from core.scrapers.models import ProductRecord, RunSummary, ScrapeRunStats
from core.scrapers import extraction
from bs4 import BeautifulSoup, Tag
from typing import Callable, List, Optional, Tuple
import time

PageCallback = Callable[[List[ProductRecord]], None]


class WooCommerceScraper(WebScraperBase):
    """Scraper for paginated WooCommerce shop listings.

    Pages are processed one at a time: every listing item is extracted in
    order, each item costing one extra request for its product page, with a
    fixed pause between items and between pages.
    """

    def __init__(self,
                 url: str = "https://pcgameskey.com/shop",
                 category: str = "SOFTWARE",
                 max_retries: int = 3,
                 timeout: float = 10,
                 item_delay: float = 1.0,
                 page_delay: float = 2.0,
                 on_page: Optional[PageCallback] = None):
        """Initialize the WooCommerce scraper.

        Args:
            url: First listing page of the shop
            category: Category label stamped on every product
            max_retries: Attempts per request
            timeout: Per-request timeout in seconds
            item_delay: Seconds to wait after each listing item
            page_delay: Seconds to wait before fetching the next page
            on_page: Called after every page with all products collected so
                     far, typically to rewrite the CSV output
        """
        super().__init__("woocommerce", url, max_retries=max_retries, timeout=timeout)
        self.category = category
        self.item_delay = item_delay
        self.page_delay = page_delay
        self.on_page = on_page
        self.stats = ScrapeRunStats()

    def scrape(self) -> List[ProductRecord]:
        """Walk every listing page starting at the base URL.

        Returns:
            All products extracted across all pages
        """
        self.stats = ScrapeRunStats()
        products: List[ProductRecord] = []
        current_url: Optional[str] = self.url
        visited = set()

        self.logger.info("Starting product scrape at %s", self.url)
        while current_url:
            visited.add(current_url)
            page_products, listing = self.scrape_page(current_url)
            products.extend(page_products)

            if self.on_page is not None:
                self.on_page(list(products))

            next_url = extraction.find_next_page_url(listing, current_url) if listing is not None else None
            if next_url in visited:
                self.logger.warning("Next page link %s was already scraped, stopping", next_url)
                next_url = None

            current_url = next_url
            if current_url:
                self.stats.current_page += 1
                time.sleep(self.page_delay)

        summary = self.summary()
        self.logger.info("Scraping completed: %d products, %d failed, %d pages",
                         summary.total_products, summary.failed_products, summary.total_pages)
        return products

    def summary(self) -> RunSummary:
        return self.stats.summary()

    def scrape_page(self, url: str) -> Tuple[List[ProductRecord], Optional[BeautifulSoup]]:
        """Extract every product on one listing page.

        Returns:
            The page's products and the parsed listing, which is None when
            the page itself could not be fetched
        """
        self.logger.info("Scraping page %d: %s", self.stats.current_page, url)
        listing = None
        try:
            listing = self.get_page(url)
            selector, items = extraction.select_first_match(listing, extraction.LISTING_SELECTORS)
        except Exception as e:  # pylint: disable=broad-exception-caught
            self.logger.exception("Scraping page %s: %s", url, e)
            return [], listing

        if selector is None:
            self.logger.warning("No product elements found on %s", url)
        else:
            self.logger.info("Using selector %s with %d products", selector, len(items))

        products = []
        for item in items:
            try:
                product = self.extract_product(item, url)
            except Exception as e:  # pylint: disable=broad-exception-caught
                self.logger.exception("Extracting product data on %s: %s", url, e)
                self.stats.record_failure()
            else:
                products.append(product)
                self.stats.record_success()
            time.sleep(self.item_delay)

        return products, listing

    def extract_product(self, item: Tag, page_url: str) -> ProductRecord:
        """Build a ProductRecord from a listing item and its product page.

        Raises:
            ExtractionError: If the item has no name or no link
        """
        name = extraction.extract_name(item)
        url = extraction.extract_product_url(item, page_url)
        if not name or not url:
            raise ExtractionError(f"Missing name or URL (name={name!r}, url={url!r})")

        self.logger.debug("Extracting product: %s (%s)", name, url)
        original_price, current_price = extraction.extract_price_pair(item)
        image_url, description = self.fetch_details(url)

        return ProductRecord(
            name=name,
            url=url,
            image_url=image_url,
            category=self.category,
            original_price=original_price,
            current_price=current_price,
            discount_percent=extraction.compute_discount(original_price, current_price),
            rating=extraction.extract_rating(item),
            description=description,
        )

    def fetch_details(self, url: str) -> Tuple[str, str]:
        """Fetch a product page and return its (image_url, description)."""
        try:
            page = self.get_page(url)
        except FetchError as e:
            self.logger.exception("Fetching description from %s: %s", url, e)
            return "", extraction.DESCRIPTION_FETCH_FAILED

        image_url = extraction.extract_image_url(page, url)
        if not image_url:
            self.logger.debug("No image found for %s", url)
        return image_url, extraction.extract_description(page)
