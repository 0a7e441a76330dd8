"""Field extraction for WooCommerce listing items and product pages.

Every field is located by trying an ordered list of CSS selectors and taking
the first one that yields a usable value. Lists run from the most specific
WooCommerce selector to generic fallbacks.
"""
import re
from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

LISTING_SELECTORS = [
    ".products li.product",
    ".woocommerce-products-grid .product",
    ".product-grid-item",
    '[class*="product-item"]',
    ".product",
    '[class*="product"]',
    "article",
]

NAME_SELECTORS = [
    ".product-title",
    "h2.woocommerce-loop-product__title",
    "h3",
]

URL_SELECTORS = [
    ".product-title a",
    "h2.woocommerce-loop-product__title a",
    "h3 a",
    "a.woocommerce-LoopProduct-link",
]

DESCRIPTION_SELECTORS = [
    ".woocommerce-Tabs-panel--description",
    ".woocommerce-product-details__short-description",
    ".product-description",
    ".description",
    '[itemprop="description"]',
]

META_IMAGE_SELECTORS = [
    'meta[property="og:image"]',
    'meta[name="twitter:image"]',
]

IMAGE_SELECTORS = [
    ".woocommerce-product-gallery__image img",
    ".product-image img",
    ".product-gallery img",
    "img.wp-post-image",
    'img[src*="product"]',
    'img[src*="windows"]',
    'img[src*="office"]',
    ".rh-flex-center-align img",
]

NEXT_PAGE_SELECTORS = [
    ".woocommerce-pagination .next",
    ".pagination .next",
    "a.next.page-numbers",
]

# Lazy-loading themes serve these until the real image is swapped in
PLACEHOLDER_IMAGES = ("wooproductph.png", "blank.gif")

NO_DESCRIPTION = "No description available"
DESCRIPTION_FETCH_FAILED = "Failed to fetch description"

DEFAULT_RATING = 5

_WHITESPACE = re.compile(r"\s+")
_NON_NUMERIC = re.compile(r"[^0-9.]")
_INTEGER = re.compile(r"\d+")


def clean_whitespace(text: str) -> str:
    """Collapse runs of spaces, tabs and newlines into single spaces."""
    return _WHITESPACE.sub(" ", text).strip()


def extract_field(node: Tag, selectors: Iterable[str]) -> Optional[str]:
    """Return the text of the first element with non-empty text.

    Selectors are tried in order; within a selector, elements are tried in
    document order. Returns None when nothing matches.
    """
    for selector in selectors:
        for element in node.select(selector):
            text = element.get_text().strip()
            if text:
                return text
    return None


def extract_attribute(node: Tag, selectors: Iterable[str], attrs: Sequence[str],
                      skip: Sequence[str] = ()) -> Optional[str]:
    """Return the first non-empty attribute value found by the selectors.

    For each matched element the attributes in ``attrs`` are read in order.
    Values containing any of the ``skip`` substrings are ignored.
    """
    for selector in selectors:
        for element in node.select(selector):
            for attr in attrs:
                value = (element.get(attr) or "").strip()
                if value and not any(marker in value for marker in skip):
                    return value
    return None


def select_first_match(node: Tag, selectors: Iterable[str]) -> Tuple[Optional[str], List[Tag]]:
    """Return the first selector that matches anything, with its elements."""
    for selector in selectors:
        elements = node.select(selector)
        if elements:
            return selector, elements
    return None, []


def is_placeholder(src: Optional[str]) -> bool:
    return not src or any(marker in src for marker in PLACEHOLDER_IMAGES)


def parse_price(text: Optional[str]) -> Optional[float]:
    """Parse a price string such as "Us$ 1,299.00" into a float.

    Everything but digits and dots is stripped first. Returns None when no
    number is left.
    """
    if not text:
        return None
    try:
        return float(_NON_NUMERIC.sub("", text))
    except ValueError:
        return None


def compute_discount(original_price: Optional[str], current_price: Optional[str]) -> Optional[int]:
    """Percentage saved relative to the original price, rounded to an int."""
    original = parse_price(original_price)
    current = parse_price(current_price)
    if original is None or current is None or original == 0:
        return None
    return round((original - current) / original * 100)


def parse_rating(text: Optional[str]) -> int:
    """Return the first integer in a star-rating label, or 5."""
    if not text:
        return DEFAULT_RATING
    match = _INTEGER.search(text)
    if not match:
        return DEFAULT_RATING
    rating = int(match.group())
    if not 1 <= rating <= 5:
        return DEFAULT_RATING
    return rating


def extract_name(item: Tag) -> Optional[str]:
    name = extract_field(item, NAME_SELECTORS)
    return clean_whitespace(name) if name else None


def extract_product_url(item: Tag, base_url: str) -> Optional[str]:
    href = extract_attribute(item, URL_SELECTORS, ["href"])
    return urljoin(base_url, href) if href else None


def extract_price_pair(item: Tag) -> Tuple[Optional[str], str]:
    """Return (original_price, current_price) for a listing item.

    A sale shows the old price struck through in <del> and the new one in
    <ins>. Without a <del>, the whole price container is the current price.
    """
    container = item.select_one(".price")
    if container is None:
        return None, ""

    original = container.find("del")
    original_text = clean_whitespace(original.get_text()) if original else ""
    if original_text:
        sale = container.find("ins")
        current_text = clean_whitespace(sale.get_text()) if sale else ""
        return original_text, current_text or clean_whitespace(container.get_text())

    return None, clean_whitespace(container.get_text())


def extract_rating(item: Tag) -> int:
    element = item.select_one(".star-rating")
    return parse_rating(element.get_text() if element else None)


def extract_description(page: BeautifulSoup) -> str:
    description = extract_field(page, DESCRIPTION_SELECTORS)
    if not description:
        return NO_DESCRIPTION
    return clean_whitespace(description) or NO_DESCRIPTION


def extract_image_url(page: BeautifulSoup, base_url: str) -> str:
    """Find the product image on a product page.

    og:image and twitter:image meta tags come first, then image elements.
    Placeholder images are skipped wherever they appear.
    """
    image = extract_attribute(page, META_IMAGE_SELECTORS, ["content"])
    if is_placeholder(image):
        image = extract_attribute(page, IMAGE_SELECTORS, ["src", "data-src"], skip=PLACEHOLDER_IMAGES)
    return urljoin(base_url, image) if image else ""


def find_next_page_url(page: BeautifulSoup, base_url: str) -> Optional[str]:
    """Return the absolute URL of the next listing page, or None on the last page."""
    for selector in NEXT_PAGE_SELECTORS:
        for element in page.select(selector):
            href = element.get("href")
            if not href:
                link = element.find("a", href=True)
                href = link["href"] if link else None
            if href:
                return urljoin(base_url, href)
    return None
