"""
Shared fixtures: an in-memory fake shop served through a patched
``requests.get`` and a recorder that replaces ``time.sleep``.

No test touches the network or actually sleeps.
"""

from __future__ import annotations

import time
from typing import Dict, List, Union

import pytest
import requests

SHOP_URL = "https://shop.test/shop"
PAGE_2_URL = "https://shop.test/shop/page/2/"


def product_item(slug: str, name: str, price_html: str, rating: str = "") -> str:
    rating_html = f'<div class="star-rating">{rating}</div>' if rating else ""
    return f"""
    <li class="product">
      <a href="/product/{slug}/" class="woocommerce-LoopProduct-link">
        <img src="https://shop.test/wp-content/uploads/wooproductph.png" alt="">
        <h2 class="woocommerce-loop-product__title">{name}</h2>
        {rating_html}
        <span class="price">{price_html}</span>
      </a>
    </li>
    """


def listing_page(items: List[str], next_href: Union[str, None] = None) -> str:
    pagination = ""
    if next_href:
        pagination = (
            '<nav class="woocommerce-pagination"><ul>'
            '<li><span class="page-numbers current">1</span></li>'
            f'<li><a class="next page-numbers" href="{next_href}">&rarr;</a></li>'
            "</ul></nav>"
        )
    return f"""
    <html><head><title>Shop</title></head>
    <body>
      <ul class="products columns-4">{''.join(items)}</ul>
      {pagination}
    </body></html>
    """


def detail_page(slug: str, description: str) -> str:
    return f"""
    <html><head>
      <meta property="og:image" content="https://shop.test/wp-content/uploads/{slug}.jpg">
    </head>
    <body>
      <div class="woocommerce-Tabs-panel--description">
        {description}
      </div>
    </body></html>
    """


def two_page_site() -> Dict[str, object]:
    """Page 1 holds three products and a next link, page 2 holds two."""
    page_1 = listing_page(
        [
            product_item("alpha", "Alpha Key", "<del>Us$ 40.00</del> <ins>Us$ 30.00</ins>", "Rated 4.50 out of 5"),
            product_item("bravo", "Bravo Key", "Us$ 12.50"),
            product_item("charlie", "Charlie Key", "<del>Us$ 59.99</del> <ins>Us$ 14.99</ins>", "Rated 3 out of 5"),
        ],
        next_href="/shop/page/2/",
    )
    page_2 = listing_page(
        [
            product_item("delta", "Delta Key", "Us$ 5.00"),
            product_item("echo", "Echo Key", "<del>Us$ 10.00</del> <ins>Us$ 10.00</ins>"),
        ]
    )
    pages: Dict[str, object] = {SHOP_URL: page_1, PAGE_2_URL: page_2}
    for slug in ("alpha", "bravo", "charlie", "delta", "echo"):
        pages[f"https://shop.test/product/{slug}/"] = detail_page(
            slug, f"\n\t{slug.title()} activation   key.\n\n  Instant delivery.\t"
        )
    return pages


class FakeResponse:
    def __init__(self, url: str, text: str = "", status_code: int = 200):
        self.url = url
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}", response=self)


class FakeSite:
    """Stand-in for ``requests.get``.

    Each URL maps to an HTML string, an int status code, an exception
    instance, or a list of those consumed one per request.
    """

    def __init__(self, pages: Dict[str, object]):
        self.pages = dict(pages)
        self.calls: List[dict] = []

    def __call__(self, url, headers=None, timeout=None, **kwargs):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        outcome = self.pages.get(url, 404)
        if isinstance(outcome, list):
            outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, int):
            return FakeResponse(url, "", outcome)
        return FakeResponse(url, outcome)

    def urls(self) -> List[str]:
        return [call["url"] for call in self.calls]


@pytest.fixture()
def sleeps(monkeypatch) -> List[float]:
    """Record every time.sleep call instead of sleeping."""
    recorded: List[float] = []
    monkeypatch.setattr(time, "sleep", recorded.append)
    return recorded


@pytest.fixture()
def fake_site(monkeypatch, sleeps):
    """Factory installing a FakeSite as requests.get."""

    def install(pages: Dict[str, object]) -> FakeSite:
        site = FakeSite(pages)
        monkeypatch.setattr(requests, "get", site)
        return site

    return install


@pytest.fixture()
def session_factory():
    """Session factory bound to a fresh in-memory SQLite database."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool

    from core.database.operations import init_db

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
