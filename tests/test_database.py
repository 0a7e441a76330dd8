"""
Tests for the run/product persistence layer on in-memory SQLite.
"""

from __future__ import annotations

import pytest

from core.database.models import Product, ScrapeRun
from core.database.operations import (
    add_products,
    count_products,
    create_run,
    finish_run,
    get_latest_run,
    get_products,
    get_run,
    get_runs,
)
from core.scrapers.models import ProductRecord, RunSummary


def record(name: str, discount=None, original=None) -> ProductRecord:
    return ProductRecord(
        name=name,
        url=f"https://shop.test/product/{name.lower()}/",
        image_url="",
        category="SOFTWARE",
        current_price="Us$ 10.00",
        description="No description available",
        original_price=original,
        discount_percent=discount,
    )


def test_create_run(db) -> None:
    run = create_run(db, "https://shop.test/shop", "nightly")

    assert run.id
    assert run.timestamp is not None
    assert run.total_products is None
    assert get_run(db, run.id).description == "nightly"


def test_add_products_and_finish(db) -> None:
    run = create_run(db, "https://shop.test/shop")
    add_products(db, run.id, [record("Alpha", 25, "Us$ 40.00"), record("Bravo")])
    finish_run(db, run.id, RunSummary(total_products=2, failed_products=1, total_pages=1,
                                      duration_seconds=3.5, success_rate=66.67))

    stored = get_run(db, run.id)
    assert count_products(db, run.id) == 2
    assert stored.total_products == 2
    assert stored.failed_products == 1
    assert stored.duration_seconds == pytest.approx(3.5)

    alpha = db.query(Product).filter(Product.name == "Alpha").one()
    assert alpha.run_id == run.id
    assert alpha.original_price == "Us$ 40.00"
    assert alpha.discount_percent == 25
    assert alpha.rating == 5


def test_unknown_run_rejected(db) -> None:
    with pytest.raises(ValueError):
        add_products(db, "missing", [record("Alpha")])
    with pytest.raises(ValueError):
        finish_run(db, "missing", RunSummary(0, 0, 1, 0.0, 0.0))


def test_products_ordered_by_discount(db) -> None:
    run = create_run(db, "https://shop.test/shop")
    add_products(db, run.id, [record("Bravo"), record("Alpha", 10), record("Charlie", 60)])

    assert [p.name for p in get_products(db, run.id)] == ["Charlie", "Alpha", "Bravo"]
    assert [p.name for p in get_products(db, run.id, min_discount=20)] == ["Charlie"]
    assert len(get_products(db, run.id, limit=1)) == 1


def test_products_scoped_to_run(db) -> None:
    first = create_run(db, "https://shop.test/shop")
    second = create_run(db, "https://shop.test/shop")
    add_products(db, first.id, [record("Alpha")])
    add_products(db, second.id, [record("Bravo"), record("Charlie")])

    assert [p.name for p in get_products(db, first.id)] == ["Alpha"]
    assert count_products(db, second.id) == 2


def test_latest_run_and_listing(db) -> None:
    older = create_run(db, "https://shop.test/shop", "older")
    newer = create_run(db, "https://shop.test/shop", "newer")
    older.timestamp = newer.timestamp.replace(year=newer.timestamp.year - 1)
    db.commit()

    assert get_latest_run(db).id == newer.id
    assert [r.description for r in get_runs(db)] == ["newer", "older"]
    assert len(get_runs(db, limit=1)) == 1


def test_latest_run_empty(db) -> None:
    assert get_latest_run(db) is None
    assert db.query(ScrapeRun).count() == 0
