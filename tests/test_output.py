"""
Tests for the record/summary models and the CSV and JSON writers.
"""

from __future__ import annotations

import csv
import dataclasses
import json
from datetime import datetime, timedelta

import pytest

from core.output.writers import read_summary, write_products_csv, write_summary
from core.scrapers.models import CSV_COLUMNS, ProductRecord, RunSummary, ScrapeRunStats


def record(name: str = "Alpha Key", **overrides) -> ProductRecord:
    fields = dict(
        name=name,
        url=f"https://shop.test/product/{name.lower().replace(' ', '-')}/",
        image_url="https://shop.test/img.jpg",
        category="SOFTWARE",
        current_price="Us$ 30.00",
        description="Instant delivery.",
        original_price="Us$ 40.00",
        discount_percent=25,
        rating=4,
    )
    fields.update(overrides)
    return ProductRecord(**fields)


class TestProductRecord:
    def test_is_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            record().name = "changed"  # type: ignore[misc]

    def test_csv_row_renders_absent_values(self) -> None:
        row = record(original_price=None, discount_percent=None).to_csv_row()
        assert row["Original Price"] == "N/A"
        assert row["Discount"] == "N/A"
        assert row["Rating"] == 4

    def test_csv_row_keys(self) -> None:
        row = record().to_csv_row()
        assert list(row) == list(CSV_COLUMNS.values())
        assert row["Discount"] == "25%"


class TestScrapeRunStats:
    def test_summary(self) -> None:
        start = datetime(2024, 1, 1, 12, 0, 0)
        stats = ScrapeRunStats(start_time=start)
        for _ in range(3):
            stats.record_success()
        stats.record_failure()
        stats.current_page = 2

        summary = stats.summary(end_time=start + timedelta(seconds=12.5))

        assert summary == RunSummary(
            total_products=3,
            failed_products=1,
            total_pages=2,
            duration_seconds=12.5,
            success_rate=75.0,
        )

    def test_success_rate_without_items(self) -> None:
        assert ScrapeRunStats().success_rate == 0.0


class TestCsvWriter:
    def test_header_and_rows(self, tmp_path) -> None:
        path = tmp_path / "out" / "products.csv"
        count = write_products_csv([record(), record("Bravo Key", original_price=None, discount_percent=None)], path)

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        assert count == 2
        assert rows[0] == [
            "Product Name", "URL", "Image URL", "Category", "Original Price",
            "Current Price", "Discount", "Rating", "Description",
        ]
        assert rows[1][0] == "Alpha Key"
        assert rows[2][4] == "N/A"
        assert rows[2][6] == "N/A"

    def test_overwrites_previous_contents(self, tmp_path) -> None:
        path = tmp_path / "products.csv"
        write_products_csv([record("A"), record("B"), record("C")], path)
        write_products_csv([record("A")], path)

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert [r["Product Name"] for r in rows] == ["A"]

    def test_description_with_commas_and_quotes(self, tmp_path) -> None:
        path = tmp_path / "products.csv"
        write_products_csv([record(description='Key, "lifetime" licence')], path)

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["Description"] == 'Key, "lifetime" licence'


class TestSummaryWriter:
    def test_written_shape(self, tmp_path) -> None:
        path = tmp_path / "summary.json"
        summary = RunSummary(total_products=5, failed_products=0, total_pages=2,
                             duration_seconds=12.346, success_rate=100.0)

        written = write_summary(summary, path)

        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        assert data == written == {
            "totalProducts": 5,
            "failedProducts": 0,
            "totalPages": 2,
            "duration": "12.35 seconds",
            "successRate": "100.00%",
        }
        assert read_summary(path) == data

    def test_read_missing_summary(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            read_summary(tmp_path / "missing.json")
