from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

# CSV column titles keyed by the field they are rendered from
CSV_COLUMNS = {
    "name": "Product Name",
    "url": "URL",
    "image_url": "Image URL",
    "category": "Category",
    "original_price": "Original Price",
    "current_price": "Current Price",
    "discount": "Discount",
    "rating": "Rating",
    "description": "Description",
}

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class ProductRecord:
    """A single product scraped from a listing item and its detail page."""

    name: str
    url: str
    image_url: str
    category: str
    current_price: str
    description: str
    original_price: Optional[str] = None
    discount_percent: Optional[int] = None
    rating: int = 5

    @property
    def discount(self) -> str:
        """Discount formatted for display, e.g. "25%" or "N/A"."""
        if self.discount_percent is None:
            return NOT_AVAILABLE
        return f"{self.discount_percent}%"

    def to_csv_row(self) -> Dict[str, Any]:
        """Return the record keyed by CSV column title."""
        values = {
            "name": self.name,
            "url": self.url,
            "image_url": self.image_url,
            "category": self.category,
            "original_price": self.original_price or NOT_AVAILABLE,
            "current_price": self.current_price,
            "discount": self.discount,
            "rating": self.rating,
            "description": self.description,
        }
        return {title: values[key] for key, title in CSV_COLUMNS.items()}


@dataclass(frozen=True)
class RunSummary:
    """Totals of a finished scrape run."""

    total_products: int
    failed_products: int
    total_pages: int
    duration_seconds: float
    success_rate: float

    def to_json_dict(self) -> Dict[str, Any]:
        """Return the summary in the shape written to summary.json."""
        return {
            "totalProducts": self.total_products,
            "failedProducts": self.failed_products,
            "totalPages": self.total_pages,
            "duration": f"{self.duration_seconds:.2f} seconds",
            "successRate": f"{self.success_rate:.2f}%",
        }


@dataclass
class ScrapeRunStats:
    """Mutable counters owned by the pagination loop."""

    total_products: int = 0
    failed_products: int = 0
    current_page: int = 1
    start_time: datetime = field(default_factory=datetime.now)

    def record_success(self):
        self.total_products += 1

    def record_failure(self):
        self.failed_products += 1

    @property
    def success_rate(self) -> float:
        attempted = self.total_products + self.failed_products
        if attempted == 0:
            return 0.0
        return self.total_products / attempted * 100

    def summary(self, end_time: Optional[datetime] = None) -> RunSummary:
        end_time = end_time or datetime.now()
        return RunSummary(
            total_products=self.total_products,
            failed_products=self.failed_products,
            total_pages=self.current_page,
            duration_seconds=(end_time - self.start_time).total_seconds(),
            success_rate=self.success_rate,
        )
