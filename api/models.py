from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from datetime import datetime


# Response Models
class Product(BaseModel):
    """API representation of a stored product."""

    id: str
    run_id: str
    name: str
    url: str
    image_url: Optional[str] = None
    category: Optional[str] = None
    original_price: Optional[str] = None
    current_price: Optional[str] = None
    discount_percent: Optional[int] = None
    rating: int
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class RunInfo(BaseModel):
    """API representation of a stored scrape run."""

    id: str
    timestamp: datetime
    base_url: str
    description: Optional[str] = None
    total_products: Optional[int] = None
    failed_products: Optional[int] = None
    total_pages: Optional[int] = None
    duration_seconds: Optional[float] = None
    success_rate: Optional[float] = None
    product_count: int

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Products of one run."""

    run_id: str
    count: int
    products: List[Product]
    min_discount: Optional[int] = None


class SummaryResponse(BaseModel):
    """Contents of the summary file written at the end of a run."""

    totalProducts: int
    failedProducts: int
    totalPages: int
    duration: str
    successRate: str
