# This file defines the database schema for stored scrape runs using SQLAlchemy's ORM
# A run is a point-in-time snapshot of the shop; products hang off their run

from sqlalchemy import Column, String, Float, Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import declarative_base, relationship
import uuid
from datetime import datetime

Base = declarative_base()


class ScrapeRun(Base):
    """One execution of the scraper against a shop.

    The totals are filled in when the run finishes, so a run whose totals
    are still empty either crashed or is in progress.
    """
    __tablename__ = "scrape_runs"

    # UUID stored as a string for portability across database backends
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Indexed to allow efficient "latest run" queries
    timestamp = Column(DateTime, default=datetime.utcnow, index=True)

    base_url = Column(String(512), nullable=False)
    description = Column(String(255), nullable=True)

    total_products = Column(Integer, nullable=True)
    failed_products = Column(Integer, nullable=True)
    total_pages = Column(Integer, nullable=True)
    duration_seconds = Column(Float, nullable=True)
    success_rate = Column(Float, nullable=True)

    products = relationship("Product", back_populates="run", cascade="all, delete-orphan")


class Product(Base):
    """A product as it was listed during a specific run."""
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    run_id = Column(String(36), ForeignKey("scrape_runs.id"), index=True, nullable=False)

    name = Column(String(255), index=True, nullable=False)
    url = Column(String(2048), nullable=False)
    image_url = Column(String(2048), nullable=True)
    category = Column(String(50), nullable=True)

    # Prices are kept as displayed, currency symbol included
    original_price = Column(String(50), nullable=True)
    current_price = Column(String(50), nullable=True)

    # Indexed so deals can be filtered by minimum discount
    discount_percent = Column(Integer, nullable=True, index=True)
    rating = Column(Integer, nullable=False, default=5)
    description = Column(Text, nullable=True)

    run = relationship("ScrapeRun", back_populates="products")
