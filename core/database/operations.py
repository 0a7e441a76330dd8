# This file contains the database access layer: the engine and session factory
# plus the create/read operations for scrape runs and their products

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from typing import Iterable, List, Optional, Generator
from config.settings import get_settings
from core.scrapers.models import ProductRecord, RunSummary
from .models import Base, ScrapeRun, Product

# Get application settings
settings = get_settings()

# The engine connects lazily, so importing this module never touches the database
engine = create_engine(settings.DATABASE_URL)

# Session Factory
SessionLocal = sessionmaker(bind=engine)


def init_db(bind=None):
    """Create database tables if they don't exist.

    Args:
        bind: Engine to create the tables on, defaults to the configured one
    """
    if bind is None:
        # The default SQLite file lives in the output directory
        settings.ensure_dirs()
        bind = engine
    Base.metadata.create_all(bind=bind)


def get_db() -> Generator:
    """Create and yield a database session.

    Used as a FastAPI dependency; the session is closed even if the request
    handler raises.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_run(db, base_url: str, description: Optional[str] = None) -> ScrapeRun:
    """Create an empty run that products can then be added to.

    Args:
        db: Database session
        base_url: Listing URL the run started from
        description: Optional human-readable label for the run

    Returns:
        The newly created ScrapeRun with its generated ID
    """
    run = ScrapeRun(base_url=base_url, description=description)
    db.add(run)
    db.commit()
    db.refresh(run)
    return run


def add_products(db, run_id: str, records: Iterable[ProductRecord]) -> List[Product]:
    """Store scraped products under a run.

    Raises:
        ValueError: If the run does not exist
    """
    if get_run(db, run_id) is None:
        raise ValueError(f"Scrape run with ID {run_id} not found")

    products = []
    for record in records:
        product = Product(
            run_id=run_id,
            name=record.name,
            url=record.url,
            image_url=record.image_url,
            category=record.category,
            original_price=record.original_price,
            current_price=record.current_price,
            discount_percent=record.discount_percent,
            rating=record.rating,
            description=record.description,
        )
        db.add(product)
        products.append(product)

    db.commit()
    return products


def finish_run(db, run_id: str, summary: RunSummary) -> ScrapeRun:
    """Record the totals of a finished run.

    Raises:
        ValueError: If the run does not exist
    """
    run = get_run(db, run_id)
    if run is None:
        raise ValueError(f"Scrape run with ID {run_id} not found")

    run.total_products = summary.total_products
    run.failed_products = summary.failed_products
    run.total_pages = summary.total_pages
    run.duration_seconds = summary.duration_seconds
    run.success_rate = summary.success_rate
    db.commit()
    db.refresh(run)
    return run


def get_run(db, run_id: str) -> Optional[ScrapeRun]:
    return db.query(ScrapeRun).filter(ScrapeRun.id == run_id).first()


def get_latest_run(db) -> Optional[ScrapeRun]:
    return db.query(ScrapeRun).order_by(ScrapeRun.timestamp.desc()).first()


def get_runs(db, limit: int = 10) -> List[ScrapeRun]:
    """Return stored runs, newest first."""
    return db.query(ScrapeRun).order_by(ScrapeRun.timestamp.desc()).limit(limit).all()


def count_products(db, run_id: str) -> int:
    return db.query(Product).filter(Product.run_id == run_id).count()


def get_products(db,
                 run_id: str,
                 min_discount: Optional[int] = None,
                 limit: int = 100) -> List[Product]:
    """Get products of a run with optional filtering.

    Args:
        db: Database session
        run_id: Run to read products from
        min_discount: Only products discounted by at least this percentage
        limit: Maximum number of results to return

    Returns:
        Products ordered by discount (highest first), undiscounted last
    """
    query = db.query(Product).filter(Product.run_id == run_id)

    if min_discount is not None:
        query = query.filter(Product.discount_percent >= min_discount)

    query = query.order_by(Product.discount_percent.is_(None), Product.discount_percent.desc(), Product.name)
    return query.limit(limit).all()
