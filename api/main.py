from fastapi import FastAPI, Depends, HTTPException, status, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import List, Optional

from config.settings import get_settings
from core.database.operations import (
    get_db,
    get_run,
    get_runs,
    get_latest_run,
    get_products,
    count_products,
)
from core.output.writers import read_summary

from .models import (
    Product,
    RunInfo,
    ProductListResponse,
    SummaryResponse,
)

app = FastAPI(
    title="Shop Scraper API",
    description="Read-only REST API over stored shop scrape runs",
    version="0.1.0",
)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, replace with specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _run_info(db: Session, run) -> RunInfo:
    return RunInfo(
        id=run.id,
        timestamp=run.timestamp,
        base_url=run.base_url,
        description=run.description,
        total_products=run.total_products,
        failed_products=run.failed_products,
        total_pages=run.total_pages,
        duration_seconds=run.duration_seconds,
        success_rate=run.success_rate,
        product_count=count_products(db, run.id),
    )


def _product_list(db: Session, run_id: str, min_discount: Optional[int], limit: int) -> ProductListResponse:
    products = get_products(db, run_id, min_discount=min_discount, limit=limit)
    return ProductListResponse(
        run_id=run_id,
        count=len(products),
        products=[Product.model_validate(product) for product in products],
        min_discount=min_discount,
    )


@app.get("/", tags=["General"])
def root():
    """Root endpoint providing API information."""
    return {
        "name": "Shop Scraper API",
        "version": "0.1.0",
        "description": "API for browsing products collected by the shop scraper",
        "endpoints": {
            "GET /": "This information",
            "GET /runs": "Get stored scrape runs",
            "GET /runs/{run_id}": "Get specific run details",
            "GET /runs/{run_id}/products": "Get products of a run",
            "GET /products": "Get products of the latest run",
            "GET /summary": "Get the summary of the last scrape",
        },
    }


@app.get("/runs", response_model=List[RunInfo], tags=["Runs"])
def list_runs(
    limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)
):
    """Get list of stored runs ordered by newest first."""
    try:
        return [_run_info(db, run) for run in get_runs(db, limit=limit)]
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error retrieving runs: {str(e)}",
        ) from e


@app.get("/runs/{run_id}", response_model=RunInfo, tags=["Runs"])
def get_run_details(run_id: str, db: Session = Depends(get_db)):
    """Get detailed information about a specific run."""
    try:
        run = get_run(db, run_id)
        if not run:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Scrape run with ID {run_id} not found",
            )
        return _run_info(db, run)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error retrieving run: {str(e)}",
        ) from e


@app.get("/runs/{run_id}/products", response_model=ProductListResponse, tags=["Products"])
def get_run_products(
    run_id: str,
    min_discount: Optional[int] = Query(None, ge=0, le=100),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Get products from a specific run."""
    try:
        if not get_run(db, run_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Scrape run with ID {run_id} not found",
            )
        return _product_list(db, run_id, min_discount, limit)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error retrieving products: {str(e)}",
        ) from e


@app.get("/products", response_model=ProductListResponse, tags=["Products"])
def get_latest_products(
    min_discount: Optional[int] = Query(None, ge=0, le=100),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Get products from the latest run."""
    try:
        latest_run = get_latest_run(db)
        if not latest_run:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No scrape runs found in database",
            )
        return _product_list(db, latest_run.id, min_discount, limit)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error retrieving products: {str(e)}",
        ) from e


@app.get("/summary", response_model=SummaryResponse, tags=["Runs"])
def get_summary():
    """Get the summary file written by the last scrape."""
    summary_path = get_settings().SUMMARY_PATH
    try:
        return SummaryResponse(**read_summary(summary_path))
    except FileNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No summary found at {summary_path}",
        ) from e
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error reading summary: {str(e)}",
        ) from e


# Error handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(_request, exc):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(Exception)
async def general_exception_handler(_request, exc):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Unexpected error: {str(exc)}"},
    )


# Run with: uvicorn api.main:app --reload
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)
