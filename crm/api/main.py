"""
FastAPI Main Application
========================

REST API for CRM records, churn-risk scoring and dashboard analytics.
"""

from datetime import datetime
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger
from pydantic import ValidationError

from config import get_config
from crm import __version__
from crm.analytics import (
    AnalyticsConfig,
    ChurnAnalytics,
    ProductAnalytics,
    SalesAnalytics,
    export_dashboard_csv,
)
from crm.analytics.schemas import (
    ChurnMetricsSummary,
    CustomerRisk,
    EngagementSummary,
    InventoryItem,
    PipelineSummary,
    ProductPerformance,
    SalesPerformance,
    TeamAnalytics,
)
from crm.models import CategorySale, Customer, Deal, Product, RevenueMetric
from crm.scoring import ChurnScorer, ChurnScoringConfig
from crm.storage import Storage, create_storage
from crm.utils import get_timestamp, setup_logging
from . import resources
from .dependencies import (
    get_churn_analytics,
    get_product_analytics,
    get_sales_analytics,
    get_storage,
)
from .schemas import HealthResponse

router = APIRouter()


@router.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": "CRM Analytics API",
        "version": __version__,
        "docs": "/docs"
    }


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request, storage: Storage = Depends(get_storage)):
    """Check API health status."""
    return HealthResponse(
        status="healthy",
        storage_backend=request.app.state.storage_backend,
        customers=len(storage.list_customers()),
        timestamp=datetime.now()
    )


# Dashboard

@router.get("/api/dashboard/revenue-metrics", response_model=List[RevenueMetric], tags=["Dashboard"])
async def get_revenue_metrics(storage: Storage = Depends(get_storage)):
    """Monthly revenue figures."""
    return storage.list_revenue_metrics()


@router.get("/api/dashboard/category-sales", response_model=List[CategorySale], tags=["Dashboard"])
async def get_category_sales(storage: Storage = Depends(get_storage)):
    """Sales share by product category."""
    return storage.list_category_sales()


@router.get("/api/dashboard/top-products", response_model=List[Product], tags=["Dashboard"])
async def get_top_products(
    limit: int = Query(4, ge=1, le=100),
    products: ProductAnalytics = Depends(get_product_analytics)
):
    """Best-selling products."""
    return products.get_top_products(limit)


@router.get("/api/dashboard/recent-customers", response_model=List[Customer], tags=["Dashboard"])
async def get_recent_customers(
    limit: int = Query(4, ge=1, le=100),
    sales: SalesAnalytics = Depends(get_sales_analytics)
):
    """Most recently created customers."""
    return sales.get_recent_customers(limit)


@router.get("/api/dashboard/export", tags=["Dashboard"])
async def export_dashboard(
    time_range: Optional[str] = Query(None, description="last7days, last30days or last90days"),
    churn: ChurnAnalytics = Depends(get_churn_analytics)
):
    """
    Download the dashboard summary as CSV.

    Args:
        time_range: Reporting window, defaults to the last 30 days
        churn: Churn analytics service

    Returns:
        CSV attachment
    """
    try:
        content = export_dashboard_csv(churn, time_range)
    except Exception as e:
        logger.error(f"Dashboard export error: {e}")
        raise HTTPException(status_code=500, detail="Failed to export dashboard data")

    filename = f"dashboard-report-{get_timestamp('%Y-%m-%d')}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


# Churn analytics

@router.get("/api/analytics/customers/churn-risk", response_model=List[CustomerRisk], tags=["Analytics"])
async def get_customers_with_churn_risk(churn: ChurnAnalytics = Depends(get_churn_analytics)):
    """Customers in the top band of churn scores, highest risk first."""
    try:
        return churn.get_customers_with_churn_risk()
    except Exception as e:
        logger.error(f"Churn risk error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch customers with churn risk")


@router.get(
    "/api/analytics/customers/{customer_id}/engagement",
    response_model=EngagementSummary,
    tags=["Analytics"]
)
async def get_customer_engagement(customer_id: int, churn: ChurnAnalytics = Depends(get_churn_analytics)):
    """Value, interaction, support and churn-risk profile of one customer."""
    try:
        summary = churn.get_customer_engagement_metrics(customer_id)
    except Exception as e:
        logger.error(f"Engagement metrics error for customer {customer_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch customer engagement metrics")

    if summary is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return summary


@router.get("/api/analytics/dashboard/churn-metrics", response_model=ChurnMetricsSummary, tags=["Analytics"])
async def get_churn_metrics(churn: ChurnAnalytics = Depends(get_churn_analytics)):
    """Dashboard churn summary."""
    try:
        return churn.get_churn_metrics()
    except Exception as e:
        logger.error(f"Churn metrics error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch churn metrics")


# Sales, team and product analytics

@router.get("/api/analytics/deals/by-stage/{stage}", response_model=List[Deal], tags=["Analytics"])
async def get_deals_by_stage(stage: str, sales: SalesAnalytics = Depends(get_sales_analytics)):
    """Deals in one pipeline stage."""
    return sales.get_deals_by_stage(stage)


@router.get("/api/analytics/deals/by-assignee/{assignee}", response_model=List[Deal], tags=["Analytics"])
async def get_deals_by_assignee(assignee: str, sales: SalesAnalytics = Depends(get_sales_analytics)):
    """Deals owned by one sales rep."""
    return sales.get_deals_by_assignee(assignee)


@router.get("/api/analytics/deals/pipeline", response_model=PipelineSummary, tags=["Analytics"])
async def get_pipeline_summary(sales: SalesAnalytics = Depends(get_sales_analytics)):
    """Deal counts and values per stage."""
    try:
        return sales.get_pipeline_summary()
    except Exception as e:
        logger.error(f"Pipeline summary error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch pipeline summary")


@router.get("/api/analytics/dashboard/sales-performance", response_model=SalesPerformance, tags=["Analytics"])
async def get_sales_performance(sales: SalesAnalytics = Depends(get_sales_analytics)):
    """Win rate, pipeline value and revenue trend."""
    try:
        return sales.get_sales_performance()
    except Exception as e:
        logger.error(f"Sales performance error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch sales performance")


@router.get("/api/analytics/dashboard/team-analytics", response_model=TeamAnalytics, tags=["Analytics"])
async def get_team_analytics(sales: SalesAnalytics = Depends(get_sales_analytics)):
    """Team performance by department."""
    try:
        return sales.get_team_analytics()
    except Exception as e:
        logger.error(f"Team analytics error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch team analytics")


@router.get("/api/analytics/products/inventory", response_model=List[InventoryItem], tags=["Analytics"])
async def get_product_inventory(products: ProductAnalytics = Depends(get_product_analytics)):
    """Stock levels of every product."""
    return products.get_product_inventory()


@router.get(
    "/api/analytics/products/{product_id}/performance",
    response_model=ProductPerformance,
    tags=["Analytics"]
)
async def get_product_performance(product_id: int, products: ProductAnalytics = Depends(get_product_analytics)):
    """Sales and margin figures of one product."""
    performance = products.get_product_performance(product_id)
    if performance is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return performance


async def validation_error_handler(request: Request, exc: ValidationError):
    """Report records that fail validation after a partial update."""
    errors = [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
    return JSONResponse(status_code=422, content={"detail": errors})


def create_app(
    config: Optional[dict] = None,
    storage: Optional[Storage] = None,
    clock: Optional[Callable[[], datetime]] = None
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Application configuration, loaded from YAML if omitted
        storage: Storage backend, built from ``config`` if omitted
        clock: Callable returning the current time for scoring

    Returns:
        Configured application
    """
    config = config if config is not None else get_config()
    api_config = config.get("api", {})
    log_config = config.get("logging", {})

    app = FastAPI(
        title=api_config.get("title", "CRM Analytics API"),
        description="CRM records with churn-risk scoring and dashboard analytics",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=api_config.get("cors_origins", ["*"]),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    storage = storage if storage is not None else create_storage(config)
    scorer = ChurnScorer(ChurnScoringConfig.from_config(config), clock=clock)

    app.state.storage = storage
    app.state.storage_backend = type(storage).__name__
    app.state.churn = ChurnAnalytics(storage, scorer, AnalyticsConfig.from_config(config), clock=clock)
    app.state.sales = SalesAnalytics(storage)
    app.state.products = ProductAnalytics(storage)

    app.include_router(router)
    app.include_router(resources.router)
    app.add_exception_handler(ValidationError, validation_error_handler)

    @app.on_event("startup")
    async def startup_event():
        """Execute on application startup."""
        setup_logging(level=log_config.get("level", "INFO"), log_file=log_config.get("file"))
        logger.info(f"CRM Analytics API started with {app.state.storage_backend}")

    return app


app = create_app()


# Run with: uvicorn crm.api.main:app --reload
if __name__ == "__main__":
    import uvicorn

    config = get_config()
    api_config = config.get("api", {})

    uvicorn.run(
        "crm.api.main:app",
        host=api_config.get("host", "0.0.0.0"),
        port=api_config.get("port", 8000),
        reload=api_config.get("reload", True)
    )
