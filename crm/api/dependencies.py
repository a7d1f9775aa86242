"""FastAPI dependencies resolving the services attached to the application."""

from fastapi import Request

from crm.analytics import ChurnAnalytics, ProductAnalytics, SalesAnalytics
from crm.storage import Storage


def get_storage(request: Request) -> Storage:
    """Get storage backend."""
    return request.app.state.storage


def get_churn_analytics(request: Request) -> ChurnAnalytics:
    return request.app.state.churn


def get_sales_analytics(request: Request) -> SalesAnalytics:
    return request.app.state.sales


def get_product_analytics(request: Request) -> ProductAnalytics:
    return request.app.state.products
