"""Churn, engagement, sales and product analytics."""

from .churn import ChurnAnalytics, normalize_percentages
from .config import AnalyticsConfig
from .export import build_dashboard_report, export_dashboard_csv
from .products import ProductAnalytics
from .sales import SalesAnalytics

__all__ = [
    "AnalyticsConfig",
    "ChurnAnalytics",
    "ProductAnalytics",
    "SalesAnalytics",
    "build_dashboard_report",
    "export_dashboard_csv",
    "normalize_percentages",
]
