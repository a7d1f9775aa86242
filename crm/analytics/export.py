"""
Dashboard Export
================

CSV summary of revenue, category sales and churn for a reporting window.
"""

from datetime import datetime, timedelta
from typing import Optional, Tuple

import pandas as pd
from loguru import logger

from crm.models import DealStage
from .churn import ChurnAnalytics


TIME_RANGES = {
    "last7days": 7,
    "last30days": 30,
    "last90days": 90,
}
DEFAULT_TIME_RANGE = "last30days"


def resolve_time_range(time_range: Optional[str], now: datetime) -> Tuple[datetime, datetime]:
    """Start and end of a named window; unknown names fall back to 30 days."""
    days = TIME_RANGES.get(time_range or DEFAULT_TIME_RANGE, TIME_RANGES[DEFAULT_TIME_RANGE])
    return now - timedelta(days=days), now


def build_dashboard_report(
    churn: ChurnAnalytics,
    time_range: Optional[str] = None,
    now: Optional[datetime] = None
) -> pd.DataFrame:
    """
    Build the one-row dashboard report.

    Args:
        churn: Churn analytics bound to the storage to report on
        time_range: One of ``last7days``, ``last30days``, ``last90days``
        now: Reference time, defaults to the analytics clock

    Returns:
        DataFrame with formatted report columns
    """
    now = now or churn.clock()
    storage = churn.storage
    start, end = resolve_time_range(time_range, now)

    won = [
        d for d in storage.list_deals()
        if d.stage == DealStage.CLOSED and start <= d.updated_at <= end
    ]
    revenue = sum(d.value for d in won)
    average_deal = revenue / len(won) if won else 0.0

    categories = "; ".join(f"{c.category}: {c.value:.2f}" for c in storage.list_category_sales())

    customers = storage.list_customers()
    scores = [churn.score_customer(c, now) for c in customers]
    churn_rate = churn.current_churn_rate(scores)

    report = pd.DataFrame([{
        "Revenue": f"{revenue:.2f}",
        "Average Deal Value": f"{average_deal:.2f}",
        "Category Sales": categories,
        "Churn Rate": f"{churn_rate:.1f}%",
        "Retention Rate": f"{100 - churn_rate:.1f}%",
        "Total Customers": len(customers),
        "At-Risk Customers": churn.at_risk_size(len(customers)),
    }])
    logger.info(f"Dashboard report built for {start:%Y-%m-%d} to {end:%Y-%m-%d}")
    return report


def export_dashboard_csv(
    churn: ChurnAnalytics,
    time_range: Optional[str] = None,
    now: Optional[datetime] = None
) -> str:
    """Render the dashboard report as CSV text."""
    return build_dashboard_report(churn, time_range, now).to_csv(index=False)
