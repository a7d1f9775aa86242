"""
Sales Analytics
===============

Pipeline, sales performance and team aggregates built with pandas.
"""

from typing import List, Optional

import pandas as pd
from loguru import logger

from crm.models import Customer, Deal, DealStage
from crm.storage import Storage
from crm.utils.helpers import calculate_percentage_change, safe_divide
from .schemas import (
    DepartmentSummary,
    MonthlyRevenue,
    PipelineSummary,
    SalesPerformance,
    StageSummary,
    TeamAnalytics,
)


STAGE_ORDER = [stage.value for stage in DealStage]
ACTIVE_STAGES = [stage.value for stage in DealStage if stage.is_active]

DEAL_COLUMNS = ["id", "customer_id", "stage", "value", "probability", "assigned_to"]


class SalesAnalytics:
    """Aggregate deals, revenue and team records."""

    def __init__(self, storage: Storage):
        """
        Initialize SalesAnalytics.

        Args:
            storage: Storage backend to read from
        """
        self.storage = storage

    def deals_frame(self) -> pd.DataFrame:
        """
        Deals as a DataFrame with a probability-weighted value column.

        Returns:
            DataFrame with one row per deal
        """
        rows = [
            {
                "id": d.id,
                "customer_id": d.customer_id,
                "stage": DealStage(d.stage).value,
                "value": d.value,
                "probability": d.probability,
                "assigned_to": d.assigned_to,
            }
            for d in self.storage.list_deals()
        ]
        df = pd.DataFrame(rows, columns=DEAL_COLUMNS)
        df["value"] = df["value"].astype(float)
        df["weighted_value"] = df["value"] * df["probability"].astype(float) / 100
        return df

    def get_deals_by_stage(self, stage: str) -> List[Deal]:
        """Deals in a pipeline stage; unknown stages yield an empty list."""
        stage = stage.strip().lower()
        return [d for d in self.storage.list_deals() if DealStage(d.stage).value == stage]

    def get_deals_by_assignee(self, assignee: str) -> List[Deal]:
        """Deals assigned to a team member, matched case-insensitively."""
        assignee = assignee.strip().lower()
        return [
            d for d in self.storage.list_deals()
            if d.assigned_to and d.assigned_to.strip().lower() == assignee
        ]

    def get_pipeline_summary(self) -> PipelineSummary:
        """
        Deal count, value and weighted value per stage.

        Returns:
            PipelineSummary with every stage, in pipeline order
        """
        df = self.deals_frame()

        grouped = (
            df.groupby("stage")
            .agg(
                deal_count=("id", "count"),
                total_value=("value", "sum"),
                weighted_value=("weighted_value", "sum"),
            )
            .reindex(STAGE_ORDER, fill_value=0)
        )

        stages = [
            StageSummary(
                stage=stage,
                deal_count=int(row.deal_count),
                total_value=float(row.total_value),
                weighted_value=round(float(row.weighted_value), 2),
            )
            for stage, row in grouped.iterrows()
        ]

        active = grouped.loc[ACTIVE_STAGES]
        return PipelineSummary(
            stages=stages,
            total_deals=len(df),
            pipeline_value=float(active["total_value"].sum()),
            weighted_pipeline_value=round(float(active["weighted_value"].sum()), 2),
        )

    def get_sales_performance(self) -> SalesPerformance:
        """
        Won/lost/open deal values, win rate and the monthly revenue series.
        """
        df = self.deals_frame()

        won = df[df["stage"] == DealStage.CLOSED.value]
        lost = df[df["stage"] == DealStage.LOST.value]
        open_deals = df[df["stage"].isin(ACTIVE_STAGES)]

        monthly = []
        previous: Optional[float] = None
        for metric in self.storage.list_revenue_metrics():
            change = metric.change
            if change is None and previous:
                change = round(calculate_percentage_change(previous, metric.value), 1)
            monthly.append(MonthlyRevenue(month=metric.month, year=metric.year, value=metric.value, change=change))
            previous = metric.value

        performance = SalesPerformance(
            total_deal_value=float(df["value"].sum()),
            won_value=float(won["value"].sum()),
            lost_value=float(lost["value"].sum()),
            open_value=float(open_deals["value"].sum()),
            won_deals=len(won),
            lost_deals=len(lost),
            win_rate=round(safe_divide(len(won), len(won) + len(lost)) * 100, 1),
            average_deal_size=round(float(df["value"].mean()), 2) if len(df) else 0.0,
            monthly_revenue=monthly,
        )
        logger.debug(f"Sales performance computed over {len(df)} deals")
        return performance

    def get_team_analytics(self, top_n: int = 3) -> TeamAnalytics:
        """
        Team totals, per-department breakdown and top performers.

        Args:
            top_n: Number of top performers to return

        Returns:
            TeamAnalytics
        """
        members = self.storage.list_team_members()
        if not members:
            return TeamAnalytics(
                total_members=0,
                total_deals_won=0,
                total_tickets_resolved=0,
                average_performance=0.0,
                departments=[],
                top_performers=[],
            )

        df = pd.DataFrame([m.model_dump() for m in members])
        by_department = (
            df.groupby("department")
            .agg(
                members=("id", "count"),
                deals_won=("deals_won", "sum"),
                tickets_resolved=("tickets_resolved", "sum"),
                average_performance=("performance_score", "mean"),
            )
            .sort_index()
        )

        departments = [
            DepartmentSummary(
                department=department,
                members=int(row.members),
                deals_won=int(row.deals_won),
                tickets_resolved=int(row.tickets_resolved),
                average_performance=round(float(row.average_performance), 1),
            )
            for department, row in by_department.iterrows()
        ]

        top_performers = sorted(members, key=lambda m: m.performance_score, reverse=True)[:top_n]

        return TeamAnalytics(
            total_members=len(members),
            total_deals_won=int(df["deals_won"].sum()),
            total_tickets_resolved=int(df["tickets_resolved"].sum()),
            average_performance=round(float(df["performance_score"].mean()), 1),
            departments=departments,
            top_performers=top_performers,
        )

    def get_recent_customers(self, limit: int = 4) -> List[Customer]:
        """Customers by most recent order; customers without orders come last."""
        customers = self.storage.list_customers()
        with_orders = sorted(
            (c for c in customers if c.last_order_date is not None),
            key=lambda c: c.last_order_date,
            reverse=True
        )
        without_orders = [c for c in customers if c.last_order_date is None]
        return (with_orders + without_orders)[:limit]
