"""
Analytics Schemas
=================

Response models for computed (never stored) analytics.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from crm.models import Customer, Product, TeamMember


# Churn

class CustomerRisk(Customer):
    """Customer together with its computed churn-risk score."""

    churn_risk: int = Field(..., ge=0, le=100)


class MonthlyChurn(BaseModel):
    month: str
    churn_rate: str
    new_customers: int
    lost_customers: int


class ChurnReason(BaseModel):
    reason: str
    percentage: int = Field(..., ge=0, le=100)


class ChurnMetricsSummary(BaseModel):
    """Dashboard-level view of churn risk across all customers."""

    current_churn_rate: str
    churn_rate_source: str = Field(..., description="'derived' from live scores or 'reported'")
    total_customers: int
    at_risk_count: int
    at_risk_percentage: str
    monthly_churn: List[MonthlyChurn]
    top_churn_reasons: List[ChurnReason]


# Engagement

class CustomerValue(BaseModel):
    total_spent: float
    deal_value: float
    lifetime_value: float


class EngagementActivity(BaseModel):
    total_deals: int
    active_deals: int
    won_deals: int
    total_tickets: int
    last_activity: Optional[int] = Field(None, description="Days since the latest activity")
    interactions: int


class SupportSummary(BaseModel):
    open_tickets: int
    avg_response_time_hours: float
    satisfaction: float


class ChurnRiskDetail(BaseModel):
    score: int
    last_order: Optional[date]
    factors: List[str]


class EngagementSummary(BaseModel):
    """Per-customer value, activity, support and churn-risk summary."""

    customer_id: int
    customer_value: CustomerValue
    activity: EngagementActivity
    support: SupportSummary
    churn_risk: ChurnRiskDetail


# Sales

class StageSummary(BaseModel):
    stage: str
    deal_count: int
    total_value: float
    weighted_value: float


class PipelineSummary(BaseModel):
    stages: List[StageSummary]
    total_deals: int
    pipeline_value: float
    weighted_pipeline_value: float


class MonthlyRevenue(BaseModel):
    month: str
    year: int
    value: float
    change: Optional[float]


class SalesPerformance(BaseModel):
    total_deal_value: float
    won_value: float
    lost_value: float
    open_value: float
    won_deals: int
    lost_deals: int
    win_rate: float
    average_deal_size: float
    monthly_revenue: List[MonthlyRevenue]


class DepartmentSummary(BaseModel):
    department: str
    members: int
    deals_won: int
    tickets_resolved: int
    average_performance: float


class TeamAnalytics(BaseModel):
    total_members: int
    total_deals_won: int
    total_tickets_resolved: int
    average_performance: float
    departments: List[DepartmentSummary]
    top_performers: List[TeamMember]


# Products

class InventoryItem(BaseModel):
    id: int
    name: str
    category: str
    stock_available: int
    stock_threshold: int
    stock_status: str


class ProductPerformance(BaseModel):
    product: Product
    revenue: float
    profit: float
    trend: float
    stock_status: str
