"""
API Schemas (Pydantic Models)
=============================

Request and response models used only by the REST layer. Entity payloads
for creation live in :mod:`crm.models`; the update models below accept any
subset of the same fields.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from crm.models import CustomerStatus, DealStage, TicketPriority, TicketStatus


class CustomerUpdate(BaseModel):
    """Schema for partial customer updates."""

    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, min_length=3)
    company_name: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[CustomerStatus] = None
    total_spent: Optional[float] = Field(None, ge=0)
    last_order_date: Optional[date] = None
    avatar: Optional[str] = None
    engagement_score: Optional[float] = Field(None, ge=0, le=100)
    last_contact_date: Optional[date] = None
    acquisition_channel: Optional[str] = None
    segment: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "status": "inactive",
                "total_spent": 12500,
                "last_order_date": "2024-03-01"
            }
        }


class ProductUpdate(BaseModel):
    """Schema for partial product updates."""

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    status: Optional[str] = None
    icon: Optional[str] = None
    trend: Optional[float] = None
    stock_available: Optional[int] = Field(None, ge=0)
    stock_threshold: Optional[int] = Field(None, ge=0)
    sales_count: Optional[int] = Field(None, ge=0)
    profit_margin: Optional[float] = None
    vendor: Optional[str] = None
    launch_date: Optional[date] = None


class DealUpdate(BaseModel):
    """Schema for partial deal updates."""

    customer_id: Optional[int] = None
    title: Optional[str] = Field(None, min_length=1)
    company_name: Optional[str] = None
    stage: Optional[DealStage] = None
    value: Optional[float] = Field(None, ge=0)
    probability: Optional[int] = Field(None, ge=0, le=100)
    assigned_to: Optional[str] = None
    expected_close_date: Optional[date] = None
    lead_source: Optional[str] = None
    deal_type: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "stage": "negotiation",
                "probability": 60
            }
        }


class TicketUpdate(BaseModel):
    """Schema for partial ticket updates."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assigned_to: Optional[str] = None
    category: Optional[str] = None
    satisfaction: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[str] = None


class TeamMemberUpdate(BaseModel):
    """Schema for partial team member updates."""

    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None
    avatar: Optional[str] = None
    status: Optional[str] = None
    sales_target: Optional[float] = Field(None, ge=0)
    deals_won: Optional[int] = Field(None, ge=0)
    tickets_resolved: Optional[int] = Field(None, ge=0)
    performance_score: Optional[float] = Field(None, ge=0, le=100)
    join_date: Optional[date] = None


class HealthResponse(BaseModel):
    """Schema for health check response."""

    status: str
    storage_backend: str
    customers: int
    timestamp: datetime
