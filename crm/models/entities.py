"""
Entity Models
=============

Pydantic models for the records held by the CRM storage layer.

Each entity has a ``*Create`` model (the payload accepted by storage) and
the stored model, which adds the identifier and server-side timestamps.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from crm.utils.helpers import to_naive_utc


class CustomerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class DealStage(str, Enum):
    LEAD = "lead"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    CLOSED = "closed"
    LOST = "lost"

    @property
    def is_active(self) -> bool:
        """Closed and lost deals are terminal, every other stage is active."""
        return self not in (DealStage.CLOSED, DealStage.LOST)


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in progress"
    RESOLVED = "resolved"
    CLOSED = "closed"

    @property
    def is_unresolved(self) -> bool:
        return self in (TicketStatus.OPEN, TicketStatus.IN_PROGRESS)


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EntityKind(str, Enum):
    CUSTOMER = "customer"
    DEAL = "deal"
    TICKET = "ticket"


class EntityRef(BaseModel):
    """Typed reference to another record, written as ``"<kind>:<id>"`` on the wire."""

    model_config = ConfigDict(frozen=True)

    kind: EntityKind
    id: int

    @classmethod
    def parse(cls, value: Union[str, "EntityRef", dict]) -> "EntityRef":
        """
        Parse a composite key such as ``"customer:42"``.

        Args:
            value: Composite key string, mapping or EntityRef

        Returns:
            EntityRef

        Raises:
            ValueError: If the key is malformed or the kind is unknown
        """
        if isinstance(value, EntityRef):
            return value
        if isinstance(value, dict):
            return cls(**value)
        if not isinstance(value, str):
            raise ValueError(f"Cannot parse entity reference from {type(value).__name__}")

        kind, sep, raw_id = value.strip().partition(":")
        if not sep or not raw_id:
            raise ValueError(f"Entity reference must look like '<kind>:<id>', got '{value}'")

        try:
            entity_kind = EntityKind(kind.lower())
        except ValueError:
            allowed = [k.value for k in EntityKind]
            raise ValueError(f"Entity kind must be one of {allowed}, got '{kind}'") from None

        try:
            entity_id = int(raw_id)
        except ValueError:
            raise ValueError(f"Entity id must be an integer, got '{raw_id}'") from None

        return cls(kind=entity_kind, id=entity_id)

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"


# Customers

class CustomerCreate(BaseModel):
    """Schema for customer data input."""

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    company_name: str
    phone: Optional[str] = None
    status: CustomerStatus = CustomerStatus.ACTIVE
    total_spent: float = Field(0.0, ge=0, description="Total amount spent")
    last_order_date: Optional[date] = None
    avatar: Optional[str] = None
    engagement_score: float = Field(50.0, ge=0, le=100)
    last_contact_date: Optional[date] = None
    acquisition_channel: Optional[str] = None
    segment: str = "general"
    notes: Optional[str] = None

    @field_validator("total_spent", mode="before")
    @classmethod
    def default_total_spent(cls, v):
        return 0.0 if v is None else v


class Customer(CustomerCreate):
    id: int


# Products

class ProductCreate(BaseModel):
    """Schema for product data input."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: str
    price: float = Field(..., ge=0)
    currency: str = "INR"
    status: str = "active"
    icon: Optional[str] = None
    trend: float = Field(0.0, description="Percentage trend")
    stock_available: int = Field(100, ge=0)
    stock_threshold: int = Field(10, ge=0)
    sales_count: int = Field(0, ge=0)
    profit_margin: float = Field(30.0, description="Profit margin percentage")
    vendor: Optional[str] = None
    launch_date: Optional[date] = None


class Product(ProductCreate):
    id: int


# Deals

class DealCreate(BaseModel):
    """Schema for sales pipeline deal input."""

    customer_id: int
    title: str = Field(..., min_length=1)
    company_name: str
    stage: DealStage
    value: float = Field(..., ge=0)
    probability: int = Field(..., ge=0, le=100)
    assigned_to: Optional[str] = None
    expected_close_date: Optional[date] = None
    lead_source: Optional[str] = None
    deal_type: str = "new"
    notes: Optional[str] = None
    # Historical imports may carry their own timestamps
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, v):
        # Stored timestamps are naive UTC
        return to_naive_utc(v) if v is not None else v


class Deal(DealCreate):
    id: int
    created_at: datetime
    updated_at: datetime


# Tickets

class TicketCreate(BaseModel):
    """Schema for support ticket input."""

    ticket_id: str = Field(..., pattern=r"^TK-\d+$", description="Format: TK-XXXX")
    customer_id: int
    title: str = Field(..., min_length=1)
    description: str
    status: TicketStatus
    priority: TicketPriority
    assigned_to: Optional[str] = None
    category: str = "general"
    satisfaction: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, v):
        return to_naive_utc(v) if v is not None else v


class Ticket(TicketCreate):
    id: int
    created_at: datetime
    updated_at: datetime


# Activity logs

class ActivityLogCreate(BaseModel):
    """Schema for an interaction record (call, email, meeting, note)."""

    activity_type: str = Field(..., description="call, email, meeting or note")
    description: str
    related_to: EntityRef = Field(..., description="Related record, e.g. 'customer:42'")
    created_by: str
    duration: Optional[int] = Field(None, ge=0, description="Duration in minutes")
    outcome: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("related_to", mode="before")
    @classmethod
    def parse_related_to(cls, v):
        return EntityRef.parse(v)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v):
        return to_naive_utc(v) if v is not None else v

    @field_serializer("related_to")
    def serialize_related_to(self, ref: EntityRef) -> str:
        return str(ref)


class ActivityLog(ActivityLogCreate):
    id: int
    created_at: datetime


# Team members

class TeamMemberCreate(BaseModel):
    """Schema for team member input."""

    name: str = Field(..., min_length=1)
    email: str
    role: str
    department: str
    avatar: Optional[str] = None
    status: str = "active"
    sales_target: float = Field(0.0, ge=0)
    deals_won: int = Field(0, ge=0)
    tickets_resolved: int = Field(0, ge=0)
    performance_score: float = Field(0.0, ge=0, le=100)
    join_date: Optional[date] = None


class TeamMember(TeamMemberCreate):
    id: int


# Dashboard series (seeded, read-only)

class RevenueMetric(BaseModel):
    id: int
    month: str
    year: int
    value: float
    change: Optional[float] = Field(None, description="Percentage change from previous period")
    new_customers: int = 0
    churned_customers: int = 0
    mrr: float = 0.0
    expenses: float = 0.0
    profit: float = 0.0


class CategorySale(BaseModel):
    id: int
    category: str
    value: float
    percentage: float
    growth: float = 0.0
    item_count: int = 0
    avg_order_value: float = 0.0
