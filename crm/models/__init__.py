"""Entity models."""

from .entities import (
    ActivityLog,
    ActivityLogCreate,
    CategorySale,
    Customer,
    CustomerCreate,
    CustomerStatus,
    Deal,
    DealCreate,
    DealStage,
    EntityKind,
    EntityRef,
    Product,
    ProductCreate,
    RevenueMetric,
    TeamMember,
    TeamMemberCreate,
    Ticket,
    TicketCreate,
    TicketPriority,
    TicketStatus,
)

__all__ = [
    "ActivityLog",
    "ActivityLogCreate",
    "CategorySale",
    "Customer",
    "CustomerCreate",
    "CustomerStatus",
    "Deal",
    "DealCreate",
    "DealStage",
    "EntityKind",
    "EntityRef",
    "Product",
    "ProductCreate",
    "RevenueMetric",
    "TeamMember",
    "TeamMemberCreate",
    "Ticket",
    "TicketCreate",
    "TicketPriority",
    "TicketStatus",
]
