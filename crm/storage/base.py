"""
Storage Contract
================

Abstract interface shared by every storage backend.

Analytics only ever reads through ``list_customers``, ``get_customer``,
``list_deals_by_customer``, ``list_tickets_by_customer`` and
``list_activities_by_relation``; the CRUD methods serve the REST layer.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from crm.models import (
    ActivityLog,
    ActivityLogCreate,
    CategorySale,
    Customer,
    CustomerCreate,
    Deal,
    DealCreate,
    EntityKind,
    Product,
    ProductCreate,
    RevenueMetric,
    TeamMember,
    TeamMemberCreate,
    Ticket,
    TicketCreate,
)


class Storage(ABC):
    """Storage backend for CRM records."""

    # Customers

    @abstractmethod
    def list_customers(self) -> List[Customer]:
        ...

    @abstractmethod
    def get_customer(self, customer_id: int) -> Optional[Customer]:
        ...

    @abstractmethod
    def create_customer(self, data: CustomerCreate) -> Customer:
        ...

    @abstractmethod
    def update_customer(self, customer_id: int, changes: Dict[str, Any]) -> Optional[Customer]:
        ...

    @abstractmethod
    def delete_customer(self, customer_id: int) -> bool:
        ...

    # Products

    @abstractmethod
    def list_products(self) -> List[Product]:
        ...

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[Product]:
        ...

    @abstractmethod
    def create_product(self, data: ProductCreate) -> Product:
        ...

    @abstractmethod
    def update_product(self, product_id: int, changes: Dict[str, Any]) -> Optional[Product]:
        ...

    @abstractmethod
    def delete_product(self, product_id: int) -> bool:
        ...

    # Deals

    @abstractmethod
    def list_deals(self) -> List[Deal]:
        ...

    @abstractmethod
    def get_deal(self, deal_id: int) -> Optional[Deal]:
        ...

    @abstractmethod
    def create_deal(self, data: DealCreate) -> Deal:
        ...

    @abstractmethod
    def update_deal(self, deal_id: int, changes: Dict[str, Any]) -> Optional[Deal]:
        ...

    @abstractmethod
    def delete_deal(self, deal_id: int) -> bool:
        ...

    def list_deals_by_customer(self, customer_id: int) -> List[Deal]:
        """Deals belonging to a customer; unknown ids yield an empty list."""
        return [d for d in self.list_deals() if d.customer_id == customer_id]

    # Tickets

    @abstractmethod
    def list_tickets(self) -> List[Ticket]:
        ...

    @abstractmethod
    def get_ticket(self, ticket_id: int) -> Optional[Ticket]:
        ...

    @abstractmethod
    def create_ticket(self, data: TicketCreate) -> Ticket:
        ...

    @abstractmethod
    def update_ticket(self, ticket_id: int, changes: Dict[str, Any]) -> Optional[Ticket]:
        ...

    @abstractmethod
    def delete_ticket(self, ticket_id: int) -> bool:
        ...

    def list_tickets_by_customer(self, customer_id: int) -> List[Ticket]:
        """Tickets belonging to a customer; unknown ids yield an empty list."""
        return [t for t in self.list_tickets() if t.customer_id == customer_id]

    # Activity logs

    @abstractmethod
    def list_activities(self) -> List[ActivityLog]:
        ...

    @abstractmethod
    def create_activity(self, data: ActivityLogCreate) -> ActivityLog:
        ...

    def list_activities_by_relation(self, kind: Union[EntityKind, str], entity_id: int) -> List[ActivityLog]:
        """Activity logs whose ``related_to`` points at the given record."""
        kind = EntityKind(kind)
        return [
            a for a in self.list_activities()
            if a.related_to.kind == kind and a.related_to.id == entity_id
        ]

    # Team members

    @abstractmethod
    def list_team_members(self) -> List[TeamMember]:
        ...

    @abstractmethod
    def get_team_member(self, member_id: int) -> Optional[TeamMember]:
        ...

    @abstractmethod
    def create_team_member(self, data: TeamMemberCreate) -> TeamMember:
        ...

    @abstractmethod
    def update_team_member(self, member_id: int, changes: Dict[str, Any]) -> Optional[TeamMember]:
        ...

    # Dashboard series

    @abstractmethod
    def list_revenue_metrics(self) -> List[RevenueMetric]:
        ...

    @abstractmethod
    def add_revenue_metric(self, metric: RevenueMetric) -> RevenueMetric:
        ...

    @abstractmethod
    def list_category_sales(self) -> List[CategorySale]:
        ...

    @abstractmethod
    def add_category_sale(self, sale: CategorySale) -> CategorySale:
        ...

    def is_empty(self) -> bool:
        """Whether the store holds no customers, products or deals."""
        return not (self.list_customers() or self.list_products() or self.list_deals())
