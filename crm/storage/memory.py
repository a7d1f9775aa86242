"""
In-Memory Storage
=================

Dict-backed storage with auto-incrementing ids.

Each collection is guarded by its own lock so that CRUD writes never
interleave with a concurrent read of the same collection.
"""

from datetime import datetime
from threading import RLock
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel

from crm.models import (
    ActivityLog,
    ActivityLogCreate,
    CategorySale,
    Customer,
    CustomerCreate,
    Deal,
    DealCreate,
    Product,
    ProductCreate,
    RevenueMetric,
    TeamMember,
    TeamMemberCreate,
    Ticket,
    TicketCreate,
)
from .base import Storage


ModelT = TypeVar("ModelT", bound=BaseModel)


class _Collection(Generic[ModelT]):
    """Thread-safe map of id -> record."""

    def __init__(self, model: Type[ModelT]):
        self.model = model
        self._records: Dict[int, ModelT] = {}
        self._next_id = 1
        self._lock = RLock()

    def all(self) -> List[ModelT]:
        with self._lock:
            return list(self._records.values())

    def get(self, record_id: int) -> Optional[ModelT]:
        with self._lock:
            return self._records.get(record_id)

    def add(self, fields: Dict[str, Any]) -> ModelT:
        with self._lock:
            record = self.model.model_validate({**fields, "id": self._next_id})
            self._records[record.id] = record
            self._next_id += 1
            return record

    def put(self, record: ModelT) -> ModelT:
        """Store a record that already carries its id."""
        with self._lock:
            self._records[record.id] = record
            self._next_id = max(self._next_id, record.id + 1)
            return record

    def update(self, record_id: int, changes: Dict[str, Any]) -> Optional[ModelT]:
        with self._lock:
            existing = self._records.get(record_id)
            if existing is None:
                return None

            merged = {**existing.model_dump(), **changes, "id": record_id}
            record = self.model.model_validate(merged)
            self._records[record_id] = record
            return record

    def delete(self, record_id: int) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None


class MemoryStorage(Storage):
    """Process-local storage; contents are lost on restart."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize MemoryStorage.

        Args:
            clock: Callable returning the current time, used for timestamps
        """
        self.clock = clock or datetime.now
        self._customers = _Collection(Customer)
        self._products = _Collection(Product)
        self._deals = _Collection(Deal)
        self._tickets = _Collection(Ticket)
        self._activities = _Collection(ActivityLog)
        self._team_members = _Collection(TeamMember)
        self._revenue_metrics = _Collection(RevenueMetric)
        self._category_sales = _Collection(CategorySale)

    def _timestamps(self, data: BaseModel) -> Dict[str, datetime]:
        created_at = getattr(data, "created_at", None) or self.clock()
        updated_at = getattr(data, "updated_at", None) or created_at
        return {"created_at": created_at, "updated_at": updated_at}

    # Customers

    def list_customers(self) -> List[Customer]:
        return self._customers.all()

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        return self._customers.get(customer_id)

    def create_customer(self, data: CustomerCreate) -> Customer:
        return self._customers.add(data.model_dump())

    def update_customer(self, customer_id: int, changes: Dict[str, Any]) -> Optional[Customer]:
        return self._customers.update(customer_id, changes)

    def delete_customer(self, customer_id: int) -> bool:
        return self._customers.delete(customer_id)

    # Products

    def list_products(self) -> List[Product]:
        return self._products.all()

    def get_product(self, product_id: int) -> Optional[Product]:
        return self._products.get(product_id)

    def create_product(self, data: ProductCreate) -> Product:
        return self._products.add(data.model_dump())

    def update_product(self, product_id: int, changes: Dict[str, Any]) -> Optional[Product]:
        return self._products.update(product_id, changes)

    def delete_product(self, product_id: int) -> bool:
        return self._products.delete(product_id)

    # Deals

    def list_deals(self) -> List[Deal]:
        return self._deals.all()

    def get_deal(self, deal_id: int) -> Optional[Deal]:
        return self._deals.get(deal_id)

    def create_deal(self, data: DealCreate) -> Deal:
        return self._deals.add({**data.model_dump(), **self._timestamps(data)})

    def update_deal(self, deal_id: int, changes: Dict[str, Any]) -> Optional[Deal]:
        return self._deals.update(deal_id, {**changes, "updated_at": self.clock()})

    def delete_deal(self, deal_id: int) -> bool:
        return self._deals.delete(deal_id)

    # Tickets

    def list_tickets(self) -> List[Ticket]:
        return self._tickets.all()

    def get_ticket(self, ticket_id: int) -> Optional[Ticket]:
        return self._tickets.get(ticket_id)

    def create_ticket(self, data: TicketCreate) -> Ticket:
        return self._tickets.add({**data.model_dump(), **self._timestamps(data)})

    def update_ticket(self, ticket_id: int, changes: Dict[str, Any]) -> Optional[Ticket]:
        return self._tickets.update(ticket_id, {**changes, "updated_at": self.clock()})

    def delete_ticket(self, ticket_id: int) -> bool:
        return self._tickets.delete(ticket_id)

    # Activity logs

    def list_activities(self) -> List[ActivityLog]:
        return self._activities.all()

    def create_activity(self, data: ActivityLogCreate) -> ActivityLog:
        return self._activities.add({**data.model_dump(), "created_at": data.created_at or self.clock()})

    # Team members

    def list_team_members(self) -> List[TeamMember]:
        return self._team_members.all()

    def get_team_member(self, member_id: int) -> Optional[TeamMember]:
        return self._team_members.get(member_id)

    def create_team_member(self, data: TeamMemberCreate) -> TeamMember:
        return self._team_members.add(data.model_dump())

    def update_team_member(self, member_id: int, changes: Dict[str, Any]) -> Optional[TeamMember]:
        return self._team_members.update(member_id, changes)

    # Dashboard series

    def list_revenue_metrics(self) -> List[RevenueMetric]:
        return self._revenue_metrics.all()

    def add_revenue_metric(self, metric: RevenueMetric) -> RevenueMetric:
        return self._revenue_metrics.put(metric)

    def list_category_sales(self) -> List[CategorySale]:
        return self._category_sales.all()

    def add_category_sale(self, sale: CategorySale) -> CategorySale:
        return self._category_sales.put(sale)
