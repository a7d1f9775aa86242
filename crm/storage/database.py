"""
Database Module
===============

SQLAlchemy tables and a storage backend persisting CRM records.
"""

from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Type, TypeVar, Union

from loguru import logger
from pydantic import BaseModel
from sqlalchemy import Column, Date, DateTime, Float, Integer, String, Text, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from crm.models import (
    ActivityLog,
    ActivityLogCreate,
    CategorySale,
    Customer,
    CustomerCreate,
    Deal,
    DealCreate,
    EntityKind,
    EntityRef,
    Product,
    ProductCreate,
    RevenueMetric,
    TeamMember,
    TeamMemberCreate,
    Ticket,
    TicketCreate,
)
from .base import Storage


# Base class for models
Base = declarative_base()

ModelT = TypeVar("ModelT", bound=BaseModel)


class CustomerRecord(Base):
    """Database model for customers."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    company_name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    status = Column(String, default="active")
    total_spent = Column(Float, default=0.0)
    last_order_date = Column(Date, nullable=True)
    avatar = Column(String, nullable=True)
    engagement_score = Column(Float, default=50.0)
    last_contact_date = Column(Date, nullable=True)
    acquisition_channel = Column(String, nullable=True)
    segment = Column(String, default="general")
    notes = Column(Text, nullable=True)


class ProductRecord(Base):
    """Database model for products."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    currency = Column(String, default="INR")
    status = Column(String, default="active")
    icon = Column(String, nullable=True)
    trend = Column(Float, default=0.0)
    stock_available = Column(Integer, default=100)
    stock_threshold = Column(Integer, default=10)
    sales_count = Column(Integer, default=0)
    profit_margin = Column(Float, default=30.0)
    vendor = Column(String, nullable=True)
    launch_date = Column(Date, nullable=True)


class DealRecord(Base):
    """Database model for sales pipeline deals."""

    __tablename__ = "deals"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, nullable=False, index=True)
    title = Column(String, nullable=False)
    company_name = Column(String, nullable=False)
    stage = Column(String, nullable=False, index=True)
    value = Column(Float, nullable=False)
    probability = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now)
    assigned_to = Column(String, nullable=True, index=True)
    expected_close_date = Column(Date, nullable=True)
    lead_source = Column(String, nullable=True)
    deal_type = Column(String, default="new")
    notes = Column(Text, nullable=True)


class TicketRecord(Base):
    """Database model for support tickets."""

    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    ticket_id = Column(String, nullable=False, unique=True)
    customer_id = Column(Integer, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String, nullable=False)
    priority = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now)
    assigned_to = Column(String, nullable=True)
    category = Column(String, default="general")
    satisfaction = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)


class ActivityLogRecord(Base):
    """Database model for activity logs."""

    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    activity_type = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    related_to = Column(String, nullable=False, index=True)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
    duration = Column(Integer, nullable=True)
    outcome = Column(String, nullable=True)


class TeamMemberRecord(Base):
    """Database model for team members."""

    __tablename__ = "team_members"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    role = Column(String, nullable=False)
    department = Column(String, nullable=False)
    avatar = Column(String, nullable=True)
    status = Column(String, default="active")
    sales_target = Column(Float, default=0.0)
    deals_won = Column(Integer, default=0)
    tickets_resolved = Column(Integer, default=0)
    performance_score = Column(Float, default=0.0)
    join_date = Column(Date, nullable=True)


class RevenueMetricRecord(Base):
    """Database model for monthly revenue metrics."""

    __tablename__ = "revenue_metrics"

    id = Column(Integer, primary_key=True, index=True)
    month = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    value = Column(Float, nullable=False)
    change = Column(Float, nullable=True)
    new_customers = Column(Integer, default=0)
    churned_customers = Column(Integer, default=0)
    mrr = Column(Float, default=0.0)
    expenses = Column(Float, default=0.0)
    profit = Column(Float, default=0.0)


class CategorySaleRecord(Base):
    """Database model for sales per product category."""

    __tablename__ = "category_sales"

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String, nullable=False)
    value = Column(Float, nullable=False)
    percentage = Column(Float, nullable=False)
    growth = Column(Float, default=0.0)
    item_count = Column(Integer, default=0)
    avg_order_value = Column(Float, default=0.0)


def _to_columns(model: BaseModel) -> Dict[str, Any]:
    """Flatten a pydantic model into column values."""
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in model.model_dump().items()
    }


class SqlStorage(Storage):
    """Storage backend on top of any SQLAlchemy database URL."""

    def __init__(
        self,
        url: str,
        echo: bool = False,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize SqlStorage and create missing tables.

        Args:
            url: SQLAlchemy database URL
            echo: Log emitted SQL
            clock: Callable returning the current time, used for timestamps
        """
        self.url = url
        self.clock = clock or datetime.now

        engine_kwargs: Dict[str, Any] = {"echo": echo}
        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # Share the single in-memory database across sessions
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.create_tables()

    def create_tables(self):
        """Create all database tables."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created")

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Get database session, committing on success."""
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _list(self, record_cls: Type[Base], model: Type[ModelT], *criteria) -> List[ModelT]:
        with self.session_scope() as db:
            query = db.query(record_cls)
            if criteria:
                query = query.filter(*criteria)
            return [model.model_validate(r, from_attributes=True) for r in query.order_by(record_cls.id).all()]

    def _get(self, record_cls: Type[Base], model: Type[ModelT], record_id: int) -> Optional[ModelT]:
        with self.session_scope() as db:
            record = db.get(record_cls, record_id)
            return model.model_validate(record, from_attributes=True) if record else None

    def _create(self, record_cls: Type[Base], model: Type[ModelT], fields: Dict[str, Any]) -> ModelT:
        with self.session_scope() as db:
            record = record_cls(**fields)
            db.add(record)
            db.flush()
            return model.model_validate(record, from_attributes=True)

    def _update(
        self,
        record_cls: Type[Base],
        model: Type[ModelT],
        record_id: int,
        changes: Dict[str, Any]
    ) -> Optional[ModelT]:
        with self.session_scope() as db:
            record = db.get(record_cls, record_id)
            if record is None:
                return None

            current = model.model_validate(record, from_attributes=True)
            merged = model.model_validate({**current.model_dump(), **changes, "id": record_id})
            for key, value in _to_columns(merged).items():
                setattr(record, key, value)
            return merged

    def _delete(self, record_cls: Type[Base], record_id: int) -> bool:
        with self.session_scope() as db:
            record = db.get(record_cls, record_id)
            if record is None:
                return False
            db.delete(record)
            return True

    def _timestamps(self, data: BaseModel) -> Dict[str, datetime]:
        created_at = getattr(data, "created_at", None) or self.clock()
        updated_at = getattr(data, "updated_at", None) or created_at
        return {"created_at": created_at, "updated_at": updated_at}

    # Customers

    def list_customers(self) -> List[Customer]:
        return self._list(CustomerRecord, Customer)

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        return self._get(CustomerRecord, Customer, customer_id)

    def create_customer(self, data: CustomerCreate) -> Customer:
        return self._create(CustomerRecord, Customer, _to_columns(data))

    def update_customer(self, customer_id: int, changes: Dict[str, Any]) -> Optional[Customer]:
        return self._update(CustomerRecord, Customer, customer_id, changes)

    def delete_customer(self, customer_id: int) -> bool:
        return self._delete(CustomerRecord, customer_id)

    # Products

    def list_products(self) -> List[Product]:
        return self._list(ProductRecord, Product)

    def get_product(self, product_id: int) -> Optional[Product]:
        return self._get(ProductRecord, Product, product_id)

    def create_product(self, data: ProductCreate) -> Product:
        return self._create(ProductRecord, Product, _to_columns(data))

    def update_product(self, product_id: int, changes: Dict[str, Any]) -> Optional[Product]:
        return self._update(ProductRecord, Product, product_id, changes)

    def delete_product(self, product_id: int) -> bool:
        return self._delete(ProductRecord, product_id)

    # Deals

    def list_deals(self) -> List[Deal]:
        return self._list(DealRecord, Deal)

    def get_deal(self, deal_id: int) -> Optional[Deal]:
        return self._get(DealRecord, Deal, deal_id)

    def create_deal(self, data: DealCreate) -> Deal:
        return self._create(DealRecord, Deal, {**_to_columns(data), **self._timestamps(data)})

    def update_deal(self, deal_id: int, changes: Dict[str, Any]) -> Optional[Deal]:
        return self._update(DealRecord, Deal, deal_id, {**changes, "updated_at": self.clock()})

    def delete_deal(self, deal_id: int) -> bool:
        return self._delete(DealRecord, deal_id)

    def list_deals_by_customer(self, customer_id: int) -> List[Deal]:
        return self._list(DealRecord, Deal, DealRecord.customer_id == customer_id)

    # Tickets

    def list_tickets(self) -> List[Ticket]:
        return self._list(TicketRecord, Ticket)

    def get_ticket(self, ticket_id: int) -> Optional[Ticket]:
        return self._get(TicketRecord, Ticket, ticket_id)

    def create_ticket(self, data: TicketCreate) -> Ticket:
        return self._create(TicketRecord, Ticket, {**_to_columns(data), **self._timestamps(data)})

    def update_ticket(self, ticket_id: int, changes: Dict[str, Any]) -> Optional[Ticket]:
        return self._update(TicketRecord, Ticket, ticket_id, {**changes, "updated_at": self.clock()})

    def delete_ticket(self, ticket_id: int) -> bool:
        return self._delete(TicketRecord, ticket_id)

    def list_tickets_by_customer(self, customer_id: int) -> List[Ticket]:
        return self._list(TicketRecord, Ticket, TicketRecord.customer_id == customer_id)

    # Activity logs

    def list_activities(self) -> List[ActivityLog]:
        return self._list(ActivityLogRecord, ActivityLog)

    def create_activity(self, data: ActivityLogCreate) -> ActivityLog:
        fields = {**_to_columns(data), "created_at": data.created_at or self.clock()}
        return self._create(ActivityLogRecord, ActivityLog, fields)

    def list_activities_by_relation(self, kind: Union[EntityKind, str], entity_id: int) -> List[ActivityLog]:
        ref = EntityRef(kind=EntityKind(kind), id=entity_id)
        return self._list(ActivityLogRecord, ActivityLog, ActivityLogRecord.related_to == str(ref))

    # Team members

    def list_team_members(self) -> List[TeamMember]:
        return self._list(TeamMemberRecord, TeamMember)

    def get_team_member(self, member_id: int) -> Optional[TeamMember]:
        return self._get(TeamMemberRecord, TeamMember, member_id)

    def create_team_member(self, data: TeamMemberCreate) -> TeamMember:
        return self._create(TeamMemberRecord, TeamMember, _to_columns(data))

    def update_team_member(self, member_id: int, changes: Dict[str, Any]) -> Optional[TeamMember]:
        return self._update(TeamMemberRecord, TeamMember, member_id, changes)

    # Dashboard series

    def list_revenue_metrics(self) -> List[RevenueMetric]:
        return self._list(RevenueMetricRecord, RevenueMetric)

    def add_revenue_metric(self, metric: RevenueMetric) -> RevenueMetric:
        return self._create(RevenueMetricRecord, RevenueMetric, _to_columns(metric))

    def list_category_sales(self) -> List[CategorySale]:
        return self._list(CategorySaleRecord, CategorySale)

    def add_category_sale(self, sale: CategorySale) -> CategorySale:
        return self._create(CategorySaleRecord, CategorySale, _to_columns(sale))
