"""
Shared pytest fixtures.

All time-dependent code runs against a fixed clock so that recency rules
and monthly labels are reproducible.
"""

import sys
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from crm.analytics import AnalyticsConfig, ChurnAnalytics, ProductAnalytics, SalesAnalytics
from crm.models import (
    ActivityLog,
    Customer,
    Deal,
    EntityRef,
    Ticket,
)
from crm.scoring import ChurnScorer, ChurnScoringConfig
from crm.storage import MemoryStorage, SqlStorage, seed_storage


NOW = datetime(2024, 6, 15, 12, 0, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def scorer(clock):
    """Scorer without jitter, picking the first neutral factor."""
    return ChurnScorer(ChurnScoringConfig(deterministic=True), clock=clock)


@pytest.fixture
def storage(clock):
    return MemoryStorage(clock=clock)


@pytest.fixture
def seeded_storage(storage):
    seed_storage(storage, now=NOW)
    return storage


@pytest.fixture
def sql_storage(clock):
    return SqlStorage("sqlite://", clock=clock)


@pytest.fixture
def churn(seeded_storage, scorer, clock):
    return ChurnAnalytics(seeded_storage, scorer, AnalyticsConfig(), clock=clock)


@pytest.fixture
def sales(seeded_storage):
    return SalesAnalytics(seeded_storage)


@pytest.fixture
def products(seeded_storage):
    return ProductAnalytics(seeded_storage)


@pytest.fixture
def app_config():
    """Application config with deterministic scoring and no auto-seeding."""
    return {
        "api": {"title": "CRM Analytics API", "cors_origins": ["*"]},
        "storage": {"backend": "memory", "seed": False},
        "logging": {"level": "WARNING"},
        "scoring": {"deterministic": True},
        "analytics": {},
    }


@pytest.fixture
def client(app_config, seeded_storage, clock):
    from fastapi.testclient import TestClient

    from crm.api.main import create_app

    app = create_app(config=app_config, storage=seeded_storage, clock=clock)
    return TestClient(app)


# Record builders

@pytest.fixture
def make_customer():
    def _make(**overrides) -> Customer:
        fields = {
            "id": 1,
            "name": "Test Customer",
            "email": "test@example.com",
            "company_name": "Example Ltd.",
            "status": "active",
            "total_spent": 20000,
            "last_order_date": None,
        }
        fields.update(overrides)
        return Customer(**fields)
    return _make


@pytest.fixture
def make_deal():
    counter = iter(range(1, 1000))

    def _make(stage: str = "lead", customer_id: int = 1, **overrides) -> Deal:
        fields = {
            "id": next(counter),
            "customer_id": customer_id,
            "title": "Deal",
            "company_name": "Example Ltd.",
            "stage": stage,
            "value": 1000,
            "probability": 50,
            "created_at": NOW - timedelta(days=10),
            "updated_at": NOW - timedelta(days=10),
        }
        fields.update(overrides)
        return Deal(**fields)
    return _make


@pytest.fixture
def make_ticket():
    counter = iter(range(1, 1000))

    def _make(status: str = "open", priority: str = "medium", customer_id: int = 1, **overrides) -> Ticket:
        ticket_number = next(counter)
        fields = {
            "id": ticket_number,
            "ticket_id": f"TK-{ticket_number}",
            "customer_id": customer_id,
            "title": "Ticket",
            "description": "Something broke",
            "status": status,
            "priority": priority,
            "created_at": NOW - timedelta(days=2),
            "updated_at": NOW - timedelta(days=1),
        }
        fields.update(overrides)
        return Ticket(**fields)
    return _make


@pytest.fixture
def make_activity():
    counter = iter(range(1, 1000))

    def _make(days_ago: float = 1, related_to=EntityRef(kind="customer", id=1)) -> ActivityLog:
        return ActivityLog(
            id=next(counter),
            activity_type="call",
            description="Check-in call",
            related_to=related_to,
            created_by="Priya Sharma",
            created_at=NOW - timedelta(days=days_ago),
        )
    return _make


@pytest.fixture
def days_ago():
    """Calendar date a number of days before the fixed clock."""
    def _days_ago(days: int) -> date:
        return NOW.date() - timedelta(days=days)
    return _days_ago
