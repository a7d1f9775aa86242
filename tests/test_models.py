"""
Pydantic model validation tests.

Run with: pytest tests/test_models.py -v
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from crm.models import (
    ActivityLogCreate,
    CustomerCreate,
    DealStage,
    EntityKind,
    EntityRef,
    TicketCreate,
    TicketStatus,
)


class TestEntityRef:
    """Composite 'kind:id' references."""

    def test_parse_string(self):
        ref = EntityRef.parse("customer:42")
        assert ref.kind == EntityKind.CUSTOMER
        assert ref.id == 42

    def test_parse_is_case_insensitive_on_kind(self):
        assert EntityRef.parse("Deal:7") == EntityRef(kind="deal", id=7)

    def test_str_round_trip(self):
        assert str(EntityRef.parse("ticket:3")) == "ticket:3"

    def test_parse_mapping(self):
        assert EntityRef.parse({"kind": "customer", "id": 1}) == EntityRef(kind="customer", id=1)

    @pytest.mark.parametrize("value", ["customer", "customer:", "vendor:1", "customer:abc", ":5"])
    def test_parse_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            EntityRef.parse(value)

    def test_parse_rejects_other_types(self):
        with pytest.raises(ValueError):
            EntityRef.parse(42)

    def test_is_hashable(self):
        assert len({EntityRef.parse("customer:1"), EntityRef.parse("customer:1")}) == 1


class TestActivityLogCreate:
    def test_related_to_parsed_from_string(self):
        activity = ActivityLogCreate(
            activity_type="call",
            description="Intro call",
            related_to="customer:1",
            created_by="Priya Sharma",
        )
        assert activity.related_to == EntityRef(kind="customer", id=1)

    def test_related_to_serialized_as_string(self):
        activity = ActivityLogCreate(
            activity_type="email",
            description="Follow-up",
            related_to="deal:2",
            created_by="Karan Patel",
        )
        assert activity.model_dump()["related_to"] == "deal:2"

    def test_invalid_related_to(self):
        with pytest.raises(ValidationError):
            ActivityLogCreate(
                activity_type="call",
                description="Intro call",
                related_to="invoice:1",
                created_by="Priya Sharma",
            )

    def test_offset_timestamp_converted_to_utc(self):
        activity = ActivityLogCreate(
            activity_type="meeting",
            description="Quarterly review",
            related_to="customer:3",
            created_by="Priya Sharma",
            created_at="2024-06-14T10:00:00+05:00",
        )
        assert activity.created_at == datetime(2024, 6, 14, 5, 0)
        assert activity.created_at.tzinfo is None


class TestCustomerCreate:
    def test_defaults(self):
        customer = CustomerCreate(name="A", email="a@example.com", company_name="A Ltd.")
        assert customer.total_spent == 0
        assert customer.status == "active"
        assert customer.last_order_date is None

    def test_null_total_spent_becomes_zero(self):
        customer = CustomerCreate(name="A", email="a@example.com", company_name="A Ltd.", total_spent=None)
        assert customer.total_spent == 0

    def test_rejects_negative_spend(self):
        with pytest.raises(ValidationError):
            CustomerCreate(name="A", email="a@example.com", company_name="A Ltd.", total_spent=-1)

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            CustomerCreate(name="A", email="a@example.com", company_name="A Ltd.", status="churned")


class TestTicketCreate:
    def _ticket(self, **overrides):
        fields = {
            "ticket_id": "TK-1001",
            "customer_id": 1,
            "title": "Login issue",
            "description": "Cannot log in",
            "status": "in progress",
            "priority": "high",
        }
        fields.update(overrides)
        return TicketCreate(**fields)

    def test_valid_ticket(self):
        ticket = self._ticket()
        assert ticket.status == TicketStatus.IN_PROGRESS
        assert ticket.status.is_unresolved

    def test_ticket_id_format(self):
        with pytest.raises(ValidationError):
            self._ticket(ticket_id="1001")

    def test_satisfaction_range(self):
        with pytest.raises(ValidationError):
            self._ticket(satisfaction=6)


class TestEnums:
    def test_active_deal_stages(self):
        assert [s.value for s in DealStage if s.is_active] == ["lead", "qualified", "proposal", "negotiation"]

    def test_unresolved_ticket_statuses(self):
        assert [s.value for s in TicketStatus if s.is_unresolved] == ["open", "in progress"]
