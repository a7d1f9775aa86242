"""
Sample Data
===========

Populates a storage backend with a small demonstration data set.

Dates are expressed relative to the seeding time so that recency-based
analytics stay meaningful whenever the service is started.
"""

from datetime import datetime, timedelta
from typing import Optional

from loguru import logger

from crm.models import (
    ActivityLogCreate,
    CategorySale,
    CustomerCreate,
    DealCreate,
    ProductCreate,
    RevenueMetric,
    TeamMemberCreate,
    TicketCreate,
)
from .base import Storage


CUSTOMERS = [
    # name, email, company, phone, status, total_spent, days since last order
    ("Michael Johnson", "michael@techsolutions.com", "Tech Solutions Inc.", "+91-9876543210", "active", 42500, 12),
    ("Sarah Williams", "sarah@innovatedesign.com", "Innovate Design Co.", "+91-9876543211", "active", 28700, 45),
    ("David Rodriguez", "david@globalenterprises.com", "Global Enterprises Ltd.", "+91-9876543212", "active", 56200, 8),
    ("Emily Chen", "emily@nextgen.com", "NextGen Solutions", "+91-9876543213", "active", 31450, 120),
    ("Rahul Mehta", "rahul@brightpath.in", "BrightPath Retail", "+91-9876543214", "inactive", 7800, 260),
    ("Olivia Brown", "olivia@northwind.com", "Northwind Traders", "+91-9876543215", "active", 18900, 200),
    ("Arjun Nair", "arjun@coastalsystems.in", "Coastal Systems", "+91-9876543216", "active", 9200, None),
]

PRODUCTS = [
    ("Enterprise CRM Suite", "Comprehensive CRM solution for large enterprises", "Software", 1450000, "desktop_windows", 12.4, 42, 8, 38),
    ("Premium Support Plan", "24/7 priority support for enterprise customers", "Support", 825000, "support_agent", 8.2, 120, 15, 55),
    ("Cloud Storage 5TB", "Secure cloud storage solution for businesses", "Infrastructure", 675000, "storage", -2.8, 6, 10, 22),
    ("API Integration Package", "Custom API integration services", "Services", 520000, "integration_instructions", 15.7, 0, 5, 31),
]

DEALS = [
    # customer_id, title, company, stage, value, probability, assigned_to
    (1, "Enterprise CRM Implementation", "TechCorp Solutions", "proposal", 850000, 75, "Priya Sharma"),
    (2, "Cloud Migration Project", "Innovate Industries", "qualified", 525000, 45, "Karan Patel"),
    (3, "Data Center Upgrade", "Global Enterprises", "lead", 1275000, 20, "Priya Sharma"),
    (4, "DevOps Implementation", "NextGen Solutions", "closed", 640000, 100, "Karan Patel"),
    (5, "POS Modernisation", "BrightPath Retail", "lost", 310000, 0, "Anita Rao"),
    (5, "Loyalty Platform", "BrightPath Retail", "lost", 180000, 0, "Anita Rao"),
    (6, "Analytics Add-on", "Northwind Traders", "lost", 220000, 0, "Karan Patel"),
    (1, "Support Renewal", "Tech Solutions Inc.", "negotiation", 410000, 80, "Anita Rao"),
]

TICKETS = [
    # ticket_id, customer_id, title, description, status, priority, hours open, satisfaction
    ("TK-2384", 1, "Integration issue with third-party API", "Unable to connect to the payment gateway API", "open", "high", 30, None),
    ("TK-2383", 2, "Dashboard export not working correctly", "PDF exports are missing some data columns", "in progress", "medium", 6, None),
    ("TK-2382", 3, "Account settings update confirmation", "Not receiving confirmation emails after settings update", "open", "low", 2, None),
    ("TK-2381", 4, "Product catalog pricing discrepancy", "Prices shown in the catalog don't match checkout prices", "open", "medium", 12, None),
    ("TK-2380", 4, "Invoice PDF missing GST number", "Generated invoices omit the GST registration number", "resolved", "medium", 20, 4),
    ("TK-2379", 5, "Unable to log in after password reset", "Reset link expires immediately", "open", "high", 48, None),
    ("TK-2378", 5, "Data import keeps failing", "CSV import stops at row 500", "in progress", "medium", 26, None),
    ("TK-2377", 6, "Report scheduling question", "How to schedule weekly reports", "closed", "low", 4, 5),
]

ACTIVITIES = [
    # activity_type, description, related_to, created_by, days ago, duration, outcome
    ("call", "Quarterly business review", "customer:1", "Priya Sharma", 2, 45, "positive"),
    ("email", "Sent renewal proposal", "customer:1", "Anita Rao", 5, None, None),
    ("meeting", "Migration scoping workshop", "customer:2", "Karan Patel", 20, 90, "follow-up"),
    ("call", "Upgrade requirements call", "customer:3", "Priya Sharma", 1, 30, "positive"),
    ("email", "Shared upgrade timeline", "customer:3", "Priya Sharma", 3, None, None),
    ("note", "Awaiting pricing approval", "customer:4", "Karan Patel", 75, None, None),
    ("call", "Attempted to reach account owner", "customer:6", "Karan Patel", 95, 5, "no answer"),
    ("meeting", "Proposal walkthrough", "deal:1", "Priya Sharma", 4, 60, "positive"),
    ("note", "Customer asked for SLA details", "ticket:1", "Support Desk", 1, None, None),
]

TEAM_MEMBERS = [
    # name, email, role, department, sales_target, deals_won, tickets_resolved, performance_score
    ("Priya Sharma", "priya@crm.example", "Account Executive", "Sales", 5000000, 18, 0, 88),
    ("Karan Patel", "karan@crm.example", "Account Executive", "Sales", 4000000, 12, 0, 76),
    ("Anita Rao", "anita@crm.example", "Customer Success Manager", "Customer Success", 1500000, 6, 42, 82),
    ("Vikram Singh", "vikram@crm.example", "Support Engineer", "Support", 0, 0, 128, 91),
]

REVENUE_METRICS = [
    ("Jan", 1800000, 10.2), ("Feb", 1950000, 8.5), ("Mar", 2100000, 7.8), ("Apr", 2250000, 7.2),
    ("May", 2400000, 6.7), ("Jun", 2550000, 6.3), ("Jul", 2325000, -8.8), ("Aug", 2450000, 5.4),
]

CATEGORY_SALES = [
    ("Software", 1800000, 40), ("Services", 1125000, 25), ("Hardware", 900000, 20), ("Support", 675000, 15),
]


def seed_storage(storage: Storage, now: Optional[datetime] = None) -> None:
    """
    Load the sample data set into a storage backend.

    Args:
        storage: Storage backend, expected to be empty
        now: Reference time for relative dates, defaults to the current time
    """
    now = now or datetime.now()
    today = now.date()

    for name, email, company, phone, status, spent, order_days in CUSTOMERS:
        storage.create_customer(CustomerCreate(
            name=name,
            email=email,
            company_name=company,
            phone=phone,
            status=status,
            total_spent=spent,
            last_order_date=today - timedelta(days=order_days) if order_days is not None else None,
        ))

    for name, description, category, price, icon, trend, stock, threshold, sales in PRODUCTS:
        storage.create_product(ProductCreate(
            name=name,
            description=description,
            category=category,
            price=price,
            icon=icon,
            trend=trend,
            stock_available=stock,
            stock_threshold=threshold,
            sales_count=sales,
        ))

    for customer_id, title, company, stage, value, probability, assignee in DEALS:
        storage.create_deal(DealCreate(
            customer_id=customer_id,
            title=title,
            company_name=company,
            stage=stage,
            value=value,
            probability=probability,
            assigned_to=assignee,
        ))

    for ticket_id, customer_id, title, description, status, priority, hours, satisfaction in TICKETS:
        created_at = now - timedelta(days=3)
        storage.create_ticket(TicketCreate(
            ticket_id=ticket_id,
            customer_id=customer_id,
            title=title,
            description=description,
            status=status,
            priority=priority,
            satisfaction=satisfaction,
            created_at=created_at,
            updated_at=created_at + timedelta(hours=hours),
        ))

    for activity_type, description, related_to, created_by, days_ago, duration, outcome in ACTIVITIES:
        storage.create_activity(ActivityLogCreate(
            activity_type=activity_type,
            description=description,
            related_to=related_to,
            created_by=created_by,
            duration=duration,
            outcome=outcome,
            created_at=now - timedelta(days=days_ago),
        ))

    for name, email, role, department, target, won, resolved, score in TEAM_MEMBERS:
        storage.create_team_member(TeamMemberCreate(
            name=name,
            email=email,
            role=role,
            department=department,
            sales_target=target,
            deals_won=won,
            tickets_resolved=resolved,
            performance_score=score,
        ))

    for index, (month, value, change) in enumerate(REVENUE_METRICS, start=1):
        storage.add_revenue_metric(RevenueMetric(id=index, month=month, year=2023, value=value, change=change))

    for index, (category, value, percentage) in enumerate(CATEGORY_SALES, start=1):
        storage.add_category_sale(CategorySale(id=index, category=category, value=value, percentage=percentage))

    logger.info(
        f"Seeded storage with {len(CUSTOMERS)} customers, {len(PRODUCTS)} products, "
        f"{len(DEALS)} deals and {len(TICKETS)} tickets"
    )
