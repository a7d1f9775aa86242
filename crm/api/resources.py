"""
CRUD Routes
===========

REST endpoints for customers, products, deals, tickets, team members
and activity logs.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from loguru import logger

from crm.models import (
    ActivityLog,
    ActivityLogCreate,
    Customer,
    CustomerCreate,
    Deal,
    DealCreate,
    EntityRef,
    Product,
    ProductCreate,
    TeamMember,
    TeamMemberCreate,
    Ticket,
    TicketCreate,
)
from crm.storage import Storage
from .dependencies import get_storage
from .schemas import CustomerUpdate, DealUpdate, ProductUpdate, TeamMemberUpdate, TicketUpdate

router = APIRouter(prefix="/api")


def _found(record, entity: str):
    """Raise a 404 for a missing record."""
    if record is None:
        raise HTTPException(status_code=404, detail=f"{entity} not found")
    return record


# Customers

@router.get("/customers", response_model=List[Customer], tags=["Customers"])
async def list_customers(storage: Storage = Depends(get_storage)):
    """List all customers."""
    return storage.list_customers()


@router.get("/customers/{customer_id}", response_model=Customer, tags=["Customers"])
async def get_customer(customer_id: int, storage: Storage = Depends(get_storage)):
    """Get a customer by ID."""
    return _found(storage.get_customer(customer_id), "Customer")


@router.post("/customers", response_model=Customer, status_code=201, tags=["Customers"])
async def create_customer(customer: CustomerCreate, storage: Storage = Depends(get_storage)):
    """Create a customer."""
    created = storage.create_customer(customer)
    logger.info(f"Created customer {created.id}")
    return created


@router.put("/customers/{customer_id}", response_model=Customer, tags=["Customers"])
async def update_customer(customer_id: int, changes: CustomerUpdate, storage: Storage = Depends(get_storage)):
    """Update some fields of a customer."""
    return _found(storage.update_customer(customer_id, changes.model_dump(exclude_unset=True)), "Customer")


@router.delete("/customers/{customer_id}", status_code=204, response_class=Response, tags=["Customers"])
async def delete_customer(customer_id: int, storage: Storage = Depends(get_storage)):
    """Delete a customer."""
    if not storage.delete_customer(customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    return Response(status_code=204)


# Products

@router.get("/products", response_model=List[Product], tags=["Products"])
async def list_products(storage: Storage = Depends(get_storage)):
    """List all products."""
    return storage.list_products()


@router.get("/products/{product_id}", response_model=Product, tags=["Products"])
async def get_product(product_id: int, storage: Storage = Depends(get_storage)):
    """Get a product by ID."""
    return _found(storage.get_product(product_id), "Product")


@router.post("/products", response_model=Product, status_code=201, tags=["Products"])
async def create_product(product: ProductCreate, storage: Storage = Depends(get_storage)):
    """Create a product."""
    return storage.create_product(product)


@router.put("/products/{product_id}", response_model=Product, tags=["Products"])
async def update_product(product_id: int, changes: ProductUpdate, storage: Storage = Depends(get_storage)):
    """Update some fields of a product."""
    return _found(storage.update_product(product_id, changes.model_dump(exclude_unset=True)), "Product")


@router.delete("/products/{product_id}", status_code=204, response_class=Response, tags=["Products"])
async def delete_product(product_id: int, storage: Storage = Depends(get_storage)):
    """Delete a product."""
    if not storage.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return Response(status_code=204)


# Deals

@router.get("/deals", response_model=List[Deal], tags=["Deals"])
async def list_deals(storage: Storage = Depends(get_storage)):
    """List all deals."""
    return storage.list_deals()


@router.get("/deals/{deal_id}", response_model=Deal, tags=["Deals"])
async def get_deal(deal_id: int, storage: Storage = Depends(get_storage)):
    """Get a deal by ID."""
    return _found(storage.get_deal(deal_id), "Deal")


@router.post("/deals", response_model=Deal, status_code=201, tags=["Deals"])
async def create_deal(deal: DealCreate, storage: Storage = Depends(get_storage)):
    """Create a deal."""
    created = storage.create_deal(deal)
    logger.info(f"Created deal {created.id} for customer {created.customer_id}")
    return created


@router.put("/deals/{deal_id}", response_model=Deal, tags=["Deals"])
async def update_deal(deal_id: int, changes: DealUpdate, storage: Storage = Depends(get_storage)):
    """Update some fields of a deal."""
    return _found(storage.update_deal(deal_id, changes.model_dump(exclude_unset=True)), "Deal")


@router.delete("/deals/{deal_id}", status_code=204, response_class=Response, tags=["Deals"])
async def delete_deal(deal_id: int, storage: Storage = Depends(get_storage)):
    """Delete a deal."""
    if not storage.delete_deal(deal_id):
        raise HTTPException(status_code=404, detail="Deal not found")
    return Response(status_code=204)


# Tickets

@router.get("/tickets", response_model=List[Ticket], tags=["Tickets"])
async def list_tickets(storage: Storage = Depends(get_storage)):
    """List all support tickets."""
    return storage.list_tickets()


@router.get("/tickets/{ticket_id}", response_model=Ticket, tags=["Tickets"])
async def get_ticket(ticket_id: int, storage: Storage = Depends(get_storage)):
    """Get a ticket by ID."""
    return _found(storage.get_ticket(ticket_id), "Ticket")


@router.post("/tickets", response_model=Ticket, status_code=201, tags=["Tickets"])
async def create_ticket(ticket: TicketCreate, storage: Storage = Depends(get_storage)):
    """Create a support ticket."""
    created = storage.create_ticket(ticket)
    logger.info(f"Created ticket {created.ticket_id} for customer {created.customer_id}")
    return created


@router.put("/tickets/{ticket_id}", response_model=Ticket, tags=["Tickets"])
async def update_ticket(ticket_id: int, changes: TicketUpdate, storage: Storage = Depends(get_storage)):
    """Update some fields of a ticket."""
    return _found(storage.update_ticket(ticket_id, changes.model_dump(exclude_unset=True)), "Ticket")


@router.delete("/tickets/{ticket_id}", status_code=204, response_class=Response, tags=["Tickets"])
async def delete_ticket(ticket_id: int, storage: Storage = Depends(get_storage)):
    """Delete a ticket."""
    if not storage.delete_ticket(ticket_id):
        raise HTTPException(status_code=404, detail="Ticket not found")
    return Response(status_code=204)


# Team members

@router.get("/team-members", response_model=List[TeamMember], tags=["Team"])
async def list_team_members(storage: Storage = Depends(get_storage)):
    """List all team members."""
    return storage.list_team_members()


@router.get("/team-members/{member_id}", response_model=TeamMember, tags=["Team"])
async def get_team_member(member_id: int, storage: Storage = Depends(get_storage)):
    """Get a team member by ID."""
    return _found(storage.get_team_member(member_id), "Team member")


@router.post("/team-members", response_model=TeamMember, status_code=201, tags=["Team"])
async def create_team_member(member: TeamMemberCreate, storage: Storage = Depends(get_storage)):
    """Create a team member."""
    return storage.create_team_member(member)


@router.put("/team-members/{member_id}", response_model=TeamMember, tags=["Team"])
async def update_team_member(member_id: int, changes: TeamMemberUpdate, storage: Storage = Depends(get_storage)):
    """Update some fields of a team member."""
    return _found(storage.update_team_member(member_id, changes.model_dump(exclude_unset=True)), "Team member")


# Activity logs

@router.get("/activities", response_model=List[ActivityLog], tags=["Activities"])
async def list_activities(
    related_to: Optional[str] = Query(None, description="Filter by related record, e.g. 'customer:42'"),
    storage: Storage = Depends(get_storage)
):
    """
    List activity logs.

    Args:
        related_to: Optional related-record filter
        storage: Storage backend

    Returns:
        Matching activity logs
    """
    if related_to is None:
        return storage.list_activities()

    try:
        ref = EntityRef.parse(related_to)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return storage.list_activities_by_relation(ref.kind, ref.id)


@router.post("/activities", response_model=ActivityLog, status_code=201, tags=["Activities"])
async def create_activity(activity: ActivityLogCreate, storage: Storage = Depends(get_storage)):
    """Record an interaction."""
    return storage.create_activity(activity)
