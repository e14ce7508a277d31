"""
Customer Routes

GET /customers - List customers with filters
POST /customers - Create customer
GET /customers/{customer_id} - Get customer with its projects
PUT /customers/{customer_id} - Update customer
DELETE /customers/{customer_id} - Delete customer (admin)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from sqlalchemy import desc, or_, select
from sqlalchemy.orm import Session, selectinload

from staffing_crm.api.deps import PageParams, apply_changes, get_or_404
from staffing_crm.core.auth import require_permission
from staffing_crm.core.permissions import CUSTOMERS_DELETE, CUSTOMERS_READ, CUSTOMERS_WRITE
from staffing_crm.db.database import get_db
from staffing_crm.models import ActivityAction, Customer, User
from staffing_crm.schemas.schemas import (
    CustomerCreate,
    CustomerDetailResponse,
    CustomerEdit,
    CustomerListResponse,
    CustomerResponse,
    MessageResponse,
)
from staffing_crm.services.activity_service import create_diff, entity_snapshot, log_activity
from staffing_crm.utils.pagination import page_meta, paginate

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("", response_model=CustomerListResponse)
def list_customers(
    search: Optional[str] = Query(None, description="Search in name and description"),
    industry: Optional[str] = Query(None),
    owner_user_id: Optional[str] = Query(None),
    paging: PageParams = Depends(),
    user: User = Depends(require_permission(CUSTOMERS_READ)),
    db: Session = Depends(get_db),
):
    stmt = select(Customer).options(selectinload(Customer.owner))
    if search:
        stmt = stmt.where(or_(Customer.name.icontains(search, autoescape=True),
                              Customer.description.icontains(search, autoescape=True)))
    if industry:
        stmt = stmt.where(Customer.industry == industry)
    if owner_user_id:
        stmt = stmt.where(Customer.owner_user_id == owner_user_id)

    customers, total = paginate(db, stmt.order_by(desc(Customer.updated_at)), paging.page, paging.page_size)
    return CustomerListResponse(customers=customers, **page_meta(total, paging.page, paging.page_size))


@router.post("", response_model=CustomerResponse, status_code=201)
def create_customer(
    data: CustomerCreate,
    user: User = Depends(require_permission(CUSTOMERS_WRITE)),
    db: Session = Depends(get_db),
):
    """Create a customer. The owner defaults to the current user."""
    customer = Customer(
        name=data.name,
        industry=data.industry,
        website=data.website,
        description=data.description,
        contacts=jsonable_encoder(data.contacts),
        notes=data.notes,
        tags=data.tags,
        owner_user_id=data.owner_user_id or user.id,
    )
    db.add(customer)
    db.commit()

    log_activity(db, "Customer", customer.id, ActivityAction.CREATED, user.id)
    return customer


@router.get("/{customer_id}", response_model=CustomerDetailResponse)
def get_customer(
    customer_id: str,
    user: User = Depends(require_permission(CUSTOMERS_READ)),
    db: Session = Depends(get_db),
):
    return get_or_404(db, Customer, customer_id, "Customer")


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: str,
    data: CustomerEdit,
    user: User = Depends(require_permission(CUSTOMERS_WRITE)),
    db: Session = Depends(get_db),
):
    customer = get_or_404(db, Customer, customer_id, "Customer")

    before = entity_snapshot(customer)
    applied = apply_changes(customer, data.model_dump(exclude_unset=True))
    after = entity_snapshot(customer)
    db.commit()

    diff = create_diff(before, {key: after[key] for key in applied})
    log_activity(db, "Customer", customer.id, ActivityAction.UPDATED, user.id, diff)
    return customer


@router.delete("/{customer_id}", response_model=MessageResponse)
def delete_customer(
    customer_id: str,
    user: User = Depends(require_permission(CUSTOMERS_DELETE)),
    db: Session = Depends(get_db),
):
    """Delete a customer together with its projects."""
    customer = get_or_404(db, Customer, customer_id, "Customer")
    db.delete(customer)
    db.commit()

    log_activity(db, "Customer", customer_id, ActivityAction.DELETED, user.id)
    return MessageResponse(message="Customer deleted successfully")
