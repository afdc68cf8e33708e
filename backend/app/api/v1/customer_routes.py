from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.deps import get_db
from app.schemas.common import Envelope, MessageOut, RecordStatus
from app.schemas.customer import CustomerCreate, CustomerOut, CustomerType, CustomerUpdate
from app.services.customer_service import (
    create_customer,
    delete_customer,
    get_customer,
    list_customers,
    update_customer,
)

router = APIRouter()


@router.get(
    "",
    response_model=Envelope[List[CustomerOut]],
    summary="List customers, newest first",
)
def list_customers_api(
    search: Optional[str] = Query(default=None, description="Matches name, phone or email"),
    customer_type: Optional[CustomerType] = None,
    record_status: Optional[RecordStatus] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
):
    customers = list_customers(db, search=search, customer_type=customer_type, status=record_status)
    return {"data": customers, "count": len(customers)}


@router.get(
    "/{customer_id}",
    response_model=Envelope[CustomerOut],
    summary="Get a customer",
)
def get_customer_api(customer_id: int, db: Session = Depends(get_db)):
    return {"data": get_customer(db, customer_id)}


@router.post(
    "",
    response_model=Envelope[CustomerOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create a customer",
)
def create_customer_api(payload: CustomerCreate, db: Session = Depends(get_db)):
    return {"data": create_customer(db, payload), "message": "Customer created successfully"}


@router.put(
    "/{customer_id}",
    response_model=Envelope[CustomerOut],
    summary="Update a customer",
)
@router.patch(
    "/{customer_id}",
    response_model=Envelope[CustomerOut],
    summary="Partially update a customer",
)
def update_customer_api(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)):
    return {"data": update_customer(db, customer_id, payload), "message": "Customer updated successfully"}


@router.delete(
    "/{customer_id}",
    response_model=MessageOut,
    summary="Delete a customer without invoices",
)
def delete_customer_api(customer_id: int, db: Session = Depends(get_db)):
    return {"message": delete_customer(db, customer_id)}
