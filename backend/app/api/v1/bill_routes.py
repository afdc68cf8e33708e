from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.deps import get_db, get_settings
from app.models import Bill
from app.schemas.billing import (
    BillCreate,
    BillOut,
    BillSummaryOut,
    BillType,
    CalculationOut,
    CalculationRequest,
    PaymentUpdate,
)
from app.schemas.common import Envelope, MessageOut, PaymentStatus
from app.services.billing_service import (
    calculate,
    create_bill,
    delete_bill,
    get_document,
    list_documents,
    update_payment,
)

router = APIRouter()


@router.get(
    "",
    response_model=Envelope[List[BillSummaryOut]],
    summary="List bills, newest first",
)
def list_bills_api(
    search: Optional[str] = None,
    payment_status: Optional[PaymentStatus] = None,
    customer_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    bill_type: Optional[BillType] = None,
    db: Session = Depends(get_db),
):
    bills = list_documents(
        db,
        Bill,
        search=search,
        payment_status=payment_status,
        customer_id=customer_id,
        start_date=start_date,
        end_date=end_date,
        bill_type=bill_type,
    )
    return {"data": bills, "count": len(bills)}


@router.post(
    "/calculate",
    response_model=Envelope[CalculationOut],
    summary="Compute totals for a draft bill without saving it",
)
def calculate_api(payload: CalculationRequest):
    return {"data": calculate(payload)}


@router.get(
    "/{bill_id}",
    response_model=Envelope[BillOut],
    summary="Get a bill with its items",
)
def get_bill_api(bill_id: int, db: Session = Depends(get_db)):
    return {"data": get_document(db, Bill, bill_id)}


@router.post(
    "",
    response_model=Envelope[BillOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create a bill or exchange bill and deduct stock",
)
def create_bill_api(
    payload: BillCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    bill = create_bill(db, payload, settings)
    return {"data": bill, "message": "Bill created successfully"}


@router.patch(
    "/{bill_id}/payment",
    response_model=Envelope[BillOut],
    summary="Update payment status, amount paid or method",
)
def update_bill_payment_api(bill_id: int, payload: PaymentUpdate, db: Session = Depends(get_db)):
    bill = update_payment(db, Bill, bill_id, payload)
    return {"data": bill, "message": "Bill payment updated successfully"}


@router.delete(
    "/{bill_id}",
    response_model=MessageOut,
    summary="Delete a bill and its items",
)
def delete_bill_api(bill_id: int, db: Session = Depends(get_db)):
    delete_bill(db, bill_id)
    return {"message": "Bill deleted successfully"}
