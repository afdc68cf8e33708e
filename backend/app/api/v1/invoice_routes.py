from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.deps import get_db, get_settings
from app.models import Invoice
from app.schemas.billing import InvoiceCreate, InvoiceOut, InvoiceSummaryOut, PaymentUpdate
from app.schemas.common import Envelope, PaymentStatus
from app.services.billing_service import create_invoice, get_document, list_documents, update_payment

router = APIRouter()


@router.get(
    "",
    response_model=Envelope[List[InvoiceSummaryOut]],
    summary="List invoices, newest first",
)
def list_invoices_api(
    search: Optional[str] = None,
    payment_status: Optional[PaymentStatus] = None,
    customer_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    invoices = list_documents(
        db,
        Invoice,
        search=search,
        payment_status=payment_status,
        customer_id=customer_id,
        start_date=start_date,
        end_date=end_date,
    )
    return {"data": invoices, "count": len(invoices)}


@router.get(
    "/{invoice_id}",
    response_model=Envelope[InvoiceOut],
    summary="Get an invoice with its items",
)
def get_invoice_api(invoice_id: int, db: Session = Depends(get_db)):
    return {"data": get_document(db, Invoice, invoice_id)}


@router.post(
    "",
    response_model=Envelope[InvoiceOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create an invoice and deduct stock",
)
def create_invoice_api(
    payload: InvoiceCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    invoice = create_invoice(db, payload, settings)
    return {"data": invoice, "message": "Invoice created successfully"}


@router.patch(
    "/{invoice_id}/payment",
    response_model=Envelope[InvoiceOut],
    summary="Update payment status, amount paid or method",
)
def update_invoice_payment_api(invoice_id: int, payload: PaymentUpdate, db: Session = Depends(get_db)):
    invoice = update_payment(db, Invoice, invoice_id, payload)
    return {"data": invoice, "message": "Payment status updated successfully"}
