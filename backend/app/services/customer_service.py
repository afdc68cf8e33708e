import logging
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.core.errors import InvalidRequestError, NotFoundError, ReferenceConflictError
from app.models import Bill, Customer, Invoice
from app.schemas.customer import CustomerCreate, CustomerUpdate
from app.utils.text_cleaner import normalize_whitespace

logger = logging.getLogger(__name__)

_REQUIRED_COLUMNS = {"name", "phone", "customer_type", "status"}


def list_customers(
    db: Session,
    search: Optional[str] = None,
    customer_type: Optional[str] = None,
    status: Optional[str] = None,
) -> List[Customer]:
    query = db.query(Customer)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Customer.name).like(pattern),
                Customer.phone.like(pattern),
                func.lower(Customer.email).like(pattern),
            )
        )
    if customer_type:
        query = query.filter(Customer.customer_type == customer_type)
    if status:
        query = query.filter(Customer.status == status)
    return query.order_by(Customer.created_at.desc(), Customer.id.desc()).all()


def get_customer(db: Session, customer_id: int) -> Customer:
    customer = db.get(Customer, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


def create_customer(db: Session, payload: CustomerCreate) -> Customer:
    values = payload.model_dump()
    values["name"] = normalize_whitespace(values["name"])
    values["phone"] = values["phone"].strip()
    customer = Customer(**values)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    logger.info("Created customer %s", customer.id)
    return customer


def update_customer(db: Session, customer_id: int, payload: CustomerUpdate) -> Customer:
    customer = get_customer(db, customer_id)
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key not in _REQUIRED_COLUMNS
    }
    if not changes:
        raise InvalidRequestError("No fields to update")

    if changes.get("name"):
        changes["name"] = normalize_whitespace(changes["name"])
    for key, value in changes.items():
        setattr(customer, key, value)
    db.commit()
    db.refresh(customer)
    return customer


def delete_customer(db: Session, customer_id: int) -> str:
    get_customer(db, customer_id)

    invoice_count = db.query(func.count(Invoice.id)).filter(Invoice.customer_id == customer_id).scalar()
    if invoice_count:
        raise ReferenceConflictError(
            f"Cannot delete customer. This customer has {invoice_count} invoice(s) associated. "
            "Please delete or reassign the invoices first."
        )

    bill_count = db.query(func.count(Bill.id)).filter(Bill.customer_id == customer_id).scalar()

    # Bills keep their customer snapshot; customer_id is nulled by ON DELETE SET NULL
    db.query(Customer).filter(Customer.id == customer_id).delete(synchronize_session=False)
    db.commit()
    logger.info("Deleted customer %s (%s bill(s) detached)", customer_id, bill_count)

    if bill_count:
        return f"Customer deleted successfully. {bill_count} bill(s) associated with this customer have been updated."
    return "Customer deleted successfully"
