import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Union

from sqlalchemy import case, func, not_, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.config import Settings
from app.core.errors import ConflictError, InsufficientStockError, InvalidRequestError, NotFoundError
from app.models import Bill, BillItem, Customer, Invoice, InvoiceItem, Product, StockTransaction
from app.schemas.billing import BillCreate, CalculationRequest, DocumentCreateBase, InvoiceCreate, PaymentUpdate
from app.utils import billing_math
from app.utils.numbering import document_number

logger = logging.getLogger(__name__)

Document = Union[Bill, Invoice]


@dataclass(frozen=True)
class DocumentKind:
    """Where a kind of sales document lives and how it touches stock."""

    label: str
    model: type
    item_model: type
    number_column: str
    parent_column: str
    prefix: str
    stock_reason: str
    reference_type: str


BILL = DocumentKind("Bill", Bill, BillItem, "bill_number", "bill_id", "BILL", "Sale", "bill")
EXCHANGE = DocumentKind("Exchange bill", Bill, BillItem, "bill_number", "bill_id", "EXCH", "Exchange sale", "bill")
INVOICE = DocumentKind("Invoice", Invoice, InvoiceItem, "invoice_number", "invoice_id", "INV", "Sale", "invoice")

_HEADER_TOTALS = ("subtotal", "discount_amount", "tax_amount", "total_amount")


# ---------- totals ----------

def _item_totals(payload: DocumentCreateBase) -> List[Decimal]:
    return [
        item.total
        if item.total is not None
        else billing_math.line_total(item.weight, item.rate, item.making_charge, item.wastage_charge, item.quantity)
        for item in payload.items
    ]


def _verify_totals(kind: DocumentKind, payload: DocumentCreateBase, settings: Settings) -> Dict[str, Decimal]:
    expected = billing_math.document_totals(
        [
            billing_math.line_total(i.weight, i.rate, i.making_charge, i.wastage_charge, i.quantity)
            for i in payload.items
        ],
        payload.discount_percentage,
        payload.tax_percentage,
    )
    if settings.TOTALS_POLICY == "trust":
        return expected

    supplied = {field: getattr(payload, field) for field in _HEADER_TOTALS if field in payload.model_fields_set}
    if kind is EXCHANGE:
        # payable on an exchange is net of the old material
        supplied.pop("total_amount", None)
    mismatched = billing_math.totals_mismatch(supplied, expected, settings.TOTALS_TOLERANCE)
    for index, item in enumerate(payload.items):
        if item.total is None:
            continue
        line = billing_math.line_total(item.weight, item.rate, item.making_charge, item.wastage_charge, item.quantity)
        if billing_math.totals_mismatch({"total": item.total}, {"total": line}, settings.TOTALS_TOLERANCE):
            mismatched.append(f"items[{index}].total")

    if mismatched:
        if settings.TOTALS_POLICY == "enforce":
            raise InvalidRequestError(f"Totals do not match the items: {', '.join(mismatched)}")
        logger.warning(
            "%s totals differ from recomputed values (%s); expected %s",
            kind.label,
            ", ".join(mismatched),
            {k: str(v) for k, v in expected.items()},
        )
    return expected


def calculate(payload: CalculationRequest) -> dict:
    item_totals = [
        billing_math.line_total(i.weight, i.rate, i.making_charge, i.wastage_charge, i.quantity)
        for i in payload.items
    ]
    result = billing_math.document_totals(item_totals, payload.discount_percentage, payload.tax_percentage)
    result["item_totals"] = item_totals
    if payload.old_gold_weight is not None and payload.old_gold_rate is not None:
        result.update(billing_math.exchange_totals(payload.old_gold_weight, payload.old_gold_rate, result["subtotal"]))
    return result


# ---------- writes ----------

def _allocate_number(db: Session, kind: DocumentKind, bump: int = 0) -> str:
    column = getattr(kind.model, kind.number_column)
    now = datetime.now(timezone.utc)
    candidate = document_number(kind.prefix, now, bump)
    while db.query(kind.model.id).filter(column == candidate).first() is not None:
        bump += 1
        candidate = document_number(kind.prefix, now, bump)
    return candidate


def _deduct_stock(
    db: Session,
    kind: DocumentKind,
    product: Product,
    quantity: int,
    document_id: int,
    enforce: bool,
) -> None:
    stock = Product.stock_quantity
    stmt = update(Product).where(Product.id == product.id)
    if enforce:
        stmt = stmt.where(stock >= quantity).values(stock_quantity=stock - quantity)
        previous = None
    else:
        previous = db.query(stock).filter(Product.id == product.id).scalar()
        stmt = stmt.values(stock_quantity=case((stock >= quantity, stock - quantity), else_=0))

    result = db.execute(stmt.values(updated_at=func.now()).execution_options(synchronize_session=False))
    if result.rowcount == 0:
        available = db.query(stock).filter(Product.id == product.id).scalar()
        raise InsufficientStockError(product.id, product.name, available or 0, quantity)

    new_stock = db.query(stock).filter(Product.id == product.id).scalar()
    db.add(
        StockTransaction(
            product_id=product.id,
            transaction_type="out",
            quantity=quantity,
            previous_stock=new_stock + quantity if previous is None else previous,
            new_stock=new_stock,
            reason=kind.stock_reason,
            reference_id=document_id,
            reference_type=kind.reference_type,
        )
    )


def _header_values(kind: DocumentKind, payload: DocumentCreateBase, expected: Dict[str, Decimal]) -> dict:
    values = payload.model_dump(exclude={"items"})
    if values.get("subtotal") is None:
        values["subtotal"] = expected["subtotal"]
    if kind is EXCHANGE:
        old_value = values.get("old_gold_value")
        if old_value is None:
            old_value = billing_math.money(Decimal(values["old_gold_weight"]) * Decimal(values["old_gold_rate"]))
            values["old_gold_value"] = old_value
        if values.get("exchange_difference") is None:
            values["exchange_difference"] = billing_math.money(Decimal(values["subtotal"]) - Decimal(old_value))
    return values


def _write_document(
    db: Session,
    kind: DocumentKind,
    payload: DocumentCreateBase,
    number: str,
    expected: Dict[str, Decimal],
    enforce_stock: bool,
) -> int:
    header = kind.model(**_header_values(kind, payload, expected), **{kind.number_column: number})
    db.add(header)
    db.flush()

    for item, total in zip(payload.items, _item_totals(payload)):
        product = None
        if item.product_id is not None:
            product = db.get(Product, item.product_id)
            if product is None:
                raise InvalidRequestError(f"Product {item.product_id} not found")

        db.add(
            kind.item_model(
                **{kind.parent_column: header.id},
                product_id=item.product_id,
                product_name=item.product_name,
                weight=item.weight,
                rate=item.rate,
                making_charge=item.making_charge,
                wastage_charge=item.wastage_charge,
                quantity=item.quantity,
                total=total,
            )
        )
        if product is not None:
            _deduct_stock(db, kind, product, item.quantity, header.id, enforce_stock)

    db.flush()
    return header.id


def create_document(db: Session, kind: DocumentKind, payload: DocumentCreateBase, settings: Settings) -> Document:
    """
    Insert a bill or invoice with its items, deduct stock and write one audit
    row per stocked item, all in one transaction. Any failure rolls the whole
    document back.
    """
    expected = _verify_totals(kind, payload, settings)

    if payload.customer_id is not None and db.get(Customer, payload.customer_id) is None:
        raise InvalidRequestError(f"Customer {payload.customer_id} not found")

    number_column = f"{kind.model.__tablename__}.{kind.number_column}"
    for attempt in range(settings.NUMBER_RETRIES):
        number = _allocate_number(db, kind, bump=attempt)
        try:
            document_id = _write_document(db, kind, payload, number, expected, settings.ENFORCE_STOCK_CHECK)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            if number_column not in str(exc.orig):
                raise
            logger.warning("%s number %s already taken, retrying (%s)", kind.label, number, attempt + 1)
            continue
        except Exception:
            db.rollback()
            raise

        logger.info("%s %s created with %s item(s)", kind.label, number, len(payload.items))
        return get_document(db, kind.model, document_id)

    raise ConflictError(f"Could not allocate a unique {kind.label.lower()} number, please retry")


def create_bill(db: Session, payload: BillCreate, settings: Settings) -> Bill:
    kind = EXCHANGE if payload.bill_type == "exchange" else BILL
    return create_document(db, kind, payload, settings)


def create_invoice(db: Session, payload: InvoiceCreate, settings: Settings) -> Invoice:
    return create_document(db, INVOICE, payload, settings)


# ---------- reads ----------

def is_exchange_bill():
    return or_(Bill.bill_type == "exchange", Bill.bill_number.like("EXCH-%"))


def _label(model: type) -> str:
    return "Bill" if model is Bill else "Invoice"


def get_document(db: Session, model: type, document_id: int) -> Document:
    document = (
        db.query(model)
        .options(selectinload(model.items))
        .populate_existing()
        .filter(model.id == document_id)
        .first()
    )
    if not document:
        raise NotFoundError(f"{_label(model)} not found")
    return document


def list_documents(
    db: Session,
    model: type,
    search: Optional[str] = None,
    payment_status: Optional[str] = None,
    customer_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    bill_type: Optional[str] = None,
) -> List[Document]:
    number = model.bill_number if model is Bill else model.invoice_number
    query = db.query(model)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(number).like(pattern),
                func.lower(model.customer_name).like(pattern),
                model.customer_phone.like(pattern),
            )
        )
    if payment_status:
        query = query.filter(model.payment_status == payment_status)
    if customer_id is not None:
        query = query.filter(model.customer_id == customer_id)
    # whole days; the stored text form of midnight sorts before a bound with microseconds
    if start_date:
        query = query.filter(func.date(model.created_at) >= start_date.isoformat())
    if end_date:
        query = query.filter(func.date(model.created_at) <= end_date.isoformat())
    if model is Bill and bill_type:
        is_exchange = is_exchange_bill()
        query = query.filter(is_exchange if bill_type == "exchange" else not_(is_exchange))
    return query.order_by(model.created_at.desc(), model.id.desc()).all()


# ---------- updates ----------

def update_payment(db: Session, model: type, document_id: int, payload: PaymentUpdate) -> Document:
    document = db.get(model, document_id)
    if not document:
        raise NotFoundError(f"{_label(model)} not found")

    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise InvalidRequestError("No fields to update")
    for key, value in changes.items():
        setattr(document, key, value)
    db.commit()
    logger.info("%s %s payment updated: %s", _label(model), document_id, sorted(changes))
    return get_document(db, model, document_id)


def delete_bill(db: Session, bill_id: int) -> None:
    bill = db.get(Bill, bill_id)
    if not bill:
        raise NotFoundError("Bill not found")
    # Items go with the bill; sold stock is not returned
    db.delete(bill)
    db.commit()
    logger.info("Deleted bill %s (%s)", bill_id, bill.bill_number)
