import logging
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, InvalidRequestError, NotFoundError, ReferenceConflictError
from app.models import BillItem, InvoiceItem, Product, StockTransaction
from app.schemas.product import ProductCreate, ProductUpdate
from app.utils.text_cleaner import normalize_code, normalize_whitespace

logger = logging.getLogger(__name__)

# Columns that reject NULL; an explicit null for them in a PATCH body is dropped.
_REQUIRED_COLUMNS = {
    "name",
    "category",
    "sku",
    "weight",
    "purity",
    "making_charge",
    "current_rate",
    "stock_quantity",
    "min_stock_level",
    "status",
}


def _clean(values: dict) -> dict:
    for key in ("name", "category", "purity"):
        if values.get(key) is not None:
            values[key] = normalize_whitespace(values[key])
    for key in ("sku", "barcode"):
        if key in values:
            values[key] = normalize_code(values[key])
    if "sku" in values and values["sku"] is None:
        raise InvalidRequestError("sku must not be blank")
    return values


def _commit_or_conflict(db: Session, sku: Optional[str]) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if "sku" in str(exc.orig).lower():
            raise ConflictError(f"A product with SKU {sku} already exists") from exc
        raise


def list_products(
    db: Session,
    search: Optional[str] = None,
    category: Optional[str] = None,
    product_category: Optional[str] = None,
    status: Optional[str] = None,
) -> List[Product]:
    query = db.query(Product)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.sku).like(pattern),
                func.lower(Product.barcode).like(pattern),
            )
        )
    if category:
        query = query.filter(Product.category == category)
    if product_category:
        query = query.filter(Product.product_category == product_category)
    if status:
        query = query.filter(Product.status == status)
    return query.order_by(Product.created_at.desc(), Product.id.desc()).all()


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


def get_product_by_barcode(db: Session, barcode: str) -> Product:
    code = normalize_code(barcode)
    product = db.query(Product).filter(Product.barcode == code).order_by(Product.id).first() if code else None
    if not product:
        raise NotFoundError(f"No product with barcode {barcode}")
    return product


def create_product(db: Session, payload: ProductCreate) -> Product:
    values = _clean(payload.model_dump())
    product = Product(**values)
    db.add(product)
    _commit_or_conflict(db, values["sku"])
    db.refresh(product)
    logger.info("Created product %s (%s)", product.id, product.sku)
    return product


def update_product(db: Session, product_id: int, payload: ProductUpdate) -> Product:
    product = get_product(db, product_id)
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key not in _REQUIRED_COLUMNS
    }
    if not changes:
        raise InvalidRequestError("No fields to update")

    changes = _clean(changes)
    previous_stock = product.stock_quantity

    for key, value in changes.items():
        setattr(product, key, value)

    new_stock = changes.get("stock_quantity")
    if new_stock is not None and new_stock != previous_stock:
        db.add(
            StockTransaction(
                product_id=product.id,
                transaction_type="in" if new_stock > previous_stock else "out",
                quantity=abs(new_stock - previous_stock),
                previous_stock=previous_stock,
                new_stock=new_stock,
                reason="Stock edited on product",
                reference_id=product.id,
                reference_type="product_update",
            )
        )

    _commit_or_conflict(db, changes.get("sku", product.sku))
    db.refresh(product)
    return product


def delete_product(db: Session, product_id: int, cascade: bool = False) -> str:
    get_product(db, product_id)

    bill_refs = db.query(func.count(BillItem.id)).filter(BillItem.product_id == product_id).scalar()
    invoice_refs = db.query(func.count(InvoiceItem.id)).filter(InvoiceItem.product_id == product_id).scalar()
    stock_refs = (
        db.query(func.count(StockTransaction.id)).filter(StockTransaction.product_id == product_id).scalar()
    )

    if (bill_refs or invoice_refs) and not cascade:
        raise ReferenceConflictError(
            f"Cannot delete product. It is referenced in {bill_refs} bill(s) and {invoice_refs} invoice(s). "
            "Use cascade=true to force deletion.",
            references={"bills": bill_refs, "invoices": invoice_refs, "stock_transactions": stock_refs},
        )

    # Item and audit rows are nulled by ON DELETE SET NULL
    db.query(Product).filter(Product.id == product_id).delete(synchronize_session=False)
    db.commit()
    logger.info(
        "Deleted product %s (bill refs=%s, invoice refs=%s, stock refs=%s)",
        product_id,
        bill_refs,
        invoice_refs,
        stock_refs,
    )
    if bill_refs or invoice_refs:
        return (
            f"Product deleted successfully. {bill_refs} bill references and "
            f"{invoice_refs} invoice references were set to NULL."
        )
    return "Product deleted successfully"
