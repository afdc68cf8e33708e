import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.core.errors import InsufficientStockError, NotFoundError
from app.models import Product, StockTransaction
from app.schemas.inventory import StockAdjustment
from app.schemas.product import ProductOut
from app.utils.billing_math import money

logger = logging.getLogger(__name__)

DEFAULT_TRANSACTION_LIMIT = 100


def stock_status(product: Product) -> str:
    if product.stock_quantity <= 0:
        return "out_of_stock"
    if product.stock_quantity <= product.min_stock_level:
        return "low_stock"
    return "in_stock"


def stock_value(product: Product) -> Decimal:
    return money(Decimal(product.weight or 0) * Decimal(product.current_rate or 0) * product.stock_quantity)


def _with_stock_fields(product: Product) -> Dict[str, Any]:
    row = ProductOut.model_validate(product).model_dump()
    row["stock_status"] = stock_status(product)
    row["stock_value"] = stock_value(product)
    return row


def inventory_overview(db: Session) -> Dict[str, Any]:
    products = db.query(Product).order_by(Product.name, Product.id).all()
    rows = [_with_stock_fields(p) for p in products]

    summary = {
        "total_products": len(products),
        "active_products": sum(1 for p in products if p.status == "active"),
        "total_units": sum(p.stock_quantity for p in products),
        "stock_value": money(sum((r["stock_value"] for r in rows), Decimal("0"))),
        "low_stock_count": sum(1 for r in rows if r["stock_status"] == "low_stock"),
        "out_of_stock_count": sum(1 for r in rows if r["stock_status"] == "out_of_stock"),
    }
    return {"summary": summary, "products": rows}


def low_stock_products(db: Session, limit: Optional[int] = None) -> List[Product]:
    query = (
        db.query(Product)
        .filter(Product.status == "active", Product.stock_quantity <= Product.min_stock_level)
        .order_by(Product.stock_quantity.asc(), Product.name)
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def list_transactions(
    db: Session,
    product_id: Optional[int] = None,
    transaction_type: Optional[str] = None,
    reference_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = DEFAULT_TRANSACTION_LIMIT,
) -> List[StockTransaction]:
    query = db.query(StockTransaction)
    if product_id is not None:
        query = query.filter(StockTransaction.product_id == product_id)
    if transaction_type:
        query = query.filter(StockTransaction.transaction_type == transaction_type)
    if reference_type:
        query = query.filter(StockTransaction.reference_type == reference_type)
    if start_date:
        query = query.filter(func.date(StockTransaction.created_at) >= start_date.isoformat())
    if end_date:
        query = query.filter(func.date(StockTransaction.created_at) <= end_date.isoformat())
    return (
        query.order_by(StockTransaction.created_at.desc(), StockTransaction.id.desc())
        .limit(limit)
        .all()
    )


def adjust_stock(db: Session, payload: StockAdjustment) -> Dict[str, Any]:
    """Manual stock movement; stock never goes below zero."""
    product = db.get(Product, payload.product_id)
    if not product:
        raise NotFoundError("Product not found")

    stock = Product.stock_quantity
    stmt = update(Product).where(Product.id == product.id)
    if payload.transaction_type == "out":
        stmt = stmt.where(stock >= payload.quantity).values(stock_quantity=stock - payload.quantity)
    else:
        stmt = stmt.values(stock_quantity=stock + payload.quantity)

    try:
        result = db.execute(stmt.values(updated_at=func.now()).execution_options(synchronize_session=False))
        if result.rowcount == 0:
            available = db.query(stock).filter(Product.id == product.id).scalar()
            raise InsufficientStockError(product.id, product.name, available or 0, payload.quantity)

        new_stock = db.query(stock).filter(Product.id == product.id).scalar()
        delta = payload.quantity if payload.transaction_type == "in" else -payload.quantity
        transaction = StockTransaction(
            product_id=product.id,
            transaction_type=payload.transaction_type,
            quantity=payload.quantity,
            previous_stock=new_stock - delta,
            new_stock=new_stock,
            reason=payload.reason or "Manual adjustment",
            reference_type="adjustment",
        )
        db.add(transaction)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(product)
    db.refresh(transaction)
    logger.info(
        "Stock %s %s for product %s: %s -> %s",
        payload.transaction_type,
        payload.quantity,
        product.id,
        transaction.previous_stock,
        transaction.new_stock,
    )
    return {"product": product, "transaction": transaction}
