from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.deps import get_db
from app.schemas.common import Envelope
from app.schemas.inventory import (
    AdjustmentOut,
    InventoryOverview,
    StockAdjustment,
    StockTransactionOut,
    TransactionType,
)
from app.schemas.product import ProductOut
from app.services.inventory_service import (
    DEFAULT_TRANSACTION_LIMIT,
    adjust_stock,
    inventory_overview,
    list_transactions,
    low_stock_products,
)

router = APIRouter()


@router.get(
    "",
    response_model=Envelope[InventoryOverview],
    summary="Stock summary and per-product stock status",
)
@router.get(
    "/overview",
    response_model=Envelope[InventoryOverview],
    summary="Stock summary and per-product stock status",
)
def inventory_overview_api(db: Session = Depends(get_db)):
    return {"data": inventory_overview(db)}


@router.get(
    "/low-stock",
    response_model=Envelope[List[ProductOut]],
    summary="Active products at or below their minimum stock level",
)
def low_stock_api(db: Session = Depends(get_db)):
    products = low_stock_products(db)
    return {"data": products, "count": len(products)}


@router.get(
    "/transactions",
    response_model=Envelope[List[StockTransactionOut]],
    summary="Stock movements, newest first",
)
def transactions_api(
    product_id: Optional[int] = None,
    transaction_type: Optional[TransactionType] = None,
    reference_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = Query(default=DEFAULT_TRANSACTION_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    rows = list_transactions(
        db,
        product_id=product_id,
        transaction_type=transaction_type,
        reference_type=reference_type,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )
    return {"data": rows, "count": len(rows)}


@router.post(
    "/adjust",
    response_model=Envelope[AdjustmentOut],
    summary="Manually add or remove stock",
)
def adjust_stock_api(payload: StockAdjustment, db: Session = Depends(get_db)):
    result = adjust_stock(db, payload)
    return {"data": result, "message": "Stock adjusted successfully"}
