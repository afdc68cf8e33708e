from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import Money
from app.schemas.product import ProductOut

StockStatus = Literal["in_stock", "low_stock", "out_of_stock"]
TransactionType = Literal["in", "out"]


class StockTransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[int] = None
    transaction_type: TransactionType
    quantity: int
    previous_stock: int
    new_stock: int
    reason: Optional[str] = None
    reference_id: Optional[int] = None
    reference_type: Optional[str] = None
    created_at: Optional[datetime] = None


class StockAdjustment(BaseModel):
    product_id: int
    transaction_type: TransactionType
    quantity: int = Field(..., gt=0)
    reason: Optional[str] = Field(default=None, examples=["New stock received"])


class InventoryItemOut(ProductOut):
    stock_status: StockStatus
    stock_value: Money


class InventorySummary(BaseModel):
    total_products: int
    active_products: int
    total_units: int
    stock_value: Money
    low_stock_count: int
    out_of_stock_count: int


class InventoryOverview(BaseModel):
    summary: InventorySummary
    products: List[InventoryItemOut]


class AdjustmentOut(BaseModel):
    product: ProductOut
    transaction: StockTransactionOut
