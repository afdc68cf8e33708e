from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import Money, RecordStatus

ProductCategory = Literal["Men", "Women", "Kids"]


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, examples=["Gold Chain 22K"])
    category: str = Field(..., min_length=1, examples=["Chains"])
    product_category: Optional[ProductCategory] = None
    sku: str = Field(..., min_length=1, examples=["GC001"])
    barcode: Optional[str] = Field(default=None, examples=["1234567890123"])
    weight: Money = Field(..., gt=0, description="Grams")
    purity: str = Field(..., min_length=1, examples=["22K"])
    making_charge: Money = Field(default=Decimal("0"), ge=0)
    current_rate: Money = Field(..., ge=0, description="Price per gram")
    stock_quantity: int = Field(default=0, ge=0)
    min_stock_level: int = Field(default=0, ge=0)
    description: Optional[str] = None
    status: RecordStatus = "active"


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    """Fields a client may change; anything else in the body is ignored."""

    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    product_category: Optional[ProductCategory] = None
    sku: Optional[str] = Field(default=None, min_length=1)
    barcode: Optional[str] = None
    weight: Optional[Money] = Field(default=None, gt=0)
    purity: Optional[str] = Field(default=None, min_length=1)
    making_charge: Optional[Money] = Field(default=None, ge=0)
    current_rate: Optional[Money] = Field(default=None, ge=0)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    min_stock_level: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None
    status: Optional[RecordStatus] = None


class ProductOut(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
