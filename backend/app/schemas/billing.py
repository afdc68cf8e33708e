from datetime import datetime
from decimal import Decimal
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.schemas.common import Money, PaymentMethod, PaymentStatus

BillType = Literal["bill", "exchange"]


class DocumentItemIn(BaseModel):
    product_id: Optional[int] = Field(default=None, description="Omit for free-form lines; those do not touch stock")
    product_name: str = Field(..., min_length=1)
    weight: Money = Field(default=Decimal("0"), ge=0)
    rate: Money = Field(default=Decimal("0"), ge=0)
    making_charge: Money = Field(default=Decimal("0"), ge=0)
    wastage_charge: Money = Field(default=Decimal("0"), ge=0)
    quantity: int = Field(default=1, gt=0)
    total: Optional[Money] = Field(default=None, ge=0, description="Precomputed by the client; derived when omitted")


class DocumentCreateBase(BaseModel):
    customer_id: Optional[int] = None
    customer_name: str = Field(..., min_length=1)
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    items: List[DocumentItemIn] = Field(..., min_length=1)

    subtotal: Optional[Money] = Field(default=None, ge=0)
    tax_percentage: Money = Field(default=Decimal("0"), ge=0, le=100)
    tax_amount: Money = Field(default=Decimal("0"), ge=0)
    discount_percentage: Money = Field(default=Decimal("0"), ge=0, le=100)
    discount_amount: Money = Field(default=Decimal("0"), ge=0)
    total_amount: Money = Field(..., description="Net payable; only an exchange bill may go below zero")

    payment_method: PaymentMethod
    payment_status: PaymentStatus = "pending"
    amount_paid: Money = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None


class InvoiceCreate(DocumentCreateBase):
    total_amount: Money = Field(..., ge=0)


class BillCreate(DocumentCreateBase):
    bill_type: BillType = "bill"

    old_gold_weight: Optional[Money] = Field(default=None, ge=0)
    old_gold_purity: Optional[str] = None
    old_gold_rate: Optional[Money] = Field(default=None, ge=0)
    old_gold_value: Optional[Money] = None
    exchange_rate: Optional[Money] = Field(default=None, ge=0)
    exchange_difference: Optional[Money] = None
    material_type: Optional[str] = None

    @model_validator(mode="after")
    def _check_bill_type(self):
        if self.bill_type != "exchange" and self.total_amount < 0:
            raise ValueError("total_amount must not be negative")
        if self.bill_type == "exchange" and self.old_gold_value is None:
            if self.old_gold_weight is None or self.old_gold_rate is None:
                raise ValueError("Exchange bills need old_gold_weight and old_gold_rate, or old_gold_value")
        return self


class PaymentUpdate(BaseModel):
    payment_status: Optional[PaymentStatus] = None
    amount_paid: Optional[Money] = Field(default=None, ge=0)
    payment_method: Optional[PaymentMethod] = None


class DocumentItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[int] = None
    product_name: str
    weight: Money
    rate: Money
    making_charge: Money
    wastage_charge: Money
    quantity: int
    total: Money
    created_at: Optional[datetime] = None


class DocumentOutBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: Optional[int] = None
    customer_name: str
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    subtotal: Money
    tax_percentage: Money
    tax_amount: Money
    discount_percentage: Money
    discount_amount: Money
    total_amount: Money
    payment_method: str
    payment_status: str
    amount_paid: Money
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _prefer_live_customer(cls, data: Any) -> Any:
        """Show the current customer record when it still exists, else the stored snapshot."""
        customer = getattr(data, "customer", None)
        if customer is None:
            return data
        values = {name: getattr(data, name) for name in cls.model_fields if hasattr(data, name)}
        values["customer_name"] = customer.name or data.customer_name
        values["customer_phone"] = customer.phone or data.customer_phone
        values["customer_address"] = customer.address or data.customer_address
        return values


class BillSummaryOut(DocumentOutBase):
    bill_number: str
    bill_type: str
    old_gold_weight: Optional[Money] = None
    old_gold_purity: Optional[str] = None
    old_gold_rate: Optional[Money] = None
    old_gold_value: Optional[Money] = None
    exchange_rate: Optional[Money] = None
    exchange_difference: Optional[Money] = None
    material_type: Optional[str] = None


class BillOut(BillSummaryOut):
    items: List[DocumentItemOut] = []


class InvoiceSummaryOut(DocumentOutBase):
    invoice_number: str


class InvoiceOut(InvoiceSummaryOut):
    items: List[DocumentItemOut] = []


class CalculationItem(BaseModel):
    weight: Money = Field(default=Decimal("0"), ge=0)
    rate: Money = Field(default=Decimal("0"), ge=0)
    making_charge: Money = Field(default=Decimal("0"), ge=0)
    wastage_charge: Money = Field(default=Decimal("0"), ge=0)
    quantity: int = Field(default=1, gt=0)


class CalculationRequest(BaseModel):
    items: List[CalculationItem] = []
    discount_percentage: Money = Field(default=Decimal("0"), ge=0, le=100)
    tax_percentage: Money = Field(default=Decimal("0"), ge=0, le=100)
    old_gold_weight: Optional[Money] = Field(default=None, ge=0)
    old_gold_rate: Optional[Money] = Field(default=None, ge=0)


class CalculationOut(BaseModel):
    item_totals: List[Money]
    subtotal: Money
    discount_amount: Money
    tax_amount: Money
    total_amount: Money
    old_gold_value: Optional[Money] = None
    exchange_difference: Optional[Money] = None
