from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from app.models.base import Base


class DocumentHeaderMixin:
    """Columns shared by bills and invoices."""

    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(30))
    customer_address = Column(Text)

    subtotal = Column(Numeric(14, 2), nullable=False, default=0)
    tax_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(14, 2), nullable=False, default=0)
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(14, 2), nullable=False, default=0)
    total_amount = Column(Numeric(14, 2), nullable=False)

    payment_method = Column(String(20), nullable=False)  # cash/card/upi/bank_transfer
    payment_status = Column(String(20), nullable=False, default="pending")  # pending/partial/paid
    amount_paid = Column(Numeric(14, 2), nullable=False, default=0)
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class DocumentItemMixin:
    # product_name/weight/rate are a snapshot; product_id is nulled on cascade delete
    product_name = Column(String(255), nullable=False)
    weight = Column(Numeric(10, 3), nullable=False, default=0)
    rate = Column(Numeric(12, 2), nullable=False, default=0)
    making_charge = Column(Numeric(12, 2), nullable=False, default=0)
    wastage_charge = Column(Numeric(12, 2), nullable=False, default=0)
    quantity = Column(Integer, nullable=False, default=1)
    total = Column(Numeric(14, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Bill(DocumentHeaderMixin, Base):
    __tablename__ = "bills"
    __table_args__ = (
        CheckConstraint("bill_type IN ('bill', 'exchange')", name="ck_bills_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    bill_number = Column(String(50), unique=True, nullable=False)
    bill_type = Column(String(20), nullable=False, default="bill")
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)

    # Gold exchange (EXCH- numbers only)
    old_gold_weight = Column(Numeric(10, 3))
    old_gold_purity = Column(String(20))
    old_gold_rate = Column(Numeric(12, 2))
    old_gold_value = Column(Numeric(14, 2))
    exchange_rate = Column(Numeric(12, 2))
    exchange_difference = Column(Numeric(14, 2))
    material_type = Column(String(20))

    customer = relationship("Customer", lazy="joined")
    items = relationship(
        "BillItem",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="BillItem.id",
        passive_deletes=True,
    )


class BillItem(DocumentItemMixin, Base):
    __tablename__ = "bill_items"

    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)

    bill = relationship("Bill", back_populates="items")


class Invoice(DocumentHeaderMixin, Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(50), unique=True, nullable=False)
    # RESTRICT: a customer with invoices cannot be deleted
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="RESTRICT"), nullable=True, index=True)

    customer = relationship("Customer", lazy="joined")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
        passive_deletes=True,
    )


class InvoiceItem(DocumentItemMixin, Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)

    invoice = relationship("Invoice", back_populates="items")
