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

from app.models.base import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("weight > 0", name="ck_products_weight_positive"),
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("status IN ('active', 'inactive')", name="ck_products_status"),
        CheckConstraint(
            "product_category IS NULL OR product_category IN ('Men', 'Women', 'Kids')",
            name="ck_products_product_category",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    product_category = Column(String(20), nullable=True, index=True)  # Men/Women/Kids
    sku = Column(String(100), unique=True, nullable=False)
    barcode = Column(String(100), nullable=True, index=True)

    weight = Column(Numeric(10, 3), nullable=False)  # grams
    purity = Column(String(20), nullable=False)  # 22K, 18K ...
    making_charge = Column(Numeric(12, 2), nullable=False, default=0)
    current_rate = Column(Numeric(12, 2), nullable=False)  # per gram

    stock_quantity = Column(Integer, nullable=False, default=0)
    min_stock_level = Column(Integer, nullable=False, default=0)
    description = Column(Text)
    status = Column(String(20), nullable=False, default="active", index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class StockTransaction(Base):
    __tablename__ = "stock_transactions"
    __table_args__ = (
        CheckConstraint("transaction_type IN ('in', 'out')", name="ck_stock_transactions_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Nulled when the product is cascade-deleted so the audit trail survives
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    transaction_type = Column(String(10), nullable=False)
    quantity = Column(Integer, nullable=False)
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)
    reason = Column(String(255))
    reference_id = Column(Integer, nullable=True)
    reference_type = Column(String(30), nullable=True)  # bill/invoice/adjustment/product_update

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
