from typing import List, Literal

from pydantic import BaseModel

from app.schemas.billing import BillSummaryOut, InvoiceSummaryOut
from app.schemas.common import Money
from app.schemas.product import ProductOut

ChartPeriod = Literal["hour", "week", "month", "quarter", "year", "custom"]


class DashboardStats(BaseModel):
    total_sales: Money
    total_products: int
    low_stock_alerts: int
    pending_payments: int
    today_sales: Money
    this_month_sales: Money


class DocumentStats(BaseModel):
    total_bills: int
    total_invoices: int
    total_exchange_bills: int
    bills_value: Money
    invoices_value: Money
    exchange_value: Money


class CategoryShare(BaseModel):
    name: str
    count: int
    value: int  # percent of active products


class DashboardOverview(BaseModel):
    stats: DashboardStats
    document_stats: DocumentStats
    category_mix: List[CategoryShare]
    low_stock_products: List[ProductOut]
    recent_invoices: List[InvoiceSummaryOut]
    recent_bills: List[BillSummaryOut]
    recent_exchange_bills: List[BillSummaryOut]


class SalesBucket(BaseModel):
    period: str
    sales: Money
    transactions: int


class SalesChart(BaseModel):
    period: ChartPeriod
    buckets: List[SalesBucket]
    total_sales: Money
    total_transactions: int
    average_sale: Money


class PaymentMethodShare(BaseModel):
    payment_method: str
    count: int
    amount: Money
