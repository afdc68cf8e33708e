"""
Dashboard figures computed from plain table reads.

Sales documents (bills, exchange bills, invoices) are loaded into one pandas
frame and bucketed per chart period. Timestamps are compared in UTC.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from sqlalchemy import not_
from sqlalchemy.orm import Session

from app.core.errors import InvalidRequestError
from app.models import Bill, Invoice, Product
from app.services.billing_service import is_exchange_bill
from app.services.inventory_service import low_stock_products
from app.utils.billing_math import money

logger = logging.getLogger(__name__)

RECENT_LIMIT = 10
LOW_STOCK_LIMIT = 10

DOCUMENT_COLUMNS = ["kind", "total_amount", "payment_method", "payment_status", "created_at"]

# period -> (pandas period frequency, number of buckets ending at the current one)
CHART_WINDOWS = {
    "hour": ("h", 24),
    "week": ("W-SAT", 8),  # weeks run Sunday..Saturday
    "month": ("M", 6),
    "quarter": ("Q", 4),
    "year": ("Y", 5),
}


def _now() -> pd.Timestamp:
    return pd.Timestamp.now(tz="UTC").tz_localize(None)


def _kind(bill: Bill) -> str:
    if bill.bill_type == "exchange" or (bill.bill_number or "").startswith("EXCH-"):
        return "exchange"
    return "bill"


def _documents_frame(db: Session) -> pd.DataFrame:
    rows: List[Tuple[Any, ...]] = []
    for bill in db.query(Bill).all():
        rows.append((_kind(bill), bill.total_amount, bill.payment_method, bill.payment_status, bill.created_at))
    for invoice in db.query(Invoice).all():
        rows.append(
            ("invoice", invoice.total_amount, invoice.payment_method, invoice.payment_status, invoice.created_at)
        )

    df = pd.DataFrame(rows, columns=DOCUMENT_COLUMNS)
    df["total_amount"] = pd.to_numeric(df["total_amount"].map(lambda v: None if v is None else float(v)))
    df["created_at"] = pd.to_datetime(df["created_at"], utc=True).dt.tz_convert(None)

    # missing or negative totals are not sales
    valid = df["total_amount"].notna() & (df["total_amount"] >= 0)
    if not valid.all():
        logger.debug("Ignoring %s document(s) with missing or negative totals", int((~valid).sum()))
    return df[valid]


def _amount(series: pd.Series) -> Decimal:
    return money(float(series.sum())) if len(series) else Decimal("0.00")


def _category_mix(db: Session) -> List[Dict[str, Any]]:
    products = db.query(Product.product_category, Product.category).filter(Product.status == "active").all()
    if not products:
        return []
    names = pd.Series([product_category or category for product_category, category in products])
    counts = names.value_counts()
    total = int(counts.sum())
    mix = [
        {"name": str(name), "count": int(count), "value": int(round(count * 100 / total))}
        for name, count in counts.items()
    ]
    return sorted(mix, key=lambda row: (-row["count"], row["name"]))


def dashboard_stats(db: Session, df: Optional[pd.DataFrame] = None) -> Dict[str, Any]:
    if df is None:
        df = _documents_frame(db)
    now = _now()
    today = df[df["created_at"].dt.normalize() == now.normalize()]
    this_month = df[df["created_at"].dt.to_period("M") == now.to_period("M")]
    return {
        "total_sales": _amount(df["total_amount"]),
        "total_products": db.query(Product).count(),
        "low_stock_alerts": len(low_stock_products(db)),
        "pending_payments": int((df["payment_status"] != "paid").sum()),
        "today_sales": _amount(today["total_amount"]),
        "this_month_sales": _amount(this_month["total_amount"]),
    }


def dashboard_overview(db: Session) -> Dict[str, Any]:
    df = _documents_frame(db)
    by_kind = {kind: df[df["kind"] == kind] for kind in ("bill", "invoice", "exchange")}

    recent_bills = db.query(Bill).order_by(Bill.created_at.desc(), Bill.id.desc())

    return {
        "stats": dashboard_stats(db, df),
        "document_stats": {
            "total_bills": len(by_kind["bill"]),
            "total_invoices": len(by_kind["invoice"]),
            "total_exchange_bills": len(by_kind["exchange"]),
            "bills_value": _amount(by_kind["bill"]["total_amount"]),
            "invoices_value": _amount(by_kind["invoice"]["total_amount"]),
            "exchange_value": _amount(by_kind["exchange"]["total_amount"]),
        },
        "category_mix": _category_mix(db),
        "low_stock_products": low_stock_products(db, limit=LOW_STOCK_LIMIT),
        "recent_invoices": (
            db.query(Invoice).order_by(Invoice.created_at.desc(), Invoice.id.desc()).limit(RECENT_LIMIT).all()
        ),
        "recent_bills": recent_bills.filter(not_(is_exchange_bill())).limit(RECENT_LIMIT).all(),
        "recent_exchange_bills": recent_bills.filter(is_exchange_bill()).limit(RECENT_LIMIT).all(),
    }


def _chart_periods(
    period: str,
    start_date: Optional[date],
    end_date: Optional[date],
) -> Tuple[str, pd.PeriodIndex]:
    if period == "custom":
        if not start_date or not end_date:
            raise InvalidRequestError("Custom period requires start_date and end_date")
        if end_date < start_date:
            raise InvalidRequestError("end_date must not be before start_date")
        return "D", pd.period_range(start=pd.Timestamp(start_date), end=pd.Timestamp(end_date), freq="D")

    if period not in CHART_WINDOWS:
        raise InvalidRequestError(f"Unknown period: {period}")
    freq, buckets = CHART_WINDOWS[period]
    return freq, pd.period_range(end=_now().to_period(freq), periods=buckets, freq=freq)


def _bucket_label(period: str, index: int, bucket: pd.Period) -> str:
    if period == "hour":
        return bucket.start_time.strftime("%H:00")
    if period == "week":
        return f"Week {index + 1}"
    if period == "month":
        return bucket.start_time.strftime("%b")
    if period == "quarter":
        return f"Q{bucket.quarter} {bucket.year}"
    if period == "year":
        return str(bucket.year)
    return f"{bucket.start_time.strftime('%b')} {bucket.day}"


def _window(df: pd.DataFrame, freq: str, periods: pd.PeriodIndex) -> pd.DataFrame:
    df = df.assign(bucket=df["created_at"].dt.to_period(freq))
    return df[df["bucket"].isin(periods)]


def sales_chart(
    db: Session,
    period: str = "week",
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Dict[str, Any]:
    freq, periods = _chart_periods(period, start_date, end_date)
    window = _window(_documents_frame(db), freq, periods)

    grouped = window.groupby("bucket")["total_amount"].agg(["sum", "count"]).reindex(periods, fill_value=0)
    buckets = [
        {
            "period": _bucket_label(period, index, bucket),
            "sales": money(float(row["sum"])),
            "transactions": int(row["count"]),
        }
        for index, (bucket, row) in enumerate(grouped.iterrows())
    ]

    total_sales = _amount(window["total_amount"])
    total_transactions = len(window)
    average = money(total_sales / total_transactions) if total_transactions else Decimal("0.00")
    return {
        "period": period,
        "buckets": buckets,
        "total_sales": total_sales,
        "total_transactions": total_transactions,
        "average_sale": average,
    }


def payment_methods(
    db: Session,
    period: str = "month",
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Dict[str, Any]]:
    freq, periods = _chart_periods(period, start_date, end_date)
    window = _window(_documents_frame(db), freq, periods)
    if window.empty:
        return []

    grouped = window.groupby("payment_method")["total_amount"].agg(["count", "sum"])
    grouped = grouped.sort_values(["sum", "count"], ascending=False)
    return [
        {"payment_method": str(method), "count": int(row["count"]), "amount": money(float(row["sum"]))}
        for method, row in grouped.iterrows()
    ]
