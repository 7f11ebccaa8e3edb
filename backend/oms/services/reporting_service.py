# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

"""
Order reports and the dashboard summary.

Revenue only counts orders that reached confirmed, shipped or delivered;
pending and cancelled orders never contribute. Grouping into periods happens
in Python over (created_at, total_amount) rows so the same code runs on
SQLite and PostgreSQL.

MULTI-TENANT: every query filters on merchant_id.
"""

from __future__ import annotations

from collections import OrderedDict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable

from sqlalchemy import func

from ..errors import ValidationError
from ..extensions import db
from ..models import Order
from ..time_utils import end_of_day, money, start_of_day, today
from ..validation import DateRange
from .inventory_service import count_low_stock

REVENUE_STATUSES = ("confirmed", "shipped", "delivered")
REPORT_TYPES = ("daily", "monthly", "yearly")
GROUP_BY = ("day", "week", "month")

_PERIOD_FORMATS = {
    "day": "%Y-%m-%d",
    "week": "%Y-W%W",
    "month": "%Y-%m",
    "year": "%Y",
}


def _first_of_month(d: date, months_back: int) -> date:
    month = d.month - months_back
    year = d.year
    while month <= 0:
        month += 12
        year -= 1
    return date(year, month, 1)


def _revenue_rows(
    merchant_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    channel: str | None = None,
) -> list[tuple[datetime, Decimal, str]]:
    query = db.session.query(Order.created_at, Order.total_amount, Order.order_source).filter(
        Order.merchant_id == merchant_id,
        Order.status.in_(REVENUE_STATUSES),
    )
    if start:
        query = query.filter(Order.created_at >= start)
    if end:
        query = query.filter(Order.created_at < end)
    if channel:
        query = query.filter(Order.order_source == channel)
    return query.order_by(Order.created_at.asc()).all()


def _group(rows: Iterable[tuple[datetime, Decimal, str]], period: str) -> list[dict]:
    fmt = _PERIOD_FORMATS[period]
    buckets: "OrderedDict[str, list]" = OrderedDict()
    for created_at, amount, _source in rows:
        key = created_at.strftime(fmt)
        bucket = buckets.setdefault(key, [0, Decimal("0")])
        bucket[0] += 1
        bucket[1] += Decimal(amount or 0)

    out = []
    for key, (count, revenue) in buckets.items():
        out.append({
            "period": key,
            "orders": count,
            "revenue": money(revenue),
            "average_order_value": money((revenue / count).quantize(Decimal("0.01"))) if count else 0.0,
        })
    return out


def _bounds(dates: DateRange, default_start: date | None) -> tuple[datetime | None, datetime | None]:
    start = dates.start or default_start
    start_dt = start_of_day(start) if start else None
    end_dt = end_of_day(dates.end) if dates.end else None
    return start_dt, end_dt


def order_report(merchant_id: int, report_type: str, dates: DateRange) -> dict:
    """
    Order count and revenue per day, month or year.

    Default windows: daily covers the last 30 days, monthly the last 12
    months, yearly all history.
    """
    if report_type not in REPORT_TYPES:
        raise ValidationError(f"Invalid report type. Must be one of: {', '.join(REPORT_TYPES)}")

    current = today()
    if report_type == "daily":
        default_start, period = current - timedelta(days=29), "day"
    elif report_type == "monthly":
        default_start, period = _first_of_month(current, 11), "month"
    else:
        default_start, period = None, "year"

    start_dt, end_dt = _bounds(dates, default_start)
    rows = _group(_revenue_rows(merchant_id, start_dt, end_dt), period)
    total_revenue = sum((Decimal(str(r["revenue"])) for r in rows), Decimal("0"))
    return {
        "type": report_type,
        "startDate": start_dt.date().isoformat() if start_dt else None,
        "endDate": dates.end.isoformat() if dates.end else None,
        "rows": rows,
        "totals": {
            "orders": sum(r["orders"] for r in rows),
            "revenue": money(total_revenue),
        },
    }


def sales_report(merchant_id: int, dates: DateRange, channel: str | None = None, group_by: str = "day") -> dict:
    if group_by not in GROUP_BY:
        raise ValidationError("groupBy must be day, week, or month")
    start_dt, end_dt = _bounds(dates, None)
    rows = _revenue_rows(merchant_id, start_dt, end_dt, channel)
    return {
        "groupBy": group_by,
        "channel": channel,
        "startDate": dates.start.isoformat() if dates.start else None,
        "endDate": dates.end.isoformat() if dates.end else None,
        "rows": _group(rows, group_by),
    }


def dashboard(merchant_id: int) -> dict:
    current = today()
    day_start = start_of_day(current)

    today_orders = db.session.query(func.count(Order.id)).filter(
        Order.merchant_id == merchant_id,
        Order.created_at >= day_start,
        Order.created_at < end_of_day(current),
    ).scalar()

    today_revenue = db.session.query(func.coalesce(func.sum(Order.total_amount), 0)).filter(
        Order.merchant_id == merchant_id,
        Order.created_at >= day_start,
        Order.status.in_(REVENUE_STATUSES),
    ).scalar()

    pending = db.session.query(func.count(Order.id)).filter(
        Order.merchant_id == merchant_id,
        Order.status == "pending",
    ).scalar()

    monthly = _group(_revenue_rows(merchant_id, start_of_day(_first_of_month(current, 11))), "month")

    channels: dict[str, list] = {}
    for _created, amount, source in _revenue_rows(merchant_id, start_of_day(current - timedelta(days=29))):
        entry = channels.setdefault(source, [0, Decimal("0")])
        entry[0] += 1
        entry[1] += Decimal(amount or 0)

    return {
        "todayOrders": int(today_orders or 0),
        "todayRevenue": money(Decimal(today_revenue or 0)),
        "pendingOrders": int(pending or 0),
        "lowStockProducts": count_low_stock(merchant_id),
        "monthlyRevenue": [{"month": r["period"], "orders": r["orders"], "revenue": r["revenue"]} for r in monthly],
        "channelPerformance": [
            {"channel": source, "orders": count, "revenue": money(revenue)}
            for source, (count, revenue) in sorted(channels.items(), key=lambda item: item[1][1], reverse=True)
        ],
    }
