"""
Build validated Order records from loosely-typed upload rows.

Normalisation rules:
1. order_id and platform are required; rows missing either are rejected
2. platform is stripped and lower-cased; unknown platforms are kept as-is
3. order_value keeps only digits and '.', defaulting to 0
4. order_time that is missing or unparseable defaults to `now`
5. a carrier is suggested when the row does not name one
"""
import numbers
import re
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Optional
from zoneinfo import ZoneInfo

from .config import Order, OrderStatus, DataQuality, ORDER_COLUMN_ALIASES
from .evaluator import ensure_carrier
from .utils import (
    setup_logging, resolve_columns, clean_text, is_missing,
    parse_order_value, parse_order_time
)

logger = setup_logging()


def _is_plain_number(val) -> bool:
    if isinstance(val, numbers.Real):
        return True
    return re.fullmatch(r"\d+(\.\d+)?", str(val).strip()) is not None


class OrderRecordError(ValueError):
    """Raised when a raw record cannot be turned into an Order."""
    pass


class OrderBuilder:

    def __init__(self, now: datetime, tz: Optional[ZoneInfo] = None):
        self.now = now
        self.tz = tz
        self.quality = DataQuality()

    def normalize(self, raw: Mapping) -> Order:
        """Convert one raw record into an Order, or raise OrderRecordError."""
        order, _ = self._normalize(raw)
        return order

    def _normalize(self, raw: Mapping) -> tuple[Order, bool]:
        """Returns (order, whether any field had to be cleaned or defaulted)."""
        columns = resolve_columns(raw.keys(), ORDER_COLUMN_ALIASES)

        def field(name):
            col = columns.get(name)
            return raw.get(col) if col is not None else None

        order_id = clean_text(field("order_id"))
        if order_id is None:
            raise OrderRecordError(f"Record has no order id: {dict(raw)}")

        platform = clean_text(field("platform"))
        if platform is None:
            raise OrderRecordError(f"Order {order_id} has no platform")

        needs_cleaning = False

        raw_value = field("order_value")
        order_value = parse_order_value(raw_value)
        if not is_missing(raw_value) and not _is_plain_number(raw_value):
            needs_cleaning = True

        raw_time = field("order_time")
        order_time = parse_order_time(raw_time, self.tz)
        if order_time is None:
            if not is_missing(raw_time):
                logger.warning(f"Order {order_id}: unparseable order time '{raw_time}', using current time")
            order_time = self.now
            needs_cleaning = True

        status_text = (clean_text(field("status")) or OrderStatus.PENDING.value).lower()
        try:
            status = OrderStatus(status_text)
        except ValueError:
            status = OrderStatus.PENDING

        order = Order(
            order_id=order_id,
            platform=platform.lower(),
            order_time=order_time,
            order_value=order_value,
            suggested_carrier=clean_text(field("suggested_carrier")),
            customer_name=clean_text(field("customer_name")),
            product=clean_text(field("product")),
            source_file=clean_text(field("source_file")),
            status=status
        )
        return ensure_carrier(order), needs_cleaning

    def build(self, records: Iterable[Mapping]) -> list[Order]:
        orders = []
        seen_ids = set()

        for raw in records:
            self.quality.total += 1
            try:
                order, needs_cleaning = self._normalize(raw)
            except OrderRecordError as e:
                logger.warning(f"Skipping record: {e}")
                self.quality.errors += 1
                continue

            if order.order_id in seen_ids:
                logger.warning(f"Skipping duplicate order id {order.order_id}")
                self.quality.duplicates += 1
                continue

            seen_ids.add(order.order_id)
            orders.append(order)
            self.quality.clean += 1
            if needs_cleaning:
                self.quality.needs_cleaning += 1

        logger.info(
            f"Built {len(orders)} orders from {self.quality.total} records "
            f"({self.quality.errors} rejected, {self.quality.duplicates} duplicates)"
        )
        return orders


def normalize_order(raw: Mapping, now: datetime, tz: Optional[ZoneInfo] = None) -> Order:
    return OrderBuilder(now, tz).normalize(raw)


def build_orders(
        records: Iterable[Mapping],
        now: datetime,
        tz: Optional[ZoneInfo] = None
) -> tuple[list[Order], DataQuality]:
    """Normalise a batch of raw records. Returns (orders, data quality tally)."""
    builder = OrderBuilder(now, tz)
    orders = builder.build(records)
    return orders, builder.quality


def confirm_orders(orders: Iterable[Order], order_ids: Iterable[str], now: datetime) -> list[Order]:
    """Return a new list with the selected orders marked confirmed at `now`."""
    selected = set(order_ids)
    confirmed = []
    updated = 0

    for order in orders:
        if order.order_id in selected and order.status != OrderStatus.CONFIRMED:
            order = replace(order, status=OrderStatus.CONFIRMED, confirmed_at=now)
            updated += 1
        confirmed.append(order)

    logger.info(f"Confirmed {updated} order(s)")
    return confirmed


def demo_orders(now: datetime) -> list[Order]:
    """Sample orders spread across platforms and deadline states, relative to `now`."""
    records = [
        {
            "orderId": "TK001",
            "customerName": "Nguyễn Văn A",
            "product": "Vali 28 inch màu đen",
            "orderValue": 1250000,
            "platform": "tiktok",
            "orderTime": now - timedelta(hours=2),
            "sourceFile": "tiktok_orders_demo.csv",
        },
        {
            "orderId": "SP002",
            "customerName": "Trần Thị B",
            "product": "Set 3 vali du lịch",
            "orderValue": 3200000,
            "platform": "shopee",
            "orderTime": now - timedelta(hours=5),
            "sourceFile": "shopee_orders_demo.xlsx",
        },
        {
            "orderId": "WB003",
            "customerName": "Lê Văn C",
            "product": "Vali cao cấp Samsonite",
            "orderValue": 4500000,
            "platform": "website",
            "orderTime": now - timedelta(minutes=30),
            "sourceFile": "website_orders_demo.json",
        },
        {
            "orderId": "TK004",
            "customerName": "Phạm Thị D",
            "product": "Vali cabin 20 inch",
            "orderValue": 890000,
            "platform": "tiktok",
            "orderTime": now - timedelta(minutes=30),
            "sourceFile": "tiktok_urgent.csv",
        },
    ]
    orders, _ = build_orders(records, now)
    return orders
