"""Filtering and sorting of evaluated orders for list views and exports."""
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from .config import EvaluatedOrder, TimeRemainingBucket
from .utils import setup_logging

logger = setup_logging()

ALL = "all"

URGENT_MAX_HOURS = 2.0
SOON_MAX_HOURS = 6.0

SORT_FIELDS = {
    "time_remaining": lambda e: e.time_remaining_hours,
    "order_value": lambda e: e.order.order_value,
    "priority": lambda e: e.priority,
    "order_time": lambda e: e.order.order_time,
}


@dataclass
class OrderFilters:
    platform: str = ALL
    carrier: str = ALL
    status: str = ALL
    time_remaining: str = ALL
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    search_query: str = ""

    def active_count(self) -> int:
        count = sum(
            1 for val in (self.platform, self.carrier, self.status, self.time_remaining)
            if val not in (None, ALL)
        )
        count += sum(1 for val in (self.min_value, self.max_value, self.start, self.end) if val is not None)
        count += 1 if self.search_query else 0
        return count


def time_remaining_bucket(hours: Optional[float]) -> Optional[TimeRemainingBucket]:
    """Bucket for the time-remaining filter; None when no deadline is configured."""
    if hours is None:
        return None
    if hours <= 0:
        return TimeRemainingBucket.EXPIRED
    elif hours < URGENT_MAX_HOURS:
        return TimeRemainingBucket.URGENT
    elif hours <= SOON_MAX_HOURS:
        return TimeRemainingBucket.SOON
    else:
        return TimeRemainingBucket.SAFE


def _matches(item: EvaluatedOrder, filters: OrderFilters) -> bool:
    order = item.order

    if filters.platform not in (None, ALL) and order.platform != filters.platform:
        return False
    if filters.carrier not in (None, ALL) and order.suggested_carrier != filters.carrier:
        return False
    if filters.status not in (None, ALL) and item.sla_status.level != filters.status:
        return False

    if filters.time_remaining not in (None, ALL):
        bucket = time_remaining_bucket(item.time_remaining_hours)
        if bucket is None or bucket != filters.time_remaining:
            return False

    if filters.min_value is not None and order.order_value < filters.min_value:
        return False
    if filters.max_value is not None and order.order_value > filters.max_value:
        return False
    if filters.start is not None and order.order_time < filters.start:
        return False
    if filters.end is not None and order.order_time > filters.end:
        return False

    if filters.search_query:
        query = filters.search_query.lower()
        in_id = query in order.order_id.lower()
        in_customer = bool(order.customer_name) and query in order.customer_name.lower()
        if not (in_id or in_customer):
            return False

    return True


def filter_orders(evaluated: Iterable[EvaluatedOrder], filters: OrderFilters) -> list[EvaluatedOrder]:
    evaluated = list(evaluated)
    kept = [item for item in evaluated if _matches(item, filters)]
    logger.debug(f"Filtered orders: {len(evaluated)} -> {len(kept)} ({filters.active_count()} active filters)")
    return kept


def sort_orders(
        evaluated: Iterable[EvaluatedOrder],
        field: str = "time_remaining",
        descending: bool = False
) -> list[EvaluatedOrder]:
    """
    Stable sort on one field. Orders with no value for the field (no deadline
    configured) always go last, whichever the direction.
    """
    if field not in SORT_FIELDS:
        raise ValueError(f"Invalid sort field: {field}. Must be one of {sorted(SORT_FIELDS)}")

    key_fn = SORT_FIELDS[field]
    items = list(evaluated)
    present = [e for e in items if key_fn(e) is not None]
    absent = [e for e in items if key_fn(e) is None]

    present.sort(key=key_fn, reverse=descending)
    return present + absent


def rank_by_priority(evaluated: Iterable[EvaluatedOrder]) -> list[EvaluatedOrder]:
    """Most urgent first."""
    return sort_orders(evaluated, field="priority", descending=True)
