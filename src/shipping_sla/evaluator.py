"""
SLA Evaluator: carrier suggestion, deadline status, time remaining and priority.

Every function takes the matrix and the current time explicitly, so the same
inputs always give the same answer:

1. suggest_carrier: fixed rule table on platform and order value
2. calculate_sla_status: elapsed hours vs the confirm deadline
   - elapsed > deadline             -> expired / critical
   - elapsed > 0.8 * deadline       -> warning / medium
   - otherwise                      -> safe / low
   - (platform, carrier) not in matrix -> unknown
3. calculate_time_remaining: hours to the confirm deadline, clamped at 0
4. calculate_priority: platform*3 + urgency*2 + value*1, for descending sort
"""
from datetime import datetime
from typing import Iterable, Optional

from .config import (
    Order, SLAStatus, EvaluatedOrder, SLALevel, Urgency, Platform, Carrier,
    WARNING_THRESHOLD_RATIO, WEBSITE_EXPRESS_MIN_VALUE, SHOPEE_ECONOMY_MAX_VALUE,
    PLATFORM_SCORES, DEFAULT_PLATFORM_SCORE, URGENCY_SCORE_BANDS, DEFAULT_URGENCY_SCORE,
    VALUE_SCORE_DIVISOR, VALUE_SCORE_CAP, PLATFORM_WEIGHT, URGENCY_WEIGHT, VALUE_WEIGHT
)
from .matrix import CarrierDeadlineMatrix
from .time_utils import add_hours, hours_between
from .utils import setup_logging

logger = setup_logging()


def suggest_carrier(order: Order) -> str:
    platform = order.platform
    value = order.order_value or 0

    if platform == Platform.TIKTOK:
        return Carrier.JT_EXPRESS.value
    elif platform == Platform.WEBSITE and value > WEBSITE_EXPRESS_MIN_VALUE:
        return Carrier.JT_EXPRESS.value
    elif platform == Platform.SHOPEE and value < SHOPEE_ECONOMY_MAX_VALUE:
        return Carrier.GHTK.value
    else:
        return Carrier.VIETTEL_POST.value


def ensure_carrier(order: Order) -> Order:
    """Return the order with a suggested carrier, assigning one if absent."""
    if order.suggested_carrier:
        return order
    return order.with_carrier(suggest_carrier(order))


def calculate_sla_status(order: Order, matrix: CarrierDeadlineMatrix, now: datetime) -> SLAStatus:
    deadline = matrix.lookup(order.platform, order.suggested_carrier)
    if deadline is None:
        return SLAStatus(level=SLALevel.UNKNOWN)

    hours_since_order = hours_between(order.order_time, now)
    confirm_hours = deadline.confirm_deadline_hours

    if hours_since_order > confirm_hours:
        return SLAStatus(level=SLALevel.EXPIRED, urgency=Urgency.CRITICAL)
    elif hours_since_order > confirm_hours * WARNING_THRESHOLD_RATIO:
        return SLAStatus(level=SLALevel.WARNING, urgency=Urgency.MEDIUM)
    else:
        return SLAStatus(level=SLALevel.SAFE, urgency=Urgency.LOW)


def calculate_confirm_deadline(order: Order, matrix: CarrierDeadlineMatrix) -> Optional[datetime]:
    deadline = matrix.lookup(order.platform, order.suggested_carrier)
    if deadline is None:
        return None
    return add_hours(order.order_time, deadline.confirm_deadline_hours)


def calculate_time_remaining(
        order: Order,
        matrix: CarrierDeadlineMatrix,
        now: datetime
) -> Optional[float]:
    """
    Hours left until the confirm deadline, never negative.

    Returns None when no deadline is configured for the order's
    (platform, carrier); callers must treat that as "no deadline".
    """
    deadline_time = calculate_confirm_deadline(order, matrix)
    if deadline_time is None:
        return None

    remaining = hours_between(now, deadline_time)
    return max(0.0, remaining)


def calculate_hours_overdue(
        order: Order,
        matrix: CarrierDeadlineMatrix,
        now: datetime
) -> Optional[float]:
    """Hours past the confirm deadline (0 while still inside it), None when unconfigured."""
    deadline_time = calculate_confirm_deadline(order, matrix)
    if deadline_time is None:
        return None
    return max(0.0, hours_between(deadline_time, now))


def calculate_handover_deadline(order: Order, matrix: CarrierDeadlineMatrix) -> Optional[datetime]:
    """
    Latest time the parcel can be handed to the carrier.

    Counted from the confirmation time; before confirmation, from the confirm
    deadline (the latest the order can still be confirmed).
    """
    deadline = matrix.lookup(order.platform, order.suggested_carrier)
    if deadline is None:
        return None

    if order.confirmed_at is not None:
        base = order.confirmed_at
    else:
        base = add_hours(order.order_time, deadline.confirm_deadline_hours)
    return add_hours(base, deadline.handover_deadline_hours)


def _urgency_score(time_remaining_hours: Optional[float]) -> int:
    if time_remaining_hours is None:
        return DEFAULT_URGENCY_SCORE
    for upper_hours, score in URGENCY_SCORE_BANDS:
        if time_remaining_hours < upper_hours:
            return score
    return DEFAULT_URGENCY_SCORE


def _priority_score(platform: str, time_remaining_hours: Optional[float], order_value: float) -> float:
    platform_score = PLATFORM_SCORES.get(platform, DEFAULT_PLATFORM_SCORE)
    urgency_score = _urgency_score(time_remaining_hours)
    value_score = min(max(order_value or 0.0, 0.0) / VALUE_SCORE_DIVISOR, VALUE_SCORE_CAP)

    return (
        platform_score * PLATFORM_WEIGHT
        + urgency_score * URGENCY_WEIGHT
        + value_score * VALUE_WEIGHT
    )


def calculate_priority(evaluated: EvaluatedOrder) -> float:
    """Triage score, higher is more urgent. Only meaningful for ordering within one run."""
    return _priority_score(
        evaluated.order.platform,
        evaluated.time_remaining_hours,
        evaluated.order.order_value
    )


def evaluate_order(order: Order, matrix: CarrierDeadlineMatrix, now: datetime) -> EvaluatedOrder:
    order = ensure_carrier(order)

    time_remaining = calculate_time_remaining(order, matrix, now)
    evaluated = EvaluatedOrder(
        order=order,
        sla_status=calculate_sla_status(order, matrix, now),
        time_remaining_hours=time_remaining,
        priority=0.0,
        confirm_deadline=calculate_confirm_deadline(order, matrix),
        handover_deadline=calculate_handover_deadline(order, matrix)
    )
    evaluated.priority = calculate_priority(evaluated)
    return evaluated


def _time_remaining_sort_key(evaluated: EvaluatedOrder) -> tuple:
    # Orders without a configured deadline go last
    remaining = evaluated.time_remaining_hours
    return (remaining is None, remaining if remaining is not None else 0.0)


def evaluate_orders(
        orders: Iterable[Order],
        matrix: CarrierDeadlineMatrix,
        now: datetime
) -> list[EvaluatedOrder]:
    """
    Evaluate every order against the matrix at `now`.

    Returns orders sorted by time remaining, most pressing first.
    """
    evaluated = [evaluate_order(order, matrix, now) for order in orders]
    evaluated.sort(key=_time_remaining_sort_key)

    counts = {level: 0 for level in SLALevel}
    for item in evaluated:
        counts[item.sla_status.level] += 1

    logger.info(
        f"Evaluated {len(evaluated)} orders: "
        f"{counts[SLALevel.EXPIRED]} expired, {counts[SLALevel.WARNING]} warning, "
        f"{counts[SLALevel.SAFE]} safe, {counts[SLALevel.UNKNOWN]} unknown"
    )
    if counts[SLALevel.UNKNOWN]:
        logger.warning(
            f"{counts[SLALevel.UNKNOWN]} order(s) have no deadline configured "
            f"for their platform/carrier"
        )

    return evaluated
