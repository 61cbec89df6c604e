from datetime import timedelta

import pytest

from conftest import NOW, make_order
from shipping_sla.config import SLALevel, Urgency, EvaluatedOrder, SLAStatus, CarrierDeadline
from shipping_sla.evaluator import (
    suggest_carrier, calculate_sla_status, calculate_time_remaining, calculate_hours_overdue,
    calculate_priority, calculate_handover_deadline, evaluate_order, evaluate_orders
)
from shipping_sla.matrix import CarrierDeadlineMatrix


@pytest.mark.parametrize("platform,value,expected", [
    ("tiktok", 0, "J&T Express"),
    ("tiktok", 10_000_000, "J&T Express"),
    ("website", 2_500_000, "J&T Express"),
    ("website", 2_000_000, "Viettel Post"),
    ("shopee", 300_000, "GHTK"),
    ("shopee", 500_000, "Viettel Post"),
    ("amazon", 100, "Viettel Post"),
])
def test_suggest_carrier_rule_table(platform, value, expected):
    assert suggest_carrier(make_order(platform=platform, value=value)) == expected


def _deadline(confirm, handover=None):
    return CarrierDeadline(confirm, handover if handover is not None else confirm * 2)


def test_status_bands_around_confirm_deadline():
    matrix = CarrierDeadlineMatrix({"shopee": {"GHN": _deadline(10)}})

    def level(hours_ago):
        order = make_order(hours_ago=hours_ago, carrier="GHN")
        return calculate_sla_status(order, matrix, NOW).level

    assert level(10.5) == SLALevel.EXPIRED
    assert level(10) == SLALevel.WARNING
    assert level(8.5) == SLALevel.WARNING
    assert level(8) == SLALevel.SAFE
    assert level(0) == SLALevel.SAFE


def test_future_order_time_is_safe(matrix):
    order = make_order(platform="tiktok", hours_ago=-3, carrier="J&T Express")
    status = calculate_sla_status(order, matrix, NOW)
    assert status == SLAStatus(level=SLALevel.SAFE, urgency=Urgency.LOW)


def test_tiktok_order_past_deadline(matrix):
    order = make_order(platform="tiktok", hours_ago=5)
    carrier = suggest_carrier(order)
    order = order.with_carrier(carrier)

    assert carrier == "J&T Express"
    assert calculate_sla_status(order, matrix, NOW) == SLAStatus(SLALevel.EXPIRED, Urgency.CRITICAL)
    assert calculate_time_remaining(order, matrix, NOW) == 0
    assert calculate_hours_overdue(order, matrix, NOW) == pytest.approx(1.0)


def test_shopee_small_order_is_safe():
    matrix = CarrierDeadlineMatrix.default().with_deadline("shopee", "GHTK", 48, 96)
    order = make_order(platform="shopee", value=300000, hours_ago=1)
    order = order.with_carrier(suggest_carrier(order))

    assert order.suggested_carrier == "GHTK"
    assert calculate_sla_status(order, matrix, NOW).level == SLALevel.SAFE
    assert calculate_time_remaining(order, matrix, NOW) == pytest.approx(47.0)


def test_website_order_exactly_at_deadline_is_warning(matrix):
    order = make_order(platform="website", value=2_500_000, hours_ago=0.5)
    order = order.with_carrier(suggest_carrier(order))

    assert order.suggested_carrier == "J&T Express"
    status = calculate_sla_status(order, matrix, NOW)
    assert status.level == SLALevel.WARNING
    assert status.urgency == Urgency.MEDIUM


def test_unconfigured_platform_is_unknown(matrix):
    order = make_order(platform="amazon")
    order = order.with_carrier(suggest_carrier(order))

    status = calculate_sla_status(order, matrix, NOW)
    assert status.level == SLALevel.UNKNOWN
    assert status.urgency is None
    assert calculate_time_remaining(order, matrix, NOW) is None
    assert calculate_hours_overdue(order, matrix, NOW) is None
    assert calculate_handover_deadline(order, matrix) is None


@pytest.mark.parametrize("hours_ago", [-5, 0, 3.9, 4, 4.01, 100])
def test_time_remaining_never_negative(matrix, hours_ago):
    order = make_order(platform="tiktok", hours_ago=hours_ago, carrier="J&T Express")
    assert calculate_time_remaining(order, matrix, NOW) >= 0


def test_time_remaining_tracks_clock(matrix):
    order = make_order(platform="tiktok", hours_ago=1, carrier="J&T Express")
    assert calculate_time_remaining(order, matrix, NOW) == pytest.approx(3.0)
    assert calculate_time_remaining(order, matrix, NOW + timedelta(minutes=90)) == pytest.approx(1.5)


def _evaluated(platform, remaining, value):
    return EvaluatedOrder(
        order=make_order(platform=platform, value=value),
        sla_status=SLAStatus(SLALevel.SAFE, Urgency.LOW),
        time_remaining_hours=remaining,
        priority=0.0,
        confirm_deadline=None,
        handover_deadline=None
    )


def test_priority_formula():
    # platform 3*3 + urgency 10*2 + value 1.5
    assert calculate_priority(_evaluated("tiktok", 0.5, 1_500_000)) == pytest.approx(30.5)
    # platform 1*3 + urgency 5*2 + value capped at 3
    assert calculate_priority(_evaluated("shopee", 2, 9_000_000)) == pytest.approx(16.0)
    # unknown platform scores 1, no deadline scores urgency 1, negative value scores 0
    assert calculate_priority(_evaluated("amazon", None, -50)) == pytest.approx(5.0)


def test_priority_non_decreasing_with_urgency():
    scores = [calculate_priority(_evaluated("website", hours, 1_000_000)) for hours in (10, 3, 0.5)]
    assert scores == sorted(scores)


def test_handover_deadline_counts_from_confirmation(matrix):
    order = make_order(platform="tiktok", hours_ago=2, carrier="J&T Express")
    # tiktok / J&T: 4h confirm, 12h handover
    assert calculate_handover_deadline(order, matrix) == order.order_time + timedelta(hours=16)

    confirmed = make_order(
        platform="tiktok", hours_ago=2, carrier="J&T Express", confirmed_at=NOW - timedelta(hours=1)
    )
    assert calculate_handover_deadline(confirmed, matrix) == NOW + timedelta(hours=11)


def test_evaluate_order_assigns_carrier(matrix):
    evaluated = evaluate_order(make_order(platform="tiktok", hours_ago=5, value=0), matrix, NOW)

    assert evaluated.carrier == "J&T Express"
    assert evaluated.is_expired
    assert evaluated.time_remaining_hours == 0
    assert evaluated.priority == pytest.approx(3 * 3 + 10 * 2)


def test_evaluate_order_keeps_given_carrier(matrix):
    evaluated = evaluate_order(make_order(platform="shopee", carrier="GHN"), matrix, NOW)
    assert evaluated.carrier == "GHN"
    assert evaluated.time_remaining_hours == pytest.approx(47.0)


def test_evaluate_orders_sorted_by_time_remaining(matrix):
    orders = [
        make_order("A", platform="shopee", hours_ago=1, carrier="GHN"),
        make_order("B", platform="amazon", hours_ago=1),
        make_order("C", platform="tiktok", hours_ago=3, carrier="J&T Express"),
        make_order("D", platform="tiktok", hours_ago=9, carrier="J&T Express"),
    ]
    evaluated = evaluate_orders(orders, matrix, NOW)
    assert [e.order_id for e in evaluated] == ["D", "C", "A", "B"]


def test_evaluation_does_not_mutate_matrix(matrix):
    before = matrix.to_dict()
    evaluate_orders([make_order(platform="tiktok", hours_ago=5)], matrix, NOW)
    assert matrix.to_dict() == before
