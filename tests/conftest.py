from datetime import datetime, timedelta

import pytest

from shipping_sla.config import Order
from shipping_sla.matrix import CarrierDeadlineMatrix

NOW = datetime(2025, 6, 15, 18, 0)


def make_order(order_id="O1", platform="shopee", hours_ago=1.0, value=300000, carrier=None, **kwargs) -> Order:
    return Order(
        order_id=order_id,
        platform=platform,
        order_time=NOW - timedelta(hours=hours_ago),
        order_value=value,
        suggested_carrier=carrier,
        **kwargs
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def matrix():
    return CarrierDeadlineMatrix.default()
