import pytest

from conftest import NOW, make_order
from shipping_sla.config import CarrierDeadline
from shipping_sla.matrix import CarrierDeadlineMatrix
from shipping_sla.validators import InputValidator, ValidationError, validate_inputs


def test_clean_inputs_pass(matrix):
    orders = [make_order("A", platform="shopee", carrier="GHN")]
    errors, warnings = InputValidator(orders, matrix, NOW).validate_all()
    assert errors == []
    assert warnings == []


def test_bad_matrix_hours_are_errors():
    matrix = CarrierDeadlineMatrix({
        "shopee": {
            "GHN": CarrierDeadline(0, 72),
            "GHTK": CarrierDeadline(24, float("nan")),
        }
    })
    errors, _ = InputValidator([make_order(carrier="GHN")], matrix, NOW).validate_all()
    assert len(errors) == 2


def test_short_handover_is_warning():
    matrix = CarrierDeadlineMatrix({"shopee": {"GHN": CarrierDeadline(48, 24)}})
    errors, warnings = InputValidator([make_order(carrier="GHN")], matrix, NOW).validate_all()
    assert errors == []
    assert any("shorter than confirm" in w for w in warnings)


def test_order_warnings(matrix):
    orders = [
        make_order("F", platform="tiktok", hours_ago=-2, carrier="J&T Express"),
        make_order("Z", platform="shopee", value=0, carrier="GHN"),
        make_order("U", platform="amazon", carrier="Viettel Post"),
    ]
    errors, warnings = InputValidator(orders, matrix, NOW).validate_all()

    assert errors == []
    assert any("Order F" in w and "future" in w for w in warnings)
    assert any("Order Z" in w and "zero order value" in w for w in warnings)
    assert any("unrecognised platform: amazon" in w for w in warnings)
    assert any("No deadline configured for amazon/Viettel Post" in w for w in warnings)


def test_validate_inputs_raises_on_errors(matrix):
    with pytest.raises(ValidationError):
        validate_inputs([], matrix, NOW)


def test_validate_inputs_allows_warnings(matrix):
    validate_inputs([make_order(platform="amazon", carrier="Viettel Post")], matrix, NOW)
