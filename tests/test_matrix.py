import pandas as pd
import pytest

from shipping_sla.config import CarrierDeadline
from shipping_sla.matrix import CarrierDeadlineMatrix


def test_default_values(matrix):
    assert matrix.lookup("shopee", "GHN") == CarrierDeadline(48, 72)
    assert matrix.lookup("tiktok", "J&T Express") == CarrierDeadline(4, 12)
    assert matrix.lookup("website", "Ninja Van") == CarrierDeadline(0.25, 12)
    assert len(matrix) == 15


def test_lookup_missing(matrix):
    assert matrix.lookup("amazon", "GHN") is None
    assert matrix.lookup("shopee", "DHL") is None
    assert matrix.lookup("shopee", None) is None
    assert ("shopee", "GHN") in matrix
    assert ("amazon", "GHN") not in matrix


def test_with_deadline_returns_new_matrix(matrix):
    updated = matrix.with_deadline("shopee", "GHN", 6, 24)

    assert updated.lookup("shopee", "GHN") == CarrierDeadline(6, 24)
    assert matrix.lookup("shopee", "GHN") == CarrierDeadline(48, 72)
    assert updated is not matrix


def test_with_deadline_adds_platform(matrix):
    updated = matrix.with_deadline("lazada", "GHN", 24, 48)
    assert "lazada" in updated.platforms()
    assert "lazada" not in matrix.platforms()


def test_without_carrier(matrix):
    updated = matrix.without_carrier("tiktok", "GHN")
    assert updated.lookup("tiktok", "GHN") is None
    assert matrix.lookup("tiktok", "GHN") is not None


def test_entries_are_read_only(matrix):
    with pytest.raises(TypeError):
        matrix._entries["shopee"]["GHN"] = CarrierDeadline(1, 1)


def test_dataframe_conversion(matrix):
    df = matrix.to_dataframe()
    assert list(df.columns) == ["platform", "carrier", "confirm_deadline_hours", "handover_deadline_hours"]
    assert CarrierDeadlineMatrix.from_dataframe(df) == matrix


def test_from_dataframe_normalises_names():
    df = pd.DataFrame([{
        "Platform": " TikTok ",
        "Carrier": "GHN",
        "Confirm_Deadline_Hours": "3",
        "Handover_Deadline_Hours": 9,
    }])
    matrix = CarrierDeadlineMatrix.from_dataframe(df)
    assert matrix.lookup("tiktok", "GHN") == CarrierDeadline(3.0, 9.0)


def test_from_dataframe_missing_columns():
    with pytest.raises(ValueError, match="missing required columns"):
        CarrierDeadlineMatrix.from_dataframe(pd.DataFrame([{"platform": "shopee", "carrier": "GHN"}]))


def test_from_dataframe_non_numeric_hours():
    df = pd.DataFrame([{
        "platform": "shopee", "carrier": "GHN",
        "confirm_deadline_hours": "two days", "handover_deadline_hours": 72,
    }])
    with pytest.raises(ValueError, match="Non-numeric"):
        CarrierDeadlineMatrix.from_dataframe(df)
