import json

import pandas as pd
import pytest

from conftest import NOW
from shipping_sla.config import CarrierDeadline
from shipping_sla.io_loader import InputLoader, load_orders, load_matrix
from shipping_sla.matrix import CarrierDeadlineMatrix
from shipping_sla.order_builder import build_orders


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        InputLoader(str(tmp_path / "nope.csv"))


def test_unsupported_suffix(tmp_path):
    path = tmp_path / "orders.txt"
    path.write_text("x")
    with pytest.raises(ValueError, match="Unsupported"):
        InputLoader(str(path))


def test_load_csv_orders(tmp_path):
    path = tmp_path / "orders.csv"
    path.write_text(
        "orderId,customerName,platform,orderValue,orderTime\n"
        "TK1,Nguyễn Văn A,tiktok,1250000,2025-06-15T16:00:00\n"
        "SP2,,shopee,\"320,000\",2025-06-15T12:00:00\n"
        ",,,,\n",
        encoding="utf-8"
    )
    records = load_orders(str(path))
    assert len(records) == 2
    assert records[1]["customerName"] is None

    orders, quality = build_orders(records, NOW)
    assert [o.order_id for o in orders] == ["TK1", "SP2"]
    assert orders[1].order_value == 320000
    assert orders[1].suggested_carrier == "GHTK"
    assert quality.needs_cleaning == 1


def test_load_json_orders(tmp_path):
    path = tmp_path / "orders.json"
    path.write_text(json.dumps([
        {"orderId": "WB3", "platform": "website", "orderValue": 4500000, "orderTime": "2025-06-15T17:30:00"},
    ]))
    orders, _ = build_orders(load_orders(str(path)), NOW)

    assert orders[0].order_value == 4500000
    assert orders[0].suggested_carrier == "J&T Express"


def test_load_excel_orders_and_matrix(tmp_path):
    path = tmp_path / "upload.xlsx"
    orders_df = pd.DataFrame([
        {"Order ID": "SP9", "Platform": "shopee", "Value": 100000, "Order Time": "2025-06-15 10:00"},
    ])
    matrix_df = CarrierDeadlineMatrix.default().with_deadline("shopee", "GHTK", 12, 24).to_dataframe()
    with pd.ExcelWriter(path, engine="xlsxwriter") as writer:
        orders_df.to_excel(writer, sheet_name="orders", index=False)
        matrix_df.to_excel(writer, sheet_name="carrier_matrix", index=False)

    loader = InputLoader(str(path))
    orders, _ = build_orders(loader.load_order_records(), NOW)
    assert orders[0].order_id == "SP9"

    matrix = loader.load_matrix()
    assert matrix.lookup("shopee", "GHTK") == CarrierDeadline(12, 24)


def test_excel_without_matrix_sheet(tmp_path):
    path = tmp_path / "upload.xlsx"
    pd.DataFrame([{"order_id": "A", "platform": "shopee"}]).to_excel(path, index=False)

    assert InputLoader(str(path)).load_matrix() is None
    with pytest.raises(ValueError, match="No carrier matrix"):
        load_matrix(str(path))


def test_load_matrix_csv(tmp_path):
    path = tmp_path / "matrix.csv"
    path.write_text(
        "platform,carrier,confirm_deadline_hours,handover_deadline_hours\n"
        "tiktok,J&T Express,6,18\n"
    )
    matrix = load_matrix(str(path))
    assert matrix.lookup("tiktok", "J&T Express") == CarrierDeadline(6, 18)
    assert len(matrix) == 1
