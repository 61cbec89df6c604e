"""
Write evaluation results to an Excel workbook and the CSV order export.
"""
from pathlib import Path

import pandas as pd

from .config import SLALevel
from .utils import setup_logging

logger = setup_logging()

SHEET_ORDER = ["summary", "orders", "priority_queue", "carrier_matrix", "data_quality"]
DATETIME_COLUMNS = {"order_time", "confirm_deadline", "handover_deadline"}
MAX_COLUMN_WIDTH = 50


def _column_width(df: pd.DataFrame, col) -> int:
    longest = df[col].astype(str).map(len).max() if len(df) > 0 else 0
    return min(max(longest, len(str(col))) + 2, MAX_COLUMN_WIDTH)


def _write_sheet(writer: pd.ExcelWriter, sheet_name: str, df: pd.DataFrame, formats: dict):
    df.to_excel(writer, sheet_name=sheet_name, index=False)
    worksheet = writer.sheets[sheet_name]
    worksheet.freeze_panes(1, 0)

    for i, col in enumerate(df.columns):
        worksheet.write(0, i, str(col), formats["header"])
        if col in DATETIME_COLUMNS:
            worksheet.set_column(i, i, 18, formats["datetime"])
        else:
            worksheet.set_column(i, i, _column_width(df, col))

    # Highlight expired rows in the orders sheet
    if sheet_name == "orders" and "sla_level" in df.columns and len(df) > 0:
        last_col = len(df.columns) - 1
        level_col = df.columns.get_loc("sla_level")
        col_letter = chr(ord("A") + level_col) if level_col < 26 else None
        if col_letter is not None:
            worksheet.conditional_format(1, 0, len(df), last_col, {
                "type": "formula",
                "criteria": f'=${col_letter}2="{SLALevel.EXPIRED.value}"',
                "format": formats["expired"],
            })


def write_outputs(reports: dict[str, pd.DataFrame], output_path: str) -> None:
    """Write all reports to an Excel file, known sheets first in a fixed order."""
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(output_path, engine="xlsxwriter") as writer:
        workbook = writer.book
        formats = {
            "header": workbook.add_format({"bold": True, "bottom": 1}),
            "datetime": workbook.add_format({"num_format": "yyyy-mm-dd hh:mm"}),
            "expired": workbook.add_format({"bg_color": "#F8D7DA"}),
        }

        ordered = [name for name in SHEET_ORDER if name in reports]
        ordered += [name for name in reports if name not in SHEET_ORDER]
        for sheet_name in ordered:
            _write_sheet(writer, sheet_name, reports[sheet_name], formats)

    logger.info(f"Wrote {len(ordered)} sheets to {output_path}")


def write_csv_export(export_df: pd.DataFrame, output_path: str) -> None:
    """Write the order export CSV (UTF-8 with BOM so Excel shows Vietnamese text)."""
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    export_df.to_csv(output_path, index=False, encoding="utf-8-sig")
    logger.info(f"Wrote {len(export_df)} orders to {output_path}")
