from pathlib import Path
from typing import Optional

import pandas as pd

from .config import MATRIX_COLUMNS
from .matrix import CarrierDeadlineMatrix
from .utils import setup_logging

logger = setup_logging()


class InputLoader:

    SUPPORTED_SUFFIXES = [".csv", ".json", ".xlsx", ".xls"]
    ORDERS_SHEET = "orders"
    MATRIX_SHEET = "carrier_matrix"

    def __init__(self, filepath: str):
        self.filepath = Path(filepath)
        if not self.filepath.exists():
            raise FileNotFoundError(f"Input file not found: {filepath}")

        self.suffix = self.filepath.suffix.lower()
        if self.suffix not in self.SUPPORTED_SUFFIXES:
            raise ValueError(
                f"Unsupported input file type '{self.suffix}'. "
                f"Must be one of {self.SUPPORTED_SUFFIXES}"
            )

    def _read_excel_sheet(self, preferred: str, required: bool) -> Optional[pd.DataFrame]:
        excel = pd.ExcelFile(self.filepath)
        if preferred in excel.sheet_names:
            return pd.read_excel(excel, sheet_name=preferred)
        if required:
            return pd.read_excel(excel, sheet_name=0)
        return None

    def load_orders_df(self) -> pd.DataFrame:
        if self.suffix == ".csv":
            df = pd.read_csv(self.filepath, dtype=str, encoding="utf-8-sig")
        elif self.suffix == ".json":
            df = pd.read_json(self.filepath, orient="records", dtype=False, convert_dates=False)
        else:
            df = self._read_excel_sheet(self.ORDERS_SHEET, required=True)

        df = df.dropna(how="all")
        logger.info(f"Loaded {len(df)} order rows from {self.filepath.name}")
        return df

    def load_order_records(self) -> list[dict]:
        df = self.load_orders_df()
        # NaN would otherwise leak into Order fields as float('nan')
        df = df.astype(object).where(pd.notna(df), None)
        return df.to_dict(orient="records")

    def load_matrix(self) -> Optional[CarrierDeadlineMatrix]:
        """
        Load a carrier deadline matrix from this file.

        Excel workbooks are read from the `carrier_matrix` sheet (or return None
        if the workbook has none); CSV files must hold the matrix table itself.
        """
        if self.suffix == ".csv":
            df = pd.read_csv(self.filepath, encoding="utf-8-sig")
        elif self.suffix == ".json":
            df = pd.read_json(self.filepath, orient="records")
        else:
            df = self._read_excel_sheet(self.MATRIX_SHEET, required=False)
            if df is None:
                logger.info(f"No {self.MATRIX_SHEET} sheet in {self.filepath.name}, keeping default matrix")
                return None

        matrix = CarrierDeadlineMatrix.from_dataframe(df)
        logger.info(
            f"Loaded carrier matrix with {len(matrix)} entries "
            f"across {len(matrix.platforms())} platforms"
        )
        return matrix


def load_orders(filepath: str) -> list[dict]:
    return InputLoader(filepath).load_order_records()


def load_matrix(filepath: str) -> CarrierDeadlineMatrix:
    matrix = InputLoader(filepath).load_matrix()
    if matrix is None:
        raise ValueError(f"No carrier matrix found in {filepath}; expected columns {MATRIX_COLUMNS}")
    return matrix
