"""Shared utility functions for the shipping SLA evaluator."""
import logging
import math
import numbers
import re
import sys
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import pandas as pd

from .time_utils import local_to_utc, to_naive_utc


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure and return logger that writes to stdout."""
    logger = logging.getLogger("shipping_sla")

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def round_half_up(x: float) -> int:
    """Round .5 upwards (2.5 -> 3, 22.5 -> 23); built-in round() rounds halves to even."""
    return math.floor(x + 0.5)


def resolve_columns(names, aliases: dict[str, list[str]]) -> dict[str, str]:
    """
    Map canonical field names to the actual column names present.

    Matching ignores case, surrounding whitespace and a leading BOM.
    Fields with no matching column are left out.
    """
    present = {}
    for name in names:
        key = str(name).replace("\ufeff", "").strip().lower()
        present.setdefault(key, name)

    resolved = {}
    for field, candidates in aliases.items():
        for cand in candidates:
            if cand.lower() in present:
                resolved[field] = present[cand.lower()]
                break
    return resolved


def is_missing(val) -> bool:
    """True for None, NaN/NaT and blank strings."""
    if val is None:
        return True
    if isinstance(val, str):
        return not val.strip()
    try:
        return bool(pd.isna(val))
    except (TypeError, ValueError):
        return False


def clean_text(val) -> Optional[str]:
    if is_missing(val):
        return None
    return str(val).strip()


def parse_order_value(val) -> float:
    """
    Parse a monetary amount from an upload cell.

    Everything except digits and '.' is stripped, so "1.250.000 ₫" and
    "1,250,000" both become numbers. Unparseable or missing values are 0.
    """
    if is_missing(val):
        return 0.0
    if isinstance(val, numbers.Real) and not isinstance(val, bool):
        return max(0.0, float(val))

    digits = re.sub(r"[^0-9.]", "", str(val))
    # VND has no minor unit, so "350.000" is thousands-grouped, not a decimal
    if re.fullmatch(r"\d{1,3}(\.\d{3})+", digits):
        digits = digits.replace(".", "")
    try:
        return max(0.0, float(digits))
    except ValueError:
        return 0.0


def parse_order_time(val, tz: Optional[ZoneInfo] = None) -> Optional[datetime]:
    """
    Parse an order timestamp into a naive UTC datetime, or None if unparseable.

    Timestamps without an offset are read in `tz` when given, else as UTC.
    Numbers are epoch seconds or epoch milliseconds.
    """
    if is_missing(val):
        return None
    if isinstance(val, datetime):
        if val.tzinfo is None and tz is not None:
            return local_to_utc(val, tz)
        return to_naive_utc(val)

    if isinstance(val, numbers.Real) and not isinstance(val, bool):
        unit = "ms" if val > 1e11 else "s"
        ts = pd.to_datetime(val, unit=unit, errors="coerce", utc=True)
        if ts is None or pd.isna(ts):
            return None
        return to_naive_utc(ts.to_pydatetime())

    ts = pd.to_datetime(str(val).strip(), errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    dt = ts.to_pydatetime()
    if dt.tzinfo is None and tz is not None:
        return local_to_utc(dt, tz)
    return to_naive_utc(dt)
