"""
Carrier deadline matrix: per-platform, per-carrier confirm and handover windows.

The matrix is an immutable value. Edits go through `with_deadline` /
`without_carrier`, which return a new matrix and leave the original untouched,
so an evaluation in progress always sees a consistent set of deadlines.
"""
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

import pandas as pd

from .config import CarrierDeadline, DEFAULT_PLATFORM_CARRIER_MATRIX, MATRIX_COLUMNS
from .utils import setup_logging

logger = setup_logging()


class CarrierDeadlineMatrix:

    def __init__(self, entries: Mapping[str, Mapping[str, CarrierDeadline]]):
        frozen = {}
        for platform, carriers in entries.items():
            frozen[platform] = MappingProxyType(dict(carriers))
        self._entries = MappingProxyType(frozen)

    @classmethod
    def default(cls) -> "CarrierDeadlineMatrix":
        return cls(DEFAULT_PLATFORM_CARRIER_MATRIX)

    def lookup(self, platform: str, carrier: Optional[str]) -> Optional[CarrierDeadline]:
        """Return the deadline pair for (platform, carrier), or None if not configured."""
        if carrier is None:
            return None
        carriers = self._entries.get(platform)
        if carriers is None:
            return None
        return carriers.get(carrier)

    def platforms(self) -> list[str]:
        return list(self._entries.keys())

    def carriers(self, platform: Optional[str] = None) -> list[str]:
        if platform is not None:
            return list(self._entries.get(platform, {}).keys())

        seen = []
        for carriers in self._entries.values():
            for carrier in carriers:
                if carrier not in seen:
                    seen.append(carrier)
        return seen

    def with_deadline(
            self,
            platform: str,
            carrier: str,
            confirm_deadline_hours: float,
            handover_deadline_hours: float
    ) -> "CarrierDeadlineMatrix":
        """Return a new matrix with (platform, carrier) set; this matrix is unchanged."""
        entries = self.to_dict()
        entries.setdefault(platform, {})[carrier] = CarrierDeadline(
            confirm_deadline_hours=float(confirm_deadline_hours),
            handover_deadline_hours=float(handover_deadline_hours)
        )
        logger.debug(
            f"Matrix update {platform}/{carrier}: "
            f"confirm={confirm_deadline_hours}h handover={handover_deadline_hours}h"
        )
        return CarrierDeadlineMatrix(entries)

    def without_carrier(self, platform: str, carrier: str) -> "CarrierDeadlineMatrix":
        entries = self.to_dict()
        entries.get(platform, {}).pop(carrier, None)
        return CarrierDeadlineMatrix(entries)

    def to_dict(self) -> dict[str, dict[str, CarrierDeadline]]:
        return {platform: dict(carriers) for platform, carriers in self._entries.items()}

    def iter_entries(self) -> Iterator[tuple[str, str, CarrierDeadline]]:
        for platform, carriers in self._entries.items():
            for carrier, deadline in carriers.items():
                yield platform, carrier, deadline

    def to_dataframe(self) -> pd.DataFrame:
        rows = []
        for platform, carrier, deadline in self.iter_entries():
            rows.append({
                "platform": platform,
                "carrier": carrier,
                "confirm_deadline_hours": deadline.confirm_deadline_hours,
                "handover_deadline_hours": deadline.handover_deadline_hours
            })
        return pd.DataFrame(rows, columns=MATRIX_COLUMNS)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "CarrierDeadlineMatrix":
        """
        Build a matrix from a table with one row per (platform, carrier).

        Column names are matched case-insensitively. Later rows for the same
        pair override earlier ones.
        """
        columns = {str(c).strip().lower(): c for c in df.columns}
        missing = [c for c in MATRIX_COLUMNS if c not in columns]
        if missing:
            raise ValueError(f"Matrix table missing required columns: {missing}")

        entries: dict[str, dict[str, CarrierDeadline]] = {}
        for _, row in df.iterrows():
            platform = str(row[columns["platform"]]).strip().lower()
            carrier = str(row[columns["carrier"]]).strip()
            try:
                confirm = float(row[columns["confirm_deadline_hours"]])
                handover = float(row[columns["handover_deadline_hours"]])
            except (TypeError, ValueError) as e:
                raise ValueError(f"Non-numeric deadline hours for {platform}/{carrier}: {e}")

            entries.setdefault(platform, {})[carrier] = CarrierDeadline(
                confirm_deadline_hours=confirm,
                handover_deadline_hours=handover
            )

        return cls(entries)

    def __contains__(self, key) -> bool:
        platform, carrier = key
        return self.lookup(platform, carrier) is not None

    def __len__(self) -> int:
        return sum(len(carriers) for carriers in self._entries.values())

    def __eq__(self, other) -> bool:
        if not isinstance(other, CarrierDeadlineMatrix):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"CarrierDeadlineMatrix(platforms={self.platforms()}, entries={len(self)})"
