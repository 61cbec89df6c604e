"""Report generation for shipping SLA outputs."""
from collections import Counter
from typing import Optional
from zoneinfo import ZoneInfo

import pandas as pd

from .config import EvaluatedOrder, SLALevel, Urgency, DataQuality, EXPORT_COLUMNS
from .filters import rank_by_priority
from .formatting import format_time_remaining, format_compact_duration
from .matrix import CarrierDeadlineMatrix
from .time_utils import utc_to_local
from .utils import setup_logging, round_half_up

logger = setup_logging()


def _top_key(counter: Counter) -> str:
    if not counter:
        return "N/A"
    return counter.most_common(1)[0][0]


class ReportBuilder:

    def __init__(
            self,
            evaluated: list[EvaluatedOrder],
            matrix: CarrierDeadlineMatrix,
            tz: Optional[ZoneInfo] = None,
            locale: str = "vi"
    ):
        self.evaluated = evaluated
        self.matrix = matrix
        self.tz = tz
        self.locale = locale

    def _display_time(self, dt):
        if dt is None:
            return None
        return utc_to_local(dt, self.tz) if self.tz is not None else dt

    def build_summary(self) -> dict:
        """
        Headline counts for the dashboard cards.

        Expired orders have no time left; warning orders are the early-warning
        band; unknown orders have no deadline configured.
        """
        total_orders = len(self.evaluated)
        if total_orders == 0:
            return {
                "total_orders": 0,
                "total_value": 0.0,
                "expired_orders": 0,
                "warning_orders": 0,
                "safe_orders": 0,
                "unknown_orders": 0,
                "avg_time_remaining_hours": 0.0,
                "top_platform": "N/A",
                "top_carrier": "N/A",
            }

        levels = Counter(item.sla_status.level for item in self.evaluated)
        with_deadline = [
            item.time_remaining_hours for item in self.evaluated
            if item.time_remaining_hours is not None
        ]

        return {
            "total_orders": total_orders,
            "total_value": sum(item.order_value for item in self.evaluated),
            "expired_orders": levels[SLALevel.EXPIRED],
            "warning_orders": levels[SLALevel.WARNING],
            "safe_orders": levels[SLALevel.SAFE],
            "unknown_orders": levels[SLALevel.UNKNOWN],
            "avg_time_remaining_hours": sum(with_deadline) / len(with_deadline) if with_deadline else 0.0,
            "top_platform": _top_key(Counter(item.platform for item in self.evaluated)),
            "top_carrier": _top_key(Counter(item.carrier for item in self.evaluated)),
        }

    def build_summary_df(self) -> pd.DataFrame:
        summary = self.build_summary()
        summary["total_value"] = round(summary["total_value"], 0)
        summary["avg_time_remaining"] = format_compact_duration(summary["avg_time_remaining_hours"])
        summary["avg_time_remaining_hours"] = round(summary["avg_time_remaining_hours"], 2)

        df = pd.DataFrame([summary])
        logger.info(f"Built summary for {summary['total_orders']} orders")
        return df

    def build_orders_df(self) -> pd.DataFrame:
        rows = []
        for item in self.evaluated:
            order = item.order
            urgency: Optional[Urgency] = item.sla_status.urgency
            remaining = item.time_remaining_hours

            rows.append({
                "order_id": order.order_id,
                "customer_name": order.customer_name,
                "product": order.product,
                "platform": order.platform,
                "carrier": order.suggested_carrier,
                "order_value": order.order_value,
                "order_time": self._display_time(order.order_time),
                "status": order.status.value,
                "sla_level": item.sla_status.level.value,
                "urgency": urgency.value if urgency is not None else None,
                "time_remaining_hours": round(remaining, 2) if remaining is not None else None,
                "time_remaining": format_time_remaining(remaining, self.locale),
                "confirm_deadline": self._display_time(item.confirm_deadline),
                "handover_deadline": self._display_time(item.handover_deadline),
                "priority": round(item.priority, 2),
                "source_file": order.source_file,
            })

        df = pd.DataFrame(rows)
        logger.info(f"Built orders with {len(df)} rows")
        return df

    def build_priority_queue_df(self, top_n: Optional[int] = None) -> pd.DataFrame:
        """Open (not expired, deadline known) orders ranked most urgent first."""
        ranked = [
            item for item in rank_by_priority(self.evaluated)
            if item.sla_status.level in (SLALevel.WARNING, SLALevel.SAFE)
        ]
        if top_n is not None:
            ranked = ranked[:top_n]

        rows = []
        for rank, item in enumerate(ranked, start=1):
            rows.append({
                "rank": rank,
                "order_id": item.order_id,
                "platform": item.platform,
                "carrier": item.carrier,
                "sla_level": item.sla_status.level.value,
                "time_remaining": format_time_remaining(item.time_remaining_hours, self.locale),
                "priority": round(item.priority, 2),
            })

        df = pd.DataFrame(rows)
        logger.info(f"Built priority_queue with {len(df)} rows")
        return df

    def build_carrier_matrix_df(self) -> pd.DataFrame:
        df = self.matrix.to_dataframe()
        counts = Counter((item.platform, item.carrier) for item in self.evaluated)
        df["orders"] = [counts.get((p, c), 0) for p, c in zip(df["platform"], df["carrier"])]
        return df

    def build_export_df(self) -> pd.DataFrame:
        """Rows for the CSV export, in the dashboard's column order."""
        rows = []
        for item in self.evaluated:
            rows.append([
                item.order_id,
                item.order.customer_name or "",
                item.platform,
                item.carrier,
                item.order_value,
                format_time_remaining(item.time_remaining_hours, self.locale),
                round_half_up(item.priority),
            ])
        return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def build_data_quality_df(quality: DataQuality) -> pd.DataFrame:
    return pd.DataFrame([{
        "total": quality.total,
        "clean": quality.clean,
        "needs_cleaning": quality.needs_cleaning,
        "errors": quality.errors,
        "duplicates": quality.duplicates,
    }])


def build_all_reports(
        evaluated: list[EvaluatedOrder],
        matrix: CarrierDeadlineMatrix,
        quality: Optional[DataQuality] = None,
        tz: Optional[ZoneInfo] = None,
        locale: str = "vi"
) -> dict[str, pd.DataFrame]:
    """
    Build all report DataFrames.

    Args:
        evaluated: Evaluated orders
        matrix: Carrier matrix the orders were evaluated against
        quality: Ingestion tally, adds a data_quality sheet when given
        tz: Timezone to show timestamps in (naive UTC when None)
        locale: "vi" or "en" for time-remaining text

    Returns:
        Dictionary of report DataFrames
    """
    builder = ReportBuilder(evaluated, matrix, tz=tz, locale=locale)

    reports = {
        "summary": builder.build_summary_df(),
        "orders": builder.build_orders_df(),
        "priority_queue": builder.build_priority_queue_df(),
        "carrier_matrix": builder.build_carrier_matrix_df(),
    }
    if quality is not None:
        reports["data_quality"] = build_data_quality_df(quality)
    return reports
