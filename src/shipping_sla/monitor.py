"""
Periodic SLA monitoring: re-evaluate the order list on a fixed tick and raise alerts.

The monitor owns the current order list and matrix. Both are replaced
wholesale (`replace_orders`, `update_matrix`), never edited in place, and
every refresh recomputes all statuses from the clock reading it is given.
"""
import time
from datetime import datetime
from typing import Callable, Iterable, Optional

from .config import AlertType, EvaluatedOrder, MonitorSettings, Order, SLAAlert, SLALevel, MINUTES_PER_HOUR
from .evaluator import evaluate_orders, calculate_hours_overdue
from .matrix import CarrierDeadlineMatrix
from .time_utils import utc_now
from .utils import setup_logging, round_half_up

logger = setup_logging()


def make_clock(
        start: Optional[datetime] = None,
        wall_clock: Callable[[], datetime] = utc_now
) -> Callable[[], datetime]:
    """
    Clock for `SLAMonitor.run`. With a fixed start, time advances from that
    start at wall-clock pace; without one it is the wall clock itself.
    """
    if start is None:
        return wall_clock

    started_at = wall_clock()

    def clock():
        return start + (wall_clock() - started_at)

    return clock


class SLAMonitor:

    def __init__(
            self,
            orders: Iterable[Order],
            matrix: CarrierDeadlineMatrix,
            settings: Optional[MonitorSettings] = None
    ):
        self.orders = list(orders)
        self.matrix = matrix
        self.settings = settings or MonitorSettings()
        self.evaluated: list[EvaluatedOrder] = []
        self.alerts: list[SLAAlert] = []
        self.last_refreshed: Optional[datetime] = None
        self._acknowledged: set[str] = set()

    def replace_orders(self, orders: Iterable[Order]):
        self.orders = list(orders)
        self.evaluated = []

    def update_matrix(self, matrix: CarrierDeadlineMatrix):
        self.matrix = matrix

    def refresh(self, now: datetime) -> list[EvaluatedOrder]:
        """Re-evaluate every order at `now` and rebuild the alert list."""
        self.evaluated = evaluate_orders(self.orders, self.matrix, now)
        self.alerts = self._build_alerts(now)
        self.last_refreshed = now

        if self.alerts:
            logger.warning(
                f"SLA alerts at {now:%H:%M}: "
                f"{self.count_alerts(AlertType.OVERDUE)} overdue, "
                f"{self.count_alerts(AlertType.CRITICAL)} critical"
            )
        return self.evaluated

    def _build_alerts(self, now: datetime) -> list[SLAAlert]:
        alerts = []
        critical_hours = self.settings.critical_threshold_minutes / MINUTES_PER_HOUR

        for item in self.evaluated:
            order_id = item.order_id

            if item.sla_status.level == SLALevel.EXPIRED:
                overdue_hours = calculate_hours_overdue(item.order, self.matrix, now) or 0.0
                alert_id = f"{AlertType.OVERDUE.value}-{order_id}"
                alerts.append(SLAAlert(
                    alert_id=alert_id,
                    alert_type=AlertType.OVERDUE,
                    order_id=order_id,
                    message=f"Đơn {order_id} đã quá hạn {round_half_up(overdue_hours * MINUTES_PER_HOUR)} phút",
                    timestamp=now,
                    acknowledged=alert_id in self._acknowledged
                ))
            elif item.time_remaining_hours is not None and item.time_remaining_hours <= critical_hours:
                alert_id = f"{AlertType.CRITICAL.value}-{order_id}"
                alerts.append(SLAAlert(
                    alert_id=alert_id,
                    alert_type=AlertType.CRITICAL,
                    order_id=order_id,
                    message=(
                        f"Đơn {order_id} sẽ quá hạn trong "
                        f"{round_half_up(item.time_remaining_hours * MINUTES_PER_HOUR)} phút"
                    ),
                    timestamp=now,
                    acknowledged=alert_id in self._acknowledged
                ))

        # Acknowledgements only outlive a refresh while their alert is still raised
        self._acknowledged &= {alert.alert_id for alert in alerts}
        return alerts

    def count_alerts(self, alert_type: AlertType) -> int:
        return sum(1 for alert in self.alerts if alert.alert_type == alert_type)

    def pending_alerts(self) -> list[SLAAlert]:
        return [alert for alert in self.alerts if not alert.acknowledged]

    def acknowledge(self, alert_id: str) -> bool:
        """Mark an alert acknowledged; it stays acknowledged across refreshes."""
        for alert in self.alerts:
            if alert.alert_id == alert_id:
                alert.acknowledged = True
                self._acknowledged.add(alert_id)
                return True
        return False

    def clear_alerts(self):
        self.alerts = []
        self._acknowledged.clear()

    def run(
            self,
            max_ticks: Optional[int] = None,
            clock: Callable[[], datetime] = utc_now,
            sleep: Callable[[float], None] = time.sleep,
            on_tick: Optional[Callable[[list[EvaluatedOrder], list[SLAAlert]], None]] = None
    ) -> int:
        """
        Refresh immediately, then once per interval until max_ticks refreshes
        have run (forever when None). Returns the number of refreshes.
        """
        ticks = 0
        try:
            while max_ticks is None or ticks < max_ticks:
                if ticks > 0:
                    sleep(self.settings.interval_seconds)
                evaluated = self.refresh(clock())
                ticks += 1
                if on_tick is not None:
                    on_tick(evaluated, self.alerts)
        except KeyboardInterrupt:
            logger.info(f"Monitoring stopped after {ticks} refresh(es)")

        return ticks
