"""Configuration: constants, enums, and dataclasses for the shipping SLA evaluator."""
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional


SECONDS_PER_HOUR = 3600
MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24

# Early-warning band: an order turns "warning" once 80% of the confirm window is used
WARNING_THRESHOLD_RATIO = 0.8

VALUE_SCORE_DIVISOR = 1_000_000
VALUE_SCORE_CAP = 3.0

PLATFORM_WEIGHT = 3
URGENCY_WEIGHT = 2
VALUE_WEIGHT = 1

DEFAULT_PLATFORM_SCORE = 1

# (upper bound in hours, score); first bound the remaining time is under wins
URGENCY_SCORE_BANDS = [
    (1.0, 10),
    (4.0, 5),
]
DEFAULT_URGENCY_SCORE = 1

WEBSITE_EXPRESS_MIN_VALUE = 2_000_000
SHOPEE_ECONOMY_MAX_VALUE = 500_000

DEFAULT_INPUT_FILE = "data/orders.csv"

EXPORT_COLUMNS = [
    "Order ID",
    "Customer",
    "Platform",
    "Carrier",
    "Value",
    "Time Remaining",
    "Priority",
]


class Platform(str, Enum):
    SHOPEE = "shopee"
    TIKTOK = "tiktok"
    WEBSITE = "website"


class Carrier(str, Enum):
    GHN = "GHN"
    GHTK = "GHTK"
    VIETTEL_POST = "Viettel Post"
    JT_EXPRESS = "J&T Express"
    NINJA_VAN = "Ninja Van"


class SLALevel(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    CRITICAL = "critical"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"


class AlertType(str, Enum):
    CRITICAL = "critical"
    OVERDUE = "overdue"


class TimeRemainingBucket(str, Enum):
    EXPIRED = "expired"
    URGENT = "urgent"      # under 2 hours
    SOON = "soon"          # 2 to 6 hours
    SAFE = "safe"          # over 6 hours


PLATFORM_SCORES = {
    Platform.TIKTOK.value: 3,
    Platform.WEBSITE.value: 2,
    Platform.SHOPEE.value: 1,
}


@dataclass(frozen=True)
class CarrierDeadline:
    confirm_deadline_hours: float
    handover_deadline_hours: float


DEFAULT_PLATFORM_CARRIER_MATRIX: dict[str, dict[str, CarrierDeadline]] = {
    Platform.SHOPEE.value: {
        Carrier.GHN.value: CarrierDeadline(48, 72),
        Carrier.GHTK.value: CarrierDeadline(24, 96),
        Carrier.VIETTEL_POST.value: CarrierDeadline(36, 60),
        Carrier.JT_EXPRESS.value: CarrierDeadline(24, 48),
        Carrier.NINJA_VAN.value: CarrierDeadline(12, 36),
    },
    Platform.TIKTOK.value: {
        Carrier.GHN.value: CarrierDeadline(12, 24),
        Carrier.GHTK.value: CarrierDeadline(8, 36),
        Carrier.VIETTEL_POST.value: CarrierDeadline(6, 18),
        Carrier.JT_EXPRESS.value: CarrierDeadline(4, 12),
        Carrier.NINJA_VAN.value: CarrierDeadline(2, 8),
    },
    Platform.WEBSITE.value: {
        Carrier.GHN.value: CarrierDeadline(2, 48),
        Carrier.GHTK.value: CarrierDeadline(4, 72),
        Carrier.VIETTEL_POST.value: CarrierDeadline(1, 24),
        Carrier.JT_EXPRESS.value: CarrierDeadline(0.5, 18),
        Carrier.NINJA_VAN.value: CarrierDeadline(0.25, 12),
    },
}

# Upload files arrive from several exports; first alias present wins
ORDER_COLUMN_ALIASES: dict[str, list[str]] = {
    "order_id": ["order_id", "orderid", "order id", "id", "mã đơn", "ma don"],
    "platform": ["platform", "channel", "sàn", "san"],
    "order_time": ["order_time", "ordertime", "order time", "created_at", "createdat", "thời gian đặt"],
    "order_value": ["order_value", "ordervalue", "order value", "value", "total", "giá trị"],
    "customer_name": ["customer_name", "customername", "customer", "khách hàng"],
    "product": ["product", "product_name", "sản phẩm"],
    "suggested_carrier": ["suggested_carrier", "suggestedcarrier", "carrier", "nhà vận chuyển"],
    "source_file": ["source_file", "sourcefile"],
    "status": ["status", "trạng thái"],
}

MATRIX_COLUMNS = [
    "platform",
    "carrier",
    "confirm_deadline_hours",
    "handover_deadline_hours",
]


@dataclass(frozen=True)
class Order:
    order_id: str
    platform: str
    order_time: datetime
    order_value: float
    suggested_carrier: Optional[str] = None
    customer_name: Optional[str] = None
    product: Optional[str] = None
    source_file: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    confirmed_at: Optional[datetime] = None

    def with_carrier(self, carrier: str) -> "Order":
        return replace(self, suggested_carrier=carrier)


@dataclass(frozen=True)
class SLAStatus:
    level: SLALevel
    urgency: Optional[Urgency] = None


@dataclass
class EvaluatedOrder:
    order: Order
    sla_status: SLAStatus
    time_remaining_hours: Optional[float]
    priority: float
    confirm_deadline: Optional[datetime]
    handover_deadline: Optional[datetime]

    @property
    def order_id(self) -> str:
        return self.order.order_id

    @property
    def platform(self) -> str:
        return self.order.platform

    @property
    def carrier(self) -> Optional[str]:
        return self.order.suggested_carrier

    @property
    def order_value(self) -> float:
        return self.order.order_value

    @property
    def is_expired(self) -> bool:
        return self.sla_status.level == SLALevel.EXPIRED


@dataclass
class DataQuality:
    total: int = 0
    clean: int = 0
    needs_cleaning: int = 0
    errors: int = 0
    duplicates: int = 0


@dataclass
class MonitorSettings:
    interval_seconds: float = 60.0
    critical_threshold_minutes: float = 30.0


@dataclass
class SLAAlert:
    alert_id: str
    alert_type: AlertType
    order_id: str
    message: str
    timestamp: datetime
    acknowledged: bool = False
