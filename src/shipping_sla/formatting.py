"""Human-readable rendering of time remaining."""
import math
from typing import Optional

from .config import HOURS_PER_DAY, MINUTES_PER_HOUR
from .utils import round_half_up

NO_DEADLINE = "—"


_UNITS = {
    "vi": {"minutes": "phút", "minute_suffix": "p"},
    "en": {"minutes": "minutes", "minute_suffix": "m"},
}


def format_time_remaining(hours: Optional[float], locale: str = "vi") -> str:
    """
    Render hours remaining for the orders table.

    Under 2 hours the value is shown in whole minutes ("119 phút"); from
    2 hours up as hours plus minutes ("2h 30p"), dropping the minutes when
    they round to zero ("2h").
    """
    if hours is None:
        return NO_DEADLINE
    units = _UNITS.get(locale, _UNITS["vi"])

    if hours < 2:
        minutes = round_half_up(hours * MINUTES_PER_HOUR)
        return f"{minutes} {units['minutes']}"

    whole_hours = math.floor(hours)
    remaining_minutes = round_half_up((hours - whole_hours) * MINUTES_PER_HOUR)
    if remaining_minutes == MINUTES_PER_HOUR:
        whole_hours += 1
        remaining_minutes = 0

    if remaining_minutes > 0:
        return f"{whole_hours}h {remaining_minutes}{units['minute_suffix']}"
    return f"{whole_hours}h"


def format_compact_duration(hours: Optional[float]) -> str:
    """Short form for summary cards: 45p, 3.5h, 2.1d."""
    if hours is None:
        return NO_DEADLINE
    if hours < 1:
        return f"{round_half_up(hours * MINUTES_PER_HOUR)}p"
    elif hours < HOURS_PER_DAY:
        return f"{round_half_up(hours * 10) / 10}h"
    else:
        return f"{round_half_up(hours / HOURS_PER_DAY * 10) / 10}d"
