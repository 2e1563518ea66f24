"""Cuti Planner.

Suggest which workdays to take as leave so that Indonesian public holidays,
cuti bersama and weekends join up into longer breaks.
"""

from cutiplan.holidays import (
    Holiday,
    HolidayType,
    build_holiday_index,
    get_holidays,
    load_holidays,
)
from cutiplan.optimizer import (
    DayRecord,
    LeaveOptimizer,
    LeavePolicy,
    Recommendation,
    build_timeline,
    rank_recommendations,
    scan_gaps,
)

__all__ = [
    "DayRecord",
    "Holiday",
    "HolidayType",
    "LeaveOptimizer",
    "LeavePolicy",
    "Recommendation",
    "build_holiday_index",
    "build_timeline",
    "get_holidays",
    "load_holidays",
    "rank_recommendations",
    "scan_gaps",
]
