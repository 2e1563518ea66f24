"""Leave-gap optimizer

Find the short runs of workdays ("bridges") that, taken as leave, join the
weekends and holidays on either side into one long vacation block, and rank
them by how many days off each leave day buys.

Pipeline:
  1. Timeline Builder - classify every day of the year as off or work
  2. Gap Scanner      - one pass over the timeline collecting bridges
  3. Ranker           - most efficient bridges first
"""

from __future__ import annotations

import calendar
import datetime
import logging
from collections.abc import Iterable, Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from cutiplan.holidays import Holiday, HolidayType, holiday_style

logger = logging.getLogger(__name__)

MONTH_ALL = "all"
DEFAULT_NOTE_WIDTH = 15

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class DayRecord(NamedTuple):
    """One calendar day of the timeline."""

    date: datetime.date
    is_off: bool
    note: str


class Recommendation(NamedTuple):
    """A bridge worth taking as leave, and the vacation it produces."""

    leave_start: datetime.date
    leave_end: datetime.date
    vacation_start: datetime.date
    vacation_end: datetime.date
    cost: int
    reward: int
    efficiency: float
    reason: str
    description: str


class LeavePolicy(NamedTuple):
    """Caller-supplied knobs for a single optimizer run.

    ``month_filter`` is a 0-based month index (0 = January) or ``"all"``.
    """

    observe_cuti: bool = True
    max_bridge_length: int = 2
    min_total_off: int = 4
    month_filter: int | str | None = MONTH_ALL


# ---------------------------------------------------------------------------
# Timeline Builder
# ---------------------------------------------------------------------------


def _first_of_type(holidays: Iterable[Holiday], holiday_type: HolidayType) -> Holiday | None:
    return next((h for h in holidays if h.type == holiday_type), None)


def classify_day(
    date: datetime.date,
    holidays: Sequence[Holiday],
    observe_cuti: bool = True,
) -> DayRecord:
    """Classify a single day as off or work.

    Weekends win over holidays, a national holiday over cuti bersama.
    Observance days never change the classification.
    """
    if date.weekday() >= 5:
        return DayRecord(date, True, "Weekend")

    national = _first_of_type(holidays, HolidayType.NATIONAL)
    if national is not None:
        return DayRecord(date, True, national.name)

    cuti = _first_of_type(holidays, HolidayType.CUTI_BERSAMA)
    if cuti is not None:
        if observe_cuti:
            return DayRecord(date, True, cuti.name)
        return DayRecord(date, False, f"(Cuti: {cuti.name})")

    return DayRecord(date, False, "")


def build_timeline(
    year: int,
    holiday_index: Mapping[str, Sequence[Holiday]] | None,
    observe_cuti: bool = True,
) -> list[DayRecord]:
    """Return one ``DayRecord`` per day from Jan 1 to Dec 31 of *year*."""
    index = holiday_index or {}
    start = datetime.date(year, 1, 1)
    num_days = (datetime.date(year, 12, 31) - start).days + 1

    timeline: list[DayRecord] = []
    for offset in range(num_days):
        d = start + datetime.timedelta(days=offset)
        timeline.append(classify_day(d, index.get(d.isoformat(), ()), observe_cuti))

    logger.debug(
        "Built %d-day timeline for %d: %d off days (observe_cuti=%s)",
        len(timeline),
        year,
        sum(1 for r in timeline if r.is_off),
        observe_cuti,
    )
    return timeline


# ---------------------------------------------------------------------------
# Gap Scanner
# ---------------------------------------------------------------------------


def truncate_note(note: str | None, width: int = DEFAULT_NOTE_WIDTH) -> str:
    """Shorten *note* to *width* characters plus an ellipsis marker.

    Empty notes read as ``"Weekend"``.
    """
    return f"{(note or 'Weekend')[:width]}..."


def efficiency(reward: int, cost: int) -> float:
    """Days off per leave day, rounded half-up to one decimal."""
    ratio = Decimal(reward) / Decimal(cost)
    return float(ratio.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _month_matches(date: datetime.date, month_filter: int | str | None) -> bool:
    if month_filter is None or month_filter == MONTH_ALL:
        return True
    return date.month - 1 == month_filter


def scan_gaps(
    timeline: Sequence[DayRecord],
    today: datetime.date,
    *,
    max_bridge_length: int = 2,
    min_total_off: int = 4,
    month_filter: int | str | None = MONTH_ALL,
    note_width: int = DEFAULT_NOTE_WIDTH,
) -> list[Recommendation]:
    """Collect every qualifying bridge in *timeline*, in calendar order.

    A bridge is a maximal run of workdays.  It qualifies when it is at most
    *max_bridge_length* days long, together with the off-clusters on either
    side yields at least *min_total_off* days, starts on or after *today*,
    and starts in *month_filter* (unless ``"all"``).

    Non-positive *max_bridge_length* or *min_total_off* yield no
    recommendations.
    """
    if max_bridge_length <= 0 or min_total_off <= 0:
        logger.debug(
            "Degenerate policy (max_bridge_length=%d, min_total_off=%d): no recommendations",
            max_bridge_length,
            min_total_off,
        )
        return []

    if isinstance(today, datetime.datetime):
        today = today.date()

    n = len(timeline)
    recs: list[Recommendation] = []
    bridges = 0
    i = 0

    while i < n:
        if timeline[i].is_off:
            i += 1
            continue

        bridge_start = i
        while i < n and not timeline[i].is_off:
            i += 1
        bridge_end = i - 1
        work_days = i - bridge_start
        bridges += 1

        if work_days == 0 or work_days > max_bridge_length:
            continue

        prev_start = bridge_start
        while prev_start > 0 and timeline[prev_start - 1].is_off:
            prev_start -= 1
        prev_off_days = bridge_start - prev_start

        next_end = i
        while next_end < n and timeline[next_end].is_off:
            next_end += 1
        next_off_days = next_end - i

        total_off = prev_off_days + work_days + next_off_days
        if total_off < min_total_off:
            continue

        leave_start = timeline[bridge_start].date
        if leave_start < today:
            continue
        if not _month_matches(leave_start, month_filter):
            continue

        prev_note = timeline[bridge_start - 1].note if bridge_start > 0 else ""
        next_note = timeline[i].note if i < n else ""

        recs.append(
            Recommendation(
                leave_start=leave_start,
                leave_end=timeline[bridge_end].date,
                vacation_start=timeline[prev_start].date,
                vacation_end=timeline[next_end - 1].date,
                cost=work_days,
                reward=total_off,
                efficiency=efficiency(total_off, work_days),
                reason=f"Bridge {work_days} day(s)",
                description=(
                    f"Connects {truncate_note(prev_note, note_width)} "
                    f"with {truncate_note(next_note, note_width)}"
                ),
            )
        )

    logger.debug("Scanned %d workday runs, %d qualify", bridges, len(recs))
    return recs


# ---------------------------------------------------------------------------
# Ranker
# ---------------------------------------------------------------------------


def rank_recommendations(recs: Iterable[Recommendation]) -> list[Recommendation]:
    """Sort by efficiency, then reward, both descending.

    ``sorted`` is stable, so exact ties keep their calendar order.
    """
    return sorted(recs, key=lambda r: (-r.efficiency, -r.reward))


# ---------------------------------------------------------------------------
# Optimizer
# ---------------------------------------------------------------------------


class LeaveOptimizer:
    """Suggests which workdays to take off around Indonesian holidays.

    Weekends, national holidays and (when the company observes them) cuti
    bersama days are already off.  Spending leave on the short runs of
    workdays between them *bridges* those off-clusters into one long break.

    The optimizer keeps no state between runs beyond its inputs, so it is
    cheap to call :meth:`recommend` again after any policy change.
    """

    def __init__(
        self,
        year: int,
        holiday_index: Mapping[str, Sequence[Holiday]] | None = None,
        policy: LeavePolicy | None = None,
        *,
        note_width: int = DEFAULT_NOTE_WIDTH,
    ):
        self.year = year
        self.holiday_index: Mapping[str, Sequence[Holiday]] = holiday_index or {}
        self.policy = policy if policy is not None else LeavePolicy()
        self.note_width = note_width
        # (observe_cuti, timeline) of the last build
        self._timeline: tuple[bool, list[DayRecord]] | None = None

    @property
    def timeline(self) -> list[DayRecord]:
        """Day records for the current policy, rebuilt when ``observe_cuti`` changes."""
        observe_cuti = self.policy.observe_cuti
        if self._timeline is None or self._timeline[0] != observe_cuti:
            self._timeline = (
                observe_cuti,
                build_timeline(self.year, self.holiday_index, observe_cuti),
            )
        return self._timeline[1]

    def recommend(self, today: datetime.date | None = None) -> list[Recommendation]:
        """Return ranked bridge recommendations starting on or after *today*.

        *today* defaults to the current local date.
        """
        if today is None:
            today = datetime.date.today()
        recs = scan_gaps(
            self.timeline,
            today,
            max_bridge_length=self.policy.max_bridge_length,
            min_total_off=self.policy.min_total_off,
            month_filter=self.policy.month_filter,
            note_width=self.note_width,
        )
        return rank_recommendations(recs)


# ---------------------------------------------------------------------------
# Output formatting
# ---------------------------------------------------------------------------


def _date_range(start: datetime.date, end: datetime.date) -> str:
    if start == end:
        return start.strftime("%a, %b %d")
    return f"{start.strftime('%a, %b %d')} -> {end.strftime('%a, %b %d')}"


def format_recommendations(recs: Sequence[Recommendation], optimizer: LeaveOptimizer) -> str:
    """Return a human-readable report of the ranked recommendations."""
    lines: list[str] = []
    w = 64
    policy = optimizer.policy

    lines.append("")
    lines.append("=" * w)
    lines.append(f"  LEAVE RECOMMENDATIONS {optimizer.year}")
    lines.append(
        f"  Cuti bersama: {'holiday' if policy.observe_cuti else 'workday'}"
        f"  |  Max leave: {policy.max_bridge_length}"
        f"  |  Min total off: {policy.min_total_off}"
    )
    lines.append("=" * w)

    if not recs:
        lines.append("  No future opportunities found.")
        lines.append("  Try adjusting the month filter or parameters.")
        return "\n".join(lines)

    for i, rec in enumerate(recs, 1):
        day_word = "day" if rec.cost == 1 else "days"
        lines.append(f"  {i:>2}. Request leave: {_date_range(rec.leave_start, rec.leave_end)}")
        lines.append(f"      Cost: {rec.cost} {day_word}  ({rec.reason})")
        lines.append(f"      Vacation: {_date_range(rec.vacation_start, rec.vacation_end)}")
        lines.append(f"      {rec.reward} days off  |  Efficiency: {rec.efficiency:.1f}x")
        lines.append(f"      {rec.description}")
        lines.append("")

    total_cost = sum(r.cost for r in recs)
    lines.append(
        f"  {len(recs)} opportunit{'y' if len(recs) == 1 else 'ies'}, "
        f"{total_cost} leave day{'s' if total_cost != 1 else ''} in total"
    )
    return "\n".join(lines)


def format_calendar_view(recs: Sequence[Recommendation], optimizer: LeaveOptimizer) -> str:
    """Return Sunday-first month grids for months containing recommended leave."""
    year = optimizer.year
    leave_days: set[datetime.date] = set()
    for rec in recs:
        d = rec.leave_start
        while d <= rec.leave_end:
            leave_days.add(d)
            d += datetime.timedelta(days=1)

    active_months = sorted({d.month for d in leave_days})
    if not active_months:
        return ""

    national = holiday_style(HolidayType.NATIONAL)
    cuti = holiday_style(HolidayType.CUTI_BERSAMA)
    lines: list[str] = [
        "",
        f"  Calendar View {year}",
        f"  Legend: L=Leave  {national.marker}=Holiday (off)  "
        f"{cuti.marker}={cuti.label} (workday)",
        "",
    ]

    timeline = optimizer.timeline
    cal = calendar.Calendar(firstweekday=calendar.SUNDAY)

    for month in active_months:
        lines.append(f"  {calendar.month_name[month]} {year}")
        lines.append("  Su  Mo  Tu  We  Th  Fr  Sa")

        row = ""
        for day_num, weekday in cal.itermonthdays2(year, month):
            if day_num == 0:
                row += "    "
            else:
                d = datetime.date(year, month, day_num)
                types = {h.type for h in optimizer.holiday_index.get(d.isoformat(), ())}
                is_off = timeline[(d - timeline[0].date).days].is_off
                if d in leave_days:
                    cell = f" {day_num:>2}L"
                elif is_off and types & {HolidayType.NATIONAL, HolidayType.CUTI_BERSAMA}:
                    cell = f" {day_num:>2}{national.marker}"
                elif HolidayType.CUTI_BERSAMA in types:
                    cell = f" {day_num:>2}{cuti.marker}"
                else:
                    cell = f"  {day_num:>2}"
                row += cell

            if weekday == calendar.SATURDAY:
                lines.append(row)
                row = ""

        if row.strip():
            lines.append(row)
        lines.append("")

    return "\n".join(lines)
