"""Typer CLI for the Cuti Planner leave optimizer."""

from __future__ import annotations

import calendar
import datetime
import json
import logging
import pathlib
import sys

import typer

from cutiplan.holidays import (
    PRESETS,
    Holiday,
    HolidayIndex,
    HolidayType,
    build_holiday_index,
    classify_holiday_type,
    default_description,
    get_holidays,
    holiday_style,
    holidays_by_month,
    load_holidays,
    parse_holiday_records,
)
from cutiplan.optimizer import (
    MONTH_ALL,
    LeaveOptimizer,
    LeavePolicy,
    Recommendation,
    format_calendar_view,
    format_recommendations,
)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_COUNTRY_HELP = (
    "Holiday preset: "
    + "; ".join(f"{key} = {desc}" for key, desc in sorted(PRESETS.items()))
    + ". Use 'none' to skip."
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="cutiplan",
    help="Cuti Planner: find the workdays worth taking off to turn Indonesian "
    "holidays and weekends into long breaks.",
    add_completion=False,
)


def _parse_date(value: str) -> datetime.date:
    """Parse a YYYY-MM-DD date string."""
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"Invalid date format {value!r}. Use YYYY-MM-DD.") from None


def _parse_month(value: str) -> int | str:
    """Parse ``all`` or a month name into a 0-based month index."""
    v = value.strip().lower()
    if v == MONTH_ALL:
        return MONTH_ALL
    for i in range(1, 13):
        if v in (calendar.month_abbr[i].lower(), calendar.month_name[i].lower()):
            return i - 1
    raise typer.BadParameter(f"Invalid month {value!r}. Use 'all' or a month name (jan..dec).")


def _config_month(value: object) -> int | str:
    # Config files may give the 0-based index directly
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return _parse_month(str(value))


def _parse_custom_holiday(value: str) -> Holiday:
    """Parse ``YYYY-MM-DD`` or ``YYYY-MM-DD:Name`` into a holiday."""
    date_part, _, name = value.partition(":")
    d = _parse_date(date_part.strip())
    name = name.strip() or "Company holiday"
    holiday_type = classify_holiday_type(name)
    return Holiday(d.isoformat(), name, holiday_type, default_description(holiday_type))


def _current_year() -> int:
    return datetime.date.today().year


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Config and holiday collection
# ---------------------------------------------------------------------------


def _load_config(path: str) -> dict[str, object]:
    """Load and validate a JSON config file."""
    p = pathlib.Path(path)
    if not p.exists():
        raise _fail(f"Config file not found: {path}")

    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise _fail(f"Invalid JSON in config file: {exc}") from None

    if not isinstance(data, dict):
        raise _fail("Config file must contain a JSON object.")

    return data


def _load_holidays_file(path: str) -> list[Holiday]:
    try:
        return load_holidays(path)
    except FileNotFoundError:
        raise _fail(f"Holidays file not found: {path}") from None
    except ValueError as exc:
        raise _fail(str(exc)) from None


def _collect_holidays(
    year: int,
    country: str | None,
    holidays_file: str | None,
    extra_records: object,
    custom: list[str] | None,
) -> HolidayIndex:
    """Merge preset, file, config and command-line holidays into one index."""
    holidays: list[Holiday] = []

    if country and country != "none":
        try:
            holidays.extend(get_holidays(country, year))
        except KeyError as exc:
            raise _fail(str(exc.args[0])) from None

    if holidays_file:
        holidays.extend(_load_holidays_file(holidays_file))

    if extra_records:
        if not isinstance(extra_records, list):
            raise _fail("Config 'holidays' must be a list of records.")
        try:
            holidays.extend(parse_holiday_records(extra_records))
        except ValueError as exc:
            raise _fail(str(exc)) from None

    for value in custom or []:
        holidays.append(_parse_custom_holiday(value))

    index = build_holiday_index(sorted(holidays, key=lambda h: h.date))
    logger.debug("Holiday index holds %d dates", len(index))
    return index


def _config_value(data: dict[str, object], key: str, kind: type, default: object) -> object:
    value = data.get(key, default)
    if not isinstance(value, kind):
        raise _fail(
            f"Invalid policy value in config file: {key!r} must be {kind.__name__}, got {value!r}"
        )
    return value


def _config_int(data: dict[str, object], key: str, default: int) -> int:
    # bool is a subclass of int
    if isinstance(data.get(key), bool):
        raise _fail(f"Invalid policy value in config file: {key!r} must be int, got {data[key]!r}")
    return _config_value(data, key, int, default)  # type: ignore[return-value]


def _build_policy(
    data: dict[str, object],
    observe_cuti: bool | None,
    max_bridge: int | None,
    min_off: int | None,
    month: str | None,
) -> LeavePolicy:
    """Combine config-file values with explicit command-line overrides."""
    defaults = LeavePolicy()
    policy = LeavePolicy(
        observe_cuti=_config_value(data, "observe_cuti", bool, defaults.observe_cuti),
        max_bridge_length=_config_int(data, "max_bridge_length", defaults.max_bridge_length),
        min_total_off=_config_int(data, "min_total_off", defaults.min_total_off),
        month_filter=_config_month(data.get("month", MONTH_ALL)),
    )

    if observe_cuti is not None:
        policy = policy._replace(observe_cuti=observe_cuti)
    if max_bridge is not None:
        policy = policy._replace(max_bridge_length=max_bridge)
    if min_off is not None:
        policy = policy._replace(min_total_off=min_off)
    if month is not None:
        policy = policy._replace(month_filter=_parse_month(month))
    return policy


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def optimize(
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Target year. Defaults to the config file's year or the current year.",
    ),
    holidays_file: str | None = typer.Option(
        None,
        "--holidays-file",
        "-f",
        help="JSON file with holiday records ({date, name[, type, description]}).",
    ),
    holiday: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--holiday",
        "-H",
        help="Additional holiday, YYYY-MM-DD or YYYY-MM-DD:Name. Repeatable.",
    ),
    country: str | None = typer.Option(
        "id",
        "--country",
        "-c",
        help=_COUNTRY_HELP,
    ),
    observe_cuti: bool | None = typer.Option(
        None,
        "--observe-cuti/--no-observe-cuti",
        help="Treat cuti bersama days as days off. [default: observe]",
    ),
    max_bridge: int | None = typer.Option(
        None,
        "--max-bridge",
        "-m",
        help="Longest run of workdays you are willing to take as leave. [default: 2]",
        min=1,
    ),
    min_off: int | None = typer.Option(
        None,
        "--min-off",
        "-n",
        help="Minimum consecutive days off for a suggestion. [default: 4]",
        min=1,
    ),
    month: str | None = typer.Option(
        None,
        "--month",
        help="Only suggest leave starting in this month (jan..dec), or 'all'.",
    ),
    today: str | None = typer.Option(
        None,
        "--today",
        help="Reference date (YYYY-MM-DD); earlier bridges are skipped. Defaults to today.",
    ),
    config: str | None = typer.Option(
        None,
        "--config",
        help="Path to a JSON config file with policy and holidays.",
    ),
    show_calendar: bool = typer.Option(
        True,
        "--calendar/--no-calendar",
        help="Show month-by-month calendar view.",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        help="Output results as JSON.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug details to stderr.",
    ),
) -> None:
    """Suggest which workdays to take off for the longest breaks."""
    _configure_logging(verbose)

    data = _load_config(config) if config is not None else {}

    try:
        resolved_year = year if year is not None else int(data.get("year", _current_year()))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise _fail(f"Invalid year in config file: {data.get('year')!r}") from None

    reference = _parse_date(today) if today is not None else datetime.date.today()
    policy = _build_policy(data, observe_cuti, max_bridge, min_off, month)

    file_path = holidays_file or data.get("holidays_file")
    index = _collect_holidays(
        resolved_year,
        country,
        str(file_path) if file_path else None,
        data.get("holidays"),
        holiday,
    )

    optimizer = LeaveOptimizer(resolved_year, index, policy)
    recs = optimizer.recommend(today=reference)

    if output_json:
        _print_json(recs, optimizer, reference)
    else:
        typer.echo(format_recommendations(recs, optimizer))
        if show_calendar:
            typer.echo(format_calendar_view(recs, optimizer))


def _print_json(
    recs: list[Recommendation], optimizer: LeaveOptimizer, today: datetime.date
) -> None:
    def _serialize(rec: Recommendation) -> dict[str, object]:
        return {
            "leave_start": rec.leave_start.isoformat(),
            "leave_end": rec.leave_end.isoformat(),
            "vacation_start": rec.vacation_start.isoformat(),
            "vacation_end": rec.vacation_end.isoformat(),
            "cost": rec.cost,
            "reward": rec.reward,
            "efficiency": rec.efficiency,
            "reason": rec.reason,
            "description": rec.description,
        }

    policy = optimizer.policy
    output = {
        "year": optimizer.year,
        "today": today.isoformat(),
        "policy": {
            "observe_cuti": policy.observe_cuti,
            "max_bridge_length": policy.max_bridge_length,
            "min_total_off": policy.min_total_off,
            "month": policy.month_filter,
        },
        "recommendations": [_serialize(r) for r in recs],
    }
    json.dump(output, sys.stdout, indent=2)
    typer.echo()


@app.command()
def holidays(
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Year to list holidays for. Defaults to the current year.",
    ),
    country: str | None = typer.Option(
        "id",
        "--country",
        "-c",
        help=_COUNTRY_HELP,
    ),
    holidays_file: str | None = typer.Option(
        None,
        "--holidays-file",
        "-f",
        help="JSON file with holiday records.",
    ),
) -> None:
    """List a year's holidays grouped by month."""
    resolved_year = year if year is not None else _current_year()
    index = _collect_holidays(resolved_year, country, holidays_file, None, None)
    by_month = holidays_by_month(index, resolved_year)

    typer.echo(f"  Holidays in {resolved_year}")
    if not by_month:
        typer.echo("  (none)")
        return

    for month_num, entries in by_month.items():
        typer.echo()
        typer.echo(f"  {calendar.month_name[month_num]}")
        for h in entries:
            d = datetime.date.fromisoformat(h.date)
            label = holiday_style(h.type).label
            typer.echo(f"    {d.strftime('%a, %b %d'):>12}  {h.name}  [{label}]")

    national = sum(
        1 for entries in by_month.values() for h in entries if h.type == HolidayType.NATIONAL
    )
    typer.echo()
    typer.echo(f"  {national} national holiday{'s' if national != 1 else ''}")
    if country in PRESETS and not holidays_file:
        typer.echo(
            f"  Note: the '{country}' preset lists fixed-date holidays only. "
            "Pass --holidays-file for Idul Fitri, Nyepi and other moving holidays."
        )


def main() -> None:
    """Entry point for the CLI."""
    app()
