from __future__ import annotations

import json
import os
import pathlib
import tempfile

import pytest

from cutiplan.holidays import (
    Holiday,
    HolidayType,
    build_holiday_index,
    classify_holiday_type,
    default_description,
    holiday_style,
    holidays_by_month,
    load_holidays,
    parse_holiday_records,
)

DATA_DIR = pathlib.Path(__file__).parent / "data"


def _write(content: str) -> str:
    fd, path = tempfile.mkstemp(suffix=".json")
    with os.fdopen(fd, "w") as f:
        f.write(content)
    return path


class TestClassification:
    def test_cuti_bersama_by_name(self) -> None:
        assert classify_holiday_type("Cuti Bersama Idul Fitri") == HolidayType.CUTI_BERSAMA
        assert classify_holiday_type("cuti bersama natal") == HolidayType.CUTI_BERSAMA

    def test_everything_else_is_national(self) -> None:
        assert classify_holiday_type("Hari Raya Natal") == HolidayType.NATIONAL
        assert classify_holiday_type("Cuti Tahunan") == HolidayType.NATIONAL

    def test_default_descriptions(self) -> None:
        assert "Tanggal Merah" in default_description(HolidayType.NATIONAL)
        assert "Cuti Bersama" in default_description(HolidayType.CUTI_BERSAMA)

    def test_styles_cover_every_type(self) -> None:
        markers = {holiday_style(t).marker for t in HolidayType}
        assert len(markers) == len(HolidayType)
        assert holiday_style(HolidayType.NATIONAL).label == "National Holiday"


class TestParsing:
    def test_minimal_record(self) -> None:
        [h] = parse_holiday_records([{"date": "2025-12-26", "name": "Cuti Bersama Natal"}])
        assert h == Holiday(
            "2025-12-26",
            "Cuti Bersama Natal",
            HolidayType.CUTI_BERSAMA,
            default_description(HolidayType.CUTI_BERSAMA),
        )

    def test_explicit_type_and_description(self) -> None:
        [h] = parse_holiday_records(
            [
                {
                    "date": "2025-02-14",
                    "name": "Hari Valentine",
                    "type": "observance",
                    "description": "Not a day off.",
                }
            ]
        )
        assert h.type == HolidayType.OBSERVANCE
        assert h.description == "Not a day off."

    def test_missing_name(self) -> None:
        with pytest.raises(ValueError, match="missing a name"):
            parse_holiday_records([{"date": "2025-01-01"}])

    def test_bad_date(self) -> None:
        with pytest.raises(ValueError, match="Invalid holiday date"):
            parse_holiday_records([{"date": "2025-13-01", "name": "Nope"}])

    def test_unknown_type(self) -> None:
        with pytest.raises(ValueError, match="Unknown holiday type"):
            parse_holiday_records([{"date": "2025-01-01", "name": "X", "type": "REGIONAL"}])

    def test_non_mapping_record(self) -> None:
        with pytest.raises(ValueError):
            parse_holiday_records(["2025-01-01"])  # type: ignore[list-item]


class TestLoadHolidays:
    def test_load_fixture(self) -> None:
        holidays = load_holidays(DATA_DIR / "holidays_2025.json")
        assert len(holidays) == 27
        assert holidays[0].name == "Tahun Baru Masehi"
        assert sum(1 for h in holidays if h.type == HolidayType.CUTI_BERSAMA) == 10

    def test_load_wrapped_object(self) -> None:
        path = _write(json.dumps({"holidays": [{"date": "2025-08-17", "name": "HUT RI"}]}))
        try:
            assert [h.name for h in load_holidays(path)] == ["HUT RI"]
        finally:
            os.unlink(path)

    def test_invalid_json(self) -> None:
        path = _write("not json{{{")
        try:
            with pytest.raises(ValueError, match="Invalid JSON"):
                load_holidays(path)
        finally:
            os.unlink(path)

    def test_wrong_shape(self) -> None:
        path = _write(json.dumps({"year": 2025}))
        try:
            with pytest.raises(ValueError, match="list of records"):
                load_holidays(path)
        finally:
            os.unlink(path)

    def test_missing_file(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_holidays("/nonexistent/holidays.json")


class TestHolidayIndex:
    def test_groups_by_date_in_order(self) -> None:
        holidays = parse_holiday_records(
            [
                {"date": "2025-03-31", "name": "Idul Fitri"},
                {"date": "2025-03-31", "name": "Cuti Bersama Idul Fitri"},
                {"date": "2025-04-01", "name": "Idul Fitri"},
            ]
        )
        index = build_holiday_index(holidays)
        assert list(index) == ["2025-03-31", "2025-04-01"]
        assert [h.name for h in index["2025-03-31"]] == ["Idul Fitri", "Cuti Bersama Idul Fitri"]

    def test_duplicate_names_suppressed(self) -> None:
        holidays = parse_holiday_records(
            [
                {"date": "2025-12-25", "name": "Hari Raya Natal"},
                {"date": "2025-12-25", "name": "Hari Raya Natal", "type": "OBSERVANCE"},
            ]
        )
        index = build_holiday_index(holidays)
        assert len(index["2025-12-25"]) == 1
        assert index["2025-12-25"][0].type == HolidayType.NATIONAL

    def test_empty(self) -> None:
        assert build_holiday_index([]) == {}

    def test_holidays_by_month(self) -> None:
        index = build_holiday_index(load_holidays(DATA_DIR / "holidays_2025.json"))
        index["2024-12-25"] = parse_holiday_records([{"date": "2024-12-25", "name": "Natal"}])
        months = holidays_by_month(index, 2025)
        assert sorted(months) == [1, 2, 3, 4, 5, 6, 8, 9, 12]
        assert [h.date for h in months[12]] == ["2025-12-25", "2025-12-26"]
        assert len(months[4]) == 6
