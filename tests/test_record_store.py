"""
Unit tests for RecordStore persistence and editing.
"""

import pytest
import json
import tempfile
from datetime import date
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities import Category, DayRecord
from infrastructure.record_store import DEFAULT_HOURLY_WAGE, RecordStore, YearData

TODAY = date(2025, 4, 15)


@pytest.fixture
def store():
    return RecordStore(today=TODAY)


@pytest.fixture
def tmp_path_json():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "data" / "kintai_data.json"


class TestDefaults:
    """Tests for a fresh store."""

    def test_initial_state(self, store):
        assert store.hourly_wage == DEFAULT_HOURLY_WAGE
        assert store.year == 2025
        assert store.to_dict() == {
            "hourlyWage": 1500,
            "year": 2025,
            "yearData": {"2025": {"companyHolidays": [], "days": {}}},
        }

    def test_get_day_creates_default(self, store):
        record = store.get_day(2025, "2025-04-01")
        assert record == DayRecord()
        assert "2025-04-01" in store.to_dict()["yearData"]["2025"]["days"]

    def test_get_day_returns_copy(self, store):
        record = store.get_day(2025, "2025-04-01")
        record.check_in = "09:30"
        assert store.get_day(2025, "2025-04-01").check_in is None


class TestDayEdits:
    """Tests for set_day and month lookups."""

    def test_partial_update(self, store):
        store.set_day(2025, "2025-04-01", check_in="09:30")
        store.set_day(2025, "2025-04-01", check_out="18:30")
        record = store.get_day(2025, "2025-04-01")
        assert record.check_in == "09:30"
        assert record.check_out == "18:30"
        assert record.category == Category.NORMAL

    def test_unknown_field_rejected(self, store):
        with pytest.raises(TypeError):
            store.set_day(2025, "2025-04-01", bogus=1)

    def test_records_for_month(self, store):
        store.set_day(2025, "2025-04-01", check_in="09:30")
        store.set_day(2025, "2025-04-30", note="月末")
        store.set_day(2025, "2025-05-01", check_in="09:30")

        records = store.records_for_month(2025, 4)

        assert set(records) == {"2025-04-01", "2025-04-30"}
        assert records["2025-04-30"].note == "月末"

    def test_years_are_independent(self, store):
        store.set_day(2025, "2025-04-01", check_in="09:30")
        assert store.records_for_month(2026, 4) == {}


class TestSettings:
    """Tests for wage and year settings."""

    def test_wage_is_rounded(self, store):
        assert store.set_hourly_wage(1234.5) == 1235
        assert store.hourly_wage == 1235

    @pytest.mark.parametrize("value", [-1, float("nan"), float("inf"), "1500"])
    def test_invalid_wage(self, store, value):
        with pytest.raises(ValueError):
            store.set_hourly_wage(value)
        assert store.hourly_wage == DEFAULT_HOURLY_WAGE

    def test_zero_wage_allowed(self, store):
        assert store.set_hourly_wage(0) == 0

    @pytest.mark.parametrize("value, expected", [(1999, 2000), (2100, 2099), (2030, 2030)])
    def test_year_is_clamped(self, store, value, expected):
        assert store.set_year(value) == expected
        assert store.year == expected
        assert str(expected) in store.to_dict()["yearData"]


class TestCompanyHolidays:
    """Tests for the per-year company holiday list."""

    def test_add_keeps_sorted_and_unique(self, store):
        store.add_company_holiday(2025, "2025-12-30")
        store.add_company_holiday(2025, "2025-08-13")
        store.add_company_holiday(2025, "2025-12-30")

        data = store.to_dict()["yearData"]["2025"]["companyHolidays"]
        assert data == ["2025-08-13", "2025-12-30"]
        assert store.company_holidays(2025) == frozenset(data)

    def test_add_other_year_rejected(self, store):
        with pytest.raises(ValueError, match="対象年と同じ年の日付を選択してください。"):
            store.add_company_holiday(2025, "2026-01-02")

    def test_add_invalid_date_rejected(self, store):
        with pytest.raises(ValueError):
            store.add_company_holiday(2025, "2025-02-30")

    def test_remove(self, store):
        store.add_company_holiday(2025, "2025-08-13")
        store.remove_company_holiday(2025, "2025-08-13")
        store.remove_company_holiday(2025, "2025-08-14")
        assert store.company_holidays(2025) == frozenset()


class TestPersistence:
    """Tests for load/save."""

    def test_autosave_round_trip(self, tmp_path_json):
        store = RecordStore(tmp_path_json, today=TODAY)
        store.set_day(2025, "2025-04-01", check_in="09:30", category=Category.HOLIDAY_WORK)
        store.set_hourly_wage(1800)

        reloaded = RecordStore(tmp_path_json, today=TODAY)
        reloaded.load()

        assert reloaded.hourly_wage == 1800
        record = reloaded.get_day(2025, "2025-04-01")
        assert record.check_in == "09:30"
        assert record.category == Category.HOLIDAY_WORK

    def test_persisted_shape(self, tmp_path_json):
        store = RecordStore(tmp_path_json, today=TODAY)
        store.set_day(2025, "2025-04-01", check_in="09:30", note="メモ", note_open=True)

        data = json.loads(tmp_path_json.read_text(encoding='utf-8'))
        assert data["yearData"]["2025"]["days"]["2025-04-01"] == {
            "in": "09:30",
            "out": None,
            "category": "normal",
            "note": "メモ",
            "noteOpen": True,
        }

    def test_no_autosave(self, tmp_path_json):
        store = RecordStore(tmp_path_json, today=TODAY, autosave=False)
        store.set_day(2025, "2025-04-01", check_in="09:30")
        assert not tmp_path_json.exists()
        store.save()
        assert tmp_path_json.exists()

    def test_missing_file_gives_defaults(self, tmp_path_json):
        store = RecordStore(tmp_path_json, today=TODAY)
        store.load()
        assert store.hourly_wage == DEFAULT_HOURLY_WAGE

    def test_broken_file_gives_defaults(self, tmp_path_json):
        tmp_path_json.parent.mkdir(parents=True)
        tmp_path_json.write_text("{broken", encoding='utf-8')

        store = RecordStore(tmp_path_json, today=TODAY)
        store.load()

        assert store.hourly_wage == DEFAULT_HOURLY_WAGE
        assert store.year == 2025

    def test_load_skips_invalid_entries(self, tmp_path_json):
        tmp_path_json.parent.mkdir(parents=True)
        tmp_path_json.write_text(json.dumps({
            "hourlyWage": 1200,
            "year": 2024,
            "yearData": {
                "2024": {
                    "companyHolidays": ["2024-12-30", "not-a-date"],
                    "days": {
                        "2024-01-05": {"in": "09:30", "category": "unknown"},
                        "garbage": {"in": "09:30"},
                    },
                },
            },
        }), encoding='utf-8')

        store = RecordStore(tmp_path_json, today=TODAY)
        store.load()

        assert store.hourly_wage == 1200
        assert store.year == 2024
        assert store.company_holidays(2024) == frozenset({"2024-12-30"})
        record = store.get_day(2024, "2024-01-05")
        assert record.check_in == "09:30"
        assert record.category == Category.NORMAL
        assert "garbage" not in store.to_dict()["yearData"]["2024"]["days"]

    def test_replace_state(self, store):
        store.set_day(2025, "2025-04-01", check_in="09:30")
        store.replace_state({"hourlyWage": 900, "year": 2023, "yearData": {}})

        assert store.hourly_wage == 900
        assert store.year == 2023
        assert store.records_for_month(2025, 4) == {}

    @pytest.mark.parametrize("value,expected", [(123456, 2099), (1500, 2000)])
    def test_replace_state_clamps_year(self, store, value, expected):
        store.replace_state({"hourlyWage": 900, "year": value, "yearData": {}})
        assert store.year == expected
        assert str(expected) in store.to_dict()["yearData"]

    @pytest.mark.parametrize("wage", [float("inf"), float("nan"), -1])
    def test_replace_state_rejects_bad_wage(self, store, wage):
        store.set_day(2025, "2025-04-01", check_in="09:30")
        store.add_company_holiday(2025, "2025-12-29")

        with pytest.raises(ValueError):
            store.replace_state({"hourlyWage": wage, "year": 2026, "yearData": {}})

        assert store.hourly_wage == DEFAULT_HOURLY_WAGE
        assert store.year == 2025
        assert store.get_day(2025, "2025-04-01").check_in == "09:30"
        assert store.company_holidays(2025) == frozenset({"2025-12-29"})

    def test_load_clamps_year(self, tmp_path_json):
        tmp_path_json.parent.mkdir(parents=True)
        tmp_path_json.write_text(
            json.dumps({"hourlyWage": 1200, "year": 123456, "yearData": {}}),
            encoding='utf-8'
        )

        store = RecordStore(tmp_path_json, today=TODAY)
        store.load()

        assert store.hourly_wage == 1200
        assert store.year == 2099

    def test_load_infinite_wage_gives_defaults(self, tmp_path_json):
        tmp_path_json.parent.mkdir(parents=True)
        tmp_path_json.write_text(
            '{"hourlyWage": 1e999, "year": 2024, "yearData": {}}', encoding='utf-8'
        )

        store = RecordStore(tmp_path_json, today=TODAY)
        store.load()

        assert store.hourly_wage == DEFAULT_HOURLY_WAGE
        assert store.year == 2025


class TestYearData:
    """Tests for YearData conversion."""

    def test_from_dict_defaults(self):
        data = YearData.from_dict({})
        assert data.company_holidays == []
        assert data.days == {}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
