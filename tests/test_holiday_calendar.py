"""
Unit tests for the Japanese holiday calendar.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.holiday_calendar import (
    GENERIC_HOLIDAY, SUBSTITUTE_HOLIDAY,
    autumnal_equinox_day, build_base_holidays, compute_holidays,
    nth_monday, resolve_derived_holidays, vernal_equinox_day
)


class TestHelpers:
    """Tests for date helper functions."""

    def test_nth_monday_when_month_starts_on_monday(self):
        # 2024-01-01 is a Monday
        assert nth_monday(2024, 1, 1) == 1
        assert nth_monday(2024, 1, 2) == 8

    def test_nth_monday_mid_week_start(self):
        # 2025-01-01 is a Wednesday
        assert nth_monday(2025, 1, 2) == 13
        assert nth_monday(2025, 7, 3) == 21
        assert nth_monday(2025, 10, 2) == 13

    def test_vernal_equinox(self):
        assert vernal_equinox_day(2020) == 20
        assert vernal_equinox_day(2023) == 21
        assert vernal_equinox_day(2025) == 20

    def test_autumnal_equinox(self):
        assert autumnal_equinox_day(2024) == 23
        assert autumnal_equinox_day(2025) == 23


class TestBaseHolidays:
    """Tests for statutory holidays before derived ones."""

    def test_fixed_holidays(self):
        base = build_base_holidays(2025)
        assert base["2025-01-01"] == "元日"
        assert base["2025-02-11"] == "建国記念の日"
        assert base["2025-04-29"] == "昭和の日"
        assert base["2025-11-03"] == "文化の日"
        assert base["2025-11-23"] == "勤労感謝の日"

    def test_base_map_is_read_only(self):
        base = build_base_holidays(2025)
        with pytest.raises(TypeError):
            base["2025-06-01"] = "x"

    def test_emperor_birthday_from_2020(self):
        assert "2019-02-23" not in build_base_holidays(2019)
        assert build_base_holidays(2020)["2020-02-23"] == "天皇誕生日"

    def test_mountain_day_from_2016(self):
        assert "2015-08-11" not in build_base_holidays(2015)
        assert build_base_holidays(2016)["2016-08-11"] == "山の日"

    def test_olympic_year_2020(self):
        base = build_base_holidays(2020)
        assert base["2020-07-23"] == "海の日"
        assert base["2020-07-24"] == "スポーツの日"
        assert base["2020-08-10"] == "山の日"
        assert "2020-10-12" not in base
        assert "2020-08-11" not in base

    def test_olympic_year_2021(self):
        base = build_base_holidays(2021)
        assert base["2021-07-22"] == "海の日"
        assert base["2021-07-23"] == "スポーツの日"
        assert base["2021-08-08"] == "山の日"

    def test_accession_year_2019(self):
        base = build_base_holidays(2019)
        assert base["2019-05-01"] == "即位の日"
        assert base["2019-10-22"] == "即位礼正殿の儀"
        assert base["2019-04-30"] == GENERIC_HOLIDAY
        assert base["2019-05-02"] == GENERIC_HOLIDAY


class TestDerivedHolidays:
    """Tests for citizen's holidays and substitute holidays."""

    def test_substitute_for_sunday_holiday(self):
        holidays = compute_holidays(2019)
        # 文化の日 2019-11-03 is a Sunday
        assert holidays["2019-11-03"] == "文化の日"
        assert holidays["2019-11-04"] == SUBSTITUTE_HOLIDAY

    def test_substitute_skips_existing_holidays(self):
        holidays = compute_holidays(2020)
        # 憲法記念日 on Sunday; 5/4 and 5/5 are already holidays
        assert holidays["2020-05-06"] == SUBSTITUTE_HOLIDAY
        assert holidays["2020-02-24"] == SUBSTITUTE_HOLIDAY

    def test_substitute_for_moved_mountain_day(self):
        holidays = compute_holidays(2021)
        assert holidays["2021-08-09"] == SUBSTITUTE_HOLIDAY

    def test_golden_week_2025(self):
        holidays = compute_holidays(2025)
        # みどりの日 on Sunday, こどもの日 on Monday
        assert holidays["2025-05-06"] == SUBSTITUTE_HOLIDAY
        assert "2025-05-07" not in holidays

    def test_citizens_holiday_silver_week(self):
        assert compute_holidays(2015)["2015-09-22"] == GENERIC_HOLIDAY
        assert compute_holidays(2026)["2026-09-22"] == GENERIC_HOLIDAY

    def test_accession_year_substitute(self):
        holidays = compute_holidays(2019)
        assert holidays["2019-05-06"] == SUBSTITUTE_HOLIDAY
        assert holidays["2019-04-30"] == GENERIC_HOLIDAY

    def test_total_holidays_2025(self):
        holidays = compute_holidays(2025)
        assert len(holidays) == 19

    def test_all_keys_belong_to_year(self):
        for year in (2000, 2019, 2020, 2021, 2050, 2099):
            assert all(key.startswith(f"{year}-") for key in compute_holidays(year))


class TestFixedPoint:
    """Resolution must converge and be idempotent."""

    @pytest.mark.parametrize("year", [2000, 2009, 2015, 2019, 2020, 2021, 2025, 2026, 2032, 2099])
    def test_resolving_again_changes_nothing(self, year):
        resolved = compute_holidays(year)
        assert dict(resolve_derived_holidays(year, resolved)) == dict(resolved)

    def test_base_map_not_modified(self):
        base = build_base_holidays(2020)
        before = dict(base)
        resolve_derived_holidays(2020, base)
        assert dict(base) == before

    def test_derived_days_are_weekdays(self):
        from datetime import date
        for year in range(2000, 2100):
            for key, name in compute_holidays(year).items():
                if name == SUBSTITUTE_HOLIDAY:
                    assert date.fromisoformat(key).weekday() < 5


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
