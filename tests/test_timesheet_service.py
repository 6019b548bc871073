"""
Unit tests for TimesheetService.
"""

import pytest
import tempfile
from datetime import date, datetime
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from application.timesheet_service import (
    PUNCH_IN, PUNCH_OUT, TimesheetService, format_date_label
)
from config.config_manager import AppConfig, OutputSettings
from domain.entities import Category, JudgmentLabel
from infrastructure.backup_codec import BackupFormatError
from infrastructure.record_store import RecordStore


@pytest.fixture
def service():
    store = RecordStore(today=date(2025, 4, 15))
    return TimesheetService(store, AppConfig())


class TestFormatting:
    """Tests for date labels."""

    def test_date_label(self):
        assert format_date_label(2025, 4, 1) == "4/1 火"
        assert format_date_label(2025, 4, 6) == "4/6 日"


class TestMonthRows:
    """Tests for the rows shown in the month table."""

    def test_one_row_per_day(self, service):
        rows = service.month_rows(2025, 4)
        assert len(rows) == 30
        assert rows[0].date_key == "2025-04-01"
        assert rows[-1].day == 30

    def test_rows_carry_holidays(self, service):
        rows = service.month_rows(2025, 4)
        showa = rows[28]
        assert showa.date_key == "2025-04-29"
        assert showa.metrics.holiday_name == "昭和の日"
        assert showa.metrics.allow_time_entry is False

    def test_company_holiday_in_rows(self, service):
        service.add_company_holiday(2025, "2025-04-30")
        row = service.month_rows(2025, 4)[29]
        assert row.metrics.is_company_holiday is True
        assert service.month_summary(2025, 4).planned_days == 20

    def test_holidays_follow_year(self, service):
        assert "2025-04-29" in service.holidays(2025)
        assert "2026-04-29" in service.holidays(2026)
        assert "2025-04-29" not in service.holidays(2026)


class TestDayEdits:
    """Tests for punches, categories and notes."""

    def test_set_and_clear_punch(self, service):
        service.set_punch(2025, "2025-04-01", PUNCH_IN, "09:45")
        assert service.store.get_day(2025, "2025-04-01").check_in == "09:45"

        service.set_punch(2025, "2025-04-01", PUNCH_IN, "")
        assert service.store.get_day(2025, "2025-04-01").check_in is None

    def test_unknown_punch_side(self, service):
        with pytest.raises(ValueError):
            service.set_punch(2025, "2025-04-01", "lunch", "12:00")

    def test_punch_now_normal_day_uses_baseline(self, service):
        service.punch_now(2025, "2025-04-01", PUNCH_IN)
        service.punch_now(2025, "2025-04-01", PUNCH_OUT)

        metrics = service.day_metrics(2025, "2025-04-01")
        assert metrics.judgment == (JudgmentLabel.ON_TIME,)
        assert metrics.worked_minutes == 480

    def test_punch_now_holiday_work_uses_clock(self, service):
        service.set_category(2025, "2025-04-06", Category.HOLIDAY_WORK)
        service.punch_now(2025, "2025-04-06", PUNCH_IN, now=datetime(2025, 4, 6, 10, 7, 59))
        assert service.store.get_day(2025, "2025-04-06").check_in == "10:07"

    def test_paid_leave_clears_punches(self, service):
        service.set_punch(2025, "2025-04-01", PUNCH_IN, "09:30")
        service.set_punch(2025, "2025-04-01", PUNCH_OUT, "18:30")

        record = service.set_category(2025, "2025-04-01", Category.PAID_LEAVE)

        assert record.check_in is None
        assert record.check_out is None
        assert service.day_metrics(2025, "2025-04-01").total_pay == 12000

    def test_holiday_work_keeps_punches(self, service):
        service.set_punch(2025, "2025-04-05", PUNCH_IN, "10:00")
        record = service.set_category(2025, "2025-04-05", Category.HOLIDAY_WORK)
        assert record.check_in == "10:00"

    def test_toggle_note(self, service):
        assert service.toggle_note(2025, "2025-04-01").note_open is True
        assert service.toggle_note(2025, "2025-04-01").note_open is False

    def test_set_note(self, service):
        service.set_note(2025, "2025-04-01", "健康診断")
        assert service.store.get_day(2025, "2025-04-01").note == "健康診断"

    def test_day_metrics_invalid_key(self, service):
        with pytest.raises(ValueError):
            service.day_metrics(2025, "2025-13-01")


class TestSettings:
    """Tests for wage, year and company holidays."""

    def test_wage_changes_pay(self, service):
        service.set_punch(2025, "2025-04-01", PUNCH_IN, "09:30")
        service.set_punch(2025, "2025-04-01", PUNCH_OUT, "18:30")
        service.set_hourly_wage(1000)
        assert service.month_summary(2025, 4).total_pay == 8000

    def test_company_holiday_wrong_year(self, service):
        with pytest.raises(ValueError):
            service.add_company_holiday(2025, "2024-12-30")

    def test_remove_company_holiday(self, service):
        service.add_company_holiday(2025, "2025-04-30")
        service.remove_company_holiday(2025, "2025-04-30")
        assert service.month_summary(2025, 4).planned_days == 21

    def test_set_year_clamps(self, service):
        assert service.set_year(1990) == 2000


class TestBackup:
    """Tests for backup export/import through the service."""

    def test_round_trip(self, service):
        service.set_punch(2025, "2025-04-01", PUNCH_IN, "09:30")
        service.add_company_holiday(2025, "2025-12-29")
        text = service.export_backup()

        other = TimesheetService(RecordStore(today=date(2030, 1, 1)))
        other.import_backup(text)

        assert other.store.year == 2025
        assert other.store.get_day(2025, "2025-04-01").check_in == "09:30"
        assert "2025-12-29" in other.store.company_holidays(2025)

    def test_invalid_backup_keeps_state(self, service):
        service.set_punch(2025, "2025-04-01", PUNCH_IN, "09:30")
        with pytest.raises(BackupFormatError):
            service.import_backup('{"version": 1, "data": {}}')
        assert service.store.get_day(2025, "2025-04-01").check_in == "09:30"

    def test_infinite_wage_keeps_state(self, service):
        service.set_punch(2025, "2025-04-01", PUNCH_IN, "09:30")
        service.add_company_holiday(2025, "2025-12-29")
        text = '{"version":1,"data":{"hourlyWage":1e999,"year":2026,"yearData":{"2026":{"days":{}}}}}'

        with pytest.raises(BackupFormatError):
            service.import_backup(text)

        assert service.store.hourly_wage == 1500
        assert service.store.year == 2025
        assert service.store.get_day(2025, "2025-04-01").check_in == "09:30"
        assert "2025-12-29" in service.store.company_holidays(2025)

    def test_restored_year_is_clamped(self, service):
        text = '{"version":1,"data":{"hourlyWage":1500,"year":123456,"yearData":{}}}'
        service.import_backup(text)

        assert service.store.year == 2099
        assert len(service.month_rows(service.store.year, 1)) == 31

    def test_unusable_records_reported_as_format_error(self, service):
        text = '{"version":1,"data":{"hourlyWage":1500,"year":2025,"yearData":{"2025":{"days":"x"}}}}'
        with pytest.raises(BackupFormatError, match="復元に失敗しました。"):
            service.import_backup(text)


class TestExportMonth:
    """Tests for Excel/PDF export."""

    def test_excel_only(self, service):
        service.config.output_settings = OutputSettings(generate_pdf=False)
        service.set_punch(2025, "2025-04-01", PUNCH_IN, "09:30")

        with tempfile.TemporaryDirectory() as tmpdir:
            result = service.export_month(2025, 4, Path(tmpdir))

            assert result.excel_path == Path(tmpdir) / "勤怠_2025_04.xlsx"
            assert result.excel_path.exists()
            assert result.pdf_path is None
            assert result.pdf_error == ""

    def test_pdf_written_or_reported(self, service):
        with tempfile.TemporaryDirectory() as tmpdir:
            result = service.export_month(2025, 4, Path(tmpdir))

            assert result.excel_path.exists()
            if result.pdf_path is not None:
                assert result.pdf_path == Path(tmpdir) / "勤怠_2025_04.pdf"
                assert result.pdf_path.exists()
            else:
                # No Japanese font on this machine
                assert result.pdf_error


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
