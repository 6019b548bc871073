"""
Timesheet Service Module

Application layer service that drives the timesheet screens.
Separates business logic from UI concerns (PyQt).
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import List, Mapping, Optional

from fpdf.errors import FPDFException

from config.config_manager import AppConfig
from domain.day_metrics import compute_day_metrics
from domain.entities import Category, DayMetrics, DayRecord, MonthlySummary
from domain.holiday_calendar import compute_holidays
from domain.monthly_aggregator import MonthlyAggregator
from domain.time_utils import parse_ymd, ymd
from infrastructure.backup_codec import BackupFormatError, export_backup, import_backup
from infrastructure.excel_writer import ExcelWriter
from infrastructure.logger import get_logger
from infrastructure.pdf_writer import PdfWriter, format_filename
from infrastructure.record_store import RecordStore

logger = get_logger("TimesheetService")

WEEKDAY_NAMES = ['月', '火', '水', '木', '金', '土', '日']

PUNCH_IN = "in"
PUNCH_OUT = "out"


@dataclass
class DayRow:
    """One visible day: its stored record plus derived metrics."""
    date_key: str
    day: int
    date_label: str
    record: DayRecord
    metrics: DayMetrics


@dataclass
class ExportResult:
    """Result of a monthly export."""
    excel_path: Path
    pdf_path: Optional[Path] = None
    pdf_error: str = ""


def format_date_label(year: int, month: int, day: int) -> str:
    """Format a day as 'M/D 曜', e.g. '4/1 火'."""
    weekday = WEEKDAY_NAMES[date(year, month, day).weekday()]
    return f"{month}/{day} {weekday}"


class TimesheetService:
    """
    Application service for the timesheet.

    This service:
    - Feeds the holiday calendar, day metrics and monthly aggregation
    - Applies user edits to the record store
    - Depends only on domain entities and infrastructure, not on PyQt
    """

    def __init__(self, store: RecordStore, config: Optional[AppConfig] = None):
        self.store = store
        self.config = config or AppConfig()
        self._holiday_year: Optional[int] = None
        self._holidays: Mapping[str, str] = {}

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    def holidays(self, year: int) -> Mapping[str, str]:
        """Holiday map of a year; recomputed whenever the year changes."""
        if self._holiday_year != year:
            self._holidays = compute_holidays(year)
            self._holiday_year = year
        return self._holidays

    def _aggregator(self, year: int) -> MonthlyAggregator:
        return MonthlyAggregator(
            self.holidays(year),
            self.store.company_holidays(year),
            self.store.hourly_wage,
            self.config.work_rule
        )

    def day_metrics(self, year: int, key: str) -> DayMetrics:
        parsed = parse_ymd(key)
        if not parsed:
            raise ValueError(f"日付の形式が不正です: {key}")
        _, month, day = parsed
        return compute_day_metrics(
            self.store.get_day(year, key),
            self.holidays(year).get(key),
            key in self.store.company_holidays(year),
            year, month, day,
            self.store.hourly_wage,
            self.config.work_rule
        )

    def month_rows(self, year: int, month: int) -> List[DayRow]:
        """Build the rows of every day in a month."""
        aggregator = self._aggregator(year)
        records = self.store.records_for_month(year, month)
        _, num_days = monthrange(year, month)

        rows = []
        for day in range(1, num_days + 1):
            key = ymd(year, month, day)
            record = records.get(key) or DayRecord()
            rows.append(DayRow(
                date_key=key,
                day=day,
                date_label=format_date_label(year, month, day),
                record=record,
                metrics=aggregator.day_metrics(record, year, month, day),
            ))
        return rows

    def month_summary(self, year: int, month: int) -> MonthlySummary:
        return self._aggregator(year).summarize(
            year, month, self.store.records_for_month(year, month)
        )

    # ------------------------------------------------------------------
    # Day edits
    # ------------------------------------------------------------------
    def set_punch(self, year: int, key: str, side: str, value: Optional[str]) -> DayRecord:
        """
        Set or clear a punch time.

        Args:
            year: Year
            key: Date key
            side: "in" or "out"
            value: HH:MM, or empty/None to clear
        """
        value = value or None
        if side == PUNCH_IN:
            return self.store.set_day(year, key, check_in=value)
        if side == PUNCH_OUT:
            return self.store.set_day(year, key, check_out=value)
        raise ValueError(f"Unknown punch side: {side}")

    def punch_now(
        self,
        year: int,
        key: str,
        side: str,
        now: Optional[datetime] = None
    ) -> DayRecord:
        """
        Fill a punch from the punch button.

        Normal days get the baseline time; holiday work records the current
        wall-clock time truncated to the minute.
        """
        record = self.store.get_day(year, key)
        if record.category == Category.HOLIDAY_WORK:
            now = now or datetime.now()
            value = now.strftime("%H:%M")
        elif side == PUNCH_IN:
            value = self.config.work_rule.in_time
        else:
            value = self.config.work_rule.out_time
        return self.set_punch(year, key, side, value)

    def set_category(self, year: int, key: str, category: Category) -> DayRecord:
        """Change a day's category; paid leave clears both punches."""
        logger.info(f"{key} の勤怠区分を {category.value} に変更")
        if category == Category.PAID_LEAVE:
            return self.store.set_day(year, key, category=category, check_in=None, check_out=None)
        return self.store.set_day(year, key, category=category)

    def toggle_note(self, year: int, key: str) -> DayRecord:
        record = self.store.get_day(year, key)
        return self.store.set_day(year, key, note_open=not record.note_open)

    def set_note(self, year: int, key: str, text: str) -> DayRecord:
        return self.store.set_day(year, key, note=text)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    def add_company_holiday(self, year: int, key: str) -> None:
        self.store.add_company_holiday(year, key)
        logger.info(f"会社休日を追加: {key}")

    def remove_company_holiday(self, year: int, key: str) -> None:
        self.store.remove_company_holiday(year, key)
        logger.info(f"会社休日を削除: {key}")

    def set_hourly_wage(self, value: float) -> int:
        wage = self.store.set_hourly_wage(value)
        logger.info(f"時給を {wage} 円に変更")
        return wage

    def set_year(self, value: int) -> int:
        return self.store.set_year(value)

    # ------------------------------------------------------------------
    # Backup / export
    # ------------------------------------------------------------------
    def export_backup(self) -> str:
        return export_backup(self.store.to_dict())

    def import_backup(self, text: str) -> None:
        """
        Restore the store from backup text.

        Raises:
            BackupFormatError: If the text is not a valid backup; the current
                state is left untouched
        """
        data = import_backup(text)
        try:
            self.store.replace_state(data)
        except (TypeError, AttributeError, ValueError, OverflowError) as e:
            raise BackupFormatError(f"復元に失敗しました。({e})") from e
        self._holiday_year = None
        logger.info("バックアップから復元しました")

    def export_month(
        self,
        year: int,
        month: int,
        output_dir: Optional[Path] = None
    ) -> ExportResult:
        """
        Export a month as Excel, plus PDF when enabled.

        Args:
            year: Year
            month: Month (1-12)
            output_dir: Target directory; defaults to the configured output dir

        Returns:
            ExportResult with the written paths

        Raises:
            PermissionError: If the Excel file cannot be written
        """

        settings = self.config.output_settings
        excel_dir = Path(output_dir or settings.output_dir or Path.cwd())
        excel_path = excel_dir / format_filename(settings.filename_pattern, year, month)

        rows = self.month_rows(year, month)
        summary = self.month_summary(year, month)

        logger.info(f"Excel 出力開始: {excel_path}")
        ExcelWriter().create_report(rows, summary, excel_path)
        result = ExportResult(excel_path=excel_path)

        if settings.generate_pdf:
            pdf_dir = Path(settings.pdf_output_dir) if settings.pdf_output_dir else excel_dir
            pdf_path = pdf_dir / format_filename(settings.pdf_filename_pattern, year, month)
            try:
                writer = PdfWriter(custom_font_path=self.config.paths.custom_font_path or None)
                writer.create_report(rows, summary, pdf_path)
                result.pdf_path = pdf_path
            except (OSError, RuntimeError, ValueError, FPDFException) as e:
                # Excel is already written; report the PDF failure instead of failing
                logger.error(f"PDF 出力失敗: {e}")
                result.pdf_error = str(e)

        return result
