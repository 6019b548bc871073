"""
Excel Writer Module

Generates a formatted monthly timesheet workbook with styling.
Applies row colors based on weekend/holiday status and judgment tone.
"""

from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from openpyxl import Workbook
from openpyxl.styles import (
    Font, PatternFill, Alignment, Border, Side
)
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from domain.entities import Category, JudgmentTone, MonthlySummary
from infrastructure.logger import get_logger

if TYPE_CHECKING:
    from application.timesheet_service import DayRow

logger = get_logger("ExcelWriter")

CATEGORY_LABELS = {
    Category.NORMAL: "",
    Category.PAID_LEAVE: "有給",
    Category.HOLIDAY_WORK: "休日出勤",
}

HEADERS = [
    "日付", "祝日", "区分", "出勤", "退勤", "実働",
    "判定", "定時給", "割増分", "合計",
]

COLUMN_WIDTHS = [10, 16, 10, 8, 8, 8, 18, 11, 11, 11]


class ExcelWriter:
    """
    Generates the monthly timesheet workbook.

    Output format:
    - Row 1: Title (year/month)
    - Row 3: Column headers
    - One row per calendar day
    - Summary block below the day rows

    Styling:
    - Blue tint for Saturdays, red tint for Sundays and holidays
    - Judgment cell colored by tone
    """

    COLORS = {
        'header': PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid'),
        'saturday': PatternFill(start_color='DDEBF7', end_color='DDEBF7', fill_type='solid'),
        'sun_holiday': PatternFill(start_color='FCE4EC', end_color='FCE4EC', fill_type='solid'),
        'positive': PatternFill(start_color='BDD7EE', end_color='BDD7EE', fill_type='solid'),
        'warning': PatternFill(start_color='FF6B6B', end_color='FF6B6B', fill_type='solid'),
        'summary': PatternFill(start_color='F2F2F2', end_color='F2F2F2', fill_type='solid'),
    }

    BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    HEADER_ROW = 3

    def __init__(self):
        self.wb: Optional[Workbook] = None

    def create_report(
        self,
        rows: List["DayRow"],
        summary: MonthlySummary,
        output_path: Path
    ) -> Path:
        """
        Create the monthly timesheet workbook.

        Args:
            rows: Day rows of the month, in date order
            summary: Monthly totals
            output_path: Path to save the Excel file

        Returns:
            Path to the created file
        """
        self.wb = Workbook()
        ws = self.wb.active
        ws.title = f"{summary.year}年{summary.month}月"

        self._write_sheet(ws, rows, summary)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(output_path)
        logger.info(f"Excel を保存しました: {output_path}")
        return output_path

    def _write_sheet(self, ws: Worksheet, rows: List["DayRow"], summary: MonthlySummary):
        """Write title, day rows and summary to a worksheet."""
        title = ws.cell(1, 1, f"{summary.year}年{summary.month}月 勤怠表")
        title.font = Font(bold=True, size=14)

        for col, header in enumerate(HEADERS, start=1):
            cell = ws.cell(self.HEADER_ROW, col, header)
            cell.font = Font(bold=True, color='FFFFFF')
            cell.fill = self.COLORS['header']
            cell.alignment = Alignment(horizontal='center', vertical='center')
            cell.border = self.BORDER

        current_row = self.HEADER_ROW + 1
        for row in rows:
            self._write_day_row(ws, current_row, row)
            current_row += 1

        self._write_summary(ws, current_row + 1, summary)

        for col, width in enumerate(COLUMN_WIDTHS, start=1):
            ws.column_dimensions[get_column_letter(col)].width = width
        ws.freeze_panes = ws.cell(self.HEADER_ROW + 1, 1)

    def _write_day_row(self, ws: Worksheet, excel_row: int, row: "DayRow"):
        metrics = row.metrics
        show_punches = metrics.category != Category.PAID_LEAVE
        values = [
            row.date_label,
            metrics.holiday_name or ("会社休日" if metrics.is_company_holiday else ""),
            CATEGORY_LABELS[metrics.category],
            (row.record.check_in or "") if show_punches else "",
            (row.record.check_out or "") if show_punches else "",
            metrics.worked_text,
            "・".join(label.value for label in metrics.judgment),
            metrics.regular_pay,
            metrics.overtime_pay,
            metrics.total_pay,
        ]

        row_fill = None
        if metrics.is_sun_or_holiday:
            row_fill = self.COLORS['sun_holiday']
        elif metrics.is_saturday:
            row_fill = self.COLORS['saturday']

        for col, value in enumerate(values, start=1):
            cell = ws.cell(excel_row, col, value)
            cell.border = self.BORDER
            cell.alignment = Alignment(horizontal='right' if col >= 8 else 'center')
            if col >= 8:
                cell.number_format = '#,##0'
            if row_fill:
                cell.fill = row_fill

        self._apply_judgment_color(ws.cell(excel_row, 7), metrics.judgment_tone)

    def _apply_judgment_color(self, cell, tone: Optional[JudgmentTone]):
        """Apply judgment tone color; warnings get white bold text."""
        if tone == JudgmentTone.WARNING:
            cell.fill = self.COLORS['warning']
            cell.font = Font(color='FFFFFF', bold=True)
        elif tone == JudgmentTone.POSITIVE:
            cell.fill = self.COLORS['positive']

    def _write_summary(self, ws: Worksheet, start_row: int, summary: MonthlySummary):
        """Write the label/value summary block."""
        items = [
            ("実働日数", summary.work_days_text),
            ("総労働時間", summary.total_hours_text),
            ("定時時間", summary.regular_hours_text),
            ("割増時間", summary.overtime_hours_text),
            ("定時給料", summary.regular_pay_text),
            ("割増分", summary.overtime_pay_text),
            ("合計", summary.total_pay_text),
        ]
        for offset, (label, value) in enumerate(items):
            label_cell = ws.cell(start_row + offset, 1, label)
            label_cell.font = Font(bold=True)
            label_cell.fill = self.COLORS['summary']
            label_cell.border = self.BORDER
            value_cell = ws.cell(start_row + offset, 2, value)
            value_cell.alignment = Alignment(horizontal='right')
            value_cell.border = self.BORDER
