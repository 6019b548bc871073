"""
PDF Writer Module

Generates the monthly timesheet as a PDF using fpdf2.
Mirrors the Excel report: one row per day, weekend/holiday tint,
judgment colors and a summary block.
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from fpdf import FPDF

from domain.entities import Category, JudgmentTone, MonthlySummary
from infrastructure.logger import get_logger

if TYPE_CHECKING:
    from application.timesheet_service import DayRow

logger = get_logger("PdfWriter")


# ==============================================================================
# Font Configuration
# ==============================================================================
WINDOWS_FONT_PATHS: List[Path] = [
    Path("C:/Windows/Fonts/meiryo.ttc"),     # メイリオ
    Path("C:/Windows/Fonts/YuGothR.ttc"),    # 游ゴシック
    Path("C:/Windows/Fonts/msgothic.ttc"),   # MS ゴシック
]

MACOS_FONT_PATHS: List[Path] = [
    Path("/System/Library/Fonts/ヒラギノ角ゴシック W3.ttc"),
    Path("/System/Library/Fonts/Hiragino Sans GB.ttc"),
    Path("/Library/Fonts/Arial Unicode.ttf"),
]

LINUX_FONT_PATHS: List[Path] = [
    Path("/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc"),
    Path("/usr/share/fonts/truetype/noto/NotoSansCJK-Regular.ttc"),
    Path("/usr/share/fonts/opentype/ipafont-gothic/ipag.ttf"),
    Path("/usr/share/fonts/truetype/fonts-japanese-gothic.ttf"),
    Path("/usr/share/fonts/truetype/takao-gothic/TakaoGothic.ttf"),
]

FALLBACK_FONT = "Helvetica"
JAPANESE_FONT = "JapaneseFont"


def find_japanese_font(custom_font_path: Optional[str] = None) -> Optional[Path]:
    """
    Search for an available Japanese font with cross-platform support.

    Order: custom path, platform font list, matplotlib font_manager.
    """
    if custom_font_path:
        custom_path = Path(custom_font_path)
        if custom_path.exists():
            logger.info(f"カスタムフォントを使用: {custom_path}")
            return custom_path
        else:
            logger.warning(f"カスタムフォントが見つかりません: {custom_path}")

    for font_path in _get_platform_fonts():
        if font_path.exists():
            logger.debug(f"システムフォントを検出: {font_path}")
            return font_path

    return _try_matplotlib_font()


def _get_platform_fonts() -> List[Path]:
    """Get the font search list for the current platform."""
    if sys.platform == 'win32':
        return WINDOWS_FONT_PATHS
    elif sys.platform == 'darwin':
        return MACOS_FONT_PATHS
    else:
        return LINUX_FONT_PATHS


def _try_matplotlib_font() -> Optional[Path]:
    """Try to find a Japanese font using matplotlib's font_manager."""
    try:
        from matplotlib import font_manager
    except ImportError:
        logger.debug("matplotlib が無いため font_manager による検索を省略")
        return None

    font_names = [
        'Meiryo', 'Yu Gothic', 'MS Gothic', 'Hiragino Sans',
        'Noto Sans CJK JP', 'IPAGothic', 'TakaoGothic',
    ]
    for font_name in font_names:
        try:
            font_path = font_manager.findfont(
                font_manager.FontProperties(family=font_name),
                fallback_to_default=False
            )
        except ValueError:
            continue
        if font_path and Path(font_path).exists():
            logger.info(f"matplotlib でフォントを検出: {font_path}")
            return Path(font_path)

    return None


# ==============================================================================
# TimesheetPdf Class (A4 Portrait)
# ==============================================================================
class TimesheetPdf(FPDF):
    """
    Custom FPDF class with Japanese font support for A4 portrait timesheets.
    """

    _font_family: str = FALLBACK_FONT
    _font_loaded: bool = False

    def __init__(self, title: str = "", custom_font_path: Optional[str] = None):
        super().__init__(orientation='P', unit='mm', format='A4')
        self.title_text = title
        self._setup_japanese_font(custom_font_path)

    def _setup_japanese_font(self, custom_font_path: Optional[str] = None) -> None:
        """Load a Japanese font if available."""
        font_path = find_japanese_font(custom_font_path)

        if font_path:
            try:
                self.add_font(JAPANESE_FONT, "", str(font_path))
                self._font_family = JAPANESE_FONT
                self._font_loaded = True
                logger.info(f"日本語フォントを読み込みました: {font_path.name}")
            except Exception as e:
                # fontTools raises its own error types for unsupported collections
                logger.warning(f"日本語フォントを読み込めません {font_path}: {e}")
                self._font_family = FALLBACK_FONT
                self._font_loaded = False
        else:
            logger.warning("日本語フォントが見つからないため、PDF の日本語は表示できません。")
            self._font_family = FALLBACK_FONT
            self._font_loaded = False

    @property
    def font_family_name(self) -> str:
        return self._font_family

    @property
    def has_japanese_font(self) -> bool:
        return self._font_loaded

    def header(self) -> None:
        """Draw page header with centered title."""
        self.set_font(self._font_family, '', 14)
        self.cell(0, 10, self.title_text, align='C', new_x='LMARGIN', new_y='NEXT')
        self.ln(2)

    def footer(self) -> None:
        """Draw page footer with page number."""
        self.set_y(-12)
        self.set_font(self._font_family, '', 8)
        self.cell(0, 10, f'{self.page_no()}/{{nb}}', align='C')


# ==============================================================================
# PdfWriter Class
# ==============================================================================
class PdfWriter:
    """
    Generates the monthly timesheet PDF in the same layout as the Excel report.
    """

    # RGB colors (matching ExcelWriter)
    COLORS: Dict[str, Tuple[int, int, int]] = {
        'header': (68, 114, 196),
        'saturday': (221, 235, 247),
        'sun_holiday': (252, 228, 236),
        'positive': (189, 215, 238),
        'warning': (255, 107, 107),
        'summary': (242, 242, 242),
        'white': (255, 255, 255),
    }

    CATEGORY_LABELS = {
        Category.NORMAL: "",
        Category.PAID_LEAVE: "有給",
        Category.HOLIDAY_WORK: "休日出勤",
    }

    # (header, width mm, align)
    COLUMNS: List[Tuple[str, float, str]] = [
        ("日付", 18, 'C'),
        ("祝日", 26, 'C'),
        ("区分", 16, 'C'),
        ("出勤", 14, 'C'),
        ("退勤", 14, 'C'),
        ("実働", 14, 'C'),
        ("判定", 26, 'C'),
        ("定時給", 20, 'R'),
        ("割増分", 20, 'R'),
        ("合計", 22, 'R'),
    ]

    MARGIN = 10
    PAGE_HEIGHT = 297
    HEADER_ROW_HEIGHT = 8
    DATA_ROW_HEIGHT = 6
    FONT_SIZE = 8
    LINE_WIDTH = 0.2

    def __init__(self, custom_font_path: Optional[str] = None):
        self._custom_font_path = custom_font_path

    def create_report(
        self,
        rows: List["DayRow"],
        summary: MonthlySummary,
        output_path: Path
    ) -> None:
        """
        Create the monthly timesheet PDF.

        Args:
            rows: Day rows of the month, in date order
            summary: Monthly totals
            output_path: Path to save the PDF file
        """
        if not rows:
            return

        title = f"{summary.year}年{summary.month}月 勤怠表"
        pdf = TimesheetPdf(title=title, custom_font_path=self._custom_font_path)
        pdf.alias_nb_pages()
        pdf.set_margins(self.MARGIN, self.MARGIN, self.MARGIN)
        pdf.set_auto_page_break(auto=False)
        pdf.add_page()
        pdf.set_line_width(self.LINE_WIDTH)

        self._draw_header_row(pdf)
        for row in rows:
            if pdf.get_y() + self.DATA_ROW_HEIGHT > self.PAGE_HEIGHT - 15:
                pdf.add_page()
                self._draw_header_row(pdf)
            self._draw_day_row(pdf, row)

        self._draw_summary(pdf, summary)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        pdf.output(str(output_path))
        logger.info(f"PDF を保存しました: {output_path}")

    def _draw_header_row(self, pdf: TimesheetPdf) -> None:
        pdf.set_font(pdf.font_family_name, '', self.FONT_SIZE)
        pdf.set_fill_color(*self.COLORS['header'])
        pdf.set_text_color(*self.COLORS['white'])
        pdf.set_x(self.MARGIN)
        for header, width, _ in self.COLUMNS:
            pdf.cell(width, self.HEADER_ROW_HEIGHT, header, border=1, align='C', fill=True)
        pdf.ln(self.HEADER_ROW_HEIGHT)
        pdf.set_text_color(0, 0, 0)

    def _row_values(self, row: "DayRow") -> List[str]:
        metrics = row.metrics
        show_punches = metrics.category != Category.PAID_LEAVE
        return [
            row.date_label,
            metrics.holiday_name or ("会社休日" if metrics.is_company_holiday else ""),
            self.CATEGORY_LABELS[metrics.category],
            (row.record.check_in or "") if show_punches else "",
            (row.record.check_out or "") if show_punches else "",
            metrics.worked_text,
            "・".join(label.value for label in metrics.judgment),
            f"{metrics.regular_pay:,}",
            f"{metrics.overtime_pay:,}",
            f"{metrics.total_pay:,}",
        ]

    def _draw_day_row(self, pdf: TimesheetPdf, row: "DayRow") -> None:
        metrics = row.metrics
        row_fill = None
        if metrics.is_sun_or_holiday:
            row_fill = self.COLORS['sun_holiday']
        elif metrics.is_saturday:
            row_fill = self.COLORS['saturday']

        pdf.set_font(pdf.font_family_name, '', self.FONT_SIZE)
        pdf.set_x(self.MARGIN)
        for index, ((_, width, align), text) in enumerate(zip(self.COLUMNS, self._row_values(row))):
            fill = row_fill
            if index == 6:
                fill = self._judgment_fill(metrics.judgment_tone) or row_fill
            if fill:
                pdf.set_fill_color(*fill)
            if fill == self.COLORS['warning']:
                pdf.set_text_color(*self.COLORS['white'])
            else:
                pdf.set_text_color(0, 0, 0)
            pdf.cell(width, self.DATA_ROW_HEIGHT, text, border=1, align=align, fill=bool(fill))
        pdf.ln(self.DATA_ROW_HEIGHT)
        pdf.set_text_color(0, 0, 0)

    def _judgment_fill(self, tone: Optional[JudgmentTone]) -> Optional[Tuple[int, int, int]]:
        if tone == JudgmentTone.WARNING:
            return self.COLORS['warning']
        if tone == JudgmentTone.POSITIVE:
            return self.COLORS['positive']
        return None

    def _draw_summary(self, pdf: TimesheetPdf, summary: MonthlySummary) -> None:
        """Draw the label/value summary block below the table."""
        items = [
            ("実働日数", summary.work_days_text),
            ("総労働時間", summary.total_hours_text),
            ("定時時間", summary.regular_hours_text),
            ("割増時間", summary.overtime_hours_text),
            ("定時給料", summary.regular_pay_text),
            ("割増分", summary.overtime_pay_text),
            ("合計", summary.total_pay_text),
        ]
        pdf.ln(4)
        if pdf.get_y() + len(items) * self.DATA_ROW_HEIGHT > self.PAGE_HEIGHT - 15:
            pdf.add_page()

        pdf.set_font(pdf.font_family_name, '', self.FONT_SIZE + 1)
        pdf.set_fill_color(*self.COLORS['summary'])
        for label, value in items:
            pdf.set_x(self.MARGIN)
            pdf.cell(30, self.DATA_ROW_HEIGHT, label, border=1, align='L', fill=True)
            pdf.cell(30, self.DATA_ROW_HEIGHT, value, border=1, align='R')
            pdf.ln(self.DATA_ROW_HEIGHT)


# ==============================================================================
# Utility Functions
# ==============================================================================
def format_filename(pattern: str, year: int, month: int) -> str:
    """Format filename pattern with placeholders."""
    return pattern.format(
        year=year,
        month=f"{month:02d}"
    )
