"""
Settings Dialog Module

PyQt6 dialog for timesheet settings:
- Target year and hourly wage
- Company holidays of the target year
- PDF output options
"""

from datetime import date
from pathlib import Path
from typing import List

from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QGridLayout,
    QGroupBox, QLabel, QLineEdit, QCheckBox, QSpinBox, QDateEdit,
    QPushButton, QFileDialog, QDialogButtonBox, QListWidget, QListWidgetItem,
    QMessageBox
)
from PyQt6.QtCore import Qt, QDate

from application.timesheet_service import TimesheetService
from config.config_manager import AppConfig
from domain.time_utils import ymd
from infrastructure.record_store import MIN_YEAR, MAX_YEAR
from ui.styles import ThemeManager

MAX_HOURLY_WAGE = 100000


def format_holiday_item(key: str) -> str:
    """Format a company holiday list entry, e.g. '2025-12-29 (月)'."""
    weekday = "月火水木金土日"[date.fromisoformat(key).weekday()]
    return f"{key} ({weekday})"


class SettingsDialog(QDialog):
    """
    Settings dialog.

    Year, wage and PDF options are applied on OK.
    Company holidays are written through the service as soon as they change.
    """

    def __init__(self, config: AppConfig, service: TimesheetService, parent=None):
        super().__init__(parent)
        self.config = config
        self.service = service
        self._init_ui()
        self._load_config_to_ui()
        self._connect_signals()

    def _init_ui(self):
        """Initialize the dialog UI."""
        self.setWindowTitle("設定")
        self.resize(560, 600)
        self.setMinimumWidth(480)
        self.setModal(True)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(15)

        layout.addWidget(self._create_basic_group())
        layout.addWidget(self._create_holiday_group(), stretch=1)
        layout.addWidget(self._create_pdf_group())

        button_box = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok |
            QDialogButtonBox.StandardButton.Cancel
        )
        button_box.accepted.connect(self._on_accept)
        button_box.rejected.connect(self.reject)

        btn_layout = QHBoxLayout()
        btn_layout.addStretch()
        btn_layout.addWidget(button_box)
        layout.addLayout(btn_layout)

        self._apply_styles()

    def _create_basic_group(self) -> QGroupBox:
        group = QGroupBox("基本設定")
        layout = QGridLayout(group)
        layout.setContentsMargins(15, 25, 15, 15)
        layout.setSpacing(12)

        layout.addWidget(QLabel("対象年"), 0, 0)
        self.spin_year = QSpinBox()
        self.spin_year.setRange(MIN_YEAR, MAX_YEAR)
        self.spin_year.setSuffix(" 年")
        layout.addWidget(self.spin_year, 0, 1)

        layout.addWidget(QLabel("時給"), 1, 0)
        self.spin_wage = QSpinBox()
        self.spin_wage.setRange(0, MAX_HOURLY_WAGE)
        self.spin_wage.setSingleStep(10)
        self.spin_wage.setSuffix(" 円")
        layout.addWidget(self.spin_wage, 1, 1)

        return group

    def _create_holiday_group(self) -> QGroupBox:
        """Create the company holiday group (date picker + list)."""
        group = QGroupBox("会社休日")
        layout = QVBoxLayout(group)
        layout.setContentsMargins(15, 25, 15, 15)
        layout.setSpacing(10)

        add_layout = QHBoxLayout()
        self.date_holiday = QDateEdit()
        self.date_holiday.setCalendarPopup(True)
        self.date_holiday.setDisplayFormat("yyyy-MM-dd")
        add_layout.addWidget(self.date_holiday, stretch=1)
        self.btn_add_holiday = QPushButton("追加")
        add_layout.addWidget(self.btn_add_holiday)
        layout.addLayout(add_layout)

        self.list_holidays = QListWidget()
        self.list_holidays.setSelectionMode(QListWidget.SelectionMode.SingleSelection)
        layout.addWidget(self.list_holidays, stretch=1)

        self.btn_remove_holiday = QPushButton("削除")
        layout.addWidget(self.btn_remove_holiday, alignment=Qt.AlignmentFlag.AlignRight)

        return group

    def _create_pdf_group(self) -> QGroupBox:
        """Create the PDF settings group."""
        group = QGroupBox("PDF 設定")
        layout = QGridLayout(group)
        layout.setContentsMargins(15, 25, 15, 15)
        layout.setSpacing(10)

        self.chk_generate_pdf = QCheckBox("Excel と一緒に PDF を出力する")
        layout.addWidget(self.chk_generate_pdf, 0, 0, 1, 3)

        layout.addWidget(QLabel("PDF 出力先:"), 1, 0)
        self.txt_pdf_path = QLineEdit()
        self.txt_pdf_path.setPlaceholderText("空欄の場合は Excel と同じフォルダ")
        layout.addWidget(self.txt_pdf_path, 1, 1)
        self.btn_browse_pdf = QPushButton("参照")
        layout.addWidget(self.btn_browse_pdf, 1, 2)

        layout.addWidget(QLabel("フォント:"), 2, 0)
        self.txt_font_path = QLineEdit()
        self.txt_font_path.setPlaceholderText("空欄の場合はシステムの日本語フォントを検索")
        layout.addWidget(self.txt_font_path, 2, 1)
        self.btn_browse_font = QPushButton("参照")
        layout.addWidget(self.btn_browse_font, 2, 2)

        return group

    def _load_config_to_ui(self):
        """Load configuration values into UI controls."""
        store = self.service.store
        self.spin_year.setValue(store.year)
        self.spin_wage.setValue(min(store.hourly_wage, MAX_HOURLY_WAGE))
        self.date_holiday.setDate(QDate(store.year, 1, 1))

        settings = self.config.output_settings
        self.chk_generate_pdf.setChecked(settings.generate_pdf)
        self.txt_pdf_path.setText(settings.pdf_output_dir)
        self.txt_font_path.setText(self.config.paths.custom_font_path)

        self._reload_holidays()

    def _save_ui_to_config(self):
        """Save UI values to configuration and the record store."""
        settings = self.config.output_settings
        settings.generate_pdf = self.chk_generate_pdf.isChecked()
        settings.pdf_output_dir = self.txt_pdf_path.text().strip()
        self.config.paths.custom_font_path = self.txt_font_path.text().strip()

        self.service.set_year(self.spin_year.value())
        self.service.set_hourly_wage(self.spin_wage.value())

    def _connect_signals(self):
        """Connect UI signals."""
        self.spin_year.valueChanged.connect(self._on_year_changed)
        self.btn_add_holiday.clicked.connect(self._on_add_holiday)
        self.btn_remove_holiday.clicked.connect(self._on_remove_holiday)
        self.btn_browse_pdf.clicked.connect(self._on_browse_pdf)
        self.btn_browse_font.clicked.connect(self._on_browse_font)

    def holiday_keys(self) -> List[str]:
        """Date keys currently shown in the company holiday list."""
        return [
            self.list_holidays.item(i).data(Qt.ItemDataRole.UserRole)
            for i in range(self.list_holidays.count())
        ]

    def _reload_holidays(self):
        self.list_holidays.clear()
        for key in sorted(self.service.store.company_holidays(self.spin_year.value())):
            item = QListWidgetItem(format_holiday_item(key))
            item.setData(Qt.ItemDataRole.UserRole, key)
            self.list_holidays.addItem(item)

    def _on_year_changed(self, year: int):
        self.date_holiday.setDate(QDate(year, 1, 1))
        self._reload_holidays()

    def _on_add_holiday(self):
        selected = self.date_holiday.date()
        key = ymd(selected.year(), selected.month(), selected.day())
        try:
            self.service.add_company_holiday(self.spin_year.value(), key)
        except ValueError as e:
            QMessageBox.warning(self, "会社休日", str(e))
            return
        self._reload_holidays()

    def _on_remove_holiday(self):
        item = self.list_holidays.currentItem()
        if item is None:
            return
        self.service.remove_company_holiday(
            self.spin_year.value(), item.data(Qt.ItemDataRole.UserRole)
        )
        self._reload_holidays()

    def _on_browse_pdf(self):
        """Handle browse PDF output path."""
        current_path = self.txt_pdf_path.text()
        start_dir = current_path if current_path else str(Path.cwd())

        dir_path = QFileDialog.getExistingDirectory(
            self,
            "PDF の出力先フォルダを選択",
            start_dir
        )
        if dir_path:
            self.txt_pdf_path.setText(dir_path)

    def _on_browse_font(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "フォントファイルを選択",
            "",
            "Font Files (*.ttf *.ttc *.otf);;All Files (*)"
        )
        if file_path:
            self.txt_font_path.setText(file_path)

    def _on_accept(self):
        """Handle OK button click."""
        self._save_ui_to_config()
        self.accept()

    def _apply_styles(self):
        """Apply dialog styling from global theme."""
        theme = ThemeManager.get_theme(self.config.ui_prefs.theme_name)
        self.setStyleSheet(theme.stylesheet)
