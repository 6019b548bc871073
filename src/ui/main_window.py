"""
Main Window Module

PyQt6 implementation of the monthly timesheet screen:
year header, month tabs, one table row per day and the monthly summary.
"""

import sys
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QGridLayout,
    QLabel, QPushButton, QLineEdit, QComboBox, QGroupBox, QTabBar,
    QTableWidget, QTableWidgetItem, QHeaderView, QAbstractItemView,
    QFileDialog, QMessageBox, QApplication
)
from PyQt6.QtCore import Qt, QRegularExpression
from PyQt6.QtGui import QAction, QActionGroup, QColor, QRegularExpressionValidator

from application.timesheet_service import DayRow, TimesheetService, PUNCH_IN, PUNCH_OUT
from config.config_manager import ConfigManager
from domain.entities import Category, JudgmentTone
from infrastructure.backup_codec import BackupFormatError
from infrastructure.logger import get_logger
from infrastructure.record_store import RecordStore
from ui.styles import ThemeManager

logger = get_logger("MainWindow")

CATEGORY_CHOICES = [
    ("通常", Category.NORMAL),
    ("有給", Category.PAID_LEAVE),
    ("休日出勤", Category.HOLIDAY_WORK),
]

HHMM_REGEX = r"^(([01]\d|2[0-3]):[0-5]\d)?$"

# Table columns
COL_DATE = 0
COL_HOLIDAY = 1
COL_CATEGORY = 2
COL_IN = 3
COL_IN_PUNCH = 4
COL_OUT = 5
COL_OUT_PUNCH = 6
COL_WORKED = 7
COL_JUDGMENT = 8
COL_PAY = 9
COL_NOTE = 10

TABLE_HEADERS = [
    "日付", "祝日", "区分", "出勤", "", "退勤", "", "実働", "判定", "日給", "メモ",
]

SUMMARY_FIELDS = [
    ("work_days_text", "実働日数"),
    ("total_hours_text", "総労働時間"),
    ("regular_hours_text", "定時時間"),
    ("overtime_hours_text", "割増時間"),
    ("regular_pay_text", "定時給料"),
    ("overtime_pay_text", "割増分"),
    ("total_pay_text", "合計"),
]


class MainWindow(QMainWindow):
    """
    Main application window.

    Layout:
    - Top: Year selector and month tabs
    - Center: Day table (punches, category, judgment, pay, memo)
    - Bottom: Monthly summary and export button
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        super().__init__()
        self.config_manager = config_manager or ConfigManager()
        self.config = self.config_manager.load()

        store = RecordStore(self.config_manager.data_file_path())
        store.load()
        self.service = TimesheetService(store, self.config)

        last_month = self.config.ui_prefs.last_month
        self.month = last_month if 1 <= last_month <= 12 else date.today().month
        self._row_widgets: List[Dict[str, QWidget]] = []
        self._rows: List[DayRow] = []

        self._init_ui()
        self._connect_signals()
        self._refresh_all()

    @property
    def year(self) -> int:
        return self.service.store.year

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------
    def _init_ui(self):
        """Initialize the user interface."""
        self.setWindowTitle("勤怠管理")
        self.setMinimumSize(1100, 760)
        self.resize(1180, 820)

        self._create_menu_bar()

        central = QWidget()
        self.setCentralWidget(central)

        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(10, 10, 10, 10)
        main_layout.setSpacing(10)

        main_layout.addLayout(self._create_header())

        self.month_tabs = QTabBar()
        for month in range(1, 13):
            self.month_tabs.addTab(f"{month}月")
        self.month_tabs.setCurrentIndex(self.month - 1)
        main_layout.addWidget(self.month_tabs)

        self.table = self._create_table()
        main_layout.addWidget(self.table, stretch=1)

        main_layout.addWidget(self._create_summary_group())

        self._apply_styles()

    def _create_menu_bar(self):
        """Create the menu bar."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("ファイル")

        export_action = QAction("Excel / PDF 出力", self)
        export_action.triggered.connect(self._on_export)
        file_menu.addAction(export_action)

        file_menu.addSeparator()

        backup_action = QAction("バックアップを書き出す", self)
        backup_action.triggered.connect(self._on_export_backup)
        file_menu.addAction(backup_action)

        restore_action = QAction("バックアップから復元", self)
        restore_action.triggered.connect(self._on_import_backup)
        file_menu.addAction(restore_action)

        file_menu.addSeparator()

        exit_action = QAction("終了", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # Theme menu
        theme_menu = menubar.addMenu("テーマ")
        theme_group = QActionGroup(self)
        theme_group.setExclusive(True)

        current_theme = self.config.ui_prefs.theme_name
        for theme_name in ThemeManager.get_available_themes():
            action = QAction(theme_name, self, checkable=True)
            action.setData(theme_name)
            if theme_name == current_theme:
                action.setChecked(True)
            action.triggered.connect(lambda checked, name=theme_name: self._on_switch_theme(name))
            theme_menu.addAction(action)
            theme_group.addAction(action)

        settings_action = QAction("設定", self)
        settings_action.triggered.connect(self._on_open_settings)
        menubar.addAction(settings_action)

    def _create_header(self) -> QHBoxLayout:
        layout = QHBoxLayout()
        layout.setSpacing(8)

        self.btn_prev_year = QPushButton("◀")
        self.btn_prev_year.setMaximumWidth(40)
        layout.addWidget(self.btn_prev_year)

        self.lbl_year = QLabel()
        self.lbl_year.setStyleSheet("font-size: 20px; font-weight: bold;")
        layout.addWidget(self.lbl_year)

        self.btn_next_year = QPushButton("▶")
        self.btn_next_year.setMaximumWidth(40)
        layout.addWidget(self.btn_next_year)

        layout.addStretch()

        self.lbl_wage = QLabel()
        layout.addWidget(self.lbl_wage)

        self.btn_settings = QPushButton("設定")
        layout.addWidget(self.btn_settings)

        return layout

    def _create_table(self) -> QTableWidget:
        table = QTableWidget(0, len(TABLE_HEADERS))
        table.setHorizontalHeaderLabels(TABLE_HEADERS)
        table.verticalHeader().setVisible(False)
        table.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)

        header = table.horizontalHeader()
        widths = {
            COL_DATE: 70, COL_HOLIDAY: 110, COL_CATEGORY: 100,
            COL_IN: 70, COL_IN_PUNCH: 56, COL_OUT: 70, COL_OUT_PUNCH: 56,
            COL_WORKED: 60, COL_JUDGMENT: 110, COL_PAY: 90,
        }
        for col, width in widths.items():
            table.setColumnWidth(col, width)
        header.setSectionResizeMode(COL_NOTE, QHeaderView.ResizeMode.Stretch)
        return table

    def _create_summary_group(self) -> QGroupBox:
        """Create the monthly summary group box."""
        group = QGroupBox("月次集計")
        layout = QGridLayout(group)
        layout.setSpacing(8)

        self.summary_labels: Dict[str, QLabel] = {}
        for index, (attr, caption) in enumerate(SUMMARY_FIELDS):
            layout.addWidget(QLabel(caption), 0, index)
            value = QLabel("-")
            value.setObjectName("summaryValue")
            value.setAlignment(Qt.AlignmentFlag.AlignCenter)
            layout.addWidget(value, 1, index)
            self.summary_labels[attr] = value

        self.btn_export = QPushButton("Excel / PDF 出力")
        layout.addWidget(self.btn_export, 0, len(SUMMARY_FIELDS), 2, 1)
        return group

    def _apply_styles(self):
        """Apply visual styles to the window using ThemeManager."""
        self.theme = ThemeManager.get_theme(self.config.ui_prefs.theme_name)
        self.setStyleSheet(self.theme.stylesheet)

    def _connect_signals(self):
        """Connect UI signals to handlers."""
        self.month_tabs.currentChanged.connect(self._on_month_changed)
        self.btn_prev_year.clicked.connect(lambda: self._on_change_year(-1))
        self.btn_next_year.clicked.connect(lambda: self._on_change_year(1))
        self.btn_settings.clicked.connect(self._on_open_settings)
        self.btn_export.clicked.connect(self._on_export)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _refresh_all(self):
        """Rebuild the header, table and summary for the current year/month."""
        self.lbl_year.setText(f"{self.year}年")
        self.lbl_wage.setText(f"時給 {self.service.store.hourly_wage:,}円")
        self._populate_table()
        self._refresh_summary()

    def _populate_table(self):
        self._rows = self.service.month_rows(self.year, self.month)
        self._row_widgets = []
        self.table.clearContents()
        self.table.setRowCount(len(self._rows))

        for index, row in enumerate(self._rows):
            for col in (COL_DATE, COL_HOLIDAY, COL_WORKED, COL_JUDGMENT, COL_PAY):
                item = QTableWidgetItem()
                item.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
                self.table.setItem(index, col, item)
            self.table.item(index, COL_DATE).setText(row.date_label)
            self._row_widgets.append(self._create_row_widgets(index, row.date_key))
            self._render_row(index)

    def _create_row_widgets(self, index: int, key: str) -> Dict[str, QWidget]:
        category = QComboBox()
        for caption, value in CATEGORY_CHOICES:
            category.addItem(caption, value.value)
        category.currentIndexChanged.connect(
            lambda _, k=key, c=category: self._on_category_changed(k, Category.from_value(c.currentData()))
        )
        self.table.setCellWidget(index, COL_CATEGORY, category)

        validator = QRegularExpressionValidator(QRegularExpression(HHMM_REGEX))
        widgets: Dict[str, QWidget] = {"category": category}
        for side, edit_col, button_col, caption in (
            (PUNCH_IN, COL_IN, COL_IN_PUNCH, "出勤"),
            (PUNCH_OUT, COL_OUT, COL_OUT_PUNCH, "退勤"),
        ):
            edit = QLineEdit()
            edit.setPlaceholderText("--:--")
            edit.setValidator(validator)
            edit.setAlignment(Qt.AlignmentFlag.AlignCenter)
            edit.editingFinished.connect(
                lambda k=key, s=side, e=edit: self._on_punch_edited(k, s, e.text())
            )
            self.table.setCellWidget(index, edit_col, edit)

            button = QPushButton(caption)
            button.clicked.connect(lambda _, k=key, s=side: self._on_punch_now(k, s))
            self.table.setCellWidget(index, button_col, button)

            widgets[f"{side}_edit"] = edit
            widgets[f"{side}_button"] = button

        note_box = QWidget()
        note_layout = QHBoxLayout(note_box)
        note_layout.setContentsMargins(2, 0, 2, 0)
        note_toggle = QPushButton("メモ")
        note_toggle.setMaximumWidth(60)
        note_toggle.clicked.connect(lambda _, k=key: self._on_toggle_note(k))
        note_edit = QLineEdit()
        note_edit.editingFinished.connect(
            lambda k=key, e=note_edit: self.service.set_note(self.year, k, e.text())
        )
        note_layout.addWidget(note_toggle)
        note_layout.addWidget(note_edit, stretch=1)
        self.table.setCellWidget(index, COL_NOTE, note_box)

        widgets["note_toggle"] = note_toggle
        widgets["note_edit"] = note_edit
        return widgets

    def _render_row(self, index: int):
        """Push one row's record and metrics into its cells and editors."""
        row = self._rows[index]
        metrics = row.metrics
        widgets = self._row_widgets[index]

        holiday_text = metrics.holiday_name or ("会社休日" if metrics.is_company_holiday else "")
        self.table.item(index, COL_HOLIDAY).setText(holiday_text)
        self.table.item(index, COL_WORKED).setText(metrics.worked_text)
        self.table.item(index, COL_JUDGMENT).setText("・".join(label.value for label in metrics.judgment))
        self.table.item(index, COL_PAY).setText(f"{metrics.total_pay:,}円" if metrics.total_pay else "")

        background = None
        if metrics.is_sun_or_holiday:
            background = QColor(self.theme.color('sun_holiday_bg'))
        elif metrics.is_saturday:
            background = QColor(self.theme.color('saturday_bg'))
        for col in (COL_DATE, COL_HOLIDAY, COL_WORKED, COL_JUDGMENT, COL_PAY):
            item = self.table.item(index, col)
            if background is not None:
                item.setBackground(background)
            else:
                item.setData(Qt.ItemDataRole.BackgroundRole, None)

        judgment_item = self.table.item(index, COL_JUDGMENT)
        if metrics.judgment_tone == JudgmentTone.WARNING:
            judgment_item.setForeground(QColor(self.theme.color('warning')))
        elif metrics.judgment_tone == JudgmentTone.POSITIVE:
            judgment_item.setForeground(QColor(self.theme.color('positive')))
        else:
            judgment_item.setData(Qt.ItemDataRole.ForegroundRole, None)

        category = widgets["category"]
        category.blockSignals(True)
        category.setCurrentIndex(category.findData(row.record.category.value))
        category.blockSignals(False)

        for side, value in ((PUNCH_IN, row.record.check_in), (PUNCH_OUT, row.record.check_out)):
            edit = widgets[f"{side}_edit"]
            edit.blockSignals(True)
            edit.setText(value or "")
            edit.blockSignals(False)
            edit.setEnabled(metrics.allow_time_entry)
            widgets[f"{side}_button"].setEnabled(metrics.allow_time_entry)

        note_edit = widgets["note_edit"]
        note_edit.blockSignals(True)
        note_edit.setText(row.record.note)
        note_edit.blockSignals(False)
        note_edit.setVisible(row.record.note_open)
        widgets["note_toggle"].setText("閉じる" if row.record.note_open else "メモ")

    def _refresh_row(self, key: str):
        """Recompute a single day after an edit and update the summary."""
        for index, row in enumerate(self._rows):
            if row.date_key == key:
                self._rows[index] = DayRow(
                    date_key=row.date_key,
                    day=row.day,
                    date_label=row.date_label,
                    record=self.service.store.get_day(self.year, key),
                    metrics=self.service.day_metrics(self.year, key),
                )
                self._render_row(index)
                break
        self._refresh_summary()

    def _refresh_summary(self):
        summary = self.service.month_summary(self.year, self.month)
        for attr, label in self.summary_labels.items():
            label.setText(getattr(summary, attr))

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------
    def _on_month_changed(self, index: int):
        self.month = index + 1
        self.config.ui_prefs.last_month = self.month
        self._populate_table()
        self._refresh_summary()

    def _on_change_year(self, delta: int):
        self.service.set_year(self.year + delta)
        self._refresh_all()

    def _on_punch_edited(self, key: str, side: str, text: str):
        self.service.set_punch(self.year, key, side, text)
        self._refresh_row(key)

    def _on_punch_now(self, key: str, side: str):
        self.service.punch_now(self.year, key, side)
        self._refresh_row(key)

    def _on_category_changed(self, key: str, category: Category):
        self.service.set_category(self.year, key, category)
        self._refresh_row(key)

    def _on_toggle_note(self, key: str):
        self.service.toggle_note(self.year, key)
        self._refresh_row(key)

    def _on_switch_theme(self, theme_name: str):
        """Handle theme switching."""
        self.config.ui_prefs.theme_name = theme_name
        self.config_manager.save()
        self._apply_styles()
        self._refresh_all()

    def _on_open_settings(self):
        """Open the settings dialog; changes are applied on OK."""
        from ui.settings_dialog import SettingsDialog
        dialog = SettingsDialog(self.config, self.service, self)
        dialog.exec()
        if dialog.result():
            self.config_manager.save()
        # Company holidays are saved immediately, so always re-render
        self._refresh_all()

    def _on_export(self):
        """Export the current month to Excel (and PDF when enabled)."""
        settings = self.config.output_settings
        start_dir = settings.output_dir or str(Path.cwd())
        dir_path = QFileDialog.getExistingDirectory(self, "出力先フォルダを選択", start_dir)
        if not dir_path:
            return

        settings.output_dir = dir_path
        self.config_manager.save()

        try:
            result = self.service.export_month(self.year, self.month, Path(dir_path))
        except PermissionError:
            self._show_message_box(
                "critical", "エラー",
                "ファイルに書き込めません。\n\nExcel でファイルを開いている場合は閉じてから再度お試しください。"
            )
            return
        except OSError as e:
            logger.error(f"出力に失敗しました: {e}")
            self._show_message_box("critical", "エラー", f"出力に失敗しました:\n{e}")
            return

        message = f"出力しました:\n{result.excel_path}"
        if result.pdf_path:
            message += f"\n{result.pdf_path}"
        if result.pdf_error:
            self._show_message_box("warning", "PDF 出力", f"{message}\n\nPDF の出力に失敗しました:\n{result.pdf_error}")
        else:
            self._show_message_box("information", "完了", message)

    def _on_export_backup(self):
        """Write the backup text to a file and copy it to the clipboard."""
        default_name = str(Path.cwd() / f"kintai_backup_{date.today():%Y%m%d}.json")
        file_path, _ = QFileDialog.getSaveFileName(
            self,
            "バックアップの保存先",
            default_name,
            "JSON Files (*.json);;All Files (*)"
        )
        if not file_path:
            return

        text = self.service.export_backup()
        try:
            Path(file_path).write_text(text, encoding='utf-8')
        except OSError as e:
            self._show_message_box("critical", "エラー", f"保存に失敗しました:\n{e}")
            return

        QApplication.clipboard().setText(text)
        self._show_message_box("information", "完了", "バックアップを書き出しました。(クリップボードにもコピーしました)")

    def _on_import_backup(self):
        """Restore the whole state from a backup file."""
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "バックアップを選択",
            "",
            "JSON Files (*.json);;All Files (*)"
        )
        if not file_path:
            return

        answer = QMessageBox.question(
            self, "確認", "現在のデータはすべて上書きされます。復元しますか?"
        )
        if answer != QMessageBox.StandardButton.Yes:
            return

        try:
            text = Path(file_path).read_text(encoding='utf-8')
            self.service.import_backup(text)
        except BackupFormatError as e:
            self._show_message_box("warning", "復元", str(e))
            return
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"バックアップを読み込めません: {e}")
            self._show_message_box("critical", "復元", "復元に失敗しました。")
            return

        self._refresh_all()
        self._show_message_box("information", "復元", "復元しました。")

    def _show_message_box(self, msg_type: str, title: str, message: str):
        """Show a message box with black text color.

        Args:
            msg_type: Type of message box - 'information', 'warning', 'critical'
            title: Dialog title
            message: Message content
        """
        msg_box = QMessageBox(self)
        msg_box.setWindowTitle(title)
        msg_box.setText(message)

        if msg_type == "information":
            msg_box.setIcon(QMessageBox.Icon.Information)
        elif msg_type == "warning":
            msg_box.setIcon(QMessageBox.Icon.Warning)
        elif msg_type == "critical":
            msg_box.setIcon(QMessageBox.Icon.Critical)

        msg_box.setStyleSheet("""
            QMessageBox {
                background-color: #ffffff;
            }
            QMessageBox QLabel {
                color: #000000;
                font-size: 13px;
            }
            QMessageBox QPushButton {
                background-color: #0078d4;
                color: white;
                border: none;
                border-radius: 4px;
                padding: 6px 16px;
                min-width: 60px;
            }
        """)

        msg_box.exec()

    def closeEvent(self, event):
        """Handle window close - save config and records."""
        self.config.ui_prefs.last_month = self.month
        self.config_manager.save()
        self.service.store.save()
        event.accept()


def run_app():
    """Run the application."""
    app = QApplication(sys.argv)
    app.setStyle('Fusion')

    window = MainWindow()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run_app()
