"""
Configuration Manager Module

Handles loading, saving, and managing application configuration.
Provides bi-directional mapping between UI state and JSON persistence.
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from infrastructure.logger import get_logger

logger = get_logger("ConfigManager")

_HHMM = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


@dataclass
class WorkRule:
    """Baseline punch times and pay rules for a working day."""
    in_time: str = "09:30"       # 定時出勤
    out_time: str = "18:30"      # 定時退勤
    break_minutes: int = 60      # 休憩 (固定控除)
    regular_hours: float = 8.0   # 所定労働時間
    premium_rate: float = 0.25   # 割増率


@dataclass
class Paths:
    """File paths configuration."""
    data_file: str = ""          # Empty = kintai_data.json beside the config
    custom_font_path: str = ""   # Custom font path for PDF generation


@dataclass
class UIPrefs:
    """UI preferences."""
    theme_name: str = "Dark Mode"
    last_month: int = 0          # 0 = current month on startup


@dataclass
class OutputSettings:
    """Output settings for exported timesheets."""
    output_dir: str = ""  # Default empty = project root
    filename_pattern: str = "勤怠_{year}_{month}.xlsx"
    generate_pdf: bool = True
    pdf_output_dir: str = ""   # 空文字 = xlsx と同じフォルダ
    pdf_filename_pattern: str = "勤怠_{year}_{month}.pdf"


@dataclass
class AppConfig:
    """Main application configuration container."""
    paths: Paths = field(default_factory=Paths)
    work_rule: WorkRule = field(default_factory=WorkRule)
    ui_prefs: UIPrefs = field(default_factory=UIPrefs)
    output_settings: OutputSettings = field(default_factory=OutputSettings)


class ConfigManager:
    """
    Manages application configuration with JSON persistence.

    Responsibilities:
    - Load configuration from JSON file
    - Save configuration to JSON file
    - Provide default configuration
    - Convert between dataclass and dict representations
    """

    DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: AppConfig = AppConfig()

    @property
    def config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def load(self) -> AppConfig:
        """Load configuration from JSON file."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self._config = self._dict_to_config(data)
            except (json.JSONDecodeError, KeyError, TypeError, AttributeError, ValueError) as e:
                logger.warning(f"設定ファイルを読み込めないため既定値を使用します: {e}")
                self._config = AppConfig()
        else:
            self._config = AppConfig()
        return self._config

    def save(self) -> None:
        """Save current configuration to JSON file."""
        data = self._config_to_dict(self._config)
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.debug(f"設定を保存しました: {self.config_path}")

    def update(self, **kwargs) -> None:
        """Update specific configuration values."""
        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
        self.save()

    def data_file_path(self) -> Path:
        """Resolve the record store path."""
        if self._config.paths.data_file:
            return Path(self._config.paths.data_file)
        return self.config_path.parent / "kintai_data.json"

    def _config_to_dict(self, config: AppConfig) -> dict:
        """Convert AppConfig dataclass to dictionary."""
        return {
            "paths": {
                "data_file": config.paths.data_file,
                "custom_font_path": config.paths.custom_font_path
            },
            "work_rule": {
                "in_time": config.work_rule.in_time,
                "out_time": config.work_rule.out_time,
                "break_minutes": config.work_rule.break_minutes,
                "regular_hours": config.work_rule.regular_hours,
                "premium_rate": config.work_rule.premium_rate
            },
            "ui_prefs": {
                "theme_name": config.ui_prefs.theme_name,
                "last_month": config.ui_prefs.last_month
            },
            "output_settings": {
                "output_dir": config.output_settings.output_dir,
                "filename_pattern": config.output_settings.filename_pattern,
                "generate_pdf": config.output_settings.generate_pdf,
                "pdf_output_dir": config.output_settings.pdf_output_dir,
                "pdf_filename_pattern": config.output_settings.pdf_filename_pattern
            }
        }

    def _dict_to_config(self, data: dict) -> AppConfig:
        """Convert dictionary to AppConfig dataclass."""
        paths_data = data.get("paths", {})
        rule_data = data.get("work_rule", {})
        ui_prefs_data = data.get("ui_prefs", {})
        output_settings_data = data.get("output_settings", {})

        # Build Paths
        paths = Paths(
            data_file=paths_data.get("data_file", ""),
            custom_font_path=paths_data.get("custom_font_path", "")
        )

        # Build WorkRule - malformed times fall back to the defaults
        defaults = WorkRule()
        in_time = rule_data.get("in_time", defaults.in_time)
        out_time = rule_data.get("out_time", defaults.out_time)
        work_rule = WorkRule(
            in_time=in_time if _HHMM.match(str(in_time)) else defaults.in_time,
            out_time=out_time if _HHMM.match(str(out_time)) else defaults.out_time,
            break_minutes=int(rule_data.get("break_minutes", defaults.break_minutes)),
            regular_hours=float(rule_data.get("regular_hours", defaults.regular_hours)),
            premium_rate=float(rule_data.get("premium_rate", defaults.premium_rate))
        )

        # Build UIPrefs
        ui_prefs = UIPrefs(
            theme_name=ui_prefs_data.get("theme_name", "Dark Mode"),
            last_month=int(ui_prefs_data.get("last_month", 0))
        )

        # Build OutputSettings
        output_settings = OutputSettings(
            output_dir=output_settings_data.get("output_dir", ""),
            filename_pattern=output_settings_data.get("filename_pattern", "勤怠_{year}_{month}.xlsx"),
            generate_pdf=output_settings_data.get("generate_pdf", True),
            pdf_output_dir=output_settings_data.get("pdf_output_dir", ""),
            pdf_filename_pattern=output_settings_data.get("pdf_filename_pattern", "勤怠_{year}_{month}.pdf")
        )

        return AppConfig(
            paths=paths,
            work_rule=work_rule,
            ui_prefs=ui_prefs,
            output_settings=output_settings
        )
