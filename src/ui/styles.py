"""
Style Management Module

Handles application theming for the timesheet window.
Each theme is a color palette; the stylesheet is rendered from one template
so new themes only need to supply colors.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Type

STYLESHEET_TEMPLATE = """
    QMainWindow, QDialog {{
        background-color: {window_bg};
    }}
    QWidget {{
        font-family: 'Yu Gothic UI', 'Meiryo', 'Segoe UI', system-ui, sans-serif;
        font-size: 13px;
        color: {text};
    }}
    QGroupBox {{
        font-weight: bold;
        border: 1px solid {border};
        border-radius: 6px;
        margin-top: 12px;
        padding-top: 16px;
        background-color: {panel_bg};
    }}
    QGroupBox::title {{
        subcontrol-origin: margin;
        left: 12px;
        padding: 0 5px;
        color: {accent_text};
    }}
    QTableWidget, QListWidget {{
        background-color: {input_bg};
        alternate-background-color: {panel_bg};
        gridline-color: {border};
        border: 1px solid {border};
        border-radius: 4px;
        outline: none;
    }}
    QTableWidget::item:selected, QListWidget::item:selected {{
        background-color: {selection};
        color: {text};
    }}
    QHeaderView::section {{
        background-color: {header_bg};
        color: #ffffff;
        border: none;
        border-right: 1px solid {border};
        padding: 4px;
        font-weight: bold;
    }}
    QTabBar::tab {{
        background-color: {panel_bg};
        border: 1px solid {border};
        padding: 6px 12px;
        min-width: 32px;
    }}
    QTabBar::tab:selected {{
        background-color: {accent};
        color: #ffffff;
    }}
    QLineEdit, QTimeEdit, QSpinBox, QDateEdit, QComboBox {{
        background-color: {input_bg};
        border: 1px solid {border};
        border-radius: 4px;
        padding: 3px 6px;
        color: {text};
        selection-background-color: {selection};
    }}
    QLineEdit:focus, QTimeEdit:focus, QSpinBox:focus, QDateEdit:focus, QComboBox:hover {{
        border: 1px solid {accent};
    }}
    QComboBox QAbstractItemView {{
        background-color: {panel_bg};
        color: {text};
        selection-background-color: {selection};
        border: 1px solid {border};
        outline: none;
    }}
    QPushButton {{
        background-color: {accent};
        color: white;
        border: none;
        border-radius: 4px;
        padding: 6px 14px;
        font-weight: bold;
    }}
    QPushButton:hover {{
        background-color: {accent_hover};
    }}
    QPushButton:disabled {{
        background-color: {border};
        color: {muted_text};
    }}
    QMenuBar {{
        background-color: {panel_bg};
        color: {text};
        border-bottom: 1px solid {border};
    }}
    QMenuBar::item:selected, QMenu::item:selected {{
        background-color: {selection};
    }}
    QMenu {{
        background-color: {panel_bg};
        border: 1px solid {border};
        color: {text};
    }}
    QLabel#summaryValue {{
        font-size: 15px;
        font-weight: bold;
        color: {accent_text};
    }}
"""


class Theme(ABC):
    """Abstract base class for Themes."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def palette(self) -> Dict[str, str]:
        """Color palette; keys are the template placeholders plus row colors."""
        pass

    @property
    def stylesheet(self) -> str:
        """Returns the fully compiled stylesheet string."""
        return STYLESHEET_TEMPLATE.format(**self.palette)

    def color(self, key: str) -> str:
        return self.palette[key]


class DarkTheme(Theme):
    """The default dark theme for the application."""

    @property
    def name(self) -> str:
        return "Dark Mode"

    @property
    def palette(self) -> Dict[str, str]:
        return {
            'window_bg': '#1e1e1e',
            'panel_bg': '#252526',
            'input_bg': '#2d2d30',
            'border': '#3e3e42',
            'text': '#e0e0e0',
            'muted_text': '#8a8a8a',
            'accent': '#0078d4',
            'accent_hover': '#106ebe',
            'accent_text': '#4ec9b0',
            'selection': '#37373d',
            'header_bg': '#2f4f7f',
            'saturday_bg': '#1f3047',
            'sun_holiday_bg': '#4a2630',
            'positive': '#4fa3e0',
            'warning': '#ff6b6b',
        }


class ClassicWhiteTheme(Theme):
    """A minimal, Windows-native like light theme."""

    @property
    def name(self) -> str:
        return "Classic White"

    @property
    def palette(self) -> Dict[str, str]:
        return {
            'window_bg': '#f0f0f0',
            'panel_bg': '#ffffff',
            'input_bg': '#ffffff',
            'border': '#c0c0c0',
            'text': '#000000',
            'muted_text': '#808080',
            'accent': '#0078d4',
            'accent_hover': '#106ebe',
            'accent_text': '#003399',
            'selection': '#cce8ff',
            'header_bg': '#4472c4',
            'saturday_bg': '#ddebf7',
            'sun_holiday_bg': '#fce4ec',
            'positive': '#1565c0',
            'warning': '#d32f2f',
        }


class ThemeManager:
    """Factory for application themes. Stateless."""

    _themes: Dict[str, Type[Theme]] = {
        "Dark Mode": DarkTheme,
        "Classic White": ClassicWhiteTheme
    }

    @classmethod
    def get_theme(cls, theme_name: str) -> Theme:
        """Factory method to get a theme instance by name."""
        theme_cls = cls._themes.get(theme_name)
        if not theme_cls:
            # Unknown names fall back to the default theme
            return DarkTheme()
        return theme_cls()

    @classmethod
    def get_available_themes(cls) -> List[str]:
        """Returns a list of available theme names."""
        return list(cls._themes.keys())
