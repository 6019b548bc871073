"""
Record Store Module

JSON persistence for day records, company holidays and the hourly wage.

Persisted shape (compatible with version 1 backups):
    {
      "hourlyWage": 1500,
      "year": 2025,
      "yearData": {
        "2025": {
          "companyHolidays": ["2025-12-29", ...],
          "days": {"2025-04-01": {"in": "09:30", "out": "18:30",
                                  "category": "normal", "note": "", "noteOpen": false}}
        }
      }
    }
"""

import json
import math
from calendar import monthrange
from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional

from domain.entities import DayRecord
from domain.time_utils import parse_ymd, ymd
from infrastructure.logger import get_logger

logger = get_logger("RecordStore")

MIN_YEAR = 2000
MAX_YEAR = 2099
DEFAULT_HOURLY_WAGE = 1500


@dataclass
class YearData:
    """Per-year container of company holidays and day records."""
    company_holidays: List[str] = field(default_factory=list)
    days: Dict[str, DayRecord] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "companyHolidays": list(self.company_holidays),
            "days": {key: record.to_dict() for key, record in self.days.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "YearData":
        holidays = data.get("companyHolidays") or []
        days = data.get("days") or {}
        return cls(
            company_holidays=sorted({h for h in holidays if parse_ymd(h)}),
            days={
                key: DayRecord.from_dict(value)
                for key, value in days.items()
                if parse_ymd(key) and isinstance(value, dict)
            },
        )


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class RecordStore:
    """
    Year-keyed store of day records.

    Responsibilities:
    - Load/save the state as JSON, falling back to a fresh state on parse failure
    - Create-on-read day records with NORMAL category and no punches
    - Manage the per-year company holiday list and the hourly wage

    Callers receive copies of records; changes go through set_day().
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        today: Optional[date] = None,
        autosave: bool = True
    ):
        """
        Initialize store.

        Args:
            path: JSON file path; None keeps the state in memory only
            today: Date used to pick the default year (defaults to date.today())
            autosave: Save after every mutation when a path is set
        """
        self.path = path
        self.autosave = autosave
        self._today = today or date.today()
        self._hourly_wage: int = DEFAULT_HOURLY_WAGE
        self._year: int = self._today.year
        self._year_data: Dict[str, YearData] = {}
        self.ensure_year(self._year)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Load state from the JSON file; a missing or broken file yields defaults."""
        self._reset()
        if self.path is None or not self.path.exists():
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            self._apply_state(data)
            logger.info(f"勤怠データを読み込みました: {self.path}")
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError, AttributeError,
                ValueError, OverflowError) as e:
            logger.warning(f"勤怠データを読み込めないため初期状態で開始します: {e}")
            self._reset()

    def save(self) -> None:
        """Write state to the JSON file."""
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)
        logger.debug(f"勤怠データを保存しました: {self.path}")

    def to_dict(self) -> dict:
        """Snapshot of the full state in persisted shape."""
        return {
            "hourlyWage": self._hourly_wage,
            "year": self._year,
            "yearData": {y: data.to_dict() for y, data in self._year_data.items()},
        }

    def replace_state(self, data: dict) -> None:
        """Replace the whole state (e.g. from a validated backup) and persist it."""
        self._apply_state(data)
        self._changed()

    def _reset(self) -> None:
        self._hourly_wage = DEFAULT_HOURLY_WAGE
        self._year = self._today.year
        self._year_data = {}
        self.ensure_year(self._year)

    def _apply_state(self, data: dict) -> None:
        """Parse a persisted state and swap it in; on error the current state is kept."""
        if not isinstance(data, dict):
            raise ValueError("state must be a JSON object")

        hourly_wage = DEFAULT_HOURLY_WAGE
        wage = data.get("hourlyWage")
        if _is_number(wage):
            if not math.isfinite(wage) or wage < 0:
                raise ValueError(f"時給が不正です: {wage}")
            hourly_wage = int(math.floor(wage + 0.5))

        year = self._today.year
        if _is_number(data.get("year")) and data["year"]:
            if not math.isfinite(data["year"]):
                raise ValueError(f"年が不正です: {data['year']}")
            year = max(MIN_YEAR, min(MAX_YEAR, int(data["year"])))

        year_data: Dict[str, YearData] = {}
        raw_year_data = data.get("yearData")
        if isinstance(raw_year_data, dict):
            year_data = {
                str(y): YearData.from_dict(v)
                for y, v in raw_year_data.items()
                if isinstance(v, dict)
            }

        self._hourly_wage = hourly_wage
        self._year = year
        self._year_data = year_data
        self.ensure_year(year)

    def _changed(self) -> None:
        if self.autosave:
            self.save()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    @property
    def hourly_wage(self) -> int:
        return self._hourly_wage

    def set_hourly_wage(self, value: float) -> int:
        """
        Set the hourly wage.

        Raises:
            ValueError: If the value is negative or not a finite number
        """
        if not _is_number(value) or not math.isfinite(value) or value < 0:
            raise ValueError(f"時給が不正です: {value}")
        self._hourly_wage = int(math.floor(value + 0.5))
        self._changed()
        return self._hourly_wage

    @property
    def year(self) -> int:
        return self._year

    def set_year(self, value: int) -> int:
        """Select the working year, clamped to 2000-2099."""
        year = max(MIN_YEAR, min(MAX_YEAR, int(value)))
        self._year = year
        self.ensure_year(year)
        self._changed()
        return year

    # ------------------------------------------------------------------
    # Day records
    # ------------------------------------------------------------------
    def ensure_year(self, year: int) -> YearData:
        key = str(year)
        if key not in self._year_data:
            self._year_data[key] = YearData()
        return self._year_data[key]

    def get_day(self, year: int, key: str) -> DayRecord:
        """Get a copy of a day record, creating the default record if missing."""
        days = self.ensure_year(year).days
        if key not in days:
            days[key] = DayRecord()
        return replace(days[key])

    def set_day(self, year: int, key: str, **patch) -> DayRecord:
        """
        Apply a partial update to a day record.

        Args:
            year: Year the record belongs to
            key: Date key
            **patch: DayRecord fields to overwrite

        Returns:
            Copy of the updated record
        """
        days = self.ensure_year(year).days
        current = days.get(key) or DayRecord()
        days[key] = replace(current, **patch)
        self._changed()
        return replace(days[key])

    def records_for_month(self, year: int, month: int) -> Dict[str, DayRecord]:
        """Copies of the stored records of a month (missing days are omitted)."""
        days = self.ensure_year(year).days
        _, num_days = monthrange(year, month)
        records = {}
        for day in range(1, num_days + 1):
            key = ymd(year, month, day)
            if key in days:
                records[key] = replace(days[key])
        return records

    # ------------------------------------------------------------------
    # Company holidays
    # ------------------------------------------------------------------
    def company_holidays(self, year: int) -> FrozenSet[str]:
        return frozenset(self.ensure_year(year).company_holidays)

    def add_company_holiday(self, year: int, key: str) -> None:
        """
        Mark a date as a company holiday.

        Raises:
            ValueError: If the key is not a valid date of the given year
        """
        parsed = parse_ymd(key)
        if not parsed:
            raise ValueError(f"日付の形式が不正です: {key}")
        if parsed[0] != year:
            raise ValueError("対象年と同じ年の日付を選択してください。")
        data = self.ensure_year(year)
        data.company_holidays = sorted(set(data.company_holidays) | {key})
        self._changed()

    def remove_company_holiday(self, year: int, key: str) -> None:
        data = self.ensure_year(year)
        data.company_holidays = [h for h in data.company_holidays if h != key]
        self._changed()
