"""
Domain Entities Module

Core domain entities using dataclasses for the timesheet system.
These entities represent the core business concepts independent of infrastructure.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Tuple

from .time_utils import format_hours, format_yen


class Category(Enum):
    """Attendance category of a single day."""
    NORMAL = "normal"              # 通常
    PAID_LEAVE = "paid_leave"      # 有給
    HOLIDAY_WORK = "holiday_work"  # 休日出勤

    @classmethod
    def from_value(cls, value: Optional[str]) -> "Category":
        """Parse a stored category value, falling back to NORMAL."""
        for category in cls:
            if category.value == value:
                return category
        return cls.NORMAL


class JudgmentLabel(Enum):
    """Attendance judgment shown next to a day."""
    LATE = "遅刻"
    EARLY_ARRIVAL = "早出"
    EARLY_LEAVE = "早退"
    OVERTIME = "残業"
    ON_TIME = "定時"


class JudgmentTone(Enum):
    """Display tone of the judgment badges."""
    POSITIVE = auto()  # blue
    WARNING = auto()   # red


@dataclass
class DayRecord:
    """
    A single day's stored entry.

    Attributes:
        check_in: Punch-in time as HH:MM (None if not recorded)
        check_out: Punch-out time as HH:MM (None if not recorded)
        category: Attendance category
        note: Free-text memo
        note_open: Whether the memo area is expanded in the UI
    """
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    category: Category = Category.NORMAL
    note: str = ""
    note_open: bool = False

    def to_dict(self) -> dict:
        """Convert to the persisted JSON shape."""
        return {
            "in": self.check_in,
            "out": self.check_out,
            "category": self.category.value,
            "note": self.note,
            "noteOpen": self.note_open,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DayRecord":
        """Build a record from the persisted JSON shape, defaulting missing fields."""
        check_in = data.get("in")
        check_out = data.get("out")
        note = data.get("note")
        return cls(
            check_in=check_in if isinstance(check_in, str) and check_in else None,
            check_out=check_out if isinstance(check_out, str) and check_out else None,
            category=Category.from_value(data.get("category")),
            note=note if isinstance(note, str) else "",
            note_open=bool(data.get("noteOpen", False)),
        )


@dataclass(frozen=True)
class PayBreakdown:
    """
    Wage figures for one day.

    Attributes:
        regular_hours: Hours paid at the base rate
        overtime_hours: Hours that earn the 25% premium
        regular_pay: Rounded base-rate pay
        overtime_pay: Rounded premium-only portion
        total_pay: Rounded total, computed from unrounded products
    """
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    regular_pay: int = 0
    overtime_pay: int = 0
    total_pay: int = 0


@dataclass(frozen=True)
class DayMetrics:
    """
    Derived view of one day. Never persisted; recomputed on every read.
    """
    date_key: str
    category: Category
    is_saturday: bool
    is_sunday: bool
    is_national_holiday: bool
    is_company_holiday: bool
    is_off_day: bool
    is_sun_or_holiday: bool
    holiday_name: str
    allow_time_entry: bool
    worked_minutes: int
    has_record: bool
    worked_text: str
    judgment: Tuple[JudgmentLabel, ...] = ()
    judgment_tone: Optional[JudgmentTone] = None
    pay: PayBreakdown = field(default_factory=PayBreakdown)

    @property
    def is_holiday_work(self) -> bool:
        return self.category == Category.HOLIDAY_WORK

    @property
    def regular_hours(self) -> float:
        return self.pay.regular_hours

    @property
    def overtime_hours(self) -> float:
        return self.pay.overtime_hours

    @property
    def regular_pay(self) -> int:
        return self.pay.regular_pay

    @property
    def overtime_pay(self) -> int:
        return self.pay.overtime_pay

    @property
    def total_pay(self) -> int:
        return self.pay.total_pay


@dataclass
class MonthlySummary:
    """
    Totals for one month.

    Attributes:
        year: Summary year
        month: Summary month (1-12)
        planned_days: Days that are not weekends, national or company holidays
        worked_days: Paid-leave days plus days with both punches
        total_minutes: Sum of worked minutes
        regular_hours: Sum of base-rate hours
        overtime_hours: Sum of premium hours
        regular_pay: Sum of daily regular pay
        overtime_pay: Sum of daily premium pay
        total_pay: Sum of daily total pay
    """
    year: int
    month: int
    planned_days: int = 0
    worked_days: int = 0
    total_minutes: int = 0
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    regular_pay: int = 0
    overtime_pay: int = 0
    total_pay: int = 0

    @property
    def total_hours(self) -> float:
        return self.total_minutes / 60

    @property
    def work_days_text(self) -> str:
        return f"{self.worked_days}/{self.planned_days}"

    @property
    def total_hours_text(self) -> str:
        return format_hours(self.total_hours)

    @property
    def regular_hours_text(self) -> str:
        return format_hours(self.regular_hours)

    @property
    def overtime_hours_text(self) -> str:
        return format_hours(self.overtime_hours)

    @property
    def regular_pay_text(self) -> str:
        return format_yen(self.regular_pay)

    @property
    def overtime_pay_text(self) -> str:
        return format_yen(self.overtime_pay)

    @property
    def total_pay_text(self) -> str:
        return format_yen(self.total_pay)
