"""
Day Metrics Module

Implements Strategy pattern for deriving a day's worked time, attendance
judgment and wage breakdown based on its category.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Tuple

from .entities import (
    Category, DayRecord, DayMetrics, JudgmentLabel, JudgmentTone, PayBreakdown
)
from .time_utils import format_hours, minutes_from_hhmm, round_half_up, ymd
from config.config_manager import WorkRule

OFF_DAY_TEXT = "休日"
NO_RECORD_TEXT = "-"

WARNING_LABELS = (
    JudgmentLabel.LATE,
    JudgmentLabel.EARLY_LEAVE,
    JudgmentLabel.OVERTIME,
)

Judgment = Tuple[Tuple[JudgmentLabel, ...], Optional[JudgmentTone]]


class DayCategoryStrategy(ABC):
    """Abstract base class for per-category day rules."""

    def allows_time_entry(self, is_off_day: bool) -> bool:
        """Whether punch times may be edited for this day."""
        return not is_off_day

    def worked_minutes(self, record: DayRecord, rule: WorkRule) -> Tuple[int, bool]:
        """
        Compute worked minutes from the punches.

        The break is always deducted and the result is clamped at zero.

        Returns:
            Tuple of (worked_minutes, has_record)
        """
        in_min = minutes_from_hhmm(record.check_in)
        out_min = minutes_from_hhmm(record.check_out)
        if in_min is None or out_min is None:
            return 0, False
        return max(0, out_min - in_min - rule.break_minutes), True

    def judge(self, record: DayRecord, rule: WorkRule) -> Judgment:
        """Attendance judgment labels and tone; empty when not applicable."""
        return (), None

    @abstractmethod
    def calculate_pay(
        self,
        worked_minutes: int,
        hourly_wage: float,
        rule: WorkRule
    ) -> PayBreakdown:
        """
        Calculate the wage breakdown for the day.

        Args:
            worked_minutes: Minutes worked after the break deduction
            hourly_wage: Hourly wage rate
            rule: Work rule with regular hours and premium rate

        Returns:
            PayBreakdown with each figure rounded independently
        """
        pass


class NormalDayStrategy(DayCategoryStrategy):
    """
    Rules for an ordinary day (通常).

    - Judged against the baseline punch times
    - Hours beyond the regular daily hours earn the premium
    """

    def judge(self, record: DayRecord, rule: WorkRule) -> Judgment:
        in_min = minutes_from_hhmm(record.check_in)
        out_min = minutes_from_hhmm(record.check_out)
        if in_min is None and out_min is None:
            return (), None

        base_in = minutes_from_hhmm(rule.in_time)
        base_out = minutes_from_hhmm(rule.out_time)
        labels: List[JudgmentLabel] = []

        if in_min is not None:
            if in_min > base_in:
                labels.append(JudgmentLabel.LATE)
            if in_min < base_in:
                labels.append(JudgmentLabel.EARLY_ARRIVAL)
        if out_min is not None:
            if out_min < base_out:
                labels.append(JudgmentLabel.EARLY_LEAVE)
            if out_min > base_out:
                labels.append(JudgmentLabel.OVERTIME)

        if not labels:
            return (JudgmentLabel.ON_TIME,), JudgmentTone.POSITIVE
        if any(label in WARNING_LABELS for label in labels):
            return tuple(labels), JudgmentTone.WARNING
        # 早出のみ
        return tuple(labels), JudgmentTone.POSITIVE

    def calculate_pay(
        self,
        worked_minutes: int,
        hourly_wage: float,
        rule: WorkRule
    ) -> PayBreakdown:
        hours = worked_minutes / 60
        regular_hours = min(rule.regular_hours, hours)
        overtime_hours = max(0.0, hours - rule.regular_hours)
        return PayBreakdown(
            regular_hours=regular_hours,
            overtime_hours=overtime_hours,
            regular_pay=round_half_up(regular_hours * hourly_wage),
            overtime_pay=round_half_up(overtime_hours * hourly_wage * rule.premium_rate),
            total_pay=round_half_up(
                hours * hourly_wage + overtime_hours * hourly_wage * rule.premium_rate
            ),
        )


class PaidLeaveStrategy(DayCategoryStrategy):
    """
    Rules for paid leave (有給).

    - Punches are ignored and cannot be edited
    - Always counts as the regular daily hours at the base rate
    """

    def allows_time_entry(self, is_off_day: bool) -> bool:
        return False

    def worked_minutes(self, record: DayRecord, rule: WorkRule) -> Tuple[int, bool]:
        return int(rule.regular_hours * 60), True

    def calculate_pay(
        self,
        worked_minutes: int,
        hourly_wage: float,
        rule: WorkRule
    ) -> PayBreakdown:
        regular_pay = round_half_up(rule.regular_hours * hourly_wage)
        return PayBreakdown(
            regular_hours=rule.regular_hours,
            overtime_hours=0.0,
            regular_pay=regular_pay,
            overtime_pay=0,
            total_pay=regular_pay,
        )


class HolidayWorkStrategy(DayCategoryStrategy):
    """
    Rules for work on an off-day (休日出勤).

    - Punches may be edited even on weekends and holidays
    - No judgment is shown
    - All worked time earns the premium
    """

    def allows_time_entry(self, is_off_day: bool) -> bool:
        return True

    def calculate_pay(
        self,
        worked_minutes: int,
        hourly_wage: float,
        rule: WorkRule
    ) -> PayBreakdown:
        hours = worked_minutes / 60
        base = hours * hourly_wage
        # regular_pay is round(base), not total - premium
        return PayBreakdown(
            regular_hours=0.0,
            overtime_hours=hours,
            regular_pay=round_half_up(base),
            overtime_pay=round_half_up(base * rule.premium_rate),
            total_pay=round_half_up(base + base * rule.premium_rate),
        )


class DayCategoryStrategyFactory:
    """Factory for creating the appropriate category strategy."""

    _strategies = {
        Category.NORMAL: NormalDayStrategy(),
        Category.PAID_LEAVE: PaidLeaveStrategy(),
        Category.HOLIDAY_WORK: HolidayWorkStrategy(),
    }

    @classmethod
    def get_strategy(cls, category: Category) -> DayCategoryStrategy:
        """Get the strategy for a category."""
        return cls._strategies.get(category, cls._strategies[Category.NORMAL])


def compute_day_metrics(
    record: DayRecord,
    holiday_name: Optional[str],
    is_company_holiday: bool,
    year: int,
    month: int,
    day: int,
    hourly_wage: float,
    rule: Optional[WorkRule] = None
) -> DayMetrics:
    """
    Derive the metrics of one day.

    Args:
        record: The stored day record (not modified)
        holiday_name: National holiday name, or None if not a holiday
        is_company_holiday: Whether the day is a company holiday
        year: Year
        month: Month (1-12)
        day: Day of month
        hourly_wage: Hourly wage rate
        rule: Work rule; defaults to the standard 09:30-18:30 day

    Returns:
        DayMetrics for display and aggregation
    """
    rule = rule or WorkRule()
    weekday = date(year, month, day).weekday()
    is_saturday = weekday == 5
    is_sunday = weekday == 6
    is_national_holiday = bool(holiday_name)

    is_off_day = is_national_holiday or is_company_holiday or is_saturday or is_sunday
    is_sun_or_holiday = is_sunday or is_national_holiday or is_company_holiday

    category = record.category
    strategy = DayCategoryStrategyFactory.get_strategy(category)

    worked_minutes, has_record = strategy.worked_minutes(record, rule)
    labels, tone = strategy.judge(record, rule)
    pay = strategy.calculate_pay(worked_minutes, hourly_wage, rule)

    if category == Category.PAID_LEAVE:
        worked_text = format_hours(rule.regular_hours)
    elif has_record:
        worked_text = format_hours(worked_minutes / 60)
    elif is_off_day and category != Category.HOLIDAY_WORK:
        worked_text = OFF_DAY_TEXT
    else:
        worked_text = NO_RECORD_TEXT

    return DayMetrics(
        date_key=ymd(year, month, day),
        category=category,
        is_saturday=is_saturday,
        is_sunday=is_sunday,
        is_national_holiday=is_national_holiday,
        is_company_holiday=is_company_holiday,
        is_off_day=is_off_day,
        is_sun_or_holiday=is_sun_or_holiday,
        holiday_name=holiday_name or "",
        allow_time_entry=strategy.allows_time_entry(is_off_day),
        worked_minutes=worked_minutes,
        has_record=has_record,
        worked_text=worked_text,
        judgment=labels,
        judgment_tone=tone,
        pay=pay,
    )
