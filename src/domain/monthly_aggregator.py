"""
Monthly Aggregator Module

Folds per-day metrics into monthly totals.
"""

from calendar import monthrange
from datetime import date
from typing import AbstractSet, Mapping, Optional

from .day_metrics import compute_day_metrics
from .entities import Category, DayRecord, DayMetrics, MonthlySummary
from .time_utils import minutes_from_hhmm, ymd
from config.config_manager import WorkRule


class MonthlyAggregator:
    """
    Calculates monthly totals from day records.

    Provides:
    - Planned working-day count
    - Actual worked-day count
    - Sums of hours and pay, with no cross-day adjustment
    """

    def __init__(
        self,
        holiday_map: Mapping[str, str],
        company_holidays: AbstractSet[str] = frozenset(),
        hourly_wage: float = 0,
        rule: Optional[WorkRule] = None
    ):
        """
        Initialize aggregator.

        Args:
            holiday_map: National holidays of the year being summarised
            company_holidays: Company holiday date keys of that year
            hourly_wage: Hourly wage rate
            rule: Work rule passed through to the day metrics
        """
        self.holiday_map = holiday_map
        self.company_holidays = company_holidays
        self.hourly_wage = hourly_wage
        self.rule = rule or WorkRule()

    def is_planned_day(self, year: int, month: int, day: int) -> bool:
        """A day is planned unless it is a weekend, national or company holiday."""
        key = ymd(year, month, day)
        if date(year, month, day).weekday() >= 5:
            return False
        return key not in self.holiday_map and key not in self.company_holidays

    @staticmethod
    def is_worked_day(record: DayRecord) -> bool:
        """Paid leave, or both punches present."""
        if record.category == Category.PAID_LEAVE:
            return True
        return (
            minutes_from_hhmm(record.check_in) is not None
            and minutes_from_hhmm(record.check_out) is not None
        )

    def day_metrics(self, record: DayRecord, year: int, month: int, day: int) -> DayMetrics:
        key = ymd(year, month, day)
        return compute_day_metrics(
            record,
            self.holiday_map.get(key),
            key in self.company_holidays,
            year, month, day,
            self.hourly_wage,
            self.rule
        )

    def summarize(
        self,
        year: int,
        month: int,
        records_by_date: Mapping[str, DayRecord]
    ) -> MonthlySummary:
        """
        Summarise every calendar day of a month.

        Args:
            year: Year
            month: Month (1-12)
            records_by_date: Day records keyed by date key; missing days count as empty

        Returns:
            MonthlySummary with all totals
        """
        _, num_days = monthrange(year, month)
        summary = MonthlySummary(year=year, month=month)

        for day in range(1, num_days + 1):
            record = records_by_date.get(ymd(year, month, day)) or DayRecord()
            metrics = self.day_metrics(record, year, month, day)

            if self.is_planned_day(year, month, day):
                summary.planned_days += 1
            if self.is_worked_day(record):
                summary.worked_days += 1

            summary.total_minutes += metrics.worked_minutes
            summary.regular_hours += metrics.regular_hours
            summary.overtime_hours += metrics.overtime_hours
            summary.regular_pay += metrics.regular_pay
            summary.overtime_pay += metrics.overtime_pay
            summary.total_pay += metrics.total_pay

        return summary


def summarize_month(
    year: int,
    month: int,
    records_by_date: Mapping[str, DayRecord],
    holiday_map: Mapping[str, str],
    company_holidays: AbstractSet[str],
    hourly_wage: float,
    rule: Optional[WorkRule] = None
) -> MonthlySummary:
    """Summarise a month; see MonthlyAggregator.summarize."""
    aggregator = MonthlyAggregator(holiday_map, company_holidays, hourly_wage, rule)
    return aggregator.summarize(year, month, records_by_date)
