"""
Holiday Calendar Module

Computes Japanese national holidays for a given year.

Base holidays (fixed dates, nth-Monday rules, equinox approximations and
one-off exceptions) are resolved first, then citizen's holidays and
substitute holidays are derived repeatedly until the map stops changing.
The equinox formulas are the usual empirical approximations for 2000-2099.
"""

import math
from datetime import date, timedelta
from types import MappingProxyType
from typing import Dict, Mapping

from .time_utils import date_key, ymd
from infrastructure.logger import get_logger

logger = get_logger("HolidayCalendar")

GENERIC_HOLIDAY = "休日"
SUBSTITUTE_HOLIDAY = "振替休日"

MAX_RESOLUTION_PASSES = 5

SATURDAY = 5
SUNDAY = 6


def nth_monday(year: int, month: int, nth: int) -> int:
    """
    Get the day of month of the nth Monday.

    Args:
        year: Year
        month: Month (1-12)
        nth: 1 for the first Monday, 2 for the second, ...

    Returns:
        Day of month
    """
    offset_to_monday = (7 - date(year, month, 1).weekday()) % 7
    return 1 + offset_to_monday + (nth - 1) * 7


def vernal_equinox_day(year: int) -> int:
    """Day of March of the vernal equinox holiday."""
    y = year - 2000
    return math.floor(20.8431 + 0.242194 * y - math.floor(y / 4))


def autumnal_equinox_day(year: int) -> int:
    """Day of September of the autumnal equinox holiday."""
    y = year - 2000
    return math.floor(23.2488 + 0.242194 * y - math.floor(y / 4))


def build_base_holidays(year: int) -> Mapping[str, str]:
    """
    Build the statutory holidays of a year before any derived holidays.

    Args:
        year: Year to compute

    Returns:
        Read-only mapping of date key to holiday name
    """
    holidays: Dict[str, str] = {}

    def add(month: int, day: int, name: str) -> None:
        holidays[ymd(year, month, day)] = name

    add(1, 1, "元日")
    add(1, nth_monday(year, 1, 2), "成人の日")
    add(2, 11, "建国記念の日")
    if year >= 2020:
        add(2, 23, "天皇誕生日")
    add(3, vernal_equinox_day(year), "春分の日")
    add(4, 29, "昭和の日")
    add(5, 3, "憲法記念日")
    add(5, 4, "みどりの日")
    add(5, 5, "こどもの日")

    # Olympic special measures moved Marine, Mountain and Sports Day in 2020/2021
    if year == 2020:
        add(7, 23, "海の日")
    elif year == 2021:
        add(7, 22, "海の日")
    else:
        add(7, nth_monday(year, 7, 3), "海の日")

    if year >= 2016:
        if year == 2020:
            add(8, 10, "山の日")
        elif year == 2021:
            add(8, 8, "山の日")
        else:
            add(8, 11, "山の日")

    add(9, nth_monday(year, 9, 3), "敬老の日")
    add(9, autumnal_equinox_day(year), "秋分の日")

    if year == 2020:
        add(7, 24, "スポーツの日")
    elif year == 2021:
        add(7, 23, "スポーツの日")
    else:
        add(10, nth_monday(year, 10, 2), "スポーツの日")

    add(11, 3, "文化の日")
    add(11, 23, "勤労感謝の日")

    if year == 2019:
        add(5, 1, "即位の日")
        add(10, 22, "即位礼正殿の儀")
        # Declared by the one-off accession law, not by the citizen's holiday rule
        add(4, 30, GENERIC_HOLIDAY)
        add(5, 2, GENERIC_HOLIDAY)

    return MappingProxyType(holidays)


def _is_weekend(d: date) -> bool:
    return d.weekday() >= SATURDAY


def _apply_citizens_holidays(year: int, holidays: Dict[str, str]) -> bool:
    """Promote weekdays sandwiched between two holidays. Returns True if anything changed."""
    changed = False
    first = date(year, 1, 1)
    last = date(year, 12, 31)
    d = first + timedelta(days=1)
    while d < last:
        key = date_key(d)
        if key not in holidays and not _is_weekend(d):
            prev_key = date_key(d - timedelta(days=1))
            next_key = date_key(d + timedelta(days=1))
            if prev_key in holidays and next_key in holidays:
                holidays[key] = GENERIC_HOLIDAY
                changed = True
        d += timedelta(days=1)
    return changed


def _apply_substitute_holidays(year: int, holidays: Dict[str, str]) -> bool:
    """
    Give every Sunday holiday a substitute on the next free weekday.

    Weekends and days that are already holidays are skipped, so a Sunday
    holiday followed by Monday/Tuesday holidays lands on Wednesday. A
    substitute already placed in the chain satisfies the Sunday, which keeps
    repeated passes from stacking extra days.

    Returns:
        True if a new substitute holiday was added
    """
    changed = False
    claimed = set()
    sundays = sorted(
        key for key in holidays
        if date.fromisoformat(key).weekday() == SUNDAY
        and date.fromisoformat(key).year == year
    )

    for key in sundays:
        cursor = date.fromisoformat(key) + timedelta(days=1)
        while cursor.year == year:
            cursor_key = date_key(cursor)
            if _is_weekend(cursor):
                cursor += timedelta(days=1)
                continue
            if cursor_key in holidays:
                if holidays[cursor_key] == SUBSTITUTE_HOLIDAY and cursor_key not in claimed:
                    claimed.add(cursor_key)
                    break
                cursor += timedelta(days=1)
                continue
            holidays[cursor_key] = SUBSTITUTE_HOLIDAY
            claimed.add(cursor_key)
            changed = True
            break

    return changed


def resolve_derived_holidays(year: int, base: Mapping[str, str]) -> Mapping[str, str]:
    """
    Add citizen's holidays and substitute holidays until the map converges.

    Args:
        year: Year the base map belongs to
        base: Base holidays; never modified

    Returns:
        New read-only mapping including derived holidays
    """
    holidays = dict(base)

    for loop in range(MAX_RESOLUTION_PASSES):
        changed = _apply_citizens_holidays(year, holidays)
        changed = _apply_substitute_holidays(year, holidays) or changed
        if not changed:
            logger.debug(f"{year} 年の祝日計算が {loop + 1} 回目で収束")
            break

    return MappingProxyType(holidays)


def compute_holidays(year: int) -> Mapping[str, str]:
    """
    Compute the holiday map for a year.

    Callers must recompute when the year changes; a map is only valid for
    the year it was built for.

    Args:
        year: Year (legally accurate for 2000-2099)

    Returns:
        Read-only mapping of YYYY-MM-DD key to holiday name
    """
    return resolve_derived_holidays(year, build_base_holidays(year))
