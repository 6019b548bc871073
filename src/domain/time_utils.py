"""
Time Utilities Module

Date-key and time-of-day helpers shared by the domain modules.
"""

import math
import re
from datetime import date
from typing import Optional, Tuple

DATE_KEY_PATTERN = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')
HHMM_PATTERN = re.compile(r'^(\d{2}):(\d{2})$')


def ymd(year: int, month: int, day: int) -> str:
    """Format a date key as YYYY-MM-DD."""
    return f"{year:04d}-{month:02d}-{day:02d}"


def date_key(d: date) -> str:
    return ymd(d.year, d.month, d.day)


def parse_ymd(text: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """
    Parse a YYYY-MM-DD key.

    Returns:
        Tuple of (year, month, day), or None if the text is not a real date
    """
    if not text or not isinstance(text, str):
        return None
    match = DATE_KEY_PATTERN.match(text)
    if not match:
        return None
    year, month, day = (int(g) for g in match.groups())
    try:
        date(year, month, day)
    except ValueError:
        return None
    return year, month, day


def minutes_from_hhmm(text: Optional[str]) -> Optional[int]:
    """Parse HH:MM into minutes since midnight; malformed input yields None."""
    if not text or not isinstance(text, str):
        return None
    match = HHMM_PATTERN.match(text)
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def format_hours(hours: float) -> str:
    """Format hours to one decimal place with an 'h' suffix, e.g. 7.5h."""
    return f"{round_half_up(hours * 10) / 10:.1f}h"


def format_yen(amount: float) -> str:
    """Format an amount as a rounded yen figure with thousands separators."""
    return f"{round_half_up(amount):,}円"
