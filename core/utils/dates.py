"""
Date formatting for journey (career history) entries.
"""

from datetime import date
from typing import Optional

from core.domain.constants import MONTH_ABBREVIATIONS


def month_label(value: Optional[date]) -> Optional[str]:
    """'Mar 2021' style label."""
    if value is None:
        return None
    return f"{MONTH_ABBREVIATIONS[value.month - 1]} {value.year}"


def years_text(start: Optional[date], end: Optional[date]) -> Optional[str]:
    """'Mar 2021 - Jun 2023', or '- Present' for an open entry."""
    if start is None:
        return None
    return f"{month_label(start)} - {month_label(end) if end else 'Present'}"


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end."""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return months


def format_duration(start: Optional[date], end: Optional[date], today: Optional[date] = None) -> Optional[str]:
    """'2 years 3m', '1 year', '5m' or 'Less than a month'. None if not computable."""
    if start is None:
        return None
    end = end or today or date.today()
    total = months_between(start, end)
    if total < 0:
        return None

    years, months = divmod(total, 12)
    parts = []
    if years > 0:
        parts.append(f"{years} years" if years > 1 else "1 year")
    if months > 0:
        parts.append(f"{months}m")
    return " ".join(parts) if parts else "Less than a month"


def month_start(year: int, month: int) -> date:
    """First day of a month picked in the form (month is 1-based)."""
    return date(year, month, 1)
