"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta

# Days between due dates for the fixed-interval frequencies
INTERVAL_DAYS = {"weekly": 7, "biweekly": 14}


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping to the last day of shorter months"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def advance_by_frequency(from_date: date, frequency: str, periods: int) -> date:
    """Date `periods` payment intervals after from_date"""
    if frequency in INTERVAL_DAYS:
        return from_date + timedelta(days=INTERVAL_DAYS[frequency] * periods)
    return add_months(from_date, periods)
