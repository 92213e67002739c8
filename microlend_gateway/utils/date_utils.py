"""Calendar helpers: period arithmetic and day-level comparisons"""

import calendar
import math
from datetime import date, datetime, timedelta
from typing import List
from zoneinfo import ZoneInfo

from microlend_gateway.config import settings

SECONDS_PER_DAY = 86_400


def lender_timezone() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def lender_today() -> date:
    """Current calendar day in the lender's timezone"""
    return datetime.now(lender_timezone()).date()


def to_lender_time(value: datetime) -> datetime:
    """
    Express a timestamp in the lender's timezone.

    Naive timestamps are taken to already be lender wall-clock time.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=lender_timezone())
    return value.astimezone(lender_timezone())


def to_date(value: date | datetime) -> date:
    """
    Drop the time-of-day component, if any.

    Aware timestamps are first moved to the lender's timezone, so a payment
    stamped 23:00 UTC counts toward the next day for a UTC+8 lender.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(lender_timezone())
        return value.date()
    return value


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def term_days(start: date | datetime, end: date | datetime | None) -> int:
    """
    Whole days between two instants, rounded up and floored at 1.

    A missing end defaults to now. Fractional days (datetime inputs) round up,
    so a 25-hour term counts as two days.
    """
    if end is None:
        end = datetime.now(start.tzinfo) if isinstance(start, datetime) else lender_today()

    if isinstance(start, datetime) and isinstance(end, datetime):
        seconds = abs((end - start).total_seconds())
        days = math.ceil(seconds / SECONDS_PER_DAY)
    else:
        days = abs((to_date(end) - to_date(start)).days)

    return max(1, days)


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of a shorter month"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return from_date.replace(year=year, month=month, day=day)


def add_periods(from_date: date, frequency: str, count: int) -> date:
    """
    Advance a date by `count` repayment periods.

    daily = 1 day, weekly = 7 days, monthly = 1 calendar month. Any other
    frequency advances by days. Months are added from the anchor date rather
    than chained, so a loan started on the 31st stays on month-end.
    """
    if frequency == "weekly":
        return from_date + timedelta(days=7 * count)
    if frequency == "monthly":
        return add_months(from_date, count)
    return from_date + timedelta(days=count)


def same_weekday(a: date, b: date) -> bool:
    return a.weekday() == b.weekday()


def same_day_of_month(a: date, b: date) -> bool:
    return a.day == b.day
