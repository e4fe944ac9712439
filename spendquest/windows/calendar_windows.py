"""
Calendar Time Windows

Resolves "does this record fall in the day/week/month/year containing
instant T". Windows are calendar periods in host local time: a week is the
calendar week (starting on the configured or host first weekday), not the
last seven days.

Nothing is cached. Every call resolves the window from the reference
instant it is given, so two calls made at different times may see
different boundaries.
"""

import calendar
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional

from spendquest.models.ledger import BudgetPeriod


class Granularity(str, Enum):
    """Calendar period sizes."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


_PERIOD_GRANULARITY = {
    BudgetPeriod.DAILY: Granularity.DAY,
    BudgetPeriod.WEEKLY: Granularity.WEEK,
    BudgetPeriod.MONTHLY: Granularity.MONTH,
    BudgetPeriod.YEARLY: Granularity.YEAR,
}


def granularity_for(period: BudgetPeriod) -> Granularity:
    """The calendar window a budget period is measured over."""
    return _PERIOD_GRANULARITY[period]


def to_local(moment: datetime) -> datetime:
    """
    Express a datetime as naive host local time.

    Naive values are assumed to already be local.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def local_date(moment: datetime) -> date:
    """Calendar day of `moment` in host local time."""
    return to_local(moment).date()


def _week_start(day: date, first_weekday: Optional[int]) -> date:
    if first_weekday is None:
        first_weekday = calendar.firstweekday()
    return day - timedelta(days=(day.weekday() - first_weekday) % 7)


def window_bounds(
    granularity: Granularity,
    reference: datetime,
    first_weekday: Optional[int] = None,
) -> tuple[datetime, datetime]:
    """
    Half-open local interval [start, end) of the period containing `reference`.

    Args:
        granularity: Size of the period
        reference: Instant the period must contain (usually "now")
        first_weekday: 0 = Monday ... 6 = Sunday; None uses the host calendar

    Returns:
        (start, end) as naive local datetimes
    """
    day = local_date(reference)

    if granularity == Granularity.DAY:
        start = day
        end = day + timedelta(days=1)
    elif granularity == Granularity.WEEK:
        start = _week_start(day, first_weekday)
        end = start + timedelta(days=7)
    elif granularity == Granularity.MONTH:
        start = day.replace(day=1)
        end = (start.replace(year=start.year + 1, month=1)
               if start.month == 12 else start.replace(month=start.month + 1))
    else:
        start = day.replace(month=1, day=1)
        end = start.replace(year=start.year + 1)

    return datetime.combine(start, time.min), datetime.combine(end, time.min)


def in_window(
    record_date: datetime,
    granularity: Granularity,
    reference: datetime,
    first_weekday: Optional[int] = None,
) -> bool:
    """True if `record_date` falls in the same period as `reference`."""
    start, end = window_bounds(granularity, reference, first_weekday)
    return start <= to_local(record_date) < end
