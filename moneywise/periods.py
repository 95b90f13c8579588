import calendar
import logging
from datetime import datetime, time, timedelta

from moneywise.domain import DAILY, WEEKLY, MONTHLY, YEARLY, PERIODS

logger = logging.getLogger(__name__)

END_OF_DAY = time(23, 59, 59, 999000)


def normalize_period(period: str) -> str:
    """Return the canonical period name; anything unrecognised means monthly."""
    if period in PERIODS:
        return period
    logger.debug("Unknown period %r, falling back to %s", period, MONTHLY)
    return MONTHLY


def _day_bounds(first, last) -> tuple[datetime, datetime]:
    return datetime.combine(first, time.min), datetime.combine(last, END_OF_DAY)


def resolve_range(period: str, reference: datetime) -> tuple[datetime, datetime]:
    """Inclusive [start, end] range of the period containing `reference`.

    Weeks start on Monday, so a Sunday closes the week that began six days
    earlier. Both bounds are local, millisecond precision at the end.
    """
    period = normalize_period(period)
    day = reference.date()

    if period == DAILY:
        return _day_bounds(day, day)

    if period == WEEKLY:
        monday = day - timedelta(days=day.weekday())
        return _day_bounds(monday, monday + timedelta(days=6))

    if period == YEARLY:
        return _day_bounds(day.replace(month=1, day=1), day.replace(month=12, day=31))

    last = calendar.monthrange(day.year, day.month)[1]
    return _day_bounds(day.replace(day=1), day.replace(day=last))
