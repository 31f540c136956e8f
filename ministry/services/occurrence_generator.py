"""
Occurrence generation for recurring events.

Expands a RecurrenceRule into the ordered list of dates (and timestamps) it
produces. Nothing here reads the clock or touches a store.

Open-ended rules (end_date is None) stop at the generation horizon: the last
day of the start year, or start_date + horizon_days when a horizon is given.
"""

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from ministry.services.errors import InvalidRule
from ministry.services.recurrence_types import (
    LAST_POSITION,
    RecurrenceRule,
    RecurrenceType,
    sunday_weekday,
)
from ministry.services.recurrence_validator import RecurrenceValidator

logger = logging.getLogger(__name__)


def horizon_end(start: date, horizon_days: Optional[int] = None) -> date:
    """Last date an open-ended rule starting on `start` may produce."""
    if horizon_days is None:
        return date(start.year, 12, 31)
    return start + timedelta(days=horizon_days)


def effective_end(rule: RecurrenceRule, horizon_days: Optional[int] = None) -> date:
    """Inclusive upper bound used for generation."""
    if rule.end_date is not None:
        return rule.end_date
    return horizon_end(rule.start_date, horizon_days)


def _month_starts(start: date, end: date):
    """Yield the first day of every month from start's month to end's month."""
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield date(year, month, 1)
        month += 1
        if month > 12:
            month = 1
            year += 1


def nth_weekday_of_month(year: int, month: int, weekday: int, position: int) -> Optional[date]:
    """
    Date of the `position`-th `weekday` (0 = Sunday) of the month.

    Position LAST_POSITION returns the last such weekday. Returns None when the
    month has fewer matching weekdays than requested.
    """
    days_in_month = calendar.monthrange(year, month)[1]
    first = date(year, month, 1)
    offset = (weekday - sunday_weekday(first)) % 7
    matches = list(range(1 + offset, days_in_month + 1, 7))

    if position == LAST_POSITION:
        return date(year, month, matches[-1])
    if position - 1 < len(matches):
        return date(year, month, matches[position - 1])
    return None


def _weekly_dates(weekday: int, start: date, end: date) -> List[date]:
    current = start + timedelta(days=(weekday - sunday_weekday(start)) % 7)
    dates = []
    while current <= end:
        dates.append(current)
        current += timedelta(days=7)
    return dates


def _interval_dates(interval_days: int, start: date, end: date) -> List[date]:
    step = timedelta(days=interval_days)
    current = start
    dates = []
    while current <= end:
        dates.append(current)
        current += step
    return dates


def _monthly_position_dates(position: int, weekday: int, start: date, end: date) -> List[date]:
    dates = []
    for month_start in _month_starts(start, end):
        target = nth_weekday_of_month(month_start.year, month_start.month, weekday, position)
        if target is not None and start <= target <= end:
            dates.append(target)
    return dates


def _monthly_day_dates(day_of_month: int, start: date, end: date) -> List[date]:
    dates = []
    for month_start in _month_starts(start, end):
        days_in_month = calendar.monthrange(month_start.year, month_start.month)[1]
        if day_of_month > days_in_month:
            # No rollover into the next month
            continue
        target = month_start.replace(day=day_of_month)
        if start <= target <= end:
            dates.append(target)
    return dates


def _check_generatable(rule: RecurrenceRule) -> None:
    result = RecurrenceValidator.validate_variant_fields(rule)
    errors = list(result["errors"])
    if rule.start_date is None:
        errors.append("start_date is required")
    if rule.time_of_day is None:
        errors.append("time_of_day is required")
    if errors:
        raise InvalidRule(errors)


def generate_occurrence_dates(rule: RecurrenceRule, horizon_days: Optional[int] = None) -> List[date]:
    """
    Expand `rule` into its occurrence dates.

    Args:
        rule: Rule to expand
        horizon_days: Horizon for open-ended rules (None = end of start year)

    Returns:
        Strictly ascending list of dates within [start_date, end bound]; empty
        when the range is empty or nothing matches.

    Raises:
        InvalidRule: If the rule's type-specific fields are inconsistent
    """
    _check_generatable(rule)

    start = rule.start_date
    end = effective_end(rule, horizon_days)
    if start > end:
        return []

    recurrence_type = RecurrenceType(rule.recurrence_type)
    if recurrence_type == RecurrenceType.WEEKLY:
        dates = _weekly_dates(rule.weekday, start, end)
    elif recurrence_type == RecurrenceType.INTERVAL_DAYS:
        dates = _interval_dates(rule.interval_days, start, end)
    elif recurrence_type == RecurrenceType.MONTHLY_POSITION:
        dates = _monthly_position_dates(rule.month_position, rule.weekday, start, end)
    else:
        dates = _monthly_day_dates(rule.day_of_month, start, end)

    logger.debug(
        f"Generated {len(dates)} dates for {recurrence_type.value} rule {rule.id} "
        f"between {start.isoformat()} and {end.isoformat()}"
    )
    return dates


def combine(day: date, rule: RecurrenceRule, tz=None) -> datetime:
    """Place `day` at the rule's time of day, localized in `tz` when given."""
    moment = datetime.combine(day, rule.time_of_day.replace(second=0, microsecond=0, tzinfo=None))
    if tz is None:
        return moment
    return tz.localize(moment)


def generate_occurrences(rule: RecurrenceRule, tz=None, horizon_days: Optional[int] = None) -> List[datetime]:
    """
    Expand `rule` into occurrence timestamps (date @ time_of_day).

    Args:
        rule: Rule to expand
        tz: pytz timezone for the wall clock; naive timestamps when None
        horizon_days: Horizon for open-ended rules (None = end of start year)

    Returns:
        Strictly ascending list of timestamps
    """
    return [combine(day, rule, tz) for day in generate_occurrence_dates(rule, horizon_days)]


def preview_occurrences(rule: RecurrenceRule, limit: int = 6, tz=None,
                        horizon_days: Optional[int] = None) -> List[datetime]:
    """First `limit` occurrences of `rule`, for showing while a rule is being edited."""
    if limit < 1:
        return []
    return generate_occurrences(rule, tz=tz, horizon_days=horizon_days)[:limit]
