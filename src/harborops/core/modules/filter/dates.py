"""Relative date tokens and day-granular date bounds, all in UTC."""

import re
from datetime import UTC, date, datetime, timedelta
from enum import StrEnum
from typing import Any

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from harborops.core.modules.filter.models import FilterOperator
from harborops.errors import InvalidValueError

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class RelativeDate(StrEnum):
    """Symbolic date values resolved at translation time."""

    NOW = "now"
    TODAY = "today"
    YESTERDAY = "yesterday"
    TOMORROW = "tomorrow"
    THIS_WEEK = "thisWeek"  # Monday 00:00
    LAST_WEEK = "lastWeek"
    THIS_MONTH = "thisMonth"
    LAST_MONTH = "lastMonth"
    THIS_YEAR = "thisYear"
    LAST_YEAR = "lastYear"


_RELATIVE_TOKENS = frozenset(token.value for token in RelativeDate)


def is_relative_date(value: Any) -> bool:
    return isinstance(value, str) and value in _RELATIVE_TOKENS


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    # Millisecond precision, matching what MongoDB stores
    return value.replace(hour=23, minute=59, second=59, microsecond=999000)


def start_of_week(value: datetime) -> datetime:
    return start_of_day(value) - timedelta(days=value.weekday())


def start_of_month(value: datetime) -> datetime:
    return start_of_day(value).replace(day=1)


def start_of_year(value: datetime) -> datetime:
    return start_of_day(value).replace(month=1, day=1)


def resolve_relative_date(token: RelativeDate, now: datetime) -> datetime:
    """Resolve a relative token against the current moment."""
    match token:
        case RelativeDate.NOW:
            return now
        case RelativeDate.TODAY:
            return start_of_day(now)
        case RelativeDate.YESTERDAY:
            return start_of_day(now - relativedelta(days=1))
        case RelativeDate.TOMORROW:
            return start_of_day(now + relativedelta(days=1))
        case RelativeDate.THIS_WEEK:
            return start_of_week(now)
        case RelativeDate.LAST_WEEK:
            return start_of_week(now - relativedelta(weeks=1))
        case RelativeDate.THIS_MONTH:
            return start_of_month(now)
        case RelativeDate.LAST_MONTH:
            return start_of_month(now - relativedelta(months=1))
        case RelativeDate.THIS_YEAR:
            return start_of_year(now)
        case RelativeDate.LAST_YEAR:
            return start_of_year(now - relativedelta(years=1))
    raise ValueError(f"Unhandled relative date {token} - programming error")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_date_value(value: Any, now: datetime) -> tuple[datetime, bool]:
    """Parse a filter date operand.

    Args:
        value: Relative token, YYYY-MM-DD, ISO timestamp, date or datetime
        now: Current moment for relative tokens

    Returns:
        The UTC instant and whether the value denotes a whole day rather
        than an exact instant

    Raises:
        InvalidValueError: If the value is not a recognizable date
    """
    if isinstance(value, datetime):
        return _as_utc(value), False
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC), True
    if not isinstance(value, str) or not value.strip():
        raise InvalidValueError(f"Invalid date value: {value!r}")

    text = value.strip()
    if is_relative_date(text):
        token = RelativeDate(text)
        return resolve_relative_date(token, _as_utc(now)), token != RelativeDate.NOW
    try:
        parsed = isoparse(text)
    except ValueError as e:
        raise InvalidValueError(f"Invalid date value: {value!r}") from e
    return _as_utc(parsed), bool(_DATE_ONLY_RE.fullmatch(text))


def resolve_date_value(value: Any, now: datetime) -> datetime:
    """Resolve a date operand to a concrete UTC instant."""
    return parse_date_value(value, now)[0]


def normalize_date_bound(value: Any, operator: FilterOperator, now: datetime, is_end: bool = False) -> datetime:
    """Resolve a date operand and widen whole-day values to the matching day edge.

    `gte`, `lt` and a between start snap to the start of the day; `gt`, `lte`
    and a between end snap to its last millisecond. Exact instants are kept.
    """
    instant, whole_day = parse_date_value(value, now)
    if not whole_day:
        return instant
    if operator == FilterOperator.BETWEEN:
        return end_of_day(instant) if is_end else start_of_day(instant)
    if operator in (FilterOperator.GT, FilterOperator.LTE):
        return end_of_day(instant)
    return start_of_day(instant)
