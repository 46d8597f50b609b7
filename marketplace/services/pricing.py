# marketplace/services/pricing.py
from collections import namedtuple
from datetime import date, datetime, timezone
from math import ceil
from numbers import Number

from marketplace.services.errors import InvalidDateRange, InvalidRate

MS_PER_DAY = 24 * 60 * 60 * 1000

RentalQuote = namedtuple('RentalQuote', ['days', 'total'])

def _naive_utc(value):
    # aware values are compared in UTC so they can be mixed with plain dates
    if value.tzinfo is not None and value.utcoffset() is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(tzinfo=None)

def to_datetime(value):
    """Accepts a date, a datetime or an ISO string (YYYY-MM-DD, optionally with a time part and offset)."""
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    if isinstance(value, str) and value.strip():
        try:
            return _naive_utc(datetime.fromisoformat(value.strip()))
        except (ValueError, OverflowError):
            raise InvalidDateRange(f"Invalid date: {value!r}")
    raise InvalidDateRange()

def rental_days(start_date, end_date):
    start = to_datetime(start_date)
    end = to_datetime(end_date)
    if end <= start:
        raise InvalidDateRange('The drop-off date must be after the pickup date.')
    elapsed_ms = (end - start).total_seconds() * 1000
    return max(1, ceil(elapsed_ms / MS_PER_DAY))

def check_rate(daily_rate):
    if isinstance(daily_rate, bool) or not isinstance(daily_rate, Number):
        raise InvalidRate()
    # `not >` also rejects NaN
    if not daily_rate > 0:
        raise InvalidRate('The rate must be greater than zero.')
    return daily_rate

def compute(start_date, end_date, daily_rate):
    """
    Rental duration and cost for a pickup/return pair.
    Returns RentalQuote(days, total) with days >= 1 and total == days * daily_rate.
    Raises InvalidDateRange or InvalidRate.
    """
    days = rental_days(start_date, end_date)
    rate = check_rate(daily_rate)
    return RentalQuote(days=days, total=days * rate)
