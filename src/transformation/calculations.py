"""
Business metric calculations shared by the analytical queries.

Everything here is a pure function of its arguments: mappings from a raw value
(hour, month, minutes) to a bucket label, plus the ranking and month-over-month
helpers the queries build on.
"""
import datetime
import numpy as np
import pandas as pd

SECONDS_PER_DAY = 24 * 60 * 60
SLOT_HOURS = 2

SEASONS = {
    3: 'Spring', 4: 'Spring', 5: 'Spring',
    6: 'Summer', 7: 'Summer', 8: 'Summer',
    9: 'Autumn', 10: 'Autumn', 11: 'Autumn',
    12: 'Winter', 1: 'Winter', 2: 'Winter'
}

FIVE_STAR = '5 star'
FOUR_STAR = '4 star'
THREE_STAR = '3 star'


def parse_time_of_day(value):
    """
    Convert a wall-clock value to a Timedelta offset from midnight.

    Accepts datetime.time, timedelta, Timestamp/datetime (time part only) and
    'HH:MM' or 'HH:MM:SS' strings. Missing values become NaT.
    """
    if value is None or (not isinstance(value, (str, datetime.time)) and pd.isna(value)):
        return pd.NaT

    if isinstance(value, datetime.datetime):
        value = value.time()

    if isinstance(value, datetime.time):
        return pd.Timedelta(
            hours=value.hour,
            minutes=value.minute,
            seconds=value.second,
            microseconds=value.microsecond
        )

    if isinstance(value, datetime.timedelta):
        offset = pd.Timedelta(value)
        if offset < pd.Timedelta(0) or offset >= pd.Timedelta(days=1):
            raise ValueError(f"Time of day out of range: {value}")
        return offset

    if isinstance(value, str):
        parts = value.strip().split(':')
        if len(parts) not in (2, 3):
            raise ValueError(f"Unrecognised time of day: {value!r}")
        hours, minutes = int(parts[0]), int(parts[1])
        seconds = float(parts[2]) if len(parts) == 3 else 0.0
        if not (0 <= hours < 24 and 0 <= minutes < 60 and 0 <= seconds < 60):
            raise ValueError(f"Time of day out of range: {value!r}")
        return pd.Timedelta(hours=hours, minutes=minutes, seconds=seconds)

    raise ValueError(f"Unrecognised time of day: {value!r}")


def to_clock_time(offset):
    """Inverse of parse_time_of_day: Timedelta offset -> datetime.time."""
    if offset is None or pd.isna(offset):
        return None
    return (datetime.datetime.min + pd.Timedelta(offset).to_pytimedelta()).time()


def elapsed_minutes(order_time, delivery_time):
    """
    Minutes between order and delivery times of day.

    A delivery time earlier than the order time means the delivery crossed
    midnight, so a day is added before converting.
    """
    seconds = (delivery_time - order_time).dt.total_seconds()
    seconds = seconds.where(seconds.isna() | (seconds >= 0), seconds + SECONDS_PER_DAY)
    return seconds / 60


def time_slot(hour):
    """
    Two-hour bucket for an hour of day: (start_hour, end_hour).

    Start is inclusive and end exclusive, so 24 hours give 12 buckets.
    """
    hour = int(hour)
    if not 0 <= hour < 24:
        raise ValueError(f"Hour out of range: {hour}")
    start = (hour // SLOT_HOURS) * SLOT_HOURS
    return start, start + SLOT_HOURS


def time_slot_label(start_hour):
    end_hour = (start_hour + SLOT_HOURS) % 24
    return f"{start_hour:02d}:00 - {end_hour:02d}:00"


def season(month):
    """Northern-hemisphere season for a calendar month (1-12)."""
    try:
        return SEASONS[int(month)]
    except KeyError:
        raise ValueError(f"Month out of range: {month}")


def star_rating(minutes):
    """Rider rating for one delivery: under 15 min, 15-20 min, over 20 min."""
    if minutes < 15:
        return FIVE_STAR
    elif minutes <= 20:
        return FOUR_STAR
    return THREE_STAR


def assign_rank(df, metric, by=None, method='dense', column='rank'):
    """
    Rank rows by a metric, highest first, optionally within partitions.

    method='dense' gives tied rows the same rank with no gap after them;
    method='min' is competition ranking, where the next rank skips ahead by
    the size of the tie.
    """
    if method not in ('dense', 'min'):
        raise ValueError(f"Unsupported rank method: {method}")

    ranked = df.copy()
    if by is None:
        ranks = ranked[metric].rank(method=method, ascending=False)
    else:
        ranks = ranked.groupby(by, dropna=False)[metric].rank(method=method, ascending=False)
    ranked[column] = ranks.astype(int)
    return ranked


def previous_value(series, by=None):
    """Value one position earlier (within each partition), 0 for the first."""
    if by is None:
        shifted = series.shift(1)
    else:
        shifted = series.groupby(by).shift(1)
    return shifted.fillna(0)


def growth_pct(current, previous):
    """
    Percentage change from previous to current, rounded to 2 places.

    Rows whose previous value is 0 come back as NaN instead of dividing by zero.
    """
    previous = previous.astype(float)
    return ((current - previous) / previous.replace(0, np.nan) * 100).round(2)


def month_label(dates):
    """Year-month label ('2024-01') for a datetime Series; sorts chronologically."""
    return dates.dt.to_period('M').astype(str)


def reference_date(as_of=None):
    """Midnight of as_of (anything Timestamp accepts), or of today."""
    if as_of is None:
        return pd.Timestamp.today().normalize()
    return pd.Timestamp(as_of).normalize()


def one_year_before(as_of=None):
    """Start of the rolling one-year window ending at as_of."""
    return reference_date(as_of) - pd.DateOffset(years=1)
