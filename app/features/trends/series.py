"""Series preparation: dated observations to a contiguous positional series.

The estimator uses position as the time regressor, so a sparse or
date-keyed log must be expanded into one value per calendar day covering
the whole lookback window, oldest first, with explicit zeros for days
without activity. Several observations on the same day are summed.

Timezone-aware datetimes are bucketed by their UTC calendar day.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from datetime import date as date_type

import numpy as np
import pandas as pd

from app.features.trends.errors import InvalidArgumentError
from app.features.trends.estimator import FloatArray

DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class DailySeries:
    """Zero-filled series with the calendar date of each position.

    Attributes:
        dates: Period start dates, oldest first, one per position.
        values: Observed totals, same length as dates.
    """

    dates: list[date_type]
    values: FloatArray

    def __post_init__(self) -> None:
        """Check dates and values line up."""
        if len(self.dates) != len(self.values):
            raise InvalidArgumentError(
                f"dates ({len(self.dates)}) and values ({len(self.values)}) differ in length"
            )

    def __len__(self) -> int:
        return len(self.values)


def to_calendar_day(moment: date_type | datetime) -> date_type:
    """Reduce a date or datetime to its calendar day (UTC for aware datetimes)."""
    if isinstance(moment, datetime):
        if moment.tzinfo is not None:
            moment = moment.astimezone(UTC)
        return moment.date()
    return moment


def lookback_window(end_date: date_type, days: int) -> tuple[date_type, date_type]:
    """Return the inclusive (start, end) window covering the last `days` days."""
    if days < 1:
        raise InvalidArgumentError(f"days must be >= 1, got {days}")
    return end_date - timedelta(days=days - 1), end_date


def build_daily_series(
    observations: Iterable[tuple[date_type | datetime, float]],
    start_date: date_type,
    end_date: date_type,
) -> DailySeries:
    """Bucket observations by day and zero-fill every day in the window.

    Args:
        observations: (date or datetime, value) pairs in any order.
        start_date: First day of the window (inclusive).
        end_date: Last day of the window (inclusive).

    Returns:
        DailySeries with one entry per day from start_date to end_date.
        Observations outside the window are ignored.

    Raises:
        InvalidArgumentError: If the window is inverted or a value is not finite.

    Example:
        >>> s = build_daily_series(
        ...     [(date(2024, 1, 3), 5.0), (date(2024, 1, 1), 2.0)],
        ...     date(2024, 1, 1), date(2024, 1, 3),
        ... )
        >>> s.values.tolist()
        [2.0, 0.0, 5.0]
    """
    if end_date < start_date:
        raise InvalidArgumentError(f"end_date {end_date} is before start_date {start_date}")

    days: list[date_type] = []
    amounts: list[float] = []
    for moment, value in observations:
        amount = float(value)
        if not math.isfinite(amount):
            raise InvalidArgumentError(f"Observation on {moment} has non-finite value {value}")
        days.append(to_calendar_day(moment))
        amounts.append(amount)

    index = pd.date_range(start=start_date, end=end_date, freq="D")
    frame = pd.DataFrame(
        {
            "date": pd.to_datetime(pd.Series(days, dtype="object")),
            "value": np.asarray(amounts, dtype=np.float64),
        }
    )
    daily = frame.groupby("date")["value"].sum().reindex(index, fill_value=0.0)

    return DailySeries(
        dates=[ts.date() for ts in index],
        values=daily.to_numpy(dtype=np.float64),
    )


def aggregate_weekly(series: DailySeries) -> DailySeries:
    """Sum consecutive 7-day buckets starting from the oldest day.

    Each bucket is dated by its first day. A trailing partial week is
    summed as-is.
    """
    if len(series) == 0:
        return DailySeries(dates=[], values=np.array([], dtype=np.float64))

    starts = np.arange(0, len(series), DAYS_PER_WEEK)
    totals = np.add.reduceat(series.values, starts)
    return DailySeries(
        dates=[series.dates[i] for i in starts],
        values=totals.astype(np.float64),
    )
