"""Tests for series preparation."""

from datetime import UTC, date, datetime, timedelta, timezone

import numpy as np
import pytest

from app.features.trends.errors import InvalidArgumentError
from app.features.trends.series import (
    DailySeries,
    aggregate_weekly,
    build_daily_series,
    lookback_window,
    to_calendar_day,
)


class TestBuildDailySeries:
    """Tests for build_daily_series."""

    def test_zero_fills_missing_days(self, window):
        """Days without observations appear as explicit zeros."""
        start, end = window
        series = build_daily_series(
            [(date(2024, 3, 2), 10.0), (date(2024, 3, 6), 4.0)],
            start,
            end,
        )

        assert series.values.tolist() == [0.0, 10.0, 0.0, 0.0, 0.0, 4.0, 0.0]
        assert series.dates == [start + timedelta(days=i) for i in range(7)]

    def test_sums_same_day_observations(self, window):
        """Several orders on one day are totalled."""
        start, end = window
        series = build_daily_series(
            [
                (date(2024, 3, 1), 10.0),
                (date(2024, 3, 1), 5.5),
                (datetime(2024, 3, 1, 18, 30), 4.5),
            ],
            start,
            end,
        )

        assert series.values[0] == pytest.approx(20.0)

    def test_unordered_input_is_sorted_oldest_first(self, window):
        """Position follows the calendar, not input order."""
        start, end = window
        series = build_daily_series(
            [(date(2024, 3, 7), 7.0), (date(2024, 3, 1), 1.0), (date(2024, 3, 4), 4.0)],
            start,
            end,
        )

        assert series.values.tolist() == [1.0, 0.0, 0.0, 4.0, 0.0, 0.0, 7.0]

    def test_drops_observations_outside_window(self, window):
        """Observations before start or after end are ignored."""
        start, end = window
        series = build_daily_series(
            [(date(2024, 2, 29), 99.0), (date(2024, 3, 3), 3.0), (date(2024, 3, 8), 99.0)],
            start,
            end,
        )

        assert series.values.sum() == pytest.approx(3.0)

    def test_no_observations_gives_all_zero(self, window):
        """An empty log still yields one zero per day."""
        start, end = window
        series = build_daily_series([], start, end)

        assert len(series) == 7
        assert np.all(series.values == 0.0)

    def test_single_day_window(self):
        """start == end yields one position."""
        day = date(2024, 1, 1)
        series = build_daily_series([(day, 3.0)], day, day)

        assert series.dates == [day]
        assert series.values.tolist() == [3.0]

    def test_aware_datetimes_bucket_by_utc_day(self, window):
        """An order at 23:30 UTC-5 lands on the next UTC day."""
        start, end = window
        eastern = timezone(timedelta(hours=-5))
        series = build_daily_series(
            [(datetime(2024, 3, 2, 23, 30, tzinfo=eastern), 8.0)],
            start,
            end,
        )

        assert series.values[2] == 8.0
        assert series.values[1] == 0.0

    def test_inverted_window_raises(self):
        """end_date before start_date is rejected."""
        with pytest.raises(InvalidArgumentError, match="before"):
            build_daily_series([], date(2024, 3, 2), date(2024, 3, 1))

    def test_non_finite_value_raises(self, window):
        """NaN observations are rejected."""
        start, end = window
        with pytest.raises(InvalidArgumentError, match="non-finite"):
            build_daily_series([(start, float("nan"))], start, end)

    def test_spans_month_and_leap_day(self):
        """Calendar arithmetic covers month ends and Feb 29."""
        series = build_daily_series([], date(2024, 2, 27), date(2024, 3, 2))

        assert series.dates == [
            date(2024, 2, 27),
            date(2024, 2, 28),
            date(2024, 2, 29),
            date(2024, 3, 1),
            date(2024, 3, 2),
        ]


class TestAggregateWeekly:
    """Tests for aggregate_weekly."""

    def test_full_weeks(self):
        """14 days become 2 weekly totals dated by their first day."""
        start = date(2024, 1, 1)
        daily = DailySeries(
            dates=[start + timedelta(days=i) for i in range(14)],
            values=np.arange(1, 15, dtype=np.float64),
        )

        weekly = aggregate_weekly(daily)

        assert weekly.values.tolist() == [28.0, 77.0]
        assert weekly.dates == [date(2024, 1, 1), date(2024, 1, 8)]

    def test_partial_trailing_week(self):
        """A trailing partial week is summed as-is."""
        start = date(2024, 1, 1)
        daily = DailySeries(
            dates=[start + timedelta(days=i) for i in range(9)],
            values=np.ones(9, dtype=np.float64),
        )

        weekly = aggregate_weekly(daily)

        assert weekly.values.tolist() == [7.0, 2.0]
        assert weekly.dates[-1] == date(2024, 1, 8)

    def test_empty(self):
        """Empty in, empty out."""
        empty = DailySeries(dates=[], values=np.array([], dtype=np.float64))
        assert len(aggregate_weekly(empty)) == 0


class TestHelpers:
    """Tests for small helpers."""

    def test_lookback_window(self):
        """A 30-day window ends on end_date and has 30 days."""
        start, end = lookback_window(date(2024, 3, 31), 30)

        assert start == date(2024, 3, 2)
        assert end == date(2024, 3, 31)
        assert (end - start).days + 1 == 30

    def test_lookback_window_rejects_zero(self):
        """At least one day is required."""
        with pytest.raises(InvalidArgumentError):
            lookback_window(date(2024, 3, 31), 0)

    def test_to_calendar_day(self):
        """Dates pass through; datetimes lose their time."""
        assert to_calendar_day(date(2024, 5, 1)) == date(2024, 5, 1)
        assert to_calendar_day(datetime(2024, 5, 1, 23, 59)) == date(2024, 5, 1)
        assert to_calendar_day(datetime(2024, 5, 1, 23, 59, tzinfo=UTC)) == date(2024, 5, 1)

    def test_daily_series_length_mismatch(self):
        """dates and values must align."""
        with pytest.raises(InvalidArgumentError, match="differ in length"):
            DailySeries(dates=[date(2024, 1, 1)], values=np.array([1.0, 2.0]))
