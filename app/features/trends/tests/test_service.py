"""Tests for TrendService."""

from datetime import date, timedelta

import pytest

from app.features.trends.classifier import TrendDirection
from app.features.trends.errors import InsufficientDataError, InvalidArgumentError
from app.features.trends.schemas import Observation
from app.features.trends.service import TrendService


@pytest.fixture
def service() -> TrendService:
    """Service with default settings."""
    return TrendService()


def _daily_observations(start: date, values: list[float]) -> list[Observation]:
    return [Observation(date=start + timedelta(days=i), value=v) for i, v in enumerate(values)]


class TestEstimate:
    """Tests for TrendService.estimate."""

    def test_estimate(self, service, linear_series):
        """Returns the fitted line."""
        fit = service.estimate(linear_series)

        assert fit.slope == pytest.approx(10.0)
        assert fit.intercept == pytest.approx(100.0)
        assert fit.n_observations == 5

    def test_series_too_long(self, monkeypatch):
        """series_max_points is enforced."""
        monkeypatch.setenv("SERIES_MAX_POINTS", "10")
        service = TrendService()

        with pytest.raises(InvalidArgumentError, match="maximum is 10"):
            service.estimate([1.0] * 11)


class TestClassify:
    """Tests for TrendService.classify."""

    def test_uses_configured_threshold(self, monkeypatch):
        """Default threshold comes from settings."""
        monkeypatch.setenv("TREND_STABLE_THRESHOLD", "0.0")
        service = TrendService()

        series = [100.0 + 1.0 * i for i in range(5)]
        assessment = service.classify(series)

        assert assessment.direction == TrendDirection.INCREASING
        assert assessment.threshold == 0.0

    def test_explicit_threshold_overrides_settings(self, service):
        """Request threshold wins over settings."""
        series = [100.0 + 10.0 * i for i in range(5)]
        assessment = service.classify(series, threshold=0.5)

        assert assessment.direction == TrendDirection.STABLE
        assert assessment.threshold == 0.5


class TestForecast:
    """Tests for TrendService.forecast."""

    def test_monetary_forecast(self, service, linear_series):
        """Forecast, trend and totals for the linear example."""
        response = service.forecast(linear_series, periods=3)

        assert response.forecast == pytest.approx([150.0, 160.0, 170.0])
        assert response.count == 3
        assert response.trend == TrendDirection.INCREASING
        assert response.projections.next_week == pytest.approx(480.0)
        assert response.projections.next_period == pytest.approx(480.0)
        assert response.lower is None
        assert response.duration_ms >= 0

    def test_count_forecast_rounds_totals(self, service):
        """Count totals are whole numbers."""
        response = service.forecast([1.0, 1.5, 2.0, 2.5], periods=7, kind="count")

        # forecasts 3.0, 3.5, ..., 6.0 -> sum 31.5 -> 32
        assert response.projections.next_week == 32
        assert response.projections.next_period == 32

    def test_with_confidence_level(self, service, noisy_series):
        """Bounds are returned when requested."""
        response = service.forecast(noisy_series.tolist(), periods=5, confidence_level=0.9)

        assert response.lower is not None
        assert response.upper is not None
        assert len(response.lower) == len(response.upper) == 5

    def test_clamped_forecast(self, service, falling_series):
        """Falling series is floored at zero and labelled decreasing."""
        response = service.forecast(falling_series, periods=5)

        assert response.forecast == [0.0, 0.0, 0.0, 0.0, 0.0]
        assert response.trend == TrendDirection.DECREASING
        assert response.projections.next_period == 0.0

    def test_default_periods_from_settings(self, monkeypatch, linear_series):
        """Omitted periods use forecast_default_periods."""
        monkeypatch.setenv("FORECAST_DEFAULT_PERIODS", "4")
        service = TrendService()

        response = service.forecast(linear_series)

        assert response.count == 4
        assert response.forecast == pytest.approx([150.0, 160.0, 170.0, 180.0])

    def test_interval_totals(self, service, noisy_series):
        """Interval totals bracket the projected total."""
        response = service.forecast(noisy_series.tolist(), periods=10, confidence_level=0.95)

        totals = response.projections
        assert totals.lower_total <= totals.next_period <= totals.upper_total
        assert totals.upper_total == pytest.approx(sum(response.upper))

    def test_periods_above_configured_max(self, monkeypatch, linear_series):
        """forecast_max_periods is enforced."""
        monkeypatch.setenv("FORECAST_DEFAULT_PERIODS", "5")
        monkeypatch.setenv("FORECAST_MAX_PERIODS", "10")
        service = TrendService()

        with pytest.raises(InvalidArgumentError, match="exceeds maximum of 10"):
            service.forecast(linear_series, periods=11)

    def test_insufficient_data(self, service):
        """One point cannot be forecast."""
        with pytest.raises(InsufficientDataError):
            service.forecast([5.0], periods=3)


class TestSalesForecast:
    """Tests for TrendService.sales_forecast."""

    def test_daily_sales_forecast(self, service):
        """Zero-filled history, dated forecast points and trend."""
        start = date(2024, 3, 1)
        observations = _daily_observations(start, [100.0, 110.0, 120.0, 130.0, 140.0])

        response = service.sales_forecast(
            observations=observations,
            start_date=start,
            end_date=date(2024, 3, 5),
            periods=3,
            intervals=False,
        )

        assert [p.value for p in response.historical] == [100.0, 110.0, 120.0, 130.0, 140.0]
        assert [p.date for p in response.forecast] == [
            date(2024, 3, 6),
            date(2024, 3, 7),
            date(2024, 3, 8),
        ]
        assert [p.forecast for p in response.forecast] == pytest.approx([150.0, 160.0, 170.0])
        assert response.forecast[0].lower_bound is None
        assert response.trend.direction == TrendDirection.INCREASING
        assert response.fit.slope == pytest.approx(10.0)
        assert response.granularity == "day"

    def test_gaps_are_zero_filled(self, service):
        """Missing days enter the regression as zeros."""
        start = date(2024, 3, 1)
        observations = [
            Observation(date=start, value=50.0),
            Observation(date=start + timedelta(days=3), value=50.0),
        ]

        response = service.sales_forecast(
            observations=observations,
            start_date=start,
            end_date=start + timedelta(days=3),
            periods=1,
        )

        assert [p.value for p in response.historical] == [50.0, 0.0, 0.0, 50.0]
        assert len(response.historical) == 4

    def test_weekly_granularity(self, service):
        """Weekly buckets and forecasts step by 7 days."""
        start = date(2024, 1, 1)
        observations = _daily_observations(start, [1.0] * 7 + [2.0] * 7 + [3.0] * 7)

        response = service.sales_forecast(
            observations=observations,
            start_date=start,
            end_date=start + timedelta(days=20),
            periods=2,
            kind="count",
            granularity="week",
        )

        assert [p.value for p in response.historical] == [7.0, 14.0, 21.0]
        assert [p.date for p in response.forecast] == [date(2024, 1, 22), date(2024, 1, 29)]
        assert [p.forecast for p in response.forecast] == pytest.approx([28.0, 35.0])
        assert response.projections.next_period == 63
        assert response.projections.next_week == 28
        assert response.projections.average_daily == 5  # 63 / 14 days = 4.5, half-up
        assert response.granularity == "week"

    def test_default_confidence_level_from_settings(self, monkeypatch):
        """Bounds use forecast_default_confidence_level unless disabled."""
        monkeypatch.setenv("FORECAST_DEFAULT_CONFIDENCE_LEVEL", "0.8")
        service = TrendService()
        start = date(2024, 3, 1)
        observations = _daily_observations(start, [10.0, 14.0, 11.0, 16.0, 13.0, 18.0])
        kwargs = {
            "observations": observations,
            "start_date": start,
            "end_date": start + timedelta(days=5),
            "periods": 2,
        }

        default = service.sales_forecast(**kwargs)
        explicit = service.sales_forecast(**kwargs, confidence_level=0.8)
        disabled = service.sales_forecast(**kwargs, intervals=False)

        assert default.forecast[0].upper_bound == pytest.approx(explicit.forecast[0].upper_bound)
        assert default.forecast[0].upper_bound > default.forecast[0].forecast
        assert disabled.forecast[0].upper_bound is None
        assert disabled.projections.upper_total is None

    def test_default_periods_from_settings(self, monkeypatch):
        """Omitted periods use forecast_default_periods."""
        monkeypatch.setenv("FORECAST_DEFAULT_PERIODS", "5")
        service = TrendService()
        start = date(2024, 3, 1)

        response = service.sales_forecast(
            observations=_daily_observations(start, [1.0, 2.0, 3.0]),
            start_date=start,
            end_date=start + timedelta(days=2),
        )

        assert len(response.forecast) == 5

    def test_single_day_window_is_insufficient(self, service):
        """A one-day window has a single bucket."""
        day = date(2024, 3, 1)
        with pytest.raises(InsufficientDataError):
            service.sales_forecast(
                observations=[Observation(date=day, value=10.0)],
                start_date=day,
                end_date=day,
                periods=3,
            )

    def test_lookback_limit(self, monkeypatch):
        """series_max_lookback_days is enforced."""
        monkeypatch.setenv("SERIES_MAX_LOOKBACK_DAYS", "30")
        service = TrendService()

        with pytest.raises(InvalidArgumentError, match="maximum lookback is 30"):
            service.sales_forecast(
                observations=[],
                start_date=date(2024, 1, 1),
                end_date=date(2024, 3, 1),
                periods=3,
            )


class TestAccuracy:
    """Tests for TrendService.accuracy."""

    def test_accuracy(self, service):
        """Scores a forecast against actuals."""
        response = service.accuracy([10.0, 20.0], [12.0, 18.0])

        assert response.mae == pytest.approx(2.0)
        assert response.rmse == pytest.approx(2.0)
        assert response.n_samples == 2

    def test_mismatched_lengths(self, service):
        """Misaligned inputs are rejected."""
        with pytest.raises(InvalidArgumentError, match="Length mismatch"):
            service.accuracy([1.0, 2.0], [1.0])
