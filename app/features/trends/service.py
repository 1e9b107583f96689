"""Trend service: orchestrates the pure trend engine for the API.

Orchestrates:
- Settings-driven limits and defaults (threshold, periods, window size)
- Series preparation from dated observations
- Fitting, projection, classification and summaries
- Structured logging and timing

The engine itself is pure and stateless; every call recomputes the fit
from the series it is given.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from datetime import timedelta
from datetime import date as date_type

import structlog

from app.core.config import get_settings
from app.features.trends.classifier import assess_trend, classify_fit
from app.features.trends.errors import InvalidArgumentError
from app.features.trends.estimator import TrendFit, estimate_trend
from app.features.trends.forecaster import (
    ForecastResult,
    ProjectionKind,
    project,
    summarize_projection,
)
from app.features.trends.metrics import forecast_accuracy
from app.features.trends.schemas import (
    AccuracyResponse,
    ForecastPoint,
    ForecastResponse,
    Observation,
    ProjectionSummaryResponse,
    SalesForecastResponse,
    SeriesPoint,
    TrendAssessmentResponse,
    TrendFitResponse,
)
from app.features.trends.series import (
    DAYS_PER_WEEK,
    DailySeries,
    aggregate_weekly,
    build_daily_series,
)

logger = structlog.get_logger()


def _fit_response(fit: TrendFit) -> TrendFitResponse:
    return TrendFitResponse.model_validate(fit)


class TrendService:
    """Service for trend estimation, forecasting and classification.

    CRITICAL: Stateless. Safe to share across concurrent requests.
    """

    def __init__(self) -> None:
        """Initialize the trend service."""
        self.settings = get_settings()

    def _check_series_length(self, n: int) -> None:
        if n > self.settings.series_max_points:
            raise InvalidArgumentError(
                f"Series has {n} points; maximum is {self.settings.series_max_points}"
            )

    def _periods(self, periods: int | None) -> int:
        """Fall back to the configured horizon and enforce the configured maximum."""
        if periods is None:
            periods = self.settings.forecast_default_periods
        if periods > self.settings.forecast_max_periods:
            raise InvalidArgumentError(
                f"periods={periods} exceeds maximum of {self.settings.forecast_max_periods}"
            )
        return periods

    def _threshold(self, threshold: float | None) -> float:
        return self.settings.trend_stable_threshold if threshold is None else threshold

    def estimate(self, series: Sequence[float]) -> TrendFitResponse:
        """Fit the least-squares trend line to a series.

        Args:
            series: Contiguous observations, oldest first.

        Returns:
            TrendFitResponse with slope, intercept and fit statistics.

        Raises:
            InvalidArgumentError: If the series is invalid or too long.
            InsufficientDataError: If the series has fewer than 2 points.
        """
        self._check_series_length(len(series))
        fit = estimate_trend(series)

        logger.info(
            "trends.estimate_completed",
            n_observations=fit.n_observations,
            slope=fit.slope,
            r_squared=fit.r_squared,
        )
        return _fit_response(fit)

    def classify(
        self,
        series: Sequence[float],
        threshold: float | None = None,
    ) -> TrendAssessmentResponse:
        """Label the trend direction of a series.

        Args:
            series: Contiguous observations, oldest first.
            threshold: Stability band; defaults to settings.trend_stable_threshold.

        Returns:
            TrendAssessmentResponse with direction and supporting numbers.
        """
        self._check_series_length(len(series))
        assessment = assess_trend(series, self._threshold(threshold))

        logger.info(
            "trends.classify_completed",
            n_observations=len(series),
            direction=assessment.direction.value,
            relative_slope=assessment.relative_slope,
            threshold=assessment.threshold,
        )
        return TrendAssessmentResponse.model_validate(assessment)

    def forecast(
        self,
        series: Sequence[float],
        periods: int | None = None,
        kind: ProjectionKind = "monetary",
        confidence_level: float | None = None,
    ) -> ForecastResponse:
        """Project a positional series forward and summarize the projection.

        Args:
            series: Contiguous observations, oldest first.
            periods: Number of future periods; defaults to settings.forecast_default_periods.
            kind: "monetary" or "count" (controls rounding of totals).
            confidence_level: Optional prediction interval level.

        Returns:
            ForecastResponse with values, bounds, fit, trend and totals.

        Raises:
            InvalidArgumentError: If arguments are out of domain.
            InsufficientDataError: If the series has fewer than 2 points.
        """
        start_time = time.perf_counter()
        self._check_series_length(len(series))
        periods = self._periods(periods)

        logger.info(
            "trends.forecast_started",
            n_observations=len(series),
            periods=periods,
            kind=kind,
            confidence_level=confidence_level,
        )

        result = project(series, periods, confidence_level=confidence_level)
        trend = classify_fit(result.fit, self.settings.trend_stable_threshold)
        summary = summarize_projection(
            result.values, kind=kind, lower=result.lower, upper=result.upper
        )

        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            "trends.forecast_completed",
            n_observations=result.fit.n_observations,
            periods=periods,
            trend=trend.value,
            next_period=summary.next_period,
            duration_ms=duration_ms,
        )

        return ForecastResponse(
            forecast=result.values.tolist(),
            lower=result.lower.tolist() if result.lower is not None else None,
            upper=result.upper.tolist() if result.upper is not None else None,
            count=result.count,
            fit=_fit_response(result.fit),
            trend=trend,
            projections=ProjectionSummaryResponse.model_validate(summary),
            duration_ms=duration_ms,
        )

    def prepare_series(
        self,
        observations: Sequence[Observation],
        start_date: date_type,
        end_date: date_type,
        granularity: str = "day",
    ) -> DailySeries:
        """Bucket dated observations into a zero-filled daily or weekly series.

        Raises:
            InvalidArgumentError: If the window exceeds series_max_lookback_days.
        """
        window_days = (end_date - start_date).days + 1
        if window_days > self.settings.series_max_lookback_days:
            raise InvalidArgumentError(
                f"Window spans {window_days} days; maximum lookback is "
                f"{self.settings.series_max_lookback_days}"
            )

        daily = build_daily_series(
            ((obs.date, obs.value) for obs in observations),
            start_date,
            end_date,
        )

        logger.debug(
            "trends.series_prepared",
            n_observations=len(observations),
            n_days=len(daily),
            n_active_days=int((daily.values != 0).sum()),
            granularity=granularity,
        )

        return aggregate_weekly(daily) if granularity == "week" else daily

    def sales_forecast(
        self,
        observations: Sequence[Observation],
        start_date: date_type,
        end_date: date_type,
        periods: int | None = None,
        kind: ProjectionKind = "monetary",
        granularity: str = "day",
        confidence_level: float | None = None,
        intervals: bool = True,
    ) -> SalesForecastResponse:
        """Forecast from dated observations (orders, revenue, units sold).

        Args:
            observations: Dated values in any order; same-day values are summed.
            start_date: First day of the lookback window (inclusive).
            end_date: Last day of the lookback window (inclusive).
            periods: Number of future periods (days or weeks); defaults to
                settings.forecast_default_periods.
            kind: "monetary" or "count".
            granularity: "day" or "week".
            confidence_level: Interval level; defaults to
                settings.forecast_default_confidence_level.
            intervals: Whether to compute prediction interval bounds.

        Returns:
            SalesForecastResponse with historical, forecast, trend and totals.

        Raises:
            InvalidArgumentError: If arguments are out of domain.
            InsufficientDataError: If the prepared series has fewer than 2 buckets.
        """
        start_time = time.perf_counter()
        periods = self._periods(periods)
        if intervals and confidence_level is None:
            confidence_level = self.settings.forecast_default_confidence_level
        elif not intervals:
            confidence_level = None

        logger.info(
            "trends.sales_forecast_started",
            start_date=str(start_date),
            end_date=str(end_date),
            n_observations=len(observations),
            periods=periods,
            kind=kind,
            granularity=granularity,
            confidence_level=confidence_level,
        )

        prepared = self.prepare_series(observations, start_date, end_date, granularity)
        values = prepared.values

        result: ForecastResult = project(values, periods, confidence_level=confidence_level)
        assessment = assess_trend(values, self.settings.trend_stable_threshold)
        days_per_period = DAYS_PER_WEEK if granularity == "week" else 1
        summary = summarize_projection(
            result.values,
            kind=kind,
            days_per_period=days_per_period,
            lower=result.lower,
            upper=result.upper,
        )

        step = timedelta(days=days_per_period)
        last_date = prepared.dates[-1]
        forecast_points = [
            ForecastPoint(
                date=last_date + step * (h + 1),
                forecast=float(result.values[h]),
                lower_bound=float(result.lower[h]) if result.lower is not None else None,
                upper_bound=float(result.upper[h]) if result.upper is not None else None,
            )
            for h in range(result.count)
        ]

        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            "trends.sales_forecast_completed",
            n_buckets=len(prepared),
            periods=periods,
            trend=assessment.direction.value,
            next_week=summary.next_week,
            next_period=summary.next_period,
            duration_ms=duration_ms,
        )

        return SalesForecastResponse(
            historical=[
                SeriesPoint(date=d, value=float(v))
                for d, v in zip(prepared.dates, prepared.values, strict=True)
            ],
            forecast=forecast_points,
            trend=TrendAssessmentResponse.model_validate(assessment),
            projections=ProjectionSummaryResponse.model_validate(summary),
            fit=_fit_response(result.fit),
            granularity="week" if granularity == "week" else "day",
            duration_ms=duration_ms,
        )

    def accuracy(
        self,
        actuals: Sequence[float],
        predictions: Sequence[float],
    ) -> AccuracyResponse:
        """Score a past forecast against the values that were realised.

        Raises:
            InvalidArgumentError: If the sides are empty, misaligned or too long.
        """
        self._check_series_length(len(actuals))
        scores = forecast_accuracy(actuals, predictions)

        logger.info(
            "trends.accuracy_completed",
            n_samples=scores.n_samples,
            mae=scores.mae,
            mape=scores.mape,
        )
        return AccuracyResponse.model_validate(scores)
