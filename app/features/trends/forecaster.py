"""Series forecaster: extrapolates the fitted trend line forward.

Formula: y_hat[n+k] = max(0, slope * (n + k) + intercept) for k in 0..periods-1

Revenue, order counts and units sold cannot be negative, so projections
are floored at zero. The first forecast point continues the line at the
position right after the last observation.

Prediction intervals (optional) widen with the horizon:
    margin[k] = z * residual_std * sqrt(k + 1)
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

import numpy as np

from app.features.trends.errors import InvalidArgumentError
from app.features.trends.estimator import (
    FloatArray,
    SeriesLike,
    TrendFit,
    as_series,
    fit_line,
    require_observations,
)
from app.features.trends.series import DAYS_PER_WEEK

# Two-sided normal quantiles for the supported confidence levels
Z_SCORES: dict[float, float] = {
    0.8: 1.282,
    0.9: 1.645,
    0.95: 1.96,
    0.99: 2.576,
}

ProjectionKind = Literal["monetary", "count"]


@dataclass(frozen=True)
class ForecastResult:
    """Projected values for consecutive future periods.

    Attributes:
        values: One value per future period, chronological, each >= 0.
        count: Number of projected periods.
        fit: Trend line the projection was extrapolated from.
        lower: Lower interval bounds (None unless a confidence level was requested).
        upper: Upper interval bounds (None unless a confidence level was requested).
    """

    values: FloatArray
    count: int
    fit: TrendFit
    lower: FloatArray | None = None
    upper: FloatArray | None = None


@dataclass(frozen=True)
class ProjectionSummary:
    """Aggregate scalars over a forecast.

    Attributes:
        next_week: Sum of the projected values covering the next 7 days.
        next_period: Sum of all projected values.
        average_daily: Mean projected value per day.
        lower_total: Sum of the lower interval bounds (None without intervals).
        upper_total: Sum of the upper interval bounds (None without intervals).
    """

    next_week: float
    next_period: float
    average_daily: float
    lower_total: float | None = None
    upper_total: float | None = None


def validate_periods(periods: int) -> int:
    """Ensure periods is a positive integer.

    Raises:
        InvalidArgumentError: If periods is not an int or is <= 0.
    """
    if isinstance(periods, bool) or not isinstance(periods, int | np.integer):
        raise InvalidArgumentError(f"periods must be an integer, got {type(periods).__name__}")
    if periods <= 0:
        raise InvalidArgumentError(f"periods must be > 0, got {periods}")
    return int(periods)


def z_score(confidence_level: float) -> float:
    """Look up the z-score for a supported confidence level.

    Raises:
        InvalidArgumentError: If the level is not in Z_SCORES.
    """
    for level, z in Z_SCORES.items():
        if math.isclose(level, confidence_level):
            return z
    raise InvalidArgumentError(
        f"Unsupported confidence_level {confidence_level}; "
        f"expected one of {sorted(Z_SCORES)}"
    )


def extrapolate(fit: TrendFit, periods: int) -> FloatArray:
    """Extend a fitted line past its last observation, floored at zero.

    Raises:
        InvalidArgumentError: If the projection overflows float64.
    """
    positions = np.arange(fit.n_observations, fit.n_observations + periods, dtype=np.float64)
    with np.errstate(over="ignore", invalid="ignore"):
        raw = fit.slope * positions + fit.intercept
    if not np.all(np.isfinite(raw)):
        raise InvalidArgumentError("Projection overflows; series magnitude too large")
    return np.maximum(raw, 0.0)


def forecast(series: SeriesLike, periods: int) -> FloatArray:
    """Project a series forward along its least-squares trend.

    Args:
        series: Contiguous, zero-filled observations, oldest first.
        periods: Number of future periods to project.

    Returns:
        Array of shape [periods], each value >= 0.

    Raises:
        InvalidArgumentError: If periods <= 0 or the series has non-finite values.
        InsufficientDataError: If the series has fewer than 2 observations.

    Example:
        >>> forecast([100, 110, 120, 130, 140], 3).tolist()
        [150.0, 160.0, 170.0]
    """
    return project(series, periods).values


def project(
    series: SeriesLike,
    periods: int,
    confidence_level: float | None = None,
) -> ForecastResult:
    """Project a series forward, optionally with prediction intervals.

    Args:
        series: Contiguous, zero-filled observations, oldest first.
        periods: Number of future periods to project.
        confidence_level: One of 0.8, 0.9, 0.95, 0.99, or None for no interval.

    Returns:
        ForecastResult with values, count, the fit, and optional bounds.

    Raises:
        InvalidArgumentError: If periods, confidence_level or the series is invalid.
        InsufficientDataError: If the series has fewer than 2 observations.
    """
    periods = validate_periods(periods)
    z = z_score(confidence_level) if confidence_level is not None else None
    values = as_series(series)
    require_observations(values)

    fit = fit_line(values)
    projected = extrapolate(fit, periods)

    if z is None:
        return ForecastResult(values=projected, count=periods, fit=fit)

    with np.errstate(over="ignore", invalid="ignore"):
        margins = z * fit.residual_std * np.sqrt(np.arange(1, periods + 1, dtype=np.float64))
        upper = projected + margins
    if not np.all(np.isfinite(upper)):
        raise InvalidArgumentError("Prediction interval overflows; series magnitude too large")

    return ForecastResult(
        values=projected,
        count=periods,
        fit=fit,
        lower=np.maximum(projected - margins, 0.0),
        upper=upper,
    )


def round_count(value: float) -> int:
    """Round a non-negative count half-up to the nearest integer."""
    return int(math.floor(value + 0.5))


def summarize_projection(
    values: Sequence[float] | FloatArray,
    kind: ProjectionKind = "monetary",
    days_per_period: int = 1,
    lower: Sequence[float] | FloatArray | None = None,
    upper: Sequence[float] | FloatArray | None = None,
) -> ProjectionSummary:
    """Reduce a forecast to next-week and whole-period totals.

    Monetary projections stay fractional. Count projections (orders, units)
    are rounded half-up to whole numbers, never truncated.

    Args:
        values: Forecasted values, chronological.
        kind: "monetary" or "count".
        days_per_period: Days covered by each value (1 for daily, 7 for weekly).
        lower: Lower interval bounds aligned with values, if any.
        upper: Upper interval bounds aligned with values, if any.

    Returns:
        ProjectionSummary of the forecast. lower_total/upper_total are set
        only when both bounds are given.

    Raises:
        InvalidArgumentError: If kind or days_per_period is invalid, values is
            empty, or the bounds do not line up with values.

    Example:
        >>> summarize_projection([490.0, 490.0], days_per_period=7).average_daily
        70.0
    """
    if kind not in ("monetary", "count"):
        raise InvalidArgumentError(f"kind must be 'monetary' or 'count', got {kind!r}")
    if days_per_period not in (1, DAYS_PER_WEEK):
        raise InvalidArgumentError(
            f"days_per_period must be 1 or {DAYS_PER_WEEK}, got {days_per_period}"
        )

    arr = np.asarray(values, dtype=np.float64)
    if len(arr) == 0:
        raise InvalidArgumentError("Cannot summarize an empty forecast")

    week_periods = DAYS_PER_WEEK // days_per_period
    next_week = float(np.sum(arr[:week_periods]))
    with np.errstate(over="ignore"):
        next_period = float(np.sum(arr))
    if not math.isfinite(next_period):
        raise InvalidArgumentError("Projection total overflows; series magnitude too large")
    average_daily = next_period / (len(arr) * days_per_period)

    lower_total = upper_total = None
    if lower is not None and upper is not None:
        lo = np.asarray(lower, dtype=np.float64)
        hi = np.asarray(upper, dtype=np.float64)
        if len(lo) != len(arr) or len(hi) != len(arr):
            raise InvalidArgumentError(
                f"Bounds length ({len(lo)}, {len(hi)}) does not match forecast length {len(arr)}"
            )
        with np.errstate(over="ignore"):
            lower_total = float(np.sum(lo))
            upper_total = float(np.sum(hi))
        if not math.isfinite(upper_total):
            raise InvalidArgumentError("Interval total overflows; series magnitude too large")

    if kind == "count":
        return ProjectionSummary(
            next_week=round_count(next_week),
            next_period=round_count(next_period),
            average_daily=round_count(average_daily),
            lower_total=round_count(lower_total) if lower_total is not None else None,
            upper_total=round_count(upper_total) if upper_total is not None else None,
        )

    return ProjectionSummary(
        next_week=next_week,
        next_period=next_period,
        average_daily=average_daily,
        lower_total=lower_total,
        upper_total=upper_total,
    )
