"""Linear trend estimator: ordinary least squares against position.

The regressor is the index 0..n-1 of each observation, so the series must
be contiguous and chronological (oldest first) with explicit zeros for
empty periods. Reordering the input changes the fit.

Formula (closed form, no iteration), centred on the means:
    slope     = sum((x - x_mean) * (y - y_mean)) / sum((x - x_mean)^2)
    intercept = y_mean - slope * x_mean

This is algebraically the raw-sum form
(n*sumXY - sumX*sumY) / (n*sumXX - sumX^2) but keeps full precision when
the series sits on a large offset.

CRITICAL: n < 2 makes the denominator zero. That case raises
InsufficientDataError instead of returning NaN.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from app.features.trends.errors import InsufficientDataError, InvalidArgumentError

MIN_OBSERVATIONS = 2

FloatArray = np.ndarray[Any, np.dtype[np.float64]]
SeriesLike = Sequence[float] | FloatArray


@dataclass(frozen=True)
class TrendFit:
    """Least-squares line fitted to a series.

    Attributes:
        slope: Change per period.
        intercept: Fitted value at position 0 (the oldest period).
        n_observations: Length of the series the line was fitted on.
        mean: Mean of the observed values.
        r_squared: Coefficient of determination (0.0 for a constant series).
        residual_std: Root mean squared residual of the fit.
    """

    slope: float
    intercept: float
    n_observations: int
    mean: float
    r_squared: float
    residual_std: float

    def predict_at(self, position: float) -> float:
        """Evaluate the fitted line at a position (unclamped)."""
        return self.intercept + self.slope * position


def as_series(series: SeriesLike) -> FloatArray:
    """Validate and convert an input series to a float64 array.

    Args:
        series: Ordered observations, oldest first.

    Returns:
        1D float64 array (a copy, the input is never mutated).

    Raises:
        InvalidArgumentError: If the input is not 1D numeric or has
            non-finite values.
    """
    try:
        values = np.array(series, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Series must contain numbers: {e}") from e

    if values.ndim != 1:
        raise InvalidArgumentError(f"Series must be one-dimensional, got shape {values.shape}")

    if not np.all(np.isfinite(values)):
        bad = np.flatnonzero(~np.isfinite(values))
        raise InvalidArgumentError(
            f"Series contains non-finite values at positions {bad[:10].tolist()}"
        )

    return values


def require_observations(values: FloatArray, minimum: int = MIN_OBSERVATIONS) -> None:
    """Raise InsufficientDataError if the series is shorter than minimum."""
    if len(values) < minimum:
        raise InsufficientDataError(len(values), minimum)


def fit_line(values: FloatArray) -> TrendFit:
    """Fit the OLS line to an already validated array of length >= 2.

    Raises:
        InvalidArgumentError: If the values are too large to fit without overflow.
    """
    n = len(values)

    if np.all(values == values[0]):
        # Constant series: exact flat line, no rounding noise in the slope
        return TrendFit(
            slope=0.0,
            intercept=float(values[0]),
            n_observations=n,
            mean=float(values[0]),
            r_squared=0.0,
            residual_std=0.0,
        )

    # Centred on the means: same line as the raw-sum form without the
    # cancellation on series with a large offset
    x = np.arange(n, dtype=np.float64)
    x_mean = (n - 1) / 2.0
    with np.errstate(over="ignore", invalid="ignore"):
        y_mean = float(np.mean(values))
        x_dev = x - x_mean
        y_dev = values - y_mean

        slope = float(np.sum(x_dev * y_dev) / np.sum(x_dev * x_dev))
        intercept = y_mean - slope * x_mean

        residuals = values - (intercept + slope * x)
        ss_res = float(np.sum(residuals**2))
        ss_tot = float(np.sum(y_dev**2))
        r_squared = 1.0 - ss_res / ss_tot if ss_tot != 0 else 0.0
        residual_std = float(np.sqrt(ss_res / n))

    if not all(math.isfinite(v) for v in (slope, intercept, y_mean, r_squared, residual_std)):
        raise InvalidArgumentError("Series magnitude too large to fit")

    return TrendFit(
        slope=slope,
        intercept=intercept,
        n_observations=n,
        mean=y_mean,
        r_squared=r_squared,
        residual_std=residual_std,
    )


def estimate_trend(series: SeriesLike) -> TrendFit:
    """Fit an ordinary-least-squares line to a series indexed by position.

    Args:
        series: Contiguous, zero-filled observations, oldest first.

    Returns:
        TrendFit such that intercept + slope * i approximates series[i].

    Raises:
        InvalidArgumentError: If the series has non-finite or non-numeric values.
        InsufficientDataError: If the series has fewer than 2 observations.

    Example:
        >>> fit = estimate_trend([100, 110, 120, 130, 140])
        >>> fit.slope, fit.intercept
        (10.0, 100.0)
    """
    values = as_series(series)
    require_observations(values)
    return fit_line(values)
