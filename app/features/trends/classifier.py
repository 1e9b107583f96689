"""Trend classifier: direction label from the fitted slope.

One policy for every call site (sales, orders, product demand):

    stable      if |slope| <= threshold * |mean|
    increasing  if slope > 0 otherwise
    decreasing  if slope < 0 otherwise

The default threshold of 0.02 matches the 2% band used for price trends.
A threshold of 0 reduces to a bare sign check.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from app.features.trends.errors import InvalidArgumentError
from app.features.trends.estimator import SeriesLike, TrendFit, estimate_trend

DEFAULT_STABLE_THRESHOLD = 0.02


class TrendDirection(str, Enum):
    """Direction of a fitted trend."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass(frozen=True)
class TrendAssessment:
    """Direction label with the numbers behind it.

    Attributes:
        direction: Trend label.
        slope: Fitted change per period.
        relative_slope: slope / |mean| (0.0 when the mean is zero).
        threshold: Stability band used for the label.
        r_squared: How well the line explains the series (0..1).
    """

    direction: TrendDirection
    slope: float
    relative_slope: float
    threshold: float
    r_squared: float


def _validate_threshold(threshold: float) -> float:
    if not math.isfinite(threshold) or threshold < 0:
        raise InvalidArgumentError(f"threshold must be a finite number >= 0, got {threshold}")
    return float(threshold)


def classify_fit(fit: TrendFit, threshold: float = DEFAULT_STABLE_THRESHOLD) -> TrendDirection:
    """Label an existing fit.

    Args:
        fit: Fitted trend line.
        threshold: Stability band as a fraction of the series mean.

    Returns:
        TrendDirection for the fit.

    Raises:
        InvalidArgumentError: If threshold is negative.
    """
    band = _validate_threshold(threshold) * abs(fit.mean)
    if abs(fit.slope) <= band:
        return TrendDirection.STABLE
    return TrendDirection.INCREASING if fit.slope > 0 else TrendDirection.DECREASING


def classify_trend(
    series: SeriesLike,
    threshold: float = DEFAULT_STABLE_THRESHOLD,
) -> TrendDirection:
    """Label the direction of a series.

    Raises:
        InvalidArgumentError: If threshold is negative or the series is invalid.
        InsufficientDataError: If the series has fewer than 2 observations.

    Example:
        >>> classify_trend([100, 110, 120, 130, 140])
        <TrendDirection.INCREASING: 'increasing'>
    """
    _validate_threshold(threshold)
    return classify_fit(estimate_trend(series), threshold)


def assess_trend(
    series: SeriesLike,
    threshold: float = DEFAULT_STABLE_THRESHOLD,
) -> TrendAssessment:
    """Label a series and report slope, relative slope and fit quality."""
    _validate_threshold(threshold)
    fit = estimate_trend(series)
    relative_slope = fit.slope / abs(fit.mean) if fit.mean != 0 else 0.0
    return TrendAssessment(
        direction=classify_fit(fit, threshold),
        slope=fit.slope,
        relative_slope=relative_slope,
        threshold=threshold,
        r_squared=fit.r_squared,
    )
