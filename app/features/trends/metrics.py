"""Forecast accuracy metrics: compare a projection with what actually happened.

Supported Metrics:
- MAE: Mean Absolute Error
- MSE: Mean Squared Error
- RMSE: Root Mean Squared Error
- MAPE: Mean Absolute Percentage Error (0-100 scale, zero actuals skipped)
- R²: Coefficient of determination of predictions against actuals

CRITICAL: actuals and predictions must be aligned period by period.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from app.features.trends.errors import InvalidArgumentError
from app.features.trends.estimator import SeriesLike, as_series


@dataclass(frozen=True)
class ForecastAccuracy:
    """Accuracy of a forecast against realised values.

    Attributes:
        mae: Mean absolute error.
        mse: Mean squared error.
        rmse: Root mean squared error.
        mape: Mean absolute percentage error over non-zero actuals
            (None when every actual is zero).
        r_squared: 1 - ss_res/ss_tot (0.0 when the actuals are constant).
        n_samples: Number of aligned periods compared.
    """

    mae: float
    mse: float
    rmse: float
    mape: float | None
    r_squared: float
    n_samples: int


def forecast_accuracy(actuals: SeriesLike, predictions: SeriesLike) -> ForecastAccuracy:
    """Score predictions against actuals.

    Args:
        actuals: Realised values, chronological.
        predictions: Forecasted values for the same periods.

    Returns:
        ForecastAccuracy for the pair.

    Raises:
        InvalidArgumentError: If either side is empty, non-finite, or the
            lengths differ.

    Example:
        >>> forecast_accuracy([10, 20], [12, 18]).mae
        2.0
    """
    y = as_series(actuals)
    y_hat = as_series(predictions)

    if len(y) == 0:
        raise InvalidArgumentError("Cannot score an empty forecast")
    if len(y) != len(y_hat):
        raise InvalidArgumentError(
            f"Length mismatch: actuals={len(y)}, predictions={len(y_hat)}"
        )

    with np.errstate(over="ignore", invalid="ignore"):
        errors = y - y_hat
        mae = float(np.mean(np.abs(errors)))
        mse = float(np.mean(errors**2))

        nonzero = y != 0
        mape = (
            float(np.mean(np.abs(errors[nonzero] / y[nonzero])) * 100)
            if np.any(nonzero)
            else None
        )

        ss_res = float(np.sum(errors**2))
        ss_tot = float(np.sum((y - np.mean(y)) ** 2))
        r_squared = 1.0 - ss_res / ss_tot if ss_tot != 0 else 0.0

    checked = (mae, mse, r_squared) if mape is None else (mae, mse, r_squared, mape)
    if not all(math.isfinite(v) for v in checked):
        raise InvalidArgumentError("Values too large to score")

    return ForecastAccuracy(
        mae=mae,
        mse=mse,
        rmse=math.sqrt(mse),
        mape=mape,
        r_squared=r_squared,
        n_samples=len(y),
    )
