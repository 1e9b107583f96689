"""Trend module: least-squares forecasting and trend classification.

This module fits an ordinary-least-squares line to a contiguous daily
series (revenue, order counts, units sold), projects it forward with a
zero floor, and labels the trend direction.

Exports:
    Estimator:
        - estimate_trend: OLS fit against position 0..n-1
        - TrendFit: Fitted line with fit statistics

    Forecaster:
        - forecast: Zero-floored projection for N periods
        - project: Projection with optional prediction intervals
        - summarize_projection: Next-week and whole-period totals
        - ForecastResult, ProjectionSummary

    Classifier:
        - classify_trend, classify_fit, assess_trend
        - TrendDirection, TrendAssessment

    Series preparation:
        - build_daily_series: Zero-filled daily series from dated observations
        - aggregate_weekly: 7-day buckets
        - lookback_window: Inclusive window ending on a given day
        - DailySeries

    Metrics:
        - forecast_accuracy: MAE, MSE, RMSE, MAPE and R² of a past forecast
        - ForecastAccuracy

    Errors:
        - InsufficientDataError, InvalidArgumentError

    Service:
        - TrendService: Orchestration layer for the API
"""

from app.features.trends.classifier import (
    DEFAULT_STABLE_THRESHOLD,
    TrendAssessment,
    TrendDirection,
    assess_trend,
    classify_fit,
    classify_trend,
)
from app.features.trends.errors import InsufficientDataError, InvalidArgumentError, TrendError
from app.features.trends.estimator import TrendFit, estimate_trend
from app.features.trends.forecaster import (
    ForecastResult,
    ProjectionSummary,
    forecast,
    project,
    summarize_projection,
)
from app.features.trends.metrics import ForecastAccuracy, forecast_accuracy
from app.features.trends.series import (
    DailySeries,
    aggregate_weekly,
    build_daily_series,
    lookback_window,
)
from app.features.trends.service import TrendService

__all__ = [
    "DEFAULT_STABLE_THRESHOLD",
    "DailySeries",
    "ForecastAccuracy",
    "ForecastResult",
    "InsufficientDataError",
    "InvalidArgumentError",
    "ProjectionSummary",
    "TrendAssessment",
    "TrendDirection",
    "TrendError",
    "TrendFit",
    "TrendService",
    "aggregate_weekly",
    "assess_trend",
    "build_daily_series",
    "classify_fit",
    "classify_trend",
    "estimate_trend",
    "forecast",
    "forecast_accuracy",
    "lookback_window",
    "project",
    "summarize_projection",
]
