"""Pydantic schemas for the trend API.

Series are JSON arrays of numbers, oldest first, one value per period,
with zeros for periods without activity.
"""

from __future__ import annotations

from datetime import date as date_type
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.features.trends.classifier import TrendDirection
from app.features.trends.forecaster import Z_SCORES

MAX_SERIES_POINTS = 3650
MAX_FORECAST_PERIODS = 365

ProjectionKindField = Literal["monetary", "count"]


def _check_confidence_level(v: float | None) -> float | None:
    if v is not None and v not in Z_SCORES:
        raise ValueError(f"confidence_level must be one of {sorted(Z_SCORES)}")
    return v


# =============================================================================
# Shared Components
# =============================================================================


class TrendFitResponse(BaseModel):
    """Least-squares line fitted to a series.

    Attributes:
        slope: Change per period.
        intercept: Fitted value at the first period.
        n_observations: Number of observations fitted.
        mean: Mean of the observations.
        r_squared: Coefficient of determination.
        residual_std: Root mean squared residual.
    """

    model_config = ConfigDict(from_attributes=True)

    slope: float
    intercept: float
    n_observations: int
    mean: float
    r_squared: float
    residual_std: float


class ProjectionSummaryResponse(BaseModel):
    """Totals over a forecast.

    Count projections are whole numbers; monetary projections stay fractional.
    """

    model_config = ConfigDict(from_attributes=True)

    next_week: float = Field(..., ge=0, description="Sum of the projected next 7 days")
    next_period: float = Field(..., ge=0, description="Sum of all projected periods")
    average_daily: float = Field(..., ge=0, description="Mean projected value per day")
    lower_total: float | None = Field(
        default=None, ge=0, description="Sum of the lower interval bounds, when requested"
    )
    upper_total: float | None = Field(
        default=None, ge=0, description="Sum of the upper interval bounds, when requested"
    )


class TrendAssessmentResponse(BaseModel):
    """Direction label with supporting numbers."""

    model_config = ConfigDict(from_attributes=True)

    direction: TrendDirection
    slope: float
    relative_slope: float
    threshold: float
    r_squared: float


class SeriesPoint(BaseModel):
    """Historical bucket of a dated series."""

    date: date_type
    value: float


class ForecastPoint(BaseModel):
    """Single dated forecast point.

    Attributes:
        date: First day of the forecasted period.
        forecast: Point forecast (>= 0).
        lower_bound: Lower bound of prediction interval (optional).
        upper_bound: Upper bound of prediction interval (optional).
    """

    date: date_type
    forecast: float = Field(..., ge=0)
    lower_bound: float | None = None
    upper_bound: float | None = None


# =============================================================================
# Positional Series Endpoints
# =============================================================================


class SeriesRequest(BaseModel):
    """Request body carrying a positional series."""

    model_config = ConfigDict(extra="forbid")

    series: list[float] = Field(
        ...,
        min_length=1,
        max_length=MAX_SERIES_POINTS,
        description="Contiguous observations, oldest first, zeros for empty periods",
    )


class EstimateRequest(SeriesRequest):
    """Request body for POST /trends/estimate."""


class ClassifyRequest(SeriesRequest):
    """Request body for POST /trends/classify.

    Attributes:
        threshold: Stability band as a fraction of the series mean;
            defaults to the configured trend_stable_threshold.
    """

    threshold: float | None = Field(
        default=None,
        ge=0,
        le=1,
        description="Stability band as a fraction of the series mean",
    )


class ForecastRequest(SeriesRequest):
    """Request body for POST /trends/forecast."""

    periods: int | None = Field(
        default=None,
        ge=1,
        le=MAX_FORECAST_PERIODS,
        description="Number of future periods to project; defaults to FORECAST_DEFAULT_PERIODS",
    )
    kind: ProjectionKindField = Field(
        default="monetary",
        description="monetary keeps fractional totals; count rounds totals to integers",
    )
    confidence_level: float | None = Field(
        default=None,
        description="Prediction interval level (0.8, 0.9, 0.95, 0.99); omit for none",
    )

    @field_validator("confidence_level")
    @classmethod
    def validate_confidence_level(cls, v: float | None) -> float | None:
        """Restrict intervals to the supported z-score table."""
        return _check_confidence_level(v)


class ForecastResponse(BaseModel):
    """Response body for POST /trends/forecast."""

    forecast: list[float]
    lower: list[float] | None = None
    upper: list[float] | None = None
    count: int
    fit: TrendFitResponse
    trend: TrendDirection
    projections: ProjectionSummaryResponse
    duration_ms: float


# =============================================================================
# Dated Observations Endpoint
# =============================================================================


class Observation(BaseModel):
    """A single dated observation (order total, order, units sold, ...)."""

    date: date_type | datetime
    value: float


class SalesForecastRequest(BaseModel):
    """Request body for POST /trends/sales-forecast.

    Observations may be sparse and unordered; they are bucketed by day and
    zero-filled across [start_date, end_date] before fitting.
    """

    model_config = ConfigDict(extra="forbid")

    observations: list[Observation] = Field(default_factory=list)
    start_date: date_type
    end_date: date_type
    periods: int | None = Field(
        default=None,
        ge=1,
        le=MAX_FORECAST_PERIODS,
        description="Number of future days or weeks; defaults to FORECAST_DEFAULT_PERIODS",
    )
    kind: ProjectionKindField = "monetary"
    granularity: Literal["day", "week"] = "day"
    intervals: bool = Field(default=True, description="Include prediction interval bounds")
    confidence_level: float | None = Field(
        default=None,
        description="Interval level; defaults to FORECAST_DEFAULT_CONFIDENCE_LEVEL",
    )

    @field_validator("confidence_level")
    @classmethod
    def validate_confidence_level(cls, v: float | None) -> float | None:
        """Restrict intervals to the supported z-score table."""
        return _check_confidence_level(v)

    @field_validator("end_date")
    @classmethod
    def validate_date_range(cls, v: date_type, info: object) -> date_type:
        """Ensure end_date is on or after start_date."""
        data = getattr(info, "data", {})
        if "start_date" in data and v < data["start_date"]:
            raise ValueError("end_date must be on or after start_date")
        return v

    @model_validator(mode="after")
    def validate_window_length(self) -> SalesForecastRequest:
        """Reject windows longer than the series limit."""
        days = (self.end_date - self.start_date).days + 1
        if days > MAX_SERIES_POINTS:
            raise ValueError(f"Window spans {days} days; maximum is {MAX_SERIES_POINTS}")
        return self


class SalesForecastResponse(BaseModel):
    """Response body for POST /trends/sales-forecast."""

    historical: list[SeriesPoint]
    forecast: list[ForecastPoint]
    trend: TrendAssessmentResponse
    projections: ProjectionSummaryResponse
    fit: TrendFitResponse
    granularity: Literal["day", "week"]
    duration_ms: float


# =============================================================================
# Accuracy Endpoint
# =============================================================================


class AccuracyRequest(BaseModel):
    """Request body for POST /trends/accuracy.

    Attributes:
        actuals: Realised values, chronological.
        predictions: Forecasted values for the same periods.
    """

    model_config = ConfigDict(extra="forbid")

    actuals: list[float] = Field(..., min_length=1, max_length=MAX_SERIES_POINTS)
    predictions: list[float] = Field(..., min_length=1, max_length=MAX_SERIES_POINTS)

    @model_validator(mode="after")
    def validate_aligned(self) -> AccuracyRequest:
        """Ensure both sides cover the same periods."""
        if len(self.actuals) != len(self.predictions):
            raise ValueError(
                f"actuals ({len(self.actuals)}) and predictions "
                f"({len(self.predictions)}) must have the same length"
            )
        return self


class AccuracyResponse(BaseModel):
    """Response body for POST /trends/accuracy."""

    model_config = ConfigDict(from_attributes=True)

    mae: float
    mse: float
    rmse: float
    mape: float | None = Field(None, description="Percent; None when every actual is zero")
    r_squared: float
    n_samples: int
