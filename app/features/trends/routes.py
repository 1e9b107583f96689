"""Trend API routes for estimation, forecasting and classification."""

from collections.abc import Callable
from typing import TypeVar

from fastapi import APIRouter, status

from app.core.exceptions import BadRequestError, UnprocessableDataError
from app.core.logging import get_logger
from app.features.trends.errors import InsufficientDataError, InvalidArgumentError
from app.features.trends.schemas import (
    AccuracyRequest,
    AccuracyResponse,
    ClassifyRequest,
    EstimateRequest,
    ForecastRequest,
    ForecastResponse,
    SalesForecastRequest,
    SalesForecastResponse,
    TrendAssessmentResponse,
    TrendFitResponse,
)
from app.features.trends.service import TrendService

logger = get_logger(__name__)

router = APIRouter(prefix="/trends", tags=["trends"])

T = TypeVar("T")


def _run(operation: str, call: Callable[[], T]) -> T:
    """Run a service call, translating engine errors into problem responses.

    Args:
        operation: Operation name for log events.
        call: Zero-argument service call.

    Returns:
        The service call's result.

    Raises:
        UnprocessableDataError: If the series is too short.
        BadRequestError: If an argument is out of domain.
    """
    try:
        return call()
    except InsufficientDataError as e:
        logger.warning(
            f"trends.{operation}_request_failed",
            error=str(e),
            error_type=type(e).__name__,
            n_observations=e.n_observations,
        )
        raise UnprocessableDataError(
            message=str(e),
            details={
                "n_observations": e.n_observations,
                "min_observations": e.min_observations,
            },
        ) from e
    except InvalidArgumentError as e:
        logger.warning(
            f"trends.{operation}_request_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise BadRequestError(message=str(e)) from e


@router.post(
    "/estimate",
    response_model=TrendFitResponse,
    status_code=status.HTTP_200_OK,
    summary="Fit a least-squares trend line",
    description="""
Fit an ordinary-least-squares line to a series indexed by position (0..n-1).

**Input:** contiguous observations, oldest first, zeros for empty periods.

**Errors:** fewer than 2 observations returns 422 `INSUFFICIENT_DATA`.
""",
)
async def estimate(request: EstimateRequest) -> TrendFitResponse:
    """Fit the trend line for a series."""
    service = TrendService()
    return _run("estimate", lambda: service.estimate(request.series))


@router.post(
    "/forecast",
    response_model=ForecastResponse,
    status_code=status.HTTP_200_OK,
    summary="Project a series forward along its trend",
    description="""
Extrapolate the fitted trend `periods` steps past the last observation.
`periods` defaults to the configured `FORECAST_DEFAULT_PERIODS`.

**Floor:** projections are clamped at zero (revenue and counts cannot go negative).

**Kinds:**
- `monetary`: totals stay fractional
- `count`: totals are rounded half-up to whole numbers

**Intervals:** pass `confidence_level` (0.8, 0.9, 0.95, 0.99) for bounds that
widen with the square root of the horizon.
""",
)
async def forecast(request: ForecastRequest) -> ForecastResponse:
    """Forecast a positional series."""
    logger.info(
        "trends.forecast_request_received",
        n_observations=len(request.series),
        periods=request.periods,
        kind=request.kind,
    )
    service = TrendService()
    return _run(
        "forecast",
        lambda: service.forecast(
            series=request.series,
            periods=request.periods,
            kind=request.kind,
            confidence_level=request.confidence_level,
        ),
    )


@router.post(
    "/classify",
    response_model=TrendAssessmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Classify trend direction",
    description="""
Label a series `increasing`, `decreasing` or `stable`.

A series is `stable` when |slope| <= threshold * |mean|. The threshold
defaults to the configured `TREND_STABLE_THRESHOLD` (0.02).
""",
)
async def classify(request: ClassifyRequest) -> TrendAssessmentResponse:
    """Classify the direction of a series."""
    service = TrendService()
    return _run("classify", lambda: service.classify(request.series, request.threshold))


@router.post(
    "/sales-forecast",
    response_model=SalesForecastResponse,
    status_code=status.HTTP_200_OK,
    summary="Forecast from dated observations",
    description="""
Bucket dated observations (order totals, orders, units sold) by day,
zero-fill every day in `[start_date, end_date]`, optionally roll up to
weeks, then forecast, classify and summarize.

**Defaults:** `periods` falls back to `FORECAST_DEFAULT_PERIODS`; bounds use
`FORECAST_DEFAULT_CONFIDENCE_LEVEL` unless `intervals` is false.

**Response:** `historical`, dated `forecast` points with bounds, `trend`,
`projections` (`next_week`, `next_period`, `average_daily`, interval totals)
and the `fit`. Weekly projections still report `next_week` as the coming
7 days and `average_daily` per day.
""",
)
async def sales_forecast(request: SalesForecastRequest) -> SalesForecastResponse:
    """Forecast a dated observation log."""
    logger.info(
        "trends.sales_forecast_request_received",
        n_observations=len(request.observations),
        start_date=str(request.start_date),
        end_date=str(request.end_date),
        periods=request.periods,
        granularity=request.granularity,
    )
    service = TrendService()
    return _run(
        "sales_forecast",
        lambda: service.sales_forecast(
            observations=request.observations,
            start_date=request.start_date,
            end_date=request.end_date,
            periods=request.periods,
            kind=request.kind,
            granularity=request.granularity,
            confidence_level=request.confidence_level,
            intervals=request.intervals,
        ),
    )


@router.post(
    "/accuracy",
    response_model=AccuracyResponse,
    status_code=status.HTTP_200_OK,
    summary="Score a forecast against realised values",
    description="""
Compare predictions with what actually happened over the same periods.

**Metrics:** MAE, MSE, RMSE, MAPE (percent, zero actuals skipped) and R².
""",
)
async def accuracy(request: AccuracyRequest) -> AccuracyResponse:
    """Score a past forecast."""
    service = TrendService()
    return _run("accuracy", lambda: service.accuracy(request.actuals, request.predictions))
