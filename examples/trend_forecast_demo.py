"""Example: Forecasting daily revenue from an order log.

Builds a zero-filled daily series from dated order totals, fits the
least-squares trend, projects two weeks ahead and labels the direction.

Usage:
    python examples/trend_forecast_demo.py
"""

from datetime import date, timedelta

import numpy as np

from app.features.trends import (
    aggregate_weekly,
    assess_trend,
    build_daily_series,
    lookback_window,
    project,
    summarize_projection,
)


def main():
    # 1. Create sample order log (45 days, some days without orders)
    rng = np.random.default_rng(7)
    start, end = lookback_window(date(2024, 2, 14), 45)
    orders = [
        (start + timedelta(days=int(day)), float(amount))
        for day, amount in zip(
            rng.integers(0, 45, size=120),
            rng.gamma(shape=2.0, scale=40.0, size=120),
            strict=True,
        )
    ]
    print(f"Order log: {len(orders)} orders between {start} and {end}")

    # 2. Bucket by day, zero-filling empty days
    daily = build_daily_series(orders, start, end)
    print(f"Daily series: {len(daily)} days, {int((daily.values == 0).sum())} without orders")

    # 3. Fit and project
    horizon = 14
    result = project(daily.values, horizon, confidence_level=0.95)
    print(f"\nSlope: {result.fit.slope:.2f}/day  Intercept: {result.fit.intercept:.2f}")
    print(f"R^2: {result.fit.r_squared:.3f}")
    print(f"\n{horizon}-day forecast:")
    for i in range(result.count):
        print(
            f"  {end + timedelta(days=i + 1)}: {result.values[i]:8.2f}"
            f"  [{result.lower[i]:8.2f}, {result.upper[i]:8.2f}]"
        )

    # 4. Summarize and classify
    summary = summarize_projection(
        result.values, kind="monetary", lower=result.lower, upper=result.upper
    )
    print(f"\nNext week: {summary.next_week:.2f}")
    print(
        f"Next {horizon} days: {summary.next_period:.2f}"
        f"  (95% range {summary.lower_total:.2f} to {summary.upper_total:.2f})"
    )

    assessment = assess_trend(daily.values)
    print(f"Trend: {assessment.direction.value} (relative slope {assessment.relative_slope:+.4f})")

    # 5. Weekly view
    weekly = aggregate_weekly(daily)
    print("\nWeekly totals:")
    for week_start, total in zip(weekly.dates, weekly.values, strict=True):
        print(f"  {week_start}: {total:.2f}")


if __name__ == "__main__":
    main()
