"""Test fixtures for the trends module."""

from datetime import date

import numpy as np
import pytest


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache between tests."""
    from app.core.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def linear_series() -> list[float]:
    """Perfectly linear revenue series: slope 10, intercept 100."""
    return [100.0, 110.0, 120.0, 130.0, 140.0]


@pytest.fixture
def flat_series() -> list[float]:
    """Constant series at 50."""
    return [50.0, 50.0, 50.0, 50.0]


@pytest.fixture
def falling_series() -> list[float]:
    """Decreasing series whose line crosses zero right after the data: slope -20."""
    return [100.0, 80.0, 60.0, 40.0, 20.0]


@pytest.fixture
def noisy_series() -> np.ndarray:
    """60 days of upward-trending revenue with deterministic noise."""
    rng = np.random.default_rng(42)
    x = np.arange(60, dtype=np.float64)
    return 200.0 + 3.0 * x + rng.normal(0.0, 15.0, size=60)


@pytest.fixture
def window() -> tuple[date, date]:
    """One-week lookback window."""
    return date(2024, 3, 1), date(2024, 3, 7)
