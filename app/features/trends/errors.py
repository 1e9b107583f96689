"""Validation errors raised by the trend engine.

Both subclass ValueError. They are deterministic: the same input always
fails the same way, so retrying without changing the input is pointless.
"""

from __future__ import annotations


class TrendError(ValueError):
    """Base class for trend engine errors."""


class InsufficientDataError(TrendError):
    """Series is too short to fit a slope.

    Attributes:
        n_observations: Length of the offending series.
        min_observations: Minimum length required.
    """

    def __init__(self, n_observations: int, min_observations: int = 2) -> None:
        super().__init__(
            f"Need at least {min_observations} observations to fit a trend, "
            f"got {n_observations}"
        )
        self.n_observations = n_observations
        self.min_observations = min_observations


class InvalidArgumentError(TrendError):
    """Argument is out of domain (periods, threshold, non-finite values, ...)."""
