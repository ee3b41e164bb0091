# settings.py
"""
Numeric configuration for the special-function kernel.

Iteration budgets and tolerances are read from environment variables prefixed
with ``STATS_`` (e.g. ``STATS_BETA_MAX_ITERATIONS=800``) and fall back to the
defaults below. Every kernel routine also accepts explicit keyword overrides.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class NumericSettings(BaseSettings):
    """Iteration budgets and tolerances for the kernel routines."""

    model_config = SettingsConfigDict(env_prefix="STATS_", extra="ignore")

    # Continued fraction (incomplete beta)
    beta_max_iterations: int = Field(default=500, ge=1)
    beta_tolerance: float = Field(default=1.0e-10, gt=0.0)
    beta_tiny: float = Field(default=1.0e-50, gt=0.0)

    # Composite Simpson's rule (lower incomplete gamma)
    simpson_intervals_per_unit: int = Field(default=10_000, ge=1)
    simpson_min_intervals: int = Field(default=100_000, ge=2)

    @field_validator("simpson_min_intervals")
    @classmethod
    def _even_minimum(cls, value: int) -> int:
        if value % 2 != 0:
            raise ValueError("simpson_min_intervals must be even")
        return value


@lru_cache
def get_settings() -> NumericSettings:
    """Return the cached settings instance."""
    return NumericSettings()
