"""Training recommendations derived from check-ins."""

from .intensity import (
    BASE_INTENSITY,
    MAX_INTENSITY,
    MIN_INTENSITY,
    adjust_intensity,
    describe_adjustment,
)

__all__ = [
    "BASE_INTENSITY",
    "MAX_INTENSITY",
    "MIN_INTENSITY",
    "adjust_intensity",
    "describe_adjustment",
]
