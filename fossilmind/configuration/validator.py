"""
Configuration validation with clear, fail-fast error messages.
"""

import logging
from typing import Sequence, Union

logger = logging.getLogger(__name__)

Number = Union[int, float]


class ConfigValidator:
    """Validation helpers for typed configuration sections"""

    @staticmethod
    def validate_range(value: Number, min_val: Number, max_val: Number, key_path: str) -> None:
        """Validate that a numeric value is within an inclusive range.

        Raises:
            ValueError: If value is outside the valid range
        """
        if not min_val <= value <= max_val:
            raise ValueError(
                f"Configuration key '{key_path}' must be between {min_val} and {max_val}, got {value}"
            )

    @staticmethod
    def validate_positive(value: Number, key_path: str, allow_zero: bool = False) -> None:
        """Raises ValueError unless value > 0 (or >= 0 with allow_zero)."""
        if value < 0 or (value == 0 and not allow_zero):
            qualifier = "non-negative" if allow_zero else "positive"
            raise ValueError(f"Configuration key '{key_path}' must be {qualifier}, got {value}")

    @staticmethod
    def validate_band(low: float, high: float, key_path: str) -> None:
        """Validate a similarity band: 0 <= low < high <= 1.

        Raises:
            ValueError: If the band is empty or outside [0, 1]
        """
        ConfigValidator.validate_range(low, 0.0, 1.0, f"{key_path}.min")
        ConfigValidator.validate_range(high, 0.0, 1.0, f"{key_path}.max")
        if low >= high:
            raise ValueError(f"Configuration band '{key_path}' must satisfy min < max, got [{low}, {high})")

    @staticmethod
    def validate_intervals(intervals: Sequence[int], key_path: str) -> None:
        """Validate a non-empty, non-decreasing list of positive day intervals."""
        if not intervals:
            raise ValueError(f"Configuration key '{key_path}' must contain at least one interval")
        for i, days in enumerate(intervals):
            ConfigValidator.validate_positive(days, f"{key_path}[{i}]")
            if i and days < intervals[i - 1]:
                raise ValueError(f"Configuration key '{key_path}' must be non-decreasing, got {list(intervals)}")
