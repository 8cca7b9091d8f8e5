"""Shared helpers."""

from voltra.utils.time import as_utc, calculate_time_delta, utcnow

__all__ = ["as_utc", "calculate_time_delta", "utcnow"]
