"""Spaced repetition review scheduling."""

from marginalia.review.scheduler import (
    INTERVAL_LEVELS,
    ReviewScheduler,
    clamp_level,
    days_for_level,
    interval_label,
    is_due,
    next_interval_level,
    progress_percent,
)
from marginalia.review.service import ReviewService

__all__ = [
    "INTERVAL_LEVELS",
    "ReviewScheduler",
    "ReviewService",
    "clamp_level",
    "days_for_level",
    "interval_label",
    "is_due",
    "next_interval_level",
    "progress_percent",
]
