"""Derived dispatch status service package."""

from .classifier import (
    APPROACHING_SECONDS,
    DISPLAY_LABELS,
    StatusView,
    classify,
    classify_all,
    overdue_ids,
    overdue_in,
)

__all__ = [
    "APPROACHING_SECONDS",
    "DISPLAY_LABELS",
    "StatusView",
    "classify",
    "classify_all",
    "overdue_ids",
    "overdue_in",
]
