"""Scoring components for churn risk."""

from .base import BaseScorer
from .activity import ActivityScorer, ACTIVITY_VALID, ACTIVITY_INVALID, ACTIVITY_MISSING
from .tickets import TicketScorer
from .revenue import RevenueScorer
from .segment import SegmentScorer

__all__ = [
    "BaseScorer",
    "ActivityScorer",
    "TicketScorer",
    "RevenueScorer",
    "SegmentScorer",
    "ACTIVITY_VALID",
    "ACTIVITY_INVALID",
    "ACTIVITY_MISSING",
]
