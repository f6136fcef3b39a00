"""
Data models for the dining provider API and the opening pipeline.
"""

from .dining_models import (
    MealPeriod,
    MealAvailability,
    ReservationQuery,
    VenueDirectoryEntry,
    Target,
    OpeningRecord,
    OpeningEvent,
    PollState,
    SMSThrottleState,
    normalize_meal_count
)

__all__ = [
    'MealPeriod',
    'MealAvailability',
    'ReservationQuery',
    'VenueDirectoryEntry',
    'Target',
    'OpeningRecord',
    'OpeningEvent',
    'PollState',
    'SMSThrottleState',
    'normalize_meal_count'
]
