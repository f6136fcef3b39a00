"""
Data models for the dining reservation provider and the opening pipeline.

The provider returns loosely typed JSON: meal counts arrive as numbers,
numeric strings, or not at all. Everything is normalized to ``int`` here so
the rest of the package never has to reason about mixed representations.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


logger = logging.getLogger(__name__)


class MealPeriod(Enum):
    """Bookable meal periods, in display order."""
    BREAKFAST = "Breakfast"
    BRUNCH = "Brunch"
    LUNCH = "Lunch"
    DINNER = "Dinner"

    @property
    def attribute(self) -> str:
        """Attribute name on MealAvailability."""
        return self.name.lower()


def _count_from_number(number: float) -> int:
    """Whole part of a non-zero number, never rounded down to zero."""
    if not math.isfinite(number):
        return 1
    count = int(number)
    if count == 0:
        return 1 if number > 0 else -1
    return count


def normalize_meal_count(value: Any) -> int:
    """
    Normalize a raw meal opening value to an integer count.

    Only ``None``, ``""``, ``"0"``, ``False``, ``0``, ``0.0`` and NaN mean
    no availability. Every other value maps to a non-zero count; strings
    other than ``"0"`` count as available even when they read as zero
    (``"0.0"``, ``"00"``, ``" 0 "``).

    Args:
        value: Raw value from the provider (int, float, str, bool or None)

    Returns:
        Integer count, 0 meaning no availability
    """
    if value is None:
        return 0

    if isinstance(value, bool):
        return int(value)

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        if value == 0 or math.isnan(value):
            return 0
        return _count_from_number(value)

    if isinstance(value, str):
        if value in ("", "0"):
            return 0
        try:
            number = float(value.strip())
        except ValueError:
            logger.debug(f"Unparseable meal count {value!r} treated as available")
            return 1
        if number == 0 or math.isnan(number):
            return 1
        return _count_from_number(number)

    logger.debug(f"Unexpected meal count type {type(value).__name__} treated as available")
    return 1


@dataclass
class MealAvailability:
    """Availability counts per meal period for a single date."""
    breakfast: int = 0
    brunch: int = 0
    lunch: int = 0
    dinner: int = 0

    @classmethod
    def from_raw(cls, meal_openings: Optional[Mapping[str, Any]]) -> 'MealAvailability':
        """Build from a provider ``MealOpenings`` mapping."""
        meal_openings = meal_openings or {}
        return cls(**{
            period.attribute: normalize_meal_count(meal_openings.get(period.value))
            for period in MealPeriod
        })

    def count(self, period: MealPeriod) -> int:
        return getattr(self, period.attribute)

    def is_available(self) -> bool:
        """True when at least one meal period has a non-zero count."""
        return any(self.count(period) != 0 for period in MealPeriod)

    def available_periods(self) -> List[MealPeriod]:
        return [period for period in MealPeriod if self.count(period) != 0]

    def as_dict(self) -> Dict[str, int]:
        """Label to count mapping, zeros included."""
        return {period.value: self.count(period) for period in MealPeriod}


@dataclass(frozen=True)
class ReservationQuery:
    """Search parameters shared by every target."""
    start_date: date
    party_size: int
    stay_length_days: int


@dataclass(frozen=True)
class VenueDirectoryEntry:
    """A venue as listed in the provider directory."""
    name: str
    venue_id: str
    booking_url: str

    @classmethod
    def from_api_response(cls, data: Mapping[str, Any]) -> 'VenueDirectoryEntry':
        return cls(
            name=str(data.get("Name", "")),
            venue_id=str(data.get("ID", "")),
            booking_url=str(data.get("DisneyUrl") or ""),
        )


@dataclass(frozen=True)
class Target:
    """A resolved venue ready to be polled."""
    name: str
    venue_id: str
    query_url: str
    deep_link: str


@dataclass
class OpeningRecord:
    """One date from the provider openings response."""
    date: date
    availability: MealAvailability = field(default_factory=MealAvailability)

    @classmethod
    def from_api_response(cls, data: Mapping[str, Any]) -> 'OpeningRecord':
        """
        Parse a ``{Date, MealOpenings}`` record.

        Raises:
            ValueError: If the record has no usable date
        """
        raw_date = data.get("Date")
        if not raw_date:
            raise ValueError(f"Opening record missing Date: {data!r}")

        try:
            parsed_date = date.fromisoformat(str(raw_date)[:10])
        except ValueError as e:
            raise ValueError(f"Invalid opening date {raw_date!r}") from e

        return cls(
            date=parsed_date,
            availability=MealAvailability.from_raw(data.get("MealOpenings")),
        )


@dataclass
class OpeningEvent:
    """A detected opening for one target, handed to the dispatcher."""
    target: Target
    date: date
    availability: MealAvailability

    @property
    def venue_name(self) -> str:
        return self.target.name

    @property
    def deep_link(self) -> str:
        return self.target.deep_link


@dataclass
class PollState:
    """Mutable poll loop counters."""
    check_count: int = 0


@dataclass
class SMSThrottleState:
    """SMS cooldown state; resets to defaults on process restart."""
    sent_in_current_cycle: int = 0
    paused: bool = False
