"""Core data models shared by the location resolver, search cascade and API layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

MINUTES_PER_DAY = 24 * 60

# Approximate opening window used when a schedule could not be parsed.
ASSUMED_OPEN_MINUTE = 8 * 60
ASSUMED_CLOSE_MINUTE = 20 * 60


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float

    def as_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class WeeklyHours:
    """Opening schedule keyed by weekday (0 = Monday).

    Each interval is ``(open_minute, close_minute)`` counted from midnight of
    that weekday; a close minute past 1440 runs into the following day. A day
    mapped to an empty tuple is closed. When ``known`` is False the raw text
    could not be parsed and ``is_open`` falls back to an 8am-8pm estimate.
    """

    intervals: Dict[int, Tuple[Tuple[int, int], ...]] = field(default_factory=dict)
    always_open: bool = False
    known: bool = False
    raw: str = ""

    def is_open(self, at: datetime) -> bool:
        minute = at.hour * 60 + at.minute
        if self.always_open:
            return True
        if not self.known:
            return ASSUMED_OPEN_MINUTE <= minute < ASSUMED_CLOSE_MINUTE

        weekday = at.weekday()
        for open_minute, close_minute in self.intervals.get(weekday, ()):
            if open_minute <= minute < close_minute:
                return True

        previous_day = (weekday - 1) % 7
        for _, close_minute in self.intervals.get(previous_day, ()):
            if close_minute > MINUTES_PER_DAY and minute + MINUTES_PER_DAY < close_minute:
                return True
        return False


@dataclass(slots=True)
class Listing:
    """Normalized laundromat listing as returned by the Listing API."""

    id: Optional[int]
    name: str
    slug: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    hours: WeeklyHours = field(default_factory=WeeklyHours)
    services: List[str] = field(default_factory=list)
    description: Optional[str] = None
    rating: float = 0.0
    review_count: int = 0
    listing_type: str = "basic"
    is_premium: bool = False
    is_featured: bool = False
    distance: Optional[float] = None
    raw: Optional[Dict[str, Any]] = field(default=None, repr=False)

    @property
    def coordinates(self) -> Optional[Coordinates]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(self.latitude, self.longitude)


@dataclass(slots=True)
class Subscription:
    """Association between a user and a claimed listing."""

    listing_id: int
    user_id: Optional[int]
    tier: str
    status: str
    billing_cycle: str = "monthly"
    amount: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    auto_renew: bool = False


@dataclass(frozen=True)
class ResolvedLocation:
    """Best-effort location for one page load; coordinates and display are never empty."""

    display: str
    coordinates: Coordinates
    state_code: str
    radius: float
    source: str
    mode: Optional[str] = None


@dataclass(frozen=True)
class ListingFilter:
    open_now: bool = False
    min_rating: float = 0.0
    services: Tuple[str, ...] = ()
    sort_by: str = "distance"
