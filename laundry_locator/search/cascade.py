"""Ordered fallback search: nearby, then state-wide, then the default city."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from laundry_locator.core.config import Settings, get_settings
from laundry_locator.core.geo import get_state_info
from laundry_locator.models import Coordinates, Listing, ResolvedLocation
from laundry_locator.vendors.listing_api import ListingApiClient

logger = logging.getLogger(__name__)

NEARBY_ZOOM = 12
STATE_ZOOM = 8


@dataclass(frozen=True)
class SearchTier:
    name: str
    fetch: Callable[[], List[Listing]]
    center: Coordinates
    zoom: int = NEARBY_ZOOM


@dataclass(frozen=True)
class CascadeResult:
    listings: List[Listing]
    tier: Optional[str]
    center: Coordinates
    zoom: int
    attempted: Tuple[str, ...] = field(default_factory=tuple)
    exhausted: bool = False
    error: Optional[str] = None


def run_cascade(tiers: Sequence[SearchTier]) -> CascadeResult:
    """Try each tier once, in order, stopping at the first non-empty result.

    The last tier is terminal: whatever it returns is the answer, even an empty
    list. If it raises, the result is an exhausted empty state carrying the error.
    """
    if not tiers:
        raise ValueError("at least one search tier is required")

    attempted: List[str] = []
    last_index = len(tiers) - 1
    for index, tier in enumerate(tiers):
        attempted.append(tier.name)
        try:
            listings = list(tier.fetch())
        except Exception as exc:  # noqa: BLE001
            if index == last_index:
                logger.error("Final %s search failed: %s", tier.name, exc)
                return CascadeResult([], None, tier.center, tier.zoom, tuple(attempted), exhausted=True, error=str(exc))
            logger.warning("%s search failed, trying next tier: %s", tier.name, exc)
            continue

        if listings or index == last_index:
            logger.info("Using %d listings from %s search", len(listings), tier.name)
            return CascadeResult(listings, tier.name, tier.center, tier.zoom, tuple(attempted))
        logger.info("%s search returned no listings, trying next tier", tier.name)

    raise RuntimeError("search cascade ended without a terminal tier")  # pragma: no cover


def build_default_tiers(
    client: ListingApiClient,
    location: ResolvedLocation,
    settings: Optional[Settings] = None,
) -> List[SearchTier]:
    settings = settings or get_settings()
    coordinates = location.coordinates
    state_code = (location.state_code or settings.fallback_state).upper()
    state_center = get_state_info(state_code)
    default_center = Coordinates(settings.default_city_lat, settings.default_city_lng)

    return [
        SearchTier(
            name="nearby",
            fetch=lambda: client.nearby(coordinates.lat, coordinates.lng, location.radius),
            center=coordinates,
            zoom=NEARBY_ZOOM,
        ),
        SearchTier(
            name="state",
            fetch=lambda: client.by_state(state_code),
            center=Coordinates(state_center.lat, state_center.lng),
            zoom=STATE_ZOOM,
        ),
        SearchTier(
            name="default_city",
            fetch=client.default_city,
            center=default_center,
            zoom=NEARBY_ZOOM,
        ),
    ]


def search_listings(
    client: ListingApiClient,
    location: ResolvedLocation,
    settings: Optional[Settings] = None,
) -> CascadeResult:
    logger.info(
        "Searching listings near %s (%s,%s) radius=%s state=%s",
        location.display,
        location.coordinates.lat,
        location.coordinates.lng,
        location.radius,
        location.state_code,
    )
    return run_cascade(build_default_tiers(client, location, settings))
