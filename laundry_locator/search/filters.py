"""Client-side narrowing and ordering of an already fetched listing set."""

import math
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from laundry_locator.core.geo import distance_from
from laundry_locator.models import Coordinates, Listing, ListingFilter

SORT_KEYS = ("distance", "rating", "name", "services")
_TRUE_VALUES = {"1", "true", "yes", "on"}


def parse_filter(params: Mapping[str, Any]) -> ListingFilter:
    """Build a filter from query parameters; raises ValueError on bad input."""
    open_now = str(params.get("openNow") or params.get("open_now") or "").strip().lower() in _TRUE_VALUES

    rating_raw = params.get("rating") or params.get("min_rating")
    min_rating = 0.0
    if rating_raw not in (None, ""):
        try:
            min_rating = float(rating_raw)
        except (TypeError, ValueError):
            raise ValueError("rating must be numeric")
        if not 0 <= min_rating <= 5:
            raise ValueError("rating must be between 0 and 5")

    if hasattr(params, "getlist"):
        services_raw = [s for value in params.getlist("services") for s in str(value).split(",")]
    else:
        services_raw = params.get("services") or ""
    if isinstance(services_raw, (list, tuple)):
        services = tuple(str(s).strip() for s in services_raw if str(s).strip())
    else:
        services = tuple(s.strip() for s in str(services_raw).split(",") if s.strip())

    sort_by = str(params.get("sort") or params.get("sortBy") or "distance").strip().lower()
    if sort_by not in SORT_KEYS:
        raise ValueError(f"sort must be one of: {', '.join(SORT_KEYS)}")

    return ListingFilter(open_now=open_now, min_rating=min_rating, services=services, sort_by=sort_by)


def _matches(listing: Listing, listing_filter: ListingFilter, now: datetime) -> bool:
    if listing_filter.min_rating > 0 and listing.rating < listing_filter.min_rating:
        return False
    if listing_filter.services and not any(s in listing.services for s in listing_filter.services):
        return False
    if listing_filter.open_now and not listing.hours.is_open(now):
        return False
    return True


def _sort_key(sort_by: str, origin: Optional[Coordinates]) -> Callable[[Listing], Any]:
    if sort_by == "rating":
        return lambda listing: -listing.rating
    if sort_by == "name":
        return lambda listing: listing.name.casefold()
    if sort_by == "services":
        return lambda listing: -len(listing.services)

    def _distance(listing: Listing) -> float:
        distance = distance_from(origin, listing)
        return distance if distance is not None else math.inf

    return _distance


def apply_filter(
    listings: Sequence[Listing],
    listing_filter: ListingFilter,
    now: Optional[datetime] = None,
    origin: Optional[Coordinates] = None,
) -> List[Listing]:
    """Return a new filtered, stably sorted list; the input is left untouched."""
    now = now or datetime.now()
    kept = [listing for listing in listings if _matches(listing, listing_filter, now)]
    return sorted(kept, key=_sort_key(listing_filter.sort_by, origin))


def filter_summary(listing_filter: ListingFilter) -> Dict[str, Any]:
    return {
        "openNow": listing_filter.open_now,
        "rating": listing_filter.min_rating,
        "services": list(listing_filter.services),
        "sort": listing_filter.sort_by,
    }
