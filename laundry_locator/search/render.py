"""Presentation helpers shared by the HTTP app and the CLI."""

from datetime import datetime
from typing import Any, Dict, Optional

from laundry_locator.business.plans import get_premium_features
from laundry_locator.core.geo import distance_from, format_distance
from laundry_locator.models import Coordinates, Listing, ResolvedLocation
from laundry_locator.search.cascade import CascadeResult


def listing_to_dict(listing: Listing, origin: Optional[Coordinates] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
    distance = distance_from(origin, listing)
    features = get_premium_features(listing.listing_type)
    return {
        "id": listing.id,
        "name": listing.name,
        "slug": listing.slug,
        "address": listing.address,
        "city": listing.city,
        "state": listing.state,
        "zip": listing.zip,
        "phone": listing.phone,
        "website": listing.website,
        "latitude": listing.latitude,
        "longitude": listing.longitude,
        "rating": listing.rating,
        "reviewCount": listing.review_count,
        "services": list(listing.services),
        "hours": listing.hours.raw,
        "openNow": listing.hours.is_open(now or datetime.now()),
        "listingType": listing.listing_type,
        "isPremium": listing.is_premium,
        "isFeatured": listing.is_featured,
        "highlight": features.highlight_listing,
        "distance": round(distance, 2) if distance is not None else None,
        "distanceLabel": format_distance(distance) if distance is not None else None,
    }


def location_to_dict(location: ResolvedLocation) -> Dict[str, Any]:
    return {
        "display": location.display,
        "lat": location.coordinates.lat,
        "lng": location.coordinates.lng,
        "state": location.state_code,
        "radius": location.radius,
        "source": location.source,
        "mode": location.mode,
    }


def result_to_dict(result: CascadeResult) -> Dict[str, Any]:
    return {
        "tier": result.tier,
        "center": result.center.as_dict(),
        "zoom": result.zoom,
        "attempted": list(result.attempted),
    }


def format_listing_line(listing: Listing, origin: Optional[Coordinates] = None) -> str:
    distance = distance_from(origin, listing)
    where = ", ".join(part for part in (listing.address, listing.city, listing.state) if part)
    parts = [listing.name]
    if where:
        parts.append(where)
    parts.append(f"{listing.rating:.1f}★ ({listing.review_count})")
    if distance is not None:
        parts.append(format_distance(distance))
    return " | ".join(parts)
