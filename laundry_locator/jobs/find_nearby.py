"""CLI job that resolves the user's location and lists nearby laundromats."""

import argparse
import logging
from functools import partial
from typing import Dict, List, Optional

from laundry_locator.core.config import get_settings
from laundry_locator.core.storage import FileLocationStore
from laundry_locator.models import ListingFilter
from laundry_locator.search.cascade import CascadeResult, search_listings
from laundry_locator.search.filters import SORT_KEYS, apply_filter
from laundry_locator.search.render import format_listing_line
from laundry_locator.search.resolver import LocationResolver
from laundry_locator.vendors import google_geocoding, google_geolocation
from laundry_locator.vendors.listing_api import ListingApiClient

logger = logging.getLogger(__name__)

COULD_NOT_LOAD_MESSAGE = "We couldn't load laundromats right now. Please try again."


def find_nearby_job(
    *,
    lat: Optional[float],
    lng: Optional[float],
    radius: Optional[float],
    listing_filter: ListingFilter,
    store_path: Optional[str] = None,
    use_geolocation: bool = True,
) -> int:
    settings = get_settings()
    store = FileLocationStore(store_path or settings.location_store_path)

    geolocator = None
    reverse_geocoder = None
    if settings.google_api_key:
        if use_geolocation:
            geolocator = partial(
                google_geolocation.get_current_position,
                api_key=settings.google_api_key,
                timeout=settings.geolocation_timeout,
            )
        reverse_geocoder = partial(google_geocoding.reverse_geocode, api_key=settings.google_api_key)

    params: Dict[str, object] = {"lat": lat, "lng": lng, "radius": radius}
    if lat is not None and lng is not None:
        params["mode"] = "nearby"

    resolver = LocationResolver(store=store, geolocator=geolocator, reverse_geocoder=reverse_geocoder, settings=settings)
    location = resolver.resolve(params)
    store.save_recent_search(location.display, location.coordinates)
    print(f"Location: {location.display} ({location.coordinates.lat:.4f}, {location.coordinates.lng:.4f}) [{location.source}]")

    try:
        client = ListingApiClient(settings.listing_api_url)
    except RuntimeError as exc:
        logger.error("Listing API is not configured: %s", exc)
        print(COULD_NOT_LOAD_MESSAGE)
        return 1

    result: CascadeResult = search_listings(client, location, settings)
    if result.exhausted:
        print(COULD_NOT_LOAD_MESSAGE)
        return 1

    if result.tier != "nearby":
        print(f"No laundromats within {location.radius:g} miles; showing {result.tier.replace('_', ' ')} results.")

    listings = apply_filter(result.listings, listing_filter, origin=location.coordinates)
    for listing in listings:
        print(format_listing_line(listing, location.coordinates))
    if not listings:
        print("No laundromats match the selected filters.")

    logger.info("Completed search: tier=%s fetched=%d shown=%d", result.tier, len(result.listings), len(listings))
    return 0


def show_recent_searches(store_path: Optional[str] = None) -> int:
    store = FileLocationStore(store_path or get_settings().location_store_path)
    searches = store.get_recent_searches()
    if not searches:
        print("No recent searches.")
    for search in searches:
        lat, lng = search.get("lat"), search.get("lng")
        where = f" ({lat:.4f}, {lng:.4f})" if lat is not None and lng is not None else ""
        print(f"{search.get('query')}{where}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find laundromats near you")
    parser.add_argument("--lat", dest="lat", type=float, help="Latitude to search around")
    parser.add_argument("--lng", dest="lng", type=float, help="Longitude to search around")
    parser.add_argument(
        "--radius",
        dest="radius",
        type=float,
        default=get_settings().default_radius,
        help="Search radius in miles",
    )
    parser.add_argument("--open-now", dest="open_now", action="store_true", help="Only show laundromats open now")
    parser.add_argument("--min-rating", dest="min_rating", type=float, default=0.0, help="Minimum rating to show")
    parser.add_argument(
        "--service",
        dest="services",
        action="append",
        default=[],
        help="Required service (repeatable; any match is kept)",
    )
    parser.add_argument("--sort", dest="sort_by", choices=SORT_KEYS, default="distance", help="Sort order")
    parser.add_argument("--store", dest="store_path", help="Path of the saved-location file")
    parser.add_argument(
        "--no-geolocation",
        dest="use_geolocation",
        action="store_false",
        help="Skip network geolocation and use the saved or default location",
    )
    parser.add_argument("--recent", dest="show_recent", action="store_true", help="List recent searches and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.show_recent:
        return show_recent_searches(args.store_path)

    return find_nearby_job(
        lat=args.lat,
        lng=args.lng,
        radius=args.radius,
        listing_filter=ListingFilter(
            open_now=args.open_now,
            min_rating=args.min_rating,
            services=tuple(args.services),
            sort_by=args.sort_by,
        ),
        store_path=args.store_path,
        use_geolocation=args.use_geolocation,
    )


if __name__ == "__main__":
    raise SystemExit(main())
