"""Resolve the location a listing search is centred on.

Preference order: coordinates from the request URL, then the geolocation
provider (named via reverse geocoding), then the last saved location, then the
configured default city. Every external call is guarded so a failure only moves
resolution to the next step; the result always carries coordinates and a
non-blank display string.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Tuple

from laundry_locator.core.config import Settings, get_settings
from laundry_locator.core.storage import LocationStore, SavedLocation
from laundry_locator.models import Coordinates, ResolvedLocation
from laundry_locator.vendors.google_geocoding import ReverseGeocodeResult

logger = logging.getLogger(__name__)

CURRENT_LOCATION_LABEL = "Current Location"

Geolocator = Callable[[], Coordinates]
ReverseGeocoder = Callable[[float, float], ReverseGeocodeResult]


@dataclass(frozen=True)
class LocationQuery:
    lat: Optional[float] = None
    lng: Optional[float] = None
    radius: Optional[float] = None
    mode: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None


def _parse_bounded(value: Any, limit: float) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or abs(number) > limit:
        return None
    return number


def parse_location_query(params: Mapping[str, Any]) -> LocationQuery:
    """Extract lat/lng/radius/mode from URL query parameters, dropping invalid values."""
    lat = _parse_bounded(params.get("lat"), 90)
    lng = _parse_bounded(params.get("lng"), 180)
    if lat is None or lng is None:
        lat = lng = None

    radius = _parse_bounded(params.get("radius"), math.inf)
    if radius is not None and radius <= 0:
        radius = None

    mode = str(params.get("mode") or "").strip().lower() or None
    return LocationQuery(lat=lat, lng=lng, radius=radius, mode=mode)


class LocationResolver:
    def __init__(
        self,
        *,
        store: Optional[LocationStore] = None,
        geolocator: Optional[Geolocator] = None,
        reverse_geocoder: Optional[ReverseGeocoder] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.store = store
        self.geolocator = geolocator
        self.reverse_geocoder = reverse_geocoder
        self.settings = settings or get_settings()

    @property
    def default_coordinates(self) -> Coordinates:
        return Coordinates(self.settings.default_city_lat, self.settings.default_city_lng)

    def resolve(self, params: Mapping[str, Any]) -> ResolvedLocation:
        query = parse_location_query(params)
        radius = query.radius or self.settings.default_radius

        if query.has_coordinates:
            coordinates = Coordinates(query.lat, query.lng)
            logger.info("Using URL coordinates %s,%s", coordinates.lat, coordinates.lng)
            display, state_code = self._describe(coordinates)
            resolved = ResolvedLocation(display, coordinates, state_code, radius, "url", query.mode)
        else:
            coordinates = self._locate()
            if coordinates is not None:
                display, state_code = self._describe(coordinates)
                resolved = ResolvedLocation(display, coordinates, state_code, radius, "geolocation", query.mode)
            else:
                resolved = self._fallback(radius, query.mode)

        self._persist(resolved)
        return resolved

    def _locate(self) -> Optional[Coordinates]:
        if self.geolocator is None:
            logger.info("Geolocation is not available; using saved or default location")
            return None
        try:
            coordinates = self.geolocator()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Geolocation failed: %s", exc)
            return None
        logger.info("Detected location %s,%s", coordinates.lat, coordinates.lng)
        return coordinates

    def _describe(self, coordinates: Coordinates) -> Tuple[str, str]:
        display = CURRENT_LOCATION_LABEL
        state_code = self.settings.fallback_state
        if self.reverse_geocoder is None:
            return display, state_code

        try:
            result = self.reverse_geocoder(coordinates.lat, coordinates.lng)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Reverse geocoding failed for %s,%s: %s", coordinates.lat, coordinates.lng, exc)
            return display, state_code

        if result.formatted_address and result.formatted_address.strip():
            display = result.formatted_address.strip()
        if result.state_code:
            state_code = result.state_code.strip().upper()
        return display, state_code

    def _fallback(self, radius: float, mode: Optional[str]) -> ResolvedLocation:
        saved = None
        if self.store is not None:
            try:
                saved = self.store.get_last_location()
            except Exception as exc:  # noqa: BLE001
                logger.warning("Unable to read saved location: %s", exc)

        if saved is None:
            logger.info("Falling back to default city %s", self.settings.default_city_name)
            return ResolvedLocation(
                self.settings.default_city_name,
                self.default_coordinates,
                self.settings.fallback_state,
                radius,
                "default",
                mode,
            )

        logger.info("Using saved location %s", saved.display)
        return ResolvedLocation(
            saved.display or self.settings.default_city_name,
            saved.coordinates or self.default_coordinates,
            (saved.state_code or self.settings.fallback_state).upper(),
            radius,
            "saved",
            mode,
        )

    def _persist(self, resolved: ResolvedLocation) -> None:
        if self.store is None:
            return
        try:
            self.store.save_last_location(
                SavedLocation(resolved.display, resolved.coordinates, resolved.state_code)
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Unable to save location %s: %s", resolved.display, exc)
