"""Client utilities for the Google Geocoding API."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

import requests

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


class GeocodingError(RuntimeError):
    """Raised when the Geocoding API returns a non-successful response."""


@dataclass(frozen=True)
class ReverseGeocodeResult:
    formatted_address: str
    city: Optional[str] = None
    state: Optional[str] = None
    state_code: Optional[str] = None


def parse_city_state(address_components: Iterable[Dict[str, Any]]) -> Dict[str, Optional[str]]:
    city = None
    state = None
    state_code = None
    for component in address_components or []:
        types = set(component.get("types", []))
        if "locality" in types:
            city = component.get("long_name")
        elif "administrative_area_level_1" in types:
            state = component.get("long_name")
            state_code = component.get("short_name")
    return {"city": city, "state": state, "state_code": state_code}


def _format_address(result: Dict[str, Any], city: Optional[str], state_code: Optional[str]) -> str:
    if city and state_code:
        return f"{city}, {state_code}"
    formatted = result.get("formatted_address") or ""
    return ",".join(formatted.split(",")[:2]).strip()


def reverse_geocode(lat: float, lng: float, api_key: str) -> ReverseGeocodeResult:
    """Resolve coordinates to a short "City, ST" label plus the state code."""
    params = {"latlng": f"{lat},{lng}", "key": api_key}
    response = _SESSION.get(_BASE_URL, params=params, timeout=10)
    response.raise_for_status()
    payload = response.json()
    status = payload.get("status")
    results = payload.get("results") or []
    if status != "OK" or not results:
        logger.error("reverse_geocode failed: status=%s, error_message=%s", status, payload.get("error_message"))
        raise GeocodingError(payload.get("error_message") or status or "no results")

    result = results[0]
    parts = parse_city_state(result.get("address_components", []))
    formatted_address = _format_address(result, parts["city"], parts["state_code"])
    if not formatted_address:
        raise GeocodingError("reverse geocoding returned an empty address")

    return ReverseGeocodeResult(
        formatted_address=formatted_address,
        city=parts["city"],
        state=parts["state"],
        state_code=parts["state_code"],
    )
