"""Client utilities for the Google Geolocation API."""

import logging
from typing import Any, Dict

import requests

from laundry_locator.models import Coordinates

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://www.googleapis.com/geolocation/v1/geolocate"


class GeolocationError(RuntimeError):
    """Raised when the device position cannot be determined."""


def get_current_position(api_key: str, timeout: float = 10) -> Coordinates:
    """Locate the caller from its network address; a single request, no retries."""
    if not api_key:
        raise GeolocationError("geolocation is not configured")

    body: Dict[str, Any] = {"considerIp": True}
    try:
        response = _SESSION.post(_BASE_URL, params={"key": api_key}, json=body, timeout=timeout)
    except requests.Timeout as exc:
        raise GeolocationError(f"geolocation timed out after {timeout}s") from exc

    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if response.status_code >= 400:
        error = payload.get("error") or {}
        logger.error("get_current_position failed: status=%s, message=%s", response.status_code, error.get("message"))
        raise GeolocationError(error.get("message") or f"HTTP {response.status_code}")

    try:
        location = payload["location"]
        return Coordinates(lat=float(location["lat"]), lng=float(location["lng"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise GeolocationError("geolocation response missing coordinates") from exc
