"""Client for the laundromat Listing REST API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from laundry_locator.core.config import get_settings
from laundry_locator.etl.transform import to_listing, to_listings
from laundry_locator.models import Listing

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10
GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class ListingApiError(RuntimeError):
    """Raised when the Listing API answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ListingApiClient:
    """Thin wrapper over the Listing API; response bodies are treated as opaque JSON."""

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None) -> None:
        base_url = base_url if base_url is not None else get_settings().listing_api_url
        if not base_url:
            raise RuntimeError("LISTING_API_URL is required for listing requests")
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        response = self.session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
        if not (200 <= response.status_code < 300):
            message = _error_message(response)
            logger.warning("%s %s returned %s: %s", method, path, response.status_code, message)
            raise ListingApiError(message, status_code=response.status_code)
        if not response.content:
            return None
        return response.json()

    def nearby(self, lat: float, lng: float, radius: float) -> List[Listing]:
        payload = self._request("GET", "/listings", params={"lat": lat, "lng": lng, "radius": radius})
        return to_listings(payload)

    def by_state(self, state_code: str) -> List[Listing]:
        payload = self._request("GET", "/listings", params={"state": state_code})
        return to_listings(payload)

    def default_city(self) -> List[Listing]:
        payload = self._request("GET", "/listings/default-city")
        return to_listings(payload)

    def get_listing(self, listing_id: int) -> Listing:
        payload = self._request("GET", f"/listings/{listing_id}")
        if not isinstance(payload, dict):
            raise ListingApiError("Laundromat not found", status_code=404)
        return to_listing(payload)

    def submit_claim(self, claim: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/business/claim", json=claim) or {}

    def update_premium_features(self, listing_id: int, features: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/listings/{listing_id}/premium-features", json=features) or {}


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return GENERIC_ERROR_MESSAGE
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return GENERIC_ERROR_MESSAGE
