"""HTTP entrypoint serving location-aware laundromat searches and business actions."""

from __future__ import annotations

import logging
import os
from functools import partial
from typing import Any, Dict, Optional

import requests
from flask import Flask, jsonify, request

from laundry_locator.business.plans import (
    BILLING_CYCLES,
    PREMIUM_PLANS,
    format_price,
    plan_price,
    subscription_is_active,
    validate_claim,
    validate_premium_update,
)
from laundry_locator.core.config import get_settings
from laundry_locator.core.db import ensure_schema
from laundry_locator.core.storage import PostgresLocationStore
from laundry_locator.etl.transform import to_subscription
from laundry_locator.search.cascade import search_listings
from laundry_locator.search.filters import apply_filter, filter_summary, parse_filter
from laundry_locator.search.render import listing_to_dict, location_to_dict, result_to_dict
from laundry_locator.search.resolver import LocationResolver
from laundry_locator.vendors import google_geocoding
from laundry_locator.vendors.listing_api import GENERIC_ERROR_MESSAGE, ListingApiClient, ListingApiError

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

COULD_NOT_LOAD_MESSAGE = "We couldn't load laundromats right now. Please try again."

# ---------- App ----------
app = Flask(__name__)


def get_client() -> ListingApiClient:
    return ListingApiClient()


def build_resolver(session_id: Optional[str]) -> LocationResolver:
    """Resolver for one request; the server has no device position, so geolocation is skipped."""
    settings = get_settings()
    store = PostgresLocationStore(session_id) if session_id and settings.database_url else None
    reverse_geocoder = None
    if settings.google_api_key:
        reverse_geocoder = partial(google_geocoding.reverse_geocode, api_key=settings.google_api_key)
    return LocationResolver(store=store, geolocator=None, reverse_geocoder=reverse_geocoder, settings=settings)


def _session_id() -> Optional[str]:
    return request.headers.get("X-Session-Id") or request.cookies.get("session_id")


def _upstream_error(exc: Exception):
    if isinstance(exc, ListingApiError):
        return jsonify({"error": exc.message}), exc.status_code
    if isinstance(exc, RuntimeError):
        logger.error("Listing API is not configured: %s", exc)
        return jsonify({"error": GENERIC_ERROR_MESSAGE}), 503
    logger.error("Listing API unreachable: %s", exc)
    return jsonify({"error": GENERIC_ERROR_MESSAGE}), 502


# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Simple root to avoid 404 on GET /"""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "listing_api_configured": bool(settings.listing_api_url),
                "geocoding_configured": bool(settings.google_api_key),
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.get("/api/laundromats/nearby")
def nearby_laundromats() -> Any:
    """
    Resolve the caller's location and return listings from the first search tier with results.
    Query: lat, lng, radius, mode, openNow, rating, services (comma separated), sort
    """
    try:
        listing_filter = parse_filter(request.args)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    settings = get_settings()
    location = build_resolver(_session_id()).resolve(request.args)

    try:
        client = get_client()
    except RuntimeError as exc:
        logger.error("Listing API is not configured: %s", exc)
        return jsonify({"error": COULD_NOT_LOAD_MESSAGE, "retry": True, "location": location_to_dict(location), "listings": []}), 503

    result = search_listings(client, location, settings)
    if result.exhausted:
        return (
            jsonify(
                {
                    "error": COULD_NOT_LOAD_MESSAGE,
                    "retry": True,
                    "location": location_to_dict(location),
                    "listings": [],
                    **result_to_dict(result),
                }
            ),
            503,
        )

    listings = apply_filter(result.listings, listing_filter, origin=location.coordinates)
    return (
        jsonify(
            {
                "location": location_to_dict(location),
                "filter": filter_summary(listing_filter),
                "total": len(result.listings),
                "listings": [listing_to_dict(listing, location.coordinates) for listing in listings],
                **result_to_dict(result),
            }
        ),
        200,
    )


@app.get("/api/listings/<int:listing_id>")
def listing_detail(listing_id: int) -> Any:
    try:
        listing = get_client().get_listing(listing_id)
    except (RuntimeError, requests.RequestException) as exc:
        return _upstream_error(exc)
    return jsonify({"data": listing_to_dict(listing)}), 200


@app.post("/api/business/claim")
def claim_business() -> Any:
    """
    Forward a business claim.
    Required JSON fields: laundryId, verificationData {method, email}, selectedPlan
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    errors = validate_claim(payload)
    if errors:
        return jsonify({"error": "; ".join(errors)}), 400

    try:
        response_payload = get_client().submit_claim(payload)
    except (RuntimeError, requests.RequestException) as exc:
        return _upstream_error(exc)

    subscription = response_payload.get("subscription") if isinstance(response_payload, dict) else None
    if isinstance(subscription, dict):
        parsed = to_subscription(subscription)
        enriched = {
            **subscription,
            "active": subscription_is_active(parsed),
            "price": format_price(parsed.amount),
        }
        if parsed.tier in PREMIUM_PLANS and parsed.billing_cycle in BILLING_CYCLES:
            enriched["listPrice"] = format_price(plan_price(parsed.tier, parsed.billing_cycle))
        response_payload["subscription"] = enriched

    logger.info("Claim submitted for listing %s (plan=%s)", payload.get("laundryId"), payload.get("selectedPlan"))
    return jsonify({"data": response_payload}), 200


@app.put("/api/listings/<int:listing_id>/premium-features")
def update_premium_features(listing_id: int) -> Any:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict) or not payload:
        return jsonify({"error": "premium feature updates must be a JSON object"}), 400

    try:
        client = get_client()
        listing = client.get_listing(listing_id)
        errors = validate_premium_update(listing.listing_type, payload)
        if errors:
            return jsonify({"error": "; ".join(errors)}), 400
        response_payload = client.update_premium_features(listing_id, payload)
    except (RuntimeError, requests.RequestException) as exc:
        return _upstream_error(exc)

    return jsonify({"data": response_payload}), 200


def main() -> None:
    settings = get_settings()
    if settings.database_url:
        ensure_schema()

    port = int(os.getenv("PORT") or settings.server_port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
