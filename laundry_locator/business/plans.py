"""Listing tiers, plan pricing and claim/premium payload checks."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from laundry_locator.models import Subscription

LISTING_TYPES = ("basic", "premium", "featured")
CLAIMABLE_PLANS = {"basic", "premium"}
VERIFICATION_METHODS = {"document", "utility", "phone", "mail"}
ACTIVE_SUBSCRIPTION_STATUSES = {"active", "past_due"}
BILLING_CYCLES = ("monthly", "annually")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class PremiumFeatures:
    photo_limit: int
    show_hours: bool
    show_phone: bool
    show_website: bool
    highlight_listing: bool
    priority_search: bool


PREMIUM_FEATURES: Dict[str, PremiumFeatures] = {
    "basic": PremiumFeatures(1, True, False, False, False, False),
    "premium": PremiumFeatures(5, True, True, True, False, True),
    "featured": PremiumFeatures(10, True, True, True, True, True),
}

# Prices in cents.
PREMIUM_PLANS: Dict[str, Dict[str, Any]] = {
    "premium": {
        "name": "Premium Listing",
        "monthly_price": 1999,
        "annual_price": 19999,
    },
    "featured": {
        "name": "Featured Listing",
        "monthly_price": 3999,
        "annual_price": 39999,
    },
}


def get_premium_features(listing_type: Optional[str]) -> PremiumFeatures:
    return PREMIUM_FEATURES.get((listing_type or "").lower(), PREMIUM_FEATURES["basic"])


def plan_price(tier: str, billing_cycle: str = "monthly") -> int:
    plan = PREMIUM_PLANS.get(tier)
    if plan is None:
        raise ValueError(f"unknown plan tier: {tier}")
    if billing_cycle == "annually":
        return plan["annual_price"]
    if billing_cycle == "monthly":
        return plan["monthly_price"]
    raise ValueError(f"unknown billing cycle: {billing_cycle}")


def format_price(amount: int) -> str:
    return f"${amount / 100:.2f}"


def is_subscription_active(status: Optional[str]) -> bool:
    return status in ACTIVE_SUBSCRIPTION_STATUSES


def subscription_is_active(subscription: Subscription) -> bool:
    return is_subscription_active(subscription.status)


def calculate_prorated_refund(
    original_amount: int,
    start: datetime,
    end: datetime,
    cancelled_at: Optional[datetime] = None,
) -> int:
    """Refund in cents for the unused share of a billing period."""
    cancelled_at = cancelled_at or datetime.now(start.tzinfo)
    total = (end - start).total_seconds()
    remaining = (end - cancelled_at).total_seconds()
    if total <= 0 or remaining <= 0:
        return 0
    return round(original_amount * remaining / total)


def validate_claim(payload: Dict[str, Any]) -> List[str]:
    """Return a list of problems with a business-claim payload (empty when valid)."""
    errors = []
    if payload.get("laundryId") in (None, ""):
        errors.append("laundryId is required")

    verification = payload.get("verificationData")
    if not isinstance(verification, dict):
        errors.append("verificationData is required")
    else:
        if verification.get("method") not in VERIFICATION_METHODS:
            errors.append(f"verificationData.method must be one of: {', '.join(sorted(VERIFICATION_METHODS))}")
        if not _EMAIL_RE.match(str(verification.get("email") or "")):
            errors.append("Please enter a valid email address")

    if payload.get("selectedPlan") not in CLAIMABLE_PLANS:
        errors.append("selectedPlan must be basic or premium")
    return errors


def validate_premium_update(listing_type: Optional[str], features: Dict[str, Any]) -> List[str]:
    """Check requested premium edits against what the listing's tier allows."""
    allowed = get_premium_features(listing_type)
    errors = []

    photos = features.get("photos")
    if photos is not None:
        if not isinstance(photos, list):
            errors.append("photos must be a list")
        elif len(photos) > allowed.photo_limit:
            errors.append(f"{listing_type or 'basic'} listings allow at most {allowed.photo_limit} photos")

    if features.get("promotionalText") and not allowed.highlight_listing:
        errors.append("promotionalText requires a featured listing")

    for key, flag in (("phone", allowed.show_phone), ("website", allowed.show_website)):
        if features.get(key) and not flag:
            errors.append(f"{key} is only shown on premium or featured listings")
    return errors
