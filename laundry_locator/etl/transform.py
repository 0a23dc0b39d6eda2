"""Utilities for transforming Listing API responses into typed models."""

import json
import logging
import math
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from laundry_locator.models import MINUTES_PER_DAY, Listing, Subscription, WeeklyHours

logger = logging.getLogger(__name__)

_DAY_PREFIXES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
_DAY_PATTERN = r"(mon|tue|wed|thu|fri|sat|sun)[a-z]*\.?"
_DAY_RANGE_RE = re.compile(
    rf"^\s*{_DAY_PATTERN}(?:\s*(?:-|–|—|to|through)\s*{_DAY_PATTERN})?\s*:?\s*",
    re.IGNORECASE,
)
_EVERY_DAY_RE = re.compile(r"\b(daily|every\s*day|7\s*days(\s*a\s*week)?)\b", re.IGNORECASE)
_ALWAYS_OPEN_RE = re.compile(r"^(open\s+)?24\s*(hours?|hrs?|/7)(\s+daily)?$", re.IGNORECASE)
_RANGE_RE = re.compile(
    r"(?P<h1>\d{1,2})(?::(?P<m1>\d{2}))?\s*(?:(?P<p1>[ap])\.?m?\.?)?\s*"
    r"(?:-|–|—|to)\s*"
    r"(?P<h2>\d{1,2})(?::(?P<m2>\d{2}))?\s*(?P<p2>[ap])\.?m?\.?",
    re.IGNORECASE,
)
_CLOSED_RE = re.compile(r"^closed\b")
_SEGMENT_SPLIT_RE = re.compile(r"[;\n]+")
_DAY_COMMA_SPLIT_RE = re.compile(r",\s*(?=(?:mon|tue|wed|thu|fri|sat|sun))", re.IGNORECASE)

_ALL_DAYS = tuple(range(7))
_FULL_DAY = ((0, MINUTES_PER_DAY),)


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None or value == "":
            return None
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _safe_int(value: Any) -> int:
    number = _safe_float(value)
    return int(number) if number is not None else 0


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _first(result: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in result and result[key] is not None:
            return result[key]
    return None


def parse_rating(value: Any) -> float:
    """Numeric rating; anything non-numeric counts as zero."""
    rating = _safe_float(value)
    return rating if rating is not None else 0.0


def parse_services(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                value = json.loads(text)
            except ValueError:
                logger.debug("Unable to decode services JSON: %s", text[:100])
                return []
        else:
            return [part.strip() for part in text.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    return []


def _day_index(token: str) -> int:
    return _DAY_PREFIXES.index(token[:3].lower())


def _day_span(start: str, end: Optional[str]) -> Tuple[int, ...]:
    first = _day_index(start)
    if end is None:
        return (first,)
    last = _day_index(end)
    days = [first]
    while days[-1] != last:
        days.append((days[-1] + 1) % 7)
    return tuple(days)


def _to_minutes(hour: str, minute: Optional[str], meridiem: str) -> int:
    value = int(hour) % 12
    if meridiem.lower() == "p":
        value += 12
    return value * 60 + int(minute or 0)


def _parse_ranges(text: str) -> Optional[Tuple[Tuple[int, int], ...]]:
    lowered = text.strip().lower()
    if not lowered:
        return None
    if "24 hour" in lowered or "24 hrs" in lowered or "24/7" in lowered:
        return _FULL_DAY

    intervals = []
    for match in _RANGE_RE.finditer(lowered):
        close_meridiem = match.group("p2")
        open_meridiem = match.group("p1") or close_meridiem
        open_minute = _to_minutes(match.group("h1"), match.group("m1"), open_meridiem)
        close_minute = _to_minutes(match.group("h2"), match.group("m2"), close_meridiem)
        if match.group("p1") is None and open_minute >= close_minute and close_meridiem.lower() == "p":
            open_minute = _to_minutes(match.group("h1"), match.group("m1"), "a")
        if close_minute <= open_minute:
            close_minute += MINUTES_PER_DAY
        intervals.append((open_minute, close_minute))
    if intervals:
        return tuple(intervals)
    if _CLOSED_RE.match(lowered):
        return ()
    return None


def _parse_segment(segment: str) -> Optional[Tuple[Tuple[int, ...], Tuple[Tuple[int, int], ...]]]:
    text = segment.strip()
    days = _ALL_DAYS
    match = _DAY_RANGE_RE.match(text)
    if match:
        days = _day_span(match.group(1), match.group(2))
        text = text[match.end():]
    text = _EVERY_DAY_RE.sub(" ", text)
    ranges = _parse_ranges(text)
    if ranges is None:
        return None
    return days, ranges


def _build_hours(segments: Iterable[str], raw: str) -> WeeklyHours:
    intervals: Dict[int, Tuple[Tuple[int, int], ...]] = {}
    parsed_any = False
    for segment in segments:
        if not segment.strip():
            continue
        parsed = _parse_segment(segment)
        if parsed is None:
            logger.debug("Unparseable hours segment %r in %r", segment, raw[:120])
            return WeeklyHours(raw=raw)
        days, ranges = parsed
        for day in days:
            intervals[day] = ranges
        parsed_any = True

    if not parsed_any:
        return WeeklyHours(raw=raw)

    always_open = all(intervals.get(day) == _FULL_DAY for day in _ALL_DAYS)
    return WeeklyHours(intervals=intervals, always_open=always_open, known=True, raw=raw)


def parse_hours(value: Any) -> WeeklyHours:
    """Parse free-form, JSON or Google ``weekday_text`` hours into a weekly schedule."""
    if value is None:
        return WeeklyHours()

    if isinstance(value, str):
        text = value.replace("\u202f", " ").replace("\u2009", " ").strip()
        if text.startswith("{") or text.startswith("["):
            try:
                value = json.loads(text)
            except ValueError:
                return WeeklyHours(raw=text)
        else:
            if not text:
                return WeeklyHours()
            if _ALWAYS_OPEN_RE.match(text):
                return WeeklyHours(intervals={day: _FULL_DAY for day in _ALL_DAYS}, always_open=True, known=True, raw=text)
            segments: List[str] = []
            for piece in _SEGMENT_SPLIT_RE.split(text):
                segments.extend(_DAY_COMMA_SPLIT_RE.split(piece))
            return _build_hours(segments, text)

    if isinstance(value, dict):
        raw = json.dumps(value)
        segments = [f"{day}: {hours}" for day, hours in value.items()]
        return _build_hours([s.replace("\u202f", " ") for s in segments], raw)

    if isinstance(value, (list, tuple)):
        lines = [str(line).replace("\u202f", " ").replace("\u2009", " ") for line in value]
        return _build_hours(lines, "\n".join(lines))

    return WeeklyHours(raw=str(value))


def _google_weekday_text(result: Dict[str, Any]) -> Optional[List[str]]:
    google_data = _first(result, "googleData", "google_data") or {}
    if not isinstance(google_data, dict):
        return None
    weekday_text = (google_data.get("opening_hours") or {}).get("weekday_text")
    return weekday_text if isinstance(weekday_text, list) and weekday_text else None


def to_listing(result: Dict[str, Any]) -> Listing:
    hours = parse_hours(result.get("hours"))
    if not hours.known:
        weekday_text = _google_weekday_text(result)
        if weekday_text:
            hours = parse_hours(weekday_text)

    listing_id = _safe_float(result.get("id"))
    return Listing(
        id=int(listing_id) if listing_id is not None else None,
        name=(_strip_or_none(result.get("name")) or ""),
        slug=_strip_or_none(result.get("slug")),
        address=_strip_or_none(result.get("address")),
        city=_strip_or_none(result.get("city")),
        state=_strip_or_none(result.get("state")),
        zip=_strip_or_none(result.get("zip")),
        phone=_strip_or_none(result.get("phone")),
        website=_strip_or_none(result.get("website")),
        latitude=_safe_float(result.get("latitude")),
        longitude=_safe_float(result.get("longitude")),
        hours=hours,
        services=parse_services(result.get("services")),
        description=_strip_or_none(result.get("description")),
        rating=parse_rating(result.get("rating")),
        review_count=_safe_int(_first(result, "reviewCount", "review_count")),
        listing_type=(_strip_or_none(_first(result, "listingType", "listing_type")) or "basic").lower(),
        is_premium=bool(_first(result, "isPremium", "is_premium")),
        is_featured=bool(_first(result, "isFeatured", "is_featured")),
        distance=_safe_float(result.get("distance")),
        raw=result,
    )


def to_listings(results: Any) -> List[Listing]:
    if not isinstance(results, list):
        logger.warning("Expected a list of listings, got %s", type(results).__name__)
        return []
    listings = []
    for result in results:
        if not isinstance(result, dict):
            continue
        listing = to_listing(result)
        if not listing.name:
            logger.debug("Skipping listing without name: %s", result.get("id"))
            continue
        listings.append(listing)
    return listings


def _parse_date(value: Any) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        return None


def to_subscription(result: Dict[str, Any]) -> Subscription:
    return Subscription(
        listing_id=_safe_int(_first(result, "laundryId", "laundry_id", "listingId")),
        user_id=_safe_int(_first(result, "userId", "user_id")) or None,
        tier=(_strip_or_none(result.get("tier")) or "basic").lower(),
        status=(_strip_or_none(result.get("status")) or "pending").lower(),
        billing_cycle=(_strip_or_none(_first(result, "billingCycle", "billing_cycle")) or "monthly").lower(),
        amount=_safe_int(result.get("amount")),
        start_date=_parse_date(_first(result, "startDate", "start_date")),
        end_date=_parse_date(_first(result, "endDate", "end_date")),
        auto_renew=bool(_first(result, "autoRenew", "auto_renew")),
    )
