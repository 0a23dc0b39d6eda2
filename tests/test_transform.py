from datetime import date, datetime

import pytest

from laundry_locator.etl import transform

# 2024-01-01 was a Monday.
MONDAY = date(2024, 1, 1)


def at(day_offset, hour, minute=0):
    return datetime(2024, 1, 1 + day_offset, hour, minute)


@pytest.mark.parametrize(
    "value, expected",
    [("4.8", 4.8), (3, 3.0), ("", 0.0), (None, 0.0), ("n/a", 0.0), ("nan", 0.0)],
)
def test_parse_rating(value, expected):
    assert transform.parse_rating(value) == expected


def test_parse_services_accepts_lists_json_and_csv():
    assert transform.parse_services(["Wash & Fold", " ", "Wi-Fi"]) == ["Wash & Fold", "Wi-Fi"]
    assert transform.parse_services('["Drop-off", "Dry Cleaning"]') == ["Drop-off", "Dry Cleaning"]
    assert transform.parse_services("Drop-off, Self-service") == ["Drop-off", "Self-service"]
    assert transform.parse_services(None) == []


@pytest.mark.parametrize("value", ["24 Hours", "Open 24 Hours", "open 24 hours daily"])
def test_parse_hours_always_open(value):
    hours = transform.parse_hours(value)
    assert hours.known and hours.always_open
    assert hours.is_open(at(0, 3))


def test_parse_hours_single_daily_range():
    hours = transform.parse_hours("6AM-11PM")

    assert hours.known and not hours.always_open
    assert hours.intervals[0] == ((6 * 60, 23 * 60),)
    assert hours.is_open(at(0, 6))
    assert not hours.is_open(at(0, 23))
    assert not hours.is_open(at(6, 5, 59))


def test_parse_hours_daily_suffix_and_day_range():
    assert transform.parse_hours("9AM-9PM Daily").intervals[4] == ((9 * 60, 21 * 60),)
    hours = transform.parse_hours("Mon-Sun: 7am-10pm")
    assert all(hours.intervals[day] == ((7 * 60, 22 * 60),) for day in range(7))


def test_parse_hours_multiple_day_groups():
    hours = transform.parse_hours("Mon-Fri 7AM-10PM, Sat-Sun 8AM-8PM")

    assert hours.intervals[0] == ((7 * 60, 22 * 60),)
    assert hours.intervals[5] == ((8 * 60, 20 * 60),)
    assert hours.is_open(at(0, 7, 30))
    assert not hours.is_open(at(5, 7, 30))


def test_parse_hours_past_midnight_spills_into_next_day():
    hours = transform.parse_hours("6AM-12AM")
    assert hours.intervals[0] == ((6 * 60, 24 * 60),)

    late = transform.parse_hours("Fri 10PM-2AM")
    assert late.is_open(at(4, 23))
    assert late.is_open(at(5, 1, 30))
    assert not late.is_open(at(5, 2))
    assert not late.is_open(at(0, 23))


def test_parse_hours_json_object():
    raw = (
        '{"Monday":"7:00 AM - 10:00 PM","Tuesday":"7:00 AM - 10:00 PM","Wednesday":"Closed",'
        '"Thursday":"Open 24 hours","Friday":"7:00 AM - 10:00 PM","Saturday":"7:00 AM - 10:00 PM",'
        '"Sunday":"7:00 AM - 10:00 PM"}'
    )
    hours = transform.parse_hours(raw)

    assert hours.known
    assert hours.intervals[2] == ()
    assert not hours.is_open(at(2, 12))
    assert hours.is_open(at(3, 3))
    assert hours.is_open(at(0, 21, 59))


def test_parse_hours_google_weekday_text():
    weekday_text = [
        "Monday: 6:00 AM – 2:00 PM, 5:00 – 10:00 PM",
        "Tuesday: Open 24 hours",
        "Wednesday: Closed",
        "Thursday: 7:00 AM – 9:00 PM",
        "Friday: 7:00 AM – 9:00 PM",
        "Saturday: 7:00 AM – 9:00 PM",
        "Sunday: 7:00 AM – 9:00 PM",
    ]
    hours = transform.parse_hours(weekday_text)

    assert hours.intervals[0] == ((6 * 60, 14 * 60), (17 * 60, 22 * 60))
    assert not hours.is_open(at(0, 15))
    assert hours.is_open(at(0, 18))
    assert hours.is_open(at(1, 2))
    assert not hours.is_open(at(2, 12))


def test_parse_hours_unknown_uses_daytime_estimate():
    hours = transform.parse_hours("Call for hours")

    assert not hours.known
    assert hours.raw == "Call for hours"
    assert hours.is_open(at(0, 8))
    assert hours.is_open(at(0, 19, 59))
    assert not hours.is_open(at(0, 20))
    assert not hours.is_open(at(0, 7, 59))


def test_to_listing_normalizes_fields():
    listing = transform.to_listing(
        {
            "id": "12",
            "name": " Bubble Wash ",
            "state": "CO",
            "latitude": "39.7",
            "longitude": "bad",
            "rating": "excellent",
            "review_count": "41",
            "services": ["Wi-Fi"],
            "listingType": "Premium",
            "isPremium": True,
            "distance": "1.25",
            "hours": "",
            "googleData": {"opening_hours": {"weekday_text": ["Monday: Open 24 hours"]}},
        }
    )

    assert listing.id == 12
    assert listing.name == "Bubble Wash"
    assert listing.latitude == 39.7
    assert listing.longitude is None
    assert listing.coordinates is None
    assert listing.rating == 0.0
    assert listing.review_count == 41
    assert listing.listing_type == "premium"
    assert listing.is_premium is True
    assert listing.distance == 1.25
    assert listing.hours.known
    assert listing.hours.intervals == {0: ((0, 24 * 60),)}


def test_to_listings_skips_invalid_entries():
    assert transform.to_listings({"not": "a list"}) == []
    listings = transform.to_listings([{"name": "A"}, "junk", {"id": 3}])
    assert [listing.name for listing in listings] == ["A"]


def test_to_subscription():
    subscription = transform.to_subscription(
        {
            "laundryId": 7,
            "userId": 3,
            "tier": "premium",
            "status": "active",
            "billingCycle": "annually",
            "amount": 19999,
            "startDate": "2024-01-01T00:00:00Z",
            "endDate": "2025-01-01T00:00:00Z",
        }
    )

    assert subscription.listing_id == 7
    assert subscription.billing_cycle == "annually"
    assert subscription.start_date == MONDAY
    assert subscription.end_date == date(2025, 1, 1)


def test_parse_hours_note_mentioning_closed_keeps_ranges():
    hours = transform.parse_hours("Mon-Sun 7AM-10PM (closed holidays)")

    assert hours.known
    assert hours.intervals[0] == ((7 * 60, 22 * 60),)
    assert hours.is_open(at(0, 12))


def test_parse_hours_closed_day_in_text():
    hours = transform.parse_hours("Mon-Sat 7AM-10PM, Sun Closed")

    assert hours.intervals[6] == ()
    assert not hours.is_open(at(6, 12))
    assert hours.is_open(at(5, 12))
