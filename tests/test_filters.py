from datetime import datetime

import pytest
from werkzeug.datastructures import MultiDict

from laundry_locator.etl.transform import parse_hours, to_listing
from laundry_locator.models import Coordinates, Listing, ListingFilter
from laundry_locator.search import filters

NOON = datetime(2024, 1, 1, 12, 0)
LATE = datetime(2024, 1, 1, 22, 30)


def make_listings():
    return [
        Listing(id=1, name="Alpha", rating=3.5, services=["Wi-Fi"], distance=2.0, hours=parse_hours("24 Hours")),
        Listing(id=2, name="bravo", rating=4.8, services=["Wi-Fi", "Drop-off"], distance=0.5),
        Listing(id=3, name="Charlie", rating=4.8, services=[], distance=5.0, hours=parse_hours("6AM-11PM")),
        Listing(id=4, name="Delta", rating=2.0, services=["Dry Cleaning", "Drop-off", "Wi-Fi"], distance=1.0),
    ]


def test_rating_sort_of_raw_ratings_is_descending_and_stable():
    raw = [
        {"id": 1, "name": "A", "rating": "3.5"},
        {"id": 2, "name": "B", "rating": "4.8"},
        {"id": 3, "name": "C", "rating": "4.8"},
        {"id": 4, "name": "D", "rating": "2.0"},
        {"id": 5, "name": "E", "rating": "not rated"},
    ]
    listings = [to_listing(item) for item in raw]

    ordered = filters.apply_filter(listings, ListingFilter(sort_by="rating"), now=NOON)

    assert [l.rating for l in ordered] == [4.8, 4.8, 3.5, 2.0, 0.0]
    assert [l.id for l in ordered] == [2, 3, 1, 4, 5]
    assert [l.id for l in listings] == [1, 2, 3, 4, 5]


def test_apply_filter_is_idempotent():
    listing_filter = ListingFilter(min_rating=3.0, sort_by="name")
    once = filters.apply_filter(make_listings(), listing_filter, now=NOON)
    twice = filters.apply_filter(once, listing_filter, now=NOON)

    assert [l.id for l in once] == [l.id for l in twice] == [1, 2, 3]


def test_distance_sort_and_services_sort():
    assert [l.id for l in filters.apply_filter(make_listings(), ListingFilter(), now=NOON)] == [2, 4, 1, 3]
    assert [l.id for l in filters.apply_filter(make_listings(), ListingFilter(sort_by="services"), now=NOON)] == [
        4,
        2,
        1,
        3,
    ]


def test_distance_sort_computes_from_origin_when_missing():
    near = Listing(id=1, name="Near", latitude=39.74, longitude=-104.99)
    far = Listing(id=2, name="Far", latitude=40.0150, longitude=-105.2705)

    ordered = filters.apply_filter([far, near], ListingFilter(), now=NOON, origin=Coordinates(39.7392, -104.9903))

    assert [l.name for l in ordered] == ["Near", "Far"]


def test_services_filter_matches_any_selected_service():
    result = filters.apply_filter(make_listings(), ListingFilter(services=("Drop-off", "Dry Cleaning")), now=NOON)
    assert sorted(l.id for l in result) == [2, 4]


def test_open_now_uses_parsed_hours_and_daytime_estimate():
    at_noon = filters.apply_filter(make_listings(), ListingFilter(open_now=True), now=NOON)
    late = filters.apply_filter(make_listings(), ListingFilter(open_now=True), now=LATE)

    assert len(at_noon) == 4
    assert sorted(l.id for l in late) == [1, 3]


def test_parse_filter_reads_query_params():
    listing_filter = filters.parse_filter(
        {"openNow": "true", "rating": "4", "services": "Wi-Fi, Drop-off", "sort": "Rating"}
    )

    assert listing_filter == ListingFilter(
        open_now=True, min_rating=4.0, services=("Wi-Fi", "Drop-off"), sort_by="rating"
    )
    assert filters.parse_filter({}) == ListingFilter()


@pytest.mark.parametrize("params", [{"rating": "great"}, {"rating": "6"}, {"sort": "price"}])
def test_parse_filter_rejects_bad_values(params):
    with pytest.raises(ValueError):
        filters.parse_filter(params)


def test_filter_summary():
    summary = filters.filter_summary(ListingFilter(open_now=True, services=("Wi-Fi",)))
    assert summary == {"openNow": True, "rating": 0.0, "services": ["Wi-Fi"], "sort": "distance"}


def test_distance_sort_puts_unlocated_listings_last():
    near = Listing(id=1, name="Near", latitude=39.74, longitude=-104.99)
    unlocated = Listing(id=2, name="NoCoords")

    ordered = filters.apply_filter([unlocated, near], ListingFilter(), now=NOON, origin=Coordinates(39.7392, -104.9903))

    assert [l.name for l in ordered] == ["Near", "NoCoords"]


def test_parse_filter_reads_repeated_services():
    params = MultiDict([("services", "Wi-Fi"), ("services", "Drop-off,Dry Cleaning")])
    assert filters.parse_filter(params).services == ("Wi-Fi", "Drop-off", "Dry Cleaning")
