from unittest.mock import Mock

import pytest

from laundry_locator.vendors.listing_api import GENERIC_ERROR_MESSAGE, ListingApiClient, ListingApiError


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.content = b"" if payload is None and text is None else b"x"

    def json(self):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


class DummySession:
    def __init__(self, responses=None):
        self.calls = []
        self.responses = list(responses or [])

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append((method, url, timeout, kwargs))
        return self.responses.pop(0)


LISTING = {
    "id": 7,
    "name": "Suds City",
    "address": "100 Main St",
    "city": "Denver",
    "state": "CO",
    "zip": "80202",
    "latitude": "39.75",
    "longitude": "-104.99",
    "rating": "4.6",
    "reviewCount": 88,
    "hours": "24 Hours",
    "services": ["Wash & Fold", "Dry Cleaning"],
}


def test_requires_base_url():
    with pytest.raises(RuntimeError):
        ListingApiClient(base_url="")


def test_nearby_builds_query_and_parses_listings():
    session = DummySession([DummyResponse(payload=[LISTING, {"id": 8}])])
    client = ListingApiClient(base_url="https://api.example.com/", session=session)

    listings = client.nearby(39.7392, -104.9903, 25)

    method, url, timeout, kwargs = session.calls[0]
    assert (method, url, timeout) == ("GET", "https://api.example.com/listings", 10)
    assert kwargs["params"] == {"lat": 39.7392, "lng": -104.9903, "radius": 25}
    assert [listing.name for listing in listings] == ["Suds City"]
    assert listings[0].rating == 4.6
    assert listings[0].hours.always_open is True


def test_by_state_and_default_city_paths():
    session = DummySession([DummyResponse(payload=[]), DummyResponse(payload=[LISTING])])
    client = ListingApiClient(base_url="https://api.example.com", session=session)

    assert client.by_state("CO") == []
    assert len(client.default_city()) == 1

    assert session.calls[0][3]["params"] == {"state": "CO"}
    assert session.calls[1][1] == "https://api.example.com/listings/default-city"


def test_error_carries_server_message_and_status():
    session = DummySession([DummyResponse(status_code=401, payload={"message": "You must be logged in to claim a business"})])
    client = ListingApiClient(base_url="https://api.example.com", session=session)

    with pytest.raises(ListingApiError) as excinfo:
        client.submit_claim({"laundryId": 7})

    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "You must be logged in to claim a business"
    assert session.calls[0][0] == "POST"
    assert session.calls[0][1].endswith("/business/claim")
    assert session.calls[0][3]["json"] == {"laundryId": 7}


def test_error_without_json_uses_generic_message():
    session = DummySession([DummyResponse(status_code=500, text="boom")])
    client = ListingApiClient(base_url="https://api.example.com", session=session)

    with pytest.raises(ListingApiError) as excinfo:
        client.default_city()

    assert excinfo.value.message == GENERIC_ERROR_MESSAGE
    assert excinfo.value.status_code == 500


def test_get_listing_and_premium_update():
    session = DummySession([DummyResponse(payload=LISTING), DummyResponse(payload={"ok": True})])
    client = ListingApiClient(base_url="https://api.example.com", session=session)

    listing = client.get_listing(7)
    result = client.update_premium_features(7, {"photos": ["a.jpg"]})

    assert listing.id == 7
    assert listing.coordinates.lat == 39.75
    assert result == {"ok": True}
    assert session.calls[1][0] == "PUT"
    assert session.calls[1][1].endswith("/listings/7/premium-features")


def test_submit_claim_posts_payload():
    session = Mock()
    session.request.return_value = DummyResponse(payload={"message": "Claim submitted"})
    client = ListingApiClient(base_url="https://api.example.com", session=session)
    claim = {"laundryId": 7, "selectedPlan": "basic"}

    assert client.submit_claim(claim) == {"message": "Claim submitted"}
    session.request.assert_called_once_with("POST", "https://api.example.com/business/claim", timeout=10, json=claim)
