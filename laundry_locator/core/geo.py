"""Distance helpers and representative coordinates for US states."""

import math
from typing import Dict, List, NamedTuple, Optional, Sequence

from laundry_locator.models import Coordinates, Listing

EARTH_RADIUS_MILES = 3958.8
FALLBACK_STATE_CODE = "CO"


class StateCoordinate(NamedTuple):
    name: str
    lat: float
    lng: float


# State capitals, used to centre the map when results come from a state-wide search.
STATE_COORDINATES: Dict[str, StateCoordinate] = {
    "AL": StateCoordinate("Montgomery", 32.3792, -86.3077),
    "AK": StateCoordinate("Juneau", 58.3019, -134.4197),
    "AZ": StateCoordinate("Phoenix", 33.4484, -112.0740),
    "AR": StateCoordinate("Little Rock", 34.7465, -92.2896),
    "CA": StateCoordinate("Sacramento", 38.5816, -121.4944),
    "CO": StateCoordinate("Denver", 39.7392, -104.9903),
    "CT": StateCoordinate("Hartford", 41.7658, -72.6734),
    "DE": StateCoordinate("Dover", 39.1582, -75.5244),
    "FL": StateCoordinate("Tallahassee", 30.4383, -84.2807),
    "GA": StateCoordinate("Atlanta", 33.7490, -84.3880),
    "HI": StateCoordinate("Honolulu", 21.3069, -157.8583),
    "ID": StateCoordinate("Boise", 43.6150, -116.2023),
    "IL": StateCoordinate("Springfield", 39.7817, -89.6501),
    "IN": StateCoordinate("Indianapolis", 39.7684, -86.1581),
    "IA": StateCoordinate("Des Moines", 41.5868, -93.6250),
    "KS": StateCoordinate("Topeka", 39.0473, -95.6752),
    "KY": StateCoordinate("Frankfort", 38.2007, -84.8732),
    "LA": StateCoordinate("Baton Rouge", 30.4515, -91.1871),
    "ME": StateCoordinate("Augusta", 44.3106, -69.7795),
    "MD": StateCoordinate("Annapolis", 38.9784, -76.4922),
    "MA": StateCoordinate("Boston", 42.3601, -71.0589),
    "MI": StateCoordinate("Lansing", 42.7325, -84.5555),
    "MN": StateCoordinate("St. Paul", 44.9537, -93.0900),
    "MS": StateCoordinate("Jackson", 32.2988, -90.1848),
    "MO": StateCoordinate("Jefferson City", 38.5767, -92.1735),
    "MT": StateCoordinate("Helena", 46.5891, -112.0391),
    "NE": StateCoordinate("Lincoln", 40.8136, -96.7026),
    "NV": StateCoordinate("Carson City", 39.1638, -119.7674),
    "NH": StateCoordinate("Concord", 43.2081, -71.5376),
    "NJ": StateCoordinate("Trenton", 40.2206, -74.7597),
    "NM": StateCoordinate("Santa Fe", 35.6870, -105.9378),
    "NY": StateCoordinate("Albany", 42.6526, -73.7562),
    "NC": StateCoordinate("Raleigh", 35.7796, -78.6382),
    "ND": StateCoordinate("Bismarck", 46.8083, -100.7837),
    "OH": StateCoordinate("Columbus", 39.9612, -82.9988),
    "OK": StateCoordinate("Oklahoma City", 35.4676, -97.5164),
    "OR": StateCoordinate("Salem", 44.9429, -123.0351),
    "PA": StateCoordinate("Harrisburg", 40.2732, -76.8867),
    "RI": StateCoordinate("Providence", 41.8240, -71.4128),
    "SC": StateCoordinate("Columbia", 34.0007, -81.0348),
    "SD": StateCoordinate("Pierre", 44.3683, -100.3510),
    "TN": StateCoordinate("Nashville", 36.1627, -86.7816),
    "TX": StateCoordinate("Austin", 30.2672, -97.7431),
    "UT": StateCoordinate("Salt Lake City", 40.7608, -111.8910),
    "VT": StateCoordinate("Montpelier", 44.2601, -72.5754),
    "VA": StateCoordinate("Richmond", 37.5407, -77.4360),
    "WA": StateCoordinate("Olympia", 47.0379, -122.9007),
    "WV": StateCoordinate("Charleston", 38.3498, -81.6326),
    "WI": StateCoordinate("Madison", 43.0731, -89.4012),
    "WY": StateCoordinate("Cheyenne", 41.1400, -104.8202),
    "DC": StateCoordinate("Washington", 38.9072, -77.0369),
}


def get_state_info(state_code: Optional[str]) -> StateCoordinate:
    """Representative coordinate for a state code; unknown codes resolve to Colorado."""
    code = (state_code or "").strip().upper()
    return STATE_COORDINATES.get(code) or STATE_COORDINATES[FALLBACK_STATE_CODE]


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in miles (haversine)."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def format_distance(miles: float) -> str:
    if miles < 0.1:
        return "less than 0.1 miles"
    return f"{miles:.1f} miles"


def distance_from(origin: Optional[Coordinates], listing: Listing) -> Optional[float]:
    """Server-provided distance when present, otherwise haversine from ``origin``."""
    if listing.distance is not None:
        return listing.distance
    coords = listing.coordinates
    if origin is None or coords is None:
        return None
    return calculate_distance(origin.lat, origin.lng, coords.lat, coords.lng)


def sort_by_distance(listings: Sequence[Listing], origin: Coordinates) -> List[Listing]:
    """Return a new list ordered nearest first; listings without coordinates go last."""

    def _key(listing: Listing) -> float:
        distance = distance_from(origin, listing)
        return distance if distance is not None else math.inf

    return sorted(listings, key=_key)
