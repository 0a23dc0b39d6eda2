"""Persistence of the last resolved location and recent searches."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from laundry_locator.core import db
from laundry_locator.models import Coordinates

logger = logging.getLogger(__name__)

MAX_RECENT_SEARCHES = 5


@dataclass(frozen=True)
class SavedLocation:
    display: str
    coordinates: Optional[Coordinates] = None
    state_code: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "display": self.display,
            "lat": self.coordinates.lat if self.coordinates else None,
            "lng": self.coordinates.lng if self.coordinates else None,
            "state_code": self.state_code,
        }

    @classmethod
    def from_record(cls, record: Any) -> Optional["SavedLocation"]:
        # Older clients stored the display string on its own.
        if isinstance(record, str):
            return cls(display=record.strip()) if record.strip() else None
        if not isinstance(record, dict):
            return None

        display = str(record.get("display") or "").strip()
        coordinates = None
        try:
            if record.get("lat") is not None and record.get("lng") is not None:
                coordinates = Coordinates(float(record["lat"]), float(record["lng"]))
        except (TypeError, ValueError):
            logger.debug("Ignoring malformed saved coordinates: %s", record)
        if not display and coordinates is None:
            return None
        return cls(display=display, coordinates=coordinates, state_code=record.get("state_code") or None)


class LocationStore(Protocol):
    def get_last_location(self) -> Optional[SavedLocation]:
        ...

    def save_last_location(self, location: SavedLocation) -> None:
        ...


class FileLocationStore:
    """JSON file store used by the CLI."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Unable to read location store %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get_last_location(self) -> Optional[SavedLocation]:
        return SavedLocation.from_record(self._load().get("last_location"))

    def save_last_location(self, location: SavedLocation) -> None:
        data = self._load()
        data["last_location"] = location.to_record()
        self._dump(data)

    def clear_last_location(self) -> None:
        data = self._load()
        if data.pop("last_location", None) is not None:
            self._dump(data)

    def get_recent_searches(self) -> List[Dict[str, Any]]:
        searches = self._load().get("recent_searches")
        return searches if isinstance(searches, list) else []

    def save_recent_search(self, query: str, coordinates: Optional[Coordinates] = None) -> None:
        query = query.strip()
        if not query:
            return
        entry = {
            "query": query,
            "lat": coordinates.lat if coordinates else None,
            "lng": coordinates.lng if coordinates else None,
            "timestamp": int(time.time() * 1000),
        }
        searches = [s for s in self.get_recent_searches() if s.get("query") != query]
        searches.insert(0, entry)
        data = self._load()
        data["recent_searches"] = searches[:MAX_RECENT_SEARCHES]
        self._dump(data)


class PostgresLocationStore:
    """Per-session store backed by the ``client_locations`` table."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id

    def get_last_location(self) -> Optional[SavedLocation]:
        return SavedLocation.from_record(db.fetch_location(self.session_id))

    def save_last_location(self, location: SavedLocation) -> None:
        db.upsert_location(self.session_id, location.to_record())
