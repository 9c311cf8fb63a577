from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path

from weather_app.models.weather import Coordinates

logger = logging.getLogger(__name__)

KEY_LATITUDE = "latitude"
KEY_LONGITUDE = "longitude"


class JsonFileLocationStore:
    """Keeps the last resolved location in a small JSON document.

    Saving never raises: I/O failures are logged and dropped. Loading returns
    ``None`` when nothing usable has been stored.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def save_last_location(self, lat: float, lon: float) -> None:
        document = {KEY_LATITUDE: float(lat), KEY_LONGITUDE: float(lon)}
        tmp = self._path.with_name(self._path.name + ".tmp")
        with self._lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                tmp.write_text(json.dumps(document), encoding="utf-8")
                os.replace(tmp, self._path)
            except OSError:
                logger.warning("Could not save last location to %s", self._path, exc_info=True)

    def load_last_location(self) -> Coordinates | None:
        with self._lock:
            try:
                raw = self._path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return None
            except OSError:
                logger.warning("Could not read last location from %s", self._path, exc_info=True)
                return None

        try:
            document = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring corrupt last location file %s", self._path)
            return None
        if not isinstance(document, dict):
            return None

        lat = document.get(KEY_LATITUDE)
        lon = document.get(KEY_LONGITUDE)
        # Both or neither.
        if not _is_number(lat) or not _is_number(lon):
            return None
        return Coordinates(latitude=float(lat), longitude=float(lon))


def _is_number(v: object) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)
