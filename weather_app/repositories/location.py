from __future__ import annotations

from typing import Protocol

from weather_app.models.weather import Coordinates


class LocationStore(Protocol):
    def save_last_location(self, lat: float, lon: float) -> None: ...

    def load_last_location(self) -> Coordinates | None: ...
