from __future__ import annotations

from typing import Protocol

from weather_app.models.weather import ErrorKind, WeatherSnapshot


class WeatherClientError(Exception):
    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class WeatherClient(Protocol):
    async def fetch_by_coordinates(self, lat: str, lon: str) -> WeatherSnapshot: ...

    async def fetch_by_city_name(self, name: str) -> WeatherSnapshot: ...
