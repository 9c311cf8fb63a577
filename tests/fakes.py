from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from weather_app.models.weather import Coordinates, WeatherCondition, WeatherSnapshot


def make_snapshot(
    *,
    name: str = "San Francisco",
    temperature: float | None = 293.15,
    feels_like: float | None = 292.15,
    temp_min: float | None = 290.15,
    temp_max: float | None = 296.15,
    coord: Coordinates | None = Coordinates(37.7749, -122.4194),
) -> WeatherSnapshot:
    return WeatherSnapshot(
        name=name,
        temperature=temperature,
        feels_like=feels_like,
        temp_min=temp_min,
        temp_max=temp_max,
        humidity=72,
        pressure=1015,
        visibility=10000,
        wind_speed=4.1,
        wind_deg=270,
        cloudiness=20,
        condition=WeatherCondition(code=801, main="Clouds", description="few clouds", icon="02d"),
        country="US",
        observed_at=1700000000,
        timezone_offset=-28800,
        sunrise=1699973000,
        sunset=1700010000,
        coord=coord,
    )


@dataclass
class FakeLocationStore:
    last: Coordinates | None = None
    saved: list[tuple[float, float]] = field(default_factory=list)
    loads: int = 0

    def save_last_location(self, lat: float, lon: float) -> None:
        self.saved.append((lat, lon))
        self.last = Coordinates(lat, lon)

    def load_last_location(self) -> Coordinates | None:
        self.loads += 1
        return self.last


class FakeWeatherClient:
    """Returns (or raises) whatever was queued, recording every call.

    ``gate`` lets a test hold a call open until it sets the event.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[str, ...]]] = []
        self._results: list[WeatherSnapshot | BaseException] = []
        self.gates: list[asyncio.Event | None] = []

    def queue(
        self, result: WeatherSnapshot | BaseException, *, gate: asyncio.Event | None = None
    ) -> None:
        self._results.append(result)
        self.gates.append(gate)

    async def fetch_by_coordinates(self, lat: str, lon: str) -> WeatherSnapshot:
        self.calls.append(("coordinates", (lat, lon)))
        return await self._next()

    async def fetch_by_city_name(self, name: str) -> WeatherSnapshot:
        self.calls.append(("city", (name,)))
        return await self._next()

    async def _next(self) -> WeatherSnapshot:
        if not self._results:
            raise AssertionError("FakeWeatherClient called with nothing queued")
        result = self._results.pop(0)
        gate = self.gates.pop(0)
        if gate is not None:
            await gate.wait()
        if isinstance(result, BaseException):
            raise result
        return result
