from __future__ import annotations

import asyncio
import logging
import math
from typing import Awaitable, Callable

from weather_app.clients.base import WeatherClient, WeatherClientError
from weather_app.models.weather import (
    Coordinates,
    DerivedTemperatures,
    Error,
    ErrorKind,
    FetchState,
    Idle,
    Loading,
    Success,
    UnitPreference,
    WeatherSnapshot,
    WeatherView,
)
from weather_app.repositories.location import LocationStore
from weather_app.services.channel import StateChannel
from weather_app.services.units import derive_temperatures

logger = logging.getLogger(__name__)

CITY_NOT_FOUND_MESSAGE = "City not found. Please try another city."
INVALID_CITY_MESSAGE = "Invalid city name."
INVALID_COORDINATES_MESSAGE = "Invalid coordinates."
TIMEOUT_MESSAGE = "Request timed out."


class WeatherFetchController:
    """Owns the weather request lifecycle and everything derived from it.

    State is published on four channels (``fetch_state``, ``coordinates``,
    ``unit`` and ``temperatures``). Only one fetch counts at a time: starting
    a new one supersedes whatever is in flight, and the superseded outcome is
    never published. Fetch failures are published as :class:`Error` states and
    never raised to the caller.
    """

    def __init__(
        self,
        *,
        client: WeatherClient,
        store: LocationStore,
        timeout_seconds: float | None = None,
        unit: UnitPreference = UnitPreference.CELSIUS,
    ) -> None:
        self._client = client
        self._store = store
        self._timeout_seconds = timeout_seconds
        self._generation = 0
        self._snapshot: WeatherSnapshot | None = None
        self._pending_writes: set[asyncio.Task[None]] = set()

        self.fetch_state: StateChannel[FetchState] = StateChannel("fetch_state", Idle())
        self.coordinates: StateChannel[Coordinates | None] = StateChannel("coordinates", None)
        self.unit: StateChannel[UnitPreference] = StateChannel("unit", unit)
        self.temperatures: StateChannel[DerivedTemperatures | None] = StateChannel(
            "temperatures", None
        )

    @property
    def snapshot(self) -> WeatherSnapshot | None:
        return self._snapshot

    def view(self) -> WeatherView:
        return WeatherView(
            state=self.fetch_state.value,
            coordinates=self.coordinates.value,
            unit=self.unit.value,
            temperatures=self.temperatures.value,
        )

    async def fetch_by_last_location(self) -> None:
        last = self._store.load_last_location()
        if last is None:
            logger.debug("No stored location; skipping fetch")
            return

        self.coordinates.publish(last)
        snapshot = await self._execute(
            lambda: self._client.fetch_by_coordinates(
                str(last.latitude), str(last.longitude)
            )
        )
        if snapshot is not None:
            self._apply_success(snapshot)

    async def fetch_by_coordinates(self, lat: float | str, lon: float | str) -> None:
        try:
            latitude = float(lat)
            longitude = float(lon)
        except (TypeError, ValueError):
            self._reject(ErrorKind.INVALID_INPUT, INVALID_COORDINATES_MESSAGE)
            return
        if not (math.isfinite(latitude) and math.isfinite(longitude)):
            self._reject(ErrorKind.INVALID_INPUT, INVALID_COORDINATES_MESSAGE)
            return

        lat_text = lat.strip() if isinstance(lat, str) else str(latitude)
        lon_text = lon.strip() if isinstance(lon, str) else str(longitude)

        self.fetch_state.publish(Idle())
        snapshot = await self._execute(
            lambda: self._client.fetch_by_coordinates(lat_text, lon_text)
        )
        if snapshot is None:
            return

        coords = Coordinates(latitude, longitude)
        self.coordinates.publish(coords)
        self._apply_success(snapshot)
        self._save_location(coords)

    async def search_by_city(self, name: str) -> None:
        city = (name or "").strip()
        if not city:
            self._reject(ErrorKind.INVALID_INPUT, INVALID_CITY_MESSAGE)
            return

        self.fetch_state.publish(Idle())
        snapshot = await self._execute(
            lambda: self._client.fetch_by_city_name(city),
            not_found_message=CITY_NOT_FOUND_MESSAGE,
        )
        if snapshot is None:
            return

        # TODO: a payload without coordinates resolves to (0.0, 0.0); surface an
        # error instead once product signs off on dropping the legacy fallback.
        coords = snapshot.coord or Coordinates(0.0, 0.0)
        self.coordinates.publish(coords)
        self._apply_success(snapshot)
        self._save_location(coords)

    def set_unit_preference(self, preference: UnitPreference | str) -> None:
        preference = UnitPreference(preference)
        if preference is self.unit.value:
            return
        self.unit.publish(preference)
        state = self.fetch_state.value
        if isinstance(state, Success):
            self.temperatures.publish(derive_temperatures(state.snapshot, preference))

    def toggle_unit(self) -> UnitPreference:
        if self.unit.value is UnitPreference.CELSIUS:
            self.set_unit_preference(UnitPreference.FAHRENHEIT)
        else:
            self.set_unit_preference(UnitPreference.CELSIUS)
        return self.unit.value

    def set_location(self, lat: float | None, lon: float | None) -> None:
        if lat is None and lon is None:
            self.coordinates.publish(None)
            return
        if lat is None or lon is None:
            raise ValueError("latitude and longitude must be set together")
        self.coordinates.publish(Coordinates(float(lat), float(lon)))

    async def drain(self) -> None:
        """Wait for location writes that are still running in the background."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    async def aclose(self) -> None:
        await self.drain()
        for channel in (self.fetch_state, self.coordinates, self.unit, self.temperatures):
            channel.close()

    async def _execute(
        self,
        call: Callable[[], Awaitable[WeatherSnapshot]],
        *,
        not_found_message: str | None = None,
    ) -> WeatherSnapshot | None:
        self._generation += 1
        generation = self._generation
        self.fetch_state.publish(Loading())

        kind: ErrorKind
        message: str
        try:
            if self._timeout_seconds is None:
                snapshot = await call()
            else:
                snapshot = await asyncio.wait_for(call(), timeout=self._timeout_seconds)
        except WeatherClientError as e:
            kind, message = e.kind, e.message
            if kind is ErrorKind.NOT_FOUND and not_found_message is not None:
                message = not_found_message
        except asyncio.TimeoutError:
            kind, message = ErrorKind.NETWORK, TIMEOUT_MESSAGE
        except OSError as e:
            kind, message = ErrorKind.NETWORK, str(e) or type(e).__name__
        except Exception as e:  # noqa: BLE001 - every failure becomes a published Error
            logger.exception("Unexpected weather client failure")
            kind, message = ErrorKind.OTHER, str(e) or type(e).__name__
        else:
            if generation != self._generation:
                logger.debug("Dropping superseded weather result (generation %s)", generation)
                return None
            return snapshot

        if generation != self._generation:
            logger.debug("Dropping superseded weather failure (generation %s)", generation)
            return None
        logger.warning("Weather fetch failed (%s): %s", kind.value, message)
        self.fetch_state.publish(Error(kind, message))
        return None

    def _apply_success(self, snapshot: WeatherSnapshot) -> None:
        # Temperatures go out first so Success is never seen next to stale values.
        self._snapshot = snapshot
        self.temperatures.publish(derive_temperatures(snapshot, self.unit.value))
        self.fetch_state.publish(Success(snapshot))
        logger.debug("Weather updated for %s", snapshot.name)

    def _reject(self, kind: ErrorKind, message: str) -> None:
        # Supersedes any fetch still in flight.
        self._generation += 1
        self.fetch_state.publish(Error(kind, message))

    def _save_location(self, coords: Coordinates) -> None:
        task = asyncio.create_task(
            asyncio.to_thread(
                self._store.save_last_location, coords.latitude, coords.longitude
            )
        )
        self._pending_writes.add(task)
        task.add_done_callback(self._on_write_done)

    def _on_write_done(self, task: asyncio.Task[None]) -> None:
        self._pending_writes.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Saving last location failed", exc_info=exc)
