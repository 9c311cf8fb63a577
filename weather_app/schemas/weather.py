from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from weather_app.models.weather import (
    Coordinates,
    DerivedTemperatures,
    Error,
    ErrorKind,
    Success,
    UnitPreference,
    WeatherSnapshot,
    WeatherView,
)
from weather_app.services.units import format_coordinate, format_local_time, icon_url


class CoordinatesRequest(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class LocationRequest(BaseModel):
    lat: float | None = Field(default=None, ge=-90, le=90)
    lon: float | None = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def _both_or_neither(self) -> "LocationRequest":
        if (self.lat is None) != (self.lon is None):
            raise ValueError("lat and lon must be given together")
        return self


class CityRequest(BaseModel):
    # Blank names are accepted here and reported as an invalid-input fetch state.
    name: str = Field(max_length=128)


class UnitRequest(BaseModel):
    unit: UnitPreference


class CoordinatesOut(BaseModel):
    latitude: float
    longitude: float
    latitude_text: str
    longitude_text: str

    @classmethod
    def from_coordinates(cls, coords: Coordinates) -> "CoordinatesOut":
        return cls(
            latitude=coords.latitude,
            longitude=coords.longitude,
            latitude_text=format_coordinate(coords.latitude),
            longitude_text=format_coordinate(coords.longitude),
        )


class TemperaturesOut(BaseModel):
    unit: UnitPreference
    current: float | None = None
    feels_like: float | None = None
    min: float | None = None
    max: float | None = None

    @classmethod
    def from_derived(cls, temps: DerivedTemperatures) -> "TemperaturesOut":
        return cls(
            unit=temps.unit,
            current=temps.current,
            feels_like=temps.feels_like,
            min=temps.min,
            max=temps.max,
        )


class SnapshotOut(BaseModel):
    name: str | None = None
    country: str | None = None
    humidity: int | None = None
    pressure: int | None = None
    visibility: int | None = None
    wind_speed: float | None = None
    wind_deg: int | None = None
    cloudiness: int | None = None
    condition_code: int | None = None
    condition: str | None = None
    description: str | None = None
    icon_url: str | None = None
    observed_at: int | None = None
    timezone_offset: int | None = None
    local_time: str | None = None
    sunrise: str | None = None
    sunset: str | None = None

    @classmethod
    def from_snapshot(cls, snapshot: WeatherSnapshot) -> "SnapshotOut":
        condition = snapshot.condition
        offset = snapshot.timezone_offset
        return cls(
            name=snapshot.name,
            country=snapshot.country,
            humidity=snapshot.humidity,
            pressure=snapshot.pressure,
            visibility=snapshot.visibility,
            wind_speed=snapshot.wind_speed,
            wind_deg=snapshot.wind_deg,
            cloudiness=snapshot.cloudiness,
            condition_code=condition.code if condition else None,
            condition=condition.main if condition else None,
            description=condition.description if condition else None,
            icon_url=icon_url(condition.icon) if condition else None,
            observed_at=snapshot.observed_at,
            timezone_offset=offset,
            local_time=format_local_time(snapshot.observed_at, offset),
            sunrise=format_local_time(snapshot.sunrise, offset),
            sunset=format_local_time(snapshot.sunset, offset),
        )


class FetchStateOut(BaseModel):
    status: Literal["idle", "loading", "success", "error"]
    error_kind: ErrorKind | None = None
    message: str | None = None
    weather: SnapshotOut | None = None


class WeatherViewResponse(BaseModel):
    state: FetchStateOut
    coordinates: CoordinatesOut | None = None
    unit: UnitPreference
    temperatures: TemperaturesOut | None = None

    @classmethod
    def from_view(cls, view: WeatherView) -> "WeatherViewResponse":
        state = view.state
        if isinstance(state, Success):
            state_out = FetchStateOut(
                status=state.status, weather=SnapshotOut.from_snapshot(state.snapshot)
            )
        elif isinstance(state, Error):
            state_out = FetchStateOut(
                status=state.status, error_kind=state.kind, message=state.message
            )
        else:
            state_out = FetchStateOut(status=state.status)

        temps: TemperaturesOut | None = None
        # Temperatures are only meaningful next to the snapshot they came from.
        if isinstance(state, Success) and view.temperatures is not None:
            temps = TemperaturesOut.from_derived(view.temperatures)

        return cls(
            state=state_out,
            coordinates=(
                CoordinatesOut.from_coordinates(view.coordinates)
                if view.coordinates is not None
                else None
            ),
            unit=view.unit,
            temperatures=temps,
        )
