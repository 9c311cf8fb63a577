from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Union


class UnitPreference(str, Enum):
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    NETWORK = "network"
    INVALID_INPUT = "invalid_input"
    OTHER = "other"


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class WeatherCondition:
    code: int | None = None
    main: str | None = None
    description: str | None = None
    icon: str | None = None


@dataclass(frozen=True)
class WeatherSnapshot:
    name: str | None = None

    # Kelvin, as returned by the provider.
    temperature: float | None = None
    feels_like: float | None = None
    temp_min: float | None = None
    temp_max: float | None = None

    humidity: int | None = None
    pressure: int | None = None
    visibility: int | None = None
    wind_speed: float | None = None
    wind_deg: int | None = None
    cloudiness: int | None = None
    condition: WeatherCondition | None = None

    country: str | None = None
    observed_at: int | None = None
    timezone_offset: int | None = None
    sunrise: int | None = None
    sunset: int | None = None
    coord: Coordinates | None = None


@dataclass(frozen=True)
class DerivedTemperatures:
    unit: UnitPreference
    current: float | None = None
    feels_like: float | None = None
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class Idle:
    status: Literal["idle"] = "idle"


@dataclass(frozen=True)
class Loading:
    status: Literal["loading"] = "loading"


@dataclass(frozen=True)
class Success:
    snapshot: WeatherSnapshot
    status: Literal["success"] = "success"


@dataclass(frozen=True)
class Error:
    kind: ErrorKind
    message: str
    status: Literal["error"] = "error"


FetchState = Union[Idle, Loading, Success, Error]


@dataclass(frozen=True)
class WeatherView:
    state: FetchState
    coordinates: Coordinates | None
    unit: UnitPreference
    temperatures: DerivedTemperatures | None
