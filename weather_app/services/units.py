from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_EVEN, Decimal

from weather_app.models.weather import DerivedTemperatures, UnitPreference, WeatherSnapshot

KELVIN_OFFSET = 273.15
OPENWEATHER_ICON_URL = "https://openweathermap.org/img/wn/{icon}@2x.png"
LOCAL_TIME_FORMAT = "%H:%M:%S %d/%m/%Y"

_FOUR_PLACES = Decimal("0.0001")


def kelvin_to_celsius(kelvin: float | None) -> float | None:
    if kelvin is None:
        return None
    return kelvin - KELVIN_OFFSET


def celsius_to_fahrenheit(celsius: float | None) -> float | None:
    if celsius is None:
        return None
    return (celsius * 9 / 5) + 32


def format_coordinate(value: float) -> str:
    """Render a coordinate with at most four fractional digits.

    Trailing zeros (and a dangling decimal point) are trimmed, so ``37.0``
    becomes ``"37"`` and ``37.77490`` becomes ``"37.7749"``.
    """
    # Rounds the exact binary value of the float.
    quantized = Decimal(float(value)).quantize(_FOUR_PLACES, rounding=ROUND_HALF_EVEN)
    if quantized.is_zero():
        return "0"
    text = format(quantized, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def derive_temperatures(
    snapshot: WeatherSnapshot, preference: UnitPreference
) -> DerivedTemperatures:
    # Celsius is always derived first; Fahrenheit is computed from Celsius.
    celsius = [
        kelvin_to_celsius(snapshot.temperature),
        kelvin_to_celsius(snapshot.feels_like),
        kelvin_to_celsius(snapshot.temp_min),
        kelvin_to_celsius(snapshot.temp_max),
    ]
    if preference is UnitPreference.FAHRENHEIT:
        values = [celsius_to_fahrenheit(c) for c in celsius]
    else:
        values = celsius
    return DerivedTemperatures(
        unit=preference,
        current=values[0],
        feels_like=values[1],
        min=values[2],
        max=values[3],
    )


def format_local_time(epoch_seconds: int | None, offset_seconds: int | None) -> str | None:
    if epoch_seconds is None or offset_seconds is None:
        return None
    tz = timezone(timedelta(seconds=offset_seconds))
    return datetime.fromtimestamp(epoch_seconds, tz=tz).strftime(LOCAL_TIME_FORMAT)


def icon_url(icon: str | None) -> str | None:
    if not icon:
        return None
    return OPENWEATHER_ICON_URL.format(icon=icon)
