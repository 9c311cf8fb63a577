from __future__ import annotations

import logging
from typing import Any

import httpx

from weather_app.clients.base import WeatherClientError
from weather_app.core.config import OPENWEATHER_CURRENT_WEATHER_URL
from weather_app.models.weather import (
    Coordinates,
    ErrorKind,
    WeatherCondition,
    WeatherSnapshot,
)

logger = logging.getLogger(__name__)


class OpenWeatherClient:
    """Current-weather lookups against the OpenWeatherMap 2.5 API.

    Every failure is raised as :class:`WeatherClientError`, classified as
    ``NOT_FOUND`` (HTTP 404), ``NETWORK`` (timeouts and transport errors) or
    ``OTHER`` (any other status or an unusable payload).
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: float,
        base_url: str = OPENWEATHER_CURRENT_WEATHER_URL,
        country_suffix: str = "us",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._country_suffix = country_suffix.strip()
        self._client = httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_by_coordinates(self, lat: str, lon: str) -> WeatherSnapshot:
        return await self._fetch({"lat": lat, "lon": lon})

    async def fetch_by_city_name(self, name: str) -> WeatherSnapshot:
        query = name.strip()
        if self._country_suffix:
            query = f"{query},{self._country_suffix}"
        return await self._fetch({"q": query})

    async def _fetch(self, params: dict[str, str]) -> WeatherSnapshot:
        try:
            resp = await self._client.get(
                self._base_url, params={**params, "appid": self._api_key}
            )
        except httpx.TimeoutException as e:
            raise WeatherClientError(ErrorKind.NETWORK, "Request timed out.") from e
        except httpx.TransportError as e:
            raise WeatherClientError(ErrorKind.NETWORK, str(e) or "Network error") from e

        if resp.status_code == 404:
            raise WeatherClientError(ErrorKind.NOT_FOUND, _error_message(resp))
        if resp.is_error:
            logger.warning("Weather provider returned HTTP %s", resp.status_code)
            raise WeatherClientError(ErrorKind.OTHER, _error_message(resp))

        try:
            payload = resp.json()
        except ValueError as e:
            raise WeatherClientError(ErrorKind.OTHER, "Malformed weather response") from e
        if not isinstance(payload, dict):
            raise WeatherClientError(ErrorKind.OTHER, "Malformed weather response")
        return parse_snapshot(payload)


def parse_snapshot(payload: dict[str, Any]) -> WeatherSnapshot:
    main = _section(payload, "main")
    wind = _section(payload, "wind")
    clouds = _section(payload, "clouds")
    sys = _section(payload, "sys")
    coord = _section(payload, "coord")

    condition: WeatherCondition | None = None
    conditions = payload.get("weather")
    if isinstance(conditions, list) and conditions and isinstance(conditions[0], dict):
        first = conditions[0]
        condition = WeatherCondition(
            code=_int_or_none(first.get("id")),
            main=_str_or_none(first.get("main")),
            description=_str_or_none(first.get("description")),
            icon=_str_or_none(first.get("icon")),
        )

    lat = _float_or_none(coord.get("lat"))
    lon = _float_or_none(coord.get("lon"))

    return WeatherSnapshot(
        name=_str_or_none(payload.get("name")),
        temperature=_float_or_none(main.get("temp")),
        feels_like=_float_or_none(main.get("feels_like")),
        temp_min=_float_or_none(main.get("temp_min")),
        temp_max=_float_or_none(main.get("temp_max")),
        humidity=_int_or_none(main.get("humidity")),
        pressure=_int_or_none(main.get("pressure")),
        visibility=_int_or_none(payload.get("visibility")),
        wind_speed=_float_or_none(wind.get("speed")),
        wind_deg=_int_or_none(wind.get("deg")),
        cloudiness=_int_or_none(clouds.get("all")),
        condition=condition,
        country=_str_or_none(sys.get("country")),
        observed_at=_int_or_none(payload.get("dt")),
        timezone_offset=_int_or_none(payload.get("timezone")),
        sunrise=_int_or_none(sys.get("sunrise")),
        sunset=_int_or_none(sys.get("sunset")),
        # The provider sends both or neither; a lone axis is treated as absent.
        coord=Coordinates(lat, lon) if lat is not None and lon is not None else None,
    )


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"]:
        return body["message"]
    return f"HTTP {resp.status_code} {resp.reason_phrase}".strip()


def _section(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def _float_or_none(v: Any) -> float | None:
    try:
        if v is None:
            return None
        return float(v)
    except (TypeError, ValueError):
        return None


def _int_or_none(v: Any) -> int | None:
    try:
        if v is None:
            return None
        return int(v)
    except (TypeError, ValueError):
        return None


def _str_or_none(v: Any) -> str | None:
    if v is None:
        return None
    if isinstance(v, str):
        return v
    return str(v)
