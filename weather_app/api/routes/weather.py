from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from weather_app.api.deps import get_weather_controller
from weather_app.schemas.weather import (
    CityRequest,
    CoordinatesRequest,
    LocationRequest,
    UnitRequest,
    WeatherViewResponse,
)
from weather_app.services.weather import WeatherFetchController

router = APIRouter(prefix="/weather")

Controller = Annotated[WeatherFetchController, Depends(get_weather_controller)]


@router.get("", response_model=WeatherViewResponse)
async def current_view(controller: Controller) -> WeatherViewResponse:
    return WeatherViewResponse.from_view(controller.view())


@router.post("/last-location", response_model=WeatherViewResponse)
async def fetch_last_location(controller: Controller) -> WeatherViewResponse:
    await controller.fetch_by_last_location()
    return WeatherViewResponse.from_view(controller.view())


@router.post("/coordinates", response_model=WeatherViewResponse)
async def fetch_coordinates(
    body: CoordinatesRequest, controller: Controller
) -> WeatherViewResponse:
    await controller.fetch_by_coordinates(body.lat, body.lon)
    return WeatherViewResponse.from_view(controller.view())


@router.post("/city", response_model=WeatherViewResponse)
async def search_city(body: CityRequest, controller: Controller) -> WeatherViewResponse:
    await controller.search_by_city(body.name)
    return WeatherViewResponse.from_view(controller.view())


@router.put("/unit", response_model=WeatherViewResponse)
async def set_unit(body: UnitRequest, controller: Controller) -> WeatherViewResponse:
    controller.set_unit_preference(body.unit)
    return WeatherViewResponse.from_view(controller.view())


@router.post("/unit/toggle", response_model=WeatherViewResponse)
async def toggle_unit(controller: Controller) -> WeatherViewResponse:
    controller.toggle_unit()
    return WeatherViewResponse.from_view(controller.view())


@router.put("/location", response_model=WeatherViewResponse)
async def set_location(body: LocationRequest, controller: Controller) -> WeatherViewResponse:
    controller.set_location(body.lat, body.lon)
    return WeatherViewResponse.from_view(controller.view())
