from __future__ import annotations

from fastapi import Request

from weather_app.services.weather import WeatherFetchController


def get_weather_controller(request: Request) -> WeatherFetchController:
    return request.app.state.weather_controller
