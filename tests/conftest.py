from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from weather_app.core.config import Settings
from weather_app.factory import create_app
from weather_app.services.weather import WeatherFetchController
from tests.fakes import FakeLocationStore, FakeWeatherClient


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        env="test",
        debug=True,
        docs_enabled=False,
        cors_origins=["http://localhost"],
        trusted_hosts=["testserver", "localhost"],
        openweather_api_key="test-key",
        request_timeout_seconds=1.0,
        location_store_path=tmp_path / "last_location.json",
        fetch_on_startup=False,
    )


@pytest.fixture()
def weather_client() -> FakeWeatherClient:
    return FakeWeatherClient()


@pytest.fixture()
def store() -> FakeLocationStore:
    return FakeLocationStore()


@pytest.fixture()
def controller(weather_client: FakeWeatherClient, store: FakeLocationStore) -> WeatherFetchController:
    return WeatherFetchController(client=weather_client, store=store, timeout_seconds=1.0)


@pytest.fixture()
def client(
    settings: Settings, weather_client: FakeWeatherClient, store: FakeLocationStore
) -> TestClient:
    app = create_app(settings, weather_client=weather_client, location_store=store)
    with TestClient(app) as client:
        yield client
