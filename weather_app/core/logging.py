from __future__ import annotations

import logging

from weather_app.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("weather_app").setLevel(level)
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
