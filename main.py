import os

import uvicorn


def main() -> None:
    reload_enabled = os.getenv("WEATHER_ENV", "development").lower() != "production"
    uvicorn.run(
        "weather_app.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=reload_enabled,
    )


if __name__ == "__main__":
    main()
