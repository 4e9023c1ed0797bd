"""Configuration for the current weather page, read from the environment."""
import logging
import os
from dataclasses import dataclass, asdict
from typing import List, Optional

from dotenv import load_dotenv

from flag_provider import DEFAULT_FLAG_ENDPOINT
from openweather_provider import DEFAULT_TIMEOUT


REQUIRED_FIELDS = ("city_name", "country_code", "api_endpoint", "api_key")


class SettingsError(Exception):
    """Raised when a configuration value can't be parsed."""
    pass


@dataclass
class WeatherSettings:
    """Defaults for the weather page plus the credentials to reach OpenWeather."""
    city_name: str = ""
    country_code: str = ""
    api_endpoint: str = ""
    api_key: str = ""
    flag_endpoint: str = DEFAULT_FLAG_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT

    def missing_fields(self) -> List[str]:
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]

    def redacted(self) -> dict:
        data = asdict(self)
        if data["api_key"]:
            data["api_key"] = "***"
        return data


def parse_timeout(raw: str, name: str = "WEATHER_TIMEOUT") -> float:
    """Parse a timeout in seconds; it must be a positive number."""
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise SettingsError(f"Invalid {name}: {raw!r}") from exc
    if not timeout > 0:
        raise SettingsError(f"{name} must be positive, got {raw}")
    return timeout


def load_settings(env_file: Optional[str] = None) -> WeatherSettings:
    """
    Load settings from WEATHER_* environment variables.

    A .env file (or ``env_file`` when given) is read first; variables already
    present in the environment win.

    Raises:
        SettingsError: If WEATHER_TIMEOUT is not a positive number
    """
    if env_file and not os.path.isfile(env_file):
        logging.warning("Env file not found: %s", env_file)
    load_dotenv(env_file)

    raw_timeout = os.getenv("WEATHER_TIMEOUT")
    timeout = parse_timeout(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT

    settings = WeatherSettings(
        city_name=os.getenv("WEATHER_CITY_NAME", "").strip(),
        country_code=os.getenv("WEATHER_COUNTRY_CODE", "").strip(),
        api_endpoint=os.getenv("WEATHER_API_ENDPOINT", "").strip(),
        api_key=os.getenv("WEATHER_API_KEY", "").strip(),
        flag_endpoint=os.getenv("WEATHER_FLAG_ENDPOINT", "").strip() or DEFAULT_FLAG_ENDPOINT,
        timeout=timeout,
    )
    logging.info("Configuration loaded: %s", settings.redacted())
    return settings
