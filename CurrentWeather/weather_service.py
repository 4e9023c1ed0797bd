"""Weather fetch service - turns one weather lookup into a normalized result."""
import logging
import math
from typing import Optional

import requests

from flag_provider import RestCountriesFlagProvider
from openweather_provider import OpenWeatherProvider
from settings import WeatherSettings
from weather_data import (
    MSG_INVALID_QUERY,
    MSG_MISSING_CREDENTIALS,
    MSG_SUCCESS,
    MSG_UPSTREAM_FAILURE,
    ErrorKind,
    QueryParameters,
    ResultStatus,
    WeatherResult,
)
from weather_provider import FlagProviderBase, WeatherProviderBase, WeatherProviderError


class WeatherService:
    """
    Service that fetches current weather for the configured (or overridden)
    city and enriches it with a country flag.

    One instance serves one request. Query parameters start from the settings
    and may be overridden right after construction; every call to
    fetch_current_weather() builds a fresh WeatherResult and never raises.
    """

    def __init__(
        self,
        settings: WeatherSettings,
        session: Optional[requests.Session] = None,
        provider: Optional[WeatherProviderBase] = None,
        flag_provider: Optional[FlagProviderBase] = None
    ):
        """
        Initialize weather service.

        Args:
            settings: Configured defaults and credentials
            session: HTTP session shared by both lookups (a new one if omitted)
            provider: Weather provider override, mainly for tests
            flag_provider: Flag provider override, mainly for tests
        """
        self.session = session if session is not None else requests.Session()
        self._query = QueryParameters(
            city_name=settings.city_name,
            country_code=settings.country_code,
            api_endpoint=settings.api_endpoint,
            api_key=settings.api_key,
        )
        self.provider = provider or OpenWeatherProvider(
            api_endpoint=settings.api_endpoint,
            api_key=settings.api_key,
            session=self.session,
            timeout=settings.timeout,
        )
        self.flag_provider = flag_provider or RestCountriesFlagProvider(
            session=self.session,
            endpoint=settings.flag_endpoint,
            timeout=settings.timeout,
        )

    def set_query_parameters(self, city_name: str, country_code: str) -> None:
        self._query.city_name = city_name
        self._query.country_code = country_code

    @property
    def city_name(self) -> str:
        return self._query.city_name

    @property
    def country_code(self) -> str:
        return self._query.country_code

    def has_api_endpoint(self) -> bool:
        return bool(self._query.api_endpoint)

    def has_api_key(self) -> bool:
        return bool(self._query.api_key)

    def fetch_current_weather(self) -> WeatherResult:
        """
        Fetch current weather for the current query parameters.

        Returns:
            WeatherResult: status SUCCESS with all fields filled, or FAILURE
                with a user-safe message and the ErrorKind that caused it
        """
        result = WeatherResult()

        if not self.has_api_key() or not self.has_api_endpoint():
            logging.warning("Weather fetch skipped: API key and/or endpoint not configured")
            return self._fail(result, MSG_MISSING_CREDENTIALS, ErrorKind.MISSING_CREDENTIALS)

        if not self.city_name:
            logging.warning("Weather fetch skipped: empty city name")
            return self._fail(result, MSG_INVALID_QUERY, ErrorKind.INVALID_QUERY)

        logging.info(f"Fetching current weather for {self.city_name},{self.country_code}")
        try:
            conditions = self.provider.get_current(self.city_name, self.country_code)
        except WeatherProviderError as e:
            # Details stay in the log; they may carry request URLs
            logging.error(f"Weather fetch failed ({e.kind.value}): {e}")
            return self._fail(result, MSG_UPSTREAM_FAILURE, e.kind)

        result.city_name = conditions.city_name
        result.country_code = conditions.country_code
        result.current_temperature = math.floor(conditions.temp)
        result.icon_code = conditions.icon_code
        # The provider's country code is authoritative for the flag
        result.flag_image_url = self.flag_provider.fetch_flag(conditions.country_code)
        if not result.flag_image_url and conditions.country_code:
            logging.info(f"No flag for {conditions.country_code} ({ErrorKind.FLAG_UNAVAILABLE.value})")
        result.status = ResultStatus.SUCCESS
        result.message = MSG_SUCCESS

        logging.info(
            f"Weather fetch successful: {result.city_name},{result.country_code} "
            f"{result.current_temperature}°C icon={result.icon_code}"
        )
        return result

    @staticmethod
    def _fail(result: WeatherResult, message: str, kind: ErrorKind) -> WeatherResult:
        result.status = ResultStatus.FAILURE
        result.message = message
        result.error_kind = kind
        return result
