"""OpenWeather Current Weather API provider implementation."""
import logging
import math
from urllib.parse import quote, quote_plus

import requests
from weather_provider import WeatherProviderBase, WeatherProviderError
from weather_data import CurrentConditions, ErrorKind


DEFAULT_TIMEOUT = 10  # seconds


def redact(text: str, secret: str) -> str:
    """Mask a secret (the API key travels in the request URL) inside log text."""
    if not secret:
        return text
    # Longest form first, the encoded variants can contain the raw key
    for form in sorted({secret, quote(secret, safe=""), quote_plus(secret)}, key=len, reverse=True):
        text = text.replace(form, "***")
    return text


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider using OpenWeather Current Weather API.

    Looks up a city by name: https://openweathermap.org/current
    Units are fixed to metric, so temperatures are in Celsius.
    """

    UNITS = "metric"

    def __init__(
        self,
        api_endpoint: str,
        api_key: str,
        session: requests.Session,
        timeout: float = DEFAULT_TIMEOUT
    ):
        """
        Initialize OpenWeather provider.

        Args:
            api_endpoint: Current weather endpoint, e.g.
                https://api.openweathermap.org/data/2.5/weather
            api_key: OpenWeather API key
            session: HTTP session used for the request
            timeout: HTTP request timeout in seconds
        """
        self.api_endpoint = api_endpoint
        self.api_key = api_key
        self.session = session
        self.timeout = timeout

    def get_current(self, city_name: str, country_code: str) -> CurrentConditions:
        """
        Fetch current weather from OpenWeather Current Weather API.

        Returns:
            CurrentConditions: Current weather information

        Raises:
            WeatherProviderError: TRANSPORT for network/HTTP errors,
                MALFORMED_RESPONSE when the body can't be mapped
        """
        params = {
            "q": f"{city_name},{country_code}",
            "appid": self.api_key,
            "units": self.UNITS,
        }

        logging.info(f"Making OpenWeather API request: {self.api_endpoint}")
        logging.debug(f"Request parameters: q={params['q']}, units={self.UNITS}")

        try:
            response = self.session.get(self.api_endpoint, params=params, timeout=self.timeout)
        except (requests.exceptions.RequestException, ValueError) as e:
            # urllib3 rejects bad timeouts and URLs with ValueError
            message = redact(str(e), self.api_key)
            logging.error(f"Network error during API request: {message}")
            raise WeatherProviderError(f"Network error: {message}", ErrorKind.TRANSPORT) from None

        logging.info(f"API response status: {response.status_code}")

        if not response.ok:
            logging.error(f"API request failed with status {response.status_code}")
            self._handle_error_response(response)

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Failed to decode API response: {e}")
            raise WeatherProviderError(
                f"Failed to parse response: {e}", ErrorKind.MALFORMED_RESPONSE
            ) from None

        logging.debug(f"API response (truncated): {redact(str(data), self.api_key)[:500]}...")

        conditions = self._parse(data)
        logging.info(
            f"Successfully parsed weather data: {conditions.city_name},{conditions.country_code} "
            f"{conditions.temp}°C icon={conditions.icon_code}"
        )
        return conditions

    def _parse(self, data) -> CurrentConditions:
        """Map the provider JSON onto CurrentConditions, rejecting any deviation."""
        if not isinstance(data, dict):
            raise self._malformed("Response is not a JSON object")

        # An empty list is treated like a missing one
        weather_array = data.get("weather")
        if not isinstance(weather_array, list) or not weather_array:
            raise self._malformed("Response missing 'weather' array")
        weather = weather_array[0]
        icon = weather.get("icon") if isinstance(weather, dict) else None
        if not isinstance(icon, str):
            raise self._malformed("Response missing 'weather[0].icon'")

        main_data = data.get("main")
        if not isinstance(main_data, dict) or not main_data:
            raise self._malformed("Response missing 'main' block")
        temp = main_data.get("temp")
        if isinstance(temp, bool) or not isinstance(temp, (int, float)):
            raise self._malformed("Response missing numeric 'main.temp'")
        try:
            temp = float(temp)
        except OverflowError:
            raise self._malformed("Response 'main.temp' out of range") from None
        if not math.isfinite(temp):
            raise self._malformed("Response 'main.temp' is not finite")

        sys_data = data.get("sys")
        country = sys_data.get("country") if isinstance(sys_data, dict) else None
        if not isinstance(country, str):
            raise self._malformed("Response missing 'sys.country'")

        name = data.get("name")
        if not isinstance(name, str):
            raise self._malformed("Response missing 'name'")

        return CurrentConditions(
            city_name=name,
            country_code=country,
            temp=temp,
            icon_code=icon,
        )

    @staticmethod
    def _malformed(message: str) -> WeatherProviderError:
        logging.error(message)
        return WeatherProviderError(message, ErrorKind.MALFORMED_RESPONSE)

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from OpenWeather error response."""
        try:
            error_data = response.json()
        except ValueError:
            # Not JSON, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            raise WeatherProviderError(
                f"HTTP {response.status_code}: {response.text[:200]}", ErrorKind.TRANSPORT
            ) from None

        if not isinstance(error_data, dict):
            error_data = {}
        cod = error_data.get("cod", response.status_code)
        message = error_data.get("message", "Unknown error")

        logging.error(f"OpenWeather API error response: {error_data}")
        raise WeatherProviderError(f"OpenWeather API error {cod}: {message}", ErrorKind.TRANSPORT)
