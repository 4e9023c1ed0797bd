"""Provider abstractions - allow swapping the weather and flag APIs."""
from abc import ABC, abstractmethod
from weather_data import CurrentConditions, ErrorKind


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    @abstractmethod
    def get_current(self, city_name: str, country_code: str) -> CurrentConditions:
        """
        Fetch current weather for a city.

        Args:
            city_name: City to look up
            country_code: Two letter country code (may be empty)

        Returns:
            CurrentConditions: Fields extracted from the provider response

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass


class FlagProviderBase(ABC):
    """Abstract base class for country flag lookups."""

    @abstractmethod
    def fetch_flag(self, country_code: str) -> str:
        """Return a flag image URL, or an empty string when unavailable."""
        pass


class WeatherProviderError(Exception):
    """Exception raised when a weather provider fails."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.TRANSPORT):
        super().__init__(message)
        self.kind = kind
