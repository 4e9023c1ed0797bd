"""Country flag lookup against the REST Countries service."""
import logging
import requests
from weather_provider import FlagProviderBase
from openweather_provider import DEFAULT_TIMEOUT


DEFAULT_FLAG_ENDPOINT = "https://restcountries.eu/rest/v2/alpha"


class RestCountriesFlagProvider(FlagProviderBase):
    """
    Resolves a two letter country code to a flag image URL.

    The lookup is best-effort: every failure is logged and turned into an
    empty string, so a missing flag never fails the weather fetch.
    """

    def __init__(
        self,
        session: requests.Session,
        endpoint: str = DEFAULT_FLAG_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT
    ):
        self.session = session
        self.endpoint = endpoint
        self.timeout = timeout

    def fetch_flag(self, country_code: str) -> str:
        if not country_code:
            return ""

        logging.debug(f"Looking up flag for country code {country_code}")
        try:
            response = self.session.get(
                self.endpoint, params={"codes": country_code}, timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logging.warning(f"Flag lookup for {country_code} failed: {e}")
            return ""
        except ValueError as e:
            logging.warning(f"Flag lookup for {country_code} returned invalid JSON: {e}")
            return ""

        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            logging.warning(f"Flag lookup for {country_code} returned no countries")
            return ""

        flag = data[0].get("flag")
        if not isinstance(flag, str):
            logging.warning(f"Flag lookup for {country_code} response missing 'flag'")
            return ""

        return flag
