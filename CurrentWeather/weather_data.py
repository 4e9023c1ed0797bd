"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional


MSG_SUCCESS = "Got valid weather results."
MSG_MISSING_CREDENTIALS = "No valid API key and/or API endpoint supplied!"
MSG_INVALID_QUERY = "Invalid city name and/or country code!"
MSG_UPSTREAM_FAILURE = "No results found for given search parameters, service error or API key invalid."


class ResultStatus(Enum):
    UNSET = "unset"
    SUCCESS = "success"
    FAILURE = "failure"


class ErrorKind(Enum):
    """Failure classes, so callers never have to parse messages."""
    MISSING_CREDENTIALS = "missing_credentials"
    INVALID_QUERY = "invalid_query"
    TRANSPORT = "transport"
    MALFORMED_RESPONSE = "malformed_response"
    FLAG_UNAVAILABLE = "flag_unavailable"


@dataclass
class QueryParameters:
    """City/country/endpoint/key tuple driving one fetch."""
    city_name: str = ""
    country_code: str = ""
    api_endpoint: str = ""
    api_key: str = ""


@dataclass
class CurrentConditions:
    """Fields extracted from a weather provider response."""
    city_name: str
    country_code: str
    temp: float
    icon_code: str


@dataclass
class WeatherResult:
    """Normalized result handed back to the presentation layer."""
    city_name: str = ""
    country_code: str = ""
    current_temperature: Optional[int] = None  # floored, Celsius
    icon_code: str = ""
    flag_image_url: str = ""
    status: ResultStatus = ResultStatus.UNSET
    message: str = ""
    error_kind: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.SUCCESS

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        data["error_kind"] = self.error_kind.value if self.error_kind else None
        return data
