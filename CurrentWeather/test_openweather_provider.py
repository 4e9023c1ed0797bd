"""Tests for OpenWeather provider."""
import pytest
import requests
from unittest.mock import Mock
from openweather_provider import OpenWeatherProvider, WeatherProviderError, redact
from weather_data import CurrentConditions, ErrorKind


ENDPOINT = "https://api.openweathermap.org/data/2.5/weather"


@pytest.fixture
def sample_openweather_response():
    """Sample OpenWeather API response."""
    return {
        "coord": {"lon": -0.13, "lat": 51.51},
        "weather": [
            {
                "id": 803,
                "main": "Clouds",
                "description": "broken clouds",
                "icon": "04d"
            }
        ],
        "base": "stations",
        "main": {
            "temp": 15.7,
            "feels_like": 15.1,
            "pressure": 1014,
            "humidity": 72
        },
        "visibility": 10000,
        "wind": {"speed": 3.13, "deg": 93},
        "dt": 1684929490,
        "sys": {"country": "GB"},
        "timezone": 3600,
        "name": "London",
        "id": 2643743
    }


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def provider(session):
    """Create OpenWeather provider instance."""
    return OpenWeatherProvider(
        api_endpoint=ENDPOINT,
        api_key="test_key",
        session=session,
        timeout=5
    )


def ok_response(payload):
    response = Mock()
    response.ok = True
    response.status_code = 200
    response.json.return_value = payload
    return response


def test_openweather_provider_success(provider, session, sample_openweather_response):
    """Test successful API call and parsing."""
    session.get.return_value = ok_response(sample_openweather_response)

    conditions = provider.get_current("London", "GB")

    assert conditions == CurrentConditions(
        city_name="London", country_code="GB", temp=15.7, icon_code="04d"
    )


def test_openweather_provider_request_parameters(provider, session, sample_openweather_response):
    """Query is "city,country" with metric units and a bounded timeout."""
    session.get.return_value = ok_response(sample_openweather_response)

    provider.get_current("London", "GB")

    session.get.assert_called_once_with(
        ENDPOINT,
        params={"q": "London,GB", "appid": "test_key", "units": "metric"},
        timeout=5,
    )


def test_openweather_provider_empty_country(provider, session, sample_openweather_response):
    session.get.return_value = ok_response(sample_openweather_response)

    provider.get_current("London", "")

    _, kwargs = session.get.call_args
    assert kwargs["params"]["q"] == "London,"


def test_openweather_provider_integer_temperature(provider, session, sample_openweather_response):
    sample_openweather_response["main"]["temp"] = 3
    session.get.return_value = ok_response(sample_openweather_response)

    conditions = provider.get_current("London", "GB")

    assert conditions.temp == 3.0


def test_openweather_provider_http_error(provider, session):
    """Test handling of HTTP errors."""
    response = Mock()
    response.ok = False
    response.status_code = 401
    response.json.return_value = {
        "cod": 401,
        "message": "Invalid API key"
    }
    session.get.return_value = response

    with pytest.raises(WeatherProviderError) as exc_info:
        provider.get_current("London", "GB")

    assert exc_info.value.kind is ErrorKind.TRANSPORT
    assert "401" in str(exc_info.value)
    assert "Invalid API key" in str(exc_info.value)


def test_openweather_provider_http_error_non_json(provider, session):
    response = Mock()
    response.ok = False
    response.status_code = 502
    response.text = "<html>Bad Gateway</html>"
    response.json.side_effect = ValueError("No JSON object could be decoded")
    session.get.return_value = response

    with pytest.raises(WeatherProviderError) as exc_info:
        provider.get_current("London", "GB")

    assert exc_info.value.kind is ErrorKind.TRANSPORT
    assert "HTTP 502" in str(exc_info.value)


def test_openweather_provider_network_error(provider, session):
    """Test handling of network errors."""
    session.get.side_effect = requests.exceptions.ConnectionError("Connection refused")

    with pytest.raises(WeatherProviderError) as exc_info:
        provider.get_current("London", "GB")

    assert exc_info.value.kind is ErrorKind.TRANSPORT
    assert "Network error" in str(exc_info.value)


def test_openweather_provider_timeout(provider, session):
    session.get.side_effect = requests.exceptions.Timeout("Read timed out")

    with pytest.raises(WeatherProviderError) as exc_info:
        provider.get_current("London", "GB")

    assert exc_info.value.kind is ErrorKind.TRANSPORT


def test_openweather_provider_network_error_hides_api_key(provider, session):
    """Request URLs in transport errors carry the key; it must not leak."""
    session.get.side_effect = requests.exceptions.ConnectionError(
        "Max retries exceeded with url: /data/2.5/weather?q=London%2CGB&appid=test_key&units=metric"
    )

    with pytest.raises(WeatherProviderError) as exc_info:
        provider.get_current("London", "GB")

    assert "test_key" not in str(exc_info.value)
    assert "appid=***" in str(exc_info.value)


def test_openweather_provider_invalid_json(provider, session):
    response = Mock()
    response.ok = True
    response.status_code = 200
    response.json.side_effect = ValueError("Expecting value")
    session.get.return_value = response

    with pytest.raises(WeatherProviderError) as exc_info:
        provider.get_current("London", "GB")

    assert exc_info.value.kind is ErrorKind.MALFORMED_RESPONSE


def test_openweather_provider_not_an_object(provider, session):
    session.get.return_value = ok_response(["London"])

    with pytest.raises(WeatherProviderError) as exc_info:
        provider.get_current("London", "GB")

    assert exc_info.value.kind is ErrorKind.MALFORMED_RESPONSE


def test_openweather_provider_missing_main(provider, session, sample_openweather_response):
    """Test handling of missing main block."""
    del sample_openweather_response["main"]
    session.get.return_value = ok_response(sample_openweather_response)

    with pytest.raises(WeatherProviderError) as exc_info:
        provider.get_current("London", "GB")

    assert exc_info.value.kind is ErrorKind.MALFORMED_RESPONSE
    assert "missing 'main' block" in str(exc_info.value)


def test_openweather_provider_empty_weather(provider, session, sample_openweather_response):
    """An empty 'weather' array is a malformed response."""
    sample_openweather_response["weather"] = []
    session.get.return_value = ok_response(sample_openweather_response)

    with pytest.raises(WeatherProviderError) as exc_info:
        provider.get_current("London", "GB")

    assert exc_info.value.kind is ErrorKind.MALFORMED_RESPONSE
    assert "missing 'weather' array" in str(exc_info.value)


@pytest.mark.parametrize("mutate", [
    lambda data: data.pop("name"),
    lambda data: data.pop("sys"),
    lambda data: data["sys"].pop("country"),
    lambda data: data["main"].pop("temp"),
    lambda data: data["main"].update(temp="warm"),
    lambda data: data["main"].update(temp=True),
    lambda data: data["main"].update(temp=10 ** 400),
    lambda data: data["main"].update(temp=float("nan")),
    lambda data: data["weather"][0].pop("icon"),
    lambda data: data.update(weather=["04d"]),
])
def test_openweather_provider_missing_fields(provider, session, sample_openweather_response, mutate):
    mutate(sample_openweather_response)
    session.get.return_value = ok_response(sample_openweather_response)

    with pytest.raises(WeatherProviderError) as exc_info:
        provider.get_current("London", "GB")

    assert exc_info.value.kind is ErrorKind.MALFORMED_RESPONSE


def test_redact():
    assert redact("appid=secret&units=metric", "secret") == "appid=***&units=metric"
    assert redact("nothing to hide", "") == "nothing to hide"


def test_redact_percent_encoded_key():
    """requests puts the encoded key in the URL, so both forms are masked."""
    text = "url: /weather?q=London&appid=se%2Fcr%20et and se/cr et"

    redacted = redact(text, "se/cr et")

    assert redacted == "url: /weather?q=London&appid=*** and ***"
    assert redact("appid=se+cr+et", "se cr et") == "appid=***"


def test_openweather_provider_invalid_timeout(session, sample_openweather_response):
    """urllib3 raises ValueError for non-positive timeouts; that is a transport failure."""
    provider = OpenWeatherProvider(api_endpoint=ENDPOINT, api_key="test_key", session=session, timeout=0)
    session.get.side_effect = ValueError(
        "Attempted to set connect timeout to 0, but the timeout cannot be set to a value less than or equal to 0."
    )

    with pytest.raises(WeatherProviderError) as exc_info:
        provider.get_current("London", "GB")

    assert exc_info.value.kind is ErrorKind.TRANSPORT
