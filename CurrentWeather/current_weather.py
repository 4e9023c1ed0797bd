"""Current weather page for the configured (or given) city."""
import argparse
import json
import logging
import sys
from typing import List, Optional

import requests

from settings import SettingsError, WeatherSettings, load_settings, parse_timeout
from weather_data import WeatherResult
from weather_service import WeatherService


def timeout_arg(value: str) -> float:
    try:
        return parse_timeout(value, "--timeout")
    except SettingsError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("current-weather", description="Show current weather for a city")
    parser.add_argument("city", nargs="?", default="", help="City name (defaults to WEATHER_CITY_NAME)")
    parser.add_argument("country", nargs="?", default="", help="Two letter country code")
    parser.add_argument("--format", choices=["text", "json"], default="text")
    parser.add_argument("--timeout", type=timeout_arg, default=None, help="HTTP timeout in seconds")
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def build_weather_service(
    settings: WeatherSettings,
    session: Optional[requests.Session] = None
) -> WeatherService:
    service = WeatherService(settings, session=session)
    logging.info("Weather service ready (endpoint=%s timeout=%ss)", settings.api_endpoint, settings.timeout)
    return service


def render_text(result: WeatherResult) -> str:
    if not result.ok:
        return result.message

    lines = [
        f"{result.city_name}, {result.country_code}",
        f"{result.current_temperature:+d}°C  icon {result.icon_code}",
    ]
    if result.flag_image_url:
        lines.append(f"Flag {result.flag_image_url}")
    lines.append(result.message)
    return "\n".join(lines)


def render_json(result: WeatherResult) -> str:
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=2)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    try:
        settings = load_settings(args.env_file)
    except SettingsError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc
    if args.timeout is not None:
        settings.timeout = args.timeout

    missing = settings.missing_fields()
    if missing:
        logging.warning("Missing configuration: %s", ", ".join(missing))

    service = build_weather_service(settings)
    # Page arguments override the configured city only when a city is given
    if args.city:
        service.set_query_parameters(args.city, args.country)

    result = service.fetch_current_weather()
    render = render_json if args.format == "json" else render_text
    print(render(result))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
