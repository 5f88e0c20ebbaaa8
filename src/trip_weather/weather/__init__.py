"""Weather provider integrations."""

from .base import WeatherProvider
from .open_meteo import OpenMeteoClient, build_url, parse_daily

__all__ = [
    "OpenMeteoClient",
    "WeatherProvider",
    "build_url",
    "parse_daily",
]
