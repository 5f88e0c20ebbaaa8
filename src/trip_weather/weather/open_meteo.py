"""Open-Meteo geocoding, forecast and ERA5 archive client."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Mapping
from datetime import date, datetime
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from ..config import Settings
from ..exceptions import (
    DecodeError,
    GeocodeNotFoundError,
    HttpStatusError,
    MismatchedLengthsError,
    NetworkError,
)
from ..models import Coordinates, DailyTemperature, QueryMode, QueryWindow
from .base import WeatherProvider

DAILY_VARIABLES = "temperature_2m_max,temperature_2m_min"


def build_url(base: str, path: str, params: Mapping[str, Any]) -> str:
    """Join base and path and append percent-encoded query parameters."""
    query = urlencode(
        {key: str(value) for key, value in params.items()},
        quote_via=quote,
        safe=",",
    )
    return f"{base.rstrip('/')}/{path.lstrip('/')}?{query}"


def parse_daily(daily: Mapping[str, Any], source_url: str = "<daily>") -> list[DailyTemperature]:
    """Convert Open-Meteo ``daily`` arrays into DailyTemperature records.

    All-empty arrays mean "no data" and yield an empty list. Arrays of
    different lengths are malformed and raise MismatchedLengthsError.
    """
    times = _as_list(daily, "time", source_url)
    highs = _as_list(daily, "temperature_2m_max", source_url)
    lows = _as_list(daily, "temperature_2m_min", source_url)

    if not times and not highs and not lows:
        return []
    if not (len(times) == len(highs) == len(lows)):
        raise MismatchedLengthsError(len(times), len(highs), len(lows))

    out: list[DailyTemperature] = []
    for raw_day, high, low in zip(times, highs, lows):
        out.append(
            DailyTemperature.from_celsius(
                _parse_day(raw_day, source_url),
                _as_temperature(high, "temperature_2m_max", source_url),
                _as_temperature(low, "temperature_2m_min", source_url),
            )
        )
    return out


def _as_list(daily: Mapping[str, Any], key: str, source_url: str) -> list[Any]:
    value = daily.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeError(source_url, f"'daily.{key}' is not a list")
    return value


def _parse_day(value: Any, source_url: str) -> date:
    if not isinstance(value, str):
        raise DecodeError(source_url, f"invalid date {value!r} in 'daily.time'")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise DecodeError(source_url, f"invalid date {value!r} in 'daily.time'") from exc


def _as_temperature(value: Any, key: str, source_url: str) -> float:
    # bool is an int subclass; JSON true/false is never a temperature.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(source_url, f"non-numeric value {value!r} in 'daily.{key}'")
    if not math.isfinite(value):
        raise DecodeError(source_url, f"non-finite value {value!r} in 'daily.{key}'")
    return float(value)


class OpenMeteoClient(WeatherProvider):
    """Fetches geocoding results and daily temperatures from Open-Meteo."""

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        sleep: Callable[[float], None] = time.sleep,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self._sleep = sleep
        self._max_attempts = settings.weather_max_attempts
        self._initial_backoff_ms = settings.weather_initial_backoff_ms
        self._client = httpx.Client(
            timeout=settings.weather_timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> OpenMeteoClient:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def geocode(self, place: str) -> Coordinates:
        """Resolve ``place`` to the top match within the configured country."""
        url = build_url(
            str(self.settings.geocode_base_url),
            "search",
            {"name": place, "country": self.settings.geocode_country, "count": 1},
        )
        payload = self._request_json(url)

        results = payload.get("results")
        if not isinstance(results, list) or not results:
            raise GeocodeNotFoundError(place)
        first = results[0]
        if not isinstance(first, dict):
            raise DecodeError(url, "geocoding result is not an object")

        latitude = first.get("latitude")
        longitude = first.get("longitude")
        if not _is_number(latitude) or not _is_number(longitude):
            raise DecodeError(url, "geocoding result missing latitude/longitude")

        timezone = first.get("timezone")
        if not isinstance(timezone, str) or not timezone.strip():
            timezone = self.settings.fallback_timezone
        return Coordinates(latitude=float(latitude), longitude=float(longitude), timezone=timezone)

    def fetch_daily(self, coords: Coordinates, window: QueryWindow) -> list[DailyTemperature]:
        """Fetch live forecast or archive data depending on the window mode."""
        if window.mode is QueryMode.FORECAST:
            base, path = str(self.settings.forecast_base_url), "forecast"
        else:
            base, path = str(self.settings.archive_base_url), "era5"

        url = build_url(
            base,
            path,
            {
                "latitude": coords.latitude,
                "longitude": coords.longitude,
                "daily": DAILY_VARIABLES,
                "start_date": window.start.isoformat(),
                "end_date": window.end.isoformat(),
                "timezone": coords.timezone or self.settings.fallback_timezone,
            },
        )
        payload = self._request_json(url)

        daily = payload.get("daily")
        if not isinstance(daily, dict):
            raise DecodeError(url, "no daily data")
        return parse_daily(daily, source_url=url)

    def _request_json(self, url: str) -> dict[str, Any]:
        """GET ``url`` with bounded retries and exponential backoff.

        Transport failures and non-2xx statuses are retried; the delay
        doubles after each failed attempt and is skipped after the last one.
        Decoding failures are never retried.
        """
        delay_ms = self._initial_backoff_ms
        for attempt in range(1, self._max_attempts + 1):
            try:
                response = self._client.get(url)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if attempt == self._max_attempts:
                    raise HttpStatusError(url, status) from exc
                self.logger.warning(
                    "Open-Meteo request failed (HTTP %d); retrying attempt=%d/%d delay_ms=%d",
                    status, attempt, self._max_attempts, delay_ms,
                )
            except httpx.HTTPError as exc:
                if attempt == self._max_attempts:
                    raise NetworkError(url, type(exc).__name__) from exc
                self.logger.warning(
                    "Open-Meteo request failed (%s); retrying attempt=%d/%d delay_ms=%d",
                    type(exc).__name__, attempt, self._max_attempts, delay_ms,
                )
            else:
                return self._decode(response, url)

            self._sleep(delay_ms / 1000.0)
            delay_ms *= 2

        raise NetworkError(url, "no attempts made")

    @staticmethod
    def _decode(response: httpx.Response, url: str) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(url, "response was not valid JSON") from exc
        if not isinstance(payload, dict):
            raise DecodeError(url, f"unexpected payload type {type(payload).__name__}")
        return payload


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
