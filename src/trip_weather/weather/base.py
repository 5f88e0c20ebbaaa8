"""Provider-agnostic weather interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import Coordinates, DailyTemperature, QueryWindow


class WeatherProvider(ABC):
    """Base contract for weather providers used by the note pipeline."""

    @abstractmethod
    def geocode(self, place: str) -> Coordinates:
        """Resolve a place name to coordinates and timezone."""

    @abstractmethod
    def fetch_daily(self, coords: Coordinates, window: QueryWindow) -> list[DailyTemperature]:
        """Fetch daily highs/lows for the window, in chronological order."""

    @abstractmethod
    def close(self) -> None:
        """Release provider resources."""
