"""Typed models shared by the note-processing pipeline."""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TripRecord(BaseModel):
    """Trip metadata extracted from a note's frontmatter."""

    model_config = ConfigDict(frozen=True)

    place: str = Field(description="Destination name from 'city-place', trimmed")
    arrival: date
    departure: date
    source_id: str = Field(description="Path of the originating note")


class Coordinates(BaseModel):
    """Geocoded location of a trip destination."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    timezone: str


class QueryMode(str, Enum):
    FORECAST = "forecast"
    HISTORICAL_PROXY = "historical_proxy"


class QueryWindow(BaseModel):
    """Date range to request and the label shown above the table."""

    model_config = ConfigDict(frozen=True)

    mode: QueryMode
    start: date
    end: date
    label: str

    @model_validator(mode="after")
    def validate_order(self) -> QueryWindow:
        if self.start > self.end:
            raise ValueError(f"window start {self.start} is after end {self.end}")
        return self


def celsius_to_fahrenheit(temp_c: float) -> float:
    """Convert Celsius to Fahrenheit."""
    return temp_c * 9.0 / 5.0 + 32.0


class DailyTemperature(BaseModel):
    """One day of highs/lows in both units."""

    model_config = ConfigDict(frozen=True)

    day: date
    high_c: float
    low_c: float
    high_f: float
    low_f: float

    @classmethod
    def from_celsius(cls, day: date, high_c: float, low_c: float) -> DailyTemperature:
        return cls(
            day=day,
            high_c=high_c,
            low_c=low_c,
            high_f=celsius_to_fahrenheit(high_c),
            low_f=celsius_to_fahrenheit(low_c),
        )


class Summary(BaseModel):
    """Headline figures rendered above the daily table."""

    max_label: str
    min_label: str
    note: str


class NoteOutcome(BaseModel):
    """Result of processing one note, success or failure."""

    source_id: str
    ok: bool
    window_label: str | None = None
    day_count: int = 0
    changed: bool = False
    error: str | None = None
    error_kind: str | None = None
