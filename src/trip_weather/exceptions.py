"""Application exception classes."""

from __future__ import annotations

from datetime import date
from pathlib import Path


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class JournalError(Exception):
    """Raised when writing to journal files fails."""


class TripWeatherError(Exception):
    """Base class for failures that skip a single note."""

    kind = "error"


class MissingHeaderError(TripWeatherError):
    """Raised when a note has no delimited frontmatter block."""

    kind = "missing_header"

    def __init__(self, source_id: str, message: str | None = None) -> None:
        super().__init__(message or f"no YAML frontmatter in {source_id}")
        self.source_id = source_id


class MalformedHeaderError(MissingHeaderError):
    """Raised when the frontmatter exists but is not a YAML mapping."""

    kind = "malformed_header"

    def __init__(self, source_id: str, detail: str) -> None:
        super().__init__(source_id, f"unreadable YAML frontmatter in {source_id}: {detail}")
        self.detail = detail


class MissingFieldError(TripWeatherError):
    kind = "missing_field"

    def __init__(self, field: str) -> None:
        super().__init__(f"missing '{field}'")
        self.field = field


class InvalidDateError(TripWeatherError):
    kind = "invalid_date"

    def __init__(self, field: str, raw: str) -> None:
        super().__init__(f"{field} must be YYYY-MM-DD, got {raw!r}")
        self.field = field
        self.raw = raw


class InvalidProxyDateError(TripWeatherError):
    """Raised when a date has no counterpart one calendar year earlier."""

    kind = "invalid_proxy_date"

    def __init__(self, field: str, day: date) -> None:
        super().__init__(
            f"bad {field} date: {day.isoformat()} does not exist in {day.year - 1}"
        )
        self.field = field
        self.day = day


class EmptyWindowError(TripWeatherError):
    """Raised when clamping leaves no days to forecast (trip already over)."""

    kind = "empty_window"

    def __init__(self, start: date, end: date, today: date) -> None:
        super().__init__(
            f"trip {start.isoformat()} → {end.isoformat()} has no days left "
            f"to forecast as of {today.isoformat()}"
        )
        self.start = start
        self.end = end
        self.today = today


class GeocodeNotFoundError(TripWeatherError):
    kind = "geocode_not_found"

    def __init__(self, place: str) -> None:
        super().__init__(f"geocoding failed for city: {place}")
        self.place = place


class NetworkError(TripWeatherError):
    kind = "network"

    def __init__(self, url: str, detail: str = "") -> None:
        message = f"network error: {url}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.url = url


class HttpStatusError(TripWeatherError):
    kind = "http_status"

    def __init__(self, url: str, status: int) -> None:
        super().__init__(f"request failed with status {status}: {url}")
        self.url = url
        self.status = status


class DecodeError(TripWeatherError):
    """Raised when a successful response cannot be interpreted."""

    kind = "decode"

    def __init__(self, url: str, detail: str) -> None:
        super().__init__(f"failed to parse JSON from {url}: {detail}")
        self.url = url
        self.detail = detail


class MismatchedLengthsError(TripWeatherError):
    kind = "mismatched_lengths"

    def __init__(self, time: int, high: int, low: int) -> None:
        super().__init__(
            f"daily arrays have mismatched lengths: time={time}, tmax={high}, tmin={low}"
        )
        self.time = time
        self.high = high
        self.low = low


class MalformedBlockError(TripWeatherError):
    """Raised when weather block markers are incomplete or out of order."""

    kind = "malformed_block"


class FileIOError(TripWeatherError):
    kind = "file_io"

    def __init__(self, path: Path | str, detail: str) -> None:
        super().__init__(f"failed to access {path}: {detail}")
        self.path = str(path)
        self.detail = detail
