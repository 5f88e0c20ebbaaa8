"""Trip metadata extraction from a note's YAML frontmatter."""

from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from .exceptions import (
    FileIOError,
    InvalidDateError,
    MalformedHeaderError,
    MissingFieldError,
    MissingHeaderError,
)
from .models import TripRecord

PLACE_KEY = "city-place"
ARRIVAL_KEY = "arrival"
DEPARTURE_KEY = "departure"

_HEADER_RE = re.compile(r"\A\s*---[ \t]*\r?\n(.*?)^---[ \t]*\r?$", re.DOTALL | re.MULTILINE)


class _FrontmatterLoader(yaml.SafeLoader):
    """SafeLoader that keeps YYYY-MM-DD scalars as plain strings."""


_FrontmatterLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag != "tag:yaml.org,2002:timestamp"
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def extract_trip(text: str, source_id: str) -> TripRecord:
    """Parse the frontmatter of ``text`` into a TripRecord."""
    header = _parse_header(text, source_id)

    place = _required_str(header, PLACE_KEY).strip()
    if not place:
        raise MissingFieldError(PLACE_KEY)

    arrival = _parse_date(ARRIVAL_KEY, _required_str(header, ARRIVAL_KEY))
    departure = _parse_date(DEPARTURE_KEY, _required_str(header, DEPARTURE_KEY))
    return TripRecord(place=place, arrival=arrival, departure=departure, source_id=source_id)


def load_trip(path: Path) -> TripRecord:
    """Read a note from disk and extract its trip metadata."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileIOError(path, str(exc)) from exc
    return extract_trip(text, str(path))


def has_frontmatter(text: str) -> bool:
    return _HEADER_RE.match(text) is not None


def _parse_header(text: str, source_id: str) -> dict[str, Any]:
    match = _HEADER_RE.match(text)
    if match is None:
        raise MissingHeaderError(source_id)
    try:
        parsed = yaml.load(match.group(1), Loader=_FrontmatterLoader)
    except yaml.YAMLError as exc:
        raise MalformedHeaderError(source_id, str(exc)) from exc
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise MalformedHeaderError(
            source_id, f"expected a mapping, got {type(parsed).__name__}"
        )
    return parsed


def _required_str(header: dict[str, Any], key: str) -> str:
    value = header.get(key)
    if not isinstance(value, str):
        raise MissingFieldError(key)
    return value


def _parse_date(field: str, raw: str) -> date:
    try:
        return datetime.strptime(raw.strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise InvalidDateError(field, raw) from exc
