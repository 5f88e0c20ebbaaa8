"""Per-note pipeline: frontmatter -> window -> fetch -> render -> rewrite."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from pathlib import Path

from .aggregate import render_block
from .config import Settings
from .exceptions import FileIOError, TripWeatherError
from .frontmatter import has_frontmatter, load_trip
from .models import NoteOutcome
from .note_block import update_note_file
from .weather.base import WeatherProvider
from .window import select_window


def discover_notes(
    root: Path,
    require_frontmatter: bool = True,
    logger: logging.Logger | None = None,
) -> list[Path]:
    """Return Markdown notes under ``root`` in sorted order.

    With ``require_frontmatter`` only notes that open with a ``---`` header
    are returned; each skipped note is logged. Unreadable notes are kept so
    that processing reports them.
    """
    logger = logger or logging.getLogger("trip_weather")
    if not root.is_dir():
        raise FileIOError(root, "not a directory")

    notes: list[Path] = []
    for path in sorted(root.rglob("*.md")):
        if not path.is_file():
            continue
        if require_frontmatter:
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                notes.append(path)
                continue
            if not has_frontmatter(text):
                logger.info(
                    "Skipping %s: no YAML frontmatter", path, extra={"note": str(path)}
                )
                continue
        notes.append(path)
    return notes


class NoteProcessor:
    """Runs notes through the pipeline one at a time."""

    def __init__(
        self,
        settings: Settings,
        provider: WeatherProvider,
        logger: logging.Logger,
        today: date | None = None,
        dry_run: bool = False,
    ) -> None:
        self.settings = settings
        self.provider = provider
        self.logger = logger
        self.dry_run = dry_run
        self._today = today

    @property
    def today(self) -> date:
        return self._today or date.today()

    def process(self, path: Path) -> NoteOutcome:
        """Update one note. Failures are returned, never raised.

        The note is written only after every earlier step succeeded, so a
        failed note is left untouched.
        """
        source_id = str(path)
        try:
            trip = load_trip(path)
            window = select_window(
                trip.arrival,
                trip.departure,
                today=self.today,
                horizon_days=self.settings.forecast_horizon_days,
            )
            coords = self.provider.geocode(trip.place)
            days = self.provider.fetch_daily(coords, window)
            block = render_block(window, days)
            changed = update_note_file(path, block, dry_run=self.dry_run)
        except TripWeatherError as exc:
            self.logger.error(
                "Skipping %s: %s", source_id, exc, extra={"note": source_id}
            )
            return NoteOutcome(
                source_id=source_id,
                ok=False,
                error=str(exc),
                error_kind=exc.kind,
            )

        self.logger.info(
            "Updated weather: %s (%s, %d days%s)",
            source_id,
            window.label,
            len(days),
            "" if changed else ", unchanged",
            extra={"note": source_id},
        )
        return NoteOutcome(
            source_id=source_id,
            ok=True,
            window_label=window.label,
            day_count=len(days),
            changed=changed,
        )

    def run(self, paths: Iterable[Path]) -> list[NoteOutcome]:
        """Process every note in order, continuing past failures."""
        return [self.process(path) for path in paths]


def outcomes_exit_code(outcomes: Sequence[NoteOutcome]) -> int:
    return 1 if any(not outcome.ok for outcome in outcomes) else 0
