"""CLI: scan a notes directory and refresh each trip's weather block."""

from __future__ import annotations

import argparse
import sys
import uuid
from collections.abc import Sequence
from datetime import date, datetime
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .config import load_settings
from .exceptions import ConfigError, FileIOError, JournalError
from .journal import JournalWriter
from .log_setup import setup_logger
from .models import NoteOutcome
from .pipeline import NoteProcessor, discover_notes, outcomes_exit_code
from .weather.open_meteo import OpenMeteoClient


def _parse_date_arg(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Update the '## Weather Forecast' section of travel notes from Open-Meteo."
    )
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Directory to scan for Markdown notes (default: current directory).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and render weather blocks without writing notes.",
    )
    parser.add_argument(
        "--today",
        type=_parse_date_arg,
        default=None,
        help="Reference date (YYYY-MM-DD) used for forecast-horizon decisions.",
    )
    return parser.parse_args(argv)


def _print_outcomes(console: Console, outcomes: Sequence[NoteOutcome], dry_run: bool) -> None:
    failed = sum(1 for outcome in outcomes if not outcome.ok)
    console.print(
        f"Processed {len(outcomes)} notes | succeeded: {len(outcomes) - failed} | failed: {failed}"
        + (" | dry run" if dry_run else "")
    )

    table = Table(title="Weather Forecast Notes")
    table.add_column("Note", overflow="fold")
    table.add_column("Status")
    table.add_column("Window", overflow="fold")
    table.add_column("Days")
    table.add_column("Error", overflow="fold")

    for outcome in outcomes:
        if not outcome.ok:
            status = "[red]failed[/red]"
        elif outcome.changed:
            status = "[green]updated[/green]"
        else:
            status = "unchanged"
        table.add_row(
            outcome.source_id,
            status,
            outcome.window_label or "-",
            str(outcome.day_count) if outcome.ok else "-",
            outcome.error or "-",
        )
    console.print(table)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the note update workflow."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()
    session_id = uuid.uuid4().hex[:12]
    journal: JournalWriter | None = None

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2

    if settings.journal_enabled:
        try:
            journal = JournalWriter(journal_dir=settings.journal_dir, session_id=session_id)
            journal.write_event(
                event_type="run_startup",
                payload={**settings.safe_summary(), "root": args.root, "dry_run": args.dry_run},
                metadata={"session_id": session_id},
            )
        except JournalError as exc:
            logger.error("Failed to initialize journal: %s", exc)
            return 3

    exit_code = 0
    try:
        notes = discover_notes(Path(args.root), logger=logger)
        if not notes:
            console.print("No packing notes with city/arrival/departure found.")
            return exit_code

        with OpenMeteoClient(settings=settings, logger=logger) as provider:
            processor = NoteProcessor(
                settings=settings,
                provider=provider,
                logger=logger,
                today=args.today,
                dry_run=args.dry_run,
            )
            outcomes: list[NoteOutcome] = []
            for path in notes:
                outcome = processor.process(path)
                outcomes.append(outcome)
                if journal is not None:
                    if not outcome.ok:
                        event_type = "note_failed"
                    elif args.dry_run:
                        event_type = "note_previewed"
                    else:
                        event_type = "note_updated"
                    journal.write_event(
                        event_type,
                        payload={**outcome.model_dump(mode="json"), "dry_run": args.dry_run},
                        metadata={"session_id": session_id},
                    )

        _print_outcomes(console, outcomes, dry_run=args.dry_run)
        exit_code = outcomes_exit_code(outcomes)
        if exit_code:
            logger.error(
                "One or more notes could not be updated due to errors. "
                "Please check the log above."
            )
    except FileIOError as exc:
        exit_code = 1
        logger.error("Failed scanning notes: %s", exc)
    except JournalError as exc:
        exit_code = 3
        logger.error("Journal write failed: %s", exc)
    finally:
        if journal is not None:
            try:
                journal.write_event(
                    "run_shutdown",
                    payload={"exit_code": exit_code},
                    metadata={"session_id": session_id},
                )
            except JournalError:
                logger.error("Failed to write run_shutdown event to journal.")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
