"""Summaries and Markdown rendering for daily temperature series."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from .models import DailyTemperature, QueryWindow, Summary, celsius_to_fahrenheit
from .note_block import BEGIN_MARKER, END_MARKER, HEADING

NO_DATA_LABEL = "n/a"
NO_DATA_NOTE = "_No data returned_"
NO_ROWS = "_(no rows)_"

TABLE_HEADER = (
    "| Date | High (°F) | Low (°F) | High (°C) | Low (°C) |\n"
    "|---|---:|---:|---:|---:|\n"
)

__all__ = [
    "celsius_to_fahrenheit",
    "render_block",
    "render_table",
    "round_half_up",
    "summarize",
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def summarize(days: Sequence[DailyTemperature]) -> Summary:
    """Compute headline max/min labels and a one-line range note."""
    if not days:
        return Summary(max_label=NO_DATA_LABEL, min_label=NO_DATA_LABEL, note=NO_DATA_NOTE)

    highs = [day.high_f for day in days]
    lows = [day.low_f for day in days]
    note = (
        f"_{len(days)} days • "
        f"High range {round_half_up(min(highs))}° → {round_half_up(max(highs))}° • "
        f"Low range {round_half_up(min(lows))}° → {round_half_up(max(lows))}°_"
    )
    return Summary(
        max_label=f"{round_half_up(max(highs))}°F",
        min_label=f"{round_half_up(min(lows))}°F",
        note=note,
    )


def render_table(days: Sequence[DailyTemperature]) -> str:
    """Render a Markdown table with one row per day."""
    if not days:
        return NO_ROWS

    rows = [
        f"| {day.day.isoformat()} | {round_half_up(day.high_f)} | {round_half_up(day.low_f)} "
        f"| {round_half_up(day.high_c)} | {round_half_up(day.low_c)} |\n"
        for day in days
    ]
    return TABLE_HEADER + "".join(rows)


def render_block(window: QueryWindow, days: Sequence[DailyTemperature]) -> str:
    """Render the complete weather block, heading through end marker."""
    summary = summarize(days)
    table = render_table(days)
    return (
        f"{HEADING}\n"
        f"{BEGIN_MARKER}\n"
        f"**{window.label}**  \n"
        f"**Range**: {summary.max_label} / {summary.min_label}  \n"
        f"\n"
        f"{summary.note}\n"
        f"\n"
        f"{table}\n"
        f"{END_MARKER}\n"
    )
