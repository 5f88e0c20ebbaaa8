"""Locate, insert and replace the machine-owned weather block in a note.

The block is a ``## Weather Forecast`` heading immediately followed by a
``<!-- WEATHER:BEGIN -->`` / ``<!-- WEATHER:END -->`` marker pair. A note is
in exactly one of three states: it holds a full block, a bare heading
without markers, or neither. ``upsert_weather_block`` handles each state
explicitly so that re-applying the same block is a no-op.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .exceptions import FileIOError, MalformedBlockError

HEADING = "## Weather Forecast"
BEGIN_MARKER = "<!-- WEATHER:BEGIN -->"
END_MARKER = "<!-- WEATHER:END -->"

_HEADING_RE = re.compile(r"^##[ \t]*Weather[ \t]+Forecast[ \t]*\r?$", re.MULTILINE)
_BEGIN_AFTER_HEADING_RE = re.compile(r"\s*<!--\s*WEATHER:BEGIN\s*-->")
_BEGIN_RE = re.compile(r"<!--\s*WEATHER:BEGIN\s*-->")
_END_RE = re.compile(r"<!--\s*WEATHER:END\s*-->")
_ANY_HEADING_RE = re.compile(r"^#{1,6}[ \t]", re.MULTILINE)


class BlockState(Enum):
    FULL_BLOCK = "full_block"
    BARE_HEADING = "bare_heading"
    ABSENT = "absent"


@dataclass(frozen=True)
class BlockLocation:
    """Where the weather block sits in a document.

    For FULL_BLOCK, ``start``/``end`` span the heading through the end
    marker. For BARE_HEADING they span the heading line (without its line
    break). For ABSENT both are the document length.
    """

    state: BlockState
    start: int
    end: int


def locate_block(text: str) -> BlockLocation:
    """Classify ``text`` and return the span of its weather block.

    The first complete block wins over any bare heading. Raises
    MalformedBlockError when a weather heading is followed by a begin marker
    with no end marker, or carries markers that are not directly under it.
    """
    first_bare: BlockLocation | None = None
    for heading in _HEADING_RE.finditer(text):
        begin = _BEGIN_AFTER_HEADING_RE.match(text, heading.end())

        if begin is not None:
            # The block body may hold its own headings; END closes it, not the next heading.
            end = _END_RE.search(text, begin.end())
            if end is None:
                raise MalformedBlockError(
                    f"'{BEGIN_MARKER}' at offset {begin.end()} has no matching '{END_MARKER}'"
                )
            if _BEGIN_RE.search(text, begin.end(), end.start()) is not None:
                raise MalformedBlockError(
                    f"nested '{BEGIN_MARKER}' before '{END_MARKER}' at offset {end.start()}"
                )
            return BlockLocation(BlockState.FULL_BLOCK, heading.start(), end.end())

        section_end = _next_heading_start(text, heading.end())
        stray = _BEGIN_RE.search(text, heading.end(), section_end) or _END_RE.search(
            text, heading.end(), section_end
        )
        if stray is not None:
            raise MalformedBlockError(
                f"weather marker at offset {stray.start()} is not directly under '{HEADING}'"
            )
        if first_bare is None:
            heading_end = heading.end()
            if text[heading_end - 1 : heading_end] == "\r":
                heading_end -= 1
            first_bare = BlockLocation(BlockState.BARE_HEADING, heading.start(), heading_end)

    if first_bare is not None:
        return first_bare
    return BlockLocation(BlockState.ABSENT, len(text), len(text))


def upsert_weather_block(text: str, block: str) -> str:
    """Insert or replace the weather block, returning the new document.

    ``block`` is the fully rendered heading, markers and body. Applying the
    same block twice gives the same result as applying it once.
    """
    core = _validated_core(block)
    location = locate_block(text)

    if location.state is BlockState.BARE_HEADING:
        text = (
            text[: location.end]
            + f"\n{BEGIN_MARKER}\n{END_MARKER}"
            + text[location.end :]
        )
        location = locate_block(text)

    if location.state is BlockState.FULL_BLOCK:
        return text[: location.start] + core + text[location.end :]

    return text + "\n\n" + block


def update_note_file(path: Path, block: str, dry_run: bool = False) -> bool:
    """Rewrite the weather block of the note at ``path``.

    The new document is built in memory before anything is written. Returns
    False when the note already held exactly this block. With ``dry_run``
    the change is computed and reported but not written.
    """
    try:
        original = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileIOError(path, str(exc)) from exc

    updated = upsert_weather_block(original, block)
    if updated == original:
        return False
    if dry_run:
        return True

    try:
        path.write_text(updated, encoding="utf-8")
    except OSError as exc:
        raise FileIOError(path, str(exc)) from exc
    return True


def _validated_core(block: str) -> str:
    """Strip trailing line breaks and check the block is one full block."""
    core = block.rstrip("\r\n")
    location = locate_block(core)
    if (
        location.state is not BlockState.FULL_BLOCK
        or location.start != 0
        or location.end != len(core)
        or len(_HEADING_RE.findall(core)) != 1
    ):
        raise MalformedBlockError(
            f"replacement block must be exactly '{HEADING}', '{BEGIN_MARKER}', "
            f"body and '{END_MARKER}'"
        )
    return core


def _next_heading_start(text: str, pos: int) -> int:
    match = _ANY_HEADING_RE.search(text, pos)
    return match.start() if match else len(text)
