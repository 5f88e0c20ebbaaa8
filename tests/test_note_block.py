"""Weather block upsert tests: append, insert under heading, replace, idempotency."""

from __future__ import annotations

from pathlib import Path

import pytest

from trip_weather.exceptions import FileIOError, MalformedBlockError
from trip_weather.note_block import (
    BlockState,
    locate_block,
    update_note_file,
    upsert_weather_block,
)

NEW_BLOCK = "## Weather Forecast\n<!-- WEATHER:BEGIN -->\nNEW\n<!-- WEATHER:END -->\n"
OTHER_BLOCK = "## Weather Forecast\n<!-- WEATHER:BEGIN -->\nOTHER\n<!-- WEATHER:END -->\n"


def test_append_when_no_heading_preserves_content() -> None:
    original = "# Title\n\nBody\n"
    updated = upsert_weather_block(original, NEW_BLOCK)

    assert updated.startswith(original)
    assert updated == original + "\n\n" + NEW_BLOCK
    assert locate_block(original).state is BlockState.ABSENT


def test_insert_under_bare_heading() -> None:
    original = "Intro\n\n## Weather Forecast\n\n## Packing\n- socks\n"
    updated = upsert_weather_block(original, NEW_BLOCK)

    assert updated.count("## Weather Forecast") == 1
    assert updated.count("<!-- WEATHER:BEGIN -->") == 1
    assert updated.count("<!-- WEATHER:END -->") == 1
    assert "NEW" in updated
    assert updated.startswith("Intro\n\n## Weather Forecast\n<!-- WEATHER:BEGIN -->\nNEW\n")
    assert updated.endswith("<!-- WEATHER:END -->\n\n## Packing\n- socks\n")


def test_bare_heading_at_end_of_file_without_newline() -> None:
    updated = upsert_weather_block("Intro\n\n## Weather Forecast", NEW_BLOCK)
    assert updated == "Intro\n\n" + NEW_BLOCK.rstrip("\n")


def test_replace_existing_block() -> None:
    original = (
        "---\ncity-place: Rome\n---\n\n"
        "## Weather Forecast\n<!-- WEATHER:BEGIN -->\nOLD\n<!-- WEATHER:END -->\n\n"
        "## Notes\nkeep me\n"
    )
    updated = upsert_weather_block(original, NEW_BLOCK)

    assert "NEW" in updated
    assert "OLD" not in updated
    assert updated.endswith("<!-- WEATHER:END -->\n\n## Notes\nkeep me\n")
    assert updated.startswith("---\ncity-place: Rome\n---\n\n## Weather Forecast\n")


def test_replace_tolerates_whitespace_variants() -> None:
    original = (
        "##   Weather  Forecast  \n\n<!--  WEATHER:BEGIN -->\nOLD\n<!-- WEATHER:END  -->\ntail\n"
    )
    updated = upsert_weather_block(original, NEW_BLOCK)
    assert updated == NEW_BLOCK + "tail\n"


@pytest.mark.parametrize(
    "original",
    [
        "# Title\n\nBody\n",
        "Intro\n\n## Weather Forecast\n",
        "## Weather Forecast\n<!-- WEATHER:BEGIN -->\nOLD\n<!-- WEATHER:END -->\n",
        "",
    ],
)
def test_upsert_is_idempotent(original: str) -> None:
    once = upsert_weather_block(original, NEW_BLOCK)
    twice = upsert_weather_block(once, NEW_BLOCK)
    assert twice == once


def test_new_block_replaces_previous_block_without_accumulating() -> None:
    first = upsert_weather_block("# Trip\n", OTHER_BLOCK)
    second = upsert_weather_block(first, NEW_BLOCK)

    assert second == upsert_weather_block("# Trip\n", NEW_BLOCK)
    assert "OTHER" not in second


def test_unrelated_sections_with_similar_text_are_untouched() -> None:
    original = (
        "## Weather Forecast notes\nSee <!-- WEATHER:END --> docs.\n\n"
        "## Weather Forecast\n<!-- WEATHER:BEGIN -->\nOLD\n<!-- WEATHER:END -->\n"
    )
    updated = upsert_weather_block(original, NEW_BLOCK)

    assert updated.startswith("## Weather Forecast notes\nSee <!-- WEATHER:END --> docs.\n\n")
    assert "OLD" not in updated


def test_begin_without_end_is_malformed() -> None:
    original = "## Weather Forecast\n<!-- WEATHER:BEGIN -->\nhalf written\n\n## Packing\n"
    with pytest.raises(MalformedBlockError, match="no matching"):
        upsert_weather_block(original, NEW_BLOCK)


def test_end_marker_in_bare_section_is_malformed() -> None:
    original = "## Weather Forecast\nstale text\n<!-- WEATHER:END -->\n"
    with pytest.raises(MalformedBlockError, match="not directly under"):
        upsert_weather_block(original, NEW_BLOCK)


def test_nested_begin_is_malformed() -> None:
    original = (
        "## Weather Forecast\n<!-- WEATHER:BEGIN -->\n<!-- WEATHER:BEGIN -->\n"
        "<!-- WEATHER:END -->\n"
    )
    with pytest.raises(MalformedBlockError, match="nested"):
        upsert_weather_block(original, NEW_BLOCK)


def test_replace_block_whose_body_contains_a_heading() -> None:
    original = (
        "## Weather Forecast\n<!-- WEATHER:BEGIN -->\nOLD\n### my aside\nmore\n"
        "<!-- WEATHER:END -->\n\n## Notes\nkeep me\n"
    )

    updated = upsert_weather_block(original, NEW_BLOCK)

    assert updated == NEW_BLOCK.rstrip("\n") + "\n\n## Notes\nkeep me\n"
    assert upsert_weather_block(updated, NEW_BLOCK) == updated


@pytest.mark.parametrize(
    "block",
    [
        "just text\n",
        "## Weather Forecast\nno markers\n",
        NEW_BLOCK + "trailing text\n",
    ],
)
def test_invalid_replacement_block_is_rejected(block: str) -> None:
    with pytest.raises(MalformedBlockError, match="replacement block"):
        upsert_weather_block("# Title\n", block)


def test_update_note_file_writes_once(tmp_path: Path) -> None:
    note = tmp_path / "trip.md"
    note.write_text("# Trip\n", encoding="utf-8")

    assert update_note_file(note, NEW_BLOCK) is True
    written = note.read_text(encoding="utf-8")
    assert written == "# Trip\n\n\n" + NEW_BLOCK
    assert update_note_file(note, NEW_BLOCK) is False
    assert note.read_text(encoding="utf-8") == written


def test_update_note_file_dry_run_leaves_file(tmp_path: Path) -> None:
    note = tmp_path / "trip.md"
    note.write_text("# Trip\n", encoding="utf-8")

    assert update_note_file(note, NEW_BLOCK, dry_run=True) is True
    assert note.read_text(encoding="utf-8") == "# Trip\n"


def test_update_note_file_malformed_leaves_file(tmp_path: Path) -> None:
    note = tmp_path / "trip.md"
    original = "## Weather Forecast\n<!-- WEATHER:BEGIN -->\norphan\n"
    note.write_text(original, encoding="utf-8")

    with pytest.raises(MalformedBlockError):
        update_note_file(note, NEW_BLOCK)
    assert note.read_text(encoding="utf-8") == original


def test_update_note_file_missing_raises(tmp_path: Path) -> None:
    with pytest.raises(FileIOError):
        update_note_file(tmp_path / "missing.md", NEW_BLOCK)
