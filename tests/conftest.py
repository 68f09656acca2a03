"""
Pytest configuration and shared fixtures.
"""

import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from chuk_style_midi.harmony.builder import ChordProgressionBuilder
from chuk_style_midi.models.progression import ChordProgression
from chuk_style_midi.models.style import Instrument, Style, Voice
from chuk_style_midi.models.timeline import TimelineSegment


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_midi_path(temp_dir: Path) -> Path:
    """Path for a temporary MIDI file."""
    return temp_dir / "test.mid"


def style_data(time_signature: str = "4/4", tempo: int = 96) -> dict[str, Any]:
    """YAML content of a four-voice blues style."""
    return {
        "schema": "style/v1",
        "name": "test-blues",
        "description": "Test style",
        "tokens": {"tempo": {"default": tempo}, "time_signature": time_signature},
        "voices": [
            {
                "name": "drums",
                "kind": "drums",
                "role": "drums",
                "channel": 9,
                "instrument": {"program": 0, "bank_msb": 127, "bank_lsb": 0, "name": "Kit"},
            },
            {
                "name": "bass",
                "kind": "melodic",
                "role": "bass",
                "channel": 1,
                "instrument": {"program": 33, "name": "Fingered Bass"},
            },
            {
                "name": "piano",
                "kind": "melodic",
                "role": "chord",
                "channel": 2,
                "instrument": {"program": 0, "bank_msb": 0, "bank_lsb": 0},
            },
            {
                "name": "organ",
                "kind": "melodic",
                "role": "pad",
                "channel": 3,
                "instrument": 17,
            },
        ],
    }


@pytest.fixture
def write_style(temp_dir: Path) -> Callable[..., Path]:
    """Factory writing a style YAML file into the temp directory."""

    def _write(name: str = "style.yaml", data: dict[str, Any] | None = None, **kwargs: Any) -> Path:
        path = temp_dir / name
        path.write_text(yaml.safe_dump(data if data is not None else style_data(**kwargs)))
        return path

    return _write


@pytest.fixture
def style_path(write_style: Callable[..., Path]) -> Path:
    """A valid 4/4 style file."""
    return write_style()


@pytest.fixture
def blues_style() -> Style:
    """An in-memory 4/4 style with drums, bass, chord and pad voices."""
    return Style(
        name="test-blues",
        preferred_tempo=96,
        voices=(
            Voice(name="drums", channel=9, kind="drums", role="drums",
                  instrument=Instrument(program=0, bank_msb=127, bank_lsb=0)),
            Voice(name="bass", channel=1, role="bass", instrument=Instrument(program=33)),
            Voice(name="piano", channel=2, role="chord", instrument=Instrument(program=0)),
            Voice(name="organ", channel=3, role="pad", instrument=Instrument(program=17)),
        ),
    )


@pytest.fixture
def blues_progression() -> ChordProgression:
    """The 12-bar blues progression."""
    return ChordProgressionBuilder().build(12, "4/4")


@pytest.fixture
def make_segment(blues_style: Style) -> Callable[..., TimelineSegment]:
    """Factory for timeline segments carrying the blues style."""

    def _make(name: str = "A", start_bar: int = 0, bars: int = 12, style: Style | None = None):
        progression = ChordProgressionBuilder().build(max(bars, 12), "4/4")
        if bars < 12:
            progression = progression.slice(0, bars)
        return TimelineSegment(
            name=name,
            start_bar=start_bar,
            bars=bars,
            style=style or blues_style,
            progression=progression,
        )

    return _make
