"""
Sequence - the rendered, inspectable form of a timeline before MIDI encoding.

A Sequence holds every event the MIDI file will contain, keyed by absolute
tick position:
- Deterministic: same timeline + instrument map → same Sequence
- Serializable: JSON for inspection and golden-file testing
- Canonical: events sorted so that two equal renders compare equal

Schema version: sequence/v1
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any

from chuk_style_midi.constants import TICKS_PER_BEAT

# Current schema version
SCHEMA_VERSION = "sequence/v1"


@dataclass(frozen=True, order=True)
class SequenceNote:
    """
    A single note.

    Ordered by: (start_ticks, channel, pitch) for deterministic sorting.
    """

    start_ticks: int
    channel: int
    pitch: int
    duration_ticks: int
    velocity: int

    # Traceability
    source_voice: str | None = field(default=None, compare=False)
    source_segment: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate MIDI ranges."""
        if not 0 <= self.pitch <= 127:
            raise ValueError(f"Pitch must be 0-127, got {self.pitch}")
        if not 0 <= self.velocity <= 127:
            raise ValueError(f"Velocity must be 0-127, got {self.velocity}")
        if not 0 <= self.channel <= 15:
            raise ValueError(f"Channel must be 0-15, got {self.channel}")
        if self.start_ticks < 0:
            raise ValueError(f"Start ticks must be >= 0, got {self.start_ticks}")
        if self.duration_ticks < 0:
            raise ValueError(f"Duration ticks must be >= 0, got {self.duration_ticks}")

    @property
    def end_ticks(self) -> int:
        """Tick of the note-off."""
        return self.start_ticks + self.duration_ticks


@dataclass(frozen=True, order=True)
class ControlEvent:
    """
    A controller change.

    private marks controllers that only make sense inside the rendering
    context that produced them; the exportable pass removes them.
    """

    ticks: int
    channel: int
    controller: int
    value: int
    private: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if not 0 <= self.channel <= 15:
            raise ValueError(f"Channel must be 0-15, got {self.channel}")
        if not 0 <= self.controller <= 127:
            raise ValueError(f"Controller must be 0-127, got {self.controller}")
        if not 0 <= self.value <= 127:
            raise ValueError(f"Controller value must be 0-127, got {self.value}")


@dataclass(frozen=True, order=True)
class ChannelSetup:
    """Bank select and program change sent at the start of a channel."""

    channel: int
    program: int
    bank_msb: int | None = None
    bank_lsb: int | None = None


class MarkerKind(str, Enum):
    """What a marker annotates."""

    CHORD = "chord"
    SEGMENT = "segment"


@dataclass(frozen=True, order=True)
class Marker:
    """A chord symbol or segment name at an absolute position."""

    ticks: int
    kind: MarkerKind
    text: str


@dataclass(frozen=True)
class SequenceTimeSignature:
    """Time signature as written to the MIDI file."""

    numerator: int = 4
    denominator: int = 4


@dataclass
class Sequence:
    """
    The complete rendered sequence.

    Channel tracks are identified by MIDI channel; track_names gives the
    name each channel's track carries in the exported file.
    """

    schema: str = SCHEMA_VERSION
    name: str = ""
    tempo: int = 120
    time_signature: SequenceTimeSignature = field(default_factory=SequenceTimeSignature)
    ticks_per_beat: int = TICKS_PER_BEAT

    total_ticks: int = 0
    total_bars: int = 0

    notes: list[SequenceNote] = field(default_factory=list)
    controls: list[ControlEvent] = field(default_factory=list)
    setups: list[ChannelSetup] = field(default_factory=list)
    markers: list[Marker] = field(default_factory=list)

    # Channel → voice name (always known from the instrument map)
    voices: dict[int, str] = field(default_factory=dict)
    # Channel → track name written to the file
    track_names: dict[int, str] = field(default_factory=dict)

    normalized: bool = False

    def canonicalize(self) -> Sequence:
        """Return a copy with every event list in canonical order."""
        return replace(
            self,
            notes=sorted(self.notes),
            controls=sorted(self.controls),
            setups=sorted(self.setups),
            markers=sorted(self.markers),
            voices=dict(sorted(self.voices.items())),
            track_names=dict(sorted(self.track_names.items())),
        )

    def channels(self) -> list[int]:
        """All channels carrying any event or voice, ascending."""
        used = {n.channel for n in self.notes}
        used.update(c.channel for c in self.controls)
        used.update(s.channel for s in self.setups)
        used.update(self.voices)
        return sorted(used)

    def chord_markers(self) -> list[Marker]:
        """Chord markers in time order."""
        return sorted(m for m in self.markers if m.kind == MarkerKind.CHORD)

    def note_count(self) -> int:
        """Total number of notes."""
        return len(self.notes)

    def notes_by_channel(self) -> dict[int, list[SequenceNote]]:
        """Group notes by channel."""
        result: dict[int, list[SequenceNote]] = {}
        for note in sorted(self.notes):
            result.setdefault(note.channel, []).append(note)
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for JSON serialization (canonical)."""
        seq = self.canonicalize()
        return {
            "schema": seq.schema,
            "name": seq.name,
            "tempo": seq.tempo,
            "time_signature": asdict(seq.time_signature),
            "ticks_per_beat": seq.ticks_per_beat,
            "total_ticks": seq.total_ticks,
            "total_bars": seq.total_bars,
            "notes": [asdict(n) for n in seq.notes],
            "controls": [asdict(c) for c in seq.controls],
            "setups": [asdict(s) for s in seq.setups],
            "markers": [{"ticks": m.ticks, "kind": m.kind.value, "text": m.text} for m in seq.markers],
            "voices": {str(k): v for k, v in seq.voices.items()},
            "track_names": {str(k): v for k, v in seq.track_names.items()},
            "normalized": seq.normalized,
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def summary(self) -> dict[str, Any]:
        """Generate a summary for quick inspection and logging."""
        return {
            "name": self.name,
            "tempo": self.tempo,
            "total_bars": self.total_bars,
            "total_notes": self.note_count(),
            "channels": {
                self.voices.get(channel, str(channel)): len(notes)
                for channel, notes in self.notes_by_channel().items()
            },
            "chords": len(self.chord_markers()),
        }
