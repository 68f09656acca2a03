"""
Style models - the rhythm-style descriptor the pipeline renders.

A Style carries a meter, a preferred tempo and an ordered set of voices.
Each voice is one instrumental part with a preferred MIDI channel and a
default instrument. Styles are loaded once and read-only thereafter.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from chuk_style_midi.constants import (
    MAX_TEMPO,
    MIN_TEMPO,
    SUPPORTED_TIME_SIGNATURE,
    VoiceKind,
    VoiceRole,
)
from chuk_style_midi.core.rhythm import TimeSignature


def check_midi_text(value: str) -> str:
    """Names end up in MIDI meta events, which carry Latin-1 text."""
    try:
        value.encode("latin-1")
    except UnicodeEncodeError as e:
        raise ValueError(f"Name {value!r} contains characters a MIDI file cannot store") from e
    return value


class Instrument(BaseModel):
    """A General MIDI program with optional bank select."""

    program: int = Field(0, ge=0, le=127, description="Program number (0-127)")
    bank_msb: int | None = Field(None, ge=0, le=127, description="Bank select MSB (CC 0)")
    bank_lsb: int | None = Field(None, ge=0, le=127, description="Bank select LSB (CC 32)")
    name: str = Field("", description="Display name")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return self.name or f"program {self.program}"


class Voice(BaseModel):
    """
    One instrumental part within a Style.

    The preferred channel is a hint; the channel allocator may move the
    voice when the hint is already taken.
    """

    name: str = Field(..., min_length=1, description="Voice name")
    preferred_channel: int = Field(
        0, ge=0, le=15, alias="channel", description="Preferred MIDI channel (0-15)"
    )
    kind: VoiceKind = Field(VoiceKind.MELODIC, description="Drum or melodic voice")
    role: VoiceRole = Field(VoiceRole.CHORD, description="Musical function of the voice")
    instrument: Instrument = Field(default_factory=Instrument)

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Track names are written as Latin-1 meta text."""
        return check_midi_text(v)

    @property
    def is_drums(self) -> bool:
        """Return True for drum voices."""
        return self.kind == VoiceKind.DRUMS


class Style(BaseModel):
    """
    An immutable rhythm-style descriptor.

    Voices keep their declaration order; every ordered operation on a
    style (channel allocation, rendering) iterates them in that order.
    """

    schema_version: str = Field("style/v1", alias="schema")
    name: str = Field(..., description="Style name")
    description: str = Field("", description="Style description")
    time_signature: str = Field(
        default=SUPPORTED_TIME_SIGNATURE, description="Meter of the style"
    )
    preferred_tempo: int = Field(120, ge=MIN_TEMPO, le=MAX_TEMPO, description="Tempo in BPM")
    voices: tuple[Voice, ...] = Field(default_factory=tuple, description="Ordered voices")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """The style name becomes the sequence name in track 0."""
        return check_midi_text(v)

    @field_validator("voices")
    @classmethod
    def validate_unique_names(cls, v: tuple[Voice, ...]) -> tuple[Voice, ...]:
        """Voice names must be unique within a style."""
        seen: set[str] = set()
        for voice in v:
            if voice.name in seen:
                raise ValueError(f"Duplicate voice name: {voice.name}")
            seen.add(voice.name)
        return v

    def get_time_signature(self) -> TimeSignature:
        """Get parsed TimeSignature object."""
        return TimeSignature.parse(self.time_signature)

    def get_voice(self, name: str) -> Voice | None:
        """Get a voice by name."""
        for voice in self.voices:
            if voice.name == name:
                return voice
        return None

    def voice_names(self) -> list[str]:
        """Get voice names in declaration order."""
        return [voice.name for voice in self.voices]

    def to_yaml_dict(self) -> dict[str, Any]:
        """Convert to the YAML style descriptor format."""
        return {
            "schema": self.schema_version,
            "name": self.name,
            "description": self.description,
            "tokens": {
                "tempo": {"default": self.preferred_tempo},
                "time_signature": self.time_signature,
            },
            "voices": [
                {
                    "name": voice.name,
                    "kind": voice.kind.value,
                    "role": voice.role.value,
                    "channel": voice.preferred_channel,
                    "instrument": voice.instrument.model_dump(exclude_none=True),
                }
                for voice in self.voices
            ],
        }
