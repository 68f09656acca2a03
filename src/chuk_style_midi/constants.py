"""
Constants and enums for the export pipeline.

No magic strings - use enums for constrained values.
"""

from enum import Enum, IntEnum

# MIDI resolution used for every rendered sequence
TICKS_PER_BEAT = 480

# Number of MIDI channels (0-15)
MIDI_CHANNEL_COUNT = 16

# The only meter the pipeline supports
SUPPORTED_TIME_SIGNATURE = "4/4"

# Span of the harmonic template in bars
MIN_BARS = 12

DEFAULT_BARS = 12

# Tempo bounds (BPM)
MIN_TEMPO = 20
MAX_TEMPO = 300


class VoiceKind(str, Enum):
    """Drum/melodic classification of a voice and of a MIDI channel."""

    DRUMS = "drums"
    MELODIC = "melodic"


class VoiceRole(str, Enum):
    """
    Musical function of a voice.

    Used by the reference renderer to pick register and rhythm.
    """

    DRUMS = "drums"  # Rhythm section
    BASS = "bass"  # Root motion
    CHORD = "chord"  # Comping
    PAD = "pad"  # Sustained harmony
    PHRASE = "phrase"  # Short riffs on chord tones


class GMDrumNote(IntEnum):
    """General MIDI drum note numbers."""

    KICK = 36
    SNARE = 38
    CLOSED_HIHAT = 42


# Default MIDI register (note range) by role
DEFAULT_REGISTER_MAP: dict[VoiceRole, tuple[int, int]] = {
    VoiceRole.DRUMS: (35, 81),  # GM drum range
    VoiceRole.BASS: (36, 52),  # C2-E3
    VoiceRole.CHORD: (52, 76),  # E3-E5
    VoiceRole.PAD: (48, 72),  # C3-C5
    VoiceRole.PHRASE: (60, 84),  # C4-C6
}

# Controllers that survive the exportable normalization pass
PORTABLE_CONTROLLERS: frozenset[int] = frozenset(
    {
        0,  # Bank select MSB
        1,  # Modulation
        7,  # Channel volume
        10,  # Pan
        11,  # Expression
        32,  # Bank select LSB
        64,  # Sustain pedal
        91,  # Reverb send
        93,  # Chorus send
        121,  # Reset all controllers
        123,  # All notes off
    }
)


class ErrorMessages:
    """Standardized error messages."""

    BARS_TOO_SHORT = "bars must be >= {minimum} for the blues progression, got {bars}"
    UNSUPPORTED_METER = "Only {supported} is supported, got {meter}"
    STYLE_NOT_FOUND = "Style file not found: {path}"
    STYLE_UNREADABLE = "Style file could not be read: {path}"
    NO_FREE_CHANNEL = "No free MIDI channel for voice '{voice}'"
    SEGMENT_OVERLAP = "Segment '{segment}' overlaps existing segment '{other}'"
    INVALID_TEMPO = "Invalid tempo: {tempo}. Must be between {low} and {high} BPM."
    WRITE_FAILED = "Could not write MIDI file: {path}"
