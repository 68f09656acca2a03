"""
Core music primitives.

- PitchClass: The 12 chromatic pitch classes (0-11)
- ChordSymbol: Lead-sheet chord names resolved to root + tones
- TimeSignature: Beats per bar and beat unit
- BeatPosition: Position in musical time (bar + beat)
"""

from chuk_style_midi.core.chord import ChordSymbol, tones_for_quality
from chuk_style_midi.core.pitch import PitchClass
from chuk_style_midi.core.rhythm import BeatPosition, TimeSignature

__all__ = [
    "PitchClass",
    "ChordSymbol",
    "tones_for_quality",
    "TimeSignature",
    "BeatPosition",
]
