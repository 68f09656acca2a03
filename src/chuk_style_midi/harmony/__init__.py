"""
Harmony generation - the fixed chord template.
"""

from chuk_style_midi.harmony.builder import (
    QUICK_CHANGE_BLUES,
    ChordProgressionBuilder,
    HarmonicTemplate,
)

__all__ = [
    "QUICK_CHANGE_BLUES",
    "ChordProgressionBuilder",
    "HarmonicTemplate",
]
