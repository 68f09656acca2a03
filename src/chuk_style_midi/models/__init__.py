"""
Pydantic models for the export pipeline.

This module provides:
- Style, Voice, Instrument: the rhythm-style descriptor
- ChordEvent, ChordProgression: sparse bar-anchored harmony
- TimelineSegment, Timeline: the song structure
- ExportRequest: configuration of one run
"""

from chuk_style_midi.models.progression import ChordEvent, ChordProgression
from chuk_style_midi.models.request import ExportRequest
from chuk_style_midi.models.style import Instrument, Style, Voice
from chuk_style_midi.models.timeline import (
    ChangeKind,
    SegmentChange,
    SegmentListener,
    Timeline,
    TimelineSegment,
)

__all__ = [
    "ChangeKind",
    "ChordEvent",
    "ChordProgression",
    "ExportRequest",
    "Instrument",
    "SegmentChange",
    "SegmentListener",
    "Style",
    "Timeline",
    "TimelineSegment",
    "Voice",
]
