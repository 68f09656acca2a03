"""
Compilation pipeline - transforms a timeline to MIDI.

The pipeline:
    Timeline + InstrumentMap
    → rendered segment events (StyleRenderer)
    → Sequence (canonical, inspectable)
    → optional exportable normalization
    → MIDI File (format 1)
"""

from chuk_style_midi.compiler.exporter import SequenceExporter
from chuk_style_midi.compiler.midi import (
    MidiEvent,
    sequence_to_midi,
    tempo_to_microseconds,
)
from chuk_style_midi.compiler.renderer import (
    ChordPatternRenderer,
    ChordSpan,
    RenderContext,
    StyleRenderer,
    chord_spans,
)
from chuk_style_midi.compiler.sequence import (
    SCHEMA_VERSION,
    ChannelSetup,
    ControlEvent,
    Marker,
    MarkerKind,
    Sequence,
    SequenceNote,
    SequenceTimeSignature,
)

__all__ = [
    # Exporter
    "SequenceExporter",
    # Renderer
    "ChordPatternRenderer",
    "ChordSpan",
    "RenderContext",
    "StyleRenderer",
    "chord_spans",
    # Sequence
    "SCHEMA_VERSION",
    "ChannelSetup",
    "ControlEvent",
    "Marker",
    "MarkerKind",
    "Sequence",
    "SequenceNote",
    "SequenceTimeSignature",
    # MIDI
    "MidiEvent",
    "sequence_to_midi",
    "tempo_to_microseconds",
]
