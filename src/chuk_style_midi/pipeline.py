"""
Export pipeline - style file in, MIDI file out.

One run is strictly linear:

    load style → check meter → build progression → allocate channels
    → build segment → insert into an empty timeline (silently)
    → render → optional exportable pass → write

Any failure aborts the run with an ExportPipelineError; the write step is
never reached after an upstream failure, so no output file is produced.
"""

from __future__ import annotations

import logging
from pathlib import Path

from chuk_style_midi.arrangement.assembler import StructureAssembler
from chuk_style_midi.compiler.exporter import SequenceExporter
from chuk_style_midi.harmony.builder import ChordProgressionBuilder
from chuk_style_midi.mixing.allocator import ChannelAllocator
from chuk_style_midi.models.request import ExportRequest
from chuk_style_midi.models.timeline import Timeline, TimelineSegment
from chuk_style_midi.styles.loader import StyleLoader

logger = logging.getLogger(__name__)

# Name of the single segment a batch export builds
SEGMENT_NAME = "A"


class ExportPipeline:
    """Runs the stages of one export in order."""

    def __init__(
        self,
        loader: StyleLoader | None = None,
        builder: ChordProgressionBuilder | None = None,
        allocator: ChannelAllocator | None = None,
        assembler: StructureAssembler | None = None,
        exporter: SequenceExporter | None = None,
    ):
        self.loader = loader or StyleLoader()
        self.builder = builder or ChordProgressionBuilder()
        self.allocator = allocator or ChannelAllocator()
        self.assembler = assembler or StructureAssembler()
        self.exporter = exporter or SequenceExporter()

    def run(self, request: ExportRequest) -> Path:
        """
        Export one style to one MIDI file.

        Args:
            request: Export configuration

        Returns:
            Absolute path of the written MIDI file

        Raises:
            ExportPipelineError: From whichever stage failed
        """
        style = self.loader.load(request.style_path)
        logger.info("Loaded style %r (%d voices)", style.name, len(style.voices))

        # Meter is checked before any chord is generated
        progression = self.builder.build(request.bars, style.time_signature)
        logger.info("Built progression: %d chords over %d bars", len(progression), request.bars)

        instrument_map = self.allocator.allocate(style.voices)
        logger.info(
            "Allocated channels: %s",
            ", ".join(f"{e.voice.name}={e.channel}" for e in instrument_map.entries),
        )

        segment = TimelineSegment(
            name=SEGMENT_NAME,
            start_bar=0,
            bars=request.bars,
            style=style,
            progression=progression,
        )
        timeline = Timeline(name=style.name)
        self.assembler.insert_segment(timeline, segment, notify=False)
        logger.info("Assembled timeline: %d bars", timeline.total_bars())

        tempo = request.tempo if request.tempo is not None else style.preferred_tempo
        sequence = self.exporter.render(timeline, instrument_map, tempo)
        logger.info("Rendered %d notes at %d BPM", sequence.note_count(), tempo)
        logger.debug("Sequence summary: %s", sequence.summary())

        sequence = self.exporter.export(sequence, request.exportable)
        if request.exportable:
            logger.info("Applied exportable normalization")

        return self.exporter.write(sequence, request.output_path)


def export_style(request: ExportRequest) -> Path:
    """Run the default pipeline for a request."""
    return ExportPipeline().run(request)
