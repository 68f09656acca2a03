"""
Sequence Exporter - renders a timeline and writes it as a MIDI file.

Three steps, each usable on its own:
- render: timeline + instrument map → Sequence (via a StyleRenderer)
- export: optional exportable normalization of a Sequence
- write: Sequence → format 1 MIDI file on disk
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import replace
from pathlib import Path

from chuk_style_midi.compiler.midi import MidiEvent, sequence_to_midi
from chuk_style_midi.compiler.renderer import (
    ChordPatternRenderer,
    RenderContext,
    StyleRenderer,
)
from chuk_style_midi.compiler.sequence import (
    ChannelSetup,
    ControlEvent,
    Marker,
    MarkerKind,
    Sequence,
    SequenceNote,
    SequenceTimeSignature,
)
from chuk_style_midi.constants import (
    MAX_TEMPO,
    MIN_TEMPO,
    PORTABLE_CONTROLLERS,
    TICKS_PER_BEAT,
    ErrorMessages,
)
from chuk_style_midi.core.rhythm import TimeSignature
from chuk_style_midi.errors import ExportError
from chuk_style_midi.mixing.allocator import InstrumentMap
from chuk_style_midi.models.timeline import Timeline

logger = logging.getLogger(__name__)


class SequenceExporter:
    """Turns a timeline into a MIDI sequence and a MIDI file."""

    def __init__(
        self,
        renderer: StyleRenderer | None = None,
        ticks_per_beat: int = TICKS_PER_BEAT,
    ):
        """
        Initialize the exporter.

        Args:
            renderer: Rendering collaborator (defaults to ChordPatternRenderer)
            ticks_per_beat: MIDI resolution
        """
        self.renderer = renderer or ChordPatternRenderer()
        self.ticks_per_beat = ticks_per_beat

    def render(self, timeline: Timeline, instrument_map: InstrumentMap, tempo: int) -> Sequence:
        """
        Render every segment of a timeline into one Sequence.

        Segments are rendered in timeline order. Renderer output is relative
        to the segment start and is moved to absolute ticks here.

        Args:
            timeline: Timeline to render
            instrument_map: Channel assignments for the timeline's voices
            tempo: Tempo in BPM

        Returns:
            Canonical Sequence

        Raises:
            ExportError: If the tempo is out of range or rendering fails
        """
        if not MIN_TEMPO <= tempo <= MAX_TEMPO:
            raise ExportError(
                ErrorMessages.INVALID_TEMPO.format(tempo=tempo, low=MIN_TEMPO, high=MAX_TEMPO),
                tempo=tempo,
            )

        time_sig = timeline.time_signature() or TimeSignature()
        context = RenderContext(tempo=tempo, time_sig=time_sig, ticks_per_beat=self.ticks_per_beat)
        ticks_per_bar = context.ticks_per_bar

        sequence = Sequence(
            name=timeline.name,
            tempo=tempo,
            time_signature=SequenceTimeSignature(time_sig.numerator, time_sig.denominator),
            ticks_per_beat=self.ticks_per_beat,
            total_bars=timeline.total_bars(),
            total_ticks=timeline.total_bars() * ticks_per_bar,
        )

        for entry in instrument_map.entries:
            sequence.voices[entry.channel] = entry.voice.name
            sequence.setups.append(
                ChannelSetup(
                    channel=entry.channel,
                    program=entry.instrument.program,
                    bank_msb=entry.instrument.bank_msb,
                    bank_lsb=entry.instrument.bank_lsb,
                )
            )

        for segment in timeline:
            offset = segment.start_bar * ticks_per_bar
            sequence.markers.append(Marker(offset, MarkerKind.SEGMENT, segment.name))

            for event in segment.progression.events:
                sequence.markers.append(
                    Marker(
                        offset + event.position.to_ticks(time_sig, self.ticks_per_beat),
                        MarkerKind.CHORD,
                        event.symbol,
                    )
                )

            try:
                rendered = self.renderer.render_segment(segment, instrument_map, context)
            except ValueError as e:
                raise ExportError(f"Rendering failed: {e}", segment=segment.name) from e

            for event in rendered:
                if isinstance(event, MidiEvent):
                    sequence.notes.append(
                        SequenceNote(
                            start_ticks=offset + event.start_ticks,
                            channel=event.channel,
                            pitch=event.pitch,
                            duration_ticks=event.duration_ticks,
                            velocity=event.velocity,
                            source_voice=sequence.voices.get(event.channel),
                            source_segment=segment.name,
                        )
                    )
                else:
                    sequence.controls.append(replace(event, ticks=offset + event.ticks))

            logger.debug("Rendered segment %r: %d events", segment.name, len(rendered))

        return sequence.canonicalize()

    def export(self, sequence: Sequence, make_exportable: bool) -> Sequence:
        """
        Optionally apply the exportable normalization pass.

        The pass removes controllers that only make sense inside the
        rendering context (non-portable or flagged private), names every
        channel track after its voice and guarantees a program change on
        every used channel. Notes, markers, tempo and time signature are
        untouched. Applying it twice gives the same result as once.

        Args:
            sequence: Rendered sequence
            make_exportable: Apply the pass; when False the input is returned

        Returns:
            The (possibly normalized) sequence
        """
        if not make_exportable:
            return sequence

        controls = [
            c for c in sequence.controls if c.controller in PORTABLE_CONTROLLERS and not c.private
        ]
        dropped = len(sequence.controls) - len(controls)

        setups = list(sequence.setups)
        configured = {s.channel for s in setups}
        used = sorted({n.channel for n in sequence.notes} | {c.channel for c in controls})
        for channel in used:
            if channel not in configured:
                setups.append(ChannelSetup(channel=channel, program=0))

        track_names = dict(sequence.track_names)
        for channel in sorted(set(used) | set(sequence.voices)):
            track_names.setdefault(channel, sequence.voices.get(channel, f"Channel {channel + 1}"))

        if dropped:
            logger.debug("Exportable pass dropped %d controller events", dropped)

        return replace(
            sequence,
            controls=controls,
            setups=setups,
            track_names=track_names,
            normalized=True,
        ).canonicalize()

    def write(self, sequence: Sequence, path: Path | str) -> Path:
        """
        Write a sequence as a standard MIDI file (format 1).

        Parent directories are created. The file is written next to its
        destination under a temporary name and renamed into place, so a
        failed write leaves no file at the destination.

        Args:
            sequence: Sequence to write
            path: Destination path

        Returns:
            Absolute path of the written file

        Raises:
            ExportError: If the file cannot be written or encoded
        """
        target = Path(path).expanduser().resolve()
        tmp_name: str | None = None
        try:
            mid = sequence_to_midi(sequence)
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
            )
            with os.fdopen(fd, "wb") as handle:
                mid.save(file=handle)
            os.replace(tmp_name, target)
            tmp_name = None
        except (OSError, ValueError) as e:
            # mido raises ValueError for meta text outside Latin-1
            raise ExportError(
                ErrorMessages.WRITE_FAILED.format(path=target), path=str(target), reason=str(e)
            ) from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.info("Wrote %d tracks to %s", len(mid.tracks), target)
        return target
