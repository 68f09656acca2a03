"""
Segment renderers - turn a timeline segment into note events.

The real rhythm engine is an external collaborator; the exporter only
depends on the StyleRenderer protocol. ChordPatternRenderer is the
reference implementation shipped with the package: it plays each voice
with a fixed role pattern over the segment's chord spans, resolving chord
tones into the voice's register.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Protocol

from chuk_style_midi.compiler.midi import MidiEvent
from chuk_style_midi.compiler.sequence import ControlEvent
from chuk_style_midi.constants import (
    DEFAULT_REGISTER_MAP,
    TICKS_PER_BEAT,
    GMDrumNote,
    VoiceRole,
)
from chuk_style_midi.core.chord import ChordSymbol
from chuk_style_midi.core.rhythm import TimeSignature
from chuk_style_midi.mixing.allocator import ChannelAssignment, InstrumentMap
from chuk_style_midi.models.timeline import TimelineSegment

# Swung eighth: the off-beat falls on the last triplet of the beat
SWING_OFFBEAT = Fraction(2, 3)

# Base velocity (0-127) by role
ROLE_VELOCITY: dict[VoiceRole, int] = {
    VoiceRole.DRUMS: 96,
    VoiceRole.BASS: 100,
    VoiceRole.CHORD: 78,
    VoiceRole.PAD: 64,
    VoiceRole.PHRASE: 88,
}

# Channel volume (CC 7) sent at the start of each segment, by role
ROLE_VOLUME: dict[VoiceRole, int] = {
    VoiceRole.DRUMS: 110,
    VoiceRole.BASS: 105,
    VoiceRole.CHORD: 90,
    VoiceRole.PAD: 80,
    VoiceRole.PHRASE: 95,
}


@dataclass(frozen=True)
class RenderContext:
    """Timing information shared by every segment of one render."""

    tempo: int
    time_sig: TimeSignature
    ticks_per_beat: int = TICKS_PER_BEAT

    @property
    def ticks_per_bar(self) -> int:
        return self.time_sig.bar_to_ticks(self.ticks_per_beat)

    def ticks(self, beats: Fraction) -> int:
        """Convert a beat offset (quarter notes) to ticks."""
        return int(beats * self.ticks_per_beat)


@dataclass(frozen=True)
class ChordSpan:
    """A chord sounding between two beat offsets of a segment."""

    start: Fraction
    end: Fraction
    chord: ChordSymbol


class StyleRenderer(Protocol):
    """
    The rendering collaborator.

    Events are positioned relative to the segment start; the exporter
    moves them to absolute ticks.
    """

    def render_segment(
        self,
        segment: TimelineSegment,
        instrument_map: InstrumentMap,
        context: RenderContext,
    ) -> list[MidiEvent | ControlEvent]: ...


def chord_spans(segment: TimelineSegment, time_sig: TimeSignature) -> list[ChordSpan]:
    """
    Resolve a segment's sparse progression to contiguous chord spans.

    Each chord holds until the next event; the last one holds to the end
    of the segment. Bars before the first chord event have no span.
    """
    beats_per_bar = time_sig.quarter_notes_per_bar
    segment_end = beats_per_bar * segment.bars
    events = segment.progression.events

    spans: list[ChordSpan] = []
    for i, event in enumerate(events):
        start = beats_per_bar * event.bar + Fraction(event.beat).limit_denominator(960)
        if i + 1 < len(events):
            following = events[i + 1]
            end = beats_per_bar * following.bar + Fraction(following.beat).limit_denominator(960)
        else:
            end = segment_end
        spans.append(ChordSpan(start=start, end=min(end, segment_end), chord=event.chord()))
    return spans


class ChordPatternRenderer:
    """
    Reference renderer: fixed shuffle patterns per voice role.

    - drums: kick on 1 and 3, snare on 2 and 4, swung hi-hat
    - bass: root on 1 and 3, fifth on 2 and 4
    - chord: short voicings on 2 and 4
    - pad: sustained voicing per bar and chord
    - phrase: chord tones walking up on every beat
    """

    def render_segment(
        self,
        segment: TimelineSegment,
        instrument_map: InstrumentMap,
        context: RenderContext,
    ) -> list[MidiEvent | ControlEvent]:
        """Render every voice of the instrument map over one segment."""
        events: list[MidiEvent | ControlEvent] = []
        spans = chord_spans(segment, context.time_sig)

        for assignment in instrument_map.entries:
            role = assignment.voice.role
            events.append(
                ControlEvent(
                    ticks=0,
                    channel=assignment.channel,
                    controller=7,
                    value=ROLE_VOLUME.get(role, 100),
                )
            )
            if role == VoiceRole.DRUMS:
                events.extend(self._drums(assignment, segment, context))
            else:
                events.extend(self._pitched(assignment, spans, context))

        return events

    def _drums(
        self, assignment: ChannelAssignment, segment: TimelineSegment, context: RenderContext
    ) -> list[MidiEvent]:
        """Shuffle groove, independent of harmony."""
        events: list[MidiEvent] = []
        velocity = ROLE_VELOCITY[VoiceRole.DRUMS]
        hit = context.ticks(Fraction(1, 4))

        for bar in range(segment.bars):
            bar_start = bar * context.ticks_per_bar
            for beat in range(context.time_sig.beats_per_bar):
                beat_start = bar_start + context.ticks(Fraction(beat))
                drum = GMDrumNote.KICK if beat % 2 == 0 else GMDrumNote.SNARE
                events.append(
                    MidiEvent(drum, beat_start, hit, velocity, assignment.channel)
                )
                events.append(
                    MidiEvent(GMDrumNote.CLOSED_HIHAT, beat_start, hit, velocity - 20, assignment.channel)
                )
                events.append(
                    MidiEvent(
                        GMDrumNote.CLOSED_HIHAT,
                        beat_start + context.ticks(SWING_OFFBEAT),
                        hit,
                        velocity - 36,
                        assignment.channel,
                    )
                )
        return events

    def _pitched(
        self, assignment: ChannelAssignment, spans: list[ChordSpan], context: RenderContext
    ) -> list[MidiEvent]:
        """Role pattern over each chord span."""
        role = assignment.voice.role
        register = DEFAULT_REGISTER_MAP.get(role, (48, 72))
        velocity = ROLE_VELOCITY.get(role, 80)
        beats_per_bar = context.time_sig.quarter_notes_per_bar
        events: list[MidiEvent] = []

        for span in spans:
            if role == VoiceRole.PAD:
                # Re-strike at each bar line inside the span
                start = span.start
                while start < span.end:
                    next_bar = (start // beats_per_bar + 1) * beats_per_bar
                    end = min(next_bar, span.end)
                    for pitch in self._voicing(span.chord, register):
                        events.append(
                            MidiEvent(
                                pitch,
                                context.ticks(start),
                                context.ticks(end - start) - 1,
                                velocity,
                                assignment.channel,
                            )
                        )
                    start = end
                continue

            beat = Fraction(int(-(-span.start // 1)))  # first whole beat in the span
            step = 0
            while beat < span.end:
                beat_in_bar = int(beat % beats_per_bar)
                length = min(Fraction(1), span.end - beat)
                start_ticks = context.ticks(beat)

                if role == VoiceRole.BASS:
                    interval = 0 if beat_in_bar % 2 == 0 else 7
                    pitch = self._place(span.chord.bass_note.value + interval, register)
                    events.append(
                        MidiEvent(
                            pitch,
                            start_ticks,
                            context.ticks(length * Fraction(9, 10)),
                            velocity,
                            assignment.channel,
                        )
                    )
                elif role == VoiceRole.CHORD:
                    if beat_in_bar % 2 == 1:
                        for pitch in self._voicing(span.chord, register):
                            events.append(
                                MidiEvent(
                                    pitch,
                                    start_ticks,
                                    context.ticks(min(length, SWING_OFFBEAT)),
                                    velocity,
                                    assignment.channel,
                                )
                            )
                else:
                    tones = sorted(span.chord.tones)
                    pitch = self._place(span.chord.root.value + tones[step % len(tones)], register)
                    events.append(
                        MidiEvent(
                            pitch,
                            start_ticks,
                            context.ticks(length * Fraction(3, 4)),
                            velocity,
                            assignment.channel,
                        )
                    )

                beat += 1
                step += 1

        return [e for e in events if e.duration_ticks > 0]

    def _voicing(self, chord: ChordSymbol, register: tuple[int, int]) -> list[int]:
        """Close voicing of the chord tones, each placed inside the register."""
        pitches = {self._place(chord.root.value + tone, register) for tone in chord.tones}
        return sorted(pitches)

    def _place(self, pitch_class: int, register: tuple[int, int]) -> int:
        """Lowest octave of a pitch class at or above the register floor."""
        low, high = register
        midi_note = low + (pitch_class - low) % 12
        while midi_note > high:
            midi_note -= 12
        return max(0, min(127, midi_note))
