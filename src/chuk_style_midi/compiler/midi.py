"""
MIDI export - the end of the pipeline.

This module handles conversion from a Sequence to a format 1 MIDI file
using mido. Track 0 is the synchronization track (tempo, time signature,
markers); each channel gets its own track after it, in ascending channel
order. All operations are deterministic: same input → same output.
"""

from __future__ import annotations

from dataclasses import dataclass

from mido import Message, MetaMessage, MidiFile, MidiTrack

from chuk_style_midi.compiler.sequence import MarkerKind, Sequence


@dataclass(frozen=True)
class MidiEvent:
    """
    A single MIDI note event produced by a renderer.

    Times are in ticks, relative to the start of the rendered segment.
    """

    pitch: int  # MIDI note number (0-127)
    start_ticks: int  # Start time in ticks
    duration_ticks: int  # Duration in ticks
    velocity: int  # 0-127
    channel: int = 0  # 0-15

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


def tempo_to_microseconds(tempo_bpm: int) -> int:
    """Convert BPM to the microseconds-per-beat value of a set_tempo message."""
    return int(60_000_000 / tempo_bpm)


def _to_track(timed: list[tuple[int, int, Message | MetaMessage]], end_ticks: int) -> MidiTrack:
    """
    Build a track from (absolute tick, order, message) triples.

    Messages are sorted by tick, then by order, and converted to delta
    times. The track ends with end_of_track at end_ticks (or at the last
    event if that is later).
    """
    track = MidiTrack()
    current = 0
    for abs_time, _, msg in sorted(timed, key=lambda item: (item[0], item[1])):
        track.append(msg.copy(time=abs_time - current))
        current = abs_time
    track.append(MetaMessage("end_of_track", time=max(0, end_ticks - current)))
    return track


# Message ordering at equal ticks: track name first, then meta, setup,
# controllers, note_off before note_on so repeated notes re-trigger cleanly
_NAME, _META, _BANK, _PROGRAM, _CONTROL, _NOTE_OFF, _NOTE_ON = range(7)


def sequence_to_midi(sequence: Sequence) -> MidiFile:
    """
    Convert a Sequence to a format 1 MidiFile.

    Args:
        sequence: The rendered sequence

    Returns:
        A mido MidiFile ready to be saved
    """
    seq = sequence.canonicalize()
    mid = MidiFile(type=1, ticks_per_beat=seq.ticks_per_beat)

    # Synchronization track
    sync: list[tuple[int, int, Message | MetaMessage]] = []
    if seq.name:
        sync.append((0, _NAME, MetaMessage("track_name", name=seq.name, time=0)))
    sync.append((0, _META, MetaMessage("set_tempo", tempo=tempo_to_microseconds(seq.tempo), time=0)))
    sync.append(
        (
            0,
            _META,
            MetaMessage(
                "time_signature",
                numerator=seq.time_signature.numerator,
                denominator=seq.time_signature.denominator,
                clocks_per_click=24,
                notated_32nd_notes_per_beat=8,
                time=0,
            ),
        )
    )
    for marker in seq.markers:
        msg_type = "marker" if marker.kind == MarkerKind.CHORD else "cue_marker"
        sync.append((marker.ticks, _CONTROL, MetaMessage(msg_type, text=marker.text, time=0)))
    mid.tracks.append(_to_track(sync, seq.total_ticks))

    # One track per channel
    for channel in seq.channels():
        timed: list[tuple[int, int, Message | MetaMessage]] = []

        if channel in seq.track_names:
            timed.append(
                (0, _NAME, MetaMessage("track_name", name=seq.track_names[channel], time=0))
            )

        for setup in (s for s in seq.setups if s.channel == channel):
            if setup.bank_msb is not None:
                timed.append(
                    (0, _BANK, Message("control_change", channel=channel, control=0, value=setup.bank_msb))
                )
            if setup.bank_lsb is not None:
                timed.append(
                    (0, _BANK, Message("control_change", channel=channel, control=32, value=setup.bank_lsb))
                )
            timed.append(
                (0, _PROGRAM, Message("program_change", channel=channel, program=setup.program))
            )

        for control in (c for c in seq.controls if c.channel == channel):
            timed.append(
                (
                    control.ticks,
                    _CONTROL,
                    Message(
                        "control_change",
                        channel=channel,
                        control=control.controller,
                        value=control.value,
                    ),
                )
            )

        for note in (n for n in seq.notes if n.channel == channel):
            timed.append(
                (
                    note.start_ticks,
                    _NOTE_ON,
                    Message("note_on", channel=channel, note=note.pitch, velocity=note.velocity),
                )
            )
            timed.append(
                (
                    note.end_ticks,
                    _NOTE_OFF,
                    Message("note_off", channel=channel, note=note.pitch, velocity=0),
                )
            )

        mid.tracks.append(_to_track(timed, seq.total_ticks))

    return mid

