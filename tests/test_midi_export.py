"""
MIDI encoding tests - Sequence → mido MidiFile.
"""

from pathlib import Path

import pytest
from mido import MidiFile

from chuk_style_midi.compiler.midi import (
    MidiEvent,
    sequence_to_midi,
    tempo_to_microseconds,
)
from chuk_style_midi.compiler.sequence import (
    ChannelSetup,
    ControlEvent,
    Marker,
    MarkerKind,
    Sequence,
    SequenceNote,
)
from chuk_style_midi.constants import TICKS_PER_BEAT


def note(start: int, pitch: int = 60, channel: int = 0, duration: int = 480) -> SequenceNote:
    return SequenceNote(
        start_ticks=start, channel=channel, pitch=pitch, duration_ticks=duration, velocity=100
    )


def absolute(track) -> list[tuple[int, object]]:
    """Messages of a track with absolute tick times."""
    now = 0
    result = []
    for msg in track:
        now += msg.time
        result.append((now, msg))
    return result


class TestMidiEvent:
    """Test MidiEvent dataclass."""

    def test_create_valid_event(self) -> None:
        """Can create a valid MIDI event."""
        event = MidiEvent(pitch=60, start_ticks=0, duration_ticks=480, velocity=100, channel=0)
        assert event.pitch == 60
        assert event.duration_ticks == 480

    def test_event_validation_pitch_range(self) -> None:
        """Pitch must be 0-127."""
        with pytest.raises(ValueError, match="Pitch must be 0-127"):
            MidiEvent(pitch=128, start_ticks=0, duration_ticks=480, velocity=100)

    def test_event_validation_velocity_range(self) -> None:
        """Velocity must be 0-127."""
        with pytest.raises(ValueError, match="Velocity must be 0-127"):
            MidiEvent(pitch=60, start_ticks=0, duration_ticks=480, velocity=128)

    def test_event_validation_channel_range(self) -> None:
        """Channel must be 0-15."""
        with pytest.raises(ValueError, match="Channel must be 0-15"):
            MidiEvent(pitch=60, start_ticks=0, duration_ticks=480, velocity=100, channel=16)

    def test_negative_start(self) -> None:
        """Start must not be negative."""
        with pytest.raises(ValueError, match="Start ticks"):
            MidiEvent(pitch=60, start_ticks=-1, duration_ticks=480, velocity=100)


class TestSequenceToMidi:
    """Test the sequence_to_midi function."""

    def test_empty_sequence(self) -> None:
        """An empty sequence has only the sync track."""
        mid = sequence_to_midi(Sequence())
        assert mid.type == 1
        assert len(mid.tracks) == 1
        assert mid.ticks_per_beat == TICKS_PER_BEAT

    def test_single_note(self) -> None:
        """One note gives one channel track with note_on and note_off."""
        mid = sequence_to_midi(Sequence(notes=[note(0)], total_ticks=1920))
        assert len(mid.tracks) == 2

        events = [(t, m.type) for t, m in absolute(mid.tracks[1])]
        assert events == [(0, "note_on"), (480, "note_off"), (1920, "end_of_track")]

    def test_end_of_track_at_total_length(self) -> None:
        """Every track ends at the sequence length."""
        mid = sequence_to_midi(Sequence(notes=[note(0)], total_ticks=3840))
        for track in mid.tracks:
            end_time, end = absolute(track)[-1]
            assert end.type == "end_of_track"
            assert end_time == 3840

    def test_tracks_in_channel_order(self) -> None:
        """Channel tracks follow ascending channel order."""
        notes = [note(0, channel=9), note(0, channel=2), note(0, channel=5)]
        mid = sequence_to_midi(Sequence(notes=notes))
        channels = [next(m.channel for m in track if not m.is_meta) for track in mid.tracks[1:]]
        assert channels == [2, 5, 9]

    def test_repeated_note_retriggers(self) -> None:
        """note_off comes before note_on at the same tick."""
        mid = sequence_to_midi(Sequence(notes=[note(0), note(480)]))
        types = [m.type for _, m in absolute(mid.tracks[1]) if not m.is_meta]
        assert types == ["note_on", "note_off", "note_on", "note_off"]

    def test_setup_before_notes(self) -> None:
        """Bank select and program change precede the first note."""
        sequence = Sequence(
            notes=[note(0, channel=1)],
            setups=[ChannelSetup(channel=1, program=33, bank_msb=0, bank_lsb=8)],
        )
        mid = sequence_to_midi(sequence)
        types = [(m.type, getattr(m, "control", None)) for m in mid.tracks[1] if not m.is_meta]
        assert types == [
            ("control_change", 0),
            ("control_change", 32),
            ("program_change", None),
            ("note_on", None),
            ("note_off", None),
        ]

    def test_setup_without_bank(self) -> None:
        """No bank select is sent when the instrument has none."""
        sequence = Sequence(setups=[ChannelSetup(channel=4, program=17)], voices={4: "organ"})
        mid = sequence_to_midi(sequence)
        assert [m.type for m in mid.tracks[1] if not m.is_meta] == ["program_change"]

    def test_controls_on_their_channel(self) -> None:
        """Controller events land on their channel's track."""
        sequence = Sequence(
            notes=[note(0, channel=3)],
            controls=[ControlEvent(ticks=960, channel=3, controller=64, value=127)],
        )
        mid = sequence_to_midi(sequence)
        sustain = [(t, m.value) for t, m in absolute(mid.tracks[1]) if m.type == "control_change"]
        assert sustain == [(960, 127)]

    def test_markers(self) -> None:
        """Chord markers and segment cues go to the sync track."""
        sequence = Sequence(
            markers=[
                Marker(1920, MarkerKind.CHORD, "Eb7"),
                Marker(0, MarkerKind.CHORD, "Bb7"),
                Marker(0, MarkerKind.SEGMENT, "A"),
            ]
        )
        sync = absolute(sequence_to_midi(sequence).tracks[0])
        assert [(t, m.text) for t, m in sync if m.type == "marker"] == [(0, "Bb7"), (1920, "Eb7")]
        assert [(t, m.text) for t, m in sync if m.type == "cue_marker"] == [(0, "A")]

    def test_track_name_first_in_sync_track(self) -> None:
        """The sequence name leads track 0, ahead of tempo and meter."""
        sync = sequence_to_midi(Sequence(name="blues")).tracks[0]
        assert [m.type for m in sync] == [
            "track_name",
            "set_tempo",
            "time_signature",
            "end_of_track",
        ]
        assert sync[0].name == "blues"

    def test_track_name_first_in_channel_track(self) -> None:
        """Channel track names precede bank, program and note messages."""
        sequence = Sequence(
            notes=[note(0, channel=2)],
            setups=[ChannelSetup(channel=2, program=0, bank_msb=0)],
            track_names={2: "piano"},
        )
        track = sequence_to_midi(sequence).tracks[1]
        assert track[0].type == "track_name"
        assert track[0].name == "piano"

    def test_tempo_setting(self) -> None:
        """Tempo is set correctly."""
        mid = sequence_to_midi(Sequence(tempo=90))
        tempo = next(m for m in mid.tracks[0] if m.type == "set_tempo")
        assert tempo.tempo == tempo_to_microseconds(90)


class TestHelperFunctions:
    """Test helper functions."""

    def test_tempo_to_microseconds(self) -> None:
        """120 BPM is half a second per beat."""
        assert tempo_to_microseconds(120) == 500_000


class TestDeterminism:
    """Same sequence → same bytes."""

    def test_event_order_does_not_matter(self, temp_dir: Path) -> None:
        """Sequences differing only in list order encode identically."""
        a = Sequence(notes=[note(0, 60), note(0, 64), note(480, 67)])
        b = Sequence(notes=[note(480, 67), note(0, 64), note(0, 60)])

        sequence_to_midi(a).save(temp_dir / "a.mid")
        sequence_to_midi(b).save(temp_dir / "b.mid")
        assert (temp_dir / "a.mid").read_bytes() == (temp_dir / "b.mid").read_bytes()

    def test_reload(self, temp_midi_path: Path) -> None:
        """Saved files load back with the same track count."""
        sequence_to_midi(Sequence(notes=[note(0), note(0, channel=9)])).save(temp_midi_path)
        assert len(MidiFile(temp_midi_path).tracks) == 3
