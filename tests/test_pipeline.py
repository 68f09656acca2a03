"""
End-to-end tests for the export pipeline.
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from mido import MidiFile

from chuk_style_midi.errors import (
    AllocationError,
    ExportPipelineError,
    ResourceError,
    ValidationError,
)
from chuk_style_midi.harmony.builder import ChordProgressionBuilder
from chuk_style_midi.models.request import ExportRequest
from chuk_style_midi.models.timeline import Timeline
from chuk_style_midi.pipeline import ExportPipeline, export_style


class SpyBuilder(ChordProgressionBuilder):
    """Records whether chords were generated."""

    def __init__(self) -> None:
        super().__init__()
        self.built = 0

    def build(self, bars, meter):
        progression = super().build(bars, meter)
        self.built += 1
        return progression


class TestHappyPath:
    """Successful exports."""

    def test_twelve_bar_export(self, style_path: Path, temp_dir: Path) -> None:
        """A 12-bar export writes a format 1 file with one track per voice."""
        out = temp_dir / "out" / "blues.mid"
        result = ExportPipeline().run(ExportRequest(style_path=style_path, output_path=out))

        assert result == out.resolve()
        mid = MidiFile(result)
        assert mid.type == 1
        assert len(mid.tracks) == 5

    def test_tempo_override(self, style_path: Path, temp_midi_path: Path) -> None:
        """--tempo replaces the style's tempo."""
        request = ExportRequest(style_path=style_path, output_path=temp_midi_path, tempo=140)
        mid = MidiFile(ExportPipeline().run(request))
        tempo = next(m for m in mid.tracks[0] if m.type == "set_tempo")
        assert tempo.tempo == 428_571  # 60_000_000 / 140

    def test_style_tempo_by_default(self, style_path: Path, temp_midi_path: Path) -> None:
        """Without an override the style's preferred tempo is used."""
        request = ExportRequest(style_path=style_path, output_path=temp_midi_path)
        mid = MidiFile(ExportPipeline().run(request))
        tempo = next(m for m in mid.tracks[0] if m.type == "set_tempo")
        assert tempo.tempo == 625_000  # 96 BPM

    def test_seven_chord_markers(self, style_path: Path, temp_midi_path: Path) -> None:
        """The file carries the blues changes as markers."""
        request = ExportRequest(style_path=style_path, output_path=temp_midi_path)
        mid = MidiFile(ExportPipeline().run(request))
        markers = [m.text for m in mid.tracks[0] if m.type == "marker"]
        assert markers == ["Bb7", "Eb7", "Bb7", "F7", "Eb7", "Bb7", "F7"]

    def test_longer_timeline(self, style_path: Path, temp_midi_path: Path) -> None:
        """More bars lengthen the file but add no chords."""
        request = ExportRequest(style_path=style_path, output_path=temp_midi_path, bars=16)
        mid = MidiFile(ExportPipeline().run(request))
        markers = [m for m in mid.tracks[0] if m.type == "marker"]
        assert len(markers) == 7
        assert mid.length == pytest.approx(16 * 4 * 60 / 96)

    def test_exportable_names_tracks(self, style_path: Path, temp_midi_path: Path) -> None:
        """The exportable pass names every channel track."""
        request = ExportRequest(style_path=style_path, output_path=temp_midi_path, exportable=True)
        mid = MidiFile(ExportPipeline().run(request))
        names = [next(m.name for m in t if m.type == "track_name") for t in mid.tracks[1:]]
        assert names == ["bass", "piano", "organ", "drums"]

    def test_identical_runs_identical_bytes(self, style_path: Path, temp_dir: Path) -> None:
        """Same inputs → same bytes."""
        first = export_style(ExportRequest(style_path=style_path, output_path=temp_dir / "1.mid"))
        second = export_style(ExportRequest(style_path=style_path, output_path=temp_dir / "2.mid"))
        assert first.read_bytes() == second.read_bytes()

    def test_library_style(self, temp_midi_path: Path) -> None:
        """The shipped style exports."""
        library = Path(__file__).parent.parent / "src" / "chuk_style_midi" / "styles" / "library"
        request = ExportRequest(style_path=library / "blues-shuffle.yaml", output_path=temp_midi_path)
        assert ExportPipeline().run(request).is_file()


class TestSilentInsertion:
    """The batch pipeline inserts its segment without notification."""

    def test_no_listener_calls(
        self, style_path: Path, temp_midi_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """insert_segment is called with notify=False."""
        seen: list[bool] = []
        original = Timeline.apply

        def spy(self, change, notify=True):
            seen.append(notify)
            return original(self, change, notify=notify)

        monkeypatch.setattr(Timeline, "apply", spy)
        ExportPipeline().run(ExportRequest(style_path=style_path, output_path=temp_midi_path))
        assert seen == [False]


class TestFailures:
    """Any failure aborts before writing."""

    def test_bars_too_short(self, style_path: Path, temp_midi_path: Path) -> None:
        """8 bars fails validation and writes nothing."""
        request = ExportRequest(style_path=style_path, output_path=temp_midi_path, bars=8)
        with pytest.raises(ValidationError) as exc_info:
            ExportPipeline().run(request)
        assert exc_info.value.context["flag"] == "--bars"
        assert not temp_midi_path.exists()

    def test_unsupported_meter_before_chords(
        self, write_style: Callable[..., Path], temp_midi_path: Path
    ) -> None:
        """A 3/4 style fails before any chord is generated."""
        builder = SpyBuilder()
        request = ExportRequest(
            style_path=write_style(time_signature="3/4"), output_path=temp_midi_path
        )
        with pytest.raises(ValidationError, match="Only 4/4 is supported"):
            ExportPipeline(builder=builder).run(request)
        assert builder.built == 0
        assert not temp_midi_path.exists()

    def test_missing_style(self, temp_dir: Path, temp_midi_path: Path) -> None:
        """A missing style file is a resource error."""
        request = ExportRequest(style_path=temp_dir / "nope.yaml", output_path=temp_midi_path)
        with pytest.raises(ResourceError):
            ExportPipeline().run(request)
        assert not temp_midi_path.exists()

    def test_allocation_failure(
        self, write_style: Callable[..., Path], temp_midi_path: Path
    ) -> None:
        """Two drum voices with one drum channel cannot be allocated."""
        data = {
            "name": "two-kits",
            "voices": [
                {"name": "kit", "kind": "drums", "channel": 9},
                {"name": "percussion", "kind": "drums", "channel": 9},
            ],
        }
        request = ExportRequest(style_path=write_style(data=data), output_path=temp_midi_path)
        with pytest.raises(AllocationError) as exc_info:
            ExportPipeline().run(request)
        assert exc_info.value.context["voice"] == "percussion"
        assert not temp_midi_path.exists()

    def test_errors_share_base(self, style_path: Path, temp_midi_path: Path) -> None:
        """Every stage error is an ExportPipelineError."""
        request = ExportRequest(style_path=style_path, output_path=temp_midi_path, bars=4)
        with pytest.raises(ExportPipelineError):
            ExportPipeline().run(request)
