"""
Timeline model - the song structure the exporter renders.

A Timeline is an ordered sequence of segments. Each segment binds a
contiguous bar range to one Style and one chord progression slice.

Invariants:
- Segments are contiguous from bar 0 and never overlap
- total_bars() equals the sum of segment lengths
- A change is applied with a single assignment: observers see either
  the old segment list or the new one, never a partial state

External listeners (for example a rhythm-usage registry) can observe
changes through the SegmentListener protocol. Callers decide per change
whether listeners are notified.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from chuk_style_midi.core.rhythm import TimeSignature
from chuk_style_midi.errors import AssemblyError
from chuk_style_midi.models.progression import ChordProgression
from chuk_style_midi.models.style import Style


class ChangeKind(str, Enum):
    """Kinds of structural change a listener can observe."""

    ADD_SEGMENTS = "add_segments"
    REMOVE_SEGMENTS = "remove_segments"


@runtime_checkable
class SegmentListener(Protocol):
    """Observer of timeline structure changes."""

    def on_segments_will_change(
        self, kind: ChangeKind, segments: tuple[TimelineSegment, ...]
    ) -> None: ...

    def on_segments_changed(self, kind: ChangeKind) -> None: ...


class TimelineSegment(BaseModel):
    """A contiguous bar range bound to one Style and one chord slice."""

    name: str = Field(..., min_length=1, description="Segment name (e.g., 'A')")
    start_bar: int = Field(0, ge=0, description="First bar of the segment")
    bars: int = Field(..., gt=0, description="Length in bars")
    style: Style = Field(..., description="Style rendered in this segment")
    progression: ChordProgression = Field(..., description="Harmony, rebased to bar 0")

    model_config = {"frozen": True}

    @property
    def end_bar(self) -> int:
        """First bar after the segment."""
        return self.start_bar + self.bars

    def moved_to(self, start_bar: int) -> TimelineSegment:
        """Get a copy of this segment starting at another bar."""
        return self.model_copy(update={"start_bar": start_bar})

    def overlaps(self, other: TimelineSegment) -> bool:
        """Return True if the bar ranges intersect."""
        return self.start_bar < other.end_bar and other.start_bar < self.end_bar


@dataclass(frozen=True)
class SegmentChange:
    """
    A planned structural change.

    segments is the complete segment list after the change; changed holds
    the segments the change adds or removes.
    """

    kind: ChangeKind
    segments: tuple[TimelineSegment, ...]
    changed: tuple[TimelineSegment, ...]


class Timeline:
    """
    Ordered, contiguous sequence of timeline segments.

    The segment list is only replaced through apply(), which runs the
    listener protocol around the swap unless notify is False.
    """

    def __init__(self, name: str = "timeline") -> None:
        self.name = name
        self._segments: tuple[TimelineSegment, ...] = ()
        self._listeners: list[SegmentListener] = []

    @property
    def segments(self) -> tuple[TimelineSegment, ...]:
        """Segments ordered by start bar."""
        return self._segments

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self):
        return iter(self._segments)

    def total_bars(self) -> int:
        """Get total number of bars in the timeline."""
        return sum(segment.bars for segment in self._segments)

    def time_signature(self) -> TimeSignature | None:
        """Meter of the timeline (from its first segment), or None if empty."""
        if not self._segments:
            return None
        return self._segments[0].style.get_time_signature()

    def segment_at(self, bar: int) -> TimelineSegment | None:
        """Get the segment covering a bar."""
        for segment in self._segments:
            if segment.start_bar <= bar < segment.end_bar:
                return segment
        return None

    def add_listener(self, listener: SegmentListener) -> None:
        """Register a structure-change listener."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: SegmentListener) -> None:
        """Unregister a structure-change listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def apply(self, change: SegmentChange, notify: bool = True) -> None:
        """
        Replace the segment list with the result of a planned change.

        With notify=True every listener sees on_segments_will_change before
        the swap and on_segments_changed after it. With notify=False the
        swap happens without any listener call.

        Raises:
            AssemblyError: If the new segment list is not contiguous from bar 0
        """
        expected_start = 0
        for segment in change.segments:
            if segment.start_bar != expected_start:
                raise AssemblyError(
                    "Timeline segments must be contiguous",
                    segment=segment.name,
                    start_bar=segment.start_bar,
                    expected=expected_start,
                )
            expected_start = segment.end_bar

        if notify:
            for listener in list(self._listeners):
                listener.on_segments_will_change(change.kind, change.changed)

        self._segments = change.segments

        if notify:
            for listener in list(self._listeners):
                listener.on_segments_changed(change.kind)

    def __repr__(self) -> str:
        return f"Timeline({self.name!r}, segments={len(self._segments)}, bars={self.total_bars()})"
