"""
Structure Assembler - inserts segments into a timeline.

Insertion plans the complete new segment list, validates it, and only
then commits it to the timeline in one step. Listener notification is a
parameter of the insertion: batch exports insert silently so that no
external registry records rhythm usage, while the resulting timeline is
identical to a notified insertion.
"""

from __future__ import annotations

import logging

from chuk_style_midi.arrangement.validator import TimelineValidator
from chuk_style_midi.constants import ErrorMessages
from chuk_style_midi.errors import AssemblyError
from chuk_style_midi.models.timeline import (
    ChangeKind,
    SegmentChange,
    Timeline,
    TimelineSegment,
)

logger = logging.getLogger(__name__)


class StructureAssembler:
    """Applies structural changes to timelines."""

    def __init__(self, validator: TimelineValidator | None = None):
        self.validator = validator or TimelineValidator()

    def insert_segment(
        self,
        timeline: Timeline,
        segment: TimelineSegment,
        notify: bool = True,
    ) -> Timeline:
        """
        Insert a segment at its start bar.

        The start bar must be a segment boundary of the timeline (0, the end
        of any segment, or the total length). Segments at or after the
        insertion point move right by the inserted length.

        Args:
            timeline: Timeline to modify
            segment: Segment to insert
            notify: Run the listener protocol around the change

        Returns:
            The same timeline, now containing the segment

        Raises:
            AssemblyError: If the segment overlaps an existing segment,
                leaves a gap, or is inconsistent with the timeline
        """
        bars_before = timeline.total_bars()
        planned = self._plan_insertion(timeline, segment)

        result = self.validator.validate(planned)
        if not result.is_valid:
            first = result.errors[0]
            raise AssemblyError(
                first.message,
                segment=segment.name,
                codes=",".join(i.code for i in result.errors),
            )

        timeline.apply(
            SegmentChange(kind=ChangeKind.ADD_SEGMENTS, segments=planned, changed=(segment,)),
            notify=notify,
        )

        if timeline.total_bars() != bars_before + segment.bars:
            raise AssemblyError(
                "Timeline length inconsistent after insertion",
                segment=segment.name,
                expected=bars_before + segment.bars,
                actual=timeline.total_bars(),
            )

        logger.debug(
            "Inserted segment %r at bar %d (%d bars, notify=%s)",
            segment.name,
            segment.start_bar,
            segment.bars,
            notify,
        )
        return timeline

    def remove_segment(self, timeline: Timeline, name: str, notify: bool = True) -> Timeline:
        """
        Remove a segment by name; later segments move left to close the gap.

        Raises:
            AssemblyError: If no segment has that name
        """
        target = next((s for s in timeline.segments if s.name == name), None)
        if target is None:
            raise AssemblyError(f"Segment not found: {name}", segment=name)

        planned: list[TimelineSegment] = []
        for segment in timeline.segments:
            if segment is target:
                continue
            if segment.start_bar > target.start_bar:
                segment = segment.moved_to(segment.start_bar - target.bars)
            planned.append(segment)

        timeline.apply(
            SegmentChange(
                kind=ChangeKind.REMOVE_SEGMENTS, segments=tuple(planned), changed=(target,)
            ),
            notify=notify,
        )
        return timeline

    def _plan_insertion(
        self, timeline: Timeline, segment: TimelineSegment
    ) -> tuple[TimelineSegment, ...]:
        """Compute the segment list after inserting a segment."""
        total = timeline.total_bars()
        if segment.start_bar > total:
            raise AssemblyError(
                f"Segment '{segment.name}' starts at bar {segment.start_bar}, "
                f"past the end of the timeline ({total} bars)",
                segment=segment.name,
            )

        for existing in timeline.segments:
            if existing.start_bar < segment.start_bar < existing.end_bar:
                raise AssemblyError(
                    ErrorMessages.SEGMENT_OVERLAP.format(segment=segment.name, other=existing.name),
                    segment=segment.name,
                    start_bar=segment.start_bar,
                )

        before = [s for s in timeline.segments if s.end_bar <= segment.start_bar]
        after = [
            s.moved_to(s.start_bar + segment.bars)
            for s in timeline.segments
            if s.start_bar >= segment.start_bar
        ]
        return (*before, segment, *after)
