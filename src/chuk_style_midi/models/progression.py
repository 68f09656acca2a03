"""
Chord progression models - sparse, bar-anchored chord sequences.

A chord event holds from its anchor until the next event or the end of
the progression. No event at a position means the previous harmony
continues.
"""

from __future__ import annotations

from fractions import Fraction

from pydantic import BaseModel, Field, model_validator

from chuk_style_midi.core.chord import ChordSymbol
from chuk_style_midi.core.rhythm import BeatPosition


class ChordEvent(BaseModel):
    """A chord symbol anchored at a bar and beat."""

    symbol: str = Field(..., min_length=1, description="Chord symbol (e.g., 'Bb7')")
    bar: int = Field(..., ge=0, description="Anchor bar (0-indexed)")
    beat: float = Field(0.0, ge=0.0, description="Beat offset within the bar")

    model_config = {"frozen": True}

    @property
    def position(self) -> BeatPosition:
        """Anchor as a BeatPosition."""
        return BeatPosition(self.bar, Fraction(self.beat).limit_denominator(960))

    def chord(self) -> ChordSymbol:
        """Parse the symbol."""
        return ChordSymbol.parse(self.symbol)


class ChordProgression(BaseModel):
    """
    Ordered chord events covering a span of bars.

    Events are strictly increasing by position, anchored in [0, bars) and
    fall inside a bar.
    """

    bars: int = Field(..., gt=0, description="Span in bars")
    beats_per_bar: int = Field(4, gt=0, description="Beats in each bar")
    events: tuple[ChordEvent, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_events(self) -> ChordProgression:
        """Events must lie inside the span and be strictly ordered."""
        previous: BeatPosition | None = None
        for event in self.events:
            if event.bar >= self.bars:
                raise ValueError(
                    f"Chord '{event.symbol}' at bar {event.bar} is outside span of {self.bars} bars"
                )
            if event.beat >= self.beats_per_bar:
                raise ValueError(
                    f"Chord '{event.symbol}' at beat {event.beat} is outside a bar of "
                    f"{self.beats_per_bar} beats"
                )
            if previous is not None and event.position <= previous:
                raise ValueError(f"Chord events out of order at {event.position}")
            previous = event.position
        return self

    def __len__(self) -> int:
        return len(self.events)

    def bar_offsets(self) -> list[int]:
        """Anchor bars of all events, in order."""
        return [event.bar for event in self.events]

    def chord_at(self, bar: int, beat: float = 0.0) -> ChordEvent | None:
        """
        Get the chord in force at a position.

        Returns None before the first event.
        """
        position = BeatPosition(bar, Fraction(beat).limit_denominator(960))
        current = None
        for event in self.events:
            if event.position > position:
                break
            current = event
        return current

    def slice(self, start_bar: int, end_bar: int) -> ChordProgression:
        """
        Get the bars [start_bar, end_bar) as a progression rebased to bar 0.

        The harmony in force at start_bar is anchored at the start of the
        slice, so the slice sounds the same as that region of the whole.
        """
        if not 0 <= start_bar < end_bar <= self.bars:
            raise ValueError(f"Invalid slice [{start_bar}, {end_bar}) of {self.bars} bars")

        events: list[ChordEvent] = []
        carried = self.chord_at(start_bar)
        if carried is not None and carried.position != BeatPosition(start_bar):
            events.append(ChordEvent(symbol=carried.symbol, bar=0, beat=0.0))

        for event in self.events:
            if start_bar <= event.bar < end_bar:
                events.append(
                    ChordEvent(symbol=event.symbol, bar=event.bar - start_bar, beat=event.beat)
                )

        return ChordProgression(
            bars=end_bar - start_bar, beats_per_bar=self.beats_per_bar, events=tuple(events)
        )
