"""
Rhythm primitives - TimeSignature and BeatPosition.

Positions are bar + beat offsets. Beat offsets use Fraction so that
subdivisions (triplets, swung eighths) convert to ticks exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import ClassVar

# Denominators a time signature may carry
_VALID_DENOMINATORS = (1, 2, 4, 8, 16)


@dataclass(frozen=True)
class TimeSignature:
    """
    A meter: beats per bar over the beat unit denominator.

    Examples:
        TimeSignature(4, 4) = common time
        TimeSignature(3, 4) = waltz
    """

    numerator: int
    denominator: int

    COMMON_TIME: ClassVar[TimeSignature]  # 4/4

    def __post_init__(self) -> None:
        if self.numerator <= 0:
            raise ValueError(f"Beats per bar must be positive, got {self.numerator}")
        if self.denominator not in _VALID_DENOMINATORS:
            raise ValueError(f"Unsupported time signature denominator: {self.denominator}")

    @property
    def beats_per_bar(self) -> int:
        """Number of beats in one bar."""
        return self.numerator

    @property
    def quarter_notes_per_bar(self) -> Fraction:
        """Bar length measured in quarter notes (the MIDI beat)."""
        return Fraction(self.numerator * 4, self.denominator)

    def bar_to_ticks(self, ticks_per_beat: int) -> int:
        """Get the number of ticks in one bar."""
        return int(self.quarter_notes_per_bar * ticks_per_beat)

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator}"

    @classmethod
    def parse(cls, notation: str) -> TimeSignature:
        """
        Parse a time signature from notation like '4/4', '3/4', '6/8'.

        Raises:
            ValueError: If the notation is malformed
        """
        parts = str(notation).strip().split("/")
        if len(parts) != 2:
            raise ValueError(f"Invalid time signature format: {notation}")

        try:
            numerator = int(parts[0])
            denominator = int(parts[1])
        except ValueError as e:
            raise ValueError(f"Invalid time signature format: {notation}") from e

        return cls(numerator, denominator)


TimeSignature.COMMON_TIME = TimeSignature(4, 4)


@dataclass(frozen=True, order=True)
class BeatPosition:
    """
    A position in musical time (bar + beat offset).

    Bar is 0-indexed (bar 0 is the first bar).
    Beat is the fractional position within the bar (0 = start of bar).
    Ordering compares bar first, then beat.
    """

    bar: int
    beat: Fraction = Fraction(0)

    def __post_init__(self) -> None:
        if self.bar < 0:
            raise ValueError(f"Bar must be non-negative, got {self.bar}")
        if self.beat < 0:
            raise ValueError(f"Beat must be non-negative, got {self.beat}")

    def to_ticks(self, time_sig: TimeSignature, ticks_per_beat: int) -> int:
        """Convert to absolute tick position."""
        bar_ticks = time_sig.bar_to_ticks(ticks_per_beat)
        return self.bar * bar_ticks + int(Fraction(self.beat) * ticks_per_beat)

    @classmethod
    def from_ticks(cls, ticks: int, time_sig: TimeSignature, ticks_per_beat: int) -> BeatPosition:
        """Create a BeatPosition from an absolute tick position."""
        bar_ticks = time_sig.bar_to_ticks(ticks_per_beat)
        bar, remaining = divmod(ticks, bar_ticks)
        return cls(bar, Fraction(remaining, ticks_per_beat))

    def __str__(self) -> str:
        if self.beat == 0:
            return f"bar {self.bar + 1}"  # Human-readable (1-indexed)
        return f"bar {self.bar + 1}, beat {float(self.beat) + 1:.2f}"
