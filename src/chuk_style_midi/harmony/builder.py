"""
Chord progression builder - emits the fixed harmonic template.

The template is a quick-change 12-bar blues skeleton in Bb:

    bar:   0    4    6    8    9    10   11
    chord: Bb7  Eb7  Bb7  F7   Eb7  Bb7  F7
           I    IV   I    V    IV   I    V

Every chord sits on beat 0 of its bar.

Harmonic sustain past template end: when more than 12 bars are
requested, no chord events are emitted after bar 11. Under the sparse
progression rule the bar 11 chord holds through the remaining bars.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from chuk_style_midi.constants import MIN_BARS, SUPPORTED_TIME_SIGNATURE, ErrorMessages
from chuk_style_midi.core.rhythm import TimeSignature
from chuk_style_midi.errors import ValidationError
from chuk_style_midi.models.progression import ChordEvent, ChordProgression

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HarmonicTemplate:
    """
    A fixed chord template: (symbol, bar) anchors plus its minimum span.

    Anchors are ordered by bar. All chords sit on beat 0.
    """

    name: str
    anchors: tuple[tuple[str, int], ...]
    min_bars: int

    def __post_init__(self) -> None:
        bars = [bar for _, bar in self.anchors]
        if bars != sorted(set(bars)):
            raise ValueError(f"Template anchors must be strictly increasing: {bars}")
        if bars and bars[-1] >= self.min_bars:
            raise ValueError(f"Template anchor at bar {bars[-1]} exceeds span {self.min_bars}")


QUICK_CHANGE_BLUES = HarmonicTemplate(
    name="quick-change-blues-Bb",
    anchors=(
        ("Bb7", 0),  # I
        ("Eb7", 4),  # IV
        ("Bb7", 6),  # I
        ("F7", 8),  # V
        ("Eb7", 9),  # IV
        ("Bb7", 10),  # I
        ("F7", 11),  # V
    ),
    min_bars=MIN_BARS,
)


class ChordProgressionBuilder:
    """
    Builds sparse chord progressions from a harmonic template.

    The template is passed in explicitly; there is no shared factory
    state between builders.
    """

    def __init__(
        self,
        template: HarmonicTemplate = QUICK_CHANGE_BLUES,
        supported_meter: TimeSignature | None = None,
    ):
        """
        Initialize the builder.

        Args:
            template: Harmonic template to emit
            supported_meter: The one meter the template is written for
        """
        self.template = template
        self.supported_meter = supported_meter or TimeSignature.parse(SUPPORTED_TIME_SIGNATURE)

    def build(self, bars: int, meter: TimeSignature | str) -> ChordProgression:
        """
        Build the progression for a timeline of the given length.

        Args:
            bars: Total timeline length in bars
            meter: Meter of the style being rendered

        Returns:
            ChordProgression spanning `bars` bars

        Raises:
            ValidationError: If bars is shorter than the template or the
                meter is not the supported one
        """
        time_sig = self._check_meter(meter)

        if bars < self.template.min_bars:
            raise ValidationError(
                ErrorMessages.BARS_TOO_SHORT.format(minimum=self.template.min_bars, bars=bars),
                flag="--bars",
                bars=bars,
            )

        events = tuple(
            ChordEvent(symbol=symbol, bar=bar, beat=0.0) for symbol, bar in self.template.anchors
        )
        if bars > self.template.min_bars:
            logger.debug(
                "Harmonic sustain: %s holds from bar %d through bar %d",
                events[-1].symbol,
                events[-1].bar,
                bars - 1,
            )

        logger.debug("Built %s over %d bars of %s", self.template.name, bars, time_sig)
        return ChordProgression(bars=bars, beats_per_bar=time_sig.beats_per_bar, events=events)

    def _check_meter(self, meter: TimeSignature | str) -> TimeSignature:
        """Parse the meter and reject anything but the supported one."""
        if isinstance(meter, TimeSignature):
            time_sig = meter
        else:
            try:
                time_sig = TimeSignature.parse(meter)
            except ValueError as e:
                raise ValidationError(
                    ErrorMessages.UNSUPPORTED_METER.format(
                        supported=self.supported_meter, meter=meter
                    ),
                    meter=meter,
                ) from e

        if time_sig != self.supported_meter:
            raise ValidationError(
                ErrorMessages.UNSUPPORTED_METER.format(supported=self.supported_meter, meter=time_sig),
                meter=str(time_sig),
            )
        return time_sig
