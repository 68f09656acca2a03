"""
Chord symbols - parsing lead-sheet names like 'Bb7', 'Ebm7', 'F7(b9)'.

A ChordSymbol is a root pitch class plus a set of chord tones expressed
as semitone offsets from the root. The rendering collaborator uses the
tones to place bass roots and comping voicings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .pitch import PitchClass

_SYMBOL_RE = re.compile(r"^([A-Ga-g])([#b]?)([^/]*)(?:/([A-Ga-g][#b]?))?$")


def _extensions(quality: str, tones: list[int]) -> list[int]:
    """Add 9/11/13 extensions named in a quality string."""
    if "b9" in quality:
        tones.append(1)
    elif "#9" in quality:
        tones.append(3)
    elif "9" in quality:
        tones.append(2)
    if "#11" in quality:
        tones.append(6)
    elif "11" in quality:
        tones.append(5)
    if "b13" in quality:
        tones.append(8)
    elif "13" in quality:
        tones.append(9)
    return list(dict.fromkeys(tones))


def tones_for_quality(quality: str) -> tuple[int, ...]:
    """
    Get chord tones (semitones above the root) for a quality string.

    Unknown qualities fall back to a major triad.
    """
    q = quality.strip().lower()
    if not q:
        return (0, 4, 7)

    if "maj7" in q or q.startswith("m7m"):
        tones = [0, 4, 7, 11]
    elif q.startswith(("min7", "m7")):
        tones = [0, 3, 7, 10]
        if "b5" in q:
            tones[2] = 6
    elif q.startswith("dim7"):
        return (0, 3, 6, 9)
    elif q.startswith("dim"):
        return (0, 3, 6)
    elif q.startswith(("aug", "+")):
        tones = [0, 4, 8]
        if "7" in q:
            tones.append(10)
        return tuple(tones)
    elif q.startswith("sus"):
        tones = [0, 5, 7]
        if "7" in q:
            tones.append(10)
    elif q.startswith(("min", "m")):
        tones = [0, 3, 7]
        if "6" in q:
            tones.append(9)
    elif "7" in q:
        tones = [0, 4, 7, 10]
        if "b5" in q:
            tones[2] = 6
        elif "#5" in q:
            tones[2] = 8
    elif q.startswith("6"):
        tones = [0, 4, 7, 9]
    else:
        tones = [0, 4, 7]

    return tuple(_extensions(q, tones))


@dataclass(frozen=True)
class ChordSymbol:
    """
    A parsed lead-sheet chord symbol.

    Immutable and hashable.
    """

    name: str
    root: PitchClass
    tones: tuple[int, ...]
    bass: PitchClass | None = None  # For slash chords

    @classmethod
    def parse(cls, name: str) -> ChordSymbol:
        """
        Parse a chord symbol like 'Bb7', 'C', 'F#m7b5', 'Eb7/G'.

        Raises:
            ValueError: If the symbol has no recognizable root
        """
        match = _SYMBOL_RE.match(name.strip())
        if match is None:
            raise ValueError(f"Invalid chord symbol: {name!r}")

        letter, accidental, quality, bass = match.groups()
        return cls(
            name=name.strip(),
            root=PitchClass.parse(letter.upper() + accidental),
            tones=tones_for_quality(quality),
            bass=PitchClass.parse(bass[0].upper() + bass[1:]) if bass else None,
        )

    @property
    def bass_note(self) -> PitchClass:
        """The lowest note: the slash bass if given, otherwise the root."""
        return self.bass if self.bass is not None else self.root

    def pitch_classes(self) -> list[PitchClass]:
        """Get all pitch classes in this chord, in tone order."""
        return [self.root.transpose(t) for t in self.tones]

    def get_midi_notes(self, octave: int = 4) -> list[int]:
        """Get MIDI note numbers for the chord in close position above the root."""
        root_midi = self.root.to_midi(octave)
        return [root_midi + t for t in sorted(self.tones)]

    def __str__(self) -> str:
        return self.name
