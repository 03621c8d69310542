"""Data models for ULWILA scores: pitches, durations, notes, rests and parts."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Final, Literal, Union

Pitch = Literal["C", "D", "E", "F", "G", "A", "H"]
Octave = Literal["lower", "middle", "upper"]
Duration = Literal["whole", "half", "quarter", "eighth", "sixteenth"]
Clef = Literal["treble", "bass"]
RenderingMode = Literal["staff", "circles"]

PITCHES: Final[tuple[Pitch, ...]] = ("C", "D", "E", "F", "G", "A", "H")
OCTAVES: Final[tuple[Octave, ...]] = ("lower", "middle", "upper")
DURATIONS: Final[tuple[Duration, ...]] = ("whole", "half", "quarter", "eighth", "sixteenth")
CLEFS: Final[tuple[Clef, ...]] = ("treble", "bass")
RENDERING_MODES: Final[tuple[RenderingMode, ...]] = ("staff", "circles")

#: Length of each duration in quarter-note beats.
DURATION_TO_BEATS: Final[dict[Duration, float]] = {
    "whole": 4.0,
    "half": 2.0,
    "quarter": 1.0,
    "eighth": 0.5,
    "sixteenth": 0.25,
}


@dataclass(frozen=True)
class TimeSignature:
    """Meter of a score, e.g. ``TimeSignature(6, 8)`` for 6/8."""

    beats: int = 4
    beat_value: int = 4

    @property
    def quarter_beats_per_measure(self) -> float:
        """Measure length normalized to quarter-note beats (6/8 -> 3.0)."""
        return self.beats * (4 / self.beat_value)

    def __str__(self) -> str:
        return f"{self.beats}/{self.beat_value}"


@dataclass(frozen=True)
class Note:
    """
    A pitched note.

    Attributes:
        pitch:    Diatonic pitch name (``H`` is the German name for B).
        octave:   Coarse register; each register is seven diatonic steps apart.
        duration: Note value.
        lyric:    Optional syllable sung on this note.
        accented: Sharp flag. Only C, D, F, G and A have a visible sharp form.
    """

    pitch: Pitch
    octave: Octave
    duration: Duration
    lyric: str | None = None
    accented: bool | None = None


@dataclass(frozen=True)
class Rest:
    """A silence of the given duration."""

    duration: Duration


NoteOrRest = Union[Note, Rest]


@dataclass(frozen=True)
class Part:
    """A named voice: an ordered sequence of notes and rests."""

    notes: tuple[NoteOrRest, ...] = ()
    name: str | None = None


@dataclass(frozen=True)
class Selection:
    """Index address of a single note or rest inside a score."""

    part_index: int
    note_index: int


@dataclass(frozen=True)
class Score:
    """Root value handed to the layout engines and renderers."""

    title: str = ""
    rendering_mode: RenderingMode = "staff"
    time_signature: TimeSignature = TimeSignature()
    clef: Clef = "treble"
    parts: tuple[Part, ...] = ()
    tempo: float | None = None

    def iter_notes(self) -> Iterator[tuple[int, int, NoteOrRest]]:
        """
        Yield ``(part_index, note_index, element)`` for every note and rest.

        Parts are concatenated one after another; they are not aligned in time.
        """
        for part_index, part in enumerate(self.parts):
            for note_index, element in enumerate(part.notes):
                yield part_index, note_index, element

    def note_at(self, part_index: int, note_index: int) -> NoteOrRest | None:
        """Return the addressed element, or ``None`` when either index is out of range."""
        if not 0 <= part_index < len(self.parts):
            return None
        notes = self.parts[part_index].notes
        if not 0 <= note_index < len(notes):
            return None
        return notes[note_index]

    @property
    def note_count(self) -> int:
        return sum(len(part.notes) for part in self.parts)


def new_score() -> Score:
    """The blank score a fresh editor session starts from."""
    return Score(parts=(Part(),))
