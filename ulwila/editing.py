"""Immutable score edits and selection changes.

Every function returns a new :class:`Score` (or selection) and leaves its input
untouched, so renderers always see a consistent snapshot. Edits addressed at a
missing part or note return the score unchanged.
"""

from __future__ import annotations

from dataclasses import replace

from ulwila.score_models import (
    Clef,
    Duration,
    Note,
    NoteOrRest,
    Octave,
    Part,
    Pitch,
    RenderingMode,
    Rest,
    Score,
    Selection,
    TimeSignature,
)


def _with_part(score: Score, part_index: int, notes: tuple[NoteOrRest, ...]) -> Score:
    parts = list(score.parts)
    parts[part_index] = replace(parts[part_index], notes=notes)
    return replace(score, parts=tuple(parts))


def _append(score: Score, element: NoteOrRest) -> Score:
    # New material always goes into the first part; create it on an empty score.
    if not score.parts:
        score = replace(score, parts=(Part(),))
    return _with_part(score, 0, score.parts[0].notes + (element,))


def add_note(
    score: Score,
    pitch: Pitch,
    octave: Octave,
    duration: Duration,
    accented: bool = False,
) -> Score:
    """Append a note to the first part. ``accented`` is only stored when true."""
    return _append(score, Note(pitch, octave, duration, accented=True if accented else None))


def add_rest(score: Score, duration: Duration) -> Score:
    return _append(score, Rest(duration))


def set_title(score: Score, title: str) -> Score:
    return replace(score, title=title)


def set_time_signature(score: Score, time_signature: TimeSignature) -> Score:
    return replace(score, time_signature=time_signature)


def set_clef(score: Score, clef: Clef) -> Score:
    return replace(score, clef=clef)


def set_rendering_mode(score: Score, rendering_mode: RenderingMode) -> Score:
    return replace(score, rendering_mode=rendering_mode)


def edit_note(
    score: Score,
    part_index: int,
    note_index: int,
    *,
    pitch: Pitch | None = None,
    octave: Octave | None = None,
    duration: Duration | None = None,
    accented: bool | None = None,
) -> Score:
    """Change fields of a note. Rests cannot be edited this way."""
    existing = score.note_at(part_index, note_index)
    if not isinstance(existing, Note):
        return score
    changes = {
        key: value
        for key, value in (("pitch", pitch), ("octave", octave), ("duration", duration), ("accented", accented))
        if value is not None
    }
    notes = list(score.parts[part_index].notes)
    notes[note_index] = replace(existing, **changes)
    return _with_part(score, part_index, tuple(notes))


def delete_note(score: Score, part_index: int, note_index: int) -> Score:
    """Remove a note or rest. Later indices in the part shift down by one."""
    if score.note_at(part_index, note_index) is None:
        return score
    notes = score.parts[part_index].notes
    return _with_part(score, part_index, notes[:note_index] + notes[note_index + 1:])


def reorder_note(score: Score, part_index: int, from_index: int, to_index: int) -> Score:
    if score.note_at(part_index, from_index) is None:
        return score
    notes = list(score.parts[part_index].notes)
    moved = notes.pop(from_index)
    notes.insert(to_index, moved)
    return _with_part(score, part_index, tuple(notes))


def set_lyric(score: Score, part_index: int, note_index: int, lyric: str) -> Score:
    """Attach a lyric to a note; an empty string removes it."""
    existing = score.note_at(part_index, note_index)
    if not isinstance(existing, Note):
        return score
    notes = list(score.parts[part_index].notes)
    notes[note_index] = replace(existing, lyric=lyric or None)
    return _with_part(score, part_index, tuple(notes))


def select_note(part_index: int, note_index: int) -> Selection:
    return Selection(part_index, note_index)


def clear_selection() -> None:
    return None
