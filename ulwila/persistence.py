"""JSON persistence for scores.

The on-disk shape mirrors the score model with camelCase keys::

    {"title": "...", "tempo": 90, "renderingMode": "staff",
     "timeSignature": {"beats": 4, "beatValue": 4}, "clef": "treble",
     "parts": [{"name": "Voice", "notes": [
         {"type": "note", "pitch": "C", "octave": "middle", "duration": "quarter",
          "lyric": "la", "accented": true},
         {"type": "rest", "duration": "half"}]}]}

Optional keys are omitted when unset, so loading and saving again is lossless.
Loading validates everything and names the offending field on failure.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Sequence
from typing import Any

from ulwila.score_models import (
    CLEFS,
    DURATIONS,
    OCTAVES,
    PITCHES,
    RENDERING_MODES,
    Note,
    NoteOrRest,
    Part,
    Rest,
    Score,
    TimeSignature,
)

logger = logging.getLogger(__name__)


class ScoreValidationError(ValueError):
    """A score document is malformed. The message names the field and the bad value."""


def _expect_choice(value: Any, choices: Sequence[str], label: str) -> str:
    if not isinstance(value, str) or value not in choices:
        raise ScoreValidationError(
            f'{label}: invalid value "{value}", expected one of {", ".join(choices)}'
        )
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_positive_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return isinstance(value, int) and value > 0


# ------------------------------------------------------------------
# Serialization
# ------------------------------------------------------------------

def note_to_dict(element: NoteOrRest) -> dict[str, Any]:
    if isinstance(element, Rest):
        return {"type": "rest", "duration": element.duration}
    data: dict[str, Any] = {
        "type": "note",
        "pitch": element.pitch,
        "octave": element.octave,
        "duration": element.duration,
    }
    if element.lyric is not None:
        data["lyric"] = element.lyric
    if element.accented is not None:
        data["accented"] = element.accented
    return data


def score_to_dict(score: Score) -> dict[str, Any]:
    data: dict[str, Any] = {"title": score.title}
    if score.tempo is not None:
        data["tempo"] = score.tempo
    data["renderingMode"] = score.rendering_mode
    data["timeSignature"] = {
        "beats": score.time_signature.beats,
        "beatValue": score.time_signature.beat_value,
    }
    data["clef"] = score.clef
    parts = []
    for part in score.parts:
        part_data: dict[str, Any] = {}
        if part.name is not None:
            part_data["name"] = part.name
        part_data["notes"] = [note_to_dict(element) for element in part.notes]
        parts.append(part_data)
    data["parts"] = parts
    return data


def dumps_score(score: Score) -> str:
    return json.dumps(score_to_dict(score), indent=2, ensure_ascii=False, allow_nan=False)


# ------------------------------------------------------------------
# Validation and parsing
# ------------------------------------------------------------------

def _note_from_dict(entry: Any, part_index: int, note_index: int) -> NoteOrRest:
    prefix = f"parts[{part_index}].notes[{note_index}]"
    if not isinstance(entry, dict):
        raise ScoreValidationError(f"{prefix}: must be an object")

    kind = entry.get("type")
    if kind == "rest":
        duration = _expect_choice(entry.get("duration"), DURATIONS, f"{prefix}.duration")
        return Rest(duration=duration)  # type: ignore[arg-type]

    if kind != "note":
        raise ScoreValidationError(f'{prefix}.type: invalid value "{kind}", expected "note" or "rest"')

    pitch = _expect_choice(entry.get("pitch"), PITCHES, f"{prefix}.pitch")
    octave = _expect_choice(entry.get("octave"), OCTAVES, f"{prefix}.octave")
    duration = _expect_choice(entry.get("duration"), DURATIONS, f"{prefix}.duration")

    lyric = entry.get("lyric")
    if lyric is not None and not isinstance(lyric, str):
        raise ScoreValidationError(f'{prefix}.lyric: must be a string if provided, got "{lyric}"')
    accented = entry.get("accented")
    if accented is not None and not isinstance(accented, bool):
        raise ScoreValidationError(f'{prefix}.accented: must be a boolean if provided, got "{accented}"')

    return Note(
        pitch=pitch,  # type: ignore[arg-type]
        octave=octave,  # type: ignore[arg-type]
        duration=duration,  # type: ignore[arg-type]
        lyric=lyric,
        accented=accented,
    )


def _part_from_dict(entry: Any, part_index: int) -> Part:
    prefix = f"parts[{part_index}]"
    if not isinstance(entry, dict):
        raise ScoreValidationError(f"{prefix}: must be an object")
    notes = entry.get("notes")
    if not isinstance(notes, list):
        raise ScoreValidationError(f'{prefix}.notes: must be an array, got "{notes}"')
    name = entry.get("name")
    if name is not None and not isinstance(name, str):
        raise ScoreValidationError(f'{prefix}.name: must be a string if provided, got "{name}"')
    return Part(
        notes=tuple(_note_from_dict(note, part_index, i) for i, note in enumerate(notes)),
        name=name,
    )


def score_from_dict(data: Any) -> Score:
    """
    Build a :class:`Score` from parsed JSON.

    Raises:
        ScoreValidationError: If any field is missing or invalid.
    """
    if not isinstance(data, dict):
        raise ScoreValidationError("Score must be a JSON object")

    title = data.get("title")
    if not isinstance(title, str):
        raise ScoreValidationError(f'title: must be a string, got "{title}"')

    rendering_mode = _expect_choice(data.get("renderingMode"), RENDERING_MODES, "renderingMode")
    clef = _expect_choice(data.get("clef"), CLEFS, "clef")

    ts = data.get("timeSignature")
    if not isinstance(ts, dict):
        raise ScoreValidationError(f'timeSignature: must be an object, got "{ts}"')
    for key in ("beats", "beatValue"):
        if not _is_positive_int(ts.get(key)):
            raise ScoreValidationError(
                f'timeSignature.{key}: must be a positive integer, got "{ts.get(key)}"'
            )

    parts = data.get("parts")
    if not isinstance(parts, list):
        raise ScoreValidationError(f'parts: must be an array, got "{parts}"')

    tempo = data.get("tempo")
    if tempo is not None and not _is_number(tempo):
        raise ScoreValidationError(f'tempo: must be a finite number if provided, got "{tempo}"')

    return Score(
        title=title,
        rendering_mode=rendering_mode,  # type: ignore[arg-type]
        time_signature=TimeSignature(int(ts["beats"]), int(ts["beatValue"])),
        clef=clef,  # type: ignore[arg-type]
        parts=tuple(_part_from_dict(part, i) for i, part in enumerate(parts)),
        tempo=tempo,
    )


def loads_score(text: str) -> Score:
    """
    Parse and validate a score document.

    Raises:
        ScoreValidationError: If the text is not JSON or not a valid score.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ScoreValidationError("Invalid JSON file") from exc
    return score_from_dict(data)


# ------------------------------------------------------------------
# Files
# ------------------------------------------------------------------

def sanitize_filename(title: str) -> str:
    """Replace every non-alphanumeric character with ``_``; blank titles become ``score``."""
    trimmed = (title or "").strip()
    if not trimmed:
        return "score"
    return re.sub(r"[^a-zA-Z0-9]", "_", trimmed)


def save_score(score: Score, output_path: str) -> None:
    """
    Write ``score`` as JSON.

    Raises:
        OSError: If the file cannot be written.
    """
    with open(output_path, "w", encoding="utf-8") as fh:
        fh.write(dumps_score(score))
        fh.write("\n")
    logger.info("saved score %r to %s", score.title, output_path)


def load_score(path: str) -> Score:
    """
    Read and validate a score file.

    Raises:
        OSError:              If the file cannot be read.
        ScoreValidationError: If the content is not a valid score.
    """
    with open(path, encoding="utf-8") as fh:
        text = fh.read()
    score = loads_score(text)
    logger.info("loaded score %r from %s (%d notes)", score.title, path, score.note_count)
    return score
