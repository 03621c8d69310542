"""Unit tests for JSON score persistence and validation."""

import json

import pytest

from ulwila.persistence import (
    ScoreValidationError,
    dumps_score,
    load_score,
    loads_score,
    sanitize_filename,
    save_score,
    score_from_dict,
    score_to_dict,
)
from ulwila.score_models import Note, Part, Rest, Score, TimeSignature


def _sample_score() -> Score:
    return Score(
        title="Twinkle Twinkle",
        rendering_mode="circles",
        time_signature=TimeSignature(3, 4),
        clef="bass",
        tempo=96,
        parts=(
            Part(
                notes=(
                    Note("C", "middle", "quarter", lyric="Twin"),
                    Note("F", "lower", "half", accented=True),
                    Rest("eighth"),
                ),
                name="Voice",
            ),
        ),
    )


def _sample_dict() -> dict:
    return {
        "title": "Song",
        "renderingMode": "staff",
        "timeSignature": {"beats": 4, "beatValue": 4},
        "clef": "treble",
        "parts": [{"notes": [{"type": "note", "pitch": "C", "octave": "middle", "duration": "quarter"}]}],
    }


def test_score_to_dict_uses_camel_case_keys() -> None:
    data = score_to_dict(_sample_score())
    assert data["renderingMode"] == "circles"
    assert data["timeSignature"] == {"beats": 3, "beatValue": 4}
    assert data["tempo"] == 96
    assert data["parts"][0]["name"] == "Voice"


def test_optional_note_fields_are_omitted() -> None:
    data = score_to_dict(_sample_score())
    notes = data["parts"][0]["notes"]
    assert notes[0] == {"type": "note", "pitch": "C", "octave": "middle", "duration": "quarter", "lyric": "Twin"}
    assert notes[1]["accented"] is True
    assert "lyric" not in notes[1]
    assert notes[2] == {"type": "rest", "duration": "eighth"}


def test_score_without_tempo_omits_key() -> None:
    assert "tempo" not in score_to_dict(Score())


def test_dumps_then_loads_is_lossless() -> None:
    score = _sample_score()
    assert loads_score(dumps_score(score)) == score


def test_dumps_is_indented_json() -> None:
    text = dumps_score(_sample_score())
    assert text.startswith('{\n  "title": "Twinkle Twinkle"')


def test_minimal_document_loads() -> None:
    score = score_from_dict(_sample_dict())
    assert score.title == "Song"
    assert score.parts[0].notes == (Note("C", "middle", "quarter"),)
    assert score.tempo is None


def test_non_object_is_rejected() -> None:
    with pytest.raises(ScoreValidationError, match="Score must be a JSON object"):
        score_from_dict([1, 2, 3])


def test_invalid_json_is_rejected() -> None:
    with pytest.raises(ScoreValidationError, match="Invalid JSON file"):
        loads_score("{not json")


def test_missing_title_is_rejected() -> None:
    data = _sample_dict()
    del data["title"]
    with pytest.raises(ScoreValidationError, match="^title:"):
        score_from_dict(data)


def test_invalid_rendering_mode_names_field() -> None:
    data = _sample_dict()
    data["renderingMode"] = "piano-roll"
    with pytest.raises(ScoreValidationError, match='renderingMode: invalid value "piano-roll"'):
        score_from_dict(data)


def test_invalid_pitch_names_note_path() -> None:
    data = _sample_dict()
    data["parts"][0]["notes"].append({"type": "note", "pitch": "B", "octave": "middle", "duration": "half"})
    with pytest.raises(ScoreValidationError) as excinfo:
        score_from_dict(data)
    assert str(excinfo.value) == 'parts[0].notes[1].pitch: invalid value "B", expected one of C, D, E, F, G, A, H'


def test_unknown_note_type_is_rejected() -> None:
    data = _sample_dict()
    data["parts"][0]["notes"][0]["type"] = "chord"
    with pytest.raises(ScoreValidationError, match=r"parts\[0\]\.notes\[0\]\.type"):
        score_from_dict(data)


def test_rest_requires_valid_duration() -> None:
    data = _sample_dict()
    data["parts"][0]["notes"] = [{"type": "rest", "duration": "breve"}]
    with pytest.raises(ScoreValidationError, match=r"parts\[0\]\.notes\[0\]\.duration"):
        score_from_dict(data)


def test_accented_must_be_boolean() -> None:
    data = _sample_dict()
    data["parts"][0]["notes"][0]["accented"] = "yes"
    with pytest.raises(ScoreValidationError, match="accented: must be a boolean"):
        score_from_dict(data)


def test_lyric_must_be_string() -> None:
    data = _sample_dict()
    data["parts"][0]["notes"][0]["lyric"] = 7
    with pytest.raises(ScoreValidationError, match="lyric: must be a string"):
        score_from_dict(data)


@pytest.mark.parametrize("beats", [0, -3, 2.5, "4", True, None])
def test_time_signature_needs_positive_integers(beats: object) -> None:
    data = _sample_dict()
    data["timeSignature"]["beats"] = beats
    with pytest.raises(ScoreValidationError, match="timeSignature.beats: must be a positive integer"):
        score_from_dict(data)


def test_integral_float_time_signature_is_accepted() -> None:
    data = _sample_dict()
    data["timeSignature"]["beatValue"] = 8.0
    assert score_from_dict(data).time_signature == TimeSignature(4, 8)


def test_parts_must_be_array() -> None:
    data = _sample_dict()
    data["parts"] = {}
    with pytest.raises(ScoreValidationError, match="parts: must be an array"):
        score_from_dict(data)


def test_part_notes_must_be_array() -> None:
    data = _sample_dict()
    data["parts"] = [{"name": "Voice"}]
    with pytest.raises(ScoreValidationError, match=r"parts\[0\]\.notes: must be an array"):
        score_from_dict(data)


def test_tempo_must_be_number() -> None:
    data = _sample_dict()
    data["tempo"] = "fast"
    with pytest.raises(ScoreValidationError, match="tempo: must be a finite number"):
        score_from_dict(data)


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_tempo_is_rejected(literal: str) -> None:
    text = json.dumps(_sample_dict())[:-1] + f', "tempo": {literal}}}'
    with pytest.raises(ScoreValidationError, match="tempo: must be a finite number"):
        loads_score(text)


def test_dumps_refuses_non_finite_tempo() -> None:
    with pytest.raises(ValueError):
        dumps_score(Score(tempo=float("nan")))


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Twinkle Twinkle", "Twinkle_Twinkle"),
        ("  Ode: to Joy! ", "Ode__to_Joy_"),
        ("", "score"),
        ("   ", "score"),
        ("Dal-2024", "Dal_2024"),
    ],
)
def test_sanitize_filename(title: str, expected: str) -> None:
    assert sanitize_filename(title) == expected


def test_save_and_load_file(tmp_path) -> None:
    path = tmp_path / "song.json"
    save_score(_sample_score(), str(path))
    assert json.loads(path.read_text(encoding="utf-8"))["title"] == "Twinkle Twinkle"
    assert load_score(str(path)) == _sample_score()


def test_load_missing_file_raises_os_error(tmp_path) -> None:
    with pytest.raises(OSError):
        load_score(str(tmp_path / "missing.json"))
