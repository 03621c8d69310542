"""Command-line tests driven through click's CliRunner."""

import json

import pytest
from click.testing import CliRunner

from ulwila import __version__
from ulwila.cli import main
from ulwila.persistence import load_score
from ulwila.score_models import Note, Rest, TimeSignature


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _new_score(runner: CliRunner, path: str, *args: str) -> None:
    result = runner.invoke(main, ["new", path, *args])
    assert result.exit_code == 0, result.output


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_commands(runner: CliRunner) -> None:
    result = runner.invoke(main, ["-h"])
    assert result.exit_code == 0
    for command in ("new", "add", "render", "info"):
        assert command in result.output


def test_new_creates_score(runner: CliRunner, tmp_path) -> None:
    path = str(tmp_path / "song.json")
    _new_score(runner, path, "--title", "Twinkle", "--clef", "bass", "--time", "3/4", "--mode", "circles")
    score = load_score(path)
    assert score.title == "Twinkle"
    assert score.clef == "bass"
    assert score.time_signature == TimeSignature(3, 4)
    assert score.rendering_mode == "circles"
    assert len(score.parts) == 1


def test_new_rejects_bad_time_signature(runner: CliRunner, tmp_path) -> None:
    result = runner.invoke(main, ["new", str(tmp_path / "x.json"), "--time", "four"])
    assert result.exit_code != 0
    assert "time signature" in result.output


@pytest.mark.parametrize("tempo", ["nan", "inf"])
def test_new_rejects_non_finite_tempo(runner: CliRunner, tmp_path, tempo: str) -> None:
    path = tmp_path / "x.json"
    result = runner.invoke(main, ["new", str(path), "--tempo", tempo])
    assert result.exit_code != 0
    assert "finite" in result.output
    assert not path.exists()


def test_add_note_and_rest(runner: CliRunner, tmp_path) -> None:
    path = str(tmp_path / "song.json")
    _new_score(runner, path)
    result = runner.invoke(
        main, ["add", path, "--pitch", "F", "--octave", "lower", "--duration", "half", "--accented", "--lyric", "la"]
    )
    assert result.exit_code == 0, result.output
    result = runner.invoke(main, ["add", path, "--rest", "--duration", "eighth"])
    assert result.exit_code == 0, result.output
    assert load_score(path).parts[0].notes == (
        Note("F", "lower", "half", lyric="la", accented=True),
        Rest("eighth"),
    )


def test_add_requires_pitch_or_rest(runner: CliRunner, tmp_path) -> None:
    path = str(tmp_path / "song.json")
    _new_score(runner, path)
    result = runner.invoke(main, ["add", path])
    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_add_rejects_both_pitch_and_rest(runner: CliRunner, tmp_path) -> None:
    path = str(tmp_path / "song.json")
    _new_score(runner, path)
    result = runner.invoke(main, ["add", path, "--pitch", "C", "--rest"])
    assert result.exit_code == 1


def test_add_rest_rejects_note_only_flags(runner: CliRunner, tmp_path) -> None:
    path = str(tmp_path / "song.json")
    _new_score(runner, path)
    for flags in (["--accented"], ["--lyric", "x"]):
        result = runner.invoke(main, ["add", path, "--rest", *flags])
        assert result.exit_code == 1
        assert "only apply to notes" in result.output
    assert load_score(path).parts[0].notes == ()


def test_invalid_score_file_reports_field(runner: CliRunner, tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"title": "x", "renderingMode": "tab"}), encoding="utf-8")
    result = runner.invoke(main, ["info", str(path)])
    assert result.exit_code == 1
    assert "renderingMode" in result.output


def test_info_summarizes_score(runner: CliRunner, tmp_path) -> None:
    path = str(tmp_path / "song.json")
    _new_score(runner, path, "--title", "Info Song")
    runner.invoke(main, ["add", path, "--pitch", "C"])
    result = runner.invoke(main, ["info", path])
    assert result.exit_code == 0, result.output
    assert "Info Song" in result.output
    assert "4/4" in result.output
    assert "1 element(s)" in result.output
    assert "1 staff system(s), 1 circle row(s)" in result.output


def test_info_uses_translated_placeholder(runner: CliRunner, tmp_path) -> None:
    path = str(tmp_path / "song.json")
    _new_score(runner, path)
    result = runner.invoke(main, ["info", path, "--lang", "hu"])
    assert "Névtelen kotta" in result.output


def test_render_svg_default_output(runner: CliRunner, tmp_path) -> None:
    path = str(tmp_path / "song.json")
    _new_score(runner, path)
    runner.invoke(main, ["add", path, "--pitch", "G"])
    result = runner.invoke(main, ["render", path, "--select", "0:0"])
    assert result.exit_code == 0, result.output
    svg = (tmp_path / "score.svg").read_text(encoding="utf-8")
    assert 'class="selection-highlight"' in svg


def test_render_default_output_is_named_after_title(runner: CliRunner, tmp_path) -> None:
    path = str(tmp_path / "song.json")
    _new_score(runner, path, "--title", "Ode: to Joy")
    result = runner.invoke(main, ["render", path, "--format", "html"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "Ode__to_Joy.html").exists()


def test_render_mode_override(runner: CliRunner, tmp_path) -> None:
    path = str(tmp_path / "song.json")
    _new_score(runner, path)
    runner.invoke(main, ["add", path, "--pitch", "G"])
    out = tmp_path / "circles.svg"
    result = runner.invoke(main, ["render", path, "--mode", "circles", "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert 'data-testid="circles-renderer"' in out.read_text(encoding="utf-8")
    assert load_score(path).rendering_mode == "staff"


def test_render_rejects_bad_selection(runner: CliRunner, tmp_path) -> None:
    path = str(tmp_path / "song.json")
    _new_score(runner, path)
    result = runner.invoke(main, ["render", path, "--select", "first"])
    assert result.exit_code != 0
    assert "PART:NOTE" in result.output


def test_render_unwritable_output_fails(runner: CliRunner, tmp_path) -> None:
    path = str(tmp_path / "song.json")
    _new_score(runner, path)
    result = runner.invoke(main, ["render", path, "-o", str(tmp_path / "missing" / "out.svg")])
    assert result.exit_code == 1
    assert "ERROR: Could not write output file" in result.output


@pytest.mark.integration
def test_render_pdf(runner: CliRunner, tmp_path) -> None:
    path = str(tmp_path / "song.json")
    _new_score(runner, path, "--title", "Printed")
    runner.invoke(main, ["add", path, "--pitch", "A", "--accented"])
    result = runner.invoke(main, ["render", path, "--format", "pdf"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "Printed.pdf").read_bytes().startswith(b"%PDF")
