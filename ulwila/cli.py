"""ULWILA CLI entry point."""

import math
import re
import sys
from dataclasses import replace
from pathlib import Path

import click

from ulwila import __version__
from ulwila.circles_layout import compute_circles_layout
from ulwila.editing import add_note, add_rest, set_lyric
from ulwila.exporters import FORMAT_EXTENSIONS, ScoreExporter, default_filename
from ulwila.i18n import SUPPORTED_LANGUAGES, translations
from ulwila.logger_config import set_verbosity
from ulwila.persistence import ScoreValidationError, load_score, save_score
from ulwila.raster import ExportError
from ulwila.score_models import (
    CLEFS,
    DURATIONS,
    OCTAVES,
    PITCHES,
    RENDERING_MODES,
    Note,
    Score,
    Selection,
    TimeSignature,
    new_score,
)
from ulwila.staff_layout import compute_staff_layout

_TIME_SIGNATURE_RE = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")
_SELECTION_RE = re.compile(r"^\s*(\d+)\s*:\s*(\d+)\s*$")


def _parse_time_signature(_ctx: click.Context, _param: click.Parameter, value: str) -> TimeSignature:
    match = _TIME_SIGNATURE_RE.match(value)
    if not match or int(match.group(1)) < 1 or int(match.group(2)) < 1:
        raise click.BadParameter(f"'{value}' is not a time signature like 4/4 or 6/8.")
    return TimeSignature(int(match.group(1)), int(match.group(2)))


def _parse_selection(_ctx: click.Context, _param: click.Parameter, value: str | None) -> Selection | None:
    if value is None:
        return None
    match = _SELECTION_RE.match(value)
    if not match:
        raise click.BadParameter(f"'{value}' is not a PART:NOTE index pair like 0:3.")
    return Selection(int(match.group(1)), int(match.group(2)))


def _check_finite(_ctx: click.Context, _param: click.Parameter, value: float | None) -> float | None:
    if value is not None and not math.isfinite(value):
        raise click.BadParameter(f"'{value}' is not a finite number.")
    return value


def _load_or_exit(path: str) -> Score:
    try:
        return load_score(path)
    except OSError as exc:
        click.echo(f"  ERROR: Could not read score file — {exc}", err=True)
        sys.exit(1)
    except ScoreValidationError as exc:
        click.echo(f"  ERROR: Invalid score file — {exc}", err=True)
        sys.exit(1)


def _save_or_exit(score: Score, path: str) -> None:
    try:
        save_score(score, path)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write score file — {exc}", err=True)
        sys.exit(1)


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="ulwila")
@click.option("--verbose", "-v", is_flag=True, help="Log layout and export details to stderr.")
def main(verbose: bool) -> None:
    """ULWILA — color score editor with staff and color-circle notation."""
    set_verbosity(verbose)


# ── new subcommand ─────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(dir_okay=False, writable=True))
@click.option("--title", default="", help="Score title.")
@click.option("--clef", type=click.Choice(CLEFS), default="treble", show_default=True)
@click.option(
    "--mode",
    "rendering_mode",
    type=click.Choice(RENDERING_MODES),
    default="staff",
    show_default=True,
    help="Rendering mode: five-line staff or ULWILA color circles.",
)
@click.option(
    "--time",
    "time_signature",
    default="4/4",
    show_default=True,
    callback=_parse_time_signature,
    help="Time signature, e.g. 3/4 or 6/8.",
)
@click.option(
    "--tempo", type=click.FloatRange(min=1), default=None, callback=_check_finite, help="Tempo in BPM."
)
def new(
    path: str,
    title: str,
    clef: str,
    rendering_mode: str,
    time_signature: TimeSignature,
    tempo: float | None,
) -> None:
    """
    Create an empty score file.

    \b
    Examples:
      ulwila new song.json --title "Twinkle Twinkle"
      ulwila new song.json --clef bass --time 3/4 --mode circles
    """
    score = replace(
        new_score(),
        title=title,
        clef=clef,
        rendering_mode=rendering_mode,
        time_signature=time_signature,
        tempo=tempo,
    )
    _save_or_exit(score, path)
    click.echo(f"Created '{path}' ({time_signature}, {clef} clef, {rendering_mode} mode).")


# ── add subcommand ─────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option("--pitch", type=click.Choice(PITCHES), default=None, help="Pitch name (H is B).")
@click.option("--octave", type=click.Choice(OCTAVES), default="middle", show_default=True)
@click.option("--duration", type=click.Choice(DURATIONS), default="quarter", show_default=True)
@click.option("--rest", is_flag=True, help="Append a rest instead of a note.")
@click.option("--accented", is_flag=True, help="Sharp the note (split-color rendering).")
@click.option("--lyric", default=None, help="Lyric syllable for the note.")
def add(
    path: str,
    pitch: str | None,
    octave: str,
    duration: str,
    rest: bool,
    accented: bool,
    lyric: str | None,
) -> None:
    """
    Append a note or rest to the first part of a score file.

    \b
    Examples:
      ulwila add song.json --pitch C --duration half
      ulwila add song.json --pitch F --accented --lyric twin
      ulwila add song.json --rest --duration quarter
    """
    if rest == (pitch is not None):
        click.echo("  ERROR: Give exactly one of --pitch or --rest.", err=True)
        sys.exit(1)
    if rest and (accented or lyric is not None):
        click.echo("  ERROR: --accented and --lyric only apply to notes, not to --rest.", err=True)
        sys.exit(1)

    score = _load_or_exit(path)
    if rest:
        score = add_rest(score, duration)
        label = f"{duration} rest"
    else:
        score = add_note(score, pitch, octave, duration, accented=accented)
        if lyric:
            score = set_lyric(score, 0, len(score.parts[0].notes) - 1, lyric)
        label = f"{duration} {pitch} ({octave}{', accented' if accented else ''})"
    _save_or_exit(score, path)
    click.echo(f"Added {label}; part 1 now has {len(score.parts[0].notes)} element(s).")


# ── render subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination file. Defaults to the score title as a file name next to the score.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(sorted(FORMAT_EXTENSIONS), case_sensitive=False),
    default="svg",
    show_default=True,
)
@click.option(
    "--mode",
    "rendering_mode",
    type=click.Choice(RENDERING_MODES),
    default=None,
    help="Override the score's own rendering mode.",
)
@click.option("--width", type=click.IntRange(min=100), default=800, show_default=True, help="Canvas width in pixels.")
@click.option(
    "--select",
    "selection",
    default=None,
    metavar="PART:NOTE",
    callback=_parse_selection,
    help="Highlight one note, e.g. 0:3.",
)
@click.option("--lang", type=click.Choice(SUPPORTED_LANGUAGES), default="en", show_default=True)
def render(
    path: str,
    output: str | None,
    output_format: str,
    rendering_mode: str | None,
    width: int,
    selection: Selection | None,
    lang: str,
) -> None:
    """
    Render a score file as SVG, PNG, PDF, HTML or JSON.

    \b
    Examples:
      ulwila render song.json
      ulwila render song.json --format pdf --lang hu
      ulwila render song.json --mode circles --format png -o circles.png
    """
    score = _load_or_exit(path)
    if rendering_mode is not None:
        score = replace(score, rendering_mode=rendering_mode)

    normalized_format = output_format.lower()
    resolved_output = (
        output if output is not None else str(Path(path).parent / default_filename(score, normalized_format))
    )

    click.echo(f"ulwila v{__version__}")
    click.echo(f"  Score  : {path}")
    click.echo(f"  Mode   : {score.rendering_mode}")
    click.echo(f"  Format : {normalized_format}")
    click.echo(f"  Output : {resolved_output}")

    exporter = ScoreExporter(output_format=normalized_format, width=width, language=lang)
    try:
        exporter.export(score, resolved_output, selection=selection)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write output file — {exc}", err=True)
        sys.exit(1)
    except ExportError as exc:
        click.echo(f"  ERROR: Could not render score — {exc}", err=True)
        sys.exit(1)

    click.echo(f"Done!  Wrote '{resolved_output}'.")


# ── info subcommand ────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option("--lang", type=click.Choice(SUPPORTED_LANGUAGES), default="en", show_default=True)
def info(path: str, lang: str) -> None:
    """Summarize a score file and its layout."""
    score = _load_or_exit(path)
    labels = translations(lang)

    click.echo(f"Title  : {score.title or labels.untitled_score}")
    if score.tempo is not None:
        click.echo(f"Tempo  : {score.tempo:g} BPM")
    click.echo(f"Meter  : {score.time_signature}  |  Clef: {score.clef}  |  Mode: {score.rendering_mode}")
    for part_index, part in enumerate(score.parts):
        name = part.name or f"Part {part_index + 1}"
        click.echo(f"  {name}: {len(part.notes)} element(s)")
        for element in part.notes:
            if isinstance(element, Note):
                sharp = " #" if element.accented else ""
                lyric = f"  '{element.lyric}'" if element.lyric else ""
                click.echo(
                    f"    {labels.note_labels[element.pitch]}{sharp:<2}  "
                    f"{labels.octaves[element.octave]:<8}  {labels.durations[element.duration]}{lyric}"
                )
            else:
                click.echo(f"    -          {'':<8}  {labels.durations[element.duration]}")

    systems = len(compute_staff_layout(score).systems)
    rows = len(compute_circles_layout(score).rows)
    click.echo(f"Layout : {systems} staff system(s), {rows} circle row(s) at 800 px")
