"""Glyph geometry for staff notation: clefs, rests and noteheads.

Path strings use absolute ``M``/``L``/``C``/``Q``/``Z`` commands around a local
origin so they can be emitted verbatim into SVG or replayed on a raster canvas
through :func:`parse_path`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from ulwila.score_models import Duration

# Treble (G) clef. Origin sits on the G line, second line from the bottom.
TREBLE_CLEF_PATH: Final[str] = (
    "M4,20 C4,16 0,14 0,10 C0,6 4,4 4,0 "
    "C4,-4 2,-8 2,-12 C2,-18 4,-24 8,-28 "
    "C10,-26 10,-22 8,-18 "
    "C6,-14 2,-10 2,-6 C2,-2 4,0 8,0 "
    "C12,0 14,-2 14,-6 C14,-10 10,-12 6,-12 "
    "C2,-12 0,-10 0,-6 "
    "C0,-2 2,2 4,6 C6,10 6,14 4,18 C2,22 -2,22 -2,18"
)

# Bass (F) clef body. Origin sits on the F line, second line from the top.
BASS_CLEF_PATH: Final[str] = (
    "M0,0 C4,-2 10,-6 12,-12 C14,-18 10,-22 4,-22 "
    "C-2,-22 -4,-16 -4,-12 C-4,-6 0,0 6,4 C10,6 14,10 14,14"
)


@dataclass(frozen=True)
class BassClefDots:
    """Offsets of the two bass clef dots, relative to the F line at the clef origin."""

    dot1_y: float = -8.0
    dot2_y: float = -2.0
    dot_x: float = 18.0
    dot_r: float = 2.0


BASS_CLEF_DOTS: Final[BassClefDots] = BassClefDots()


@dataclass(frozen=True)
class RestGlyph:
    """Outline path of a rest plus any filled dots (cx, cy, r) drawn with it."""

    path: str
    dots: tuple[tuple[float, float, float], ...] = ()


# Centered on the staff's middle line.
REST_SYMBOLS: Final[dict[Duration, RestGlyph]] = {
    # hangs below the fourth line
    "whole": RestGlyph("M-7,-5 L7,-5 L7,0 L-7,0 Z"),
    # sits on the third line
    "half": RestGlyph("M-7,0 L7,0 L7,5 L-7,5 Z"),
    "quarter": RestGlyph(
        "M3,-10 L-3,-4 L3,0 L-3,4 L3,10 L1,10 L-5,4 L1,0 L-5,-4 L1,-10 Z"
    ),
    "eighth": RestGlyph(
        "M3,-5 C5,-5 8,-8 8,-10 M2,-4 L0,10",
        dots=((1.0, -6.0, 2.0),),
    ),
    "sixteenth": RestGlyph(
        "M3,-5 C5,-5 8,-8 8,-10 M3,1 C5,1 8,-2 8,-4 M2,-4 L-1,14",
        dots=((1.0, -6.0, 2.0), (1.0, 0.0, 2.0)),
    ),
}

# ── Noteheads, stems and flags ───────────────────────────────────────────────

NOTEHEAD_RX: Final[float] = 6.0
NOTEHEAD_RY_FILLED: Final[float] = 4.5
NOTEHEAD_RY_HOLLOW: Final[float] = 5.0
STEM_HEIGHT: Final[float] = 30.0
FLAG_SPACING: Final[float] = 4.0


@dataclass(frozen=True)
class Notehead:
    rx: float
    ry: float
    filled: bool


def is_notehead_filled(duration: Duration) -> bool:
    """Quarter notes and shorter get a solid notehead."""
    return duration in ("quarter", "eighth", "sixteenth")


def notehead(duration: Duration) -> Notehead:
    filled = is_notehead_filled(duration)
    return Notehead(
        rx=NOTEHEAD_RX,
        ry=NOTEHEAD_RY_FILLED if filled else NOTEHEAD_RY_HOLLOW,
        filled=filled,
    )


def has_stem(duration: Duration) -> bool:
    return duration != "whole"


def flag_count(duration: Duration) -> int:
    if duration == "eighth":
        return 1
    if duration == "sixteenth":
        return 2
    return 0


def flag_path(stem_direction: int) -> str:
    """A single flag hanging off the stem tip, curving away from the notehead."""
    return f"M0,0 Q5,{stem_direction * 3} 8,{stem_direction * 5}"


# ── Path mini-language ──────────────────────────────────────────────────────

PathCommand = tuple[str, tuple[float, ...]]

_TOKEN_RE = re.compile(r"[MLCQZ]|-?\d*\.?\d+(?:[eE][-+]?\d+)?")
_ARITY: Final[dict[str, int]] = {"M": 2, "L": 2, "C": 6, "Q": 4, "Z": 0}


def parse_path(d: str) -> list[PathCommand]:
    """
    Split an absolute path string into ``(command, numbers)`` tuples.

    Only the commands used by the glyphs above are understood. Repeated
    coordinate groups after a command reuse that command, as in SVG.

    Raises:
        ValueError: On an unknown command or a truncated coordinate list.
    """
    stripped = d.replace(",", " ")
    tokens = _TOKEN_RE.findall(stripped)
    if "".join(tokens).replace(" ", "") != re.sub(r"[\s,]", "", d):
        raise ValueError(f"Unsupported path data: {d!r}")

    commands: list[PathCommand] = []
    current: str | None = None
    numbers: list[float] = []

    def flush() -> None:
        if current is None:
            return
        arity = _ARITY[current]
        if arity == 0:
            commands.append((current, ()))
            return
        if not numbers or len(numbers) % arity:
            raise ValueError(f"Path command {current} expects multiples of {arity} numbers: {d!r}")
        for start in range(0, len(numbers), arity):
            commands.append((current, tuple(numbers[start:start + arity])))

    for token in tokens:
        if token in _ARITY:
            flush()
            current = token
            numbers = []
        else:
            if current is None:
                raise ValueError(f"Path data must start with a command: {d!r}")
            numbers.append(float(token))
    flush()
    return commands
