"""ULWILA pitch colors and the split-color pairs used for accented (sharp) notes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ulwila.score_models import Pitch

# ── Color table ──────────────────────────────────────────────────────────────
# These hex values are shared with saved files and printed material; do not tweak.

ULWILA_COLORS: Final[dict[Pitch, str]] = {
    "C": "#1A1A1A",  # black
    "D": "#8B4513",  # brown
    "E": "#0000CD",  # blue
    "F": "#228B22",  # green
    "G": "#DC143C",  # red
    "A": "#FF8C00",  # orange
    "H": "#FFD700",  # yellow / gold
}

#: Pitches with a black piano key above them. E-F and H-C are natural half steps.
ACCENTED_PITCHES: Final[tuple[Pitch, ...]] = ("C", "D", "F", "G", "A")

#: Outline for yellow shapes, which would vanish against a white page otherwise.
CONTRAST_STROKE: Final[str] = "#333333"

_NEXT_PITCH: Final[dict[Pitch, Pitch]] = {
    "C": "D",
    "D": "E",
    "F": "G",
    "G": "A",
    "A": "H",
}


@dataclass(frozen=True)
class AccentedColors:
    """Left and right half colors of a split (sharp) shape."""

    left: str
    right: str


def color_of(pitch: Pitch) -> str:
    """Return the ULWILA display color for a pitch."""
    return ULWILA_COLORS[pitch]


def has_accented_form(pitch: Pitch) -> bool:
    return pitch in _NEXT_PITCH


def accented_colors(pitch: Pitch) -> AccentedColors:
    """
    Colors for a sharp note: the pitch's own color on the left, the next
    higher pitch's color on the right.

    E and H have no sharp in this system and get their own color on both
    halves, so an accented E or H looks exactly like a plain one.
    """
    upper = _NEXT_PITCH.get(pitch, pitch)
    return AccentedColors(left=ULWILA_COLORS[pitch], right=ULWILA_COLORS[upper])


def is_yellow(color: str) -> bool:
    return color.upper() == ULWILA_COLORS["H"]
