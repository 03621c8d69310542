"""Translated labels for exports and the command line.

The language is always passed in explicitly; nothing here reads or stores a
process-wide preference.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ulwila.score_models import Duration, Octave, Pitch

DEFAULT_LANGUAGE: Final[str] = "en"


@dataclass(frozen=True)
class Translations:
    untitled_score: str
    durations: dict[Duration, str]
    octaves: dict[Octave, str]
    note_labels: dict[Pitch, str]


_EN = Translations(
    untitled_score="Untitled Score",
    durations={
        "whole": "Whole",
        "half": "Half",
        "quarter": "Quarter",
        "eighth": "Eighth",
        "sixteenth": "Sixteenth",
    },
    octaves={"lower": "Lower", "middle": "Middle", "upper": "Upper"},
    note_labels={
        "C": "C (Do)",
        "D": "D (Re)",
        "E": "E (Mi)",
        "F": "F (Fa)",
        "G": "G (Sol)",
        "A": "A (La)",
        "H": "H (Si)",
    },
)

_HU = Translations(
    untitled_score="Névtelen kotta",
    durations={
        "whole": "Egész",
        "half": "Fél",
        "quarter": "Negyed",
        "eighth": "Nyolcad",
        "sixteenth": "Tizenhatod",
    },
    octaves={"lower": "Mély", "middle": "Középső", "upper": "Magas"},
    note_labels={
        "C": "C (Dó)",
        "D": "D (Ré)",
        "E": "E (Mi)",
        "F": "F (Fá)",
        "G": "G (Szó)",
        "A": "A (Lá)",
        "H": "H (Ti)",
    },
)

_DICTIONARIES: Final[dict[str, Translations]] = {"en": _EN, "hu": _HU}

SUPPORTED_LANGUAGES: Final[tuple[str, ...]] = tuple(_DICTIONARIES)


def translations(language: str | None = None) -> Translations:
    """Return the label bundle for ``language``; unknown codes fall back to English."""
    code = (language or DEFAULT_LANGUAGE).strip().lower()[:2]
    return _DICTIONARIES.get(code, _DICTIONARIES[DEFAULT_LANGUAGE])


def display_title(title: str, language: str | None = None) -> str:
    """The title to print on exported pages, or the localized placeholder for a blank one."""
    return title.strip() or translations(language).untitled_score
