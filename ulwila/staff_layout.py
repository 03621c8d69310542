"""Staff layout: pitch-to-staff-position mapping, bar lines and system wrapping.

The layout is a pure function of the score and a :class:`StaffLayoutConfig`.
Horizontal spacing is fixed per note regardless of duration; duration only
drives bar-line placement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Final

from ulwila.score_models import (
    DURATION_TO_BEATS,
    Clef,
    Note,
    Octave,
    Pitch,
    Score,
)

logger = logging.getLogger(__name__)

# Treble clef: the bottom staff line (position 0) is E of the lower register.
_TREBLE_OFFSETS: Final[dict[Pitch, int]] = {"C": -2, "D": -1, "E": 0, "F": 1, "G": 2, "A": 3, "H": 4}
# Bass clef: the bottom staff line is G of the lower register.
_BASS_OFFSETS: Final[dict[Pitch, int]] = {"C": -4, "D": -3, "E": -2, "F": -1, "G": 0, "A": 1, "H": 2}
_OCTAVE_OFFSETS: Final[dict[Octave, int]] = {"lower": 0, "middle": 7, "upper": 14}

#: Staff position of the middle line, where rests are centered.
REST_POSITION: Final[int] = 4
BOTTOM_LINE: Final[int] = 0
TOP_LINE: Final[int] = 8


def pitch_to_staff_position(pitch: Pitch, octave: Octave, clef: Clef) -> int:
    """
    Map a pitch to its staff position.

    One unit is half the gap between two staff lines: 0 is the bottom line,
    8 the top line, and every diatonic step moves by one.
    """
    offsets = _BASS_OFFSETS if clef == "bass" else _TREBLE_OFFSETS
    return offsets[pitch] + _OCTAVE_OFFSETS[octave]


def needs_ledger_lines(position: int) -> bool:
    return position < BOTTOM_LINE or position > TOP_LINE


@dataclass(frozen=True)
class StaffLayoutConfig:
    """
    Geometry of the staff layout, in pixels.

    Attributes:
        canvas_width:       Total drawing width.
        staff_line_spacing: Gap between two adjacent staff lines.
        note_spacing:       Horizontal advance per note or rest.
        margin_left:        Room for clef and time signature, also the right wrap margin.
        margin_top:         Offset of the first system's top line.
        system_spacing:     Vertical gap between the bottom of a system and the next one.
    """

    canvas_width: float = 800
    staff_line_spacing: float = 10
    note_spacing: float = 30
    margin_left: float = 60
    margin_top: float = 40
    system_spacing: float = 80

    @property
    def staff_height(self) -> float:
        """Five lines, four gaps."""
        return 4 * self.staff_line_spacing

    @property
    def max_x(self) -> float:
        return self.canvas_width - self.margin_left


@dataclass(frozen=True)
class NoteLayout:
    """Placement of one note or rest. ``y`` is a staff position, not pixels."""

    x: float
    y: int
    part_index: int
    note_index: int
    is_rest: bool
    octave: Octave | None = None


@dataclass
class StaffSystem:
    """One wrapped row of staff notation."""

    start_x: float
    start_y: float
    notes: list[NoteLayout] = field(default_factory=list)
    bar_lines: list[float] = field(default_factory=list)


@dataclass(frozen=True)
class StaffLayout:
    systems: list[StaffSystem]
    config: StaffLayoutConfig

    @property
    def height(self) -> float:
        """Natural pixel height of the rendered staff."""
        last = self.systems[-1]
        return last.start_y + self.config.staff_height + self.config.margin_top

    def staff_position_to_y(self, position: int, system: StaffSystem) -> float:
        """Convert a staff position to a pixel y inside ``system``."""
        bottom_line_y = system.start_y + self.config.staff_height
        return bottom_line_y - position * (self.config.staff_line_spacing / 2)

    def find(self, part_index: int, note_index: int) -> tuple[StaffSystem, NoteLayout] | None:
        for system in self.systems:
            for note_layout in system.notes:
                if note_layout.part_index == part_index and note_layout.note_index == note_index:
                    return system, note_layout
        return None


def compute_staff_layout(
    score: Score,
    config: StaffLayoutConfig | None = None,
    **overrides: Any,
) -> StaffLayout:
    """
    Lay out every note and rest of ``score`` onto wrapped staff systems.

    Args:
        score:     Score to lay out. Parts are concatenated in order.
        config:    Base configuration; defaults to :class:`StaffLayoutConfig()`.
        overrides: Individual config fields, e.g. ``canvas_width=600``.

    Returns:
        A layout with at least one system. An empty score yields a single
        system without notes or bar lines.
    """
    cfg = replace(config or StaffLayoutConfig(), **overrides)
    beats_per_measure = score.time_signature.quarter_beats_per_measure

    systems: list[StaffSystem] = []
    current = StaffSystem(start_x=cfg.margin_left, start_y=cfg.margin_top)
    x = cfg.margin_left
    beats = 0.0

    for part_index, note_index, element in score.iter_notes():
        if isinstance(element, Note):
            position = pitch_to_staff_position(element.pitch, element.octave, score.clef)
            current.notes.append(
                NoteLayout(x, position, part_index, note_index, is_rest=False, octave=element.octave)
            )
        else:
            current.notes.append(NoteLayout(x, REST_POSITION, part_index, note_index, is_rest=True))

        beats += DURATION_TO_BEATS[element.duration]
        x += cfg.note_spacing

        # Overflow beats are dropped, never carried into the next measure.
        if beats >= beats_per_measure:
            current.bar_lines.append(x - cfg.note_spacing / 2)
            beats = 0.0

        if x > cfg.max_x:
            systems.append(current)
            current = StaffSystem(
                start_x=cfg.margin_left,
                start_y=current.start_y + cfg.staff_height + cfg.system_spacing,
            )
            x = cfg.margin_left

    if current.notes or not systems:
        systems.append(current)

    logger.debug(
        "staff layout: %d notes in %d system(s) at width %s",
        score.note_count,
        len(systems),
        cfg.canvas_width,
    )
    return StaffLayout(systems=systems, config=cfg)
