"""Circle layout: sizes and positions of ULWILA color circles, with row wrapping."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Final

from ulwila.score_models import Duration, Note, Octave, Pitch, Score

logger = logging.getLogger(__name__)

#: Horizontal footprint of each duration, in spacing units.
DURATION_UNITS: Final[dict[Duration, int]] = {
    "whole": 4,
    "half": 2,
    "quarter": 1,
    "eighth": 1,
    "sixteenth": 1,
}

#: Radius of the main circle relative to the base radius.
RADIUS_FACTORS: Final[dict[Duration, float]] = {
    "whole": 1.8,
    "half": 1.4,
    "quarter": 1.0,
    "eighth": 0.6,
    "sixteenth": 0.4,
}

EIGHTH_GAP_FACTOR: Final[float] = 2.2
SIXTEENTH_GAP_FACTOR: Final[float] = 2.4
#: Extra room below the last row's lyrics.
BOTTOM_PADDING: Final[float] = 20


@dataclass(frozen=True)
class CirclesLayoutConfig:
    canvas_width: float = 800
    circle_size: float = 40  # quarter-note diameter
    circle_spacing: float = 50  # distance between two quarter-note centers
    margin_left: float = 20
    margin_top: float = 30
    row_spacing: float = 80
    lyric_offset: float = 25

    @property
    def base_radius(self) -> float:
        return self.circle_size / 2

    @property
    def max_x(self) -> float:
        return self.canvas_width - self.margin_left - self.base_radius


@dataclass(frozen=True)
class SubCircle:
    cx: float
    cy: float
    radius: float
    octave: Octave | None = None
    lyric: str | None = None


@dataclass(frozen=True)
class CircleLayout:
    """
    Placement of one note or rest.

    Eighth and sixteenth notes carry their visible shapes in ``sub_circles``;
    ``cx``/``cy`` is then the cluster's center and ``radius`` the size of one
    sub-circle. Rests have radius 0 and draw nothing.
    """

    cx: float
    cy: float
    radius: float
    part_index: int
    note_index: int
    is_rest: bool
    pitch: Pitch | None = None
    octave: Octave | None = None
    lyric: str | None = None
    accented: bool = False
    sub_circles: tuple[SubCircle, ...] = ()

    @property
    def outer_radius(self) -> float:
        """Radius of the smallest circle around this entry's visible shapes."""
        if not self.sub_circles:
            return self.radius
        return max(
            ((s.cx - self.cx) ** 2 + (s.cy - self.cy) ** 2) ** 0.5 + s.radius
            for s in self.sub_circles
        )


@dataclass
class CircleRow:
    start_y: float
    circles: list[CircleLayout] = field(default_factory=list)


@dataclass(frozen=True)
class CirclesLayout:
    rows: list[CircleRow]
    config: CirclesLayoutConfig
    total_height: float

    def find(self, part_index: int, note_index: int) -> CircleLayout | None:
        for row in self.rows:
            for circle in row.circles:
                if circle.part_index == part_index and circle.note_index == note_index:
                    return circle
        return None


def _sub_circles(
    duration: Duration, cx: float, cy: float, radius: float, octave: Octave, lyric: str | None
) -> tuple[SubCircle, ...]:
    if duration == "eighth":
        half_gap = radius * EIGHTH_GAP_FACTOR / 2
        return (
            SubCircle(cx - half_gap, cy, radius, octave, lyric),
            SubCircle(cx + half_gap, cy, radius, octave, lyric),
        )
    if duration == "sixteenth":
        half_gap = radius * SIXTEENTH_GAP_FACTOR / 2
        return (
            SubCircle(cx - half_gap, cy - half_gap, radius, octave, lyric),
            SubCircle(cx + half_gap, cy - half_gap, radius, octave, lyric),
            SubCircle(cx - half_gap, cy + half_gap, radius, octave, lyric),
            SubCircle(cx + half_gap, cy + half_gap, radius, octave, lyric),
        )
    return ()


def _note_circle(
    note: Note,
    x: float,
    row_y: float,
    cfg: CirclesLayoutConfig,
    part_index: int,
    note_index: int,
) -> CircleLayout:
    units = DURATION_UNITS[note.duration]
    cx = x + (units - 1) * cfg.circle_spacing / 2
    radius = cfg.base_radius * RADIUS_FACTORS[note.duration]
    return CircleLayout(
        cx=cx,
        cy=row_y,
        radius=radius,
        part_index=part_index,
        note_index=note_index,
        is_rest=False,
        pitch=note.pitch,
        octave=note.octave,
        lyric=note.lyric,
        accented=bool(note.accented),
        sub_circles=_sub_circles(note.duration, cx, row_y, radius, note.octave, note.lyric),
    )


def compute_circles_layout(
    score: Score,
    config: CirclesLayoutConfig | None = None,
    **overrides: Any,
) -> CirclesLayout:
    """
    Lay out every note and rest of ``score`` as rows of colored circles.

    Whole and half notes reserve four and two spacing units; quarter, eighth
    and sixteenth notes reserve one. A row wraps before an entry whose
    footprint would cross the right margin, unless the row is still empty.
    """
    cfg = replace(config or CirclesLayoutConfig(), **overrides)
    start_x = cfg.margin_left + cfg.base_radius

    rows: list[CircleRow] = []
    current = CircleRow(start_y=cfg.margin_top + cfg.base_radius)
    x = start_x

    for part_index, note_index, element in score.iter_notes():
        width = DURATION_UNITS[element.duration] * cfg.circle_spacing

        if x + width - cfg.circle_spacing / 2 > cfg.max_x and current.circles:
            rows.append(current)
            current = CircleRow(start_y=current.start_y + cfg.row_spacing)
            x = start_x

        if isinstance(element, Note):
            current.circles.append(_note_circle(element, x, current.start_y, cfg, part_index, note_index))
        else:
            current.circles.append(
                CircleLayout(
                    cx=x + (width - cfg.circle_spacing) / 2,
                    cy=current.start_y,
                    radius=0.0,
                    part_index=part_index,
                    note_index=note_index,
                    is_rest=True,
                )
            )
        x += width

    if current.circles or not rows:
        rows.append(current)

    total_height = rows[-1].start_y + cfg.base_radius + cfg.lyric_offset + BOTTOM_PADDING
    logger.debug("circles layout: %d notes in %d row(s)", score.note_count, len(rows))
    return CirclesLayout(rows=rows, config=cfg, total_height=total_height)
