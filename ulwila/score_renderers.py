"""Renderer implementations turning a score into a drawable :class:`Scene`."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Final

from ulwila.circles_layout import CircleLayout, compute_circles_layout
from ulwila.colors import CONTRAST_STROKE, accented_colors, color_of, is_yellow
from ulwila.scene import (
    Circle,
    Ellipse,
    Group,
    HalfEllipse,
    Line,
    Node,
    NoteClickHandler,
    Path,
    Rect,
    Scene,
    Text,
)
from ulwila.score_models import Note, Octave, Pitch, Rest, Score, Selection
from ulwila.staff_layout import (
    BOTTOM_LINE,
    TOP_LINE,
    NoteLayout,
    StaffLayout,
    StaffSystem,
    compute_staff_layout,
)
from ulwila.staff_symbols import (
    BASS_CLEF_DOTS,
    BASS_CLEF_PATH,
    FLAG_SPACING,
    REST_SYMBOLS,
    STEM_HEIGHT,
    TREBLE_CLEF_PATH,
    flag_count,
    flag_path,
    has_stem,
    notehead,
)

logger = logging.getLogger(__name__)

DEFAULT_WIDTH: Final[float] = 800
SELECTION_COLOR: Final[str] = "blue"


def _is_selected(selection: Selection | None, part_index: int, note_index: int) -> bool:
    return (
        selection is not None
        and selection.part_index == part_index
        and selection.note_index == note_index
    )


class ScoreRenderer(ABC):
    """Abstract score renderer."""

    def __init__(self, width: float = DEFAULT_WIDTH) -> None:
        self.width = width

    @property
    @abstractmethod
    def mode(self) -> str:
        """Rendering mode this renderer implements."""

    @abstractmethod
    def render(
        self,
        score: Score,
        selection: Selection | None = None,
        on_note_click: NoteClickHandler | None = None,
    ) -> Scene:
        """Lay out ``score`` and build its scene. Never mutates the score."""


class StaffRenderer(ScoreRenderer):
    """Conventional five-line staff with ULWILA-colored noteheads."""

    _STAFF_LINE_INSET: int = 10  # staff lines start this far left of the system origin
    _STAFF_RIGHT_MARGIN: int = 20
    _CLEF_OFFSET: int = 35
    _TIME_SIGNATURE_OFFSET: int = 20
    _LEDGER_HALF_WIDTH: float = 8
    _LYRIC_GAP: float = 20
    _NOTE_STROKE: float = 1.5

    @property
    def mode(self) -> str:
        return "staff"

    def render(
        self,
        score: Score,
        selection: Selection | None = None,
        on_note_click: NoteClickHandler | None = None,
    ) -> Scene:
        layout = compute_staff_layout(score, canvas_width=self.width)
        scene = Scene(width=self.width, height=layout.height, test_id="staff-renderer")
        for index, system in enumerate(layout.systems):
            scene.children.append(
                self._render_system(score, layout, system, index, selection, on_note_click)
            )
        return scene

    # ------------------------------------------------------------------
    # Staff furniture
    # ------------------------------------------------------------------

    def _render_system(
        self,
        score: Score,
        layout: StaffLayout,
        system: StaffSystem,
        system_index: int,
        selection: Selection | None,
        on_note_click: NoteClickHandler | None,
    ) -> Group:
        group = Group(css_class="staff-system")
        group.add(self._staff_lines(layout, system))
        group.add(self._clef(score, layout, system))
        if system_index == 0:
            group.add(self._time_signature(score, layout, system))
        group.add(*self._bar_lines(layout, system))

        for note_layout in system.notes:
            element = score.note_at(note_layout.part_index, note_layout.note_index)
            if element is None:
                continue
            selected = _is_selected(selection, note_layout.part_index, note_layout.note_index)
            if isinstance(element, Rest):
                group.add(self._rest(element, note_layout, layout, system, selected, on_note_click))
            else:
                group.add(self._note(element, note_layout, layout, system, selected, on_note_click))
        return group

    def _staff_lines(self, layout: StaffLayout, system: StaffSystem) -> Group:
        spacing = layout.config.staff_line_spacing
        lines: list[Node] = [
            Line(
                system.start_x - self._STAFF_LINE_INSET,
                system.start_y + i * spacing,
                self.width - self._STAFF_RIGHT_MARGIN,
                system.start_y + i * spacing,
                css_class="staff-line",
            )
            for i in range(5)
        ]
        return Group(lines, css_class="staff-lines")

    def _clef(self, score: Score, layout: StaffLayout, system: StaffSystem) -> Group:
        spacing = layout.config.staff_line_spacing
        x = system.start_x - self._CLEF_OFFSET
        if score.clef == "bass":
            # anchored on the F line, second from the top
            y = system.start_y + spacing
            dots = BASS_CLEF_DOTS
            return Group(
                [
                    Path(BASS_CLEF_PATH, x - 5, y, stroke="black", stroke_width=2),
                    Circle(x - 5 + dots.dot_x, y + dots.dot1_y, dots.dot_r, fill="black"),
                    Circle(x - 5 + dots.dot_x, y + dots.dot2_y, dots.dot_r, fill="black"),
                ],
                css_class="clef bass-clef",
            )
        # anchored on the G line, second from the bottom
        y = system.start_y + 3 * spacing
        return Group(
            [Path(TREBLE_CLEF_PATH, x - 6, y, stroke="black", stroke_width=1.5)],
            css_class="clef treble-clef",
        )

    def _time_signature(self, score: Score, layout: StaffLayout, system: StaffSystem) -> Group:
        x = system.start_x - self._TIME_SIGNATURE_OFFSET
        y = system.start_y + layout.config.staff_line_spacing * 2
        ts = score.time_signature
        return Group(
            [
                Text(x, y - 5, str(ts.beats), font_size=16, bold=True),
                Text(x, y + 15, str(ts.beat_value), font_size=16, bold=True),
            ],
            css_class="time-signature",
        )

    def _bar_lines(self, layout: StaffLayout, system: StaffSystem) -> list[Node]:
        bottom = system.start_y + layout.config.staff_height
        return [
            Line(x, system.start_y, x, bottom, stroke_width=1.5, css_class="bar-line")
            for x in system.bar_lines
        ]

    # ------------------------------------------------------------------
    # Notes and rests
    # ------------------------------------------------------------------

    def _ledger_lines(self, note_layout: NoteLayout, layout: StaffLayout, system: StaffSystem) -> list[Node]:
        position = note_layout.y
        if position > TOP_LINE:
            positions = range(TOP_LINE + 2, position + 1, 2)
        elif position < BOTTOM_LINE:
            positions = range(BOTTOM_LINE - 2, position - 1, -2)
        else:
            return []
        x = note_layout.x
        lines: list[Node] = []
        for pos in positions:
            y = layout.staff_position_to_y(pos, system)
            lines.append(
                Line(x - self._LEDGER_HALF_WIDTH, y, x + self._LEDGER_HALF_WIDTH, y, css_class="ledger-line")
            )
        return lines

    def _rest(
        self,
        rest: Rest,
        note_layout: NoteLayout,
        layout: StaffLayout,
        system: StaffSystem,
        selected: bool,
        on_note_click: NoteClickHandler | None,
    ) -> Group:
        x = note_layout.x
        y = layout.staff_position_to_y(note_layout.y, system)
        glyph = REST_SYMBOLS[rest.duration]
        group = Group(
            css_class=f"rest rest-{rest.duration}",
            target=(note_layout.part_index, note_layout.note_index),
            on_click=on_note_click,
        )
        closed = glyph.path.rstrip().endswith("Z")
        group.add(
            Path(
                glyph.path,
                x,
                y,
                fill="black" if closed else None,
                stroke="black",
                stroke_width=self._NOTE_STROKE,
                css_class="rest-symbol",
            )
        )
        for dot_x, dot_y, dot_r in glyph.dots:
            group.add(Circle(x + dot_x, y + dot_y, dot_r, fill="black", css_class="rest-symbol"))
        if selected:
            group.add(self._highlight(x, y, height=28))
        return group

    def _note(
        self,
        note: Note,
        note_layout: NoteLayout,
        layout: StaffLayout,
        system: StaffSystem,
        selected: bool,
        on_note_click: NoteClickHandler | None,
    ) -> Group:
        x = note_layout.x
        y = layout.staff_position_to_y(note_layout.y, system)
        head = notehead(note.duration)
        group = Group(
            css_class=f"note note-{note.pitch}",
            target=(note_layout.part_index, note_layout.note_index),
            on_click=on_note_click,
        )
        group.add(*self._ledger_lines(note_layout, layout, system))

        if note.accented:
            colors = accented_colors(note.pitch)
            group.add(
                HalfEllipse(x, y, head.rx, head.ry, "left", fill=colors.left if head.filled else "white",
                            css_class="notehead-half"),
                HalfEllipse(x, y, head.rx, head.ry, "right", fill=colors.right if head.filled else "white",
                            css_class="notehead-half"),
                Ellipse(x, y, head.rx, head.ry, fill=None, stroke=colors.left,
                        stroke_width=self._NOTE_STROKE, css_class="notehead notehead-outline"),
            )
        else:
            color = color_of(note.pitch)
            group.add(
                Ellipse(x, y, head.rx, head.ry, fill=color if head.filled else "white", stroke=color,
                        stroke_width=self._NOTE_STROKE, css_class="notehead")
            )

        if has_stem(note.duration):
            # lower register stems up (-1); middle and upper stem down (+1)
            direction = self._stem_direction(note_layout.octave)
            stem_x = x - head.rx if direction == 1 else x + head.rx
            group.add(
                Line(stem_x, y, stem_x, y + direction * STEM_HEIGHT,
                     stroke_width=self._NOTE_STROKE, css_class="stem")
            )
            for i in range(flag_count(note.duration)):
                group.add(
                    Path(
                        flag_path(direction),
                        stem_x,
                        y + direction * (STEM_HEIGHT - i * FLAG_SPACING),
                        stroke_width=self._NOTE_STROKE,
                        css_class="flag",
                    )
                )

        if selected:
            group.add(self._highlight(x, y, height=24))

        if note.lyric:
            group.add(
                Text(x, system.start_y + layout.config.staff_height + self._LYRIC_GAP, note.lyric,
                     css_class="lyric-text")
            )
        return group

    @staticmethod
    def _stem_direction(octave: Octave | None) -> int:
        return -1 if octave == "lower" else 1

    @staticmethod
    def _highlight(x: float, y: float, height: float) -> Rect:
        return Rect(
            x - 12,
            y - height / 2,
            24,
            height,
            stroke=SELECTION_COLOR,
            stroke_width=2,
            rx=4,
            css_class="selection-highlight",
        )


class CirclesRenderer(ScoreRenderer):
    """ULWILA color circles without a staff."""

    _LYRIC_GAP: float = 20
    _RING_GAP: float = 4
    _DOT_SCALE: float = 0.15
    _MIN_DOT_RADIUS: float = 2

    @property
    def mode(self) -> str:
        return "circles"

    def render(
        self,
        score: Score,
        selection: Selection | None = None,
        on_note_click: NoteClickHandler | None = None,
    ) -> Scene:
        layout = compute_circles_layout(score, canvas_width=self.width)
        scene = Scene(width=self.width, height=layout.total_height, test_id="circles-renderer")
        for row in layout.rows:
            row_group = Group(css_class="circles-row")
            for circle in row.circles:
                if score.note_at(circle.part_index, circle.note_index) is None:
                    continue
                selected = _is_selected(selection, circle.part_index, circle.note_index)
                row_group.add(self._circle_group(circle, selected, on_note_click))
            scene.children.append(row_group)
        return scene

    def _circle_group(
        self,
        circle: CircleLayout,
        selected: bool,
        on_note_click: NoteClickHandler | None,
    ) -> Group:
        target = (circle.part_index, circle.note_index)
        if circle.is_rest or circle.pitch is None:
            # Reserves clickable space only; nothing is drawn.
            return Group(css_class="rest-placeholder", target=target, on_click=on_note_click)

        group = Group(
            css_class=f"note-circle-group note-{circle.pitch}",
            target=target,
            on_click=on_note_click,
        )
        if circle.sub_circles:
            shapes = [(sub.cx, sub.cy, sub.radius) for sub in circle.sub_circles]
        else:
            shapes = [(circle.cx, circle.cy, circle.radius)]
        for cx, cy, radius in shapes:
            group.add(*self._disc(circle.pitch, circle.accented, cx, cy, radius))
            dot = self._octave_dot(circle.octave, cx, cy, radius)
            if dot is not None:
                group.add(dot)

        outer = circle.outer_radius
        if selected:
            group.add(
                Circle(circle.cx, circle.cy, outer + self._RING_GAP, fill=None, stroke=SELECTION_COLOR,
                       stroke_width=2, css_class="selection-ring")
            )
        if circle.lyric:
            group.add(
                Text(circle.cx, circle.cy + outer + self._LYRIC_GAP, circle.lyric, fill="#333",
                     css_class="lyric-text")
            )
        return group

    def _disc(self, pitch: Pitch, accented: bool, cx: float, cy: float, radius: float) -> list[Node]:
        if accented:
            colors = accented_colors(pitch)
            dark_outline = is_yellow(colors.right)
            return [
                HalfEllipse(cx, cy, radius, radius, "left", fill=colors.left, css_class="note-circle"),
                HalfEllipse(cx, cy, radius, radius, "right", fill=colors.right, css_class="note-circle"),
                Circle(
                    cx,
                    cy,
                    radius,
                    fill=None,
                    stroke=CONTRAST_STROKE if dark_outline else colors.left,
                    stroke_width=2 if dark_outline else 1,
                    css_class="note-circle-outline",
                ),
            ]
        color = color_of(pitch)
        yellow = is_yellow(color)
        return [
            Circle(
                cx,
                cy,
                radius,
                fill=color,
                stroke=CONTRAST_STROKE if yellow else color,
                stroke_width=2 if yellow else 1,
                css_class="note-circle",
            )
        ]

    def _octave_dot(self, octave: Octave | None, cx: float, cy: float, radius: float) -> Circle | None:
        if octave is None or octave == "middle":
            return None
        return Circle(
            cx,
            cy,
            max(self._MIN_DOT_RADIUS, radius * self._DOT_SCALE),
            fill="#000000" if octave == "lower" else "#FFFFFF",
            css_class=f"octave-dot octave-{octave}",
        )


# ── Functional entry points ──────────────────────────────────────────────────

def render_staff(
    score: Score,
    selection: Selection | None = None,
    on_note_click: NoteClickHandler | None = None,
    width: float = DEFAULT_WIDTH,
) -> Scene:
    """Render ``score`` as staff notation."""
    return StaffRenderer(width).render(score, selection, on_note_click)


def render_circles(
    score: Score,
    selection: Selection | None = None,
    on_note_click: NoteClickHandler | None = None,
    width: float = DEFAULT_WIDTH,
) -> Scene:
    """Render ``score`` as ULWILA color circles."""
    return CirclesRenderer(width).render(score, selection, on_note_click)


def build_renderer(mode: str, width: float = DEFAULT_WIDTH) -> ScoreRenderer:
    if mode == "circles":
        return CirclesRenderer(width)
    if mode == "staff":
        return StaffRenderer(width)
    raise ValueError(f"Unknown rendering mode '{mode}'. Use 'staff' or 'circles'.")


def render_score(
    score: Score,
    selection: Selection | None = None,
    on_note_click: NoteClickHandler | None = None,
    width: float = DEFAULT_WIDTH,
) -> Scene:
    """Render ``score`` in its own rendering mode."""
    renderer = build_renderer(score.rendering_mode, width)
    logger.debug("rendering %r in %s mode at width %s", score.title, renderer.mode, width)
    return renderer.render(score, selection, on_note_click)
