"""Unit tests for staff positions, bar lines and system wrapping."""

from ulwila.score_models import Note, Part, Rest, Score, TimeSignature
from ulwila.staff_layout import (
    REST_POSITION,
    StaffLayoutConfig,
    compute_staff_layout,
    needs_ledger_lines,
    pitch_to_staff_position,
)


def _sample_score(*notes: Note | Rest, time_signature: TimeSignature = TimeSignature(4, 4)) -> Score:
    return Score(title="Layout", time_signature=time_signature, parts=(Part(notes=notes),))


def _quarters(count: int) -> tuple[Note, ...]:
    return tuple(Note("C", "middle", "quarter") for _ in range(count))


# ── Staff positions ──────────────────────────────────────────────────────────

def test_treble_bottom_line_is_lower_e() -> None:
    assert pitch_to_staff_position("E", "lower", "treble") == 0


def test_treble_middle_c_position() -> None:
    assert pitch_to_staff_position("C", "middle", "treble") == 5


def test_treble_upper_register_adds_fourteen_steps() -> None:
    assert pitch_to_staff_position("A", "upper", "treble") == 17


def test_bass_bottom_line_is_lower_g() -> None:
    assert pitch_to_staff_position("G", "lower", "bass") == 0
    assert pitch_to_staff_position("C", "lower", "bass") == -4


def test_needs_ledger_lines_outside_staff_only() -> None:
    assert needs_ledger_lines(-1)
    assert needs_ledger_lines(9)
    assert not needs_ledger_lines(0)
    assert not needs_ledger_lines(8)


# ── Horizontal placement ─────────────────────────────────────────────────────

def test_notes_advance_by_fixed_spacing() -> None:
    layout = compute_staff_layout(_sample_score(Note("C", "middle", "whole"), Note("D", "middle", "eighth")))
    xs = [n.x for n in layout.systems[0].notes]
    assert xs == [60, 90]


def test_rest_sits_on_middle_line() -> None:
    layout = compute_staff_layout(_sample_score(Rest("quarter")))
    note_layout = layout.systems[0].notes[0]
    assert note_layout.is_rest
    assert note_layout.y == REST_POSITION
    assert layout.staff_position_to_y(note_layout.y, layout.systems[0]) == 60


def test_note_layout_keeps_octave_for_stem_direction() -> None:
    layout = compute_staff_layout(_sample_score(Note("F", "lower", "quarter")))
    assert layout.systems[0].notes[0].octave == "lower"


# ── Bar lines ────────────────────────────────────────────────────────────────

def test_bar_line_after_full_measure() -> None:
    layout = compute_staff_layout(_sample_score(*_quarters(4)))
    assert layout.systems[0].bar_lines == [165]


def test_no_bar_line_for_incomplete_measure() -> None:
    layout = compute_staff_layout(_sample_score(*_quarters(3)))
    assert layout.systems[0].bar_lines == []


def test_overflowing_measure_drops_extra_beats() -> None:
    score = _sample_score(
        Note("C", "middle", "half"),
        Note("D", "middle", "half"),
        Note("E", "middle", "quarter"),
        Note("F", "middle", "quarter"),
        time_signature=TimeSignature(3, 4),
    )
    layout = compute_staff_layout(score)
    # 2 + 2 beats closes the first 3/4 measure; the next two quarters do not close another.
    assert layout.systems[0].bar_lines == [105]


def test_six_eight_uses_three_quarter_beats() -> None:
    eighths = tuple(Note("C", "middle", "eighth") for _ in range(6))
    layout = compute_staff_layout(_sample_score(*eighths, time_signature=TimeSignature(6, 8)))
    assert layout.systems[0].bar_lines == [225]


def test_rests_count_toward_measure() -> None:
    layout = compute_staff_layout(_sample_score(Rest("whole")))
    assert layout.systems[0].bar_lines == [75]


# ── Wrapping ─────────────────────────────────────────────────────────────────

def test_empty_score_has_one_empty_system() -> None:
    layout = compute_staff_layout(Score())
    assert len(layout.systems) == 1
    assert layout.systems[0].notes == []
    assert layout.systems[0].bar_lines == []
    assert layout.height == 120


def test_wraps_after_twenty_three_notes_at_default_width() -> None:
    layout = compute_staff_layout(_sample_score(*_quarters(24)))
    assert len(layout.systems) == 2
    assert len(layout.systems[0].notes) == 23
    second = layout.systems[1]
    assert second.start_y == 160
    assert second.notes[0].x == 60
    assert second.notes[0].note_index == 23


def test_exact_fill_does_not_leave_empty_trailing_system() -> None:
    layout = compute_staff_layout(_sample_score(*_quarters(23)))
    assert len(layout.systems) == 1


def test_narrower_canvas_wraps_sooner() -> None:
    layout = compute_staff_layout(_sample_score(*_quarters(12)), canvas_width=400)
    assert [len(s.notes) for s in layout.systems] == [10, 2]


def test_beat_count_carries_across_wrap() -> None:
    layout = compute_staff_layout(_sample_score(*_quarters(12)), canvas_width=400)
    # notes 9-10 end system one with two beats; notes 11-12 close that measure.
    assert layout.systems[1].bar_lines == [105]


def test_config_object_and_overrides_combine() -> None:
    config = StaffLayoutConfig(note_spacing=40)
    layout = compute_staff_layout(_sample_score(*_quarters(2)), config, margin_left=80)
    assert [n.x for n in layout.systems[0].notes] == [80, 120]
    assert layout.config.canvas_width == 800


def test_height_grows_with_systems() -> None:
    layout = compute_staff_layout(_sample_score(*_quarters(24)))
    assert layout.height == 160 + 40 + 40


def test_find_locates_note_and_system() -> None:
    layout = compute_staff_layout(_sample_score(*_quarters(24)))
    found = layout.find(0, 23)
    assert found is not None
    system, note_layout = found
    assert system is layout.systems[1]
    assert note_layout.x == 60
    assert layout.find(0, 99) is None


def test_multiple_parts_are_concatenated() -> None:
    score = Score(
        parts=(
            Part(notes=(Note("C", "middle", "quarter"),)),
            Part(notes=(Note("D", "middle", "quarter"),)),
        )
    )
    notes = compute_staff_layout(score).systems[0].notes
    assert [(n.part_index, n.note_index, n.x) for n in notes] == [(0, 0, 60), (1, 0, 90)]


def test_bass_middle_a_is_top_line() -> None:
    assert pitch_to_staff_position("A", "middle", "bass") == 8


def test_six_quarters_in_three_four_give_two_bar_lines() -> None:
    layout = compute_staff_layout(_sample_score(*_quarters(6), time_signature=TimeSignature(3, 4)))
    assert len(layout.systems[0].bar_lines) == 2


def test_twelve_eighths_in_six_eight_give_two_bar_lines() -> None:
    eighths = tuple(Note("D", "middle", "eighth") for _ in range(12))
    layout = compute_staff_layout(_sample_score(*eighths, time_signature=TimeSignature(6, 8)))
    assert len(layout.systems[0].bar_lines) == 2


def test_every_position_is_an_integer() -> None:
    for clef in ("treble", "bass"):
        for octave in ("lower", "middle", "upper"):
            for pitch in ("C", "D", "E", "F", "G", "A", "H"):
                position = pitch_to_staff_position(pitch, octave, clef)  # type: ignore[arg-type]
                assert isinstance(position, int)
                assert -4 <= position <= 18


def test_width_changes_wrapping_not_positions() -> None:
    notes = tuple(Note(p, "upper", "quarter") for p in ("C", "D", "E", "F", "G", "A", "H") * 4)
    wide = compute_staff_layout(_sample_score(*notes), canvas_width=1200)
    narrow = compute_staff_layout(_sample_score(*notes), canvas_width=500)
    assert len(narrow.systems) > len(wide.systems)
    wide_positions = [n.y for s in wide.systems for n in s.notes]
    narrow_positions = [n.y for s in narrow.systems for n in s.notes]
    assert wide_positions == narrow_positions
