"""Tests for the pattern aggregate."""

from __future__ import annotations

import logging

import pytest

from pattern_maker import (
    DartSpec,
    GrainlineType,
    InternalLineType,
    NoActivePatternError,
    NotchType,
    PatternEventType,
    PatternMaker,
    PatternPoint,
    Point,
    Units,
)
from pattern_maker.piece_model import make_mirror_axis


@pytest.fixture()
def dart_spec() -> DartSpec:
    return DartSpec(
        apex=PatternPoint(50.0, 75.0),
        left_leg=PatternPoint(45.0, 0.0),
        right_leg=PatternPoint(55.0, 0.0),
        width=2.0,
        length=10.0,
        fold_direction="right",
        type="straight",
    )


def test_no_pattern_initially() -> None:
    assert PatternMaker().get_pattern() is None


def test_create_pattern_defaults() -> None:
    maker = PatternMaker()

    pattern = maker.create_pattern("Summer Dress")

    assert maker.get_pattern() is pattern
    assert pattern.name == "Summer Dress"
    assert pattern.base_size == "M"
    assert pattern.metadata.units is Units.CM
    assert pattern.pieces == {}
    assert [(size.name, size.grade) for size in pattern.sizes] == [("M", 0)]


def test_create_pattern_custom_values() -> None:
    pattern = PatternMaker().create_pattern("Jacket", "L", "inches")

    assert pattern.base_size == "L"
    assert pattern.metadata.units is Units.INCHES


def test_create_piece_copies_outline(maker: PatternMaker, square) -> None:
    outline = list(square)
    piece = maker.create_piece("Bodice Front", outline)
    outline.append(PatternPoint(-5.0, 50.0))
    outline[0] = PatternPoint(1.0, 1.0)

    assert len(piece.outline) == 4
    assert piece.outline[0] == PatternPoint(0.0, 0.0)
    assert piece.seam_allowance == 0.0
    assert piece.id


def test_create_piece_ids_are_unique(maker: PatternMaker, square) -> None:
    ids = {maker.create_piece("Piece", square).id for _ in range(50)}
    assert len(ids) == 50


def test_create_piece_with_seam_allowance(maker: PatternMaker) -> None:
    piece = maker.create_piece("Collar", [(0, 0), (100, 0)], seam_allowance=0.5)

    assert piece.seam_allowance == 0.5
    assert piece.metadata.units is Units.CM


def test_add_piece_requires_pattern(square) -> None:
    maker = PatternMaker()
    piece = maker.create_piece("Sleeve", square)

    with pytest.raises(NoActivePatternError):
        maker.add_piece(piece)
    assert maker.get_piece(piece.id) is None


def test_add_and_get_piece(maker: PatternMaker, square) -> None:
    piece = maker.create_piece("Sleeve", square)
    maker.add_piece(piece)

    assert maker.get_piece(piece.id) is piece
    assert maker.get_piece("missing") is None


def test_update_piece_replaces_whole_piece(maker: PatternMaker, square) -> None:
    piece = maker.create_piece("Collar", square)
    maker.add_piece(piece)
    replacement = piece.copy_with_outline(square[:3])
    replacement.name = "Stand Collar"

    maker.update_piece(replacement)

    stored = maker.get_piece(piece.id)
    assert stored is replacement
    assert stored.name == "Stand Collar"
    assert len(stored.outline) == 3


def test_add_notch_persists(maker: PatternMaker, square) -> None:
    piece = maker.create_piece("Bodice", square)
    maker.add_piece(piece)

    notch = maker.add_notch(piece.id, 0.5, "single")

    notches = list(maker.get_piece(piece.id).notches.values())
    assert notches == [notch]
    assert notch.position == 0.5
    assert notch.type is NotchType.SINGLE
    assert notch.piece_id == piece.id


@pytest.mark.parametrize(("position", "expected"), [(1.7, 1.0), (-0.2, 0.0), (1.0, 1.0)])
def test_add_notch_clamps_position(maker: PatternMaker, square, position: float, expected: float) -> None:
    piece = maker.create_piece("Bodice", square)
    maker.add_piece(piece)

    assert maker.add_notch(piece.id, position, NotchType.T).position == expected


def test_add_notch_non_finite_position_falls_back_to_start(maker: PatternMaker, square, caplog) -> None:
    piece = maker.create_piece("Bodice", square)
    maker.add_piece(piece)

    with caplog.at_level(logging.WARNING, logger="pattern_maker.piece_model"):
        notch = maker.add_notch(piece.id, float("nan"))

    assert notch.position == 0.0
    assert "not finite" in caplog.text


def test_add_notch_unknown_piece_is_noop(maker: PatternMaker, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="pattern_maker.maker"):
        assert maker.add_notch("does-not-exist", 0.5, "double") is None
    assert "does-not-exist" in caplog.text


def test_add_dart_stores_spec_verbatim(maker: PatternMaker, square, dart_spec: DartSpec) -> None:
    piece = maker.create_piece("Bodice", square)
    maker.add_piece(piece)

    dart = maker.add_dart(piece.id, dart_spec)

    assert dart.id
    assert dart.type.value == "straight"
    assert dart.apex == dart_spec.apex
    assert (dart.width, dart.length) == (2.0, 10.0)
    assert maker.get_piece(piece.id).darts == {dart.id: dart}


def test_add_dart_accepts_mapping(maker: PatternMaker, square) -> None:
    piece = maker.create_piece("Bodice", square)
    maker.add_piece(piece)

    dart = maker.add_dart(
        piece.id,
        {
            "apex": {"x": 50, "y": 75},
            "left_leg": (45, 0),
            "right_leg": (55, 0),
            "width": 2,
            "length": 10,
            "fold_direction": "left",
            "type": "french",
        },
    )

    assert dart.fold_direction.value == "left"
    assert dart.type.value == "french"
    assert dart.left_leg == PatternPoint(45.0, 0.0)


def test_add_dart_clamps_negative_width(maker: PatternMaker, square, caplog) -> None:
    piece = maker.create_piece("Bodice", square)
    maker.add_piece(piece)
    spec = DartSpec(apex=(0, 0), left_leg=(1, 1), right_leg=(2, 2), width=-3.0, length=4.0)

    with caplog.at_level(logging.WARNING, logger="pattern_maker.piece_model"):
        dart = maker.add_dart(piece.id, spec)

    assert dart.width == 0.0
    assert dart.length == 4.0
    assert "clamped" in caplog.text


@pytest.mark.parametrize("length", [0.0, -5.0, float("nan")])
def test_add_dart_without_positive_length_is_refused(maker: PatternMaker, square, length: float, caplog) -> None:
    piece = maker.create_piece("Bodice", square)
    maker.add_piece(piece)
    spec = DartSpec(apex=(0, 0), left_leg=(1, 1), right_leg=(2, 2), width=3.0, length=length)

    with caplog.at_level(logging.WARNING, logger="pattern_maker.maker"):
        assert maker.add_dart(piece.id, spec) is None

    assert maker.get_piece(piece.id).darts == {}
    assert "not positive" in caplog.text


def test_add_dart_unknown_piece_is_noop(maker: PatternMaker, dart_spec: DartSpec) -> None:
    before = dict(maker.get_pattern().pieces)

    assert maker.add_dart("does-not-exist", dart_spec) is None
    assert maker.get_pattern().pieces == before


def test_add_internal_line_appends(maker: PatternMaker, square) -> None:
    piece = maker.create_piece("Bodice", square)
    maker.add_piece(piece)

    fold = maker.add_internal_line(piece.id, [(50, 0), (50, 100)], "foldline", label="Fold")
    pocket = maker.add_internal_line(piece.id, [Point(20, 60), Point(40, 60)], InternalLineType.POCKET)

    stored = maker.get_piece(piece.id).internal_lines
    assert stored == [fold, pocket]
    assert fold.type is InternalLineType.FOLDLINE
    assert fold.label == "Fold"
    assert fold.points == [PatternPoint(50.0, 0.0), PatternPoint(50.0, 100.0)]
    assert pocket.label is None


def test_add_internal_line_unknown_piece_is_noop(maker: PatternMaker) -> None:
    assert maker.add_internal_line("does-not-exist", [(0, 0), (1, 1)], "ease") is None


def test_set_grainline_overwrites(maker: PatternMaker, square) -> None:
    piece = maker.create_piece("Bodice", square)
    maker.add_piece(piece)

    maker.set_grainline(piece.id, (50, 10), (50, 140), "straight")
    maker.set_grainline(piece.id, Point(10, 10), Point(90, 90), GrainlineType.BIAS)

    grainline = maker.get_piece(piece.id).grainline
    assert grainline.type is GrainlineType.BIAS
    assert (grainline.start.x, grainline.end.y) == (10.0, 90.0)
    maker.set_grainline("does-not-exist", (0, 0), (1, 1))


def test_add_grading_rule(maker: PatternMaker, square) -> None:
    piece = maker.create_piece("Test", square)
    maker.add_piece(piece)

    rule = maker.add_grading_rule(piece.id, 0, 0.5, 0.25)

    assert rule.id
    assert (rule.piece_id, rule.point_index, rule.x_grade, rule.y_grade) == (piece.id, 0, 0.5, 0.25)
    assert maker.get_piece(piece.id).grading_rules == [rule]
    assert maker.add_grading_rule("does-not-exist", 0, 1, 1) is None


def test_add_seam_allowance_is_a_pure_query(maker: PatternMaker, square) -> None:
    piece = maker.create_piece("Test", square, seam_allowance=1.0)
    maker.add_piece(piece)

    cut_line = maker.add_seam_allowance(piece, 1.5)

    assert len(cut_line) == 4
    assert (cut_line[0].x, cut_line[0].y) == pytest.approx((-1.5, -1.5))
    assert piece.outline == square
    assert piece.seam_allowance == 1.0


def test_events_are_emitted_and_unsubscribed(maker: PatternMaker, square) -> None:
    events = []
    unsubscribe = maker.add_event_listener(events.append)
    piece = maker.create_piece("Test", square)

    maker.add_piece(piece)
    maker.add_notch(piece.id, 0.25)
    maker.grade_pattern([{"name": "L", "grade": 1}])
    unsubscribe()
    maker.add_notch(piece.id, 0.75)

    assert [event.type for event in events] == [
        PatternEventType.PIECE_ADDED,
        PatternEventType.PIECE_UPDATED,
        PatternEventType.GRADED,
    ]
    assert events[0].piece is piece
    assert [size.name for size in events[2].sizes] == ["L"]


def test_mutations_touch_modified_time(maker: PatternMaker, square) -> None:
    piece = maker.create_piece("Test", square)
    maker.add_piece(piece)
    created = maker.get_pattern().metadata.modified_at

    maker.add_notch(piece.id, 0.1)

    assert maker.get_pattern().metadata.modified_at >= created
    assert piece.metadata.modified_at >= piece.metadata.created_at


def test_area_and_perimeter(maker: PatternMaker, square) -> None:
    piece = maker.create_piece("Test", list(reversed(square)))

    assert maker.calculate_piece_area(piece) == pytest.approx(10000.0)
    assert maker.calculate_piece_perimeter(piece) == pytest.approx(400.0)


def test_mirror_piece_unfolds_half_pattern(maker: PatternMaker) -> None:
    half = maker.create_basic_skirt_front(70, 94, 60, 20)

    full = maker.mirror_piece(half)

    assert full.id == f"{half.id}-mirrored"
    assert full.mirror_axis is None
    assert len(full.outline) == 2 * len(half.outline) - 2
    assert maker.calculate_piece_area(full) == pytest.approx(2 * maker.calculate_piece_area(half))
    assert half.mirror_axis is not None


def test_mirror_piece_requires_axis(maker: PatternMaker, square) -> None:
    with pytest.raises(ValueError):
        maker.mirror_piece(maker.create_piece("Test", square))


def test_locate_notch(maker: PatternMaker, square) -> None:
    piece = maker.create_piece("Test", square)
    maker.add_piece(piece)
    notch = maker.add_notch(piece.id, 0.375)

    frame = maker.locate_notch(piece.id, notch.id)

    assert (frame.position.x, frame.position.y) == pytest.approx((100.0, 50.0))
    assert frame.normal == pytest.approx((1.0, 0.0))
    assert maker.locate_notch(piece.id, "missing") is None


def test_mirror_piece_does_not_share_annotations(maker: PatternMaker, square) -> None:
    half = maker.create_piece("Yoke", square, mirror_axis=make_mirror_axis((0, 0), (0, 100)))
    maker.add_piece(half)
    maker.add_notch(half.id, 0.25)
    maker.set_grainline(half.id, (50, 10), (50, 90))
    maker.add_internal_line(half.id, [(10, 50), (40, 50)], "placement")

    full = maker.mirror_piece(half)

    assert all(notch.piece_id == full.id for notch in full.notches.values())
    assert all(notch.piece_id == half.id for notch in half.notches.values())
    assert all(full.notches[key] is not half.notches[key] for key in half.notches)
    assert full.grainline == half.grainline
    assert full.grainline is not half.grainline

    full.internal_lines[0].points.append(PatternPoint(20.0, 20.0))
    assert len(half.internal_lines[0].points) == 2
