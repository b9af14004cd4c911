"""Flat-pattern drafting formulas for basic blocks.

Each function turns body measurements into a :class:`PatternPiece`. All values
are in the unit system of the target pattern and no conversion is applied.
Zero or negative measurements are accepted and yield degenerate outlines.

Coordinates follow the drafting table convention: x grows from the centre
line toward the side seam and y grows downward from the neck or waist.
"""

from __future__ import annotations

import math

from .geometry import PatternPoint, PointType
from .options import DEFAULT_DRAFTING_OPTIONS, DraftingOptions, Units
from .piece_model import (
    Dart,
    DartType,
    FabricLayer,
    FoldDirection,
    Notch,
    NotchType,
    PatternPiece,
    PlacementInfo,
    create_piece,
    make_grainline,
    make_mirror_axis,
    new_id,
)

__all__ = [
    "BODICE_BACK",
    "BODICE_FRONT",
    "SKIRT_FRONT",
    "SLEEVE",
    "create_basic_bodice_back",
    "create_basic_bodice_front",
    "create_basic_skirt_front",
    "create_basic_sleeve",
]

BODICE_FRONT = "Bodice Front"
BODICE_BACK = "Bodice Back"
SLEEVE = "Sleeve"
SKIRT_FRONT = "Skirt Front"


def _vertical_grainline(x: float, top: float, bottom: float, inset: float):
    return make_grainline((x, top + inset), (x, bottom - inset))


def _waist_dart(center_x: float, waist_y: float, apex_y: float, intake: float) -> Dart:
    apex = PatternPoint(center_x, apex_y, label="Dart Apex")
    half = intake / 2.0
    return Dart(
        id=new_id(),
        apex=apex,
        left_leg=PatternPoint(center_x - half, waist_y),
        right_leg=PatternPoint(center_x + half, waist_y),
        width=intake,
        length=abs(waist_y - apex_y),
        fold_direction=FoldDirection.RIGHT,
        type=DartType.STRAIGHT,
    )


def _bodice_outline(
    *,
    width: float,
    side_waist_x: float,
    shoulder_width: float,
    shoulder_drop: float,
    length: float,
    armhole_shaping: float,
    neck_label: str,
    waist_label: str,
) -> list[PatternPoint]:
    armhole_depth = length / 2.0
    return [
        PatternPoint(0.0, 0.0, PointType.CORNER, label=neck_label),
        PatternPoint(shoulder_width / 2.0, -shoulder_drop, PointType.CORNER, label="Shoulder Point"),
        PatternPoint(width * (1.0 - armhole_shaping), armhole_depth * 0.25, PointType.CURVE),
        PatternPoint(width, armhole_depth, PointType.SMOOTH, label="Underarm"),
        PatternPoint(width, length * 0.7, PointType.CURVE),
        PatternPoint(side_waist_x, length, PointType.CORNER, label="Side Waist"),
        PatternPoint(0.0, length, PointType.CORNER, label=waist_label),
    ]


def create_basic_bodice_front(
    bust: float,
    waist: float,
    hip: float,
    shoulder: float,
    center_front_length: float,
    *,
    options: DraftingOptions = DEFAULT_DRAFTING_OPTIONS,
    units: Units | str = Units.CM,
) -> PatternPiece:
    """Draft a half bodice front with a waist-to-bust-point dart.

    The half-pattern width is a quarter bust plus ease. Waist suppression is the
    quarter bust minus quarter waist; half goes into the dart and half into the
    side seam, which never extends past the quarter hip line.
    """

    width = bust / 4.0 + options.bodice_ease
    suppression = max(bust / 4.0 - waist / 4.0, 0.0)
    intake = suppression / 2.0
    side_waist_x = min(waist / 4.0 + options.bodice_ease + intake, hip / 4.0 + options.bodice_ease)
    outline = _bodice_outline(
        width=width,
        side_waist_x=side_waist_x,
        shoulder_width=shoulder,
        shoulder_drop=options.front_shoulder_drop,
        length=center_front_length,
        armhole_shaping=options.armhole_shaping,
        neck_label="CF Neck",
        waist_label="CF Waist",
    )
    bust_point_x = bust / 8.0
    dart = _waist_dart(bust_point_x, center_front_length, center_front_length * 0.5, intake)
    return create_piece(
        BODICE_FRONT,
        outline,
        seam_allowance=options.default_seam_allowance,
        units=units,
        grainline=_vertical_grainline(bust_point_x, 0.0, center_front_length, options.grainline_inset),
        darts=[dart],
        mirror_axis=make_mirror_axis((0.0, 0.0), (0.0, center_front_length)),
        placement=PlacementInfo(fabric_layer=FabricLayer.FOLD),
    )


def create_basic_bodice_back(
    bust: float,
    waist: float,
    shoulder: float,
    center_back_length: float,
    *,
    options: DraftingOptions = DEFAULT_DRAFTING_OPTIONS,
    units: Units | str = Units.CM,
) -> PatternPiece:
    """Draft a half bodice back; shaping comes from a small shoulder dart."""

    width = bust / 4.0 + options.bodice_ease
    suppression = max(bust / 4.0 - waist / 4.0, 0.0)
    side_waist_x = width - suppression / 2.0
    outline = _bodice_outline(
        width=width,
        side_waist_x=side_waist_x,
        shoulder_width=shoulder,
        shoulder_drop=options.back_shoulder_drop,
        length=center_back_length,
        armhole_shaping=options.armhole_shaping * 1.25,
        neck_label="CB Neck",
        waist_label="CB Waist",
    )

    # Dart legs sit on the shoulder seam either side of its midpoint.
    shoulder_end = outline[1]
    mid_x = shoulder_end.x / 2.0
    mid_y = shoulder_end.y / 2.0
    intake = max(shoulder * options.back_shoulder_dart_ratio, 0.0)
    half = intake / 2.0
    slope = shoulder_end.y / shoulder_end.x if shoulder_end.x else 0.0
    apex = PatternPoint(mid_x, mid_y + center_back_length * 0.2, label="Dart Apex")
    dart = Dart(
        id=new_id(),
        apex=apex,
        left_leg=PatternPoint(mid_x - half, mid_y - half * slope),
        right_leg=PatternPoint(mid_x + half, mid_y + half * slope),
        width=intake,
        length=abs(center_back_length * 0.2),
        fold_direction=FoldDirection.LEFT,
        type=DartType.STRAIGHT,
    )
    return create_piece(
        BODICE_BACK,
        outline,
        seam_allowance=options.default_seam_allowance,
        units=units,
        grainline=_vertical_grainline(bust / 8.0, 0.0, center_back_length, options.grainline_inset),
        darts=[dart],
        mirror_axis=make_mirror_axis((0.0, 0.0), (0.0, center_back_length)),
        placement=PlacementInfo(fabric_layer=FabricLayer.FOLD),
    )


def _sleeve_cap(half_armhole: float, cap_height: float, samples: int) -> list[PatternPoint]:
    points: list[PatternPoint] = []
    for step in range(samples + 1):
        u = step / samples
        x = -half_armhole / 2.0 + half_armhole * u
        y = cap_height * (1.0 + math.cos(2.0 * math.pi * u)) / 2.0
        if step in (0, samples):
            points.append(PatternPoint(x, y, PointType.CORNER, label="Underarm"))
        elif step * 2 == samples:
            points.append(PatternPoint(x, y, PointType.SMOOTH, label="Sleeve Cap"))
        else:
            points.append(PatternPoint(x, y, PointType.CURVE))
    return points


def create_basic_sleeve(
    armhole: float,
    length: float,
    wrist: float,
    *,
    options: DraftingOptions = DEFAULT_DRAFTING_OPTIONS,
    units: Units | str = Units.CM,
) -> PatternPiece:
    """Draft a one-piece sleeve.

    The cap spans half the armhole circumference and rises a third of that
    span, sampled as a raised cosine. The body tapers straight from the
    underarm points to the wrist plus ease.
    """

    half_armhole = armhole / 2.0
    cap_height = half_armhole / 3.0
    half_wrist = wrist / 2.0 + options.sleeve_wrist_ease
    outline = _sleeve_cap(half_armhole, cap_height, options.sleeve_cap_samples)
    outline.append(PatternPoint(half_wrist, length, PointType.CORNER, label="Front Wrist"))
    outline.append(PatternPoint(-half_wrist, length, PointType.CORNER, label="Back Wrist"))
    notches = [
        Notch(id=new_id(), piece_id="", position=0.15, type=NotchType.SINGLE, label="Back"),
        Notch(id=new_id(), piece_id="", position=0.35, type=NotchType.DOUBLE, label="Front"),
    ]
    return create_piece(
        SLEEVE,
        outline,
        seam_allowance=options.default_seam_allowance,
        units=units,
        grainline=_vertical_grainline(0.0, cap_height, length, options.grainline_inset),
        notches=notches,
        placement=PlacementInfo(fabric_layer=FabricLayer.SINGLE, quantity=2),
    )


def create_basic_skirt_front(
    waist: float,
    hip: float,
    length: float,
    waist_to_hip_length: float,
    *,
    options: DraftingOptions = DEFAULT_DRAFTING_OPTIONS,
    units: Units | str = Units.CM,
) -> PatternPiece:
    """Draft a half skirt front with one waist dart.

    The hip-to-waist difference on the quarter pattern is split evenly between
    the dart and the side seam curve.
    """

    quarter_waist = waist / 4.0
    quarter_hip = hip / 4.0
    suppression = max(quarter_hip - quarter_waist, 0.0)
    intake = suppression / 2.0
    hip_x = quarter_hip + options.skirt_ease
    outline = [
        PatternPoint(0.0, 0.0, PointType.CORNER, label="CF Waist"),
        PatternPoint(quarter_waist + options.skirt_ease + intake, 0.0, PointType.CORNER, label="Side Waist"),
        PatternPoint(hip_x, waist_to_hip_length, PointType.CURVE, label="Side Hip"),
        PatternPoint(hip_x + options.skirt_hem_flare, length, PointType.CORNER, label="Side Hem"),
        PatternPoint(0.0, length, PointType.CORNER, label="CF Hem"),
    ]
    dart = _waist_dart(quarter_waist / 2.0, 0.0, waist_to_hip_length * 0.6, intake)
    return create_piece(
        SKIRT_FRONT,
        outline,
        seam_allowance=options.default_seam_allowance,
        units=units,
        grainline=_vertical_grainline(quarter_hip / 2.0, 0.0, length, options.grainline_inset),
        darts=[dart],
        mirror_axis=make_mirror_axis((0.0, 0.0), (0.0, length)),
        placement=PlacementInfo(fabric_layer=FabricLayer.FOLD),
    )
