"""Data model for pattern pieces and their annotations."""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from .geometry import PatternPoint, Point, as_pattern_point, as_point, offset_polygon, outline_centroid
from .options import Units

logger = logging.getLogger(__name__)

__all__ = [
    "Dart",
    "DartSpec",
    "DartType",
    "FabricLayer",
    "FoldDirection",
    "Grainline",
    "GrainlineType",
    "GradingRule",
    "InternalLine",
    "InternalLineType",
    "LabelType",
    "MirrorAxis",
    "Notch",
    "NotchType",
    "PatternLabel",
    "PatternPiece",
    "PieceMetadata",
    "PlacementInfo",
    "Size",
    "add_seam_allowance",
    "clamp_notch_position",
    "create_piece",
    "make_grainline",
    "make_mirror_axis",
    "new_id",
]

PIECE_VERSION = "1.0.0"


class NotchType(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    T = "T"
    DIAMOND = "diamond"
    CIRCLE = "circle"


class DartType(str, Enum):
    STRAIGHT = "straight"
    CURVED = "curved"
    FRENCH = "french"
    DOUBLE_ENDED = "double_ended"


class FoldDirection(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    NONE = "none"


class GrainlineType(str, Enum):
    STRAIGHT = "straight"
    BIAS = "bias"
    CROSSGRAIN = "crossgrain"


class InternalLineType(str, Enum):
    FOLDLINE = "foldline"
    PLACEMENT = "placement"
    BUTTONHOLE = "buttonhole"
    POCKET = "pocket"
    EASE = "ease"
    CONSTRUCTION = "construction"


class LabelType(str, Enum):
    PIECE_NAME = "piece_name"
    SIZE = "size"
    QUANTITY = "quantity"
    GRAINLINE = "grainline"
    INSTRUCTION = "instruction"
    CUSTOM = "custom"


class FabricLayer(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    FOLD = "fold"


def new_id() -> str:
    """Return a fresh identifier for pieces and annotations."""

    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Notch:
    """Alignment mark at a normalised arc-length position along the outline."""

    id: str
    piece_id: str
    position: float
    type: NotchType = NotchType.SINGLE
    label: str | None = None
    matching_piece_id: str | None = None
    matching_notch_id: str | None = None


@dataclass(frozen=True, slots=True)
class DartSpec:
    """Caller-supplied dart geometry as passed to ``add_dart``."""

    apex: PatternPoint
    left_leg: PatternPoint
    right_leg: PatternPoint
    width: float
    length: float
    fold_direction: FoldDirection = FoldDirection.RIGHT
    type: DartType = DartType.STRAIGHT

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "DartSpec":
        return cls(
            apex=as_pattern_point(payload["apex"]),
            left_leg=as_pattern_point(payload["left_leg"]),
            right_leg=as_pattern_point(payload["right_leg"]),
            width=float(payload["width"]),
            length=float(payload["length"]),
            fold_direction=FoldDirection(payload.get("fold_direction", FoldDirection.RIGHT)),
            type=DartType(payload.get("type", DartType.STRAIGHT)),
        )


@dataclass(slots=True)
class Dart:
    """Folded wedge; both legs converge on the apex."""

    id: str
    apex: PatternPoint
    left_leg: PatternPoint
    right_leg: PatternPoint
    width: float
    length: float
    fold_direction: FoldDirection = FoldDirection.RIGHT
    type: DartType = DartType.STRAIGHT

    @classmethod
    def from_spec(cls, spec: DartSpec | Mapping[str, Any], *, dart_id: str | None = None) -> "Dart":
        """Build a dart from *spec*; a negative or non-finite width becomes 0."""

        if not isinstance(spec, DartSpec):
            spec = DartSpec.from_mapping(spec)
        width = float(spec.width)
        if not math.isfinite(width) or width < 0.0:
            logger.warning("Dart width %s clamped to 0.0.", width)
            width = 0.0
        return cls(
            id=dart_id or new_id(),
            apex=as_pattern_point(spec.apex),
            left_leg=as_pattern_point(spec.left_leg),
            right_leg=as_pattern_point(spec.right_leg),
            width=width,
            length=float(spec.length),
            fold_direction=FoldDirection(spec.fold_direction),
            type=DartType(spec.type),
        )


@dataclass(slots=True)
class Grainline:
    """Fabric grain reference axis, stored as literal endpoints."""

    start: PatternPoint
    end: PatternPoint
    type: GrainlineType = GrainlineType.STRAIGHT


@dataclass(slots=True)
class GradingRule:
    """Per-grade-step displacement of one outline vertex."""

    id: str
    piece_id: str
    point_index: int
    x_grade: float
    y_grade: float


@dataclass(slots=True)
class InternalLine:
    """Marking drawn inside the outline, such as a fold or pocket placement."""

    id: str
    points: list[PatternPoint]
    type: InternalLineType = InternalLineType.CONSTRUCTION
    label: str | None = None

    def __post_init__(self) -> None:
        self.points = [as_pattern_point(point) for point in self.points]
        self.type = InternalLineType(self.type)


@dataclass(slots=True)
class PatternLabel:
    id: str
    position: Point
    text: str
    type: LabelType = LabelType.CUSTOM
    rotation: float = 0.0


@dataclass(frozen=True, slots=True)
class MirrorAxis:
    """Line a half-pattern is mirrored across, optionally cut on the fold."""

    start: Point
    end: Point
    cut_on_fold: bool = True


@dataclass(frozen=True, slots=True)
class PlacementInfo:
    fabric_layer: FabricLayer = FabricLayer.SINGLE
    quantity: int = 1
    right_side_up: bool = True
    interfacing: bool = False
    lining: bool = False


@dataclass(slots=True)
class PieceMetadata:
    created_at: datetime = field(default_factory=_now)
    modified_at: datetime = field(default_factory=_now)
    version: str = PIECE_VERSION
    units: Units = Units.CM

    def touch(self) -> None:
        self.modified_at = _now()


@dataclass(slots=True)
class PatternPiece:
    """A single pattern piece with its outline and append-only annotations."""

    id: str
    name: str
    outline: list[PatternPoint]
    seam_allowance: float = 0.0
    notches: dict[str, Notch] = field(default_factory=dict)
    darts: dict[str, Dart] = field(default_factory=dict)
    grainline: Grainline | None = None
    grading_rules: list[GradingRule] = field(default_factory=list)
    description: str | None = None
    labels: list[PatternLabel] = field(default_factory=list)
    internal_lines: list[InternalLine] = field(default_factory=list)
    mirror_axis: MirrorAxis | None = None
    placement: PlacementInfo = field(default_factory=PlacementInfo)
    metadata: PieceMetadata = field(default_factory=PieceMetadata)

    def __post_init__(self) -> None:
        self.outline = [as_pattern_point(point) for point in self.outline]
        self.seam_allowance = float(self.seam_allowance)

    def copy_with_outline(self, outline: Iterable[Any], *, piece_id: str | None = None) -> "PatternPiece":
        """Return a copy of this piece carrying *outline* instead of its own.

        Annotations are copied so the result shares no mutable state with this
        piece; notches and grading rules are bound to the copy's id.
        """

        new_piece_id = piece_id or self.id
        return replace(
            self,
            id=new_piece_id,
            outline=list(outline),
            notches={key: replace(notch, piece_id=new_piece_id) for key, notch in self.notches.items()},
            darts={key: replace(dart) for key, dart in self.darts.items()},
            grainline=None if self.grainline is None else replace(self.grainline),
            grading_rules=[replace(rule, piece_id=new_piece_id) for rule in self.grading_rules],
            labels=[replace(label) for label in self.labels],
            internal_lines=[replace(line, points=list(line.points)) for line in self.internal_lines],
            metadata=replace(self.metadata),
        )


@dataclass(frozen=True, slots=True)
class Size:
    """Grading target: a signed step relative to the base size."""

    name: str
    grade: int = 0
    measurements: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Size":
        measurements = {str(key): float(value) for key, value in (payload.get("measurements") or {}).items()}
        return cls(name=str(payload["name"]), grade=int(payload.get("grade", 0)), measurements=measurements)


def clamp_notch_position(position: float) -> float:
    """Clamp a notch position into ``[0, 1]``; non-finite input maps to 0."""

    value = float(position)
    if not math.isfinite(value):
        logger.warning("Notch position %s is not finite; using 0.0.", value)
        return 0.0
    clamped = min(max(value, 0.0), 1.0)
    if clamped != value:
        logger.warning("Notch position %s clamped to %s.", value, clamped)
    return clamped


def create_piece(
    name: str,
    outline: Sequence[Any],
    *,
    seam_allowance: float = 0.0,
    units: Units | str = Units.CM,
    grainline: Grainline | None = None,
    notches: Iterable[Notch] = (),
    darts: Iterable[Dart] = (),
    description: str | None = None,
    labels: Iterable[PatternLabel] = (),
    internal_lines: Iterable[InternalLine] = (),
    mirror_axis: MirrorAxis | None = None,
    placement: PlacementInfo | None = None,
) -> PatternPiece:
    """Allocate a piece with a fresh id and a private copy of *outline*.

    A piece-name label is placed at the vertex centroid unless *labels*
    already contains one.
    """

    piece_id = new_id()
    points = [as_pattern_point(point) for point in outline]
    piece_labels = list(labels)
    if not any(label.type is LabelType.PIECE_NAME for label in piece_labels):
        piece_labels.append(
            PatternLabel(id=new_id(), position=outline_centroid(points), text=name, type=LabelType.PIECE_NAME)
        )
    piece = PatternPiece(
        id=piece_id,
        name=name,
        outline=points,
        seam_allowance=seam_allowance,
        notches={notch.id: replace(notch, piece_id=piece_id) for notch in notches},
        darts={dart.id: dart for dart in darts},
        grainline=grainline,
        description=description,
        labels=piece_labels,
        internal_lines=list(internal_lines),
        mirror_axis=mirror_axis,
        placement=placement or PlacementInfo(),
        metadata=PieceMetadata(units=Units(units)),
    )
    logger.debug("Created piece %r (%s) with %d outline points.", name, piece_id, len(points))
    return piece


def add_seam_allowance(piece: PatternPiece, allowance: float) -> list[PatternPoint]:
    """Return the outline offset outward by *allowance*; *piece* is not modified."""

    return offset_polygon(piece.outline, allowance)


def make_grainline(start: Any, end: Any, grain_type: GrainlineType | str = GrainlineType.STRAIGHT) -> Grainline:
    return Grainline(start=as_pattern_point(start), end=as_pattern_point(end), type=GrainlineType(grain_type))


def make_mirror_axis(start: Any, end: Any, *, cut_on_fold: bool = True) -> MirrorAxis:
    return MirrorAxis(start=as_point(start), end=as_point(end), cut_on_fold=cut_on_fold)
