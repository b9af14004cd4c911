"""Pattern aggregate: the public entry point of the pattern engine.

:class:`PatternMaker` owns a single current :class:`Pattern` whose pieces live
in an id-keyed arena. Mutators look pieces up by id, modify the stored value in
place and record the change; unknown ids are logged and ignored. The engine is
synchronous and performs no locking, so concurrent hosts need one writer per
instance.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Sequence

from . import drafting
from .errors import NoActivePatternError
from .geometry import OutlineFrame, PatternPoint, mirror_point, outline_point_frame, perimeter_length, polygon_area
from .grading import GradedOutlines, grade_pieces
from .options import DEFAULT_DRAFTING_OPTIONS, DraftingOptions, Units
from .piece_model import (
    Dart,
    DartSpec,
    GradingRule,
    GrainlineType,
    InternalLine,
    InternalLineType,
    MirrorAxis,
    Notch,
    NotchType,
    PatternPiece,
    Size,
    add_seam_allowance,
    clamp_notch_position,
    create_piece,
    make_grainline,
    new_id,
)

logger = logging.getLogger(__name__)

__all__ = [
    "Pattern",
    "PatternEvent",
    "PatternEventType",
    "PatternMaker",
    "PatternMetadata",
]

PATTERN_VERSION = "1.0.0"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class PatternMetadata:
    units: Units = Units.CM
    created_at: datetime = field(default_factory=_now)
    modified_at: datetime = field(default_factory=_now)
    version: str = PATTERN_VERSION

    def touch(self) -> None:
        self.modified_at = _now()


@dataclass(slots=True)
class Pattern:
    """Root aggregate holding a drafting session's pieces keyed by id."""

    id: str
    name: str
    base_size: str = "M"
    metadata: PatternMetadata = field(default_factory=PatternMetadata)
    pieces: dict[str, PatternPiece] = field(default_factory=dict)
    sizes: list[Size] = field(default_factory=list)


class PatternEventType(str, Enum):
    PIECE_ADDED = "piece_added"
    PIECE_UPDATED = "piece_updated"
    GRADED = "graded"


@dataclass(frozen=True, slots=True)
class PatternEvent:
    type: PatternEventType
    piece: PatternPiece | None = None
    sizes: tuple[Size, ...] = ()


PatternEventListener = Callable[[PatternEvent], None]


class PatternMaker:
    """Create, enrich and grade the pieces of one pattern at a time."""

    def __init__(self, *, options: DraftingOptions | None = None) -> None:
        self.options = options or DEFAULT_DRAFTING_OPTIONS
        self._pattern: Pattern | None = None
        self._listeners: list[PatternEventListener] = []

    # ------------------------------------------------------------------
    # Pattern
    # ------------------------------------------------------------------
    def create_pattern(self, name: str, base_size: str = "M", units: Units | str = Units.CM) -> Pattern:
        """Start a new pattern, replacing the current one."""

        pattern = Pattern(
            id=new_id(),
            name=name,
            base_size=base_size,
            metadata=PatternMetadata(units=Units(units)),
            sizes=[Size(name=base_size, grade=0)],
        )
        self._pattern = pattern
        logger.debug("Created pattern %r (base size %s, %s).", name, base_size, pattern.metadata.units.value)
        return pattern

    def get_pattern(self) -> Pattern | None:
        return self._pattern

    @property
    def units(self) -> Units:
        return self._pattern.metadata.units if self._pattern is not None else Units.CM

    # ------------------------------------------------------------------
    # Piece arena
    # ------------------------------------------------------------------
    def create_piece(self, name: str, outline: Sequence[Any], **options: Any) -> PatternPiece:
        """Allocate a detached piece; see :func:`piece_model.create_piece` for options."""

        options.setdefault("units", self.units)
        return create_piece(name, outline, **options)

    def add_piece(self, piece: PatternPiece) -> None:
        pattern = self._require_pattern("add a piece")
        pattern.pieces[piece.id] = piece
        pattern.metadata.touch()
        logger.debug("Added piece %r (%s) to pattern %r.", piece.name, piece.id, pattern.name)
        self._emit(PatternEvent(type=PatternEventType.PIECE_ADDED, piece=piece))

    def get_piece(self, piece_id: str) -> PatternPiece | None:
        if self._pattern is None:
            return None
        return self._pattern.pieces.get(piece_id)

    def update_piece(self, piece: PatternPiece) -> None:
        """Replace (or insert) the stored piece keyed by ``piece.id``."""

        pattern = self._require_pattern("update a piece")
        piece.metadata.touch()
        pattern.pieces[piece.id] = piece
        pattern.metadata.touch()
        self._emit(PatternEvent(type=PatternEventType.PIECE_UPDATED, piece=piece))

    # ------------------------------------------------------------------
    # Drafting
    # ------------------------------------------------------------------
    def create_basic_bodice_front(
        self,
        bust: float,
        waist: float,
        hip: float,
        shoulder: float,
        center_front_length: float,
    ) -> PatternPiece:
        return drafting.create_basic_bodice_front(
            bust, waist, hip, shoulder, center_front_length, options=self.options, units=self.units
        )

    def create_basic_bodice_back(
        self,
        bust: float,
        waist: float,
        shoulder: float,
        center_back_length: float,
    ) -> PatternPiece:
        return drafting.create_basic_bodice_back(
            bust, waist, shoulder, center_back_length, options=self.options, units=self.units
        )

    def create_basic_sleeve(self, armhole: float, length: float, wrist: float) -> PatternPiece:
        return drafting.create_basic_sleeve(armhole, length, wrist, options=self.options, units=self.units)

    def create_basic_skirt_front(
        self,
        waist: float,
        hip: float,
        length: float,
        waist_to_hip_length: float,
    ) -> PatternPiece:
        return drafting.create_basic_skirt_front(
            waist, hip, length, waist_to_hip_length, options=self.options, units=self.units
        )

    # ------------------------------------------------------------------
    # Enrichment
    # ------------------------------------------------------------------
    def add_seam_allowance(self, piece: PatternPiece, allowance: float) -> list[PatternPoint]:
        """Preview the cut line for *allowance* without touching the piece."""

        return add_seam_allowance(piece, allowance)

    def add_notch(
        self,
        piece_id: str,
        position: float,
        notch_type: NotchType | str = NotchType.SINGLE,
        *,
        label: str | None = None,
    ) -> Notch | None:
        piece = self._lookup(piece_id, "add_notch")
        if piece is None:
            return None
        notch = Notch(
            id=new_id(),
            piece_id=piece_id,
            position=clamp_notch_position(position),
            type=NotchType(notch_type),
            label=label,
        )
        piece.notches[notch.id] = notch
        self.update_piece(piece)
        return notch

    def add_dart(self, piece_id: str, dart_spec: DartSpec | Mapping[str, Any]) -> Dart | None:
        """Attach a dart; a dart without positive length is refused and ``None`` returned."""

        piece = self._lookup(piece_id, "add_dart")
        if piece is None:
            return None
        dart = Dart.from_spec(dart_spec)
        if not math.isfinite(dart.length) or dart.length <= 0.0:
            logger.warning("add_dart ignored on piece %r: length %s is not positive.", piece_id, dart.length)
            return None
        piece.darts[dart.id] = dart
        self.update_piece(piece)
        return dart

    def add_internal_line(
        self,
        piece_id: str,
        points: Sequence[Any],
        line_type: InternalLineType | str = InternalLineType.CONSTRUCTION,
        *,
        label: str | None = None,
    ) -> InternalLine | None:
        piece = self._lookup(piece_id, "add_internal_line")
        if piece is None:
            return None
        line = InternalLine(id=new_id(), points=list(points), type=line_type, label=label)
        piece.internal_lines.append(line)
        self.update_piece(piece)
        return line

    def set_grainline(
        self,
        piece_id: str,
        start: Any,
        end: Any,
        grain_type: GrainlineType | str = GrainlineType.STRAIGHT,
    ) -> None:
        piece = self._lookup(piece_id, "set_grainline")
        if piece is None:
            return
        piece.grainline = make_grainline(start, end, grain_type)
        self.update_piece(piece)

    def add_grading_rule(
        self,
        piece_id: str,
        point_index: int,
        x_grade: float,
        y_grade: float,
    ) -> GradingRule | None:
        piece = self._lookup(piece_id, "add_grading_rule")
        if piece is None:
            return None
        rule = GradingRule(
            id=new_id(),
            piece_id=piece_id,
            point_index=int(point_index),
            x_grade=float(x_grade),
            y_grade=float(y_grade),
        )
        piece.grading_rules.append(rule)
        self.update_piece(piece)
        return rule

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def grade_pattern(self, sizes: Iterable[Size | Mapping[str, Any]]) -> GradedOutlines:
        """Return graded outlines for every piece, keyed by size name then piece id."""

        resolved = [size if isinstance(size, Size) else Size.from_mapping(size) for size in sizes]
        if self._pattern is None:
            return {size.name: {} for size in resolved}
        graded = grade_pieces(self._pattern.pieces, resolved)
        self._pattern.sizes = resolved
        self._emit(PatternEvent(type=PatternEventType.GRADED, sizes=tuple(resolved)))
        return graded

    def locate_notch(self, piece_id: str, notch_id: str) -> OutlineFrame | None:
        """Position, tangent and outward normal of a notch on its piece outline."""

        piece = self.get_piece(piece_id)
        if piece is None or notch_id not in piece.notches:
            return None
        return outline_point_frame(piece.outline, piece.notches[notch_id].position)

    @staticmethod
    def calculate_piece_area(piece: PatternPiece) -> float:
        return abs(polygon_area(piece.outline))

    @staticmethod
    def calculate_piece_perimeter(piece: PatternPiece) -> float:
        return perimeter_length(piece.outline)

    @staticmethod
    def mirror_piece(piece: PatternPiece) -> PatternPiece:
        """Unfold a half pattern across its mirror axis into a full-width piece."""

        axis: MirrorAxis | None = piece.mirror_axis
        if axis is None:
            raise ValueError(f"Piece {piece.name!r} has no mirror axis defined.")
        mirrored = [mirror_point(point, axis.start, axis.end) for point in piece.outline]
        full_outline = list(piece.outline) + list(reversed(mirrored[1:-1]))
        result = piece.copy_with_outline(full_outline, piece_id=f"{piece.id}-mirrored")
        result.mirror_axis = None
        return result

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def add_event_listener(self, listener: PatternEventListener) -> Callable[[], None]:
        """Register *listener*; the returned callable unsubscribes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, event: PatternEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def _require_pattern(self, operation: str) -> Pattern:
        if self._pattern is None:
            raise NoActivePatternError(operation)
        return self._pattern

    def _lookup(self, piece_id: str, operation: str) -> PatternPiece | None:
        piece = self.get_piece(piece_id)
        if piece is None:
            logger.warning("%s ignored: piece %r not found.", operation, piece_id)
        return piece
