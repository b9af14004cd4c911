"""Grade base pieces into a family of sizes."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from .geometry import PatternPoint
from .piece_model import PatternPiece, Size

logger = logging.getLogger(__name__)

__all__ = ["GradedOutlines", "grade_piece", "grade_pieces"]

GradedOutlines = dict[str, dict[str, list[PatternPoint]]]
"""Size name -> piece id -> graded outline."""


def grade_piece(piece: PatternPiece, grade: int) -> list[PatternPoint]:
    """Return *piece*'s outline displaced by its grading rules at *grade* steps.

    Every rule moves the vertex at its ``point_index`` by
    ``(x_grade * grade, y_grade * grade)``; rules on the same vertex add up.
    Rules whose index no longer exists on the outline are skipped. Vertices
    without a rule keep their base position.
    """

    count = len(piece.outline)
    offsets: dict[int, tuple[float, float]] = {}
    for rule in piece.grading_rules:
        if not 0 <= rule.point_index < count:
            logger.warning(
                "Skipping grading rule %s on piece %s: point index %d outside outline of %d points.",
                rule.id,
                piece.id,
                rule.point_index,
                count,
            )
            continue
        dx, dy = offsets.get(rule.point_index, (0.0, 0.0))
        offsets[rule.point_index] = (dx + rule.x_grade * grade, dy + rule.y_grade * grade)

    graded: list[PatternPoint] = []
    for index, point in enumerate(piece.outline):
        if index in offsets:
            dx, dy = offsets[index]
            graded.append(point.translated(dx, dy))
        else:
            graded.append(point)
    return graded


def grade_pieces(pieces: Mapping[str, PatternPiece], sizes: Iterable[Size]) -> GradedOutlines:
    """Grade every piece for every size, keyed by size name in the order given."""

    result: GradedOutlines = {}
    for size in sizes:
        result[size.name] = {piece_id: grade_piece(piece, size.grade) for piece_id, piece in pieces.items()}
    logger.debug("Graded %d piece(s) into %d size(s).", len(pieces), len(result))
    return result
