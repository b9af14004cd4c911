"""Parametric pattern drafting, seam allowance and grading engine."""

from __future__ import annotations

from importlib import import_module

__all__ = [
    "Dart",
    "DartSpec",
    "DartType",
    "DraftingOptions",
    "FoldDirection",
    "Grainline",
    "GrainlineType",
    "GradingRule",
    "InternalLine",
    "InternalLineType",
    "NoActivePatternError",
    "Notch",
    "NotchType",
    "OffsetOptions",
    "Pattern",
    "PatternEvent",
    "PatternEventType",
    "PatternMaker",
    "PatternMakerError",
    "PatternPiece",
    "PatternPoint",
    "Point",
    "PointType",
    "Size",
    "Units",
    "grade_piece",
    "offset_polygon",
    "perimeter_length",
    "point_at_fraction",
]

_ATTRIBUTE_MODULES: dict[str, str] = {
    "Dart": ".piece_model",
    "DartSpec": ".piece_model",
    "DartType": ".piece_model",
    "DraftingOptions": ".options",
    "FoldDirection": ".piece_model",
    "Grainline": ".piece_model",
    "GrainlineType": ".piece_model",
    "GradingRule": ".piece_model",
    "InternalLine": ".piece_model",
    "InternalLineType": ".piece_model",
    "NoActivePatternError": ".errors",
    "Notch": ".piece_model",
    "NotchType": ".piece_model",
    "OffsetOptions": ".options",
    "Pattern": ".maker",
    "PatternEvent": ".maker",
    "PatternEventType": ".maker",
    "PatternMaker": ".maker",
    "PatternMakerError": ".errors",
    "PatternPiece": ".piece_model",
    "PatternPoint": ".geometry",
    "Point": ".geometry",
    "PointType": ".geometry",
    "Size": ".piece_model",
    "Units": ".options",
    "grade_piece": ".grading",
    "offset_polygon": ".geometry",
    "perimeter_length": ".geometry",
    "point_at_fraction": ".geometry",
}


def __getattr__(name: str):
    try:
        module_name = _ATTRIBUTE_MODULES[name]
    except KeyError as exc:
        raise AttributeError(f"module 'pattern_maker' has no attribute {name!r}") from exc

    module = import_module(module_name, __name__)
    value = getattr(module, name)
    globals()[name] = value
    return value
