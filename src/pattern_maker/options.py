"""Configuration values shared by the drafting and offset routines."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = ["DEFAULT_DRAFTING_OPTIONS", "DEFAULT_OFFSET_OPTIONS", "DraftingOptions", "OffsetOptions", "Units"]


class Units(str, Enum):
    """Unit system declared by a pattern. Values are never converted."""

    CM = "cm"
    INCHES = "inches"


@dataclass(frozen=True, slots=True)
class DraftingOptions:
    """Ease and construction constants used by the block drafting formulas.

    All lengths are expressed in the unit system of the pattern being drafted.
    The defaults are the conventional centimetre values for a fitted block.
    """

    bodice_ease: float = 2.0
    skirt_ease: float = 1.5
    sleeve_wrist_ease: float = 2.0
    skirt_hem_flare: float = 2.0
    front_shoulder_drop: float = 2.0
    back_shoulder_drop: float = 1.5
    armhole_shaping: float = 0.15
    default_seam_allowance: float = 1.5
    grainline_inset: float = 5.0
    sleeve_cap_samples: int = 6
    back_shoulder_dart_ratio: float = 1.0 / 38.0

    def __post_init__(self) -> None:
        if self.sleeve_cap_samples < 2:
            raise ValueError("sleeve_cap_samples must be at least 2.")


@dataclass(frozen=True, slots=True)
class OffsetOptions:
    """Tolerances for the miter-join polygon offset."""

    miter_limit: float = 4.0
    epsilon: float = 1e-9

    def __post_init__(self) -> None:
        if self.miter_limit <= 0.0:
            raise ValueError("miter_limit must be positive.")


DEFAULT_DRAFTING_OPTIONS = DraftingOptions()
DEFAULT_OFFSET_OPTIONS = OffsetOptions()
