"""Exception types raised by the pattern engine."""

from __future__ import annotations

__all__ = ["NoActivePatternError", "PatternMakerError"]


class PatternMakerError(RuntimeError):
    """Base class for pattern engine failures."""


class NoActivePatternError(PatternMakerError):
    """Raised when a mutation needs a pattern but none has been created."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot {operation}: no pattern has been created.")
