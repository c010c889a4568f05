"""Source positions and location spans for diagnostics."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """A point in the source: 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceLocation:
    """A range within the source. ``end`` points just past the last character."""

    start: Position
    end: Position

    def __str__(self) -> str:
        return f"{self.start.line}:{self.start.column}"

    @property
    def is_zero(self) -> bool:
        return self.start == ZERO_POSITION and self.end == ZERO_POSITION


ZERO_POSITION = Position(0, 0, 0)
ZERO_LOCATION = SourceLocation(ZERO_POSITION, ZERO_POSITION)
