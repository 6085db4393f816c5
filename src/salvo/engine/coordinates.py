"""Grid coordinates: parsing, canonical text and neighbourhood."""

from __future__ import annotations

import random
import re
from dataclasses import dataclass

from .errors import InvalidCoordinateError

BOARD_SIZE = 10
ROW_LABELS = "ABCDEFGHIJ"
FIRST_COLUMN = 1
LAST_COLUMN = BOARD_SIZE

_COORDINATE_RE = re.compile(r"[A-Ja-j](10|[1-9])")


@dataclass(frozen=True)
class Coordinate:
    """Immutable board cell.

    ``row`` is the zero-based index of the row letter (A=0 .. J=9) and ``col``
    is the one-based column number (1 .. 10), matching the textual form.
    """

    row: int
    col: int

    def __post_init__(self) -> None:
        if not in_bounds(self.row, self.col):
            raise InvalidCoordinateError(f"Cell ({self.row}, {self.col}) is outside the board.")

    @classmethod
    def parse(cls, text: str) -> Coordinate:
        """Parse ``A1`` .. ``J10`` (letter case-insensitive, no surrounding whitespace)."""
        if not isinstance(text, str) or _COORDINATE_RE.fullmatch(text) is None:
            raise InvalidCoordinateError(f"{text!r} is not a coordinate between A1 and J10.")
        return cls(ROW_LABELS.index(text[0].upper()), int(text[1:]))

    @classmethod
    def random(cls, rng: random.Random) -> Coordinate:
        return cls(rng.randrange(BOARD_SIZE), rng.randrange(FIRST_COLUMN, LAST_COLUMN + 1))

    def to_text(self) -> str:
        """Return the canonical uppercase form, e.g. ``A1``."""
        return f"{ROW_LABELS[self.row]}{self.col}"

    def neighbor(self, row_delta: int, col_delta: int) -> Coordinate | None:
        """Return the cell offset by the given deltas, or None when it leaves the board."""
        row = self.row + row_delta
        col = self.col + col_delta
        if not in_bounds(row, col):
            return None
        return Coordinate(row, col)

    def __str__(self) -> str:
        return self.to_text()


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and FIRST_COLUMN <= col <= LAST_COLUMN


def as_coordinate(value: Coordinate | str) -> Coordinate:
    """Normalise user input (text or an existing coordinate) to a Coordinate."""
    if isinstance(value, Coordinate):
        return value
    return Coordinate.parse(value)


def all_coordinates() -> list[Coordinate]:
    """Return all 100 cells in row-major order."""
    return [
        Coordinate(row, col)
        for row in range(BOARD_SIZE)
        for col in range(FIRST_COLUMN, LAST_COLUMN + 1)
    ]
