"""Ship domain model: segments, ship types and derived ship state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from .coordinates import Coordinate


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class SegmentHealth(Enum):
    """Health of a single ship segment."""

    HEALTHY = "healthy"
    DAMAGED = "damaged"


class ShipType(Enum):
    """All ship classes of a fleet, valued by their display name."""

    CARRIER = "Carrier"
    BATTLESHIP = "Battleship"
    CRUISER = "Cruiser"
    SUBMARINE = "Submarine"
    DESTROYER = "Destroyer"

    @property
    def length(self) -> int:
        """Return the number of contiguous cells the ship occupies."""
        return SHIP_LENGTHS[self]


SHIP_LENGTHS: dict[ShipType, int] = {
    ShipType.CARRIER: 5,
    ShipType.BATTLESHIP: 4,
    ShipType.CRUISER: 3,
    ShipType.SUBMARINE: 3,
    ShipType.DESTROYER: 2,
}

# Descending size order; larger ships are placed first.
REQUIRED_FLEET: tuple[ShipType, ...] = (
    ShipType.CARRIER,
    ShipType.BATTLESHIP,
    ShipType.CRUISER,
    ShipType.SUBMARINE,
    ShipType.DESTROYER,
)


@dataclass
class Segment:
    """One cell of a ship. The coordinate never changes once placed."""

    coordinate: Coordinate
    health: SegmentHealth = SegmentHealth.HEALTHY

    @property
    def is_damaged(self) -> bool:
        return self.health is SegmentHealth.DAMAGED

    def strike(self) -> bool:
        """Mark the segment damaged; return False if it already was."""
        if self.is_damaged:
            return False
        self.health = SegmentHealth.DAMAGED
        return True


@dataclass
class Ship:
    """A ship as an ordered head-to-tail run of segments.

    Geometry is validated once on construction. Orientation and destroyed
    state are recomputed from the segments on every read.
    """

    ship_type: ShipType
    segments: tuple[Segment, ...]
    _by_coordinate: dict[Coordinate, Segment] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        coords = [segment.coordinate for segment in self.segments]
        if len(coords) != self.ship_type.length:
            raise ValueError(
                f"{self.ship_type.value} needs {self.ship_type.length} segments, got {len(coords)}."
            )
        if not _is_straight_run(coords):
            raise ValueError(f"{self.ship_type.value} segments must be contiguous and colinear.")
        self._by_coordinate = {segment.coordinate: segment for segment in self.segments}

    @classmethod
    def from_coordinates(cls, ship_type: ShipType, coords: Sequence[Coordinate]) -> Ship:
        """Build a ship with every segment healthy."""
        return cls(ship_type, tuple(Segment(coord) for coord in coords))

    @property
    def identity(self) -> str:
        return self.ship_type.value

    @property
    def size(self) -> int:
        return len(self.segments)

    @property
    def orientation(self) -> Orientation:
        # Lettered rows are drawn as screen columns, so a ship running along
        # one letter stands vertically.
        if len(self.segments) >= 2 and self.segments[0].coordinate.row == self.segments[1].coordinate.row:
            return Orientation.VERTICAL
        return Orientation.HORIZONTAL

    @property
    def is_destroyed(self) -> bool:
        return all(segment.is_damaged for segment in self.segments)

    @property
    def head(self) -> Segment:
        return self.segments[0]

    @property
    def tail(self) -> Segment:
        return self.segments[-1]

    @property
    def body(self) -> tuple[Segment, ...]:
        return self.segments[1:-1]

    def coordinates(self) -> list[Coordinate]:
        """Return the ordered list of coordinates occupied by this ship."""
        return [segment.coordinate for segment in self.segments]

    def segment_at(self, coord: Coordinate) -> Segment | None:
        return self._by_coordinate.get(coord)

    def describe(self) -> str:
        """Multi-line summary of the ship's geometry and segment health."""

        def fmt(segment: Segment) -> str:
            return f"{segment.coordinate} ({segment.health.value})"

        lines = [
            f"Ship: {self.identity}",
            f"Size: {self.size}, Orientation: {self.orientation.value}",
            f"Head: {fmt(self.head)}",
        ]
        if self.body:
            lines.append("Body: " + ", ".join(fmt(segment) for segment in self.body))
        lines.append(f"Tail: {fmt(self.tail)}")
        lines.append(f"Status: {'Destroyed' if self.is_destroyed else 'Active'}")
        return "\n".join(lines)


def _is_straight_run(coords: Sequence[Coordinate]) -> bool:
    if len(coords) < 2:
        return True
    row_step = coords[1].row - coords[0].row
    col_step = coords[1].col - coords[0].col
    if (abs(row_step), abs(col_step)) not in {(0, 1), (1, 0)}:
        return False
    return all(
        current.row - previous.row == row_step and current.col - previous.col == col_step
        for previous, current in zip(coords, coords[1:])
    )
