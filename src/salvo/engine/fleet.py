"""Fleets and randomized fleet generation."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Mapping, Sequence

from salvo.telemetry import get_meter, get_tracer

from .coordinates import Coordinate
from .errors import PlacementExhaustedError
from .ship import REQUIRED_FLEET, Orientation, SegmentHealth, Segment, Ship, ShipType

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.engine.fleet")
meter = get_meter("salvo.engine.fleet")

PLACEMENT_COUNTER = meter.create_counter(
    "salvo_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

# Row/column step between consecutive segments. Must agree with Ship.orientation.
_STEPS: dict[Orientation, tuple[int, int]] = {
    Orientation.VERTICAL: (0, 1),
    Orientation.HORIZONTAL: (1, 0),
}


class Side(Enum):
    """The two sides of a match."""

    HUMAN = "human"
    OPPONENT = "opponent"

    def other(self) -> Side:
        """Return the opposing side."""
        return Side.OPPONENT if self is Side.HUMAN else Side.HUMAN


@dataclass
class Fleet:
    """All ships of one side. Geometry is fixed; only segment health changes."""

    side: Side
    ships: list[Ship] = field(default_factory=list)

    def __post_init__(self) -> None:
        ships, self.ships = list(self.ships), []
        for ship in ships:
            self.add_ship(ship)

    @classmethod
    def from_layout(
        cls, side: Side, layout: Mapping[ShipType, Sequence[Coordinate | str]]
    ) -> Fleet:
        """Build a fleet from explicit placements, e.g. ``{ShipType.DESTROYER: ["B2", "B3"]}``."""
        fleet = cls(side)
        for ship_type, cells in layout.items():
            coords = [cell if isinstance(cell, Coordinate) else Coordinate.parse(cell) for cell in cells]
            fleet.add_ship(Ship.from_coordinates(ship_type, coords))
        return fleet

    def add_ship(self, ship: Ship) -> None:
        """Add a ship, rejecting duplicate types and overlapping cells."""
        if any(existing.ship_type is ship.ship_type for existing in self.ships):
            raise ValueError(f"Fleet already has a {ship.identity}.")
        clash = self.occupied().intersection(ship.coordinates())
        if clash:
            cells = ", ".join(sorted(str(coord) for coord in clash))
            raise ValueError(f"{ship.identity} overlaps another ship at {cells}.")
        self.ships.append(ship)

    def __iter__(self) -> Iterator[Ship]:
        return iter(self.ships)

    def __len__(self) -> int:
        return len(self.ships)

    def occupied(self) -> set[Coordinate]:
        return {coord for ship in self.ships for coord in ship.coordinates()}

    def ship_at(self, coord: Coordinate) -> tuple[Ship, Segment] | None:
        """Return the ship and segment covering ``coord``, if any."""
        for ship in self.ships:
            segment = ship.segment_at(coord)
            if segment is not None:
                return ship, segment
        return None

    def is_complete(self) -> bool:
        return sorted(ship.ship_type.value for ship in self.ships) == sorted(
            ship_type.value for ship_type in REQUIRED_FLEET
        )

    def all_sunk(self) -> bool:
        return bool(self.ships) and all(ship.is_destroyed for ship in self.ships)

    def sunk_identities(self) -> set[str]:
        return {ship.identity for ship in self.ships if ship.is_destroyed}

    def segment_states(self) -> dict[Coordinate, tuple[str, SegmentHealth]]:
        """Map each occupied cell to its ship identity and segment health, for rendering."""
        return {
            segment.coordinate: (ship.identity, segment.health)
            for ship in self.ships
            for segment in ship.segments
        }


class FleetGenerator:
    """Places the required fleet at random, retrying each ship a bounded number of times."""

    def __init__(
        self,
        rng: random.Random | None = None,
        max_attempts: int = 100,
        ship_types: Sequence[ShipType] = REQUIRED_FLEET,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self._rng = rng or random.Random()
        self.max_attempts = max_attempts
        self.ship_types = tuple(sorted(ship_types, key=lambda ship_type: -ship_type.length))

    def generate(self, side: Side) -> Fleet:
        """Return a complete fleet or raise PlacementExhaustedError."""
        with tracer.start_as_current_span("fleet.generate") as span:
            span.set_attribute("fleet.side", side.value)
            fleet = Fleet(side)
            occupied: set[Coordinate] = set()
            for ship_type in self.ship_types:
                footprint, attempts = self._place(ship_type, occupied, side)
                fleet.add_ship(Ship.from_coordinates(ship_type, footprint))
                occupied.update(footprint)
                logger.debug(
                    "random_ship_placed",
                    extra={
                        "side": side.value,
                        "ship_type": ship_type.name,
                        "attempts": attempts,
                        "head": str(footprint[0]),
                    },
                )
            span.set_attribute("fleet.ships", len(fleet))
            logger.info("fleet_generated", extra={"side": side.value, "ships": len(fleet)})
            return fleet

    def footprint(
        self, start: Coordinate, orientation: Orientation, size: int
    ) -> list[Coordinate] | None:
        """Return ``size`` consecutive cells from ``start``, or None if any falls off the board."""
        row_step, col_step = _STEPS[orientation]
        cells = [start]
        for offset in range(1, size):
            cell = start.neighbor(row_step * offset, col_step * offset)
            if cell is None:
                return None
            cells.append(cell)
        return cells

    def _place(
        self, ship_type: ShipType, occupied: set[Coordinate], side: Side
    ) -> tuple[list[Coordinate], int]:
        for attempt in range(1, self.max_attempts + 1):
            start = Coordinate.random(self._rng)
            orientation = self._rng.choice(list(Orientation))
            cells = self.footprint(start, orientation, ship_type.length)
            if cells is not None and occupied.isdisjoint(cells):
                PLACEMENT_COUNTER.add(1, attributes={"result": "success", "side": side.value})
                return cells, attempt
            PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "side": side.value})

        logger.error(
            "ship_placement_exhausted",
            extra={"side": side.value, "ship_type": ship_type.name, "attempts": self.max_attempts},
        )
        raise PlacementExhaustedError(ship_type, self.max_attempts)
