"""Shot resolution against a fleet and per-side shot history."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from salvo.telemetry import get_meter, get_tracer

from .coordinates import Coordinate, as_coordinate
from .errors import AlreadyTargetedError, InvalidCoordinateError
from .fleet import Fleet

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.engine.shots")
meter = get_meter("salvo.engine.shots")

SHOT_COUNTER = meter.create_counter(
    "salvo_engine_shots",
    unit="1",
    description="Shots resolved against a fleet",
)


class ShotResult(Enum):
    """Outcome recorded for a targeted cell."""

    HIT = "hit"
    MISS = "miss"


@dataclass(frozen=True)
class ShotOutcome:
    """What a single shot did to the defending fleet."""

    coordinate: Coordinate
    hit: bool
    ship_identity: str | None = None
    is_sunk: bool = False

    @property
    def result(self) -> ShotResult:
        return ShotResult.HIT if self.hit else ShotResult.MISS


@dataclass(frozen=True)
class ShotRecord:
    """Entry of a ShotHistory."""

    result: ShotResult
    sunk_ship_identity: str | None = None

    @classmethod
    def from_outcome(cls, outcome: ShotOutcome) -> ShotRecord:
        return cls(outcome.result, outcome.ship_identity if outcome.is_sunk else None)


def resolve(target: Coordinate | str, fleet: Fleet) -> ShotOutcome:
    """Resolve a shot at ``target`` against ``fleet``.

    A hit flips the struck segment to damaged. Striking an already damaged
    segment reports the same hit again without changing any state.
    """
    coord = as_coordinate(target)
    with tracer.start_as_current_span("shot.resolve") as span:
        span.set_attribute("shot.target", str(coord))
        span.set_attribute("fleet.side", fleet.side.value)

        found = fleet.ship_at(coord)
        if found is None:
            span.set_attribute("shot.outcome", "miss")
            SHOT_COUNTER.add(1, attributes={"outcome": "miss", "side": fleet.side.value})
            logger.info("shot_miss", extra={"target": str(coord), "side": fleet.side.value})
            return ShotOutcome(coord, hit=False)

        ship, segment = found
        if not segment.strike():
            logger.debug(
                "shot_repeat_hit",
                extra={"target": str(coord), "ship_type": ship.ship_type.name, "side": fleet.side.value},
            )
        sunk = ship.is_destroyed
        span.set_attribute("shot.outcome", "sunk" if sunk else "hit")
        SHOT_COUNTER.add(
            1, attributes={"outcome": "sunk" if sunk else "hit", "side": fleet.side.value}
        )
        logger.info(
            "shot_sunk" if sunk else "shot_hit",
            extra={"target": str(coord), "ship_type": ship.ship_type.name, "side": fleet.side.value},
        )
        return ShotOutcome(coord, hit=True, ship_identity=ship.identity, is_sunk=sunk)


class ShotHistory(Mapping[Coordinate, ShotRecord]):
    """Append-only record of every cell one side has fired at."""

    def __init__(self) -> None:
        self._records: dict[Coordinate, ShotRecord] = {}

    def __getitem__(self, coord: Coordinate | str) -> ShotRecord:
        if isinstance(coord, str):
            try:
                coord = Coordinate.parse(coord)
            except InvalidCoordinateError:
                raise KeyError(coord) from None
        return self._records[coord]

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        shots = ", ".join(f"{coord}: {record.result.value}" for coord, record in self._records.items())
        return f"ShotHistory({{{shots}}})"

    def record(self, outcome: ShotOutcome) -> ShotRecord:
        """Store the outcome under its coordinate; a cell is never recorded twice."""
        if outcome.coordinate in self._records:
            raise AlreadyTargetedError(f"{outcome.coordinate} has already been targeted.")
        record = ShotRecord.from_outcome(outcome)
        self._records[outcome.coordinate] = record
        return record

    def sunk_identities(self) -> set[str]:
        return {
            record.sunk_ship_identity
            for record in self._records.values()
            if record.sunk_ship_identity is not None
        }

    def hits(self) -> int:
        return sum(1 for record in self._records.values() if record.result is ShotResult.HIT)

    def misses(self) -> int:
        return len(self._records) - self.hits()
