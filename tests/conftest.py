"""Shared fixtures: deterministic fleets and a scripted opponent."""

from __future__ import annotations

from typing import Iterable

import pytest
from salvo.engine.coordinates import Coordinate
from salvo.engine.fleet import Fleet, Side
from salvo.engine.ship import ShipType

# A1 is open water; the Destroyer sits on B2-B3.
LAYOUT: dict[ShipType, list[str]] = {
    ShipType.CARRIER: ["C1", "C2", "C3", "C4", "C5"],
    ShipType.BATTLESHIP: ["E1", "F1", "G1", "H1"],
    ShipType.CRUISER: ["J1", "J2", "J3"],
    ShipType.SUBMARINE: ["E5", "E6", "E7"],
    ShipType.DESTROYER: ["B2", "B3"],
}


class ScriptedPolicy:
    """Opponent policy that fires at a fixed sequence of cells."""

    def __init__(self, targets: Iterable[str]) -> None:
        self._targets = [Coordinate.parse(text) for text in targets]

    def choose_target(self, shots_at_human) -> Coordinate:
        return self._targets.pop(0)


@pytest.fixture
def human_fleet() -> Fleet:
    return Fleet.from_layout(Side.HUMAN, LAYOUT)


@pytest.fixture
def opponent_fleet() -> Fleet:
    return Fleet.from_layout(Side.OPPONENT, LAYOUT)


@pytest.fixture
def layout() -> dict[ShipType, list[str]]:
    return {ship_type: list(cells) for ship_type, cells in LAYOUT.items()}


@pytest.fixture
def scripted_policy() -> type[ScriptedPolicy]:
    return ScriptedPolicy
