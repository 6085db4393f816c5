"""Tests for fleets and random fleet generation."""

import random

import pytest
from salvo.engine.coordinates import Coordinate
from salvo.engine.errors import PlacementExhaustedError
from salvo.engine.fleet import Fleet, FleetGenerator, Side
from salvo.engine.ship import Orientation, SegmentHealth, Ship, ShipType


class CornerRandom(random.Random):
    """Always picks J10, where no ship longer than one cell fits."""

    def randrange(self, start, stop=None, step=1):  # type: ignore[override]
        return (start if stop is None else stop) - 1


def _is_straight(ship: Ship) -> bool:
    rows = {coord.row for coord in ship.coordinates()}
    cols = {coord.col for coord in ship.coordinates()}
    if len(rows) == 1:
        return sorted(cols) == list(range(min(cols), min(cols) + ship.size))
    if len(cols) == 1:
        return sorted(rows) == list(range(min(rows), min(rows) + ship.size))
    return False


@pytest.mark.parametrize("seed", range(40))
def test_generated_fleets_are_complete_and_disjoint(seed: int) -> None:
    fleet = FleetGenerator(random.Random(seed)).generate(Side.OPPONENT)
    assert len(fleet) == 5
    assert sorted((ship.size for ship in fleet), reverse=True) == [5, 4, 3, 3, 2]
    assert fleet.is_complete()
    coords = [coord for ship in fleet for coord in ship.coordinates()]
    assert len(coords) == len(set(coords)), "Ships should not overlap"
    assert all(0 <= coord.row <= 9 and 1 <= coord.col <= 10 for coord in coords)
    assert all(_is_straight(ship) for ship in fleet)
    assert all(
        segment.health is SegmentHealth.HEALTHY for ship in fleet for segment in ship.segments
    )


def test_generation_is_reproducible_with_a_seed() -> None:
    first = FleetGenerator(random.Random(99)).generate(Side.HUMAN)
    second = FleetGenerator(random.Random(99)).generate(Side.HUMAN)
    assert [ship.coordinates() for ship in first] == [ship.coordinates() for ship in second]


def test_ships_are_placed_largest_first() -> None:
    fleet = FleetGenerator(random.Random(3)).generate(Side.HUMAN)
    assert [ship.ship_type for ship in fleet] == [
        ShipType.CARRIER,
        ShipType.BATTLESHIP,
        ShipType.CRUISER,
        ShipType.SUBMARINE,
        ShipType.DESTROYER,
    ]


def test_exhausted_placement_is_an_error_not_a_smaller_fleet() -> None:
    generator = FleetGenerator(CornerRandom(), max_attempts=100)
    with pytest.raises(PlacementExhaustedError) as excinfo:
        generator.generate(Side.HUMAN)
    assert excinfo.value.ship_type is ShipType.CARRIER
    assert excinfo.value.attempts == 100
    assert excinfo.value.recoverable is False


def test_footprint_matches_orientation_and_rejects_overflow() -> None:
    generator = FleetGenerator(random.Random(0))
    start = Coordinate.parse("C3")
    vertical = generator.footprint(start, Orientation.VERTICAL, 3)
    horizontal = generator.footprint(start, Orientation.HORIZONTAL, 3)
    assert [str(coord) for coord in vertical] == ["C3", "C4", "C5"]
    assert [str(coord) for coord in horizontal] == ["C3", "D3", "E3"]
    assert Ship.from_coordinates(ShipType.CRUISER, vertical).orientation is Orientation.VERTICAL
    assert Ship.from_coordinates(ShipType.CRUISER, horizontal).orientation is Orientation.HORIZONTAL
    assert generator.footprint(Coordinate.parse("C9"), Orientation.VERTICAL, 3) is None
    assert generator.footprint(Coordinate.parse("I1"), Orientation.HORIZONTAL, 3) is None


def test_generator_requires_a_positive_budget() -> None:
    with pytest.raises(ValueError):
        FleetGenerator(random.Random(0), max_attempts=0)


def test_from_layout_and_lookup(human_fleet: Fleet) -> None:
    fleet = human_fleet
    assert fleet.is_complete()
    found = fleet.ship_at(Coordinate.parse("b3"))
    assert found is not None
    ship, segment = found
    assert ship.identity == "Destroyer"
    assert segment.coordinate == Coordinate.parse("B3")
    assert fleet.ship_at(Coordinate.parse("A1")) is None
    assert len(fleet.occupied()) == 17


def test_add_ship_rejects_overlap_and_duplicates() -> None:
    fleet = Fleet.from_layout(Side.HUMAN, {ShipType.CRUISER: ["A1", "A2", "A3"]})
    with pytest.raises(ValueError):
        fleet.add_ship(
            Ship.from_coordinates(ShipType.DESTROYER, [Coordinate.parse("A3"), Coordinate.parse("B3")])
        )
    with pytest.raises(ValueError):
        fleet.add_ship(
            Ship.from_coordinates(
                ShipType.CRUISER, [Coordinate.parse(cell) for cell in ("D1", "D2", "D3")]
            )
        )
    assert not fleet.is_complete()


def test_sunk_tracking_and_segment_states(human_fleet: Fleet) -> None:
    fleet = human_fleet
    assert not fleet.all_sunk()
    destroyer = next(ship for ship in fleet if ship.ship_type is ShipType.DESTROYER)
    for segment in destroyer.segments:
        segment.strike()
    assert fleet.sunk_identities() == {"Destroyer"}
    states = fleet.segment_states()
    assert states[Coordinate.parse("B2")] == ("Destroyer", SegmentHealth.DAMAGED)
    assert states[Coordinate.parse("C1")] == ("Carrier", SegmentHealth.HEALTHY)
    for ship in fleet:
        for segment in ship.segments:
            segment.strike()
    assert fleet.all_sunk()


def test_empty_fleet_is_not_sunk() -> None:
    assert not Fleet(Side.OPPONENT).all_sunk()
