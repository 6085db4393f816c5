"""Tests for the random opponent policy."""

import random

import pytest
from salvo.ai import RandomOpponentPolicy
from salvo.engine.coordinates import Coordinate, all_coordinates
from salvo.engine.errors import TargetSpaceExhaustedError
from salvo.engine.shots import ShotHistory, ShotOutcome


def test_never_repeats_a_targeted_cell() -> None:
    policy = RandomOpponentPolicy(random.Random(8))
    history = ShotHistory()
    for _ in range(100):
        target = policy.choose_target(history)
        assert target not in history
        history.record(ShotOutcome(target, hit=False))
    assert len(history) == 100


def test_last_free_cell_is_chosen() -> None:
    free = Coordinate.parse("F6")
    fired = {coord for coord in all_coordinates() if coord != free}
    assert RandomOpponentPolicy(random.Random(0)).choose_target(fired) == free


def test_exhausted_target_space_raises() -> None:
    with pytest.raises(TargetSpaceExhaustedError) as excinfo:
        RandomOpponentPolicy(random.Random(0)).choose_target(set(all_coordinates()))
    assert excinfo.value.recoverable is False


def test_choice_is_reproducible_and_spread() -> None:
    first = [RandomOpponentPolicy(random.Random(seed)).choose_target(set()) for seed in range(30)]
    second = [RandomOpponentPolicy(random.Random(seed)).choose_target(set()) for seed in range(30)]
    assert first == second
    assert len(set(first)) > 1
