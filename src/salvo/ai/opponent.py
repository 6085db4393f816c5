"""Target selection for the computer opponent."""

from __future__ import annotations

import logging
import random
from collections.abc import Container
from typing import Protocol

from salvo.engine.coordinates import Coordinate, all_coordinates
from salvo.engine.errors import TargetSpaceExhaustedError
from salvo.telemetry import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.ai.opponent")


class OpponentPolicy(Protocol):
    """Anything that can pick the opponent's next target."""

    def choose_target(self, shots_at_human: Container[Coordinate]) -> Coordinate:
        ...


class RandomOpponentPolicy:
    """Uniformly random choice among cells not yet fired at.

    Each pick is independent of earlier hits; there is no hunting around a
    damaged ship.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def choose_target(self, shots_at_human: Container[Coordinate]) -> Coordinate:
        with tracer.start_as_current_span("opponent.choose_target") as span:
            candidates = [coord for coord in all_coordinates() if coord not in shots_at_human]
            span.set_attribute("opponent.candidates", len(candidates))
            if not candidates:
                logger.error("opponent_target_space_exhausted")
                raise TargetSpaceExhaustedError("Every cell has already been targeted.")
            target = self._rng.choice(candidates)
            span.set_attribute("opponent.target", str(target))
            logger.debug(
                "opponent_target_chosen",
                extra={"target": str(target), "candidates": len(candidates)},
            )
            return target
