"""Match state machine: turn ownership, shot bookkeeping and victory."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping

from salvo.ai.opponent import OpponentPolicy, RandomOpponentPolicy
from salvo.telemetry import get_meter, get_tracer

from .coordinates import Coordinate, all_coordinates, as_coordinate
from .errors import (
    AlreadyTargetedError,
    GameNotInProgressError,
    MatchAlreadyStartedError,
    MatchError,
    NotYourTurnError,
)
from .fleet import Fleet, FleetGenerator, Side
from .rules import MatchRules
from .ship import SegmentHealth
from .shots import ShotHistory, ShotOutcome, ShotRecord, resolve

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.engine.game")
meter = get_meter("salvo.engine.game")

MATCH_COUNTER = meter.create_counter(
    "salvo_engine_matches",
    unit="1",
    description="Matches started and finished",
)

REJECTED_COUNTER = meter.create_counter(
    "salvo_engine_rejected_shots",
    unit="1",
    description="Mutating calls rejected by the match",
)


class MatchPhase(Enum):
    """Lifecycle of a match. WON and LOST are from the human's point of view."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self in (MatchPhase.WON, MatchPhase.LOST)


@dataclass(frozen=True)
class ActionResult:
    """Returned by every UI-facing mutating call."""

    accepted: bool
    phase: MatchPhase
    active_turn: Side
    outcome: ShotOutcome | None = None
    error: MatchError | None = None

    @property
    def hit(self) -> bool:
        return self.outcome is not None and self.outcome.hit

    @property
    def reason(self) -> str | None:
        return self.error.code if self.error is not None else None


@dataclass(frozen=True)
class MatchState:
    """Immutable snapshot of a match for renderers.

    ``fleets`` maps each side to its own segment states; ``shots`` maps each
    attacking side to the cells it has fired at.
    """

    phase: MatchPhase
    active_turn: Side
    winner: Side | None
    fleets: Mapping[Side, Mapping[Coordinate, tuple[str, SegmentHealth]]]
    shots: Mapping[Side, Mapping[Coordinate, ShotRecord]]


class Match:
    """Owns both fleets and shot histories and decides whose turn it is."""

    def __init__(
        self,
        rules: MatchRules | None = None,
        rng: random.Random | None = None,
        generator: FleetGenerator | None = None,
        policy: OpponentPolicy | None = None,
    ) -> None:
        self.rules = rules or MatchRules()
        self._rng = rng or random.Random(self.rules.seed)
        self._generator = generator or FleetGenerator(
            self._rng, max_attempts=self.rules.placement_attempts
        )
        self._policy: OpponentPolicy = policy or RandomOpponentPolicy(self._rng)
        self.reset()

    def reset(self) -> None:
        """Discard all state and return to NOT_STARTED."""
        self.phase = MatchPhase.NOT_STARTED
        self.active_turn = Side.HUMAN
        self.fleets: dict[Side, Fleet] = {side: Fleet(side) for side in Side}
        # Keyed by the attacking side.
        self.histories: dict[Side, ShotHistory] = {side: ShotHistory() for side in Side}

    @property
    def human_fleet(self) -> Fleet:
        return self.fleets[Side.HUMAN]

    @property
    def opponent_fleet(self) -> Fleet:
        return self.fleets[Side.OPPONENT]

    @property
    def shots_at_opponent(self) -> ShotHistory:
        return self.histories[Side.HUMAN]

    @property
    def shots_at_human(self) -> ShotHistory:
        return self.histories[Side.OPPONENT]

    @property
    def winner(self) -> Side | None:
        if self.phase is MatchPhase.WON:
            return Side.HUMAN
        if self.phase is MatchPhase.LOST:
            return Side.OPPONENT
        return None

    def start(
        self, human_fleet: Fleet | None = None, opponent_fleet: Fleet | None = None
    ) -> ActionResult:
        """Place both fleets and open the match.

        Fleets not supplied are generated at random. PlacementExhaustedError
        propagates; the match then stays in NOT_STARTED.
        """
        return self._attempt(lambda: self.begin(human_fleet, opponent_fleet))

    def restart(self) -> ActionResult:
        self.reset()
        return self.start()

    def fire_at(self, target: Coordinate | str) -> ActionResult:
        """Human shot at the opponent's fleet."""
        return self._attempt(lambda: self.fire(Side.HUMAN, target))

    def opponent_fires(self) -> ActionResult:
        """Let the opponent policy pick a cell and fire at the human's fleet."""

        def shoot() -> ShotOutcome:
            self._require_turn(Side.OPPONENT)
            target = self._policy.choose_target(self.shots_at_human)
            return self.fire(Side.OPPONENT, target)

        return self._attempt(shoot)

    def begin(self, human_fleet: Fleet | None = None, opponent_fleet: Fleet | None = None) -> None:
        """Raising variant of :meth:`start`."""
        with tracer.start_as_current_span("match.start") as span:
            if self.phase is not MatchPhase.NOT_STARTED:
                raise MatchAlreadyStartedError(f"Match is already {self.phase.value}.")
            fleets = {
                Side.HUMAN: self._checked_fleet(Side.HUMAN, human_fleet),
                Side.OPPONENT: self._checked_fleet(Side.OPPONENT, opponent_fleet),
            }
            self.fleets = fleets
            self.histories = {side: ShotHistory() for side in Side}
            self.active_turn = Side.HUMAN
            self.phase = MatchPhase.IN_PROGRESS
            span.set_attribute("match.phase", self.phase.value)
            MATCH_COUNTER.add(1, attributes={"event": "started"})
            logger.info(
                "match_started",
                extra={"phase": self.phase.value, "active_turn": self.active_turn.value},
            )

    def fire(self, side: Side, target: Coordinate | str) -> ShotOutcome:
        """Apply one shot by ``side``, enforcing turn order, repeats and the win rule."""
        with tracer.start_as_current_span("match.fire") as span:
            span.set_attribute("match.side", side.value)
            self._require_turn(side)
            coord = as_coordinate(target)
            span.set_attribute("shot.target", str(coord))

            history = self.histories[side]
            if coord in history:
                raise AlreadyTargetedError(f"{coord} has already been targeted.")

            defender = self.fleets[side.other()]
            outcome = resolve(coord, defender)
            history.record(outcome)

            if outcome.is_sunk and len(history.sunk_identities()) >= len(defender):
                self.phase = MatchPhase.WON if side is Side.HUMAN else MatchPhase.LOST
                MATCH_COUNTER.add(1, attributes={"event": self.phase.value})
                logger.info(
                    "match_won" if self.phase is MatchPhase.WON else "match_lost",
                    extra={"side": side.value, "shots": len(history)},
                )
            elif not (outcome.hit and self.rules.grants_extra_shot(side)):
                self.active_turn = side.other()

            span.set_attribute("shot.hit", outcome.hit)
            span.set_attribute("match.active_turn", self.active_turn.value)
            return outcome

    def remaining_targets(self, side: Side) -> list[Coordinate]:
        """Return every cell ``side`` may still fire at."""
        if self.phase is not MatchPhase.IN_PROGRESS:
            return []
        history = self.histories[side]
        return [coord for coord in all_coordinates() if coord not in history]

    def snapshot(self) -> MatchState:
        """Return an immutable view of the current match."""
        return MatchState(
            phase=self.phase,
            active_turn=self.active_turn,
            winner=self.winner,
            fleets=MappingProxyType(
                {side: MappingProxyType(fleet.segment_states()) for side, fleet in self.fleets.items()}
            ),
            shots=MappingProxyType(
                {side: MappingProxyType(dict(history)) for side, history in self.histories.items()}
            ),
        )

    def _require_turn(self, side: Side) -> None:
        if self.phase is not MatchPhase.IN_PROGRESS:
            raise GameNotInProgressError(f"Match is {self.phase.value}.")
        if side is not self.active_turn:
            raise NotYourTurnError(f"It is the {self.active_turn.value}'s turn.")

    def _checked_fleet(self, side: Side, fleet: Fleet | None) -> Fleet:
        if fleet is None:
            return self._generator.generate(side)
        if fleet.side is not side:
            raise ValueError(f"Expected a {side.value} fleet, got {fleet.side.value}.")
        if not fleet.is_complete():
            raise ValueError(f"The {side.value} fleet must contain exactly one ship of each type.")
        if any(segment.is_damaged for ship in fleet for segment in ship.segments):
            raise ValueError(f"The {side.value} fleet has already taken damage.")
        return fleet

    def _attempt(self, action: Callable[[], ShotOutcome | None]) -> ActionResult:
        try:
            outcome = action()
        except MatchError as exc:
            if not exc.recoverable:
                raise
            REJECTED_COUNTER.add(1, attributes={"reason": exc.code})
            logger.warning(
                "action_rejected",
                extra={"reason": exc.code, "detail": str(exc), "phase": self.phase.value},
            )
            return ActionResult(False, self.phase, self.active_turn, error=exc)
        return ActionResult(True, self.phase, self.active_turn, outcome=outcome)

