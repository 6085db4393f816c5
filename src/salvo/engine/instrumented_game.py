"""Match subclass that wraps each match in a span and records per-match metrics."""

from __future__ import annotations

import time
from typing import Any

from salvo.engine.errors import GameNotInProgressError, MatchError, NotYourTurnError
from salvo.engine.fleet import Fleet, Side
from salvo.engine.game import ActionResult, Match, MatchPhase
from salvo.engine.shots import ShotOutcome
from salvo.telemetry import get_logger, get_tracer, record_game_metric


class InstrumentedMatch(Match):
    """Match with tracing, metrics and logging around its lifecycle.

    The ``salvo.match`` span stays current from ``begin`` until the match is
    won, lost or reset, so the begin and fire spans are its children.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._logger = get_logger("salvo.engine")
        self._tracer = get_tracer("salvo.engine")
        self._match_span_cm: Any = None
        self._match_span: Any = None
        self._match_start_time: float | None = None
        self._match_id = 0
        super().__init__(*args, **kwargs)

    def reset(self) -> None:
        self._close_match_span()
        super().reset()

    def begin(self, human_fleet: Fleet | None = None, opponent_fleet: Fleet | None = None) -> None:
        opening = self.phase is MatchPhase.NOT_STARTED
        if opening:
            self._open_match_span()
        try:
            with self._tracer.start_as_current_span("salvo.match.begin") as span:
                super().begin(human_fleet, opponent_fleet)
                span.set_attribute("match.id", self._match_id)
        except Exception:
            if opening:
                self._close_match_span()
            raise
        record_game_metric("salvo_match_started_total", 1)
        self._logger.info("Match %d started", self._match_id)

    def opponent_fires(self) -> ActionResult:
        result = super().opponent_fires()
        # Turn and phase are checked before the policy runs; fire never sees these.
        if isinstance(result.error, (NotYourTurnError, GameNotInProgressError)):
            self._record_rejection(Side.OPPONENT, result.error)
        return result

    def fire(self, side: Side, target: Any) -> ShotOutcome:
        with self._tracer.start_as_current_span("salvo.match.fire") as span:
            span.set_attribute("match.id", self._match_id)
            span.set_attribute("side", side.value)
            try:
                outcome = super().fire(side, target)
            except MatchError as exc:
                self._record_rejection(side, exc)
                span.record_exception(exc)
                span.set_attribute("error", True)
                self._logger.warning("Rejected shot from %s at %r: %s", side.value, target, exc)
                raise

            result = "sunk" if outcome.is_sunk else outcome.result.value
            span.set_attribute("shot_outcome", result)
            record_game_metric("salvo_shots_total", 1, {"side": side.value})
            record_game_metric("salvo_shots_by_result_total", 1, {"side": side.value, "result": result})
            self._logger.info("fire side=%s target=%s outcome=%s", side.value, outcome.coordinate, result)
            if self.phase.is_terminal:
                span.set_attribute("winner", side.value)

        # The match span must outlive the fire span nested in it.
        if self.phase.is_terminal:
            self._finish_match()
        return outcome

    def _record_rejection(self, side: Side, exc: MatchError) -> None:
        record_game_metric("salvo_rejected_actions_total", 1, {"side": side.value, "reason": exc.code})

    def _open_match_span(self) -> None:
        self._close_match_span()
        self._match_start_time = time.perf_counter()
        self._match_id += 1
        self._match_span_cm = self._tracer.start_as_current_span("salvo.match")
        self._match_span = self._match_span_cm.__enter__()
        self._match_span.set_attribute("match.id", self._match_id)

    def _finish_match(self) -> None:
        duration = (time.perf_counter() - self._match_start_time) if self._match_start_time else 0.0
        total_shots = sum(len(history) for history in self.histories.values())
        winner = self.winner.value if self.winner else "unknown"
        result = "won" if self.phase is MatchPhase.WON else "lost"

        record_game_metric("salvo_match_completed_total", 1, {"winner": winner, "result": result})
        record_game_metric("salvo_match_duration_seconds", duration, {"winner": winner})

        if self._match_span is not None:
            self._match_span.set_attribute("winner", winner)
            self._match_span.set_attribute("shots", total_shots)
            self._match_span.set_attribute("duration_ms", duration * 1000)

        self._logger.info(
            "Match %d finished. Winner=%s shots=%d duration_s=%.3f",
            self._match_id,
            winner,
            total_shots,
            duration,
        )
        self._close_match_span()

    def _close_match_span(self) -> None:
        if self._match_span_cm is not None:
            self._match_span_cm.__exit__(None, None, None)
            self._match_span_cm = None
            self._match_span = None
