"""Error taxonomy raised by the engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .ship import ShipType


class MatchError(Exception):
    """Base class for every engine-level failure."""

    code: str = "match_error"
    recoverable: bool = True


class InvalidCoordinateError(MatchError, ValueError):
    """Input text does not name a cell between A1 and J10."""

    code = "invalid_coordinate"


class NotYourTurnError(MatchError, RuntimeError):
    """A side tried to fire while the other side holds the turn."""

    code = "not_your_turn"


class AlreadyTargetedError(MatchError, ValueError):
    """The attacking side has already fired at this coordinate."""

    code = "already_targeted"


class GameNotInProgressError(MatchError, RuntimeError):
    """A shot was attempted before the match started or after it ended."""

    code = "game_not_in_progress"


class MatchAlreadyStartedError(MatchError, RuntimeError):
    """``start()`` was called on a match that has already left ``NOT_STARTED``."""

    code = "match_already_started"


class PlacementExhaustedError(MatchError, RuntimeError):
    """The fleet generator ran out of attempts for a ship."""

    code = "placement_exhausted"
    recoverable = False

    def __init__(self, ship_type: ShipType, attempts: int) -> None:
        super().__init__(f"Could not place {ship_type.value} after {attempts} attempts.")
        self.ship_type = ship_type
        self.attempts = attempts


class TargetSpaceExhaustedError(MatchError, RuntimeError):
    """Every cell has already been targeted; the match cannot continue."""

    code = "target_space_exhausted"
    recoverable = False
