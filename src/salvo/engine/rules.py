"""Tunable match rules."""

from __future__ import annotations

import os
from typing import Any, Dict

from pydantic import BaseModel, Field

from .fleet import Side

_TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_PLACEMENT_ATTEMPTS = 100


class MatchRules(BaseModel):
    """Rules that a match is played under.

    ``opponent_hit_grants_extra_shot`` selects between the symmetric rule
    (the opponent keeps firing while it hits) and the single-shot rule where
    the turn always passes back to the human after one opponent shot.
    """

    placement_attempts: int = Field(default=DEFAULT_PLACEMENT_ATTEMPTS, ge=1)
    hit_grants_extra_shot: bool = True
    opponent_hit_grants_extra_shot: bool = True
    seed: int | None = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "MatchRules":
        """Construct rules from ``SALVO_*`` environment variables."""

        data: Dict[str, Any] = {}
        attempts = os.getenv("SALVO_PLACEMENT_ATTEMPTS")
        if attempts is not None:
            data["placement_attempts"] = attempts.strip()
        for name, env_name in (
            ("hit_grants_extra_shot", "SALVO_HUMAN_EXTRA_SHOT"),
            ("opponent_hit_grants_extra_shot", "SALVO_OPPONENT_EXTRA_SHOT"),
        ):
            value = os.getenv(env_name)
            if value is not None:
                data[name] = value.strip().lower() in _TRUTHY
        seed = os.getenv("SALVO_SEED")
        if seed:
            data["seed"] = seed.strip()
        data.update(overrides)
        return cls(**data)

    def grants_extra_shot(self, attacker: Side) -> bool:
        """Whether a hit by ``attacker`` keeps the turn with that side."""
        if attacker is Side.HUMAN:
            return self.hit_grants_extra_shot
        return self.opponent_hit_grants_extra_shot
