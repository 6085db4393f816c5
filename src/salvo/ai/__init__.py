"""Computer opponent policies."""

from .opponent import OpponentPolicy, RandomOpponentPolicy

__all__ = ["OpponentPolicy", "RandomOpponentPolicy"]
