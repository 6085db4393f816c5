"""Salvo: a two-fleet grid-combat engine played against a computer opponent."""

__version__ = "0.1.0"
