"""Hushh Gold Pass membership service."""

__version__ = "0.1.0"
