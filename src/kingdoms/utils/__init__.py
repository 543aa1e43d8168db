"""Utility functions for the Kingdoms & Warfare engine."""

from kingdoms.utils.dice import (
    InvalidNotation,
    parse_notation,
    roll_from_notation,
    roll_skill_check,
    seeded_rng,
)

__all__ = [
    "InvalidNotation",
    "parse_notation",
    "roll_from_notation",
    "roll_skill_check",
    "seeded_rng",
]
