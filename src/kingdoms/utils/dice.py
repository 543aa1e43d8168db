"""Dice engine for Kingdoms & Warfare.

Every roll draws from a :class:`random.Random` instance.  Callers that need
reproducible results (tests, replays) pass their own generator, usually one
built by :func:`seeded_rng`; everyone else shares the module default.

Examples:
    >>> rng = seeded_rng("siege-of-varn:round-1")
    >>> result = roll_from_notation("2d6+3", rng=rng)
    >>> result.result == sum(result.rolls) + 3
    True

    >>> check = roll_skill_check(4, 15, advantage=True, rng=rng)
    >>> len(check.all_rolls)
    2
"""

from __future__ import annotations

import hashlib
import random
import re
from dataclasses import dataclass, field

NOTATION_PATTERN = re.compile(r"(\d+)?d(\d+)(?:([-+])(\d+))?", re.IGNORECASE)

D20 = 20

_default_rng = random.Random()


class InvalidNotation(ValueError):
    """Raised when a dice expression does not follow ``[count]d<sides>[+|-mod]``."""

    def __init__(self, notation: str, reason: str | None = None) -> None:
        message = f"Invalid dice notation: '{notation}'"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.notation = notation


@dataclass(frozen=True, slots=True)
class DiceNotation:
    """Structured form of a dice expression."""

    count: int
    sides: int
    modifier: int = 0

    def __str__(self) -> str:
        text = f"{self.count}d{self.sides}"
        if self.modifier > 0:
            text += f"+{self.modifier}"
        elif self.modifier < 0:
            text += str(self.modifier)
        return text


@dataclass(slots=True)
class NotationRoll:
    """Outcome of rolling a dice expression."""

    notation: str
    rolls: list[int]
    modifier: int
    result: int


@dataclass(slots=True)
class AdvantageRoll:
    """Two rolls of the same die and the one that was kept."""

    rolls: list[int]
    result: int


@dataclass(slots=True)
class CheckResult:
    """d20 + bonus compared against a target number."""

    die_roll: int
    bonus: int
    total: int
    difficulty: int
    success: bool
    advantage: bool = False
    disadvantage: bool = False
    all_rolls: list[int] = field(default_factory=list)


@dataclass(slots=True)
class DamageResult:
    """Damage dice plus a flat power bonus."""

    rolls: list[int]
    subtotal: int
    power_bonus: int
    total: int


def seeded_rng(seed: str) -> random.Random:
    """Return a generator whose sequence is fully determined by ``seed``.

    The seed string is hashed with SHA-256 so that similar strings still
    produce unrelated sequences.
    """

    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return random.Random(int.from_bytes(digest[:8], "big", signed=False))


def _rng(rng: random.Random | None) -> random.Random:
    return rng if rng is not None else _default_rng


def roll_die(sides: int, *, rng: random.Random | None = None) -> int:
    """Roll one die with ``sides`` faces (uniform over 1..sides)."""

    if sides < 1:
        raise ValueError(f"Number of sides must be positive, got {sides}")
    return _rng(rng).randint(1, sides)


def roll_dice(count: int, sides: int, *, rng: random.Random | None = None) -> list[int]:
    """Roll ``count`` dice with ``sides`` faces each."""

    if count < 0:
        raise ValueError(f"Number of dice cannot be negative, got {count}")
    generator = _rng(rng)
    return [roll_die(sides, rng=generator) for _ in range(count)]


def roll_sum(count: int, sides: int, *, rng: random.Random | None = None) -> int:
    return sum(roll_dice(count, sides, rng=rng))


def roll_keep_highest(
    count: int, sides: int, keep: int, *, rng: random.Random | None = None
) -> list[int]:
    """Roll ``count`` dice and return the ``keep`` highest, highest first."""

    return sorted(roll_dice(count, sides, rng=rng), reverse=True)[:keep]


def roll_keep_lowest(
    count: int, sides: int, keep: int, *, rng: random.Random | None = None
) -> list[int]:
    """Roll ``count`` dice and return the ``keep`` lowest, lowest first."""

    return sorted(roll_dice(count, sides, rng=rng))[:keep]


def roll_with_advantage(sides: int = D20, *, rng: random.Random | None = None) -> AdvantageRoll:
    rolls = roll_dice(2, sides, rng=rng)
    return AdvantageRoll(rolls=rolls, result=max(rolls))


def roll_with_disadvantage(sides: int = D20, *, rng: random.Random | None = None) -> AdvantageRoll:
    rolls = roll_dice(2, sides, rng=rng)
    return AdvantageRoll(rolls=rolls, result=min(rolls))


def parse_notation(notation: str) -> DiceNotation:
    """Parse ``[count]d<sides>[+|-modifier]`` into a :class:`DiceNotation`.

    Args:
        notation: Dice expression such as ``"2d6+3"``, ``"d20"`` or ``"1D8-1"``

    Returns:
        The structured roll request; parsing the same string always yields an
        equal value.

    Raises:
        InvalidNotation: If the string does not match the grammar or asks for
            zero dice or zero-sided dice.
    """

    match = NOTATION_PATTERN.fullmatch(notation.strip())
    if not match:
        raise InvalidNotation(notation)

    count = int(match.group(1)) if match.group(1) else 1
    sides = int(match.group(2))
    modifier = int(match.group(4)) if match.group(4) else 0
    if match.group(3) == "-":
        modifier = -modifier

    if count < 1:
        raise InvalidNotation(notation, "number of dice must be positive")
    if sides < 1:
        raise InvalidNotation(notation, "number of sides must be positive")

    return DiceNotation(count=count, sides=sides, modifier=modifier)


def roll_from_notation(notation: str, *, rng: random.Random | None = None) -> NotationRoll:
    """Parse and roll a dice expression.

    Raises:
        InvalidNotation: If the expression is malformed.
    """

    parsed = parse_notation(notation)
    rolls = roll_dice(parsed.count, parsed.sides, rng=rng)
    return NotationRoll(
        notation=notation,
        rolls=rolls,
        modifier=parsed.modifier,
        result=sum(rolls) + parsed.modifier,
    )


def roll_skill_check(
    bonus: int,
    difficulty: int,
    advantage: bool = False,
    disadvantage: bool = False,
    *,
    rng: random.Random | None = None,
) -> CheckResult:
    """Roll a d20, add ``bonus`` and compare against ``difficulty``.

    Advantage and disadvantage cancel each other out.  The check succeeds
    when the total meets or beats the difficulty.
    """

    if advantage and not disadvantage:
        die = roll_with_advantage(D20, rng=rng)
    elif disadvantage and not advantage:
        die = roll_with_disadvantage(D20, rng=rng)
    else:
        roll = roll_die(D20, rng=rng)
        die = AdvantageRoll(rolls=[roll], result=roll)

    total = die.result + bonus
    return CheckResult(
        die_roll=die.result,
        bonus=bonus,
        total=total,
        difficulty=difficulty,
        success=total >= difficulty,
        advantage=advantage,
        disadvantage=disadvantage,
        all_rolls=die.rolls,
    )


def roll_attack(
    attack_bonus: int,
    defense_score: int,
    advantage: bool = False,
    disadvantage: bool = False,
    *,
    rng: random.Random | None = None,
) -> CheckResult:
    """Attack roll: d20 + attack bonus against the target's defense."""

    return roll_skill_check(attack_bonus, defense_score, advantage, disadvantage, rng=rng)


def roll_saving_throw(
    bonus: int,
    difficulty: int,
    advantage: bool = False,
    disadvantage: bool = False,
    *,
    rng: random.Random | None = None,
) -> CheckResult:
    return roll_skill_check(bonus, difficulty, advantage, disadvantage, rng=rng)


def roll_morale_check(
    morale_score: int, difficulty: int, *, rng: random.Random | None = None
) -> CheckResult:
    """Morale check: d20 + morale against a DC, never with advantage."""

    return roll_skill_check(morale_score, difficulty, rng=rng)


def roll_damage(
    count: int, sides: int, power_bonus: int = 0, *, rng: random.Random | None = None
) -> DamageResult:
    rolls = roll_dice(count, sides, rng=rng)
    subtotal = sum(rolls)
    return DamageResult(
        rolls=rolls,
        subtotal=subtotal,
        power_bonus=power_bonus,
        total=subtotal + power_bonus,
    )


def proficiency_bonus(domain_size: int) -> int:
    """Proficiency bonus of a domain: 2 + floor(size / 2)."""

    return 2 + domain_size // 2


def roll_domain_skill_check(
    skill_bonus: int,
    domain_size: int,
    difficulty: int,
    advantage: bool = False,
    disadvantage: bool = False,
    *,
    rng: random.Random | None = None,
) -> CheckResult:
    """Domain skill check: d20 + skill + proficiency bonus against a DC."""

    total_bonus = skill_bonus + proficiency_bonus(domain_size)
    return roll_skill_check(total_bonus, difficulty, advantage, disadvantage, rng=rng)


def roll_domain_defense_check(
    defense_score: int, attack_bonus: int, *, rng: random.Random | None = None
) -> CheckResult:
    """Defense check: d20 + defense score against the attacker's bonus."""

    return roll_skill_check(defense_score, attack_bonus, rng=rng)
