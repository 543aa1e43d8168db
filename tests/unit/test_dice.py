"""Tests for the dice engine.

Tests cover:
- Notation parsing and evaluation
- Advantage / disadvantage handling
- Skill-check composites and their bonus sources
- Determinism of seeded generators
- Property-based bounds
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from kingdoms.utils.dice import (
    DiceNotation,
    InvalidNotation,
    parse_notation,
    proficiency_bonus,
    roll_attack,
    roll_damage,
    roll_dice,
    roll_die,
    roll_domain_defense_check,
    roll_domain_skill_check,
    roll_from_notation,
    roll_keep_highest,
    roll_keep_lowest,
    roll_morale_check,
    roll_saving_throw,
    roll_skill_check,
    roll_sum,
    roll_with_advantage,
    roll_with_disadvantage,
    seeded_rng,
)


class TestParseNotation:
    """Tests for parse_notation."""

    def test_full_expression(self):
        assert parse_notation("2d6+3") == DiceNotation(count=2, sides=6, modifier=3)

    def test_count_defaults_to_one(self):
        assert parse_notation("d20") == DiceNotation(count=1, sides=20)

    def test_negative_modifier(self):
        assert parse_notation("1d20-2") == DiceNotation(count=1, sides=20, modifier=-2)

    def test_case_insensitive_and_whitespace(self):
        assert parse_notation("  3D8  ") == DiceNotation(count=3, sides=8)

    def test_same_string_parses_to_equal_request(self):
        assert parse_notation("4d4+1") == parse_notation("4d4+1")

    def test_canonical_string(self):
        assert str(parse_notation("d6")) == "1d6"
        assert str(parse_notation("2d10-1")) == "2d10-1"

    @pytest.mark.parametrize("notation", ["bogus", "", "2d", "d", "2x6", "2d6+", "2d6 + 3", "1d6x"])
    def test_malformed_notation_raises(self, notation):
        with pytest.raises(InvalidNotation):
            parse_notation(notation)

    @pytest.mark.parametrize("notation", ["0d6", "2d0"])
    def test_zero_count_or_sides_rejected(self, notation):
        with pytest.raises(InvalidNotation, match="must be positive"):
            parse_notation(notation)

    def test_invalid_notation_is_value_error(self):
        with pytest.raises(ValueError) as excinfo:
            parse_notation("bogus")
        assert excinfo.value.notation == "bogus"
        assert "bogus" in str(excinfo.value)


class TestRollFromNotation:
    """Tests for roll_from_notation."""

    def test_two_d_six_plus_three(self):
        result = roll_from_notation("2d6+3", rng=seeded_rng("notation"))
        assert len(result.rolls) == 2
        assert all(1 <= roll <= 6 for roll in result.rolls)
        assert result.modifier == 3
        assert result.result == sum(result.rolls) + 3

    def test_one_d_twenty_minus_two(self):
        result = roll_from_notation("1d20-2", rng=seeded_rng("notation"))
        assert len(result.rolls) == 1
        assert 1 <= result.rolls[0] <= 20
        assert result.result == result.rolls[0] - 2

    def test_bogus_raises(self):
        with pytest.raises(InvalidNotation):
            roll_from_notation("bogus")

    def test_scripted_values(self, scripted_rng):
        result = roll_from_notation("3d6-1", rng=scripted_rng([6, 2, 4]))
        assert result.rolls == [6, 2, 4]
        assert result.result == 11
        assert result.notation == "3d6-1"


class TestBasicRolls:
    def test_roll_die_rejects_non_positive_sides(self):
        with pytest.raises(ValueError, match="must be positive"):
            roll_die(0)

    def test_roll_dice_rejects_negative_count(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            roll_dice(-1, 6)

    def test_roll_dice_zero_count(self):
        assert roll_dice(0, 6) == []

    def test_roll_sum(self, scripted_rng):
        assert roll_sum(3, 6, rng=scripted_rng([1, 2, 3])) == 6

    def test_keep_highest_and_lowest(self, scripted_rng):
        assert roll_keep_highest(4, 6, 2, rng=scripted_rng([3, 6, 1, 5])) == [6, 5]
        assert roll_keep_lowest(4, 6, 2, rng=scripted_rng([3, 6, 1, 5])) == [1, 3]

    def test_advantage_reports_both_rolls(self, scripted_rng):
        result = roll_with_advantage(rng=scripted_rng([4, 17]))
        assert result.rolls == [4, 17]
        assert result.result == 17

    def test_disadvantage_keeps_lower(self, scripted_rng):
        result = roll_with_disadvantage(rng=scripted_rng([4, 17]))
        assert result.result == 4


class TestSkillCheck:
    def test_success_when_total_meets_difficulty(self, scripted_rng):
        result = roll_skill_check(3, 15, rng=scripted_rng([12]))
        assert result.total == 15
        assert result.success is True
        assert result.all_rolls == [12]

    def test_failure_below_difficulty(self, scripted_rng):
        result = roll_skill_check(3, 15, rng=scripted_rng([11]))
        assert result.success is False

    def test_advantage_uses_higher_roll(self, scripted_rng):
        result = roll_skill_check(0, 10, advantage=True, rng=scripted_rng([3, 14]))
        assert result.die_roll == 14
        assert result.all_rolls == [3, 14]
        assert result.advantage is True

    def test_disadvantage_uses_lower_roll(self, scripted_rng):
        result = roll_skill_check(0, 10, disadvantage=True, rng=scripted_rng([3, 14]))
        assert result.die_roll == 3
        assert result.success is False

    def test_advantage_and_disadvantage_cancel(self, scripted_rng):
        result = roll_skill_check(
            0, 10, advantage=True, disadvantage=True, rng=scripted_rng([9])
        )
        assert result.all_rolls == [9]
        assert result.die_roll == 9

    def test_attack_against_defense(self, scripted_rng):
        result = roll_attack(2, 12, rng=scripted_rng([10]))
        assert result.total == 12
        assert result.difficulty == 12
        assert result.success

    def test_saving_throw_with_disadvantage(self, scripted_rng):
        result = roll_saving_throw(1, 11, disadvantage=True, rng=scripted_rng([15, 9]))
        assert result.die_roll == 9
        assert result.total == 10
        assert not result.success

    def test_morale_check_adds_morale(self, scripted_rng):
        result = roll_morale_check(4, 13, rng=scripted_rng([8]))
        assert result.bonus == 4
        assert result.total == 12
        assert not result.success

    def test_damage(self, scripted_rng):
        result = roll_damage(2, 6, 3, rng=scripted_rng([5, 2]))
        assert result.rolls == [5, 2]
        assert result.subtotal == 7
        assert result.power_bonus == 3
        assert result.total == 10

    @pytest.mark.parametrize(
        ("size", "expected"), [(1, 2), (2, 3), (3, 3), (4, 4), (5, 4)]
    )
    def test_proficiency_bonus(self, size, expected):
        assert proficiency_bonus(size) == expected

    def test_domain_skill_check_adds_proficiency(self, scripted_rng):
        result = roll_domain_skill_check(2, 4, 15, rng=scripted_rng([9]))
        assert result.bonus == 2 + 4
        assert result.total == 15
        assert result.success

    def test_domain_defense_check(self, scripted_rng):
        result = roll_domain_defense_check(11, 20, rng=scripted_rng([9]))
        assert result.total == 20
        assert result.success


class TestSeededRng:
    def test_same_seed_same_sequence(self):
        first = roll_dice(10, 20, rng=seeded_rng("siege-of-varn"))
        second = roll_dice(10, 20, rng=seeded_rng("siege-of-varn"))
        assert first == second

    def test_different_seeds_diverge(self):
        first = roll_dice(10, 20, rng=seeded_rng("round-1"))
        second = roll_dice(10, 20, rng=seeded_rng("round-2"))
        assert first != second


@given(
    count=st.integers(min_value=1, max_value=20),
    sides=st.integers(min_value=1, max_value=100),
    modifier=st.integers(min_value=-50, max_value=50),
    seed=st.text(max_size=20),
)
def test_notation_roll_bounds(count, sides, modifier, seed):
    notation = f"{count}d{sides}{modifier:+d}"
    result = roll_from_notation(notation, rng=seeded_rng(seed))
    assert len(result.rolls) == count
    assert all(1 <= roll <= sides for roll in result.rolls)
    assert result.result == sum(result.rolls) + modifier


@given(
    bonus=st.integers(min_value=-10, max_value=20),
    difficulty=st.integers(min_value=1, max_value=35),
    advantage=st.booleans(),
    disadvantage=st.booleans(),
    seed=st.text(max_size=20),
)
def test_skill_check_consistency(bonus, difficulty, advantage, disadvantage, seed):
    result = roll_skill_check(bonus, difficulty, advantage, disadvantage, rng=seeded_rng(seed))
    assert result.total == result.die_roll + bonus
    assert result.success == (result.total >= difficulty)
    assert result.die_roll in result.all_rolls
    assert len(result.all_rolls) == (2 if advantage != disadvantage else 1)
