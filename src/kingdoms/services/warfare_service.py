"""Warfare service: units, battles and combat rolls.

This module wires the pure unit and battle rules to an :class:`EntityStore`.
Every mutation loads the entity under its lock, applies one rule function
and saves the result, so concurrent commands against the same battle or
unit cannot lose each other's updates.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, replace

from kingdoms.domain import battle as battle_rules
from kingdoms.domain import domains as domain_rules
from kingdoms.domain import units as unit_rules
from kingdoms.domain.enums import BattleRank, GridColumn, UnitType
from kingdoms.domain.models import Battle, BattleID, DomainID, Transition, Unit, UnitID
from kingdoms.repository.entities import BATTLES, DOMAINS, UNITS, EntityStore
from kingdoms.services.errors import EntityNotFoundError
from kingdoms.utils import dice

logger = logging.getLogger(__name__)

DEFAULT_DEFENSE = 10
CASUALTY_NOTATION = "1d6"


@dataclass(slots=True)
class CasualtyReport:
    """A casualty roll and the unit it was applied to."""

    roll: dice.NotationRoll
    before: int
    unit: Unit

    @property
    def broken(self) -> bool:
        return unit_rules.is_broken(self.unit)


class WarfareService:
    """Service for unit management, battle sequencing and combat rolls."""

    def __init__(
        self,
        store: EntityStore,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._locks = store.locks
        self._rng = rng

    # --- Loading ----------------------------------------------------------------

    def get_unit(self, unit_id: UnitID) -> Unit:
        """Load a unit or raise :class:`EntityNotFoundError`."""

        unit = self._store.get_unit(unit_id)
        if unit is None:
            raise EntityNotFoundError("unit", unit_id)
        return unit

    def get_battle(self, battle_id: BattleID) -> Battle:
        """Load a battle or raise :class:`EntityNotFoundError`."""

        battle = self._store.get_battle(battle_id)
        if battle is None:
            raise EntityNotFoundError("battle", battle_id)
        return battle

    def _require_domain(self, domain_id: DomainID) -> None:
        if self._store.get_domain(domain_id) is None:
            raise EntityNotFoundError("domain", domain_id)

    # --- Units ------------------------------------------------------------------

    def create_unit(
        self,
        name: str,
        unit_type: UnitType = UnitType.INFANTRY,
        tier: int = 1,
        *,
        domain_id: DomainID | None = None,
        **stats: int,
    ) -> Unit:
        """Create and persist a unit, optionally enlisting it in a domain."""

        if tier not in unit_rules.TIER_NUMERALS:
            raise ValueError(f"Unit tier must be between 1 and 5, got {tier}")
        if domain_id is not None:
            self._require_domain(domain_id)
        unit = self._store.save_unit(unit_rules.create_unit(name, unit_type, tier, **stats))
        if domain_id is not None:
            with self._locks.hold(DOMAINS.key(domain_id)):
                domain = self._store.get_domain(domain_id)
                if domain is None:
                    raise EntityNotFoundError("domain", domain_id)
                self._store.save_domain(domain_rules.add_unit(domain, unit.id))
        logger.info("Created unit %s (%s, tier %d)", unit.name, unit.type, unit.tier)
        return unit

    def _update_unit(self, unit_id: UnitID, change: Callable[[Unit], Unit]) -> Unit:
        with self._locks.hold(UNITS.key(unit_id)):
            unit = self.get_unit(unit_id)
            updated = change(unit)
            if updated is unit:
                return unit
            return self._store.save_unit(updated)

    def take_casualties(self, unit_id: UnitID, casualties: int) -> Unit:
        return self._update_unit(unit_id, lambda u: unit_rules.take_casualties(u, casualties))

    def rally_casualties(self, unit_id: UnitID, casualties: int) -> Unit:
        return self._update_unit(unit_id, lambda u: unit_rules.rally_casualties(u, casualties))

    def add_condition(self, unit_id: UnitID, condition: str) -> Unit:
        return self._update_unit(unit_id, lambda u: unit_rules.add_condition(u, condition))

    def remove_condition(self, unit_id: UnitID, condition: str) -> Unit:
        return self._update_unit(unit_id, lambda u: unit_rules.remove_condition(u, condition))

    def add_trait(self, unit_id: UnitID, trait: str) -> Unit:
        return self._update_unit(unit_id, lambda u: unit_rules.add_trait(u, trait))

    def remove_trait(self, unit_id: UnitID, trait: str) -> Unit:
        return self._update_unit(unit_id, lambda u: unit_rules.remove_trait(u, trait))

    def add_experience(self, unit_id: UnitID, experience: int) -> Unit:
        return self._update_unit(unit_id, lambda u: unit_rules.add_experience(u, experience))

    def delete_unit(self, unit_id: UnitID) -> bool:
        with self._locks.hold(UNITS.key(unit_id)):
            return self._store.delete_unit(unit_id)

    # --- Battles ----------------------------------------------------------------

    def create_battle(self, name: str) -> Battle:
        battle = self._store.save_battle(battle_rules.create_battle(name))
        logger.info("Created battle %s (%s)", battle.name, battle.id)
        return battle

    def _update_battle(
        self,
        battle_id: BattleID,
        operation: str,
        transition_fn: Callable[[Battle], Transition[Battle]],
    ) -> Transition[Battle]:
        with self._locks.hold(BATTLES.key(battle_id)):
            battle = self.get_battle(battle_id)
            transition = transition_fn(battle)
            if not transition.changed:
                logger.info(
                    "Battle %s: %s rejected (%s)", battle_id, operation, transition.outcome
                )
                return transition
            saved = self._store.save_battle(transition.state)
            logger.debug("Battle %s: %s -> %s", battle_id, operation, transition.outcome)
            return replace(transition, state=saved)

    def add_domain(self, battle_id: BattleID, domain_id: DomainID) -> Transition[Battle]:
        self._require_domain(domain_id)
        return self._update_battle(
            battle_id, "add_domain", lambda b: battle_rules.add_domain(b, domain_id)
        )

    def remove_domain(self, battle_id: BattleID, domain_id: DomainID) -> Transition[Battle]:
        return self._update_battle(
            battle_id, "remove_domain", lambda b: battle_rules.remove_domain(b, domain_id)
        )

    def add_unit(
        self, battle_id: BattleID, unit_id: UnitID, domain_id: DomainID
    ) -> Transition[Battle]:
        """Bring a stored unit into the battle on behalf of ``domain_id``.

        If the domain has not joined yet the result is ``DOMAIN_ENROLLED``
        and the call must be repeated to add the unit.
        """

        self.get_unit(unit_id)
        self._require_domain(domain_id)
        return self._update_battle(
            battle_id, "add_unit", lambda b: battle_rules.add_unit(b, unit_id, domain_id)
        )

    def remove_unit(self, battle_id: BattleID, unit_id: UnitID) -> Transition[Battle]:
        return self._update_battle(
            battle_id, "remove_unit", lambda b: battle_rules.remove_unit(b, unit_id)
        )

    def deploy_unit(
        self,
        battle_id: BattleID,
        unit_id: UnitID,
        rank: BattleRank | str,
        column: GridColumn | str | None = None,
    ) -> Transition[Battle]:
        return self._update_battle(
            battle_id,
            "deploy_unit",
            lambda b: battle_rules.deploy_unit(b, unit_id, rank, column),
        )

    def set_initiative(self, battle_id: BattleID, unit_ids: list[UnitID]) -> Transition[Battle]:
        return self._update_battle(
            battle_id, "set_initiative", lambda b: battle_rules.set_initiative(b, unit_ids)
        )

    def roll_initiative(self, battle_id: BattleID) -> Transition[Battle]:
        """Order every deployed unit by command bonus, highest first.

        Units still in the not-deployed pool take no turns.  Units whose
        record has disappeared from storage count as command 0.
        """

        def _order(battle: Battle) -> Transition[Battle]:
            deployed = battle_rules.deployed_unit_ids(battle)
            command: dict[UnitID, int] = {}
            for unit_id in deployed:
                unit = self._store.get_unit(unit_id)
                command[unit_id] = unit.stats.command if unit is not None else 0
            return battle_rules.set_initiative(
                battle, battle_rules.order_by_command(deployed, command)
            )

        return self._update_battle(battle_id, "roll_initiative", _order)

    def start_battle(self, battle_id: BattleID) -> Transition[Battle]:
        return self._update_battle(battle_id, "start_battle", battle_rules.start_battle)

    def end_battle(
        self, battle_id: BattleID, winning_domain_id: DomainID | None = None
    ) -> Transition[Battle]:
        """Close the battle and credit every participating unit with one more battle."""

        transition = self._update_battle(
            battle_id,
            "end_battle",
            lambda b: battle_rules.end_battle(b, winning_domain_id),
        )
        if transition.changed:
            for unit_id in transition.state.units:
                try:
                    self._update_unit(unit_id, unit_rules.add_battle)
                except EntityNotFoundError:
                    logger.warning("Battle %s references missing unit %s", battle_id, unit_id)
        return transition

    def activate_unit(self, battle_id: BattleID, unit_id: UnitID) -> Transition[Battle]:
        return self._update_battle(
            battle_id, "activate_unit", lambda b: battle_rules.activate_unit(b, unit_id)
        )

    def use_reaction(self, battle_id: BattleID, unit_id: UnitID) -> Transition[Battle]:
        return self._update_battle(
            battle_id, "use_reaction", lambda b: battle_rules.use_reaction(b, unit_id)
        )

    def end_turn(self, battle_id: BattleID) -> Transition[Battle]:
        return self._update_battle(battle_id, "end_turn", battle_rules.end_turn)

    def add_token(self, battle_id: BattleID, unit_id: UnitID, token: str) -> Transition[Battle]:
        return self._update_battle(
            battle_id, "add_token", lambda b: battle_rules.add_token(b, unit_id, token)
        )

    def remove_token(
        self, battle_id: BattleID, unit_id: UnitID, token: str
    ) -> Transition[Battle]:
        return self._update_battle(
            battle_id, "remove_token", lambda b: battle_rules.remove_token(b, unit_id, token)
        )

    def log_event(
        self, battle_id: BattleID, event_type: str, **details: object
    ) -> Transition[Battle]:
        return self._update_battle(
            battle_id, "log_event", lambda b: battle_rules.log_event(b, event_type, **details)
        )

    def delete_battle(self, battle_id: BattleID) -> bool:
        with self._locks.hold(BATTLES.key(battle_id)):
            return self._store.delete_battle(battle_id)

    # --- Combat rolls -----------------------------------------------------------

    def roll_attack(
        self,
        unit_id: UnitID,
        target_id: UnitID | None = None,
        *,
        bonus: int = 0,
        advantage: bool = False,
        disadvantage: bool = False,
    ) -> dice.CheckResult:
        """Attack roll: d20 + attack + bonus against the target's defense (10 without a target)."""

        unit = self.get_unit(unit_id)
        defense = self.get_unit(target_id).stats.defense if target_id else DEFAULT_DEFENSE
        return dice.roll_attack(
            unit.stats.attack + bonus, defense, advantage, disadvantage, rng=self._rng
        )

    def roll_damage(self, unit_id: UnitID, *, bonus: int = 0) -> dice.DamageResult:
        """Roll one die per attack, each with ``damage`` faces, plus power and bonus."""

        unit = self.get_unit(unit_id)
        return dice.roll_damage(
            unit.stats.attacks, unit.stats.damage, unit.stats.power + bonus, rng=self._rng
        )

    def roll_morale(self, unit_id: UnitID, difficulty: int) -> dice.CheckResult:
        unit = self.get_unit(unit_id)
        return dice.roll_morale_check(unit.stats.morale, difficulty, rng=self._rng)

    def roll_casualties(self, unit_id: UnitID) -> CasualtyReport:
        """Roll 1d6 casualties and apply them to the unit."""

        with self._locks.hold(UNITS.key(unit_id)):
            unit = self.get_unit(unit_id)
            roll = dice.roll_from_notation(CASUALTY_NOTATION, rng=self._rng)
            updated = self._store.save_unit(unit_rules.take_casualties(unit, roll.result))
        if unit_rules.is_broken(updated):
            logger.info("Unit %s is broken", updated.name)
        return CasualtyReport(roll=roll, before=unit.casualty_die.current, unit=updated)
