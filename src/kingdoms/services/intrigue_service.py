"""Intrigue service: domains and intrigue sessions.

Domains are the actors of intrigue, so their bookkeeping (skills,
resources, officers) lives here next to session management.  Skill tests
are rolled here too; the intrigue engine itself only records the resolved
action.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import replace

from kingdoms.domain import domains as domain_rules
from kingdoms.domain import intrigue as intrigue_rules
from kingdoms.domain.actions import IntrigueAction, SkillTestAction, create_skill_test_action
from kingdoms.domain.enums import DomainSkill
from kingdoms.domain.models import (
    Domain,
    DomainID,
    DomainSkills,
    Intrigue,
    IntrigueID,
    OfficerID,
    Transition,
)
from kingdoms.repository.entities import DOMAINS, INTRIGUES, EntityStore
from kingdoms.services.errors import EntityNotFoundError
from kingdoms.utils import dice

logger = logging.getLogger(__name__)

DEFAULT_DIFFICULTY = 10


class IntrigueService:
    """Service for domain management and turn-based intrigue sessions."""

    def __init__(
        self,
        store: EntityStore,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._locks = store.locks
        self._rng = rng

    # --- Domains ----------------------------------------------------------------

    def get_domain(self, domain_id: DomainID) -> Domain:
        """Load a domain or raise :class:`EntityNotFoundError`."""

        domain = self._store.get_domain(domain_id)
        if domain is None:
            raise EntityNotFoundError("domain", domain_id)
        return domain

    def create_domain(
        self, name: str, size: int = 1, skills: DomainSkills | None = None
    ) -> Domain:
        if size not in domain_rules.DOMAIN_SIZES:
            raise ValueError(f"Domain size must be between 1 and 5, got {size}")
        domain = self._store.save_domain(domain_rules.create_domain(name, size, skills))
        logger.info("Created domain %s (size %d)", domain.name, domain.size)
        return domain

    def _update_domain(self, domain_id: DomainID, change: Callable[[Domain], Domain]) -> Domain:
        with self._locks.hold(DOMAINS.key(domain_id)):
            domain = self.get_domain(domain_id)
            updated = change(domain)
            if updated is domain:
                return domain
            return self._store.save_domain(updated)

    def update_skills(self, domain_id: DomainID, **skills: int) -> Domain:
        """Change skills; the defense scores are recomputed before saving."""

        return self._update_domain(domain_id, lambda d: domain_rules.update_skills(d, **skills))

    def update_defense_levels(self, domain_id: DomainID, **levels: int) -> Domain:
        return self._update_domain(
            domain_id, lambda d: domain_rules.update_defense_levels(d, **levels)
        )

    def add_resources(self, domain_id: DomainID, amount: int) -> Domain:
        return self._update_domain(domain_id, lambda d: domain_rules.add_resources(d, amount))

    def remove_resources(self, domain_id: DomainID, amount: int) -> Domain:
        return self._update_domain(domain_id, lambda d: domain_rules.remove_resources(d, amount))

    def add_officer(self, domain_id: DomainID, officer_id: OfficerID) -> Domain:
        return self._update_domain(domain_id, lambda d: domain_rules.add_officer(d, officer_id))

    def remove_officer(self, domain_id: DomainID, officer_id: OfficerID) -> Domain:
        return self._update_domain(
            domain_id, lambda d: domain_rules.remove_officer(d, officer_id)
        )

    def delete_domain(self, domain_id: DomainID) -> bool:
        with self._locks.hold(DOMAINS.key(domain_id)):
            return self._store.delete_domain(domain_id)

    # --- Sessions ---------------------------------------------------------------

    def get_intrigue(self, intrigue_id: IntrigueID) -> Intrigue:
        """Load an intrigue session or raise :class:`EntityNotFoundError`."""

        intrigue = self._store.get_intrigue(intrigue_id)
        if intrigue is None:
            raise EntityNotFoundError("intrigue", intrigue_id)
        return intrigue

    def create_intrigue(self, name: str) -> Intrigue:
        intrigue = self._store.save_intrigue(intrigue_rules.create_intrigue(name))
        logger.info("Created intrigue %s (%s)", intrigue.name, intrigue.id)
        return intrigue

    def _update_intrigue(
        self,
        intrigue_id: IntrigueID,
        operation: str,
        transition_fn: Callable[[Intrigue], Transition[Intrigue]],
    ) -> Transition[Intrigue]:
        with self._locks.hold(INTRIGUES.key(intrigue_id)):
            intrigue = self.get_intrigue(intrigue_id)
            transition = transition_fn(intrigue)
            if not transition.changed:
                logger.info(
                    "Intrigue %s: %s rejected (%s)", intrigue_id, operation, transition.outcome
                )
                return transition
            saved = self._store.save_intrigue(transition.state)
            logger.debug("Intrigue %s: %s -> %s", intrigue_id, operation, transition.outcome)
            return replace(transition, state=saved)

    def add_domain(self, intrigue_id: IntrigueID, domain_id: DomainID) -> Transition[Intrigue]:
        self.get_domain(domain_id)
        return self._update_intrigue(
            intrigue_id, "add_domain", lambda i: intrigue_rules.add_domain(i, domain_id)
        )

    def remove_domain(
        self, intrigue_id: IntrigueID, domain_id: DomainID
    ) -> Transition[Intrigue]:
        return self._update_intrigue(
            intrigue_id, "remove_domain", lambda i: intrigue_rules.remove_domain(i, domain_id)
        )

    def set_initiator(
        self, intrigue_id: IntrigueID, domain_id: DomainID
    ) -> Transition[Intrigue]:
        """Choose the initiator; an outsider domain is only enrolled (``DOMAIN_ENROLLED``)."""

        self.get_domain(domain_id)
        return self._update_intrigue(
            intrigue_id, "set_initiator", lambda i: intrigue_rules.set_initiator(i, domain_id)
        )

    def set_turn_order(
        self, intrigue_id: IntrigueID, turn_order: Sequence[DomainID]
    ) -> Transition[Intrigue]:
        return self._update_intrigue(
            intrigue_id,
            "set_turn_order",
            lambda i: intrigue_rules.set_turn_order(i, turn_order),
        )

    def start_intrigue(self, intrigue_id: IntrigueID) -> Transition[Intrigue]:
        return self._update_intrigue(intrigue_id, "start_intrigue", intrigue_rules.start_intrigue)

    def end_intrigue(self, intrigue_id: IntrigueID) -> Transition[Intrigue]:
        return self._update_intrigue(intrigue_id, "end_intrigue", intrigue_rules.end_intrigue)

    def take_turn(
        self, intrigue_id: IntrigueID, domain_id: DomainID, action: IntrigueAction
    ) -> Transition[Intrigue]:
        return self._update_intrigue(
            intrigue_id, "take_turn", lambda i: intrigue_rules.take_turn(i, domain_id, action)
        )

    def log_event(
        self, intrigue_id: IntrigueID, event_type: str, **details: object
    ) -> Transition[Intrigue]:
        return self._update_intrigue(
            intrigue_id, "log_event", lambda i: intrigue_rules.log_event(i, event_type, **details)
        )

    def delete_intrigue(self, intrigue_id: IntrigueID) -> bool:
        with self._locks.hold(INTRIGUES.key(intrigue_id)):
            return self._store.delete_intrigue(intrigue_id)

    # --- Skill tests ------------------------------------------------------------

    def resolve_skill_test(
        self,
        domain_id: DomainID,
        action: SkillTestAction,
        *,
        advantage: bool = False,
        disadvantage: bool = False,
    ) -> SkillTestAction:
        """Roll the domain's skill check and return the action with ``result`` filled in.

        The check is d20 + skill modifier + proficiency bonus against the
        action's difficulty, or 10 when the action names none.

        Raises:
            ValueError: If the action names an unknown skill.
            EntityNotFoundError: If the domain is not stored.
        """

        skill = DomainSkill(action.skill)
        domain = self.get_domain(domain_id)
        result = dice.roll_domain_skill_check(
            domain_rules.skill_modifier(domain, skill.value),
            domain.size,
            action.difficulty if action.difficulty is not None else DEFAULT_DIFFICULTY,
            advantage,
            disadvantage,
            rng=self._rng,
        )
        return replace(action, result=result)

    def take_skill_test(
        self,
        intrigue_id: IntrigueID,
        domain_id: DomainID,
        skill: str,
        *,
        target: str | None = None,
        difficulty: int | None = None,
        description: str = "",
        advantage: bool = False,
        disadvantage: bool = False,
    ) -> Transition[Intrigue]:
        """Resolve a skill test for ``domain_id`` and record it as the domain's turn."""

        action = create_skill_test_action(
            skill, target=target, difficulty=difficulty, description=description
        )
        resolved = self.resolve_skill_test(
            domain_id, action, advantage=advantage, disadvantage=disadvantage
        )
        return self.take_turn(intrigue_id, domain_id, resolved)
