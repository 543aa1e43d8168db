"""Typed entity persistence on top of a key-value repository.

Each entity kind is stored under ``<kind>:<id>`` and listed in an
``index:<kinds>`` id list.  The store keeps both in step: saving appends
the id to the index once, deleting removes it and cascades the deletion
into every entity that still references the removed id.

Index updates and cascade rewrites run under the store's
:class:`EntityLocks`, the same registry the services lock entities with.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter

from kingdoms.domain import battle as battle_rules
from kingdoms.domain import domains as domain_rules
from kingdoms.domain import intrigue as intrigue_rules
from kingdoms.domain.models import (
    Battle,
    BattleID,
    Domain,
    DomainID,
    Intrigue,
    IntrigueID,
    Unit,
    UnitID,
    utc_now,
)
from kingdoms.interfaces import IKeyValueRepository
from kingdoms.repository.locks import EntityLocks

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", Unit, Domain, Battle, Intrigue)


@dataclass(frozen=True, slots=True)
class EntityKind(Generic[EntityT]):
    """Storage layout of one entity type."""

    prefix: str
    index_key: str
    adapter: TypeAdapter[EntityT]

    def key(self, entity_id: str) -> str:
        return f"{self.prefix}{entity_id}"


UNITS: EntityKind[Unit] = EntityKind("unit:", "index:units", TypeAdapter(Unit))
DOMAINS: EntityKind[Domain] = EntityKind("domain:", "index:domains", TypeAdapter(Domain))
BATTLES: EntityKind[Battle] = EntityKind("battle:", "index:battles", TypeAdapter(Battle))
INTRIGUES: EntityKind[Intrigue] = EntityKind(
    "intrigue:", "index:intrigues", TypeAdapter(Intrigue)
)

ALL_KINDS: tuple[EntityKind[Any], ...] = (UNITS, DOMAINS, BATTLES, INTRIGUES)


class EntityStore:
    """Save, load, list and delete Kingdoms entities through a repository."""

    def __init__(
        self, repository: IKeyValueRepository, locks: EntityLocks | None = None
    ) -> None:
        self._repository = repository
        self._locks = locks or EntityLocks()

    @property
    def repository(self) -> IKeyValueRepository:
        return self._repository

    @property
    def locks(self) -> EntityLocks:
        return self._locks

    # --- Generic plumbing -------------------------------------------------------

    def _index(self, kind: EntityKind[Any]) -> list[str]:
        return list(self._repository.get(kind.index_key) or [])

    def _load(self, kind: EntityKind[EntityT], entity_id: str) -> EntityT | None:
        data = self._repository.get(kind.key(entity_id))
        if data is None:
            return None
        return kind.adapter.validate_python(data)

    def _write(self, kind: EntityKind[EntityT], entity: EntityT) -> None:
        self._repository.put(kind.key(entity.id), kind.adapter.dump_python(entity, mode="json"))

    def _save(self, kind: EntityKind[EntityT], entity: EntityT) -> EntityT:
        stamped = replace(entity, updated=utc_now())
        self._write(kind, stamped)
        with self._locks.hold(kind.index_key):
            index = self._index(kind)
            if stamped.id not in index:
                index.append(stamped.id)
                self._repository.put(kind.index_key, index)
        return stamped

    def _remove(self, kind: EntityKind[Any], entity_id: str) -> None:
        self._repository.delete(kind.key(entity_id))
        with self._locks.hold(kind.index_key):
            index = self._index(kind)
            if entity_id in index:
                self._repository.put(kind.index_key, [eid for eid in index if eid != entity_id])

    def _iter(self, kind: EntityKind[EntityT]) -> Iterator[EntityT]:
        for entity_id in self._index(kind):
            entity = self._load(kind, entity_id)
            if entity is None:
                logger.warning("Index %s lists missing id %s", kind.index_key, entity_id)
                continue
            yield entity

    def _find_by_name(self, kind: EntityKind[EntityT], name: str) -> list[EntityT]:
        needle = name.lower()
        return [entity for entity in self._iter(kind) if needle in entity.name.lower()]

    def _rewrite_all(
        self, kind: EntityKind[EntityT], update: Callable[[EntityT], EntityT | None]
    ) -> int:
        """Apply ``update`` to every stored entity and save those it changed.

        Each entity is re-read under its own lock, so a service command
        running against it at the same time is never overwritten.
        """

        changed = 0
        for entity_id in self._index(kind):
            with self._locks.hold(kind.key(entity_id)):
                entity = self._load(kind, entity_id)
                if entity is None:
                    continue
                result = update(entity)
                if result is not None:
                    self._save(kind, result)
                    changed += 1
        return changed

    # --- Units ------------------------------------------------------------------

    def get_unit(self, unit_id: UnitID) -> Unit | None:
        return self._load(UNITS, unit_id)

    def save_unit(self, unit: Unit) -> Unit:
        return self._save(UNITS, unit)

    def list_units(self) -> list[Unit]:
        return list(self._iter(UNITS))

    def find_units_by_name(self, name: str) -> list[Unit]:
        return self._find_by_name(UNITS, name)

    def get_units_for_domain(self, domain_id: DomainID) -> list[Unit]:
        """Units listed by the domain, skipping ids that no longer resolve."""

        domain = self.get_domain(domain_id)
        if domain is None:
            return []
        units = (self.get_unit(unit_id) for unit_id in domain.units)
        return [unit for unit in units if unit is not None]

    def delete_unit(self, unit_id: UnitID) -> bool:
        """Delete a unit and strip it from every domain and battle.

        Returns:
            ``False`` when no such unit is stored
        """

        if self.get_unit(unit_id) is None:
            return False
        self._remove(UNITS, unit_id)

        def _strip_domain(domain: Domain) -> Domain | None:
            if unit_id not in domain.units:
                return None
            return domain_rules.remove_unit(domain, unit_id)

        def _strip_battle(battle: Battle) -> Battle | None:
            transition = battle_rules.remove_unit(battle, unit_id)
            return transition.state if transition.changed else None

        domains = self._rewrite_all(DOMAINS, _strip_domain)
        battles = self._rewrite_all(BATTLES, _strip_battle)
        logger.info(
            "Deleted unit %s (cleaned %d domains, %d battles)", unit_id, domains, battles
        )
        return True

    # --- Domains ----------------------------------------------------------------

    def get_domain(self, domain_id: DomainID) -> Domain | None:
        return self._load(DOMAINS, domain_id)

    def save_domain(self, domain: Domain) -> Domain:
        return self._save(DOMAINS, domain)

    def list_domains(self) -> list[Domain]:
        return list(self._iter(DOMAINS))

    def find_domains_by_name(self, name: str) -> list[Domain]:
        return self._find_by_name(DOMAINS, name)

    def delete_domain(self, domain_id: DomainID) -> bool:
        """Delete a domain and withdraw it from every battle and intrigue.

        Withdrawing from a battle also removes the units the domain fielded
        there; the units themselves stay stored.
        """

        if self.get_domain(domain_id) is None:
            return False
        self._remove(DOMAINS, domain_id)

        def _strip_battle(battle: Battle) -> Battle | None:
            transition = battle_rules.remove_domain(battle, domain_id)
            return transition.state if transition.changed else None

        def _strip_intrigue(intrigue: Intrigue) -> Intrigue | None:
            transition = intrigue_rules.remove_domain(intrigue, domain_id)
            return transition.state if transition.changed else None

        battles = self._rewrite_all(BATTLES, _strip_battle)
        intrigues = self._rewrite_all(INTRIGUES, _strip_intrigue)
        logger.info(
            "Deleted domain %s (cleaned %d battles, %d intrigues)", domain_id, battles, intrigues
        )
        return True

    # --- Battles ----------------------------------------------------------------

    def get_battle(self, battle_id: BattleID) -> Battle | None:
        return self._load(BATTLES, battle_id)

    def save_battle(self, battle: Battle) -> Battle:
        return self._save(BATTLES, battle)

    def list_battles(self) -> list[Battle]:
        return list(self._iter(BATTLES))

    def find_battles_by_name(self, name: str) -> list[Battle]:
        return self._find_by_name(BATTLES, name)

    def get_battles_for_domain(self, domain_id: DomainID) -> list[Battle]:
        return [battle for battle in self._iter(BATTLES) if domain_id in battle.domains]

    def delete_battle(self, battle_id: BattleID) -> bool:
        if self.get_battle(battle_id) is None:
            return False
        self._remove(BATTLES, battle_id)
        return True

    # --- Intrigues --------------------------------------------------------------

    def get_intrigue(self, intrigue_id: IntrigueID) -> Intrigue | None:
        return self._load(INTRIGUES, intrigue_id)

    def save_intrigue(self, intrigue: Intrigue) -> Intrigue:
        return self._save(INTRIGUES, intrigue)

    def list_intrigues(self) -> list[Intrigue]:
        return list(self._iter(INTRIGUES))

    def find_intrigues_by_name(self, name: str) -> list[Intrigue]:
        return self._find_by_name(INTRIGUES, name)

    def get_intrigues_for_domain(self, domain_id: DomainID) -> list[Intrigue]:
        return [intrigue for intrigue in self._iter(INTRIGUES) if domain_id in intrigue.domains]

    def delete_intrigue(self, intrigue_id: IntrigueID) -> bool:
        if self.get_intrigue(intrigue_id) is None:
            return False
        self._remove(INTRIGUES, intrigue_id)
        return True

    # --- Maintenance ------------------------------------------------------------

    def clear(self) -> int:
        """Delete every entity and index; returns the number of keys removed."""

        removed = 0
        for kind in ALL_KINDS:
            for key in self._repository.list_by_prefix(kind.prefix):
                self._repository.delete(key)
                removed += 1
            if self._repository.get(kind.index_key) is not None:
                self._repository.delete(kind.index_key)
                removed += 1
        return removed
