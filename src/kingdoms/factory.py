"""Service Factory for Kingdoms.

This module builds repositories, the entity store and the services from
:class:`~kingdoms.config.Settings`. Use it in production code so every
service shares one store and, through it, one lock registry.

For testing, construct the services directly around an
:class:`~kingdoms.repository.InMemoryRepository` instead.

Example:
    # Production usage
    from kingdoms.factory import create_services
    services = create_services()
    battle = services.warfare.create_battle("Siege of Varn")

    # Testing usage
    from kingdoms.repository import EntityStore, InMemoryRepository
    from kingdoms.services import WarfareService

    warfare = WarfareService(EntityStore(InMemoryRepository()))
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from kingdoms.config import Settings, get_settings
from kingdoms.database import create_db_engine, create_session_factory, init_db
from kingdoms.interfaces import IKeyValueRepository
from kingdoms.repository import (
    EntityStore,
    InMemoryRepository,
    JsonFileRepository,
    SqlKeyValueRepository,
)
from kingdoms.services import IntrigueService, WarfareService


@dataclass(slots=True)
class Services:
    """Everything a front end needs; both services share one store and its locks."""

    store: EntityStore
    warfare: WarfareService
    intrigue: IntrigueService


def create_repository(settings: Settings | None = None) -> IKeyValueRepository:
    """Create the repository selected by ``settings.storage_backend``.

    Args:
        settings: Settings to use; defaults to the cached settings

    Returns:
        A ready-to-use repository; the SQL backend has its table created
    """
    settings = settings or get_settings()
    if settings.storage_backend == "memory":
        return InMemoryRepository()
    if settings.storage_backend == "json":
        return JsonFileRepository(settings.data_dir)
    engine = create_db_engine(settings)
    init_db(engine)
    return SqlKeyValueRepository(create_session_factory(engine))


def create_services(
    settings: Settings | None = None,
    *,
    repository: IKeyValueRepository | None = None,
    rng: random.Random | None = None,
) -> Services:
    """Create the entity store and both services with shared dependencies.

    Args:
        settings: Settings used to pick the repository when none is given
        repository: Explicit repository, bypassing ``settings``
        rng: Random source for every roll; defaults to the module generator

    Returns:
        Fully wired :class:`Services`
    """
    store = EntityStore(repository if repository is not None else create_repository(settings))
    return Services(
        store=store,
        warfare=WarfareService(store, rng=rng),
        intrigue=IntrigueService(store, rng=rng),
    )
