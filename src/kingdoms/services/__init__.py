"""Service layer for Kingdoms game logic.

Services load entities through an :class:`~kingdoms.repository.EntityStore`,
apply one pure rule function under a per-entity lock and save the result:

- WarfareService: units, battle sequencing, attack/damage/morale/casualty rolls
- IntrigueService: domains, intrigue sessions, domain skill tests

Production Usage:
    from kingdoms.factory import create_services
    services = create_services(settings)
    services.warfare.start_battle(battle_id)

Testing Usage:
    from kingdoms.repository import EntityStore, InMemoryRepository
    from kingdoms.services import WarfareService

    service = WarfareService(EntityStore(InMemoryRepository()), rng=seeded_rng("test"))
"""

from kingdoms.services.errors import EntityNotFoundError, KingdomsError
from kingdoms.services.intrigue_service import IntrigueService
from kingdoms.services.warfare_service import CasualtyReport, WarfareService

__all__ = [
    "CasualtyReport",
    "EntityNotFoundError",
    "IntrigueService",
    "KingdomsError",
    "WarfareService",
]
