"""Command-line front end for rolling dice and inspecting stored entities."""

from __future__ import annotations

import argparse
import logging
import random
import sys
from collections.abc import Sequence

from kingdoms import formatting
from kingdoms.config import get_settings
from kingdoms.domain.enums import DomainSkill, UnitType
from kingdoms.domain.models import BattleID, DomainID, DomainSkills, IntrigueID, UnitID
from kingdoms.factory import Services, create_services
from kingdoms.services import EntityNotFoundError
from kingdoms.utils import dice

logger = logging.getLogger(__name__)

KINDS = ("unit", "domain", "battle", "intrigue")


def _rng(args: argparse.Namespace) -> random.Random | None:
    return dice.seeded_rng(args.seed) if args.seed else None


def _cmd_roll(args: argparse.Namespace, services: Services) -> int:  # noqa: ARG001
    result = dice.roll_from_notation(args.notation, rng=_rng(args))
    print(formatting.format_roll(result))
    return 0


def _cmd_check(args: argparse.Namespace, services: Services) -> int:  # noqa: ARG001
    result = dice.roll_skill_check(
        args.bonus, args.difficulty, args.advantage, args.disadvantage, rng=_rng(args)
    )
    print(formatting.format_roll(result))
    return 0


def _cmd_list(args: argparse.Namespace, services: Services) -> int:
    store = services.store
    if args.name:
        finders = {
            "unit": store.find_units_by_name,
            "domain": store.find_domains_by_name,
            "battle": store.find_battles_by_name,
            "intrigue": store.find_intrigues_by_name,
        }
        entities = finders[args.kind](args.name)
    else:
        listers = {
            "unit": store.list_units,
            "domain": store.list_domains,
            "battle": store.list_battles,
            "intrigue": store.list_intrigues,
        }
        entities = listers[args.kind]()
    if not entities:
        print(f"No {args.kind}s found")
        return 0
    for entity in entities:
        print(f"{entity.id}  {entity.name}")
    return 0


def _cmd_show(args: argparse.Namespace, services: Services) -> int:
    store = services.store
    if args.kind == "unit":
        print(formatting.format_unit(services.warfare.get_unit(UnitID(args.id))))
    elif args.kind == "domain":
        print(formatting.format_domain(services.intrigue.get_domain(DomainID(args.id))))
    elif args.kind == "battle":
        battle = services.warfare.get_battle(BattleID(args.id))
        domains = {d.id: d for d in map(store.get_domain, battle.domains) if d is not None}
        units = {u.id: u for u in map(store.get_unit, battle.units) if u is not None}
        print(formatting.format_battle(battle, domains, units))
    else:
        intrigue = services.intrigue.get_intrigue(IntrigueID(args.id))
        domains = {d.id: d for d in map(store.get_domain, intrigue.domains) if d is not None}
        print(formatting.format_intrigue(intrigue, domains))
    return 0


def _cmd_create(args: argparse.Namespace, services: Services) -> int:
    if args.kind == "unit":
        domain_id = DomainID(args.domain) if args.domain else None
        entity = services.warfare.create_unit(
            args.name, UnitType(args.type), args.tier, domain_id=domain_id
        )
    elif args.kind == "domain":
        skills = DomainSkills(
            diplomacy=args.diplomacy,
            espionage=args.espionage,
            lore=args.lore,
            operations=args.operations,
        )
        entity = services.intrigue.create_domain(args.name, args.size, skills)
    elif args.kind == "battle":
        entity = services.warfare.create_battle(args.name)
    else:
        entity = services.intrigue.create_intrigue(args.name)
    print(entity.id)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kingdoms", description="Kingdoms & Warfare dice and game-state tools"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    roll = sub.add_parser("roll", help="Roll a dice expression such as 2d6+3")
    roll.add_argument("notation")
    roll.add_argument("--seed", help="Seed string for a reproducible roll")
    roll.set_defaults(handler=_cmd_roll)

    check = sub.add_parser("check", help="Roll d20 + bonus against a difficulty")
    check.add_argument("bonus", type=int)
    check.add_argument("difficulty", type=int)
    check.add_argument("--advantage", action="store_true")
    check.add_argument("--disadvantage", action="store_true")
    check.add_argument("--seed", help="Seed string for a reproducible roll")
    check.set_defaults(handler=_cmd_check)

    listing = sub.add_parser("list", help="List stored entities of one kind")
    listing.add_argument("kind", choices=KINDS)
    listing.add_argument("--name", help="Only entities whose name contains this text")
    listing.set_defaults(handler=_cmd_list)

    show = sub.add_parser("show", help="Show one stored entity")
    show.add_argument("kind", choices=KINDS)
    show.add_argument("id")
    show.set_defaults(handler=_cmd_show)

    create = sub.add_parser("create", help="Create and store a new entity")
    create.add_argument("kind", choices=KINDS)
    create.add_argument("name")
    create.add_argument("--type", choices=[t.value for t in UnitType], default="infantry")
    create.add_argument("--tier", type=int, choices=range(1, 6), default=1)
    create.add_argument("--domain", help="Domain that owns a new unit")
    create.add_argument("--size", type=int, choices=range(1, 6), default=1)
    for skill in DomainSkill:
        create.add_argument(f"--{skill}", type=int, default=0)
    create.set_defaults(handler=_cmd_create)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    services = create_services(settings)
    logger.debug("Using %s storage", settings.storage_backend)
    try:
        return args.handler(args, services)
    except dice.InvalidNotation as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except EntityNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
