"""Pure rules layer for Kingdoms & Warfare.

This package holds everything that can run without storage or I/O:

* Dataclasses describing units, domains, battles and intrigue sessions
  (see :mod:`models`), plus the enumerations they use.
* The unit and domain rules (see :mod:`units` and :mod:`domains`).
* The battle and intrigue engines, whose transitions return a
  :class:`~kingdoms.domain.models.Transition` instead of raising.
* Intrigue action records (see :mod:`actions`).

Persistence lives in :mod:`kingdoms.repository`; the services in
:mod:`kingdoms.services` glue the two together.
"""

from . import actions, battle, domains, enums, intrigue, models, units

__all__ = [
    "actions",
    "battle",
    "domains",
    "enums",
    "intrigue",
    "models",
    "units",
]
