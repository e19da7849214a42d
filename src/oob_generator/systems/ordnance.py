"""Ordnance loadouts: tiered rules with per-airframe bonuses and data-driven tables."""

from __future__ import annotations

from dataclasses import dataclass, field

from oob_generator.domain.results import TraceEntry
from oob_generator.domain.types import DIE_SIDES, Tasking
from oob_generator.rules.tables import OrdnanceMap
from oob_generator.sim.rng import RollEngine
from oob_generator.systems.ranges import roll_on

BASE = "Bombs/CBU/Rockets"
ORDNANCE_SEPARATOR = " + "


@dataclass(frozen=True)
class OrdnanceTier:
    upper: int
    descriptor: str


@dataclass(frozen=True)
class OrdnanceBonus:
    fragments: tuple[str, ...]
    bonus: int

    def matches(self, aircraft_type: str) -> bool:
        return any(fragment in aircraft_type for fragment in self.fragments)


@dataclass(frozen=True)
class OrdnanceRestriction:
    """Airframes limited to a fixed loadout.

    With ``rolls`` set the die is still rolled and traced before the fixed
    loadout replaces the result; otherwise no roll is made.
    """

    fragments: tuple[str, ...]
    descriptor: str
    rolls: bool = False
    taskings: frozenset[str] = frozenset({Tasking.SEAD.value, Tasking.BOMBING.value})

    def applies(self, aircraft_type: str, tasking: str) -> bool:
        return tasking in self.taskings and any(f in aircraft_type for f in self.fragments)


@dataclass(frozen=True)
class OrdnanceRule:
    name: str
    tiers: tuple[OrdnanceTier, ...]
    bonuses: tuple[OrdnanceBonus, ...] = ()
    appends: dict[str, str] = field(default_factory=lambda: {Tasking.SEAD.value: "ARM"})
    restrictions: tuple[OrdnanceRestriction, ...] = ()
    sides: int = DIE_SIDES

    def bonus_for(self, aircraft_type: str) -> int:
        # first matching family wins
        return next((b.bonus for b in self.bonuses if b.matches(aircraft_type)), 0)

    def effective_roll(self, roll: int, aircraft_type: str) -> int:
        return min(roll + self.bonus_for(aircraft_type), self.sides)

    def tier_index(self, effective_roll: int) -> int:
        for index, tier in enumerate(self.tiers):
            if effective_roll <= tier.upper:
                return index
        return len(self.tiers) - 1

    def restriction_for(self, aircraft_type: str, tasking: str) -> OrdnanceRestriction | None:
        return next((r for r in self.restrictions if r.applies(aircraft_type, tasking)), None)

    def resolve(self, roll: int, aircraft_type: str, tasking: str) -> str:
        restriction = self.restriction_for(aircraft_type, tasking)
        if restriction is not None:
            return restriction.descriptor
        effective = self.effective_roll(roll, aircraft_type)
        descriptor = self.tiers[self.tier_index(effective)].descriptor
        extra = self.appends.get(tasking)
        if extra:
            descriptor = f"{descriptor}{ORDNANCE_SEPARATOR}{extra}"
        return descriptor


@dataclass(frozen=True)
class OrdnanceRoll:
    descriptor: str
    trace: tuple[TraceEntry, ...] = ()


def _tiers(*pairs: tuple[int, str]) -> tuple[OrdnanceTier, ...]:
    return tuple(OrdnanceTier(upper, descriptor) for upper, descriptor in pairs)


NATO_TIERS = _tiers(
    (4, BASE),
    (7, f"{BASE} + EOGM"),
    (DIE_SIDES, f"{BASE} + EOGM + LGB/EOGB"),
)

NATO_STRIKE = OrdnanceRule(
    name="NATO_STRIKE",
    tiers=NATO_TIERS,
    bonuses=(
        OrdnanceBonus(("F-16", "A-10"), 2),
        OrdnanceBonus(("Tornado GR1", "Tornado IDS", "CF-18"), 1),
    ),
)

NATO_BALTIC_STRIKE = OrdnanceRule(
    name="NATO_BALTIC_STRIKE",
    tiers=NATO_TIERS,
    bonuses=(
        OrdnanceBonus(("F-16", "A-10"), 2),
        OrdnanceBonus(("Tornado", "F/A-18"), 1),
    ),
)

WP_BONUSES = (
    OrdnanceBonus(("Su-17M4", "MiG-27K"), 1),
    OrdnanceBonus(("Su-24",), 2),
)

WP_USSR_STRIKE = OrdnanceRule(
    name="WP_USSR_STRIKE",
    tiers=_tiers(
        (5, BASE),
        (7, f"{BASE} + EOGM/ARM"),
        (DIE_SIDES, f"{BASE} + EOGM/ARM + EOGB/LGB"),
    ),
    bonuses=WP_BONUSES,
)

WP_GDR_STRIKE = OrdnanceRule(
    name="WP_GDR_STRIKE",
    tiers=_tiers((6, BASE), (DIE_SIDES, f"{BASE} + EOGM")),
    bonuses=WP_BONUSES,
    restrictions=(
        OrdnanceRestriction(
            ("MiG-21",), f"{BASE} (Note E: Only Bombs, AT CBU, or Rockets)", rolls=True
        ),
    ),
)

# Older MiG-21 regiments of the Baltic non-Soviet air forces never roll.
WP_BALTIC_MIG21 = OrdnanceRestriction(("MiG-21",), BASE)

RULES = {
    rule.name: rule
    for rule in (NATO_STRIKE, NATO_BALTIC_STRIKE, WP_USSR_STRIKE, WP_GDR_STRIKE)
}


def roll_ordnance(
    rule: OrdnanceRule, roller: RollEngine, aircraft_type: str, tasking: str, label: str
) -> OrdnanceRoll:
    restriction = rule.restriction_for(aircraft_type, tasking)
    if restriction is not None and not restriction.rolls:
        return OrdnanceRoll(restriction.descriptor)
    roll = roller.roll(rule.sides, label)
    return OrdnanceRoll(rule.resolve(roll.value, aircraft_type, tasking), (roll.entry,))


def roll_ordnance_table(
    table: OrdnanceMap,
    roller: RollEngine,
    label: str,
    *,
    aircraft_type: str = "",
    tasking: str = "",
    restriction: OrdnanceRestriction | None = None,
) -> OrdnanceRoll:
    if restriction is not None and restriction.applies(aircraft_type, tasking):
        if not restriction.rolls:
            return OrdnanceRoll(restriction.descriptor)
        _, roll = roll_on(table, roller, label)
        return OrdnanceRoll(restriction.descriptor, (roll.entry,))
    descriptor, roll = roll_on(table, roller, label)
    return OrdnanceRoll(descriptor, (roll.entry,))
