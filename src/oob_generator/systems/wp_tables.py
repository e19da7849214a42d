"""Warsaw Pact table strategies (Red Storm G-L, Baltic Approaches G2-L2 and J3)."""

from __future__ import annotations

from typing import Callable

from oob_generator.domain.flights import FlightRecord
from oob_generator.domain.params import ParameterError
from oob_generator.domain.results import Result
from oob_generator.domain.types import (
    AIR_TO_AIR,
    AIR_TO_AIR_ONLY,
    AIR_TO_GROUND,
    JAMMING,
    MARITIME,
    NO_ORDNANCE,
    HexType,
    Tasking,
)
from oob_generator.rules.tables import ALL_DATES, FlightTemplate, NationEntry, NationMap, OrdnanceMap
from oob_generator.systems.common import (
    STRIKE_TASKINGS,
    ResolutionContext,
    build_result,
    flight,
    lookup,
    roll_aircraft,
    roll_nation,
    rule_ordnance,
    scenario_date,
    sole_nation,
    table_ordnance,
    tasking_flights,
)
from oob_generator.systems.nations import normalize_nationality, roll_nationality
from oob_generator.systems.ordnance import (
    WP_BALTIC_MIG21,
    WP_GDR_STRIKE,
    WP_USSR_STRIKE,
    OrdnanceRule,
    roll_ordnance_table,
)
from oob_generator.systems.raid import group_flights
from oob_generator.systems.ranges import TableDataError
from oob_generator.view import format as fmt

STRIKE_RULES: dict[str, OrdnanceRule] = {"USSR": WP_USSR_STRIKE, "GDR": WP_GDR_STRIKE}
RESTRICTED_MIG21 = frozenset({"GDR", "POL"})
NAVAL_SUFFIX = " Naval"

# Loadout labels of flights that never roll ordnance.
FIXED_ORDNANCE = {
    Tasking.ESCORT_JAMMING.value: JAMMING,
    Tasking.RECON.value: AIR_TO_AIR_ONLY,
    Tasking.MARITIME_PATROL.value: NO_ORDNANCE,
    Tasking.RESCUE_SUPPORT.value: AIR_TO_GROUND,
    Tasking.CSAR.value: NO_ORDNANCE,
    Tasking.STANDOFF_JAMMING.value: NO_ORDNANCE,
}


def _single_flight(
    ctx: ResolutionContext, nations: NationMap, *, flight_size: int, flight_count: int
) -> FlightRecord:
    nation = roll_nation(ctx, nations)
    aircraft = roll_aircraft(ctx, nation.entry.aircraft)
    return flight(
        ctx,
        nationality=nation.name,
        aircraft_type=aircraft.aircraft_type,
        aircraft_id=aircraft.aircraft_id,
        tasking=Tasking.CAP.value,
        flight_size=flight_size,
        flight_count=flight_count,
        ordnance=AIR_TO_AIR,
    )


def _table_nations(ctx: ResolutionContext) -> NationMap:
    if ctx.table.nations is None:
        raise TableDataError(f"Table {ctx.table_id} has no nations")
    return ctx.table.nations


def table_g(ctx: ResolutionContext) -> Result:
    """QRA: one CAP flight."""
    record = _single_flight(ctx, _table_nations(ctx), flight_size=ctx.table.flight_size, flight_count=1)
    return build_result(ctx, [record], [fmt.nation_line(record)])


def table_h(ctx: ResolutionContext) -> Result:
    record = _single_flight(
        ctx, _table_nations(ctx), flight_size=ctx.table.flight_size, flight_count=ctx.table.flight_count
    )
    return build_result(ctx, [record], [fmt.nation_line(record)])


def table_g2(ctx: ResolutionContext) -> Result:
    nations = ctx.table.date_ranges[scenario_date(ctx, ctx.table.date_ranges)]
    record = _single_flight(ctx, nations, flight_size=ctx.table.flight_size, flight_count=1)
    return build_result(ctx, [record], [fmt.nation_line(record)], raid_type="QRA")


def table_h2(ctx: ResolutionContext) -> Result:
    """Air-to-air sweep: the whole CAP shares one nation and aircraft roll."""
    nations = ctx.table.date_ranges[scenario_date(ctx, ctx.table.date_ranges)]
    record = _single_flight(
        ctx, nations, flight_size=ctx.table.flight_size, flight_count=ctx.table.flight_count
    )
    return build_result(ctx, [record], [fmt.nation_line(record)])


def _raid_nationality(ctx: ResolutionContext, label: str):
    rolls = lookup(ctx.table.nationality_rolls, ALL_DATES, "nationality roll", ctx.table_id)
    rolled = roll_nationality(rolls, ctx.roller, label)
    ctx.log.extend(rolled.trace)
    return rolled


def table_i(ctx: ResolutionContext) -> Result:
    """Strike raid: a nationality roll, then each of that nationality's taskings."""
    raid = _raid_nationality(ctx, "Nationality")
    rule = lookup(STRIKE_RULES, raid.code, "strike nationality", ctx.table_id)
    flights: list[FlightRecord] = []
    for tasking in raid.definition.taskings:
        if tasking.aircraft is None:
            raise TableDataError(f"Tasking {tasking.name} of Table {ctx.table_id} has no aircraft")
        aircraft = roll_aircraft(ctx, tasking.aircraft, f"{tasking.name} Aircraft")
        ordnance = rule_ordnance(ctx, rule, tasking.name) if tasking.name in STRIKE_TASKINGS else None
        flights.extend(tasking_flights(ctx, tasking, raid.code, aircraft, ordnance))
    grouped = group_flights(flights)
    return build_result(ctx, grouped, [fmt.raid_line(f) for f in grouped], raid_type=raid.definition.name)


def table_i2(ctx: ResolutionContext) -> Result:
    raid = _raid_nationality(ctx, "Raid Nationality")
    restriction = WP_BALTIC_MIG21 if raid.code in RESTRICTED_MIG21 else None
    flights: list[FlightRecord] = []
    for tasking in raid.definition.taskings:
        if tasking.aircraft is None:
            raise TableDataError(f"Tasking {tasking.name} of Table {ctx.table_id} has no aircraft")
        aircraft = roll_aircraft(ctx, tasking.aircraft, f"{tasking.name} Aircraft")
        ordnance = None
        table = raid.definition.ordnance_rolls.get(tasking.name)
        if tasking.name in STRIKE_TASKINGS and table is not None:
            ordnance = table_ordnance(ctx, table, tasking.name, restriction)
        flights.extend(tasking_flights(ctx, tasking, raid.code, aircraft, ordnance))
    grouped = group_flights(flights)
    return build_result(ctx, grouped, [fmt.raid_line(f) for f in grouped])


def table_j(ctx: ResolutionContext) -> Result:
    """Each tasking rolls its own nation and aircraft."""
    flights: list[FlightRecord] = []
    for tasking in ctx.table.taskings:
        if tasking.nations is None:
            raise TableDataError(f"Tasking {tasking.name} of Table {ctx.table_id} has no nations")
        nation = roll_nation(ctx, tasking.nations, f"{tasking.name} Nation")
        aircraft = roll_aircraft(ctx, nation.entry.aircraft, f"{tasking.name} Aircraft")
        flights.extend(tasking_flights(ctx, tasking, nation.name, aircraft))
    return build_result(ctx, flights, [fmt.nation_line(f) for f in flights])


def _per_flight(
    ctx: ResolutionContext,
    template: FlightTemplate,
    nationality: str,
    ordnance_for: Callable[[int], str],
    tasking: str | None = None,
) -> list[FlightRecord]:
    """Flights of a template, each rolling its own aircraft.

    ``tasking`` overrides the tasking written to the records.
    """
    flights: list[FlightRecord] = []
    for number in range(1, template.flight_count + 1):
        if template.aircraft is not None:
            aircraft = roll_aircraft(ctx, template.aircraft, f"{template.tasking} Flight {number} Aircraft")
            aircraft_type, aircraft_id = aircraft.aircraft_type, aircraft.aircraft_id
        elif template.fixed is not None:
            aircraft_type, aircraft_id = template.fixed.name, template.fixed.aircraft_id
        else:
            raise TableDataError(f"Flight {template.tasking} of Table {ctx.table_id} has no aircraft")
        flights.append(
            flight(
                ctx,
                nationality=nationality,
                aircraft_type=aircraft_type,
                aircraft_id=aircraft_id,
                tasking=tasking or template.tasking,
                flight_size=template.flight_size,
                ordnance=ordnance_for(number),
            )
        )
    return flights


def _rolled_loadout(
    ctx: ResolutionContext, tables: dict[str, OrdnanceMap], tasking: str, number: int
) -> str | None:
    table = tables.get(tasking)
    if table is None:
        return None
    loadout = roll_ordnance_table(table, ctx.roller, f"{tasking} Flight {number} Ordnance")
    ctx.log.extend(loadout.trace)
    return loadout.descriptor


def table_j2(ctx: ResolutionContext) -> Result:
    """Soviet deep strike package; every flight rolls its own airframe."""
    flights: list[FlightRecord] = []
    nationality = "USSR"
    for tasking in ctx.table.taskings:
        if tasking.nations is None:
            raise TableDataError(f"Tasking {tasking.name} of Table {ctx.table_id} has no nations")
        nation: NationEntry | None = sole_nation(tasking.nations)
        if nation is None:
            nation = roll_nation(ctx, tasking.nations, f"{tasking.name} Nation").entry
        nationality = nation.name
        display = Tasking.BOMBING.value if tasking.name == Tasking.DEEP_STRIKE.value else tasking.name
        template = FlightTemplate(
            tasking=tasking.name,
            flight_count=tasking.flight_count,
            flight_size=tasking.flight_size,
            aircraft=nation.aircraft,
        )

        def _ordnance(number: int, name: str = tasking.name) -> str:
            if name == Tasking.DEEP_STRIKE.value:
                return _rolled_loadout(ctx, ctx.table.ordnance_rolls, name, number) or AIR_TO_GROUND
            return FIXED_ORDNANCE.get(name, AIR_TO_AIR)

        flights.extend(_per_flight(ctx, template, nation.name, _ordnance, tasking=display))
    grouped = group_flights(flights)
    header = f"{nationality} {ctx.table.raid_type or Tasking.DEEP_STRIKE.value} Raid"
    lines = fmt.package_lines(header, grouped, {Tasking.BOMBING.value: Tasking.DEEP_STRIKE.value})
    return build_result(ctx, grouped, lines)


def _nationality_param(ctx: ResolutionContext, default: str | None = None) -> str:
    code = ctx.params.nationality or default
    if code is None:
        code = str(ctx.params.require("nationality", ctx.table_id))
    return normalize_nationality(code, ctx.table.nationality_aliases)


def table_j3(ctx: ResolutionContext) -> Result:
    """Naval strike package for the chosen nationality."""
    code = _nationality_param(ctx)
    definition = lookup(ctx.table.nationalities, code, "nationality", ctx.table_id)
    tables = {**ctx.table.ordnance_rolls, **definition.ordnance_rolls}
    flights: list[FlightRecord] = []
    for template in definition.flights:

        def _ordnance(number: int, name: str = template.tasking) -> str:
            if name in (Tasking.SEAD.value, Tasking.NAVAL_STRIKE.value):
                return _rolled_loadout(ctx, tables, name, number) or AIR_TO_GROUND
            return FIXED_ORDNANCE.get(name, AIR_TO_AIR)

        flights.extend(_per_flight(ctx, template, definition.code, _ordnance))
    grouped = group_flights(flights)
    lines = fmt.package_lines(f"{definition.name} Raid", grouped)
    return build_result(ctx, grouped, lines, raid_type=definition.name)


def table_k(ctx: ResolutionContext) -> Result:
    """Combat rescue: predefined flights, one aircraft roll per flight group."""
    code = _nationality_param(ctx)
    definition = lookup(ctx.table.nationalities, code, "nationality", ctx.table_id)
    flights: list[FlightRecord] = []
    for template in definition.flights:
        if template.aircraft is None:
            raise TableDataError(f"Flight {template.tasking} of Table {ctx.table_id} has no aircraft roll")
        aircraft = roll_aircraft(ctx, template.aircraft, f"{template.tasking} Aircraft")
        flights.append(
            flight(
                ctx,
                nationality=definition.code,
                aircraft_type=aircraft.aircraft_type,
                aircraft_id=aircraft.aircraft_id,
                tasking=template.tasking,
                flight_size=template.flight_size,
                flight_count=template.flight_count,
            )
        )
    return build_result(ctx, flights, [fmt.bare_line(f) for f in flights], raid_type=definition.name)


def table_k2(ctx: ResolutionContext) -> Result:
    """Baltic combat rescue; sea hexes switch GDR to its naval rescue package."""
    code = _nationality_param(ctx, default="GDR")
    naval = f"{code}{NAVAL_SUFFIX}"
    if ctx.params.hex_type == HexType.SEA and naval in ctx.table.nationalities:
        code = naval
    definition = lookup(ctx.table.nationalities, code, "nationality", ctx.table_id)
    flights: list[FlightRecord] = []
    for template in definition.flights:

        def _ordnance(number: int, name: str = template.tasking) -> str:
            return FIXED_ORDNANCE.get(name, NO_ORDNANCE)

        flights.extend(_per_flight(ctx, template, definition.code, _ordnance))
    grouped = group_flights(flights)
    lines = fmt.package_lines(f"{definition.name} Raid", grouped)
    return build_result(ctx, grouped, lines, raid_type=definition.name)


def _mission_and_nation(ctx: ResolutionContext) -> tuple[str, str | None]:
    mission_type = str(ctx.params.require("mission_type", ctx.table_id))
    nation = ctx.params.tactical_recon_nation
    if "|" in mission_type:
        mission_type, _, nation = mission_type.partition("|")
    return mission_type.strip(), nation.strip() if nation else None


def table_l(ctx: ResolutionContext) -> Result:
    """Support missions; Tactical Recon may be flown by a chosen nation."""
    mission_type, nation_code = _mission_and_nation(ctx)
    mission = lookup(ctx.table.mission_types, mission_type, "mission type", ctx.table_id)
    if nation_code and mission.nation_data:
        nation = lookup(mission.nation_data, nation_code, f"{mission_type} nation", ctx.table_id)
        nationality = nation.name
    elif mission.nations is not None:
        rolled = roll_nation(ctx, mission.nations)
        nation, nationality = rolled.entry, rolled.name
    else:
        raise ParameterError(f"tacticalReconNation is required for {mission_type} on Table {ctx.table_id}")
    aircraft = roll_aircraft(ctx, nation.aircraft)
    record = flight(
        ctx,
        nationality=nationality,
        aircraft_type=aircraft.aircraft_type,
        aircraft_id=aircraft.aircraft_id,
        tasking=mission_type,
        flight_size=mission.flight_size,
        flight_count=mission.flight_count,
    )
    return build_result(ctx, [record], [fmt.nation_line(record)])


def table_l2(ctx: ResolutionContext) -> Result:
    mission_type = str(ctx.params.require("mission_type", ctx.table_id))
    mission = lookup(ctx.table.mission_types, mission_type, "mission type", ctx.table_id)
    if mission.nations is None:
        raise TableDataError(f"Mission {mission_type} of Table {ctx.table_id} has no nations")
    nation = sole_nation(mission.nations)
    if nation is None:
        nation = roll_nation(ctx, mission.nations).entry
    aircraft = roll_aircraft(ctx, nation.aircraft)
    ordnance = NO_ORDNANCE if mission_type == Tasking.STANDOFF_JAMMING.value else MARITIME
    record = flight(
        ctx,
        nationality=nation.name,
        aircraft_type=aircraft.aircraft_type,
        aircraft_id=aircraft.aircraft_id,
        tasking=mission_type,
        flight_size=mission.flight_size,
        flight_count=mission.flight_count,
        ordnance=ordnance,
    )
    return build_result(ctx, [record], [fmt.nation_line(record)])


WP_STRATEGIES = {
    "G": table_g,
    "H": table_h,
    "I": table_i,
    "J": table_j,
    "K": table_k,
    "L": table_l,
    "G2": table_g2,
    "H2": table_h2,
    "I2": table_i2,
    "J2": table_j2,
    "J3": table_j3,
    "K2": table_k2,
    "L2": table_l2,
}
