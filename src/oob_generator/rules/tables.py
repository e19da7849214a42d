"""Table definitions and their JSON loader."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from oob_generator.domain.types import Faction, HexType
from oob_generator.rules.modules import ModuleCatalog, ModuleConfig, load_json
from oob_generator.systems.ranges import (
    RollRange,
    TableDataError,
    coverage_gaps,
    overlaps,
    parse_range,
)

logger = logging.getLogger(__name__)

__all__ = [
    "AircraftEntry",
    "FlightTemplate",
    "MissionDefinition",
    "NationEntry",
    "NationalityDefinition",
    "SENTINEL_GROUPS",
    "TableDataError",
    "TableDefinition",
    "TableSet",
    "TaskingDefinition",
    "load_table",
    "load_table_set",
]

ALL_DATES = "*"
REQUIREMENTS = ("nationality", "mission_type", "ataf_zone", "scenario_date", "hex_type")


@dataclass(frozen=True)
class AircraftEntry:
    name: str
    aircraft_id: str | None = None
    variants: tuple[tuple[RollRange, "AircraftEntry"], ...] | None = None
    split: tuple[str, ...] = ()

    @property
    def has_variants(self) -> bool:
        return bool(self.variants)


AircraftMap = tuple[tuple[RollRange, AircraftEntry], ...]


@dataclass(frozen=True)
class NationEntry:
    name: str
    aircraft: AircraftMap


NationMap = tuple[tuple[RollRange, NationEntry], ...]
OrdnanceMap = tuple[tuple[RollRange, str], ...]


@dataclass(frozen=True)
class TaskingDefinition:
    name: str
    flight_count: int
    flight_size: int
    nations: NationMap | None = None
    nations_by_date: dict[str, NationMap] = field(default_factory=dict)
    aircraft: AircraftMap | None = None


@dataclass(frozen=True)
class FlightTemplate:
    """A predefined flight group inside a nationality package."""

    tasking: str
    flight_count: int
    flight_size: int
    aircraft: AircraftMap | None = None
    fixed: AircraftEntry | None = None
    by_hex: dict[HexType, AircraftEntry] = field(default_factory=dict)
    nationality: str | None = None


@dataclass(frozen=True)
class NationalityDefinition:
    code: str
    name: str
    flights: tuple[FlightTemplate, ...] = ()
    taskings: tuple[TaskingDefinition, ...] = ()
    ordnance_rolls: dict[str, OrdnanceMap] = field(default_factory=dict)


@dataclass(frozen=True)
class MissionDefinition:
    name: str
    flight_count: int
    flight_size: int
    nations: NationMap | None = None
    nation_data: dict[str, NationEntry] = field(default_factory=dict)


@dataclass(frozen=True)
class TableDefinition:
    table_id: str
    name: str
    faction: Faction
    flight_size: int = 2
    flight_count: int = 1
    raid_type: str | None = None
    nations: NationMap | None = None
    variants: dict[str, dict[str, NationMap]] = field(default_factory=dict)
    zones: dict[str, dict[str, NationMap]] = field(default_factory=dict)
    date_ranges: dict[str, NationMap] = field(default_factory=dict)
    taskings: tuple[TaskingDefinition, ...] = ()
    nationalities: dict[str, NationalityDefinition] = field(default_factory=dict)
    nationality_rolls: dict[str, tuple[tuple[RollRange, NationalityDefinition], ...]] = field(
        default_factory=dict
    )
    mission_types: dict[str, MissionDefinition] = field(default_factory=dict)
    ordnance_rolls: dict[str, OrdnanceMap] = field(default_factory=dict)
    nationality_aliases: dict[str, str] = field(default_factory=dict)
    nationality_patterns: dict[str, dict[str, tuple[str, ...]]] = field(default_factory=dict)
    default_nationalities: dict[str, str] = field(default_factory=dict)
    date_ordinals: dict[int, str] = field(default_factory=dict)
    requires: frozenset[str] = frozenset()
    notes: dict[str, str] = field(default_factory=dict)

    def tasking(self, name: str) -> TaskingDefinition | None:
        return next((t for t in self.taskings if t.name == name), None)


@dataclass(frozen=True)
class TableSet:
    """Both sides' tables for one game module."""

    module_id: str
    nato: dict[str, TableDefinition]
    wp: dict[str, TableDefinition]
    failures: dict[str, str] = field(default_factory=dict)

    def get(self, table_id: str) -> TableDefinition | None:
        return self.nato.get(table_id) or self.wp.get(table_id)

    def table_ids(self) -> list[str]:
        return [*self.nato, *self.wp]


# Legacy sentinel names in older table data, with their variant sub-rolls.
SENTINEL_GLYPHS = ("²", "¹")
SENTINEL_GROUPS: dict[str, dict[str, str]] = {
    "F-4²": {"1-5": "F-4D", "6-10": "F-4E"},
    "MiG-23²": {"1-4": "MiG-23M", "5-8": "MiG-23MF", "9-10": "MiG-23ML"},
    "MiG-23MF/ML¹": {"1-5": "MiG-23MF", "6-10": "MiG-23ML"},
    "MiG-25PD/Su-27S¹": {"1-5": "MiG-25PD", "6-10": "Su-27S"},
}


def load_table_set(
    module: str | ModuleConfig | None = None, data_dir: Path | None = None
) -> TableSet:
    """Load NATO and WP table definitions for a module.

    Tables that fail validation are left out and reported in ``failures``
    so that the rest of the module stays usable.
    """
    if not isinstance(module, ModuleConfig):
        module = ModuleCatalog.load(data_dir).get(module)
    failures: dict[str, str] = {}
    nato = _load_side(module, module.nato_tables, Faction.NATO, failures)
    wp = _load_side(module, module.wp_tables, Faction.WP, failures)
    return TableSet(module_id=module.module_id, nato=nato, wp=wp, failures=failures)


def load_table(
    table_id: str, raw: Any, faction: Faction, module: ModuleConfig | None = None
) -> TableDefinition:
    """Build a single definition from its JSON object."""
    return _load_table(table_id, raw, faction, module, where=f"table {table_id}")


def _load_side(
    module: ModuleConfig, path: Path, faction: Faction, failures: dict[str, str]
) -> dict[str, TableDefinition]:
    data = load_json(path)
    if "tables" not in data:
        raise TableDataError(f"{path}: missing 'tables' key")
    tables: dict[str, TableDefinition] = {}
    for table_id, raw in data["tables"].items():
        try:
            tables[table_id] = _load_table(table_id, raw, faction, module, where=f"{path.name}:{table_id}")
        except TableDataError as exc:
            logger.warning("Skipping table %s in module %s: %s", table_id, module.module_id, exc)
            failures[table_id] = str(exc)
    return tables


def _load_table(
    table_id: str, raw: Any, faction: Faction, module: ModuleConfig | None, where: str
) -> TableDefinition:
    if not isinstance(raw, dict):
        raise TableDataError(f"{where}: table entry must be object")
    requires = raw.get("requires", [])
    if not isinstance(requires, list) or any(r not in REQUIREMENTS for r in requires):
        raise TableDataError(f"{where}: requires must list known parameters")
    nationalities = {
        code: _load_nationality(code, item, f"{where}.nationalities.{code}")
        for code, item in _object(raw.get("nationalities", {}), f"{where}.nationalities").items()
    }
    date_ordinals: dict[int, str] = {}
    ordinal_name = raw.get("date_ordinals")
    if ordinal_name is not None:
        if module is None:
            raise TableDataError(f"{where}: date_ordinals need a module configuration")
        date_ordinals = module.ordinal_map(str(ordinal_name))

    return TableDefinition(
        table_id=table_id,
        name=str(raw.get("name", f"Table {table_id}")),
        faction=faction,
        flight_size=_positive(raw.get("flight_size", 2), f"{where}.flight_size"),
        flight_count=_positive(raw.get("flight_count", 1), f"{where}.flight_count"),
        raid_type=raw.get("raid_type"),
        nations=_nation_map(raw["nations"], f"{where}.nations") if "nations" in raw else None,
        variants=_zoned(raw.get("variants", {}), f"{where}.variants"),
        zones=_zoned(raw.get("zones", {}), f"{where}.zones"),
        date_ranges={
            date: _nation_map(nations, f"{where}.date_ranges.{date}")
            for date, nations in _object(raw.get("date_ranges", {}), f"{where}.date_ranges").items()
        },
        taskings=tuple(
            _load_tasking(name, item, f"{where}.taskings.{name}")
            for name, item in _object(raw.get("taskings", {}), f"{where}.taskings").items()
        ),
        nationalities=nationalities,
        nationality_rolls={
            date: _range_map(
                rolls, f"{where}.nationality_rolls.{date}",
                lambda item, w: _nationality_ref(item, nationalities, w),
            )
            for date, rolls in _object(raw.get("nationality_rolls", {}), f"{where}.nationality_rolls").items()
        },
        mission_types={
            name: _load_mission(name, item, f"{where}.mission_types.{name}")
            for name, item in _object(raw.get("mission_types", {}), f"{where}.mission_types").items()
        },
        ordnance_rolls=_ordnance_tables(raw.get("ordnance_rolls", {}), f"{where}.ordnance_rolls"),
        nationality_aliases=_strings(raw.get("nationality_aliases", {}), f"{where}.nationality_aliases"),
        nationality_patterns={
            composite: {
                nation: tuple(str(p) for p in patterns)
                for nation, patterns in _object(members, f"{where}.nationality_patterns.{composite}").items()
            }
            for composite, members in _object(
                raw.get("nationality_patterns", {}), f"{where}.nationality_patterns"
            ).items()
        },
        default_nationalities=_strings(raw.get("default_nationalities", {}), f"{where}.default_nationalities"),
        date_ordinals=date_ordinals,
        requires=frozenset(requires),
        notes=_strings(raw.get("notes", {}), f"{where}.notes"),
    )


def _object(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise TableDataError(f"{where} must be object")
    return value


def _strings(value: Any, where: str) -> dict[str, str]:
    return {str(k): str(v) for k, v in _object(value, where).items()}


def _positive(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise TableDataError(f"{where} must be a positive integer, got {value!r}")
    return value


def _range_map(raw: Any, where: str, load_entry) -> tuple:
    entries = tuple(
        (parse_range(key), load_entry(item, f"{where}[{key}]"))
        for key, item in _object(raw, where).items()
    )
    gaps = coverage_gaps(entries)
    if gaps:
        raise TableDataError(f"{where}: rolls {gaps} are not covered")
    doubled = overlaps(entries)
    if doubled:
        raise TableDataError(f"{where}: rolls {doubled} are covered more than once")
    return entries


def _load_aircraft_entry(raw: Any, where: str) -> AircraftEntry:
    if isinstance(raw, str):
        name = raw.strip()
        if any(glyph in name for glyph in SENTINEL_GLYPHS):
            return _sentinel_entry(name, where)
        return AircraftEntry(name=name)
    if not isinstance(raw, dict):
        raise TableDataError(f"{where}: aircraft entry must be string or object")
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise TableDataError(f"{where}: aircraft.name must be a non-empty string")
    if any(glyph in name for glyph in SENTINEL_GLYPHS):
        return _sentinel_entry(name.strip(), where, raw.get("aircraft_id"))
    variants = None
    if "variants" in raw:
        variants = _range_map(raw["variants"], f"{where}.variants", _load_aircraft_entry)
    split = raw.get("split", [])
    if not isinstance(split, list) or len(split) == 1 or not all(isinstance(s, str) for s in split):
        raise TableDataError(f"{where}: aircraft.split must list at least two airframes")
    aircraft_id = raw.get("aircraft_id")
    return AircraftEntry(
        name=name.strip(),
        aircraft_id=str(aircraft_id) if aircraft_id is not None else None,
        variants=variants,
        split=tuple(split),
    )


def _sentinel_entry(name: str, where: str, aircraft_id: Any = None) -> AircraftEntry:
    if name not in SENTINEL_GROUPS:
        raise TableDataError(f"{where}: unknown variant group '{name}'")
    variants = _range_map(SENTINEL_GROUPS[name], f"{where}.variants", _load_aircraft_entry)
    return AircraftEntry(
        name=name,
        aircraft_id=str(aircraft_id) if aircraft_id is not None else None,
        variants=variants,
    )


def _aircraft_map(raw: Any, where: str) -> AircraftMap:
    return _range_map(raw, where, _load_aircraft_entry)


def _load_nation(raw: Any, where: str) -> NationEntry:
    if not isinstance(raw, dict):
        raise TableDataError(f"{where}: nation entry must be object")
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise TableDataError(f"{where}: nation.name must be string")
    if "aircraft" not in raw:
        raise TableDataError(f"{where}: nation '{name}' has no aircraft table")
    return NationEntry(name=name, aircraft=_aircraft_map(raw["aircraft"], f"{where}.aircraft"))


def _nation_map(raw: Any, where: str) -> NationMap:
    return _range_map(raw, where, _load_nation)


def _zoned(raw: Any, where: str) -> dict[str, dict[str, NationMap]]:
    return {
        zone: {
            date: _nation_map(nations, f"{where}.{zone}.{date}")
            for date, nations in _object(dates, f"{where}.{zone}").items()
        }
        for zone, dates in _object(raw, where).items()
    }


def _load_tasking(name: str, raw: Any, where: str) -> TaskingDefinition:
    raw = _object(raw, where)
    sources = [key for key in ("nations", "nations_by_date", "aircraft") if key in raw]
    if len(sources) != 1:
        raise TableDataError(f"{where}: tasking needs exactly one of nations, nations_by_date, aircraft")
    return TaskingDefinition(
        name=name,
        flight_count=_positive(raw.get("flight_count", 1), f"{where}.flight_count"),
        flight_size=_positive(raw.get("flight_size", 2), f"{where}.flight_size"),
        nations=_nation_map(raw["nations"], f"{where}.nations") if "nations" in raw else None,
        nations_by_date={
            date: _nation_map(nations, f"{where}.nations_by_date.{date}")
            for date, nations in _object(raw.get("nations_by_date", {}), f"{where}.nations_by_date").items()
        },
        aircraft=_aircraft_map(raw["aircraft"], f"{where}.aircraft") if "aircraft" in raw else None,
    )


def _load_flight(raw: Any, where: str) -> FlightTemplate:
    raw = _object(raw, where)
    tasking = raw.get("type")
    if not isinstance(tasking, str) or not tasking:
        raise TableDataError(f"{where}: flight.type must be string")
    aircraft = raw.get("aircraft")
    rolled: AircraftMap | None = None
    fixed: AircraftEntry | None = None
    by_hex: dict[HexType, AircraftEntry] = {}
    if isinstance(aircraft, dict) and aircraft and set(aircraft) <= {h.value for h in HexType}:
        by_hex = {HexType(k): _load_aircraft_entry(v, f"{where}.aircraft.{k}") for k, v in aircraft.items()}
    elif isinstance(aircraft, dict) and "name" not in aircraft:
        rolled = _aircraft_map(aircraft, f"{where}.aircraft")
    elif aircraft is not None:
        fixed = _load_aircraft_entry(aircraft, f"{where}.aircraft")
    else:
        raise TableDataError(f"{where}: flight has no aircraft")
    nationality = raw.get("nationality")
    return FlightTemplate(
        tasking=tasking,
        flight_count=_positive(raw.get("flight_count", 1), f"{where}.flight_count"),
        flight_size=_positive(raw.get("flight_size", 2), f"{where}.flight_size"),
        aircraft=rolled,
        fixed=fixed,
        by_hex=by_hex,
        nationality=str(nationality) if nationality else None,
    )


def _load_nationality(code: str, raw: Any, where: str) -> NationalityDefinition:
    raw = _object(raw, where)
    flights = raw.get("flights", [])
    if not isinstance(flights, list):
        raise TableDataError(f"{where}.flights must be array")
    return NationalityDefinition(
        code=str(raw.get("nationality", code)),
        name=str(raw.get("name", code)),
        flights=tuple(_load_flight(item, f"{where}.flights[{i}]") for i, item in enumerate(flights)),
        taskings=tuple(
            _load_tasking(name, item, f"{where}.taskings.{name}")
            for name, item in _object(raw.get("taskings", {}), f"{where}.taskings").items()
        ),
        ordnance_rolls=_ordnance_tables(raw.get("ordnance_rolls", {}), f"{where}.ordnance_rolls"),
    )


def _nationality_ref(
    raw: Any, nationalities: dict[str, NationalityDefinition], where: str
) -> NationalityDefinition:
    if isinstance(raw, str):
        if raw not in nationalities:
            raise TableDataError(f"{where}: unknown nationality '{raw}'")
        return nationalities[raw]
    raw = _object(raw, where)
    code = raw.get("nationality")
    if not isinstance(code, str) or not code:
        raise TableDataError(f"{where}: nationality package needs a nationality code")
    return _load_nationality(code, raw, where)


def _load_mission(name: str, raw: Any, where: str) -> MissionDefinition:
    raw = _object(raw, where)
    if "nations" not in raw and "nation_data" not in raw:
        raise TableDataError(f"{where}: mission needs nations or nation_data")
    return MissionDefinition(
        name=name,
        flight_count=_positive(raw.get("flight_count", 1), f"{where}.flight_count"),
        flight_size=_positive(raw.get("flight_size", 2), f"{where}.flight_size"),
        nations=_nation_map(raw["nations"], f"{where}.nations") if "nations" in raw else None,
        nation_data={
            nation: NationEntry(
                name=nation,
                aircraft=_aircraft_map(
                    _object(item, f"{where}.nation_data.{nation}").get("aircraft", {}),
                    f"{where}.nation_data.{nation}.aircraft",
                ),
            )
            for nation, item in _object(raw.get("nation_data", {}), f"{where}.nation_data").items()
        },
    )


def _ordnance_tables(raw: Any, where: str) -> dict[str, OrdnanceMap]:
    def _descriptor(item: Any, w: str) -> str:
        if not isinstance(item, str) or not item:
            raise TableDataError(f"{w}: ordnance descriptor must be string")
        return item

    return {
        tasking: _range_map(rolls, f"{where}.{tasking}", _descriptor)
        for tasking, rolls in _object(raw, where).items()
    }
