"""Aircraft reference: tolerant display-name lookup to home nation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from oob_generator.rules.modules import ModuleConfig, load_json
from oob_generator.systems.ranges import TableDataError

_MARKUP = re.compile(r"<[^>]+>")
_SPACES = re.compile(r"\s{2,}")
_TRAILING_PAREN = re.compile(r"\s*\([^)]*\)$")
_NATION_PREFIX = re.compile(r"^[A-Z]{2,4}\s+")
_CODE_SUFFIX = re.compile(r"\(([A-Z]{2,4})\)$")


@dataclass(frozen=True)
class AircraftRecord:
    name: str
    nation: str
    aircraft_id: str | None = None
    role: str | None = None


def normalize_name(name: str) -> str:
    """Strip markup, trim and collapse runs of whitespace."""
    return _SPACES.sub(" ", _MARKUP.sub("", name).strip())


def name_variants(name: str) -> list[str]:
    """Lookup keys for ``name`` in the order they are tried."""
    base = normalize_name(name)
    dashed = base.replace(".", "-")
    unprefixed = _NATION_PREFIX.sub("", base)
    candidates = [
        base,
        _TRAILING_PAREN.sub("", base).strip(),
        dashed,
        _TRAILING_PAREN.sub("", dashed).strip(),
        unprefixed,
        _TRAILING_PAREN.sub("", unprefixed).strip(),
    ]
    seen: list[str] = []
    for key in candidates:
        if key and key not in seen:
            seen.append(key)
    return seen


def trailing_code(name: str) -> str | None:
    """Nation code from a trailing ``(CODE)`` suffix, if any."""
    match = _CODE_SUFFIX.search(normalize_name(name))
    return match.group(1) if match else None


class AircraftReference:
    """Keyed lookup over the aircraft databases of a module."""

    def __init__(self, records: Iterable[AircraftRecord] = ()) -> None:
        self._records: dict[str, AircraftRecord] = {}
        for record in records:
            self._records[normalize_name(record.name)] = record

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def lookup(self, name: str | None) -> AircraftRecord | None:
        if not name:
            return None
        for key in name_variants(name):
            record = self._records.get(key)
            if record is not None:
                return record
        return None

    def home_nation(self, name: str | None) -> str | None:
        record = self.lookup(name)
        return record.nation if record is not None else None

    @staticmethod
    def load(paths: Iterable[Path]) -> "AircraftReference":
        records: list[AircraftRecord] = []
        for path in paths:
            records.extend(_load_records(path))
        return AircraftReference(records)

    @staticmethod
    def for_module(module: ModuleConfig) -> "AircraftReference":
        return AircraftReference.load(module.aircraft_files)


def _load_records(path: Path) -> list[AircraftRecord]:
    data = load_json(path)
    if "aircraft" not in data:
        raise TableDataError(f"{path}: missing 'aircraft' key")
    raw: Any = data["aircraft"]
    if not isinstance(raw, dict):
        raise TableDataError(f"{path}: aircraft must be object")
    records: list[AircraftRecord] = []
    for name, item in raw.items():
        if not isinstance(item, dict):
            raise TableDataError(f"{path}: aircraft '{name}' must be object")
        nation = item.get("nation")
        if not isinstance(nation, str) or not nation:
            raise TableDataError(f"{path}: aircraft '{name}'.nation must be string")
        aircraft_id = item.get("aircraft_id")
        role = item.get("role")
        records.append(
            AircraftRecord(
                name=name,
                nation=nation,
                aircraft_id=str(aircraft_id) if aircraft_id is not None else None,
                role=str(role) if role is not None else None,
            )
        )
    return records
