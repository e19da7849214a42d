"""Game module catalog: data files and scenario date ordinals."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from oob_generator.systems.ranges import TableDataError

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[1] / "data"


@dataclass(frozen=True)
class ModuleConfig:
    """One game module (Red Storm, Baltic Approaches)."""

    module_id: str
    name: str
    data_dir: Path
    nato_tables: Path
    wp_tables: Path
    aircraft_files: tuple[Path, ...]
    scenario_dates: tuple[str, ...]
    date_ordinals: dict[str, dict[int, str]]

    def ordinal_map(self, name: str) -> dict[int, str]:
        if name not in self.date_ordinals:
            raise TableDataError(f"Module {self.module_id}: unknown date ordinal map '{name}'")
        return self.date_ordinals[name]


@dataclass(frozen=True)
class ModuleCatalog:
    default_module: str
    modules: dict[str, ModuleConfig]

    def get(self, module_id: str | None = None) -> ModuleConfig:
        key = module_id or self.default_module
        key = key.replace("-", "_")
        if key not in self.modules:
            known = ", ".join(sorted(self.modules))
            raise TableDataError(f"Unknown game module '{module_id}' (known: {known})")
        return self.modules[key]

    @staticmethod
    def load(data_dir: Path | None = None) -> "ModuleCatalog":
        if data_dir is None:
            data_dir = DEFAULT_DATA_DIR
        path = data_dir / "modules.json"
        data = load_json(path)
        if "modules" not in data:
            raise TableDataError(f"{path}: missing 'modules' key")
        ordinals = _load_ordinals(path, data.get("date_ordinals", {}))
        modules: dict[str, ModuleConfig] = {}
        for module_id, item in data["modules"].items():
            if not isinstance(item, dict):
                raise TableDataError(f"{path}: module '{module_id}' must be object")
            for key in ("nato_tables", "wp_tables"):
                if not isinstance(item.get(key), str):
                    raise TableDataError(f"{path}: module '{module_id}'.{key} must be string")
            aircraft_files = item.get("aircraft", [])
            if not isinstance(aircraft_files, list):
                raise TableDataError(f"{path}: module '{module_id}'.aircraft must be array")
            modules[module_id] = ModuleConfig(
                module_id=module_id,
                name=str(item.get("name", module_id)),
                data_dir=data_dir,
                nato_tables=data_dir / item["nato_tables"],
                wp_tables=data_dir / item["wp_tables"],
                aircraft_files=tuple(data_dir / str(name) for name in aircraft_files),
                scenario_dates=tuple(str(d) for d in item.get("scenario_dates", [])),
                date_ordinals=ordinals,
            )
        default_module = str(data.get("default", next(iter(modules), "")))
        if default_module not in modules:
            raise TableDataError(f"{path}: default module '{default_module}' is not defined")
        return ModuleCatalog(default_module=default_module, modules=modules)


def load_json(path: Path) -> dict[str, Any]:
    """Load JSON file."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        raise TableDataError(f"Data file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise TableDataError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TableDataError(f"{path}: top level must be object")
    return data


def _load_ordinals(path: Path, raw: Any) -> dict[str, dict[int, str]]:
    if not isinstance(raw, dict):
        raise TableDataError(f"{path}: date_ordinals must be object")
    ordinals: dict[str, dict[int, str]] = {}
    for name, mapping in raw.items():
        if not isinstance(mapping, dict):
            raise TableDataError(f"{path}: date_ordinals.{name} must be object")
        try:
            ordinals[name] = {int(k): str(v) for k, v in mapping.items()}
        except ValueError as exc:
            raise TableDataError(f"{path}: date_ordinals.{name} keys must be integers") from exc
    return ordinals
