"""Parameter bag accepted by the engine entry point."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

from oob_generator.domain.types import HexType


class ParameterError(ValueError):
    """Missing or semantically invalid table parameter."""


_ALIASES = {
    "scenarioDate": "scenario_date",
    "missionType": "mission_type",
    "hexType": "hex_type",
    "atafZone": "ataf_zone",
    "tacticalReconNation": "tactical_recon_nation",
}


@dataclass(frozen=True)
class ParamBag:
    scenario_date: str | int | None = None
    nationality: str | None = None
    mission_type: str | None = None
    hex_type: HexType | None = None
    ataf_zone: str | None = None
    tactical_recon_nation: str | None = None

    @staticmethod
    def from_mapping(raw: Mapping[str, Any] | None) -> "ParamBag":
        if raw is None:
            return ParamBag()
        known = {f.name for f in fields(ParamBag)}
        values: dict[str, Any] = {}
        for key, value in raw.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ParameterError(f"Unrecognized parameter '{key}'")
            if value is None or value == "":
                continue
            values[name] = value

        scenario_date = values.get("scenario_date")
        if scenario_date is not None:
            if isinstance(scenario_date, bool) or not isinstance(scenario_date, (str, int)):
                raise ParameterError(f"scenarioDate must be a string or ordinal, got {scenario_date!r}")
            if isinstance(scenario_date, str) and scenario_date.strip().isdigit():
                values["scenario_date"] = int(scenario_date.strip())

        hex_type = values.get("hex_type")
        if hex_type is not None:
            try:
                values["hex_type"] = HexType(str(hex_type).lower())
            except ValueError as exc:
                raise ParameterError(f"hexType must be 'land' or 'sea', got {hex_type!r}") from exc

        for name in ("nationality", "mission_type", "ataf_zone", "tactical_recon_nation"):
            if name in values:
                if not isinstance(values[name], str):
                    raise ParameterError(f"{name} must be a string, got {values[name]!r}")
                values[name] = values[name].strip()
        return ParamBag(**values)

    def require(self, name: str, table_id: str) -> Any:
        value = getattr(self, name)
        if value is None:
            label = next((k for k, v in _ALIASES.items() if v == name), name)
            raise ParameterError(f"{label} is required for Table {table_id}")
        return value
