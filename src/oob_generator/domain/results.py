"""Resolution results and roll traces."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from oob_generator.domain.flights import FlightRecord
from oob_generator.domain.types import Faction

TRACE_SEPARATOR = " | "


@dataclass(frozen=True)
class TraceEntry:
    label: str
    value: int | str

    def render(self) -> str:
        return f"{self.label}: {self.value}"


@dataclass(frozen=True)
class Result:
    text: str
    flights: tuple[FlightRecord, ...] = ()
    trace: tuple[TraceEntry, ...] = ()
    error: str | None = None
    table_id: str = ""
    faction: Faction | None = None
    raid_type: str | None = None
    notes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def debug_trace(self) -> list[str]:
        return [entry.render() for entry in self.trace]

    @property
    def debug_text(self) -> str:
        return TRACE_SEPARATOR.join(self.debug_trace)

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n") if self.text else []

    @staticmethod
    def failure(
        message: str,
        *,
        table_id: str = "",
        trace: Iterable[TraceEntry] = (),
        faction: Faction | None = None,
    ) -> "Result":
        return Result(
            text=f"Error: {message}",
            flights=(),
            trace=tuple(trace),
            error=message,
            table_id=table_id,
            faction=faction,
        )
