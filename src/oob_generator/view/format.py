from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from oob_generator.domain.flights import FlightRecord
from oob_generator.domain.results import TRACE_SEPARATOR, TraceEntry
from oob_generator.domain.types import AIR_TO_AIR, NO_ORDNANCE

LINE_SEPARATOR = "\n"
HIDDEN_ORDNANCE = frozenset({AIR_TO_AIR, NO_ORDNANCE})


def size(flight: FlightRecord) -> str:
    return f"{{{flight.flight_size}}}"


def ordnance_suffix(flight: FlightRecord) -> str:
    if not flight.ordnance or flight.ordnance in HIDDEN_ORDNANCE:
        return ""
    return f" ({flight.ordnance})"


def nation_line(flight: FlightRecord) -> str:
    """``USSR: 1 x {4} MiG-29A, CAP``"""
    return (
        f"{flight.nationality}: {flight.flight_count} x {size(flight)} "
        f"{flight.aircraft_type}, {flight.tasking}"
    )


def raid_line(flight: FlightRecord) -> str:
    """``4 x {2} US F-15C, CAP`` with the ordnance in parentheses when rolled."""
    return (
        f"{flight.flight_count} x {size(flight)} {flight.nationality} "
        f"{flight.aircraft_type}, {flight.tasking}{ordnance_suffix(flight)}"
    )


def bare_line(flight: FlightRecord) -> str:
    return f"{flight.flight_count} x {size(flight)} {flight.aircraft_type}, {flight.tasking}"


def slot_line(flight: FlightRecord, slot: str) -> str:
    """``1 x 2 [QRA], CAP (UK: Tornado F3)``"""
    return (
        f"{flight.flight_count} x {flight.flight_size} [{slot}], {flight.tasking} "
        f"({flight.nationality}: {flight.aircraft_type})"
    )


def mission_line(flight: FlightRecord) -> str:
    return (
        f"{flight.flight_count} x {flight.flight_size} {flight.tasking} "
        f"({flight.nationality}: {flight.aircraft_type})"
    )


def package_lines(
    header: str,
    flights: Sequence[FlightRecord],
    displays: Mapping[str, str] | None = None,
) -> list[str]:
    """Header, then one block per tasking and flight size listing each aircraft group."""
    displays = displays or {}
    lines = [header]
    blocks: list[tuple[str, int]] = []
    for flight in flights:
        if (flight.tasking, flight.flight_size) not in blocks:
            blocks.append((flight.tasking, flight.flight_size))
    for tasking, flight_size in blocks:
        members = [f for f in flights if (f.tasking, f.flight_size) == (tasking, flight_size)]
        total = sum(f.flight_count for f in members)
        lines.append("")
        lines.append(f"{total} x {{{flight_size}}} [{displays.get(tasking, tasking)}], {tasking}")
        for flight in members:
            count = f"{flight.flight_count} x " if flight.flight_count > 1 else ""
            lines.append(f"{flight.nationality}: {count}{flight.aircraft_type}{ordnance_suffix(flight)}")
    return lines


def join_lines(lines: Iterable[str]) -> str:
    return LINE_SEPARATOR.join(lines)


def render_trace(trace: Iterable[TraceEntry]) -> str:
    return TRACE_SEPARATOR.join(entry.render() for entry in trace)
