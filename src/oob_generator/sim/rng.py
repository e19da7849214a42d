from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from typing import Iterable, Protocol

from oob_generator.domain.results import TraceEntry
from oob_generator.domain.types import DIE_SIDES


def derive_seed(base_seed: int, *, stream: str, purpose: str = "roll") -> int:
    payload = f"{base_seed}|{stream}|{purpose}".encode("utf-8")
    digest = hashlib.blake2b(payload, digest_size=8).digest()
    return int.from_bytes(digest, "big")


class RollExhaustedError(RuntimeError):
    """A stub roll engine ran out of scripted values."""


@dataclass(frozen=True)
class Roll:
    value: int
    entry: TraceEntry


class RollEngine(Protocol):
    def roll(self, sides: int, label: str) -> Roll: ...


def _check_sides(sides: int) -> None:
    if sides < 1:
        raise ValueError(f"Die must have at least one side, got {sides}")


class RandomRollEngine:
    """Uniform d-N rolls backed by ``random.Random``."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    @classmethod
    def from_seed(cls, seed: int, *, stream: str = "oob") -> "RandomRollEngine":
        return cls(random.Random(derive_seed(seed, stream=stream)))

    def roll(self, sides: int = DIE_SIDES, label: str = "Roll") -> Roll:
        _check_sides(sides)
        value = self._rng.randint(1, sides)
        return Roll(value=value, entry=TraceEntry(label, value))


class SequenceRollEngine:
    """Scripted rolls for tests; consumes ``values`` in order."""

    def __init__(self, values: Iterable[int]) -> None:
        self._values = list(values)
        self._index = 0

    @property
    def consumed(self) -> int:
        return self._index

    @property
    def remaining(self) -> int:
        return len(self._values) - self._index

    def roll(self, sides: int = DIE_SIDES, label: str = "Roll") -> Roll:
        _check_sides(sides)
        if self._index >= len(self._values):
            raise RollExhaustedError(f"No scripted roll left for '{label}'")
        value = self._values[self._index]
        if not 1 <= value <= sides:
            raise ValueError(f"Scripted roll {value} for '{label}' is outside 1-{sides}")
        self._index += 1
        return Roll(value=value, entry=TraceEntry(label, value))


class FixedRollEngine:
    def __init__(self, value: int) -> None:
        self._value = value

    def roll(self, sides: int = DIE_SIDES, label: str = "Roll") -> Roll:
        _check_sides(sides)
        value = min(self._value, sides)
        if value < 1:
            raise ValueError(f"Fixed roll {self._value} is below 1")
        return Roll(value=value, entry=TraceEntry(label, value))
