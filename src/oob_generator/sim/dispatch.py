"""Table identifier to strategy dispatch.

Strategies raise; the processor turns their errors into failed ``Result``
values the same way the action reducer turns rule errors into failed action
results. ``process`` never raises for parameter, roll or table errors.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Mapping

from oob_generator.domain.params import ParamBag
from oob_generator.domain.results import Result
from oob_generator.rules.aircraft import AircraftReference
from oob_generator.rules.modules import ModuleCatalog
from oob_generator.rules.tables import TableDefinition, TableSet, load_table_set
from oob_generator.sim.rng import RandomRollEngine, RollEngine, RollExhaustedError
from oob_generator.systems.common import ResolutionContext
from oob_generator.systems.nato_tables import NATO_STRATEGIES
from oob_generator.systems.ranges import UnresolvedRollError
from oob_generator.systems.wp_tables import WP_STRATEGIES

logger = logging.getLogger(__name__)

Strategy = Callable[[ResolutionContext], Result]

STRATEGIES: dict[str, Strategy] = {**NATO_STRATEGIES, **WP_STRATEGIES}


class UnknownTableError(ValueError):
    """No strategy or no loaded definition for a table identifier."""


class TableProcessor:
    """Runs one table's strategy against a parameter bag."""

    def __init__(
        self,
        table: TableDefinition,
        strategy: Strategy,
        roller: RollEngine,
        reference: AircraftReference | None = None,
    ) -> None:
        self.table = table
        self.strategy = strategy
        self.roller = roller
        self.reference = reference

    @property
    def table_id(self) -> str:
        return self.table.table_id

    def process(self, params: ParamBag | Mapping[str, Any] | None = None) -> Result:
        def fail(message: str, trace=()) -> Result:
            logger.info("Table %s failed: %s", self.table_id, message)
            return Result.failure(message, table_id=self.table_id, trace=trace, faction=self.table.faction)

        try:
            bag = params if isinstance(params, ParamBag) else ParamBag.from_mapping(params)
        except ValueError as exc:
            return fail(str(exc))

        ctx = ResolutionContext(table=self.table, params=bag, roller=self.roller, reference=self.reference)
        try:
            return self.strategy(ctx)
        except UnresolvedRollError as exc:
            return fail(str(exc), ctx.log.entries + exc.trace)
        except (ValueError, RollExhaustedError) as exc:
            return fail(str(exc), ctx.log.entries)


class TableProcessorFactory:
    """Lazily builds and caches one processor per table identifier."""

    def __init__(
        self,
        table_set: TableSet,
        aircraft_ref: AircraftReference | None = None,
        roller: RollEngine | None = None,
        strategies: Mapping[str, Strategy] = STRATEGIES,
    ) -> None:
        self.table_set = table_set
        self.aircraft_ref = aircraft_ref
        self.roller = roller if roller is not None else RandomRollEngine()
        self.strategies = dict(strategies)
        self._cache: dict[str, TableProcessor] = {}

    def get_processor(self, table_id: str) -> TableProcessor:
        cached = self._cache.get(table_id)
        if cached is not None:
            return cached
        strategy = self.strategies.get(table_id)
        if strategy is None:
            raise UnknownTableError(f"Unknown table '{table_id}'")
        table = self.table_set.get(table_id)
        if table is None:
            failure = self.table_set.failures.get(table_id)
            if failure is not None:
                raise UnknownTableError(f"Table {table_id} failed to load: {failure}")
            raise UnknownTableError(
                f"Table {table_id} is not defined in module {self.table_set.module_id}"
            )
        processor = TableProcessor(table, strategy, self.roller, self.aircraft_ref)
        logger.debug("Built processor for table %s (%s)", table_id, table.faction.value)
        self._cache[table_id] = processor
        return processor

    def process(self, table_id: str, params: ParamBag | Mapping[str, Any] | None = None) -> Result:
        try:
            processor = self.get_processor(table_id)
        except UnknownTableError as exc:
            logger.info("Table %s unavailable: %s", table_id, exc)
            return Result.failure(str(exc), table_id=table_id)
        return processor.process(params)

    def clear_cache(self) -> None:
        self._cache.clear()

    def available_tables(self) -> list[str]:
        return [table_id for table_id in self.table_set.table_ids() if table_id in self.strategies]


@lru_cache(maxsize=None)
def _module_data(module: str | None, data_dir: Path | None) -> tuple[TableSet, AircraftReference]:
    config = ModuleCatalog.load(data_dir).get(module)
    return load_table_set(config), AircraftReference.for_module(config)


def factory_for(
    module: str | None = None,
    *,
    roller: RollEngine | None = None,
    seed: int | None = None,
    data_dir: Path | None = None,
) -> TableProcessorFactory:
    """Factory over a shipped game module."""
    if roller is None and seed is not None:
        roller = RandomRollEngine.from_seed(seed)
    table_set, reference = _module_data(module, data_dir)
    return TableProcessorFactory(table_set, reference, roller)


def process(
    table_id: str,
    params: ParamBag | Mapping[str, Any] | None = None,
    *,
    module: str | None = None,
    roller: RollEngine | None = None,
    seed: int | None = None,
    data_dir: Path | None = None,
) -> Result:
    """Resolve ``table_id`` once and return its Result."""
    try:
        factory = factory_for(module, roller=roller, seed=seed, data_dir=data_dir)
    except ValueError as exc:
        logger.info("Module %s unavailable: %s", module, exc)
        return Result.failure(str(exc), table_id=table_id)
    return factory.process(table_id, params)
