from __future__ import annotations

import argparse
import logging
import sys

from oob_generator.sim.dispatch import factory_for
from oob_generator.view.format import render_trace

PARAM_FLAGS = {
    "scenario_date": "scenarioDate",
    "nationality": "nationality",
    "mission_type": "missionType",
    "hex_type": "hexType",
    "ataf_zone": "atafZone",
    "tactical_recon_nation": "tacticalReconNation",
}


def _parse_param(text: str) -> tuple[str, str]:
    key, sep, value = text.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got '{text}'")
    return key.strip(), value.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oob-generator",
        description="Roll order-of-battle tables for Red Storm and Baltic Approaches.",
    )
    parser.add_argument("--module", default=None, help="Game module (default: from modules.json).")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING).")
    sub = parser.add_subparsers(dest="command", required=True)

    roll = sub.add_parser("roll", help="Resolve one table.")
    roll.add_argument("table", help="Table identifier, e.g. G or D3.")
    roll.add_argument("--seed", type=int, default=None, help="Seed for reproducible rolls.")
    roll.add_argument("--debug", action="store_true", help="Print the roll trace.")
    roll.add_argument(
        "--param",
        action="append",
        type=_parse_param,
        default=[],
        metavar="KEY=VALUE",
        help="Extra table parameter; may repeat.",
    )
    for dest, key in PARAM_FLAGS.items():
        roll.add_argument(f"--{dest.replace('_', '-')}", dest=dest, default=None, help=f"Sets {key}.")

    sub.add_parser("tables", help="List the tables of a module.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        factory = factory_for(args.module, seed=getattr(args, "seed", None))
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if args.command == "tables":
        for table_id in factory.available_tables():
            table = factory.table_set.get(table_id)
            print(f"{table_id}\t{table.faction.value}\t{table.name}")
        for table_id, message in factory.table_set.failures.items():
            print(f"{table_id}\tfailed\t{message}", file=sys.stderr)
        return 0

    params: dict[str, str] = dict(args.param)
    for dest, key in PARAM_FLAGS.items():
        value = getattr(args, dest)
        if value is not None:
            params[key] = value

    result = factory.process(args.table, params)
    print(result.text)
    if args.debug and result.trace:
        print(f"Trace: {render_trace(result.trace)}")
    return 0 if result.ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
