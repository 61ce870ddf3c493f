"""Command line entry point for the traffic signal network simulation."""

from __future__ import annotations

import argparse
import logging
import time

from signal_network import SimulationConfig, TrafficSystem

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--ticks", type=int, default=20, help="Number of ticks to simulate (0 runs until interrupted)")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible runs")
    parser.add_argument("--tick-ms", type=int, default=500, help="Tick interval in milliseconds")
    parser.add_argument("--min-green", type=int, default=5)
    parser.add_argument("--max-green", type=int, default=30)
    parser.add_argument("--emergency-green", type=int, default=25)
    parser.add_argument("--cycle", type=int, default=45, help="Base signal cycle in seconds")
    parser.add_argument("--realtime", action="store_true", help="Sleep one tick interval between ticks")
    parser.add_argument("--emergencies", type=int, default=0, help="Emergency vehicles injected before the run")
    parser.add_argument("--path", nargs=2, metavar=("START", "END"), help="Route to compute after the run")
    parser.add_argument("--avoid-congested", action="store_true", help="Skip intersections above the congestion threshold")
    parser.add_argument("--verbose", action="store_true", help="Log every tick")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = SimulationConfig(
            tick_interval_ms=args.tick_ms,
            min_green=args.min_green,
            max_green=args.max_green,
            emergency_green=args.emergency_green,
            base_cycle=args.cycle,
            seed=args.seed,
        )
    except ValueError as exc:
        parser.error(str(exc))

    system = TrafficSystem(config)
    system.initialize()
    for _ in range(args.emergencies):
        system.add_emergency_vehicle()

    executed = system.run(
        max_ticks=args.ticks or None,
        sleep_func=time.sleep if args.realtime else None,
    )
    summary = system.summary()
    logger.info(
        "Ran %d ticks: %d queued, %d processed, %d emergency intersection(s), congestion %.1f%%",
        executed,
        summary.total_vehicles,
        summary.total_processed,
        summary.emergency_intersections,
        summary.average_congestion,
    )
    for snapshot in system.snapshots().values():
        print(
            f"{snapshot.id}: green {snapshot.active_direction} ({snapshot.active_duration}s) "
            f"queued={snapshot.total_vehicles} processed={snapshot.processed_count} "
            f"congestion={snapshot.congestion_level:.1f}% [{snapshot.congestion_band}]"
            + (" EMERGENCY" if snapshot.has_emergency else "")
        )

    if args.path:
        start, end = args.path
        route = system.find_path(start, end, args.avoid_congested)
        if route:
            print("Shortest path: " + " -> ".join(route))
        else:
            print(f"No path found between {start} and {end}.")
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
