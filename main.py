#!/usr/bin/env python3
# grid-dispatch/main.py
"""
Command-Line Interface for the Grid Dispatch driver registry.

Without data files this replays the reference scenario on a 10x10 map:
four drivers, one order at (4, 5), nearest and 3-nearest queries, a
relocation and an availability change. With --drivers/--orders it loads a
fleet from CSV and answers every order.

Usage:
    python main.py                                      # Reference scenario
    python main.py --drivers data/drivers.csv --orders data/orders.csv
    python main.py --strategy sort --k 3                # Pick the algorithm
    python main.py --show-map --verbose                 # Occupancy map + debug logs

Exit Codes:
    0: Success
    1: Data loading error
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from grid_dispatch import config, utils
from grid_dispatch.dispatch import DispatchEngine
from grid_dispatch.fleet import load_drivers, load_orders, populate_registry
from grid_dispatch.models import Order, Point
from grid_dispatch.registry import DriverRegistry
from grid_dispatch.selection import SelectionStrategy

AVAILABLE_STRATEGIES = [s.value for s in SelectionStrategy]


def print_header() -> None:
    """Print the CLI header."""
    print("\n" + "=" * 60)
    print("  GRID DISPATCH - Nearest Driver Matching")
    print("  Manhattan-distance k-nearest queries")
    print("=" * 60 + "\n")


def print_nearest(engine: DispatchEngine, order: Order, k: int, strategy: str) -> None:
    """Print the nearest driver and the k nearest drivers for an order."""
    nearest = engine.find_nearest(order, strategy)
    if nearest is None:
        print(f"No driver found for {order}")
    else:
        print(f"Nearest driver for {order}: {utils.format_driver(nearest, order.pickup_location)}")

    if k > 1:
        ranked = engine.find_k_nearest(order, k, strategy)
        print(f"{k} nearest drivers for {order}:")
        for driver in ranked:
            print(f"  {utils.format_driver(driver, order.pickup_location)}")
        if not ranked:
            print("  (none)")


def print_map(registry: DriverRegistry) -> None:
    print(f"\nOccupancy map ({registry.width}x{registry.height}):")
    print(utils.render_occupancy_map(registry.width, registry.height, registry.occupied_cells()))


def run_reference_scenario(k: int, strategy: str, show_map: bool) -> int:
    """Replay the 10x10 demo scenario."""
    registry = DriverRegistry(config.DEFAULT_GRID_WIDTH, config.DEFAULT_GRID_HEIGHT)
    engine = DispatchEngine(registry, strategy)

    registry.add("D001", Point(2, 3))
    registry.add("D002", Point(5, 7))
    registry.add("D003", Point(8, 1))
    registry.add("D004", Point(1, 8))

    order = Order("O001", Point(4, 5))
    print(f"\nCreated {order}")
    print_nearest(engine, order, k, strategy)

    print()
    print(utils.format_drivers(registry.snapshot(), registry.width, registry.height))
    if show_map:
        print_map(registry)

    print("\n--- Location update ---")
    registry.relocate("D001", Point(3, 4))
    print_nearest(engine, order, 1, strategy)

    print("\n--- Availability change ---")
    registry.set_availability("D002", False)
    print_nearest(engine, order, 1, strategy)

    registry.set_availability("D002", True)
    return 0


def run_from_files(
    driver_file: str,
    order_file: Optional[str],
    width: int,
    height: int,
    k: int,
    strategy: str,
    show_map: bool,
) -> int:
    """Load a fleet (and optionally orders) from CSV and answer every order."""
    try:
        drivers = load_drivers(driver_file)
        orders: List[Order] = load_orders(order_file) if order_file else []
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: Failed to load data: {e}")
        return 1

    registry = DriverRegistry(width, height)
    engine = DispatchEngine(registry, strategy)

    rejected = populate_registry(registry, drivers)
    print(f"Loaded {registry.count()} drivers and {len(orders)} orders onto a {width}x{height} map")
    for driver_id, status in rejected:
        print(f"  WARN: driver {driver_id} rejected: {status.value}")

    if show_map:
        print_map(registry)

    for order in orders:
        print()
        print_nearest(engine, order, k, strategy)

    return 0


def main() -> int:
    """
    Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = argparse.ArgumentParser(
        description="Grid Dispatch nearest-driver CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                    # Reference scenario
  python main.py --drivers drivers.csv --orders orders.csv --width 50 --height 50
  python main.py --strategy ordered_set --k 3       # Use another algorithm
        """
    )

    parser.add_argument(
        "--drivers",
        type=str,
        default=None,
        help="Drivers CSV (driver_id,x,y[,is_available]). Omit to run the reference scenario."
    )

    parser.add_argument(
        "--orders",
        type=str,
        default=None,
        help="Orders CSV (order_id,x,y). Only used together with --drivers."
    )

    parser.add_argument(
        "--width",
        type=int,
        default=config.DEFAULT_GRID_WIDTH,
        help=f"Grid width (default: {config.DEFAULT_GRID_WIDTH})"
    )

    parser.add_argument(
        "--height",
        type=int,
        default=config.DEFAULT_GRID_HEIGHT,
        help=f"Grid height (default: {config.DEFAULT_GRID_HEIGHT})"
    )

    parser.add_argument(
        "--k", "-k",
        type=int,
        default=3,
        help="Number of nearest drivers to list per order (default: 3)"
    )

    parser.add_argument(
        "--strategy", "-s",
        choices=AVAILABLE_STRATEGIES,
        default=config.DEFAULT_STRATEGY,
        help=f"Selection strategy (default: {config.DEFAULT_STRATEGY})"
    )

    parser.add_argument(
        "--show-map",
        action="store_true",
        help="Print the occupancy map"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL,
        format=config.LOG_FORMAT,
    )

    if args.width <= 0 or args.height <= 0:
        print(f"ERROR: Grid dimensions must be positive, got {args.width}x{args.height}")
        return 1

    print_header()

    if args.drivers is None:
        return run_reference_scenario(args.k, args.strategy, args.show_map)

    return run_from_files(
        args.drivers, args.orders, args.width, args.height, args.k, args.strategy, args.show_map
    )


if __name__ == "__main__":
    sys.exit(main())
