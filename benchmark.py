# grid-dispatch/benchmark.py
"""
Benchmark script for the Grid Dispatch selection strategies.

For every fleet size and k, times each strategy over the same random
queries, checks that all strategies return identical rankings, and writes
detailed and summary CSV files for analysis.

Usage:
    python benchmark.py
    python benchmark.py --fleet-sizes 1000 50000 --grid-size 500 --queries 50
"""

from __future__ import annotations

import argparse
import csv
import logging
import os
import sys
import time
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from grid_dispatch import config
from grid_dispatch.dispatch import DispatchEngine
from grid_dispatch.fleet import random_fleet, random_orders
from grid_dispatch.models import Order
from grid_dispatch.registry import DriverRegistry
from grid_dispatch.selection import SelectionStrategy

logger = logging.getLogger("benchmark")

STRATEGIES: List[SelectionStrategy] = list(SelectionStrategy)

CSV_FIELDS = [
    "fleet_size",
    "available_drivers",
    "k",
    "strategy",
    "queries",
    "total_ms",
    "avg_query_us",
    "speedup_vs_sort",
    "matches_sort",
]


def time_strategy(
    engine: DispatchEngine,
    orders: Sequence[Order],
    k: int,
    strategy: SelectionStrategy,
) -> Tuple[float, List[List[str]]]:
    """
    Run every order through one strategy.

    Returns:
        (elapsed_seconds, rankings) where rankings holds the driver ids
        returned for each order
    """
    rankings: List[List[str]] = []
    start = time.perf_counter()
    for order in orders:
        drivers = engine.find_k_nearest(order, k, strategy)
        rankings.append([d.driver_id for d in drivers])
    elapsed = time.perf_counter() - start
    return elapsed, rankings


def run_fleet(
    fleet_size: int,
    grid_size: int,
    k_values: Sequence[int],
    query_count: int,
    seed: int,
) -> Optional[List[Dict]]:
    """Benchmark all strategies on one random fleet."""
    print(f"\n{'='*60}")
    print(f"FLEET: {fleet_size} drivers on {grid_size}x{grid_size}")
    print(f"{'='*60}")

    registry = DriverRegistry(grid_size, grid_size)
    try:
        random_fleet(registry, fleet_size, config.BENCHMARK_UNAVAILABLE_RATE, seed=seed)
    except ValueError as e:
        print(f"  ERROR: {e}")
        return None

    engine = DispatchEngine(registry)
    orders = random_orders(grid_size, grid_size, query_count, seed=seed + 1)
    available = sum(1 for d in registry.snapshot() if d.is_available)
    print(f"  Placed {registry.count()} drivers ({available} available), {len(orders)} queries")

    # Warm the engine so no strategy pays for the first snapshot copy.
    if orders:
        engine.find_k_nearest(orders[0], 1)

    rows: List[Dict] = []
    for k in k_values:
        baseline_elapsed, baseline_rankings = time_strategy(
            engine, orders, k, SelectionStrategy.FULL_SORT
        )

        for strategy in STRATEGIES:
            if strategy is SelectionStrategy.FULL_SORT:
                elapsed, rankings = baseline_elapsed, baseline_rankings
            else:
                elapsed, rankings = time_strategy(engine, orders, k, strategy)

            matches = rankings == baseline_rankings
            if not matches:
                logger.error(f"{strategy.value} disagrees with sort for fleet={fleet_size} k={k}")

            rows.append({
                "fleet_size": fleet_size,
                "available_drivers": available,
                "k": k,
                "strategy": strategy.value,
                "queries": len(orders),
                "total_ms": round(elapsed * 1000, 3),
                "avg_query_us": round(elapsed / len(orders) * 1e6, 2) if orders else 0,
                "speedup_vs_sort": round(baseline_elapsed / elapsed, 2) if elapsed > 0 else 0,
                "matches_sort": "yes" if matches else "no",
            })
            print(f"    ✓ k={k:<3} {strategy.value:<12} {elapsed * 1000:9.2f} ms"
                  f"{'' if matches else '  MISMATCH'}")

    return rows


def save_detail_csv(rows: List[Dict], output_dir: str, timestamp: str) -> str:
    """Save one row per (fleet, k, strategy)."""
    filename = f"{output_dir}/STRATEGY_TIMINGS_{timestamp}.csv"
    with open(filename, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        writer.writerows(rows)
    print(f"✓ Saved detail data: {filename}")
    return filename


def build_summary(rows: List[Dict]) -> pd.DataFrame:
    """Pivot average query time: one row per (fleet, k), one column per strategy."""
    df = pd.DataFrame(rows, columns=CSV_FIELDS)
    return df.pivot_table(
        index=["fleet_size", "k"],
        columns="strategy",
        values="avg_query_us",
        aggfunc="mean",
    )


def save_summary_csv(rows: List[Dict], output_dir: str, timestamp: str) -> str:
    filename = f"{output_dir}/SUMMARY_{timestamp}.csv"
    build_summary(rows).to_csv(filename)
    print(f"✓ Saved summary: {filename}")
    return filename


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark Grid Dispatch selection strategies")
    parser.add_argument("--fleet-sizes", type=int, nargs="+", default=list(config.BENCHMARK_FLEET_SIZES))
    parser.add_argument("--k-values", type=int, nargs="+", default=list(config.BENCHMARK_K_VALUES))
    parser.add_argument("--grid-size", type=int, default=config.BENCHMARK_GRID_SIZE)
    parser.add_argument("--queries", type=int, default=config.BENCHMARK_QUERIES)
    parser.add_argument("--seed", type=int, default=config.BENCHMARK_SEED)
    parser.add_argument("--output-dir", type=str, default=config.BENCHMARK_OUTPUT_DIR)
    args = parser.parse_args()

    # Registry INFO lines would flood the output for large fleets.
    logging.basicConfig(level=logging.WARNING, format=config.LOG_FORMAT)

    os.makedirs(args.output_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    print("\n" + "=" * 60)
    print("GRID DISPATCH - SELECTION STRATEGY BENCHMARK")
    print(f"Strategies: {', '.join(s.value for s in STRATEGIES)}")
    print(f"Output directory: {args.output_dir}/")
    print("=" * 60)

    all_rows: List[Dict] = []
    for fleet_size in args.fleet_sizes:
        rows = run_fleet(fleet_size, args.grid_size, args.k_values, args.queries, args.seed)
        if rows:
            all_rows.extend(rows)

    if not all_rows:
        print("ERROR: No benchmarks completed")
        return 1

    save_detail_csv(all_rows, args.output_dir, timestamp)
    save_summary_csv(all_rows, args.output_dir, timestamp)

    print("\nAverage query time (us):")
    print(build_summary(all_rows).round(2).to_string())

    mismatches = [r for r in all_rows if r["matches_sort"] == "no"]
    if mismatches:
        print(f"\nERROR: {len(mismatches)} strategy runs disagreed with the full sort")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
