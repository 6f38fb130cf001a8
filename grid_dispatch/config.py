# grid-dispatch/grid_dispatch/config.py
"""
Configuration parameters for the Grid Dispatch driver registry.

This module centralizes all tunable parameters, making it easy to:
- Change the default map size used by the demo and dashboard
- Pick the selection strategy used for production queries
- Configure the benchmark harness

All parameters are documented with their purpose and typical value ranges.
"""

from typing import Final, Tuple

# =============================================================================
# GRID PARAMETERS
# =============================================================================

DEFAULT_GRID_WIDTH: Final[int] = 10
"""Default map width in cells. Valid x coordinates are 0 .. width - 1."""

DEFAULT_GRID_HEIGHT: Final[int] = 10
"""Default map height in cells. Valid y coordinates are 0 .. height - 1."""

# =============================================================================
# QUERY PARAMETERS
# =============================================================================

DEFAULT_K: int = 5
"""Number of drivers returned by multi-result nearest queries."""

SINGLE_NEAREST_K: Final[int] = 1
"""Result size used by single nearest-driver queries."""

DEFAULT_STRATEGY: str = "heap"
"""
Selection strategy used when a caller does not ask for one.
Options: "sort", "heap", "array", "ordered_set".
The bounded heap has the best general-purpose complexity (O(n log k)).
"""

# =============================================================================
# OCCUPANCY MAP RENDERING
# =============================================================================

OCCUPIED_CELL_CHAR: Final[str] = "X"
"""Character printed for a cell holding a driver."""

FREE_CELL_CHAR: Final[str] = "."
"""Character printed for an empty cell."""

# =============================================================================
# LOGGING
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
"""Format used by the CLI and benchmark entry points."""

LOG_LEVEL: str = "INFO"
"""Default log level for entry points. --verbose switches to DEBUG."""

# =============================================================================
# BENCHMARK PARAMETERS
# =============================================================================

BENCHMARK_GRID_SIZE: int = 200
"""
Side length of the square benchmark grid.
Must hold the largest fleet: side * side >= max(BENCHMARK_FLEET_SIZES).
"""

BENCHMARK_FLEET_SIZES: Tuple[int, ...] = (100, 1_000, 10_000)
"""Fleet sizes to measure. Larger fleets show the O(n log k) vs O(n k) gap."""

BENCHMARK_K_VALUES: Tuple[int, ...] = (1, 5, 20)
"""Result sizes to measure for every fleet size."""

BENCHMARK_QUERIES: int = 200
"""Number of random order locations queried per (fleet, k, strategy)."""

BENCHMARK_UNAVAILABLE_RATE: float = 0.2
"""Fraction of benchmark drivers marked unavailable (0.0 - 1.0)."""

BENCHMARK_SEED: int = 42
"""Random seed so benchmark fleets and queries are reproducible."""

BENCHMARK_OUTPUT_DIR: str = "benchmark_results"
"""Directory where benchmark CSV files are written."""
