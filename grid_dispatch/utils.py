# grid-dispatch/grid_dispatch/utils.py
"""
Utility functions for the Grid Dispatch driver registry.

Provides grid distance and bounds calculations and the plain-text renderers
used by the CLI to list drivers and draw the occupancy map.
"""

from __future__ import annotations

from typing import AbstractSet, Iterable, List, Optional

from . import config
from .models import Driver, Point


def manhattan_distance(a: Point, b: Point) -> int:
    """
    Calculate the Manhattan (taxicab) distance between two grid cells.

    Drivers move along grid streets, so the travel distance between two
    cells is the sum of the horizontal and vertical offsets.

    Args:
        a: First cell
        b: Second cell

    Returns:
        |a.x - b.x| + |a.y - b.y|

    Example:
        >>> manhattan_distance(Point(2, 3), Point(4, 5))
        4
    """
    return a.manhattan_distance(b)


def _is_grid_index(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_within_bounds(location: Point, width: int, height: int) -> bool:
    """
    Check whether a cell lies on a width x height grid.

    Args:
        location: Cell to check
        width: Grid width (valid x is 0 .. width - 1)
        height: Grid height (valid y is 0 .. height - 1)

    Cells are integer indices; float or bool components are never on the grid.

    Returns:
        True if x and y are ints with 0 <= x < width and 0 <= y < height
    """
    return (
        _is_grid_index(location.x) and _is_grid_index(location.y)
        and 0 <= location.x < width and 0 <= location.y < height
    )


def render_occupancy_map(width: int, height: int, occupied: AbstractSet[Point]) -> str:
    """
    Render the occupancy grid as text, one row per line.

    Row 0 is printed first. Occupied cells use config.OCCUPIED_CELL_CHAR,
    free cells config.FREE_CELL_CHAR, separated by single spaces.

    Args:
        width: Grid width
        height: Grid height
        occupied: Cells currently holding a driver

    Returns:
        Multi-line string without a trailing newline

    Example:
        >>> print(render_occupancy_map(3, 2, {Point(1, 0)}))
        . X .
        . . .
    """
    rows: List[str] = []
    for y in range(height):
        cells = [
            config.OCCUPIED_CELL_CHAR if Point(x, y) in occupied else config.FREE_CELL_CHAR
            for x in range(width)
        ]
        rows.append(" ".join(cells))
    return "\n".join(rows)


def format_driver(driver: Driver, target: Optional[Point] = None) -> str:
    """Format a driver line, with its distance to target when one is given."""
    if target is None:
        return str(driver)
    return f"{driver} (distance: {manhattan_distance(driver.location, target)})"


def format_drivers(drivers: Iterable[Driver], width: int, height: int) -> str:
    """
    Format the full driver listing for a width x height map.

    Args:
        drivers: Drivers to list, in the order given
        width: Grid width, shown in the header
        height: Grid height, shown in the header

    Returns:
        Header line, one indented line per driver, and a total count
    """
    lines = [f"All drivers on the {width}x{height} map:"]
    count = 0
    for driver in drivers:
        lines.append(f"  {driver}")
        count += 1
    lines.append(f"Total drivers: {count}")
    return "\n".join(lines)
