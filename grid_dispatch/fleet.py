# grid-dispatch/grid_dispatch/fleet.py
"""
Fleet and order loading for the Grid Dispatch system.

Reads drivers and orders from CSV files and feeds them into a
DriverRegistry through its public operations, and builds seeded random
fleets for the benchmark and dashboard.

CSV formats:
    drivers: driver_id,x,y[,is_available]
    orders:  order_id,x,y
"""

from __future__ import annotations

import csv
import logging
import os
import random
from typing import Iterable, List, Optional, Tuple

from .models import Driver, Order, Point, RegistryStatus
from .registry import DriverRegistry

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "y", "t"}
_FALSE_VALUES = {"0", "false", "no", "n", "f"}


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def load_drivers(driver_file: str) -> List[Driver]:
    """
    Load drivers from a CSV file.

    The is_available column is optional and defaults to True.

    Args:
        driver_file: Path to drivers CSV

    Returns:
        Drivers in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If a row is malformed (message includes the line number)
    """
    if not os.path.exists(driver_file):
        raise FileNotFoundError(f"Driver file not found: {driver_file}")

    drivers: List[Driver] = []
    with open(driver_file, "r", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            try:
                available_raw = row.get("is_available")
                drivers.append(Driver(
                    driver_id=row["driver_id"].strip(),
                    location=Point(int(row["x"]), int(row["y"])),
                    is_available=_parse_bool(available_raw) if available_raw else True,
                ))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                raise ValueError(f"{driver_file}:{reader.line_num}: invalid driver row: {e}") from e
    return drivers


def load_orders(order_file: str) -> List[Order]:
    """
    Load orders from a CSV file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If a row is malformed
    """
    if not os.path.exists(order_file):
        raise FileNotFoundError(f"Order file not found: {order_file}")

    orders: List[Order] = []
    with open(order_file, "r", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            try:
                orders.append(Order(
                    order_id=row["order_id"].strip(),
                    pickup_location=Point(int(row["x"]), int(row["y"])),
                ))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                raise ValueError(f"{order_file}:{reader.line_num}: invalid order row: {e}") from e
    return orders


def populate_registry(
    registry: DriverRegistry,
    drivers: Iterable[Driver],
) -> List[Tuple[str, RegistryStatus]]:
    """
    Add drivers to a registry one by one.

    Args:
        registry: Target registry
        drivers: Drivers to add (their availability is preserved)

    Returns:
        (driver_id, status) for every driver the registry rejected
    """
    rejected: List[Tuple[str, RegistryStatus]] = []
    for driver in drivers:
        status = registry.add(driver.driver_id, driver.location, driver.is_available)
        if not status.ok:
            rejected.append((driver.driver_id, status))

    if rejected:
        logger.warning(f"{len(rejected)} driver(s) rejected while loading the fleet")
    return rejected


def load_fleet(
    driver_file: str,
    width: int,
    height: int,
) -> Tuple[DriverRegistry, List[Tuple[str, RegistryStatus]]]:
    """Build a width x height registry from a drivers CSV."""
    registry = DriverRegistry(width, height)
    rejected = populate_registry(registry, load_drivers(driver_file))
    logger.info(f"Loaded {registry.count()} drivers onto a {width}x{height} grid")
    return registry, rejected


def random_fleet(
    registry: DriverRegistry,
    size: int,
    unavailable_rate: float = 0.0,
    seed: Optional[int] = None,
    id_prefix: str = "D",
) -> int:
    """
    Fill a registry with drivers on distinct random cells.

    Args:
        registry: Target registry (existing drivers keep their cells)
        size: Number of drivers to add
        unavailable_rate: Fraction of drivers created unavailable (0.0 - 1.0)
        seed: Random seed for reproducible fleets
        id_prefix: Prefix for generated ids ("D" -> D00001, D00002, ...)

    Returns:
        Number of drivers actually added

    Raises:
        ValueError: If the grid has fewer free cells than size
    """
    rng = random.Random(seed)
    taken = registry.occupied_cells()
    free_cells = [
        Point(x, y)
        for x in range(registry.width)
        for y in range(registry.height)
        if Point(x, y) not in taken
    ]
    if size > len(free_cells):
        raise ValueError(f"Cannot place {size} drivers: only {len(free_cells)} free cells")

    added = 0
    for i, cell in enumerate(rng.sample(free_cells, size), start=1):
        is_available = rng.random() >= unavailable_rate
        if registry.add(f"{id_prefix}{i:05d}", cell, is_available).ok:
            added += 1
    return added


def random_orders(
    width: int,
    height: int,
    count: int,
    seed: Optional[int] = None,
) -> List[Order]:
    """Generate count orders at random cells of a width x height grid."""
    rng = random.Random(seed)
    return [
        Order(f"O{i:05d}", Point(rng.randrange(width), rng.randrange(height)))
        for i in range(1, count + 1)
    ]
