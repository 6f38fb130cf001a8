# grid-dispatch/grid_dispatch/models.py
"""
Core domain models for the Grid Dispatch driver registry.

This module defines the fundamental data structures used throughout the system:
- Point: An integer cell on the dispatch grid
- Driver: A courier with an identity, a cell and an availability flag
- Order: A pickup request used as a query parameter
- RegistryStatus: The outcome of every registry mutation
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RegistryStatus(Enum):
    """
    Outcome of a registry mutation.

    Registry operations never raise for these cases; the caller inspects
    the returned member and reports the specific failure kind.
    """
    OK = "OK"
    ALREADY_EXISTS = "ALREADY_EXISTS"  # add() with a duplicate driver id
    NOT_FOUND = "NOT_FOUND"            # unknown driver id
    OUT_OF_BOUNDS = "OUT_OF_BOUNDS"    # coordinate outside the grid
    CELL_OCCUPIED = "CELL_OCCUPIED"    # cell already held by another driver

    @property
    def ok(self) -> bool:
        """True when the operation committed."""
        return self is RegistryStatus.OK

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True, order=True)
class Point:
    """
    A cell on the dispatch grid.

    Immutable and ordered by (x, y). Bounds are not checked here; the
    registry rejects coordinates outside its grid.

    Attributes:
        x: Column index
        y: Row index
    """
    x: int
    y: int

    def manhattan_distance(self, other: Point) -> int:
        """Returns |dx| + |dy| between this cell and another."""
        return abs(self.x - other.x) + abs(self.y - other.y)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


@dataclass
class Driver:
    """
    Represents a courier on the grid.

    Instances stored in the registry are mutated in place by the registry
    only; everything handed out (snapshot(), get()) is a copy.

    Attributes:
        driver_id: Unique identifier, fixed at creation
        location: Current cell
        is_available: Whether the driver can take new orders
    """
    driver_id: str
    location: Point
    is_available: bool = True

    def copy(self) -> Driver:
        """Returns a detached copy (Point is immutable, so shallow is enough)."""
        return Driver(self.driver_id, self.location, self.is_available)

    def __str__(self) -> str:
        return f"Driver {self.driver_id} at {self.location} (Available: {self.is_available})"


@dataclass(frozen=True)
class Order:
    """
    A pickup request.

    Orders are query parameters only; the registry never stores them.

    Attributes:
        order_id: Unique identifier
        pickup_location: Cell where the driver should go
    """
    order_id: str
    pickup_location: Point

    def __str__(self) -> str:
        return f"Order {self.order_id} at {self.pickup_location}"
