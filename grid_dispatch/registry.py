# grid-dispatch/grid_dispatch/registry.py
"""
Driver Registry for the Grid Dispatch system.

The registry is the single owner of driver state. It keeps two indices in
step with each other:

1. **Identity index**: driver_id -> Driver
2. **Occupancy index**: Point -> driver_id (at most one driver per cell)

Every mutation validates first and commits second, so a failed call leaves
both indices exactly as they were. Outcomes are reported as RegistryStatus
members rather than exceptions; each failure is logged with its kind.

Nothing outside this module ever sees the live Driver objects: snapshot()
and get() hand out copies, which is what the selection strategies rank.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Optional, Tuple

from . import utils
from .locking import ReadWriteLock
from .models import Driver, Point, RegistryStatus

logger = logging.getLogger(__name__)


class DriverRegistry:
    """
    Authoritative store of drivers positioned on a width x height grid.

    Invariants (hold at rest and after every successful mutation):
    - every driver's cell maps back to its id in the occupancy index
    - no two drivers share a cell
    - every occupied cell belongs to exactly one live driver
    - every stored cell is within bounds

    Thread safety: mutations hold the exclusive side of a ReadWriteLock,
    reads hold the shared side.

    Attributes:
        width: Grid width (fixed at construction)
        height: Grid height (fixed at construction)
        version: Incremented by every successful mutation
    """

    def __init__(self, width: int, height: int) -> None:
        """
        Create an empty registry.

        Args:
            width: Number of columns, must be positive
            height: Number of rows, must be positive

        Raises:
            ValueError: If either dimension is not a positive integer
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")

        self._width: int = width
        self._height: int = height
        self._drivers: Dict[str, Driver] = {}
        self._occupied: Dict[Point, str] = {}
        self._version: int = 0
        self._lock = ReadWriteLock()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def version(self) -> int:
        """Mutation counter. Callers caching a snapshot compare against it."""
        with self._lock.read():
            return self._version

    def is_within_bounds(self, location: Point) -> bool:
        """True if location lies on this registry's grid."""
        return utils.is_within_bounds(location, self._width, self._height)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, driver_id: str, location: Point, is_available: bool = True) -> RegistryStatus:
        """
        Register a new driver at a free cell.

        Checks run in this order: bounds, duplicate id, occupied cell.

        Args:
            driver_id: Unique identifier for the new driver
            location: Starting cell
            is_available: Initial availability (default True)

        Returns:
            OK, OUT_OF_BOUNDS, ALREADY_EXISTS or CELL_OCCUPIED
        """
        if not self.is_within_bounds(location):
            logger.warning(f"Cannot add driver {driver_id}: invalid coordinates {location}")
            return RegistryStatus.OUT_OF_BOUNDS

        with self._lock.write():
            if driver_id in self._drivers:
                logger.warning(f"Cannot add driver {driver_id}: id already exists")
                return RegistryStatus.ALREADY_EXISTS

            occupant = self._occupied.get(location)
            if occupant is not None:
                logger.warning(f"Cannot add driver {driver_id}: cell {location} is occupied by {occupant}")
                return RegistryStatus.CELL_OCCUPIED

            driver = Driver(driver_id=driver_id, location=location, is_available=is_available)
            self._drivers[driver_id] = driver
            self._occupied[location] = driver_id
            self._version += 1

        logger.info(f"Added {driver}")
        return RegistryStatus.OK

    def relocate(self, driver_id: str, new_location: Point) -> RegistryStatus:
        """
        Move a driver to another cell.

        Atomic: the destination is validated before anything is touched, so
        a CELL_OCCUPIED failure leaves the driver and both indices unchanged.
        Moving a driver onto its own cell is a successful no-op.

        Args:
            driver_id: Driver to move
            new_location: Destination cell

        Returns:
            OK, OUT_OF_BOUNDS, NOT_FOUND or CELL_OCCUPIED
        """
        if not self.is_within_bounds(new_location):
            logger.warning(f"Cannot relocate driver {driver_id}: invalid coordinates {new_location}")
            return RegistryStatus.OUT_OF_BOUNDS

        with self._lock.write():
            driver = self._drivers.get(driver_id)
            if driver is None:
                logger.warning(f"Cannot relocate driver {driver_id}: not found")
                return RegistryStatus.NOT_FOUND

            if driver.location == new_location:
                logger.debug(f"Driver {driver_id} already at {new_location}")
                return RegistryStatus.OK

            occupant = self._occupied.get(new_location)
            if occupant is not None:
                logger.warning(
                    f"Cannot relocate driver {driver_id}: cell {new_location} is occupied by {occupant}"
                )
                return RegistryStatus.CELL_OCCUPIED

            # Commit
            del self._occupied[driver.location]
            self._occupied[new_location] = driver_id
            driver.location = new_location
            self._version += 1
            moved = driver.copy()

        logger.info(f"Updated location: {moved}")
        return RegistryStatus.OK

    def set_availability(self, driver_id: str, is_available: bool) -> RegistryStatus:
        """
        Update a driver's availability flag. Occupancy is never touched.

        Returns:
            OK or NOT_FOUND
        """
        with self._lock.write():
            driver = self._drivers.get(driver_id)
            if driver is None:
                logger.warning(f"Cannot set availability of driver {driver_id}: not found")
                return RegistryStatus.NOT_FOUND

            if driver.is_available != is_available:
                driver.is_available = is_available
                self._version += 1

        logger.info(f"Updated driver {driver_id}: Available = {is_available}")
        return RegistryStatus.OK

    def remove(self, driver_id: str) -> RegistryStatus:
        """
        Delete a driver and free its cell.

        Returns:
            OK or NOT_FOUND
        """
        with self._lock.write():
            driver = self._drivers.pop(driver_id, None)
            if driver is None:
                logger.warning(f"Cannot remove driver {driver_id}: not found")
                return RegistryStatus.NOT_FOUND

            del self._occupied[driver.location]
            self._version += 1

        logger.info(f"Removed driver {driver_id}")
        return RegistryStatus.OK

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def snapshot(self) -> Tuple[Driver, ...]:
        """
        Point-in-time copies of every driver, in insertion order.

        The copies are detached from the registry, so later mutations do
        not show through and callers cannot corrupt the indices.
        """
        with self._lock.read():
            return tuple(driver.copy() for driver in self._drivers.values())

    def snapshot_with_version(self) -> Tuple[int, Tuple[Driver, ...]]:
        """Snapshot plus the version it was taken at, read under one lock."""
        with self._lock.read():
            return self._version, tuple(driver.copy() for driver in self._drivers.values())

    def get(self, driver_id: str) -> Optional[Driver]:
        """Copy of one driver, or None if the id is unknown."""
        with self._lock.read():
            driver = self._drivers.get(driver_id)
            return driver.copy() if driver is not None else None

    def driver_at(self, location: Point) -> Optional[str]:
        """Id of the driver occupying a cell, or None if it is free."""
        with self._lock.read():
            return self._occupied.get(location)

    def occupied_cells(self) -> FrozenSet[Point]:
        """All cells currently holding a driver."""
        with self._lock.read():
            return frozenset(self._occupied)

    def contains(self, driver_id: str) -> bool:
        with self._lock.read():
            return driver_id in self._drivers

    def count(self) -> int:
        with self._lock.read():
            return len(self._drivers)

    def __contains__(self, driver_id: object) -> bool:
        return isinstance(driver_id, str) and self.contains(driver_id)

    def __len__(self) -> int:
        return self.count()

    def __repr__(self) -> str:
        return f"DriverRegistry({self._width}x{self._height}, drivers={self.count()})"
