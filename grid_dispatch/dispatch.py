# grid-dispatch/grid_dispatch/dispatch.py
"""
Dispatch Engine for the Grid Dispatch system.

The engine answers "which drivers should take this order?" by combining the
DriverRegistry with a selection strategy:

1. Reject orders whose pickup cell is outside the grid.
2. Refresh the cached snapshot if the registry has changed since the last
   query (the registry's version counter tells).
3. Rank the snapshot with the chosen strategy.

The engine only reads the registry; it never changes driver state.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Tuple, Union

from . import config
from .models import Driver, Order
from .registry import DriverRegistry
from .selection import SelectionStrategy, get_selector
from .utils import manhattan_distance

logger = logging.getLogger(__name__)

StrategyArg = Union[str, SelectionStrategy, None]


class DispatchEngine:
    """
    Nearest-driver queries over a DriverRegistry.

    Strategies:
        sort: full sort of all candidates
        heap: bounded max-heap (default)
        array: incremental top-k array
        ordered_set: bounded ordered set with eviction

    Attributes:
        registry: The registry being queried
        default_strategy: Strategy used when a query does not name one
    """

    def __init__(
        self,
        registry: DriverRegistry,
        default_strategy: Union[str, SelectionStrategy] = config.DEFAULT_STRATEGY,
    ) -> None:
        self.registry = registry
        self.default_strategy: SelectionStrategy = SelectionStrategy.parse(default_strategy)

        # Cached (version, snapshot) pair; replaced whenever the registry moves on.
        self._snapshot_lock = threading.Lock()
        self._snapshot_version: int = -1
        self._snapshot: Tuple[Driver, ...] = ()

    def _current_snapshot(self) -> Tuple[Driver, ...]:
        """Return a snapshot matching the registry's current version."""
        with self._snapshot_lock:
            if self._snapshot_version != self.registry.version:
                self._snapshot_version, self._snapshot = self.registry.snapshot_with_version()
                logger.debug(
                    f"Refreshed snapshot at version {self._snapshot_version} "
                    f"({len(self._snapshot)} drivers)"
                )
            return self._snapshot

    def _is_valid_order(self, order: Order) -> bool:
        if not self.registry.is_within_bounds(order.pickup_location):
            logger.warning(f"Invalid order coordinates {order.pickup_location} for order {order.order_id}")
            return False
        return True

    def find_k_nearest(
        self,
        order: Order,
        k: int = config.DEFAULT_K,
        strategy: StrategyArg = None,
    ) -> List[Driver]:
        """
        Find up to k available drivers closest to the order's pickup cell.

        Args:
            order: The pickup request
            k: Maximum number of drivers to return
            strategy: Selection strategy (default: the engine's default)

        Returns:
            Drivers ascending by (distance, driver_id). Empty when the pickup
            cell is off the grid or no driver is available.
        """
        if not self._is_valid_order(order):
            return []

        selector = get_selector(strategy if strategy is not None else self.default_strategy)
        # Hand out fresh copies so callers cannot alter the cached snapshot.
        drivers = [d.copy() for d in selector(self._current_snapshot(), order.pickup_location, k)]

        if not drivers:
            logger.info(f"No available drivers for {order}")
        else:
            logger.debug(f"{order}: {[d.driver_id for d in drivers]}")
        return drivers

    def find_nearest(self, order: Order, strategy: StrategyArg = None) -> Optional[Driver]:
        """
        Find the single closest available driver.

        Returns:
            The driver, or None when the pickup cell is off the grid or no
            driver is available.
        """
        drivers = self.find_k_nearest(order, config.SINGLE_NEAREST_K, strategy)
        return drivers[0] if drivers else None

    def find_nearest_with_distance(
        self,
        order: Order,
        k: int = config.DEFAULT_K,
        strategy: StrategyArg = None,
    ) -> List[Tuple[Driver, int]]:
        """Same as find_k_nearest, paired with each driver's distance to the pickup."""
        return [
            (driver, manhattan_distance(driver.location, order.pickup_location))
            for driver in self.find_k_nearest(order, k, strategy)
        ]
