# grid-dispatch/grid_dispatch/__init__.py

from .models import Point, Driver, Order, RegistryStatus
from .config import (
    DEFAULT_GRID_WIDTH,
    DEFAULT_GRID_HEIGHT,
    DEFAULT_K,
    DEFAULT_STRATEGY,
)
from .registry import DriverRegistry
from .selection import SelectionStrategy, select_k_nearest, rank_key
from .dispatch import DispatchEngine
from .utils import manhattan_distance, render_occupancy_map

__version__ = "1.0.0"

__all__ = [
    # Models
    "Point",
    "Driver",
    "Order",
    "RegistryStatus",
    # Core
    "DriverRegistry",
    "DispatchEngine",
    "SelectionStrategy",
    # Functions
    "select_k_nearest",
    "rank_key",
    "manhattan_distance",
    "render_occupancy_map",
    # Config
    "DEFAULT_GRID_WIDTH",
    "DEFAULT_GRID_HEIGHT",
    "DEFAULT_K",
    "DEFAULT_STRATEGY",
]
