# grid-dispatch/grid_dispatch/selection.py
"""
K-nearest driver selection for the Grid Dispatch system.

Given a snapshot of drivers and a target cell, every strategy returns the k
closest *available* drivers by Manhattan distance. Four strategies are
available:

1. **Full sort**: Rank every candidate and take the first k. O(n log n).

2. **Bounded heap**: Keep a max-heap of the k best seen so far and replace
   its top when a better candidate arrives. O(n log k). Production default.

3. **Top-k array**: Keep a sorted list of at most k entries; a better
   candidate replaces the worst kept one. O(n * k), fine for small k.

4. **Ordered set**: Insert every candidate into a sorted container and
   evict the maximum whenever it grows past k. O(n log k) comparisons.

All strategies rank by the same key, (distance, driver_id), so equal
distances are broken by ascending driver id and every strategy returns the
same list for the same input. None of them bounds-checks the target; the
dispatch engine rejects invalid orders before selecting.
"""

from __future__ import annotations

import bisect
import heapq
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Sequence, Tuple, Union

from .models import Driver, Point
from .utils import manhattan_distance

RankKey = Tuple[int, str]
Selector = Callable[[Sequence[Driver], Point, int], List[Driver]]


class SelectionStrategy(Enum):
    """Interchangeable k-nearest algorithms sharing one contract."""
    FULL_SORT = "sort"
    BOUNDED_HEAP = "heap"
    TOP_K_ARRAY = "array"
    ORDERED_SET = "ordered_set"

    @classmethod
    def parse(cls, value: Union[str, SelectionStrategy]) -> SelectionStrategy:
        """
        Resolve a strategy from an enum member or its string value.

        Raises:
            ValueError: If the name does not match any strategy
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            options = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown selection strategy '{value}'. Options: {options}") from None


def rank_key(driver: Driver, target: Point) -> RankKey:
    """
    The total order every strategy ranks by: distance, then driver id.

    Driver ids are unique, so no two candidates ever share a key.
    """
    return (manhattan_distance(driver.location, target), driver.driver_id)


def _candidates(drivers: Iterable[Driver], target: Point) -> Iterator[Tuple[RankKey, Driver]]:
    """Yield (key, driver) for available drivers only."""
    for driver in drivers:
        if driver.is_available:
            yield rank_key(driver, target), driver


# =============================================================================
# STRATEGIES
# =============================================================================

def select_full_sort(drivers: Sequence[Driver], target: Point, k: int) -> List[Driver]:
    """Rank every available driver and take the first k."""
    if k < 1:
        return []
    ranked = sorted(_candidates(drivers, target), key=lambda item: item[0])
    return [driver for _, driver in ranked[:k]]


class _WorstFirst:
    """Heap entry with inverted ordering so heapq keeps the worst kept key on top."""

    __slots__ = ("key", "driver")

    def __init__(self, key: RankKey, driver: Driver) -> None:
        self.key = key
        self.driver = driver

    def __lt__(self, other: _WorstFirst) -> bool:
        return self.key > other.key


def select_bounded_heap(drivers: Sequence[Driver], target: Point, k: int) -> List[Driver]:
    """
    Bounded max-heap of size k.

    heap[0] is always the worst of the k best seen so far; a candidate only
    enters when there is room or it beats that entry.
    """
    if k < 1:
        return []

    heap: List[_WorstFirst] = []
    for key, driver in _candidates(drivers, target):
        if len(heap) < k:
            heapq.heappush(heap, _WorstFirst(key, driver))
        elif key < heap[0].key:
            heapq.heapreplace(heap, _WorstFirst(key, driver))

    heap.sort(key=lambda entry: entry.key)
    return [entry.driver for entry in heap]


def select_top_k_array(drivers: Sequence[Driver], target: Point, k: int) -> List[Driver]:
    """
    Sorted array of at most k entries.

    While the array has room every candidate is inserted in order. Once it
    is full, a candidate is compared with the last (worst) entry and, if
    better, replaces it and is moved into place.
    """
    if k < 1:
        return []

    best: List[Tuple[RankKey, Driver]] = []
    for key, driver in _candidates(drivers, target):
        if len(best) < k:
            best.append((key, driver))
        elif key < best[-1][0]:
            best[-1] = (key, driver)
        else:
            continue

        # Bubble the new entry down to its place; the rest is already sorted.
        i = len(best) - 1
        while i > 0 and best[i][0] < best[i - 1][0]:
            best[i], best[i - 1] = best[i - 1], best[i]
            i -= 1

    return [driver for _, driver in best]


def select_ordered_set(drivers: Sequence[Driver], target: Point, k: int) -> List[Driver]:
    """
    Bounded ordered set with eviction.

    Every candidate is inserted into a list kept sorted by key; whenever the
    set exceeds k entries the maximum is evicted.
    """
    if k < 1:
        return []

    # Entries carry the arrival index so Driver objects are never compared.
    entries: List[Tuple[RankKey, int]] = []
    kept: Dict[int, Driver] = {}
    for index, (key, driver) in enumerate(_candidates(drivers, target)):
        bisect.insort(entries, (key, index))
        kept[index] = driver
        if len(entries) > k:
            _, evicted = entries.pop()
            del kept[evicted]

    return [kept[index] for _, index in entries]


# =============================================================================
# DISPATCH TABLE
# =============================================================================

SELECTORS: Dict[SelectionStrategy, Selector] = {
    SelectionStrategy.FULL_SORT: select_full_sort,
    SelectionStrategy.BOUNDED_HEAP: select_bounded_heap,
    SelectionStrategy.TOP_K_ARRAY: select_top_k_array,
    SelectionStrategy.ORDERED_SET: select_ordered_set,
}


def get_selector(strategy: Union[str, SelectionStrategy]) -> Selector:
    """Look up the selection function for a strategy name or member."""
    return SELECTORS[SelectionStrategy.parse(strategy)]


def select_k_nearest(
    drivers: Sequence[Driver],
    target: Point,
    k: int,
    strategy: Union[str, SelectionStrategy] = SelectionStrategy.BOUNDED_HEAP,
) -> List[Driver]:
    """
    Return up to k available drivers closest to target.

    Args:
        drivers: Snapshot to rank (not modified)
        target: Query cell
        k: Maximum number of drivers to return; k < 1 yields []
        strategy: Which algorithm to use

    Returns:
        Drivers ascending by (distance, driver_id). Empty if nothing is
        available; all available drivers if fewer than k exist.
    """
    return get_selector(strategy)(drivers, target, k)
