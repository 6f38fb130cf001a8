import random
import threading

import pytest

from grid_dispatch.models import Driver, Point, RegistryStatus
from grid_dispatch.registry import DriverRegistry


def assert_consistent(registry: DriverRegistry) -> None:
    """Occupied cells and live driver positions must match one-to-one."""
    drivers = registry.snapshot()
    positions = [d.location for d in drivers]

    assert len(set(positions)) == len(positions)
    assert registry.occupied_cells() == frozenset(positions)
    for driver in drivers:
        assert registry.driver_at(driver.location) == driver.driver_id
        assert registry.is_within_bounds(driver.location)
    assert registry.count() == len(drivers)


def test_rejects_non_positive_dimensions() -> None:
    with pytest.raises(ValueError):
        DriverRegistry(0, 10)
    with pytest.raises(ValueError):
        DriverRegistry(10, -1)


def test_add_creates_available_driver() -> None:
    registry = DriverRegistry(10, 10)

    assert registry.add("D001", Point(2, 3)) is RegistryStatus.OK
    assert registry.get("D001") == Driver("D001", Point(2, 3), True)
    assert registry.contains("D001")
    assert "D001" in registry
    assert len(registry) == 1
    assert_consistent(registry)


def test_add_can_start_unavailable() -> None:
    registry = DriverRegistry(10, 10)
    registry.add("D001", Point(1, 1), is_available=False)

    assert registry.get("D001").is_available is False


def test_add_duplicate_id_leaves_state_unchanged() -> None:
    registry = DriverRegistry(10, 10)
    registry.add("D001", Point(2, 3))

    assert registry.add("D001", Point(9, 9)) is RegistryStatus.ALREADY_EXISTS
    assert registry.get("D001").location == Point(2, 3)
    assert registry.driver_at(Point(9, 9)) is None
    assert_consistent(registry)


def test_add_to_occupied_cell_fails() -> None:
    registry = DriverRegistry(10, 10)
    registry.add("D001", Point(0, 0))

    assert registry.add("D002", Point(0, 0)) is RegistryStatus.CELL_OCCUPIED
    assert not registry.contains("D002")
    assert registry.driver_at(Point(0, 0)) == "D001"


@pytest.mark.parametrize(
    "cell",
    [
        Point(-1, 0),
        Point(0, -1),
        Point(10, 0),
        Point(0, 10),
        Point(10, 10),
        Point(1.5, 2),
        Point(2, 0.0),
        Point(True, 3),
    ],
)
def test_add_out_of_bounds_fails_without_change(cell: Point) -> None:
    registry = DriverRegistry(10, 10)
    version = registry.version

    assert registry.add("D001", cell) is RegistryStatus.OUT_OF_BOUNDS
    assert registry.count() == 0
    assert registry.version == version


def test_bounds_checked_before_duplicate_id() -> None:
    registry = DriverRegistry(10, 10)
    registry.add("D001", Point(2, 3))

    assert registry.add("D001", Point(20, 3)) is RegistryStatus.OUT_OF_BOUNDS


def test_relocate_moves_driver_and_frees_old_cell() -> None:
    registry = DriverRegistry(10, 10)
    registry.add("D001", Point(2, 3))

    assert registry.relocate("D001", Point(3, 4)) is RegistryStatus.OK
    assert registry.get("D001").location == Point(3, 4)
    assert registry.driver_at(Point(2, 3)) is None
    assert registry.driver_at(Point(3, 4)) == "D001"
    assert_consistent(registry)


def test_relocate_to_current_cell_is_noop_success() -> None:
    registry = DriverRegistry(10, 10)
    registry.add("D001", Point(2, 3))
    before = (registry.version, registry.occupied_cells())

    assert registry.relocate("D001", Point(2, 3)) is RegistryStatus.OK
    assert (registry.version, registry.occupied_cells()) == before


def test_relocate_onto_other_driver_is_atomic() -> None:
    registry = DriverRegistry(10, 10)
    registry.add("D001", Point(2, 3))
    registry.add("D002", Point(5, 7))
    before_cells = registry.occupied_cells()
    before_snapshot = registry.snapshot()

    assert registry.relocate("D001", Point(5, 7)) is RegistryStatus.CELL_OCCUPIED
    assert registry.occupied_cells() == before_cells
    assert registry.snapshot() == before_snapshot
    assert registry.driver_at(Point(2, 3)) == "D001"
    assert registry.driver_at(Point(5, 7)) == "D002"


def test_relocate_unknown_driver() -> None:
    registry = DriverRegistry(10, 10)
    assert registry.relocate("ghost", Point(1, 1)) is RegistryStatus.NOT_FOUND


def test_relocate_out_of_bounds_keeps_position() -> None:
    registry = DriverRegistry(10, 10)
    registry.add("D001", Point(2, 3))

    assert registry.relocate("D001", Point(2, 10)) is RegistryStatus.OUT_OF_BOUNDS
    assert registry.get("D001").location == Point(2, 3)
    assert_consistent(registry)


def test_set_availability_leaves_occupancy_alone() -> None:
    registry = DriverRegistry(10, 10)
    registry.add("D001", Point(1, 1))
    cells = registry.occupied_cells()

    assert registry.set_availability("D001", False) is RegistryStatus.OK
    assert registry.get("D001").is_available is False
    assert registry.occupied_cells() == cells
    assert registry.set_availability("ghost", True) is RegistryStatus.NOT_FOUND


def test_remove_frees_cell() -> None:
    registry = DriverRegistry(10, 10)
    registry.add("D001", Point(4, 4))

    assert registry.remove("D001") is RegistryStatus.OK
    assert not registry.contains("D001")
    assert registry.driver_at(Point(4, 4)) is None
    assert registry.remove("D001") is RegistryStatus.NOT_FOUND
    assert registry.add("D002", Point(4, 4)) is RegistryStatus.OK


def test_add_then_remove_round_trip() -> None:
    registry = DriverRegistry(10, 10)
    registry.add("D001", Point(2, 3))
    registry.add("D002", Point(5, 7))
    before = registry.snapshot()

    registry.add("D003", Point(8, 1))
    registry.remove("D003")

    assert registry.snapshot() == before
    assert registry.driver_at(Point(8, 1)) is None
    assert not registry.contains("D003")


def test_snapshot_is_detached_copy_in_insertion_order() -> None:
    registry = DriverRegistry(10, 10)
    for driver_id, cell in [("D003", Point(8, 1)), ("D001", Point(2, 3)), ("D002", Point(5, 7))]:
        registry.add(driver_id, cell)

    snapshot = registry.snapshot()
    assert [d.driver_id for d in snapshot] == ["D003", "D001", "D002"]

    snapshot[0].location = Point(0, 0)
    snapshot[0].is_available = False
    registry.relocate("D001", Point(9, 9))

    assert registry.get("D003") == Driver("D003", Point(8, 1), True)
    assert snapshot[1].location == Point(2, 3)


def test_version_only_moves_on_committed_change() -> None:
    registry = DriverRegistry(10, 10)
    v0 = registry.version
    registry.add("D001", Point(1, 1))
    v1 = registry.version
    registry.add("D001", Point(2, 2))
    registry.set_availability("D001", True)
    registry.relocate("ghost", Point(3, 3))

    assert v1 == v0 + 1
    assert registry.version == v1


def test_random_mutations_keep_indices_consistent() -> None:
    rng = random.Random(7)
    registry = DriverRegistry(6, 5)
    ids = [f"D{i:03d}" for i in range(40)]

    for _ in range(2000):
        driver_id = rng.choice(ids)
        cell = Point(rng.randrange(-1, 7), rng.randrange(-1, 6))
        action = rng.randrange(4)
        if action == 0:
            registry.add(driver_id, cell)
        elif action == 1:
            registry.relocate(driver_id, cell)
        elif action == 2:
            registry.set_availability(driver_id, rng.random() < 0.5)
        else:
            registry.remove(driver_id)
        assert_consistent(registry)


def test_concurrent_mutations_keep_indices_consistent() -> None:
    registry = DriverRegistry(20, 20)
    errors = []

    def worker(seed: int) -> None:
        rng = random.Random(seed)
        try:
            for _ in range(300):
                driver_id = f"D{rng.randrange(30):03d}"
                cell = Point(rng.randrange(20), rng.randrange(20))
                if rng.random() < 0.4:
                    registry.add(driver_id, cell)
                elif rng.random() < 0.8:
                    registry.relocate(driver_id, cell)
                else:
                    registry.remove(driver_id)
                drivers = registry.snapshot()
                assert len({d.location for d in drivers}) == len(drivers)
        except AssertionError as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(seed,)) for seed in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert_consistent(registry)


def test_fractional_cells_cannot_sidestep_occupancy() -> None:
    registry = DriverRegistry(10, 10)
    registry.add("D001", Point(1, 2))

    assert registry.add("D002", Point(1.5, 2)) is RegistryStatus.OUT_OF_BOUNDS
    assert registry.relocate("D001", Point(1.6, 2)) is RegistryStatus.OUT_OF_BOUNDS
    assert registry.get("D001").location == Point(1, 2)
    assert_consistent(registry)
