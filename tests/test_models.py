import dataclasses

import pytest

from grid_dispatch.models import Driver, Order, Point, RegistryStatus


def test_point_distance_is_manhattan() -> None:
    assert Point(2, 3).manhattan_distance(Point(4, 5)) == 4
    assert Point(8, 1).manhattan_distance(Point(4, 5)) == 8
    assert Point(0, 0).manhattan_distance(Point(0, 0)) == 0


def test_point_distance_is_symmetric() -> None:
    a, b = Point(1, 9), Point(7, 2)
    assert a.manhattan_distance(b) == b.manhattan_distance(a) == 13


def test_point_is_immutable_and_hashable() -> None:
    p = Point(1, 2)
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.x = 5  # type: ignore[misc]
    assert {p, Point(1, 2)} == {Point(1, 2)}


def test_point_orders_by_component() -> None:
    assert sorted([Point(1, 5), Point(0, 9), Point(1, 2)]) == [Point(0, 9), Point(1, 2), Point(1, 5)]


def test_point_str() -> None:
    assert str(Point(4, 5)) == "(4, 5)"


def test_driver_defaults_to_available() -> None:
    assert Driver("D001", Point(0, 0)).is_available is True


def test_driver_copy_is_detached() -> None:
    original = Driver("D001", Point(2, 3))
    clone = original.copy()
    clone.is_available = False
    clone.location = Point(9, 9)

    assert original == Driver("D001", Point(2, 3), True)


def test_driver_and_order_str() -> None:
    assert str(Driver("D001", Point(2, 3))) == "Driver D001 at (2, 3) (Available: True)"
    assert str(Order("O001", Point(4, 5))) == "Order O001 at (4, 5)"


def test_order_is_read_only() -> None:
    order = Order("O001", Point(4, 5))
    with pytest.raises(dataclasses.FrozenInstanceError):
        order.pickup_location = Point(0, 0)  # type: ignore[misc]


def test_registry_status_truthiness() -> None:
    assert RegistryStatus.OK.ok
    assert bool(RegistryStatus.OK) is True
    for status in RegistryStatus:
        if status is not RegistryStatus.OK:
            assert not status.ok
            assert bool(status) is False
