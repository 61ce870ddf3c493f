import pytest

from signal_network.vehicles import (
    DIRECTIONS,
    DirectionalQueue,
    Vehicle,
    VehicleKind,
    next_direction,
)


def make_vehicle(vehicle_id, clock, kind="regular", direction="N"):
    return Vehicle(id=vehicle_id, kind=kind, direction=direction, arrival_time=clock())


def test_queue_is_fifo(clock):
    queue = DirectionalQueue(clock)
    for vehicle_id in range(4):
        queue.enqueue(make_vehicle(vehicle_id, clock))

    assert queue.peek().id == 0
    assert [queue.dequeue().id for _ in range(4)] == [0, 1, 2, 3]
    assert queue.is_empty()


def test_empty_queue_returns_none(clock):
    queue = DirectionalQueue(clock)

    assert queue.dequeue() is None
    assert queue.peek() is None
    assert queue.size() == 0
    assert queue.average_wait_seconds() == 0.0


def test_queue_counts_by_kind(clock):
    queue = DirectionalQueue(clock)
    queue.enqueue(make_vehicle(1, clock, "regular"))
    queue.enqueue(make_vehicle(2, clock, "emergency"))
    queue.enqueue(make_vehicle(3, clock, "regular"))
    queue.enqueue(make_vehicle(4, clock, VehicleKind.PUBLIC_TRANSPORT))

    assert queue.count_by_kind("regular") == 2
    assert queue.count_by_kind(VehicleKind.EMERGENCY) == 1
    assert queue.count_by_kind("public-transport") == 1
    assert queue.has_emergency()
    assert len(queue) == 4


def test_total_wait_is_live(clock):
    queue = DirectionalQueue(clock)
    queue.enqueue(make_vehicle(1, clock))
    clock.advance(2.0)
    queue.enqueue(make_vehicle(2, clock))

    assert queue.total_wait_seconds() == pytest.approx(2.0)
    clock.advance(3.0)
    assert queue.total_wait_seconds() == pytest.approx(8.0)
    assert queue.average_wait_seconds() == pytest.approx(4.0)


def test_vehicle_departure_stamps_wait(clock):
    vehicle = make_vehicle(7, clock)
    assert vehicle.wait_time == 0.0

    clock.advance(6.5)
    vehicle.depart(clock())

    assert vehicle.wait_time == pytest.approx(6.5)


def test_vehicle_rejects_unknown_values(clock):
    with pytest.raises(ValueError):
        make_vehicle(1, clock, direction="NE")
    with pytest.raises(ValueError):
        make_vehicle(1, clock, kind="bicycle")


def test_round_robin_order():
    assert DIRECTIONS == ("N", "E", "S", "W")
    assert [next_direction(direction) for direction in DIRECTIONS] == ["E", "S", "W", "N"]
