import pytest

from signal_network import (
    IntersectionSpec,
    NetworkLayout,
    RoadSpec,
    SimulationConfig,
    TrafficSystem,
)

REGULAR_ONLY = {"regular": 1, "public-transport": 0, "emergency": 0}


def make_system(clock, **overrides):
    overrides.setdefault("seed", 42)
    system = TrafficSystem(SimulationConfig(**overrides), time_func=clock)
    system.initialize()
    return system


def test_initialize_builds_default_network(clock):
    system = make_system(clock)

    assert sorted(system.snapshots()) == ["A", "B", "C", "D", "E"]
    assert system.get_snapshot("E").position == (500, 200)
    assert system.initialize() is False
    assert len(system.network) == 5


def test_initialize_with_custom_layout(clock):
    system = TrafficSystem(SimulationConfig(seed=1), time_func=clock)
    layout = NetworkLayout(
        name="corridor",
        intersections=[IntersectionSpec("P"), IntersectionSpec("Q"), IntersectionSpec("R")],
        roads=[RoadSpec("P", "Q"), RoadSpec("Q", "R", weight=3)],
    )

    assert system.initialize(layout) is True
    assert system.find_path("P", "R") == ["P", "Q", "R"]
    assert system.find_path("R", "P") == ["R", "Q", "P"]


def test_layout_validation():
    with pytest.raises(ValueError):
        NetworkLayout(name="empty", intersections=[])
    with pytest.raises(ValueError):
        NetworkLayout(name="dup", intersections=[IntersectionSpec("A"), IntersectionSpec("A")])
    with pytest.raises(ValueError):
        RoadSpec("A", "B", weight=0.5)


def test_each_tick_generates_one_arrival(clock):
    system = make_system(clock)

    for expected in range(1, 6):
        report = system.tick()
        assert report.tick == expected
        assert report.arrival is not None
        assert report.arrival.id == expected - 1


def test_emergency_intersection_is_preempted(clock):
    system = make_system(clock, kind_weights=REGULAR_ONLY)
    for _ in range(3):
        system.add_vehicle("regular", "A")
    emergency = system.add_emergency_vehicle("C")

    report = system.tick()

    assert report.preempted == "C"
    assert report.deferred == []
    assert emergency.wait_time == 0.0
    snapshot = system.get_snapshot("C")
    assert snapshot.has_emergency is False
    assert snapshot.emergency_info is None
    assert snapshot.processed_count >= 1


def test_busiest_intersection_dispatched_without_emergencies(clock):
    system = make_system(clock, kind_weights=REGULAR_ONLY)
    for _ in range(6):
        system.add_vehicle(intersection_id="D")

    report = system.tick()

    assert report.preempted == "D"
    assert set(report.departures) == {"A", "B", "C", "D", "E"}


def test_second_emergency_is_deferred_until_next_tick(clock):
    system = make_system(clock, kind_weights=REGULAR_ONLY)
    system.add_emergency_vehicle("A")
    for _ in range(3):
        system.add_vehicle("regular", "A")
    system.add_emergency_vehicle("C")

    first = system.tick()

    assert first.preempted == "A"
    assert first.deferred == ["C"]
    assert "C" not in first.departures
    assert system.get_snapshot("C").processed_count == 0
    assert system.get_snapshot("C").has_emergency is True

    second = system.tick()

    assert second.preempted == "C"
    assert second.deferred == []
    assert system.get_snapshot("C").has_emergency is False


def test_dispatch_membership_tracks_busy_intersections(clock):
    system = make_system(clock, kind_weights=REGULAR_ONLY)
    system.add_vehicle(intersection_id="B")
    system.add_vehicle(intersection_id="B")

    system._refresh_dispatch()

    busy = {intersection.id for intersection in system.network if intersection.total_vehicles()}
    assert {intersection.id for intersection in system.dispatch} == busy
    assert "B" in system.dispatch


def test_snapshot_is_idempotent_between_ticks(clock):
    system = make_system(clock)
    system.tick()
    system.tick()

    first = system.get_snapshot("B")
    clock.advance(30)
    second = system.get_snapshot("B")

    assert first == second
    assert system.snapshots() == system.snapshots()


def test_snapshot_refreshes_after_add_vehicle(clock):
    system = make_system(clock)
    before = system.get_snapshot("E")

    system.add_vehicle("public-transport", "E")

    after = system.get_snapshot("E")
    assert after.total_vehicles == before.total_vehicles + 1
    assert sum(d.count_by_kind["public-transport"] for d in after.per_direction.values()) == 1


def test_unknown_intersection_queries_degrade_gracefully(clock):
    system = make_system(clock)

    assert system.get_snapshot("Z") is None
    assert system.add_vehicle(intersection_id="Z") is None
    assert system.find_path("A", "Z") == []


def test_congestion_matches_queue_state_after_ticks(clock):
    system = make_system(clock, tick_interval_ms=100)
    for _ in range(8):
        system.tick()

    for intersection in system.network:
        waiting = intersection.total_vehicles()
        total_wait = sum(queue.total_wait_seconds() for queue in intersection.queues.values())
        average = total_wait / waiting if waiting else 0.0
        expected = min(100.0, max(0.0, waiting * 5 + average * 2))
        assert intersection.congestion_level == pytest.approx(expected)


def test_summary_aggregates_snapshots(clock):
    system = make_system(clock)
    for _ in range(10):
        system.tick()
    system.add_emergency_vehicle("A")

    summary = system.summary()
    snapshots = system.snapshots().values()

    assert summary.total_vehicles == sum(s.total_vehicles for s in snapshots)
    assert summary.total_processed == sum(s.processed_count for s in snapshots)
    assert summary.emergency_intersections >= 1
    assert 0.0 <= summary.average_congestion <= 100.0


def test_same_seed_gives_same_run(clock):
    first = make_system(clock, seed=7)
    second = make_system(clock, seed=7)

    for _ in range(15):
        first.tick()
        second.tick()

    assert first.snapshots() == second.snapshots()


def test_independent_systems_do_not_share_state(clock):
    first = make_system(clock)
    second = make_system(clock)

    first.add_vehicle(intersection_id="A")

    assert first.get_snapshot("A").total_vehicles == 1
    assert second.get_snapshot("A").total_vehicles == 0
    assert second.add_vehicle().id == 0


def test_run_executes_requested_ticks(clock):
    system = TrafficSystem(SimulationConfig(seed=5, tick_interval_ms=250), time_func=clock)
    pauses = []

    executed = system.run(max_ticks=4, sleep_func=pauses.append)

    assert executed == 4
    assert system.initialized
    assert system.tick_count == 4
    assert pauses == [0.25] * 4


def test_run_stops_on_keyboard_interrupt(clock):
    system = make_system(clock)

    def interrupt(_seconds):
        raise KeyboardInterrupt

    assert system.run(max_ticks=10, sleep_func=interrupt) == 1
    assert system.tick_count == 1
