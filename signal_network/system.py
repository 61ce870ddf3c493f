"""High level orchestration of the traffic signal network simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
import functools
import logging
import random
import time
from typing import Callable, Dict, List, Optional

from .config import SimulationConfig
from .controller import IntersectionController
from .dispatch import PriorityDispatch, priority_score
from .layout import NetworkLayout, default_layout
from .network import RoadNetwork
from .snapshot import IntersectionSnapshot, NetworkSummary
from .vehicles import Vehicle, VehicleKind

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TickReport:
    """What happened during one call to :meth:`TrafficSystem.tick`."""

    tick: int
    arrival: Optional[Vehicle] = None
    preempted: Optional[str] = None
    departures: Dict[str, int] = field(default_factory=dict)
    deferred: List[str] = field(default_factory=list)


class TrafficSystem:
    """Main entry point driving the network one tick at a time.

    All simulation state (intersections, dispatch heap, vehicle ids and the
    random generator) lives on the instance, so independent systems can run
    side by side.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        time_func: Callable[[], float] | None = None,
    ) -> None:
        self.config = config or SimulationConfig()
        self.time_func = time_func or time.time
        self.rng = random.Random(self.config.seed)
        self.network = RoadNetwork(self.config, time_func=self.time_func, rng=self.rng)
        self.dispatch: PriorityDispatch[IntersectionController] = PriorityDispatch(
            score=functools.partial(
                priority_score, emergency_offset=self.config.emergency_priority_offset
            )
        )
        self.layout: Optional[NetworkLayout] = None
        self.tick_count = 0
        self._snapshots: Dict[str, IntersectionSnapshot] = {}

    @property
    def initialized(self) -> bool:
        return self.layout is not None

    def initialize(self, layout: NetworkLayout | None = None) -> bool:
        """Build the network from ``layout`` (the default grid when omitted).

        Only the first call has an effect; later calls log a warning and
        return ``False``.
        """

        if self.initialized:
            logger.warning("Traffic system already initialised with %s", self.layout.name)
            return False
        layout = layout or default_layout()
        for spec in layout.intersections:
            self.network.create_intersection(spec.id, spec.x, spec.y)
        for road in layout.roads:
            self.network.add_road(road.first, road.second, road.weight)
        self.layout = layout
        self._publish()
        logger.info(
            "Initialised %r with %d intersections and %d roads",
            layout.name,
            len(layout.intersections),
            len(layout.roads),
        )
        return True

    def _refresh_dispatch(self) -> None:
        for intersection in self.network:
            if intersection.has_emergency or intersection.total_vehicles() > 0:
                self.dispatch.update(intersection)
            else:
                self.dispatch.remove(intersection.id)

    def _publish(self) -> None:
        self._snapshots = {
            intersection.id: intersection.snapshot() for intersection in self.network
        }

    def tick(self) -> TickReport:
        """Advance the simulation by one step.

        One random arrival is generated, the dispatch heap is refreshed, the
        top priority intersection runs in emergency mode and every other
        intersection without a pending emergency runs in normal mode.
        """

        self.tick_count += 1
        interval = self.config.tick_interval_ms
        report = TickReport(tick=self.tick_count)
        report.arrival = self.network.generate_vehicle()

        self._refresh_dispatch()

        top = self.dispatch.pop_max()
        if top is not None:
            top.update_green_allocation(emergency_override=True)
            report.departures[top.id] = top.process_vehicles(interval)
            report.preempted = top.id
            if top.has_emergency or top.total_vehicles() > 0:
                self.dispatch.push(top)
            logger.debug("Tick %d: %s dispatched first", self.tick_count, top.id)

        for intersection in self.network:
            if intersection is top:
                continue
            if intersection.has_emergency:
                report.deferred.append(intersection.id)
                continue
            intersection.update_green_allocation(emergency_override=False)
            report.departures[intersection.id] = intersection.process_vehicles(interval)

        if report.deferred:
            logger.info("Tick %d: deferred emergency intersections %s", self.tick_count, report.deferred)
        self._publish()
        return report

    def add_vehicle(
        self,
        kind: VehicleKind | str | None = None,
        intersection_id: str | None = None,
    ) -> Optional[Vehicle]:
        """Inject one vehicle; ``kind`` forces its type."""

        vehicle = self.network.generate_vehicle(kind, intersection_id)
        if vehicle is not None:
            self._publish()
        return vehicle

    def add_emergency_vehicle(self, intersection_id: str | None = None) -> Optional[Vehicle]:
        vehicle = self.add_vehicle(VehicleKind.EMERGENCY, intersection_id)
        if vehicle is not None:
            logger.info("Emergency vehicle %s dispatched heading %s", vehicle.id, vehicle.direction)
        return vehicle

    def find_path(self, start_id: str, end_id: str, avoid_congested: bool = False) -> List[str]:
        return self.network.find_path(start_id, end_id, avoid_congested)

    def get_snapshot(self, intersection_id: str) -> Optional[IntersectionSnapshot]:
        """Return the last published view of ``intersection_id`` or ``None``."""

        snapshot = self._snapshots.get(intersection_id)
        if snapshot is None:
            logger.warning("No snapshot for unknown intersection %s", intersection_id)
        return snapshot

    def snapshots(self) -> Dict[str, IntersectionSnapshot]:
        return dict(self._snapshots)

    def summary(self) -> NetworkSummary:
        snapshots = list(self._snapshots.values())
        average = (
            sum(snapshot.congestion_level for snapshot in snapshots) / len(snapshots)
            if snapshots
            else 0.0
        )
        return NetworkSummary(
            total_vehicles=sum(snapshot.total_vehicles for snapshot in snapshots),
            emergency_intersections=sum(1 for snapshot in snapshots if snapshot.has_emergency),
            average_congestion=round(average, 1),
            total_processed=sum(snapshot.processed_count for snapshot in snapshots),
        )

    def run(
        self,
        max_ticks: int | None = None,
        sleep_func: Callable[[float], None] | None = time.sleep,
    ) -> int:
        """Tick at ``config.tick_interval_ms`` until ``max_ticks`` or interruption.

        ``sleep_func=None`` runs the ticks back to back.  Returns the number
        of ticks executed by this call.
        """

        if not self.initialized:
            self.initialize()
        executed = 0
        try:
            while max_ticks is None or executed < max_ticks:
                self.tick()
                executed += 1
                if sleep_func is not None:
                    sleep_func(self.config.tick_seconds)
        except KeyboardInterrupt:
            logger.info("Traffic simulation interrupted by user")
        return executed
