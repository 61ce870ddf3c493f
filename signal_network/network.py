"""Road graph connecting intersections, vehicle injection and routing."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import itertools
import logging
import random
import time
from typing import Callable, Deque, Dict, Iterator, List, Optional

from .config import SimulationConfig
from .controller import IntersectionController
from .vehicles import ARRIVAL_DIRECTIONS, Vehicle, VehicleKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Road:
    """One end of an undirected road as stored in the adjacency list."""

    dest_id: str
    weight: float = 1


class RoadNetwork:
    """Owns the intersections of a simulation and the roads between them."""

    def __init__(
        self,
        config: SimulationConfig | None = None,
        time_func: Callable[[], float] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or SimulationConfig()
        self.time_func = time_func or time.time
        self.rng = rng or random.Random(self.config.seed)
        self.intersections: Dict[str, IntersectionController] = {}
        self.adjacency: Dict[str, List[Road]] = {}
        self._vehicle_ids = itertools.count()

    def __len__(self) -> int:
        return len(self.intersections)

    def __contains__(self, intersection_id: str) -> bool:
        return intersection_id in self.intersections

    def __iter__(self) -> Iterator[IntersectionController]:
        return iter(self.intersections.values())

    def get(self, intersection_id: str) -> Optional[IntersectionController]:
        return self.intersections.get(intersection_id)

    def add_intersection(self, intersection: IntersectionController) -> None:
        if intersection.id in self.intersections:
            raise ValueError(f"Duplicate intersection id {intersection.id!r}")
        self.intersections[intersection.id] = intersection
        self.adjacency.setdefault(intersection.id, [])

    def create_intersection(self, intersection_id: str, x: float = 0.0, y: float = 0.0) -> IntersectionController:
        intersection = IntersectionController(
            intersection_id,
            position=(x, y),
            config=self.config,
            time_func=self.time_func,
        )
        self.add_intersection(intersection)
        return intersection

    def add_road(self, first_id: str, second_id: str, weight: float = 1) -> bool:
        """Connect two known intersections in both directions.

        Returns ``False`` (and logs a warning) when either end is unknown.
        """

        if weight < 1:
            raise ValueError("Road weight must be at least 1")
        if first_id not in self.intersections or second_id not in self.intersections:
            logger.warning(
                "Attempted to add road with non-existent intersections: %s, %s",
                first_id,
                second_id,
            )
            return False
        self.adjacency[first_id].append(Road(second_id, weight))
        self.adjacency[second_id].append(Road(first_id, weight))
        return True

    def neighbors(self, intersection_id: str) -> List[Road]:
        return list(self.adjacency.get(intersection_id, []))

    def _pick_kind(self, kind: VehicleKind | str | None) -> VehicleKind:
        if kind is not None:
            return VehicleKind(kind)
        weights = self.config.kind_weights
        kinds = [VehicleKind(name) for name in weights]
        return self.rng.choices(kinds, weights=[weights[k.value] for k in kinds])[0]

    def generate_vehicle(
        self,
        kind: VehicleKind | str | None = None,
        intersection_id: str | None = None,
    ) -> Optional[Vehicle]:
        """Create a vehicle and queue it at an intersection.

        Parameters
        ----------
        kind:
            Forces the vehicle kind; drawn from ``config.kind_weights`` when
            omitted.
        intersection_id:
            Target intersection; a uniformly random one when omitted.

        Returns ``None`` when the network is empty or the target is unknown.
        """

        if not self.intersections:
            return None
        if intersection_id is None:
            intersection_id = self.rng.choice(list(self.intersections))
        elif intersection_id not in self.intersections:
            logger.warning("Cannot add vehicle: unknown intersection %s", intersection_id)
            return None

        vehicle_kind = self._pick_kind(kind)
        direction = self.rng.choice(ARRIVAL_DIRECTIONS)
        vehicle = Vehicle(
            id=next(self._vehicle_ids),
            kind=vehicle_kind,
            direction=direction,
            arrival_time=self.time_func(),
        )
        self.intersections[intersection_id].add_vehicle(vehicle)
        logger.debug(
            "Generated %s vehicle %s at %s going %s",
            vehicle_kind.value,
            vehicle.id,
            intersection_id,
            direction,
        )
        return vehicle

    def find_path(self, start_id: str, end_id: str, avoid_congested: bool = False) -> List[str]:
        """Return the fewest-hop route from ``start_id`` to ``end_id``.

        Road weights are not used for distance.  With ``avoid_congested`` any
        intersection whose congestion exceeds
        ``config.avoid_congestion_threshold`` is never entered.  An empty
        list means no route exists.
        """

        if start_id not in self.intersections or end_id not in self.intersections:
            logger.error("Start or end intersection not found for pathfinding: %s -> %s", start_id, end_id)
            return []

        threshold = self.config.avoid_congestion_threshold
        predecessors: Dict[str, Optional[str]] = {start_id: None}
        frontier: Deque[str] = deque([start_id])
        while frontier:
            current = frontier.popleft()
            if current == end_id:
                break
            for road in self.adjacency.get(current, []):
                if road.dest_id in predecessors:
                    continue
                if avoid_congested and self.intersections[road.dest_id].congestion_level > threshold:
                    continue
                predecessors[road.dest_id] = current
                frontier.append(road.dest_id)

        if end_id not in predecessors:
            return []

        path: List[str] = []
        step: Optional[str] = end_id
        limit = len(self.intersections) + 1
        while step is not None:
            path.append(step)
            if len(path) > limit:
                return []
            step = predecessors[step]
        path.reverse()
        return path if path[0] == start_id else []
