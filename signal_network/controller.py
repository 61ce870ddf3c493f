"""Signal timing controller for a single four-way intersection."""

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Dict, Optional, Tuple

from .config import SimulationConfig
from .snapshot import DirectionSnapshot, EmergencyInfo, IntersectionSnapshot
from .vehicles import DIRECTIONS, DirectionalQueue, Vehicle, VehicleKind, next_direction

logger = logging.getLogger(__name__)


class IntersectionController:
    """Adaptive controller sharing a green cycle between four approaches.

    Exactly one approach is green at a time.  Each tick the controller
    re-allocates green time with :meth:`update_green_allocation` and then
    releases vehicles from the green approach with :meth:`process_vehicles`:

    * With ``emergency_override`` and an emergency vehicle waiting, the first
      approach (in ``N, E, S, W`` order) holding one gets ``emergency_green``
      seconds and every other approach is stopped.
    * When all queues are empty the green advances round-robin with
      ``min_green`` seconds.
    * Otherwise the base cycle is shared proportionally to queue lengths,
      clamped to ``[min_green, max_green]``, and any shortfall is handed to
      the longest queue.
    """

    def __init__(
        self,
        intersection_id: str,
        position: Tuple[float, float] = (0.0, 0.0),
        config: SimulationConfig | None = None,
        time_func: Callable[[], float] | None = None,
    ) -> None:
        self.id = intersection_id
        self.position = position
        self.config = config or SimulationConfig()
        self.time_func = time_func or time.time

        self.queues: Dict[str, DirectionalQueue] = {
            direction: DirectionalQueue(self.time_func) for direction in DIRECTIONS
        }
        self.current_green = DIRECTIONS[0]
        self.green_duration: Dict[str, float] = {direction: 0 for direction in DIRECTIONS}
        self.congestion_level = 0.0
        self.has_emergency = False
        self.emergency_info: Optional[EmergencyInfo] = None
        self.processed_count = 0

    def __repr__(self) -> str:
        return (
            f"IntersectionController(id={self.id!r}, green={self.current_green!r}, "
            f"vehicles={self.total_vehicles()}, emergency={self.has_emergency})"
        )

    @property
    def min_green(self) -> int:
        return self.config.min_green

    @property
    def max_green(self) -> int:
        return self.config.max_green

    @property
    def emergency_green(self) -> int:
        return self.config.emergency_green

    def total_vehicles(self) -> int:
        return sum(queue.size() for queue in self.queues.values())

    def _emergency_direction(self) -> Optional[str]:
        for direction in DIRECTIONS:
            if self.queues[direction].has_emergency():
                return direction
        return None

    def _set_emergency(self, flag: bool) -> None:
        self.has_emergency = flag
        if not flag:
            self.emergency_info = None

    def add_vehicle(self, vehicle: Vehicle) -> None:
        """Queue ``vehicle`` on its approach and refresh derived state."""

        self.queues[vehicle.direction].enqueue(vehicle)
        if vehicle.is_emergency:
            self.has_emergency = True
            self.emergency_info = EmergencyInfo(
                kind=vehicle.kind.value,
                location=self.id,
                time=self.time_func(),
                intended_direction=vehicle.direction,
            )
            logger.info(
                "Emergency vehicle %s waiting at %s heading %s",
                vehicle.id,
                self.id,
                vehicle.direction,
            )
        self.update_congestion()

    def update_green_allocation(self, emergency_override: bool = False) -> None:
        """Choose the green approach and its duration for the coming tick."""

        emergency_direction = self._emergency_direction()
        self._set_emergency(emergency_direction is not None)

        if emergency_override and emergency_direction is not None:
            for direction in DIRECTIONS:
                self.green_duration[direction] = 0
            self.current_green = emergency_direction
            self.green_duration[emergency_direction] = self.emergency_green
            logger.debug("%s preempted: %s green for %ss", self.id, emergency_direction, self.emergency_green)
            return

        total_queue_length = 0
        longest_direction = self.current_green
        longest_length = 0
        for direction in DIRECTIONS:
            size = self.queues[direction].size()
            total_queue_length += size
            if size > longest_length:
                longest_length = size
                longest_direction = direction

        if total_queue_length == 0:
            for direction in DIRECTIONS:
                self.green_duration[direction] = 0
            self.current_green = next_direction(self.current_green)
            self.green_duration[self.current_green] = self.min_green
            return

        base_cycle = self.config.base_cycle
        allocated = 0
        for direction in DIRECTIONS:
            size = self.queues[direction].size()
            if size > 0:
                duration = math.floor((size / total_queue_length) * base_cycle)
                duration = max(self.min_green, min(self.max_green, duration))
            else:
                duration = 0
            self.green_duration[direction] = duration
            allocated += duration

        # The shortfall is not clamped again and may exceed max_green.
        if allocated == 0:
            self.green_duration[longest_direction] = self.min_green
        elif allocated < base_cycle:
            self.green_duration[longest_direction] += base_cycle - allocated

        active = self.current_green
        if self.green_duration[active] <= 0 or self.queues[active].is_empty():
            candidate = longest_direction
            if candidate == active and total_queue_length > longest_length:
                candidate = next_direction(active)
            self.current_green = candidate

    def process_vehicles(self, tick_interval_ms: float | None = None) -> int:
        """Release vehicles from the green approach and return how many left.

        Capacity is ``green duration * tick length in seconds * discharge
        rate`` vehicles, rounded down.
        """

        if tick_interval_ms is None:
            tick_interval_ms = self.config.tick_interval_ms
        queue = self.queues[self.current_green]
        if queue.is_empty():
            return 0

        capacity = math.floor(
            self.green_duration[self.current_green]
            * (tick_interval_ms / 1000.0)
            * self.config.discharge_rate
        )
        now = self.time_func()
        moved = 0
        for _ in range(min(queue.size(), capacity)):
            vehicle = queue.dequeue()
            if vehicle is None:
                break
            vehicle.depart(now)
            self.processed_count += 1
            moved += 1

        if self.has_emergency and self._emergency_direction() is None:
            self._set_emergency(False)
            logger.info("Emergency cleared at %s", self.id)
        self.update_congestion()
        if moved:
            logger.debug("%s released %d vehicle(s) from %s", self.id, moved, self.current_green)
        return moved

    def update_congestion(self) -> float:
        """Recompute ``congestion_level`` from the current queues."""

        waiting = 0
        total_wait = 0.0
        for queue in self.queues.values():
            waiting += queue.size()
            total_wait += queue.total_wait_seconds()
        average_wait = total_wait / waiting if waiting else 0.0
        level = (
            waiting * self.config.congestion_vehicle_weight
            + average_wait * self.config.congestion_wait_weight
        )
        self.congestion_level = min(100.0, max(0.0, level))
        return self.congestion_level

    def snapshot(self) -> IntersectionSnapshot:
        per_direction: Dict[str, DirectionSnapshot] = {}
        for direction in DIRECTIONS:
            queue = self.queues[direction]
            per_direction[direction] = DirectionSnapshot(
                count=queue.size(),
                count_by_kind={kind.value: queue.count_by_kind(kind) for kind in VehicleKind},
                avg_wait_seconds=round(queue.average_wait_seconds(), 1),
            )
        return IntersectionSnapshot(
            id=self.id,
            position=tuple(self.position),
            congestion_level=self.congestion_level,
            congestion_band=self.config.congestion_band(self.congestion_level),
            active_direction=self.current_green,
            active_duration=self.green_duration[self.current_green],
            per_direction=per_direction,
            has_emergency=self.has_emergency,
            emergency_info=self.emergency_info,
            processed_count=self.processed_count,
        )
