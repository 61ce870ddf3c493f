"""Vehicle records and the per-direction queues that hold them."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, Iterator, Optional, Tuple

# Tie-breaks in round-robin and emergency selection depend on this order.
DIRECTIONS: Tuple[str, ...] = ("N", "E", "S", "W")

# Order in which random arrivals pick a direction.
ARRIVAL_DIRECTIONS: Tuple[str, ...] = ("N", "S", "E", "W")


class VehicleKind(str, Enum):
    """Vehicle categories recognised by the signal controllers."""

    REGULAR = "regular"
    PUBLIC_TRANSPORT = "public-transport"
    EMERGENCY = "emergency"


def validate_direction(direction: str) -> str:
    if direction not in DIRECTIONS:
        raise ValueError(f"Unknown direction {direction!r}; expected one of {DIRECTIONS}")
    return direction


def next_direction(direction: str) -> str:
    """Return the round-robin successor of ``direction`` (N→E→S→W→N)."""

    index = DIRECTIONS.index(direction)
    return DIRECTIONS[(index + 1) % len(DIRECTIONS)]


@dataclass(slots=True)
class Vehicle:
    """A single vehicle waiting at an intersection approach.

    Identity, kind, direction and arrival time are fixed at creation;
    ``wait_time`` stays ``0.0`` until the vehicle departs.
    """

    id: int
    kind: VehicleKind
    direction: str
    arrival_time: float
    wait_time: float = 0.0

    def __post_init__(self) -> None:
        self.kind = VehicleKind(self.kind)
        validate_direction(self.direction)

    @property
    def is_emergency(self) -> bool:
        return self.kind is VehicleKind.EMERGENCY

    def waited(self, now: float) -> float:
        """Seconds spent in the queue up to ``now``."""

        return now - self.arrival_time

    def depart(self, now: float) -> None:
        self.wait_time = self.waited(now)


class DirectionalQueue:
    """FIFO of vehicles approaching an intersection from one direction."""

    def __init__(self, time_func: Callable[[], float]) -> None:
        self.time_func = time_func
        self._items: Deque[Vehicle] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Vehicle]:
        return iter(self._items)

    def enqueue(self, vehicle: Vehicle) -> None:
        self._items.append(vehicle)

    def dequeue(self) -> Optional[Vehicle]:
        """Remove and return the front vehicle, or ``None`` when empty."""

        if not self._items:
            return None
        return self._items.popleft()

    def peek(self) -> Optional[Vehicle]:
        if not self._items:
            return None
        return self._items[0]

    def size(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def count_by_kind(self, kind: VehicleKind | str) -> int:
        kind = VehicleKind(kind)
        return sum(1 for vehicle in self._items if vehicle.kind is kind)

    def has_emergency(self) -> bool:
        return any(vehicle.is_emergency for vehicle in self._items)

    def total_wait_seconds(self) -> float:
        """Live sum of how long every queued vehicle has been waiting."""

        now = self.time_func()
        return sum(vehicle.waited(now) for vehicle in self._items)

    def average_wait_seconds(self) -> float:
        if not self._items:
            return 0.0
        return self.total_wait_seconds() / len(self._items)
