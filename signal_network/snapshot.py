"""Read-only projections of engine state handed to presentation code."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True, slots=True)
class EmergencyInfo:
    """Details captured when an emergency vehicle joins an intersection queue."""

    kind: str
    location: str
    time: float
    intended_direction: str


@dataclass(frozen=True, slots=True)
class DirectionSnapshot:
    """Queue metrics for a single approach.

    Attributes
    ----------
    count:
        Vehicles currently waiting on the approach.
    count_by_kind:
        Waiting vehicles broken down by :class:`~signal_network.vehicles.VehicleKind` value.
    avg_wait_seconds:
        Average wait of the queued vehicles rounded to one decimal, ``0.0``
        for an empty queue.
    """

    count: int
    count_by_kind: Dict[str, int]
    avg_wait_seconds: float


@dataclass(frozen=True, slots=True)
class IntersectionSnapshot:
    """Point-in-time view of an :class:`IntersectionController`."""

    id: str
    position: Tuple[float, float]
    congestion_level: float
    congestion_band: str
    active_direction: str
    active_duration: float
    per_direction: Dict[str, DirectionSnapshot]
    has_emergency: bool
    emergency_info: Optional[EmergencyInfo]
    processed_count: int

    @property
    def total_vehicles(self) -> int:
        return sum(direction.count for direction in self.per_direction.values())

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class NetworkSummary:
    """Network wide overview shown above the per-intersection panels."""

    total_vehicles: int
    emergency_intersections: int
    average_congestion: float
    total_processed: int
