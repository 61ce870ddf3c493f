"""Configuration dataclasses for the traffic signal network simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


def _default_kind_weights() -> Dict[str, int]:
    return {"regular": 4, "public-transport": 1, "emergency": 1}


@dataclass(slots=True)
class SimulationConfig:
    """Runtime configuration for :class:`signal_network.system.TrafficSystem`.

    Parameters
    ----------
    tick_interval_ms:
        Wall-clock length of one simulation tick in milliseconds.  Departures
        per tick are scaled by this interval.
    min_green, max_green:
        Clamp applied to proportional green allocations in seconds.
    emergency_green:
        Green duration granted to the direction holding an emergency vehicle
        when the intersection is preempted.
    base_cycle:
        Total cycle length in seconds shared out between busy directions.
    discharge_rate:
        Vehicles released per second of allocated green.
    avoid_congestion_threshold:
        Congestion level above which routing skips an intersection when
        congestion avoidance is requested.
    high_congestion_threshold, low_congestion_threshold:
        Bounds used to band congestion levels into ``"high"``, ``"normal"``
        and ``"low"`` for display.
    emergency_priority_offset:
        Additive score that lets intersections holding an emergency vehicle
        dominate the dispatch order.
    congestion_vehicle_weight, congestion_wait_weight:
        Coefficients of the congestion score
        ``vehicles * vehicle_weight + average_wait * wait_weight``.
    kind_weights:
        Relative frequency of each vehicle kind for random arrivals.
    seed:
        Optional seed for the simulation random generator.  ``None`` draws
        from system entropy.
    """

    tick_interval_ms: int = 500
    min_green: int = 5
    max_green: int = 30
    emergency_green: int = 25
    base_cycle: int = 45
    discharge_rate: float = 2.0
    avoid_congestion_threshold: float = 60.0
    high_congestion_threshold: float = 70.0
    low_congestion_threshold: float = 30.0
    emergency_priority_offset: int = 1000
    congestion_vehicle_weight: float = 5.0
    congestion_wait_weight: float = 2.0
    kind_weights: Dict[str, int] = field(default_factory=_default_kind_weights)
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be positive")
        if self.min_green < 0 or self.min_green > self.max_green:
            raise ValueError("min_green must lie between 0 and max_green")
        if self.emergency_green <= 0 or self.base_cycle <= 0:
            raise ValueError("emergency_green and base_cycle must be positive")
        if self.discharge_rate < 0:
            raise ValueError("discharge_rate cannot be negative")
        if self.low_congestion_threshold > self.high_congestion_threshold:
            raise ValueError("low congestion threshold exceeds the high threshold")
        if any(weight < 0 for weight in self.kind_weights.values()):
            raise ValueError("vehicle kind weights cannot be negative")
        if not any(self.kind_weights.values()):
            raise ValueError("at least one vehicle kind needs a positive weight")

    @property
    def tick_seconds(self) -> float:
        """Length of one tick in seconds."""

        return self.tick_interval_ms / 1000.0

    def congestion_band(self, level: float) -> str:
        """Classify ``level`` the way the dashboard colours congestion bars."""

        if level > self.high_congestion_threshold:
            return "high"
        if level < self.low_congestion_threshold:
            return "low"
        return "normal"
