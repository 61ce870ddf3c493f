"""Adaptive traffic signal network simulation package."""

from .config import SimulationConfig
from .controller import IntersectionController
from .dispatch import PriorityDispatch, priority_score
from .layout import IntersectionSpec, NetworkLayout, RoadSpec, default_layout
from .network import Road, RoadNetwork
from .snapshot import DirectionSnapshot, EmergencyInfo, IntersectionSnapshot, NetworkSummary
from .system import TickReport, TrafficSystem
from .vehicles import DIRECTIONS, DirectionalQueue, Vehicle, VehicleKind

__all__ = [
    "DIRECTIONS",
    "DirectionSnapshot",
    "DirectionalQueue",
    "EmergencyInfo",
    "IntersectionController",
    "IntersectionSnapshot",
    "IntersectionSpec",
    "NetworkLayout",
    "NetworkSummary",
    "PriorityDispatch",
    "Road",
    "RoadNetwork",
    "RoadSpec",
    "SimulationConfig",
    "TickReport",
    "TrafficSystem",
    "Vehicle",
    "VehicleKind",
    "default_layout",
    "priority_score",
]
