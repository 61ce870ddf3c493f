"""Declarative road network layouts used to initialise a simulation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class IntersectionSpec:
    """Identity and drawing position of one intersection."""

    id: str
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class RoadSpec:
    """Undirected road between two intersections."""

    first: str
    second: str
    weight: float = 1

    def __post_init__(self) -> None:  # type: ignore[override]
        if self.weight < 1:
            raise ValueError("Road weight must be at least 1")


@dataclass(frozen=True)
class NetworkLayout:
    """Intersections and roads making up a repeatable network."""

    name: str
    intersections: List[IntersectionSpec]
    roads: List[RoadSpec] = field(default_factory=list)

    def __post_init__(self) -> None:  # type: ignore[override]
        if not self.intersections:
            raise ValueError("A layout must contain at least one intersection")
        ids = [spec.id for spec in self.intersections]
        if len(set(ids)) != len(ids):
            raise ValueError("Intersection ids must be unique")


def default_layout() -> NetworkLayout:
    """Five intersections on a loop with a weighted shortcut from A to E."""

    return NetworkLayout(
        name="Five junction grid",
        intersections=[
            IntersectionSpec("A", 100, 100),
            IntersectionSpec("B", 300, 100),
            IntersectionSpec("C", 100, 300),
            IntersectionSpec("D", 300, 300),
            IntersectionSpec("E", 500, 200),
        ],
        roads=[
            RoadSpec("A", "B"),
            RoadSpec("A", "C"),
            RoadSpec("B", "D"),
            RoadSpec("C", "D"),
            RoadSpec("B", "E"),
            RoadSpec("D", "E"),
            RoadSpec("A", "E", weight=2),
        ],
    )
