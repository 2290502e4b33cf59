from __future__ import annotations

"""Shared type aliases and small data containers."""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

Point = Tuple[float, float]

# Bounding box in (x, y, w, h) pixel coordinates, top-left origin.
BBoxXYWH = Tuple[float, float, float, float]


class Phase(str, Enum):
    """Inferred signal phase."""
    GREEN = "GREEN"
    RED = "RED"


@dataclass(frozen=True)
class FlowVector:
    """Directed segment giving the expected direction of travel."""
    start: Point
    end: Point

    @property
    def dx(self) -> float:
        return float(self.end[0]) - float(self.start[0])

    @property
    def dy(self) -> float:
        return float(self.end[1]) - float(self.start[1])


@dataclass(frozen=True)
class Detection:
    """Raw detector output for a single object, in source frame pixels."""
    class_label: str
    bbox: BBoxXYWH
    score: float = 1.0


@dataclass(frozen=True)
class Candidate:
    """ROI-filtered detection in canonical coordinates (box center)."""
    x: float
    y: float
    w: float
    h: float
    class_label: str
