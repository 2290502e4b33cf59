from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

from queuesurvey.core.types import BBoxXYWH, Point

# Fraction of the box height, from the top, where wheels meet the road.
GROUND_CONTACT_RATIO = 0.9


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """Even-odd ray casting test.

    A polygon with fewer than 3 points encloses nothing, so every point is outside.
    """
    if len(polygon) < 3:
        return False

    x, y = point
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def box_center(bbox: BBoxXYWH) -> Point:
    """Return the geometric center of an (x, y, w, h) box."""
    x, y, w, h = bbox
    return (float(x) + float(w) / 2.0, float(y) + float(h) / 2.0)


def ground_point(bbox: BBoxXYWH) -> Point:
    """Return the point near the bottom of the box used for ROI membership."""
    x, y, w, h = bbox
    return (float(x) + float(w) / 2.0, float(y) + float(h) * GROUND_CONTACT_RATIO)


def scale_bbox(bbox: BBoxXYWH, scale: Tuple[float, float]) -> BBoxXYWH:
    sx, sy = scale
    x, y, w, h = bbox
    return (float(x) * sx, float(y) * sy, float(w) * sx, float(h) * sy)


def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def cosine_similarity(ax: float, ay: float, bx: float, by: float) -> Optional[float]:
    """Cosine of the angle between two vectors, None when either has zero length."""
    mag_a = math.hypot(ax, ay)
    mag_b = math.hypot(bx, by)
    if mag_a == 0.0 or mag_b == 0.0:
        return None
    return (ax * bx + ay * by) / (mag_a * mag_b)
