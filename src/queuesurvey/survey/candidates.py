from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from queuesurvey.core.schema import DEFAULT_VEHICLE_CLASSES
from queuesurvey.core.types import Candidate, Detection, Point
from queuesurvey.survey.geometry import box_center, ground_point, point_in_polygon, scale_bbox


def scale_factors(canvas_size: Tuple[int, int], source_size: Tuple[int, int]) -> Tuple[float, float]:
    """Ratio of canonical canvas size to source frame size, per axis."""
    cw, ch = canvas_size
    sw, sh = source_size
    if sw <= 0 or sh <= 0:
        raise ValueError(f"Invalid source frame size: {source_size}")
    return (float(cw) / float(sw), float(ch) / float(sh))


class CandidateExtractor:
    """Adapter: Detection (source pixels) -> Candidate (canvas, inside ROI)."""

    def __init__(self, roi: Sequence[Point], vehicle_classes: Iterable[str] = DEFAULT_VEHICLE_CLASSES):
        self._roi = [(float(x), float(y)) for x, y in roi]
        self._classes = frozenset(str(c) for c in vehicle_classes)

    @property
    def vehicle_classes(self) -> frozenset:
        return self._classes

    def extract(self, detections: List[Detection], scale: Tuple[float, float]) -> List[Candidate]:
        """Keep vehicle detections whose ground-contact point lies in the ROI."""
        out: List[Candidate] = []
        for det in detections:
            if det.class_label not in self._classes:
                continue
            bbox = scale_bbox(det.bbox, scale)
            if not point_in_polygon(ground_point(bbox), self._roi):
                continue
            cx, cy = box_center(bbox)
            out.append(Candidate(x=cx, y=cy, w=bbox[2], h=bbox[3], class_label=det.class_label))
        return out
