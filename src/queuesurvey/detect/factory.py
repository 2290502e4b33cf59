from __future__ import annotations

"""Factory for detection providers."""

from queuesurvey.core.errors import DetectorUnavailable
from queuesurvey.core.schema import SurveyConfig
from queuesurvey.detect.providers import DetectionProvider
from queuesurvey.detect.yolo_provider import UltralyticsYoloDetector


def make_detector(cfg: SurveyConfig) -> DetectionProvider:
    """Build the YOLO detector, reporting any load failure as DetectorUnavailable."""
    try:
        return UltralyticsYoloDetector(
            weights=cfg.detector.weights,
            device=cfg.detector.device,
            conf=cfg.thresholds.conf,
            iou=cfg.thresholds.iou,
        )
    except Exception as exc:
        raise DetectorUnavailable(
            f"Cannot load detector weights={cfg.detector.weights!r} on {cfg.detector.device}: {exc}"
        ) from exc
