from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from queuesurvey.core.pipeline.base import StageContext
from queuesurvey.core.schema import SurveyConfig
from queuesurvey.detect.factory import make_detector
from queuesurvey.survey.session import DetectorFactory, SurveySession


@dataclass
class BuildComponents:
    """Stage that loads the detector and opens the survey session."""

    name: str = "build_components"
    detector_factory: Optional[DetectorFactory] = None

    def run(self, ctx: StageContext) -> None:
        cfg: SurveyConfig = ctx.cfg
        log: Callable[..., None] = ctx.assets.get("log") or (lambda *a, **k: None)

        factory = self.detector_factory or make_detector
        session = SurveySession.initialize(cfg, factory, log=log)

        label_map = session.detector.get_label_map() if session.detector is not None else None
        if label_map:
            known = sorted(set(label_map.values()) & set(cfg.detector.vehicle_classes))
            log("detector_label_map", {"vehicle_classes": known})

        ctx.assets["session"] = session
