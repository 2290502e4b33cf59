from __future__ import annotations

from pathlib import Path
from typing import Optional

from queuesurvey.core.pipeline.base import PipelineRunner, StageContext
from queuesurvey.core.pipeline.log import noop_log
from queuesurvey.core.schema import SurveyConfig
from queuesurvey.survey.session import DetectorFactory
from queuesurvey.survey.stages.build_components import BuildComponents
from queuesurvey.survey.stages.finalize_run import FinalizeRun
from queuesurvey.survey.stages.init_run import InitRun
from queuesurvey.survey.stages.survey_video import SurveyVideo


class SurveyPipeline:

    def __init__(self, *, detector_factory: Optional[DetectorFactory] = None, echo: bool = True):
        self.detector_factory = detector_factory
        self.echo = bool(echo)

    def run(self, cfg: SurveyConfig) -> Path:
        ctx = StageContext(cfg=cfg, state={}, assets={"log": noop_log})

        stages = [
            InitRun(echo=self.echo),
            BuildComponents(detector_factory=self.detector_factory),
            SurveyVideo(),
            FinalizeRun(),
        ]
        PipelineRunner(stages=stages).run(ctx)
        return Path(ctx.state["run_root"])
