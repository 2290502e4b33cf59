from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from queuesurvey.core.io import ensure_dir
from queuesurvey.core.pipeline.base import StageContext
from queuesurvey.core.pipeline.log import JsonlLogger
from queuesurvey.core.schema import SurveyConfig


def _ts() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


@dataclass
class InitRun:
    """Prepare run dir + logger."""

    name: str = "init_run"
    echo: bool = True

    def run(self, ctx: StageContext) -> None:
        cfg: SurveyConfig = ctx.cfg
        if not cfg.video:
            raise FileNotFoundError("No video configured; set `video` in the config or pass --video")

        run_id = ctx.state.get("run_id") or _ts()
        run_root = ensure_dir(Path(cfg.export.out_dir) / Path(cfg.video).stem / run_id)

        log = JsonlLogger(run_root / "survey.log.jsonl", echo=self.echo)
        ctx.assets["log"] = log

        ctx.state.update({"run_id": run_id, "run_root": run_root})

        log(
            "run_start",
            {
                "run_id": run_id,
                "video": cfg.video,
                "weights": cfg.detector.weights,
                "roi_points": len(cfg.roi.polygon),
                "flow": cfg.roi.flow is not None,
            },
        )
