from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from queuesurvey.core.io import dump_json
from queuesurvey.core.pipeline.base import StageContext
from queuesurvey.core.schema import SurveyConfig


@dataclass
class FinalizeRun:
    """Stage that writes run metadata and the survey rows."""
    name: str = "finalize_run"

    def run(self, ctx: StageContext) -> None:
        cfg: SurveyConfig = ctx.cfg
        run_id: str = ctx.state["run_id"]
        run_root: Path = ctx.state["run_root"]
        log = ctx.assets.get("log")

        run_json: Dict[str, Any] = {
            "run_id": run_id,
            "status": "completed",
            "video": cfg.video,
            "frames": int(ctx.state.get("frames", 0)),
            "config": cfg.model_dump(mode="json"),
        }
        dump_json(run_root / "run.json", run_json)

        survey_path = dump_json(run_root / "survey.json", {"run_id": run_id, "rows": ctx.state.get("rows", [])})
        ctx.state["survey_path"] = survey_path

        if cfg.export.save_stats:
            dump_json(run_root / "stats.json", {"run_id": run_id, "frames": ctx.state.get("stats", [])})

        log("run_done", {"run_id": run_id, "run_root": str(run_root), "survey": str(survey_path)})
