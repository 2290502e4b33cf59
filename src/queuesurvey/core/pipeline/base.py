from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol


class Stage(Protocol):
    """One step of a survey run."""
    name: str
    def run(self, ctx: "StageContext") -> None: ...


@dataclass
class StageContext:
    """Run config plus what stages hand to each other.

    `state` holds plain results (paths, rows, counters), `assets` holds live
    objects (the logger, the session).
    """
    cfg: Any
    state: Dict[str, Any] = field(default_factory=dict)
    assets: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PipelineRunner:
    """Run stages in order; the first failure aborts the run unless fail_fast is off."""
    stages: List[Stage]
    fail_fast: bool = True

    def run(self, ctx: StageContext) -> StageContext:
        done: List[str] = ctx.state.setdefault("stages_done", [])
        for st in self.stages:
            log = ctx.assets.get("log")
            if log:
                log("stage_start", {"stage": st.name})
            t0 = time.perf_counter()
            try:
                st.run(ctx)
            except Exception as e:
                log = ctx.assets.get("log")
                if log:
                    log("stage_error", {"stage": st.name, "error": repr(e)})
                if self.fail_fast:
                    raise
                ctx.state.setdefault("errors", []).append((st.name, repr(e)))
                continue
            done.append(st.name)
            # InitRun swaps the no-op logger for the run logger.
            log = ctx.assets.get("log")
            if log:
                log("stage_done", {"stage": st.name, "seconds": round(time.perf_counter() - t0, 3)})
        return ctx
