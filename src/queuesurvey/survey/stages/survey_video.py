from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from queuesurvey.core.io import VideoInfo, get_video_info, iter_frames
from queuesurvey.core.pipeline.base import StageContext
from queuesurvey.core.schema import SurveyConfig
from queuesurvey.survey.session import SurveySession


def frame_stride(video_fps: float, sample_fps: float) -> int:
    """Keep every n-th decoded frame so the tracker sees roughly sample_fps."""
    if not video_fps or video_fps <= 0 or sample_fps <= 0:
        return 1
    return max(1, int(round(float(video_fps) / float(sample_fps))))


def effective_rate(video_fps: float, stride: int, fallback: float) -> float:
    """Frames per second the session really sees after striding."""
    if not video_fps or video_fps <= 0:
        return float(fallback)
    return float(video_fps) / float(max(1, stride))


@dataclass
class SurveyVideo:
    """Stage that decodes the video, samples it and advances the session."""

    name: str = "survey_video"
    sample_every: int = 200

    def run(self, ctx: StageContext) -> None:
        cfg: SurveyConfig = ctx.cfg
        log = ctx.assets.get("log")
        session: SurveySession = ctx.assets["session"]

        vinfo: VideoInfo = get_video_info(str(cfg.video))
        stride = frame_stride(vinfo.fps, cfg.sample_fps)
        fps = float(vinfo.fps) if vinfo.fps else float(cfg.sample_fps)
        rate = effective_rate(vinfo.fps, stride, cfg.phase.frame_rate)
        session.set_frame_rate(rate)

        log(
            "video_start",
            {
                "video": cfg.video,
                "fps": vinfo.fps,
                "frames": vinfo.frame_count,
                "size": [vinfo.width, vinfo.height],
                "stride": stride,
                "sample_hz": rate,
            },
        )

        if session.detector is not None:
            session.detector.reset()

        stats_log: List[Dict[str, Any]] = []
        processed = 0
        try:
            for src_idx, frame_bgr in iter_frames(str(cfg.video), stride=stride):
                stats, row = session.process_frame(frame_bgr, timestamp=src_idx / fps)
                processed += 1

                if cfg.export.save_stats:
                    stats_log.append({"frame": session.frame_idx, **stats.to_dict()})

                if processed % self.sample_every == 0:
                    log("frame_sample", {"frame": session.frame_idx, "source_frame": src_idx, **stats.to_dict()})

                if cfg.probe_frames and processed >= int(cfg.probe_frames):
                    break
        finally:
            ctx.state["frames"] = processed
            session.close()

        rows = [r.to_dict() for r in session.rows]
        log("video_done", {"video": cfg.video, "frames": processed, "cycles": len(rows)})

        ctx.state["rows"] = rows
        ctx.state["stats"] = stats_log
