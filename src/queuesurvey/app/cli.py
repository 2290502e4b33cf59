from __future__ import annotations

import argparse

from queuesurvey.core.config import load_survey_config
from queuesurvey.core.errors import SurveyError
from queuesurvey.survey.pipeline import SurveyPipeline


def _apply_overrides(cfg, args: argparse.Namespace) -> None:
    if getattr(args, "video", None):
        cfg.video = args.video
    if getattr(args, "out_dir", None):
        cfg.export.out_dir = args.out_dir
    if getattr(args, "weights", None):
        cfg.detector.weights = args.weights
    if getattr(args, "device", None):
        cfg.detector.device = args.device
    if getattr(args, "conf", None) is not None:
        cfg.thresholds.conf = float(args.conf)
    if getattr(args, "iou", None) is not None:
        cfg.thresholds.iou = float(args.iou)
    if getattr(args, "probe_frames", None) is not None:
        cfg.probe_frames = int(args.probe_frames)
    if getattr(args, "save_stats", None) is not None:
        cfg.export.save_stats = bool(args.save_stats)


def cmd_check_config(args: argparse.Namespace) -> int:
    cfg = load_survey_config(args.config)
    flow = "none" if cfg.roi.flow is None else f"{list(cfg.roi.flow.start)} -> {list(cfg.roi.flow.end)}"
    print(f"roi      points={len(cfg.roi.polygon)} flow={flow}")
    print(f"canvas   {cfg.canvas.width}x{cfg.canvas.height} sample_fps={cfg.sample_fps}")
    print(
        f"tracking stop={cfg.tracking.stop_speed} join={cfg.tracking.queue_join_speed} "
        f"max_missing={cfg.tracking.max_missing_frames} radius={cfg.tracking.match_radius}"
    )
    print(f"phase    min_duration={cfg.phase.min_phase_duration} snapshot={cfg.phase.snapshot_speed}")
    print(f"detector weights={cfg.detector.weights} conf={cfg.conf} iou={cfg.iou}")
    return 0


def cmd_survey(args: argparse.Namespace) -> int:
    cfg = load_survey_config(args.config)
    _apply_overrides(cfg, args)

    run_root = SurveyPipeline(echo=not args.quiet).run(cfg)
    print(f"OK: {run_root}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="queuesurvey")
    sub = p.add_subparsers(dest="cmd", required=True)

    spc = sub.add_parser("check-config", help="Validate a survey YAML and print the effective settings")
    spc.add_argument("--config", default="configs/survey.yaml", help="Survey YAML config.")
    spc.set_defaults(func=cmd_check_config)

    sps = sub.add_parser("survey", help="Run a queue survey over a video")
    sps.add_argument("--config", default="configs/survey.yaml", help="Survey YAML config.")
    sps.add_argument("--video", help="Override video path from config.")
    sps.add_argument("--out-dir", help="Override export.out_dir.")
    sps.add_argument("--weights", help="Override detector weights.")
    sps.add_argument("--device", help="cpu / cuda:0 etc.")
    sps.add_argument("--conf", type=float, help="Override detection conf threshold.")
    sps.add_argument("--iou", type=float, help="Override IoU threshold.")
    sps.add_argument("--probe-frames", dest="probe_frames", type=int, help="Process only the first N sampled frames.")
    sps.add_argument("--save-stats", dest="save_stats", action="store_true", help="Write per-frame stats.json.")
    sps.add_argument("--no-save-stats", dest="save_stats", action="store_false", help="Do not write stats.json.")
    sps.add_argument("--quiet", action="store_true", help="Do not echo log events to stdout.")
    sps.set_defaults(save_stats=None)
    sps.set_defaults(func=cmd_survey)

    return p


def main() -> int:
    args = build_parser().parse_args()
    try:
        return int(args.func(args))
    except SurveyError as exc:
        print(f"ERROR: {exc}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
