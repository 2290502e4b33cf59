from __future__ import annotations

"""Pydantic schema definitions for a queue survey run."""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from queuesurvey.core.types import FlowVector, Point

DEFAULT_VEHICLE_CLASSES = ["car", "truck", "bus", "motorcycle"]


class FlowCfg(BaseModel):
    """Expected direction of travel drawn as a segment in canvas coordinates."""

    start: Tuple[float, float]
    end: Tuple[float, float]

    @model_validator(mode="after")
    def _non_degenerate(self) -> "FlowCfg":
        if self.start[0] == self.end[0] and self.start[1] == self.end[1]:
            raise ValueError("flow vector has zero length")
        return self

    def to_vector(self) -> FlowVector:
        return FlowVector(start=tuple(self.start), end=tuple(self.end))


class RoiCfg(BaseModel):
    """Monitored lane polygon (implicitly closed) and optional flow direction."""

    polygon: List[Tuple[float, float]]
    flow: Optional[FlowCfg] = None

    @field_validator("polygon")
    @classmethod
    def _at_least_triangle(cls, v):
        if len(v) < 3:
            raise ValueError(f"ROI polygon needs at least 3 points, got {len(v)}")
        return v

    def points(self) -> List[Point]:
        return [(float(x), float(y)) for x, y in self.polygon]


class CanvasCfg(BaseModel):
    """Canonical render space the ROI and all tracking distances live in."""

    width: int = Field(default=1280, gt=0)
    height: int = Field(default=720, gt=0)


class ThresholdsCfg(BaseModel):
    """Score and IoU thresholds forwarded to the detector."""

    conf: float = Field(default=0.3, ge=0.0, le=1.0)
    iou: float = Field(default=0.5, ge=0.0, le=1.0)


class TrackingCfg(BaseModel):
    """Vehicle tracker tuning, distances in canvas units per frame."""

    stop_speed: float = Field(default=0.8, ge=0.0)
    queue_join_speed: float = Field(default=2.5, ge=0.0)
    max_missing_frames: int = Field(default=15, ge=1)
    match_radius: float = Field(default=60.0, gt=0.0)

    # Provisional speed of a freshly spawned track.
    spawn_speed: float = 5.0

    direction_min_speed: float = 1.5
    wrong_way_cos: float = 0.2

    # A dropped track counts as a departure only if it was seen longer than this.
    exit_min_frames: int = 5


class PhaseCfg(BaseModel):
    """Signal phase inference settings."""

    min_phase_duration: int = Field(default=30, ge=0)
    snapshot_speed: float = 2.0
    stopped_min_frames: int = 3

    # Frames per second of the processed stream, used to turn frame gaps into seconds.
    frame_rate: float = Field(default=10.0, gt=0.0)


class DetectorCfg(BaseModel):
    """Detection model settings."""

    weights: str = "yolo11n.pt"
    device: str = "cpu"
    vehicle_classes: List[str] = Field(default_factory=lambda: list(DEFAULT_VEHICLE_CLASSES))


class ExportCfg(BaseModel):
    """Output export settings for a survey run."""

    out_dir: str = "runs/survey"
    save_stats: bool = False


class SurveyConfig(BaseModel):
    """Survey configuration loaded from YAML."""

    model_config = ConfigDict(extra="ignore")

    video: Optional[str] = None
    roi: RoiCfg
    canvas: CanvasCfg = Field(default_factory=CanvasCfg)

    thresholds: ThresholdsCfg = Field(default_factory=ThresholdsCfg)
    tracking: TrackingCfg = Field(default_factory=TrackingCfg)
    phase: PhaseCfg = Field(default_factory=PhaseCfg)
    detector: DetectorCfg = Field(default_factory=DetectorCfg)
    export: ExportCfg = Field(default_factory=ExportCfg)

    # Video frames are subsampled to this rate before tracking.
    sample_fps: float = Field(default=10.0, gt=0.0)
    probe_frames: int = 0

    # Clock hour written into row timestamps, the survey sheet starts counting from it.
    start_hour: int = Field(default=0, ge=0, le=23)

    @property
    def conf(self) -> float:
        return float(self.thresholds.conf)

    @property
    def iou(self) -> float:
        return float(self.thresholds.iou)
