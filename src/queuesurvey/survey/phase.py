from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from queuesurvey.core.schema import PhaseCfg
from queuesurvey.core.types import Phase
from queuesurvey.survey.cycle import CycleAccumulator, SurveyRow
from queuesurvey.survey.tracker import TrackedVehicle, VehicleTracker


@dataclass
class PhaseDetector:
    """Infer RED/GREEN from how many tracked vehicles are stopped.

    Rules (valid tracks only, evaluated once per frame):
    - no change until more than min_phase_duration frames passed since the last one.
    - GREEN -> RED when stopped vehicles outnumber moving ones, or two or more are stopped.
    - RED -> GREEN when moving vehicles outnumber stopped ones, or the lane is empty.

    A stopped track counts only after it has been seen more than
    stopped_min_frames frames, so fresh spawns do not flip the phase.
    """

    tracker: VehicleTracker
    cycle: CycleAccumulator

    min_phase_duration: int = 30
    snapshot_speed: float = 2.0
    stopped_min_frames: int = 3
    frame_rate: float = 10.0
    start_hour: int = 0

    log: Callable[..., None] = lambda *a, **k: None

    def __post_init__(self) -> None:
        self.phase: Phase = Phase.GREEN
        self.last_change_frame: int = 0

    @classmethod
    def from_config(
        cls,
        cfg: PhaseCfg,
        *,
        tracker: VehicleTracker,
        cycle: CycleAccumulator,
        start_hour: int = 0,
        log: Callable[..., None] | None = None,
    ) -> "PhaseDetector":
        det = cls(
            tracker=tracker,
            cycle=cycle,
            min_phase_duration=int(cfg.min_phase_duration),
            snapshot_speed=float(cfg.snapshot_speed),
            stopped_min_frames=int(cfg.stopped_min_frames),
            frame_rate=float(cfg.frame_rate),
            start_hour=int(start_hour),
        )
        if log is not None:
            det.log = log
        return det

    def counts(self) -> Tuple[int, int, int]:
        """Return (stopped, moving, total) over valid tracks."""
        valid = self.tracker.valid()
        stopped = sum(1 for v in valid if v.is_stopped and v.frames_seen > self.stopped_min_frames)
        return stopped, len(valid) - stopped, len(valid)

    def evaluate(self, timestamp: Optional[float] = None) -> Optional[SurveyRow]:
        """Check for a transition; returns the completed row when RED begins."""
        frame_idx = self.tracker.frame_idx
        if frame_idx - self.last_change_frame <= self.min_phase_duration:
            return None

        stopped, moving, total = self.counts()

        if self.phase == Phase.GREEN:
            if (stopped > moving and stopped >= 1) or stopped >= 2:
                return self._enter_red(frame_idx, timestamp)
        elif moving > stopped or total == 0:
            self._enter_green(frame_idx)
        return None

    def _in_snapshot_queue(self, v: TrackedVehicle) -> bool:
        return v.is_stopped or v.speed < self.snapshot_speed

    def _enter_red(self, frame_idx: int, timestamp: Optional[float]) -> SurveyRow:
        overflow = sum(1 for v in self.tracker.valid() if v.has_joined_queue and v.is_stopped)
        if timestamp is None:
            timestamp = frame_idx / self.frame_rate

        row = self.cycle.close(
            overflow,
            timestamp=float(timestamp),
            frame_rate=self.frame_rate,
            start_hour=self.start_hour,
        )
        self._switch(Phase.RED, frame_idx)
        self.log("cycle_done", {"frame_idx": frame_idx, **row.to_dict()})
        return row

    def _enter_green(self, frame_idx: int) -> None:
        nr = self.tracker.reset_queue_membership(self._in_snapshot_queue)
        self.cycle.open_green(nr)
        self._switch(Phase.GREEN, frame_idx)

    def _switch(self, phase: Phase, frame_idx: int) -> None:
        self.log("phase_change", {"from": self.phase.value, "to": phase.value, "frame_idx": frame_idx})
        self.phase = phase
        self.last_change_frame = frame_idx
