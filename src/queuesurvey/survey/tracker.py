from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Set, Tuple

from queuesurvey.core.schema import TrackingCfg
from queuesurvey.core.types import Candidate, FlowVector, Phase
from queuesurvey.survey.cycle import CycleAccumulator
from queuesurvey.survey.geometry import cosine_similarity, distance


@dataclass(frozen=True)
class TrackedVehicle:
    """One vehicle in a tracker generation. Never mutated, only replaced."""

    track_id: int
    x: float
    y: float
    w: float
    h: float
    speed: float
    frames_seen: int = 1
    is_stopped: bool = False
    missing_frames: int = 0
    wrong_way: bool = False
    has_joined_queue: bool = False
    class_label: str = ""

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass
class VehicleTracker:
    """Greedy nearest-neighbour tracker over ROI candidates.

    Each update builds a new tuple of TrackedVehicle from the previous one:
    matched tracks move and re-estimate speed, unmatched candidates spawn
    tracks, unmatched tracks persist as ghosts until they expire.

    Matching is single pass and order dependent: candidates are taken in
    the order given and each picks the closest still-free track strictly
    inside `match_radius`, the first one found winning ties.

    While the phase is GREEN, a track slowing below `queue_join_speed`
    joins the queue once and counts as an arrival, and a moving track that
    expires after being seen for more than `exit_min_frames` is recorded as
    a departure.
    """

    cycle: CycleAccumulator
    flow: Optional[FlowVector] = None

    stop_speed: float = 0.8
    queue_join_speed: float = 2.5
    max_missing_frames: int = 15
    match_radius: float = 60.0
    spawn_speed: float = 5.0
    direction_min_speed: float = 1.5
    wrong_way_cos: float = 0.2
    exit_min_frames: int = 5

    log: Callable[..., None] = lambda *a, **k: None

    def __post_init__(self) -> None:
        self.vehicles: Tuple[TrackedVehicle, ...] = ()
        self.frame_idx: int = 0
        self._next_id: int = 1

    @classmethod
    def from_config(
        cls,
        cfg: TrackingCfg,
        *,
        cycle: CycleAccumulator,
        flow: Optional[FlowVector] = None,
        log: Callable[..., None] | None = None,
    ) -> "VehicleTracker":
        tracker = cls(
            cycle=cycle,
            flow=flow,
            stop_speed=float(cfg.stop_speed),
            queue_join_speed=float(cfg.queue_join_speed),
            max_missing_frames=int(cfg.max_missing_frames),
            match_radius=float(cfg.match_radius),
            spawn_speed=float(cfg.spawn_speed),
            direction_min_speed=float(cfg.direction_min_speed),
            wrong_way_cos=float(cfg.wrong_way_cos),
            exit_min_frames=int(cfg.exit_min_frames),
        )
        if log is not None:
            tracker.log = log
        return tracker

    @property
    def next_id(self) -> int:
        return self._next_id

    def valid(self) -> Tuple[TrackedVehicle, ...]:
        """Tracks moving with the flow; wrong-way tracks are ignored everywhere."""
        return tuple(v for v in self.vehicles if not v.wrong_way)

    def update(self, candidates: Sequence[Candidate], phase: Phase) -> Tuple[TrackedVehicle, ...]:
        """Advance one frame and return the new generation."""
        self.frame_idx += 1

        previous = self.vehicles
        matched: Set[int] = set()
        out: List[TrackedVehicle] = []

        for cand in candidates:
            best = self._nearest(cand, previous, matched)
            if best is None:
                out.append(self._spawn(cand))
                continue
            matched.add(best.track_id)
            out.append(self._follow(best, cand, phase))

        for v in previous:
            if v.track_id in matched:
                continue
            if v.missing_frames < self.max_missing_frames:
                out.append(replace(v, missing_frames=v.missing_frames + 1))
                continue
            if self._is_departure(v, phase):
                self.cycle.record_exit(self.frame_idx)
                self.log("departure", {"track_id": v.track_id, "frame_idx": self.frame_idx})

        self.vehicles = tuple(out)
        return self.vehicles

    def reset_queue_membership(self, predicate: Callable[[TrackedVehicle], bool]) -> int:
        """Re-baseline has_joined_queue on valid tracks; returns how many joined."""
        joined = 0
        out: List[TrackedVehicle] = []
        for v in self.vehicles:
            if v.wrong_way:
                out.append(v)
                continue
            member = bool(predicate(v))
            joined += int(member)
            out.append(replace(v, has_joined_queue=member))
        self.vehicles = tuple(out)
        return joined

    def _nearest(
        self,
        cand: Candidate,
        tracks: Sequence[TrackedVehicle],
        taken: Set[int],
    ) -> Optional[TrackedVehicle]:
        best: Optional[TrackedVehicle] = None
        best_dist = self.match_radius
        for t in tracks:
            if t.track_id in taken:
                continue
            d = distance(t.position, (cand.x, cand.y))
            if d < best_dist:
                best_dist = d
                best = t
        return best

    def _spawn(self, cand: Candidate) -> TrackedVehicle:
        tid = self._next_id
        self._next_id += 1
        return TrackedVehicle(
            track_id=tid,
            x=cand.x,
            y=cand.y,
            w=cand.w,
            h=cand.h,
            speed=self.spawn_speed,
            class_label=cand.class_label,
        )

    def _follow(self, v: TrackedVehicle, cand: Candidate, phase: Phase) -> TrackedVehicle:
        dx = cand.x - v.x
        dy = cand.y - v.y
        moved = distance((cand.x, cand.y), v.position)

        speed = 0.5 * v.speed + 0.5 * moved
        is_stopped = speed < self.stop_speed

        wrong_way = v.wrong_way
        if self.flow is not None and speed > self.direction_min_speed:
            cos = cosine_similarity(dx, dy, self.flow.dx, self.flow.dy)
            if cos is not None:
                wrong_way = cos < self.wrong_way_cos

        joined = v.has_joined_queue
        if phase == Phase.GREEN and not joined and not wrong_way and speed < self.queue_join_speed:
            joined = True
            self.cycle.record_arrival()
            self.log("queue_join", {"track_id": v.track_id, "frame_idx": self.frame_idx, "speed": round(speed, 3)})

        return replace(
            v,
            x=cand.x,
            y=cand.y,
            w=cand.w,
            h=cand.h,
            speed=speed,
            frames_seen=v.frames_seen + 1,
            is_stopped=is_stopped,
            missing_frames=0,
            wrong_way=wrong_way,
            has_joined_queue=joined,
            class_label=cand.class_label,
        )

    def _is_departure(self, v: TrackedVehicle, phase: Phase) -> bool:
        return (
            phase == Phase.GREEN
            and not v.wrong_way
            and not v.is_stopped
            and v.frames_seen > self.exit_min_frames
        )
