from __future__ import annotations

"""Per-frame survey output."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

from queuesurvey.core.types import Phase
from queuesurvey.survey.tracker import TrackedVehicle


@dataclass(frozen=True)
class SurveyStats:
    """Live snapshot of the lane after one frame."""
    phase: Phase
    total_visible: int = 0
    queue_count: int = 0
    free_flow_count: int = 0
    wrong_way_count: int = 0

    @classmethod
    def from_vehicles(cls, phase: Phase, vehicles: Sequence[TrackedVehicle]) -> "SurveyStats":
        valid = [v for v in vehicles if not v.wrong_way]
        queued = sum(1 for v in valid if v.has_joined_queue or v.is_stopped)
        return cls(
            phase=phase,
            total_visible=len(vehicles),
            queue_count=queued,
            free_flow_count=len(valid) - queued,
            wrong_way_count=len(vehicles) - len(valid),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["phase"] = self.phase.value
        return d
