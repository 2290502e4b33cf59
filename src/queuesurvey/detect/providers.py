from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from queuesurvey.core.types import Detection


class DetectionProvider(ABC):
    """Backend-specific detector.

    detect(frame_bgr) returns a list of Detection in source frame pixels.
    """

    @abstractmethod
    def reset(self) -> None:
        ...

    @abstractmethod
    def detect(self, frame_bgr) -> List[Detection]:
        ...

    def get_label_map(self) -> Optional[Dict[int, str]]:
        return None
