from __future__ import annotations

from typing import Dict, List, Optional

import numpy as np

from queuesurvey.core.types import Detection
from queuesurvey.detect.providers import DetectionProvider

try:  # pragma: no cover
    from ultralytics import YOLO  # type: ignore
except Exception:  # pragma: no cover
    YOLO = None


def xyxy_to_xywh(box: np.ndarray) -> tuple:
    x1, y1, x2, y2 = [float(v) for v in box]
    return (x1, y1, x2 - x1, y2 - y1)


class UltralyticsYoloDetector(DetectionProvider):
    def __init__(
        self,
        *,
        weights: str,
        device: str = "cpu",
        conf: float = 0.3,
        iou: float = 0.5,
    ):
        if YOLO is None:
            raise ImportError(
                "Ultralytics is not installed. Install extras: pip install -e '.[predict]'"
            )

        self._weights = str(weights)
        self._device = str(device)
        self._conf = float(conf)
        self._iou = float(iou)

        self.model = YOLO(self._weights)
        self.model.to(self._device)

    def reset(self) -> None:
        # Plain detection keeps no per-video state.
        return None

    def get_label_map(self) -> Optional[Dict[int, str]]:
        names = getattr(self.model, "names", None)
        if isinstance(names, dict):
            return {int(k): str(v) for k, v in names.items()}
        return None

    def detect(self, frame_bgr) -> List[Detection]:
        res_list = self.model.predict(
            frame_bgr,
            conf=self._conf,
            iou=self._iou,
            device=self._device,
            verbose=False,
        )

        out: List[Detection] = []
        if not res_list:
            return out

        boxes = getattr(res_list[0], "boxes", None)
        if boxes is None:
            return out

        xyxy = boxes.xyxy.cpu().numpy()  # (N,4)
        confs = boxes.conf.cpu().numpy().astype(float).tolist()
        class_ids = boxes.cls.cpu().numpy().astype(int).tolist()
        names = self.get_label_map() or {}

        for bb, sc, cid in zip(xyxy, confs, class_ids):
            out.append(
                Detection(
                    class_label=str(names.get(int(cid), str(cid))),
                    bbox=xyxy_to_xywh(bb),
                    score=float(sc),
                )
            )
        return out
