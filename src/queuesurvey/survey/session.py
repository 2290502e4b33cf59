from __future__ import annotations

"""One survey of one lane: detections in, stats and cycle rows out."""

from typing import Callable, List, Optional, Sequence, Tuple

from queuesurvey.core.errors import ConfigurationError, DetectorUnavailable
from queuesurvey.core.schema import SurveyConfig
from queuesurvey.core.types import Detection, Phase
from queuesurvey.detect.providers import DetectionProvider
from queuesurvey.survey.candidates import CandidateExtractor, scale_factors
from queuesurvey.survey.cycle import CycleAccumulator, SurveyRow
from queuesurvey.survey.phase import PhaseDetector
from queuesurvey.survey.tracker import TrackedVehicle, VehicleTracker
from queuesurvey.survey.types import SurveyStats

DetectorFactory = Callable[[SurveyConfig], DetectionProvider]


class SurveySession:
    """Frame-synchronous survey state.

    Create with `initialize()` when the session owns its detector, or
    construct directly and feed detections from elsewhere through
    `advance()`. Each call processes exactly one frame and returns the stats
    snapshot plus the SurveyRow completed on that frame, if any.

    Without a detector `process_frame` is inert and returns the idle
    snapshot. After `close()` the whole session is inert: tracks and the open
    cycle are discarded and further frames are ignored.
    """

    def __init__(
        self,
        cfg: SurveyConfig,
        *,
        detector: Optional[DetectionProvider] = None,
        log: Callable[..., None] = lambda *a, **k: None,
    ):
        polygon = cfg.roi.points()
        if len(polygon) < 3:
            raise ConfigurationError(f"ROI polygon needs at least 3 points, got {len(polygon)}")
        flow = cfg.roi.flow.to_vector() if cfg.roi.flow is not None else None
        if flow is not None and flow.dx == 0.0 and flow.dy == 0.0:
            raise ConfigurationError("flow vector has zero length")

        self.cfg = cfg
        self.detector = detector
        self.log = log
        self.canvas_size: Tuple[int, int] = (int(cfg.canvas.width), int(cfg.canvas.height))

        self.extractor = CandidateExtractor(polygon, cfg.detector.vehicle_classes)
        self.cycle = CycleAccumulator()
        self.tracker = VehicleTracker.from_config(cfg.tracking, cycle=self.cycle, flow=flow, log=log)
        self.phase_detector = PhaseDetector.from_config(
            cfg.phase,
            tracker=self.tracker,
            cycle=self.cycle,
            start_hour=cfg.start_hour,
            log=log,
        )
        self.rows: List[SurveyRow] = []
        # is_connected tracks the detector, is_closed gates every frame.
        self.is_connected = detector is not None
        self.is_closed = False

    @classmethod
    def initialize(
        cls,
        cfg: SurveyConfig,
        detector_factory: DetectorFactory,
        *,
        log: Callable[..., None] = lambda *a, **k: None,
    ) -> "SurveySession":
        """Load the detector and return a connected session.

        Raises DetectorUnavailable if the detector cannot be built, before any
        frame is looked at.
        """
        try:
            detector = detector_factory(cfg)
        except DetectorUnavailable as exc:
            log("detector_error", {"error": str(exc)})
            raise
        except Exception as exc:
            log("detector_error", {"error": repr(exc)})
            raise DetectorUnavailable(str(exc)) from exc
        if detector is None:
            log("detector_error", {"error": "factory returned no detector"})
            raise DetectorUnavailable("Detector factory returned no detector")

        session = cls(cfg, detector=detector, log=log)
        log("detector_ready", {"weights": cfg.detector.weights, "device": cfg.detector.device})
        return session

    @property
    def phase(self) -> Phase:
        return self.phase_detector.phase

    @property
    def frame_idx(self) -> int:
        return self.tracker.frame_idx

    @property
    def vehicles(self) -> Tuple[TrackedVehicle, ...]:
        return self.tracker.vehicles

    def stats(self) -> SurveyStats:
        """Current snapshot without advancing."""
        return SurveyStats.from_vehicles(self.phase, self.tracker.vehicles)

    def set_frame_rate(self, frame_rate: float) -> None:
        """Rate the session is actually fed at; gaps and default timestamps use it."""
        if frame_rate <= 0:
            raise ConfigurationError(f"frame rate must be positive, got {frame_rate}")
        self.phase_detector.frame_rate = float(frame_rate)

    def advance(
        self,
        detections: Sequence[Detection],
        source_size: Optional[Tuple[int, int]] = None,
        *,
        timestamp: Optional[float] = None,
    ) -> Tuple[SurveyStats, Optional[SurveyRow]]:
        """Process one frame of detections.

        source_size is the (width, height) of the frame the boxes refer to;
        None means the boxes are already in canvas coordinates. timestamp is
        the stream time in seconds written into a completed row; by default
        it is derived from the frame counter and frame rate.
        """
        if self.is_closed:
            return self.stats(), None

        size = source_size or self.canvas_size
        if size[0] <= 0 or size[1] <= 0:
            # Unusable frame: tracks age as if nothing was detected.
            self.log("bad_frame", {"frame_idx": self.tracker.frame_idx + 1, "size": list(size)})
            candidates = []
        else:
            candidates = self.extractor.extract(list(detections), scale_factors(self.canvas_size, size))
        self.tracker.update(candidates, self.phase)

        # Stats describe the frame under the phase it was tracked in.
        stats = self.stats()

        row = self.phase_detector.evaluate(timestamp)
        if row is not None:
            self.rows.append(row)
        return stats, row

    def process_frame(self, frame_bgr, *, timestamp: Optional[float] = None) -> Tuple[SurveyStats, Optional[SurveyRow]]:
        """Run the detector on a decoded frame, then advance."""
        if not self.is_connected or self.detector is None:
            return self.stats(), None
        h, w = frame_bgr.shape[:2]
        return self.advance(self.detector.detect(frame_bgr), (int(w), int(h)), timestamp=timestamp)

    def close(self) -> None:
        """Tear down between frames; the open cycle is dropped without a row."""
        self.is_connected = False
        self.is_closed = True
        self.detector = None
        self.tracker.vehicles = ()
        self.cycle.reset()
        self.log("session_closed", {"frame_idx": self.tracker.frame_idx, "rows": len(self.rows)})
