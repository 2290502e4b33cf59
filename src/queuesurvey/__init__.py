"""Signal-cycle queue survey from per-frame vehicle detections."""

__version__ = "0.1.0"
