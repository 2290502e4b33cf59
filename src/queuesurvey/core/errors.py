from __future__ import annotations

"""Session-level error types."""


class SurveyError(Exception):
    """Base class for queue survey errors."""


class ConfigurationError(SurveyError, ValueError):
    """Session configuration rejected before any frame is processed."""


class DetectorUnavailable(SurveyError, RuntimeError):
    """The external detection model could not be initialised."""
