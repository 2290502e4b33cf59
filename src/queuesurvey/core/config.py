from __future__ import annotations

"""YAML and Pydantic config loaders."""

from pathlib import Path
from typing import Any, Dict, Type, TypeVar

import yaml
from pydantic import ValidationError

from queuesurvey.core.errors import ConfigurationError
from queuesurvey.core.schema import SurveyConfig

T = TypeVar("T")


def load_yaml(path: str | Path) -> Dict[str, Any]:
    """Load a YAML mapping from file."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config must be a mapping at top-level: {p}")
    return data


def validate_config(data: Dict[str, Any], cls: Type[T] = SurveyConfig) -> T:
    """Validate a plain mapping, reporting schema errors as ConfigurationError."""
    try:
        return cls.model_validate(data)  # type: ignore[attr-defined]
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


def load_survey_config(path: str | Path) -> SurveyConfig:
    """Load survey configuration YAML."""
    return validate_config(load_yaml(path), SurveyConfig)
