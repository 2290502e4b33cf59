import pytest

from queuesurvey.core.config import load_survey_config, validate_config
from queuesurvey.core.errors import ConfigurationError

POLY = "[[0, 0], [100, 0], [100, 100]]"


def write(tmp_path, text):
    p = tmp_path / "survey.yaml"
    p.write_text(text, encoding="utf-8")
    return p


def test_defaults(tmp_path):
    cfg = load_survey_config(write(tmp_path, f"roi:\n  polygon: {POLY}\n"))
    assert cfg.thresholds.conf == 0.3
    assert cfg.thresholds.iou == 0.5
    assert cfg.tracking.stop_speed == 0.8
    assert cfg.tracking.queue_join_speed == 2.5
    assert cfg.tracking.max_missing_frames == 15
    assert cfg.tracking.match_radius == 60.0
    assert cfg.phase.min_phase_duration == 30
    assert cfg.phase.snapshot_speed == 2.0
    assert cfg.detector.vehicle_classes == ["car", "truck", "bus", "motorcycle"]
    assert cfg.roi.flow is None


def test_roi_needs_three_points(tmp_path):
    with pytest.raises(ConfigurationError):
        load_survey_config(write(tmp_path, "roi:\n  polygon: [[0, 0], [10, 10]]\n"))


def test_zero_length_flow_rejected():
    with pytest.raises(ConfigurationError):
        validate_config({"roi": {"polygon": [[0, 0], [1, 0], [1, 1]], "flow": {"start": [5, 5], "end": [5, 5]}}})


def test_malformed_flow_rejected():
    with pytest.raises(ConfigurationError):
        validate_config({"roi": {"polygon": [[0, 0], [1, 0], [1, 1]], "flow": {"start": [5, 5]}}})


def test_missing_roi_rejected():
    with pytest.raises(ConfigurationError):
        validate_config({"video": "a.mp4"})


def test_top_level_must_be_mapping(tmp_path):
    with pytest.raises(ConfigurationError):
        load_survey_config(write(tmp_path, "- 1\n- 2\n"))


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_survey_config(tmp_path / "nope.yaml")



def test_flat_polygon_without_roi_is_rejected():
    with pytest.raises(ConfigurationError):
        validate_config({"polygon": [[0, 0], [10, 0], [10, 10]], "conf": 0.45})
