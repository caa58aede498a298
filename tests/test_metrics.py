"""Tests for per-stage timings and their Prometheus export."""

from prometheus_client import REGISTRY

from devcenter_deploy.utils.metrics import StageTimings


def _observations(stage: str):
    return REGISTRY.get_sample_value("devcenter_stage_duration_seconds_count", {"stage": stage})


def test_stage_duration_recorded_when_enabled():
    timings = StageTimings()
    timings.start_stage("metrics-enabled-stage")
    timings.end_stage("metrics-enabled-stage")
    assert _observations("metrics-enabled-stage") == 1.0
    assert "metrics-enabled-stage" in timings.to_dict()["stages_ms"]


def test_stage_duration_not_exported_when_disabled():
    timings = StageTimings(record_metrics=False)
    timings.start_stage("metrics-disabled-stage")
    timings.end_stage("metrics-disabled-stage")
    timings.finish()
    assert _observations("metrics-disabled-stage") is None
    summary = timings.to_dict()
    assert "metrics-disabled-stage" in summary["stages_ms"]
    assert summary["total_ms"] is not None


def test_end_without_start_is_ignored():
    timings = StageTimings(record_metrics=False)
    timings.end_stage("never-started")
    assert timings.to_dict()["stages_ms"] == {}
