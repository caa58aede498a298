"""Prometheus metrics and per-stage timings for a deployment run."""

from dataclasses import dataclass, field
from time import perf_counter_ns
from typing import Dict, Optional

from prometheus_client import Counter, Histogram


STORE_CALLS = Counter(
    "devcenter_store_calls_total",
    "Total calls made to the identity provider and store API",
    ["stage", "outcome"],
)

STAGE_DURATION = Histogram(
    "devcenter_stage_duration_seconds",
    "Duration of each deployment stage",
    ["stage"],
)

POLL_ATTEMPTS = Counter(
    "devcenter_commit_poll_total",
    "Commit status polls by observed status",
    ["status"],
)


@dataclass
class StageTimings:
    start_ns: int = field(default_factory=perf_counter_ns)
    stage_starts: Dict[str, int] = field(default_factory=dict)
    stage_durations_ns: Dict[str, int] = field(default_factory=dict)
    end_ns: Optional[int] = None
    record_metrics: bool = True

    def start_stage(self, name: str) -> None:
        """Mark the start of a stage."""
        self.stage_starts[name] = perf_counter_ns()

    def end_stage(self, name: str) -> None:
        """Mark the end of a stage and record its duration."""
        if name in self.stage_starts:
            duration = perf_counter_ns() - self.stage_starts[name]
            self.stage_durations_ns[name] = duration
            if self.record_metrics:
                STAGE_DURATION.labels(stage=name).observe(duration / 1_000_000_000.0)

    def finish(self) -> None:
        """Mark the end of the whole run."""
        self.end_ns = perf_counter_ns()

    def to_dict(self) -> Dict[str, object]:
        """Convert timings to a dictionary with millisecond precision."""
        total_ms = None
        if self.end_ns is not None:
            total_ms = (self.end_ns - self.start_ns) / 1_000_000.0
        stages_ms = {k: v / 1_000_000.0 for k, v in self.stage_durations_ns.items()}
        return {
            "total_ms": total_ms,
            "stages_ms": stages_ms,
        }
