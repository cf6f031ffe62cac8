"""Pipeline orchestration for templint."""

from templint.service.pipeline import ExecutionError, OutcomeStatus, Pipeline, PipelineOutcome
from templint.service.runners import TranspileRunner, ValidationRunner, process_scripts
from templint.service.verdict import (
    ERRORS_FAILURE,
    WARNINGS_FAILURE,
    Verdict,
    VerdictAggregator,
)

__all__ = [
    "ERRORS_FAILURE",
    "WARNINGS_FAILURE",
    "ExecutionError",
    "OutcomeStatus",
    "Pipeline",
    "PipelineOutcome",
    "TranspileRunner",
    "ValidationRunner",
    "Verdict",
    "VerdictAggregator",
    "process_scripts",
]
