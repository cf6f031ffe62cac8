"""Folding per-file compilation results into one build verdict."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from templint.build.diagnostics import DiagnosticSink
from templint.models.diagnostics import CompilationResult, DiagnosticMessage

WARNINGS_FAILURE = "warnings configured to fail the build"
ERRORS_FAILURE = "syntax errors present"


@dataclass(frozen=True)
class Verdict:
    """Outcome of one pipeline run over a set of compilation results."""

    has_warnings: bool
    has_errors: bool
    processed_count: int
    elapsed_ms: int = 0
    failure: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None


class VerdictAggregator:
    """Publishes diagnostics and decides pass/fail.

    Diagnostics for each file are cleared before the new ones are recorded,
    so a file that became clean shows no stale messages.
    """

    def __init__(
        self,
        sink: DiagnosticSink,
        *,
        fail_on_warnings: bool = False,
        may_fail_execution: bool = True,
    ) -> None:
        self._sink = sink
        self._fail_on_warnings = fail_on_warnings
        self._may_fail_execution = may_fail_execution

    def aggregate(
        self,
        results: Mapping[Path, CompilationResult],
        elapsed_ms: int = 0,
    ) -> Verdict:
        has_warnings = False
        has_errors = False
        for script, result in results.items():
            self._sink.clear(script)
            for message in result.warnings:
                self._sink.record(script, DiagnosticMessage.warning(message))
            for message in result.errors:
                self._sink.record(script, DiagnosticMessage.error(message))
            has_warnings = has_warnings or result.has_warnings
            has_errors = has_errors or result.has_errors

        failure: str | None = None
        if self._may_fail_execution and has_warnings and self._fail_on_warnings:
            failure = WARNINGS_FAILURE
        elif self._may_fail_execution and has_errors:
            failure = ERRORS_FAILURE

        return Verdict(
            has_warnings=has_warnings,
            has_errors=has_errors,
            processed_count=len(results),
            elapsed_ms=elapsed_ms,
            failure=failure,
        )
