"""Orchestrates a run: config → delta gate → scan → compile → diagnostics → verdict."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from templint.build.context import BuildContext
from templint.build.project import BuildProject
from templint.compiler.base import TemplateCompiler
from templint.compiler.imports import ImportsAnalyzer
from templint.compiler.jinja import JinjaTemplateCompiler
from templint.compiler.naming import ArtifactInfo
from templint.models.config import PipelineConfig
from templint.service.runners import TranspileRunner, ValidationRunner, process_scripts
from templint.service.verdict import Verdict, VerdictAggregator

logger = logging.getLogger("templint.pipeline")


class ExecutionError(Exception):
    """A fatal problem (configuration or I/O) that aborts the whole run."""


class OutcomeStatus(StrEnum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class PipelineOutcome:
    """What a run reports back to the invoking build step."""

    status: OutcomeStatus
    verdict: Verdict | None = None
    processed_files: list[Path] = field(default_factory=list)

    @property
    def cause(self) -> str | None:
        return self.verdict.failure if self.verdict is not None else None

    @property
    def has_warnings(self) -> bool:
        return self.verdict is not None and self.verdict.has_warnings

    @property
    def has_errors(self) -> bool:
        return self.verdict is not None and self.verdict.has_errors


class Pipeline:
    """Validates (and optionally transpiles) the templates below a source root.

    ``execute`` returns a :class:`PipelineOutcome` for skipped, succeeded and
    failed runs and raises :class:`ExecutionError` for fatal ones.
    """

    def __init__(
        self,
        config: PipelineConfig,
        context: BuildContext,
        *,
        project: BuildProject | None = None,
        compiler: TemplateCompiler | None = None,
    ) -> None:
        self._config = config
        self._context = context
        self._project = project if project is not None else BuildProject(Path.cwd())
        self._compiler = compiler if compiler is not None else JinjaTemplateCompiler()

    @property
    def project(self) -> BuildProject:
        return self._project

    def execute(self) -> PipelineOutcome:
        config = self._config
        if config.skip:
            logger.info("Skipping validation.")
            return PipelineOutcome(OutcomeStatus.SKIPPED)

        start = time.monotonic()
        source_directory = config.source_directory
        if not source_directory.exists():
            logger.info("Source directory does not exist, skipping.")
            return PipelineOutcome(OutcomeStatus.SKIPPED)
        if not source_directory.is_dir():
            raise ExecutionError(
                f"Configured source directory {source_directory} is not a directory."
            )

        runner = self._create_runner()
        runner.prepare(self._project)

        try:
            has_delta = self._context.has_delta(source_directory)
        except OSError as exc:
            raise ExecutionError(f"Cannot check {source_directory} for changes: {exc}") from exc
        if not has_delta:
            logger.info("No files found to validate, skipping.")
            verdict = Verdict(
                has_warnings=False,
                has_errors=False,
                processed_count=0,
                elapsed_ms=self._elapsed_ms(start),
            )
            return PipelineOutcome(OutcomeStatus.SUCCEEDED, verdict)

        try:
            scanner = self._context.new_scanner(source_directory)
            scanner.set_excludes(config.excludes)
            scanner.set_includes(config.includes)
            scanner.scan()
            script_names = scanner.included_files()
        except OSError as exc:
            raise self._filter_failure(exc) from exc

        if config.generate_modules:
            _check_module_names(script_names)

        processed_files = [source_directory / name for name in script_names]
        try:
            results = process_scripts(runner, source_directory, processed_files, config.jobs)
        except (OSError, UnicodeDecodeError) as exc:
            raise self._filter_failure(exc) from exc

        aggregator = VerdictAggregator(
            self._context.diagnostics,
            fail_on_warnings=config.fail_on_warnings,
            may_fail_execution=self._context.may_fail_execution,
        )
        verdict = aggregator.aggregate(results, self._elapsed_ms(start))
        logger.info("Processed %d files in %dms", verdict.processed_count, verdict.elapsed_ms)

        try:
            self._context.complete(
                source_directory,
                clean=verdict.succeeded and not verdict.has_errors,
                processed=processed_files,
            )
        except OSError as exc:
            raise ExecutionError(f"Cannot record build state for {source_directory}: {exc}") from exc

        status = OutcomeStatus.SUCCEEDED if verdict.succeeded else OutcomeStatus.FAILED
        return PipelineOutcome(status, verdict, processed_files)

    # -- internal ------------------------------------------------------------

    def _filter_failure(self, exc: Exception) -> ExecutionError:
        config = self._config
        return ExecutionError(
            f"Cannot filter files from {config.source_directory} with includes "
            f"{list(config.includes)} and excludes {list(config.excludes)}: {exc}"
        )

    def _create_runner(self) -> ValidationRunner:
        config = self._config
        if not config.generate_modules:
            return ValidationRunner(self._compiler)

        output_directory = config.generated_modules_directory
        if output_directory.exists() and not output_directory.is_dir():
            raise ExecutionError(
                f"Configured generated modules directory {output_directory} is not a directory."
            )
        try:
            output_directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ExecutionError(
                f"Unable to create generated modules directory {output_directory}."
            ) from exc
        return TranspileRunner(
            self._compiler,
            output_directory,
            ImportsAnalyzer(config.ignore_imports),
        )

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)


def _check_module_names(script_names: list[str]) -> None:
    """Fail when two scripts would be generated into the same module."""
    owners: dict[str, str] = {}
    for name in script_names:
        qualified = ArtifactInfo(name).qualified_name
        owner = owners.setdefault(qualified, name)
        if owner != name:
            raise ExecutionError(
                f"Templates {owner} and {name} both map to generated module {qualified}."
            )
