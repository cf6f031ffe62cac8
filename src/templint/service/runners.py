"""Per-file processing strategies: validate-only and validate+codegen."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from templint.build.project import BuildProject
from templint.compiler.backend import PythonModuleBackend
from templint.compiler.base import BackendCompiler, TemplateCompiler
from templint.compiler.imports import ImportsAnalyzer
from templint.compiler.naming import ArtifactInfo
from templint.compiler.unit import CompilationUnit, acquire
from templint.models.diagnostics import CompilationResult

logger = logging.getLogger("templint.pipeline")

_WRITE_BUFFER_SIZE = 16384

BackendFactory = Callable[[ImportsAnalyzer], BackendCompiler]


class ValidationRunner:
    """Runs the compiler over each unit without producing output."""

    def __init__(self, compiler: TemplateCompiler) -> None:
        self._compiler = compiler

    @property
    def compiler(self) -> TemplateCompiler:
        return self._compiler

    def prepare(self, project: BuildProject) -> None:
        """Hook run once before any script is processed."""

    def compile(self, unit: CompilationUnit) -> CompilationResult:
        return self._compiler.compile(unit)


class TranspileRunner(ValidationRunner):
    """Compiles each unit and writes the generated Python module.

    The module for ``a/b/Widget.html`` lands in
    ``<output_directory>/a/b/Widget.py`` and is overwritten on every run.
    """

    def __init__(
        self,
        compiler: TemplateCompiler,
        output_directory: Path,
        imports_analyzer: ImportsAnalyzer | None = None,
        backend_factory: BackendFactory = PythonModuleBackend,
    ) -> None:
        super().__init__(compiler)
        self._output_directory = output_directory
        self._imports_analyzer = imports_analyzer or ImportsAnalyzer()
        self._backend_factory = backend_factory

    @property
    def output_directory(self) -> Path:
        return self._output_directory

    def prepare(self, project: BuildProject) -> None:
        project.add_compile_source_root(self._output_directory)
        logger.info("Generated modules will be written to %s", self._output_directory)

    def compile(self, unit: CompilationUnit) -> CompilationResult:
        backend = self._backend_factory(self._imports_analyzer)
        result = self._compiler.compile(unit, backend)
        artifact = ArtifactInfo(unit.script_name)
        self.write(artifact, backend.build(artifact))
        return result

    def write(self, artifact: ArtifactInfo, source: str) -> Path:
        target = artifact.output_path(self._output_directory)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8", buffering=_WRITE_BUFFER_SIZE) as out:
            out.write(source)
        logger.debug("Wrote %s (%s)", target, artifact.qualified_name)
        return target


def _process_one(runner: ValidationRunner, source_root: Path, script: Path) -> CompilationResult:
    with acquire(source_root, script) as unit:
        return runner.compile(unit)


def process_scripts(
    runner: ValidationRunner,
    source_root: Path,
    scripts: Sequence[Path],
    jobs: int = 1,
) -> dict[Path, CompilationResult]:
    """Compile every script, returning results in ``scripts`` order.

    Each unit is acquired and disposed around its own compilation.  With
    ``jobs > 1`` scripts are compiled on a thread pool; the first exception
    raised by any worker propagates.
    """
    if jobs <= 1 or len(scripts) <= 1:
        results: dict[Path, CompilationResult] = {}
        for script in scripts:
            results[script] = _process_one(runner, source_root, script)
        return results

    with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="templint") as pool:
        compiled = list(pool.map(lambda s: _process_one(runner, source_root, s), scripts))
    return dict(zip(scripts, compiled, strict=True))
