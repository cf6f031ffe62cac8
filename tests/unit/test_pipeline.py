"""Tests for the pipeline state machine."""

from __future__ import annotations

from pathlib import Path

import pytest

from templint.build.context import InMemoryBuildContext
from templint.build.project import BuildProject
from templint.models.config import PipelineConfig
from templint.models.diagnostics import DiagnosticMessage, Severity
from templint.service.pipeline import ExecutionError, OutcomeStatus, Pipeline
from templint.service.verdict import ERRORS_FAILURE, WARNINGS_FAILURE
from tests.conftest import ScriptedCompiler, warning, write_tree


def _pipeline(
    source_dir: Path,
    context: InMemoryBuildContext,
    compiler: ScriptedCompiler,
    **options: object,
) -> Pipeline:
    config = PipelineConfig.resolve(source_dir.parent, source_dir, **options)  # type: ignore[arg-type]
    return Pipeline(config, context, project=BuildProject(source_dir.parent), compiler=compiler)


class TestSkipping:
    def test_skip_flag(self, source_dir: Path, context: InMemoryBuildContext) -> None:
        compiler = ScriptedCompiler()
        outcome = _pipeline(source_dir, context, compiler, skip=True).execute()
        assert outcome.status is OutcomeStatus.SKIPPED
        assert compiler.units == []

    def test_missing_source_directory(self, tmp_path: Path, context: InMemoryBuildContext) -> None:
        outcome = _pipeline(tmp_path / "missing", context, ScriptedCompiler()).execute()
        assert outcome.status is OutcomeStatus.SKIPPED
        assert outcome.verdict is None

    def test_no_delta_succeeds_without_compiling(
        self, source_dir: Path, bad_compiler: ScriptedCompiler
    ) -> None:
        context = InMemoryBuildContext(delta=False)
        outcome = _pipeline(source_dir, context, bad_compiler).execute()
        assert outcome.status is OutcomeStatus.SUCCEEDED
        assert outcome.verdict is not None
        assert outcome.verdict.processed_count == 0
        assert outcome.processed_files == []
        assert bad_compiler.units == []
        assert context.completed == []


class TestFatal:
    def test_source_not_a_directory(self, tmp_path: Path, context: InMemoryBuildContext) -> None:
        file = tmp_path / "templates"
        file.write_text("", encoding="utf-8")
        with pytest.raises(ExecutionError, match="is not a directory"):
            _pipeline(file, context, ScriptedCompiler()).execute()

    def test_output_not_a_directory(
        self, source_dir: Path, tmp_path: Path, context: InMemoryBuildContext
    ) -> None:
        out = tmp_path / "out"
        out.write_text("", encoding="utf-8")
        compiler = ScriptedCompiler()
        with pytest.raises(ExecutionError, match="generated modules directory"):
            _pipeline(
                source_dir, context, compiler,
                generate_modules=True, generated_modules_directory=out,
            ).execute()
        assert compiler.units == []

    def test_output_cannot_be_created(
        self, source_dir: Path, tmp_path: Path, context: InMemoryBuildContext
    ) -> None:
        (tmp_path / "blocker").write_text("", encoding="utf-8")
        with pytest.raises(ExecutionError, match="Unable to create"):
            _pipeline(
                source_dir, context, ScriptedCompiler(),
                generate_modules=True, generated_modules_directory=tmp_path / "blocker" / "out",
            ).execute()

    def test_io_failure_mid_run_records_nothing(
        self, source_dir: Path, context: InMemoryBuildContext
    ) -> None:
        compiler = ScriptedCompiler(raise_for={"ok.html": OSError("read failed")})
        with pytest.raises(ExecutionError) as exc_info:
            _pipeline(source_dir, context, compiler, excludes=["vendor/**"]).execute()
        message = str(exc_info.value)
        assert str(source_dir) in message
        assert "**/*.html" in message
        assert "vendor/**" in message
        assert isinstance(exc_info.value.__cause__, OSError)
        assert len(context.diagnostics) == 0
        assert context.completed == []
        assert all(u.disposed for u in compiler.units)

    def test_undecodable_template_is_fatal(
        self, tmp_path: Path, context: InMemoryBuildContext
    ) -> None:
        root = tmp_path / "templates"
        root.mkdir()
        (root / "latin1.html").write_bytes("caf\xe9".encode("latin-1"))
        with pytest.raises(ExecutionError):
            _pipeline(root, context, ScriptedCompiler()).execute()


class TestVerdict:
    def test_ok_and_bad_scenario(
        self,
        source_dir: Path,
        context: InMemoryBuildContext,
        bad_compiler: ScriptedCompiler,
    ) -> None:
        context.diagnostics.record(
            source_dir / "ok.html", DiagnosticMessage(severity=Severity.ERROR, message="stale")
        )
        outcome = _pipeline(source_dir, context, bad_compiler).execute()

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.cause == ERRORS_FAILURE
        assert outcome.verdict is not None
        assert outcome.verdict.processed_count == 2
        assert outcome.has_errors
        assert not outcome.has_warnings
        assert outcome.processed_files == [source_dir / "bad.html", source_dir / "ok.html"]
        assert context.diagnostics.messages(source_dir / "ok.html") == []
        assert context.diagnostics.messages(source_dir / "bad.html") == [
            DiagnosticMessage(severity=Severity.ERROR, line=3, column=5, message="unexpected token")
        ]
        assert context.completed == [(source_dir, False)]

    def test_failure_suppressed_by_host(
        self, source_dir: Path, bad_compiler: ScriptedCompiler
    ) -> None:
        context = InMemoryBuildContext(may_fail_execution=False)
        outcome = _pipeline(source_dir, context, bad_compiler).execute()
        assert outcome.status is OutcomeStatus.SUCCEEDED
        assert outcome.has_errors
        assert len(context.diagnostics.messages(source_dir / "bad.html")) == 1
        # Suppressed errors still keep the tree from being treated as clean.
        assert context.completed == [(source_dir, False)]

    def test_warnings_pass_unless_configured(
        self, source_dir: Path, context: InMemoryBuildContext
    ) -> None:
        compiler = ScriptedCompiler({"ok.html": warning("ok.html", "careful")})
        outcome = _pipeline(source_dir, context, compiler).execute()
        assert outcome.status is OutcomeStatus.SUCCEEDED
        assert outcome.has_warnings

        compiler = ScriptedCompiler({"ok.html": warning("ok.html", "careful")})
        outcome = _pipeline(source_dir, context, compiler, fail_on_warnings=True).execute()
        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.cause == WARNINGS_FAILURE

    def test_repeated_runs_identical(
        self, source_dir: Path, context: InMemoryBuildContext, bad_compiler: ScriptedCompiler
    ) -> None:
        pipeline = _pipeline(source_dir, context, bad_compiler)
        first = pipeline.execute()
        second = pipeline.execute()
        assert first.status == second.status
        assert first.processed_files == second.processed_files
        assert first.verdict is not None and second.verdict is not None
        assert (first.verdict.has_warnings, first.verdict.has_errors, first.verdict.failure) == (
            second.verdict.has_warnings, second.verdict.has_errors, second.verdict.failure,
        )
        assert len(context.diagnostics) == 1

    def test_includes_and_excludes(self, tmp_path: Path, context: InMemoryBuildContext) -> None:
        root = write_tree(
            tmp_path / "templates",
            {"a.html": "", "b.txt": "", "vendor/c.html": "", "mail/d.j2": ""},
        )
        compiler = ScriptedCompiler()
        outcome = _pipeline(
            root, context, compiler, includes=["**/*.html", "**/*.j2"], excludes=["vendor/**"]
        ).execute()
        assert compiler.script_names == ["a.html", "mail/d.j2"]
        assert outcome.verdict is not None
        assert outcome.verdict.processed_count == 2


class TestCodegen:
    def test_generates_and_registers_source_root(
        self, tmp_path: Path, context: InMemoryBuildContext
    ) -> None:
        root = write_tree(tmp_path / "templates", {"a/b/Widget.html": "<b></b>"})
        out = tmp_path / "generated"
        compiler = ScriptedCompiler()
        pipeline = _pipeline(
            root, context, compiler, generate_modules=True, generated_modules_directory=out
        )
        outcome = pipeline.execute()
        assert outcome.status is OutcomeStatus.SUCCEEDED
        assert (out / "a" / "b" / "Widget.py").is_file()
        assert pipeline.project.compile_source_roots == [out]
        assert all(b is not None for b in compiler.backends)

    def test_source_root_registered_even_without_delta(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "templates", {"x.html": ""})
        out = tmp_path / "generated"
        pipeline = _pipeline(
            root, InMemoryBuildContext(delta=False), ScriptedCompiler(),
            generate_modules=True, generated_modules_directory=out,
        )
        pipeline.execute()
        assert out.is_dir()
        assert pipeline.project.compile_source_roots == [out]
        assert not (out / "x.py").exists()

    def test_parallel_codegen(self, tmp_path: Path, context: InMemoryBuildContext) -> None:
        names = {f"pkg{i}/page{j}.html": f"{i}-{j}" for i in range(3) for j in range(4)}
        root = write_tree(tmp_path / "templates", names)
        out = tmp_path / "generated"
        outcome = _pipeline(
            root, context, ScriptedCompiler(),
            generate_modules=True, generated_modules_directory=out, jobs=4,
        ).execute()
        assert outcome.verdict is not None
        assert outcome.verdict.processed_count == 12
        assert len(list(out.rglob("*.py"))) == 12

    def test_colliding_module_names_are_fatal(
        self, tmp_path: Path, context: InMemoryBuildContext
    ) -> None:
        root = write_tree(tmp_path / "templates", {"my-widget.html": "", "my_widget.html": ""})
        out = tmp_path / "generated"
        compiler = ScriptedCompiler()
        with pytest.raises(ExecutionError) as exc_info:
            _pipeline(
                root, context, compiler, generate_modules=True, generated_modules_directory=out
            ).execute()
        message = str(exc_info.value)
        assert "my-widget.html" in message
        assert "my_widget.html" in message
        assert "my_widget" in message
        assert compiler.units == []
        assert list(out.iterdir()) == []

    def test_colliding_names_allowed_without_codegen(
        self, tmp_path: Path, context: InMemoryBuildContext
    ) -> None:
        root = write_tree(tmp_path / "templates", {"my-widget.html": "", "my_widget.html": ""})
        outcome = _pipeline(root, context, ScriptedCompiler()).execute()
        assert outcome.status is OutcomeStatus.SUCCEEDED
        assert len(outcome.processed_files) == 2
