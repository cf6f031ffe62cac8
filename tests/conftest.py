"""Shared test fixtures for templint."""

from __future__ import annotations

from pathlib import Path

import pytest

from templint.build.context import InMemoryBuildContext
from templint.compiler.base import BackendCompiler, CompiledTemplate, TemplateCompiler
from templint.compiler.jinja import JinjaTemplateCompiler
from templint.compiler.unit import CompilationUnit
from templint.models.diagnostics import CompilationResult, CompilerMessage

FIXTURES_DIR = Path(__file__).parent / "fixtures"
TEMPLATES_DIR = FIXTURES_DIR / "templates"

# Files under TEMPLATES_DIR matched by the default include pattern, in scan order.
FIXTURE_TEMPLATES = [
    "broken/unclosed.html",
    "layout/base.html",
    "pages/about.html",
    "pages/index.html",
    "shared/macros.html",
    "shared/nav.html",
]


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create ``files`` (root-relative name -> content) below ``root``."""
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


class ScriptedCompiler(TemplateCompiler):
    """Returns canned results keyed by script name and records every unit seen."""

    def __init__(
        self,
        results: dict[str, CompilationResult] | None = None,
        raise_for: dict[str, Exception] | None = None,
    ) -> None:
        self.results = results or {}
        self.raise_for = raise_for or {}
        self.units: list[CompilationUnit] = []
        self.backends: list[BackendCompiler | None] = []

    def compile(
        self,
        unit: CompilationUnit,
        backend: BackendCompiler | None = None,
    ) -> CompilationResult:
        self.units.append(unit)
        self.backends.append(backend)
        source = unit.get_source_code()
        if unit.script_name in self.raise_for:
            raise self.raise_for[unit.script_name]
        if backend is not None:
            backend.process(
                CompiledTemplate(
                    script_name=unit.script_name,
                    code=f"SOURCE_LENGTH = {len(source)}\n",
                )
            )
        return self.results.get(unit.script_name, CompilationResult())

    @property
    def script_names(self) -> list[str]:
        return [u.script_name for u in self.units]


def error(script_name: str, message: str, line: int = 0, column: int = 0) -> CompilationResult:
    return CompilationResult(
        errors=(CompilerMessage(script_name=script_name, message=message, line=line, column=column),)
    )


def warning(script_name: str, message: str, line: int = 0, column: int = 0) -> CompilationResult:
    return CompilationResult(
        warnings=(
            CompilerMessage(script_name=script_name, message=message, line=line, column=column),
        )
    )


@pytest.fixture
def context() -> InMemoryBuildContext:
    return InMemoryBuildContext()


@pytest.fixture
def jinja_compiler() -> JinjaTemplateCompiler:
    return JinjaTemplateCompiler()


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """Two templates: ``ok.html`` is clean, ``bad.html`` has an error."""
    return write_tree(
        tmp_path / "templates",
        {
            "ok.html": "<p>{{ greeting }}</p>\n",
            "bad.html": "<div>\n  <p>\n    {{ name ) }}\n  </p>\n</div>\n",
        },
    )


@pytest.fixture
def bad_compiler() -> ScriptedCompiler:
    """The concrete two-file scenario: one error at 3:5 in ``bad.html``."""
    return ScriptedCompiler({"bad.html": error("bad.html", "unexpected token", line=3, column=5)})
