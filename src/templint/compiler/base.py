"""Abstract compiler boundary: front-end compilers and code-generation backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from templint.compiler.naming import ArtifactInfo
from templint.compiler.unit import CompilationUnit
from templint.models.diagnostics import CompilationResult


@dataclass(frozen=True)
class CompiledTemplate:
    """What a front-end hands to a backend after a successful compilation."""

    script_name: str
    code: str
    references: tuple[str, ...] = field(default_factory=tuple)


class BackendCompiler(ABC):
    """Accumulates compiled output for one script and renders the final source."""

    @abstractmethod
    def process(self, template: CompiledTemplate) -> None:
        """Receive the compiled template."""

    @abstractmethod
    def build(self, artifact: ArtifactInfo) -> str:
        """Render the source text of the generated module."""


class TemplateCompiler(ABC):
    """Validates a compilation unit and optionally feeds a backend."""

    @abstractmethod
    def compile(
        self,
        unit: CompilationUnit,
        backend: BackendCompiler | None = None,
    ) -> CompilationResult:
        """Compile ``unit``.

        Template problems are reported in the result, never raised.  Only
        I/O failures reading the unit propagate.
        """
