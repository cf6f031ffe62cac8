"""Backend rendering compiled templates as importable Python modules."""

from __future__ import annotations

from templint import __version__
from templint.compiler.base import BackendCompiler, CompiledTemplate
from templint.compiler.imports import ImportsAnalyzer
from templint.compiler.naming import ArtifactInfo, qualified_name_for

_HEADER = '''\
"""Generated by templint {version} as module {qualified_name}.

Do not edit: this file is rewritten on every build.
"""

TEMPLATE_NAME = {script_name!r}
DEPENDENCIES: tuple[str, ...] = {dependencies}

'''

_FAILED_BODY = '''\
raise ImportError({reason!r})
'''


def _tuple_literal(names: list[str]) -> str:
    if not names:
        return "()"
    return "(" + ", ".join(repr(n) for n in names) + ",)"


class PythonModuleBackend(BackendCompiler):
    """One backend per script.

    Records the Python source produced by the front-end and the modules of the
    templates it references, pruned by the shared :class:`ImportsAnalyzer`.
    """

    def __init__(self, imports_analyzer: ImportsAnalyzer | None = None) -> None:
        self._imports = imports_analyzer if imports_analyzer is not None else ImportsAnalyzer()
        self._template: CompiledTemplate | None = None
        self._dependencies: list[str] = []

    @property
    def dependencies(self) -> list[str]:
        return list(self._dependencies)

    def process(self, template: CompiledTemplate) -> None:
        self._template = template
        self._dependencies = self._imports.filter(
            qualified_name_for(ref) for ref in template.references
        )

    def build(self, artifact: ArtifactInfo) -> str:
        header = _HEADER.format(
            version=__version__,
            script_name=artifact.script_name,
            qualified_name=artifact.qualified_name,
            dependencies=_tuple_literal(self._dependencies),
        )
        if self._template is None:
            reason = f"Template {artifact.script_name} failed to compile"
            return header + _FAILED_BODY.format(reason=reason)
        return header + self._template.code.rstrip("\n") + "\n"
