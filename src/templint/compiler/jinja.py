"""Jinja2 front-end: syntax checking, reference checks and Python code generation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from jinja2 import Environment, TemplateSyntaxError, nodes, select_autoescape

from templint.compiler.base import BackendCompiler, CompiledTemplate, TemplateCompiler
from templint.compiler.unit import CompilationUnit
from templint.models.diagnostics import CompilationResult, CompilerMessage

logger = logging.getLogger("templint.compiler")

_DEFAULT_EXTENSIONS = ("jinja2.ext.do", "jinja2.ext.loopcontrols")

_REFERENCE_NODES = (nodes.Extends, nodes.Include, nodes.Import, nodes.FromImport)


def default_environment() -> Environment:
    return Environment(
        autoescape=select_autoescape(),
        extensions=list(_DEFAULT_EXTENSIONS),
    )


def _static_names(expr: nodes.Expr) -> list[str] | None:
    """Template names of a reference target, or ``None`` when computed at runtime."""
    if isinstance(expr, nodes.Const):
        value = expr.value
        if isinstance(value, str):
            return [value]
        if isinstance(value, (tuple, list)) and all(isinstance(v, str) for v in value):
            return list(value)
        return None
    if isinstance(expr, (nodes.Tuple, nodes.List)):
        names: list[str] = []
        for item in expr.items:
            if not (isinstance(item, nodes.Const) and isinstance(item.value, str)):
                return None
            names.append(item.value)
        return names
    return None


class JinjaTemplateCompiler(TemplateCompiler):
    """Compiles Jinja2 templates.

    Errors come from the parser (``TemplateSyntaxError``) and from code
    generation (``TemplateAssertionError``, e.g. unknown filters).  Warnings
    flag statically named ``extends``/``include``/``import`` targets that
    cannot be found under the source root or any extra search path.
    """

    def __init__(
        self,
        environment: Environment | None = None,
        *,
        search_paths: Iterable[Path] = (),
        check_references: bool = True,
    ) -> None:
        self._env = environment if environment is not None else default_environment()
        self._search_paths = list(search_paths)
        self._check_references = check_references

    @property
    def environment(self) -> Environment:
        return self._env

    def compile(
        self,
        unit: CompilationUnit,
        backend: BackendCompiler | None = None,
    ) -> CompilationResult:
        name = unit.script_name
        source = unit.get_source_code()
        logger.debug("Compiling %s", name)

        try:
            ast = self._env.parse(source, name=name, filename=str(unit.path))
        except TemplateSyntaxError as exc:
            return CompilationResult(errors=(self._syntax_message(name, exc),))

        references: list[str] = []
        warnings: list[CompilerMessage] = []
        for node, names in self._references(ast):
            references.extend(names)
            if self._check_references and not self._any_exists(unit, names, node):
                warnings.append(
                    CompilerMessage(
                        script_name=name,
                        message=self._missing_message(names),
                        line=node.lineno,
                    )
                )

        try:
            # Deferred init: the module gets its environment when loaded.
            code = self._env.compile(
                ast, name=name, filename=str(unit.path), raw=True, defer_init=True
            )
        except TemplateSyntaxError as exc:
            return CompilationResult(
                warnings=tuple(warnings),
                errors=(self._syntax_message(name, exc),),
            )

        if backend is not None:
            backend.process(
                CompiledTemplate(script_name=name, code=code, references=tuple(references))
            )
        return CompilationResult(warnings=tuple(warnings))

    # -- helpers -------------------------------------------------------------

    @staticmethod
    def _syntax_message(name: str, exc: TemplateSyntaxError) -> CompilerMessage:
        return CompilerMessage(
            script_name=name,
            message=exc.message or str(exc),
            line=exc.lineno or 0,
        )

    @staticmethod
    def _references(ast: nodes.Template) -> Iterator[tuple[nodes.Node, list[str]]]:
        for node in ast.find_all(_REFERENCE_NODES):
            names = _static_names(node.template)
            if names:
                yield node, names

    def _any_exists(self, unit: CompilationUnit, names: list[str], node: nodes.Node) -> bool:
        if isinstance(node, nodes.Include) and node.ignore_missing:
            return True
        roots = [unit.source_root, *self._search_paths]
        return any((root / n.lstrip("/")).is_file() for root in roots for n in names)

    @staticmethod
    def _missing_message(names: list[str]) -> str:
        if len(names) == 1:
            return f"Referenced template '{names[0]}' does not exist under the source directory."
        quoted = ", ".join(f"'{n}'" for n in names)
        return f"None of the referenced templates {quoted} exist under the source directory."
