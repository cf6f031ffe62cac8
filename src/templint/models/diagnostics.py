"""Structured diagnostic models with template source positions."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

_LINE_SEPARATORS = ("\r\n", "\n", "\r")


class Severity(StrEnum):
    WARNING = "warning"
    ERROR = "error"


class SourceSpan(BaseModel):
    """Points to exact location in a source file for error reporting."""

    file: str
    line: int
    column: int


class CompilerMessage(BaseModel):
    """A warning or error reported by the template compiler for one script.

    ``line`` and ``column`` are 1-based; ``0`` means the position is unknown.
    """

    model_config = ConfigDict(frozen=True)

    script_name: str
    message: str
    line: int = 0
    column: int = 0


class CompilationResult(BaseModel):
    """Result of compiling a single template script."""

    model_config = ConfigDict(frozen=True)

    warnings: tuple[CompilerMessage, ...] = ()
    errors: tuple[CompilerMessage, ...] = ()

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0


class DiagnosticMessage(BaseModel):
    """A diagnostic attached to a line/column of one template script."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    line: int = 0
    column: int = 0
    message: str

    @classmethod
    def warning(cls, source: CompilerMessage) -> DiagnosticMessage:
        return cls(
            severity=Severity.WARNING,
            line=source.line,
            column=source.column,
            message=source.message,
        )

    @classmethod
    def error(cls, source: CompilerMessage) -> DiagnosticMessage:
        """Build an error diagnostic, collapsing the text onto a single line."""
        text = source.message
        for separator in _LINE_SEPARATORS:
            text = text.replace(separator, "")
        return cls(
            severity=Severity.ERROR,
            line=source.line,
            column=source.column,
            message=text,
        )

    def format(self, file: str) -> str:
        return f"{file}:{self.line}:{self.column}: {self.severity}: {self.message}"
