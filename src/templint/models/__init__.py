"""Pydantic domain models for templint."""

from templint.models.config import DEFAULT_INCLUDES, PipelineConfig
from templint.models.diagnostics import (
    CompilationResult,
    CompilerMessage,
    DiagnosticMessage,
    Severity,
    SourceSpan,
)

__all__ = [
    "DEFAULT_INCLUDES",
    "CompilationResult",
    "CompilerMessage",
    "DiagnosticMessage",
    "PipelineConfig",
    "Severity",
    "SourceSpan",
]
