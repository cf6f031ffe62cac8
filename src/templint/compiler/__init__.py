"""Template compilation for templint."""

from templint.compiler.backend import PythonModuleBackend
from templint.compiler.base import BackendCompiler, CompiledTemplate, TemplateCompiler
from templint.compiler.imports import ImportsAnalyzer
from templint.compiler.jinja import JinjaTemplateCompiler
from templint.compiler.naming import ArtifactInfo
from templint.compiler.unit import CompilationUnit, acquire

__all__ = [
    "ArtifactInfo",
    "BackendCompiler",
    "CompilationUnit",
    "CompiledTemplate",
    "ImportsAnalyzer",
    "JinjaTemplateCompiler",
    "PythonModuleBackend",
    "TemplateCompiler",
    "acquire",
]
