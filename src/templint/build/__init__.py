"""Build-side services: scanning, delta detection and diagnostics."""

from templint.build.context import BuildContext, InMemoryBuildContext
from templint.build.diagnostics import DiagnosticSink, DiagnosticStore
from templint.build.incremental import StateFileBuildContext
from templint.build.project import BuildProject
from templint.build.scanner import DirectoryScanner, PathMatcher, match_paths

__all__ = [
    "BuildContext",
    "BuildProject",
    "DiagnosticSink",
    "DiagnosticStore",
    "DirectoryScanner",
    "InMemoryBuildContext",
    "PathMatcher",
    "StateFileBuildContext",
    "match_paths",
]
