"""The enclosing build project as seen by the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class BuildProject:
    """Base directory plus the source roots compiled by the enclosing build."""

    basedir: Path
    compile_source_roots: list[Path] = field(default_factory=list)

    def add_compile_source_root(self, path: Path) -> None:
        if path not in self.compile_source_roots:
            self.compile_source_roots.append(path)
