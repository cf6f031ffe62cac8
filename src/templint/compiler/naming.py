"""Qualified names and output paths for generated Python modules."""

from __future__ import annotations

import keyword
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

SOURCE_SUFFIX = ".py"

_INVALID_CHARS = re.compile(r"\W", re.ASCII)


def to_identifier(segment: str) -> str:
    """Turn one path segment into a valid Python identifier.

    >>> to_identifier("my-widget")
    'my_widget'
    >>> to_identifier("404")
    '_404'
    >>> to_identifier("class")
    'class_'
    """
    name = _INVALID_CHARS.sub("_", segment) or "_"
    if name[0].isdigit():
        name = "_" + name
    if keyword.iskeyword(name):
        name += "_"
    return name


def qualified_name_for(script_name: str) -> str:
    """``a/b/Widget.html`` -> ``a.b.Widget``."""
    path = PurePosixPath(script_name.replace("\\", "/").lstrip("/"))
    parts = [*path.parent.parts, path.stem]
    return ".".join(to_identifier(p) for p in parts)


@dataclass(frozen=True)
class ArtifactInfo:
    """Identity of the module generated from one template script."""

    script_name: str

    @property
    def qualified_name(self) -> str:
        return qualified_name_for(self.script_name)

    @property
    def package_name(self) -> str:
        return self.qualified_name.rpartition(".")[0]

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rpartition(".")[2]

    def output_path(self, output_directory: Path) -> Path:
        *packages, module = self.qualified_name.split(".")
        return output_directory.joinpath(*packages, module + SOURCE_SUFFIX)

    @classmethod
    def for_script(cls, source_root: Path, script: Path) -> ArtifactInfo:
        return cls(script.relative_to(source_root).as_posix())
