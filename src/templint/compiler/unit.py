"""Per-script compilation units."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO


class CompilationUnit:
    """Binds one template script to its source root.

    The script is opened when the unit is created; :meth:`dispose` closes it
    and must be called exactly once.  Prefer :func:`acquire`.
    """

    def __init__(self, source_root: Path, script: Path) -> None:
        self._source_root = source_root
        self._script = script
        self._source: str | None = None
        self._disposed = False
        self._reader: TextIO = script.open("r", encoding="utf-8")

    @property
    def source_root(self) -> Path:
        return self._source_root

    @property
    def path(self) -> Path:
        return self._script

    @property
    def script_name(self) -> str:
        """Root-relative, ``/``-separated script name (``a/b/Widget.html``)."""
        return self._script.relative_to(self._source_root).as_posix()

    @property
    def disposed(self) -> bool:
        return self._disposed

    def get_source_code(self) -> str:
        if self._disposed:
            raise RuntimeError(f"Compilation unit for {self.script_name} is disposed")
        if self._source is None:
            self._source = self._reader.read()
        return self._source

    def dispose(self) -> None:
        if self._disposed:
            raise RuntimeError(f"Compilation unit for {self.script_name} already disposed")
        self._disposed = True
        self._reader.close()


@contextmanager
def acquire(source_root: Path, script: Path) -> Iterator[CompilationUnit]:
    """Yield a unit for ``script`` and dispose of it on every exit path."""
    unit = CompilationUnit(source_root, script)
    try:
        yield unit
    finally:
        unit.dispose()
