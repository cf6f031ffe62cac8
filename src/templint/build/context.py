"""Build context: delta detection, scanning and diagnostics for one build."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from templint.build.diagnostics import DiagnosticSink, DiagnosticStore
from templint.build.scanner import DirectoryScanner


class BuildContext(ABC):
    """Services the pipeline consumes from the enclosing build.

    Subclasses decide how changes are detected and where diagnostics end up.
    """

    @property
    @abstractmethod
    def diagnostics(self) -> DiagnosticSink: ...

    @abstractmethod
    def has_delta(self, root: Path) -> bool:
        """Return ``True`` when ``root`` has changes not yet processed."""

    def new_scanner(self, root: Path) -> DirectoryScanner:
        return DirectoryScanner(root)

    @property
    def may_fail_execution(self) -> bool:
        """Whether a run may report failure.

        Hosts that must never see a failed build (IDE integrations, for
        instance) return ``False``; they still receive diagnostics.
        """
        return True

    def complete(
        self,
        root: Path,
        *,
        clean: bool,
        processed: Sequence[Path] | None = None,
    ) -> None:
        """Called once after every file under ``root`` has been processed.

        ``clean`` is true when the run may stand in for the next one: it
        passed and no template had errors, even suppressed ones.
        ``processed`` lists the scripts compiled in this run.
        """


class InMemoryBuildContext(BuildContext):
    """Non-persistent context.  Reports a delta unless told otherwise."""

    def __init__(
        self,
        *,
        delta: bool = True,
        may_fail_execution: bool = True,
        diagnostics: DiagnosticStore | None = None,
    ) -> None:
        self.delta = delta
        self._may_fail_execution = may_fail_execution
        self._diagnostics = diagnostics if diagnostics is not None else DiagnosticStore()
        self.completed: list[tuple[Path, bool]] = []

    @property
    def diagnostics(self) -> DiagnosticStore:
        return self._diagnostics

    @property
    def may_fail_execution(self) -> bool:
        return self._may_fail_execution

    def has_delta(self, root: Path) -> bool:
        return self.delta

    def complete(
        self,
        root: Path,
        *,
        clean: bool,
        processed: Sequence[Path] | None = None,
    ) -> None:
        self.completed.append((root, clean))
