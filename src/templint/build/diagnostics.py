"""Per-file diagnostic storage."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from templint.models.diagnostics import DiagnosticMessage


class DiagnosticSink(ABC):
    """Receives the diagnostics of each processed template script."""

    @abstractmethod
    def clear(self, file: Path) -> None:
        """Drop every diagnostic previously recorded for ``file``."""

    @abstractmethod
    def record(self, file: Path, message: DiagnosticMessage) -> None:
        """Append one diagnostic for ``file``."""


class DiagnosticStore(DiagnosticSink):
    """In-memory sink keyed by absolute file path.  Thread-safe."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._messages: dict[Path, list[DiagnosticMessage]] = {}

    def clear(self, file: Path) -> None:
        with self._lock:
            self._messages.pop(file, None)

    def record(self, file: Path, message: DiagnosticMessage) -> None:
        with self._lock:
            self._messages.setdefault(file, []).append(message)

    def messages(self, file: Path) -> list[DiagnosticMessage]:
        with self._lock:
            return list(self._messages.get(file, ()))

    def files(self) -> list[Path]:
        """Files that currently hold at least one diagnostic, sorted."""
        with self._lock:
            return sorted(f for f, msgs in self._messages.items() if msgs)

    def prune(self, root: Path, keep: Iterable[Path]) -> list[Path]:
        """Drop diagnostics of files below ``root`` that are not in ``keep``."""
        kept = set(keep)
        with self._lock:
            stale = sorted(f for f in self._messages if f.is_relative_to(root) and f not in kept)
            for file in stale:
                del self._messages[file]
        return stale

    def __len__(self) -> int:
        with self._lock:
            return sum(len(msgs) for msgs in self._messages.values())

    # -- persistence ---------------------------------------------------------

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        with self._lock:
            return {
                str(file): [m.model_dump(mode="json") for m in msgs]
                for file, msgs in sorted(self._messages.items())
                if msgs
            }

    @classmethod
    def from_dict(cls, data: dict[str, list[dict[str, Any]]]) -> DiagnosticStore:
        store = cls()
        for file, msgs in data.items():
            for raw in msgs:
                store.record(Path(file), DiagnosticMessage.model_validate(raw))
        return store
