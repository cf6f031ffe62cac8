"""Pruning of dependency imports recorded in generated modules."""

from __future__ import annotations

from collections.abc import Iterable


class ImportsAnalyzer:
    """Decides which dependency names a generated module may import.

    A name is rejected when it, or any of its dotted parents, is in the
    ignore set: ignoring ``shared`` also drops ``shared.forms.inputs``.
    Immutable, so one instance can be shared between worker threads.
    """

    def __init__(self, ignored_prefixes: Iterable[str] | None = None) -> None:
        self._ignored = frozenset(
            p.strip().strip(".") for p in ignored_prefixes or () if p.strip().strip(".")
        )

    @property
    def ignored_prefixes(self) -> frozenset[str]:
        return self._ignored

    def allow_import(self, qualified_name: str) -> bool:
        parts = qualified_name.split(".")
        return not any(
            ".".join(parts[:depth]) in self._ignored for depth in range(1, len(parts) + 1)
        )

    def filter(self, qualified_names: Iterable[str]) -> list[str]:
        """Allowed names, sorted and without duplicates."""
        return sorted({n for n in qualified_names if self.allow_import(n)})
