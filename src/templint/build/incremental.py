"""Incremental build context backed by a JSON state file.

The state file holds, per source root, a SHA-256 snapshot of every file
below it tagged with a fingerprint of the run settings, and the
diagnostics last recorded for each template.  A root has a delta when its
current snapshot or the settings differ from the stored ones.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from templint.build.context import BuildContext
from templint.build.diagnostics import DiagnosticStore

logger = logging.getLogger("templint.build")

_STATE_VERSION = 2
_READ_CHUNK = 65536


def _raise(error: OSError) -> None:
    raise error


def _digest(path: Path) -> str:
    sha = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_READ_CHUNK), b""):
            sha.update(chunk)
    return sha.hexdigest()


def snapshot(root: Path, ignored: Iterable[Path] = ()) -> dict[str, str]:
    """Map every file below ``root`` (root-relative, ``/``-separated) to its digest.

    Files at or below any of the ``ignored`` paths are left out.
    """
    ignored = [p.absolute() for p in ignored]
    digests: dict[str, str] = {}
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        current = Path(dirpath).absolute()
        dirnames[:] = sorted(d for d in dirnames if current / d not in ignored)
        for filename in sorted(filenames):
            path = current / filename
            if path in ignored:
                continue
            digests[path.relative_to(root.absolute()).as_posix()] = _digest(path)
    return digests


class StateFileBuildContext(BuildContext):
    """Build context persisting snapshots and diagnostics between runs.

    Each stored snapshot is tagged with a fingerprint of the run settings
    (``config_fingerprint`` plus ``may_fail_execution``). A root whose
    fingerprint differs has a delta even when no file changed.

    With ``incremental=False`` every root is reported as changed, but
    snapshots and diagnostics are still kept up to date.
    """

    def __init__(
        self,
        state_file: Path,
        *,
        incremental: bool = True,
        may_fail_execution: bool = True,
        ignored_paths: Iterable[Path] = (),
        config_fingerprint: str = "",
    ) -> None:
        self._state_file = state_file
        self._incremental = incremental
        self._may_fail_execution = may_fail_execution
        self._ignored = [state_file, *ignored_paths]
        self._fingerprint = hashlib.sha256(
            json.dumps([config_fingerprint, may_fail_execution]).encode("utf-8")
        ).hexdigest()
        self._snapshots: dict[str, dict[str, Any]] = {}
        self._pending: dict[str, dict[str, str]] = {}
        self._diagnostics = DiagnosticStore()
        self._load()

    # -- BuildContext --------------------------------------------------------

    @property
    def diagnostics(self) -> DiagnosticStore:
        return self._diagnostics

    @property
    def may_fail_execution(self) -> bool:
        return self._may_fail_execution

    def has_delta(self, root: Path) -> bool:
        key = str(root.absolute())
        current = snapshot(root, self._ignored)
        self._pending[key] = current
        if not self._incremental:
            return True
        stored = self._snapshots.get(key)
        if stored is None or stored["fingerprint"] != self._fingerprint:
            return True
        return stored["files"] != current

    def complete(
        self,
        root: Path,
        *,
        clean: bool,
        processed: Sequence[Path] | None = None,
    ) -> None:
        key = str(root.absolute())
        current = self._pending.pop(key, None)
        if current is None:
            current = snapshot(root, self._ignored)
        if clean:
            self._snapshots[key] = {"fingerprint": self._fingerprint, "files": current}
        else:
            # Forget the root so the next run re-checks it.
            self._snapshots.pop(key, None)

        if processed is None:
            keep = [root.absolute() / name for name in current]
        else:
            keep = [p.absolute() for p in processed]
        for stale in self._diagnostics.prune(root.absolute(), keep):
            logger.debug("Dropped diagnostics of %s", stale)
        self.save()

    # -- persistence ---------------------------------------------------------

    @property
    def state_file(self) -> Path:
        return self._state_file

    def _load(self) -> None:
        if not self._state_file.exists():
            return
        try:
            with self._state_file.open("r", encoding="utf-8") as handle:
                data: dict[str, Any] = json.load(handle)
            if data.get("version") != _STATE_VERSION:
                logger.warning(
                    "Ignoring state file %s with unsupported version %r",
                    self._state_file, data.get("version"),
                )
                return
            snapshots = {
                root: {"fingerprint": str(entry["fingerprint"]), "files": dict(entry["files"])}
                for root, entry in data.get("snapshots", {}).items()
            }
            diagnostics = DiagnosticStore.from_dict(data.get("diagnostics", {}))
        except (OSError, ValueError, AttributeError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable state file %s: %s", self._state_file, exc)
            return
        self._snapshots = snapshots
        self._diagnostics = diagnostics
        logger.debug("Loaded state for %d source root(s) from %s", len(snapshots), self._state_file)

    def save(self) -> None:
        """Write the state file atomically."""
        data = {
            "version": _STATE_VERSION,
            "snapshots": self._snapshots,
            "diagnostics": self._diagnostics.to_dict(),
        }
        self._state_file.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._state_file.name}.", dir=str(self._state_file.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(data, tmp, indent=2, sort_keys=True)
            os.replace(tmp_name, self._state_file)
        finally:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
        logger.debug("Saved state to %s", self._state_file)
