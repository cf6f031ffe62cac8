"""Directory scanning with Ant-style include/exclude globs."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from pathlib import Path

from templint.models.config import DEFAULT_INCLUDES


def _segment_regex(segment: str) -> str:
    parts: list[str] = []
    for char in segment:
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char))
    return "".join(parts)


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Translate an Ant-style glob into a regex over ``/``-separated paths.

    ``**`` matches zero or more directories, ``*`` and ``?`` never cross a
    ``/``. A trailing ``/`` is shorthand for ``/**``.
    """
    pattern = pattern.replace("\\", "/")
    if pattern.endswith("/"):
        pattern += "**"
    segments = [s for s in pattern.split("/") if s]
    if not segments:
        return re.compile(r"(?!)")

    regex = ""
    last = len(segments) - 1
    for i, segment in enumerate(segments):
        if segment == "**":
            regex += ".*" if i == last else "(?:[^/]*/)*"
        else:
            regex += _segment_regex(segment)
            if i != last:
                regex += "/"
    return re.compile(regex)


class PathMatcher:
    """Include/exclude decision for root-relative paths."""

    def __init__(self, includes: Iterable[str] | None, excludes: Iterable[str] | None) -> None:
        include_list = [p for p in includes or () if p] or [DEFAULT_INCLUDES]
        self._includes = [compile_pattern(p) for p in include_list]
        self._excludes = [compile_pattern(p) for p in excludes or () if p]

    def matches(self, relative_path: str) -> bool:
        if not any(p.fullmatch(relative_path) for p in self._includes):
            return False
        return not any(p.fullmatch(relative_path) for p in self._excludes)


def _raise(error: OSError) -> None:
    raise error


def match_paths(
    root: Path,
    includes: Iterable[str] | None,
    excludes: Iterable[str] | None = None,
) -> list[str]:
    """Return the root-relative paths of files under ``root`` that match.

    Directories and files are visited in sorted order, so the result is
    stable for an unchanged tree. Each file appears at most once.
    """
    if not root.exists():
        raise FileNotFoundError(f"Scan root {root} does not exist")
    if not root.is_dir():
        raise NotADirectoryError(f"Scan root {root} is not a directory")

    matcher = PathMatcher(includes, excludes)
    matched: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames.sort()
        relative_dir = Path(dirpath).relative_to(root).as_posix()
        prefix = "" if relative_dir == "." else relative_dir + "/"
        for filename in sorted(filenames):
            candidate = prefix + filename
            if matcher.matches(candidate):
                matched.append(candidate)
    return matched


class DirectoryScanner:
    """Stateful scanner over one base directory.

    Configure with :meth:`set_includes` / :meth:`set_excludes`, run
    :meth:`scan`, then read :meth:`included_files`.
    """

    def __init__(self, basedir: Path) -> None:
        self._basedir = basedir
        self._includes: list[str] = [DEFAULT_INCLUDES]
        self._excludes: list[str] = []
        self._included: list[str] | None = None

    @property
    def basedir(self) -> Path:
        return self._basedir

    def set_includes(self, includes: Iterable[str] | None) -> None:
        self._includes = [p for p in includes or () if p] or [DEFAULT_INCLUDES]

    def set_excludes(self, excludes: Iterable[str] | None) -> None:
        self._excludes = [p for p in excludes or () if p]

    def scan(self) -> None:
        self._included = match_paths(self._basedir, self._includes, self._excludes)

    def included_files(self) -> list[str]:
        if self._included is None:
            raise RuntimeError("scan() must be called before included_files()")
        return list(self._included)
