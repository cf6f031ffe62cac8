"""Resolved, immutable pipeline configuration."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_INCLUDES = "**/*.html"
DEFAULT_GENERATED_DIRECTORY = Path("build") / "generated-sources" / "templint"


def _absolute(path: Path, basedir: Path) -> Path:
    return path if path.is_absolute() else basedir / path


class PipelineConfig(BaseModel):
    """Configuration for one pipeline run.

    Built once at pipeline start (see :meth:`resolve`) and never mutated.
    All paths are absolute.
    """

    model_config = ConfigDict(frozen=True)

    source_directory: Path
    includes: tuple[str, ...] = (DEFAULT_INCLUDES,)
    excludes: tuple[str, ...] = ()
    fail_on_warnings: bool = False
    generate_modules: bool = False
    generated_modules_directory: Path = DEFAULT_GENERATED_DIRECTORY
    ignore_imports: frozenset[str] = frozenset()
    skip: bool = False
    jobs: int = Field(default=1, ge=1)

    @classmethod
    def resolve(
        cls,
        basedir: Path,
        source_directory: Path,
        *,
        includes: list[str] | tuple[str, ...] | None = None,
        excludes: list[str] | tuple[str, ...] | None = None,
        fail_on_warnings: bool = False,
        generate_modules: bool = False,
        generated_modules_directory: Path = DEFAULT_GENERATED_DIRECTORY,
        ignore_imports: list[str] | set[str] | None = None,
        skip: bool = False,
        jobs: int = 1,
    ) -> PipelineConfig:
        """Normalise paths against ``basedir`` and fill in defaults."""
        basedir = basedir.absolute()
        return cls(
            source_directory=_absolute(source_directory, basedir),
            includes=tuple(includes) if includes else (DEFAULT_INCLUDES,),
            excludes=tuple(excludes or ()),
            fail_on_warnings=fail_on_warnings,
            generate_modules=generate_modules,
            generated_modules_directory=_absolute(generated_modules_directory, basedir),
            ignore_imports=frozenset(ignore_imports or ()),
            skip=skip,
            jobs=jobs,
        )

    def fingerprint(self) -> str:
        """Digest of the settings that decide a run's verdict and its generated output."""
        data = self.model_dump(
            mode="json",
            include={
                "includes",
                "excludes",
                "fail_on_warnings",
                "generate_modules",
                "generated_modules_directory",
            },
        )
        data["ignore_imports"] = sorted(self.ignore_imports)
        encoded = json.dumps(data, sort_keys=True).encode("utf-8")
        return hashlib.sha256(encoded).hexdigest()
