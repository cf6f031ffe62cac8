"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from templint.models.config import DEFAULT_GENERATED_DIRECTORY, DEFAULT_INCLUDES, PipelineConfig


class Settings(BaseSettings):
    """Configuration for a templint run.

    Values are read from ``TEMPLINT_*`` environment variables and from a
    ``.env`` file in the working directory.  List values are given as JSON
    (``TEMPLINT_EXCLUDES='["vendor/**"]'``).
    """

    model_config = SettingsConfigDict(
        env_prefix="TEMPLINT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Shared
    log_level: str = "INFO"

    # Scanning
    source_directory: Path = Path("templates")
    includes: list[str] = [DEFAULT_INCLUDES]
    excludes: list[str] = []

    # Verdict
    fail_on_warnings: bool = False
    suppress_failures: bool = False  # report diagnostics, never fail the build
    skip: bool = False

    # Code generation
    generate_modules: bool = False
    generated_modules_directory: Path = DEFAULT_GENERATED_DIRECTORY
    ignore_imports: list[str] = []

    # Incremental state
    state_file: Path = Path(".templint") / "state.json"
    incremental: bool = True

    jobs: int = Field(default=1, ge=1)

    def pipeline_config(self, basedir: Path) -> PipelineConfig:
        """Resolve the run configuration with paths made absolute against ``basedir``."""
        return PipelineConfig.resolve(
            basedir,
            self.source_directory,
            includes=self.includes,
            excludes=self.excludes,
            fail_on_warnings=self.fail_on_warnings,
            generate_modules=self.generate_modules,
            generated_modules_directory=self.generated_modules_directory,
            ignore_imports=self.ignore_imports,
            skip=self.skip,
            jobs=self.jobs,
        )

    def resolved_state_file(self, basedir: Path) -> Path:
        return self.state_file if self.state_file.is_absolute() else basedir.absolute() / self.state_file
