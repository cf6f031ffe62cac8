"""YAML config file loading with position tracking for rich error reporting."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap
from ruamel.yaml.error import YAMLError

from templint.models.diagnostics import SourceSpan
from templint.settings import Settings

logger = logging.getLogger("templint.config")

DEFAULT_CONFIG_FILE = "templint.yaml"

_MAX_DOCUMENT_SIZE = 1_000_000
_MAX_DEPTH = 10

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


class ConfigFileError(Exception):
    """Raised when a config file cannot be read or holds invalid values."""

    def __init__(self, message: str, span: SourceSpan | None = None) -> None:
        self.span = span
        if span is not None:
            message = f"{span.file}:{span.line}:{span.column}: {message}"
        super().__init__(message)


def to_snake_case(key: str) -> str:
    """``failOnWarnings`` -> ``fail_on_warnings``; dashes become underscores."""
    return _CAMEL_BOUNDARY.sub(r"_\1", key).replace("-", "_").lower()


class ConfigLoader:
    """Loads a ``templint.yaml`` mapping.

    Uses ruamel.yaml, which keeps line/column info on every parsed node, so
    errors point at the offending key.
    """

    def __init__(self) -> None:
        self._yaml = YAML()
        self._yaml.max_depth = _MAX_DEPTH

    def load(self, path: Path) -> tuple[dict[str, Any], dict[str, SourceSpan]]:
        """Return ``(values, positions)`` keyed by snake_case setting name."""
        try:
            with path.open("r", encoding="utf-8") as handle:
                content = handle.read()
        except OSError as exc:
            raise ConfigFileError(f"Cannot read config file {path}: {exc}") from exc
        return self.load_string(content, str(path))

    def load_string(
        self, content: str, filename: str = "<string>"
    ) -> tuple[dict[str, Any], dict[str, SourceSpan]]:
        if len(content) > _MAX_DOCUMENT_SIZE:
            raise ConfigFileError(
                f"Config file {filename} exceeds maximum size ({_MAX_DOCUMENT_SIZE:,} chars)"
            )
        try:
            data = self._yaml.load(content)
        except YAMLError as exc:
            raise ConfigFileError(f"Invalid YAML in {filename}: {exc}") from exc
        if data is None:
            return {}, {}
        if not isinstance(data, CommentedMap):
            raise ConfigFileError(
                f"Config file {filename} must contain a YAML mapping",
                SourceSpan(file=filename, line=1, column=1),
            )

        known = set(Settings.model_fields)
        values: dict[str, Any] = {}
        positions: dict[str, SourceSpan] = {}
        for key in data:
            name = to_snake_case(str(key))
            if name not in known:
                logger.warning("Ignoring unknown key '%s' in %s", key, filename)
                continue
            values[name] = _to_plain(data[key])
            try:
                line, col = data.lc.key(key)
                positions[name] = SourceSpan(file=filename, line=line + 1, column=col + 1)
            except (AttributeError, KeyError, TypeError):
                pass
        return values, positions


def _to_plain(data: Any) -> Any:
    if isinstance(data, dict):
        return {str(k): _to_plain(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_to_plain(item) for item in data]
    return data


def load_settings(
    config_file: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Build :class:`Settings` from environment, an optional config file and overrides.

    Precedence: ``overrides`` > config file > environment > ``.env`` > defaults.
    Without an explicit ``config_file``, ``templint.yaml`` in the working
    directory is used when present.
    """
    if config_file is None and Path(DEFAULT_CONFIG_FILE).is_file():
        config_file = Path(DEFAULT_CONFIG_FILE)

    values: dict[str, Any] = {}
    positions: dict[str, SourceSpan] = {}
    if config_file is not None:
        values, positions = ConfigLoader().load(config_file)
    values.update(overrides or {})

    try:
        return Settings(**values)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = str(first["loc"][0]) if first["loc"] else ""
        span = positions.get(field) if field not in (overrides or {}) else None
        raise ConfigFileError(f"Invalid value for '{field}': {first['msg']}", span) from exc
