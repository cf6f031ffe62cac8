"""Command line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from templint import __version__
from templint.build.incremental import StateFileBuildContext
from templint.build.project import BuildProject
from templint.config.loader import ConfigFileError, load_settings
from templint.service.pipeline import ExecutionError, OutcomeStatus, Pipeline

logger = logging.getLogger("templint.cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_FATAL = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="templint",
        description="Validate Jinja2 templates incrementally and optionally "
        "transpile them to Python modules.",
    )
    parser.add_argument("source_directory", nargs="?", type=Path,
                        help="Root folder of the templates (default: templates)")
    parser.add_argument("--include", dest="includes", action="append", metavar="PATTERN",
                        help="Include glob relative to the source directory. Repeatable.")
    parser.add_argument("--exclude", dest="excludes", action="append", metavar="PATTERN",
                        help="Exclude glob relative to the source directory. Repeatable.")
    parser.add_argument("--fail-on-warnings", action="store_const", const=True,
                        help="Fail the build on compiler warnings")
    parser.add_argument("--generate", dest="generate_modules", action="store_const", const=True,
                        help="Write a Python module for every template")
    parser.add_argument("--output-dir", dest="generated_modules_directory", type=Path,
                        metavar="DIR", help="Where generated modules are written")
    parser.add_argument("--ignore-import", dest="ignore_imports", action="append",
                        metavar="PREFIX",
                        help="Module prefix left out of generated DEPENDENCIES. Repeatable.")
    parser.add_argument("--skip", action="store_const", const=True,
                        help="Skip validation entirely")
    parser.add_argument("--config", type=Path, metavar="FILE",
                        help="YAML config file (default: ./templint.yaml if present)")
    parser.add_argument("--state-file", type=Path, metavar="FILE",
                        help="Incremental state file")
    parser.add_argument("--no-incremental", dest="incremental", action="store_const",
                        const=False, help="Process every template even when nothing changed")
    parser.add_argument("--jobs", "-j", type=int, metavar="N",
                        help="Number of worker threads")
    parser.add_argument("--suppress-failures", action="store_const", const=True,
                        help="Report diagnostics but never fail")
    parser.add_argument("--log-level", metavar="LEVEL", help="Logging level (default: INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    values = vars(args).copy()
    values.pop("config", None)
    return {k: v for k, v in values.items() if v is not None}


def run(argv: list[str] | None = None, basedir: Path | None = None) -> int:
    """Run templint and return the process exit code."""
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.config, _overrides(args))
    except ConfigFileError as exc:
        print(f"templint: {exc}", file=sys.stderr)
        return EXIT_FATAL

    logging.basicConfig(level=settings.log_level.upper(), format="[%(levelname)s] %(message)s")

    basedir = (basedir or Path.cwd()).absolute()
    config = settings.pipeline_config(basedir)
    context = StateFileBuildContext(
        settings.resolved_state_file(basedir),
        incremental=settings.incremental,
        may_fail_execution=not settings.suppress_failures,
        ignored_paths=[config.generated_modules_directory],
        config_fingerprint=config.fingerprint(),
    )
    pipeline = Pipeline(config, context, project=BuildProject(basedir))

    try:
        outcome = pipeline.execute()
    except ExecutionError as exc:
        logger.error("%s", exc)
        return EXIT_FATAL

    for file in outcome.processed_files:
        try:
            display = file.relative_to(basedir).as_posix()
        except ValueError:
            display = str(file)
        for message in context.diagnostics.messages(file):
            print(message.format(display))

    if outcome.status is OutcomeStatus.FAILED:
        logger.error("Build failed: %s", outcome.cause)
        return EXIT_FAILED
    if outcome.has_warnings or outcome.has_errors:
        logger.warning("Build succeeded with diagnostics")
    return EXIT_OK


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
