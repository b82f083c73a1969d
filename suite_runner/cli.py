"""CLI entry point for the suite runner."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Collection, Mapping, Sequence
from pathlib import Path
from typing import Any

from suite_runner.config_loader import InvalidRunConfigError, build_run_config
from suite_runner.discovery import (
    DEFAULT_EXCLUDED,
    DEFAULT_SUFFIX,
    MissingTestPathError,
    PathResolutionError,
    resolve_test_files,
)
from suite_runner.engines.loading import EngineNotFoundError, load_engine_manifest
from suite_runner.formatting import format_duration
from suite_runner.models.result import ResultModel
from suite_runner.report import generate_report
from suite_runner.runner import SuiteRunner

STATUS_SYMBOLS = {
    "passed": "✅",
    "failed": "❌",
}

USAGE_ERRORS = (
    MissingTestPathError,
    PathResolutionError,
    EngineNotFoundError,
    InvalidRunConfigError,
    FileNotFoundError,
)


def log_results_summary(log: logging.Logger, model: ResultModel) -> None:
    """Log a per-suite summary of the run with the names of failed tests."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for name in model.suite_names:
        failures = model.count(model.failures, name)
        symbol = STATUS_SYMBOLS["failed" if failures else "passed"]
        log.info(
            "%s %s: %d passed, %d failed, %d pending (%s)",
            symbol,
            name,
            model.count(model.passes, name),
            failures,
            model.count(model.pending, name),
            format_duration(model.durations.get(name)) or "0ms",
        )
        for failure in model.failures.get(name, ()):
            log.info("  Failed: %s", failure.title)


def default_title(paths: Sequence[str]) -> str:
    """Derive a report title from the first test path."""
    return Path(paths[0]).resolve().name if paths else "Test Run"


async def run(
    paths: Sequence[str],
    title: str,
    engine_key: str = "pytest",
    excluded: Collection[str] = DEFAULT_EXCLUDED,
    suffix: str = DEFAULT_SUFFIX,
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    output: Path | None = None,
) -> int:
    """Run the test files and return exit code."""
    log = logging.getLogger("suite_runner")

    log.info("Loading engine: %s", engine_key)
    manifest = load_engine_manifest(engine_key)
    config = build_run_config(manifest.config_cls, config_path, overrides)

    files = resolve_test_files(paths, excluded, suffix)
    if not files:
        log.info("No test files found in: %s", ", ".join(map(str, paths)))
        return 0

    log.info("Found %d test file(s)", len(files))

    async with manifest.engine_factory(config) as engine:
        runner = SuiteRunner(engine=engine)
        model = await runner.run(files)

    log_results_summary(log, model)

    report = generate_report(title, model)
    if output is not None:
        output.write_text(report, encoding="utf-8")
        log.info("Report written to %s", output)
    else:
        print(report)

    return 1 if model.has_failures else 0


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        description="Run test suites and print an aggregated text report"
    )
    parser.add_argument(
        "paths",
        nargs="+",
        metavar="PATH",
        help="Test files or directories, relative to the working directory",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        metavar="NAME",
        help="File or directory name to skip (repeatable, replaces the defaults)",
    )
    parser.add_argument(
        "--suffix",
        default=DEFAULT_SUFFIX,
        help=f"Only run files ending with this suffix (default: {DEFAULT_SUFFIX})",
    )
    parser.add_argument("--title", help="Report title (default: first path name)")
    parser.add_argument(
        "--engine",
        default="pytest",
        help="Execution engine key (default: pytest)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML file with run configuration",
    )
    parser.add_argument(
        "-u",
        "--ui",
        dest="interface",
        help="Test interface style (default: prepend)",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=int,
        help="Time in milliseconds before a test is failed (default: 300000)",
    )
    parser.add_argument(
        "-s",
        "--slow",
        type=int,
        help="Time in milliseconds before a test is counted as slow (default: 10000)",
    )
    parser.add_argument(
        "-R",
        "--reporter",
        help="Engine reporter for live output (default: spec)",
    )
    parser.add_argument(
        "-g",
        "--grep",
        help="Only run tests matching this expression",
    )
    parser.add_argument(
        "-C",
        "--no-color",
        action="store_true",
        help="Disable colored engine output",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the report to this file instead of stdout",
    )
    return parser


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    overrides = {
        "interface": args.interface,
        "timeout": args.timeout,
        "slow": args.slow,
        "reporter": args.reporter,
        "grep": args.grep,
        "use_colors": False if args.no_color else None,
    }

    try:
        exit_code = asyncio.run(
            run(
                paths=args.paths,
                title=args.title or default_title(args.paths),
                engine_key=args.engine,
                excluded=(
                    frozenset(args.exclude) if args.exclude else DEFAULT_EXCLUDED
                ),
                suffix=args.suffix,
                config_path=args.config,
                overrides=overrides,
                output=args.output,
            )
        )
    except USAGE_ERRORS as e:
        parser.error(str(e))
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
