"""Discover test files below one or more root paths."""

import logging
from collections.abc import Collection, Iterator, Sequence
from pathlib import Path

log = logging.getLogger(__name__)

DEFAULT_SUFFIX = ".py"
DEFAULT_EXCLUDED = frozenset({"__pycache__", "__init__.py", "conftest.py"})


class MissingTestPathError(ValueError):
    """Raised when no test suite or file path was given."""


class PathResolutionError(OSError):
    """Raised when a test path cannot be read."""


def resolve_test_files(
    paths: Sequence[str | Path],
    excluded: Collection[str] = DEFAULT_EXCLUDED,
    suffix: str = DEFAULT_SUFFIX,
    cwd: Path | None = None,
) -> Sequence[Path]:
    """Expand test paths into a flat list of test files.

    Args:
        paths: Files or directories, relative to ``cwd``
        excluded: File and directory names skipped while walking directories
        suffix: Only files whose name ends with this suffix are kept
        cwd: Directory the paths are relative to (default: current directory)

    Returns:
        Test files in discovery order

    Raises:
        MissingTestPathError: If a path resolves to the working directory itself
        PathResolutionError: If a path cannot be read

    """
    base = cwd or Path.cwd()
    files: list[Path] = []

    for test_path in paths:
        root = base / test_path
        if root.resolve() == base.resolve():
            raise MissingTestPathError("Test suite or file path required")

        try:
            if root.is_dir():
                files.extend(_walk(root, excluded, suffix))
            else:
                root.stat()
                files.append(root)
        except OSError as e:
            raise PathResolutionError(
                f"Error processing files: {test_path}: {e.strerror or e}"
            ) from e

    log.debug("Resolved %d test file(s) from %d path(s)", len(files), len(paths))
    return files


def _walk(directory: Path, excluded: Collection[str], suffix: str) -> Iterator[Path]:
    for entry in sorted(directory.iterdir()):
        if entry.name in excluded:
            continue
        if entry.is_dir():
            yield from _walk(entry, excluded, suffix)
        elif entry.name.endswith(suffix):
            yield entry
