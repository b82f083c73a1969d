"""Fixtures for integration tests."""

import textwrap
from pathlib import Path
from typing import Protocol

import pytest

from suite_runner.testing.samples import SAMPLE_MODULE


class WriteTestFileFn(Protocol):
    """Protocol for test file creation function."""

    def __call__(self, name: str, source: str = SAMPLE_MODULE) -> Path:
        """Write a test module and return its path."""


@pytest.fixture
def suite_root(tmp_path: Path) -> Path:
    """Directory holding the generated test modules."""
    root = tmp_path / "suite"
    root.mkdir()
    return root


@pytest.fixture
def write_test_file(suite_root: Path) -> WriteTestFileFn:
    """Return a function that writes test modules below suite_root."""

    def _write(name: str, source: str = SAMPLE_MODULE) -> Path:
        path = suite_root / name
        path.write_text(textwrap.dedent(source))
        return path

    return _write
