"""pytest engine module."""

from suite_runner.engines.pytest_engine.config import PytestConfig
from suite_runner.engines.pytest_engine.engine import PytestEngine
from suite_runner.engines.pytest_engine.manifest import pytest_manifest

__all__ = ["PytestConfig", "PytestEngine", "pytest_manifest"]
