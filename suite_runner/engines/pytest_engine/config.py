"""Configuration for the pytest engine."""

import sys
from collections.abc import Sequence
from pathlib import Path

from pydantic import Field

from suite_runner.models.config import RunConfig


class PytestConfig(RunConfig):
    """Configuration for the pytest engine."""

    python: str = Field(
        default=sys.executable, description="Interpreter used to run pytest"
    )
    cwd: Path | None = Field(
        default=None, description="Working directory of the pytest process"
    )
    extra_args: Sequence[str] = Field(
        default=(), description="Additional arguments passed to pytest verbatim"
    )
