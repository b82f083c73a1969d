"""Run configuration handed to the execution engine."""

from typing import Literal

from pydantic import Field

from suite_runner.models.base import Model


class RunConfig(Model):
    """Options controlling how the engine runs the collected files."""

    interface: Literal["prepend", "append", "importlib"] = Field(
        default="prepend", description="Test interface style (pytest import mode)"
    )
    timeout: int = Field(
        default=300000, gt=0, description="Milliseconds before a test is failed"
    )
    slow: int = Field(
        default=10000, ge=0, description="Milliseconds before a test is reported slow"
    )
    reporter: Literal["spec", "dot", "min"] = Field(
        default="spec", description="Engine reporter used for live output"
    )
    grep: str | None = Field(
        default=None, description="Only run tests whose names match this expression"
    )
    use_colors: bool = Field(default=True, description="Colorize engine output")
