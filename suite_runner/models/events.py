"""Lifecycle events emitted by an execution engine during a single run.

Events are serialized as JSON lines by the engine process and parsed back with
``EVENT_ADAPTER``. Each event carries a copy of the runnable it concerns,
including the chain of suites above it, so a log can be folded without any
other context.
"""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field, TypeAdapter

from suite_runner.models.base import Model

RunnableState = Literal["passed", "failed", "pending"]


class Suite(Model):
    """Grouping node. The suite with an empty title is the synthetic root."""

    title: str
    file: str | None = None
    parent: "Suite | None" = None


class ErrorInfo(Model):
    """Error raised by a test or hook."""

    message: str = ""
    stack: str | None = None


class Runnable(Model):
    """A test or hook as reported by the engine."""

    kind: Literal["test", "hook"] = "test"
    title: str
    parent: Suite | None = None
    duration: float | None = Field(default=None, description="Milliseconds")
    state: RunnableState | None = None
    file: str | None = None
    err: ErrorInfo | None = None


class TestEnd(Model):
    """A test finished, whatever its outcome."""

    __test__ = False

    event: Literal["test end"] = "test end"
    test: Runnable


class HookEnd(Model):
    """A setup or teardown hook finished."""

    event: Literal["hook end"] = "hook end"
    hook: Runnable


class Pass(Model):
    """A test passed."""

    event: Literal["pass"] = "pass"
    test: Runnable


class Fail(Model):
    """A test or hook failed.

    The engine's event error does not carry the stack trace; it lives on the
    runnable's own ``err``.
    """

    event: Literal["fail"] = "fail"
    test: Runnable
    error: ErrorInfo


class Pending(Model):
    """A test was skipped."""

    event: Literal["pending"] = "pending"
    test: Runnable


class RunEnd(Model):
    """The engine finished the run."""

    event: Literal["end"] = "end"
    finished_at: datetime


Event = Annotated[
    TestEnd | HookEnd | Pass | Fail | Pending | RunEnd,
    Field(discriminator="event"),
]

EVENT_ADAPTER: TypeAdapter[Event] = TypeAdapter(Event)
