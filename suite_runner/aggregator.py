"""Aggregate engine lifecycle events into a per-run result model."""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from types import MappingProxyType
from typing import TypeVar

from suite_runner.models.events import (
    Event,
    Fail,
    HookEnd,
    Pass,
    Pending,
    Runnable,
    RunEnd,
    Suite,
    TestEnd,
)
from suite_runner.models.result import FailureRecord, ResultModel, TestRecord

log = logging.getLogger(__name__)

UNGROUPED = "(ungrouped)"

R = TypeVar("R", bound=TestRecord)


def _frozen(
    buckets: Mapping[str, list[R]],
) -> Mapping[str, tuple[R, ...]]:
    return MappingProxyType({name: tuple(records) for name, records in buckets.items()})


class MalformedEventError(ValueError):
    """Raised when an event lacks data the aggregator depends on."""


class RunFinishedError(RuntimeError):
    """Raised when an event is observed after the run has ended."""


class SuiteChainError(ValueError):
    """Raised when a parent chain loops back on itself."""


def root_suite_name(node: Runnable | Suite | None) -> str:
    """Return the title of the outermost suite below the synthetic root.

    Walks up the parent chain until the current node has no parent or its
    parent is the untitled root. A missing node is grouped under
    ``UNGROUPED``.
    """
    if node is None:
        return UNGROUPED

    visited: set[int] = set()
    current: Runnable | Suite = node
    while current.parent is not None and current.parent.title != "":
        visited.add(id(current))
        current = current.parent
        if id(current) in visited:
            raise SuiteChainError(f"Cycle in parent chain of '{node.title}'")
    return current.title


class ResultAggregator:
    """Builds a ``ResultModel`` from the events of a single run.

    Events must be observed in emission order. The aggregator becomes
    read-only once the run end event has been observed.
    """

    def __init__(self) -> None:
        self._passes: dict[str, list[TestRecord]] = {}
        self._failures: dict[str, list[FailureRecord]] = {}
        self._pending: dict[str, list[TestRecord]] = {}
        self._total: dict[str, list[TestRecord]] = {}
        self._durations: dict[str, float] = {}
        self._total_duration: float | None = None
        self._finished_at: datetime | None = None

    @property
    def finished(self) -> bool:
        """Whether the run end event has been observed."""
        return self._finished_at is not None

    def observe(self, event: Event) -> None:
        """Record a single lifecycle event."""
        if self.finished:
            raise RunFinishedError(f"Run already ended, cannot record '{event.event}'")

        if isinstance(event, TestEnd):
            self._add_duration(event.test)
        elif isinstance(event, HookEnd):
            self._add_duration(event.hook)
        elif isinstance(event, Pass):
            record = TestRecord.from_runnable(event.test, "passed")
            self._append(self._passes, event.test, record)
            self._append(self._total, event.test, record)
        elif isinstance(event, Fail):
            self._record_failure(event)
        elif isinstance(event, Pending):
            record = TestRecord.from_runnable(event.test, "pending")
            self._append(self._pending, event.test, record)
            self._append(self._total, event.test, record)
        elif isinstance(event, RunEnd):
            self._finished_at = event.finished_at
            log.debug("Run ended with %d root suite(s)", len(self._total))

    def snapshot(self) -> ResultModel:
        """Return a read-only copy of the results recorded so far."""
        return ResultModel(
            passes=_frozen(self._passes),
            failures=_frozen(self._failures),
            pending=_frozen(self._pending),
            total=_frozen(self._total),
            durations=MappingProxyType(dict(self._durations)),
            total_duration=self._total_duration or 0,
            finished_at=self._finished_at,
        )

    def _add_duration(self, runnable: Runnable) -> None:
        name = root_suite_name(runnable)
        if self._total_duration is None:
            self._total_duration = 0
        self._durations.setdefault(name, 0)

        duration = runnable.duration
        if duration and duration > 0:
            self._total_duration += duration
            self._durations[name] += duration

    def _record_failure(self, event: Fail) -> None:
        test = event.test
        if test.err is None:
            raise MalformedEventError(
                f"Failure of '{test.title}' carries no recorded error"
            )

        error = event.error.model_copy(update={"stack": test.err.stack})
        failure = FailureRecord(
            title=test.title,
            parent=test.parent,
            duration=test.duration,
            state="failed",
            file=test.file,
            error=error,
        )
        self._append(self._failures, test, failure)
        self._append(self._total, test, TestRecord.from_runnable(test, "failed"))

    @staticmethod
    def _append(
        bucket: dict[str, list[R]], runnable: Runnable, record: R
    ) -> None:
        bucket.setdefault(root_suite_name(runnable), []).append(record)


def fold(events: Iterable[Event]) -> ResultModel:
    """Fold a finite event log into a fresh result model."""
    aggregator = ResultAggregator()
    for event in events:
        aggregator.observe(event)
    return aggregator.snapshot()
