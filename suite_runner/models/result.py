"""Models for aggregated run results."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Self

from suite_runner.models.events import ErrorInfo, Runnable, RunnableState, Suite


def _empty() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True, kw_only=True)
class TestRecord:
    """Outcome of a single test or hook, captured from an engine event."""

    __test__ = False

    title: str
    parent: Suite | None = None
    duration: float | None = None
    state: RunnableState
    file: str | None = None

    @classmethod
    def from_runnable(cls, runnable: Runnable, state: RunnableState) -> Self:
        """Capture a runnable with the state implied by the event carrying it."""
        return cls(
            title=runnable.title,
            parent=runnable.parent,
            duration=runnable.duration,
            state=state,
            file=runnable.file,
        )

    @property
    def source_file(self) -> str | None:
        """File of the record, falling back to the file of its parent suite."""
        if self.file:
            return self.file
        return self.parent.file if self.parent is not None else None


@dataclass(frozen=True, kw_only=True)
class FailureRecord(TestRecord):
    """Failed test along with the error that failed it."""

    error: ErrorInfo


@dataclass(frozen=True, kw_only=True)
class ResultModel:
    """Snapshot of one run, grouped by root suite name."""

    passes: Mapping[str, Sequence[TestRecord]] = field(default_factory=_empty)
    failures: Mapping[str, Sequence[FailureRecord]] = field(default_factory=_empty)
    pending: Mapping[str, Sequence[TestRecord]] = field(default_factory=_empty)
    total: Mapping[str, Sequence[TestRecord]] = field(default_factory=_empty)
    durations: Mapping[str, float] = field(default_factory=_empty)
    total_duration: float = 0
    finished_at: datetime | None = None

    @property
    def suite_names(self) -> Sequence[str]:
        """Root suite names in the order they were first recorded."""
        return list(self.total)

    @property
    def has_failures(self) -> bool:
        """Whether any test or hook failed."""
        return any(self.failures.values())

    def count(self, bucket: Mapping[str, Sequence[TestRecord]], name: str) -> int:
        """Number of records under ``name``, treating a missing key as empty."""
        return len(bucket.get(name, ()))
