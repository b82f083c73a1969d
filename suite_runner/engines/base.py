"""Abstract base class for test execution engines."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from suite_runner.models.events import Event


class EngineError(RuntimeError):
    """Raised when an engine fails to complete a run."""


@dataclass(frozen=True, kw_only=True)
class ExecutionEngine(ABC):
    """Abstract base for engines that execute test files.

    An engine runs the given files once and reports what happened as an
    ordered log of lifecycle events, terminated by a run end event.
    """

    @abstractmethod
    async def execute(self, files: Sequence[Path]) -> Sequence[Event]:
        """Run the test files and return the emitted events.

        Args:
            files: Test files to run, in order

        Returns:
            Lifecycle events in emission order

        Raises:
            EngineError: If the engine could not run the files

        """
