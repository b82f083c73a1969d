"""pytest engine implementation."""

import asyncio
import logging
import tempfile
from collections.abc import AsyncGenerator, Iterable, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from suite_runner.engines.base import EngineError, ExecutionEngine
from suite_runner.engines.pytest_engine.config import PytestConfig
from suite_runner.engines.pytest_engine.plugin import EVENTS_OPTION
from suite_runner.models.events import EVENT_ADAPTER, Event, RunEnd

log = logging.getLogger(__name__)

PLUGIN_MODULE = "suite_runner.engines.pytest_engine.plugin"
EVENTS_FILE = "events.jsonl"

REPORTER_ARGS: Mapping[str, Sequence[str]] = {
    "spec": ("-v",),
    "dot": (),
    "min": ("-q",),
}


def parse_events(lines: Iterable[str]) -> Sequence[Event]:
    """Parse a JSON-lines event log, skipping blank lines."""
    events: list[Event] = []
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            events.append(EVENT_ADAPTER.validate_json(line))
        except ValidationError as e:
            raise EngineError(f"Invalid event on line {number}: {e}") from e
    return events


@dataclass(frozen=True, kw_only=True)
class PytestEngine(ExecutionEngine):
    """Runs test files in a pytest subprocess."""

    config: PytestConfig
    workdir: Path

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: PytestConfig
    ) -> AsyncGenerator["PytestEngine", None]:
        """Create engine with a scratch directory for its event log."""
        with tempfile.TemporaryDirectory(prefix="suite-runner-") as workdir:
            yield cls(config=config, workdir=Path(workdir))

    def build_command(self, files: Sequence[Path], events_path: Path) -> Sequence[str]:
        """Build the pytest command line for the given files."""
        config = self.config
        command = [
            config.python,
            "-m",
            "pytest",
            "-p",
            PLUGIN_MODULE,
            f"{EVENTS_OPTION}={events_path}",
            f"--import-mode={config.interface}",
            f"--timeout={config.timeout / 1000:g}",
            "--durations=0",
            f"--durations-min={config.slow / 1000:g}",
            f"--color={'yes' if config.use_colors else 'no'}",
            *REPORTER_ARGS[config.reporter],
        ]
        if config.grep:
            command.extend(["-k", config.grep])
        command.extend(config.extra_args)
        command.extend(str(path) for path in files)
        return command

    async def execute(self, files: Sequence[Path]) -> Sequence[Event]:
        """Run pytest over the files and return the recorded events."""
        events_path = self.workdir / EVENTS_FILE
        events_path.unlink(missing_ok=True)
        command = self.build_command(files, events_path)

        log.info("Running %d test file(s) with pytest", len(files))
        log.debug("pytest command: %s", " ".join(command))

        process = await asyncio.create_subprocess_exec(*command, cwd=self.config.cwd)
        returncode = await process.wait()
        log.info("pytest exited with code %d", returncode)

        if not events_path.exists():
            raise EngineError(f"pytest exited with code {returncode} without a run")

        events = parse_events(events_path.read_text(encoding="utf-8").splitlines())
        if not events or not isinstance(events[-1], RunEnd):
            raise EngineError(
                f"pytest exited with code {returncode} before the run finished"
            )
        return events
