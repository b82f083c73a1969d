"""Suite runner driving a single engine run."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from suite_runner.aggregator import ResultAggregator
from suite_runner.engines.base import EngineError, ExecutionEngine
from suite_runner.models.result import ResultModel

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class SuiteRunner:
    """Runs test files on an engine and aggregates the outcome."""

    engine: ExecutionEngine

    async def run(self, files: Sequence[Path]) -> ResultModel:
        """Run the files and return the aggregated results.

        Each call aggregates into a fresh model.

        Args:
            files: Test files to run

        Returns:
            Results grouped by root suite

        Raises:
            EngineError: If the engine's event log never reached the run end

        """
        if not files:
            log.info("No test files to run")
            return ResultModel()

        events = await self.engine.execute(files)

        aggregator = ResultAggregator()
        for event in events:
            aggregator.observe(event)

        if not aggregator.finished:
            raise EngineError("Engine stopped before the run ended")

        model = aggregator.snapshot()
        log.info(
            "Run completed: %d root suite(s), %d failure(s)",
            len(model.total),
            sum(len(failures) for failures in model.failures.values()),
        )
        return model
