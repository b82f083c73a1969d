"""Engine manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Generic, TypeVar

from suite_runner.engines.base import ExecutionEngine
from suite_runner.models.config import RunConfig

ConfigT = TypeVar("ConfigT", bound=RunConfig)


@dataclass(frozen=True, kw_only=True)
class EngineManifest(Generic[ConfigT]):
    """Manifest describing an engine plugin.

    Holds the engine's configuration class and the factory that builds the
    engine from a validated configuration.
    """

    config_cls: type[ConfigT]
    engine_factory: Callable[[ConfigT], AbstractAsyncContextManager[ExecutionEngine]]
