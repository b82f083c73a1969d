"""pytest engine manifest."""

from suite_runner.engines.manifest import EngineManifest
from suite_runner.engines.pytest_engine.config import PytestConfig
from suite_runner.engines.pytest_engine.engine import PytestEngine

pytest_manifest = EngineManifest(
    config_cls=PytestConfig,
    engine_factory=PytestEngine.from_config,
)
