"""Load run configuration from YAML files."""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import ValidationError

from suite_runner.models.config import RunConfig

log = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT", bound=RunConfig)


class InvalidRunConfigError(ValueError):
    """Raised when a run configuration file or its values are invalid."""


def load_run_config(config_path: Path) -> Mapping[str, Any]:
    """Load run configuration values from a YAML file.

    Validation against the engine's configuration class happens when the
    values are merged with command-line overrides.

    Args:
        config_path: Path to the YAML file

    Returns:
        Configuration values keyed by option name

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidRunConfigError: If the YAML is invalid, empty, or not a mapping

    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        content = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        raise InvalidRunConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if content is None:
        raise InvalidRunConfigError(f"Empty config file: {config_path}")

    if not isinstance(content, dict):
        raise InvalidRunConfigError(
            f"Config file must contain a mapping, got {type(content).__name__}: "
            f"{config_path}"
        )

    log.debug("Loaded %d option(s) from %s", len(content), config_path)
    return content


def build_run_config(
    config_cls: type[ConfigT],
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ConfigT:
    """Build an engine configuration from a YAML file and overrides.

    Overrides set to ``None`` are ignored, so unset command-line flags keep
    the value from the file or the default.
    """
    values: dict[str, Any] = dict(load_run_config(config_path)) if config_path else {}
    values.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        return config_cls(**values)
    except ValidationError as e:
        raise InvalidRunConfigError(f"Invalid run configuration: {e}") from e
