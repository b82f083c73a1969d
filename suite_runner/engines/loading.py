"""Engine lookup through the ``suite_runner.engines`` entry point group."""

import logging
from importlib.metadata import entry_points
from typing import Any

from suite_runner.engines.manifest import EngineManifest

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "suite_runner.engines"


class EngineNotFoundError(LookupError):
    """Raised when no usable engine is registered under a key."""


def available_engines() -> list[str]:
    """Names of all registered engines, sorted."""
    return sorted({entry.name for entry in entry_points(group=ENTRY_POINT_GROUP)})


def load_engine_manifest(key: str) -> EngineManifest[Any]:
    """Resolve the manifest registered for an engine.

    The entry point must reference an ``EngineManifest`` instance. Any other
    object is treated as a missing engine so that a misconfigured plugin
    surfaces as a usage error rather than failing later at run time.

    Raises:
        EngineNotFoundError: If ``key`` is unregistered or names something
            other than a manifest

    """
    matches = entry_points(group=ENTRY_POINT_GROUP, name=key)
    if not matches:
        raise EngineNotFoundError(
            f"Unknown engine '{key}' (registered: {', '.join(available_engines())})"
        )

    (entry, *shadowed) = matches
    if shadowed:
        log.warning(
            "Engine '%s' registered more than once, using %s", key, entry.value
        )

    manifest = entry.load()
    if not isinstance(manifest, EngineManifest):
        raise EngineNotFoundError(
            f"Engine '{key}' points at {entry.value}, "
            f"which is a {type(manifest).__name__}, not an engine manifest"
        )

    log.debug("Loaded engine '%s' from %s", key, entry.value)
    return manifest
