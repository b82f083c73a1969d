"""Text helpers used when rendering reports."""

import re

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")

DURATION_UNITS = (
    ("d", 86_400_000),
    ("h", 3_600_000),
    ("m", 60_000),
    ("s", 1_000),
    ("ms", 1),
)


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from ``text``."""
    return ANSI_ESCAPE_RE.sub("", text)


def format_duration(milliseconds: float | None) -> str:
    """Format a duration as e.g. ``1m 5s 20ms``.

    Returns an empty string for missing or non-positive durations so callers
    can chain a fallback with ``or``.
    """
    if not milliseconds or milliseconds <= 0:
        return ""

    remaining = round(milliseconds)
    parts: list[str] = []
    for unit, size in DURATION_UNITS:
        amount, remaining = divmod(remaining, size)
        if amount:
            parts.append(f"{amount}{unit}")
    return " ".join(parts)


def format_number(value: float) -> str:
    """Render a number without a trailing ``.0`` for whole values."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)
