"""Plain-text report rendering for aggregated run results."""

import math
from collections.abc import Sequence
from datetime import datetime, timedelta

from suite_runner.formatting import format_duration, format_number, strip_ansi
from suite_runner.models.result import FailureRecord, ResultModel

RESULTS_HEADING = "Test Results"
START_TIME_FORMAT = "%a %b %d %Y %H:%M:%S %Z"

FAILURES_BANNER = "|--------------------\n| Failures:\n|--------------------\n\n"
FAILURE_RULE = "------------------------------\n\n"
SUITE_RULE = "‖==============================\n"
SUITE_SEPARATOR = "=============================================\n\n"


class InvalidReportInputError(ValueError):
    """Raised when a report is requested without a title or results."""


def percentage(count: int, of: int) -> float:
    """Share of ``count`` in ``of``, in percent rounded to two decimals."""
    if not of:
        return 0
    return math.floor((100 / of) * count * 100 + 0.5) / 100


def generate_report(
    title: str, model: ResultModel | None, now: datetime | None = None
) -> str:
    """Render a text report for a completed run.

    Args:
        title: Name of the test run, shown in the banner
        model: Aggregated results of the run
        now: Reference time used to compute the start time. Defaults to when
            the run finished, so rendering the same model is repeatable.

    Returns:
        The report, suitable for an email body or a log

    Raises:
        InvalidReportInputError: If the title or the results are missing

    """
    if not title:
        raise InvalidReportInputError("No title provided for the report")
    if model is None:
        raise InvalidReportInputError("No results provided for the report")

    if now is None:
        now = model.finished_at or datetime.now().astimezone()

    if len(model.total) == 1:
        body = _single_suite(model, now)
    else:
        body = _multi_suite(model, now)

    return _banner(title) + body


def _banner(title: str) -> str:
    width = max(len(title), len(RESULTS_HEADING)) + 2
    indent = " " * (width // 2 - len(RESULTS_HEADING) // 2)
    return (
        f"/{'*' * width}\\\n\n"
        f"  {title}\n"
        f"{indent}{RESULTS_HEADING}\n\n"
        f"\\{'*' * width}/\n\n"
    )


def _duration(milliseconds: float | None) -> str:
    return format_duration(milliseconds) or "0ms"


def _start_time(now: datetime, milliseconds: float) -> str:
    return (now - timedelta(milliseconds=milliseconds)).strftime(START_TIME_FORMAT)


def _ratio(count: int, of: int) -> str:
    return f"{count} ({format_number(percentage(count, of))}%)"


def _suite_fields(model: ResultModel, name: str) -> str:
    passes = model.count(model.passes, name)
    failures = model.count(model.failures, name)
    skipped = model.count(model.pending, name)
    test_count = passes + failures + skipped

    records = model.total.get(name, ())
    source_file = (records[0].source_file if records else None) or "unknown"

    return (
        f"- File       : {source_file}\n"
        f"- Passes     : {_ratio(passes, test_count)}\n"
        f"- Failures   : {_ratio(failures, test_count)}\n"
        f"- Skipped    : {_ratio(skipped, test_count)}\n"
    )


def _failure_section(failures: Sequence[FailureRecord]) -> str:
    section = FAILURES_BANNER
    for index, failure in enumerate(failures, start=1):
        section += f"Failure {index}:\n\n"
        section += f"Name     : {failure.title}\n"
        section += f"Duration : {_duration(failure.duration)}\n"
        error = strip_ansi(failure.error.stack or failure.error.message)
        section += f"Error    : {error}\n"
        if index < len(failures):
            section += FAILURE_RULE
    return section


def _single_suite(model: ResultModel, now: datetime) -> str:
    name = model.suite_names[0]
    body = "Overview:\n"
    body += f"- Suite Name : {name}\n"
    body += _suite_fields(model, name)
    body += f"- Duration   : {_duration(model.total_duration)}\n"
    body += f"- Start Time : {_start_time(now, model.total_duration)}\n\n"

    if failures := model.failures.get(name):
        body += _failure_section(failures)
    return body


def _multi_suite(model: ResultModel, now: datetime) -> str:
    states = [record.state for records in model.total.values() for record in records]
    total_pass = states.count("passed")
    total_fail = states.count("failed")
    total_skip = len(states) - total_pass - total_fail
    total_count = len(states)

    body = "Overview:\n"
    body += f"- Test Suites Ran : {len(model.total)}\n"
    body += f"- Total Passes    : {_ratio(total_pass, total_count)}\n"
    body += f"- Total Failures  : {_ratio(total_fail, total_count)}\n"
    body += f"- Total Skipped   : {_ratio(total_skip, total_count)}\n"
    body += f"- Total Duration  : {_duration(model.total_duration)}\n\n"
    body += f"- Start Time      : {_start_time(now, model.total_duration)}\n\n"

    for name in model.suite_names:
        body += SUITE_RULE
        body += f"‖ {name}\n"
        body += SUITE_RULE + "\n"
        body += _suite_fields(model, name)
        body += f"- Duration   : {_duration(model.durations.get(name))}\n\n"

        if failures := model.failures.get(name):
            body += _failure_section(failures)
            body += SUITE_SEPARATOR
    return body
