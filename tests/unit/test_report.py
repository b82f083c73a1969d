"""Tests for report generation."""

from datetime import datetime, timezone

import pytest

from suite_runner.models.events import ErrorInfo, Suite
from suite_runner.models.result import FailureRecord, ResultModel, TestRecord
from suite_runner.report import InvalidReportInputError, generate_report, percentage
from suite_runner.testing.factories import TestRecordFactory, suite_chain

FINISHED_AT = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def passed(title: str, suite: Suite, duration: float = 100) -> TestRecord:
    """Build a passed record."""
    return TestRecord(title=title, parent=suite, duration=duration, state="passed")


def pending(title: str, suite: Suite) -> TestRecord:
    """Build a pending record."""
    return TestRecord(title=title, parent=suite, state="pending")


def failed(
    title: str, suite: Suite, duration: float = 100, stack: str | None = "trace"
) -> FailureRecord:
    """Build a failure record."""
    return FailureRecord(
        title=title,
        parent=suite,
        duration=duration,
        state="failed",
        error=ErrorInfo(message=f"{title} failed", stack=stack),
    )


def build_model(
    suites: dict[str, list[TestRecord]], durations: dict[str, float] | None = None
) -> ResultModel:
    """Build a result model from records grouped by suite."""
    durations = durations or {name: 0 for name in suites}
    return ResultModel(
        passes={
            name: tuple(r for r in records if r.state == "passed")
            for name, records in suites.items()
        },
        failures={
            name: tuple(r for r in records if isinstance(r, FailureRecord))
            for name, records in suites.items()
        },
        pending={
            name: tuple(r for r in records if r.state == "pending")
            for name, records in suites.items()
        },
        total={
            name: tuple(
                TestRecord(
                    title=r.title, parent=r.parent, duration=r.duration, state=r.state
                )
                for r in records
            )
            for name, records in suites.items()
        },
        durations=durations,
        total_duration=sum(durations.values()),
        finished_at=FINISHED_AT,
    )


class TestPercentage:
    """Tests for percentage rounding."""

    @pytest.mark.parametrize(
        ("count", "of", "expected"),
        [
            (7, 10, 70),
            (1, 3, 33.33),
            (2, 3, 66.67),
            (1, 8, 12.5),
            (0, 5, 0),
            (3, 0, 0),
        ],
    )
    def test_rounds_to_two_decimals(self, count: int, of: int, expected: float) -> None:
        """Rounds half up to two decimals and guards empty suites."""
        assert percentage(count, of) == expected


class TestValidation:
    """Tests for input validation."""

    def test_requires_title(self) -> None:
        """Rejects an empty title."""
        with pytest.raises(InvalidReportInputError, match="title"):
            generate_report("", ResultModel())

    def test_requires_model(self) -> None:
        """Rejects missing results."""
        with pytest.raises(InvalidReportInputError, match="results"):
            generate_report("Nightly", None)


class TestSingleSuite:
    """Tests for reports covering a single root suite."""

    def test_renders_overview_and_failures(self) -> None:
        """Renders the flat overview followed by the failure listing."""
        suite = suite_chain("math.py", file="tests/math.py")
        model = build_model(
            {
                "math.py": [
                    passed("adds", suite, duration=500),
                    failed(
                        "divides",
                        suite,
                        duration=1000,
                        stack="\x1b[31mTraceback\x1b[0m: boom",
                    ),
                ]
            },
            durations={"math.py": 1500},
        )

        report = generate_report("Nightly", model)

        assert report == (
            "/**************\\\n"
            "\n"
            "  Nightly\n"
            " Test Results\n"
            "\n"
            "\\**************/\n"
            "\n"
            "Overview:\n"
            "- Suite Name : math.py\n"
            "- File       : tests/math.py\n"
            "- Passes     : 1 (50%)\n"
            "- Failures   : 1 (50%)\n"
            "- Skipped    : 0 (0%)\n"
            "- Duration   : 1s 500ms\n"
            "- Start Time : Sun Oct 18 2026 11:59:58 UTC\n"
            "\n"
            "|--------------------\n"
            "| Failures:\n"
            "|--------------------\n"
            "\n"
            "Failure 1:\n"
            "\n"
            "Name     : divides\n"
            "Duration : 1s\n"
            "Error    : Traceback: boom\n"
        )

    def test_percentages_use_suite_count(self) -> None:
        """Shows 70/20/10 for 7 passes, 2 failures and 1 pending test."""
        suite = suite_chain("suite")
        records: list[TestRecord] = [passed(f"p{i}", suite) for i in range(7)]
        records += [failed(f"f{i}", suite) for i in range(2)]
        records.append(pending("s0", suite))

        report = generate_report("Run", build_model({"suite": records}))

        assert "- Passes     : 7 (70%)\n" in report
        assert "- Failures   : 2 (20%)\n" in report
        assert "- Skipped    : 1 (10%)\n" in report

    def test_separates_failures_with_rule(self) -> None:
        """Puts a rule between failures but not after the last one."""
        suite = suite_chain("suite")
        model = build_model(
            {"suite": [failed("first", suite), failed("second", suite)]}
        )

        report = generate_report("Run", model)

        assert "Failure 1:\n\nName     : first\n" in report
        assert "Failure 2:\n\nName     : second\n" in report
        assert report.count("------------------------------\n") == 1
        assert report.index("------------------------------") < report.index(
            "Failure 2:"
        )
        assert report.endswith("Error    : trace\n")

    def test_falls_back_to_error_message(self) -> None:
        """Shows the error message when no stack was recorded."""
        suite = suite_chain("suite")
        model = build_model({"suite": [failed("broken", suite, stack=None)]})

        report = generate_report("Run", model)

        assert "Error    : broken failed\n" in report

    def test_omits_failure_section_without_failures(self) -> None:
        """No failure listing when everything passed."""
        suite = suite_chain("suite")
        model = build_model({"suite": [passed("ok", suite)]})

        report = generate_report("Run", model)

        assert "Failures:" not in report
        assert report.endswith("UTC\n\n")

    def test_zero_duration_shows_literal(self) -> None:
        """A run without measured time shows 0ms."""
        suite = suite_chain("suite")
        model = build_model({"suite": [pending("skipped", suite)]})

        report = generate_report("Run", model)

        assert "- Duration   : 0ms\n" in report
        assert "- Start Time : Sun Oct 18 2026 12:00:00 UTC\n" in report

    def test_prefers_record_file(self) -> None:
        """Uses the record's own file before the parent's."""
        record = TestRecordFactory.build(
            title="ok", file="own.py", parent=suite_chain("suite", file="parent.py")
        )
        model = ResultModel(
            passes={"suite": (record,)}, total={"suite": (record,)}
        )

        report = generate_report("Run", model, now=FINISHED_AT)

        assert "- File       : own.py\n" in report

    def test_suite_only_in_total_reports_zero(self) -> None:
        """A suite missing from the outcome buckets reports 0/0/0."""
        record = TestRecordFactory.build(title="ok", file="a.py")
        model = ResultModel(total={"suite": (record,)}, finished_at=FINISHED_AT)

        report = generate_report("Run", model)

        assert "- Passes     : 0 (0%)\n" in report
        assert "- Failures   : 0 (0%)\n" in report
        assert "- Skipped    : 0 (0%)\n" in report

    def test_long_title_widens_banner(self) -> None:
        """The banner grows with titles longer than the heading."""
        model = build_model({"suite": [passed("ok", suite_chain("suite"))]})

        report = generate_report("A much longer run title", model)

        lines = report.splitlines()
        assert lines[0] == "/" + "*" * 25 + "\\"
        assert lines[3] == " " * 6 + "Test Results"


class TestMultiSuite:
    """Tests for reports covering several root suites."""

    @pytest.fixture
    def model(self) -> ResultModel:
        """Two suites, one of them with a failure."""
        api = suite_chain("api", file="tests/api.py")
        cli = suite_chain("cli", file="tests/cli.py")
        return build_model(
            {
                "api": [passed("get", api), passed("post", api), pending("put", api)],
                "cli": [passed("help", cli), failed("run", cli, duration=2000)],
            },
            durations={"api": 300, "cli": 2100},
        )

    def test_renders_aggregate_overview(self, model: ResultModel) -> None:
        """Grand totals are the sums of the suite totals."""
        report = generate_report("Nightly", model)

        assert (
            "Overview:\n"
            "- Test Suites Ran : 2\n"
            "- Total Passes    : 3 (60%)\n"
            "- Total Failures  : 1 (20%)\n"
            "- Total Skipped   : 1 (20%)\n"
            "- Total Duration  : 2s 400ms\n"
            "\n"
            "- Start Time      : Sun Oct 18 2026 11:59:57 UTC\n"
        ) in report

    def test_renders_suite_blocks(self, model: ResultModel) -> None:
        """Each suite gets a banner-delimited block in recorded order."""
        report = generate_report("Nightly", model)

        api_block = (
            "‖==============================\n"
            "‖ api\n"
            "‖==============================\n"
            "\n"
            "- File       : tests/api.py\n"
            "- Passes     : 2 (66.67%)\n"
            "- Failures   : 0 (0%)\n"
            "- Skipped    : 1 (33.33%)\n"
            "- Duration   : 300ms\n"
            "\n"
        )
        assert api_block in report
        assert report.index("‖ api") < report.index("‖ cli")
        assert "Suite Name" not in report

    def test_suite_failures_end_with_separator(self, model: ResultModel) -> None:
        """Suites with failures list them and close with a separator."""
        report = generate_report("Nightly", model)

        assert report.endswith(
            "Failure 1:\n"
            "\n"
            "Name     : run\n"
            "Duration : 2s\n"
            "Error    : trace\n"
            "=============================================\n"
            "\n"
        )
        assert report.count("=============================================\n") == 1

    def test_empty_model_uses_multi_suite_format(self) -> None:
        """A run without suites reports zero totals."""
        report = generate_report("Run", ResultModel(finished_at=FINISHED_AT))

        assert "- Test Suites Ran : 0\n" in report
        assert "- Total Passes    : 0 (0%)\n" in report
        assert "- Total Duration  : 0ms\n" in report


def test_generation_is_repeatable() -> None:
    """Generating twice from the same model yields identical reports."""
    suite = suite_chain("suite")
    model = build_model(
        {"suite": [passed("ok", suite), failed("bad", suite)]},
        durations={"suite": 1234},
    )

    assert generate_report("Run", model) == generate_report("Run", model)


def test_explicit_now_sets_start_time() -> None:
    """The start time counts back from the given reference time."""
    suite = suite_chain("suite")
    model = build_model({"suite": [passed("ok", suite)]}, durations={"suite": 60000})

    report = generate_report(
        "Run", model, now=datetime(2026, 1, 1, 0, 0, tzinfo=timezone.utc)
    )

    assert "- Start Time : Wed Dec 31 2025 23:59:00 UTC\n" in report
