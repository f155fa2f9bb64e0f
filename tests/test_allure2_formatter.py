"""Tests for the Allure 2 export formatter."""

from __future__ import annotations

import copy

from tests.factories import (
    make_activity,
    make_failure,
    make_formatter,
    make_summary,
)
from xcallure.core.models import ExportMeta, Label, Status, StepResult
from xcallure.export.formatters.allure2 import Allure2ExportFormatter, find_position
from xcallure.export.registry import FormatterRegistry, get_default_registry


def step(start, stop, name="step") -> StepResult:
    return StepResult(name=name, status=Status.PASSED, start=start, stop=stop)


class TestFindPosition:
    """Tests for placing a top-level failure between steps."""

    def test_fits_between_steps(self):
        steps = [step(100, 200), step(400, 500)]
        assert find_position(steps, step(250, 300)) == 1

    def test_no_gap_defaults_to_first_position(self):
        steps = [step(100, 200), step(400, 500)]
        assert find_position(steps, step(150, 450)) == 0

    def test_after_last_step_defaults_to_first_position(self):
        steps = [step(100, 200), step(400, 500)]
        assert find_position(steps, step(600, 600)) == 0

    def test_empty_steps(self):
        assert find_position([], step(1, 1)) == 0

    def test_steps_without_timing_are_skipped(self):
        steps = [step(100, 200), step(None, None), step(400, 500)]
        assert find_position(steps, step(250, 300)) == 0
        steps = [step(100, 200), step(300, 350), step(None, None), step(400, 500)]
        assert find_position(steps, step(250, 260)) == 1

    def test_failure_without_timestamp(self):
        assert find_position([step(100, 200)], step(None, None)) == 0


class TestAllure2ExportFormatter:
    """Tests for Allure2ExportFormatter.format."""

    def test_name(self):
        assert make_formatter().name == "allure2"

    def test_end_to_end(self):
        summary = make_summary(
            status="Failure",
            activities=[
                make_activity("allure.id:T-1"),
                make_activity('Tap "Login" Button'),
                make_activity("Enter credentials", start=1000, finish=2000, subactivities=[]),
                make_activity("Assertion Failure: mismatch"),
            ],
        )
        result = make_formatter().format(ExportMeta(), summary)

        assert Label("AS_ID", "T-1") in result.labels
        assert Label("KeyScenarioTest", "UI Tests") in result.labels
        assert [s.name for s in result.steps] == [
            "Enter credentials",
            "Assertion Failure: mismatch",
        ]
        credentials = result.steps[0]
        assert (credentials.start, credentials.stop) == (1000, 2000)
        assert result.status == Status.FAILED
        assert result.status_details.message == "Assertion Failure: mismatch"

    def test_identity_fields(self):
        result = make_formatter().format(
            ExportMeta(labels={"suite": "Smoke"}),
            make_summary(name="testLogin()", identifier="LoginTests/testLogin()"),
        )
        assert result.name == "testLogin()"
        assert result.full_name == "LoginTests/testLogin()"
        assert result.history_id == "Smoke/LoginTests/testLogin()"
        assert result.parameters == []
        assert result.uuid is None

    def test_history_id_default_suite(self):
        result = make_formatter().format(ExportMeta(), make_summary())
        assert result.history_id == "Default/LoginTests/testLogin()"

    def test_minimal_summary(self):
        result = make_formatter().format(ExportMeta(), {})
        assert result.name is None
        assert result.status is None
        assert result.steps == []
        assert result.start is None
        assert result.stop is None

    def test_status_from_outcome(self):
        result = make_formatter().format(ExportMeta(), make_summary(status="Skipped"))
        assert result.status == Status.SKIPPED

    def test_unknown_outcome_leaves_status_unset(self):
        result = make_formatter().format(ExportMeta(), make_summary(status="Mixed"))
        assert result.status is None

    def test_meta_labels_are_appended(self):
        meta = ExportMeta(labels={"suite": "Smoke", "host": "ci-mac-1"})
        result = make_formatter().format(meta, make_summary(activities=[make_activity("Step")]))
        assert result.labels == [
            Label("Os", "ios"),
            Label("suite", "Smoke"),
            Label("host", "ci-mac-1"),
        ]

    def test_meta_os_label_does_not_duplicate_step_os_label(self):
        meta = ExportMeta(labels={"Os": "ios"})
        result = make_formatter().format(meta, make_summary(activities=[make_activity("Step")]))
        assert result.labels.count(Label("Os", "ios")) == 1

    def test_os_label_annotation_does_not_duplicate_os_label(self):
        summary = make_summary(
            activities=[make_activity("Open"), make_activity("allure.label.Os:ios")]
        )
        result = make_formatter().format(ExportMeta(), summary)
        assert result.labels == [Label("Os", "ios")]

    def test_denylist_from_settings(self):
        summary = make_summary(activities=[make_activity("Boilerplate"), make_activity("Real")])
        result = make_formatter(excluded_activities=["Boilerplate"]).format(ExportMeta(), summary)
        assert [s.name for s in result.steps] == ["Real"]

    def test_default_denylist(self):
        summary = make_summary(
            activities=[
                make_activity("Set Up"),
                make_activity("Find the Login button"),
                make_activity("Real"),
                make_activity("Tear Down"),
            ]
        )
        result = make_formatter().format(ExportMeta(), summary)
        assert [s.name for s in result.steps] == ["Real"]


class TestTopLevelFailure:
    """Tests for splicing the top-level failure into the step list."""

    def test_inserted_between_steps_and_promoted(self):
        summary = make_summary(
            status="Failure",
            activities=[
                make_activity("First", start=100, finish=200),
                make_activity("Second", start=400, finish=500),
            ],
            failures=[
                make_failure(
                    uuid="F-1",
                    message="Crashed",
                    timestamp=250,
                    top_level=True,
                    issue_type="Uncaught Exception",
                )
            ],
        )
        result = make_formatter().format(ExportMeta(), summary)

        assert [s.name for s in result.steps] == ["First", "Crashed", "Second"]
        assert result.status == Status.BROKEN
        assert result.status_details.message == "Crashed"
        assert result.status_details is result.steps[1].status_details

    def test_inserted_first_without_gap(self):
        summary = make_summary(
            status="Failure",
            activities=[make_activity("Only", start=100, finish=200)],
            failures=[make_failure(uuid="F-1", message="Late", timestamp=900, top_level=True)],
        )
        result = make_formatter().format(ExportMeta(), summary)
        assert [s.name for s in result.steps] == ["Late", "Only"]
        assert result.status == Status.FAILED

    def test_first_of_several_top_level_failures_is_used(self):
        summary = make_summary(
            status="Failure",
            failures=[
                make_failure(uuid="A", message="First", top_level=True),
                make_failure(uuid="B", message="Second", top_level=True),
            ],
        )
        result = make_formatter().format(ExportMeta(), summary)
        assert [s.name for s in result.steps] == ["First"]

    def test_local_failure_is_not_spliced(self):
        summary = make_summary(
            status="Failure",
            activities=[make_activity("Tap", start=100, finish=200)],
            failures=[make_failure(uuid="F-1", message="Local", top_level=False)],
        )
        result = make_formatter().format(ExportMeta(), summary)
        assert [s.name for s in result.steps] == ["Tap"]

    def test_claimed_top_level_failure_is_not_duplicated(self):
        summary = make_summary(
            status="Failure",
            activities=[make_activity("Tap", start=100, finish=300, failure_ids=["F-1"])],
            failures=[make_failure(uuid="F-1", message="Boom", timestamp=250, top_level=True)],
        )
        result = make_formatter().format(ExportMeta(), summary)
        assert [s.name for s in result.steps] == ["Tap"]
        assert [s.name for s in result.steps[0].steps] == ["Boom"]


class TestTiming:
    """Tests for deriving result start and stop."""

    def test_no_start_no_timing(self):
        result = make_formatter().format(ExportMeta(), make_summary(duration=2.5))
        assert result.start is None
        assert result.stop is None

    def test_meta_start_and_duration(self):
        result = make_formatter().format(ExportMeta(start=10_000), make_summary(duration=2.5))
        assert result.start == 10_000
        assert result.stop == 12_500

    def test_start_marker_wins_over_meta_start(self):
        summary = make_summary(
            duration=1.0,
            activities=[make_activity("Start Test at 2021-03-02", start=50_000)],
        )
        result = make_formatter().format(ExportMeta(start=10_000), summary)
        assert result.start == 50_000
        assert result.stop == 51_000

    def test_steps_override_duration(self):
        summary = make_summary(
            duration=100.0,
            activities=[
                make_activity("First", start=10_100, finish=10_200),
                make_activity("Second", start=10_300, finish=10_400),
            ],
        )
        result = make_formatter().format(ExportMeta(start=10_000), summary)
        assert result.start == 10_100
        assert result.stop == 10_400

    def test_steps_without_timing_keep_duration_values(self):
        summary = make_summary(duration=1.0, activities=[make_activity("Untimed")])
        result = make_formatter().format(ExportMeta(start=10_000), summary)
        assert result.start == 10_000
        assert result.stop == 11_000

    def test_step_timing_ignored_without_any_start(self):
        summary = make_summary(activities=[make_activity("First", start=100, finish=200)])
        result = make_formatter().format(ExportMeta(), summary)
        assert result.start is None
        assert result.stop is None


class TestIdempotence:
    """Formatting the same document twice gives the same tree."""

    def test_same_output_and_input_untouched(self):
        summary = make_summary(
            status="Failure",
            activities=[
                make_activity("allure.id:T-1"),
                make_activity(
                    "Log in", start=1, finish=5, attachments=["a.png"], failure_ids=["F-1"]
                ),
            ],
            failures=[make_failure(uuid="F-1"), make_failure(uuid="F-2", top_level=True)],
        )
        snapshot = copy.deepcopy(summary)
        formatter = make_formatter()

        first = formatter.format(ExportMeta(labels={"suite": "S"}), summary)
        second = formatter.format(ExportMeta(labels={"suite": "S"}), summary)

        assert first.to_dict() == second.to_dict()
        assert summary == snapshot


class TestFormatterRegistry:
    """Tests for FormatterRegistry."""

    def test_default_registry_has_allure2(self):
        registry = get_default_registry()
        assert registry.names == ["allure2"]
        assert isinstance(registry.get("allure2"), Allure2ExportFormatter)

    def test_unknown_format(self):
        assert FormatterRegistry().get("allure2") is None

    def test_register_replaces_same_name(self):
        registry = FormatterRegistry()
        first, second = make_formatter(), make_formatter()
        registry.register(first)
        registry.register(second)
        assert registry.names == ["allure2"]
        assert registry.get("allure2") is second
