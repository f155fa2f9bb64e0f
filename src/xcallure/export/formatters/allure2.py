"""Allure 2 export formatter."""

from __future__ import annotations

from typing import Any

import structlog

from xcallure.config import Settings, get_settings
from xcallure.core.models import ExportMeta, FixedLabels, Label, StepResult, TestResult
from xcallure.export.attachments import AttachmentResolver, SourceNamer, unique_source_name
from xcallure.export.base import ExportFormatter
from xcallure.export.failures import FAILURE_SUMMARIES, FailureIndex
from xcallure.export.status import map_test_status
from xcallure.export.steps import ActivityFilter, DateParser, StepContext, StepTreeBuilder
from xcallure.logging import get_logger
from xcallure.parsers.xcresult import get_value, get_values, parse_date

logger = get_logger(__name__)

NAME = "name"
IDENTIFIER = "identifier"
DURATION = "duration"
STATUS = "testStatus"
ACTIVITY_SUMMARIES = "activitySummaries"

SUITE_LABEL = "suite"


def find_position(steps: list[StepResult], step: StepResult) -> int:
    """Find where a point-in-time step fits between existing steps.

    Returns the first index ``i`` such that ``step`` starts no earlier than
    the step before ``i`` stops and stops no later than step ``i`` starts.
    Index 0 compares against the first step only. Defaults to 0.
    """
    if step.start is None or step.stop is None:
        return 0
    for i, current in enumerate(steps):
        previous = steps[i - 1] if i > 0 else steps[0]
        if previous.stop is None or current.start is None:
            continue
        if previous.stop <= step.start and step.stop <= current.start:
            return i
    return 0


class Allure2ExportFormatter(ExportFormatter):
    """Builds Allure 2 test results from xcresult test summaries.

    Args:
        settings: Exporter settings; defaults to the environment settings.
        date_parser: Converts xcresult timestamps to epoch milliseconds.
        source_for_extension: Naming policy for attachment target files.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        date_parser: DateParser = parse_date,
        source_for_extension: SourceNamer = unique_source_name,
    ) -> None:
        self._settings = settings or get_settings()
        self._fixed_labels = FixedLabels(
            os=Label(self._settings.os_label_name, self._settings.os_label_value),
            key_scenario=Label(
                self._settings.key_scenario_label_name,
                self._settings.key_scenario_label_value,
            ),
        )
        self._steps = StepTreeBuilder(
            parse_date=date_parser,
            attachments=AttachmentResolver(source_for_extension),
            activity_filter=ActivityFilter.from_lists(
                self._settings.excluded_activities,
                self._settings.excluded_activity_prefixes,
            ),
            fixed_labels=self._fixed_labels,
        )

    @property
    def name(self) -> str:
        """Return the format name."""
        return "allure2"

    def history_id(self, meta: ExportMeta, identifier: str) -> str:
        """Build the history id Allure uses to match results across runs."""
        suite = meta.labels.get(SUITE_LABEL, self._settings.default_suite)
        return f"{suite}/{identifier}"

    def format(self, meta: ExportMeta, node: dict[str, Any]) -> TestResult:
        """Convert one test summary into an Allure test result."""
        identifier = get_value(node, IDENTIFIER)
        with structlog.contextvars.bound_contextvars(test=identifier):
            return self._format(meta, node, identifier)

    def _format(self, meta: ExportMeta, node: dict[str, Any], identifier: str | None) -> TestResult:
        result = TestResult(name=get_value(node, NAME))
        if identifier is not None:
            result.full_name = identifier
            result.history_id = self.history_id(meta, identifier)

        outcome = get_value(node, STATUS)
        if outcome is not None:
            result.status = map_test_status(outcome, get_values(node, FAILURE_SUMMARIES))
            if result.status is None:
                logger.warning("unsupported_test_status", test_status=outcome)

        failures = FailureIndex.from_summary(node)
        self._steps.build_all(
            get_values(node, ACTIVITY_SUMMARIES), StepContext.root(result, failures)
        )
        self._add_top_level_failure(result, failures)

        for label_name, label_value in meta.labels.items():
            self._fixed_labels.add_to(result, Label(label_name, label_value))

        self._set_timing(result, meta, get_value(node, DURATION))
        return result

    def _add_top_level_failure(self, result: TestResult, failures: FailureIndex) -> None:
        top_level = failures.top_level()
        if top_level is None:
            return
        key, failure = top_level
        if failures.is_claimed(key):
            return
        failure_step = self._steps.failure_steps.create(failure)
        position = find_position(result.steps, failure_step)
        logger.debug("top_level_failure_inserted", failure_id=key, position=position)
        result.steps.insert(position, failure_step)
        result.set_status(failure_step.status, failure_step.status_details)

    def _set_timing(self, result: TestResult, meta: ExportMeta, duration: str | None) -> None:
        if result.start is None:
            result.start = meta.start
        if result.start is None:
            return
        if duration is not None:
            try:
                result.stop = result.start + int(float(duration) * 1000)
            except (ValueError, OverflowError):
                logger.warning("unparseable_duration", duration=duration)
        if result.steps:
            first, last = result.steps[0], result.steps[-1]
            if first.start is not None:
                result.start = first.start
            if last.stop is not None:
                result.stop = last.stop
