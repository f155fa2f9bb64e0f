"""Conversion of the XCTest activity tree into Allure steps.

Each activity is run through an ordered list of rules; the first rule that
handles it stops processing. Activities no rule handles become steps.
Failures discovered anywhere in the tree overwrite the status of every node
on the path from the test result down to the failing step.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from xcallure.core.exceptions import UnparseableDateError
from xcallure.core.models import (
    ExecutableItem,
    FixedLabels,
    Status,
    StatusDetails,
    StepResult,
    TestResult,
)
from xcallure.export.annotations import parse_annotation
from xcallure.export.attachments import AttachmentResolver
from xcallure.export.failures import FailureIndex, FailureStepFactory
from xcallure.export.status import UNSUPPORTED_STATUS_MESSAGE
from xcallure.logging import get_logger
from xcallure.parsers.xcresult import get_value, get_values, has, unwrap_value

logger = get_logger(__name__)

ACTIVITY_TITLE = "title"
ACTIVITY_TYPE = "activityType"
ACTIVITY_START = "start"
ACTIVITY_FINISH = "finish"
ACTIVITY_FAILURE_SUMMARY_IDS = "failureSummaryIDs"
SUBACTIVITIES = "subactivities"
ATTACHMENTS = "attachments"

START_TEST_MARKER = "Start Test at"
ASSERTION_TITLE_PREFIX = "Assertion Failure"
SKIPPED_TITLE_MARKER = "Test skipped"
ASSERTION_ACTIVITY_TYPE = "testAssertionFailure"

DateParser = Callable[[str], int]


@dataclass(frozen=True)
class ActivityFilter:
    """Denylist of noise activities that are dropped with their subtree."""

    excluded: frozenset[str] = frozenset()
    excluded_prefixes: tuple[str, ...] = ()

    @classmethod
    def from_lists(
        cls, excluded: Iterable[str], excluded_prefixes: Iterable[str]
    ) -> ActivityFilter:
        return cls(frozenset(excluded), tuple(excluded_prefixes))

    def is_excluded(self, title: str) -> bool:
        """Exact match against the excluded titles."""
        return title in self.excluded

    def has_excluded_prefix(self, title: str) -> bool:
        """Prefix match against the excluded title prefixes."""
        return title.startswith(self.excluded_prefixes)


@dataclass(frozen=True)
class StepContext:
    """Position of the walk inside the result tree.

    Attributes:
        result: The test result being built.
        current: Container new steps are appended to.
        path: Every container from the result down to ``current``.
        failures: Failure summaries of the test, shared by the whole walk.
    """

    result: TestResult
    current: ExecutableItem
    path: tuple[ExecutableItem, ...]
    failures: FailureIndex

    @classmethod
    def root(cls, result: TestResult, failures: FailureIndex) -> StepContext:
        return cls(result=result, current=result, path=(result,), failures=failures)

    def child(self, step: StepResult) -> StepContext:
        """Return a context one level deeper, with ``step`` as the container."""
        return StepContext(
            result=self.result,
            current=step,
            path=(*self.path, step),
            failures=self.failures,
        )

    def propagate(self, status: Status | None, details: StatusDetails | None) -> None:
        """Overwrite status and details of every container on the path."""
        for item in self.path:
            item.set_status(status, details)


def activity_title(activity: Any) -> str | None:
    """Return the activity title, falling back to its type."""
    title = get_value(activity, ACTIVITY_TITLE)
    if title is not None:
        return title
    return get_value(activity, ACTIVITY_TYPE)


def signals_failure(activity: Any, title: str) -> bool:
    """Check whether the activity reports an assertion failure or a skip."""
    if title.startswith(ASSERTION_TITLE_PREFIX) or SKIPPED_TITLE_MARKER in title:
        return True
    activity_type = get_value(activity, ACTIVITY_TYPE)
    return activity_type is not None and ASSERTION_ACTIVITY_TYPE in activity_type


class StepTreeBuilder:
    """Walks activities and attaches the resulting steps to the result tree."""

    def __init__(
        self,
        parse_date: DateParser,
        attachments: AttachmentResolver,
        activity_filter: ActivityFilter,
        fixed_labels: FixedLabels,
    ) -> None:
        self._parse_date = parse_date
        self._attachments = attachments
        self._filter = activity_filter
        self._fixed_labels = fixed_labels
        self.failure_steps = FailureStepFactory(parse_date, attachments)
        self._rules: tuple[Callable[[Any, str, StepContext], bool], ...] = (
            self._apply_annotation,
            self._apply_start_marker,
            self._skip_excluded,
            self._skip_excluded_prefix,
        )

    def build(self, activity: Any, context: StepContext) -> None:
        """Process one activity and, recursively, its subactivities."""
        title = activity_title(activity)
        if title is None:
            return
        for rule in self._rules:
            if rule(activity, title, context):
                return
        self._add_step(activity, title, context)

    def build_all(self, activities: Iterable[Any], context: StepContext) -> None:
        for activity in activities:
            self.build(activity, context)

    def _apply_annotation(self, activity: Any, title: str, context: StepContext) -> bool:
        annotation = parse_annotation(title)
        if annotation is None:
            return False
        annotation.apply(context.result, self._fixed_labels)
        return True

    def _apply_start_marker(self, activity: Any, title: str, context: StepContext) -> bool:
        if not title.startswith(START_TEST_MARKER) or not has(activity, ACTIVITY_START):
            return False
        start = self._timestamp(activity, ACTIVITY_START)
        if start is not None:
            context.result.start = start
        context.current.attachments.extend(
            self._attachments.resolve(get_values(activity, ATTACHMENTS))
        )
        return True

    def _skip_excluded(self, activity: Any, title: str, context: StepContext) -> bool:
        if not self._filter.is_excluded(title):
            return False
        logger.debug("activity_excluded", title=title)
        return True

    def _skip_excluded_prefix(self, activity: Any, title: str, context: StepContext) -> bool:
        if not self._filter.has_excluded_prefix(title):
            return False
        logger.debug("activity_excluded_by_prefix", title=title)
        return True

    def _add_step(self, activity: Any, title: str, context: StepContext) -> None:
        step = StepResult(name=title, status=Status.PASSED)
        step.attachments.extend(self._attachments.resolve(get_values(activity, ATTACHMENTS)))

        if signals_failure(activity, title):
            status = context.result.status
            if status is None:
                details = StatusDetails(message=UNSUPPORTED_STATUS_MESSAGE)
            else:
                details = StatusDetails(message=title)
            step.set_status(status, details)
            context.propagate(status, details)

        if has(activity, ACTIVITY_START) and has(activity, ACTIVITY_FINISH):
            step.start = self._timestamp(activity, ACTIVITY_START)
            step.stop = self._timestamp(activity, ACTIVITY_FINISH)

        self.build_all(get_values(activity, SUBACTIVITIES), context.child(step))

        for ref in get_values(activity, ACTIVITY_FAILURE_SUMMARY_IDS):
            self._attach_failure(unwrap_value(ref), step, context)

        context.current.steps.append(step)
        context.result.add_label(self._fixed_labels.os, unique=True)

    def _attach_failure(self, key: str | None, step: StepResult, context: StepContext) -> None:
        failure = context.failures.claim(key) if key is not None else None
        if failure is None:
            logger.warning("unknown_failure_reference", failure_id=key, step=step.name)
            return
        failure_step = self.failure_steps.create(failure)
        step.steps.append(failure_step)
        step.set_status(failure_step.status, failure_step.status_details)
        context.propagate(failure_step.status, failure_step.status_details)

    def _timestamp(self, activity: Any, key: str) -> int | None:
        text = get_value(activity, key)
        if text is None:
            return None
        try:
            return self._parse_date(text)
        except UnparseableDateError as e:
            logger.warning("unparseable_activity_timestamp", field=key, timestamp=e.text)
            return None
