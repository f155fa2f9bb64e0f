"""Mapping of xcresult test outcomes to Allure statuses."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from xcallure.core.models import Status
from xcallure.parsers.xcresult import get_value, has

ASSOCIATED_ERROR = "associatedError"
ISSUE_TYPE = "issueType"
ASSERTION_ISSUE_TYPE = "Assertion Failure"

UNSUPPORTED_STATUS_MESSAGE = (
    "xcresults export tool issue: unsupported `testStatus` value found inside xcresult report"
)


def is_broken(failure: Any) -> bool:
    """Tell a broken test from a failed assertion.

    A failure record means "broken" when it carries an associated error or
    an issue type other than a plain assertion failure.
    """
    if has(failure, ASSOCIATED_ERROR):
        return True
    issue_type = get_value(failure, ISSUE_TYPE)
    return issue_type is not None and issue_type != ASSERTION_ISSUE_TYPE


def failure_status(failure: Any) -> Status:
    """Return the status of a step synthesized from a failure record."""
    return Status.BROKEN if is_broken(failure) else Status.FAILED


def map_test_status(outcome: str | None, failures: Sequence[Any] = ()) -> Status | None:
    """Map an xcresult ``testStatus`` value to an Allure status.

    Args:
        outcome: Declared test outcome, e.g. ``"Success"`` or ``"Failure"``.
        failures: The test's failure records in declared order; only the
            first one is consulted to disambiguate ``"Failure"``.

    Returns:
        The mapped status, or None when the outcome is absent or unknown.
    """
    if outcome in ("Success", "Expected Failure"):
        return Status.PASSED
    if outcome == "Skipped":
        return Status.SKIPPED
    if outcome == "Failure":
        if failures and is_broken(failures[0]):
            return Status.BROKEN
        return Status.FAILED
    return None
