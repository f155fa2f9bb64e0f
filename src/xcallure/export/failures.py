"""Failure summaries: indexing and conversion to failure steps."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

from xcallure.core.exceptions import UnparseableDateError
from xcallure.core.models import StatusDetails, StepResult
from xcallure.export.attachments import AttachmentResolver
from xcallure.export.status import failure_status
from xcallure.logging import get_logger
from xcallure.parsers.xcresult import find_value, get_bool, get_value, get_values, has

logger = get_logger(__name__)

FAILURE_SUMMARIES = "failureSummaries"
FAILURE_UUID = "uuid"
FAILURE_MESSAGE = "message"
FAILURE_TIMESTAMP = "timestamp"
FAILURE_IS_TOP_LEVEL = "isTopLevelFailure"
ATTACHMENTS = "attachments"

UNKNOWN_FAILURE_NAME = "Unknown failure"

SOURCE_CODE_CONTEXT = "sourceCodeContext"
CALL_STACK = "callStack"
SYMBOL_INFO = "symbolInfo"
LOCATION = "location"
FILE_PATH = "filePath"
LINE_NUMBER = "lineNumber"

DateParser = Callable[[str], int]


class FailureIndex:
    """Lookup of a test's failure summaries by uuid.

    Built once per test summary and shared by the whole step walk. Besides
    the lookup it remembers which failures were already attached to a step,
    so the top-level failure is not emitted twice.
    """

    def __init__(self, failures: dict[str, Any] | None = None) -> None:
        self._failures: dict[str, Any] = dict(failures or {})
        self._claimed: set[str] = set()

    @classmethod
    def from_summary(cls, node: Any) -> FailureIndex:
        """Index the ``failureSummaries`` of a test summary in declared order."""
        failures: dict[str, Any] = {}
        for failure in get_values(node, FAILURE_SUMMARIES):
            key = get_value(failure, FAILURE_UUID)
            if key is None:
                logger.debug("failure_without_uuid", message=get_value(failure, FAILURE_MESSAGE))
                continue
            failures[key] = failure
        return cls(failures)

    def __len__(self) -> int:
        return len(self._failures)

    def __iter__(self) -> Iterator[str]:
        return iter(self._failures)

    def __contains__(self, key: object) -> bool:
        return key in self._failures

    def get(self, key: str) -> Any:
        return self._failures.get(key)

    def claim(self, key: str) -> Any:
        """Return the failure for ``key`` and mark it as attached to a step."""
        failure = self._failures.get(key)
        if failure is not None:
            self._claimed.add(key)
        return failure

    def is_claimed(self, key: str) -> bool:
        return key in self._claimed

    def top_level(self) -> tuple[str, Any] | None:
        """Return the first failure flagged as top-level, with its uuid.

        Only the first flagged failure in declared order is honored; later
        ones are ignored.
        """
        for key, failure in self._failures.items():
            if is_top_level(failure):
                return key, failure
        return None


def is_top_level(failure: Any) -> bool:
    """Check the ``isTopLevelFailure`` flag; absent means False."""
    return get_bool(failure, FAILURE_IS_TOP_LEVEL)


def build_trace(failure: Any) -> str | None:
    """Build a ``path:line`` trace from the failure's call stack.

    Frames lacking a file path or a line number are left out. Returns None
    when the failure carries no call stack at all.
    """
    context = failure.get(SOURCE_CODE_CONTEXT) if isinstance(failure, dict) else None
    if not has(context, CALL_STACK):
        return None
    lines = []
    for frame in get_values(context, CALL_STACK):
        symbol_info = frame.get(SYMBOL_INFO) if isinstance(frame, dict) else None
        location = find_value(symbol_info, LOCATION)
        file_path = get_value(location, FILE_PATH)
        line_number = get_value(location, LINE_NUMBER)
        if file_path is not None and line_number is not None:
            lines.append(f"{file_path}:{line_number}")
    return "\n".join(lines)


class FailureStepFactory:
    """Creates point-in-time steps from failure summaries."""

    def __init__(self, parse_date: DateParser, attachments: AttachmentResolver) -> None:
        self._parse_date = parse_date
        self._attachments = attachments

    def create(self, failure: Any) -> StepResult:
        """Create a failed or broken step describing ``failure``."""
        message = get_value(failure, FAILURE_MESSAGE)
        timestamp = self._timestamp(failure)
        details = StatusDetails(message=message, trace=build_trace(failure))
        step = StepResult(
            name=message if message is not None else UNKNOWN_FAILURE_NAME,
            status=failure_status(failure),
            status_details=details,
            start=timestamp,
            stop=timestamp,
        )
        step.attachments.extend(self._attachments.resolve(get_values(failure, ATTACHMENTS)))
        return step

    def _timestamp(self, failure: Any) -> int | None:
        text = get_value(failure, FAILURE_TIMESTAMP)
        if text is None:
            return None
        try:
            return self._parse_date(text)
        except UnparseableDateError as e:
            logger.warning("unparseable_failure_timestamp", timestamp=e.text)
            return None
