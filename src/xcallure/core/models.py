"""Allure 2 result model produced by the exporters.

The classes mirror the Allure 2 result schema. ``TestResult`` and
``StepResult`` share the executable-item capabilities (name, status,
status details, timing, nested steps, attachments) so the step tree builder
can treat both as step containers.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Status(Enum):
    """Allure status of a test or step."""

    PASSED = "passed"
    FAILED = "failed"
    BROKEN = "broken"
    SKIPPED = "skipped"


@dataclass
class StatusDetails:
    """Message and stack trace explaining a non-passed status."""

    message: str | None = None
    trace: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return _compact({"message": self.message, "trace": self.trace})


@dataclass(frozen=True)
class Label:
    """Name/value label attached to a test result."""

    name: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class FixedLabels:
    """Labels the exporter adds to results on its own."""

    os: Label
    key_scenario: Label

    def add_to(self, result: TestResult, label: Label) -> None:
        """Add ``label`` to ``result``, keeping the OS label unique."""
        result.add_label(label, unique=label == self.os)


@dataclass(frozen=True)
class Link:
    """External link attached to a test result."""

    name: str
    url: str
    type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"name": self.name, "type": self.type, "url": self.url})


@dataclass(frozen=True)
class Parameter:
    """Test parameter (never populated from xcresult records)."""

    name: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass
class Attachment:
    """Attachment descriptor.

    ``source`` is the file name the caller must write the attachment bytes to,
    ``name`` is what Allure displays. ``filename`` is the name the attachment
    has inside the xcresult bundle; it is not part of the Allure schema.
    """

    source: str
    name: str
    type: str | None = None
    filename: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"name": self.name, "source": self.source, "type": self.type})


@dataclass
class ExecutableItem:
    """Fields shared by test results and steps."""

    name: str | None = None
    status: Status | None = None
    status_details: StatusDetails | None = None
    start: int | None = None
    stop: int | None = None
    steps: list[StepResult] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)

    def set_status(self, status: Status | None, details: StatusDetails | None) -> None:
        """Overwrite status and status details in place."""
        self.status = status
        self.status_details = details

    def iter_attachments(self) -> Iterator[Attachment]:
        """Yield every attachment of this item and its nested steps, depth first."""
        yield from self.attachments
        for step in self.steps:
            yield from step.iter_attachments()

    def _executable_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value if self.status else None,
            "statusDetails": self.status_details.to_dict() if self.status_details else None,
            "start": self.start,
            "stop": self.stop,
            "steps": [s.to_dict() for s in self.steps],
            "attachments": [a.to_dict() for a in self.attachments],
        }


@dataclass
class StepResult(ExecutableItem):
    """A step nested under a test result or another step."""

    def to_dict(self) -> dict[str, Any]:
        """Convert to Allure step JSON."""
        return _compact(self._executable_dict())


@dataclass
class TestResult(ExecutableItem):
    """One Allure test result."""

    __test__ = False  # not a pytest test class

    uuid: str | None = None
    full_name: str | None = None
    history_id: str | None = None
    description: str | None = None
    labels: list[Label] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    parameters: list[Parameter] = field(default_factory=list)

    def has_label(self, label: Label) -> bool:
        return label in self.labels

    def add_label(self, label: Label, unique: bool = False) -> None:
        """Append ``label``; a unique label is never added twice."""
        if unique and self.has_label(label):
            return
        self.labels.append(label)

    def to_dict(self) -> dict[str, Any]:
        """Convert to Allure result JSON (the ``*-result.json`` payload)."""
        data = {
            "uuid": self.uuid,
            "historyId": self.history_id,
            "fullName": self.full_name,
            "description": self.description,
            **self._executable_dict(),
            "labels": [label.to_dict() for label in self.labels],
            "links": [link.to_dict() for link in self.links],
            "parameters": [p.to_dict() for p in self.parameters],
        }
        return _compact(data)


@dataclass
class ExportMeta:
    """Export-wide metadata merged into every result.

    Attributes:
        labels: Labels added to every result, e.g. ``{"suite": "Smoke"}``.
        start: Fallback start time in epoch milliseconds, used when the
            record itself does not declare one.
    """

    labels: dict[str, str] = field(default_factory=dict)
    start: int | None = None


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}
