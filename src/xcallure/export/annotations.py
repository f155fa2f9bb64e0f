"""Allure annotations embedded in XCTest activity titles.

UI tests cannot talk to Allure directly, so they record ``XCTContext``
activities whose titles carry the metadata, e.g. ``allure.label.severity:critical``.
Such activities are consumed here and never become steps.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from xcallure.core.models import FixedLabels, Label, Link, TestResult

ID_LABEL_NAME = "AS_ID"

ID_PATTERN = re.compile(r"allure\.id:(?P<id>.*)")
NAME_PATTERN = re.compile(r"allure\.name:(?P<name>.*)")
DESCRIPTION_PATTERN = re.compile(r"allure\.description:(?P<description>.*)")
LABEL_PATTERN = re.compile(r"allure\.label\.(?P<name>.*?):(?P<value>.*)")
LINK_PATTERN = re.compile(r"allure\.link\.(?P<name>.*?)(?:\[(?P<type>.*)\])?:(?P<url>.*)")


class Annotation(ABC):
    """A parsed annotation that knows how to update a test result."""

    @abstractmethod
    def apply(self, result: TestResult, fixed: FixedLabels) -> None:
        """Apply the annotation to ``result``."""


@dataclass(frozen=True)
class IdAnnotation(Annotation):
    value: str

    def apply(self, result: TestResult, fixed: FixedLabels) -> None:
        result.add_label(Label(name=ID_LABEL_NAME, value=self.value))
        result.add_label(fixed.key_scenario)


@dataclass(frozen=True)
class NameAnnotation(Annotation):
    value: str

    def apply(self, result: TestResult, fixed: FixedLabels) -> None:
        result.name = self.value


@dataclass(frozen=True)
class DescriptionAnnotation(Annotation):
    value: str

    def apply(self, result: TestResult, fixed: FixedLabels) -> None:
        result.description = self.value


@dataclass(frozen=True)
class LabelAnnotation(Annotation):
    label: Label

    def apply(self, result: TestResult, fixed: FixedLabels) -> None:
        fixed.add_to(result, self.label)


@dataclass(frozen=True)
class LinkAnnotation(Annotation):
    link: Link

    def apply(self, result: TestResult, fixed: FixedLabels) -> None:
        result.links.append(self.link)


def _link(match: re.Match[str]) -> Annotation:
    return LinkAnnotation(
        Link(
            name=match.group("name"),
            type=match.group("type"),
            url=match.group("url").strip(),
        )
    )


# Tried in order, first full match wins
ANNOTATION_RULES: tuple[tuple[re.Pattern[str], Callable[[re.Match[str]], Annotation]], ...] = (
    (ID_PATTERN, lambda m: IdAnnotation(m.group("id"))),
    (NAME_PATTERN, lambda m: NameAnnotation(m.group("name"))),
    (DESCRIPTION_PATTERN, lambda m: DescriptionAnnotation(m.group("description"))),
    (
        LABEL_PATTERN,
        lambda m: LabelAnnotation(Label(name=m.group("name"), value=m.group("value").strip())),
    ),
    (LINK_PATTERN, _link),
)


def parse_annotation(title: str) -> Annotation | None:
    """Parse an activity title into an annotation.

    Args:
        title: Activity title.

    Returns:
        The first annotation whose pattern matches the whole title,
        or None for ordinary titles.
    """
    for pattern, factory in ANNOTATION_RULES:
        match = pattern.fullmatch(title)
        if match is not None:
            return factory(match)
    return None
