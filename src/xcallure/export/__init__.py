"""Conversion of xcresult test summaries into report results.

Usage:
    from xcallure.export import get_default_registry

    formatter = get_default_registry().get("allure2")
    result = formatter.format(ExportMeta(labels={"suite": "Smoke"}), summary)
    for attachment in result.iter_attachments():
        copy(attachment.filename, attachment.source)
"""

from .annotations import Annotation, parse_annotation
from .attachments import AttachmentResolver, unique_source_name
from .base import ExportFormatter
from .failures import FailureIndex, FailureStepFactory, build_trace
from .registry import FormatterRegistry, get_default_registry
from .status import UNSUPPORTED_STATUS_MESSAGE, is_broken, map_test_status
from .steps import ActivityFilter, StepContext, StepTreeBuilder

__all__ = [
    "ActivityFilter",
    "Annotation",
    "AttachmentResolver",
    "ExportFormatter",
    "FailureIndex",
    "FailureStepFactory",
    "FormatterRegistry",
    "StepContext",
    "StepTreeBuilder",
    "UNSUPPORTED_STATUS_MESSAGE",
    "build_trace",
    "get_default_registry",
    "is_broken",
    "map_test_status",
    "parse_annotation",
    "unique_source_name",
]
