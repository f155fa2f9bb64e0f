"""Abstract base class for export formatters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from xcallure.core.models import ExportMeta, TestResult


class ExportFormatter(ABC):
    """Converts one xcresult test summary into a report result.

    Implementations must not keep state between calls, so a single
    formatter can be reused for every test of an export.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of the output format."""

    @abstractmethod
    def format(self, meta: ExportMeta, node: dict[str, Any]) -> TestResult:
        """Convert a test summary.

        Args:
            meta: Export-wide labels and fallback start time.
            node: Parsed ``ActionTestSummary`` JSON.

        Returns:
            The result tree. Attachment bytes are not touched; use
            ``TestResult.iter_attachments()`` to find what must be copied.
        """
