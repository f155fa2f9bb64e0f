"""xcallure - export Xcode xcresult test summaries to Allure results."""

__version__ = "0.3.0"

from xcallure.core.models import (
    Attachment,
    ExportMeta,
    FixedLabels,
    Label,
    Link,
    Status,
    StatusDetails,
    StepResult,
    TestResult,
)
from xcallure.export.formatters.allure2 import Allure2ExportFormatter

__all__ = [
    "Allure2ExportFormatter",
    "Attachment",
    "ExportMeta",
    "FixedLabels",
    "Label",
    "Link",
    "Status",
    "StatusDetails",
    "StepResult",
    "TestResult",
]
