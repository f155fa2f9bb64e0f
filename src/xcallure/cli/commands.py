"""Command handlers for the xcallure CLI."""

from __future__ import annotations

import json
import shutil
import uuid
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from xcallure.core.exceptions import InvalidTestSummaryError
from xcallure.core.models import ExportMeta, TestResult
from xcallure.export import get_default_registry
from xcallure.logging import get_logger
from xcallure.parsers.xcresult import load_test_summary

logger = get_logger(__name__)

RESULT_SUFFIX = "-result.json"


def parse_labels(values: list[str]) -> dict[str, str]:
    """Parse ``name=value`` pairs into a label mapping.

    Raises:
        ValueError: If a pair has no ``=`` or an empty name.
    """
    labels: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Invalid label {item!r}, expected name=value")
        labels[name.strip()] = value.strip()
    return labels


def write_result(result: TestResult, output_dir: Path) -> Path:
    """Write ``result`` as ``<uuid>-result.json`` into ``output_dir``.

    A uuid is assigned when the result has none.
    """
    if result.uuid is None:
        result.uuid = str(uuid.uuid4())
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{result.uuid}{RESULT_SUFFIX}"
    path.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def copy_attachments(result: TestResult, attachments_dir: Path, output_dir: Path) -> int:
    """Copy every attachment referenced by ``result`` next to the result file.

    Returns:
        Number of attachments copied. Missing source files are logged and skipped.
    """
    copied = 0
    for attachment in result.iter_attachments():
        if attachment.filename is None:
            continue
        source = attachments_dir / attachment.filename
        if not source.is_file():
            logger.warning("attachment_missing", filename=attachment.filename)
            continue
        shutil.copyfile(source, output_dir / attachment.source)
        copied += 1
    return copied


def run_export(
    summary: Path,
    output_dir: Path,
    labels: list[str],
    start: int | None = None,
    attachments_dir: Path | None = None,
    format_name: str = "allure2",
    console: Console | None = None,
) -> int:
    """Export one xcresult test summary.

    Returns:
        Process exit code.
    """
    console = console or Console(highlight=False)

    formatter = get_default_registry().get(format_name)
    if formatter is None:
        console.print(f"[red]Error:[/red] unknown format {escape(repr(format_name))}")
        return 1

    try:
        meta = ExportMeta(labels=parse_labels(labels), start=start)
        node = load_test_summary(summary)
    except (ValueError, FileNotFoundError, InvalidTestSummaryError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1

    result = formatter.format(meta, node)
    path = write_result(result, output_dir)
    copied = copy_attachments(result, attachments_dir, output_dir) if attachments_dir else 0

    status = result.status.value if result.status else "unknown"
    console.print(
        f"[bold]{escape(result.name or summary.name)}[/bold]: {status}, "
        f"{len(result.steps)} steps, {copied} attachments -> {escape(str(path))}"
    )
    return 0
