"""Resolution of xcresult attachments to Allure attachment descriptors."""

from __future__ import annotations

import mimetypes
import posixpath
import uuid
from collections.abc import Callable, Iterable
from typing import Any

from xcallure.core.models import Attachment
from xcallure.parsers.xcresult import get_value

FILENAME = "filename"

HEIC_EXTENSION = "heic"
HEIC_DISPLAY_EXTENSION = "jpeg"

SourceNamer = Callable[[str], str]


def unique_source_name(extension: str) -> str:
    """Default naming policy: a random ``<uuid>-attachment.<ext>`` file name."""
    return f"{uuid.uuid4()}-attachment.{extension}"


def split_extension(filename: str) -> tuple[str, str]:
    """Split a file name into base name and extension (without the dot)."""
    base = posixpath.basename(filename)
    stem, ext = posixpath.splitext(base)
    if not ext and stem.startswith("."):
        # ".hidden" style names: splitext treats them as extension-less
        return "", stem[1:]
    return stem, ext[1:]


class AttachmentResolver:
    """Turns xcresult attachment nodes into Allure attachments.

    Args:
        source_for_extension: Naming policy that returns the target file name
            for an attachment with the given extension.
    """

    def __init__(self, source_for_extension: SourceNamer = unique_source_name) -> None:
        self._source_for_extension = source_for_extension

    def resolve_one(self, filename: str) -> Attachment:
        """Resolve a single declared attachment file name."""
        base, extension = split_extension(filename)
        source = self._source_for_extension(extension)
        if extension == HEIC_EXTENSION:
            name = f"{base}.{HEIC_DISPLAY_EXTENSION}"
        else:
            name = filename
        media_type, _ = mimetypes.guess_type(name)
        return Attachment(source=source, name=name, type=media_type, filename=filename)

    def resolve(self, nodes: Iterable[Any]) -> list[Attachment]:
        """Resolve attachment nodes in order, skipping nodes without a file name."""
        attachments = []
        for node in nodes:
            filename = get_value(node, FILENAME)
            if filename is None:
                continue
            attachments.append(self.resolve_one(filename))
        return attachments
