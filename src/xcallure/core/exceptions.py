"""Shared exceptions for the xcallure package."""


class InvalidTestSummaryError(Exception):
    """Raised when a test summary document cannot be loaded.

    The formatter itself tolerates missing fields; this is only raised when
    the document is not JSON at all or its root is not an object.
    """

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid xcresult test summary {source}: {reason}")


class UnparseableDateError(ValueError):
    """Raised when an xcresult timestamp does not match any known format."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"Unparseable xcresult timestamp: {text!r}")
