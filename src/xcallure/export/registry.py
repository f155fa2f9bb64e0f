"""Registry of available export formatters."""

from __future__ import annotations

from .base import ExportFormatter


class FormatterRegistry:
    """Registry for export formatters, keyed by format name."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._formatters: dict[str, ExportFormatter] = {}

    @property
    def names(self) -> list[str]:
        """Return the registered format names in registration order."""
        return list(self._formatters)

    def register(self, formatter: ExportFormatter) -> None:
        """Register a formatter, replacing any formatter with the same name.

        Args:
            formatter: The formatter to register.
        """
        self._formatters[formatter.name] = formatter

    def get(self, name: str) -> ExportFormatter | None:
        """Return the formatter registered under ``name``, or None."""
        return self._formatters.get(name)


def get_default_registry() -> FormatterRegistry:
    """Create a registry with all default formatters registered.

    Returns:
        A FormatterRegistry with the Allure 2 formatter.
    """
    from .formatters.allure2 import Allure2ExportFormatter

    registry = FormatterRegistry()
    registry.register(Allure2ExportFormatter())
    return registry
