"""Custom exceptions for rendering context configuration."""

from typing import List, Optional


class InvalidCommandTemplateError(ValueError):
    """
    Exception raised when a command template is missing required placeholders.

    Attributes:
        message: Error description
        template: The rejected command template
        missing: Placeholders that were not found in the template
    """

    def __init__(
        self,
        message: str,
        template: Optional[str] = None,
        missing: Optional[List[str]] = None,
    ):
        self.message = message
        self.template = template
        self.missing = missing or []

        # Build enhanced error message
        parts = [message]

        if self.missing:
            parts.append(f"Missing placeholders: {', '.join(self.missing)}")

        if template:
            parts.append(f"Template: {template}")

        super().__init__("\n".join(parts))


class UnknownEnginePresetError(ValueError):
    """
    Exception raised when an engine name is neither a preset nor a command template.

    Attributes:
        name: The requested engine name
        available: Names of the presets that are configured
    """

    def __init__(self, name: str, available: Optional[List[str]] = None):
        self.name = name
        self.available = available or []

        message = f"Unknown engine preset: {name}"
        if self.available:
            message += f"\nAvailable presets: {', '.join(sorted(self.available))}"

        super().__init__(message)
