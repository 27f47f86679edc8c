# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
ChaosCV Error Hierarchy

Provides the error types raised by the ChaosCV core with:
- Clear error categorization
- Helpful error messages with suggestions
- Context information for debugging

Error Categories:
- ChaosError: Base class for all ChaosCV errors
- CheckFailedError: A failed CHECK (programmer error, fatal severity)
  - ShapeMismatchError: Malformed axis count or negative axis
  - OutOfRangeError: Index, rectangle or region outside the valid extent
  - UnknownDepthError: Depth tag with no registered width or converter
  - ReleaseError: Allocation released more often than it was retained
  - FormatterStateError: Formatter stepped past its terminal state
- ConfigurationError: Configuration/setup errors
  - FlagError: Unknown or malformed command-line flag
"""

from typing import Optional


class ChaosError(Exception):
    """
    Base class for all ChaosCV errors.

    Provides consistent error formatting and context tracking.

    Attributes:
        message: Human-readable error message
        suggestions: List of suggestions to fix the error
        context: Optional context dictionary for debugging
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[list[str]] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.suggestions = suggestions or []
        self.context = context or {}

        full_message = self._format_message()
        super().__init__(full_message)

    def _format_message(self) -> str:
        """Format the error message with suggestions."""
        lines = [self.message]

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"  {i}. {suggestion}")

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        return "\n".join(lines)


class CheckFailedError(ChaosError):
    """
    A precondition checked with CHECK / FATAL did not hold.

    These are programmer errors. The core never catches them; the only
    reason they are exceptions at all is that the fatal action may be
    configured to raise instead of aborting the process.
    """

    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str,
        file: Optional[str] = None,
        line: Optional[int] = None,
        suggestions: Optional[list[str]] = None,
    ):
        self.file = file
        self.line = line

        context = {}
        if file:
            context["file"] = file
        if line is not None:
            context["line"] = line

        super().__init__(
            message=message,
            suggestions=suggestions or list(self.default_suggestions),
            context=context,
        )


class ShapeMismatchError(CheckFailedError):
    """
    Malformed shape input.

    Raised when:
    - A dimension list does not have exactly four entries
    - An axis is negative
    """

    default_suggestions = [
        "Pass exactly four axes in NCHW order: (count, channels, height, width)",
        "Use MatShape.from_size() for a single 2-D plane",
    ]


class OutOfRangeError(CheckFailedError):
    """
    Access outside the valid extent.

    Raised when:
    - An element index is outside its axis
    - A view rectangle has a corner outside the parent extent
    - A wrapped region is smaller than the shape requires
    - An initializer supplies more values than the tensor holds
    """

    default_suggestions = [
        "Check the indices against tensor.shape",
        "Validate rectangles with Rect.contains() before calling view()",
    ]


class UnknownDepthError(CheckFailedError):
    """
    Depth tag with no registered element width or converter.
    """

    default_suggestions = [
        "Use one of the Depth members: UInt8, Int8, UInt16, Int16, Int32, "
        "Float32, Float64",
    ]


class ReleaseError(CheckFailedError):
    """
    Allocation released after its reference count already reached zero.
    """

    default_suggestions = [
        "Release each handle once; share() a handle before releasing it twice",
    ]


class FormatterStateError(CheckFailedError):
    """
    Formatter stepped after reaching its terminal state.
    """

    default_suggestions = [
        "Create a new TensorFormatter for every rendering",
    ]


class ConfigurationError(ChaosError):
    """
    Configuration or setup error.

    Raised when:
    - Invalid configuration parameters
    - Unknown brace set names
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        context = {}
        if config_key:
            context["config_key"] = config_key
        if config_value:
            context["config_value"] = str(config_value)

        suggestions = [
            "Check configuration parameters",
            "Review the CHAOSCV_* environment variables",
        ]

        super().__init__(
            message=f"Configuration error: {message}",
            suggestions=suggestions,
            context=context,
        )


class FlagError(ConfigurationError):
    """
    Unknown or malformed command-line flag.
    """

    def __init__(
        self,
        message: str,
        flag: Optional[str] = None,
        value: Optional[str] = None,
    ):
        self.flag = flag
        super().__init__(message, config_key=flag, config_value=value)


def format_index_error(
    axis: str,
    index: int,
    extent: int,
) -> str:
    """Describe an index outside [0, extent)."""
    return f"Index {index} on axis '{axis}' is outside [0, {extent})"
