"""Errors and warnings raised by krepko.

This module defines the error and warning types used across the library
to report contract violations raised by assertions, flow file loading
failures, and declaration mistakes in a structured way.

Contract violations derive from `AssertionError`: they are raised by
step authors' assertions and recovered by the owning flow.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump

from krepko.schema.patterns import BasePattern
from krepko.values import MAPPINGS, SCALARS, SEQUENCES, UNDEFINED

if TYPE_CHECKING:
    from pathlib import Path
    from typing import Self

if TYPE_CHECKING:
    from krepko.schema import Mismatch

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2

FORMAT_REPLACER = '<runtime object>'
FORMAT_UNDEFINED = '<undefined>'
FORMAT_INDENT = 4


class ErrorContext(TypedDict, total=False):
    """Location and diagnostic data attached to an error.

    Every field is optional: missing fields are skipped when the
    message is rendered.
    """

    #: Name of the flow file where the error occurred.
    filename: str | None

    #: Name of the flow being executed.
    flow: str | None
    #: Name of the step being executed.
    step: str | None

    #: Diagnostic values rendered as a YAML snippet.
    details: dict[str, Any] | None


class ErrorFormatter:
    """Utility class for formatting krepko errors.

    This formatter produces human-readable error messages with optional
    location lines and a YAML snippet of diagnostic values.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Render an error message with its location and diagnostic values.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            The message followed by location lines and a snippet.
        """
        if not context:
            return message

        location = cls.get_location_string(context, indent=FORMAT_INDENT)
        snippet = cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)

        if location or snippet:
            message += linesep

        return message + location + snippet

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format file, flow and step information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string, or an empty string if no
            location is known.
        """
        indent = cls._ensure_indent(indent)
        message = ''

        if filename := context.get('filename'):
            message += f'{indent}in "{filename}"{linesep}'

        if flow := context.get('flow'):
            message += f'{indent}on flow "{flow}"'
            if step := context.get('step'):
                message += f', step "{step}"'
            message += linesep

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a YAML snippet of diagnostic values.

        Args:
            context: Error context containing diagnostic details.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet string, or an empty string
            if no snippet data is available.
        """
        indent = cls._ensure_indent(indent)

        if not (details := context.get('details')):
            return ''

        snippet = f'{indent}{SNIPPET_ELLIPSIS}'
        snippet += cls._make_yaml(details, indent)
        snippet += linesep

        return snippet

    @classmethod
    def _filter_unsafe(cls, value: Any) -> Any:  # noqa: ANN401
        """Recursively sanitize values for YAML serialization.

        Patterns are rendered with their token form, the undefined
        sentinel with a placeholder, and other non-JSON objects are
        replaced to prevent leaking opaque data.

        Args:
            value: Arbitrary value to sanitize.

        Returns:
            A YAML-safe representation of the value.
        """
        if value is None or isinstance(value, SCALARS):
            return value

        if value is UNDEFINED:
            return FORMAT_UNDEFINED

        if isinstance(value, BasePattern):
            return value.describe()

        if isinstance(value, MAPPINGS):
            return {
                str(key): cls._filter_unsafe(item)
                for key, item in value.items()
            }

        if isinstance(value, SEQUENCES):
            return [
                cls._filter_unsafe(item)
                for item in value
            ]

        return FORMAT_REPLACER

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a value to a YAML-formatted string.

        Args:
            value: Arbitrary value to serialize.
            indent: Optional indentation prefix.

        Returns:
            A YAML-formatted string representation of the value.
        """
        data = dump(
            cls._filter_unsafe(value),
            indent=SNIPPET_INDENT,
            sort_keys=False,
            allow_unicode=True,
        )

        return cls._make_indent(data, indent)

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string.

        Empty or whitespace-only lines are omitted.
        """
        if not indent:
            return value

        return linesep.join(
            f'{indent}{line}'
            for line in value.splitlines()
            if line.strip()
        )

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation input."""
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''


class FlowWarning(UserWarning):
    """Warning emitted for non-fatal flow-related issues.

    Used when a flow file cannot be loaded in relaxed mode, or when
    a flow name is registered twice.
    """


class KrepkoError(Exception, ErrorFormatter):
    """Base exception for all krepko errors.

    All custom exceptions raised by the library inherit from this class
    to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional diagnostic values.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)

    def locate(self, *, flow: str, step: str) -> 'Self':
        """Attach the flow and step the error was raised in.

        A previously attached location is replaced.

        Args:
            flow: Flow name.
            step: Step name.

        Returns:
            The error itself.
        """
        self.context = ErrorContext(**{
            **(self.context or {}),
            'flow': flow,
            'step': step,
        })
        return self


class ConfigurationError(KrepkoError):
    """Error raised for invalid declarations or missing configuration."""


class FlowLoadError(KrepkoError):
    """Error raised when a flow file fails to load."""

    def __init__(self, message: str, *, path: 'Path') -> None:
        """Initialize a flow loading error.

        Args:
            message: Human-readable error description.
            path: Path of the flow file.
        """
        self.path = path

        super().__init__(message, context=ErrorContext(filename=f'{path}'))


class ContractViolation(KrepkoError, AssertionError):
    """Base class for failed response assertions."""

    expected: Any
    received: Any


class StatusMismatchError(ContractViolation):
    """Error raised when a response status differs from the expected one.

    Carries the full response body for diagnosis.
    """

    def __init__(self, message: str, *, expected: int, received: int,
                 body: Any = None) -> None:  # noqa: ANN401
        """Initialize a status mismatch error.

        Args:
            message: Human-readable error description.
            expected: Expected HTTP status code.
            received: Actual HTTP status code.
            body: Parsed response body.
        """
        self.expected = expected
        self.received = received
        self.body = body

        super().__init__(message, context=ErrorContext(details={
            'expected': expected,
            'received': received,
            'body': body,
        }))


class BodyMismatchError(ContractViolation):
    """Error raised when a response body does not match a pattern."""

    def __init__(self, message: str, *, path: str,
                 expected: Any = None, received: Any = None) -> None:  # noqa: ANN401
        """Initialize a body mismatch error.

        Args:
            message: Human-readable error description.
            path: Path of the violating value.
            expected: Expected pattern or value.
            received: Actual value.
        """
        self.path = path
        self.expected = expected
        self.received = received

        super().__init__(message, context=ErrorContext(details={
            'expected': expected,
            'received': received,
        }))

    @classmethod
    def from_mismatch(cls, mismatch: 'Mismatch') -> 'Self':
        """Create an error from a matcher result.

        Args:
            mismatch: First violation found by the matcher.

        Returns:
            BodyMismatchError carrying the mismatch details.
        """
        return cls(
            mismatch.message,
            path=mismatch.path,
            expected=mismatch.expected,
            received=mismatch.received,
        )
