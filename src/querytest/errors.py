"""Core exception hierarchy.

This module defines base error and warning types used across the library
to report malformed scenario files, client plugin loading issues, and
query dispatch failures in a structured and extensible way.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump

if TYPE_CHECKING:
    from importlib.metadata import EntryPoint
    from typing import Self

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails, ValidationError
    from xml.parsers.expat import ExpatError

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2

FORMAT_FILENAME = '<unicode string>'
FORMAT_INDENT = 4


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values.
    """

    #: Name of the source file where the error occurred.
    filename: str | None

    #: Line number in the source file (1-based).
    line_num: int | None
    #: Column number in the source file (1-based).
    column_num: int | None

    #: Name of the XML element being processed.
    element: str | None
    #: Attributes of the XML element being processed.
    attributes: dict[str, str] | None

    #: Underlying exception that triggered formatting.
    error: Exception | None


class ErrorFormatter:
    """Utility class for formatting scenario-related errors.

    This formatter is responsible for producing human-readable
    error messages with optional source location and YAML-based
    snippets of the offending element.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        message += linesep
        message += cls.get_location_string(context, indent=FORMAT_INDENT)
        message += cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)

        return message.rstrip()

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format source location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string including filename, line,
            column and element name when available.
        """
        indent = cls._ensure_indent(indent)

        filename = context.get('filename')
        if not filename:
            filename = FORMAT_FILENAME

        message = f'{indent}in "{filename}"'
        if (line_num := context.get('line_num')) is not None:
            message += f', line {line_num}'
            if (column_num := context.get('column_num')) is not None:
                message += f', column {column_num}'
        message += linesep

        if element := context.get('element'):
            message += f'{indent}on element <{element}>{linesep}'

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a YAML snippet of the element attributes.

        Args:
            context: Error context containing element data.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet string, or an empty string
            if no snippet data is available.
        """
        indent = cls._ensure_indent(indent)

        element = context.get('element')
        attributes = context.get('attributes')
        if not element or attributes is None:
            return ''

        snippet = f'{indent}{SNIPPET_ELLIPSIS}'
        snippet += cls._make_yaml({element: attributes or None}, indent)
        snippet += linesep

        return snippet

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a value to a YAML-formatted string.

        Args:
            value: Plain value to serialize.
            indent: Optional indentation prefix.

        Returns:
            A YAML-formatted string representation of the value.
        """
        data = dump(
            value,
            indent=SNIPPET_INDENT,
            sort_keys=False,
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


class ClientWarning(UserWarning):
    """Warning emitted for non-fatal client plugin issues.

    This warning is used when a client factory cannot be loaded or is
    shadowed by another one, but the problem does not prevent further
    execution (when running in relaxed mode).
    """


class QueryTestError(Exception, ErrorFormatter):
    """Base exception for all querytest errors.

    All custom exceptions raised by the library should inherit from
    this class to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional location values.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)


class ConfigurationError(QueryTestError):
    """Error raised when a scenario file is malformed.

    Covers XML syntax errors, missing or empty required attributes and
    parameter literals that do not match their declared type. The error
    is fatal and aborts the run before any query is dispatched.
    """

    @classmethod
    def from_xml_error(cls, error: 'ExpatError', *,
                       filename: str | None = None) -> 'Self':
        """Create a configuration error from an XML syntax failure.

        Args:
            error: Exception raised by the expat parser.
            filename: Name of the source file.

        Returns:
            ConfigurationError with the position of the syntax error.
        """
        from xml.parsers.expat import ErrorString  # noqa: PLC0415

        error_context = ErrorContext(
            filename=filename,
            line_num=error.lineno,
            column_num=error.offset + 1,
            error=error,
        )

        message = 'Invalid XML'
        if error.code is not None:
            message += f'{linesep}{' ' * FORMAT_INDENT}{ErrorString(error.code)}'

        return cls(message, context=error_context)

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,  # noqa: PLR0913
                            element: str,
                            attributes: dict[str, str],
                            filename: str | None = None,
                            line_num: int | None = None,
                            column_num: int | None = None) -> 'Self':
        """Create a configuration error from an attribute validation failure.

        The first reported issue is turned into a message naming the
        offending attribute.

        Args:
            error: ValidationError raised by Pydantic.
            element: Name of the element whose attributes were validated.
            attributes: Raw element attributes.
            filename: Name of the source file.
            line_num: Line of the element start tag.
            column_num: Column of the element start tag.

        Returns:
            ConfigurationError describing the invalid attribute.
        """
        error_context = ErrorContext(
            filename=filename,
            line_num=line_num,
            column_num=column_num,
            element=element,
            attributes=attributes,
            error=error,
        )

        if items := error.errors(include_url=False, include_input=False):
            return cls(cls._describe_pydantic_error(element, items[0]), context=error_context)

        return cls(f'Invalid <{element}> element', context=error_context)  # pragma: no cover

    @staticmethod
    def _describe_pydantic_error(element: str, error: 'ErrorDetails') -> str:
        """Build a one-line message for a single validation issue.

        Args:
            element: Name of the validated element.
            error: Pydantic error details including location path.

        Returns:
            Human-readable message.
        """
        attribute = next((str(key) for key in error['loc'] if isinstance(key, str)), None)

        if attribute is None:
            message = (error.get('msg') or 'invalid value').removeprefix('Value error, ')
            return f'Invalid <{element}> element: {message}'

        if error['type'] == 'missing':
            return f'Missing required attribute {attribute!r} of <{element}>'

        if error['type'] == 'string_too_short':
            return f'Empty required attribute {attribute!r} of <{element}>'

        return f'Invalid attribute {attribute!r} of <{element}>: {error.get('msg')}'


class ClientError(QueryTestError):
    """Error raised for fatal client plugin failures.

    This exception is raised when a client entry point is invalid,
    misconfigured, or fails to load in strict mode, and when a client
    cannot be created for the scenario namespace.
    """

    def __init__(self, message: str, *,
                 entrypoint: 'EntryPoint | None' = None) -> None:
        """Initialize a client error.

        Args:
            message: Human-readable error description.
            entrypoint: Optional entry point associated with the error.
        """
        self.entrypoint = entrypoint

        super().__init__(message)


class DispatchError(QueryTestError):
    """Error raised by a query client when a named query fails to execute.

    Clients raise this exception (or a subclass) from `execute`. The
    optional `code` carries the client-specific error code.
    """

    def __init__(self, message: str, *, code: int | None = None) -> None:
        """Initialize a dispatch error.

        Args:
            message: Human-readable error description.
            code: Optional client-specific error code.
        """
        self.code = code

        super().__init__(message)


class ValidationMismatch(DispatchError):
    """Dispatch succeeded but the result shape disagrees with its declaration.

    This is a soft failure: it is reported as a warning and never marks
    the run as failed.
    """


class DispatchFailure(QueryTestError):
    """Hard failure of a query inside a test transaction.

    Raised by a tester and caught at transaction level: the transaction
    is marked failed and the run result becomes a failure.
    """

    def __init__(self, message: str, *, query_name: str) -> None:
        """Initialize a dispatch failure.

        Args:
            message: Human-readable error description.
            query_name: Name of the failed query.
        """
        self.query_name = query_name

        super().__init__(message)

    @classmethod
    def from_dispatch_error(cls, error: DispatchError, query_name: str) -> 'Self':
        """Wrap a client dispatch error for the given query."""
        return cls(error.message, query_name=query_name)
