# directo/exceptions.py
"""
Custom exception hierarchy for the Directo XMLCore SDK.

Provides specific exception types for different error scenarios,
making error handling more precise and meaningful.

None of these are retried internally - the caller decides.
Contexts never carry the API token.
"""

from typing import Optional, Any, Dict, List
from dataclasses import dataclass


@dataclass
class ErrorContext:
    """
    Structured error context for debugging.

    Attributes:
        operation: What operation was being performed (list, put)
        resource: Directo resource name ("what" parameter)
        endpoint: Endpoint definition class name
        details: Additional error details (filters, record counts, ...)
    """

    operation: Optional[str] = None
    resource: Optional[str] = None
    endpoint: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            k: v for k, v in {
                'operation': self.operation,
                'resource': self.resource,
                'endpoint': self.endpoint,
                'details': self.details
            }.items() if v is not None
        }

    @classmethod
    def coerce(cls, context: Optional[Any]) -> Optional['ErrorContext']:
        """Accept an ErrorContext or a plain mapping of its fields (extra keys go to details)."""
        if context is None or isinstance(context, cls):
            return context
        known = {k: context[k] for k in ('operation', 'resource', 'endpoint', 'details') if k in context}
        extra = {k: v for k, v in context.items() if k not in known}
        if extra:
            known['details'] = {**(known.get('details') or {}), **extra}
        return cls(**known)

    def with_details(self, **details: Any) -> 'ErrorContext':
        """Return a copy with extra detail entries merged in."""
        merged = dict(self.details or {})
        merged.update(details)
        return ErrorContext(
            operation=self.operation,
            resource=self.resource,
            endpoint=self.endpoint,
            details=merged
        )


class DirectoError(Exception):
    """
    Base exception for all SDK errors.

    Provides common functionality for all custom exceptions.
    """

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        """
        Initialize base exception.

        Args:
            message: Error message
            context: Optional error context for debugging
        """
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(message)

    def __str__(self) -> str:
        """Format exception with context."""
        base_msg = super().__str__()
        if self.context.operation:
            return f"{base_msg} (during {self.context.operation})"
        return base_msg


# Response-level exceptions

class ApiError(DirectoError):
    """
    Raised when a Directo error payload is found in an otherwise successful response.

    Attributes:
        errors: All extracted error messages, in document order
        raw_xml: The response body exactly as received
    """

    def __init__(self, message: str,
                 errors: List[str],
                 raw_xml: str,
                 context: Optional[ErrorContext] = None):
        super().__init__(message, context)
        self.errors = list(errors)
        self.raw_xml = raw_xml

    def has_multiple_errors(self) -> bool:
        """Check if more than one error message was extracted."""
        return len(self.errors) > 1

    def formatted_errors(self) -> List[str]:
        """Errors as a numbered list: '[1] first', '[2] second'."""
        return [f"[{i}] {error}" for i, error in enumerate(self.errors, start=1)]


class MalformedInputError(DirectoError):
    """
    Raised when a non-empty response body is not well-formed XML.

    Attributes:
        xml_errors: Parser diagnostics as dicts with line, column, code, message
        raw_xml: The text that failed to parse
    """

    def __init__(self, message: str,
                 xml_errors: Optional[List[Dict[str, Any]]] = None,
                 raw_xml: str = '',
                 context: Optional[ErrorContext] = None):
        super().__init__(message, context)
        self.xml_errors = list(xml_errors or [])
        self.raw_xml = raw_xml

    def formatted_errors(self) -> List[str]:
        """Diagnostics formatted as '[FATAL] Line L, Column C: message'."""
        return [
            f"[{error.get('level', 'FATAL')}] Line {error.get('line')}, "
            f"Column {error.get('column')}: {str(error.get('message', '')).strip()}"
            for error in self.xml_errors
        ]

    def get_raw_xml(self, max_length: int = 1000) -> str:
        """Raw text, truncated to max_length characters."""
        if len(self.raw_xml) <= max_length:
            return self.raw_xml
        return self.raw_xml[:max_length] + '... (truncated)'


class SchemaValidationError(DirectoError):
    """
    Raised when request or response XML does not conform to an XSD.

    Only possible when schema validation is enabled in Config.

    Attributes:
        validation_errors: Diagnostics as dicts with path, line, reason
        schema_path: Local path of the XSD that was used
    """

    def __init__(self, message: str,
                 validation_errors: Optional[List[Dict[str, Any]]] = None,
                 schema_path: str = '',
                 context: Optional[ErrorContext] = None):
        super().__init__(message, context)
        self.validation_errors = list(validation_errors or [])
        self.schema_path = schema_path

    def formatted_errors(self) -> List[str]:
        """Diagnostics formatted as '[ERROR] Line L (path): reason'."""
        formatted = []
        for error in self.validation_errors:
            location = f"Line {error['line']}" if error.get('line') else "Line ?"
            if error.get('path'):
                location = f"{location} ({error['path']})"
            formatted.append(f"[ERROR] {location}: {error.get('reason') or ''}".rstrip())
        return formatted


# Request-level exceptions

class InvalidFilterError(DirectoError):
    """
    Raised when a list() call gets an unknown filter key or a non-primitive value.

    This is a programmer error - fail fast, never retried.
    """

    @classmethod
    def unknown_filters(cls, unknown_keys: List[str],
                        allowed_keys: List[str],
                        endpoint: str) -> 'InvalidFilterError':
        """Build the error for filter keys outside the allow-list."""
        unknown = ', '.join(unknown_keys)
        allowed = ', '.join(allowed_keys)
        return cls(
            f'Unknown filter(s) [{unknown}] for endpoint "{endpoint}". '
            f'Allowed filters: [{allowed}]',
            context=ErrorContext(
                operation='list',
                resource=endpoint,
                details={
                    'unknown_filters': list(unknown_keys),
                    'allowed_filters': list(allowed_keys)
                }
            )
        )

    @classmethod
    def invalid_value_type(cls, key: str, value: Any, endpoint: str) -> 'InvalidFilterError':
        """Build the error for a filter value that cannot be rendered as a string."""
        value_type = type(value).__name__
        return cls(
            f'Filter "{key}" for endpoint "{endpoint}" must be a scalar or '
            f'string-convertible value, got "{value_type}"',
            context=ErrorContext(
                operation='list',
                resource=endpoint,
                details={'filter_key': key, 'value_type': value_type}
            )
        )


# Transport exceptions

class TransportError(DirectoError):
    """Raised when the HTTP request could not be completed (connection, timeout, client error)."""
    pass


class HttpError(DirectoError):
    """
    Raised when the server answers with a non-2xx status.

    Attributes:
        status_code: HTTP status code
        response_body: Raw response body
    """

    def __init__(self, message: str,
                 status_code: int,
                 response_body: str = '',
                 context: Optional[ErrorContext] = None):
        super().__init__(message, context)
        self.status_code = status_code
        self.response_body = response_body


# Configuration exceptions

class ConfigurationError(DirectoError):
    """
    Raised when configuration is invalid or missing.

    Attributes:
        config_key: Specific configuration key that caused the error
    """

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        if config_key:
            message = f"{message} (key: {config_key})"
        super().__init__(message, **kwargs)
        self.config_key = config_key


class ConfigValidationError(ConfigurationError):
    """
    Raised when a configuration file fails JSON Schema validation.

    Attributes:
        error_path: Location of the failing value ("root" for top level)
    """

    def __init__(self, message: str, error_path: str = 'root', **kwargs):
        super().__init__(message, **kwargs)
        self.error_path = error_path


# Helpful error with instructions

class HelpfulError(DirectoError):
    """
    Exception that provides helpful instructions to fix the problem.

    Used for user-friendly error messages with solutions.
    """

    def __init__(self, what_went_wrong: str,
                 how_to_fix: str,
                 example: Optional[str] = None):
        """
        Initialize helpful error.

        Args:
            what_went_wrong: Description of the problem
            how_to_fix: Instructions to fix it
            example: Optional example of correct usage
        """
        message = f"\n❌ Problem: {what_went_wrong}\n\n✅ Solution: {how_to_fix}"
        if example:
            message += f"\n\n📝 Example:\n{example}"
        super().__init__(message)
        self.what_went_wrong = what_went_wrong
        self.how_to_fix = how_to_fix
        self.example = example
