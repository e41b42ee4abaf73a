"""
Custom exception hierarchy for the Tracked Attachments Console.

This module provides the exception system shared by every layer:
- Hierarchical exception classes
- Error codes for programmatic handling
- User-friendly error messages
- Error context and recovery suggestions
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(Enum):
    """Error codes for programmatic exception handling."""

    # General errors (1000-1999)
    UNKNOWN_ERROR = 1000
    CONFIGURATION_ERROR = 1001
    VALIDATION_ERROR = 1002

    # Network errors (2000-2999)
    NETWORK_CONNECTION_ERROR = 2000
    NETWORK_TIMEOUT_ERROR = 2001

    # Remote API errors (3000-3999)
    REMOTE_ERROR = 3000
    REMOTE_VALIDATION_ERROR = 3001
    REMOTE_NOT_FOUND = 3002

    # File errors (5000-5999)
    FILE_READ_ERROR = 5000
    FILE_WRITE_ERROR = 5001

    # Worker errors (7000-7999)
    WORKER_EXECUTION_ERROR = 7001


class TrackedAttachmentsException(Exception):
    """Base exception class for the Tracked Attachments Console."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        context: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
        recoverable: bool = True,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Programmatic error code
            context: Additional context information
            suggestion: Recovery suggestion for users
            recoverable: Whether error is recoverable
            original_exception: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.suggestion = suggestion
        self.recoverable = recoverable
        self.original_exception = original_exception

    def get_user_message(self) -> str:
        """Get user-friendly error message."""
        user_msg = self.message
        if self.suggestion:
            user_msg += f"\n\nSuggestion: {self.suggestion}"
        return user_msg

    def get_full_context(self) -> Dict[str, Any]:
        """Get complete error context."""
        context = {
            'error_code': self.error_code.value,
            'error_name': self.error_code.name,
            'message': self.message,
            'recoverable': self.recoverable,
            'suggestion': self.suggestion,
            'context': self.context
        }

        if self.original_exception:
            context['original_exception'] = {
                'type': type(self.original_exception).__name__,
                'message': str(self.original_exception)
            }

        return context


class ConfigurationError(TrackedAttachmentsException):
    """Configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if config_key:
            context['config_key'] = config_key

        super().__init__(
            message,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            context=context,
            suggestion="Check configuration files and environment variables",
            **kwargs
        )


# File related exceptions
class FileReadError(TrackedAttachmentsException):
    """A selected file could not be read or encoded."""

    def __init__(self, message: str, filepath: Optional[str] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if filepath:
            context['filepath'] = filepath

        super().__init__(
            message,
            error_code=kwargs.pop('error_code', ErrorCode.FILE_READ_ERROR),
            context=context,
            suggestion="Check that the file exists and is readable",
            **kwargs
        )


class FileWriteError(FileReadError):
    """A decoded payload could not be written to disk."""

    def __init__(self, message: str, filepath: Optional[str] = None, **kwargs):
        super().__init__(message, filepath, error_code=ErrorCode.FILE_WRITE_ERROR, **kwargs)


# Network related exceptions
class NetworkError(TrackedAttachmentsException):
    """Base class for transport-level failures talking to the API."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if url:
            context['url'] = url

        super().__init__(
            message,
            error_code=kwargs.pop('error_code', ErrorCode.NETWORK_CONNECTION_ERROR),
            context=context,
            suggestion=kwargs.pop('suggestion', "Check the API URL and network connection"),
            **kwargs
        )


class NetworkTimeoutError(NetworkError):
    """Network timeout errors."""

    def __init__(self, message: str, timeout: Optional[float] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if timeout:
            context['timeout'] = timeout

        super().__init__(
            message,
            error_code=ErrorCode.NETWORK_TIMEOUT_ERROR,
            context=context,
            suggestion="Increase api.timeout or check network stability",
            **kwargs
        )


# Remote API exceptions
class RemoteError(TrackedAttachmentsException):
    """The API answered with an error envelope."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if status_code is not None:
            context['status_code'] = status_code

        super().__init__(
            message,
            error_code=kwargs.pop('error_code', ErrorCode.REMOTE_ERROR),
            context=context,
            suggestion=kwargs.pop('suggestion', "Correct the request and try again"),
            **kwargs
        )
        self.status_code = status_code


class ValidationError(RemoteError):
    """The API rejected the submitted fields."""

    def __init__(self, message: str, status_code: Optional[int] = None, field: Optional[str] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if field:
            context['field'] = field

        super().__init__(
            message,
            status_code=status_code,
            error_code=ErrorCode.REMOTE_VALIDATION_ERROR,
            context=context,
            suggestion="Please check the input data and try again",
            **kwargs
        )


class NotFoundError(RemoteError):
    """The referenced attachment no longer exists."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(
            message,
            status_code=status_code,
            error_code=ErrorCode.REMOTE_NOT_FOUND,
            suggestion="Reload the list, the attachment may have been deleted",
            **kwargs
        )


class WorkerError(TrackedAttachmentsException):
    """Background task errors."""

    def __init__(self, message: str, worker_type: Optional[str] = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if worker_type:
            context['worker_type'] = worker_type

        super().__init__(
            message,
            error_code=ErrorCode.WORKER_EXECUTION_ERROR,
            context=context,
            suggestion="Try restarting the operation",
            **kwargs
        )


# Exception utilities
def handle_exception(exception: Exception, context: Optional[Dict[str, Any]] = None) -> TrackedAttachmentsException:
    """
    Convert a generic exception to a TrackedAttachmentsException.

    Args:
        exception: Original exception
        context: Additional context

    Returns:
        TrackedAttachmentsException instance
    """
    if isinstance(exception, TrackedAttachmentsException):
        return exception

    exception_type = type(exception).__name__
    message = str(exception)

    if isinstance(exception, OSError) or "file" in message.lower() or "path" in message.lower():
        return FileReadError(
            f"File error: {message}",
            context=context,
            original_exception=exception
        )
    elif "timeout" in message.lower():
        return NetworkTimeoutError(
            f"Timeout error: {message}",
            context=context,
            original_exception=exception
        )
    elif "connection" in message.lower() or "network" in message.lower():
        return NetworkError(
            f"Network error: {message}",
            context=context,
            original_exception=exception
        )
    else:
        return TrackedAttachmentsException(
            f"Unexpected error ({exception_type}): {message}",
            context=context,
            original_exception=exception
        )
