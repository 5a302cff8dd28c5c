from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from pymongo.errors import (
    ExecutionTimeout,
    NetworkTimeout,
    OperationFailure,
    PyMongoError,
    ServerSelectionTimeoutError,
)


class MongopageError(Exception):
    """Base exception for all mongopage errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class UsageError(MongopageError):
    """Raised when the caller breaks the pagination contract."""


class CursorConflictError(UsageError):
    """Raised when a request carries both an 'after' and a 'before' cursor."""

    def __init__(self, message: str = 'Cannot use both "after" and "before" cursors') -> None:
        super().__init__(message)


class SessionStateError(UsageError):
    """Raised when a pagination session is driven out of order or reused."""

    def __init__(self, state: str, operation: str) -> None:
        super().__init__(f"Cannot {operation} a session in state '{state}'")
        self.state = state
        self.operation = operation


class CursorDecodeError(MongopageError):
    """
    Raised internally when a cursor token cannot be verified or parsed.

    Never escapes the codec: decode failures are reported as an invalid
    cursor and the session falls back to the start of the collection.
    """


class CursorSerializationError(MongopageError):
    """Raised when a boundary document holds a key value with no plain form."""


class KeyCoercionError(MongopageError):
    """Raised when a cursor value cannot be converted to the key's type."""

    def __init__(
        self, field: str, value: Any | None = None, original_error: Exception | None = None
    ) -> None:
        super().__init__(f"Cannot coerce cursor value for key '{field}'", original_error)
        self.field = field
        self.value = value


class ExecutorError(MongopageError):
    """Raised when the document store fails to execute a query."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.operation = operation


class ExecutorTimeoutError(ExecutorError):
    """Raised when a query to the document store times out."""


@contextmanager
def handle_executor_errors(operation: str | None = None) -> Generator[None, None, None]:
    """
    Context manager that catches pymongo errors and raises the
    appropriate ExecutorError subclass.

    Args:
        operation: Optional operation name for better error messages

    Usage:
        with handle_executor_errors(operation="count_documents"):
            collection.count_documents(...)
    """
    try:
        yield
    except (ExecutionTimeout, NetworkTimeout, ServerSelectionTimeoutError) as e:
        raise ExecutorTimeoutError(
            message=f"Store query timed out ({operation or 'unknown'}): {e}",
            operation=operation,
            original_error=e,
        ) from e
    except OperationFailure as e:
        raise ExecutorError(
            message=f"Store rejected query ({operation or 'unknown'}, code={e.code}): {e}",
            operation=operation,
            original_error=e,
        ) from e
    except PyMongoError as e:
        raise ExecutorError(
            message=f"Store error ({operation or 'unknown'}): {e}",
            operation=operation,
            original_error=e,
        ) from e
