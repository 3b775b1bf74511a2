"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class BaseAppError(Exception):
    """Base exception class for application errors."""

    kind = "app_error"

    def details(self) -> dict[str, Any]:
        """Extra structured fields carried to the caller alongside the message."""
        return {}


class ConfigurationError(BaseAppError):
    """Exception raised for configuration errors."""

    kind = "configuration"


class SchemaValidationError(BaseAppError):
    """Exception raised when call arguments do not match the declared schema."""

    kind = "schema_validation"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def details(self) -> dict[str, Any]:
        return {"field": self.field} if self.field else {}


class UnknownOperationError(BaseAppError):
    """Exception raised when no tool or prompt is registered under a name."""

    kind = "unknown_operation"


class SymbolNotFoundError(BaseAppError):
    """Exception raised when a symbol query matches no workspace symbol."""

    kind = "symbol_not_found"


class AmbiguousSymbolError(BaseAppError):
    """Exception raised when a symbol query matches several symbols."""

    kind = "ambiguous_symbol"

    def __init__(self, query: str, candidates: list[str]):
        listing = "\n".join(f"  - {c}" for c in candidates)
        super().__init__(
            f"Ambiguous symbol '{query}' matches {len(candidates)} symbols:\n{listing}"
        )
        self.query = query
        self.candidates = candidates

    def details(self) -> dict[str, Any]:
        return {"query": self.query, "candidates": list(self.candidates)}


class BackendRequestError(BaseAppError):
    """Exception raised when the language server fails, times out or crashes."""

    kind = "backend_request"

    def __init__(self, message: str, method: Optional[str] = None):
        super().__init__(message)
        self.method = method

    def details(self) -> dict[str, Any]:
        return {"method": self.method} if self.method else {}


class InvalidEditRangeError(BaseAppError):
    """Exception raised for overlapping or out-of-bounds text edits."""

    kind = "invalid_edit_range"


class IndexOutOfRangeError(BaseAppError):
    """Exception raised when a code lens index is not valid for the current list."""

    kind = "index_out_of_range"

    def __init__(self, index: int, count: int):
        super().__init__(
            f"Code lens index {index} is out of range: the file currently has "
            f"{count} code lens(es); call get_codelens again"
        )
        self.index = index
        self.count = count

    def details(self) -> dict[str, Any]:
        return {"index": self.index, "count": self.count}


class FileIOError(BaseAppError):
    """Exception raised when a file cannot be read or written."""

    kind = "file_io"


class DocumentNotSynchronizedError(BaseAppError):
    """Exception raised when the backend holds no diagnostics state for a document."""

    kind = "document_not_synchronized"


class OperationCancelledError(BaseAppError):
    """Exception raised when the caller cancelled the call."""

    kind = "operation_cancelled"
