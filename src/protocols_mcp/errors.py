"""Protocol Server Errors

Error type shared by the scanner, indexer and tool dispatch layer.

Every failure that can reach a tool caller is a ProtocolError carrying a
machine-readable code. The dispatch layer converts them into error responses;
only directory errors raised while constructing the scanner are fatal.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


# Error codes
PROTOCOL_NOT_FOUND = "PROTOCOL_NOT_FOUND"
TRIGGER_NOT_FOUND = "TRIGGER_NOT_FOUND"
INVALID_PATH = "INVALID_PATH"
INDEX_ERROR = "INDEX_ERROR"
UNKNOWN_TOOL = "UNKNOWN_TOOL"
VALIDATION_ERROR = "VALIDATION_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"
DIRECTORY_NOT_FOUND = "DIRECTORY_NOT_FOUND"
DIRECTORY_NOT_ACCESSIBLE = "DIRECTORY_NOT_ACCESSIBLE"


class ProtocolError(Exception):
    """Raised when a protocol operation cannot complete."""

    def __init__(self, message: str, code: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ProtocolDirectoryError(ProtocolError):
    """Raised when the protocol directory is missing or unreadable."""

    pass


def handle_error(error: BaseException, context: str) -> ProtocolError:
    """
    Normalize any exception into a ProtocolError.

    ProtocolErrors pass through untouched; anything else is wrapped as
    INTERNAL_ERROR with the original message preserved in details.

    Args:
        error: Exception to normalize
        context: Short description of the operation that failed

    Returns:
        ProtocolError instance
    """
    if isinstance(error, ProtocolError):
        return error

    message = str(error) or error.__class__.__name__
    return ProtocolError(
        f"{context}: {message}",
        INTERNAL_ERROR,
        {"original_error": message},
    )


def format_error(error: ProtocolError) -> str:
    """Render an error as the single line shown to tool callers."""
    return f"Error [{error.code}]: {error.message}"
