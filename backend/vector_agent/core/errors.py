"""Error taxonomy shared by services and the HTTP layer."""

from __future__ import annotations


class VectorAgentError(Exception):
    """Base exception for all Vector Agent errors.

    ``public_message`` is what callers see; the exception text itself is only
    logged.
    """

    status_code: int = 500
    public_message: str = "Internal server error"


class ValidationError(VectorAgentError):
    """Raised when a request is missing a required field or is malformed.

    Examples: chat without any user message, blank vector store name.
    """

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.public_message = message


class NotFoundError(VectorAgentError):
    """Raised when a referenced vector store or file does not exist."""

    status_code = 404

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} {identifier} not found")
        self.kind = kind
        self.identifier = identifier
        self.public_message = f"{kind.capitalize()} not found"


class ConflictError(VectorAgentError):
    """Raised when a file is attached to the same vector store twice."""

    status_code = 409

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.public_message = message


class UpstreamProviderError(VectorAgentError):
    """Raised when an embedding, completion, web search or URL fetch call fails."""

    status_code = 502
    public_message = "Upstream provider request failed"


class StorageError(VectorAgentError):
    """Raised when blob or chunk persistence fails."""

    status_code = 500
    public_message = "Storage operation failed"


class ProcessingError(VectorAgentError):
    """Raised inside background ingestion; recorded on the file row, never returned."""


__all__ = [
    "VectorAgentError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "UpstreamProviderError",
    "StorageError",
    "ProcessingError",
]
