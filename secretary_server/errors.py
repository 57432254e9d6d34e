"""Exceptions raised by the secretary server operations."""


class SecretaryError(Exception):
    """Base class for all secretary errors."""


class NotFoundError(SecretaryError):
    """Raised when a record with the requested id does not exist."""

    def __init__(self, kind: str, record_id: int) -> None:
        super().__init__(f"{kind} with ID {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class ReviewStateError(SecretaryError):
    """Raised when a review item is not in a state that allows the operation."""


class AssistantError(SecretaryError):
    """Raised when the LLM assistant fails to produce content."""
