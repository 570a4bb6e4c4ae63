"""Shared exceptions for service layer operations."""
from uuid import UUID


class BookmarkNotFoundError(Exception):
    """Raised when an operation references a bookmark id that does not exist."""

    def __init__(self, bookmark_id: UUID) -> None:
        self.bookmark_id = bookmark_id
        super().__init__(f"Bookmark with ID {bookmark_id} not found")


class InvalidStateError(Exception):
    """
    Raised when an operation is invalid for a resource's current state.

    Used when deleting a bookmark that has not been archived first.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
