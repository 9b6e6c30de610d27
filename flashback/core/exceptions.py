"""
Custom exceptions for the application.
"""


class FlashbackException(Exception):
    """Base exception for all Flashback application exceptions."""
    pass


class ValidationError(FlashbackException):
    """Raised when validation fails."""
    pass


class NotFoundError(FlashbackException):
    """Raised when a referenced card, item, review or review session does not exist."""
    pass


class ConflictError(FlashbackException):
    """Raised when there's a conflict (e.g., duplicate entry)."""
    pass


class InvalidTransitionError(FlashbackException):
    """Raised when a review or session transition is attempted from a state that does not allow it."""
    pass


class CommitFailureError(FlashbackException):
    """
    Raised when a review session's terminal commit did not go through.

    Nothing from the commit is persisted and the session stays STARTED;
    the caller may retry the whole commit or cancel the session.
    """
    pass
