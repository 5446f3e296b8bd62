"""
Error taxonomy.

Store errors propagate untouched from the stores; the mutation
coordinators catch them at the user-action boundary and wrap them in a
MutationFailed subclass for the notification layer.
"""

from typing import Any, Optional


class TaskFlowError(Exception):
    """Base for all application errors."""

    default_user_message = "Something went wrong."

    def __init__(
        self,
        message: str,
        *,
        user_message: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.user_message = user_message or self.default_user_message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
            "user_message": self.user_message,
            "context": self.context,
        }


# === Remote / store errors ===

class StoreError(TaskFlowError):
    """Any failure reported by, or while talking to, the remote backend."""


class StoreUnavailable(StoreError):
    """Network, auth or unknown rejection from the backend."""
    default_user_message = "The server could not be reached."


class NotFound(StoreError):
    """Update/delete target does not exist."""
    default_user_message = "That item no longer exists."


class ValidationRejected(StoreError):
    """A record failed schema checks, on either side of the boundary."""
    default_user_message = "The server rejected the data."


# === Session ===

class SessionResolutionFailed(TaskFlowError):
    """Startup identity lookup failed. Never fatal."""
    default_user_message = "Unable to restore your session. Please sign in again."


class AuthFailed(TaskFlowError):
    default_user_message = "Authentication failed."


# === Mutations (what the user sees) ===

class MutationFailed(TaskFlowError):
    """A user-initiated mutation failed; the cause is kept for logs only."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.cause = cause


class CreateFailed(MutationFailed):
    pass


class UpdateFailed(MutationFailed):
    pass


class DeleteFailed(MutationFailed):
    pass


class StatusChangeFailed(MutationFailed):
    pass


class LoadFailed(MutationFailed):
    """Initial or refresh load of a collection failed."""
