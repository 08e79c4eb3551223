"""
Error taxonomy for the player console.

Every error carries a human readable ``message`` that is safe to surface
through the notifier as-is.
"""

from typing import List, Optional


class ConsoleError(Exception):
    """Base class for all console errors."""

    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingCredentials(ConsoleError):
    """Raised locally when the account or API key is empty. Never reaches the network."""
    default_message = "API key or account is missing"


class Unauthorized(ConsoleError):
    """Raised on HTTP 401."""
    default_message = "Invalid API key or unauthorized access"


class NotFound(ConsoleError):
    """Raised on HTTP 404. Sometimes a valid signal rather than an error."""
    default_message = "Resource not found"


class TransportFailure(ConsoleError):
    """Raised on any other non-2xx status or on a network exception."""
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class StorageError(ConsoleError):
    """Raised when persisted credentials could not be verified after writing."""
    default_message = "Failed to store credentials"


class IncompleteAnswers(ConsoleError):
    """Raised locally when a quiz is submitted with unanswered questions."""
    default_message = "Please answer all questions before submitting"

    def __init__(self, missing: List[str], message: Optional[str] = None):
        super().__init__(message)
        self.missing = missing


class InvalidQuizState(ConsoleError):
    """Raised when a quiz operation is called in a state that does not allow it."""
    default_message = "Quiz operation not allowed in the current state"


class AddPlayerError(ConsoleError):
    """Base class for player creation failures."""
    default_message = "Failed to add player"


class AlreadyExists(AddPlayerError):
    default_message = "A player with this id already exists"


class ProbeFailed(AddPlayerError):
    default_message = "Could not check whether the player already exists"


class CredentialsNotStored(AddPlayerError):
    default_message = "Store your account and API key before adding players"
