class ReviewError(Exception):
    """Base class for recoverable review/session errors."""


class EmptyQueue(ReviewError):
    """Raised when a session is started with no candidate cards."""


class PersistenceFailure(ReviewError):
    """Raised when the card store rejects a write."""

    def __init__(self, card_id: str, reason: str = "write rejected"):
        super().__init__(f"Could not persist card {card_id}: {reason}")
        self.card_id = card_id
        self.reason = reason


class InvalidQuality(ReviewError, ValueError):
    """Raised for a rating outside Fail/Good/Easy."""


class SessionStateError(ReviewError):
    """Raised when an operation is not valid in the session's current state."""
