"""Domain errors shared by the store implementations and the like controller."""

from __future__ import annotations

UNIQUE_VIOLATION = "23505"


class AuthenticationRequired(Exception):
    """Raised when an operation needs a signed-in actor and there is none."""

    def __init__(self, message: str = "You must be logged in to like prompts") -> None:
        super().__init__(message)
        self.message = message


class RemoteWriteFailure(Exception):
    """An insert or delete was rejected by the remote store.

    Attributes:
        message: Human-readable reason, empty when the store gave none.
        code: Store error code (PostgreSQL SQLSTATE or HTTP status), if known.
    """

    def __init__(self, message: str = "", code: str | None = None) -> None:
        super().__init__(message or "Remote write failed")
        self.message = message
        self.code = code

    @property
    def is_duplicate(self) -> bool:
        return self.code in (UNIQUE_VIOLATION, "409")
