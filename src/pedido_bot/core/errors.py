"""
Exception hierarchy for the order pipeline.

InputError, NotFoundError and ResolutionError are recoverable within a turn.
AmbiguityError is routing, not failure. OracleError never reaches the user.
SessionCorruptionError and CollaboratorError end the session at the turn boundary.
"""

from typing import Any


class OrderBotError(Exception):
    """Base class for all order bot errors."""


class InputError(OrderBotError):
    """User input could not be interpreted; re-prompt without changing state."""

    def __init__(self, message: str, reprompt: Any = None):
        super().__init__(message)
        self.reprompt = reprompt


class AmbiguityError(OrderBotError):
    """Several catalog products tie for the best score."""

    def __init__(self, phrase: str, candidates: list[Any]):
        super().__init__(f"{len(candidates)} products tie for '{phrase}'")
        self.phrase = phrase
        self.candidates = candidates


class NotFoundError(OrderBotError):
    """No catalog product matches a phrase."""

    def __init__(self, phrase: str):
        super().__init__(f"No product matches '{phrase}'")
        self.phrase = phrase


class ResolutionError(OrderBotError):
    """A tie could not be turned into a presentable choice set."""


class OracleError(OrderBotError):
    """The language-model oracle timed out or answered something unusable."""


class SessionCorruptionError(OrderBotError):
    """Stored session has an unknown tag or malformed data."""


class CollaboratorError(OrderBotError):
    """Storage or messaging collaborator failed."""


class SessionConflictError(CollaboratorError):
    """Compare-and-swap on the session record lost against another writer."""

    def __init__(self, user_id: str, expected_version: int):
        super().__init__(
            f"Session for {user_id} changed concurrently (expected v{expected_version})"
        )
        self.user_id = user_id
        self.expected_version = expected_version
