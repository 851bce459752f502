"""
Custom exceptions for the Elo challenge system with user-friendly error messages.
"""


class EloException(Exception):
    """Base exception for Elo-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message


class InvalidNameError(EloException):
    """Raised when a registration name is empty after trimming."""
    def __init__(self):
        super().__init__(
            "Registration name is empty",
            "❌ Please provide a non-empty name to register with."
        )


class AlreadyRegisteredError(EloException):
    """Raised when the caller already has a player record."""
    def __init__(self, existing_name: str):
        self.existing_name = existing_name
        super().__init__(
            f"Already registered as '{existing_name}'",
            f"❌ You are already registered as **{existing_name}**."
        )


class CallerNotRegisteredError(EloException):
    """Raised when the caller has no player record."""
    def __init__(self):
        super().__init__(
            "Caller is not registered",
            "❌ You need to register first with `/elo register`."
        )


class UserNotFoundError(EloException):
    """Raised when an explicitly queried player does not exist."""
    def __init__(self, uid: str):
        self.uid = uid
        super().__init__(
            f"Player '{uid}' not found",
            f"❌ <@{uid}> has not registered yet."
        )


class OpponentNotFoundError(UserNotFoundError):
    """Raised when the named opponent of a challenge does not exist."""


class SelfChallengeError(EloException):
    """Raised when a player names themselves as opponent."""
    def __init__(self):
        super().__init__(
            "Cannot challenge oneself",
            "❌ You cannot challenge yourself."
        )


class DuplicateChallengeError(EloException):
    """Raised when the caller already has an open challenge against the opponent."""
    def __init__(self, caller_name: str, opponent_name: str):
        super().__init__(
            f"Pending challenge already exists between '{caller_name}' and '{opponent_name}'",
            f"❌ **{caller_name}**, you already have a pending challenge with **{opponent_name}**. "
            f"Wait for them to confirm it."
        )


class NothingPendingError(EloException):
    """Raised when there is no pending challenge to confirm."""
    def __init__(self, caller_name: str, opponent_name: str):
        super().__init__(
            f"No pending challenge from '{opponent_name}' to '{caller_name}'",
            f"❌ **{opponent_name}** has no pending challenge against you."
        )


class StoreUnavailableError(EloException):
    """Raised when database operations fail."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Database error during {operation}: {details}",
            "❌ Database error occurred. Please try again later."
        )
