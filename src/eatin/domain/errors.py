"""Error types surfaced to the user interface."""


class DiaryError(Exception):
    """Base error carrying a user-facing message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthError(DiaryError):
    """Invalid credentials or a failed call to the identity provider."""


class RemoteError(DiaryError):
    """The record store rejected a request, including authorization denial."""


class SubscriptionError(DiaryError):
    """Subscribing to session change events failed."""
