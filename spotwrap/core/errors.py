"""Failures surfaced to the UI as alerts.

SpotwrapError
    InvalidRedirect         redirect URL does not match the registered callback
    RedirectInProgress      a token exchange is already running
    AuthorizationError
        AccessDenied        user declined the authorization request
        TokenExchangeFailed network, server, or CSRF state mismatch
    MissingTrackReference   track has no URI
    NoAvailableDevice       no unrestricted device with an id
    RequestFailed           read path or play command failed
SupersededRequest is not user-facing: a newer request of the same kind won.
"""
from spotwrap.models.alert import Alert

NO_DEVICE_MESSAGE = (
    "There are no devices available to play content on. "
    "Try opening the Spotify app on one of your devices."
)


class SpotwrapError(Exception):
    """Base for every failure that ends up in front of the user."""

    title = "Something Went Wrong"
    status_code = 500

    def __init__(self, message: str = "", *, title: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if title is not None:
            self.title = title

    def __str__(self) -> str:
        return self.message or self.title

    def alert(self) -> Alert:
        return Alert(title=self.title, message=self.message)


class InvalidRedirect(SpotwrapError):
    title = "Cannot Handle Redirect"
    status_code = 400

    def __init__(self, message: str = "Unexpected URL") -> None:
        super().__init__(message)


class RedirectInProgress(SpotwrapError):
    title = "Login Already In Progress"
    status_code = 409

    def __init__(
        self, message: str = "Still finishing the previous login. Try again in a moment."
    ) -> None:
        super().__init__(message)


class AuthorizationError(SpotwrapError):
    title = "Couldn't Authorize With Your Account"
    status_code = 502


class AccessDenied(AuthorizationError):
    title = "You Denied The Authorization Request :("
    status_code = 403

    def __init__(self) -> None:
        super().__init__("")


class TokenExchangeFailed(AuthorizationError):
    pass


class MissingTrackReference(SpotwrapError):
    title = "Couldn't Play Track"
    status_code = 400

    def __init__(self, message: str = "This track has no Spotify URI.") -> None:
        super().__init__(message)


class NoAvailableDevice(SpotwrapError):
    title = "Couldn't Play Track"
    status_code = 409

    def __init__(self, message: str = NO_DEVICE_MESSAGE) -> None:
        super().__init__(message)


class RequestFailed(SpotwrapError):
    title = "Couldn't Reach Spotify"
    status_code = 502


class SupersededRequest(Exception):
    """A newer request of the same kind was issued; this response is stale."""
