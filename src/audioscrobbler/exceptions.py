"""Exception classes for the Last.fm / Audioscrobbler client."""

from typing import Optional


class LastfmError(Exception):
    """Base exception for all Last.fm client errors.

    Attributes:
        message: Human-readable error message
    """

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class AuthenticationError(LastfmError):
    """Handshake credentials were rejected (status BADAUTH).

    The handshake must not be retried until the credentials are fixed.
    """

    def __init__(self, message: str = "Authentication failed. Check credentials and try again."):
        super().__init__(message)


class SessionRequiredError(AuthenticationError):
    """A session-authenticated REST call was made with no session set."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Method {method} requires an authenticated session")


class ClientBannedError(LastfmError):
    """This client id/version has been banned by the server (status BANNED)."""

    def __init__(self, message: str = "Please update your client to a newer version."):
        super().__init__(message)


class ClockSkewError(LastfmError):
    """Handshake timestamp too far from server time (status BADTIME).

    Attributes:
        timestamp: The unix timestamp sent with the rejected handshake
    """

    def __init__(self, timestamp: str):
        self.timestamp = timestamp
        super().__init__(f"Not close enough to current time: {timestamp}")


class SessionInvalidError(LastfmError):
    """Legacy session id rejected (status BADSESSION); handshake again."""

    def __init__(self, message: str = "Session is invalid. A new handshake is required."):
        super().__init__(message)


class HandshakeRequiredError(LastfmError):
    """A legacy submission call was made before a successful handshake."""

    def __init__(self, message: str = "No handshake has been performed on this client."):
        super().__init__(message)


class TransientRequestFailure(LastfmError):
    """Legacy request failed with a server-supplied reason.

    Retrying is left to the caller.

    Attributes:
        reason: The status line returned by the server
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class ResponseDecodeError(LastfmError):
    """Response body could not be decoded as UTF-8 text."""

    pass


class ApiError(LastfmError):
    """REST API returned an error payload.

    Attributes:
        code: Last.fm error code (None if the payload had none)
        message: Error message from server
    """

    def __init__(self, code: Optional[int], message: str):
        self.code = code
        super().__init__(message)

    def __str__(self) -> str:
        if self.code is None:
            return f"Last.fm Error: {self.message}"
        return f"Last.fm Error {self.code}: {self.message}"
