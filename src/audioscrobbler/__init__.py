"""Last.fm / Audioscrobbler client module."""

__version__ = "1.0.0"

from .auth import build_method_signature, generate_handshake_token, sign_params, verify_signature
from .client import LastfmClient
from .exceptions import (
    ApiError,
    AuthenticationError,
    ClientBannedError,
    ClockSkewError,
    HandshakeRequiredError,
    LastfmError,
    ResponseDecodeError,
    SessionInvalidError,
    SessionRequiredError,
    TransientRequestFailure,
)
from .models import (
    Credentials,
    HandshakeResult,
    LastfmConfig,
    NowPlayingOptions,
    ScrobbleEntry,
    Session,
)
from .response import Failure, LegacyResponse, Success, decode_json, decode_legacy

__all__ = [
    # Client
    "LastfmClient",
    # Models
    "LastfmConfig",
    "Credentials",
    "Session",
    "HandshakeResult",
    "NowPlayingOptions",
    "ScrobbleEntry",
    # Responses
    "Success",
    "Failure",
    "LegacyResponse",
    "decode_json",
    "decode_legacy",
    # Signing
    "generate_handshake_token",
    "build_method_signature",
    "sign_params",
    "verify_signature",
    # Exceptions
    "LastfmError",
    "AuthenticationError",
    "SessionRequiredError",
    "ClientBannedError",
    "ClockSkewError",
    "SessionInvalidError",
    "HandshakeRequiredError",
    "TransientRequestFailure",
    "ResponseDecodeError",
    "ApiError",
]
