"""Data models for Last.fm / Audioscrobbler integration."""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

API_ROOT = "http://ws.audioscrobbler.com/2.0"
API_ROOT_POST = "http://post.audioscrobbler.com:80/"
AUTH_URL = "http://www.last.fm/api/auth/"
SUBMISSION_VERSION = "1.2.1"
CLIENT_ID = "mgs"
CLIENT_VERSION = "1.0"

# Generic JSON tree returned by the REST protocol
Payload = Union[Dict[str, Any], List[Any], str, int, float, bool, None]

# Values accepted in request parameter mappings
ParamValue = Union[str, int, float, List[Any], None]


def _field_value(value: Any) -> str:
    """Render an optional legacy form field, None meaning empty."""
    return "" if value is None else str(value)


def _subscriber_flag(value: Any) -> Optional[bool]:
    try:
        return bool(int(value))
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Credentials:
    """API key and shared secret for one client instance.

    Attributes:
        api_key: Last.fm API key
        api_secret: Shared secret used for signing (never logged)
    """

    api_key: str
    api_secret: str = field(repr=False)


@dataclass
class LastfmConfig:
    """Configuration for connecting to Last.fm.

    Attributes:
        api_key: Last.fm API key
        api_secret: Last.fm shared secret
        api_root: REST endpoint root
        post_root: Legacy handshake endpoint
        client_id: Client identifier sent with the handshake
        client_version: Client version sent with the handshake
        timeout: HTTP timeout in seconds
    """

    api_key: str
    api_secret: str = field(repr=False)
    api_root: str = API_ROOT
    post_root: str = API_ROOT_POST
    client_id: str = CLIENT_ID
    client_version: str = CLIENT_VERSION
    timeout: float = 30.0

    def __post_init__(self):
        """Validate configuration on initialization."""
        if not self.api_key:
            raise ValueError("api_key is required")
        if not self.api_secret:
            raise ValueError("api_secret is required")
        for name in ("api_root", "post_root"):
            value = getattr(self, name)
            if not value or not value.startswith(("http://", "https://")):
                raise ValueError(f"{name} must be a valid HTTP/HTTPS URL")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")

    @property
    def credentials(self) -> Credentials:
        return Credentials(api_key=self.api_key, api_secret=self.api_secret)

    @classmethod
    def from_environment(cls) -> "LastfmConfig":
        """Load configuration from environment variables.

        Returns:
            LastfmConfig: Loaded configuration object

        Raises:
            EnvironmentError: If required environment variables are missing
        """
        required = {
            "LASTFM_API_KEY": os.getenv("LASTFM_API_KEY"),
            "LASTFM_API_SECRET": os.getenv("LASTFM_API_SECRET"),
        }
        missing = [var for var, value in required.items() if not value]
        if missing:
            raise EnvironmentError(
                f"Required environment variables missing: {', '.join(missing)}\n"
                f"Example: export LASTFM_API_KEY='your-api-key'"
            )

        return cls(
            api_key=required["LASTFM_API_KEY"],
            api_secret=required["LASTFM_API_SECRET"],
            api_root=os.getenv("LASTFM_API_ROOT", API_ROOT),
            post_root=os.getenv("LASTFM_POST_ROOT", API_ROOT_POST),
            timeout=float(os.getenv("LASTFM_TIMEOUT", "30.0")),
        )


@dataclass(frozen=True)
class Session:
    """Authenticated REST session.

    Attributes:
        session_key: Opaque session key sent as ``sk``
        name: Username the session belongs to (optional)
        subscriber: Whether the user is a subscriber (optional)
    """

    session_key: str
    name: Optional[str] = None
    subscriber: Optional[bool] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Session":
        """Build a Session from an auth.getSession response payload.

        Raises:
            ValueError: If the payload carries no session key
        """
        data = payload.get("session", payload) if isinstance(payload, dict) else {}
        key = data.get("key") if isinstance(data, dict) else None
        if not key:
            raise ValueError("Response payload does not contain a session key")

        return cls(
            session_key=key,
            name=data.get("name"),
            subscriber=_subscriber_flag(data.get("subscriber")),
        )


@dataclass(frozen=True)
class HandshakeResult:
    """Result of a successful legacy handshake.

    Attributes:
        session_id: Session id for now-playing and submission calls
        now_playing_url: URL for now-playing notifications
        submission_url: URL for scrobble submissions
    """

    session_id: str
    now_playing_url: str
    submission_url: str


@dataclass
class NowPlayingOptions:
    """Track currently playing, for a legacy now-playing notification."""

    artist: str
    track: str
    album: Optional[str] = ""
    length: Union[str, int, None] = ""
    number: Union[str, int, None] = ""

    def to_params(self, session_id: str) -> Dict[str, str]:
        return {
            "s": session_id,
            "t": self.track,
            "a": self.artist,
            "b": _field_value(self.album),
            "l": _field_value(self.length),
            "n": _field_value(self.number),
            "m": "",
        }


@dataclass
class ScrobbleEntry:
    """One fully-played track for a legacy submission.

    Attributes:
        artist: Artist name
        track: Track title
        started: Unix timestamp when playback started
        source: Source code, "P" for chosen by the user
        rating: Rating code ("L" love, "B" ban, "S" skip) or empty
        length: Track length in seconds or empty
    """

    artist: str
    track: str
    started: Union[str, int]
    source: Optional[str] = "P"
    rating: Optional[str] = ""
    length: Union[str, int, None] = ""

    def to_params(self, index: int) -> Dict[str, str]:
        return {
            f"a[{index}]": self.artist,
            f"t[{index}]": self.track,
            f"i[{index}]": _field_value(self.started),
            f"o[{index}]": self.source or "P",
            f"r[{index}]": _field_value(self.rating),
            f"l[{index}]": _field_value(self.length),
            f"b[{index}]": "",
            f"n[{index}]": "",
            f"m[{index}]": "",
        }
