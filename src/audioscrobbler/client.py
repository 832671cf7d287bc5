"""HTTP client for the Last.fm web services."""

import logging
import time
from typing import Dict, Iterable, List, Mapping, Optional, Union

import httpx

from .auth import generate_handshake_token, sign_params
from .categories import Auth, Scrobble, Track
from .exceptions import (
    ApiError,
    AuthenticationError,
    ClientBannedError,
    ClockSkewError,
    HandshakeRequiredError,
    SessionInvalidError,
    SessionRequiredError,
    TransientRequestFailure,
)
from .models import (
    SUBMISSION_VERSION,
    HandshakeResult,
    LastfmConfig,
    NowPlayingOptions,
    ParamValue,
    Payload,
    ScrobbleEntry,
    Session,
)
from .response import (
    STATUS_BADAUTH,
    STATUS_BADSESSION,
    STATUS_BADTIME,
    STATUS_BANNED,
    Failure,
    LegacyResponse,
    decode_json,
    decode_legacy,
)

logger = logging.getLogger(__name__)

# Submission protocol limit on scrobbles per request
MAX_SUBMISSION_ENTRIES = 50


class LastfmClient:
    """Synchronous HTTP client for Last.fm.

    This client implements:
    - The Audioscrobbler 1.2.1 handshake, now-playing and submission calls
    - Signed REST API 2.0 requests
    - Typed exceptions for every failure status

    Each public call performs exactly one request. Nothing is retried.

    Attributes:
        config: LastfmConfig with endpoints and credentials
        client: httpx.Client for HTTP requests
        handshake_result: Result of the last successful handshake, if any

    Example:
        >>> config = LastfmConfig(api_key="key", api_secret="secret")
        >>> with LastfmClient(config) as client:
        ...     client.handshake("rj", session="sk")
        ...     client.now_playing(artist="Cher", track="Believe")
    """

    def __init__(self, config: LastfmConfig, session: Optional[Session] = None):
        """Initialize Last.fm client.

        Args:
            config: LastfmConfig with API key and secret
            session: Previously obtained REST session (optional)
        """
        self.config = config
        self._credentials = config.credentials
        self._session = session
        self.handshake_result: Optional[HandshakeResult] = None

        self.client = httpx.Client(
            base_url=config.api_root.rstrip("/"),
            timeout=httpx.Timeout(config.timeout),
            follow_redirects=True,
            headers={"User-Agent": f"{config.client_id}/{config.client_version}"},
        )

        logger.info(f"Initialized Last.fm client for {config.api_root}")

    @property
    def session(self) -> Optional[Session]:
        """Current REST session, None until authenticated."""
        return self._session

    @session.setter
    def session(self, value: Optional[Session]) -> None:
        self._session = value

    @property
    def auth(self) -> Auth:
        return Auth(self)

    @property
    def track(self) -> Track:
        return Track(self)

    @property
    def scrobble(self) -> Scrobble:
        return Scrobble(self)

    # Legacy submission protocol

    def handshake(
        self,
        user: str,
        session: Optional[str] = None,
        timestamp: Optional[int] = None,
    ) -> HandshakeResult:
        """Perform the submission protocol handshake.

        Args:
            user: Last.fm username
            session: REST session key authorizing the handshake
            timestamp: Unix time to send (defaults to now)

        Returns:
            HandshakeResult with session id and submission URLs

        Raises:
            ClientBannedError: Server answered BANNED
            AuthenticationError: Server answered BADAUTH
            ClockSkewError: Server answered BADTIME
            TransientRequestFailure: Any other status, or an incomplete OK
            httpx.HTTPError: For network errors
        """
        ts = str(int(time.time()) if timestamp is None else int(timestamp))
        params = {
            "hs": "true",
            "p": SUBMISSION_VERSION,
            "c": self.config.client_id,
            "v": self.config.client_version,
            "u": user,
            "t": ts,
            "a": generate_handshake_token(self._credentials.api_secret, ts),
            "api_key": self._credentials.api_key,
            "sk": session or "",
        }

        logger.debug(f"Handshaking with {self.config.post_root} as {user}")
        response = self.client.get(self.config.post_root, params=params)
        result = decode_legacy(response.content)

        if result.ok:
            lines = result.handshake_lines()
            if lines is None:
                raise TransientRequestFailure("Incomplete handshake response")
            self.handshake_result = HandshakeResult(*lines)
            logger.info(f"Handshake successful for {user}")
            return self.handshake_result

        logger.error(f"Handshake failed: {result.status}")
        if result.is_status(STATUS_BANNED):
            raise ClientBannedError()
        elif result.is_status(STATUS_BADAUTH):
            raise AuthenticationError()
        elif result.is_status(STATUS_BADTIME):
            raise ClockSkewError(ts)
        else:
            raise TransientRequestFailure(self._failure_reason(result, response))

    def now_playing(
        self,
        artist: str,
        track: str,
        album: str = "",
        length: Union[str, int] = "",
        number: Union[str, int] = "",
    ) -> bool:
        """Notify the server of the track currently playing.

        Returns:
            True when the server answered OK

        Raises:
            HandshakeRequiredError: No successful handshake yet
            SessionInvalidError: Server answered BADSESSION
            TransientRequestFailure: Any other non-OK status
        """
        handshake = self._require_handshake()
        options = NowPlayingOptions(artist=artist, track=track, album=album, length=length, number=number)

        logger.debug(f"Now playing: {artist} - {track}")
        response = self.client.post(handshake.now_playing_url, data=options.to_params(handshake.session_id))
        self._check_submission_response(decode_legacy(response.content), response)
        return True

    def submission(self, entries: Iterable[ScrobbleEntry]) -> bool:
        """Submit one or more scrobbles in a single request.

        Args:
            entries: Up to 50 ScrobbleEntry objects

        Returns:
            True when the server answered OK

        Raises:
            ValueError: No entries, or more than the protocol allows
            HandshakeRequiredError: No successful handshake yet
            SessionInvalidError: Server answered BADSESSION
            TransientRequestFailure: Any other non-OK status
        """
        entries = list(entries)
        if not entries:
            raise ValueError("submission requires at least one scrobble entry")
        if len(entries) > MAX_SUBMISSION_ENTRIES:
            raise ValueError(f"At most {MAX_SUBMISSION_ENTRIES} scrobbles can be submitted at once")

        handshake = self._require_handshake()
        data = {"s": handshake.session_id}
        for index, entry in enumerate(entries):
            data.update(entry.to_params(index))

        logger.debug(f"Submitting {len(entries)} scrobble(s)")
        response = self.client.post(handshake.submission_url, data=data)
        self._check_submission_response(decode_legacy(response.content), response)
        logger.info(f"Submitted {len(entries)} scrobble(s)")
        return True

    def scrobble_track(
        self,
        artist: str,
        track: str,
        started: Union[str, int],
        source: str = "P",
        rating: str = "",
        length: Union[str, int] = "",
    ) -> bool:
        """Submit a single scrobble. See submission()."""
        return self.submission(
            [ScrobbleEntry(artist=artist, track=track, started=started, source=source, rating=rating, length=length)]
        )

    def _require_handshake(self) -> HandshakeResult:
        if self.handshake_result is None:
            raise HandshakeRequiredError()
        return self.handshake_result

    def _check_submission_response(self, result: LegacyResponse, response: httpx.Response) -> None:
        if result.ok:
            return
        logger.error(f"Submission request failed: {result.status}")
        if result.is_status(STATUS_BADSESSION):
            raise SessionInvalidError()
        raise TransientRequestFailure(self._failure_reason(result, response))

    @staticmethod
    def _failure_reason(result: LegacyResponse, response: httpx.Response) -> str:
        return result.status or f"Empty response (HTTP {response.status_code})"

    # REST protocol

    def request(
        self,
        method: str,
        params: Optional[Mapping[str, ParamValue]] = None,
        http_method: str = "get",
        with_signature: bool = False,
        with_session: bool = False,
    ) -> Payload:
        """Issue a REST API call.

        Args:
            method: API method name, e.g. "track.getInfo"
            params: Method parameters; None values are left out
            http_method: "get" (query string) or "post" (form body)
            with_signature: Add ``api_sig``
            with_session: Add the current session key as ``sk``

        Returns:
            Parsed JSON payload

        Raises:
            ValueError: Unsupported http_method
            SessionRequiredError: with_session without a session
            ApiError: Server returned an error payload
            httpx.HTTPError: For network errors
        """
        verb = http_method.lower()
        if verb not in ("get", "post"):
            raise ValueError(f"Unsupported HTTP method: {http_method}")

        request_params = self._build_params(params)
        request_params["method"] = method
        request_params["api_key"] = self._credentials.api_key

        if with_session:
            if self._session is None:
                raise SessionRequiredError(method)
            request_params["sk"] = self._session.session_key

        if with_signature:
            request_params["api_sig"] = sign_params(request_params, self._credentials.api_secret)

        request_params["format"] = "json"

        logger.debug(f"Making Last.fm API request: {method}")
        if verb == "post":
            response = self.client.post("/", data=request_params)
        else:
            response = self.client.get("/", params=request_params)

        outcome = decode_json(response.content)
        if isinstance(outcome, Failure):
            logger.error(f"Last.fm API error {outcome.code}: {outcome.message}")
            raise ApiError(outcome.code, outcome.message)

        return outcome.payload

    @staticmethod
    def _build_params(params: Optional[Mapping[str, ParamValue]]) -> Dict[str, Union[str, List[str]]]:
        request_params: Dict[str, Union[str, List[str]]] = {}
        for key, value in (params or {}).items():
            if value is None:
                continue
            if isinstance(value, bool):
                request_params[str(key)] = "1" if value else "0"
            elif isinstance(value, (list, tuple)):
                request_params[str(key)] = [str(item) for item in value]
            else:
                request_params[str(key)] = str(value)
        return request_params

    def close(self):
        """Close HTTP client and release resources."""
        self.client.close()
        logger.info("Closed Last.fm client")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - automatically close client."""
        self.close()
