"""Decoding of Last.fm response bodies.

Two formats are handled:

- Legacy submission protocol: newline separated text, first line is the
  status token (``OK``, ``BANNED``, ``BADAUTH``, ``BADTIME``, ``BADSESSION``
  or a failure reason).
- REST protocol: JSON. A top-level object carrying ``error`` is a failure,
  anything else is a success whose payload is returned untouched.

Decoding only raises when the body is not valid UTF-8 text.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .exceptions import ResponseDecodeError
from .models import Payload

logger = logging.getLogger(__name__)

STATUS_OK = "OK"
STATUS_BANNED = "BANNED"
STATUS_BADAUTH = "BADAUTH"
STATUS_BADTIME = "BADTIME"
STATUS_BADSESSION = "BADSESSION"


@dataclass(frozen=True)
class Success:
    """Successful REST response carrying the parsed JSON payload."""

    payload: Payload


@dataclass(frozen=True)
class Failure:
    """Failed REST response.

    Attributes:
        code: Numeric Last.fm error code, None if not supplied
        message: Human-readable error message
    """

    code: Optional[int]
    message: str


ResponseOutcome = Union[Success, Failure]


@dataclass(frozen=True)
class LegacyResponse:
    """Decoded line-oriented response.

    Attributes:
        status: First line of the body ("" for an empty body)
        lines: All lines of the body, status line included
    """

    status: str
    lines: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def is_status(self, token: str) -> bool:
        return self.status == token

    def handshake_lines(self) -> Optional[Tuple[str, str, str]]:
        """Return (session id, now-playing URL, submission URL).

        Returns:
            The three context lines following ``OK``, or None if the response
            is not OK or is missing any of them
        """
        if not self.ok or len(self.lines) < 4:
            return None
        session_id, now_playing_url, submission_url = (line.strip() for line in self.lines[1:4])
        if not (session_id and now_playing_url and submission_url):
            return None
        return session_id, now_playing_url, submission_url


def decode_text(body: bytes) -> str:
    """Decode a response body as UTF-8.

    Raises:
        ResponseDecodeError: If the body is not valid UTF-8
    """
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ResponseDecodeError(f"Response body is not valid UTF-8: {e}") from e


def decode_legacy(body: bytes) -> LegacyResponse:
    """Split a legacy protocol body into its status and lines."""
    text = decode_text(body)
    lines = [line.rstrip("\r") for line in text.split("\n")]
    # A trailing newline is not a line of its own
    while len(lines) > 1 and lines[-1] == "":
        lines.pop()
    status = lines[0].strip() if lines else ""
    return LegacyResponse(status=status, lines=lines)


def _error_code(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def decode_json(body: bytes) -> ResponseOutcome:
    """Decode a REST protocol JSON body into Success or Failure."""
    text = decode_text(body)
    try:
        payload = json.loads(text)
    except ValueError as e:
        logger.warning(f"Last.fm returned invalid JSON: {e}")
        return Failure(code=None, message=f"Invalid JSON response: {e}")

    if isinstance(payload, dict) and "error" in payload:
        message = payload.get("message") or "Unknown error"
        return Failure(code=_error_code(payload["error"]), message=str(message))

    return Success(payload=payload)
