"""
Last.fm CLI - Command Line Interface

argparse-based front end for the handshake, legacy submission calls and
generic REST method calls.
"""

import argparse
import json
import logging
import os
import sys
import time
from typing import Dict, List, Optional

import httpx

from src.logger import setup_logging

from .client import LastfmClient
from .exceptions import (
    ApiError,
    AuthenticationError,
    ClientBannedError,
    ClockSkewError,
    LastfmError,
    SessionInvalidError,
)
from .models import LastfmConfig, ScrobbleEntry, Session

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """
    Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="python -m src.audioscrobbler",
        description="Last.fm scrobbling and API client",
        epilog="Example: python -m src.audioscrobbler scrobble --user rj --artist Cher --track Believe",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--session-key",
        default=os.getenv("LASTFM_SESSION_KEY"),
        metavar="KEY",
        help="REST session key (default: $LASTFM_SESSION_KEY)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    handshake = subparsers.add_parser("handshake", help="Perform the submission handshake")
    handshake.add_argument("--user", required=True, help="Last.fm username")

    now_playing = subparsers.add_parser("now-playing", help="Send a now-playing notification")
    _add_track_arguments(now_playing)
    now_playing.add_argument("--number", default="", help="Track number on the album")

    scrobble = subparsers.add_parser("scrobble", help="Submit a scrobble")
    _add_track_arguments(scrobble)
    scrobble.add_argument(
        "--started",
        type=int,
        default=None,
        metavar="UNIXTIME",
        help="Time playback started (default: now)",
    )
    scrobble.add_argument("--source", default="P", help="Source code (default: P)")
    scrobble.add_argument("--rating", default="", help="Rating code (L, B or S)")

    call = subparsers.add_parser("call", help="Call a REST API method")
    call.add_argument("method", help="API method name, e.g. track.getInfo")
    call.add_argument(
        "--param",
        "-p",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Method parameter (repeatable)",
    )
    call.add_argument("--post", action="store_true", help="Send as POST")
    call.add_argument("--sign", action="store_true", help="Sign the request")
    call.add_argument("--with-session", action="store_true", help="Attach the session key")

    subparsers.add_parser("auth-url", help="Request a token and print the authorization URL")

    return parser


def _add_track_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--user", required=True, help="Last.fm username")
    parser.add_argument("--artist", required=True, help="Artist name")
    parser.add_argument("--track", required=True, help="Track title")
    parser.add_argument("--album", default="", help="Album title")
    parser.add_argument("--length", default="", help="Track length in seconds")


def parse_params(pairs: List[str]) -> Dict[str, str]:
    """
    Parse KEY=VALUE pairs.

    Raises:
        ValueError: If a pair has no '='
    """
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid parameter (expected KEY=VALUE): {pair}")
        params[key] = value
    return params


def run(args: argparse.Namespace, config: LastfmConfig) -> int:
    """
    Execute the selected command.

    Returns:
        Exit code (0 for success)
    """
    session = Session(session_key=args.session_key) if args.session_key else None

    with LastfmClient(config, session=session) as client:
        if args.command == "handshake":
            result = client.scrobble.handshake(args.user)
            print(f"Session id:      {result.session_id}")
            print(f"Now playing URL: {result.now_playing_url}")
            print(f"Submission URL:  {result.submission_url}")

        elif args.command == "now-playing":
            client.scrobble.handshake(args.user)
            client.now_playing(
                args.artist,
                args.track,
                album=args.album,
                length=args.length,
                number=args.number,
            )
            print(f"Now playing: {args.artist} - {args.track}")

        elif args.command == "scrobble":
            client.scrobble.handshake(args.user)
            entry = ScrobbleEntry(
                artist=args.artist,
                track=args.track,
                started=args.started if args.started is not None else int(time.time()),
                source=args.source,
                rating=args.rating,
                length=args.length,
            )
            client.scrobble.submit([entry])
            print(f"Scrobbled: {args.artist} - {args.track}")

        elif args.command == "call":
            payload = client.request(
                args.method,
                parse_params(args.param),
                http_method="post" if args.post else "get",
                with_signature=args.sign,
                with_session=args.with_session,
            )
            print(json.dumps(payload, indent=2, ensure_ascii=False))

        elif args.command == "auth-url":
            token = client.auth.get_token()
            print(client.auth.get_auth_url(token))

    return 0


def describe_error(error: Exception) -> str:
    """Return a one-line hint for the user."""
    if isinstance(error, ClientBannedError):
        return "Client banned by the server; a newer client version is required."
    if isinstance(error, AuthenticationError):
        return f"Authentication failed: {error}"
    if isinstance(error, ClockSkewError):
        return f"System clock is off, correct it before retrying ({error})"
    if isinstance(error, SessionInvalidError):
        return "Session expired; run the command again to handshake anew."
    if isinstance(error, ApiError):
        return f"API error: {error}"
    return f"Request failed: {error}"


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code (0 success, 1 request failure, 2 configuration error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else None)

    try:
        config = LastfmConfig.from_environment()
    except (EnvironmentError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 2

    try:
        return run(args, config)
    except (LastfmError, httpx.HTTPError, ValueError) as e:
        logger.error(describe_error(e))
        if args.verbose:
            logger.exception("Detailed error traceback:")
        return 1


if __name__ == "__main__":
    sys.exit(main())
