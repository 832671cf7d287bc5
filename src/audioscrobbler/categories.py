"""Method categories built on top of LastfmClient.

Each category marshals parameters for a group of API methods and hands them
to LastfmClient.request() (REST) or to the legacy submission calls.
"""

import logging
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Union
from urllib.parse import urlencode

from .auth import md5
from .models import AUTH_URL, HandshakeResult, Payload, ScrobbleEntry, Session

if TYPE_CHECKING:
    from .client import LastfmClient

logger = logging.getLogger(__name__)


class MethodCategory:
    """Base class holding the client a category dispatches through."""

    def __init__(self, lastfm: "LastfmClient"):
        self.lastfm = lastfm

    def request(self, method: str, params=None, http_method: str = "get",
                with_signature: bool = False, with_session: bool = False) -> Payload:
        return self.lastfm.request(
            method,
            params,
            http_method=http_method,
            with_signature=with_signature,
            with_session=with_session,
        )


class Auth(MethodCategory):
    """auth.* methods."""

    def get_token(self) -> str:
        """Fetch a request token for the web authentication flow."""
        payload = self.request("auth.getToken", with_signature=True)
        return payload["token"]

    def get_auth_url(self, token: str) -> str:
        """URL the user must visit to authorize ``token``."""
        query = urlencode({"api_key": self.lastfm.config.api_key, "token": token})
        return f"{AUTH_URL}?{query}"

    def get_session(self, token: str) -> Session:
        """Exchange an authorized token for a session.

        The new session replaces the client's current one only on success.
        """
        payload = self.request("auth.getSession", {"token": token}, with_signature=True)
        session = Session.from_payload(payload)
        self.lastfm.session = session
        logger.info(f"Authenticated Last.fm session for {session.name}")
        return session

    def get_mobile_session(self, username: str, password: str) -> Session:
        """Authenticate with username and password (auth.getMobileSession)."""
        payload = self.request(
            "auth.getMobileSession",
            {"username": username, "authToken": md5(username + md5(password))},
            with_signature=True,
        )
        session = Session.from_payload(payload)
        self.lastfm.session = session
        logger.info(f"Authenticated Last.fm mobile session for {session.name}")
        return session


def _join_tags(tags: Union[str, Sequence[str]]) -> str:
    if isinstance(tags, str):
        return tags
    return ",".join(tags)


class Track(MethodCategory):
    """track.* methods."""

    def get_info(self, artist: str, track: str, username: Optional[str] = None,
                 autocorrect: bool = False) -> Payload:
        payload = self.request(
            "track.getInfo",
            {"artist": artist, "track": track, "username": username, "autocorrect": autocorrect},
        )
        return payload["track"]

    def get_similar(self, artist: str, track: str, limit: Optional[int] = None) -> Payload:
        payload = self.request("track.getSimilar", {"artist": artist, "track": track, "limit": limit})
        return payload["similartracks"]

    def get_tags(self, artist: str, track: str) -> Payload:
        """Tags the authenticated user applied to a track."""
        payload = self.request(
            "track.getTags",
            {"artist": artist, "track": track},
            with_signature=True,
            with_session=True,
        )
        return payload["tags"]

    def get_top_fans(self, artist: str, track: str) -> Payload:
        payload = self.request("track.getTopFans", {"artist": artist, "track": track})
        return payload["topfans"]

    def get_top_tags(self, artist: str, track: str) -> Payload:
        payload = self.request("track.getTopTags", {"artist": artist, "track": track})
        return payload["toptags"]

    def search(self, track: str, artist: Optional[str] = None, limit: Optional[int] = None,
               page: Optional[int] = None) -> Payload:
        payload = self.request(
            "track.search",
            {"track": track, "artist": artist, "limit": limit, "page": page},
        )
        return payload["results"]

    def add_tags(self, artist: str, track: str, tags: Union[str, Sequence[str]]) -> Payload:
        return self.request(
            "track.addTags",
            {"artist": artist, "track": track, "tags": _join_tags(tags)},
            http_method="post",
            with_signature=True,
            with_session=True,
        )

    def remove_tag(self, artist: str, track: str, tag: str) -> Payload:
        return self.request(
            "track.removeTag",
            {"artist": artist, "track": track, "tag": tag},
            http_method="post",
            with_signature=True,
            with_session=True,
        )

    def love(self, artist: str, track: str) -> Payload:
        return self.request(
            "track.love",
            {"artist": artist, "track": track},
            http_method="post",
            with_signature=True,
            with_session=True,
        )

    def unlove(self, artist: str, track: str) -> Payload:
        return self.request(
            "track.unlove",
            {"artist": artist, "track": track},
            http_method="post",
            with_signature=True,
            with_session=True,
        )

    def share(self, artist: str, track: str, recipient: Union[str, Sequence[str]],
              message: Optional[str] = None) -> Payload:
        return self.request(
            "track.share",
            {"artist": artist, "track": track, "recipient": _join_tags(recipient), "message": message},
            http_method="post",
            with_signature=True,
            with_session=True,
        )

    def update_now_playing(self, artist: str, track: str, album: Optional[str] = None,
                           duration: Optional[int] = None,
                           track_number: Optional[int] = None) -> Payload:
        payload = self.request(
            "track.updateNowPlaying",
            {
                "artist": artist,
                "track": track,
                "album": album,
                "duration": duration,
                "trackNumber": track_number,
            },
            http_method="post",
            with_signature=True,
            with_session=True,
        )
        return payload["nowplaying"]

    def scrobble(self, artist: str, track: str, timestamp: int, album: Optional[str] = None,
                 duration: Optional[int] = None, track_number: Optional[int] = None) -> Payload:
        payload = self.request(
            "track.scrobble",
            {
                "artist": artist,
                "track": track,
                "timestamp": timestamp,
                "album": album,
                "duration": duration,
                "trackNumber": track_number,
            },
            http_method="post",
            with_signature=True,
            with_session=True,
        )
        return payload["scrobbles"]


class Scrobble(MethodCategory):
    """Legacy submission protocol calls."""

    def handshake(self, user: str, session: Optional[str] = None) -> HandshakeResult:
        """Handshake using the client's REST session key unless one is given."""
        if session is None and self.lastfm.session is not None:
            session = self.lastfm.session.session_key
        return self.lastfm.handshake(user, session)

    def now_playing(self, artist: str, track: str, album: str = "", length="", number="") -> bool:
        return self.lastfm.now_playing(artist, track, album=album, length=length, number=number)

    def submit(self, entries: Iterable[ScrobbleEntry]) -> bool:
        return self.lastfm.submission(entries)
