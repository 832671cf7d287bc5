"""Shared fixtures for Last.fm client tests.

All HTTP calls are mocked on the client's httpx.Client - no real server
requests are made.
"""

import pytest

from src.audioscrobbler.client import LastfmClient
from src.audioscrobbler.models import HandshakeResult, LastfmConfig, Session

API_KEY = "testkey"
API_SECRET = "testsecret"
NOW_PLAYING_URL = "http://post.audioscrobbler.com:80/np_1.2"
SUBMISSION_URL = "http://post2.audioscrobbler.com:80/protocol_1.2"


@pytest.fixture
def config() -> LastfmConfig:
    """Return a valid LastfmConfig for testing."""
    return LastfmConfig(api_key=API_KEY, api_secret=API_SECRET)


@pytest.fixture
def client(config: LastfmConfig):
    """Create a LastfmClient; tests replace client.client.get/post."""
    lastfm = LastfmClient(config)
    yield lastfm
    lastfm.close()


@pytest.fixture
def handshaken_client(client: LastfmClient) -> LastfmClient:
    """LastfmClient with a stored handshake result."""
    client.handshake_result = HandshakeResult(
        session_id="17E61E13454CDD8B68E8D7DEEEDF6170",
        now_playing_url=NOW_PLAYING_URL,
        submission_url=SUBMISSION_URL,
    )
    return client


@pytest.fixture
def session_client(client: LastfmClient) -> LastfmClient:
    """LastfmClient with an authenticated REST session."""
    client.session = Session(session_key="testsk", name="rj")
    return client

