"""Tests for LastfmClient.request (signed REST calls).

Test Coverage:
- method/api_key injection
- Session key injection and the no-session error
- Signature computed before format is added
- GET query vs POST body dispatch
- JSON success payloads and ApiError on error payloads
"""

import hashlib
from typing import Any

import httpx
import pytest
from pytest_mock import MockerFixture

from src.audioscrobbler.auth import verify_signature
from src.audioscrobbler.client import LastfmClient
from src.audioscrobbler.exceptions import ApiError, AuthenticationError, SessionRequiredError
from src.audioscrobbler.models import Session


def json_response(data: Any, status_code: int = 200, method: str = "GET") -> httpx.Response:
    """Create an httpx.Response with a JSON body."""
    return httpx.Response(
        status_code=status_code,
        json=data,
        request=httpx.Request(method, "http://ws.audioscrobbler.com/2.0/"),
    )


class TestRequestParameters:
    """Parameter assembly for REST calls."""

    def test_unsigned_get(self, client: LastfmClient, mocker: MockerFixture):
        client.client.get = mocker.MagicMock(return_value=json_response({"track": {"name": "Believe"}}))

        payload = client.request("track.getInfo", {"artist": "Cher", "track": "Believe"})

        assert payload == {"track": {"name": "Believe"}}
        call_args = client.client.get.call_args
        assert call_args.args[0] == "/"
        assert call_args.kwargs["params"] == {
            "artist": "Cher",
            "track": "Believe",
            "method": "track.getInfo",
            "api_key": "testkey",
            "format": "json",
        }

    def test_caller_params_not_mutated(self, client: LastfmClient, mocker: MockerFixture):
        client.client.get = mocker.MagicMock(return_value=json_response({}))
        params = {"artist": "Cher"}

        client.request("artist.getInfo", params, with_signature=True)

        assert params == {"artist": "Cher"}

    def test_none_values_dropped_and_values_stringified(self, client: LastfmClient, mocker: MockerFixture):
        client.client.get = mocker.MagicMock(return_value=json_response({}))

        client.request("track.search", {"track": "Believe", "artist": None, "limit": 10, "autocorrect": True})

        params = client.client.get.call_args.kwargs["params"]
        assert "artist" not in params
        assert params["limit"] == "10"
        assert params["autocorrect"] == "1"

    def test_signed_session_call(self, session_client: LastfmClient, mocker: MockerFixture):
        """Signature covers method, api_key and sk, never format."""
        session_client.client.post = mocker.MagicMock(
            return_value=json_response({}, method="POST")
        )

        session_client.request(
            "track.love",
            {"artist": "Cher", "track": "Believe"},
            http_method="post",
            with_signature=True,
            with_session=True,
        )

        data = session_client.client.post.call_args.kwargs["data"]
        expected_base = "api_keytestkeyartistChermethodtrack.lovesktestsktrackBelievetestsecret"
        assert data["api_sig"] == hashlib.md5(expected_base.encode()).hexdigest()
        assert data["sk"] == "testsk"
        assert data["format"] == "json"

    def test_format_added_after_signing(self, session_client: LastfmClient, mocker: MockerFixture):
        """format is transmitted but was not part of the signed mapping."""
        session_client.client.get = mocker.MagicMock(return_value=json_response({}))

        session_client.request("track.getTags", {"artist": "Cher"}, with_signature=True, with_session=True)

        sent = dict(session_client.client.get.call_args.kwargs["params"])
        assert list(sent)[-1] == "format"
        signature = sent.pop("api_sig")
        sent.pop("format")
        assert verify_signature(sent, "testsecret", signature)

    def test_list_params_signed_in_transmission_order(self, client: LastfmClient, mocker: MockerFixture):
        client.client.post = mocker.MagicMock(return_value=json_response({}, method="POST"))

        client.request("track.scrobble", {"artist": ["Cher", "Abba"]}, http_method="post", with_signature=True)

        data = client.client.post.call_args.kwargs["data"]
        assert data["artist"] == ["Cher", "Abba"]
        expected_base = "api_keytestkeyartistCherAbbamethodtrack.scrobbletestsecret"
        assert data["api_sig"] == hashlib.md5(expected_base.encode()).hexdigest()

    def test_unsigned_call_has_no_signature(self, client: LastfmClient, mocker: MockerFixture):
        client.client.get = mocker.MagicMock(return_value=json_response({}))

        client.request("track.getInfo", {"artist": "Cher"})

        assert "api_sig" not in client.client.get.call_args.kwargs["params"]

    def test_session_without_signature(self, session_client: LastfmClient, mocker: MockerFixture):
        session_client.client.get = mocker.MagicMock(return_value=json_response({}))

        session_client.request("user.getInfo", with_session=True)

        params = session_client.client.get.call_args.kwargs["params"]
        assert params["sk"] == "testsk"
        assert "api_sig" not in params


class TestSessionRequirement:
    """Calls that need a session."""

    def test_missing_session_raises(self, client: LastfmClient, mocker: MockerFixture):
        client.client.get = mocker.MagicMock()

        with pytest.raises(SessionRequiredError) as exc_info:
            client.request("track.love", with_signature=True, with_session=True)

        assert isinstance(exc_info.value, AuthenticationError)
        assert exc_info.value.method == "track.love"
        client.client.get.assert_not_called()

    def test_session_replaced_wholesale(self, session_client: LastfmClient, mocker: MockerFixture):
        session_client.client.get = mocker.MagicMock(return_value=json_response({}))
        session_client.session = Session(session_key="newsk")

        session_client.request("user.getInfo", with_session=True)

        assert session_client.client.get.call_args.kwargs["params"]["sk"] == "newsk"


class TestDispatch:
    """Verb selection."""

    def test_post_sends_body(self, client: LastfmClient, mocker: MockerFixture):
        client.client.get = mocker.MagicMock()
        client.client.post = mocker.MagicMock(return_value=json_response({}, method="POST"))

        client.request("track.love", {"artist": "Cher"}, http_method="POST")

        client.client.get.assert_not_called()
        assert "data" in client.client.post.call_args.kwargs

    def test_unsupported_verb(self, client: LastfmClient):
        with pytest.raises(ValueError):
            client.request("track.love", http_method="delete")


class TestResponses:
    """JSON outcome handling."""

    @pytest.mark.parametrize("payload", [[{"name": "a"}, {"name": "b"}], "token", 7, {}])
    def test_success_returns_full_payload(self, client: LastfmClient, mocker: MockerFixture, payload):
        client.client.get = mocker.MagicMock(return_value=json_response(payload))

        assert client.request("some.method") == payload

    def test_error_payload_raises_api_error(self, client: LastfmClient, mocker: MockerFixture):
        client.client.get = mocker.MagicMock(
            return_value=json_response({"error": 6, "message": "Track not found"}, status_code=400)
        )

        with pytest.raises(ApiError) as exc_info:
            client.request("track.getInfo", {"artist": "x", "track": "y"})

        assert exc_info.value.code == 6
        assert exc_info.value.message == "Track not found"
        assert str(exc_info.value) == "Last.fm Error 6: Track not found"

    def test_invalid_json_raises_api_error(self, client: LastfmClient, mocker: MockerFixture):
        client.client.get = mocker.MagicMock(
            return_value=httpx.Response(
                502, content=b"Bad Gateway", request=httpx.Request("GET", "http://ws.audioscrobbler.com/2.0/")
            )
        )

        with pytest.raises(ApiError) as exc_info:
            client.request("track.getInfo")

        assert exc_info.value.code is None

    def test_failed_call_keeps_session(self, session_client: LastfmClient, mocker: MockerFixture):
        previous = session_client.session
        session_client.client.get = mocker.MagicMock(
            return_value=json_response({"error": 9, "message": "Invalid session key"})
        )

        with pytest.raises(ApiError):
            session_client.request("user.getInfo", with_session=True)

        assert session_client.session is previous


class TestLifecycle:
    def test_context_manager_closes(self, config, mocker: MockerFixture):
        with LastfmClient(config) as client:
            close = mocker.spy(client.client, "close")

        close.assert_called_once()

    def test_base_url(self, client: LastfmClient):
        assert str(client.client.base_url) == "http://ws.audioscrobbler.com/2.0/"
