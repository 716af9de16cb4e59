"""Tests for the refresh-token access token provider."""

from unittest.mock import Mock, patch

import pytest
import requests

from gdoc_sync.config import Settings
from gdoc_sync.core.errors import AuthenticationError
from gdoc_sync.core.oauth import EXPIRY_BUFFER_SECONDS, OAuthTokenProvider


class _Clock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _token_response(token="access-1", expires_in=3600, status=200):
    response = Mock()
    response.ok = status == 200
    response.status_code = status
    response.text = "error body"
    response.json.return_value = {"access_token": token, "expires_in": expires_in}
    return response


@pytest.fixture
def clock():
    return _Clock()


@pytest.fixture
def provider(clock):
    return OAuthTokenProvider("cid", "secret", "refresh", clock=clock)


class TestGetValidToken:
    @patch("gdoc_sync.core.oauth.requests.post")
    def test_refreshes_once(self, mock_post, provider):
        mock_post.return_value = _token_response()

        assert provider.get_valid_token() == "access-1"
        assert provider.get_valid_token() == "access-1"

        mock_post.assert_called_once()
        data = mock_post.call_args[1]["data"]
        assert data["grant_type"] == "refresh_token"
        assert data["refresh_token"] == "refresh"

    @patch("gdoc_sync.core.oauth.requests.post")
    def test_refreshes_near_expiry(self, mock_post, provider, clock):
        mock_post.side_effect = [
            _token_response("access-1"),
            _token_response("access-2"),
        ]
        provider.get_valid_token()

        clock.now += 3600 - EXPIRY_BUFFER_SECONDS

        assert provider.get_valid_token() == "access-2"
        assert mock_post.call_count == 2

    @patch("gdoc_sync.core.oauth.requests.post")
    def test_refused(self, mock_post, provider):
        mock_post.return_value = _token_response(status=400)
        with pytest.raises(AuthenticationError) as exc:
            provider.get_valid_token()
        assert exc.value.status_code == 400

    @patch("gdoc_sync.core.oauth.requests.post")
    def test_response_without_token(self, mock_post, provider):
        response = _token_response()
        response.json.return_value = {"error": "weird"}
        mock_post.return_value = response
        with pytest.raises(AuthenticationError, match="Malformed"):
            provider.get_valid_token()
        assert provider.is_expired() is True

    @patch("gdoc_sync.core.oauth.requests.post")
    def test_response_not_json(self, mock_post, provider):
        response = _token_response()
        response.json.side_effect = ValueError("Expecting value")
        mock_post.return_value = response
        with pytest.raises(AuthenticationError, match="Malformed"):
            provider.get_valid_token()

    @patch("gdoc_sync.core.oauth.requests.post")
    def test_network_failure(self, mock_post, provider):
        mock_post.side_effect = requests.ConnectionError("offline")
        with pytest.raises(AuthenticationError, match="offline"):
            provider.get_valid_token()

    @patch("gdoc_sync.core.oauth.requests.post")
    def test_missing_credentials(self, mock_post):
        provider = OAuthTokenProvider("", "", "")
        with pytest.raises(AuthenticationError, match="not configured"):
            provider.get_valid_token()
        mock_post.assert_not_called()


def test_from_settings():
    provider = OAuthTokenProvider.from_settings(
        Settings(client_id="a", client_secret="b", refresh_token="c")
    )
    assert (provider.client_id, provider.client_secret, provider.refresh_token) == (
        "a",
        "b",
        "c",
    )
    assert provider.is_expired() is True
