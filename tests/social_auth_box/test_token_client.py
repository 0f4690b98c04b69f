"""Tests for the Box token client."""

from unittest import mock
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from social_auth_box.config import ProviderConfig
from social_auth_box.exceptions import (
    MalformedResponseError,
    NetworkFailureError,
    ProviderRejectedError,
)
from social_auth_box.models import ExternalProfile
from social_auth_box.token_client import TokenClient


def make_response(status_code=200, json_data=None, text=""):
    """Build a mock requests.Response."""
    response = mock.Mock()
    response.status_code = status_code
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


class TestTokenClient:
    """Tests for TokenClient class."""

    @pytest.fixture
    def config(self):
        """Create test provider config."""
        return ProviderConfig(
            client_id="test_client_id",
            client_secret="test_client_secret",
            redirect_uri="https://example.com/user/login/box/callback",
            timeout=5,
        )

    @pytest.fixture
    def session(self):
        return mock.Mock(spec=requests.Session)

    @pytest.fixture
    def client(self, session):
        return TokenClient(session=session)

    def test_client_creates_default_session(self):
        client = TokenClient()
        assert isinstance(client.session, requests.Session)

    def test_build_authorization_url(self, client, config):
        url = client.build_authorization_url(config, ["root_readonly", "manage_webhook"], "xyz")

        parsed = urlparse(url)
        query = parse_qs(parsed.query)
        assert url.startswith(config.authorization_url + "?")
        assert query["client_id"] == ["test_client_id"]
        assert query["redirect_uri"] == ["https://example.com/user/login/box/callback"]
        assert query["response_type"] == ["code"]
        assert query["scope"] == ["root_readonly manage_webhook"]
        assert query["state"] == ["xyz"]

    def test_build_authorization_url_without_scopes(self, client, config):
        url = client.build_authorization_url(config, [], "xyz")

        assert "scope=" not in url
        assert "state=xyz" in url

    def test_build_authorization_url_custom_separator(self, client):
        config = ProviderConfig("id", "secret", "https://example.com/cb", scope_separator=",")
        url = client.build_authorization_url(config, ["a", "b"], "s")

        assert parse_qs(urlparse(url).query)["scope"] == ["a,b"]

    def test_exchange_code_success(self, client, session, config):
        """exchange_code posts the authorization_code grant."""
        session.post.return_value = make_response(
            json_data={
                "access_token": "new_access_token",
                "refresh_token": "new_refresh_token",
                "expires_in": 3600,
                "token_type": "bearer",
            }
        )

        token = client.exchange_code(config, "auth_code_123")

        session.post.assert_called_once()
        call_args = session.post.call_args
        assert call_args[0][0] == config.token_url
        assert call_args[1]["timeout"] == 5
        assert call_args[1]["data"] == {
            "grant_type": "authorization_code",
            "code": "auth_code_123",
            "redirect_uri": "https://example.com/user/login/box/callback",
            "client_id": "test_client_id",
            "client_secret": "test_client_secret",
        }
        assert token.access_token == "new_access_token"
        assert token.refresh_token == "new_refresh_token"
        assert token.expires_in == 3600

    def test_exchange_code_handles_400_error(self, client, session, config):
        session.post.return_value = make_response(
            status_code=400,
            json_data={"error": "invalid_grant", "error_description": "Auth code expired"},
            text='{"error": "invalid_grant"}',
        )

        with pytest.raises(ProviderRejectedError, match="status 400") as exc_info:
            client.exchange_code(config, "bad_code")

        assert exc_info.value.status_code == 400
        assert exc_info.value.payload["error"] == "invalid_grant"

    def test_exchange_code_handles_error_payload_with_200(self, client, session, config):
        session.post.return_value = make_response(json_data={"error": "invalid_client"})

        with pytest.raises(ProviderRejectedError, match="invalid_client"):
            client.exchange_code(config, "code")

    def test_exchange_code_handles_non_json_error_body(self, client, session, config):
        session.post.return_value = make_response(
            status_code=502, json_data=ValueError("not json"), text="Bad Gateway"
        )

        with pytest.raises(ProviderRejectedError) as exc_info:
            client.exchange_code(config, "code")

        assert exc_info.value.status_code == 502
        assert exc_info.value.payload == {}

    def test_exchange_code_handles_network_error(self, client, session, config):
        session.post.side_effect = requests.ConnectionError("Network error")

        with pytest.raises(NetworkFailureError, match="Network error"):
            client.exchange_code(config, "auth_code")

    def test_exchange_code_handles_timeout(self, client, session, config):
        session.post.side_effect = requests.Timeout("read timed out")

        with pytest.raises(NetworkFailureError):
            client.exchange_code(config, "auth_code")

    def test_exchange_code_handles_unparsable_body(self, client, session, config):
        session.post.return_value = make_response(json_data=ValueError("Expecting value"))

        with pytest.raises(MalformedResponseError, match="Unparsable"):
            client.exchange_code(config, "auth_code")

    def test_exchange_code_handles_missing_access_token(self, client, session, config):
        session.post.return_value = make_response(json_data={"token_type": "bearer"})

        with pytest.raises(MalformedResponseError, match="Invalid response"):
            client.exchange_code(config, "auth_code")

    def test_exchange_code_handles_non_object_body(self, client, session, config):
        session.post.return_value = make_response(json_data=["access_token"])

        with pytest.raises(MalformedResponseError):
            client.exchange_code(config, "auth_code")

    def test_fetch_profile_success(self, client, session, config):
        session.get.return_value = make_response(
            json_data={"id": "42", "name": "Ada", "login": "ada@example.com"}
        )

        profile = client.fetch_profile(config, "access_123")

        session.get.assert_called_once()
        call_args = session.get.call_args
        assert call_args[0][0] == "https://api.box.com/2.0/users/me"
        assert call_args[1]["headers"]["Authorization"] == "Bearer access_123"
        assert call_args[1]["timeout"] == 5
        assert profile.external_id == "42"
        assert profile.name == "Ada"
        assert profile.email == "ada@example.com"
        assert profile.avatar_url is None

    def test_fetch_profile_handles_401(self, client, session, config):
        session.get.return_value = make_response(
            status_code=401, json_data=ValueError("empty"), text=""
        )

        with pytest.raises(ProviderRejectedError) as exc_info:
            client.fetch_profile(config, "expired")

        assert exc_info.value.status_code == 401

    def test_fetch_profile_missing_id_is_malformed(self, client, session, config):
        session.get.return_value = make_response(json_data={"name": "Ada"})

        with pytest.raises(MalformedResponseError, match="profile endpoint"):
            client.fetch_profile(config, "access_123")

    def test_fetch_profile_handles_network_error(self, client, session, config):
        session.get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(NetworkFailureError, match="profile fetch"):
            client.fetch_profile(config, "access_123")

    def test_fetch_profile_uses_custom_parser(self, session, config):
        parser = mock.Mock(return_value=ExternalProfile(external_id="custom"))
        client = TokenClient(session=session, profile_parser=parser)
        session.get.return_value = make_response(json_data={"uid": "custom"})

        profile = client.fetch_profile(config, "access_123")

        parser.assert_called_once_with({"uid": "custom"})
        assert profile.external_id == "custom"

    def test_fetch_profile_parser_attribute_error_is_malformed(self, session, config):
        def parser(data):
            return ExternalProfile(external_id=data["user"].strip())

        client = TokenClient(session=session, profile_parser=parser)
        session.get.return_value = make_response(json_data={"user": 42})

        with pytest.raises(MalformedResponseError, match="profile endpoint"):
            client.fetch_profile(config, "access_123")

    def test_request_endpoint(self, client, session, config):
        session.get.return_value = make_response(json_data={"type": "folder", "id": "0"})

        data = client.request_endpoint(config, "access_123", "/2.0/folders/0")

        assert data == {"type": "folder", "id": "0"}
        assert session.get.call_args[0][0] == "https://api.box.com/2.0/folders/0"
        assert session.get.call_args[1]["headers"]["Authorization"] == "Bearer access_123"

    def test_request_endpoint_rejects_non_object(self, client, session, config):
        session.get.return_value = make_response(json_data=[1, 2, 3])

        with pytest.raises(MalformedResponseError, match="Expected a JSON object"):
            client.request_endpoint(config, "access_123", "2.0/events")
