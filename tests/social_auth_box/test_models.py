"""Tests for token and profile models."""

from datetime import datetime, timedelta, timezone

import pytest

from social_auth_box.models import TokenResponse, parse_box_profile


class TestTokenResponse:
    """Tests for TokenResponse."""

    def test_from_payload(self):
        token = TokenResponse.from_payload(
            {
                "access_token": "T9cE5asGnuyYCCqIZFoWjFHvNbvVqHjl",
                "refresh_token": "J7rxTiWOHMoSC1isKZKBZWizoRXjkQzig5C6jFgCVJ9bUnsUfGMinKBDLZWP9BgR",
                "expires_in": 3600,
                "token_type": "bearer",
                "restricted_to": [],
            }
        )

        assert token.access_token == "T9cE5asGnuyYCCqIZFoWjFHvNbvVqHjl"
        assert token.refresh_token.startswith("J7rx")
        assert token.expires_in == 3600
        assert token.scope == ""
        assert not token.is_expired

    def test_from_payload_without_optional_fields(self):
        token = TokenResponse.from_payload({"access_token": "abc"})

        assert token.refresh_token is None
        assert token.token_type == "bearer"
        assert token.expires_at is None
        assert not token.is_expired

    def test_from_payload_with_null_optional_fields(self):
        token = TokenResponse.from_payload(
            {"access_token": "abc", "token_type": None, "scope": None, "expires_in": None}
        )

        assert token.token_type == "bearer"
        assert token.scope == ""
        assert token.expires_in is None

    def test_from_payload_requires_access_token(self):
        with pytest.raises(KeyError):
            TokenResponse.from_payload({"token_type": "bearer"})

        with pytest.raises(ValueError):
            TokenResponse.from_payload({"access_token": ""})

    def test_expiry(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        token = TokenResponse(
            access_token="abc", expires_in=3600, issued_at=issued.isoformat()
        )

        assert token.expires_at == issued + timedelta(seconds=3600)
        assert token.is_expired

    def test_naive_issued_at_is_treated_as_utc(self):
        token = TokenResponse(
            access_token="abc", expires_in=60, issued_at="2020-01-01T00:00:00"
        )

        assert token.expires_at == datetime(2020, 1, 1, 0, 1, tzinfo=timezone.utc)

    def test_to_dict(self):
        data = TokenResponse(access_token="abc", issued_at="2020-01-01T00:00:00").to_dict()

        assert data["access_token"] == "abc"
        assert data["issued_at"] == "2020-01-01T00:00:00"


class TestParseBoxProfile:
    """Tests for parse_box_profile."""

    def test_full_profile(self):
        payload = {
            "type": "user",
            "id": "11446498",
            "name": "Aaron Levie",
            "login": "ceo@example.com",
            "avatar_url": "https://www.box.com/api/avatar/large/181216415",
        }

        profile = parse_box_profile(payload)

        assert profile.external_id == "11446498"
        assert profile.name == "Aaron Levie"
        assert profile.email == "ceo@example.com"
        assert profile.avatar_url == "https://www.box.com/api/avatar/large/181216415"
        assert profile.raw == payload

    def test_optional_fields_may_be_absent(self):
        profile = parse_box_profile({"id": 42})

        assert profile.external_id == "42"
        assert profile.name == ""
        assert profile.email is None
        assert profile.avatar_url is None

    def test_missing_id_raises(self):
        with pytest.raises(KeyError):
            parse_box_profile({"name": "Ada"})

    def test_empty_id_raises(self):
        with pytest.raises(ValueError):
            parse_box_profile({"id": ""})
