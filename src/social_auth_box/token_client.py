"""
HTTP client for the Box OAuth and API endpoints.

This module performs the network side of the login handshake:
- Building the authorization URL
- Exchanging the authorization code for tokens
- Fetching the resource owner profile
- Authenticated GET requests against arbitrary API paths

Each call makes exactly one request, bounded by the configured timeout.
Retry policy, if any, belongs to the caller.
"""

import logging
from typing import Any, Optional
from urllib.parse import urlencode

import requests

from .config import ProviderConfig
from .exceptions import (
    MalformedResponseError,
    NetworkFailureError,
    ProviderRejectedError,
)
from .models import ExternalProfile, ProfileParser, TokenResponse, parse_box_profile

logger = logging.getLogger(__name__)


class TokenClient:
    """
    Talks to the provider's authorization, token and API endpoints.

    Example:
        client = TokenClient()
        url = client.build_authorization_url(config, ["root_readonly"], state)
        token = client.exchange_code(config, code)
        profile = client.fetch_profile(config, token.access_token)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        profile_parser: ProfileParser = parse_box_profile,
    ):
        """
        Initialize token client.

        Args:
            session: HTTP session to use (creates one if not provided)
            profile_parser: Turns the profile JSON body into an ExternalProfile;
                KeyError, ValueError, TypeError and AttributeError it raises
                are reported as MalformedResponseError
        """
        self.session = session or requests.Session()
        self.profile_parser = profile_parser

    def build_authorization_url(
        self, config: ProviderConfig, scopes: list[str], state: str
    ) -> str:
        """
        Generate the authorization URL for the browser redirect.

        Args:
            config: Provider configuration
            scopes: Resolved scopes (omitted from the URL when empty)
            state: Anti-forgery token to round-trip through the provider

        Returns:
            Complete authorization URL with query parameters
        """
        params = {
            "client_id": config.client_id,
            "redirect_uri": config.redirect_uri,
            "response_type": "code",
        }
        if scopes:
            params["scope"] = config.scope_separator.join(scopes)
        params["state"] = state

        return f"{config.authorization_url}?{urlencode(params)}"

    def exchange_code(self, config: ProviderConfig, code: str) -> TokenResponse:
        """
        Exchange an authorization code for tokens.

        Args:
            config: Provider configuration
            code: Code received on the OAuth callback

        Returns:
            TokenResponse with the access token

        Raises:
            NetworkFailureError: On connection errors or timeout
            ProviderRejectedError: On non-2xx status or an error payload
            MalformedResponseError: If the body is not a usable token response
        """
        logger.info(f"Exchanging authorization code | client_id={config.client_id}")

        try:
            response = self.session.post(
                config.token_url,
                headers={"Accept": "application/json"},
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": config.redirect_uri,
                    "client_id": config.client_id,
                    "client_secret": config.client_secret,
                },
                timeout=config.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Network error during token exchange: {e}")
            raise NetworkFailureError(f"Network error during token exchange: {e}") from e

        data = self._parse_body(response, "token exchange")

        if isinstance(data, dict) and data.get("error"):
            description = data.get("error_description", "")
            logger.error(f"Token endpoint returned error: {data['error']} {description}")
            raise ProviderRejectedError(
                f"Token exchange rejected: {data['error']}",
                status_code=response.status_code,
                payload=data,
            )

        try:
            token = TokenResponse.from_payload(data)
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Invalid response from token endpoint: {e}")
            raise MalformedResponseError(f"Invalid response from token endpoint: {e}") from e

        logger.info("Token exchange succeeded")
        return token

    def fetch_profile(self, config: ProviderConfig, access_token: str) -> ExternalProfile:
        """
        Fetch the authenticated user's profile.

        Args:
            config: Provider configuration
            access_token: Bearer token from exchange_code()

        Returns:
            ExternalProfile (email and avatar may be None)

        Raises:
            NetworkFailureError: On connection errors or timeout
            ProviderRejectedError: On non-2xx status
            MalformedResponseError: If the body is unparsable or lacks the user id
        """
        data = self._authenticated_get(config, config.profile_url, access_token, "profile fetch")

        try:
            profile = self.profile_parser(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Invalid response from profile endpoint: {e}")
            raise MalformedResponseError(f"Invalid response from profile endpoint: {e}") from e

        logger.info(f"Fetched profile for external user {profile.external_id}")
        return profile

    def request_endpoint(
        self, config: ProviderConfig, access_token: str, path: str
    ) -> dict[str, Any]:
        """
        Make an authenticated GET request against the provider API.

        Args:
            config: Provider configuration
            access_token: Bearer token
            path: API path relative to the base URL (e.g. "/2.0/folders/0")

        Returns:
            Parsed JSON body

        Raises:
            NetworkFailureError, ProviderRejectedError, MalformedResponseError
        """
        return self._authenticated_get(config, config.endpoint_url(path), access_token, path)

    def _authenticated_get(
        self, config: ProviderConfig, url: str, access_token: str, what: str
    ) -> dict[str, Any]:
        try:
            response = self.session.get(
                url,
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/json",
                },
                timeout=config.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Network error during {what}: {e}")
            raise NetworkFailureError(f"Network error during {what}: {e}") from e

        data = self._parse_body(response, what)
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Expected a JSON object from {what}")
        return data

    @staticmethod
    def _parse_body(response: requests.Response, what: str) -> Any:
        """
        Check status and decode JSON.

        Raises:
            ProviderRejectedError: On non-2xx status
            MalformedResponseError: If the body is not JSON
        """
        if not 200 <= response.status_code < 300:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            logger.error(f"{what} failed: {response.status_code} - {response.text}")
            raise ProviderRejectedError(
                f"{what} failed with status {response.status_code}",
                status_code=response.status_code,
                payload=payload if isinstance(payload, dict) else None,
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Unparsable response from {what}: {e}")
            raise MalformedResponseError(f"Unparsable response from {what}") from e
