"""
Provider configuration for Box login.

Configuration can be loaded from environment variables or provided
programmatically. It is immutable once loaded and is validated on
construction, so a misconfigured client fails before any network call.
"""

import os
from dataclasses import dataclass, field
from typing import Union

from .exceptions import ConfigurationError

ScopeSpec = Union[str, list[str], tuple[str, ...], None]


@dataclass(frozen=True)
class ProviderConfig:
    """
    Configuration for the Box OAuth 2.0 authorization code flow.

    Attributes:
        client_id: Box application client ID from the developer console
        client_secret: Box application client secret
        redirect_uri: Callback URL registered with the Box application
        scopes: Extra scopes, as a comma-separated string or a list
        api_base_url: Base URL for Box API requests
        authorization_url: Box OAuth authorization endpoint
        token_url: Box OAuth token endpoint
        profile_path: API path of the authenticated user's profile
        timeout: Seconds to wait for each HTTP call
        scope_separator: How scopes are joined in the authorization URL
    """

    # Required - from the Box developer console
    client_id: str
    client_secret: str
    redirect_uri: str

    scopes: ScopeSpec = field(default=None)

    # Box endpoints
    api_base_url: str = "https://api.box.com"
    authorization_url: str = "https://account.box.com/api/oauth2/authorize"
    token_url: str = "https://api.box.com/oauth2/token"
    profile_path: str = "/2.0/users/me"

    timeout: float = 10.0
    scope_separator: str = " "

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.client_id:
            raise ConfigurationError("client_id cannot be empty")

        if not self.client_secret:
            raise ConfigurationError("client_secret cannot be empty")

        if not self.redirect_uri:
            raise ConfigurationError("redirect_uri cannot be empty")

        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")

    @property
    def profile_url(self) -> str:
        """Full URL of the resource owner endpoint."""
        return self.endpoint_url(self.profile_path)

    def endpoint_url(self, path: str) -> str:
        """
        Join an API path onto the base URL.

        Args:
            path: API path, with or without a leading slash (e.g. "/2.0/folders/0")

        Returns:
            Absolute URL
        """
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.api_base_url.rstrip('/')}{path}"

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        """
        Load configuration from environment variables.

        Required environment variables:
            BOX_CLIENT_ID: Box application client ID
            BOX_CLIENT_SECRET: Box application client secret
            BOX_REDIRECT_URI: Registered callback URL

        Optional environment variables:
            BOX_SCOPES: Comma-separated extra scopes
            BOX_API_BASE_URL: API base URL (default: https://api.box.com)
            BOX_TIMEOUT: HTTP timeout in seconds (default: 10)

        Returns:
            ProviderConfig instance

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        client_id = os.environ.get("BOX_CLIENT_ID")
        client_secret = os.environ.get("BOX_CLIENT_SECRET")
        redirect_uri = os.environ.get("BOX_REDIRECT_URI")

        if not client_id or not client_secret or not redirect_uri:
            raise ConfigurationError(
                "Missing Box OAuth settings. Set environment variables:\n"
                "  BOX_CLIENT_ID=your_client_id\n"
                "  BOX_CLIENT_SECRET=your_client_secret\n"
                "  BOX_REDIRECT_URI=https://example.com/user/login/box/callback\n"
                "\n"
                "Create an application at: https://app.box.com/developers/console"
            )

        timeout_raw = os.environ.get("BOX_TIMEOUT", "10")
        try:
            timeout = float(timeout_raw)
        except ValueError as e:
            raise ConfigurationError(f"BOX_TIMEOUT must be a number, got {timeout_raw!r}") from e

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            scopes=os.environ.get("BOX_SCOPES") or None,
            api_base_url=os.environ.get("BOX_API_BASE_URL", "https://api.box.com"),
            timeout=timeout,
        )
