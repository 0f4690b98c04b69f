"""
Exception classes for the Box login handshake.

Every exception carries an ``AuthErrorKind`` so callers can decide on
user-facing messaging without matching on class names.
"""

from enum import Enum
from typing import Any, Optional


class AuthErrorKind(Enum):
    """Kinds of authentication failure surfaced to the host application."""

    USER_DENIED = "user_denied"
    PROVIDER_ERROR = "provider_error"  # Provider rejected the authorization request
    INVALID_STATE = "invalid_state"  # Missing or mismatched anti-forgery token
    NETWORK_FAILURE = "network_failure"
    PROVIDER_REJECTED = "provider_rejected"  # Non-success from token/profile endpoint
    MALFORMED = "malformed"
    MISCONFIGURED_CLIENT = "misconfigured_client"


class SocialAuthError(Exception):
    """Base exception for all Box login errors."""

    kind: AuthErrorKind = AuthErrorKind.PROVIDER_ERROR


class ConfigurationError(SocialAuthError):
    """Client configuration is missing or invalid."""

    kind = AuthErrorKind.MISCONFIGURED_CLIENT


class AuthorizationError(SocialAuthError):
    """
    The provider returned an error on the callback instead of a code.

    Attributes:
        error: OAuth error code from the callback (e.g. ``access_denied``)
        error_description: Human-readable description, if the provider sent one
    """

    def __init__(self, error: str, error_description: Optional[str] = None):
        message = error if not error_description else f"{error}: {error_description}"
        super().__init__(message)
        self.error = error
        self.error_description = error_description

    @property
    def kind(self) -> AuthErrorKind:  # type: ignore[override]
        if self.error == "access_denied":
            return AuthErrorKind.USER_DENIED
        return AuthErrorKind.PROVIDER_ERROR


class InvalidStateError(SocialAuthError):
    """Callback state was missing, expired, already used or did not match."""

    kind = AuthErrorKind.INVALID_STATE


class ProviderCommunicationError(SocialAuthError):
    """Base for failures talking to the token, profile or API endpoints."""

    pass


class NetworkFailureError(ProviderCommunicationError):
    """Transport-level failure (connection error, timeout)."""

    kind = AuthErrorKind.NETWORK_FAILURE


class ProviderRejectedError(ProviderCommunicationError):
    """
    Provider answered with a non-success status or an error payload.

    Attributes:
        status_code: HTTP status of the response
        payload: Parsed error body, when it was JSON
    """

    kind = AuthErrorKind.PROVIDER_REJECTED

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class MalformedResponseError(ProviderCommunicationError):
    """Response could not be parsed or lacked a required field."""

    kind = AuthErrorKind.MALFORMED
