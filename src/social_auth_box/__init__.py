"""
Box login via OAuth 2.0.

This package implements the OAuth 2.0 Authorization Code login handshake
with Box, independent of any web framework:

- Start: resolve scopes, mint an anti-forgery state, build the redirect URL
- Callback: validate the state, exchange the code, fetch the Box profile

The verified profile is handed back to the host application, which
reconciles it with a local account. A Flask blueprint serving both steps
is available in ``social_auth_box.web``.

Public API:
    ProviderConfig: Provider configuration
    resolve_scopes: Scope normalization
    StateStore: Anti-forgery state storage
    InMemorySessionStore: Process-local session store
    TokenClient: HTTP calls to Box
    AuthFlow: Login orchestration
    AuthResult: Outcome of a callback

Exceptions:
    SocialAuthError: Base exception
    ConfigurationError: Misconfigured client
    AuthorizationError: Provider returned an error on the callback
    InvalidStateError: Missing or mismatched state
    NetworkFailureError: Transport failure
    ProviderRejectedError: Non-success response from Box
    MalformedResponseError: Unusable response body
"""

from .config import ProviderConfig
from .exceptions import (
    AuthErrorKind,
    AuthorizationError,
    ConfigurationError,
    InvalidStateError,
    MalformedResponseError,
    NetworkFailureError,
    ProviderCommunicationError,
    ProviderRejectedError,
    SocialAuthError,
)
from .flow import AuthFlow, AuthResult
from .models import (
    AuthorizationRequest,
    ExternalProfile,
    TokenResponse,
    parse_box_profile,
)
from .scopes import resolve_scopes
from .state import FailureReason, FlowState
from .state_store import InMemorySessionStore, SessionStore, StateStore
from .token_client import TokenClient

__all__ = [
    # Configuration
    "ProviderConfig",
    "resolve_scopes",
    # Models
    "AuthorizationRequest",
    "ExternalProfile",
    "TokenResponse",
    "parse_box_profile",
    # State
    "SessionStore",
    "InMemorySessionStore",
    "StateStore",
    "FlowState",
    "FailureReason",
    # Flow
    "TokenClient",
    "AuthFlow",
    "AuthResult",
    # Exceptions
    "AuthErrorKind",
    "SocialAuthError",
    "ConfigurationError",
    "AuthorizationError",
    "InvalidStateError",
    "ProviderCommunicationError",
    "NetworkFailureError",
    "ProviderRejectedError",
    "MalformedResponseError",
]
