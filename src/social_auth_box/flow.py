"""
Login flow orchestration for Box.

This module is the main interface for host applications. It drives one
login attempt from the authorization redirect to a verified external
profile that the host can reconcile with a local account.

The flow holds no per-attempt state in memory: everything that must
survive between the redirect and the callback lives in the session store
behind StateStore, so start() and callback() may run in different
processes.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from .config import ProviderConfig
from .exceptions import AuthorizationError, InvalidStateError, SocialAuthError
from .models import AuthorizationRequest, ExternalProfile, TokenResponse
from .scopes import resolve_scopes
from .state import FailureReason, FlowState, next_state
from .state_store import StateStore
from .token_client import TokenClient

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """
    Outcome of a login callback.

    Attributes:
        state: Terminal state (COMPLETED or FAILED)
        transitions: States traversed, starting at AWAITING_CALLBACK
        profile: Verified external profile (if completed)
        token: Tokens from the exchange (if completed)
        failure: Why the attempt failed (if failed)
        error: Underlying error (if failed)
    """

    state: FlowState
    transitions: list[FlowState] = field(default_factory=list)
    profile: Optional[ExternalProfile] = None
    token: Optional[TokenResponse] = None
    failure: Optional[FailureReason] = None
    error: Optional[SocialAuthError] = None

    @property
    def success(self) -> bool:
        return self.state is FlowState.COMPLETED


class _Attempt:
    """Tracks the state trail of one callback."""

    def __init__(self) -> None:
        # A callback belongs to an attempt that start() already redirected
        self.current = next_state(FlowState.IDLE, "start")
        self.trail = [self.current]

    def advance(self, action: str) -> None:
        self.current = next_state(self.current, action)
        self.trail.append(self.current)

    def complete(self, profile: ExternalProfile, token: TokenResponse) -> AuthResult:
        self.advance("profile_received")
        return AuthResult(
            state=self.current, transitions=self.trail, profile=profile, token=token
        )

    def fail(self, reason: FailureReason, error: SocialAuthError) -> AuthResult:
        self.advance("fail")
        return AuthResult(
            state=self.current, transitions=self.trail, failure=reason, error=error
        )


class AuthFlow:
    """
    Drives the OAuth 2.0 authorization code login.

    Example:
        flow = AuthFlow(state_store=StateStore(session_store))
        redirect_to = flow.start(session_id, config)
        ...
        result = flow.callback(session_id, config, request.args)
        if result.success:
            reconcile(result.profile, result.token)
    """

    def __init__(
        self,
        token_client: Optional[TokenClient] = None,
        state_store: Optional[StateStore] = None,
    ):
        """
        Initialize login flow.

        Args:
            token_client: HTTP client for the provider (default TokenClient)
            state_store: Anti-forgery state storage (in-memory if not provided)
        """
        self.token_client = token_client or TokenClient()
        self.state_store = state_store or StateStore()

    def create_authorization_request(
        self, session_key: str, config: ProviderConfig
    ) -> AuthorizationRequest:
        """
        Begin a login attempt.

        Resolves scopes, mints and persists a fresh state (replacing any
        pending one for this session) and builds the authorization URL.

        Args:
            session_key: Identity of the browser session
            config: Provider configuration

        Returns:
            AuthorizationRequest with the URL to redirect to
        """
        scopes = resolve_scopes(config.scopes)
        state = self.state_store.mint()
        url = self.token_client.build_authorization_url(config, scopes, state)
        self.state_store.persist(session_key, state)

        logger.info(f"Starting Box login | scopes={scopes}")
        return AuthorizationRequest(scopes=scopes, state=state, url=url)

    def start(self, session_key: str, config: ProviderConfig) -> str:
        """
        Begin a login attempt and return the redirect URL.

        Args:
            session_key: Identity of the browser session
            config: Provider configuration

        Returns:
            Authorization URL
        """
        return self.create_authorization_request(session_key, config).url

    def callback(
        self, session_key: str, config: ProviderConfig, params: Mapping[str, Any]
    ) -> AuthResult:
        """
        Finish a login attempt from the provider's callback parameters.

        State is checked before anything else, so a forged or replayed
        callback never reaches the network.

        Args:
            session_key: Identity of the browser session
            config: Provider configuration
            params: Callback query parameters (code, state, error, ...)

        Returns:
            AuthResult, COMPLETED with profile and token or FAILED with reason
        """
        attempt = _Attempt()

        error = params.get("error")
        if error:
            self.state_store.discard(session_key)
            auth_error = AuthorizationError(error, params.get("error_description"))
            reason = (
                FailureReason.USER_DENIED
                if error == "access_denied"
                else FailureReason.PROVIDER_ERROR
            )
            logger.warning(f"Box login not authorized: {auth_error}")
            return attempt.fail(reason, auth_error)

        if not self.state_store.validate_and_consume(session_key, params.get("state")):
            logger.warning("Box login failed: invalid OAuth2 state")
            return attempt.fail(
                FailureReason.INVALID_STATE,
                InvalidStateError("Invalid OAuth2 state"),
            )

        code = params.get("code")
        if not code:
            logger.error("No authorization code in callback")
            return attempt.fail(
                FailureReason.PROVIDER_ERROR,
                AuthorizationError("missing_code", "No authorization code received"),
            )

        attempt.advance("code_received")
        try:
            token = self.token_client.exchange_code(config, code)
        except SocialAuthError as e:
            logger.error(f"Token exchange failed: {e}")
            return attempt.fail(FailureReason.EXCHANGE_FAILED, e)

        attempt.advance("token_received")
        try:
            profile = self.token_client.fetch_profile(config, token.access_token)
        except SocialAuthError as e:
            logger.error(f"Could not load Box profile: {e}")
            return attempt.fail(FailureReason.PROFILE_FETCH_FAILED, e)

        logger.info(f"Box login completed for external user {profile.external_id}")
        return attempt.complete(profile, token)
