"""
Flask integration for Box login.

Provides the two login routes:

- ``GET /user/login/box`` redirects the browser to Box
- ``GET /user/login/box/callback`` finishes the handshake and hands the
  verified profile to the host's identity reconciler

Only an opaque session id lives in the Flask session cookie. The pending
state is kept server side, because a signed cookie can be replayed and so
cannot make a state single-use. Failures flash a message and send the user
back to the login page.
"""

import logging
import secrets
from typing import Any, Optional, Protocol

from flask import Blueprint, Response, flash, redirect, request, session

from .config import ProviderConfig
from .exceptions import ConfigurationError
from .flow import AuthFlow
from .state import FailureReason
from .state_store import InMemorySessionStore, SessionStore, StateStore

logger = logging.getLogger(__name__)

SESSION_ID_KEY = "social_auth_box.sid"

FAILURE_MESSAGES = {
    FailureReason.USER_DENIED: "You could not be authenticated.",
    FailureReason.PROVIDER_ERROR: "Box login failed. The provider rejected the request.",
    FailureReason.INVALID_STATE: "Box login failed. Invalid OAuth2 state.",
    FailureReason.EXCHANGE_FAILED: "Box login failed, could not obtain an access token.",
    FailureReason.PROFILE_FETCH_FAILED: (
        "Box login failed, could not load Box profile. Contact site administrator."
    ),
}

NOT_CONFIGURED_MESSAGE = "Social Auth Box not configured properly. Contact site administrator."


class IdentityReconciler(Protocol):
    """Creates or logs in a local user from a verified Box identity."""

    def authenticate_user(
        self,
        name: str,
        email: Optional[str],
        external_id: str,
        token: str,
        avatar_url: Optional[str],
        extra_data: Any,
    ) -> Any: ...


def current_session_key() -> str:
    """Per-browser identifier kept in the Flask session."""
    sid = session.get(SESSION_ID_KEY)
    if not sid:
        sid = secrets.token_hex(16)
        session[SESSION_ID_KEY] = sid
    return sid


def create_login_blueprint(
    reconciler: IdentityReconciler,
    config: Optional[ProviderConfig] = None,
    flow: Optional[AuthFlow] = None,
    login_url: str = "/user/login",
    session_store: Optional[SessionStore] = None,
) -> Blueprint:
    """
    Build the Box login blueprint.

    Args:
        reconciler: Receives the verified identity on success; its return
            value is the response of the callback route
        config: Provider configuration (loaded from environment on first use
            if not provided)
        flow: Login flow (overrides session_store when given)
        login_url: Where to send the user when login fails
        session_store: Server-side store for pending states. Defaults to a
            process-local InMemorySessionStore; deployments running several
            worker processes must pass a shared store with an atomic ``pop``.

    Returns:
        Flask Blueprint named ``social_auth_box``
    """
    blueprint = Blueprint("social_auth_box", __name__)
    if flow is None:
        store = session_store if session_store is not None else InMemorySessionStore()
        flow = AuthFlow(state_store=StateStore(store))
    login_flow = flow
    loaded: dict[str, ProviderConfig] = {}

    def get_config() -> ProviderConfig:
        if config is not None:
            return config
        if "config" not in loaded:
            loaded["config"] = ProviderConfig.from_env()
        return loaded["config"]

    def fail(message: str) -> Response:
        flash(message, "error")
        return redirect(login_url)

    @blueprint.route("/user/login/box", methods=["GET"])
    def redirect_to_box():
        """Redirect the user to Box for authentication."""
        try:
            provider_config = get_config()
        except ConfigurationError as e:
            logger.error(f"Box login not configured: {e}")
            return fail(NOT_CONFIGURED_MESSAGE)

        url = login_flow.start(current_session_key(), provider_config)
        return redirect(url)

    @blueprint.route("/user/login/box/callback", methods=["GET"])
    def callback():
        """Box returns the user here after authenticating."""
        try:
            provider_config = get_config()
        except ConfigurationError as e:
            logger.error(f"Box login not configured: {e}")
            return fail(NOT_CONFIGURED_MESSAGE)

        result = login_flow.callback(current_session_key(), provider_config, request.args)

        if not result.success:
            return fail(FAILURE_MESSAGES[result.failure])

        profile = result.profile
        return reconciler.authenticate_user(
            profile.name,
            profile.email,
            profile.external_id,
            result.token.access_token,
            profile.avatar_url,
            "",
        )

    return blueprint
