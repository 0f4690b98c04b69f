"""State machine enums for a single login attempt."""

from enum import Enum


class FlowState(Enum):
    """
    States of one login attempt.

    A fresh attempt is IDLE until start() issues the redirect. The callback
    walks the attempt through the exchange and profile fetch, ending in
    either COMPLETED or FAILED.
    """

    IDLE = "idle"
    AWAITING_CALLBACK = "awaiting_callback"  # Redirected to Box, state persisted
    EXCHANGING = "exchanging"  # Trading the code for a token
    FETCHING_PROFILE = "fetching_profile"  # Loading /users/me
    COMPLETED = "completed"
    FAILED = "failed"


class FailureReason(Enum):
    """Why an attempt ended in FAILED."""

    USER_DENIED = "user_denied"
    PROVIDER_ERROR = "provider_error"
    INVALID_STATE = "invalid_state"
    EXCHANGE_FAILED = "exchange_failed"
    PROFILE_FETCH_FAILED = "profile_fetch_failed"


# Valid state transitions for a login attempt
VALID_TRANSITIONS: dict[FlowState, dict[str, FlowState]] = {
    FlowState.IDLE: {
        "start": FlowState.AWAITING_CALLBACK,
    },
    FlowState.AWAITING_CALLBACK: {
        "code_received": FlowState.EXCHANGING,
        "fail": FlowState.FAILED,
    },
    FlowState.EXCHANGING: {
        "token_received": FlowState.FETCHING_PROFILE,
        "fail": FlowState.FAILED,
    },
    FlowState.FETCHING_PROFILE: {
        "profile_received": FlowState.COMPLETED,
        "fail": FlowState.FAILED,
    },
}


def next_state(current: FlowState, action: str) -> FlowState:
    """
    Look up where ``action`` leads from ``current``.

    Raises:
        ValueError: If the table has no such edge; COMPLETED and FAILED
            have none at all.
    """
    edges = VALID_TRANSITIONS.get(current, {})
    try:
        return edges[action]
    except KeyError:
        raise ValueError(
            f"Login attempt in {current.value} cannot take '{action}' "
            f"(allowed: {', '.join(edges) or 'none'})"
        ) from None
