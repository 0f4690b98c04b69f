"""
Anti-forgery state storage for the Box login handshake.

This module mints the OAuth ``state`` value, keeps it in a session-scoped
key/value store across the redirect round trip, and validates it exactly
once when the provider sends the browser back.
"""

import hmac
import logging
import secrets
import threading
import time
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)

# Session key prefix for the pending state
STATE_KEY_PREFIX = "social_auth_box.oauth2state"


class SessionStore(Protocol):
    """Session-scoped key/value store supplied by the host application."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemorySessionStore:
    """
    Process-local session store.

    Suitable for tests and single-process deployments. ``pop`` reads and
    removes a value under one lock, so duplicate callbacks racing each
    other cannot both see the same state.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def pop(self, key: str) -> Any:
        with self._lock:
            return self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


def _short(state: Optional[str]) -> str:
    """Loggable prefix of a state value."""
    if not state:
        return "<empty>"
    return f"{state[:6]}..."


class StateStore:
    """
    Mints, persists and validates single-use state tokens.

    At most one login attempt is tracked per session key: persisting a new
    state overwrites any earlier unconsumed one.
    """

    DEFAULT_TTL_SECONDS = 600

    def __init__(
        self,
        session_store: Optional[SessionStore] = None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        token_bytes: int = 32,
    ):
        """
        Initialize state store.

        Args:
            session_store: Backing store (in-memory store if not provided)
            ttl_seconds: How long a persisted state stays acceptable
            token_bytes: Random bytes per minted state (32 = 256 bits)
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if token_bytes < 16:
            raise ValueError("token_bytes must be at least 16 (128 bits)")

        self.session_store: SessionStore = (
            session_store if session_store is not None else InMemorySessionStore()
        )
        self.ttl_seconds = ttl_seconds
        self.token_bytes = token_bytes

    @staticmethod
    def _key(session_key: str) -> str:
        return f"{STATE_KEY_PREFIX}:{session_key}"

    def mint(self) -> str:
        """
        Generate a new opaque state token.

        Returns:
            URL-safe random string from the OS CSPRNG
        """
        return secrets.token_urlsafe(self.token_bytes)

    def persist(self, session_key: str, state: str) -> None:
        """
        Store state for the current login attempt, replacing any previous one.

        Args:
            session_key: Identity of the browser session
            state: Value returned by mint()
        """
        if not state:
            raise ValueError("state cannot be empty")

        self.session_store.set(
            self._key(session_key),
            {"state": state, "expires_at": time.time() + self.ttl_seconds},
        )
        logger.debug(f"Persisted OAuth state {_short(state)} for session")

    def validate_and_consume(self, session_key: str, received_state: Optional[str]) -> bool:
        """
        Check the state returned by the provider and remove the stored value.

        The stored value is cleared whatever the outcome, so each minted state
        is accepted at most once.

        Args:
            session_key: Identity of the browser session
            received_state: ``state`` query parameter from the callback

        Returns:
            True only if a non-expired state was stored and equals received_state
        """
        stored = self._take(self._key(session_key))

        if not received_state:
            logger.warning("OAuth callback carried no state")
            return False

        if not isinstance(stored, dict) or not stored.get("state"):
            logger.warning(f"No pending OAuth state for received {_short(received_state)}")
            return False

        if time.time() >= float(stored.get("expires_at", 0)):
            logger.warning(f"OAuth state {_short(received_state)} has expired")
            return False

        # compare_digest only accepts ASCII str, so compare the encoded bytes
        if not hmac.compare_digest(
            str(stored["state"]).encode("utf-8", "surrogatepass"),
            str(received_state).encode("utf-8", "surrogatepass"),
        ):
            logger.warning(f"OAuth state mismatch for received {_short(received_state)}")
            return False

        logger.debug(f"Validated and consumed OAuth state {_short(received_state)}")
        return True

    def discard(self, session_key: str) -> None:
        """Forget any pending state for the session."""
        self.session_store.delete(self._key(session_key))

    def _take(self, key: str) -> Any:
        """Read and clear a value, atomically when the store supports it."""
        pop = getattr(self.session_store, "pop", None)
        if callable(pop):
            return pop(key)

        value = self.session_store.get(key)
        self.session_store.delete(key)
        return value
