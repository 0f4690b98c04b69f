"""
Data structures exchanged during the Box login handshake.

None of these are persisted by this package; the host application owns
tokens and profiles once a login completes.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional


@dataclass
class AuthorizationRequest:
    """
    One outgoing authorization request.

    Attributes:
        scopes: Scopes requested, in the order sent
        state: Anti-forgery token embedded in the URL
        url: Full authorization URL to redirect the browser to
    """

    scopes: list[str]
    state: str
    url: str


@dataclass
class TokenResponse:
    """
    Tokens returned by the token endpoint.

    Attributes:
        access_token: Bearer token for API calls
        refresh_token: Long-lived token, when the provider issues one
        token_type: Token type (typically "bearer")
        expires_in: Access token lifetime in seconds, if known
        scope: Granted scopes as returned by the provider
        issued_at: ISO timestamp of when the token was received
    """

    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    scope: str = ""
    issued_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def expires_at(self) -> Optional[datetime]:
        """
        Calculate expiration datetime.

        Returns:
            Timezone-aware UTC datetime, or None if the lifetime is unknown
        """
        if self.expires_in is None:
            return None
        issued = datetime.fromisoformat(self.issued_at)
        if issued.tzinfo is None:
            issued = issued.replace(tzinfo=timezone.utc)
        return issued + timedelta(seconds=self.expires_in)

    @property
    def is_expired(self) -> bool:
        """True if the access token has a known lifetime that has passed."""
        expires_at = self.expires_at
        return expires_at is not None and datetime.now(timezone.utc) >= expires_at

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "TokenResponse":
        """
        Create TokenResponse from a token endpoint JSON body.

        Raises:
            KeyError: If access_token is missing
            ValueError: If access_token is empty or expires_in is not numeric
        """
        access_token = data["access_token"]
        if not access_token or not isinstance(access_token, str):
            raise ValueError("access_token is empty")

        expires_in = data.get("expires_in")
        return cls(
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            token_type=data.get("token_type") or "bearer",
            expires_in=int(expires_in) if expires_in is not None else None,
            scope=data.get("scope", "") or "",
        )


@dataclass
class ExternalProfile:
    """
    Identity of the authenticated user as reported by the provider.

    Attributes:
        external_id: Provider user ID, stable per account
        name: Display name
        email: Email address (the provider may withhold it)
        avatar_url: Profile picture URL
        raw: Full profile payload, for reconciliation extras
    """

    external_id: str
    name: str = ""
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict)


ProfileParser = Callable[[dict[str, Any]], ExternalProfile]


def parse_box_profile(data: dict[str, Any]) -> ExternalProfile:
    """
    Build an ExternalProfile from a Box ``/users/me`` response.

    Box reports the login email as ``login``. Only ``id`` is required.

    Raises:
        KeyError: If the user id is missing
        ValueError: If the user id is empty
    """
    user_id = data["id"]
    if user_id is None or str(user_id) == "":
        raise ValueError("user id is empty")

    return ExternalProfile(
        external_id=str(user_id),
        name=data.get("name") or "",
        email=data.get("login") or None,
        avatar_url=data.get("avatar_url") or None,
        raw=dict(data),
    )
