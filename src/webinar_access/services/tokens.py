"""Signed access tokens for the external conferencing provider."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID

from jose import JWTError, jwt

from webinar_access.domain.access import AccessGrant, SessionRole
from webinar_access.domain.errors import InvalidArgumentError, SigningError
from webinar_access.domain.sessions import WebinarSession

MIN_SHARED_SECRET_LENGTH = 32
NOT_BEFORE_LEEWAY_SECONDS = 10

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SigningKey:
    """Key material used to sign access tokens."""

    secret: str
    algorithm: str = "HS256"
    key_id: str | None = None
    verification_key: str | None = None


class SigningKeyProvider(Protocol):
    """Source of the signing key; rotation happens behind this interface."""

    def get_signing_key(self) -> SigningKey:
        """Return the current signing key."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def compute_expiry(
    session: WebinarSession, now: datetime, buffer_minutes: int
) -> datetime:
    """Return when a grant issued at ``now`` should stop working.

    Before or during the session the grant lasts until the scheduled end plus
    the buffer. After the scheduled end it only buys the buffer from now.
    """
    buffer = timedelta(minutes=buffer_minutes)
    if now > session.end_time:
        return now + buffer
    return session.end_time + buffer


def room_name_for(app_id: str, session_id: UUID) -> str:
    """Return the conferencing room addressed by a session."""
    return f"{app_id}/{session_id}"


def validate_signing_key(key: SigningKey) -> None:
    """Reject keys that cannot be used to sign tokens."""
    if not key.secret:
        raise SigningError("Conferencing signing key is not configured")
    if key.algorithm.startswith("HS") and len(key.secret) < MIN_SHARED_SECRET_LENGTH:
        raise SigningError(
            "Conferencing signing key must be at least "
            f"{MIN_SHARED_SECRET_LENGTH} characters long"
        )


@dataclass
class AccessTokenIssuer:
    """Mints time-windowed, claims-bearing tokens for a session room."""

    key_provider: SigningKeyProvider
    app_id: str
    issuer: str
    audience: str = "jitsi"
    clock: Callable[[], datetime] = _utcnow

    def issue(  # noqa: PLR0913
        self,
        session: WebinarSession,
        user_id: UUID,
        display_name: str,
        role: SessionRole,
        buffer_minutes: int,
        *,
        avatar_url: str | None = None,
        email: str | None = None,
        now: datetime | None = None,
    ) -> AccessGrant:
        """Build and sign an access grant for a user."""
        if buffer_minutes < 0:
            raise InvalidArgumentError("buffer_minutes must be non-negative")
        issued_at = now or self.clock()
        expires_at = compute_expiry(session, issued_at, buffer_minutes)
        room_name = room_name_for(self.app_id, session.id)
        is_moderator = role is SessionRole.MODERATOR
        claims: dict[str, object] = {
            "sub": str(user_id),
            "aud": self.audience,
            "iss": self.issuer,
            "room": room_name,
            "iat": int(issued_at.timestamp()),
            "nbf": int(issued_at.timestamp()) - NOT_BEFORE_LEEWAY_SECONDS,
            "exp": int(expires_at.timestamp()),
            "context": {
                "user": {
                    "id": str(user_id),
                    "name": display_name,
                    "avatar": avatar_url or "",
                    "email": email or "",
                    "role": role.value,
                    "moderator": "true" if is_moderator else "false",
                },
                "room": {"id": room_name, "name": session.title},
            },
        }
        token = self._sign(claims, user_id)
        _logger.info(
            "Issued %s grant for user %s in session %s, expires %s",
            role.value,
            user_id,
            session.id,
            expires_at.isoformat(),
        )
        return AccessGrant(
            user_id=user_id,
            session_id=session.id,
            role=role,
            room_name=room_name,
            issued_at=issued_at,
            expires_at=expires_at,
            token=token,
        )

    def decode(self, token: str, verify_expiry: bool = True) -> dict[str, object]:
        """Verify a grant token and return its claims."""
        key = self.key_provider.get_signing_key()
        try:
            return jwt.decode(
                token,
                key.verification_key or key.secret,
                algorithms=[key.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_exp": verify_expiry, "verify_nbf": verify_expiry},
            )
        except JWTError as exc:
            raise InvalidArgumentError(f"Invalid access token: {exc}") from exc

    def _sign(self, claims: dict[str, object], user_id: UUID) -> str:
        try:
            key = self.key_provider.get_signing_key()
            validate_signing_key(key)
            headers = {"kid": key.key_id or f"{self.app_id}/{user_id}"}
            return jwt.encode(
                claims, key.secret, algorithm=key.algorithm, headers=headers
            )
        except SigningError:
            _logger.error("Conferencing signing key rejected", exc_info=True)
            raise
        except Exception as exc:
            _logger.error(
                "Error signing access token for user %s: %s",
                user_id,
                exc,
                exc_info=True,
            )
            raise SigningError("Could not sign access token") from exc
