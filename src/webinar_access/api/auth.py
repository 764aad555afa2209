"""Caller authentication using identity-provider bearer tokens."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request, status
from jose import JWTError, jwt

from webinar_access.config import Settings  # noqa: TC001

if TYPE_CHECKING:
    from webinar_access.containers import AppContainer

_logger = logging.getLogger(__name__)


def _get_settings(request: Request) -> Settings:
    container: AppContainer = request.app.state.container
    return container.settings


def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials. Invalid or expired token.",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_caller(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(_get_settings),
) -> UUID:
    """Return the caller's user id from a verified bearer token."""
    if not authorization or not authorization.startswith("Bearer "):
        raise _credentials_error()
    token = authorization.split(" ", 1)[1].strip()
    try:
        payload = jwt.decode(
            token,
            settings.identity_jwt_secret,
            algorithms=[settings.identity_jwt_algorithm],
            options={"verify_aud": False},
        )
    except JWTError as exc:
        _logger.warning("Rejected caller token: %s", exc)
        raise _credentials_error() from exc
    subject = payload.get("sub")
    try:
        return UUID(str(subject))
    except ValueError:
        _logger.warning("Caller token carries a malformed subject")
        raise _credentials_error() from None
