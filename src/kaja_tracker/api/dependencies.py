"""Request dependencies for session and approval checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends, Header, HTTPException, Request, status

from kaja_tracker.services.access import AuthenticationError, SessionState

if TYPE_CHECKING:
    from kaja_tracker.containers import AppContainer

PENDING_APPROVAL = "pending_approval"


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def resolve_session(
    container: AppContainer, authorization: str | None
) -> SessionState:
    """Return the caller's session or raise 401."""
    token = bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        return await container.access_service.check(token)
    except AuthenticationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from exc


async def require_session(
    request: Request, authorization: str | None = Header(default=None)
) -> SessionState:
    """Ensure the request carries a valid session."""
    return await resolve_session(request.app.state.container, authorization)


async def require_approved(
    session: SessionState = Depends(require_session),
) -> SessionState:
    """Ensure the session belongs to an approved user."""
    if not session.approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=PENDING_APPROVAL
        )
    return session


async def require_admin_profile(
    session: SessionState = Depends(require_approved),
) -> SessionState:
    """Ensure the session belongs to an administrator."""
    if not session.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)
    return session
