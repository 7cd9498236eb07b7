"""Admin API endpoints with token or admin-profile auth."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from kaja_tracker.api.dependencies import resolve_session
from kaja_tracker.dates import format_date_key

if TYPE_CHECKING:
    from kaja_tracker.containers import AppContainer
    from kaja_tracker.domain.models import Profile

router = APIRouter(prefix="/admin", tags=["admin"])
_logger = logging.getLogger(__name__)


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def require_admin_access(
    request: Request,
    x_admin_token: str | None = Header(default=None),
    authorization: str | None = Header(default=None),
) -> None:
    """Accept the admin token or a signed-in administrator."""
    container: AppContainer = request.app.state.container
    if x_admin_token and x_admin_token == container.settings.admin_token:
        return
    session = await resolve_session(container, authorization)
    if not session.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)


def serialize_profile(profile: Profile) -> dict[str, object]:
    """Return the JSON shape of a profile."""
    return {
        "id": str(profile.id),
        "email": profile.email,
        "full_name": profile.full_name,
        "display_name": profile.display_name,
        "avatar_url": profile.avatar_url,
        "is_admin": profile.is_admin,
        "is_approved": profile.is_approved,
        "created_at": profile.created_at.isoformat() if profile.created_at else None,
    }


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/users", dependencies=[Depends(require_admin_access)])
async def list_users(request: Request) -> dict[str, object]:
    """Return every profile, newest first."""
    container: AppContainer = request.app.state.container
    profiles = container.admin_service.list_users()
    return {"users": [serialize_profile(profile) for profile in profiles]}


@router.post("/users/{user_id}/approve", dependencies=[Depends(require_admin_access)])
async def approve_user(user_id: UUID, request: Request) -> dict[str, object]:
    """Grant a user access."""
    container: AppContainer = request.app.state.container
    profile = container.admin_service.approve(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"user": serialize_profile(profile)}


@router.post("/users/{user_id}/revoke", dependencies=[Depends(require_admin_access)])
async def revoke_user(user_id: UUID, request: Request) -> dict[str, object]:
    """Withdraw a user's access."""
    container: AppContainer = request.app.state.container
    profile = container.admin_service.revoke(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"user": serialize_profile(profile)}


@router.post("/reminders/daily", dependencies=[Depends(require_admin)])
async def send_daily_reminders(request: Request) -> dict[str, object]:
    """Email approved users when today's meal is still unrecorded."""
    container: AppContainer = request.app.state.container
    run = await container.reminder_service.send_daily_reminders(container.today())
    return {
        "date": format_date_key(run.day),
        "skipped_reason": run.skipped_reason,
        "results": [asdict(result) for result in run.results],
    }


@router.post("/calendar/reload", dependencies=[Depends(require_admin)])
async def reload_calendar(request: Request) -> dict[str, str]:
    """Drop the loaded calendar window so the next page refetches it."""
    container: AppContainer = request.app.state.container
    container.calendar.reset()
    _logger.info("Calendar window reset by admin")
    return {"status": "ok"}


@router.get("/ui", response_class=HTMLResponse)
async def admin_ui() -> HTMLResponse:
    """Minimal admin UI that consumes the admin API."""
    return HTMLResponse(_ADMIN_UI_HTML)


_ADMIN_UI_HTML = """<!doctype html>
<html lang="hu">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Kaja Tracker Admin</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      h1 { margin-bottom: 0.5rem; }
      .row { margin-bottom: 1rem; }
      input { padding: 0.4rem 0.6rem; width: 320px; }
      button { padding: 0.4rem 0.8rem; margin-right: 0.5rem; }
      pre { background: #f6f6f6; padding: 1rem; overflow: auto; }
    </style>
  </head>
  <body>
    <h1>Kaja Tracker Admin</h1>
    <div class="row">
      <label>Admin token</label><br />
      <input id="token" type="password" placeholder="X-Admin-Token" />
    </div>
    <div class="row">
      <label>User id</label><br />
      <input id="user" placeholder="UUID" />
    </div>
    <div class="row">
      <button onclick="call('GET', '/admin/users')">Users</button>
      <button onclick="callUser('approve')">Approve</button>
      <button onclick="callUser('revoke')">Revoke</button>
      <button onclick="call('POST', '/admin/reminders/daily')">Send reminders</button>
      <button onclick="call('POST', '/admin/calendar/reload')">Reload calendar</button>
    </div>
    <pre id="output">Ready.</pre>
    <script>
      function callUser(action) {
        const user = document.getElementById('user').value.trim();
        call('POST', '/admin/users/' + user + '/' + action);
      }
      async function call(method, path) {
        const token = document.getElementById('token').value;
        const output = document.getElementById('output');
        output.textContent = 'Loading...';
        const res = await fetch(path, {
          method: method,
          headers: { 'X-Admin-Token': token }
        });
        if (!res.ok) {
          output.textContent = 'Error: ' + res.status;
          return;
        }
        const data = await res.json();
        output.textContent = JSON.stringify(data, null, 2);
      }
    </script>
  </body>
</html>
"""
