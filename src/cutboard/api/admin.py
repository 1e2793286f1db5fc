"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import HTMLResponse

if TYPE_CHECKING:
    from cutboard.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


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


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/diagnostics", dependencies=[Depends(require_admin)])
async def diagnostics(request: Request) -> dict[str, object]:
    """Report configuration presence and database connectivity."""
    container: AppContainer = request.app.state.container
    return container.admin_service.diagnostics()


@router.get("/users", dependencies=[Depends(require_admin)])
async def list_users(request: Request, limit: int = 50) -> dict[str, object]:
    """Return users with stored documents."""
    container: AppContainer = request.app.state.container
    return {"users": container.admin_service.list_users(limit)}


@router.get("/ui", response_class=HTMLResponse)
async def admin_ui() -> HTMLResponse:
    """Minimal admin UI that consumes the admin API."""
    return HTMLResponse(_ADMIN_UI_HTML)


_ADMIN_UI_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>CutBoard Admin</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      .row { margin-bottom: 1rem; }
      input { padding: 0.4rem 0.6rem; width: 320px; }
      button { padding: 0.4rem 0.8rem; margin-right: 0.5rem; }
      pre { background: #f6f6f6; padding: 1rem; overflow: auto; }
    </style>
  </head>
  <body>
    <h1>CutBoard Admin</h1>
    <div class="row">
      <input id="token" type="password" placeholder="X-Admin-Token" />
    </div>
    <div class="row">
      <button onclick="show('/admin/diagnostics')">Diagnostics</button>
      <button onclick="show('/admin/users')">Users</button>
    </div>
    <pre id="output">Ready.</pre>
    <script>
      async function show(path) {
        const output = document.getElementById('output');
        const res = await fetch(path, {
          headers: { 'X-Admin-Token': document.getElementById('token').value }
        });
        output.textContent = res.ok
          ? JSON.stringify(await res.json(), null, 2)
          : 'Error: ' + res.status;
      }
    </script>
  </body>
</html>
"""
