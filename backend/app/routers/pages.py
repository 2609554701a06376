"""Server-rendered portal pages.

Role-gated pages go through the `RequireRole` family with a
`RedirectNavigator`, so a denied visitor is sent to /dashboard with a 303.
Sections inside a page go through `PermissionGate` variants and simply
disappear (or show a fallback) when the visitor lacks access.

Routes:
  GET  /login               sign-in form
  POST /login               form login → session cookie → /dashboard
  GET  /logout              revoke session cookie → /login
  GET  /dashboard           any authenticated user
  GET  /admin               admin and above
  GET  /admin/system        super_admin only
  GET  /dealer/settings     dealer_admin and above
  GET  /dealers/{dealer_id} anyone who can access that dealer
"""

from html import escape

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import require_page_auth
from app.auth.guards import (
    AdminOnly,
    DealerAccessGate,
    PermissionGate,
    RequireAdmin,
    RequireDealerAdmin,
    RequireRole,
    RequireSuperAdmin,
    SuperAdminOnly,
)
from app.auth.jwt import decode_token
from app.auth.navigation import RedirectNavigator
from app.auth.principal import SessionState
from app.auth.revocation import TokenRevocation
from app.auth.roles import UserRole, role_badge_color, role_label
from app.config import settings
from app.database import get_db
from app.models.dealer import Dealer
from app.routers.auth import authenticate, build_token_response, set_session_cookie

router = APIRouter(tags=["pages"])


# ── Rendering helpers ────────────────────────────────────────

def _html(title: str, body: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(
        "<!doctype html><html><head>"
        f"<title>{escape(title)} · Dealer Portal</title>"
        "</head><body>"
        f"<main><h1>{escape(title)}</h1>{body}</main>"
        "</body></html>",
        status_code=status_code,
    )


def _role_badge(session: SessionState) -> str:
    role = session.principal.role if session.principal else None
    return f'<span class="badge {role_badge_color(role)}">{escape(role_label(role))}</span>'


def _guarded(
    guard: RequireRole,
    navigator: RedirectNavigator,
    session: SessionState,
    title: str,
    content: str,
) -> Response:
    body = guard.render(session, content)
    if navigator.redirected:
        return navigator.response()
    return _html(title, body or "")


# ── Login / logout ───────────────────────────────────────────

_LOGIN_FORM = (
    '<form method="post" action="/login">'
    '<label>Email <input type="email" name="email" required></label>'
    '<label>Password <input type="password" name="password" required></label>'
    '<button type="submit">Sign in</button>'
    "</form>"
)


@router.get("/login", response_class=HTMLResponse)
async def login_page():
    return _html("Sign in", _LOGIN_FORM)


@router.post("/login")
async def login_submit(
    email: str = Form(...),
    password: str = Form(...),
    db: AsyncSession = Depends(get_db),
):
    try:
        user = await authenticate(db, email, password)
    except HTTPException as e:
        error = f'<p class="error">{escape(str(e.detail))}</p>'
        return _html("Sign in", error + _LOGIN_FORM, status_code=e.status_code)

    tokens = build_token_response(user)
    response = RedirectResponse(settings.default_redirect, status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, tokens.access_token)
    return response


@router.get("/logout")
async def logout_page(request: Request):
    token = request.cookies.get(settings.access_token_cookie)
    if token:
        payload = decode_token(token)
        if payload:
            await TokenRevocation.revoke_token(token, float(payload.get("exp", 0)))
    response = RedirectResponse(settings.login_path, status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.access_token_cookie)
    return response


# ── Portal pages ─────────────────────────────────────────────

@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(session: SessionState = Depends(require_page_auth)):
    principal = session.principal
    sections = [f"<p>Signed in as {_role_badge(session)}</p>"]

    if principal.dealer_id:
        dealer_link = f'<a href="/dealers/{escape(principal.dealer_id)}">My dealership</a>'
        sections.append(DealerAccessGate(principal.dealer_id).render(session, dealer_link) or "")

    sections.append(
        PermissionGate(min_role=UserRole.DEALER_ADMIN).render(
            session, '<a href="/dealer/settings">Dealer settings</a>'
        ) or ""
    )
    sections.append(AdminOnly().render(session, '<a href="/admin">Administration</a>') or "")
    sections.append(
        SuperAdminOnly().render(session, '<a href="/admin/system">System settings</a>') or ""
    )
    return _html("Dashboard", "".join(sections))


@router.get("/admin")
async def admin_page(session: SessionState = Depends(require_page_auth)):
    navigator = RedirectNavigator()
    content = (
        '<ul><li><a href="/api/dealers">Dealers</a></li>'
        '<li><a href="/api/users">Users</a></li></ul>'
    )
    return _guarded(RequireAdmin(navigator), navigator, session, "Administration", content)


@router.get("/admin/system")
async def system_page(session: SessionState = Depends(require_page_auth)):
    navigator = RedirectNavigator()
    content = "<p>Platform configuration and role management.</p>"
    return _guarded(RequireSuperAdmin(navigator), navigator, session, "System settings", content)


@router.get("/dealer/settings")
async def dealer_settings_page(session: SessionState = Depends(require_page_auth)):
    navigator = RedirectNavigator()
    content = "<p>Manage your dealership's users and profile.</p>"
    return _guarded(RequireDealerAdmin(navigator), navigator, session, "Dealer settings", content)


@router.get("/dealers/{dealer_id}", response_class=HTMLResponse)
async def dealer_page(
    dealer_id: str,
    session: SessionState = Depends(require_page_auth),
    db: AsyncSession = Depends(get_db),
):
    gate = DealerAccessGate(
        dealer_id, fallback="<p>You do not have access to this dealer.</p>"
    )
    # children stand in as None: the dealer row is only loaded once granted
    denied = gate.render(session, None)
    if denied is not None:
        return _html("Dealer", denied, status_code=status.HTTP_403_FORBIDDEN)

    dealer = await db.get(Dealer, dealer_id)
    if dealer is None:
        return _html("Dealer", "<p>Dealer not found.</p>", status_code=status.HTTP_404_NOT_FOUND)

    body = (
        f"<dl><dt>Code</dt><dd>{escape(dealer.code)}</dd>"
        f"<dt>Status</dt><dd>{escape(dealer.status.value)}</dd></dl>"
    )
    return _html(dealer.name, body)
