from html import escape

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from app.core.auth import get_session
from app.core.auth_gate import (
    CLIENT_DASHBOARD,
    CLIENT_LOGIN,
    CLIENT_REGISTER,
    OWNER_DASHBOARD,
    SALON_LOGIN,
    SALON_REGISTER,
    AuthSession,
    GateOutcome,
    RedirectTo,
    Render,
    ShowLoading,
    UserType,
    resolve_gate_outcome,
)
from app.core.config import settings

router = APIRouter(default_response_class=HTMLResponse)

def _page(title: str, body: str = "") -> str:
    return (
        "<!doctype html><html><head><meta charset=\"utf-8\">"
        f"<title>{escape(title)} | {escape(settings.APP_NAME)}</title></head>"
        f"<body><main><h1>{escape(title)}</h1>{body}</main></body></html>"
    )

def render_outcome(outcome: GateOutcome, title: str) -> Response:
    """Turn a gate outcome into an HTTP response for a server-rendered page."""
    if isinstance(outcome, RedirectTo):
        # A server redirect never leaves the gated page in history
        return RedirectResponse(outcome.path, status_code=status.HTTP_303_SEE_OTHER)
    if isinstance(outcome, Render):
        return HTMLResponse(_page(title))
    if isinstance(outcome, ShowLoading):
        return HTMLResponse(_page(outcome.message))
    return HTMLResponse("")

@router.get(OWNER_DASHBOARD)
async def owner_dashboard(session: AuthSession = Depends(get_session)):
    return render_outcome(resolve_gate_outcome(session, UserType.OWNER), "Salon dashboard")

@router.get(CLIENT_DASHBOARD)
async def client_dashboard(session: AuthSession = Depends(get_session)):
    return render_outcome(resolve_gate_outcome(session, UserType.CLIENT), "My appointments")

@router.get(SALON_LOGIN)
async def salon_login():
    return _page("Salon login")

@router.get(SALON_REGISTER)
async def salon_register():
    return _page("Create your salon")

@router.get(CLIENT_LOGIN)
async def client_login():
    return _page("Client login")

@router.get(CLIENT_REGISTER)
async def client_register():
    return _page("Create your account")
