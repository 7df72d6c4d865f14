from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from datetime import timedelta

from app.core.auth import create_access_token, get_session, public_user
from app.core.auth_gate import (
    AuthSession,
    Blank,
    GateOutcome,
    RedirectTo,
    Render,
    UserType,
    resolve_gate_outcome,
)
from app.core.config import settings
from app.schemas.user import (
    GateResponse,
    LoginRequest,
    SessionResponse,
    TokenResponse,
    UserCreate,
)
from app.services.user_service import (
    EmailAlreadyRegisteredError,
    authenticate_user,
    create_user,
    update_last_login,
)

router = APIRouter()

def _issue_token(user, response: Response) -> TokenResponse:
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": str(user["_id"]), "userType": user["userType"]},
        expires_delta=access_token_expires
    )
    response.set_cookie(
        settings.ACCESS_TOKEN_COOKIE,
        access_token,
        max_age=int(access_token_expires.total_seconds()),
        httponly=True,
        samesite="lax",
    )
    return TokenResponse(
        access_token=access_token,
        userType=user["userType"],
        user=public_user(user),
    )

def gate_response(outcome: GateOutcome) -> GateResponse:
    if isinstance(outcome, Render):
        return GateResponse(outcome="render", stale=outcome.stale)
    if isinstance(outcome, RedirectTo):
        return GateResponse(outcome="redirect", path=outcome.path, replace=outcome.replace)
    if isinstance(outcome, Blank):
        return GateResponse(outcome="blank")
    return GateResponse(outcome="loading", message=outcome.message)

@router.post("/register", response_model=TokenResponse)
async def register(user_in: UserCreate, response: Response):
    """Create an owner or client account and open a session"""
    try:
        user = await create_user(user_in)
    except EmailAlreadyRegisteredError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered"
        )
    return _issue_token(user, response)

@router.post("/login", response_model=TokenResponse)
async def login(credentials: LoginRequest, response: Response):
    """Authenticate with email and password"""
    user = await authenticate_user(credentials.email, credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    await update_last_login(user)
    return _issue_token(user, response)

@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(settings.ACCESS_TOKEN_COOKIE)
    return {"message": "Logged out"}

@router.get("/user", response_model=SessionResponse)
async def read_session(session: AuthSession = Depends(get_session)):
    """
    Current session. Anonymous callers get ``authenticated: false`` rather
    than a 401 so the front-end can tell "no session" from a failed request.
    """
    if not session.user:
        return SessionResponse(authenticated=False)
    return SessionResponse(
        authenticated=True,
        userType=session.user_type,
        user=session.user,
    )

@router.get("/gate", response_model=GateResponse)
async def resolve_gate(
    role: UserType = Query(..., description="Role required by the view"),
    session: AuthSession = Depends(get_session),
):
    """Resolve what a role-gated view should do for the caller's session"""
    return gate_response(resolve_gate_outcome(session, role))
