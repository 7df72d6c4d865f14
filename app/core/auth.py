import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from bson.objectid import ObjectId
from bson.errors import InvalidId

from app.core.auth_gate import AuthSession, AuthStatus
from app.core.config import settings
from app.db.mongodb import db

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hashed password."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)

def create_access_token(
    data: Dict[str, Any], expires_delta: Optional[timedelta] = None
) -> str:
    """Create JWT access token."""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM
    )

    return encoded_jwt

def _token_from_request(request: Request, bearer: Optional[str]) -> Optional[str]:
    # Pages are browsed with the cookie, API clients send the bearer header
    return bearer or request.cookies.get(settings.ACCESS_TOKEN_COOKIE)

async def _load_user(token: str) -> Optional[Dict[str, Any]]:
    """Resolve a token to its user document, or None when it is not usable."""
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except JWTError as jwt_error:
        logger.info("JWT decode error: %s", jwt_error)
        return None

    subject = payload.get("sub")
    if subject is None:
        return None

    try:
        object_id = ObjectId(subject)
    except (InvalidId, TypeError):
        logger.info("Invalid user id in token: %s", subject)
        return None

    user = await db.db.users.find_one({"_id": object_id})
    if user is None or not user.get("isActive", True):
        logger.info("User not found or inactive for ID: %s", subject)
        return None
    return user

async def get_optional_user(
    request: Request, token: Optional[str] = Depends(oauth2_scheme)
) -> Optional[Dict[str, Any]]:
    """Current user when a valid token is present, None otherwise."""
    token = _token_from_request(request, token)
    if not token:
        return None
    return await _load_user(token)

async def get_current_user(
    user: Optional[Dict[str, Any]] = Depends(get_optional_user),
) -> Dict[str, Any]:
    """Get current user from token, 401 when missing or invalid."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

async def get_current_owner(
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    """Restrict an endpoint to salon owners."""
    if current_user.get("userType") != "owner":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Salon owner account required",
        )
    return current_user

def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """User fields safe to send to the browser."""
    return {
        "id": str(user["_id"]),
        "email": user.get("email", ""),
        "firstName": user.get("firstName", ""),
        "lastName": user.get("lastName", ""),
        "phone": user.get("phone"),
        "salonId": user.get("salonId"),
    }

async def get_session(
    user: Optional[Dict[str, Any]] = Depends(get_optional_user),
) -> AuthSession:
    """Server-side view of the caller's session. Never hydrating."""
    if user is None:
        return AuthSession(status=AuthStatus.ANONYMOUS)
    return AuthSession(
        status=AuthStatus.AUTHENTICATED,
        user=public_user(user),
        user_type=user.get("userType"),
    )
