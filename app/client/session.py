import logging
from typing import Any, Dict, Optional

import httpx

from app.core.auth_gate import AuthSession, AuthStatus
from app.core.config import settings

logger = logging.getLogger(__name__)

SESSION_PATH = "/api/v1/auth/user"
LOGIN_PATH = "/api/v1/auth/login"

ANONYMOUS = AuthSession(status=AuthStatus.ANONYMOUS)


class HttpSessionProvider:
    """
    Session provider backed by the API's ``/auth/user`` endpoint.

    ``session`` starts in the hydrating/loading state until ``hydrate()``
    completes. ``refresh()`` re-reads the session without touching the
    hydration flag and lets transport errors propagate to the caller.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url or settings.API_BASE_URL)
        self._token = token
        self.session = AuthSession(status=AuthStatus.LOADING, is_hydrating=True)

    @property
    def token(self) -> Optional[str]:
        return self._token

    def _headers(self) -> Dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    async def hydrate(self) -> AuthSession:
        """Restore the session on startup. Any failure leaves it anonymous."""
        self.session = AuthSession(status=AuthStatus.LOADING, is_hydrating=True)
        try:
            self.session = await self._fetch_session()
        except httpx.HTTPError as error:
            logger.error("Session restore failed: %s", error)
            self.session = ANONYMOUS
        return self.session

    async def refresh(self) -> None:
        self.session = await self._fetch_session()

    async def login(self, email: str, password: str) -> bool:
        response = await self._client.post(
            LOGIN_PATH, json={"email": email, "password": password}
        )
        if response.status_code != 200:
            logger.info("Login rejected for %s (status %s)", email, response.status_code)
            return False
        self._token = response.json()["access_token"]
        await self.hydrate()
        return self.session.status == AuthStatus.AUTHENTICATED

    def logout(self) -> None:
        self._token = None
        self._client.cookies.clear()
        self.session = ANONYMOUS

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _fetch_session(self) -> AuthSession:
        response = await self._client.get(SESSION_PATH, headers=self._headers())
        if response.status_code != 200:
            logger.info("Session endpoint answered %s, treating as anonymous", response.status_code)
            return ANONYMOUS

        data: Dict[str, Any] = response.json()
        if not data.get("authenticated") or not data.get("userType"):
            return ANONYMOUS

        return AuthSession(
            status=AuthStatus.AUTHENTICATED,
            user=data.get("user"),
            user_type=data["userType"],
        )
