"""
Authentication gate for protected views.

The decision logic lives in two pure functions:

- ``resolve_route_guard`` for the salon area guard, which waits out the
  window where a session reports ``authenticated`` before its user arrives.
- ``resolve_gate_outcome`` for the role gates (owner / client dashboards).

Both return one of four outcomes (``Render``, ``RedirectTo``, ``ShowLoading``,
``Blank``). ``RouteGuard`` and ``RoleGate`` wrap them with the state they need
(retry counter, pending refresh timer) and apply redirects through a router.

A session provider must expose a ``session`` property returning an
``AuthSession`` and an async ``refresh()``. A router must expose ``location``
and ``navigate(path, replace=False)``.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

from app.core.config import settings

logger = logging.getLogger(__name__)

SALON_LOGIN = "/salon-login"
SALON_REGISTER = "/salon-register"
CLIENT_LOGIN = "/client-login"
CLIENT_REGISTER = "/client-register"
OWNER_DASHBOARD = "/dashboard"
CLIENT_DASHBOARD = "/client-dashboard"


class AuthStatus(str, Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class UserType(str, Enum):
    OWNER = "owner"
    CLIENT = "client"


@dataclass(frozen=True)
class RoleRoutes:
    login: str
    dashboard: str


ROLE_ROUTES: Dict[UserType, RoleRoutes] = {
    UserType.OWNER: RoleRoutes(login=SALON_LOGIN, dashboard=OWNER_DASHBOARD),
    UserType.CLIENT: RoleRoutes(login=CLIENT_LOGIN, dashboard=CLIENT_DASHBOARD),
}


@dataclass(frozen=True)
class AuthSession:
    status: AuthStatus
    user: Optional[Dict[str, Any]] = None
    user_type: Optional[str] = None
    is_hydrating: bool = False


# Outcomes

@dataclass(frozen=True)
class Render:
    # True when the session never produced a user despite all refresh attempts
    stale: bool = False


@dataclass(frozen=True)
class RedirectTo:
    path: str
    replace: bool = True


@dataclass(frozen=True)
class ShowLoading:
    message: str = "Loading..."


@dataclass(frozen=True)
class Blank:
    pass


GateOutcome = Union[Render, RedirectTo, ShowLoading, Blank]


@dataclass(frozen=True)
class GuardDecision:
    outcome: GateOutcome
    retry_delay: Optional[float] = None  # seconds before the next refresh attempt


def _as_user_type(value: Any) -> Optional[UserType]:
    try:
        return UserType(value)
    except ValueError:
        return None


def resolve_gate_outcome(session: AuthSession, required_role: Union[UserType, str]) -> GateOutcome:
    """Decide what a role-gated view shows for ``session``."""
    role = UserType(required_role)
    routes = ROLE_ROUTES[role]

    if session.is_hydrating:
        return ShowLoading("Loading session...")
    if session.status == AuthStatus.LOADING:
        return ShowLoading()
    if session.status == AuthStatus.ANONYMOUS:
        return RedirectTo(routes.login)

    user_type = _as_user_type(session.user_type)
    if user_type is None:
        return RedirectTo(routes.login)
    if user_type != role:
        return RedirectTo(ROLE_ROUTES[user_type].dashboard)
    return Render()


def resolve_route_guard(
    session: AuthSession,
    location: str,
    retry_count: int,
    max_retries: int = 3,
    backoff_ms: int = 300,
    login_path: str = SALON_LOGIN,
    public_paths: Tuple[str, ...] = (SALON_LOGIN, SALON_REGISTER),
) -> GuardDecision:
    """Decide what the salon route guard shows, and whether to retry a refresh."""
    if session.status == AuthStatus.LOADING:
        return GuardDecision(ShowLoading())

    if session.status == AuthStatus.ANONYMOUS:
        if location in public_paths:
            return GuardDecision(Blank())
        return GuardDecision(RedirectTo(login_path))

    if session.user:
        return GuardDecision(Render())

    if retry_count < max_retries:
        delay = backoff_ms * (retry_count + 1) / 1000
        return GuardDecision(ShowLoading(), retry_delay=delay)

    return GuardDecision(Render(stale=True))


def _apply_redirect(router: Any, outcome: GateOutcome) -> None:
    if not isinstance(outcome, RedirectTo):
        return
    if router.location == outcome.path:
        return
    logger.info("Redirecting %s -> %s", router.location, outcome.path)
    router.navigate(outcome.path, replace=outcome.replace)


class RouteGuard:
    """
    Salon area guard.

    Call ``evaluate()`` whenever the session or location changes. While the
    session is authenticated without a user, the guard schedules up to
    ``max_retries`` refreshes with a linear backoff and re-evaluates after each
    one. A pending refresh timer is cancelled when the inputs change or when
    the guard is closed; a refresh already in flight runs to completion.
    """

    def __init__(
        self,
        provider: Any,
        router: Any,
        max_retries: Optional[int] = None,
        backoff_ms: Optional[int] = None,
        login_path: str = SALON_LOGIN,
        public_paths: Tuple[str, ...] = (SALON_LOGIN, SALON_REGISTER),
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._provider = provider
        self._router = router
        self.max_retries = settings.AUTH_REFRESH_MAX_RETRIES if max_retries is None else max_retries
        self.backoff_ms = settings.AUTH_REFRESH_BACKOFF_MS if backoff_ms is None else backoff_ms
        self._login_path = login_path
        self._public_paths = public_paths
        self._sleep = sleep

        self.retry_count = 0
        self._pending: Optional[asyncio.Task] = None
        self._pending_key: Optional[tuple] = None
        self._refreshing = False
        self._closed = False

    @property
    def has_pending_retry(self) -> bool:
        return self._pending is not None

    def evaluate(self) -> GateOutcome:
        session = self._provider.session
        decision = resolve_route_guard(
            session,
            self._router.location,
            self.retry_count,
            max_retries=self.max_retries,
            backoff_ms=self.backoff_ms,
            login_path=self._login_path,
            public_paths=self._public_paths,
        )

        key = (session.status, bool(session.user), self.retry_count)
        if decision.retry_delay is None or key != self._pending_key:
            self._cancel_pending()

        if (
            decision.retry_delay is not None
            and self._pending is None
            and not self._refreshing
            and not self._closed
        ):
            self._pending_key = key
            self._pending = asyncio.get_running_loop().create_task(
                self._retry(decision.retry_delay)
            )

        if isinstance(decision.outcome, Render) and decision.outcome.stale:
            logger.warning(
                "Session still has no user after %d refresh attempts", self.retry_count
            )

        _apply_redirect(self._router, decision.outcome)
        return decision.outcome

    def close(self) -> None:
        self._closed = True
        self._cancel_pending()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
        self._pending = None
        self._pending_key = None

    async def _retry(self, delay: float) -> None:
        await self._sleep(delay)

        # Past this point the attempt is no longer cancellable
        self._pending = None
        self._pending_key = None
        self._refreshing = True
        attempt = self.retry_count + 1
        logger.info("Refreshing session user (attempt %d/%d)", attempt, self.max_retries)
        try:
            await self._provider.refresh()
        except Exception as error:
            logger.warning("Session refresh attempt %d failed: %s", attempt, error)
        finally:
            self._refreshing = False

        self.retry_count += 1
        if not self._closed:
            self.evaluate()


class RoleGate:
    """Owner or client gate around a dashboard view."""

    def __init__(self, provider: Any, router: Any, required_role: Union[UserType, str]):
        self._provider = provider
        self._router = router
        self.required_role = UserType(required_role)

    def evaluate(self) -> GateOutcome:
        outcome = resolve_gate_outcome(self._provider.session, self.required_role)
        _apply_redirect(self._router, outcome)
        return outcome


def with_owner_auth(provider: Any, router: Any) -> RoleGate:
    return RoleGate(provider, router, UserType.OWNER)


def with_client_auth(provider: Any, router: Any) -> RoleGate:
    return RoleGate(provider, router, UserType.CLIENT)
