"""
Session manager - who is signed in.

States: RESOLVING -> AUTHENTICATED | ANONYMOUS, then free movement
between the two terminal states via auth notifications.

Two things can end RESOLVING: the startup lookup returning, or an auth
notification arriving first. Whichever comes first wins; the other is
ignored.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from errors import AuthFailed, SessionResolutionFailed, StoreError
from models import AuthUser, User, UserRole
from repositories import AuthBackend
from .events import Observable
from .notifications import Notifier

logger = logging.getLogger(__name__)

DEFAULT_LOGIN = "user"

# Metadata keys tried in order when deriving the login
LOGIN_KEYS = ("user_name", "preferred_username", "name", "full_name")


class SessionState(str, Enum):
    RESOLVING = "resolving"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def project_identity(auth_user: AuthUser, default_login: str = DEFAULT_LOGIN) -> User:
    """
    Normalize a raw identity.

    login: first non-empty of user_name, preferred_username, name,
    full_name, email local part, then `default_login`.
    """
    metadata = auth_user.user_metadata or {}

    login = ""
    for key in LOGIN_KEYS:
        login = _clean(metadata.get(key))
        if login:
            break
    if not login:
        login = _clean(auth_user.email.split("@", 1)[0])
    if not login:
        login = default_login

    raw_role = _clean(metadata.get("role")).lower()
    try:
        role = UserRole(raw_role)
    except ValueError:
        role = UserRole.MEMBER
    if metadata.get("is_owner") is True:
        role = UserRole.OWNER

    return User(
        id=auth_user.id,
        login=login,
        email=auth_user.email,
        avatar_url=_clean(metadata.get("avatar_url")),
        is_owner=role == UserRole.OWNER,
        role=role,
    )


class SessionManager:
    """
    Owns the current identity.

    Lifecycle: start() subscribes and resolves, stop() unsubscribes.
    Observers get (state, user) after every transition.
    """

    def __init__(self, auth: AuthBackend, notifier: Notifier, default_login: str = DEFAULT_LOGIN):
        self.auth = auth
        self.notifier = notifier
        self.default_login = default_login
        self.state = SessionState.RESOLVING
        self.user: Optional[User] = None
        self.changed = Observable("SESSION")
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def is_resolved(self) -> bool:
        return self.state != SessionState.RESOLVING

    def subscribe(self, callback: Callable[[SessionState, Optional[User]], None]) -> Callable[[], None]:
        return self.changed.subscribe(callback)

    async def start(self) -> SessionState:
        """Subscribe to auth changes, then resolve the startup identity."""
        if self._unsubscribe is None:
            self._unsubscribe = self.auth.subscribe(self._on_auth_change)

        try:
            auth_user = await self.auth.get_current_session()
        except Exception as e:
            # Any failure degrades to anonymous; startup never aborts here
            self._resolution_failed(e)
            return self.state

        if self.is_resolved:
            logger.debug("[SESSION] Startup lookup finished after a notification; ignored")
        else:
            self._transition(auth_user)
        return self.state

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _resolution_failed(self, cause: Exception) -> None:
        error = SessionResolutionFailed(f"session lookup failed: {cause}", context={"cause": repr(cause)})
        logger.warning("[SESSION] %s", error)
        if not self.is_resolved:
            self.notifier.warning(error.user_message, error)
            self._transition(None)

    def _on_auth_change(self, auth_user: Optional[AuthUser]) -> None:
        self._transition(auth_user)

    def _transition(self, auth_user: Optional[AuthUser]) -> None:
        previous = (self.state, self.user)
        if auth_user is None:
            self.state = SessionState.ANONYMOUS
            self.user = None
        else:
            self.state = SessionState.AUTHENTICATED
            self.user = project_identity(auth_user, self.default_login)

        if (self.state, self.user) == previous:
            return
        logger.info("[SESSION] %s%s", self.state.value, f" as {self.user.login}" if self.user else "")
        self.changed.notify(self.state, self.user)

    # === Pass-through actions ===

    async def _auth_action(self, call, failure_message: str):
        try:
            return await call
        except (AuthFailed, StoreError) as e:
            logger.warning("[SESSION] %s: %s", failure_message, e)
            message = e.user_message if isinstance(e, AuthFailed) else failure_message
            self.notifier.error(message, e)
            return None

    async def sign_in(self, email: str, password: str) -> Optional[User]:
        auth_user = await self._auth_action(self.auth.sign_in(email, password), "Failed to sign in")
        if auth_user is None:
            return None
        self._transition(auth_user)
        self.notifier.success("Successfully signed in!")
        return self.user

    async def sign_up(self, email: str, password: str, display_name: str) -> Optional[AuthUser]:
        auth_user = await self._auth_action(
            self.auth.sign_up(email, password, display_name), "Failed to create account"
        )
        if auth_user is not None:
            self.notifier.success("Registration successful! Please check your email to verify your account.")
        return auth_user

    async def sign_in_with_oauth(self, provider: str, redirect_to: str) -> Optional[str]:
        return await self._auth_action(
            self.auth.sign_in_with_oauth(provider, redirect_to), f"Failed to sign in with {provider}"
        )

    async def sign_out(self) -> bool:
        done = await self._auth_action(self._sign_out(), "Failed to sign out")
        return bool(done)

    async def _sign_out(self) -> bool:
        await self.auth.sign_out()
        self._transition(None)
        return True
