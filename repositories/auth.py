"""
Identity backends - the auth collaborator the session manager talks to.

Unlike the data backends these raise: AuthFailed for rejected
credentials, StoreUnavailable when the identity service cannot be
reached.
"""

import hashlib
import logging
import secrets
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlencode

from config import DATA_DIR
from errors import AuthFailed, StoreUnavailable
from models import AuthUser
from .json_backend import _write_queue

logger = logging.getLogger(__name__)

AuthCallback = Callable[[Optional[AuthUser]], None]

OAUTH_PROVIDERS = ("github", "google")


class AuthBackend(ABC):
    """Identity service interface."""

    @abstractmethod
    async def get_current_session(self) -> Optional[AuthUser]:
        """Identity behind the current session, or None."""
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthUser:
        pass

    @abstractmethod
    async def sign_up(self, email: str, password: str, display_name: str) -> AuthUser:
        """Register an account. Does not open a session."""
        pass

    @abstractmethod
    async def sign_in_with_oauth(self, provider: str, redirect_to: str) -> str:
        """Start an OAuth flow. Returns the URL to send the browser to."""
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        pass

    @abstractmethod
    def subscribe(self, callback: AuthCallback) -> Callable[[], None]:
        """Register for session changes. Returns an unsubscribe handle."""
        pass


def hash_password(password: str, salt: str) -> str:
    return hashlib.sha256(f"{salt}:{password}".encode()).hexdigest()


class MemoryAuthBackend(AuthBackend):
    """
    In-process identity service.

    Accounts live in a dict keyed by lower-cased email. Subscribers are
    called synchronously whenever the session changes.
    """

    def __init__(self, authorize_url: str = "https://auth.local/authorize"):
        self.authorize_url = authorize_url
        self._accounts: dict[str, dict] = {}
        self._session: Optional[AuthUser] = None
        self._callbacks: list[AuthCallback] = []

    # === Account storage (overridden by the JSON backend) ===

    def _save(self) -> None:
        pass

    def add_account(self, email: str, password: str, metadata: Optional[dict] = None) -> AuthUser:
        """Create an account directly, bypassing sign-up checks."""
        user = AuthUser(id=str(uuid.uuid4()), email=email, user_metadata=metadata or {})
        salt = secrets.token_hex(8)
        self._accounts[email.lower()] = {
            "user": user.model_dump(mode="json"),
            "salt": salt,
            "password": hash_password(password, salt),
        }
        self._save()
        return user

    # === Session ===

    def _set_session(self, user: Optional[AuthUser]) -> None:
        self._session = user
        self._save()
        for cb in list(self._callbacks):
            try:
                cb(user)
            except Exception as e:
                logger.error("[AUTH] Subscriber error: %s", e)

    async def get_current_session(self) -> Optional[AuthUser]:
        return self._session

    async def sign_in(self, email: str, password: str) -> AuthUser:
        account = self._accounts.get(email.strip().lower())
        if not account or hash_password(password, account["salt"]) != account["password"]:
            raise AuthFailed("invalid credentials", user_message="Invalid email or password.")
        user = AuthUser.model_validate(account["user"])
        self._set_session(user)
        return user

    async def sign_up(self, email: str, password: str, display_name: str) -> AuthUser:
        email = email.strip()
        if "@" not in email:
            raise AuthFailed("invalid email", user_message="Please enter a valid email address.")
        if len(password) < 6:
            raise AuthFailed("password too short", user_message="Password must be at least 6 characters.")
        if email.lower() in self._accounts:
            raise AuthFailed("account exists", user_message="An account with that email already exists.")
        return self.add_account(email, password, {"full_name": display_name.strip()})

    async def sign_in_with_oauth(self, provider: str, redirect_to: str) -> str:
        if provider not in OAUTH_PROVIDERS:
            raise AuthFailed(f"unsupported provider {provider}")
        return f"{self.authorize_url}?{urlencode({'provider': provider, 'redirect_to': redirect_to})}"

    async def sign_out(self) -> None:
        self._set_session(None)

    def subscribe(self, callback: AuthCallback) -> Callable[[], None]:
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe


class JsonAuthBackend(MemoryAuthBackend):
    """
    Identity service persisted to {data_dir}/auth.json.

    Keeps the session across process runs, which the CLI relies on.
    """

    def __init__(self, base_path: Optional[Path] = None, **kwargs):
        super().__init__(**kwargs)
        self._path = Path(base_path or DATA_DIR) / "auth.json"
        try:
            data = _write_queue.read_json(self._path, default={})
        except (OSError, ValueError) as e:
            raise StoreUnavailable(f"cannot read {self._path}: {e}") from e
        self._accounts = data.get("accounts", {})
        session = data.get("session")
        self._session = AuthUser.model_validate(session) if session else None

    def _save(self) -> None:
        data = {
            "accounts": self._accounts,
            "session": self._session.model_dump(mode="json") if self._session else None,
        }
        try:
            _write_queue.write_json(self._path, data)
        except OSError as e:
            raise StoreUnavailable(f"cannot write {self._path}: {e}") from e
