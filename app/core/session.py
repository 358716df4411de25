"""
Session state for the console: the bearer token and the signed-in profile.

``SessionStore`` is the only writer of the session and of the persisted token.
The API client and the navigation guard read it through ``store.session``,
which always returns a complete immutable ``Session`` value.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import structlog

from app.core.exceptions import ConfigurationError
from app.core.models import Envelope, LoginResult, UserProfile

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Session:
    """Token plus cached profile. An empty token means unauthenticated."""

    token: str = ""
    profile: Optional[UserProfile] = None

    @classmethod
    def empty(cls) -> "Session":
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)


class TokenStorage:
    """A single durable slot holding the bearer token as plain text."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return ""

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")
        try:
            self.path.chmod(0o600)
        except OSError as e:
            logger.warning("Could not restrict token file permissions", path=str(self.path), error=str(e))

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class AuthApi(Protocol):
    """Endpoints the session store calls."""

    async def login(self, username: str, password: str) -> LoginResult: ...

    async def logout(self) -> Envelope: ...

    async def current_user(self) -> UserProfile: ...


class SessionStore:
    """
    Owns the session and its persistence.

    Each transition replaces the whole ``Session`` value and updates the token
    file in the same step, so readers never see a token from one login paired
    with a profile from another.
    """

    def __init__(self, storage: TokenStorage, auth_api: Optional[AuthApi] = None):
        self.storage = storage
        self._auth_api = auth_api
        self._session = Session(token=storage.load())
        self._logging_out = False

        logger.debug("Session store initialized", has_token=self._session.is_authenticated)

    def bind(self, auth_api: AuthApi) -> None:
        """Attach the endpoints used by login, profile refresh and logout."""
        self._auth_api = auth_api

    @property
    def session(self) -> Session:
        return self._session

    @property
    def token(self) -> str:
        return self._session.token

    @property
    def is_logged_in(self) -> bool:
        return self._session.is_authenticated

    @property
    def logging_out(self) -> bool:
        return self._logging_out

    def _api(self) -> AuthApi:
        if self._auth_api is None:
            raise ConfigurationError("Session store has no auth API bound")
        return self._auth_api

    def _set_session(self, session: Session) -> None:
        """
        Replace the in-memory session and sync the persisted token.

        A new token is written before it becomes current, so a failed write
        leaves the old session in place. Clearing drops the in-memory session
        first; a file that cannot be removed is only logged.
        """
        if session.token:
            self.storage.save(session.token)
            self._session = session
            return

        self._session = session
        try:
            self.storage.clear()
        except OSError as e:
            logger.error("Could not remove stored token", path=str(self.storage.path), error=str(e))

    async def login(self, username: str, password: str) -> Session:
        """
        Authenticate and start a new session.

        Raises:
            ApiError: login rejected or unreachable; the session is unchanged
        """
        result = await self._api().login(username, password)
        self._set_session(Session(token=result.token, profile=result.user))

        logger.info("Logged in", username=result.user.username)
        return self._session

    async def fetch_profile(self) -> UserProfile:
        """Refresh the cached profile; a failed refresh ends the session."""
        try:
            profile = await self._api().current_user()
        except Exception:
            logger.warning("Profile refresh failed, clearing session")
            await self.logout()
            raise

        # The request may have raced a logout; a profile needs a token
        if self._session.token:
            self._session = Session(token=self._session.token, profile=profile)
        return profile

    async def logout(self) -> None:
        """
        End the session.

        The server call is best effort. Local state is always cleared, even
        when the call fails. Nested calls made while a logout is running skip
        the server call.
        """
        if self._logging_out:
            self._set_session(Session.empty())
            return

        self._logging_out = True
        try:
            await self._api().logout()
        except Exception as e:
            logger.warning("Server logout failed, clearing local session anyway", error=str(e))
        finally:
            try:
                self._set_session(Session.empty())
            finally:
                self._logging_out = False
            logger.info("Logged out")
