"""
Authenticated client for the scheduler API.

Every call passes through two stages:

- outbound: attach the current bearer token (request event hook)
- inbound: classify the result exactly once as business success, auth-invalid
  business error, other business error, or transport failure, and react

Callers get the envelope back on success and an ``ApiError`` otherwise. The
user is notified here, so callers only decide what to do next.
"""

import asyncio
from typing import Any, Dict, Optional, Set

import httpx
import structlog
from pydantic import ValidationError

from app.core.config import Settings
from app.core.exceptions import (
    AuthInvalidError,
    BusinessError,
    RequestPreparationError,
    TransportError,
)
from app.core.models import AUTH_INVALID_CODES, Envelope
from app.core.navigation import Router
from app.core.notifier import Notifier
from app.core.session import SessionStore

logger = structlog.get_logger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session has expired, please log in again"
REQUEST_FAILED_MESSAGE = "Request failed"

# User-facing text for transport failures keyed by HTTP status
STATUS_MESSAGES = {
    401: "Unauthorized, please log in again",
    403: "Access denied",
    404: "Request address not found",
    500: "Internal server error",
}
TIMEOUT_MESSAGE = "Request timed out"
UNREACHABLE_MESSAGE = "Network unreachable"
NETWORK_ERROR_MESSAGE = "Network error"


class ApiClient:
    """
    Request sender bound to one session store.

    The client never writes the session itself; it asks the store to log out
    and the router to show the login view.
    """

    def __init__(
        self,
        settings: Settings,
        session_store: SessionStore,
        notifier: Notifier,
        router: Router,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.session_store = session_store
        self.notifier = notifier
        self.router = router
        self._prompts: Set[asyncio.Task] = set()

        self.client = httpx.AsyncClient(
            base_url=settings.api_base_url,
            timeout=httpx.Timeout(settings.request_timeout),
            headers={"Content-Type": "application/json"},
            event_hooks={"request": [self._attach_credentials]},
            transport=transport,
        )

        logger.info(
            "API client initialized",
            base_url=settings.api_base_url,
            timeout=settings.request_timeout,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    # Outbound stage

    async def _attach_credentials(self, request: httpx.Request) -> None:
        """Set the bearer header from the token held at dispatch time."""
        try:
            token = self.session_store.token
            if token:
                request.headers["Authorization"] = f"Bearer {token}"
        except Exception as e:
            logger.error("Request preparation failed", url=str(request.url), error=str(e))
            raise RequestPreparationError(
                f"Could not prepare request: {e}", details={"url": str(request.url)}
            ) from e

    # Public API

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Envelope:
        """
        Send a request and classify the result.

        Returns:
            The envelope of a business success (``code == 0``)

        Raises:
            AuthInvalidError: envelope code says the session is no longer valid
            BusinessError: any other nonzero envelope code
            TransportError: no envelope received
            RequestPreparationError: the request was never sent
        """
        logger.debug("Sending API request", method=method, path=path, has_body=json is not None)

        try:
            response = await self.client.request(method, path, params=params, json=json)
        except RequestPreparationError:
            raise
        except httpx.HTTPError as e:
            raise await self._transport_failure(path, cause=e)

        if not response.is_success:
            raise await self._transport_failure(path, response=response)

        try:
            envelope = Envelope[Any].model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error("Response body is not an envelope", path=path, error=str(e))
            raise await self._transport_failure(path, cause=e)

        return self._classify_envelope(path, envelope)

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Envelope:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Optional[Any] = None) -> Envelope:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Optional[Any] = None) -> Envelope:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Envelope:
        return await self.request("DELETE", path)

    async def wait_for_prompts(self) -> None:
        """Wait until every open re-authentication prompt has been answered."""
        while self._prompts:
            await asyncio.gather(*list(self._prompts), return_exceptions=True)

    # Inbound stage

    def _classify_envelope(self, path: str, envelope: Envelope) -> Envelope:
        if envelope.code == 0:
            return envelope

        if envelope.code in AUTH_INVALID_CODES:
            message = envelope.message or SESSION_EXPIRED_MESSAGE
            logger.warning("Session rejected by server", path=path, code=envelope.code)
            if not self.session_store.logging_out:
                self._schedule_reauth_prompt()
            raise AuthInvalidError(envelope.code, message, details={"path": path})

        message = envelope.message or REQUEST_FAILED_MESSAGE
        logger.info("Business error", path=path, code=envelope.code, message=message)
        self.notifier.error(message)
        raise BusinessError(envelope.code, message, details={"path": path})

    def _schedule_reauth_prompt(self) -> None:
        task = asyncio.create_task(self._prompt_reauth())
        self._prompts.add(task)
        task.add_done_callback(self._prompts.discard)

    async def _prompt_reauth(self) -> None:
        """Ask the user to log in again; only a yes ends the session."""
        try:
            confirmed = await self.notifier.confirm(SESSION_EXPIRED_MESSAGE, title="Notice")
            if not confirmed:
                logger.info("Re-authentication declined")
                return
            await self.session_store.logout()
            self._open_login()
        except Exception:
            logger.exception("Re-authentication prompt failed")

    async def _transport_failure(
        self,
        path: str,
        response: Optional[httpx.Response] = None,
        cause: Optional[BaseException] = None,
    ) -> TransportError:
        """Notify once for a failure without an envelope and build the error to raise."""
        status = response.status_code if response is not None else None

        if status is not None:
            message = STATUS_MESSAGES.get(status) or _body_message(response) or REQUEST_FAILED_MESSAGE
            cause = cause or httpx.HTTPStatusError(
                f"HTTP {status}", request=response.request, response=response
            )
        elif isinstance(cause, httpx.TimeoutException):
            message = TIMEOUT_MESSAGE
        elif isinstance(cause, httpx.NetworkError):
            message = UNREACHABLE_MESSAGE
        else:
            message = NETWORK_ERROR_MESSAGE

        logger.error(
            "API transport failure",
            path=path,
            status_code=status,
            error=str(cause) if cause else None,
        )
        self.notifier.error(message)

        if status == 401:
            await self._force_logout(_bearer_token(response.request))

        return TransportError(message, http_status=status, cause=cause, details={"path": path})

    async def _force_logout(self, sent_token: str) -> None:
        """
        End the session without asking.

        Skipped while a logout is running, and when the rejected token is no
        longer the current one (an earlier 401 already ended that session).
        """
        if self.session_store.logging_out or sent_token != self.session_store.token:
            return
        await self.session_store.logout()
        self._open_login()

    def _open_login(self) -> None:
        try:
            self.router.push(self.settings.login_path)
        except Exception:
            logger.exception("Could not open the login view", path=self.settings.login_path)


def _bearer_token(request: httpx.Request) -> str:
    header = request.headers.get("Authorization", "")
    return header[len("Bearer "):] if header.startswith("Bearer ") else ""


def _body_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return None
