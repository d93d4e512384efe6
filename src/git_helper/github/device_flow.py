"""
OAuth device flow for GitHub.

Implements the device authorization grant: request a device code, let the
user enter the matching user code in a browser, then poll the token
endpoint until GitHub answers with a token or a terminal error.

Polling runs as one asyncio task per attempt. The task is the
cancellation handle: cancelling it clears the pending timer and any
in-flight request, so a superseded attempt never issues another request
and never reports an outcome.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Iterable, Optional

import httpx

from git_helper.github.exceptions import (
    AccessDenied,
    AuthInitiationError,
    DeviceFlowCancelled,
    DeviceFlowError,
    TokenExpired,
    UnknownAuthError,
)
from git_helper.github.models import DeviceCodeResponse, DeviceFlowState, DeviceFlowStatus

logger = logging.getLogger(__name__)

DEFAULT_SCOPES = ("repo", "read:org", "user:email", "workflow")
DEVICE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"

# Added to every wait so polls never land early on GitHub's clock.
POLL_GRACE_SECONDS = 1
# RFC 8628 increment when slow_down carries no interval.
SLOW_DOWN_INCREMENT = 5
DEFAULT_EXPIRES_IN = 900


class DeviceFlowAuthenticator:
    """
    Exchange a device code for an access token.

    At most one attempt is live at a time: `initiate()` cancels whatever
    attempt came before it.

    Example:
        ```python
        auth = DeviceFlowAuthenticator(client_id="Iv1.xxxx")

        code = await auth.initiate()
        print(f"Open {code.verification_uri} and enter {code.user_code}")

        token = await auth.poll_for_token(code.device_code, code.interval, code.expires_in)
        ```
    """

    def __init__(
        self,
        client_id: str,
        *,
        scopes: Iterable[str] = DEFAULT_SCOPES,
        github_url: str = "https://github.com",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            client_id: OAuth app client ID
            scopes: Scopes to request
            github_url: GitHub (or GitHub Enterprise) base URL
            timeout: HTTP request timeout in seconds
            http_client: Client to use instead of an internally managed one
            sleep: Awaitable delay between polls (default: asyncio.sleep)
            clock: Monotonic clock in seconds (default: time.monotonic)
        """
        self.client_id = client_id
        self.scopes = list(scopes)
        github_url = github_url.rstrip("/")
        self.device_code_url = f"{github_url}/login/device/code"
        self.access_token_url = f"{github_url}/login/oauth/access_token"
        self.timeout = timeout

        self._client = http_client
        self._owns_client = http_client is None
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or time.monotonic
        self._state: Optional[DeviceFlowState] = None
        # Bumped by every cancel(); an initiate() that sees it change while
        # awaiting the device code was cancelled or superseded.
        self._generation = 0

    @property
    def state(self) -> Optional[DeviceFlowState]:
        """The most recent attempt, live or finished."""
        return self._state

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={"Accept": "application/json"},
            )
            self._owns_client = True
        return self._client

    # =========================================================================
    # Flow
    # =========================================================================

    async def initiate(self) -> DeviceCodeResponse:
        """
        Request a new device code, superseding any live attempt.

        Returns:
            DeviceCodeResponse with the user code and verification URL

        Raises:
            AuthInitiationError: On transport failure, non-2xx status or a
                malformed response
            DeviceFlowCancelled: cancel() or another initiate() ran while the
                request was in flight
        """
        self.cancel()
        generation = self._generation

        if not self.client_id:
            raise AuthInitiationError("GitHub OAuth client ID is not configured")

        client = await self._get_client()
        try:
            response = await client.post(
                self.device_code_url,
                data={"client_id": self.client_id, "scope": " ".join(self.scopes)},
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise AuthInitiationError(f"Device code request failed: {e}")

        if not response.is_success:
            raise AuthInitiationError(
                f"Device code request failed: {response.text or response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            if isinstance(data, dict) and "error" in data:
                raise AuthInitiationError(
                    data.get("error_description") or data["error"],
                    status_code=response.status_code,
                )
            code = DeviceCodeResponse.model_validate(data)
        except ValueError as e:
            raise AuthInitiationError(f"Malformed device code response: {e}")

        if generation != self._generation:
            logger.info("Device code request cancelled before it completed")
            raise DeviceFlowCancelled()

        # A poll on a foreign code may have started an attempt while we waited.
        self.cancel()
        self._state = DeviceFlowState(
            device_code=code.device_code,
            user_code=code.user_code,
            verification_uri=code.verification_uri,
            interval_seconds=code.interval,
            expires_at=self._clock() + code.expires_in,
        )
        logger.info(f"Device code issued, expires in {code.expires_in}s")
        return code

    async def poll_for_token(
        self,
        device_code: str,
        interval: int = 5,
        expires_in: Optional[int] = None,
    ) -> str:
        """
        Poll the token endpoint until the attempt resolves.

        Args:
            device_code: Code returned by initiate()
            interval: Polling interval in seconds, used when the code was
                not issued by this authenticator
            expires_in: Lifetime of the code in seconds, same condition

        Returns:
            The access token

        Raises:
            TokenExpired: The code expired, by GitHub's word or our clock
            AccessDenied: The user declined
            UnknownAuthError: Any other error, including transport failures
            DeviceFlowCancelled: The attempt was cancelled or superseded
        """
        state = self._claim_state(device_code, interval, expires_in)

        if state.task is None:
            state.task = asyncio.create_task(self._run(state))

        try:
            return await state.task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            if state.status == DeviceFlowStatus.CANCELLED:
                raise DeviceFlowCancelled()
            raise
        finally:
            if state.task is not None and state.task.done():
                # The finished task holds the token as its result.
                state.task = None

    def cancel(self) -> None:
        """Cancel the live attempt or pending initiation. Safe to call repeatedly."""
        self._generation += 1
        state = self._state
        if state is None or not state.is_active:
            return

        state.status = DeviceFlowStatus.CANCELLED
        if state.task is not None and not state.task.done():
            state.task.cancel()
        logger.info("Device flow cancelled")

    async def close(self) -> None:
        """Cancel any live attempt and close the HTTP client."""
        self.cancel()
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _claim_state(
        self,
        device_code: str,
        interval: int,
        expires_in: Optional[int],
    ) -> DeviceFlowState:
        state = self._state

        if state is not None and state.device_code == device_code:
            if state.status == DeviceFlowStatus.CANCELLED:
                raise DeviceFlowCancelled()
            if not state.is_active:
                raise DeviceFlowError(f"Device flow already {state.status.value}")
            return state

        if state is not None and state.is_active:
            raise DeviceFlowCancelled("Superseded by a newer device flow")

        state = DeviceFlowState(
            device_code=device_code,
            interval_seconds=interval,
            expires_at=self._clock() + (expires_in or DEFAULT_EXPIRES_IN),
        )
        self._state = state
        return state

    async def _run(self, state: DeviceFlowState) -> str:
        try:
            return await self._poll_loop(state)
        except asyncio.CancelledError:
            if state.is_active:
                state.status = DeviceFlowStatus.CANCELLED
            raise
        except DeviceFlowError:
            if state.is_active:
                state.status = DeviceFlowStatus.ERROR
            raise
        except Exception as e:
            state.status = DeviceFlowStatus.ERROR
            raise UnknownAuthError(str(e))

    async def _poll_loop(self, state: DeviceFlowState) -> str:
        client = await self._get_client()
        data = {
            "client_id": self.client_id,
            "device_code": state.device_code,
            "grant_type": DEVICE_GRANT_TYPE,
        }

        while True:
            if self._clock() >= state.expires_at:
                state.status = DeviceFlowStatus.EXPIRED
                raise TokenExpired("Device code expired")

            payload = await self._request_token(client, data)

            if state.status == DeviceFlowStatus.CANCELLED:
                raise DeviceFlowCancelled()

            token = payload.get("access_token")
            if token:
                state.status = DeviceFlowStatus.SUCCEEDED
                logger.info("Device flow authorized")
                return token

            error = payload.get("error")
            if error == "authorization_pending":
                logger.debug("Authorization pending")
            elif error == "slow_down":
                new_interval = payload.get("interval")
                if new_interval:
                    state.interval_seconds = int(new_interval)
                else:
                    state.interval_seconds += SLOW_DOWN_INCREMENT
                logger.info(f"GitHub requested slow_down, new interval: {state.interval_seconds}s")
            elif error == "expired_token":
                state.status = DeviceFlowStatus.EXPIRED
                raise TokenExpired()
            elif error == "access_denied":
                state.status = DeviceFlowStatus.DENIED
                raise AccessDenied()
            else:
                state.status = DeviceFlowStatus.ERROR
                raise UnknownAuthError(payload.get("error_description") or error)

            await self._sleep(state.interval_seconds + POLL_GRACE_SECONDS)

    async def _request_token(
        self, client: httpx.AsyncClient, data: dict[str, str]
    ) -> dict[str, Any]:
        try:
            response = await client.post(
                self.access_token_url,
                data=data,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise UnknownAuthError(f"Token request failed: {e}")

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not isinstance(payload, dict):
            raise UnknownAuthError(
                f"Malformed token response (HTTP {response.status_code})",
                status_code=response.status_code,
            )
        return payload
