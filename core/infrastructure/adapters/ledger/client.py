"""
Ledger HTTP client.

Async aiohttp client for the external ledger API. Authenticates with the
Login endpoint, attaches the bearer token to every call and refreshes it
once when a call is answered with 401.
"""
from typing import Any, Dict, Optional
import asyncio
import json

import aiohttp

from core.application.interfaces import ILedgerClient
from core.domain.exceptions import LedgerAuthError, LedgerCallError
from core.settings.modules.ledger_settings import LedgerSettings
from ledger_sdk.logging import get_logger


logger = get_logger("ledger.client")

_TOKEN_KEYS = ("token", "access_token", "accessToken")


class HttpLedgerClient(ILedgerClient):
    """
    aiohttp implementation of ILedgerClient.

    Usage:
        async with HttpLedgerClient(settings) as client:
            body = await client.call("salesInvoice", payload)
    """

    def __init__(
        self,
        settings: LedgerSettings,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.settings = settings
        self.base_url = settings.base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._token: Optional[str] = None
        self._login_lock = asyncio.Lock()

    async def __aenter__(self) -> "HttpLedgerClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.settings.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    # =========================================================================
    # AUTH
    # =========================================================================

    async def login(self) -> str:
        """Obtain a fresh token from the Login endpoint."""
        async with self._login_lock:
            endpoint = self.settings.login_endpoint
            payload = {"userName": self.settings.username, "password": self.settings.password}
            status, body = await self._post(endpoint, payload, token=None)

            token = _extract_token(body)
            if status >= 400 or not token:
                raise LedgerAuthError(endpoint, f"login failed (HTTP {status})", status)

            self._token = token
            logger.info("[LEDGER] Logged in")
            return token

    # =========================================================================
    # CALLS
    # =========================================================================

    async def call(self, endpoint: str, payload: Dict[str, Any]) -> Any:
        token = self._token or await self.login()
        status, body = await self._post(endpoint, payload, token)

        if status == 401:
            logger.warning(f"[LEDGER] {endpoint}: token rejected, logging in again")
            self._token = None
            token = await self.login()
            status, body = await self._post(endpoint, payload, token)
            if status == 401:
                raise LedgerAuthError(endpoint, "unauthorized after token refresh", status)

        if status >= 500:
            raise LedgerCallError(endpoint, f"HTTP {status}: {_preview(body)}", status)

        if isinstance(body, str):
            # Non-JSON answer; nothing the caller can interpret.
            raise LedgerCallError(endpoint, f"HTTP {status}: non-JSON response {_preview(body)}", status)

        return body

    async def _post(self, endpoint: str, payload: Dict[str, Any], token: Optional[str]) -> tuple[int, Any]:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            session = self._get_session()
            async with session.post(url, data=json.dumps(payload, default=str), headers=headers) as response:
                text = await response.text()
                return response.status, _decode(text)
        except asyncio.TimeoutError as e:
            raise LedgerCallError(endpoint, f"timeout after {self.settings.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            raise LedgerCallError(endpoint, str(e) or e.__class__.__name__) from e


def _decode(text: str) -> Any:
    try:
        return json.loads(text) if text else None
    except ValueError:
        return text


def _extract_token(body: Any) -> Optional[str]:
    if isinstance(body, list) and body:
        body = body[0]
    if isinstance(body, dict):
        for key in _TOKEN_KEYS:
            if body.get(key):
                return str(body[key])
        data = body.get("data")
        if isinstance(data, dict):
            return _extract_token(data)
    return None


def _preview(body: Any, limit: int = 200) -> str:
    text = body if isinstance(body, str) else json.dumps(body, default=str)
    return text[:limit]
