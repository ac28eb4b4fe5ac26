"""Minimal PGA IoT cloud client for Pando hoods."""
import aiohttp
import asyncio
import certifi
import logging
import ssl
import time
import uuid
from aiohttp import ClientSession
from typing import Any, Dict, List, Optional

from .models import PandoThing

_LOGGER = logging.getLogger(__name__)

_API_BASE = "https://pando.iotpga.it"
_API_LOGIN = "/api/auth/login"
_API_THINGS = "/api/things"

# Refresh the bearer token this long before it actually expires
_TOKEN_REFRESH_MARGIN = 5 * 60
_REQUEST_TIMEOUT = 30


class PandoApiError(Exception):
    """Raised when the PGA cloud cannot be reached or rejects a request."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        text = f"{message} (status={status})" if status is not None else message
        super().__init__(text)


class PandoAuthError(PandoApiError):
    """Raised when logging in to the PGA cloud fails."""


class PandoClient:
    def __init__(self, username: str, password: str):
        self._username = username
        self._password = password
        self._session: aiohttp.ClientSession | None = None
        self._ssl_context: ssl.SSLContext | None = None
        self._hass = None

        self._access_token: str | None = None
        self._token_expires_at: float = 0.0
        # Serialize logins so concurrent requests do not each re-authenticate
        self._login_lock = asyncio.Lock()

    @classmethod
    async def create(cls, username: str, password: str, hass=None):
        """Async-safe constructor."""
        self = cls(username, password)
        self._hass = hass

        # Async-safe SSL context creation
        if hass is not None:
            def _make_ssl():
                return ssl.create_default_context(cafile=certifi.where())
            self._ssl_context = await hass.async_add_executor_job(_make_ssl)
        else:
            self._ssl_context = ssl.create_default_context(cafile=certifi.where())

        await self._init_session()
        return self

    async def _init_session(self):
        """Initialize aiohttp session with SSL context."""
        # Close existing session if already open (important for reloads)
        if self._session and not self._session.closed:
            await self._session.close()

        connector = aiohttp.TCPConnector(ssl=self._ssl_context)
        self._session = ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=_REQUEST_TIMEOUT),
        )

    async def close(self):
        """Gracefully close aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    # ---- Authentication ------------------------------------------------

    async def login(self) -> None:
        """Authenticate and cache the JWT."""
        if self._session is None:
            await self._init_session()
        _LOGGER.debug("Authenticating with PGA cloud")
        try:
            async with self._session.post(
                f"{_API_BASE}{_API_LOGIN}",
                json={"username": self._username, "password": self._password},
            ) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    raise PandoAuthError(f"PGA login failed: {body}", resp.status)
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as ex:
            raise PandoApiError(f"PGA login request failed: {ex}") from ex

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise PandoAuthError("PGA login response carried no access token")
        expires_in = int(data.get("expires_in") or 0)
        self._access_token = token
        self._token_expires_at = time.monotonic() + expires_in - _TOKEN_REFRESH_MARGIN
        _LOGGER.debug("Authenticated (token expires in %ss)", expires_in)

    async def _ensure_token(self) -> str:
        async with self._login_lock:
            if not self._access_token or time.monotonic() >= self._token_expires_at:
                await self.login()
            return self._access_token

    # ---- Generic request -----------------------------------------------

    async def _send(self, method: str, path: str, token: str, body: Optional[Dict[str, Any]]):
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        async with self._session.request(
            method, f"{_API_BASE}{path}", headers=headers, json=body
        ) as resp:
            if resp.status == 401:
                return resp.status, None
            if resp.status >= 400:
                text = await resp.text()
                raise PandoApiError(f"PGA API {method} {path} failed: {text}", resp.status)
            if "application/json" in resp.headers.get("Content-Type", ""):
                return resp.status, await resp.json()
            return resp.status, None

    async def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None):
        """Bearer-authenticated request; a rejected token triggers one re-login."""
        token = await self._ensure_token()
        try:
            status, data = await self._send(method, path, token, body)
            if status == 401:
                _LOGGER.warning("PGA API token rejected, re-authenticating")
                self._access_token = None
                token = await self._ensure_token()
                status, data = await self._send(method, path, token, body)
                if status == 401:
                    raise PandoAuthError(f"PGA API {method} {path} rejected after re-auth", status)
        except (aiohttp.ClientError, asyncio.TimeoutError) as ex:
            raise PandoApiError(f"PGA API {method} {path} failed: {ex}") from ex
        return data

    # ---- Device endpoints ----------------------------------------------

    async def get_things(self) -> List[PandoThing]:
        """List every thing on the account in one call."""
        data = await self._request("GET", f"{_API_THINGS}?page=0&size=100")
        content = (data or {}).get("content") or []
        return [PandoThing.from_api(item) for item in content if isinstance(item, dict) and item.get("uid")]

    async def get_thing(self, uid: str) -> PandoThing:
        data = await self._request("GET", f"{_API_THINGS}/{uid}")
        if not isinstance(data, dict):
            raise PandoApiError(f"Unexpected response for thing {uid}")
        return PandoThing.from_api(data)

    async def send_command(self, uid: str, patch: Dict[str, int]) -> None:
        """Write capability values; each key becomes one ``setValue`` parameter."""
        payload = {
            "command": "setValue",
            "requestId": str(uuid.uuid4()),
            "parameters": [{"id": key, "value": value} for key, value in patch.items()],
            "deviceType": "smartphone",
        }
        _LOGGER.debug("Sending control → %s %s", uid, patch)
        # This endpoint has no /api prefix
        await self._request("POST", f"/devices/{uid}/set_value", payload)
