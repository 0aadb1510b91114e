"""
REST HTTP client for the Focus Flow session store.

Failures are mapped onto the error taxonomy in focusflow.errors:
transport errors become NetworkUnavailable, non-2xx reads RemoteReadFailed,
non-2xx writes RemoteWriteFailed (400 → ValidationFailed).
"""

from typing import Any, Optional

import httpx

from focusflow.errors import NetworkUnavailable, RemoteReadFailed, RemoteWriteFailed, ValidationFailed

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT_S = 10.0


class HttpClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/api",
            headers={"User-Agent": "focusflow-sdk/0.1.0", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        """Prefer the `{success: false, error}` body the server sends."""
        try:
            body = resp.json()
        except ValueError:
            return f"HTTP {resp.status_code}: {resp.text[:200]}"
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"HTTP {resp.status_code}: {resp.text[:200]}"

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise NetworkUnavailable(f"{method} {path} failed: {e}") from e

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        resp = await self._send("GET", path, params=params)
        if resp.status_code >= 400:
            raise RemoteReadFailed(self._error_message(resp), status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteReadFailed(f"Invalid JSON from GET {path}", status_code=resp.status_code) from e

    async def post(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        resp = await self._send("POST", path, json=body)
        return self._write_result(resp)

    async def delete(self, path: str) -> Any:
        resp = await self._send("DELETE", path)
        return self._write_result(resp)

    def _write_result(self, resp: httpx.Response) -> Any:
        if resp.status_code == 400:
            raise ValidationFailed(self._error_message(resp))
        if resp.status_code >= 400:
            raise RemoteWriteFailed(self._error_message(resp), status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteWriteFailed("Invalid JSON in write response", status_code=resp.status_code) from e

    async def close(self) -> None:
        await self._client.aclose()
